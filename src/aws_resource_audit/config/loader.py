"""Configuration loader for AWS Resource Audit."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values
from pydantic import ValidationError

from aws_resource_audit.config.schema import AuditConfig
from aws_resource_audit.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Searched in order; the first file that exists is loaded.
CONFIG_SEARCH_ORDER = (
    Path(".env"),
    Path("config") / ".env",
    Path("config") / "config.env.local",
    Path("config") / "config.env",
)

# Recognized keys and where they land in AuditConfig.
ENV_MAPPINGS: dict[str, tuple[str, ...]] = {
    "EMAIL_ENABLED": ("email", "enabled"),
    "EMAIL_TO": ("email", "to"),
    "EMAIL_FROM": ("email", "sender"),
    "EMAIL_SUBJECT": ("email", "subject"),
    "SMTP_SERVER": ("email", "smtp", "server"),
    "SMTP_PORT": ("email", "smtp", "port"),
    "SMTP_USER": ("email", "smtp", "user"),
    "SMTP_PASSWORD": ("email", "smtp", "password"),
    "SLACK_WEBHOOK_URL": ("slack", "webhook_url"),
    "COST_TAG_KEY": ("cost", "tag_key"),
    "COST_TAG_VALUE": ("cost", "tag_value"),
    "COST_LOOKBACK_DAYS": ("cost", "lookback_days"),
    "REPORT_DIR": ("reports", "report_dir"),
    "LOG_FILE": ("reports", "log_file"),
}


def _find_config_file(root: Path) -> Path | None:
    """Return the first existing file from the search order under root."""
    for candidate in CONFIG_SEARCH_ORDER:
        path = root / candidate
        if path.is_file():
            return path
    return None


def _project_root(environ: Mapping[str, str]) -> Path:
    if root := environ.get("AUDIT_PROJECT_ROOT"):
        return Path(root)
    return Path.cwd()


def load_config(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AuditConfig:
    """
    Load configuration from a KEY=value env file.

    Process environment variables with a recognized key override the file.
    A missing file is not an error; every setting has a default.

    Args:
        config_path: Explicit env file. If None, the search order is used.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        AuditConfig: Validated, immutable configuration.

    Raises:
        ConfigError: If a value fails validation.
    """
    environ = os.environ if environ is None else environ

    if config_path is not None:
        path: Path | None = Path(config_path)
        if not path.is_file():
            logger.warning("Config file not found: %s", path)
            path = None
    else:
        path = _find_config_file(_project_root(environ))
        if path is None:
            logger.warning(
                "No config file found (searched %s); using defaults",
                ", ".join(str(p) for p in CONFIG_SEARCH_ORDER),
            )

    settings: dict[str, str] = {}
    if path is not None:
        settings.update(
            {key: value for key, value in dotenv_values(path).items() if value is not None}
        )
        logger.info("Loaded configuration from %s", path)

    for key in ENV_MAPPINGS:
        if key in environ:
            settings[key] = environ[key]

    config_data = _apply_settings({}, settings)
    config_data["source"] = str(path) if path else None

    try:
        return AuditConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration: {e.error_count()} error(s)\n{e}",
            remediation="Check the values in your config env file.",
        ) from e


def _apply_settings(config_data: dict, settings: Mapping[str, str]) -> dict:
    """Place recognized KEY=value settings into the nested config dict."""
    for key, value in settings.items():
        path = ENV_MAPPINGS.get(key)
        # Empty values fall back to the default, like ${VAR:-default}
        if path is None or not value.strip():
            continue

        current = config_data
        for part in path[:-1]:
            current = current.setdefault(part, {})

        final_key = path[-1]
        if final_key == "enabled":
            current[final_key] = value.strip().lower() in ("true", "1", "yes")
        else:
            current[final_key] = value.strip()

    return config_data
