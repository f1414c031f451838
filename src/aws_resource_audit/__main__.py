"""Module entry-point for ``python -m aws_resource_audit``."""
from __future__ import annotations

from aws_resource_audit.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
