"""
AWS Resource Audit - inventory AWS resources across regions.

A small, dependable audit run for:
- Listing EC2, S3, EBS, Lambda and RDS resources per region
- Estimating tagged spend from AWS Cost Explorer
- Writing JSON, CSV and text reports
- Notifying Slack and email when the audit completes
"""

__version__ = "0.1.0"
