"""Terminal navigator for JSON Terraform reconciliation reports."""

__version__ = "0.3.0"

__all__ = ["__version__"]
