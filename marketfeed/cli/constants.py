"""Exit codes shared by CLI commands."""

SYSTEM_EXIT_CODE = 1
VALIDATION_EXIT_CODE = 2
INTERRUPTED_EXIT_CODE = 130

__all__ = ["SYSTEM_EXIT_CODE", "VALIDATION_EXIT_CODE", "INTERRUPTED_EXIT_CODE"]
