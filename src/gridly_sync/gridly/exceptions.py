"""
Gridly Sync Exceptions

This module contains the exception classes shared by the grid client, the
sync engine and the controller layer.
Separated to avoid circular imports between client.py and the core modules.
"""

from typing import Any, Dict


class GridlySyncError(Exception):
    """Sync error with optional code and details."""

    def __init__(self, message: str, code: str = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Structured payload returned to foreground callers."""
        return {
            "error": self.message,
            "message": self.message,
            "details": self.details if self.details is not None else self.message,
        }


class ConfigurationError(GridlySyncError):
    """Missing API key, view id or grid configuration. Raised before any remote call."""


class GridlyAPIError(GridlySyncError):
    """Non-2xx response or transport failure talking to the grid."""

    def __init__(self, message: str, status_code: int = None, details: Any = None, code: str = None):
        super().__init__(message, code=code, details=details)
        self.status_code = status_code


class ContentSchemaError(GridlySyncError):
    """Content type or field not found in the content store."""
