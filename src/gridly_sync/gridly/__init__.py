"""
Gridly module - remote grid access

This module provides:
- GridlyClient: HTTP client for one Gridly view
- Exceptions shared by the whole sync engine
"""

from gridly_sync.gridly.exceptions import (
    GridlySyncError,
    ConfigurationError,
    GridlyAPIError,
    ContentSchemaError,
)
from gridly_sync.gridly.client import GridlyClient, create_client, extract_error_message
