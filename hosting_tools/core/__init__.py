"""Core functionality for hosting_tools.

This module provides shared functionality used across the entire package:
- Configuration management
- Type definitions for the hosting API
- The error hierarchy
- Async REST transport and long-running operation polling
"""

from hosting_tools.core.errors import (
    ApiError,
    ChannelsNotFoundError,
    ConflictingPatternError,
    HostingConfigError,
    HostingError,
    InvalidRedirectError,
    MissingPatternError,
    OperationFailedError,
    OperationTimeoutError,
    UnknownRewriteError,
    VersionStateError,
)
from hosting_tools.core.types import (
    Channel,
    MatchPattern,
    Release,
    ReleaseType,
    ServingConfig,
    Version,
    VersionStatus,
)

__all__ = [
    # Errors
    "HostingError",
    "HostingConfigError",
    "ConflictingPatternError",
    "MissingPatternError",
    "UnknownRewriteError",
    "InvalidRedirectError",
    "ApiError",
    "ChannelsNotFoundError",
    "OperationFailedError",
    "OperationTimeoutError",
    "VersionStateError",
    # Types
    "Channel",
    "MatchPattern",
    "Release",
    "ReleaseType",
    "ServingConfig",
    "Version",
    "VersionStatus",
]
