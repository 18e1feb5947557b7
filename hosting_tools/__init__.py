"""Hosting Tools - deploy lifecycle tooling for a static hosting service.

This package compiles user routing configuration into the hosting API's
serving config, manages versions, releases and preview channels, keeps the
authorized-domain allowlist in sync with live channels, and maintains the
hash cache used to skip unchanged uploads.

Key modules:
- core: Shared functionality (config, types, errors, transport)
- hosting: Config compiler, lifecycle client, auth domains, hash cache
- commands: CLI command implementations
"""

__version__ = "0.1.0"
__author__ = "Hosting Tools Team"

# Re-export commonly used types
from hosting_tools.core.types import (
    Channel,
    Release,
    ServingConfig,
    Version,
)

__all__ = [
    "__version__",
    "__author__",
    "Channel",
    "Release",
    "ServingConfig",
    "Version",
]
