"""Hosting deploy lifecycle.

- convert_config: compile user routing config into a serving config
- api: channel, version and release client
- auth_domains: authorized-domain reconciliation for preview channels
- hash_cache: persisted upload hash cache
- expire: channel expiration durations
"""

from hosting_tools.hosting.api import HostingClient, normalize_name
from hosting_tools.hosting.auth_domains import AuthDomainReconciler
from hosting_tools.hosting.convert_config import convert_config, extract_pattern

__all__ = [
    "AuthDomainReconciler",
    "HostingClient",
    "convert_config",
    "extract_pattern",
    "normalize_name",
]
