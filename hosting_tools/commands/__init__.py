"""CLI command implementations for hosting_tools.

- auth: authorized-domain maintenance for preview channels
- cache: upload hash cache inspection
- channel: preview channel management
- config: hosting config compilation and tool settings
- version: version cloning and channel releases
"""

from hosting_tools.commands.auth import auth_group
from hosting_tools.commands.cache import cache_group
from hosting_tools.commands.channel import channel_group
from hosting_tools.commands.config import config_group
from hosting_tools.commands.version import release_group, version_group

__all__ = [
    "auth_group",
    "cache_group",
    "channel_group",
    "config_group",
    "release_group",
    "version_group",
]
