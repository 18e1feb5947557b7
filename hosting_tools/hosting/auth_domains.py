"""Keep the authorized-domain allowlist in sync with preview channels.

Each preview channel is served from ``{site}--{channel}-{hash}.web.app`` and
needs to be an authorized domain for sign-in flows to work there. Domains
are added when a channel is deployed and pruned once its channel is gone.
"""

from __future__ import annotations

import re

import structlog

from hosting_tools.core.identity import IdentityToolkitClient
from hosting_tools.core.utils import strip_scheme
from hosting_tools.hosting.api import HostingClient

logger = structlog.get_logger()


def preview_domain_pattern(site: str) -> re.Pattern[str]:
    """Match domains following the ``{site}--*`` preview channel naming."""
    return re.compile(rf"^{re.escape(site)}--", re.IGNORECASE)


def clean_domains(
    site: str,
    authorized: list[str],
    live_channel_domains: set[str],
) -> list[str]:
    """Drop preview domains of ``site`` that no live channel serves.

    Order of ``authorized`` is preserved. Live-channel domains such as
    ``{site}.firebaseapp.com`` never match the preview pattern and are always
    kept, as are domains unrelated to the site (e.g. ``localhost``).
    """
    site_match = preview_domain_pattern(site)
    kept: list[str] = []
    for domain in authorized:
        if site_match.match(domain) and domain not in live_channel_domains:
            continue
        kept.append(domain)
    return kept


class AuthDomainReconciler:
    """Adds, removes and prunes channel domains in the authorized-domain list."""

    def __init__(self, hosting: HostingClient, identity: IdentityToolkitClient):
        self.hosting = hosting
        self.identity = identity

    async def add_auth_domain(self, project: str, url: str) -> list[str]:
        """Authorize a channel URL's domain; a no-op if already authorized."""
        domains = await self.identity.get_auth_domains(project)
        domain = strip_scheme(url)
        if domain in domains:
            return domains
        domains.append(domain)
        logger.info("auth_domain_added", project=project, domain=domain)
        return await self.identity.update_auth_domains(project, domains)

    async def remove_auth_domain(self, project: str, url: str) -> list[str]:
        """Remove a channel URL's domain from the authorized domains."""
        domains = await self.identity.get_auth_domains(project)
        if not domains:
            return domains
        target = strip_scheme(url)
        remaining = [domain for domain in domains if domain != target]
        logger.info("auth_domain_removed", project=project, domain=target)
        return await self.identity.update_auth_domains(project, remaining)

    async def get_clean_domains(self, project: str, site: str) -> list[str]:
        """Compute the authorized domains with stale preview domains removed."""
        channels = await self.hosting.list_channels(project, site)
        live = {channel.domain for channel in channels}
        domains = await self.identity.get_auth_domains(project)
        cleaned = clean_domains(site, domains, live)
        logger.debug(
            "auth_domains_cleaned",
            site=site,
            before=len(domains),
            after=len(cleaned),
        )
        return cleaned

    async def clean_auth_state(self, project: str, site: str) -> list[str]:
        """Persist the cleaned authorized-domain list."""
        domains = await self.get_clean_domains(project, site)
        return await self.identity.update_auth_domains(project, domains)
