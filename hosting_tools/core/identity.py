"""Identity toolkit client for the authorized-domain allowlist."""

from __future__ import annotations

import httpx
import structlog

from hosting_tools.core.api_client import ApiClient
from hosting_tools.core.config import IdentityApiConfig

logger = structlog.get_logger()


class IdentityToolkitClient:
    """Reads and replaces a project's authorized domains."""

    def __init__(
        self,
        config: IdentityApiConfig | None = None,
        *,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or IdentityApiConfig()
        self.api = ApiClient(
            self.config.origin,
            self.config.api_version,
            access_token=access_token,
            timeout=self.config.timeout,
            transport=transport,
        )

    async def get_auth_domains(self, project: str) -> list[str]:
        """Return the project's authorized domains."""
        body = await self.api.get(f"/projects/{project}/config")
        return list((body or {}).get("authorizedDomains") or [])

    async def update_auth_domains(self, project: str, domains: list[str]) -> list[str]:
        """Replace the project's authorized domains.

        Returns:
            The authorized domains as stored by the backend
        """
        body = await self.api.patch(
            f"/projects/{project}/config",
            {"authorizedDomains": domains},
            query={"updateMask": "authorizedDomains"},
        )
        logger.info("auth_domains_updated", project=project, count=len(domains))
        return list((body or {}).get("authorizedDomains") or [])

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> IdentityToolkitClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
