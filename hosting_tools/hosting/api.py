"""Hosting API client for versions, channels and releases.

Channels, versions and releases are owned by the backend. Every method
returns a fresh snapshot; nothing returned here is kept current locally.
"""

from __future__ import annotations

import re
from typing import Any

import httpx
import structlog

from hosting_tools.core.api_client import ApiClient
from hosting_tools.core.config import HostingApiConfig, PollerConfig
from hosting_tools.core.errors import ApiError, ChannelsNotFoundError, VersionStateError
from hosting_tools.core.operations import (
    HttpOperationPoller,
    OperationPoller,
    OperationPollRequest,
)
from hosting_tools.core.types import (
    Channel,
    Release,
    ServingConfig,
    Version,
    VersionStatus,
)
from hosting_tools.core.utils import format_ttl
from hosting_tools.hosting.expire import DEFAULT_DURATION

logger = structlog.get_logger()

ONE_WEEK_MS = 604800000  # 7 * 24 * 60 * 60 * 1000

_NAME_RE = re.compile(r"[/:_#]")


def normalize_name(s: str) -> str:
    """Replace ``/``, ``:``, ``_`` and ``#`` with dashes.

    Useful for turning user-provided names (e.g. branch names) into valid
    channel IDs.
    """
    return _NAME_RE.sub("-", s)


class HostingClient:
    """Async client for the hosting API's channel, version and release resources.

    Args:
        config: Hosting API configuration
        poller: Long-running operation poller; defaults to HTTP polling
        poller_config: Poll settings; its master timeout bounds version cloning
        transport: Optional transport override (used by tests)
    """

    def __init__(
        self,
        config: HostingApiConfig | None = None,
        *,
        poller: OperationPoller | None = None,
        poller_config: PollerConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or HostingApiConfig()
        self.poller_config = poller_config or PollerConfig()
        self.api = ApiClient(
            self.config.origin,
            self.config.api_version,
            access_token=self.config.access_token,
            timeout=self.config.timeout,
            transport=transport,
        )
        self.poller: OperationPoller = poller or HttpOperationPoller(
            self.poller_config,
            access_token=self.config.access_token,
            transport=transport,
        )

    # Channels

    async def get_channel(
        self, project: str | int, site: str, channel_id: str
    ) -> Channel | None:
        """Get a channel.

        Returns:
            The channel, or None if it does not exist
        """
        try:
            body = await self.api.get(f"/projects/{project}/sites/{site}/channels/{channel_id}")
        except ApiError as e:
            if e.status == 404:
                return None
            raise
        return Channel.model_validate(body)

    async def list_channels(self, project: str | int, site: str) -> list[Channel]:
        """List every channel of a site, following pagination in order.

        Raises:
            ChannelsNotFoundError: If the site has no channel collection
        """
        channels: list[Channel] = []
        next_page_token = ""
        pages = 0

        while True:
            try:
                body = await self.api.get(
                    f"/projects/{project}/sites/{site}/channels",
                    query={"pageToken": next_page_token, "pageSize": self.config.page_size},
                )
            except ApiError as e:
                if e.status == 404:
                    raise ChannelsNotFoundError(site) from e
                raise

            pages += 1
            body = body or {}
            channels.extend(Channel.model_validate(c) for c in body.get("channels") or [])
            next_page_token = body.get("nextPageToken") or ""
            if not next_page_token:
                logger.debug("channels_listed", site=site, channels=len(channels), pages=pages)
                return channels

    async def create_channel(
        self,
        project: str | int,
        site: str,
        channel_id: str,
        ttl_millis: int = DEFAULT_DURATION,
    ) -> Channel:
        """Create a channel that expires ``ttl_millis`` from now."""
        body = await self.api.post(
            f"/projects/{project}/sites/{site}/channels",
            {"ttl": format_ttl(ttl_millis)},
            query={"channelId": channel_id},
        )
        logger.info("channel_created", site=site, channel=channel_id)
        return Channel.model_validate(body)

    async def update_channel_ttl(
        self,
        project: str | int,
        site: str,
        channel_id: str,
        ttl_millis: int = ONE_WEEK_MS,
    ) -> Channel:
        """Reset a channel's expiration to ``ttl_millis`` from now."""
        body = await self.api.patch(
            f"/projects/{project}/sites/{site}/channels/{channel_id}",
            {"ttl": format_ttl(ttl_millis)},
            query={"updateMask": "ttl"},
        )
        return Channel.model_validate(body)

    async def delete_channel(
        self, project: str | int, site: str, channel_id: str
    ) -> None:
        await self.api.delete(f"/projects/{project}/sites/{site}/channels/{channel_id}")
        logger.info("channel_deleted", site=site, channel=channel_id)

    # Versions

    async def create_version(
        self,
        site: str,
        config: ServingConfig | None = None,
        labels: dict[str, str] | None = None,
    ) -> Version:
        """Create a new version in the CREATED state."""
        payload: dict[str, Any] = {"config": (config or ServingConfig()).to_api()}
        if labels:
            payload["labels"] = labels
        body = await self.api.post(f"/projects/-/sites/{site}/versions", payload)
        version = Version.model_validate(body)
        logger.info("version_created", version=version.name)
        return version

    async def finalize_version(self, version: Version | str) -> Version:
        """Mark a version FINALIZED so it can be released.

        A ``Version`` snapshot is checked against the lifecycle first; a
        version name is sent as-is and left to the backend to judge.

        Raises:
            VersionStateError: If the snapshot cannot be finalized
        """
        if isinstance(version, Version):
            if not version.status.can_transition_to(VersionStatus.FINALIZED):
                raise VersionStateError(
                    f"Cannot finalize {version.name} in status {version.status}"
                )
            version_name = version.name
        else:
            version_name = version

        body = await self.api.patch(
            f"/projects/-/{version_name}",
            {"status": VersionStatus.FINALIZED.value},
            query={"updateMask": "status"},
        )
        logger.info("version_finalized", version=version_name)
        return Version.model_validate(body)

    async def clone_version(
        self, site: str, version_name: str, finalize: bool = False
    ) -> Version:
        """Clone an existing version and wait for the copy to finish.

        Raises:
            OperationTimeoutError: If cloning outlasts the poller master timeout
            OperationFailedError: If the backend reports a failed clone
        """
        operation = await self.api.post(
            f"/projects/-/sites/{site}/versions:clone",
            {"sourceVersion": version_name, "finalize": finalize},
        )
        operation_name = operation["name"]
        logger.info("version_clone_started", source=version_name, operation=operation_name)

        result = await self.poller.poll(
            OperationPollRequest(
                operation_name=operation_name,
                api_origin=self.config.origin,
                api_version=self.config.api_version,
                master_timeout=self.poller_config.master_timeout,
            )
        )
        return Version.model_validate(result)

    # Releases

    async def create_release(self, site: str, channel_id: str, version_name: str) -> Release:
        """Release a version on a channel."""
        body = await self.api.post(
            f"/projects/-/sites/{site}/channels/{channel_id}/releases",
            query={"versionName": version_name},
        )
        release = Release.model_validate(body)
        logger.info(
            "release_created",
            site=site,
            channel=channel_id,
            version=version_name,
            release=release.name,
        )
        return release

    async def list_releases(self, site: str, channel_id: str) -> list[Release]:
        """List a channel's release history, newest first as returned."""
        releases: list[Release] = []
        next_page_token = ""

        while True:
            body = await self.api.get(
                f"/projects/-/sites/{site}/channels/{channel_id}/releases",
                query={"pageToken": next_page_token, "pageSize": self.config.page_size},
            ) or {}
            releases.extend(Release.model_validate(r) for r in body.get("releases") or [])
            next_page_token = body.get("nextPageToken") or ""
            if not next_page_token:
                return releases

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> HostingClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
