"""Tests for hosting_tools.hosting.api module."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from hosting_tools.core.config import HostingApiConfig, PollerConfig
from hosting_tools.core.errors import ApiError, ChannelsNotFoundError, VersionStateError
from hosting_tools.core.operations import OperationPollRequest
from hosting_tools.core.types import (
    MatchPattern,
    PathRewrite,
    ReleaseType,
    ServingConfig,
    Version,
    VersionStatus,
)
from hosting_tools.hosting.api import ONE_WEEK_MS, HostingClient, normalize_name
from hosting_tools.hosting.expire import DAY_MS


def _channel(site: str, channel_id: str) -> dict:
    return {
        "name": f"projects/p/sites/{site}/channels/{channel_id}",
        "url": f"https://{site}--{channel_id}.web.app",
    }


class TestNormalizeName:
    """Test normalize_name function."""

    def test_replaces_separators(self):
        assert normalize_name("feature/login_page#2") == "feature-login-page-2"
        assert normalize_name("a:b") == "a-b"

    def test_unchanged(self):
        assert normalize_name("pr-123") == "pr-123"


class TestChannels:
    """Test channel operations."""

    def test_get_channel(self, hosting_config, make_transport, sample_channel_data):
        transport = make_transport(lambda request: httpx.Response(200, json=sample_channel_data))

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.get_channel("my-project", "app", "pr-1")

        channel = asyncio.run(_run())

        assert channel.channel_id == "pr-1"
        assert channel.url == "https://app--pr-1-abc123.web.app"
        assert transport.requests[0].url.path == (
            "/v1beta1/projects/my-project/sites/app/channels/pr-1"
        )
        assert transport.requests[0].headers["Authorization"] == "Bearer test-token"

    def test_get_channel_not_found(self, hosting_config, make_transport):
        """Test a missing channel is reported as None."""
        transport = make_transport(lambda request: httpx.Response(
            404, json={"error": {"code": 404, "message": "not found"}}
        ))

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.get_channel("p", "app", "missing")

        assert asyncio.run(_run()) is None

    def test_get_channel_other_error(self, hosting_config, make_transport):
        transport = make_transport(lambda request: httpx.Response(500, json={}))

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.get_channel("p", "app", "live")

        with pytest.raises(ApiError) as exc_info:
            asyncio.run(_run())
        assert exc_info.value.status == 500

    def test_list_channels_pagination(self, hosting_config, make_transport):
        """Test pages are followed until the token is empty, in order."""
        pages = {
            "": {"channels": [_channel("app", "live"), _channel("app", "pr-1")],
                 "nextPageToken": "t2"},
            "t2": {"channels": [_channel("app", "pr-2")], "nextPageToken": "t3"},
            "t3": {"channels": [_channel("app", "pr-3")], "nextPageToken": ""},
        }
        transport = make_transport(
            lambda request: httpx.Response(200, json=pages[request.url.params["pageToken"]])
        )

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.list_channels("p", "app")

        channels = asyncio.run(_run())

        assert [c.channel_id for c in channels] == ["live", "pr-1", "pr-2", "pr-3"]
        assert [r.url.params["pageToken"] for r in transport.requests] == ["", "t2", "t3"]
        assert all(r.url.params["pageSize"] == "10" for r in transport.requests)

    def test_list_channels_missing_token_ends(self, hosting_config, make_transport):
        transport = make_transport(lambda request: httpx.Response(
            200, json={"channels": [_channel("app", "live")]}
        ))

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.list_channels("p", "app")

        assert len(asyncio.run(_run())) == 1
        assert len(transport.requests) == 1

    def test_list_channels_empty(self, hosting_config, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, json={}))

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.list_channels("p", "app")

        assert asyncio.run(_run()) == []

    def test_list_channels_not_found(self, hosting_config, make_transport):
        """Test a missing site raises a descriptive error."""
        transport = make_transport(lambda request: httpx.Response(404, json={}))

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.list_channels("p", "nosite")

        with pytest.raises(ChannelsNotFoundError) as exc_info:
            asyncio.run(_run())

        assert str(exc_info.value) == 'could not find channels for site "nosite"'
        assert isinstance(exc_info.value.__cause__, ApiError)

    def test_list_channels_custom_page_size(self, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, json={}))
        config = HostingApiConfig(origin="https://hosting.test", page_size=100)

        async def _run():
            async with HostingClient(config, transport=transport) as client:
                await client.list_channels("p", "app")

        asyncio.run(_run())
        assert transport.requests[0].url.params["pageSize"] == "100"

    def test_create_channel(self, hosting_config, make_transport):
        transport = make_transport(
            lambda request: httpx.Response(200, json=_channel("app", "pr-9"))
        )

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.create_channel("p", "app", "pr-9", 2 * DAY_MS)

        channel = asyncio.run(_run())

        request = transport.requests[0]
        assert channel.channel_id == "pr-9"
        assert request.method == "POST"
        assert request.url.path == "/v1beta1/projects/p/sites/app/channels"
        assert request.url.params["channelId"] == "pr-9"
        assert transport.json_bodies() == [{"ttl": "172800s"}]

    def test_create_channel_default_ttl(self, hosting_config, make_transport):
        transport = make_transport(
            lambda request: httpx.Response(200, json=_channel("app", "pr-9"))
        )

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.create_channel("p", "app", "pr-9")

        asyncio.run(_run())
        assert transport.json_bodies() == [{"ttl": "604800s"}]

    def test_update_channel_ttl(self, hosting_config, make_transport):
        transport = make_transport(
            lambda request: httpx.Response(200, json=_channel("app", "pr-9"))
        )

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.update_channel_ttl("p", "app", "pr-9")

        asyncio.run(_run())

        request = transport.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/v1beta1/projects/p/sites/app/channels/pr-9"
        assert request.url.params["updateMask"] == "ttl"
        assert transport.json_bodies() == [{"ttl": f"{ONE_WEEK_MS // 1000}s"}]

    def test_delete_channel(self, hosting_config, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, json={}))

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.delete_channel("p", "app", "pr-9")

        assert asyncio.run(_run()) is None
        assert transport.requests[0].method == "DELETE"
        assert transport.requests[0].url.path == "/v1beta1/projects/p/sites/app/channels/pr-9"


class TestVersions:
    """Test version operations."""

    def test_create_version(self, hosting_config, make_transport, sample_version_data):
        transport = make_transport(lambda request: httpx.Response(200, json=sample_version_data))
        config = ServingConfig(
            rewrites=[PathRewrite(pattern=MatchPattern(glob="**"), path="/index.html")],
            clean_urls=True,
        )

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.create_version("app", config, labels={"ci": "true"})

        version = asyncio.run(_run())

        assert version.status == VersionStatus.CREATED
        assert transport.requests[0].url.path == "/v1beta1/projects/-/sites/app/versions"
        assert transport.json_bodies() == [{
            "config": {"rewrites": [{"glob": "**", "path": "/index.html"}], "cleanUrls": True},
            "labels": {"ci": "true"},
        }]

    def test_create_version_empty_config(self, hosting_config, make_transport):
        transport = make_transport(lambda request: httpx.Response(
            200, json={"name": "sites/app/versions/v", "status": "CREATED"}
        ))

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.create_version("app")

        asyncio.run(_run())
        assert transport.json_bodies() == [{"config": {}}]

    def test_finalize_version(self, hosting_config, make_transport):
        transport = make_transport(lambda request: httpx.Response(
            200, json={"name": "sites/app/versions/v", "status": "FINALIZED"}
        ))
        version = Version(name="sites/app/versions/v", status=VersionStatus.CREATED)

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.finalize_version(version)

        finalized = asyncio.run(_run())

        assert finalized.status == VersionStatus.FINALIZED
        # The local snapshot is never mutated
        assert version.status == VersionStatus.CREATED
        request = transport.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/v1beta1/projects/-/sites/app/versions/v"
        assert request.url.params["updateMask"] == "status"
        assert transport.json_bodies() == [{"status": "FINALIZED"}]

    def test_finalize_version_wrong_state(self, hosting_config, make_transport):
        """Test a finalized snapshot is rejected without a request."""
        transport = make_transport(lambda request: httpx.Response(200, json={}))
        version = Version(name="sites/app/versions/v", status=VersionStatus.FINALIZED)

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.finalize_version(version)

        with pytest.raises(VersionStateError):
            asyncio.run(_run())
        assert transport.requests == []

    def test_clone_version(self, hosting_config, make_transport):
        """Test cloning starts an operation and waits for it through the poller."""
        transport = make_transport(lambda request: httpx.Response(
            200, json={"name": "projects/p/operations/clone-1", "done": False}
        ))
        poller = AsyncMock()
        poller.poll.return_value = {
            "@type": "type.googleapis.com/google.firebase.hosting.v1beta1.Version",
            "name": "sites/app/versions/cloned",
            "status": "FINALIZED",
        }

        async def _run():
            async with HostingClient(
                hosting_config, poller=poller, transport=transport
            ) as client:
                return await client.clone_version(
                    "app", "sites/other/versions/src", finalize=True
                )

        version = asyncio.run(_run())

        assert version.name == "sites/app/versions/cloned"
        assert version.status == VersionStatus.FINALIZED
        assert transport.requests[0].url.path == "/v1beta1/projects/-/sites/app/versions:clone"
        assert transport.json_bodies() == [
            {"sourceVersion": "sites/other/versions/src", "finalize": True}
        ]
        poller.poll.assert_awaited_once_with(OperationPollRequest(
            operation_name="projects/p/operations/clone-1",
            api_origin="https://hosting.test",
            api_version="v1beta1",
            master_timeout=600.0,
        ))

    def test_clone_version_uses_configured_timeout(self, hosting_config, make_transport):
        """Test the poller master timeout bounds the clone wait."""
        transport = make_transport(lambda request: httpx.Response(
            200, json={"name": "projects/p/operations/clone-2"}
        ))
        poller = AsyncMock()
        poller.poll.return_value = {"name": "sites/app/versions/cloned"}

        async def _run():
            async with HostingClient(
                hosting_config,
                poller=poller,
                poller_config=PollerConfig(master_timeout=30.0),
                transport=transport,
            ) as client:
                return await client.clone_version("app", "sites/app/versions/src")

        asyncio.run(_run())

        request = poller.poll.await_args.args[0]
        assert request.master_timeout == 30.0

    def test_clone_version_default_poller(self, hosting_config, make_transport):
        """Test the built-in poller follows the operation over HTTP."""
        def handler(request):
            if request.method == "POST":
                return httpx.Response(200, json={"name": "projects/p/operations/op"})
            return httpx.Response(200, json={
                "name": "projects/p/operations/op",
                "done": True,
                "response": {"name": "sites/app/versions/cloned", "status": "CREATED"},
            })

        transport = make_transport(handler)

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.clone_version("app", "sites/app/versions/src")

        version = asyncio.run(_run())

        assert version.version_id == "cloned"
        assert transport.json_bodies()[0] == {
            "sourceVersion": "sites/app/versions/src",
            "finalize": False,
        }
        assert transport.requests[1].url.path == "/v1beta1/projects/p/operations/op"


class TestReleases:
    """Test release operations."""

    def test_create_release(self, hosting_config, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, json={
            "name": "sites/app/channels/live/releases/r1",
            "type": "DEPLOY",
            "version": {"name": "sites/app/versions/v", "status": "FINALIZED"},
        }))

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.create_release("app", "live", "sites/app/versions/v")

        release = asyncio.run(_run())

        assert release.type == ReleaseType.DEPLOY
        assert release.version.version_id == "v"
        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1beta1/projects/-/sites/app/channels/live/releases"
        assert request.url.params["versionName"] == "sites/app/versions/v"
        assert request.content == b""

    def test_list_releases(self, hosting_config, make_transport):
        pages = {
            "": {"releases": [{"name": "sites/app/channels/live/releases/r2"}],
                 "nextPageToken": "next"},
            "next": {"releases": [{"name": "sites/app/channels/live/releases/r1"}]},
        }
        transport = make_transport(
            lambda request: httpx.Response(200, json=pages[request.url.params["pageToken"]])
        )

        async def _run():
            async with HostingClient(hosting_config, transport=transport) as client:
                return await client.list_releases("app", "live")

        releases = asyncio.run(_run())

        assert [r.name.rsplit("/", 1)[-1] for r in releases] == ["r2", "r1"]
