"""Tests for hosting_tools.core.identity module."""

import asyncio
import json

import httpx
import pytest

from hosting_tools.core.config import IdentityApiConfig
from hosting_tools.core.errors import ApiError
from hosting_tools.core.identity import IdentityToolkitClient


class TestIdentityToolkitClient:
    """Test IdentityToolkitClient class."""

    def test_get_auth_domains(self, make_transport):
        transport = make_transport(lambda request: httpx.Response(
            200, json={"authorizedDomains": ["localhost", "app.web.app"]}
        ))

        async def _run():
            async with IdentityToolkitClient(transport=transport) as client:
                return await client.get_auth_domains("my-project")

        assert asyncio.run(_run()) == ["localhost", "app.web.app"]
        assert str(transport.requests[0].url) == (
            "https://identitytoolkit.googleapis.com/admin/v2/projects/my-project/config"
        )

    def test_get_auth_domains_missing_key(self, make_transport):
        """Test a config without authorized domains yields an empty list."""
        transport = make_transport(lambda request: httpx.Response(200, json={}))

        async def _run():
            async with IdentityToolkitClient(transport=transport) as client:
                return await client.get_auth_domains("my-project")

        assert asyncio.run(_run()) == []

    def test_update_auth_domains(self, make_transport):
        """Test the whole list is replaced with an update mask."""
        def handler(request):
            body = json.loads(request.content)
            return httpx.Response(200, json=body)

        transport = make_transport(handler)

        async def _run():
            async with IdentityToolkitClient(
                IdentityApiConfig(origin="https://identity.test"),
                access_token="tok",
                transport=transport,
            ) as client:
                return await client.update_auth_domains("p", ["localhost", "a.web.app"])

        assert asyncio.run(_run()) == ["localhost", "a.web.app"]

        request = transport.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/admin/v2/projects/p/config"
        assert request.url.params["updateMask"] == "authorizedDomains"
        assert request.headers["Authorization"] == "Bearer tok"
        assert transport.json_bodies() == [{"authorizedDomains": ["localhost", "a.web.app"]}]

    def test_error(self, make_transport):
        transport = make_transport(lambda request: httpx.Response(
            403, json={"error": {"message": "forbidden"}}
        ))

        async def _run():
            async with IdentityToolkitClient(transport=transport) as client:
                await client.get_auth_domains("p")

        with pytest.raises(ApiError, match="forbidden"):
            asyncio.run(_run())
