"""Async httpx wrapper with auth, language and agent headers."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import httpx

from globaltags.api.models import GlobalIcon
from globaltags.errors import ApiError

DEFAULT_API_BASE = "https://api.globaltags.xyz"
CDN_BASE = "https://cdn.rappytv.com/globaltags/icons"


class Agent:
    """Identifies the calling application to the API."""

    def __init__(
        self,
        name: str,
        version: str,
        minecraft_version: str | None = None,
    ) -> None:
        self.name = name
        self.version = version
        self.minecraft_version = minecraft_version

    def __str__(self) -> str:
        suffix = f" - {self.minecraft_version}" if self.minecraft_version else ""
        return f"{self.name} v{self.version}{suffix}"


class Urls:
    """Base URLs for the API and icon assets."""

    def __init__(self, api_base: str = DEFAULT_API_BASE) -> None:
        self.api_base = api_base.rstrip("/")

    def default_icon(self, icon: GlobalIcon) -> str:
        return f"{CDN_BASE}/{icon.value.lower()}.png"

    def role_icon(self, role: str) -> str:
        return f"{CDN_BASE}/role/{role.lower()}.png"

    def custom_icon(self, uuid: UUID, icon_hash: str) -> str:
        return f"{self.api_base}/players/{uuid}/icon/{icon_hash}"


class GlobalTagsClient:
    """Async HTTP client for the GlobalTags API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        authorization_header: str = "",
        language: str = "en_us",
        agent: Agent | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            "X-Language": language,
            "X-Agent": str(agent or Agent("globaltags-python", "1.0.0")),
        }
        if authorization_header:
            headers["Authorization"] = authorization_header
        kwargs: dict[str, Any] = {
            "base_url": base_url,
            "headers": headers,
            "timeout": 15.0,
        }
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**kwargs)

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _error_message(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return response.text or None
        if isinstance(body, dict):
            return body.get("error")
        return None

    async def request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send an authenticated request and return the decoded JSON body."""
        response = await self._client.request(method, path, json=json)
        if not response.is_success:
            raise ApiError(response.status_code, self._error_message(response))
        if not response.content:
            return None
        return response.json()

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)
