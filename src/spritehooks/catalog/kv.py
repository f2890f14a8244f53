"""Cloudflare Workers KV automation catalog.

Each automation is stored under ``automation:{id}`` as the raw YAML text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from spritehooks.catalog.base import parse_automation_yaml
from spritehooks.config import Settings
from spritehooks.errors import CatalogError, ConfigurationError
from spritehooks.http import get_shared_async_client
from spritehooks.models import Automation

logger = logging.getLogger(__name__)

CF_API_BASE = "https://api.cloudflare.com/client/v4"
KEY_PREFIX = "automation:"


@dataclass(frozen=True)
class KVConfig:
    account_id: str
    api_token: str
    namespace_id: str

    @classmethod
    def from_settings(cls, settings: Settings) -> KVConfig | None:
        if not settings.has_kv_config:
            return None
        return cls(settings.cf_account_id, settings.cf_api_token, settings.cf_kv_namespace_id)


def automation_key(automation_id: str) -> str:
    return f"{KEY_PREFIX}{automation_id}"


class KVCatalog:
    """Automation catalog backed by the Cloudflare KV REST API."""

    def __init__(
        self,
        config: KVConfig | None,
        client: httpx.AsyncClient | None = None,
        api_base: str = CF_API_BASE,
    ):
        self._config = config
        self.api_base = api_base.rstrip("/")
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await get_shared_async_client()
        return self._client

    @property
    def config(self) -> KVConfig:
        if self._config is None:
            raise ConfigurationError(
                "Missing Cloudflare KV configuration. "
                "Required: CF_ACCOUNT_ID, CF_API_TOKEN, CF_KV_NAMESPACE_ID"
            )
        return self._config

    @property
    def _namespace_url(self) -> str:
        return (
            f"{self.api_base}/accounts/{self.config.account_id}"
            f"/storage/kv/namespaces/{self.config.namespace_id}"
        )

    def _value_url(self, automation_id: str) -> str:
        return f"{self._namespace_url}/values/{quote(automation_key(automation_id), safe='')}"

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_token}"}

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        client = await self._get_client()
        headers = {**self._headers, **kwargs.pop("headers", {})}
        try:
            return await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise CatalogError(f"KV request failed: {e}") from e

    async def get(self, automation_id: str) -> Automation | None:
        """Retrieve a single automation by ID."""
        response = await self._request("GET", self._value_url(automation_id))

        if response.status_code == 404:
            return None
        if not response.is_success:
            raise CatalogError(
                f"Failed to get automation {automation_id}: {response.status_code}",
                status_code=response.status_code,
            )

        return parse_automation_yaml(response.text)

    async def put(self, automation_id: str, yaml_content: str) -> None:
        """Store an automation (creates or updates)."""
        response = await self._request(
            "PUT",
            self._value_url(automation_id),
            headers={"Content-Type": "text/plain"},
            content=yaml_content.encode("utf-8"),
        )

        if not response.is_success:
            raise CatalogError(
                f"Failed to put automation {automation_id}: "
                f"{response.status_code} {response.text}",
                status_code=response.status_code,
            )

    async def delete(self, automation_id: str) -> bool:
        """Delete an automation by ID."""
        response = await self._request("DELETE", self._value_url(automation_id))

        if response.status_code == 404:
            return False
        if not response.is_success:
            raise CatalogError(
                f"Failed to delete automation {automation_id}: {response.status_code}",
                status_code=response.status_code,
            )
        return True

    async def list_ids(self) -> list[str]:
        """List all automation IDs, following pagination cursors."""
        ids: list[str] = []
        cursor: str | None = None

        while True:
            params = {"prefix": KEY_PREFIX}
            if cursor:
                params["cursor"] = cursor

            response = await self._request("GET", f"{self._namespace_url}/keys", params=params)
            if not response.is_success:
                raise CatalogError(
                    f"Failed to list automations: {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                data = response.json()
            except ValueError as e:
                raise CatalogError(f"KV API returned invalid JSON: {e}") from e

            if not data.get("success"):
                messages = ", ".join(err.get("message", "") for err in data.get("errors", []))
                raise CatalogError(f"KV API error: {messages}")

            for key in data.get("result", []):
                ids.append(key["name"].removeprefix(KEY_PREFIX))

            cursor = (data.get("result_info") or {}).get("cursor")
            if not cursor:
                return ids

    async def load_all(self) -> list[Automation]:
        """Load every automation; any unreadable entry aborts the load."""
        automations = []
        for automation_id in await self.list_ids():
            automation = await self.get(automation_id)
            if automation:
                automations.append(automation)
        return automations
