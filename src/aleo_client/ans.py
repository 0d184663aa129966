"""Aleo Name Service (ANS) lookups.

All lookups are best effort: 404 means "not found" and any other failure is
logged and reported as ``None``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from aleo_client.async_rest import (
    AsyncNotFoundError,
    AsyncRestClient,
    AsyncRestError,
    path_segment,
)
from aleo_client.constants import ANS_URL
from aleo_client.models import NameHashResult

LOGGER = logging.getLogger(__name__)

AVATAR_CATEGORY = "avatar"


def truncate_address(address: str) -> str:
    """Shorten an address to ``aleo1a...wxyz`` when longer than 10 chars."""
    if address and len(address) > 10:
        return f"{address[:6]}...{address[-4:]}"
    return address


class AnsClient:
    """Client for the ANS REST API."""

    def __init__(self, rest_client: AsyncRestClient | None = None) -> None:
        self.rest_client = rest_client or AsyncRestClient(ANS_URL, max_retries=0)

    async def close(self) -> None:
        await self.rest_client.close()

    async def _lookup(
        self, path: str, params: Mapping[str, Any] | None, description: str
    ) -> dict[str, Any] | None:
        try:
            payload = await self.rest_client.get(path, params=params)
        except AsyncNotFoundError:
            return None
        except AsyncRestError as exc:
            LOGGER.error("Error fetching %s: %s", description, exc)
            return None
        if not isinstance(payload, dict):
            LOGGER.error("Unexpected %s payload: %r", description, payload)
            return None
        return payload

    async def get_primary_name(self, address: str) -> str | None:
        """Return the primary ANS name of an address."""
        payload = await self._lookup(
            f"/primary_name/{path_segment(address)}", None, "primary name"
        )
        if payload is None:
            return None
        return payload.get("name")

    async def get_address_from_name(self, name: str) -> str | None:
        """Resolve an ANS name (e.g. ``test.ans``) to an address."""
        payload = await self._lookup(
            f"/address/{path_segment(name)}", None, "address from name"
        )
        if payload is None:
            return None
        return payload.get("address")

    async def get_name_from_hash(self, name_hash: str) -> NameHashResult | None:
        payload = await self._lookup(
            f"/hash_to_name/{path_segment(name_hash)}", None, "name from hash"
        )
        if payload is None or payload.get("name") is None:
            return None
        return NameHashResult(name=payload["name"], balance=payload.get("balance"))

    async def get_resolver_content(self, name: str, category: str) -> str | None:
        """Return resolver content for a name and category (btc, eth, avatar)."""
        payload = await self._lookup(
            "/resolver", {"name": name, "category": category}, "resolver content"
        )
        if payload is None:
            return None
        return payload.get("content")

    async def get_avatar(self, name: str) -> str | None:
        return await self.get_resolver_content(name, AVATAR_CATEGORY)

    async def format_address_with_ans(self, address: str) -> str:
        """Return the primary ANS name, falling back to a truncated address."""
        name = await self.get_primary_name(address)
        if name:
            return name
        return truncate_address(address)
