"""HTTP helpers shared by provider-backed capabilities"""

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from capserve.config import ServerConfig
from capserve.standard.errors import ProviderError


@asynccontextmanager
async def provider_client(config: ServerConfig, client: Optional[httpx.AsyncClient] = None) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one built from config

    An injected client is left open for its owner to close.
    """
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(
        timeout=config.http_timeout,
        headers={"User-Agent": config.user_agent},
    ) as fresh:
        yield fresh


async def fetch_json(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    params: Dict[str, str],
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """GET a JSON document

    Raises:
        ProviderError: On transport failure, non-2xx status or invalid JSON
    """
    try:
        response = await client.get(url, params=params, headers=headers)
    except httpx.HTTPError as e:
        raise ProviderError(provider, str(e) or type(e).__name__)

    if not response.is_success:
        raise ProviderError(provider, f"HTTP {response.status_code} {response.reason_phrase}")

    try:
        return response.json()
    except json.JSONDecodeError as e:
        raise ProviderError(provider, f"invalid JSON response: {e}")
