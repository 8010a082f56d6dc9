"""
JSON-over-HTTP helper shared by the storefront client services
"""

import asyncio
from typing import Any, Dict, Tuple

import aiohttp

from config import settings

# Raised for unreachable hosts, timeouts and bodies that are not JSON
NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError)


async def post_json(url: str, payload: Dict[str, Any], timeout: float = None) -> Tuple[int, Dict[str, Any]]:
    """
    POST *payload* as JSON and return ``(status, body)``.

    A body that parses to something other than an object is returned as an
    empty dict. Network failures propagate as one of ``NETWORK_ERRORS``.
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout or settings.http_timeout)
    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        async with session.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"}
        ) as response:
            data = await response.json(content_type=None)
            if not isinstance(data, dict):
                data = {}
            return response.status, data


def is_ok(status: int) -> bool:
    return 200 <= status < 300
