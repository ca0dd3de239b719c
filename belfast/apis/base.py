"""Shared aiohttp request helper for the third-party API clients."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from belfast.constants import VERSION
from belfast.exceptions import ApiError

logger = logging.getLogger('belfast_bot.apis')

REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=15)
USER_AGENT = f"BelfastBot/{VERSION}"


async def request_json(
    service: str,
    method: str,
    url: str,
    *,
    params: Optional[dict] = None,
    json: Optional[dict] = None,
    data: Optional[bytes] = None,
    headers: Optional[dict] = None,
) -> Any:
    """Perform an HTTP request and decode the JSON body.

    Raises:
        ApiError: On connection failures, timeouts, non-200 status codes
            or undecodable bodies
    """
    request_headers = {"User-Agent": USER_AGENT}
    if headers:
        request_headers.update(headers)

    try:
        async with aiohttp.ClientSession(timeout=REQUEST_TIMEOUT, headers=request_headers) as session:
            async with session.request(method, url, params=params, json=json, data=data) as response:
                if response.status != 200:
                    logger.warning(f"{service} returned status {response.status} for {url}")
                    raise ApiError(service, f"request failed with status {response.status}", response.status)
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ApiError(service, f"invalid JSON response: {e}", response.status) from e
    except asyncio.TimeoutError as e:
        logger.warning(f"Timeout calling {service} at {url}")
        raise ApiError(service, "request timed out") from e
    except aiohttp.ClientError as e:
        logger.error(f"HTTP error calling {service} at {url}: {e}")
        raise ApiError(service, str(e)) from e


async def get_json(service: str, url: str, **kwargs) -> Any:
    return await request_json(service, "GET", url, **kwargs)


async def post_json(service: str, url: str, **kwargs) -> Any:
    return await request_json(service, "POST", url, **kwargs)


async def download_bytes(url: str) -> bytes:
    """Download a file (e.g. a message attachment) into memory."""
    try:
        async with aiohttp.ClientSession(timeout=REQUEST_TIMEOUT) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise ApiError("download", f"request failed with status {response.status}", response.status)
                return await response.read()
    except asyncio.TimeoutError as e:
        raise ApiError("download", "request timed out") from e
    except aiohttp.ClientError as e:
        raise ApiError("download", str(e)) from e


def to_int(value, default: Optional[int] = None) -> Optional[int]:
    """Coerce loosely-typed JSON numbers (often strings or null) to int."""
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def to_float(value, default: Optional[float] = None) -> Optional[float]:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
