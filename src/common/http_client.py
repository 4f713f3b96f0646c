"""Shared HTTP helper used by the fetch pool.

Wraps a single aiohttp GET with DEBUG traces and converts transport failures
into ``NetworkError`` so callers only deal with one exception type.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Tuple

import aiohttp

from common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url
from errors import NetworkError

logger = logging.getLogger(__name__)


async def get_bytes(session: aiohttp.ClientSession, url: str) -> Tuple[int, bytes]:
    """Perform one GET request and return ``(status, body)``.

    The body is only read for 200 responses; other statuses return ``b""``.

    Raises:
        NetworkError: On connection errors or when the request timed out.
    """
    safe_target = safe_url(url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                ),
            )
        try:
            async with session.get(url) as response:
                body = await response.read() if response.status == 200 else b""
                status = response.status
        except asyncio.TimeoutError as exc:
            raise NetworkError(url, reason="timeout") from exc
        except aiohttp.ClientError as exc:
            raise NetworkError(url, reason=f"connection error: {exc}") from exc

    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="GET",
                outcome="success" if status == 200 else "non_200",
                status_code=status,
                duration_ms=t.duration_ms(),
                target=safe_target,
            ),
        )
    return status, body
