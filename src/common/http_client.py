"""Shared HTTP helpers used to fetch TeamCity distributions.

Encapsulates request/timeout/retry handling so callers only deal with a
single DownloadError.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


class DownloadError(RuntimeError):
    """Raised when a file cannot be downloaded after all retries."""


def _stream_to_file(url: str, dest: str, **kwargs: Any) -> int:
    """GET ``url`` into ``dest``; return the number of bytes written."""
    written = 0
    with requests.get(url, stream=True, timeout=Constants.REQUEST_TIMEOUT, **kwargs) as response:
        response.raise_for_status()
        with open(dest, "wb") as fh:
            for chunk in response.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                if chunk:
                    fh.write(chunk)
                    written += len(chunk)
    return written


def download_file(url: str, dest: str, **kwargs: Any) -> str:
    """Download ``url`` to ``dest`` with retries and exponential backoff.

    Data is written to ``<dest>.part`` and renamed once complete, so an
    interrupted download never leaves a truncated file at ``dest``.

    Raises:
        DownloadError: If every attempt fails.
    """
    safe_target = safe_url(url)
    parent = os.path.dirname(dest)
    if parent:
        os.makedirs(parent, exist_ok=True)
    partial = dest + ".part"
    last_exception = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1,
                        ),
                    )
                size = _stream_to_file(url, partial, **kwargs)
                os.replace(partial, dest)
                logger.info("Downloaded %s (%d bytes) in %d ms", safe_target, size, t.duration_ms())
                return dest
            except requests.Timeout:
                last_exception = "timeout"
            except requests.RequestException as exc:  # includes HTTPError
                last_exception = str(exc)
        logger.warning(
            "Download attempt %d/%d for %s failed: %s",
            attempt + 1,
            Constants.HTTP_RETRY_MAX,
            safe_target,
            last_exception,
        )
        if attempt + 1 < Constants.HTTP_RETRY_MAX:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** attempt))

    if os.path.exists(partial):
        os.remove(partial)
    raise DownloadError(f"Download of {safe_target} failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}")
