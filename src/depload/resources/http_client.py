"""Async download of remote module source over HTTP.

``RemoteModuleBackend`` fetches each unit's source text through
``fetch_source``. Redirects are followed, and every request carries the
loader's user agent. Tests substitute an ``httpx.MockTransport``.

A source that cannot be downloaded is logged and reported as ``None``;
the backend then leaves that unit loading, so only callbacks waiting on it
are held back.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Per-download limit for one module source (seconds).
DEFAULT_TIMEOUT: float = 30.0

USER_AGENT: str = "depload-RemoteModuleBackend/0.1"


def _ensure_httpx() -> Any:  # noqa: ANN401
    """Import httpx on first use.

    Raises:
        SystemExit: If the ``remote`` extra is not installed.
    """
    try:
        import httpx  # noqa: F811

        return httpx
    except ImportError:
        raise SystemExit(
            "Loading units over HTTP needs httpx.\n"
            "Install it with: pip install depload[remote]"
        )


async def fetch_source(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Any = None,  # noqa: ANN401
) -> str | None:
    """Download the module source published at ``url``.

    Args:
        url: Absolute URL of a unit's source file.
        timeout: Seconds allowed for the whole download.
        transport: ``httpx`` transport override, e.g. a mock in tests.

    Returns:
        The source text, or None when it could not be downloaded.
    """
    httpx = _ensure_httpx()
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            transport=transport,
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.text
    except httpx.TimeoutException:
        logger.warning("Module source download timed out: %s", url)
    except httpx.HTTPStatusError as exc:
        logger.warning("HTTP %d fetching module source %s", exc.response.status_code, url)
    except httpx.RequestError as exc:
        logger.warning("Cannot reach module source %s: %s", url, exc)
    return None
