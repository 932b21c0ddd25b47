"""One-shot JSON GET helper shared by every provider.

Each call opens and closes its own ``httpx.AsyncClient`` so no connection
or state outlives a single provider attempt. httpx failures are translated
into the ProviderError taxonomy; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from market_pulse.core.exceptions import ParseError, ProtocolError, TransportError

logger = logging.getLogger(__name__)


async def fetch_json(
    url: str,
    *,
    source: str,
    timeout: float,
    user_agent: str,
    params: dict[str, str] | None = None,
) -> Any:
    """GET ``url`` and return the decoded JSON body.

    Parameters
    ----------
    url : str
        Fully-built request URL.
    source : str
        Provider label used in error messages ("Jupiter", "Yahoo Finance").
    timeout : float
        Seconds before the attempt is abandoned.
    user_agent : str
        Value for the ``User-Agent`` header.
    params : dict | None
        Query parameters appended by httpx.

    Raises
    ------
    TransportError
        Connection failure or timeout.
    ProtocolError
        Non-2xx status.
    ParseError
        Body is not valid JSON.
    """
    headers = {"User-Agent": user_agent, "Accept": "application/json"}
    context = {"source": source, "url": url}

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url, params=params, headers=headers)
    except httpx.TimeoutException as e:
        raise TransportError(f"{source} request timed out: {e}", context=context) from e
    except httpx.RequestError as e:
        raise TransportError(f"{source} request: {e}", context=context) from e

    if not resp.is_success:
        logger.debug("%s returned %s: %s", source, resp.status_code, resp.text[:200])
        raise ProtocolError(
            f"{source} status {resp.status_code}",
            context={**context, "status_code": resp.status_code},
        )

    try:
        return resp.json()
    except ValueError as e:
        raise ParseError(f"{source} parse: {e}", context=context) from e
