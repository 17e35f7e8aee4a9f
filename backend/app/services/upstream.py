import logging
import time
from typing import Any

import httpx

from ..utils.error_handlers import UpstreamError

logger = logging.getLogger(__name__)


def _safe_truncate(s: str, n: int = 500) -> str:
    s = s or ""
    if len(s) <= n:
        return s
    return s[:n] + "…"


def _error_message(response: httpx.Response, service: str) -> str:
    """Pull the upstream's own error text out of a failed response."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("error", "detail", "message"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    text = _safe_truncate((response.text or "").strip())
    return text or f"{service} returned HTTP {response.status_code}"


async def request_json(
    method: str,
    url: str,
    *,
    service: str,
    timeout_s: float,
    json: Any = None,
    files: dict | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """
    Call an external collaborator and return its JSON body.

    Every failure (network, timeout, non-2xx, non-JSON) becomes an UpstreamError whose
    message is what the upstream said, so handlers can pass it through.
    """
    started = time.perf_counter()
    try:
        async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
            r = await client.request(method, url, json=json, files=files)
    except httpx.TimeoutException as e:
        logger.warning("%s timed out after %.1fs: %s", service, timeout_s, e)
        raise UpstreamError(f"{service} timed out", status_code=504)
    except httpx.HTTPError as e:
        logger.warning("%s unreachable at %s: %s", service, url, e)
        raise UpstreamError(f"{service} is unavailable")

    latency_ms = int((time.perf_counter() - started) * 1000)
    logger.info("%s %s %s -> %s (%sms)", service, method, url, r.status_code, latency_ms)

    if r.status_code >= 400:
        message = _error_message(r, service)
        logger.warning("%s error %s: %s", service, r.status_code, message)
        raise UpstreamError(message)

    try:
        return r.json()
    except ValueError:
        logger.warning("%s returned non-JSON body: %s", service, _safe_truncate(r.text, 200))
        raise UpstreamError(f"{service} returned an invalid response")
