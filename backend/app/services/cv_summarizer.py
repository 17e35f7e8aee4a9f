import logging

import httpx

from ..utils.error_handlers import UpstreamError
from .upstream import request_json

logger = logging.getLogger(__name__)

SERVICE_NAME = "CV summarizer"


async def summarize_cv(
    *,
    url: str,
    filename: str,
    content: bytes,
    content_type: str | None,
    timeout_s: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Send the uploaded CV to the summarization service and return its summary text."""
    data = await request_json(
        "POST",
        url,
        service=SERVICE_NAME,
        timeout_s=timeout_s,
        files={"file": (filename, content, content_type or "application/octet-stream")},
        transport=transport,
    )
    summary = data.get("summary") if isinstance(data, dict) else None
    if not isinstance(summary, str) or not summary.strip():
        raise UpstreamError(f"{SERVICE_NAME} returned no summary")
    return summary.strip()
