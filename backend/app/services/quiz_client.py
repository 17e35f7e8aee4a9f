"""Thin client for the aptitude-quiz microservice."""
import httpx

from ..utils.error_handlers import UpstreamError
from .upstream import request_json

SERVICE_NAME = "Quiz service"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _endpoint(base_url: str, path: str) -> str:
    return f"{(base_url or '').rstrip('/')}/{path.lstrip('/')}"


async def create_quiz(
    *,
    base_url: str,
    num_questions: int,
    timeout_s: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    data = await request_json(
        "POST",
        _endpoint(base_url, "/quiz"),
        service=SERVICE_NAME,
        timeout_s=timeout_s,
        json={"num_questions": num_questions},
        transport=transport,
    )
    if not isinstance(data, dict) or not data.get("quiz_id"):
        raise UpstreamError(f"{SERVICE_NAME} returned no quiz_id")
    return data


async def get_quiz(
    *,
    base_url: str,
    quiz_id: str,
    timeout_s: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    data = await request_json(
        "GET",
        _endpoint(base_url, f"/quiz/{quiz_id}"),
        service=SERVICE_NAME,
        timeout_s=timeout_s,
        transport=transport,
    )
    if not isinstance(data, dict):
        raise UpstreamError(f"{SERVICE_NAME} returned an invalid quiz")
    return data


async def submit_answers(
    *,
    base_url: str,
    quiz_id: str,
    answers: list[dict],
    timeout_s: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    data = await request_json(
        "POST",
        _endpoint(base_url, "/submit"),
        service=SERVICE_NAME,
        timeout_s=timeout_s,
        json={"quiz_id": quiz_id, "answers": answers},
        transport=transport,
    )
    required = ("correct_answers", "total_questions", "score_percentage")
    if not isinstance(data, dict) or not all(_is_number(data.get(k)) for k in required):
        raise UpstreamError(f"{SERVICE_NAME} returned an incomplete result")
    return data
