import asyncio

import httpx
import pytest

from backend.app.services import cv_summarizer, quiz_client
from backend.app.services.upstream import request_json
from backend.app.utils.error_handlers import UpstreamError


def _transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


def test_request_json_returns_body():
    transport = _transport(lambda request: httpx.Response(200, json={"ok": True}))
    data = asyncio.run(request_json("GET", "http://svc.test/x", service="Svc", timeout_s=1, transport=transport))
    assert data == {"ok": True}


@pytest.mark.parametrize(
    "response,expected",
    [
        (httpx.Response(500, json={"error": "model crashed"}), "model crashed"),
        (httpx.Response(404, json={"detail": "Quiz not found"}), "Quiz not found"),
        (httpx.Response(503, text="maintenance"), "maintenance"),
        (httpx.Response(500, text=""), "Svc returned HTTP 500"),
    ],
)
def test_request_json_passes_upstream_error_text_through(response, expected):
    transport = _transport(lambda request: response)
    with pytest.raises(UpstreamError) as exc:
        asyncio.run(request_json("GET", "http://svc.test/x", service="Svc", timeout_s=1, transport=transport))
    assert exc.value.message == expected
    assert exc.value.status_code == 502


def test_request_json_rejects_non_json_success():
    transport = _transport(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(UpstreamError) as exc:
        asyncio.run(request_json("GET", "http://svc.test/x", service="Svc", timeout_s=1, transport=transport))
    assert exc.value.message == "Svc returned an invalid response"


def test_request_json_maps_connection_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as exc:
        asyncio.run(request_json("GET", "http://svc.test/x", service="Svc", timeout_s=1, transport=_transport(handler)))
    assert exc.value.message == "Svc is unavailable"


def test_request_json_maps_timeouts_to_504():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(UpstreamError) as exc:
        asyncio.run(request_json("GET", "http://svc.test/x", service="Svc", timeout_s=1, transport=_transport(handler)))
    assert exc.value.status_code == 504


def test_summarize_cv_sends_multipart_file():
    seen = {}

    def handler(request: httpx.Request):
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"summary": "  Seasoned engineer.  "})

    summary = asyncio.run(
        cv_summarizer.summarize_cv(
            url="http://summarizer.test/summarize",
            filename="cv.pdf",
            content=b"%PDF-1.4",
            content_type="application/pdf",
            timeout_s=1,
            transport=_transport(handler),
        )
    )
    assert summary == "Seasoned engineer."
    assert seen["content_type"].startswith("multipart/form-data")
    assert b'name="file"; filename="cv.pdf"' in seen["body"]


def test_summarize_cv_requires_summary():
    transport = _transport(lambda request: httpx.Response(200, json={"summary": ""}))
    with pytest.raises(UpstreamError):
        asyncio.run(
            cv_summarizer.summarize_cv(
                url="http://summarizer.test/summarize",
                filename="cv.pdf",
                content=b"%PDF-1.4",
                content_type=None,
                timeout_s=1,
                transport=transport,
            )
        )


def test_quiz_client_paths():
    seen = []

    def handler(request: httpx.Request):
        seen.append((request.method, request.url.path))
        if request.url.path == "/quiz":
            return httpx.Response(200, json={"quiz_id": "q-1", "questions": []})
        if request.url.path == "/submit":
            return httpx.Response(200, json={"correct_answers": 2, "total_questions": 4, "score_percentage": 50.0})
        return httpx.Response(200, json={"quiz_id": "q-1", "questions": []})

    async def run():
        transport = _transport(handler)
        created = await quiz_client.create_quiz(base_url="http://quiz.test/", num_questions=4, timeout_s=1, transport=transport)
        fetched = await quiz_client.get_quiz(base_url="http://quiz.test", quiz_id="q-1", timeout_s=1, transport=transport)
        result = await quiz_client.submit_answers(
            base_url="http://quiz.test", quiz_id="q-1", answers=[], timeout_s=1, transport=transport
        )
        return created, fetched, result

    created, fetched, result = asyncio.run(run())
    assert created["quiz_id"] == "q-1"
    assert fetched["quiz_id"] == "q-1"
    assert result["score_percentage"] == 50.0
    assert seen == [("POST", "/quiz"), ("GET", "/quiz/q-1"), ("POST", "/submit")]


def test_quiz_client_rejects_incomplete_result():
    transport = _transport(lambda request: httpx.Response(200, json={"correct_answers": 1}))
    with pytest.raises(UpstreamError):
        asyncio.run(
            quiz_client.submit_answers(base_url="http://quiz.test", quiz_id="q-1", answers=[], timeout_s=1, transport=transport)
        )


@pytest.mark.parametrize(
    "result",
    [
        {"correct_answers": "n/a", "total_questions": 1, "score_percentage": None},
        {"correct_answers": True, "total_questions": 1, "score_percentage": 100},
        {"correct_answers": 1, "total_questions": "1", "score_percentage": 100.0},
    ],
)
def test_quiz_client_rejects_non_numeric_result(result):
    transport = _transport(lambda request: httpx.Response(200, json=result))
    with pytest.raises(UpstreamError, match="incomplete result"):
        asyncio.run(
            quiz_client.submit_answers(base_url="http://quiz.test", quiz_id="q-1", answers=[], timeout_s=1, transport=transport)
        )
