"""
AI advisor tests.

No network: requests go through httpx.MockTransport and the connectivity
check is replaced with a lambda.
"""

import asyncio
import json
import threading

import httpx
import pytest

from kurul import ai_service
from kurul.ai_service import (
    ERROR_ANALYSIS,
    ERROR_BOARD,
    ERROR_REASON,
    OFFLINE_ANALYSIS,
    OFFLINE_DOCUMENT,
    OFFLINE_REASON,
    OFFLINE_SEARCH,
    REGULATION_URLS,
    SYSTEM_INSTRUCTION,
    AdvisorClient,
    AdvisorError,
    extract_text,
)
from kurul.models import Incident, SchoolType, Student


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

INCIDENT = Incident(title="Kavga", date="2025-03-01", location="Bahçe", description="Teneffüste kavga")
STUDENT = Student(number="12", name="Ali Kaya", grade="9-A")


def reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def recording_transport(response: httpx.Response, seen: list):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response
    return httpx.MockTransport(handler)


def make_client(response=None, seen=None, online=True, api_key="key") -> AdvisorClient:
    seen = seen if seen is not None else []
    response = response or httpx.Response(200, json=reply("Yanıt"))
    return AdvisorClient(
        api_key,
        model="test-model",
        is_online=lambda: online,
        transport=recording_transport(response, seen),
        endpoint="https://ai.test/v1beta/models/",
    )


def run(coro):
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

class TestExtractText:
    def test_joins_parts(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
        assert extract_text(payload) == "ab"

    def test_no_candidates(self):
        with pytest.raises(AdvisorError):
            extract_text({"candidates": []})

    def test_empty_text(self):
        with pytest.raises(AdvisorError):
            extract_text(reply(""))


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------

class TestRequest:
    def test_url_and_key_header(self):
        seen = []
        run(make_client(seen=seen).analyze(INCIDENT, STUDENT))
        [request] = seen
        assert str(request.url) == "https://ai.test/v1beta/models/test-model:generateContent"
        assert request.headers["x-goog-api-key"] == "key"

    def test_body_carries_prompt_and_system_instruction(self):
        seen = []
        run(make_client(seen=seen).analyze(INCIDENT, STUDENT))
        body = json.loads(seen[0].content)
        prompt = body["contents"][0]["parts"][0]["text"]
        assert "Ali Kaya (9-A - 12)" in prompt
        assert "Teneffüste kavga" in prompt
        assert body["systemInstruction"]["parts"][0]["text"] == SYSTEM_INSTRUCTION
        assert "tools" not in body

    def test_search_is_grounded(self):
        seen = []
        run(make_client(seen=seen).search_regulations("kopya cezası"))
        body = json.loads(seen[0].content)
        assert body["tools"] == [{"google_search": {}}]
        prompt = body["contents"][0]["parts"][0]["text"]
        assert "kopya cezası" in prompt
        assert REGULATION_URLS[SchoolType.LISE] in prompt

    def test_board_info_is_grounded(self):
        seen = []
        url = REGULATION_URLS[SchoolType.ORTAOKUL]
        run(make_client(seen=seen).fetch_board_info(url, "Ortaokul"))
        body = json.loads(seen[0].content)
        assert "tools" in body
        assert url in body["contents"][0]["parts"][0]["text"]

    def test_validation_uses_given_key_without_system_instruction(self):
        seen = []
        assert run(make_client(seen=seen, api_key="").validate_api_key("new-key")) is True
        assert seen[0].headers["x-goog-api-key"] == "new-key"
        assert "systemInstruction" not in json.loads(seen[0].content)


# ---------------------------------------------------------------------------
# Degraded paths
# ---------------------------------------------------------------------------

class TestDegradedPaths:
    def test_success_returns_text(self):
        assert run(make_client().analyze(INCIDENT, STUDENT)) == "Yanıt"

    def test_offline_sends_nothing(self):
        seen = []
        client = make_client(seen=seen, online=False)
        assert run(client.analyze(INCIDENT, STUDENT)) == OFFLINE_ANALYSIS
        assert run(client.generate_reason(INCIDENT, STUDENT, "KINAMA", "Lise")) == OFFLINE_REASON
        assert run(client.search_regulations("x")) == OFFLINE_SEARCH
        assert run(client.draft_document("defense", INCIDENT, STUDENT)) == OFFLINE_DOCUMENT
        assert seen == []

    def test_http_error_gives_error_text(self):
        client = make_client(response=httpx.Response(403, json={"error": "denied"}))
        assert run(client.analyze(INCIDENT, STUDENT)) == ERROR_ANALYSIS

    def test_reason_failure_is_text_not_none(self):
        client = make_client(response=httpx.Response(500))
        assert run(client.generate_reason(INCIDENT, STUDENT, "KINAMA", "Lise")) == ERROR_REASON

    def test_invalid_json(self):
        client = make_client(response=httpx.Response(200, content=b"<html>"))
        assert run(client.fetch_board_info("u", "Lise")) == ERROR_BOARD

    def test_missing_key_gives_error_text(self):
        seen = []
        client = make_client(seen=seen, api_key="")
        assert run(client.analyze(INCIDENT, STUDENT)) == ERROR_ANALYSIS
        assert seen == []

    def test_validation_offline_is_false(self):
        assert run(make_client(online=False).validate_api_key("k")) is False

    def test_validation_rejected_key(self):
        client = make_client(response=httpx.Response(400))
        assert run(client.validate_api_key("bad")) is False

    def test_unknown_document_kind(self):
        with pytest.raises(ValueError):
            run(make_client().draft_document("memo", INCIDENT, STUDENT))


class TestConnectivity:
    def test_unreachable_host(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise OSError("unreachable")
        monkeypatch.setattr(ai_service.socket, "create_connection", refuse)
        assert ai_service.has_connectivity() is False

    def test_check_runs_off_the_event_loop_thread(self):
        threads = []

        def is_online():
            threads.append(threading.get_ident())
            return False

        client = AdvisorClient("key", is_online=is_online)

        async def call():
            loop_thread = threading.get_ident()
            text = await client.analyze(INCIDENT, STUDENT)
            return loop_thread, text

        loop_thread, text = run(call())
        assert text == OFFLINE_ANALYSIS
        assert threads and threads[0] != loop_thread
