import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.api.v1.ai import get_ai_service
from app.core.config import settings
from app.main import app
from app.schemas.ai import ChatTurn, SymptomAnalysisRequest
from app.services.ai_service import (
    NO_REPLY,
    AIResponseFormatError,
    AIService,
    AIServiceError,
    extract_text,
    parse_triage,
)

TRIAGE = {
    "possibilities": "Likely a viral upper respiratory infection.",
    "severity": "Low",
    "specialist": "General Physician",
    "diet": ["Warm fluids"],
    "exercise": ["Rest"],
}


def gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def service_returning(status_code=200, body=None, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=body)

    return AIService(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")


def request(**overrides):
    return SymptomAnalysisRequest(**{"category": "Respiratory", "symptoms": ["cough", "fever"], **overrides})


def test_parse_triage_strips_code_fences():
    result = parse_triage(f"```json\n{json.dumps(TRIAGE)}\n```")

    assert result.severity == "Low"
    assert result.specialist == "General Physician"


@pytest.mark.parametrize("raw", [
    "You should see a doctor.",
    "[1, 2, 3]",
    json.dumps({**TRIAGE, "severity": "Critical"}),
    json.dumps({"possibilities": "flu"}),
])
def test_parse_triage_rejects_non_conforming_output(raw):
    with pytest.raises(AIResponseFormatError) as exc_info:
        parse_triage(raw)

    assert exc_info.value.raw_text == raw


def test_extract_text_joins_parts():
    payload = {"candidates": [{"content": {"parts": [{"text": "Hello"}, {"text": "there"}]}}]}

    assert extract_text(payload) == "Hello there"
    assert extract_text({"candidates": []}) == ""
    assert extract_text({}) == ""


@pytest.mark.parametrize("payload", [
    {"candidates": ["x"]},
    {"candidates": [{"content": "x"}]},
    {"candidates": [{"content": {"parts": "x"}}]},
    {"candidates": [None]},
])
def test_extract_text_tolerates_malformed_bodies(payload):
    assert extract_text(payload) == ""


async def test_malformed_body_is_a_typed_error():
    with pytest.raises(AIServiceError):
        await service_returning(body={"candidates": ["x"]}).analyze_symptoms(request())


async def test_analyze_symptoms_sends_prompt():
    calls = []
    service = service_returning(body=gemini_reply(json.dumps(TRIAGE)), calls=calls)

    result = await service.analyze_symptoms(request(language="Hindi"))

    assert result.possibilities.startswith("Likely")
    assert calls[0].url.params["key"] == "test-key"
    assert settings.GEMINI_TRIAGE_MODEL in calls[0].url.path
    prompt = json.loads(calls[0].content)["contents"][0]["parts"][0]["text"]
    assert "cough, fever" in prompt
    assert "Hindi" in prompt


async def test_analyze_symptoms_requires_input():
    with pytest.raises(ValueError):
        await service_returning(body=gemini_reply("{}")).analyze_symptoms(request(symptoms=[], description="  "))


async def test_http_errors_are_typed():
    with pytest.raises(AIServiceError):
        await service_returning(status_code=500, body={"error": "boom"}).analyze_symptoms(request())


async def test_empty_answer_is_an_error():
    with pytest.raises(AIServiceError):
        await service_returning(body={"candidates": []}).analyze_symptoms(request())


async def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", None)

    with pytest.raises(AIServiceError):
        await service_returning(body=gemini_reply(json.dumps(TRIAGE))).analyze_symptoms(request())


async def test_chat_maps_roles_and_falls_back():
    calls = []
    service = service_returning(body={"candidates": []}, calls=calls)

    reply = await service.chat([ChatTurn(role="user", content="hi"), ChatTurn(role="assistant", content="hello")], "I have a headache")

    assert reply == NO_REPLY
    contents = json.loads(calls[0].content)["contents"]
    assert [c["role"] for c in contents] == ["user", "model", "user"]


async def test_api_maps_bad_output_to_502(client, patient):
    app.dependency_overrides[get_ai_service] = lambda: service_returning(body=gemini_reply("not json at all"))

    response = await client.post(
        "/api/v1/ai/analyze-symptoms",
        headers=patient["headers"],
        json={"category": "Respiratory", "symptoms": ["cough"]},
    )

    assert response.status_code == 502
    assert response.json()["detail"] == "Analysis failed"


async def test_api_returns_triage(client, patient):
    app.dependency_overrides[get_ai_service] = lambda: service_returning(body=gemini_reply(json.dumps(TRIAGE)))

    response = await client.post(
        "/api/v1/ai/analyze-symptoms",
        headers=patient["headers"],
        json={"category": "Respiratory", "symptoms": ["cough"], "severity": "Mild"},
    )

    assert response.status_code == 200
    assert response.json()["severity"] == "Low"


async def test_api_chat(client, patient):
    app.dependency_overrides[get_ai_service] = lambda: service_returning(body=gemini_reply("Drink water."))

    response = await client.post("/api/v1/ai/chat", headers=patient["headers"], json={"message": "Any tips?"})

    assert response.json() == {"reply": "Drink water."}


async def test_chat_returns_model_text():
    with patch.object(AIService, "_generate", AsyncMock(return_value="Stay hydrated.")) as generate:
        reply = await AIService().chat([], "Tips for a cold?")

    assert reply == "Stay hydrated."
    assert generate.await_args.args[0] == settings.GEMINI_CHAT_MODEL
