"""
Client for the Gemini generateContent API.

Used for symptom triage (structured JSON answer) and the general chat widget.
There is no retry: a failed call surfaces to the user as a failed analysis.
"""

import json
import re
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.logger import logger
from app.schemas.ai import ChatTurn, SymptomAnalysisRequest, TriageResult

NO_REPLY = "I couldn't generate a response."

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


class AIServiceError(Exception):
    """The AI endpoint could not be reached or returned no usable content."""


class AIResponseFormatError(AIServiceError):
    """The model answered, but not in the shape we asked for."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


def build_triage_prompt(request: SymptomAnalysisRequest) -> str:
    symptoms = [s for s in [*request.symptoms, request.description.strip()] if s]
    return f"""
Analyze: {", ".join(symptoms)}.
User's reported severity level: {request.severity}.
Context: {request.category}.

REQUIRED OUTPUT:
1. A SHORT summary (MAX 2 sentences) in {request.language}.
2. Clinical Severity: High/Medium/Low.
3. Identify exact specialist needed.

Return ONLY valid JSON:
{{
  "possibilities": "explanation",
  "severity": "High/Medium/Low",
  "specialist": "Doctor Type",
  "diet": ["item1", "item2"],
  "exercise": ["tip1", "tip2"]
}}
"""


def extract_text(payload: dict) -> str:
    """Join the text parts of the first candidate; empty string when there are none."""
    candidates = payload.get("candidates") if isinstance(payload, dict) else None
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0] if isinstance(candidates[0], dict) else {}
    content = first.get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""
    texts = [p.get("text") for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    return " ".join(texts).strip()


def parse_triage(raw_text: str) -> TriageResult:
    cleaned = _FENCE_RE.sub("", raw_text).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise AIResponseFormatError(f"Model output is not JSON: {exc.msg}", raw_text)
    if not isinstance(data, dict):
        raise AIResponseFormatError("Model output is not a JSON object", raw_text)
    try:
        return TriageResult.model_validate(data)
    except ValidationError as exc:
        raise AIResponseFormatError(f"Model output does not match the triage schema: {exc.error_count()} errors", raw_text)


class AIService:
    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client

    async def _generate(self, model: str, contents: List[dict[str, Any]]) -> str:
        if not settings.GEMINI_API_KEY:
            raise AIServiceError("GEMINI_API_KEY is not configured")

        url = f"{settings.GEMINI_BASE_URL}/models/{model}:generateContent"
        params = {"key": settings.GEMINI_API_KEY}
        body = {"contents": contents}

        try:
            if self.client is not None:
                response = await self.client.post(url, params=params, json=body)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(settings.AI_TIMEOUT_SECONDS, connect=8.0)) as client:
                    response = await client.post(url, params=params, json=body)
        except httpx.HTTPError as exc:
            logger.error(f"Gemini request failed: {exc}")
            raise AIServiceError("AI service unreachable") from exc

        if response.status_code >= 400:
            logger.error(f"Gemini returned HTTP {response.status_code}: {response.text[:200]}")
            raise AIServiceError(f"AI service returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise AIServiceError("AI service returned a non-JSON body") from exc
        return extract_text(payload)

    async def analyze_symptoms(self, request: SymptomAnalysisRequest) -> TriageResult:
        if not request.symptoms and not request.description.strip():
            raise ValueError("Please provide symptoms")

        prompt = build_triage_prompt(request)
        raw_text = await self._generate(
            settings.GEMINI_TRIAGE_MODEL,
            [{"role": "user", "parts": [{"text": prompt}]}]
        )
        if not raw_text:
            raise AIServiceError("No AI response")

        try:
            return parse_triage(raw_text)
        except AIResponseFormatError:
            logger.warning(f"Non-conforming triage output: {raw_text[:200]!r}")
            raise

    async def chat(self, history: List[ChatTurn], message: str) -> str:
        contents = [
            {"role": "user" if turn.role == "user" else "model", "parts": [{"text": turn.content}]}
            for turn in history
        ]
        contents.append({"role": "user", "parts": [{"text": message}]})

        reply = await self._generate(settings.GEMINI_CHAT_MODEL, contents)
        return reply or NO_REPLY
