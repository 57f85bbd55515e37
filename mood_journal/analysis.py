"""Text mood analysis backed by an external language model."""

from __future__ import annotations

import abc
import json
import logging
import math
import os
import re
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from .config import AnalysisConfig
from .errors import AnalysisError, AnalysisErrorKind
from .schemas import EMOTION_AXES, EmotionVector, Sentiment

logger = logging.getLogger(__name__)


ALLOWED_SENTIMENTS = [s.value for s in Sentiment]

SYSTEM_INSTRUCTION = (
    "You are an emotional analysis assistant. "
    "Analyze journal entries and return structured emotion data."
)

MOOD_PROMPT = """Analyze the emotional content of the following journal entry.

Rules:
1) Score each emotion independently from 0.0 to 1.0. The scores do not need to sum to 1.
2) sentiment must be one of: {sentiments}
3) Output STRICT JSON only, no markdown and no extra commentary.

Return exactly:
{{
  "happiness": 0.0,
  "fear": 0.0,
  "sadness": 0.0,
  "anger": 0.0,
  "sentiment": "neutral"
}}

Journal entry:
\"\"\"
{entry_text}
\"\"\"
"""


def build_prompt(text: str) -> str:
    return MOOD_PROMPT.format(sentiments=ALLOWED_SENTIMENTS, entry_text=text)


def _extract_json_object(raw: str) -> Optional[object]:
    raw = raw.strip()
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    match = re.search(r"\{[\s\S]*\}", raw)
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        return None


def _is_score(value: object) -> bool:
    # bool is an int subclass; "true" is not a score.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def parse_mood_reply(raw: Optional[str]) -> EmotionVector:
    """Validate a model reply and normalize it into an EmotionVector."""
    if raw is None or not raw.strip():
        raise AnalysisError(AnalysisErrorKind.EMPTY_RESPONSE, "Model returned an empty response")

    try:
        parsed = _extract_json_object(raw)
    except ValueError as exc:
        # json refuses integers past the int digit limit
        raise AnalysisError(AnalysisErrorKind.MALFORMED, "Failed to parse model response as a JSON object", exc) from exc
    if not isinstance(parsed, dict):
        raise AnalysisError(AnalysisErrorKind.MALFORMED, "Failed to parse model response as a JSON object")

    missing = [axis for axis in EMOTION_AXES if not _is_score(parsed.get(axis))]
    if missing or not isinstance(parsed.get("sentiment"), str):
        raise AnalysisError(
            AnalysisErrorKind.MALFORMED,
            "Model response missing required fields or has invalid types: "
            + ", ".join(missing or ["sentiment"]),
        )

    return EmotionVector(
        happiness=parsed["happiness"],
        fear=parsed["fear"],
        sadness=parsed["sadness"],
        anger=parsed["anger"],
        sentiment=parsed["sentiment"],
    ).normalized()


def classify_failure(exc: BaseException, service: str) -> AnalysisError:
    """Map a client or transport exception onto the analysis error taxonomy."""
    if isinstance(exc, AnalysisError):
        return exc

    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return AnalysisError(AnalysisErrorKind.TIMEOUT, f"Request to {service} timed out", exc)
    if isinstance(exc, httpx.NetworkError):
        return AnalysisError(AnalysisErrorKind.CONNECTIVITY, f"Network error while connecting to {service}", exc)
    if isinstance(exc, genai_errors.APIError) and exc.code in (401, 403):
        return AnalysisError(AnalysisErrorKind.AUTHORIZATION, f"{service} rejected the API key", exc)

    message = str(exc).lower()
    if "timeout" in message or "timed out" in message:
        return AnalysisError(AnalysisErrorKind.TIMEOUT, f"Request to {service} timed out", exc)
    if any(token in message for token in ("network", "connection", "econnrefused")):
        return AnalysisError(AnalysisErrorKind.CONNECTIVITY, f"Network error while connecting to {service}", exc)
    if any(token in message for token in ("api key", "api_key", "unauthorized", "permission denied")):
        return AnalysisError(AnalysisErrorKind.AUTHORIZATION, f"{service} rejected the API key", exc)

    return AnalysisError(AnalysisErrorKind.SERVICE, f"Failed to analyze mood with {service}", exc)


class MoodAnalyzer(abc.ABC):
    """Turns entry text into an EmotionVector."""

    @abc.abstractmethod
    async def analyze(self, text: str) -> EmotionVector:
        """Analyze ``text``; raises AnalysisError on failure."""


class GeminiMoodAnalyzer(MoodAnalyzer):
    """Mood analyzer that asks a Gemini model for five JSON fields.

    Every call hits the model; nothing is cached. Emptiness of ``text`` is
    the caller's concern.
    """

    service_name = "Gemini"

    def __init__(
        self,
        config: AnalysisConfig,
        google_api_key: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self.config = config
        self.api_key = google_api_key or os.getenv("GEMINI_API_KEY")
        if client is not None:
            self.client = client
        elif self.api_key:
            self.client = genai.Client(
                api_key=self.api_key,
                http_options=genai_types.HttpOptions(timeout=int(config.timeout_seconds * 1000)),
            )
        else:
            logger.warning("GEMINI_API_KEY is not set; mood analysis will fail until it is configured")
            self.client = None

    async def analyze(self, text: str) -> EmotionVector:
        if self.client is None:
            raise AnalysisError(AnalysisErrorKind.CONFIGURATION, "Gemini API key is not configured")

        try:
            resp = await self.client.aio.models.generate_content(
                model=self.config.model,
                contents=build_prompt(text),
                config=genai_types.GenerateContentConfig(
                    system_instruction=SYSTEM_INSTRUCTION,
                    temperature=self.config.temperature,
                    response_mime_type="application/json",
                ),
            )
        except Exception as exc:
            error = classify_failure(exc, self.service_name)
            logger.warning("Mood analysis call failed (%s): %s", error.kind.value, exc)
            raise error from exc

        vector = parse_mood_reply(resp.text)
        logger.debug("Mood analysis result: %s", vector)
        return vector


class StaticMoodAnalyzer(MoodAnalyzer):
    """Offline analyzer returning a fixed vector or raising a fixed error."""

    DEFAULT_VECTOR = EmotionVector(happiness=0.5, fear=0.3, sadness=0.3, anger=0.2, sentiment=Sentiment.NEUTRAL)

    def __init__(self, vector: Optional[EmotionVector] = None, error: Optional[AnalysisError] = None):
        self.vector = vector
        self.error = error
        self.calls = []

    def set_vector(self, vector: EmotionVector) -> None:
        self.vector = vector
        self.error = None

    def set_error(self, error: AnalysisError) -> None:
        self.error = error
        self.vector = None

    async def analyze(self, text: str) -> EmotionVector:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return (self.vector or self.DEFAULT_VECTOR).normalized()


def build_mood_analyzer(config: AnalysisConfig, google_api_key: Optional[str] = None) -> MoodAnalyzer:
    """Pick the analyzer implementation named by ``config.provider``."""
    provider = config.provider.lower()
    if provider == "google":
        return GeminiMoodAnalyzer(config, google_api_key=google_api_key)
    if provider == "static":
        return StaticMoodAnalyzer()
    raise AnalysisError(AnalysisErrorKind.CONFIGURATION, f"Unknown analysis provider: {config.provider}")
