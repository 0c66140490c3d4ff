"""
GeminiHintClient: thin wrapper around the Gemini text API.

Used only as an opaque fallback producer: free-form hints for the
/api/gemini-hint endpoint and universal behavior templates when no curated
context is available.

- Stub mode (GEMINI_STUB=true, or no GEMINI_API_KEY) returns canned output
  without any network calls
- google.genai imports are deferred so the module is always importable
- Every failure is logged and turned into a fallback value
"""

import json
import logging
import re

from tugon_hints.config import get_settings
from tugon_hints.models.schemas import AIHintRequest

logger = logging.getLogger(__name__)
settings = get_settings()

_LOG = "[TugonHints][gemini]"

FALLBACK_AI_HINT = (
    "I'm having trouble generating a personalized hint right now. "
    "Try breaking the problem down into smaller steps."
)

_MARKDOWN_EMPHASIS = re.compile(r"^\*{1,2}|\*{1,2}$")
_JSON_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def build_hint_prompt(request: AIHintRequest) -> str:
    ctx = request.context
    if ctx.current_step_index is not None:
        current_step = ctx.current_step_index + 1
    else:
        current_step = 1

    if request.user_attempts:
        attempts = "\n".join(
            f'Attempt {i}: "{a.user_input}" - {"Correct" if a.is_correct else "Incorrect"}'
            for i, a in enumerate(request.user_attempts, start=1)
        )
    else:
        attempts = "No attempts yet"

    return f"""You are a helpful math tutor specializing in {ctx.topic_name or 'Mathematics'}.

PROBLEM CONTEXT:
- Topic: {ctx.topic_name or 'General Math'}
- Question: {ctx.question_text or 'Math Problem'}
- Category: {ctx.category_question or 'Problem Solving'}
- Guide: {ctx.guide_text or 'Work step by step'}
- Detected Behavior: {ctx.detected_behavior or 'learning'}
- Current Step: {current_step}

STUDENT'S RECENT ATTEMPTS:
{attempts}

INSTRUCTION:
{request.prompt}

Provide a concise, encouraging hint (1-2 sentences) that guides the student \
without giving away the complete answer. Focus on helping them understand the \
next step or correct their approach.""".strip()


def clean_hint(text: str) -> str:
    return _MARKDOWN_EMPHASIS.sub("", text.strip()).strip()


class GeminiHintClient:
    """
    Usage:
        client = GeminiHintClient()
        hint = await client.generate_hint(request)
    """

    def __init__(self, stub: bool | None = None) -> None:
        if stub is None:
            stub = settings.gemini_stub or not settings.gemini_api_key
        self._stub = stub

    @property
    def stub(self) -> bool:
        return self._stub

    # ── Public interface ───────────────────────────────────────────────────────

    async def generate_hint(self, request: AIHintRequest) -> str:
        """
        Free-form hint for the student's current situation.

        Returns FALLBACK_AI_HINT when the request has no instruction, in stub
        mode, or when the Gemini call fails.
        """
        if not request.prompt.strip():
            logger.info("%s[hint] empty prompt, using fallback", _LOG)
            return FALLBACK_AI_HINT
        if self._stub:
            return FALLBACK_AI_HINT

        text = await self._call_text_api(
            build_hint_prompt(request),
            max_tokens=request.max_tokens or settings.ai_hint_max_tokens,
            temperature=request.temperature or settings.ai_hint_temperature,
        )
        if not text:
            return FALLBACK_AI_HINT
        return clean_hint(text) or FALLBACK_AI_HINT

    async def generate_json(
        self,
        prompt: str,
        max_tokens: int = 1200,
        temperature: float = 0.9,
    ) -> dict | None:
        """Ask for a JSON object; None in stub mode or on any failure."""
        if self._stub:
            logger.info("%s[json] stub mode, no templates generated", _LOG)
            return None

        text = await self._call_text_api(
            prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            json_output=True,
        )
        if not text:
            return None
        try:
            parsed = json.loads(_JSON_FENCE.sub("", text.strip()))
        except json.JSONDecodeError as exc:
            logger.warning("%s[json] unparseable response: %s", _LOG, exc)
            return None
        if not isinstance(parsed, dict):
            logger.warning("%s[json] expected an object, got %s", _LOG, type(parsed).__name__)
            return None
        return parsed

    # ── Gemini call ────────────────────────────────────────────────────────────

    async def _call_text_api(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        json_output: bool = False,
    ) -> str | None:
        """Non-streaming Gemini text generation. Imports google.genai lazily."""
        from google import genai
        from google.genai import types

        logger.info(
            "%s request | model=%s prompt_len=%d max_tokens=%d",
            _LOG, settings.gemini_text_model, len(prompt), max_tokens,
        )
        try:
            gai_client = genai.Client(api_key=settings.gemini_api_key)
            response = await gai_client.aio.models.generate_content(
                model=settings.gemini_text_model,
                contents=[types.Content(role="user", parts=[types.Part(text=prompt)])],
                config=types.GenerateContentConfig(
                    max_output_tokens=max_tokens,
                    temperature=temperature,
                    top_p=0.8,
                    top_k=40,
                    response_mime_type="application/json" if json_output else None,
                ),
            )
            text = response.text or ""
            logger.info("%s OK | reply_len=%d", _LOG, len(text))
            return text
        except Exception as exc:
            logger.error("%s FAILED | %s", _LOG, exc)
            return None
