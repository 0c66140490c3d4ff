import asyncio

from tugon_hints.models.schemas import AIHintContext, AIHintRequest, AttemptRecord
from tugon_hints.services.gemini import (
    FALLBACK_AI_HINT,
    GeminiHintClient,
    build_hint_prompt,
    clean_hint,
)


def test_build_hint_prompt_includes_context_and_attempts():
    request = AIHintRequest(
        prompt="Help with the substitution step",
        context=AIHintContext(
            topic_name="Functions",
            question_text="If f(x) = 2x - 7, evaluate f(8).",
            detected_behavior="sign-error",
            current_step_index=0,
        ),
        user_attempts=[
            AttemptRecord(user_input="f(8) = 2(8) + 7"),
            AttemptRecord(user_input="f(8) = 2(8) - 7", is_correct=True),
        ],
    )

    prompt = build_hint_prompt(request)

    assert "specializing in Functions" in prompt
    assert "- Detected Behavior: sign-error" in prompt
    assert "- Current Step: 1" in prompt
    assert 'Attempt 1: "f(8) = 2(8) + 7" - Incorrect' in prompt
    assert 'Attempt 2: "f(8) = 2(8) - 7" - Correct' in prompt
    assert "Help with the substitution step" in prompt


def test_build_hint_prompt_defaults():
    prompt = build_hint_prompt(AIHintRequest(prompt="hint please"))

    assert "- Topic: General Math" in prompt
    assert "No attempts yet" in prompt


def test_clean_hint_strips_emphasis():
    assert clean_hint("  **Try isolating x first.**\n") == "Try isolating x first."
    assert clean_hint("*Check the sign*") == "Check the sign"


class _ScriptedClient(GeminiHintClient):
    def __init__(self, reply):
        super().__init__(stub=False)
        self.reply = reply
        self.kwargs = None

    async def _call_text_api(self, prompt, max_tokens, temperature, json_output=False):
        self.kwargs = {"max_tokens": max_tokens, "temperature": temperature, "json_output": json_output}
        return self.reply


def test_generate_hint_uses_reply_and_request_constraints():
    client = _ScriptedClient("**Multiply before you subtract.**")
    request = AIHintRequest(prompt="nudge", max_tokens=80, temperature=0.2)

    assert asyncio.run(client.generate_hint(request)) == "Multiply before you subtract."
    assert client.kwargs == {"max_tokens": 80, "temperature": 0.2, "json_output": False}


def test_generate_hint_failure_is_fallback():
    client = _ScriptedClient(None)
    assert asyncio.run(client.generate_hint(AIHintRequest(prompt="nudge"))) == FALLBACK_AI_HINT


def test_generate_json_parses_fenced_object():
    client = _ScriptedClient('```json\n{"templates": []}\n```')
    assert asyncio.run(client.generate_json("prompt")) == {"templates": []}
    assert client.kwargs["json_output"] is True


def test_generate_json_rejects_non_objects():
    assert asyncio.run(_ScriptedClient("[1, 2]").generate_json("p")) is None
    assert asyncio.run(_ScriptedClient("not json").generate_json("p")) is None


def test_stub_client_makes_no_calls():
    client = GeminiHintClient(stub=True)

    assert client.stub
    assert asyncio.run(client.generate_hint(AIHintRequest(prompt="nudge"))) == FALLBACK_AI_HINT
    assert asyncio.run(client.generate_json("prompt")) is None


def test_client_construction_error_is_fallback(monkeypatch):
    def _broken_client(**kwargs):
        raise ValueError("bad api key")

    monkeypatch.setattr("google.genai.Client", _broken_client)
    client = GeminiHintClient(stub=False)

    assert asyncio.run(client.generate_hint(AIHintRequest(prompt="nudge"))) == FALLBACK_AI_HINT
    assert asyncio.run(client.generate_json("prompt")) is None
