from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BehaviorType(str, Enum):
    """Mistake classifications produced by the behavior detector."""

    SIGN_ERROR = "sign-error"
    MAGNITUDE_ERROR = "magnitude-error"
    CLOSE_ATTEMPT = "close-attempt"
    REPETITION = "repetition"
    GUESSING = "guessing"
    RANDOM = "random"
    DEFAULT = "default"


class TemplateBehavior(str, Enum):
    """Keys used by template bundles and the phrasing rotator."""

    SIGN_ERROR = "sign-error"
    MAGNITUDE_ERROR = "magnitude-error"
    CLOSE_ATTEMPT = "close-attempt"
    REPEATING = "repeating"
    GUESSING = "guessing"
    GENERAL = "general"
    STRUGGLING = "struggling"
    SELF_CORRECTION = "self-correction"


class HintTier(str, Enum):
    FOUND = "found"                              # behavior-specific field
    GENERIC_WITHIN_STEP = "generic-within-step"  # step's own generic hint
    CATEGORY_FALLBACK = "category-fallback"      # boilerplate naming the category
    GENERIC_FALLBACK = "generic-fallback"        # fully generic boilerplate


class TemplateSource(str, Enum):
    CURATED = "curated"
    FALLBACK = "fallback"
    CATALOG = "catalog"
    AI = "ai"


# ── Curated content ────────────────────────────────────────────────────────────


class StepHint(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_label: str
    generic_hint: str = Field(min_length=1)
    sign_error_hint: str | None = None
    magnitude_error_hint: str | None = None
    close_attempt_hint: str | None = None
    repetition_hint: str | None = None
    guessing_hint: str | None = None
    common_mistakes: tuple[str, ...] = ()


class QuestionHints(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: int
    question_text: str
    step_hints: tuple[StepHint, ...] = ()
    general_tips: tuple[str, ...] = ()


class CategoryHints(BaseModel):
    model_config = ConfigDict(frozen=True)

    category_id: int = Field(gt=0)
    category_name: str = Field(min_length=1)
    questions: tuple[QuestionHints, ...] = ()

    def question(self, question_id: int) -> QuestionHints | None:
        for question in self.questions:
            if question.question_id == question_id:
                return question
        return None


# ── Resolution results ─────────────────────────────────────────────────────────


class HintResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    tier: HintTier


class HintTemplate(BaseModel):
    behavior_type: TemplateBehavior
    templates: list[str]


class BehaviorTemplates(BaseModel):
    templates: list[HintTemplate]
    source: TemplateSource
    expires_in_seconds: int = 86400

    def for_behavior(self, behavior: TemplateBehavior) -> list[str]:
        """Templates of the first entry keyed by ``behavior`` (empty if none)."""
        for entry in self.templates:
            if entry.behavior_type == behavior:
                return entry.templates
        return []


# ── API payloads ───────────────────────────────────────────────────────────────


class BestHintResponse(BaseModel):
    hint: str
    tier: HintTier
    behavior: BehaviorType


class QuestionSummary(BaseModel):
    topic_id: int
    category_id: int
    category_name: str
    question_id: int
    question_text: str
    steps: list[str]
    general_tips: list[str]


class CommonMistakesResponse(BaseModel):
    step_label: str
    mistakes: list[str]


class ReloadResponse(BaseModel):
    categories: int
    keys: list[str]


class AttemptRecord(BaseModel):
    user_input: str
    is_correct: bool = False


class AIHintContext(BaseModel):
    topic_name: str | None = None
    question_text: str | None = None
    category_question: str | None = None
    guide_text: str | None = None
    detected_behavior: str | None = None
    current_step_index: int | None = None


class AIHintRequest(BaseModel):
    prompt: str = ""
    context: AIHintContext = Field(default_factory=AIHintContext)
    user_attempts: list[AttemptRecord] = Field(default_factory=list)
    max_tokens: int | None = None
    temperature: float | None = None


class AIHintResponse(BaseModel):
    hint: str
    generated: bool
