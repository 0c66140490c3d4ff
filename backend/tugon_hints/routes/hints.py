import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from tugon_hints.config import get_settings
from tugon_hints.engine.behavior import coerce_behavior
from tugon_hints.engine.registry import StoreRegistry, get_registry
from tugon_hints.engine.store import ContentLoadError
from tugon_hints.models.schemas import (
    AIHintRequest,
    AIHintResponse,
    BehaviorTemplates,
    BestHintResponse,
    CommonMistakesResponse,
    QuestionSummary,
    ReloadResponse,
)
from tugon_hints.services.gemini import FALLBACK_AI_HINT, GeminiHintClient
from tugon_hints.services.hint_generator import HintGeneratorService

logger = logging.getLogger(__name__)
router = APIRouter()


@lru_cache()
def get_ai_client() -> GeminiHintClient:
    return GeminiHintClient()


@lru_cache()
def get_hint_generator() -> HintGeneratorService:
    return HintGeneratorService(
        registry=get_registry(),
        ai_client=get_ai_client(),
        cache_seconds=get_settings().template_cache_seconds,
    )


@router.get("/hints/best", response_model=BestHintResponse)
async def best_hint(
    topic_id: int,
    category_id: int,
    question_id: int,
    step_label: str = "",
    behavior: str = "default",
    generator: HintGeneratorService = Depends(get_hint_generator),
):
    """Single best hint for the exact context; always 200."""
    resolution = generator.best_contextual_hint(
        topic_id, category_id, question_id, step_label, behavior
    )
    return BestHintResponse(
        hint=resolution.text,
        tier=resolution.tier,
        behavior=coerce_behavior(behavior),
    )


@router.get("/hints/templates", response_model=BehaviorTemplates)
async def hint_templates(
    topic_id: int | None = None,
    category_id: int | None = None,
    question_id: int | None = None,
    step_label: str | None = None,
    generator: HintGeneratorService = Depends(get_hint_generator),
):
    return await generator.generate_contextual_templates(
        topic_id, category_id, question_id, step_label
    )


@router.post("/hints/reload", response_model=ReloadResponse)
async def reload_hints(registry: StoreRegistry = Depends(get_registry)):
    """Rebuild the store from the content directory and swap it in."""
    try:
        store = registry.reload()
    except ContentLoadError as exc:
        logger.error("[TugonHints][routes] reload failed, keeping current store: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))
    return ReloadResponse(
        categories=len(store),
        keys=[f"{t}-{c}" for t, c in store.keys()],
    )


@router.get(
    "/hints/{topic_id}/{category_id}/{question_id}",
    response_model=QuestionSummary,
)
async def question_summary(
    topic_id: int,
    category_id: int,
    question_id: int,
    registry: StoreRegistry = Depends(get_registry),
):
    store = registry.current
    category = store.lookup_category(topic_id, category_id)
    question = store.lookup_question(topic_id, category_id, question_id)
    if category is None or question is None:
        raise HTTPException(status_code=404, detail="No hints for this question")
    return QuestionSummary(
        topic_id=topic_id,
        category_id=category_id,
        category_name=category.category_name,
        question_id=question_id,
        question_text=question.question_text,
        steps=store.available_steps(topic_id, category_id, question_id),
        general_tips=store.general_tips(topic_id, category_id, question_id),
    )


@router.get(
    "/hints/{topic_id}/{category_id}/{question_id}/steps/{step_label}/mistakes",
    response_model=CommonMistakesResponse,
)
async def common_mistakes(
    topic_id: int,
    category_id: int,
    question_id: int,
    step_label: str,
    registry: StoreRegistry = Depends(get_registry),
):
    return CommonMistakesResponse(
        step_label=step_label,
        mistakes=registry.current.common_mistakes(topic_id, category_id, question_id, step_label),
    )


@router.post("/gemini-hint", response_model=AIHintResponse)
async def gemini_hint(
    request: AIHintRequest,
    client: GeminiHintClient = Depends(get_ai_client),
):
    """Free-form AI hint; falls back to a fixed message instead of erroring."""
    hint = await client.generate_hint(request)
    return AIHintResponse(hint=hint, generated=hint != FALLBACK_AI_HINT)
