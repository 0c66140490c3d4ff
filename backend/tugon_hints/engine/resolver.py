"""
Single-hint resolver

Finds the one hint to show right now for an exact exercise context. The
result degrades one level of specificity at a time:

    behavior-specific field -> step's generic hint
        -> category-qualified boilerplate -> generic boilerplate

Never raises; unknown ids and behaviors simply land on a lower tier.
"""

import logging

from tugon_hints.engine.behavior import behavior_override, coerce_behavior
from tugon_hints.engine.store import HintStore
from tugon_hints.models.schemas import HintResolution, HintTier

logger = logging.getLogger(__name__)

GENERIC_FALLBACK_HINT = "Hey there, you're {behavior}. Check {wrongPart} in your {stepLabel} carefully!"


def category_fallback_hint(category_name: str) -> str:
    return (
        "Hey there, you're {behavior}. Check {wrongPart} in your {stepLabel} "
        f"for this {category_name.lower()} problem!"
    )


def resolve_hint(
    store: HintStore,
    topic_id,
    category_id,
    question_id,
    step_label,
    behavior,
) -> HintResolution:
    behavior = coerce_behavior(behavior)
    context = (topic_id, category_id, question_id, step_label, behavior.value)

    category = store.lookup_category(topic_id, category_id)
    if category is None:
        logger.debug("[TugonHints][resolve] no category %s -> generic fallback", context)
        return HintResolution(text=GENERIC_FALLBACK_HINT, tier=HintTier.GENERIC_FALLBACK)

    steps = store.lookup_steps_by_label(topic_id, category_id, question_id, step_label)
    if not steps:
        # also covers a missing question
        logger.debug("[TugonHints][resolve] no step %s -> category fallback", context)
        return HintResolution(
            text=category_fallback_hint(category.category_name),
            tier=HintTier.CATEGORY_FALLBACK,
        )

    for step in steps:
        specific = behavior_override(step, behavior)
        if specific:
            logger.debug("[TugonHints][resolve] exact match %s", context)
            return HintResolution(text=specific, tier=HintTier.FOUND)

    logger.debug("[TugonHints][resolve] generic hint of step %s", context)
    return HintResolution(text=steps[0].generic_hint, tier=HintTier.GENERIC_WITHIN_STEP)


def resolve_best_hint(
    store: HintStore,
    topic_id,
    category_id,
    question_id,
    step_label,
    behavior,
) -> str:
    return resolve_hint(store, topic_id, category_id, question_id, step_label, behavior).text
