"""
Template bundle resolver

Builds, for one exercise context, a pool of three phrasings per behavior key
that a downstream hint rotator cycles through on repeated wrong attempts.
Every returned string may contain the {behavior}, {wrongPart} and {stepLabel}
placeholders; they are left for the caller to fill.
"""

import logging
from typing import Iterable

from tugon_hints.engine.behavior import DETECTABLE_BEHAVIORS, normalize, select_field
from tugon_hints.engine.resolver import GENERIC_FALLBACK_HINT, category_fallback_hint
from tugon_hints.engine.store import HintStore
from tugon_hints.models.schemas import (
    BehaviorTemplates,
    HintTemplate,
    StepHint,
    TemplateBehavior,
    TemplateSource,
)

logger = logging.getLogger(__name__)

TEMPLATES_PER_BEHAVIOR = 3

# Used when no category is known to qualify the phrasing with
FALLBACK_TEMPLATES: dict[TemplateBehavior, tuple[str, ...]] = {
    TemplateBehavior.GENERAL: (
        "Hey there, you're {behavior}. Check {wrongPart} in your {stepLabel} carefully!",
        "I see you're {behavior}. Review {wrongPart} during {stepLabel}.",
        "Looks like you're {behavior}. Focus on {wrongPart} in the {stepLabel} step!",
    ),
    TemplateBehavior.SIGN_ERROR: (
        "I see you're {behavior}. Focus on {wrongPart} in your {stepLabel} - check those signs!",
        "Hey there, you're {behavior}. Double-check {wrongPart} during {stepLabel} for sign errors!",
        "Looks like you're {behavior}. Review {wrongPart} in {stepLabel} - watch the signs!",
    ),
    TemplateBehavior.MAGNITUDE_ERROR: (
        "Looks like you're {behavior}. Review {wrongPart} during {stepLabel} - check the numbers!",
        "I see you're {behavior}. Focus on {wrongPart} in your {stepLabel} - verify the calculation!",
        "Hey there, you're {behavior}. Double-check {wrongPart} in {stepLabel} for accuracy!",
    ),
}

_UNQUALIFIED_PADDING = GENERIC_FALLBACK_HINT

_UNQUALIFIED_SYNTHETIC: dict[TemplateBehavior, tuple[str, ...]] = {
    TemplateBehavior.GENERAL: FALLBACK_TEMPLATES[TemplateBehavior.GENERAL],
    TemplateBehavior.STRUGGLING: (
        "I see you're {behavior}. Let's work through {wrongPart} in your {stepLabel} together!",
        "I notice you're {behavior}. Focus on {wrongPart} during {stepLabel} - take it slow!",
        "Looks like you're {behavior}. Review {wrongPart} in the {stepLabel} step carefully.",
    ),
    TemplateBehavior.SELF_CORRECTION: (
        "Great awareness! You're {behavior}. Keep refining {wrongPart} in your {stepLabel}!",
        "Nice catch! Since you're {behavior}, polish {wrongPart} during {stepLabel}.",
        "Good self-check! You're {behavior}. Almost there with {wrongPart} in {stepLabel}!",
    ),
}


def _synthetic_templates(category_name: str) -> dict[TemplateBehavior, tuple[str, ...]]:
    name = category_name.lower()
    return {
        # neutral
        TemplateBehavior.GENERAL: (
            category_fallback_hint(category_name),
            "I see you're {behavior}. Review {wrongPart} during {stepLabel} "
            f"in this {name} question.",
            "Looks like you're {behavior}. Focus on {wrongPart} in the {stepLabel} step!",
        ),
        # encouraging
        TemplateBehavior.STRUGGLING: (
            "I see you're {behavior}. Let's work through {wrongPart} in your {stepLabel} "
            f"for this {name} problem together!",
            "I notice you're {behavior}. Focus on {wrongPart} during {stepLabel} "
            f"- take it slow with {name}!",
            "Looks like you're {behavior}. Review {wrongPart} in the {stepLabel} step carefully.",
        ),
        # praising
        TemplateBehavior.SELF_CORRECTION: (
            "Great awareness! You're {behavior}. Keep refining {wrongPart} in your {stepLabel} "
            f"for this {name} problem!",
            "Nice catch! Since you're {behavior}, polish {wrongPart} during {stepLabel}.",
            "Good self-check! You're {behavior}. Almost there with {wrongPart} in {stepLabel}!",
        ),
    }


def fallback_bundle() -> BehaviorTemplates:
    return BehaviorTemplates(
        templates=[
            HintTemplate(behavior_type=key, templates=list(variants))
            for key, variants in FALLBACK_TEMPLATES.items()
        ],
        source=TemplateSource.FALLBACK,
    )


def _collect_variants(steps: Iterable[StepHint], behavior, padding: str) -> list[str]:
    """Ordered unique hints for ``behavior``, cut or padded to exactly three."""
    seen: dict[str, None] = {}
    for step in steps:
        text = select_field(step, behavior)
        if text:
            seen.setdefault(text, None)

    variants = list(seen)[:TEMPLATES_PER_BEHAVIOR]
    # padding is not deduplicated against itself or the curated hints
    while len(variants) < TEMPLATES_PER_BEHAVIOR:
        variants.append(padding)
    return variants


def get_contextual_templates(
    store: HintStore,
    topic_id,
    category_id,
    question_id,
    step_label: str | None = None,
) -> BehaviorTemplates:
    category = store.lookup_category(topic_id, category_id)
    if category is None:
        logger.info(
            "[TugonHints][templates] no category topic=%s category=%s -> fallback bundle",
            topic_id, category_id,
        )
        return fallback_bundle()

    question = store.lookup_question(topic_id, category_id, question_id)
    if question is None:
        logger.info(
            "[TugonHints][templates] no question %s in %r -> fallback bundle",
            question_id, category.category_name,
        )
        return fallback_bundle()

    if step_label:
        steps = store.lookup_steps_by_label(topic_id, category_id, question_id, step_label)
    else:
        steps = question.step_hints

    if not steps:
        logger.info(
            "[TugonHints][templates] no steps labelled %r (available: %s) -> fallback bundle",
            step_label, [s.step_label for s in question.step_hints],
        )
        return fallback_bundle()

    padding = category_fallback_hint(category.category_name)
    templates = [
        HintTemplate(
            behavior_type=normalize(behavior),
            templates=_collect_variants(steps, behavior, padding),
        )
        for behavior in DETECTABLE_BEHAVIORS
    ]
    templates.extend(
        HintTemplate(behavior_type=key, templates=list(variants))
        for key, variants in _synthetic_templates(category.category_name).items()
    )

    logger.debug(
        "[TugonHints][templates] curated bundle for %r q=%s step=%r from %d steps",
        category.category_name, question_id, step_label, len(steps),
    )
    return BehaviorTemplates(templates=templates, source=TemplateSource.CURATED)


def catalog_templates(store: HintStore) -> BehaviorTemplates:
    """
    Bundle aggregated over every step in the store.

    Used when the caller has no exercise context; phrasing is not qualified
    with any category name.
    """
    steps = [
        step
        for category in store.categories()
        for question in category.questions
        for step in question.step_hints
    ]
    templates = [
        HintTemplate(
            behavior_type=normalize(behavior),
            templates=_collect_variants(steps, behavior, _UNQUALIFIED_PADDING),
        )
        for behavior in DETECTABLE_BEHAVIORS
    ]
    templates.extend(
        HintTemplate(behavior_type=key, templates=list(variants))
        for key, variants in _UNQUALIFIED_SYNTHETIC.items()
    )
    return BehaviorTemplates(templates=templates, source=TemplateSource.CATALOG)
