"""
HintGeneratorService: what the quiz runner talks to.

Picks the template bundle for the learner's situation:
    full exercise context   -> curated, category-qualified bundle
    partial / no context    -> AI-generated universal templates (cached)
    AI unavailable          -> catalog bundle aggregated from all content

and answers single "what do I show right now" requests through the resolver.
"""

import logging
import time
from typing import Callable

from tugon_hints.engine.behavior import coerce_behavior
from tugon_hints.engine.registry import StoreRegistry
from tugon_hints.engine.resolver import resolve_hint
from tugon_hints.engine.templates import TEMPLATES_PER_BEHAVIOR, catalog_templates, get_contextual_templates
from tugon_hints.models.schemas import (
    BehaviorTemplates,
    HintResolution,
    HintTemplate,
    TemplateBehavior,
    TemplateSource,
)
from tugon_hints.services.gemini import GeminiHintClient

logger = logging.getLogger(__name__)

_LOG = "[TugonHints][generator]"

TEMPLATE_PROMPT = """You are a friendly math tutor creating hint templates for students.

Generate 3 DIFFERENT conversational hint templates for each of these 8 student behaviors.

IMPORTANT: Templates must be GENERIC to work for ANY math problem.

Use these EXACT placeholders (they will be filled at runtime):
- {behavior} = description of what the student is doing wrong
- {wrongPart} = the specific wrong part (e.g., "the + sign", "the number 12")
- {stepLabel} = the current step name (e.g., "substitution", "evaluation", "final answer")

Requirements for each template:
- Start with a friendly greeting: "Hey there," "I see," "Hmm," etc.
- Sound natural like a teacher talking to a student
- Be encouraging but direct
- 2-3 sentences maximum
- Must include ALL 3 placeholders: {behavior}, {wrongPart}, {stepLabel}
- Work for ANY math problem (don't mention specific operations)

Generate for these 8 behaviors:
1. struggling: Student having general difficulty
2. guessing: Student making random attempts
3. repeating: Student using same wrong approach repeatedly
4. self-correction: Student catching their own mistakes
5. general: Generic guidance for any issue
6. sign-error: Student mixing up plus minus signs
7. magnitude-error: Student making calculation errors
8. close-attempt: Student very close to correct answer

Return ONLY valid JSON (no markdown):
{
  "templates": [
    {
      "behaviorType": "struggling",
      "templates": ["Template 1", "Template 2", "Template 3"]
    }
  ]
}"""


def fill_placeholders(
    template: str,
    behavior: str | None = None,
    wrong_part: str | None = None,
    step_label: str | None = None,
) -> str:
    """Substitute the placeholder tokens that have a value; others stay as-is."""
    values = {"{behavior}": behavior, "{wrongPart}": wrong_part, "{stepLabel}": step_label}
    for token, value in values.items():
        if value is not None:
            template = template.replace(token, value)
    return template


class HintGeneratorService:
    def __init__(
        self,
        registry: StoreRegistry,
        ai_client: GeminiHintClient,
        cache_seconds: int = 86400,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registry = registry
        self._ai = ai_client
        self._cache_seconds = cache_seconds
        self._clock = clock
        self._cached: BehaviorTemplates | None = None
        self._cached_at = 0.0

    # ── Bundles ────────────────────────────────────────────────────────────────

    async def generate_contextual_templates(
        self,
        topic_id: int | None = None,
        category_id: int | None = None,
        question_id: int | None = None,
        step_label: str | None = None,
    ) -> BehaviorTemplates:
        if topic_id and category_id and question_id:
            logger.info(
                "%s contextual templates | topic=%s category=%s question=%s step=%r",
                _LOG, topic_id, category_id, question_id, step_label,
            )
            return get_contextual_templates(
                self._registry.current, topic_id, category_id, question_id, step_label
            )
        return await self.generate_behavior_templates()

    async def generate_behavior_templates(self) -> BehaviorTemplates:
        """Universal AI templates, cached; the catalog bundle when AI is unavailable."""
        if self._cached is not None:
            age = self._clock() - self._cached_at
            if age < self._cache_seconds:
                logger.debug("%s using cached AI templates (age=%.0fs)", _LOG, age)
                return self._cached

        catalog = catalog_templates(self._registry.current)
        parsed = await self._ai.generate_json(TEMPLATE_PROMPT)
        templates = self._parse_ai_templates(parsed, catalog)
        if templates is None:
            logger.warning("%s AI templates unavailable, using catalog templates", _LOG)
            return catalog

        self._cached = templates
        self._cached_at = self._clock()
        logger.info("%s generated AI templates for %d behaviors", _LOG, len(templates.templates))
        return templates

    def _parse_ai_templates(
        self, parsed: dict | None, catalog: BehaviorTemplates
    ) -> BehaviorTemplates | None:
        if not parsed:
            return None
        entries = parsed.get("templates")
        if not isinstance(entries, list) or len(entries) < len(TemplateBehavior):
            logger.warning("%s AI response has too few behaviors", _LOG)
            return None

        generated: dict[TemplateBehavior, list[str]] = {}
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            raw_key = entry.get("behaviorType") or entry.get("behavior_type")
            try:
                key = TemplateBehavior(raw_key)
            except ValueError:
                logger.debug("%s dropping unknown AI behavior %r", _LOG, raw_key)
                continue
            if key in generated:
                logger.debug("%s dropping repeated AI behavior %r", _LOG, raw_key)
                continue

            variants = entry.get("templates")
            if (
                isinstance(variants, list)
                and len(variants) >= TEMPLATES_PER_BEHAVIOR
                and all(isinstance(v, str) and v for v in variants)
            ):
                generated[key] = variants[:TEMPLATES_PER_BEHAVIOR]

        if not generated:
            return None

        # every behavior gets a pool; gaps in the AI answer come from the catalog
        missing = [key.value for key in TemplateBehavior if key not in generated]
        if missing:
            logger.warning("%s AI response missing %s, filled from catalog", _LOG, missing)
        templates = [
            HintTemplate(
                behavior_type=key,
                templates=generated.get(key) or list(catalog.for_behavior(key)),
            )
            for key in TemplateBehavior
        ]
        return BehaviorTemplates(
            templates=templates,
            source=TemplateSource.AI,
            expires_in_seconds=self._cache_seconds,
        )

    def clear_cache(self) -> None:
        self._cached = None
        self._cached_at = 0.0

    # ── Single hint ────────────────────────────────────────────────────────────

    def best_contextual_hint(
        self,
        topic_id,
        category_id,
        question_id,
        step_label,
        behavior,
    ) -> HintResolution:
        behavior = coerce_behavior(behavior)
        resolution = resolve_hint(
            self._registry.current, topic_id, category_id, question_id, step_label, behavior
        )
        logger.info(
            "%s best hint | topic=%s category=%s question=%s step=%r behavior=%s tier=%s",
            _LOG, topic_id, category_id, question_id, step_label,
            behavior.value, resolution.tier.value,
        )
        return resolution
