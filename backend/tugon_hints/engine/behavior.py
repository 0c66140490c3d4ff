"""
Behavior normalizer

Translates detector classifications (BehaviorType) into the key vocabulary
used by template bundles (TemplateBehavior), and picks the matching
behavior-specific field off a StepHint.
"""

import logging
from typing import Callable

from tugon_hints.models.schemas import BehaviorType, StepHint, TemplateBehavior

logger = logging.getLogger(__name__)

# Behaviors that curated step content can carry a dedicated hint for
DETECTABLE_BEHAVIORS: tuple[BehaviorType, ...] = (
    BehaviorType.SIGN_ERROR,
    BehaviorType.MAGNITUDE_ERROR,
    BehaviorType.CLOSE_ATTEMPT,
    BehaviorType.REPETITION,
    BehaviorType.GUESSING,
)

_TEMPLATE_KEYS: dict[BehaviorType, TemplateBehavior] = {
    BehaviorType.SIGN_ERROR: TemplateBehavior.SIGN_ERROR,
    BehaviorType.MAGNITUDE_ERROR: TemplateBehavior.MAGNITUDE_ERROR,
    BehaviorType.CLOSE_ATTEMPT: TemplateBehavior.CLOSE_ATTEMPT,
    BehaviorType.REPETITION: TemplateBehavior.REPEATING,
    BehaviorType.GUESSING: TemplateBehavior.GUESSING,
    BehaviorType.RANDOM: TemplateBehavior.GENERAL,
    BehaviorType.DEFAULT: TemplateBehavior.GENERAL,
}

# random / default have no dedicated field
_OVERRIDES: dict[BehaviorType, Callable[[StepHint], str | None]] = {
    BehaviorType.SIGN_ERROR: lambda step: step.sign_error_hint,
    BehaviorType.MAGNITUDE_ERROR: lambda step: step.magnitude_error_hint,
    BehaviorType.CLOSE_ATTEMPT: lambda step: step.close_attempt_hint,
    BehaviorType.REPETITION: lambda step: step.repetition_hint,
    BehaviorType.GUESSING: lambda step: step.guessing_hint,
}


def coerce_behavior(value) -> BehaviorType:
    """Parse a behavior classification; anything outside the set is DEFAULT."""
    if isinstance(value, BehaviorType):
        return value
    if isinstance(value, str):
        try:
            return BehaviorType(value.strip().lower())
        except ValueError:
            pass
    logger.debug("[TugonHints][behavior] unknown behavior %r -> default", value)
    return BehaviorType.DEFAULT


def normalize(behavior) -> TemplateBehavior:
    return _TEMPLATE_KEYS[coerce_behavior(behavior)]


def behavior_override(step: StepHint, behavior) -> str | None:
    """The behavior-specific hint of ``step``, or None when it has none."""
    getter = _OVERRIDES.get(coerce_behavior(behavior))
    if getter is None:
        return None
    return getter(step) or None


def select_field(step: StepHint, behavior) -> str | None:
    """
    Hint text of ``step`` for ``behavior``.

    Dispatches on the raw (non-normalized) behavior. An absent or empty
    behavior-specific field, and the random / default behaviors, fall through
    to the step's generic hint.
    """
    return behavior_override(step, behavior) or step.generic_hint or None
