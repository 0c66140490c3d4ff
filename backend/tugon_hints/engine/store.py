"""
HintStore: immutable registry of curated hint content.

Layout: topic_id -> category_id -> CategoryHints. A store is assembled once
through HintStoreBuilder (or load_content_dir) and never mutated afterwards;
every lookup signals absence with None / an empty tuple instead of raising.

On-disk content format:
    <content_dir>/topic<N>/category<M>.json   one CategoryHints document each
"""

import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from pydantic import ValidationError

from tugon_hints.models.schemas import CategoryHints, QuestionHints, StepHint

logger = logging.getLogger(__name__)

_LOG = "[TugonHints][store]"
_TOPIC_DIR = re.compile(r"^topic(\d+)$")


class ContentLoadError(Exception):
    """Raised when a curated content file cannot be read or validated."""


def _valid_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class HintStore:
    def __init__(self, topics: Mapping[int, Mapping[int, CategoryHints]]) -> None:
        self._topics = MappingProxyType(
            {topic_id: MappingProxyType(dict(categories)) for topic_id, categories in topics.items()}
        )

    # ── Lookups ────────────────────────────────────────────────────────────────

    def lookup_category(self, topic_id, category_id) -> CategoryHints | None:
        if not (_valid_id(topic_id) and _valid_id(category_id)):
            return None
        categories = self._topics.get(topic_id)
        if categories is None:
            return None
        return categories.get(category_id)

    def lookup_question(self, topic_id, category_id, question_id) -> QuestionHints | None:
        category = self.lookup_category(topic_id, category_id)
        if category is None or not _valid_id(question_id):
            return None
        return category.question(question_id)

    def lookup_steps_by_label(
        self, topic_id, category_id, question_id, step_label
    ) -> tuple[StepHint, ...]:
        """All steps of the question whose label equals ``step_label``, ignoring case."""
        question = self.lookup_question(topic_id, category_id, question_id)
        if question is None or not isinstance(step_label, str):
            return ()
        wanted = step_label.lower()
        return tuple(step for step in question.step_hints if step.step_label.lower() == wanted)

    # ── Convenience queries ────────────────────────────────────────────────────

    def has_question(self, topic_id, category_id, question_id) -> bool:
        return self.lookup_question(topic_id, category_id, question_id) is not None

    def available_steps(self, topic_id, category_id, question_id) -> list[str]:
        question = self.lookup_question(topic_id, category_id, question_id)
        if question is None:
            return []
        return [step.step_label for step in question.step_hints]

    def common_mistakes(self, topic_id, category_id, question_id, step_label) -> list[str]:
        steps = self.lookup_steps_by_label(topic_id, category_id, question_id, step_label)
        # duplicate labels contribute in stored order
        return list(dict.fromkeys(m for step in steps for m in step.common_mistakes))

    def general_tips(self, topic_id, category_id, question_id) -> list[str]:
        question = self.lookup_question(topic_id, category_id, question_id)
        if question is None:
            return []
        return list(question.general_tips)

    def keys(self) -> list[tuple[int, int]]:
        return sorted(
            (topic_id, category_id)
            for topic_id, categories in self._topics.items()
            for category_id in categories
        )

    def categories(self) -> list[CategoryHints]:
        return [self._topics[t][c] for t, c in self.keys()]

    def __len__(self) -> int:
        return sum(len(categories) for categories in self._topics.values())


class HintStoreBuilder:
    """Collects category registrations; ``build`` freezes them into a HintStore."""

    def __init__(self) -> None:
        self._topics: dict[int, dict[int, CategoryHints]] = {}

    def register(self, topic_id: int, category_id: int, hints: CategoryHints) -> "HintStoreBuilder":
        if not (_valid_id(topic_id) and _valid_id(category_id)):
            raise ValueError(f"Invalid hint key ({topic_id!r}, {category_id!r})")

        categories = self._topics.setdefault(topic_id, {})
        if category_id in categories:
            logger.warning(
                "%s overwriting hints for topic=%d category=%d (%s -> %s)",
                _LOG, topic_id, category_id,
                categories[category_id].category_name, hints.category_name,
            )
        categories[category_id] = hints
        logger.info(
            "%s registered topic=%d category=%d (%s) questions=%s",
            _LOG, topic_id, category_id, hints.category_name,
            [q.question_id for q in hints.questions],
        )
        return self

    def build(self) -> HintStore:
        return HintStore(self._topics)


def load_category_file(path: Path) -> CategoryHints:
    try:
        return CategoryHints.model_validate_json(path.read_bytes())
    except (OSError, ValidationError) as exc:
        raise ContentLoadError(f"{path}: {exc}") from exc


def load_content_dir(content_dir: Path) -> HintStore:
    """Build a store from every ``topic<N>/*.json`` document under ``content_dir``."""
    content_dir = Path(content_dir)
    if not content_dir.is_dir():
        raise ContentLoadError(f"Hint content directory not found: {content_dir}")

    builder = HintStoreBuilder()
    for topic_dir in sorted(p for p in content_dir.iterdir() if p.is_dir()):
        match = _TOPIC_DIR.match(topic_dir.name)
        if match is None:
            logger.debug("%s skipping %s", _LOG, topic_dir)
            continue
        topic_id = int(match.group(1))
        for path in sorted(topic_dir.glob("*.json")):
            hints = load_category_file(path)
            try:
                builder.register(topic_id, hints.category_id, hints)
            except ValueError as exc:
                raise ContentLoadError(f"{path}: {exc}") from exc

    store = builder.build()
    logger.info("%s loaded %d categories from %s", _LOG, len(store), content_dir)
    return store
