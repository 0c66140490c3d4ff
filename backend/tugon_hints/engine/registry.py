"""
StoreRegistry: holds the live HintStore for the process.

Readers grab ``registry.current`` once per request and keep using that
reference; ``swap``/``reload`` replace the whole store with a single
assignment, so in-flight resolutions never observe a half-built store.
"""

import logging
from functools import lru_cache
from pathlib import Path

from tugon_hints.config import get_settings
from tugon_hints.engine.store import ContentLoadError, HintStore, load_content_dir

logger = logging.getLogger(__name__)


class StoreRegistry:
    def __init__(self, store: HintStore, content_dir: Path | None = None) -> None:
        self._store = store
        self._content_dir = content_dir

    @property
    def current(self) -> HintStore:
        return self._store

    def swap(self, store: HintStore) -> HintStore:
        """Install ``store`` and return the one it replaced."""
        previous = self._store
        self._store = store
        logger.info(
            "[TugonHints][registry] store swapped | categories %d -> %d",
            len(previous), len(store),
        )
        return previous

    def reload(self, content_dir: Path | None = None) -> HintStore:
        """Rebuild from disk; on ContentLoadError the current store stays live."""
        content_dir = content_dir or self._content_dir
        if content_dir is None:
            raise ContentLoadError("No hint content directory configured")
        content_dir = Path(content_dir)
        store = load_content_dir(content_dir)
        self._content_dir = content_dir
        self.swap(store)
        return store


@lru_cache()
def get_registry() -> StoreRegistry:
    settings = get_settings()
    return StoreRegistry(
        load_content_dir(settings.hint_content_dir),
        content_dir=settings.hint_content_dir,
    )
