import threading
from datetime import datetime, timezone
from typing import Dict, Optional

from recipe_export.app.services.storage.base import RecipePageStore, StoredPage


class InMemoryRecipePageStore(RecipePageStore):
    """Process-local slug -> page mapping.

    Entries are never expired here; callers delete or clear explicitly.
    """

    def __init__(self):
        self._pages: Dict[str, StoredPage] = {}
        self._lock = threading.Lock()

    def insert(self, slug: str, html: str) -> None:
        with self._lock:
            self._pages[slug] = StoredPage(html=html, created_at=datetime.now(timezone.utc))

    def lookup(self, slug: str) -> Optional[StoredPage]:
        with self._lock:
            return self._pages.get(slug)

    def delete(self, slug: str) -> None:
        with self._lock:
            self._pages.pop(slug, None)

    def clear(self) -> None:
        with self._lock:
            self._pages.clear()

    def items(self) -> Dict[str, StoredPage]:
        with self._lock:
            return dict(self._pages)
