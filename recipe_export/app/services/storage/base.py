from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel


class StoredPage(BaseModel):
    html: str
    created_at: datetime


class RecipePageStore(ABC):
    @abstractmethod
    def insert(self, slug: str, html: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def lookup(self, slug: str) -> Optional[StoredPage]:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def delete(self, slug: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def items(self) -> Dict[str, StoredPage]:  # pragma: no cover - interface
        raise NotImplementedError


class StaticPageWriter(ABC):
    @abstractmethod
    def write(self, name: str, html: str) -> str:  # pragma: no cover - interface
        """Persist ``html`` under a filename derived from ``name``; return the filename."""
        raise NotImplementedError

    @abstractmethod
    def write_file(self, filename: str, html: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError
