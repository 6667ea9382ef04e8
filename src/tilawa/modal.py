from __future__ import annotations

import threading
import uuid
from typing import Callable, Sequence

from .catalog import CatalogEntry


class ModalClosedError(RuntimeError):
    """Raised when a selection targets a modal that is no longer open."""


class SelectionModal:
    """Single-choice list picker; serves exactly one selection."""

    def __init__(
        self,
        title: str,
        items: Sequence[CatalogEntry],
        on_select: Callable[[CatalogEntry], None] | None = None,
        *,
        message: str | None = None,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.title = title
        self.items: tuple[CatalogEntry, ...] = tuple(items)
        self.message = message
        self.selected: CatalogEntry | None = None
        self._on_select = on_select
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def item(self, item_id: str) -> CatalogEntry:
        for entry in self.items:
            if entry.id == item_id:
                return entry
        raise KeyError(item_id)

    def choose(self, item_id: str) -> CatalogEntry:
        if not self._open:
            raise ModalClosedError(f"Modal '{self.title}' is already closed")
        entry = self.item(item_id)
        self._open = False
        self.selected = entry
        callback, self._on_select = self._on_select, None
        if callback is not None:
            callback(entry)
        return entry

    def close(self) -> None:
        self._open = False
        self._on_select = None

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "items": [entry.to_payload() for entry in self.items],
        }


class ModalHost:
    """Holds at most one open SelectionModal."""

    def __init__(self) -> None:
        self.current: SelectionModal | None = None
        self._lock = threading.Lock()

    def open(
        self,
        title: str,
        items: Sequence[CatalogEntry],
        on_select: Callable[[CatalogEntry], None] | None = None,
        *,
        message: str | None = None,
    ) -> SelectionModal:
        modal = SelectionModal(title, items, on_select, message=message)
        with self._lock:
            if self.current is not None:
                self.current.close()
            self.current = modal
        return modal

    def _require(self, modal_id: str | None) -> SelectionModal:
        modal = self.current
        if modal is None or not modal.is_open:
            raise ModalClosedError("No selection is open")
        if modal_id is not None and modal.id != modal_id:
            raise ModalClosedError("Selection is no longer available")
        return modal

    def choose(self, item_id: str, modal_id: str | None = None) -> CatalogEntry:
        with self._lock:
            modal = self._require(modal_id)
            modal.item(item_id)
            self.current = None
        # runs the callback outside the lock; it may open the next modal
        return modal.choose(item_id)

    def close(self, modal_id: str | None = None) -> None:
        with self._lock:
            modal = self._require(modal_id)
            modal.close()
            self.current = None

    def to_payload(self) -> dict[str, object] | None:
        modal = self.current
        if modal is None or not modal.is_open:
            return None
        return modal.to_payload()


__all__ = ["ModalClosedError", "ModalHost", "SelectionModal"]
