from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Protocol

from .catalog import (
    ARABIC_FONTS,
    DEFAULT_ARABIC_FONT,
    DEFAULT_FONT_SIZE,
    FONT_SIZES,
    find_entry,
)

logger = logging.getLogger(__name__)

DARK_MODE_KEY = "darkMode"
FONT_SIZE_KEY = "fontSize"
ARABIC_FONT_KEY = "arabicFont"

FONT_SIZE_VAR = "--font-size"
ARABIC_FONT_VAR = "--arabic-font"
DARK_MODE_CLASS = "dark-mode"


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def clear(self) -> None: ...


class MemoryStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def clear(self) -> None:
        self._items.clear()


class JsonFileStore:
    """String key/value pairs kept in a single JSON object file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.debug("Ignoring unreadable preferences file %s", self.path)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {key: value for key, value in raw.items() if isinstance(value, str)}

    def _write(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(items, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = str(value)
        self._write(items)

    def clear(self) -> None:
        self._write({})


@dataclass(frozen=True, slots=True)
class PreferenceRecord:
    dark_mode: bool = False
    font_size: str = DEFAULT_FONT_SIZE
    arabic_font: str = DEFAULT_ARABIC_FONT

    def to_payload(self) -> dict[str, object]:
        return {
            "darkMode": self.dark_mode,
            "fontSize": self.font_size,
            "arabicFont": self.arabic_font,
        }


def _font_size_value(key: str) -> str:
    entry = find_entry(FONT_SIZES, key) or find_entry(FONT_SIZES, DEFAULT_FONT_SIZE)
    return entry.value or ""


def _arabic_font_value(key: str) -> str:
    entry = find_entry(ARABIC_FONTS, key) or find_entry(ARABIC_FONTS, DEFAULT_ARABIC_FONT)
    return entry.value or ""


@dataclass(slots=True)
class ViewStyle:
    """Visual effect of the reader's preferences as seen by the page."""

    dark_mode: bool = False
    css_variables: dict[str, str] = field(
        default_factory=lambda: {
            FONT_SIZE_VAR: _font_size_value(DEFAULT_FONT_SIZE),
            ARABIC_FONT_VAR: _arabic_font_value(DEFAULT_ARABIC_FONT),
        }
    )

    @property
    def body_classes(self) -> list[str]:
        return [DARK_MODE_CLASS] if self.dark_mode else []

    @property
    def dark_mode_icon(self) -> str:
        return "fa-sun-o" if self.dark_mode else "fa-moon-o"

    def to_payload(self) -> dict[str, object]:
        return {
            "darkMode": self.dark_mode,
            "bodyClasses": self.body_classes,
            "cssVariables": dict(self.css_variables),
            "darkModeIcon": self.dark_mode_icon,
        }


class PreferenceStore:
    def __init__(self, store: KeyValueStore, style: ViewStyle | None = None) -> None:
        self.store = store
        self.style = style if style is not None else ViewStyle()
        self._applied = PreferenceRecord(dark_mode=self.style.dark_mode)

    def load(self) -> PreferenceRecord:
        """Read every preference, defaulting anything absent or unknown, and apply it."""
        record = PreferenceRecord(
            dark_mode=self._read_dark_mode(),
            font_size=self._read_choice(FONT_SIZE_KEY, FONT_SIZES, DEFAULT_FONT_SIZE),
            arabic_font=self._read_choice(ARABIC_FONT_KEY, ARABIC_FONTS, DEFAULT_ARABIC_FONT),
        )
        self._apply_dark_mode(record.dark_mode)
        self._apply_font_size(record.font_size)
        self._apply_arabic_font(record.arabic_font)
        return record

    def current(self) -> PreferenceRecord:
        """Record of what is currently applied to the view."""
        return self._applied

    def set_dark_mode(self, enabled: bool) -> None:
        enabled = bool(enabled)
        self.store.set_item(DARK_MODE_KEY, "true" if enabled else "false")
        self._apply_dark_mode(enabled)

    def toggle_dark_mode(self) -> bool:
        enabled = not self.style.dark_mode
        self.set_dark_mode(enabled)
        return enabled

    def set_font_size(self, key: str) -> None:
        if find_entry(FONT_SIZES, key) is None:
            raise ValueError(f"Unknown font size: {key!r}")
        self.store.set_item(FONT_SIZE_KEY, key)
        self._apply_font_size(key)

    def set_arabic_font(self, key: str) -> None:
        if find_entry(ARABIC_FONTS, key) is None:
            raise ValueError(f"Unknown Arabic font: {key!r}")
        self.store.set_item(ARABIC_FONT_KEY, key)
        self._apply_arabic_font(key)

    def _read_dark_mode(self) -> bool:
        try:
            return self.store.get_item(DARK_MODE_KEY) == "true"
        except OSError:
            return False

    def _read_choice(self, key: str, entries, default: str) -> str:
        try:
            value = self.store.get_item(key)
        except OSError:
            return default
        if find_entry(entries, value) is None:
            return default
        return value

    def _apply_dark_mode(self, enabled: bool) -> None:
        self.style.dark_mode = enabled
        self._applied = replace(self._applied, dark_mode=enabled)

    def _apply_font_size(self, key: str) -> None:
        self.style.css_variables[FONT_SIZE_VAR] = _font_size_value(key)
        self._applied = replace(self._applied, font_size=key)

    def _apply_arabic_font(self, key: str) -> None:
        self.style.css_variables[ARABIC_FONT_VAR] = _arabic_font_value(key)
        self._applied = replace(self._applied, arabic_font=key)


__all__ = [
    "ARABIC_FONT_KEY",
    "DARK_MODE_KEY",
    "FONT_SIZE_KEY",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PreferenceRecord",
    "PreferenceStore",
    "ViewStyle",
]
