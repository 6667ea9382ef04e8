from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    id: str
    name: str
    value: str | None = None
    detail: str | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"id": self.id, "name": self.name}
        if self.detail:
            payload["detail"] = self.detail
        return payload


DEFAULT_RECITER = "ar.alafasy"
DEFAULT_TRANSLATION = "en.sahih"
DEFAULT_FONT_SIZE = "medium"
DEFAULT_ARABIC_FONT = "uthmanic"

RECITERS: tuple[CatalogEntry, ...] = (
    CatalogEntry("ar.alafasy", "Mishary Rashid Alafasy"),
    CatalogEntry("ar.abdul_basit", "Abdul Basit Abdul Samad"),
    CatalogEntry("ar.abdurrahmaansudais", "Abdur-Rahman As-Sudais"),
    CatalogEntry("ar.ahmedalhuthayfi", "Ahmed Al-Huthayfi"),
    CatalogEntry("ar.aliabdurrahmanalhuthayfi", "Ali Abdur-Rahman Al-Huthayfi"),
)

TRANSLATIONS: tuple[CatalogEntry, ...] = (
    CatalogEntry("en.sahih", "English - Sahih International"),
    CatalogEntry("en.pickthall", "English - Pickthall"),
    CatalogEntry("en.yusufali", "English - Yusuf Ali"),
    CatalogEntry("en.hilali", "English - Hilali & Khan"),
    CatalogEntry("ur.jalandhry", "Urdu - Jalandhry"),
    CatalogEntry("tr.diyanet", "Turkish - Diyanet"),
)

FONT_SIZES: tuple[CatalogEntry, ...] = (
    CatalogEntry("small", "Small", value="1em"),
    CatalogEntry("medium", "Medium", value="1.2em"),
    CatalogEntry("large", "Large", value="1.5em"),
    CatalogEntry("xlarge", "Extra Large", value="2em"),
)

ARABIC_FONTS: tuple[CatalogEntry, ...] = (
    CatalogEntry("uthmanic", "Uthmanic Script", value="Uthmanic Script"),
    CatalogEntry("kufi", "Kufi", value="Kufi"),
    CatalogEntry("naskh", "Naskh", value="Naskh"),
    CatalogEntry("ruqaa", "Ruqaa", value="Ruqaa"),
)


def find_entry(entries: Iterable[CatalogEntry], entry_id: str | None) -> CatalogEntry | None:
    if entry_id is None:
        return None
    for entry in entries:
        if entry.id == entry_id:
            return entry
    return None


def entry_ids(entries: Sequence[CatalogEntry]) -> list[str]:
    return [entry.id for entry in entries]


__all__ = [
    "CatalogEntry",
    "DEFAULT_RECITER",
    "DEFAULT_TRANSLATION",
    "DEFAULT_FONT_SIZE",
    "DEFAULT_ARABIC_FONT",
    "RECITERS",
    "TRANSLATIONS",
    "FONT_SIZES",
    "ARABIC_FONTS",
    "find_entry",
    "entry_ids",
]
