from __future__ import annotations

from typing import Callable

import pytest

from tilawa.api import (
    AyahContent,
    AyahText,
    ContentPair,
    ContentTarget,
    SurahContent,
    SurahSummary,
)

AYAH_COUNTS = {1: 7, 2: 286, 112: 4}


def make_summary(number: int) -> SurahSummary:
    return SurahSummary(
        number=number,
        name=f"سورة {number}",
        english_name=f"Surah {number}",
        english_translation=f"Meaning {number}",
        revelation_type="Meccan",
        ayah_count=AYAH_COUNTS.get(number, 3),
    )


def make_surah(number: int, edition: str | None = None) -> SurahContent:
    count = AYAH_COUNTS.get(number, 3)
    prefix = f"[{edition}] " if edition else "آية "
    return SurahContent(
        summary=make_summary(number),
        ayahs=[AyahText(n, f"{prefix}{number}:{n}") for n in range(1, count + 1)],
    )


def make_ayah(surah: int, ayah: int, edition: str | None = None) -> AyahContent:
    prefix = f"[{edition}] " if edition else "آية "
    return AyahContent(surah=make_summary(surah), ayah=AyahText(ayah, f"{prefix}{surah}:{ayah}"))


class FakeClient:
    """In-memory stand-in for AlQuranClient."""

    def __init__(self) -> None:
        self.pair_calls: list[tuple[ContentTarget, str]] = []
        self.surah_calls: list[tuple[int, str | None]] = []
        self.fail: Exception | None = None
        self.before_return: Callable[[ContentTarget], None] | None = None

    def list_surahs(self) -> list[SurahSummary]:
        if self.fail is not None:
            raise self.fail
        return [make_summary(number) for number in sorted(AYAH_COUNTS)]

    def fetch_surah(self, number: int, edition: str | None = None) -> SurahContent:
        self.surah_calls.append((number, edition))
        if self.fail is not None:
            raise self.fail
        return make_surah(number, edition)

    def fetch_pair(self, target: ContentTarget, translation_id: str) -> ContentPair:
        self.pair_calls.append((target, translation_id))
        hook, self.before_return = self.before_return, None
        if hook is not None:
            hook(target)
        if self.fail is not None:
            raise self.fail
        if target.ayah is None:
            original = make_surah(target.surah)
            translation = make_surah(target.surah, translation_id)
        else:
            original = make_ayah(target.surah, target.ayah)
            translation = make_ayah(target.surah, target.ayah, translation_id)
        return ContentPair(
            target=target,
            translation_id=translation_id,
            original=original,
            translation=translation,
        )


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()
