from __future__ import annotations

from dataclasses import dataclass, field

from .api import AyahContent, AyahText, ContentPair, SurahContent
from .errors import ReaderError

WELCOME_TITLE = "القرآن الكريم"
WELCOME_SUBTITLE = "The Holy Quran"
WELCOME_MESSAGE = "Welcome to the Quran App. Select a Surah from the menu to begin reading."

ABOUT_TEXT = """tilawa

A Quran reader for the browser.

Features:
  • Complete Quran text in Arabic
  • Multiple translations
  • Audio recitations
  • Dark mode
  • Customizable fonts

API: Powered by AlQuran Cloud API"""


class ContentMismatchError(ReaderError):
    """Raised when original and translation payloads cannot be aligned verse by verse."""


@dataclass(slots=True)
class DisplayLine:
    number: int | None
    text: str

    def to_payload(self) -> dict[str, object]:
        return {"number": self.number, "text": self.text}


@dataclass(slots=True)
class RenderedView:
    title: str
    subtitles: list[str] = field(default_factory=list)
    original_lines: list[DisplayLine] = field(default_factory=list)
    translation_lines: list[DisplayLine] = field(default_factory=list)
    controls_visible: bool = False
    message: str | None = None

    def to_payload(self) -> dict[str, object]:
        return {
            "title": self.title,
            "subtitles": list(self.subtitles),
            "original": [line.to_payload() for line in self.original_lines],
            "translation": [line.to_payload() for line in self.translation_lines],
            "controlsVisible": self.controls_visible,
            "message": self.message,
        }


def render_welcome() -> RenderedView:
    return RenderedView(
        title=WELCOME_TITLE,
        subtitles=[WELCOME_SUBTITLE],
        controls_visible=False,
        message=WELCOME_MESSAGE,
    )


def _ordered(ayahs: list[AyahText]) -> list[AyahText]:
    return sorted(ayahs, key=lambda ayah: ayah.number_in_surah)


def render_surah(original: SurahContent, translation: SurahContent) -> RenderedView:
    """
    Render a whole surah with original and translated verses in matching order.

    Raises ContentMismatchError when the two lists do not describe the same
    verses; they are never zipped when lengths or numbering differ.
    """
    if original.summary.number != translation.summary.number:
        raise ContentMismatchError(
            f"Translation is for surah {translation.summary.number}, "
            f"expected {original.summary.number}"
        )
    original_ayahs = _ordered(original.ayahs)
    translated_ayahs = _ordered(translation.ayahs)
    if len(original_ayahs) != len(translated_ayahs):
        raise ContentMismatchError(
            f"Surah {original.summary.number} has {len(original_ayahs)} ayahs "
            f"but the translation has {len(translated_ayahs)}"
        )
    for source, translated in zip(original_ayahs, translated_ayahs):
        if source.number_in_surah != translated.number_in_surah:
            raise ContentMismatchError(
                f"Ayah {source.number_in_surah} of surah {original.summary.number} "
                f"does not line up with translated ayah {translated.number_in_surah}"
            )

    summary = original.summary
    subtitles = []
    if summary.english_name:
        heading = summary.english_name
        if summary.english_translation:
            heading += f" - {summary.english_translation}"
        subtitles.append(heading)
    ayah_count = summary.ayah_count if summary.ayah_count is not None else len(original_ayahs)
    details = [summary.revelation_type] if summary.revelation_type else []
    details.append(f"{ayah_count} Ayahs")
    subtitles.append(" • ".join(details))

    return RenderedView(
        title=summary.name,
        subtitles=subtitles,
        original_lines=[DisplayLine(ayah.number_in_surah, ayah.text) for ayah in original_ayahs],
        translation_lines=[
            DisplayLine(ayah.number_in_surah, ayah.text) for ayah in translated_ayahs
        ],
        controls_visible=True,
    )


def render_ayah(original: AyahContent, translation: AyahContent) -> RenderedView:
    if original.surah.number != translation.surah.number:
        raise ContentMismatchError(
            f"Translation is for surah {translation.surah.number}, expected {original.surah.number}"
        )
    number = original.ayah.number_in_surah
    if translation.ayah.number_in_surah != number:
        raise ContentMismatchError(
            f"Translation is for ayah {translation.ayah.number_in_surah}, expected {number}"
        )
    return RenderedView(
        title=original.surah.name,
        subtitles=[f"Ayah {number}"],
        original_lines=[DisplayLine(number, original.ayah.text)],
        translation_lines=[DisplayLine(number, translation.ayah.text)],
        controls_visible=True,
    )


def render_pair(pair: ContentPair) -> RenderedView:
    original, translation = pair.original, pair.translation
    if isinstance(original, SurahContent) and isinstance(translation, SurahContent):
        return render_surah(original, translation)
    if isinstance(original, AyahContent) and isinstance(translation, AyahContent):
        return render_ayah(original, translation)
    raise ContentMismatchError(f"Mixed content fetched for {pair.target.describe()}")


__all__ = [
    "ABOUT_TEXT",
    "ContentMismatchError",
    "DisplayLine",
    "RenderedView",
    "render_ayah",
    "render_pair",
    "render_surah",
    "render_welcome",
]
