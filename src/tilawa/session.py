from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Protocol, Sequence

from .api import ContentPair, ContentTarget, SurahContent, SurahSummary, validate_target
from .audio import AudioController
from .catalog import (
    ARABIC_FONTS,
    DEFAULT_RECITER,
    DEFAULT_TRANSLATION,
    FONT_SIZES,
    RECITERS,
    TRANSLATIONS,
    CatalogEntry,
    find_entry,
)
from .errors import PreconditionError, ReaderError
from .modal import ModalHost, SelectionModal
from .preferences import PreferenceStore
from .render import ABOUT_TEXT, RenderedView, render_pair, render_welcome

logger = logging.getLogger(__name__)

SURAH_REQUIRED_MESSAGE = "Please select a Surah first"


class ContentClient(Protocol):
    def list_surahs(self) -> list[SurahSummary]: ...

    def fetch_surah(self, number: int, edition: str | None = None) -> SurahContent: ...

    def fetch_pair(self, target: ContentTarget, translation_id: str) -> ContentPair: ...


@dataclass(slots=True)
class SelectionState:
    surah: int | None = None
    ayah: int | None = None
    reciter: str = DEFAULT_RECITER
    translation: str = DEFAULT_TRANSLATION

    def to_payload(self) -> dict[str, object]:
        return {
            "surah": self.surah,
            "ayah": self.ayah,
            "reciter": self.reciter,
            "translation": self.translation,
        }


class ReaderSession:
    """
    Everything one reader sees: the current selection, the rendered view,
    applied preferences, the open modal, audio playback and pending notices.

    Network fetches run outside the state lock. Every content load is tagged
    with a sequence number so a response that was overtaken by a newer load
    is dropped instead of overwriting the newer state.
    """

    def __init__(
        self,
        client: ContentClient,
        preferences: PreferenceStore,
        *,
        audio: AudioController | None = None,
        reciters: Sequence[CatalogEntry] = RECITERS,
        translations: Sequence[CatalogEntry] = TRANSLATIONS,
    ) -> None:
        self.client = client
        self.preferences = preferences
        self.audio = audio if audio is not None else AudioController()
        self.reciters = tuple(reciters)
        self.translations = tuple(translations)
        self.selection = SelectionState()
        self.view: RenderedView = render_welcome()
        self.modals = ModalHost()
        self.notices: list[str] = []
        self._lock = threading.RLock()
        self._load_seq = 0
        self.preferences.load()

    # -- notices ---------------------------------------------------------

    def notify(self, message: str) -> None:
        with self._lock:
            self.notices.append(message)

    def _report(self, message: str, exc: BaseException | None = None) -> None:
        if exc is None:
            logger.info("%s", message)
        else:
            logger.warning("%s (%s: %s)", message, type(exc).__name__, exc)
        self.notify(message)

    # -- content loading -------------------------------------------------

    def load_surah(self, number: int) -> bool:
        return self._load(number, None)

    def load_ayah(self, surah: int, ayah: int) -> bool:
        return self._load(surah, ayah)

    def _load(self, surah: int, ayah: int | None) -> bool:
        try:
            target = validate_target(surah, ayah)
        except ValueError as exc:
            self._report(str(exc), exc)
            return False
        with self._lock:
            self._load_seq += 1
            seq = self._load_seq
            translation_id = self.selection.translation

        try:
            pair = self.client.fetch_pair(target, translation_id)
            view = render_pair(pair)
        except ReaderError as exc:
            self._report(f"Error loading {target.describe()}. Please try again.", exc)
            return False

        with self._lock:
            if seq != self._load_seq:
                logger.debug("Discarding superseded response for %s", target.describe())
                return False
            self.selection.surah = target.surah
            self.selection.ayah = target.ayah
            self.view = view
        logger.debug("Loaded %s (%s)", target.describe(), translation_id)
        return True

    def reload(self) -> bool:
        with self._lock:
            surah, ayah = self.selection.surah, self.selection.ayah
        if surah is None:
            return False
        if ayah is None:
            return self.load_surah(surah)
        return self.load_ayah(surah, ayah)

    # -- menu actions ----------------------------------------------------

    def open_surah_menu(self) -> SelectionModal | None:
        try:
            surahs = self.client.list_surahs()
        except ReaderError as exc:
            self._report("Error loading surahs. Please try again.", exc)
            return None
        items = [
            CatalogEntry(str(summary.number), summary.display_name, detail=summary.name)
            for summary in surahs
        ]
        return self.modals.open(
            "Select Surah",
            items,
            lambda entry: self.load_surah(int(entry.id)),
        )

    def open_ayah_menu(self) -> SelectionModal | None:
        with self._lock:
            surah = self.selection.surah
        if surah is None:
            self._report(SURAH_REQUIRED_MESSAGE, PreconditionError(SURAH_REQUIRED_MESSAGE))
            return None
        try:
            content = self.client.fetch_surah(surah)
        except ReaderError as exc:
            self._report("Error loading ayahs. Please try again.", exc)
            return None
        items = [
            CatalogEntry(str(ayah.number_in_surah), f"Ayah {ayah.number_in_surah}")
            for ayah in sorted(content.ayahs, key=lambda ayah: ayah.number_in_surah)
        ]
        return self.modals.open(
            "Select Ayah",
            items,
            lambda entry: self.load_ayah(surah, int(entry.id)),
        )

    def open_reciter_menu(self) -> SelectionModal:
        return self.modals.open(
            "Select Reciter",
            self.reciters,
            lambda entry: self.select_reciter(entry.id),
        )

    def open_translation_menu(self) -> SelectionModal:
        return self.modals.open(
            "Select Translation",
            self.translations,
            lambda entry: self.select_translation(entry.id),
        )

    def open_font_size_menu(self) -> SelectionModal:
        return self.modals.open(
            "Select Font Size",
            FONT_SIZES,
            lambda entry: self.set_font_size(entry.id),
        )

    def open_arabic_font_menu(self) -> SelectionModal:
        return self.modals.open(
            "Select Arabic Font",
            ARABIC_FONTS,
            lambda entry: self.set_arabic_font(entry.id),
        )

    def open_about(self) -> SelectionModal:
        return self.modals.open(
            "About",
            [CatalogEntry("about", "Close")],
            message=ABOUT_TEXT,
        )

    def choose(self, modal_id: str, item_id: str) -> CatalogEntry:
        return self.modals.choose(item_id, modal_id)

    def close_modal(self, modal_id: str) -> None:
        self.modals.close(modal_id)

    # -- settings --------------------------------------------------------

    def select_reciter(self, reciter_id: str) -> bool:
        entry = find_entry(self.reciters, reciter_id)
        if entry is None:
            self._report(f"Unknown reciter: {reciter_id}")
            return False
        with self._lock:
            self.selection.reciter = entry.id
        self.notify(f"Reciter changed to: {entry.name}")
        return True

    def select_translation(self, translation_id: str) -> bool:
        entry = find_entry(self.translations, translation_id)
        if entry is None:
            self._report(f"Unknown translation: {translation_id}")
            return False
        with self._lock:
            self.selection.translation = entry.id
        self.notify(f"Translation changed to: {entry.name}")
        self.reload()
        return True

    def toggle_dark_mode(self) -> bool:
        with self._lock:
            try:
                return self.preferences.toggle_dark_mode()
            except OSError as exc:
                self._report("Could not save dark mode preference.", exc)
                return self.preferences.style.dark_mode

    def set_font_size(self, key: str) -> bool:
        entry = find_entry(FONT_SIZES, key)
        if entry is None:
            self._report(f"Unknown font size: {key}")
            return False
        with self._lock:
            try:
                self.preferences.set_font_size(entry.id)
            except OSError as exc:
                self._report("Could not save font size preference.", exc)
                return False
        self.notify(f"Font size changed to: {entry.name}")
        return True

    def set_arabic_font(self, key: str) -> bool:
        entry = find_entry(ARABIC_FONTS, key)
        if entry is None:
            self._report(f"Unknown Arabic font: {key}")
            return False
        with self._lock:
            try:
                self.preferences.set_arabic_font(entry.id)
            except OSError as exc:
                self._report("Could not save Arabic font preference.", exc)
                return False
        self.notify(f"Arabic font changed to: {entry.name}")
        return True

    # -- audio -----------------------------------------------------------

    def play_audio(self) -> bool:
        with self._lock:
            try:
                self.audio.play(
                    self.selection.reciter,
                    self.selection.surah,
                    self.selection.ayah,
                )
            except ReaderError as exc:
                self._report(str(exc), exc)
                return False
        return True

    def pause_audio(self) -> None:
        with self._lock:
            self.audio.pause()

    def audio_ended(self, stream_id: str) -> bool:
        with self._lock:
            return self.audio.ended(stream_id)

    def audio_failed(self, stream_id: str, reason: str | None = None) -> bool:
        with self._lock:
            if not self.audio.failed(stream_id, reason):
                return False
        self.notify("Error playing audio. Please try again.")
        return True

    # -- snapshot --------------------------------------------------------

    def snapshot(self) -> dict[str, object]:
        """JSON-ready view of the session; drains pending notices."""
        with self._lock:
            notices, self.notices = self.notices, []
            return {
                "selection": self.selection.to_payload(),
                "view": self.view.to_payload(),
                "style": self.preferences.style.to_payload(),
                "preferences": self.preferences.current().to_payload(),
                "modal": self.modals.to_payload(),
                "audio": self.audio.to_payload(),
                "notices": notices,
            }


__all__ = ["ContentClient", "ReaderSession", "SURAH_REQUIRED_MESSAGE", "SelectionState"]
