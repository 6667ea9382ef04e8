from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import requests

from .errors import ReaderError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.alquran.cloud/v1"
DEFAULT_AUDIO_URL_TEMPLATE = "https://cdn.islamic.network/quran/audio/{reciter}/{surah}/{ayah}"
SURAH_COUNT = 114
SUCCESS_CODE = 200


class QuranApiError(ReaderError):
    """Raised when the API answers with a failure code or an unexpected payload."""


class QuranApiUnavailableError(ConnectionError, QuranApiError):
    """Raised when the API cannot be reached."""


@dataclass(slots=True)
class SurahSummary:
    number: int
    name: str
    english_name: str = ""
    english_translation: str = ""
    revelation_type: str = ""
    ayah_count: int | None = None

    @property
    def display_name(self) -> str:
        label = f"{self.number}. {self.english_name or self.name}"
        if self.english_translation:
            label += f" ({self.english_translation})"
        return label


@dataclass(slots=True)
class AyahText:
    number_in_surah: int
    text: str


@dataclass(slots=True)
class SurahContent:
    summary: SurahSummary
    ayahs: list[AyahText] = field(default_factory=list)


@dataclass(slots=True)
class AyahContent:
    surah: SurahSummary
    ayah: AyahText


@dataclass(frozen=True, slots=True)
class ContentTarget:
    surah: int
    ayah: int | None = None

    @property
    def is_ayah(self) -> bool:
        return self.ayah is not None

    def describe(self) -> str:
        if self.ayah is None:
            return f"surah {self.surah}"
        return f"ayah {self.surah}:{self.ayah}"


@dataclass(slots=True)
class ContentPair:
    target: ContentTarget
    translation_id: str
    original: SurahContent | AyahContent
    translation: SurahContent | AyahContent


def validate_target(surah: int, ayah: int | None = None) -> ContentTarget:
    if not isinstance(surah, int) or not 1 <= surah <= SURAH_COUNT:
        raise ValueError(f"Surah number must be between 1 and {SURAH_COUNT}: {surah!r}")
    if ayah is not None and (not isinstance(ayah, int) or ayah < 1):
        raise ValueError(f"Ayah number must be a positive integer: {ayah!r}")
    return ContentTarget(surah=surah, ayah=ayah)


def parse_target(value: str) -> ContentTarget:
    """Parse ``"2"`` or ``"2:255"`` into a validated target."""
    raw = (value or "").strip()
    surah_part, sep, ayah_part = raw.partition(":")
    try:
        surah = int(surah_part)
        ayah = int(ayah_part) if sep else None
    except ValueError as exc:
        raise ValueError(f"Invalid reference: {value!r}") from exc
    return validate_target(surah, ayah)


def audio_url(template: str, reciter: str, surah: int, ayah: int) -> str:
    return template.format(reciter=reciter, surah=surah, ayah=ayah)


def _require_int(payload: dict, key: str, context: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise QuranApiError(f"{context}: missing integer field '{key}'")
    return value


def _require_str(payload: dict, key: str, context: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise QuranApiError(f"{context}: missing text field '{key}'")
    return value


def _parse_summary(payload: object) -> SurahSummary:
    if not isinstance(payload, dict):
        raise QuranApiError("Unexpected surah payload")
    ayah_count = payload.get("numberOfAyahs")
    return SurahSummary(
        number=_require_int(payload, "number", "surah"),
        name=_require_str(payload, "name", "surah"),
        english_name=str(payload.get("englishName") or ""),
        english_translation=str(payload.get("englishNameTranslation") or ""),
        revelation_type=str(payload.get("revelationType") or ""),
        ayah_count=ayah_count if isinstance(ayah_count, int) else None,
    )


def _parse_ayah(payload: object) -> AyahText:
    if not isinstance(payload, dict):
        raise QuranApiError("Unexpected ayah payload")
    return AyahText(
        number_in_surah=_require_int(payload, "numberInSurah", "ayah"),
        text=_require_str(payload, "text", "ayah"),
    )


def parse_surah_content(payload: object) -> SurahContent:
    summary = _parse_summary(payload)
    ayahs = payload.get("ayahs") if isinstance(payload, dict) else None
    if not isinstance(ayahs, list):
        raise QuranApiError(f"Surah {summary.number} payload has no ayah list")
    return SurahContent(summary=summary, ayahs=[_parse_ayah(entry) for entry in ayahs])


def parse_ayah_content(payload: object) -> AyahContent:
    if not isinstance(payload, dict):
        raise QuranApiError("Unexpected ayah payload")
    return AyahContent(surah=_parse_summary(payload.get("surah")), ayah=_parse_ayah(payload))


class AlQuranClient:
    """
    Thin wrapper around the AlQuran Cloud REST API.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        timeout: float | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def _get(self, path: str) -> object:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("GET %s", url)
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise QuranApiUnavailableError(f"Failed to contact Quran API at {url}") from exc

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise QuranApiError(
                f"{path} returned invalid JSON (HTTP {response.status_code})"
            ) from exc

        if not isinstance(payload, dict) or "data" not in payload:
            raise QuranApiError(f"{path} returned an unexpected envelope")
        code = payload.get("code")
        if code != SUCCESS_CODE:
            detail = payload.get("data") if isinstance(payload.get("data"), str) else ""
            message = f"{path} failed with code {code}"
            if detail:
                message += f": {detail}"
            raise QuranApiError(message)
        return payload["data"]

    def list_surahs(self) -> list[SurahSummary]:
        data = self._get("surah")
        if not isinstance(data, list):
            raise QuranApiError("surah list payload is not a list")
        return [_parse_summary(entry) for entry in data]

    def fetch_surah(self, number: int, edition: str | None = None) -> SurahContent:
        validate_target(number)
        path = f"surah/{number}" if not edition else f"surah/{number}/{edition}"
        return parse_surah_content(self._get(path))

    def fetch_ayah(self, surah: int, ayah: int, edition: str | None = None) -> AyahContent:
        validate_target(surah, ayah)
        path = f"ayah/{surah}:{ayah}" if not edition else f"ayah/{surah}:{ayah}/{edition}"
        return parse_ayah_content(self._get(path))

    def _fetch_target(
        self, target: ContentTarget, edition: str | None = None
    ) -> SurahContent | AyahContent:
        if target.ayah is None:
            return self.fetch_surah(target.surah, edition)
        return self.fetch_ayah(target.surah, target.ayah, edition)

    def fetch_pair(self, target: ContentTarget, translation_id: str) -> ContentPair:
        """Fetch original text and translation concurrently; fail if either fails."""
        validate_target(target.surah, target.ayah)
        with ThreadPoolExecutor(max_workers=2) as pool:
            original_future = pool.submit(self._fetch_target, target)
            translation_future = pool.submit(self._fetch_target, target, translation_id)
            original = original_future.result()
            translation = translation_future.result()
        return ContentPair(
            target=target,
            translation_id=translation_id,
            original=original,
            translation=translation,
        )

    def close(self) -> None:
        self._session.close()


__all__ = [
    "AlQuranClient",
    "AyahContent",
    "AyahText",
    "ContentPair",
    "ContentTarget",
    "DEFAULT_API_BASE",
    "DEFAULT_AUDIO_URL_TEMPLATE",
    "QuranApiError",
    "QuranApiUnavailableError",
    "SURAH_COUNT",
    "SurahContent",
    "SurahSummary",
    "audio_url",
    "parse_ayah_content",
    "parse_surah_content",
    "parse_target",
    "validate_target",
]
