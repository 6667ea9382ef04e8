from __future__ import annotations

import json
import threading

import pytest
import requests

from tilawa.api import (
    AlQuranClient,
    AyahContent,
    ContentTarget,
    QuranApiError,
    QuranApiUnavailableError,
    SurahContent,
    audio_url,
    parse_target,
)


class _FakeResponse:
    def __init__(self, payload: object, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def json(self) -> object:
        if isinstance(self._payload, str):
            return json.loads(self._payload)
        return self._payload


class _FakeHttpSession:
    def __init__(self, routes: dict[str, object]) -> None:
        self.routes = routes
        self.requested: list[str] = []
        self._lock = threading.Lock()

    def get(self, url: str, timeout=None):
        with self._lock:
            self.requested.append(url)
        result = self.routes.get(url)
        if isinstance(result, Exception):
            raise result
        if result is None:
            return _FakeResponse({"code": 404, "status": "Not Found", "data": "Not found"}, 404)
        return _FakeResponse(result)


BASE = "https://api.test/v1"


def _surah_payload(number: int, texts: list[str]) -> dict:
    return {
        "code": 200,
        "status": "OK",
        "data": {
            "number": number,
            "name": "سُورَةُ ٱلْإِخْلَاصِ",
            "englishName": "Al-Ikhlaas",
            "englishNameTranslation": "Sincerity",
            "revelationType": "Meccan",
            "numberOfAyahs": len(texts),
            "ayahs": [
                {"number": 6221 + idx, "text": text, "numberInSurah": idx + 1}
                for idx, text in enumerate(texts)
            ],
        },
    }


def _ayah_payload(text: str) -> dict:
    return {
        "code": 200,
        "status": "OK",
        "data": {
            "number": 262,
            "text": text,
            "surah": {
                "number": 2,
                "name": "سُورَةُ البَقَرَةِ",
                "englishName": "Al-Baqara",
                "englishNameTranslation": "The Cow",
                "numberOfAyahs": 286,
                "revelationType": "Medinan",
            },
            "numberInSurah": 255,
        },
    }


def _client(routes: dict[str, object]) -> tuple[AlQuranClient, _FakeHttpSession]:
    http = _FakeHttpSession(routes)
    return AlQuranClient(BASE, session=http), http


def test_fetch_pair_for_surah_requests_original_and_translation() -> None:
    client, http = _client(
        {
            f"{BASE}/surah/112": _surah_payload(112, ["a", "b", "c", "d"]),
            f"{BASE}/surah/112/en.sahih": _surah_payload(112, ["A", "B", "C", "D"]),
        }
    )
    pair = client.fetch_pair(ContentTarget(112), "en.sahih")

    assert sorted(http.requested) == [f"{BASE}/surah/112", f"{BASE}/surah/112/en.sahih"]
    assert isinstance(pair.original, SurahContent)
    assert [ayah.text for ayah in pair.original.ayahs] == ["a", "b", "c", "d"]
    assert [ayah.text for ayah in pair.translation.ayahs] == ["A", "B", "C", "D"]
    assert pair.original.summary.english_name == "Al-Ikhlaas"
    assert pair.target == ContentTarget(112)
    assert pair.translation_id == "en.sahih"


def test_fetch_pair_for_ayah_uses_colon_reference() -> None:
    client, http = _client(
        {
            f"{BASE}/ayah/2:255": _ayah_payload("ٱللَّهُ لَآ إِلَٰهَ إِلَّا هُوَ"),
            f"{BASE}/ayah/2:255/en.pickthall": _ayah_payload("Allah! There is no deity save Him"),
        }
    )
    pair = client.fetch_pair(ContentTarget(2, 255), "en.pickthall")
    assert isinstance(pair.translation, AyahContent)
    assert pair.translation.ayah.number_in_surah == 255
    assert pair.translation.surah.english_name == "Al-Baqara"
    assert f"{BASE}/ayah/2:255/en.pickthall" in http.requested


def test_fetch_pair_fails_when_translation_fails() -> None:
    client, _ = _client({f"{BASE}/surah/112": _surah_payload(112, ["a"])})
    with pytest.raises(QuranApiError) as excinfo:
        client.fetch_pair(ContentTarget(112), "xx.missing")
    assert "404" in str(excinfo.value)


def test_transport_error_raises_unavailable() -> None:
    client, _ = _client({f"{BASE}/surah": requests.ConnectionError("offline")})
    with pytest.raises(QuranApiUnavailableError):
        client.list_surahs()


def test_unavailable_error_is_a_connection_error() -> None:
    assert issubclass(QuranApiUnavailableError, ConnectionError)
    assert issubclass(QuranApiUnavailableError, QuranApiError)


def test_non_success_code_is_rejected() -> None:
    client, _ = _client({f"{BASE}/surah": {"code": 500, "data": "boom"}})
    with pytest.raises(QuranApiError) as excinfo:
        client.list_surahs()
    assert "500" in str(excinfo.value)


def test_invalid_json_is_rejected() -> None:
    client, _ = _client({f"{BASE}/surah": "<html>oops</html>"})
    with pytest.raises(QuranApiError):
        client.list_surahs()


def test_shape_mismatch_is_rejected() -> None:
    payload = _surah_payload(112, ["a"])
    del payload["data"]["ayahs"]
    client, _ = _client({f"{BASE}/surah/112": payload})
    with pytest.raises(QuranApiError):
        client.fetch_surah(112)


def test_list_surahs_parses_summaries() -> None:
    client, _ = _client(
        {
            f"{BASE}/surah": {
                "code": 200,
                "data": [
                    {
                        "number": 1,
                        "name": "سُورَةُ ٱلْفَاتِحَةِ",
                        "englishName": "Al-Faatiha",
                        "englishNameTranslation": "The Opening",
                        "numberOfAyahs": 7,
                        "revelationType": "Meccan",
                    }
                ],
            }
        }
    )
    surahs = client.list_surahs()
    assert surahs[0].display_name == "1. Al-Faatiha (The Opening)"
    assert surahs[0].ayah_count == 7


def test_out_of_range_targets_never_hit_network() -> None:
    client, http = _client({})
    with pytest.raises(ValueError):
        client.fetch_surah(115)
    with pytest.raises(ValueError):
        client.fetch_pair(ContentTarget(1, 0), "en.sahih")
    assert http.requested == []


def test_parse_target_accepts_surah_and_ayah_references() -> None:
    assert parse_target("2") == ContentTarget(2)
    assert parse_target(" 2:255 ") == ContentTarget(2, 255)
    with pytest.raises(ValueError):
        parse_target("two")
    with pytest.raises(ValueError):
        parse_target("0:1")


def test_audio_url_fills_template() -> None:
    template = "https://cdn.islamic.network/quran/audio/{reciter}/{surah}/{ayah}"
    assert audio_url(template, "ar.alafasy", 1, 7) == (
        "https://cdn.islamic.network/quran/audio/ar.alafasy/1/7"
    )
