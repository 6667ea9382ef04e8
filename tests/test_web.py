from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest
from fastapi import HTTPException

from conftest import FakeClient
import tilawa.web as web
from tilawa.api import AlQuranClient
from tilawa.preferences import MemoryStore
from tilawa.web import WebConfig, create_app, default_prefs_path


def _find_route(app, path: str, method: str):
    method = method.upper()
    for route in app.router.routes:
        if getattr(route, "path", None) == path and method in getattr(route, "methods", set()):
            return route.endpoint
    raise RuntimeError(f"Route {method} {path} not found")


def _payload(response) -> dict:
    assert response.status_code == 200
    return json.loads(response.body)


def _app(client: FakeClient, store: MemoryStore | None = None):
    return create_app(WebConfig(), client=client, store=store or MemoryStore())


def test_index_serves_reader_page(fake_client: FakeClient) -> None:
    app = _app(fake_client)
    html = _find_route(app, "/", "GET")()
    assert "hamburgerMenu" in html
    assert "__TILAWA_FAVICON__" not in html
    assert "data:image/svg+xml," in html


def test_state_reports_welcome_view(fake_client: FakeClient) -> None:
    app = _app(fake_client)
    payload = _payload(_find_route(app, "/api/state", "GET")())
    assert payload["view"]["title"] == "القرآن الكريم"
    assert payload["audio"]["playVisible"] is True


def test_menu_select_flow_loads_surah(fake_client: FakeClient) -> None:
    app = _app(fake_client)
    menu = _find_route(app, "/api/menu/{action}", "POST")
    select = _find_route(app, "/api/modal/{modal_id}/select", "POST")

    opened = _payload(menu("surah"))
    modal = opened["modal"]
    assert modal["title"] == "Select Surah"

    loaded = _payload(select(modal["id"], item="1"))
    assert loaded["modal"] is None
    assert loaded["selection"]["surah"] == 1
    assert len(loaded["view"]["original"]) == 7


def test_unknown_menu_action_is_404(fake_client: FakeClient) -> None:
    app = _app(fake_client)
    menu = _find_route(app, "/api/menu/{action}", "POST")
    with pytest.raises(HTTPException) as excinfo:
        menu("shutdown")
    assert excinfo.value.status_code == 404


def test_replaced_modal_is_409(fake_client: FakeClient) -> None:
    app = _app(fake_client)
    menu = _find_route(app, "/api/menu/{action}", "POST")
    select = _find_route(app, "/api/modal/{modal_id}/select", "POST")
    first = _payload(menu("reciter"))["modal"]
    second = _payload(menu("translation"))["modal"]
    assert second["title"] == "Select Translation"

    with pytest.raises(HTTPException) as excinfo:
        select(first["id"], item="ar.alafasy")
    assert excinfo.value.status_code == 409

    with pytest.raises(HTTPException) as excinfo:
        select(second["id"], item="xx.none")
    assert excinfo.value.status_code == 404


def test_close_modal_discards_selection(fake_client: FakeClient) -> None:
    app = _app(fake_client)
    menu = _find_route(app, "/api/menu/{action}", "POST")
    close = _find_route(app, "/api/modal/{modal_id}/close", "POST")
    modal = _payload(menu("translation"))["modal"]
    payload = _payload(close(modal["id"]))
    assert payload["modal"] is None
    assert payload["selection"]["translation"] == "en.sahih"


def test_dark_mode_toggle_updates_style(fake_client: FakeClient) -> None:
    store = MemoryStore()
    app = _app(fake_client, store)
    menu = _find_route(app, "/api/menu/{action}", "POST")
    payload = _payload(menu("dark-mode"))
    assert payload["style"]["bodyClasses"] == ["dark-mode"]
    assert store.get_item("darkMode") == "true"


def test_play_without_ayah_returns_notice(fake_client: FakeClient) -> None:
    app = _app(fake_client)
    play = _find_route(app, "/api/audio/play", "POST")
    payload = _payload(play())
    assert payload["audio"]["state"] == "idle"
    assert payload["notices"] == ["Please select a specific ayah to play audio"]


def test_audio_lifecycle_routes(fake_client: FakeClient) -> None:
    app = _app(fake_client)
    app.state.session.load_ayah(1, 2)
    play = _find_route(app, "/api/audio/play", "POST")
    pause = _find_route(app, "/api/audio/pause", "POST")
    ended = _find_route(app, "/api/audio/{stream_id}/ended", "POST")
    error = _find_route(app, "/api/audio/{stream_id}/error", "POST")

    started = _payload(play())["audio"]
    assert started["state"] == "playing"
    assert started["stream"]["url"].endswith("/ar.alafasy/1/2")
    assert _payload(pause())["audio"]["state"] == "paused"
    assert _payload(play())["audio"]["stream"]["id"] == started["stream"]["id"]
    assert _payload(ended(started["stream"]["id"]))["audio"]["state"] == "idle"

    restarted = _payload(play())["audio"]
    failed = _payload(error(restarted["stream"]["id"], message="media error"))
    assert failed["audio"]["state"] == "idle"
    assert failed["notices"] == ["Error playing audio. Please try again."]


def test_default_prefs_path_honours_env(monkeypatch, tmp_path: Path) -> None:
    target = tmp_path / "prefs.json"
    monkeypatch.setenv("TILAWA_PREFS", str(target))
    assert default_prefs_path() == target
    monkeypatch.delenv("TILAWA_PREFS")
    assert default_prefs_path().name == "preferences.json"


def test_prefs_file_is_used_when_configured(fake_client: FakeClient, tmp_path: Path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text(json.dumps({"fontSize": "large"}), encoding="utf-8")
    app = create_app(WebConfig(prefs_path=path), client=fake_client)
    payload = _payload(_find_route(app, "/api/state", "GET")())
    assert payload["preferences"]["fontSize"] == "large"


class _TrackingClient(AlQuranClient):
    instances: list["_TrackingClient"] = []

    def __init__(self, base_url: str, timeout: float | None = None) -> None:
        super().__init__(base_url, timeout)
        self.closed = False
        _TrackingClient.instances.append(self)

    def close(self) -> None:
        self.closed = True
        super().close()


def test_app_builds_its_own_client_and_closes_it_on_shutdown(monkeypatch) -> None:
    _TrackingClient.instances = []
    monkeypatch.setattr(web, "AlQuranClient", _TrackingClient)
    app = create_app(WebConfig(api_base="https://api.test/v1", timeout=3.0))

    client = _TrackingClient.instances[0]
    assert app.state.session.client is client
    assert client.closed is False

    async def _cycle() -> None:
        async with app.router.lifespan_context(app):
            assert client.closed is False

    asyncio.run(_cycle())
    assert client.closed is True


def test_injected_client_is_left_open(fake_client: FakeClient) -> None:
    app = _app(fake_client)

    async def _cycle() -> None:
        async with app.router.lifespan_context(app):
            pass

    asyncio.run(_cycle())
    assert app.state.session.client is fake_client


def test_error_report_after_pause_is_ignored(fake_client: FakeClient) -> None:
    app = _app(fake_client)
    app.state.session.load_ayah(1, 1)
    play = _find_route(app, "/api/audio/play", "POST")
    pause = _find_route(app, "/api/audio/pause", "POST")
    error = _find_route(app, "/api/audio/{stream_id}/error", "POST")

    stream_id = _payload(play())["audio"]["stream"]["id"]
    _payload(pause())
    payload = _payload(error(stream_id, message="AbortError: The play() request was interrupted"))
    assert payload["audio"]["state"] == "paused"
    assert payload["notices"] == []
