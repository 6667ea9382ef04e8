from __future__ import annotations

import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse

from .api import DEFAULT_API_BASE, DEFAULT_AUDIO_URL_TEMPLATE, AlQuranClient
from .audio import AudioController
from .modal import ModalClosedError
from .preferences import JsonFileStore, KeyValueStore, MemoryStore, PreferenceStore
from .session import ContentClient, ReaderSession
from .web_assets import TILAWA_FAVICON_URL

PREFS_ENV_VAR = "TILAWA_PREFS"


def default_prefs_path() -> Path:
    override = os.environ.get(PREFS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "tilawa" / "preferences.json"


@dataclass(slots=True)
class WebConfig:
    api_base: str = DEFAULT_API_BASE
    audio_url_template: str = DEFAULT_AUDIO_URL_TEMPLATE
    prefs_path: Path | None = None
    timeout: float | None = None


INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>tilawa</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <link rel="icon" href="__TILAWA_FAVICON__">
  <link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/font-awesome/4.7.0/css/font-awesome.min.css">
  <style>
    :root {
      --font-size: 1.2em;
      --arabic-font: 'Uthmanic Script';
      --bg: #f7f4ec;
      --panel: #ffffff;
      --text: #1f2a24;
      --muted: #6b7a70;
      --accent: #0f6b4a;
      --radius: 14px;
    }
    body {
      margin: 0;
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
      background: var(--bg);
      color: var(--text);
    }
    body.dark-mode {
      --bg: #0d1411;
      --panel: #16201b;
      --text: #eef3ef;
      --muted: #93a59a;
      --accent: #3fbf8a;
    }
    header {
      display: flex;
      align-items: center;
      gap: 1rem;
      padding: 1rem 1.4rem;
    }
    header h1 {
      margin: 0;
      font-size: 1.3rem;
    }
    button {
      font: inherit;
      color: inherit;
      background: none;
      border: none;
      cursor: pointer;
    }
    .hamburger-menu {
      position: fixed;
      top: 0;
      left: 0;
      bottom: 0;
      width: 280px;
      transform: translateX(-100%);
      transition: transform 0.3s ease;
      background: var(--panel);
      box-shadow: 0 0 24px rgba(0,0,0,0.25);
      z-index: 30;
      padding: 1rem;
    }
    .hamburger-menu.open {
      transform: translateX(0);
    }
    .hamburger-menu ul {
      list-style: none;
      margin: 1rem 0 0;
      padding: 0;
    }
    .hamburger-menu li a {
      display: block;
      padding: 0.7rem 0.4rem;
      color: inherit;
      text-decoration: none;
    }
    .menu-overlay {
      position: fixed;
      inset: 0;
      background: rgba(0,0,0,0);
      transition: background 0.3s ease;
      z-index: 20;
    }
    .menu-overlay.active {
      background: rgba(0,0,0,0.4);
    }
    main {
      max-width: 860px;
      margin: 0 auto;
      padding: 0 1.4rem 3rem;
    }
    .surah-title {
      font-family: var(--arabic-font), serif;
      text-align: center;
      font-size: 2rem;
    }
    .surah-subtitle {
      text-align: center;
      color: var(--muted);
      margin: 0.2rem 0;
    }
    .arabic-text {
      font-family: var(--arabic-font), serif;
      font-size: calc(var(--font-size) * 1.5);
      direction: rtl;
      line-height: 2.2;
      background: var(--panel);
      border-radius: var(--radius);
      padding: 1.2rem;
      margin: 1rem 0;
    }
    .translation-text {
      font-size: var(--font-size);
      line-height: 1.6;
      background: var(--panel);
      border-radius: var(--radius);
      padding: 1.2rem;
    }
    .translation-text p {
      margin: 0 0 1rem;
    }
    .ayah-number {
      color: var(--accent);
      font-weight: 600;
      margin: 0 0.3rem;
    }
    .welcome-text {
      text-align: center;
      color: var(--muted);
    }
    #controls {
      display: none;
      text-align: center;
      margin: 1rem 0;
    }
    #controls button {
      padding: 0.6rem 1.2rem;
      border-radius: 999px;
      background: var(--accent);
      color: #fff;
    }
    .selection-modal {
      position: fixed;
      inset: 0;
      background: rgba(0,0,0,0.45);
      display: flex;
      align-items: center;
      justify-content: center;
      z-index: 40;
    }
    .modal-content {
      background: var(--panel);
      border-radius: var(--radius);
      width: min(520px, 92vw);
      max-height: 80vh;
      overflow-y: auto;
      padding: 1rem 1.2rem;
    }
    .modal-header {
      display: flex;
      justify-content: space-between;
      align-items: center;
    }
    .modal-title {
      margin: 0;
      font-size: 1.1rem;
    }
    .selection-list {
      list-style: none;
      padding: 0;
      margin: 0.8rem 0 0;
    }
    .selection-list li a {
      display: block;
      padding: 0.55rem 0.3rem;
      color: inherit;
      text-decoration: none;
      border-bottom: 1px solid rgba(127,127,127,0.15);
    }
    .selection-list .detail {
      float: right;
      color: var(--muted);
      font-family: var(--arabic-font), serif;
    }
    .about-content {
      white-space: pre-wrap;
      font-family: inherit;
    }
  </style>
</head>
<body>
  <header>
    <button id="hamburgerBtn" aria-label="Open menu"><i class="fa fa-bars"></i></button>
    <h1>tilawa</h1>
  </header>
  <nav id="hamburgerMenu" class="hamburger-menu">
    <button id="closeMenu" aria-label="Close menu"><i class="fa fa-times"></i></button>
    <ul>
      <li><a href="#" data-action="surah"><i class="fa fa-book"></i> Select Surah</a></li>
      <li><a href="#" data-action="ayah"><i class="fa fa-list-ol"></i> Select Ayah</a></li>
      <li><a href="#" data-action="reciter"><i class="fa fa-microphone"></i> Select Reciter</a></li>
      <li><a href="#" data-action="translation"><i class="fa fa-language"></i> Select Translation</a></li>
      <li><a href="#" data-action="dark-mode" id="darkMode"><i class="fa fa-moon-o"></i> Dark Mode</a></li>
      <li><a href="#" data-action="font-size"><i class="fa fa-text-height"></i> Font Size</a></li>
      <li><a href="#" data-action="arabic-font"><i class="fa fa-font"></i> Arabic Font</a></li>
      <li><a href="#" data-action="about"><i class="fa fa-info-circle"></i> About</a></li>
    </ul>
  </nav>
  <main>
    <section id="surahInfo"></section>
    <div id="controls">
      <button id="playBtn"><i class="fa fa-play"></i> Play</button>
      <button id="pauseBtn" style="display:none"><i class="fa fa-pause"></i> Pause</button>
    </div>
    <section id="quranText"></section>
  </main>
  <script>
    const hamburgerBtn = document.getElementById('hamburgerBtn');
    const hamburgerMenu = document.getElementById('hamburgerMenu');
    const closeMenuBtn = document.getElementById('closeMenu');
    const surahInfo = document.getElementById('surahInfo');
    const quranText = document.getElementById('quranText');
    const controls = document.getElementById('controls');
    const playBtn = document.getElementById('playBtn');
    const pauseBtn = document.getElementById('pauseBtn');
    const player = new Audio();
    let currentStreamId = null;

    async function readErrorResponse(response) {
      const text = await response.text();
      if (!text) return `HTTP ${response.status}`;
      try {
        const payload = JSON.parse(text);
        if (payload && typeof payload.detail === 'string') {
          return payload.detail;
        }
      } catch {
        // ignore parse errors
      }
      return text;
    }

    async function fetchJSON(url, options = {}) {
      const init = { cache: 'no-store', ...options };
      const res = await fetch(url, init);
      if (!res.ok) {
        throw new Error(await readErrorResponse(res));
      }
      return res.json();
    }

    async function act(url, body) {
      const init = { method: 'POST' };
      if (body !== undefined) {
        init.headers = { 'Content-Type': 'application/json' };
        init.body = JSON.stringify(body);
      }
      try {
        applySnapshot(await fetchJSON(url, init));
      } catch (error) {
        console.error('Request failed', url, error);
        alert(error.message || error);
      }
    }

    function openMenu() {
      hamburgerMenu.classList.add('open');
      if (document.getElementById('menuOverlay')) return;
      const overlay = document.createElement('div');
      overlay.className = 'menu-overlay';
      overlay.id = 'menuOverlay';
      document.body.appendChild(overlay);
      setTimeout(() => overlay.classList.add('active'), 10);
    }

    function closeMenu() {
      hamburgerMenu.classList.remove('open');
      const overlay = document.getElementById('menuOverlay');
      if (!overlay) return;
      overlay.classList.remove('active');
      setTimeout(() => overlay.remove(), 300);
    }

    hamburgerBtn.addEventListener('click', event => {
      event.preventDefault();
      openMenu();
    });
    closeMenuBtn.addEventListener('click', closeMenu);
    document.addEventListener('click', event => {
      if (event.target.classList.contains('menu-overlay')) {
        closeMenu();
      }
    });
    document.addEventListener('keydown', event => {
      if (event.key === 'Escape' && hamburgerMenu.classList.contains('open')) {
        closeMenu();
      }
    });
    hamburgerMenu.querySelectorAll('[data-action]').forEach(link => {
      link.addEventListener('click', event => {
        event.preventDefault();
        act(`/api/menu/${link.dataset.action}`);
      });
    });

    function applyStyle(style) {
      document.body.classList.toggle('dark-mode', Boolean(style.darkMode));
      Object.entries(style.cssVariables || {}).forEach(([name, value]) => {
        document.documentElement.style.setProperty(name, value);
      });
      const icon = document.querySelector('#darkMode i');
      if (icon) icon.className = `fa ${style.darkModeIcon}`;
    }

    function numberedSpan(line) {
      const span = document.createElement('span');
      span.className = 'ayah-number';
      span.textContent = `${line.number}.`;
      return span;
    }

    function renderView(view) {
      surahInfo.replaceChildren();
      const title = document.createElement('h1');
      title.className = 'surah-title';
      title.textContent = view.title;
      surahInfo.appendChild(title);
      view.subtitles.forEach(text => {
        const p = document.createElement('p');
        p.className = 'surah-subtitle';
        p.textContent = text;
        surahInfo.appendChild(p);
      });

      quranText.replaceChildren();
      if (view.message) {
        const welcome = document.createElement('p');
        welcome.className = 'welcome-text';
        welcome.textContent = view.message;
        quranText.appendChild(welcome);
      }
      if (view.original.length) {
        const arabic = document.createElement('div');
        arabic.className = 'arabic-text';
        view.original.forEach(line => {
          arabic.appendChild(numberedSpan(line));
          arabic.appendChild(document.createTextNode(` ${line.text} `));
        });
        quranText.appendChild(arabic);
      }
      if (view.translation.length) {
        const translation = document.createElement('div');
        translation.className = 'translation-text';
        view.translation.forEach(line => {
          const p = document.createElement('p');
          p.appendChild(numberedSpan(line));
          p.appendChild(document.createTextNode(` ${line.text}`));
          translation.appendChild(p);
        });
        quranText.appendChild(translation);
      }
      controls.style.display = view.controlsVisible ? 'block' : 'none';
    }

    function renderModal(modal) {
      const existing = document.querySelector('.selection-modal');
      if (existing) existing.remove();
      if (!modal) return;
      const root = document.createElement('div');
      root.className = 'selection-modal active';
      const content = document.createElement('div');
      content.className = 'modal-content';
      const header = document.createElement('div');
      header.className = 'modal-header';
      const title = document.createElement('h2');
      title.className = 'modal-title';
      title.textContent = modal.title;
      const closeBtn = document.createElement('button');
      closeBtn.className = 'close-modal';
      closeBtn.innerHTML = '<i class="fa fa-times"></i>';
      closeBtn.addEventListener('click', () => act(`/api/modal/${modal.id}/close`));
      header.append(title, closeBtn);
      content.appendChild(header);
      if (modal.message) {
        const about = document.createElement('pre');
        about.className = 'about-content';
        about.textContent = modal.message;
        content.appendChild(about);
      }
      const list = document.createElement('ul');
      list.className = 'selection-list';
      modal.items.forEach(item => {
        const li = document.createElement('li');
        const link = document.createElement('a');
        link.href = '#';
        link.textContent = item.name;
        if (item.detail) {
          const detail = document.createElement('span');
          detail.className = 'detail';
          detail.textContent = item.detail;
          link.appendChild(detail);
        }
        link.addEventListener('click', event => {
          event.preventDefault();
          act(`/api/modal/${modal.id}/select`, { item: item.id });
        });
        li.appendChild(link);
        list.appendChild(li);
      });
      content.appendChild(list);
      root.appendChild(content);
      document.body.appendChild(root);
    }

    function renderAudio(audio) {
      playBtn.style.display = audio.playVisible ? 'inline-block' : 'none';
      pauseBtn.style.display = audio.pauseVisible ? 'inline-block' : 'none';
      const stream = audio.stream;
      if (audio.state === 'playing' && stream) {
        if (stream.id !== currentStreamId) {
          player.pause();
          currentStreamId = stream.id;
          player.src = stream.url;
        }
        if (player.paused) {
          player.play().catch(error => {
            if (error.name === 'AbortError') return;
            console.error('Error playing audio', error);
            act(`/api/audio/${stream.id}/error`, { message: String(error) });
          });
        }
      } else if (!player.paused) {
        player.pause();
      }
    }

    player.addEventListener('ended', () => {
      if (currentStreamId) act(`/api/audio/${currentStreamId}/ended`);
    });
    player.addEventListener('error', () => {
      if (currentStreamId && player.src) {
        act(`/api/audio/${currentStreamId}/error`, { message: 'media error' });
      }
    });
    playBtn.addEventListener('click', () => act('/api/audio/play'));
    pauseBtn.addEventListener('click', () => act('/api/audio/pause'));

    function applySnapshot(snapshot) {
      applyStyle(snapshot.style);
      renderView(snapshot.view);
      renderModal(snapshot.modal);
      renderAudio(snapshot.audio);
      if (snapshot.notices.length) {
        setTimeout(() => snapshot.notices.forEach(message => alert(message)), 0);
      }
    }

    fetchJSON('/api/state')
      .then(applySnapshot)
      .catch(error => {
        console.error('Failed to load state', error);
        alert('Failed to load reader state.');
      });
  </script>
</body>
</html>
"""


def create_app(
    config: WebConfig,
    *,
    client: ContentClient | None = None,
    store: KeyValueStore | None = None,
) -> FastAPI:
    owns_client = client is None
    if client is None:
        client = AlQuranClient(config.api_base, config.timeout)
    if store is None:
        store = JsonFileStore(config.prefs_path) if config.prefs_path else MemoryStore()

    session = ReaderSession(
        client,
        PreferenceStore(store),
        audio=AudioController(config.audio_url_template),
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        try:
            yield
        finally:
            if owns_client and isinstance(client, AlQuranClient):
                client.close()

    app = FastAPI(title="tilawa", lifespan=lifespan)
    app.state.config = config
    app.state.session = session

    menu_actions: dict[str, Callable[[], object]] = {
        "surah": session.open_surah_menu,
        "ayah": session.open_ayah_menu,
        "reciter": session.open_reciter_menu,
        "translation": session.open_translation_menu,
        "dark-mode": session.toggle_dark_mode,
        "font-size": session.open_font_size_menu,
        "arabic-font": session.open_arabic_font_menu,
        "about": session.open_about,
    }

    def _snapshot() -> JSONResponse:
        return JSONResponse(session.snapshot())

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return INDEX_HTML.replace("__TILAWA_FAVICON__", TILAWA_FAVICON_URL)

    @app.get("/api/state")
    def api_state() -> JSONResponse:
        return _snapshot()

    @app.post("/api/menu/{action}")
    def api_menu(action: str) -> JSONResponse:
        handler = menu_actions.get(action)
        if handler is None:
            raise HTTPException(status_code=404, detail="Unknown menu action.")
        handler()
        return _snapshot()

    @app.post("/api/modal/{modal_id}/select")
    def api_modal_select(modal_id: str, item: str = Body(..., embed=True)) -> JSONResponse:
        try:
            session.choose(modal_id, str(item))
        except ModalClosedError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Item not found.") from exc
        return _snapshot()

    @app.post("/api/modal/{modal_id}/close")
    def api_modal_close(modal_id: str) -> JSONResponse:
        try:
            session.close_modal(modal_id)
        except ModalClosedError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _snapshot()

    @app.post("/api/audio/play")
    def api_audio_play() -> JSONResponse:
        session.play_audio()
        return _snapshot()

    @app.post("/api/audio/pause")
    def api_audio_pause() -> JSONResponse:
        session.pause_audio()
        return _snapshot()

    @app.post("/api/audio/{stream_id}/ended")
    def api_audio_ended(stream_id: str) -> JSONResponse:
        session.audio_ended(stream_id)
        return _snapshot()

    @app.post("/api/audio/{stream_id}/error")
    def api_audio_error(
        stream_id: str,
        message: str | None = Body(None, embed=True),
    ) -> JSONResponse:
        session.audio_failed(stream_id, message)
        return _snapshot()

    return app


__all__ = ["INDEX_HTML", "PREFS_ENV_VAR", "WebConfig", "create_app", "default_prefs_path"]
