from __future__ import annotations

import argparse
import logging
import socket
import sys
from importlib import metadata
from pathlib import Path

import tomllib
import uvicorn
from rich.console import Console
from rich.text import Text

from .api import (
    DEFAULT_API_BASE,
    DEFAULT_AUDIO_URL_TEMPLATE,
    AlQuranClient,
    parse_target,
)
from .catalog import DEFAULT_TRANSLATION, TRANSLATIONS, entry_ids
from .errors import ReaderError
from .logging_utils import build_uvicorn_log_config, configure_cli_logging
from .render import RenderedView, render_pair
from .web import WebConfig, create_app, default_prefs_path

logger = logging.getLogger(__name__)


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - defensive
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("tilawa")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"tilawa {__version__}",
    )


def _add_api_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--api-base",
        default=DEFAULT_API_BASE,
        help=f"Base URL of the Quran API (default: {DEFAULT_API_BASE}).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for each API request (default: wait indefinitely).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging (API requests, discarded responses).",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Read the Quran with translations and recitations. Use `tilawa web` to serve the reader.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "command",
        nargs="?",
        choices=["web", "read"],
        help="'web' serves the browser reader; 'read' prints a surah or ayah in the terminal.",
    )
    return ap


def build_web_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Serve the browser-based Quran reader.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host interface for the web server (default: 0.0.0.0).",
    )
    ap.add_argument(
        "--port",
        type=int,
        default=2114,
        help="Port for the web server (default: 2114).",
    )
    ap.add_argument(
        "--audio-url-template",
        default=DEFAULT_AUDIO_URL_TEMPLATE,
        help="Recitation URL with {reciter}, {surah} and {ayah} placeholders.",
    )
    ap.add_argument(
        "--prefs",
        help="Preferences file (default: $TILAWA_PREFS or ~/.config/tilawa/preferences.json).",
    )
    _add_api_flags(ap)
    return ap


def build_read_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Print a surah or a single ayah with its translation.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "reference",
        help="Surah number (e.g. 1) or surah:ayah (e.g. 2:255).",
    )
    ap.add_argument(
        "-t",
        "--translation",
        default=DEFAULT_TRANSLATION,
        help=(
            f"Translation edition (default: {DEFAULT_TRANSLATION}). "
            f"Known: {', '.join(entry_ids(TRANSLATIONS))}."
        ),
    )
    _add_api_flags(ap)
    return ap


def print_view(console: Console, view: RenderedView) -> None:
    console.rule(Text(view.title, style="bold green"))
    for subtitle in view.subtitles:
        console.print(Text(subtitle, style="dim"), justify="center")
    if view.message:
        console.print(view.message)
    if view.original_lines:
        console.print()
        for line in view.original_lines:
            console.print(Text.assemble((f"{line.number}. ", "bold cyan"), line.text), justify="right")
    if view.translation_lines:
        console.print()
        for line in view.translation_lines:
            console.print(Text.assemble((f"{line.number}. ", "bold cyan"), line.text))


def _run_read(args: argparse.Namespace) -> int:
    configure_cli_logging(bool(getattr(args, "debug", False)))
    try:
        target = parse_target(args.reference)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    console = Console()
    client = AlQuranClient(args.api_base, args.timeout)
    try:
        pair = client.fetch_pair(target, args.translation)
        view = render_pair(pair)
    except ReaderError as exc:
        logger.error("Error loading %s: %s", target.describe(), exc)
        console.print(Text(f"Error loading {target.describe()}: {exc}", style="red"))
        return 1
    finally:
        client.close()
    print_view(console, view)
    return 0


def _run_web(args: argparse.Namespace) -> None:
    prefs_path = Path(args.prefs).expanduser().resolve() if args.prefs else default_prefs_path()
    config = WebConfig(
        api_base=args.api_base,
        audio_url_template=args.audio_url_template,
        prefs_path=prefs_path,
        timeout=args.timeout,
    )
    app = create_app(config)
    public_ip = _resolve_local_ip(args.host)
    url = f"http://{public_ip}:{args.port}/"
    print(f"Serving tilawa reader (API: {config.api_base})")
    print(f"Preferences: {prefs_path}")
    print(f"Web URL: {url}")
    print("Press Ctrl+C to stop.\n")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_config=build_uvicorn_log_config(bool(args.debug)),
        log_level="debug" if args.debug else "info",
    )


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "web":
        web_args = build_web_parser().parse_args(argv[1:])
        _run_web(web_args)
        return 0
    if argv and argv[0] == "read":
        read_args = build_read_parser().parse_args(argv[1:])
        return _run_read(read_args)

    parser = build_parser()
    parser.parse_args(argv)
    parser.print_help()
    return 2


def _resolve_local_ip(host: str) -> str:
    if host not in {"", "0.0.0.0"}:
        return host
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            return sock.getsockname()[0]
    except OSError:
        return "127.0.0.1"


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
