from __future__ import annotations

from urllib.parse import quote

FAVICON_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 64 64" role="img" aria-label="tilawa icon">
  <rect width="64" height="64" rx="14" ry="14" fill="#0f3d2e" />
  <rect x="2" y="2" width="60" height="60" rx="12" ry="12" fill="none" stroke="#d4af37" stroke-width="2" />
  <text x="32" y="44" text-anchor="middle" font-family="'Amiri', 'Scheherazade New', serif"
        font-size="36" font-weight="700" fill="#f5f1e3">ق</text>
</svg>"""


def favicon_data_url() -> str:
    return "data:image/svg+xml," + quote(FAVICON_SVG)


TILAWA_FAVICON_URL = favicon_data_url()


__all__ = ["FAVICON_SVG", "TILAWA_FAVICON_URL", "favicon_data_url"]
