"""Locate the Next.js ``__NEXT_DATA__`` document in a rendered page."""

from __future__ import annotations

import json
from logging import getLogger
from typing import Final

from bs4 import BeautifulSoup

log = getLogger(__name__)

NEXT_DATA_SCRIPT_ID: Final[str] = "__NEXT_DATA__"


def extract_next_data(html: str) -> dict[str, object] | None:
    """Return the parsed ``__NEXT_DATA__`` JSON of ``html``, or ``None`` if unavailable."""

    soup = BeautifulSoup(html, "lxml")
    tag = soup.find("script", id=NEXT_DATA_SCRIPT_ID)
    if tag is None or not tag.string:
        log.info("%s not found", NEXT_DATA_SCRIPT_ID)
        return None
    try:
        data = json.loads(tag.string)
    except json.JSONDecodeError as exc:
        log.warning("Failed to parse %s: %s", NEXT_DATA_SCRIPT_ID, exc)
        return None
    if not isinstance(data, dict):
        return None
    return data


def load_page_document(text: str) -> dict[str, object] | None:
    """Accept either a full HTML page or the bare ``__NEXT_DATA__`` JSON."""

    if text.lstrip().startswith("{"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            log.warning("Failed to parse page state JSON: %s", exc)
            return None
        return data if isinstance(data, dict) else None
    return extract_next_data(text)
