"""Read-only JSON preferences.

Stores rendering style, tab width, colour and gutter preferences.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .document import DEFAULT_TAB_WIDTH
from .render import DEFAULT_STYLE
from .viewer import DEFAULT_CHROME_ROWS

logger = logging.getLogger(__name__)

APP_NAME = "lazydiff"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

MAX_TAB_WIDTH = 16
MAX_CHROME_ROWS = 10


@dataclass(frozen=True)
class ViewerSettings:
    style: str = DEFAULT_STYLE
    tab_width: int = DEFAULT_TAB_WIDTH
    no_color: bool = False
    line_numbers: bool = False
    chrome_rows: int = DEFAULT_CHROME_ROWS


def load_config() -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _bounded_int(value: object, default: int, low: int, high: int) -> int:
    """Accept plain ints inside ``[low, high]``; booleans and others fall back."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    if value < low or value > high:
        return default
    return value


def _bool(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _style(value: object) -> str:
    if not isinstance(value, str):
        return DEFAULT_STYLE
    stripped = value.strip()
    return stripped if stripped else DEFAULT_STYLE


def load_settings() -> ViewerSettings:
    """Return validated settings, with defaults for anything missing or invalid."""
    data = load_config()
    return ViewerSettings(
        style=_style(data.get("style")),
        tab_width=_bounded_int(data.get("tab_width"), DEFAULT_TAB_WIDTH, 1, MAX_TAB_WIDTH),
        no_color=_bool(data.get("no_color"), False),
        line_numbers=_bool(data.get("line_numbers"), False),
        chrome_rows=_bounded_int(data.get("chrome_rows"), DEFAULT_CHROME_ROWS, 1, MAX_CHROME_ROWS),
    )
