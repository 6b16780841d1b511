"""Text building blocks for the shop's fixed-width console screens."""

from __future__ import annotations

import enum
import time
from collections.abc import Mapping
from typing import Any

VERSION = "0.2"
APPS_DIR = "/apps/libreshop"

WIDTH = 77
MARGIN_X = 3
MARGIN = " " * MARGIN_X
MARGIN_Y = 2
SCREEN_ROWS = 25 - MARGIN_Y * 2
WRAP_WIDTH = WIDTH - MARGIN_X * 2
PROGRESS_WIDTH = WRAP_WIDTH - 4

LINE = "=" * WIDTH
BLANK = " " * WIDTH

FRAME_EDGE = MARGIN + "+" + "-" * (WIDTH - MARGIN_X * 2 - 2) + "+" + MARGIN
FRAME_SIDE = MARGIN + "|" + " " * (WIDTH - MARGIN_X * 2 - 2) + "|" + MARGIN
FRAME_DOWNLOADING = (MARGIN + "  (1/3) Downloading...").ljust(WIDTH - MARGIN_X - 4) + "0%  " + MARGIN
FRAME_EXTRACTING = (MARGIN + "  (2/3) Extracting...").ljust(WIDTH - MARGIN_X - 4) + "0%  " + MARGIN
FRAME_INITIALIZING = (
    (MARGIN + "  Initializing extraction...").ljust(WIDTH - MARGIN_X - 4) + "0%  " + MARGIN
)

_BLUE_BACKGROUND = "\x1b[44m"
_BLACK_BACKGROUND = "\x1b[40m"
_HEADER_ROW = " " * 75
_HEADER_PAD = 59

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class LogKind(enum.IntEnum):
    """Marker shown in front of a start-up log message."""

    INFO = 0
    OK = 1
    FAIL = 2
    ERROR = 3


_LOG_PREFIXES = {
    LogKind.OK: "\x1b[34m[\x1b[32mOK\x1b[34m]",
    LogKind.FAIL: "\x1b[34m[\x1b[31m--\x1b[34m]",
    LogKind.ERROR: "\x1b[31m!!\x1b[34m]",
}


def header(version: str) -> str:
    """Return the coloured banner printed at start-up."""
    pad = _HEADER_PAD - len(version)
    spaces = " " * (pad if pad >= 0 else _HEADER_PAD)
    return (
        _BLUE_BACKGROUND
        + _HEADER_ROW
        + "\n"
        + f"     LibreShop v{version}{spaces}\n"
        + _HEADER_ROW
        + "\n"
        + _BLACK_BACKGROUND
        + "\n"
    )


def log_line(kind: LogKind | int, message: str) -> str:
    """Return a start-up log message with its status marker."""
    try:
        prefix = _LOG_PREFIXES.get(LogKind(kind), "    ")
    except ValueError:
        prefix = "    "
    return f"{prefix} \x1b[37m{message}"


def topbar(message: str) -> str:
    """Return the title bar drawn at the top of every screen."""
    spaces = max(0, WIDTH - MARGIN_X * 2 - 11 - 2 - len(message) - len(VERSION))
    return "\n" * MARGIN_Y + f"{MARGIN}{message} {' ' * spaces} LibreShop v{VERSION}\n{LINE}"


def bottombar(limit: int, offset: int, shown: int, hint: str, noscroll: bool) -> str:
    """Return the status bar, preceded by the newlines that push it down.

    ``shown`` is the row index of the last row already drawn.
    """
    padding = "\n" * max(0, SCREEN_ROWS - 1 - shown)
    if noscroll:
        status = ""
    else:
        start = offset + 1
        end = offset + min(SCREEN_ROWS, limit)
        status = f"showing {start}-{end} of {limit}"
    spaces = max(0, WIDTH - MARGIN_X * 2 - len(status) - len(hint))
    return f"{padding}{LINE}{MARGIN}{status}{' ' * spaces}{hint}"


def cursor(current: int, selected: int) -> str:
    """Return the left margin of a list row, marked when it is selected."""
    if current == selected:
        return MARGIN[: MARGIN_X - 2] + ">" + MARGIN[MARGIN_X - 1 :]
    return MARGIN


def progress_bar(percent: int, line: int) -> str:
    """Return the escape sequence that draws a progress bar and its percentage."""
    bars = int(percent * PROGRESS_WIDTH / 100)
    bar = ("#" * max(0, bars))[:PROGRESS_WIDTH].ljust(PROGRESS_WIDTH)
    digits = str(percent)
    return (
        f"\x1b[{line};{MARGIN_X + 2}H{bar}\x1b[2B\x1b[4D"
        + " " * max(0, 3 - len(digits))
        + digits
    )


def wrap_description(text: str) -> list[str]:
    """Wrap text into full-width rows, honouring line breaks and expanding tabs."""
    rows = []
    start = 0
    length = len(text)
    while start < length:
        stop = start
        while stop < start + WRAP_WIDTH and stop < length and text[stop] != "\n":
            stop += 1
        chunk = text[start:stop].replace("\t", " ")
        rows.append(MARGIN + chunk.ljust(WRAP_WIDTH) + MARGIN)
        start = stop + (1 if stop < length and text[stop] == "\n" else 0)
    return rows


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _timestamp(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _release_date(timestamp: int) -> str:
    moment = time.gmtime(timestamp)
    return f"{moment.tm_mday:02d} {_MONTHS[moment.tm_mon - 1]} {moment.tm_year}"


def app_info_lines(app: Mapping[str, Any]) -> list[str]:
    """Return the full-width rows of an application's detail page."""
    fields = (
        (1, f"{MARGIN}App name: {_text(app.get('name'))}"),
        (1, f"{MARGIN}App version: {_text(app.get('version'))}"),
        (1, f"{MARGIN}Created by {_text(app.get('author'))}"),
        (2, f"{MARGIN}Released on {_release_date(_timestamp(app.get('release_date')))}"),
    )
    page = ""
    end = 0
    count = 0
    for rows, content in fields:
        page += content
        end += WIDTH * rows
        page = page.ljust(end)
        count += rows

    description = app.get("description")
    if isinstance(description, Mapping):
        wrapped = wrap_description(_text(description.get("long")))
        page += "".join(wrapped)
        count += len(wrapped)

    return [page[row * WIDTH : (row + 1) * WIDTH].ljust(WIDTH) for row in range(count)]