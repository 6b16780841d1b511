"""Cursor and scroll state of a list screen driven by controller buttons."""

from __future__ import annotations

import enum

from .layout import SCREEN_ROWS


class Key(enum.Enum):
    """A controller button press."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    A = "a"
    B = "b"
    ONE = "one"
    HOME = "home"


class Action(enum.IntEnum):
    """What a key press asks the screen to do."""

    QUIT = -1
    NONE = 0
    SELECT = 1
    BACK = 2
    SETTINGS = 3
    DOWN = 4
    UP = 5


class Pager:
    """Selected row and first visible row of a list of ``limit`` entries.

    With ``noscroll`` the list is a text page: up and down scroll the view by
    a row, and left and right do the same instead of turning whole pages.
    """

    def __init__(self, limit: int, noscroll: bool = False) -> None:
        self.limit = limit
        self.noscroll = noscroll
        self.index = 0
        self.offset = 0

    def visible_count(self) -> int:
        """Number of rows drawn on one screen."""
        return min(SCREEN_ROWS, self.limit)

    def visible_range(self) -> range:
        """Entry indices drawn on the current screen."""
        return range(self.offset, self.offset + self.visible_count())

    def handle(self, key: Key) -> Action:
        """Apply a key press to the position and report the resulting action."""
        step = min(SCREEN_ROWS, self.limit - self.offset)
        max_offset = max(0, self.limit - step)
        end = self.offset + step

        if key is Key.DOWN or (self.noscroll and key is Key.RIGHT):
            self.index += 1
            if self.noscroll:
                self.index = end
            if self.index >= end:
                self.offset += 1
                if self.offset > max_offset:
                    self.offset -= 1
            if self.index >= self.limit:
                self.index -= 1
            return Action.DOWN

        if key is Key.UP or (self.noscroll and key is Key.LEFT):
            self.index -= 1
            if self.noscroll:
                self.index = self.offset - 1
            if self.index < self.offset:
                self.offset -= 1
                if self.offset < 0:
                    self.offset += 1
            if self.index < 0:
                self.index += 1
            return Action.UP

        if key is Key.LEFT:
            self.index = max(0, self.index - step)
            self.offset = max(0, self.offset - step)
            return Action.NONE

        if key is Key.RIGHT:
            self.index += step
            self.offset += step
            if self.index >= self.limit:
                self.index = self.limit - 1
            if self.offset > max_offset:
                self.offset = max_offset
            return Action.NONE

        return {
            Key.HOME: Action.QUIT,
            Key.A: Action.SELECT,
            Key.B: Action.BACK,
            Key.ONE: Action.SETTINGS,
        }[key]