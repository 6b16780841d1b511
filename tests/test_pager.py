import itertools

import pytest

from libreshop.layout import SCREEN_ROWS
from libreshop.pager import Action, Key, Pager


@pytest.mark.parametrize(
    "key, action",
    [
        (Key.HOME, Action.QUIT),
        (Key.A, Action.SELECT),
        (Key.B, Action.BACK),
        (Key.ONE, Action.SETTINGS),
    ],
)
def test_buttons_map_to_actions_without_moving(key, action):
    pager = Pager(30)
    pager.handle(Key.DOWN)
    assert pager.handle(key) is action
    assert (pager.index, pager.offset) == (1, 0)


def test_action_values_match_return_codes():
    pager = Pager(30)
    buttons = [pager.handle(key) for key in (Key.HOME, Key.A, Key.B, Key.ONE)]
    assert buttons == [-1, 1, 2, 3]
    assert (pager.handle(Key.DOWN), pager.handle(Key.UP)) == (4, 5)


def test_down_moves_cursor_then_scrolls():
    pager = Pager(30)
    for _ in range(SCREEN_ROWS - 1):
        assert pager.handle(Key.DOWN) is Action.DOWN
    assert (pager.index, pager.offset) == (SCREEN_ROWS - 1, 0)
    pager.handle(Key.DOWN)
    assert (pager.index, pager.offset) == (SCREEN_ROWS, 1)


def test_down_stops_at_last_entry():
    pager = Pager(5)
    for _ in range(20):
        pager.handle(Key.DOWN)
    assert (pager.index, pager.offset) == (4, 0)


def test_up_stops_at_first_entry():
    pager = Pager(5)
    assert pager.handle(Key.UP) is Action.UP
    assert (pager.index, pager.offset) == (0, 0)


def test_right_and_left_turn_pages():
    pager = Pager(30)
    assert pager.handle(Key.RIGHT) is Action.NONE
    assert pager.index == SCREEN_ROWS
    assert pager.offset == 30 - SCREEN_ROWS
    pager.handle(Key.RIGHT)
    assert pager.index == 29
    pager.handle(Key.LEFT)
    assert pager.offset == 0
    assert pager.index == 29 - SCREEN_ROWS
    pager.handle(Key.LEFT)
    assert (pager.index, pager.offset) == (0, 0)


def test_scroll_mode_keeps_cursor_on_screen():
    keys = [Key.DOWN, Key.DOWN, Key.RIGHT, Key.UP, Key.LEFT, Key.DOWN, Key.RIGHT, Key.RIGHT, Key.UP]
    for limit in (1, 7, 21, 22, 50):
        pager = Pager(limit)
        for key in itertools.islice(itertools.cycle(keys), 300):
            pager.handle(key)
            assert 0 <= pager.index < limit
            assert 0 <= pager.offset <= pager.index < pager.offset + SCREEN_ROWS


def test_noscroll_scrolls_view_by_rows():
    pager = Pager(30, noscroll=True)
    for _ in range(40):
        pager.handle(Key.DOWN)
    assert pager.offset == 30 - SCREEN_ROWS
    for _ in range(40):
        pager.handle(Key.UP)
    assert pager.offset == 0


def test_noscroll_left_right_behave_like_up_down():
    pager = Pager(30, noscroll=True)
    assert pager.handle(Key.RIGHT) is Action.DOWN
    assert pager.offset == 1
    assert pager.handle(Key.LEFT) is Action.UP
    assert pager.offset == 0


def test_noscroll_short_page_does_not_move():
    pager = Pager(5, noscroll=True)
    for _ in range(10):
        pager.handle(Key.DOWN)
    assert pager.offset == 0
    assert list(pager.visible_range()) == [0, 1, 2, 3, 4]


def test_visible_range_follows_offset():
    pager = Pager(30)
    assert pager.visible_count() == SCREEN_ROWS
    pager.handle(Key.RIGHT)
    assert pager.visible_range() == range(pager.offset, pager.offset + SCREEN_ROWS)
    assert pager.visible_range()[-1] == 29


def test_empty_list_stays_put():
    pager = Pager(0)
    pager.handle(Key.DOWN)
    pager.handle(Key.RIGHT)
    assert pager.offset == 0
    assert pager.visible_count() == 0
    assert list(pager.visible_range()) == []