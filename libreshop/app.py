"""The interactive shop: repository, category and app screens, and the entry point."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any, TextIO

from blessed import Terminal

from .installer import InstallError, install
from .layout import (
    APPS_DIR,
    BLANK,
    FRAME_DOWNLOADING,
    FRAME_EDGE,
    FRAME_EXTRACTING,
    FRAME_INITIALIZING,
    FRAME_SIDE,
    MARGIN,
    MARGIN_X,
    MARGIN_Y,
    SCREEN_ROWS,
    VERSION,
    WIDTH,
    LogKind,
    app_info_lines,
    bottombar,
    cursor,
    header,
    log_line,
    progress_bar,
    topbar,
)
from .pager import Action, Key, Pager
from .repository import (
    Repository,
    RepositoryError,
    ensure_apps_dir,
    load_config,
    sync_repository,
    user_agent,
)

CLEAR = "\x1b[2J"
DEFAULT_CONFIG = '{"repositories": []}\n'

_LIST_HINT = "A to engage, B for back, HOME (Start) to exit"
_REPOSITORY_HINT = "A to engage, 1 (X) for settings, HOME (Start) to exit"
_APP_HINT = "A to download, B for back, HOME (Start) to exit"
_SETTINGS_HINT = "B for back, HOME (Start) to exit"
_DOWNLOAD_HINT = "Please wait until the bars finish."

_KEY_NAMES = {
    "KEY_UP": Key.UP,
    "KEY_DOWN": Key.DOWN,
    "KEY_LEFT": Key.LEFT,
    "KEY_RIGHT": Key.RIGHT,
    "KEY_ENTER": Key.A,
    "KEY_ESCAPE": Key.B,
    "KEY_BACKSPACE": Key.B,
    "KEY_HOME": Key.HOME,
}
_KEY_CHARS = {
    "a": Key.A,
    "b": Key.B,
    "1": Key.ONE,
    "x": Key.ONE,
    "q": Key.HOME,
    "h": Key.HOME,
}


class _Exit(Exception):
    """Leave the shop with the given exit status."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _write(out: TextIO, text: str) -> None:
    out.write(text)
    flush = getattr(out, "flush", None)
    if flush is not None:
        flush()


def _wait_for_home(keys: Iterator[Key], out: TextIO, message: bool = True) -> None:
    """Block until HOME is pressed (or the keys run out)."""
    if message:
        _write(out, log_line(LogKind.INFO, "Press HOME (Start) to exit\n"))
    for key in keys:
        if key is Key.HOME:
            return


def _extraction_frame() -> str:
    rows = {
        0: FRAME_EDGE,
        1: FRAME_SIDE,
        2: FRAME_EDGE,
        3: FRAME_INITIALIZING,
        4: BLANK,
        5: FRAME_EDGE,
        6: FRAME_SIDE,
        7: FRAME_EDGE,
        8: FRAME_EXTRACTING,
    }
    return "\x1b[9;0H" + "".join(rows[row] for row in range(9))


class Shop:
    """Screens for browsing synchronised repositories and installing apps."""

    def __init__(
        self,
        repositories: Iterable[Repository],
        agent: str,
        keys: Iterable[Key],
        out: TextIO,
        apps_dir: str | Path = APPS_DIR,
        acknowledgements: str = "",
    ) -> None:
        self.repositories = list(repositories)
        self.agent = agent
        self._keys = iter(keys)
        self.out = out
        self.apps_dir = Path(apps_dir)
        self.acknowledgements = acknowledgements

    def _write(self, text: str) -> None:
        _write(self.out, text)

    def _next_key(self) -> Key:
        return next(self._keys, Key.HOME)

    def _act(self, pager: Pager) -> Action:
        action = pager.handle(self._next_key())
        if action is Action.QUIT:
            raise _Exit(0)
        return action

    def _draw_list(self, title: str, labels: list[str], pager: Pager, hint: str) -> None:
        parts = [CLEAR, topbar(title)]
        for row in pager.visible_range():
            if 0 <= row < len(labels):
                parts.append(f"{cursor(row, pager.index)}{labels[row]}\n")
        parts.append(bottombar(pager.limit, pager.offset, pager.visible_count() - 1, hint, False))
        self._write("".join(parts))

    def _draw_page(self, title: str, lines: list[str], pager: Pager, hint: str) -> None:
        shown = lines[pager.offset : pager.offset + pager.visible_count()]
        self._write(
            CLEAR
            + topbar(title)
            + "".join(shown)
            + bottombar(pager.limit, pager.offset, pager.visible_count() - 1, hint, False)
        )

    def run(self) -> int:
        """Run the repository picker until the user leaves; return the exit status."""
        try:
            self._pick_repository()
        except _Exit as leave:
            return leave.status
        return 0

    def _pick_repository(self) -> None:
        pager = Pager(len(self.repositories))
        straight_in = len(self.repositories) == 1
        while True:
            if straight_in:
                action = Action.SELECT
                straight_in = False
            else:
                labels = [f"{repo.provider}: {repo.name}" for repo in self.repositories]
                self._draw_list("Pick a repository", labels, pager, _REPOSITORY_HINT)
                action = self._act(pager)
            if action is Action.SELECT and self.repositories:
                self.browse_repository(self.repositories[pager.index])
            elif action is Action.SETTINGS:
                self.show_settings()

    def browse_repository(self, repository: Repository) -> None:
        """List a repository's categories until the user goes back."""
        categories = repository.categories
        labels = [_text(category.get("display_name")) for category in categories]
        pager = Pager(len(categories))
        title = f"Surfing {repository.name}"
        while True:
            self._draw_list(title, labels, pager, _LIST_HINT)
            action = self._act(pager)
            if action is Action.BACK:
                return
            if action is Action.SELECT and categories:
                self.browse_category(repository, categories[pager.index])

    def browse_category(self, repository: Repository, category: Mapping[str, Any]) -> None:
        """List the apps of one category until the user goes back."""
        apps = repository.apps(_text(category.get("name")))
        labels = [_text(app.get("name")) for app in apps]
        pager = Pager(len(apps))
        title = f"Surfing {repository.name} > {_text(category.get('display_name'))}"
        while True:
            self._draw_list(title, labels, pager, _LIST_HINT)
            action = self._act(pager)
            if action is Action.BACK:
                return
            if action is Action.SELECT and apps:
                self.show_app(repository, apps[pager.index])

    def show_app(self, repository: Repository, app: Mapping[str, Any]) -> None:
        """Show an app's details; A installs it, B goes back."""
        lines = app_info_lines(app)
        name = _text(app.get("name"))
        pager = Pager(len(lines), noscroll=True)
        while True:
            self._draw_page(name, lines, pager, _APP_HINT)
            action = self._act(pager)
            if action is Action.BACK:
                return
            if action is Action.SELECT:
                self._download(name, app)

    def _download(self, name: str, app: Mapping[str, Any]) -> None:
        center = SCREEN_ROWS // 2
        rows = []
        for row in range(SCREEN_ROWS):
            if row in (center - 1, center + 1):
                rows.append(FRAME_EDGE)
            elif row == center:
                rows.append(FRAME_SIDE)
            elif row == center + 2:
                rows.append(FRAME_DOWNLOADING)
            else:
                rows.append("\n")
        self._write(
            CLEAR
            + topbar(f"Downloading {name}")
            + "".join(rows)
            + bottombar(0, 0, SCREEN_ROWS - 1, _DOWNLOAD_HINT, True)
        )

        extracting = False

        def report(stage: str, percent: int, detail: str) -> None:
            nonlocal extracting
            if stage == "download":
                self._write(progress_bar(percent, 14))
                return
            if not extracting:
                extracting = True
                self._write(_extraction_frame())
            if stage == "extract":
                self._write(progress_bar(percent, 15))
            elif " Extracting file " in detail:
                self._write(
                    f"\x1b[12;0H{BLANK}\x1b[1A{MARGIN}  {detail}\x1b[12;{WIDTH - MARGIN_X - 3}H%"
                )
            else:
                self._write(progress_bar(percent, 10))

        try:
            install(app, self.apps_dir, self.agent, report)
        except InstallError as exc:
            self._write(f"\n{exc} - HOME (Start) to exit\n")
            _wait_for_home(self._keys, self.out)
            raise _Exit(1) from exc

        self._write(f"\x1b[17;{MARGIN_X + 2}H(3/3) Installation complete.")
        self._write(
            f"\x1b[{28 - MARGIN_Y};{43 - MARGIN_X}H     Press any button to continue."
        )
        self._next_key()

    def show_settings(self) -> None:
        """Show the acknowledgements page until the user goes back."""
        text = self.acknowledgements
        lines = [text[row * WIDTH : (row + 1) * WIDTH] for row in range(len(text) // WIDTH)]
        pager = Pager(len(lines), noscroll=True)
        while True:
            self._draw_page("Settings", lines, pager, _SETTINGS_HINT)
            if self._act(pager) is Action.BACK:
                return


def _key_for(keystroke: Any) -> Key | None:
    name = getattr(keystroke, "name", None)
    if name in _KEY_NAMES:
        return _KEY_NAMES[name]
    return _KEY_CHARS.get(str(keystroke).lower())


def read_keys(terminal: Any) -> Iterator[Key]:
    """Yield controller keys read from a terminal, skipping keys with no meaning."""
    with terminal.cbreak():
        while True:
            key = _key_for(terminal.inkey())
            if key is not None:
                yield key


def main(argv: list[str] | None = None) -> int:
    """Start the shop in the current terminal."""
    parser = argparse.ArgumentParser(prog="libreshop", description="Browse and install apps.")
    parser.add_argument("--apps-dir", default=APPS_DIR, help="directory the shop keeps its files in")
    parser.add_argument("--config", help="configuration file (default: <apps-dir>/config.json)")
    parser.add_argument("--acknowledgements", help="text file shown on the settings page")
    args = parser.parse_args(argv)

    apps_dir = Path(args.apps_dir)
    config_path = Path(args.config) if args.config else apps_dir / "config.json"
    out = sys.stdout
    terminal = Terminal()
    keys = read_keys(terminal)

    def fail(message: str) -> int:
        _write(out, message)
        _wait_for_home(keys, out)
        return 1

    _write(out, "\x1b[1;0H" + header(VERSION) + log_line(LogKind.INFO, "Welcome to LibreShop!\n"))
    _write(out, "\n")

    if not apps_dir.is_dir():
        _write(out, log_line(LogKind.INFO, f"Creating {apps_dir}.\n"))
    try:
        ensure_apps_dir(apps_dir)
    except RepositoryError as exc:
        return fail(log_line(LogKind.INFO, f"{exc} :(\n"))

    if not config_path.exists():
        _write(out, log_line(LogKind.INFO, "Writing default configuration.\n"))
    _write(out, log_line(LogKind.INFO, "Loading configuration.\n"))
    try:
        config = load_config(config_path, DEFAULT_CONFIG)
    except RepositoryError as exc:
        return fail(f"{exc}\n")
    _write(out, log_line(LogKind.OK, "Configuration loaded!\n"))

    acknowledgements = ""
    if args.acknowledgements:
        try:
            acknowledgements = Path(args.acknowledgements).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return fail(f"Could not read acknowledgements: {exc}\n")

    _write(out, "\n" + log_line(LogKind.INFO, "Loading repositories.\n"))
    agent = user_agent(VERSION)
    hostnames = config.get("repositories")
    repositories = []
    for hostname in hostnames if isinstance(hostnames, list) else []:
        if not isinstance(hostname, str):
            continue
        try:
            repository = sync_repository(hostname, agent)
        except RepositoryError as exc:
            return fail(log_line(LogKind.INFO, f"{exc}\n"))
        repositories.append(repository)
        _write(out, log_line(LogKind.OK, f"Loaded repository {repository.name}\n"))
        _write(out, log_line(LogKind.INFO, f"provided by {repository.provider}\n"))

    shop = Shop(repositories, agent, keys, out, apps_dir, acknowledgements)
    status = shop.run()
    _write(out, CLEAR + "Exiting...\n")
    return status


if __name__ == "__main__":
    sys.exit(main())