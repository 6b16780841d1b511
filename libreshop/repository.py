"""Loading the shop configuration and synchronising remote repositories."""

from __future__ import annotations

import json
import sys
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

INFORMATION_PATH = "/api/v3/information"
CONTENTS_PATH = "/api/v3/contents"

_DECODER = json.JSONDecoder()
_TIMEOUT = 30


class RepositoryError(Exception):
    """A configuration or repository could not be loaded."""


@dataclass
class Repository:
    """A synchronised repository: its information and its apps by category."""

    hostname: str
    information: dict[str, Any]
    contents: dict[str, list[dict[str, Any]]] = field(default_factory=dict)

    @property
    def name(self) -> str:
        value = self.information.get("name")
        return value if isinstance(value, str) else ""

    @property
    def provider(self) -> str:
        value = self.information.get("provider")
        return value if isinstance(value, str) else ""

    @property
    def categories(self) -> list[dict[str, Any]]:
        """Categories the repository announces, in its own order."""
        found = self.information.get("available_categories")
        if not isinstance(found, list):
            return []
        return [category for category in found if isinstance(category, Mapping)]

    def apps(self, category: str) -> list[dict[str, Any]]:
        """Apps filed under the category with the given slug."""
        return self.contents.get(category, [])


def user_agent(version: str) -> str:
    """Return the User-Agent sent with every request."""
    python = f"{sys.version_info.major}.{sys.version_info.minor}"
    return f"Python-urllib/{python} LibreShop/{version}"


def _decode(text: str) -> Any:
    """Decode one JSON document, ignoring anything that trails it."""
    try:
        value, _ = _DECODER.raw_decode(text.lstrip())
    except json.JSONDecodeError as exc:
        raise RepositoryError(f"JSON error on line {exc.lineno}: {exc.msg}") from exc
    return value


def load_config(path: str | Path, default: bytes | str) -> dict[str, Any]:
    """Read the configuration file, writing ``default`` there first if it is missing."""
    path = Path(path)
    if not path.exists():
        data = default.encode("utf-8") if isinstance(default, str) else default
        try:
            path.write_bytes(data)
        except OSError as exc:
            raise RepositoryError(f"Could not write default configuration: {exc}") from exc
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RepositoryError(f"Could not load configuration: {exc}") from exc
    try:
        config = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RepositoryError(
            f"Could not load configuration. JSON error at line {exc.lineno}: {exc.msg}"
        ) from exc
    if not isinstance(config, dict):
        raise RepositoryError("Could not load configuration: top level is not an object")
    return config


def fetch_json(hostname: str, path: str, agent: str) -> Any:
    """GET ``path`` from ``hostname`` over HTTP and decode the JSON body."""
    request = urllib.request.Request(f"http://{hostname}{path}", headers={"User-Agent": agent})
    try:
        with urllib.request.urlopen(request, timeout=_TIMEOUT) as response:
            body = response.read()
    except (urllib.error.URLError, OSError) as exc:
        raise RepositoryError(f"request to {hostname}{path} failed: {exc}") from exc
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RepositoryError(f"response from {hostname}{path} is not UTF-8") from exc
    return _decode(text)


def build_contents(
    information: Mapping[str, Any], contents: Any
) -> dict[str, list[dict[str, Any]]]:
    """File each app under its category; apps of unknown categories are dropped."""
    result: dict[str, list[dict[str, Any]]] = {}
    categories = information.get("available_categories")
    for category in categories if isinstance(categories, list) else []:
        if isinstance(category, Mapping) and isinstance(category.get("name"), str):
            result[category["name"]] = []
    for app in contents if isinstance(contents, list) else []:
        if not isinstance(app, Mapping):
            continue
        slug = app.get("category")
        if isinstance(slug, str) and slug in result:
            result[slug].append(dict(app))
    return result


def sync_repository(
    hostname: str,
    agent: str,
    fetch: Callable[[str, str, str], Any] = fetch_json,
) -> Repository:
    """Download a repository's information and contents."""
    try:
        information = fetch(hostname, INFORMATION_PATH, agent)
    except RepositoryError as exc:
        raise RepositoryError(
            f"{exc}\nWhile syncing repository {hostname}, possibly a network error?"
        ) from exc
    if not isinstance(information, Mapping):
        raise RepositoryError(f"repository {hostname} sent malformed information")
    try:
        contents = fetch(hostname, CONTENTS_PATH, agent)
    except RepositoryError as exc:
        raise RepositoryError(
            f"{exc}\nWhile obtaining content of {hostname} - possibly a network error?"
        ) from exc
    return Repository(hostname, dict(information), build_contents(information, contents))


def ensure_apps_dir(apps_dir: str | Path) -> Path:
    """Create the apps directory and its parent when they are missing."""
    apps_dir = Path(apps_dir)
    for directory in (apps_dir.parent, apps_dir):
        if directory.is_dir():
            continue
        try:
            directory.mkdir()
        except OSError as exc:
            raise RepositoryError(f"Creating directory {directory} failed") from exc
    return apps_dir