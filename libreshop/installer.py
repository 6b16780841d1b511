"""Downloading an app's archive and unpacking it onto the storage root."""

from __future__ import annotations

import urllib.error
import urllib.request
import zipfile
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

Progress = Callable[[str, int, str], None]

_DOWNLOAD_CHUNK = 512
_EXTRACT_CHUNK = 1024
_TIMEOUT = 30


class InstallError(Exception):
    """An app could not be downloaded or installed."""


def _report(progress: Progress | None, stage: str, percent: int, detail: str) -> None:
    if progress is not None:
        progress(stage, percent, detail)


def download(
    url: str,
    destination: str | Path,
    size: int,
    agent: str,
    progress: Progress | None = None,
) -> Path:
    """Fetch ``url`` into ``destination``, reporting ``("download", percent, url)``.

    ``size`` is the announced archive size in bytes, used for the percentage.
    """
    destination = Path(destination)
    hundredth = size // 100
    request = urllib.request.Request(url, headers={"User-Agent": agent})
    current = 0
    try:
        with urllib.request.urlopen(request, timeout=_TIMEOUT) as response, destination.open(
            "wb"
        ) as out:
            while chunk := response.read(_DOWNLOAD_CHUNK):
                current += len(chunk)
                percent = int(current / hundredth) if hundredth else 100
                _report(progress, "download", percent, url)
                out.write(chunk)
    except (urllib.error.URLError, OSError) as exc:
        raise InstallError(f"downloading {url} failed: {exc}") from exc
    return destination


def _target(root: Path, name: str) -> Path:
    target = (root / name).resolve()
    if not target.is_relative_to(root):
        raise InstallError(f"archive entry {name} points outside {root}")
    return target


def extract(
    archive: str | Path, root: str | Path, progress: Progress | None = None
) -> list[Path]:
    """Unpack every archive entry below ``root`` and return the written files.

    Reports ``("file", percent, detail)`` while a file is written and
    ``("extract", percent, "")`` after each entry.
    """
    root = Path(root).resolve()
    written = []
    try:
        bundle = zipfile.ZipFile(archive)
    except (zipfile.BadZipFile, OSError) as exc:
        raise InstallError(f"cannot open archive {archive}: {exc}") from exc
    with bundle:
        entries = bundle.infolist()
        count = len(entries)
        for number, entry in enumerate(entries, start=1):
            target = _target(root, entry.filename)
            folder = target if entry.is_dir() else target.parent
            try:
                folder.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise InstallError(f"creating directory {folder} failed") from exc
            if not entry.is_dir():
                _report(
                    progress, "file", 0, f"({number}/{count}) Extracting file /{entry.filename}"
                )
                current = 0
                try:
                    out = target.open("wb")
                except OSError as exc:
                    raise InstallError(f"Cannot open {target}.") from exc
                with out, bundle.open(entry) as source:
                    while chunk := source.read(_EXTRACT_CHUNK):
                        current += len(chunk)
                        _report(
                            progress,
                            "file",
                            int(current / entry.file_size * 100),
                            entry.filename,
                        )
                        out.write(chunk)
                written.append(target)
            _report(progress, "extract", int(number / count * 100), "")
    return written


def install(
    app: Mapping[str, Any],
    apps_dir: str | Path,
    agent: str,
    progress: Progress | None = None,
) -> list[Path]:
    """Download an app's zip into ``apps_dir`` and unpack it onto the storage root.

    The storage root is the directory that holds ``apps``, two levels above
    ``apps_dir``.
    """
    urls = app.get("url")
    url = urls.get("zip") if isinstance(urls, Mapping) else None
    if not isinstance(url, str):
        raise InstallError("app has no zip download")
    sizes = app.get("file_size")
    size = sizes.get("zip_compressed") if isinstance(sizes, Mapping) else None
    if not isinstance(size, int) or isinstance(size, bool):
        size = 0
    apps_dir = Path(apps_dir)
    archive = download(url, apps_dir / "temp.zip", size, agent, progress)
    return extract(archive, apps_dir.parent.parent, progress)