# libreshop

A small terminal shop for homebrew apps. It reads a list of repository
hostnames from a configuration file and fetches each repository's
information (`/api/v3/information`) and contents (`/api/v3/contents`) over
plain HTTP. You can then browse the repositories by category and open an
app's detail page. Choosing to download an app fetches its zip archive
into the apps directory and unpacks it onto the storage root, the
directory two levels above the apps directory, with progress bars for the
download, for each file and for the whole archive.

## Installing

```
pip install .
```

## Running

```
libreshop [--apps-dir DIR] [--config FILE] [--acknowledgements FILE]
```

- `--apps-dir` is the directory the shop keeps its files in
  (default `/apps/libreshop`). It is created, together with its parent,
  when missing. The downloaded archive is stored there as `temp.zip`.
- `--config` is the configuration file (default `<apps-dir>/config.json`).
  When the file does not exist, `{"repositories": []}` is written to it
  first. Its `repositories` list holds the hostnames to sync.
- `--acknowledgements` is a text file shown on the settings page, in rows
  of 77 characters.

If a repository cannot be fetched or its reply is not JSON, the shop
prints the error and waits for the exit key; it then exits with status 1.

## Keys

| Key                  | Action                                             |
|----------------------|----------------------------------------------------|
| Up / Down            | move the cursor (scroll by a row on text pages)    |
| Left / Right         | page up / page down (scroll by a row on text pages)|
| Enter or `a`         | open the selected entry, or download the app       |
| Escape, Backspace or `b` | go back                                        |
| `1` or `x`           | open the settings page (repository list only)      |
| Home, `q` or `h`     | exit                                               |

When exactly one repository is configured, the shop opens it straight away.

## Using it from Python

- `libreshop.layout` builds the screen text: `header`, `log_line`
  (with `LogKind`), `topbar`, `bottombar`, `cursor`, `progress_bar`,
  `wrap_description` and `app_info_lines`.
- `libreshop.pager.Pager` keeps the selected row and scroll offset of a
  list; `Pager.handle` takes a `Key` and returns an `Action`, and
  `visible_count` / `visible_range` tell which rows to draw.
- `libreshop.repository` has `load_config`, `ensure_apps_dir`,
  `user_agent`, `fetch_json`, `build_contents` (files apps under their
  category; apps of unknown categories are dropped) and `sync_repository`,
  which returns a `Repository` and raises `RepositoryError` on failure.
- `libreshop.installer` has `download`, `extract` and `install`; they
  raise `InstallError` on failure, and `extract` refuses archive entries
  that point outside the target root.
- `libreshop.app.Shop` ties these into the interactive screens; it takes
  any iterable of `Key` values and any text stream, so it can be driven
  without a terminal. `read_keys` turns a `blessed` terminal's key presses
  into `Key` values, and `main` is the command.

## What it does not do

- The settings page only shows the acknowledgements text; settings
  cannot be changed from the shop. Edit `config.json` by hand instead.
- Installed apps are not tracked, so there is no updating or removing.
- Repositories are only reached over plain HTTP.

## Tests

```
pip install .[test]
pytest
```