import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from libreshop.repository import (
    CONTENTS_PATH,
    INFORMATION_PATH,
    Repository,
    RepositoryError,
    build_contents,
    ensure_apps_dir,
    fetch_json,
    load_config,
    sync_repository,
    user_agent,
)

INFORMATION = {
    "name": "Open Shop",
    "provider": "Example Provider",
    "available_categories": [
        {"name": "games", "display_name": "Games"},
        {"name": "tools", "display_name": "Tools"},
    ],
}
CONTENTS = [
    {"name": "Tetris", "category": "games"},
    {"name": "Editor", "category": "tools"},
    {"name": "Pong", "category": "games"},
    {"name": "Stray", "category": "unknown"},
]


@pytest.fixture
def server():
    routes = {}
    seen = []

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            seen.append((self.path, self.headers.get("User-Agent")))
            body = routes.get(self.path)
            if body is None:
                self.send_response(404)
                self.end_headers()
                return
            self.send_response(200)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, *args):
            pass

    httpd = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield f"127.0.0.1:{httpd.server_address[1]}", routes, seen
    httpd.shutdown()
    httpd.server_close()


def test_user_agent_names_shop_version():
    assert user_agent("0.2").endswith(" LibreShop/0.2")


def test_build_contents_files_apps_by_category():
    contents = build_contents(INFORMATION, CONTENTS)
    assert list(contents) == ["games", "tools"]
    assert [app["name"] for app in contents["games"]] == ["Tetris", "Pong"]
    assert [app["name"] for app in contents["tools"]] == ["Editor"]


def test_build_contents_keeps_empty_categories():
    contents = build_contents(INFORMATION, [])
    assert contents == {"games": [], "tools": []}


def test_load_config_writes_default_when_missing(tmp_path):
    path = tmp_path / "config.json"
    default = json.dumps({"repositories": ["repo.example.com"]})
    config = load_config(path, default)
    assert config == {"repositories": ["repo.example.com"]}
    assert path.read_text() == default


def test_load_config_prefers_existing_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"repositories": []}))
    config = load_config(path, b'{"repositories": ["other.example.com"]}')
    assert config == {"repositories": []}


def test_load_config_reports_json_error(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{\n  broken")
    with pytest.raises(RepositoryError, match="JSON error at line 2"):
        load_config(path, "{}")


def test_sync_repository_uses_both_endpoints():
    calls = []

    def fetch(hostname, path, agent):
        calls.append((hostname, path, agent))
        return INFORMATION if path == INFORMATION_PATH else CONTENTS

    repository = sync_repository("repo.example.com", "agent", fetch)
    assert calls == [
        ("repo.example.com", INFORMATION_PATH, "agent"),
        ("repo.example.com", CONTENTS_PATH, "agent"),
    ]
    assert repository.name == "Open Shop"
    assert repository.provider == "Example Provider"
    assert [c["name"] for c in repository.categories] == ["games", "tools"]
    assert [app["name"] for app in repository.apps("games")] == ["Tetris", "Pong"]
    assert repository.apps("missing") == []


def test_sync_repository_reports_failing_host():
    def fetch(hostname, path, agent):
        raise RepositoryError("JSON error on line 1: Expecting value")

    with pytest.raises(RepositoryError, match="While syncing repository repo.example.com"):
        sync_repository("repo.example.com", "agent", fetch)


def test_sync_repository_reports_failing_contents():
    def fetch(hostname, path, agent):
        if path == CONTENTS_PATH:
            raise RepositoryError("JSON error on line 1: Expecting value")
        return INFORMATION

    with pytest.raises(RepositoryError, match="While obtaining content of repo.example.com"):
        sync_repository("repo.example.com", "agent", fetch)


def test_fetch_json_sends_agent_and_decodes(server):
    host, routes, seen = server
    routes[INFORMATION_PATH] = json.dumps(INFORMATION).encode()
    assert fetch_json(host, INFORMATION_PATH, "test-agent") == INFORMATION
    assert seen == [(INFORMATION_PATH, "test-agent")]


def test_fetch_json_ignores_trailing_data(server):
    host, routes, _ = server
    routes[CONTENTS_PATH] = json.dumps(CONTENTS).encode() + b"\x00garbage"
    assert fetch_json(host, CONTENTS_PATH, "agent") == CONTENTS


def test_fetch_json_rejects_invalid_body(server):
    host, routes, _ = server
    routes[INFORMATION_PATH] = b"<html>"
    with pytest.raises(RepositoryError, match="JSON error"):
        fetch_json(host, INFORMATION_PATH, "agent")


def test_sync_repository_against_server(server):
    host, routes, _ = server
    routes[INFORMATION_PATH] = json.dumps(INFORMATION).encode()
    routes[CONTENTS_PATH] = json.dumps(CONTENTS).encode()
    repository = sync_repository(host, "agent")
    assert repository == Repository(host, INFORMATION, build_contents(INFORMATION, CONTENTS))


def test_ensure_apps_dir_creates_both_levels(tmp_path):
    target = tmp_path / "apps" / "libreshop"
    assert ensure_apps_dir(target) == target
    assert target.is_dir()
    assert ensure_apps_dir(target) == target


def test_ensure_apps_dir_fails_when_blocked(tmp_path):
    (tmp_path / "apps").write_text("not a directory")
    with pytest.raises(RepositoryError, match="Creating directory"):
        ensure_apps_dir(tmp_path / "apps" / "libreshop")