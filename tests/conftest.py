from __future__ import annotations

import json
import re
import socketserver
import threading
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

_ITEM_PATH_RE = re.compile(r"^/api/v1/file/custom/([^/]+)/block-extensions$")


@dataclass
class FakeStoreState:
    custom: list[dict[str, object]] = field(default_factory=list)
    fixed_all: list[dict[str, object]] = field(default_factory=list)
    fixed_blocked: list[dict[str, object]] = field(default_factory=list)
    next_id: int = 100
    requests: list[tuple[str, str, dict[str, object] | None]] = field(default_factory=list)
    failures: dict[tuple[str, str], tuple[int, object]] = field(default_factory=dict)

    def fail(self, method: str, path: str, status: int, body: object = None) -> None:
        self.failures[(method, f"/api{path}")] = (status, body)

    def writes(self) -> list[tuple[str, str, dict[str, object] | None]]:
        return [item for item in self.requests if item[0] != "GET"]


class _StoreHandler(BaseHTTPRequestHandler):
    state: FakeStoreState

    def log_message(self, _format: str, *_args) -> None:
        return

    def _send_json(self, status: int, payload: object) -> None:
        body = b"" if payload is None else json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _record(self) -> dict[str, object] | None:
        length = int(self.headers.get("Content-Length") or 0)
        body = json.loads(self.rfile.read(length).decode("utf-8")) if length else None
        self.state.requests.append((self.command, self.path, body))
        return body

    def _maybe_fail(self) -> bool:
        failure = self.state.failures.get((self.command, self.path))
        if failure is None:
            return False
        status, payload = failure
        self._send_json(status, payload)
        return True

    def do_GET(self) -> None:
        self._record()
        if self._maybe_fail():
            return
        if self.path == "/api/v1/file/all/block-extensions":
            self._send_json(
                200,
                {
                    "customFileExtensions": self.state.custom,
                    "fixedFileExtensions": self.state.fixed_all,
                },
            )
            return
        if self.path == "/api/v1/file/fixed/block-extensions":
            self._send_json(200, {"data": self.state.fixed_blocked})
            return
        self._send_json(404, {"statusMessage": "not found"})

    def do_POST(self) -> None:
        body = self._record()
        if self._maybe_fail():
            return
        if self.path != "/api/v1/file/custom/block-extensions" or not isinstance(body, dict):
            self._send_json(404, {"statusMessage": "not found"})
            return
        name = str(body.get("extensionName", ""))
        fixed = next(
            (item for item in self.state.fixed_all if str(item["extensionName"]).lower() == name.lower()),
            None,
        )
        if fixed is not None:
            if fixed not in self.state.fixed_blocked:
                self.state.fixed_blocked.append(fixed)
        else:
            self.state.custom.append(
                {"customFileExtensionId": self.state.next_id, "extensionName": name}
            )
            self.state.next_id += 1
        self._send_json(201, None)

    def do_DELETE(self) -> None:
        self._record()
        if self._maybe_fail():
            return
        match = _ITEM_PATH_RE.match(self.path)
        if match is None:
            self._send_json(404, {"statusMessage": "not found"})
            return
        target = match.group(1)
        for item in self.state.custom:
            if str(item["customFileExtensionId"]) == target:
                self.state.custom.remove(item)
                self._send_json(200, None)
                return
        for item in self.state.fixed_blocked:
            if str(item["blockFixedFileExtensionId"]) == target:
                self.state.fixed_blocked.remove(item)
                self._send_json(200, None)
                return
        self._send_json(404, {"statusMessage": "not found"})


@dataclass
class FakeStore:
    state: FakeStoreState
    base_url: str


@pytest.fixture
def fake_store() -> Iterator[FakeStore]:
    state = FakeStoreState(
        custom=[
            {"customFileExtensionId": 1, "extensionName": "sh"},
            {"customFileExtensionId": 2, "extensionName": "ps1"},
        ],
        fixed_all=[
            {"blockFixedFileExtensionId": 11, "extensionName": "bat"},
            {"blockFixedFileExtensionId": 12, "extensionName": "EXE"},
            {"blockFixedFileExtensionId": 13, "extensionName": "cmd"},
        ],
    )
    state.fixed_blocked = [state.fixed_all[1]]
    handler = type("FakeStoreHandler", (_StoreHandler,), {"state": state})
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield FakeStore(state=state, base_url=f"http://127.0.0.1:{server.server_address[1]}/api")
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=2)


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))
    monkeypatch.delenv("EXTBLOCK_API_URL", raising=False)
    monkeypatch.delenv("EXTBLOCK_TIMEOUT", raising=False)
    return tmp_path


class _RawResponseHandler(socketserver.StreamRequestHandler):
    response: bytes

    def handle(self) -> None:
        content_length = 0
        while True:
            line = self.rfile.readline(65537)
            if not line or line in (b"\r\n", b"\n"):
                break
            name, _, value = line.decode("latin-1").partition(":")
            if name.strip().lower() == "content-length":
                content_length = int(value.strip())
        if content_length:
            self.rfile.read(content_length)
        self.wfile.write(self.response)


@contextmanager
def _raw_server(response: bytes) -> Iterator[str]:
    handler = type("RawResponseHandler", (_RawResponseHandler,), {"response": response})
    server = socketserver.ThreadingTCPServer(("127.0.0.1", 0), handler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}/api"
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=2)


@pytest.fixture
def raw_store() -> Callable[[bytes], AbstractContextManager[str]]:
    """Serve one canned byte response per connection, ignoring the request."""
    return _raw_server

