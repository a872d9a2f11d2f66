"""
Pytest configuration and fixtures for image chat gateway tests.
"""

import json
import socketserver
import sys
import threading
from http.server import BaseHTTPRequestHandler
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from image_chat.application.interfaces import FetchResponse
from image_chat.application.use_cases import CompletionUseCase
from image_chat.core.resilience import RetryPolicy
from tests.helpers import DEFAULT_MODEL, PNG_BYTES, RecordingLogger


class ThreadedTCPServer(socketserver.ThreadingMixIn, socketserver.TCPServer):
    allow_reuse_address = True


class ImageServiceHandler(BaseHTTPRequestHandler):
    """Serves reference images (GET) and the generation endpoint (POST)."""

    def _json_response(self, data: dict, status: int = 200):
        payload = json.dumps(data).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def do_GET(self):
        state = self.server.server_state  # type: ignore[attr-defined]
        state["get_calls"].append(self.path)
        body = state["images"].get(self.path)
        if body is None:
            self._json_response({"error": "not found"}, status=404)
            return
        self.send_response(200)
        self.send_header("Content-Type", "image/png")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_POST(self):
        state = self.server.server_state  # type: ignore[attr-defined]
        length = int(self.headers.get("Content-Length", "0"))
        raw = self.rfile.read(length) if length else b"{}"

        if self.path != "/v1/images/generations":
            self._json_response({"error": "not found"}, status=404)
            return

        state["generation_calls"].append(
            {
                "payload": json.loads(raw.decode("utf-8")),
                "authorization": self.headers.get("Authorization"),
            }
        )
        status = state["generation_status"]
        if status != 200:
            self._json_response({"error": {"message": "quota exhausted"}}, status=status)
            return
        if state.get("raw_body") is not None:
            payload = state["raw_body"].encode("utf-8")
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)
            return
        self._json_response({"data": state["data"]})

    def log_message(self, format, *args):
        # Suppress default HTTP server logging to keep test output clean.
        return


@pytest.fixture
def image_server():
    """Start a lightweight HTTP server standing in for the image host and backend."""
    state = {
        "images": {"/images/cat.png": PNG_BYTES},
        "data": [
            {"url": "https://cdn.example.com/out-0.png"},
            {"url": "https://cdn.example.com/out-1.png"},
        ],
        "generation_status": 200,
        "raw_body": None,
        "get_calls": [],
        "generation_calls": [],
    }

    server = ThreadedTCPServer(("127.0.0.1", 0), ImageServiceHandler)
    server.server_state = state  # type: ignore[attr-defined]

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    base_url = f"http://127.0.0.1:{server.server_address[1]}"

    try:
        yield SimpleNamespace(base_url=base_url, api_url=f"{base_url}/v1", state=state)
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def fake_fetcher():
    """Reference image fetcher (external HTTP) that always succeeds."""
    fetcher = AsyncMock()
    fetcher.fetch = AsyncMock(
        return_value=FetchResponse(ok=True, status=200, body=PNG_BYTES, content_type="image/png")
    )
    return fetcher


@pytest.fixture
def fake_backend():
    """Image backend (external service) returning two images."""
    backend = AsyncMock()
    backend.upload_reference_image = AsyncMock(return_value="data:image/png;base64,AAAA")
    backend.generate_images = AsyncMock(
        return_value=["https://cdn.example.com/a.png", "https://cdn.example.com/b.png"]
    )
    backend.generate_images_with_reference = AsyncMock(
        return_value=["https://cdn.example.com/ref.png"]
    )
    return backend


@pytest.fixture
def request_log():
    return RecordingLogger()


@pytest.fixture
def use_case(fake_fetcher, fake_backend, request_log):
    return CompletionUseCase(
        fake_fetcher,
        fake_backend,
        request_log,
        retry_policy=RetryPolicy(max_retries=0, delay_seconds=0.0),
        default_model=DEFAULT_MODEL,
    )
