"""Fixtures for interceptor tests: a real local HTTP server.

The server answers every GET with a "Hello: World" header and a plain
text body, mirroring what most tests get from the Upstream mock but
over an actual socket through httpx's default transport.
"""
from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


class _HelloHandler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:  # noqa: N802
        body = b"200 OK"
        self.send_response(200)
        self.send_header("Hello", "World")
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args) -> None:
        pass


@pytest.fixture()
def local_server():
    """Start a ThreadingHTTPServer on an OS-assigned port; yield its base URL."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _HelloHandler)
    t = threading.Thread(target=server.serve_forever, daemon=True)
    t.start()
    host, port = server.server_address[:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()
