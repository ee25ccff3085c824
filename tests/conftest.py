"""Shared fixtures: a local stand-in for the remote-write endpoint."""
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


class StubEndpoint:
    """Records requests and answers with a configurable response."""

    def __init__(self):
        self.status = 200
        self.body = b""
        self.delay_s = 0.0
        self.requests = []
        self.server = ThreadingHTTPServer(("127.0.0.1", 0), self._handler_class())
        self.server.daemon_threads = True
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self.server.server_address
        return f"http://{host}:{port}/api/prom/push"

    def _handler_class(self):
        stub = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self):
                length = int(self.headers.get("Content-Length", 0))
                body = self.rfile.read(length)
                stub.requests.append({
                    "path": self.path,
                    "headers": dict(self.headers),
                    "body": body,
                })
                if stub.delay_s:
                    time.sleep(stub.delay_s)
                self.send_response(stub.status)
                self.send_header("Content-Length", str(len(stub.body)))
                self.end_headers()
                self.wfile.write(stub.body)

            def log_message(self, format, *args):
                pass

        return Handler

    def start(self):
        self.thread.start()

    def stop(self):
        self.server.shutdown()
        self.server.server_close()


@pytest.fixture
def stub_endpoint():
    stub = StubEndpoint()
    stub.start()
    yield stub
    stub.stop()


class TrickleEndpoint:
    """Raw socket server that sends its response one byte at a time.

    The first ``burst`` bytes are sent at once, the rest every ``interval_s``.
    Each byte arrives well inside a per-read timeout, so only a deadline on
    the whole exchange can stop it.
    """

    def __init__(self, response: bytes, burst: int = 0, interval_s: float = 0.1):
        self.response = response
        self.burst = burst
        self.interval_s = interval_s
        self.stopped = threading.Event()
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(5)
        self.sock.settimeout(0.2)
        self.thread = threading.Thread(target=self._serve, daemon=True)

    @property
    def url(self) -> str:
        host, port = self.sock.getsockname()
        return f"http://{host}:{port}/api/prom/push"

    def _serve(self):
        while not self.stopped.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with conn:
                self._respond(conn)

    def _read_request(self, conn):
        conn.settimeout(5)
        data = b""
        while b"\r\n\r\n" not in data:
            chunk = conn.recv(4096)
            if not chunk:
                return
            data += chunk
        head, body = data.split(b"\r\n\r\n", 1)
        length = 0
        for line in head.split(b"\r\n")[1:]:
            name, _, value = line.partition(b":")
            if name.strip().lower() == b"content-length":
                length = int(value.strip())
        while len(body) < length:
            chunk = conn.recv(4096)
            if not chunk:
                return
            body += chunk

    def _respond(self, conn):
        try:
            self._read_request(conn)
            conn.sendall(self.response[:self.burst])
            for i in range(self.burst, len(self.response)):
                if self.stopped.wait(self.interval_s):
                    return
                conn.sendall(self.response[i:i + 1])
        except OSError:
            return

    def start(self):
        self.thread.start()

    def stop(self):
        self.stopped.set()
        self.thread.join(timeout=2)
        self.sock.close()


@pytest.fixture
def trickle_endpoint():
    endpoints = []

    def start(response: bytes, burst: int = 0, interval_s: float = 0.1):
        endpoint = TrickleEndpoint(response, burst=burst, interval_s=interval_s)
        endpoint.start()
        endpoints.append(endpoint)
        return endpoint

    yield start
    for endpoint in endpoints:
        endpoint.stop()
