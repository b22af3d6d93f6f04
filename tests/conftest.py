import io
import socket
import socketserver
import threading
from unittest.mock import MagicMock
from urllib.parse import parse_qsl

import pytest


class _TrackerHandler(socketserver.StreamRequestHandler):
    def handle(self):
        line = self.rfile.readline()
        if not line:
            return
        command, _, query = line.decode("utf-8").rstrip("\r\n").partition(" ")
        args = dict(parse_qsl(query, keep_blank_values=True))
        self.server.requests.append((command, args))
        self.server.raw_requests.append(line)
        reply = self.server.respond(command, args)
        if reply is not None:
            self.wfile.write(reply)


class FakeTracker(socketserver.ThreadingTCPServer):
    """A one-line-per-connection tracker answering with respond(command, args)."""

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, respond):
        super().__init__(("127.0.0.1", 0), _TrackerHandler)
        self.respond = respond
        self.requests = []
        self.raw_requests = []

    @property
    def address(self):
        return f"127.0.0.1:{self.server_address[1]}"

    def commands(self):
        return [command for command, _ in self.requests]


@pytest.fixture
def fake_tracker():
    servers = []

    def start(respond):
        server = FakeTracker(respond)
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture
def dead_address():
    """host:port of a local port nothing listens on."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"127.0.0.1:{port}"


class Body(io.BytesIO):
    pass


def http_response(status, body=b""):
    resp = MagicMock()
    resp.status_code = status
    resp.raw = Body(body)
    return resp


class Unsized:
    """A stream whose length requests cannot work out."""

    def __init__(self, data):
        self._buf = io.BytesIO(data)

    def read(self, size=-1):
        return self._buf.read(size)
