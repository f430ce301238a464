"""
Unit tests for the Connection socket wrapper.
"""

import socket
import threading
import time

import pytest

from webworker.core import connection as connection_module
from webworker.core.connection import Connection, ConnectionState


def flood(sock):
    """Send until the other side goes away."""
    chunk = b"x" * 4096
    try:
        while True:
            sock.sendall(chunk)
    except OSError:
        pass


@pytest.fixture
def socket_pair():
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    client_side.close()
    server_side.close()


class TestConnection:
    """Tests for Connection."""

    def test_reader_reads_lines(self, socket_pair):
        server_side, client_side = socket_pair
        conn = Connection(socket=server_side, address=("local", 0), timeout=2.0)

        client_side.sendall(b"GET /index.html HTTP/1.1\r\nHost: x\r\n")

        assert conn.state == ConnectionState.NEW
        assert conn.reader.readline() == b"GET /index.html HTTP/1.1\r\n"
        assert conn.reader.readline() == b"Host: x\r\n"
        assert conn.state == ConnectionState.ACTIVE

    def test_line_split_across_sends(self, socket_pair):
        """A line that arrives in pieces is still read whole."""
        server_side, client_side = socket_pair
        conn = Connection(socket=server_side, address=("local", 0), timeout=2.0)

        client_side.sendall(b"GET /ind")
        client_side.sendall(b"ex.html HTTP/1.1\r\n")

        assert conn.reader.readline() == b"GET /index.html HTTP/1.1\r\n"

    def test_writer_and_close(self, socket_pair):
        server_side, client_side = socket_pair
        conn = Connection(socket=server_side, address=("local", 0), timeout=2.0)

        conn.writer.write(b"HTTP/1.1 200 OK\n\n")
        conn.close()

        client_side.settimeout(2.0)
        received = b""
        while True:
            chunk = client_side.recv(1024)
            if not chunk:
                break
            received += chunk

        assert received == b"HTTP/1.1 200 OK\n\n"
        assert conn.state == ConnectionState.CLOSED

    def test_close_is_idempotent(self, socket_pair):
        server_side, _ = socket_pair
        conn = Connection(socket=server_side, address=("local", 0), timeout=2.0)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_context_manager_closes(self, socket_pair):
        server_side, _ = socket_pair

        with Connection(socket=server_side, address=("local", 0), timeout=2.0) as conn:
            assert conn.state == ConnectionState.NEW

        assert conn.state == ConnectionState.CLOSED

    def test_read_timeout_raises_oserror(self, socket_pair):
        server_side, _ = socket_pair
        conn = Connection(socket=server_side, address=("local", 0), timeout=0.1)

        with pytest.raises(OSError):
            conn.reader.readline()

    def test_close_bounded_against_endless_sender(self, socket_pair):
        """A client that never stops sending can't hold close() open."""
        server_side, client_side = socket_pair
        client_side.settimeout(2.0)
        conn = Connection(socket=server_side, address=("local", 0), timeout=2.0)

        sender = threading.Thread(target=flood, args=(client_side,), daemon=True)
        sender.start()

        started = time.monotonic()
        conn.close()
        elapsed = time.monotonic() - started

        assert conn.state == ConnectionState.CLOSED
        assert elapsed < 2.0
        sender.join(timeout=5.0)

    def test_drain_stops_at_byte_limit(self, socket_pair, monkeypatch):
        """With a generous deadline, the byte cap alone ends the drain."""
        monkeypatch.setattr(connection_module, "DRAIN_TIMEOUT", 30.0)
        server_side, client_side = socket_pair
        client_side.settimeout(2.0)
        conn = Connection(socket=server_side, address=("local", 0), timeout=2.0)

        sender = threading.Thread(target=flood, args=(client_side,), daemon=True)
        sender.start()

        started = time.monotonic()
        conn.close()

        assert time.monotonic() - started < 5.0
        assert conn.state == ConnectionState.CLOSED
        sender.join(timeout=5.0)
