"""TCP client for the query server and its command-line entry point."""

from __future__ import annotations

import argparse
import json
import socket
import sys
import time
from typing import Any

from .pipe import EOS, frame
from .response import ResponseReader

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080
DEFAULT_USER = "username"
PASSWORD = "password"


class Rows:
    """Rows of one query result; iterating yields each row as a list."""

    def __init__(self, reader: ResponseReader) -> None:
        self._reader = reader
        self._message: bytes | None = None
        self._done = False

    def _advance(self) -> bool:
        if self._done:
            return False
        try:
            message = self._reader.read_line()
        except (EOFError, OSError) as exc:
            self._done = True
            self._message = None
            raise ConnectionError(f"failed to read response: {exc}") from exc
        if message == EOS:
            self._done = True
            self._message = None
            return False
        self._message = message
        return True

    def __iter__(self) -> Rows:
        return self

    def __next__(self) -> list[Any]:
        if not self._advance():
            raise StopIteration
        return self.scan()

    def scan(self) -> list[Any]:
        """Decode the current row."""
        if self._message is None:
            raise ValueError("no current row")
        row = json.loads(self._message)
        if not isinstance(row, list):
            raise ValueError(f"row is not a list: {self._message!r}")
        return row

    def close(self) -> None:
        """Skip any rows left unread."""
        while self._advance():
            pass


class Client:
    """A connection to the query server, authenticated on creation."""

    def __init__(self, host: str, port: int | str, user: str, password: str) -> None:
        self._sock: socket.socket | None = None
        self._stream = None
        try:
            self._sock = socket.create_connection((host, int(port)))
        except OSError as exc:
            raise ConnectionError(f"dial failed: {exc}") from exc
        try:
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
            self._stream = self._sock.makefile("rb")
            self._reader = ResponseReader(self._stream)
            self._auth(user, password)
        except BaseException:
            self.close()
            raise

    def _auth(self, user: str, password: str) -> None:
        try:
            self.query(f"{user}:{password}").close()
        except ConnectionError as exc:
            raise ConnectionError(f"auth failed: {exc}") from exc

    def query(self, data: bytes | str) -> Rows:
        """Send a query and return its result rows."""
        if self._sock is None:
            raise ConnectionError("client is closed")
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            self._sock.sendall(frame(data))
        except OSError as exc:
            raise ConnectionError(f"Response error: {exc}") from exc
        return Rows(self._reader)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send a query to the database server.")
    parser.add_argument("query", nargs="?", help="query text; read from stdin when omitted")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--user", default=DEFAULT_USER)
    parser.add_argument("--password", default=PASSWORD)
    args = parser.parse_args(argv)

    text = args.query if args.query is not None else sys.stdin.read()
    try:
        with Client(args.host, args.port, args.user, args.password) as client:
            print("[auth]", file=sys.stderr)
            started = time.monotonic()
            for row in client.query(text):
                print(" ".join(str(value) for value in row))
            print(f"[query] {time.monotonic() - started:.3f}s", file=sys.stderr)
    except (ConnectionError, ValueError) as exc:
        print("error: ", exc)
        return 1
    return 0