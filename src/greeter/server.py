"""HTTP adapter answering every request with the configured greeting.

Purpose
-------
Bind the listener described by :attr:`GreeterConfig.listen` and serve a fixed
plain-text greeting on every connection. Concurrency comes from the standard
library's :class:`~http.server.ThreadingHTTPServer` (one daemon thread per
connection); handlers only read the frozen configuration.

Contents
--------
* :func:`parse_listen_address` – split ``host:port`` into bind arguments.
* :class:`GreeterServer` – threaded server bound at construction time.
* :class:`GreetingHandler` – request handler answering any method and path.
* :func:`serve` – bind, announce when verbose, and serve until killed.

Limits
------
Reading a request must finish within five seconds of the handler starting to
wait for it, and writing the response within five seconds of its headers being
read. Both are deadlines, not per-call timeouts. The request line and header
block share a 1 MiB budget with no other cap on line length or header count.
Transport failures (timeouts, resets, malformed requests) are handled here and
only surface as debug log events; anything unexpected is logged as an error.
"""

from __future__ import annotations

import email.parser
import http.client
import io
import socket
import sys
import time
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, BinaryIO, Final

from .domain.config import GreeterConfig
from .domain.errors import BindError
from .observability import log_debug, log_error, log_info

READ_TIMEOUT: Final[float] = 5.0
WRITE_TIMEOUT: Final[float] = 5.0
MAX_HEADER_BYTES: Final[int] = 1 << 20
#: Request bodies up to this size are drained so the connection can be reused.
MAX_DISCARD_BYTES: Final[int] = 256 << 10
_DISCARD_CHUNK: Final[int] = 64 << 10


def parse_listen_address(listen: str) -> tuple[str, int, socket.AddressFamily]:
    """Split *listen* into ``(host, port, address_family)``.

    An empty host binds every interface, IPv6 hosts must be bracketed, and the
    port may be numeric or a TCP service name.

    Raises
    ------
    BindError
        When the address cannot be interpreted.

    Examples
    --------
    >>> parse_listen_address("0.0.0.0:8080")[:2]
    ('0.0.0.0', 8080)
    >>> parse_listen_address("[::1]:9000")[:2]
    ('::1', 9000)
    >>> parse_listen_address(":80")[:2]
    ('', 80)
    """

    host, sep, port_text = listen.rpartition(":")
    if not sep:
        raise BindError(f"listen tcp {listen}: missing port in address")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        family = socket.AF_INET6
    elif ":" in host:
        raise BindError(f"listen tcp {listen}: too many colons in address")
    else:
        family = socket.AF_INET
    return host, _parse_port(listen, port_text), family


def _parse_port(listen: str, port_text: str) -> int:
    if not port_text:
        raise BindError(f"listen tcp {listen}: missing port in address")
    if port_text.isdigit():
        port = int(port_text)
        if port > 65535:
            raise BindError(f"listen tcp {listen}: invalid port {port_text}")
        return port
    try:
        return socket.getservbyname(port_text, "tcp")
    except OSError as exc:
        raise BindError(f"listen tcp {listen}: unknown port {port_text}") from exc


class HeaderBlockTooLarge(http.client.HTTPException):
    """Raised while parsing when the request header block exceeds its budget."""


class _DeadlineSocketIO(io.RawIOBase):
    """Raw socket stream whose reads or writes must finish before a deadline.

    The socket timeout is set to the time left before every ``recv`` or
    ``sendall``, so a peer trickling bytes cannot stretch one request past
    *window* seconds. Once the deadline has passed the next call raises
    :class:`TimeoutError` without touching the socket.
    """

    def __init__(self, sock: socket.socket, window: float) -> None:
        super().__init__()
        self._sock = sock
        self._window = window
        self._deadline: float | None = None

    def start(self) -> None:
        self._deadline = time.monotonic() + self._window

    def clear(self) -> None:
        self._deadline = None

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        self._arm()
        return self._sock.recv_into(buffer)

    def write(self, data: Any) -> int:
        self._arm()
        self._sock.sendall(data)
        return len(data)

    def _arm(self) -> None:
        if self._deadline is None:
            self.start()
        remaining = self._deadline - time.monotonic()  # type: ignore[operator]
        if remaining <= 0:
            raise TimeoutError("i/o deadline exceeded")
        self._sock.settimeout(remaining)


class _HeaderBudgetReader:
    """Wrap a socket reader and cap the bytes consumed through ``readline``.

    The request line and headers are read line by line while the body is read
    with ``read``, so only the header block counts against the budget. A
    ``readline`` never pulls more than one byte past the budget.
    """

    def __init__(self, raw: BinaryIO, limit: int) -> None:
        self._raw = raw
        self._limit = limit
        self._consumed = 0

    def reset(self) -> None:
        self._consumed = 0

    def readline(self, size: int = -1) -> bytes:
        allowed = self._limit - self._consumed + 1
        if size < 0 or size > allowed:
            size = allowed
        line = self._raw.readline(size)
        self._consumed += len(line)
        if self._consumed > self._limit:
            raise HeaderBlockTooLarge(f"header block exceeds {self._limit} bytes")
        return line

    def __getattr__(self, name: str) -> Any:
        return getattr(self._raw, name)


class GreetingHandler(BaseHTTPRequestHandler):
    """Answer every request with ``200`` and the configured greeting.

    Any method and any path is accepted; ``HEAD`` responses carry headers only.
    Reading a request (from the moment the handler waits for it) must finish
    within :attr:`read_timeout` seconds and writing the response within
    :attr:`write_timeout` seconds of the headers being read. Missing either
    deadline drops the connection without a response.
    """

    server: GreeterServer

    protocol_version = "HTTP/1.1"
    server_version = "greeter"
    timeout = READ_TIMEOUT
    read_timeout = READ_TIMEOUT
    write_timeout = WRITE_TIMEOUT
    max_header_bytes = MAX_HEADER_BYTES

    def setup(self) -> None:
        super().setup()
        # Replace the stdlib streams; the makefile reader holds a socket reference.
        self.rfile.close()
        self._reader = _DeadlineSocketIO(self.connection, self.read_timeout)
        self._writer = _DeadlineSocketIO(self.connection, self.write_timeout)
        self.rfile = _HeaderBudgetReader(io.BufferedReader(self._reader), self.max_header_bytes)  # type: ignore[assignment]
        self.wfile = self._writer  # type: ignore[assignment]

    def handle_one_request(self) -> None:
        self.rfile.reset()  # type: ignore[attr-defined]
        self._reader.start()
        self._writer.clear()
        try:
            try:
                self.raw_requestline = self.rfile.readline()
            except HeaderBlockTooLarge as exc:
                self.requestline = self.request_version = self.command = ""
                self.send_error(HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE, None, str(exc))
                return
            if not self.raw_requestline:
                self.close_connection = True
                return
            if not self.parse_request():
                return
            self._greet()
            self.wfile.flush()
        except TimeoutError as exc:
            log_debug("request_timeout", client=self.address_string(), error=str(exc))
            self.close_connection = True

    def parse_request(self) -> bool:
        """Parse the request line with the standard handler, then the headers here.

        ``http.client.parse_headers`` stops at 100 header lines and 64 KiB per
        line; here only the byte budget of :class:`_HeaderBudgetReader` applies.
        """

        stream, self.rfile = self.rfile, io.BytesIO(b"\r\n")  # type: ignore[assignment]
        try:
            if not super().parse_request():
                return False
        finally:
            self.rfile = stream
        try:
            self.headers = self._read_headers()
        except HeaderBlockTooLarge as exc:
            self.send_error(HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE, None, str(exc))
            return False
        self._writer.start()

        conntype = self.headers.get("Connection", "").lower()
        if conntype == "close":
            self.close_connection = True
        elif conntype == "keep-alive":
            self.close_connection = False
        if (
            self.headers.get("Expect", "").lower() == "100-continue"
            and self.request_version >= "HTTP/1.1"
        ):
            return self.handle_expect_100()
        return True

    def _read_headers(self) -> http.client.HTTPMessage:
        lines: list[bytes] = []
        while True:
            line = self.rfile.readline()
            if line in (b"\r\n", b"\n", b""):
                break
            lines.append(line)
        text = b"".join(lines).decode("iso-8859-1")
        return email.parser.Parser(_class=self.MessageClass).parsestr(text)  # type: ignore[return-value]

    def _greet(self) -> None:
        self._discard_body()
        body = self.server.config.greeting().encode("utf-8")
        self.send_response(HTTPStatus.OK)
        self.send_header("content-type", "text/plain")
        self.send_header("content-length", str(len(body)))
        if self.close_connection:
            self.send_header("connection", "close")
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)
        log_debug("request_served", method=self.command, path=self.path)

    def _discard_body(self) -> None:
        """Drain a small request body; otherwise close after responding."""

        if self.headers.get("Transfer-Encoding"):
            self.close_connection = True
            return
        length_text = self.headers.get("Content-Length", "0").strip()
        if not length_text.isdigit() or int(length_text) > MAX_DISCARD_BYTES:
            self.close_connection = True
            return
        remaining = int(length_text)
        while remaining > 0:
            chunk = self.rfile.read(min(remaining, _DISCARD_CHUNK))
            if not chunk:
                self.close_connection = True
                return
            remaining -= len(chunk)

    def log_message(self, format: str, *args: Any) -> None:
        log_debug("http_server", client=self.address_string(), detail=format % args)


class GreeterServer(ThreadingHTTPServer):
    """Threaded HTTP server bound to ``config.listen`` on construction.

    Raises
    ------
    BindError
        When the address is malformed or the operating system refuses the bind.
    """

    def __init__(
        self,
        config: GreeterConfig,
        handler_class: type[BaseHTTPRequestHandler] = GreetingHandler,
    ) -> None:
        host, port, family = parse_listen_address(config.listen)
        self.address_family = family
        self.config = config
        try:
            super().__init__((host, port), handler_class)
        except OSError as exc:
            raise BindError(f"listen tcp {config.listen}: {exc.strerror or exc}") from exc
        log_info("server_bound", listen=config.listen, port=self.port)

    @property
    def port(self) -> int:
        """Port actually bound (useful when ``config.listen`` asked for ``0``)."""

        return self.server_address[1]

    def handle_error(self, request: Any, client_address: Any) -> None:
        error = sys.exc_info()[1]
        if isinstance(error, ConnectionError):
            log_debug("connection_error", client=str(client_address[0]), error=repr(error))
        else:
            log_error("connection_error", client=str(client_address[0]), error=repr(error))


def serve(config: GreeterConfig) -> None:
    """Bind and serve *config* until the process is terminated.

    Raises
    ------
    BindError
        When the listener cannot be created. Nothing is served in that case.
    """

    server = GreeterServer(config)
    if config.verbose:
        print(f"greeter listening at {config.listen}", file=sys.stderr, flush=True)
    with server:
        server.serve_forever()


__all__ = [
    "GreeterServer",
    "GreetingHandler",
    "HeaderBlockTooLarge",
    "MAX_HEADER_BYTES",
    "READ_TIMEOUT",
    "WRITE_TIMEOUT",
    "parse_listen_address",
    "serve",
]
