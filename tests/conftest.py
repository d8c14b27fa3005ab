"""Shared fixtures keeping tests independent from the host environment."""

from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler
from typing import Callable, Iterator

import pytest

from greeter.adapters.env.default import ENV_VARIABLES
from greeter.domain.config import GreeterConfig
from greeter.server import GreeterServer, GreetingHandler


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop greeter variables inherited from the shell (CI often sets ``VERSION``)."""

    for variable in ENV_VARIABLES:
        monkeypatch.delenv(variable, raising=False)


@pytest.fixture()
def start_server() -> Iterator[Callable[..., GreeterServer]]:
    """Start greeter servers on background threads and stop them after the test."""

    started: list[tuple[GreeterServer, threading.Thread]] = []

    def _start(
        config: GreeterConfig, handler_class: type[BaseHTTPRequestHandler] = GreetingHandler
    ) -> GreeterServer:
        server = GreeterServer(config, handler_class)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        started.append((server, thread))
        return server

    yield _start

    for server, thread in started:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)
