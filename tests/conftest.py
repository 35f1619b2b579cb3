"""Shared test fixtures."""

from __future__ import annotations

import socket
from typing import Callable, Iterator

import pytest

from clamav_stream.client import ClamAVClient
from fake_clamd import FakeClamd, Handler


@pytest.fixture()
def sample_bytes() -> bytes:
    return b"Hello, ClamAV!"


@pytest.fixture()
def eicar_bytes() -> bytes:
    """EICAR anti-malware test string (safe; every AV recognises it)."""
    return b"X5O!P%@AP[4\\PZX54(P^)7CC)7}$EICAR-STANDARD-ANTIVIRUS-TEST-FILE!$H+H*"


@pytest.fixture()
def fake_clamd() -> Iterator[Callable[..., FakeClamd]]:
    """Start a :class:`FakeClamd` serving the given handlers, one per connection."""
    servers: list[FakeClamd] = []

    def start(*handlers: Handler) -> FakeClamd:
        server = FakeClamd(list(handlers))
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()


@pytest.fixture()
def client_for() -> Callable[..., ClamAVClient]:
    def build(server: FakeClamd, **kwargs: object) -> ClamAVClient:
        kwargs.setdefault("connect_timeout", 1.0)
        kwargs.setdefault("read_timeout", 3.0)
        return ClamAVClient("127.0.0.1", server.port, **kwargs)  # type: ignore[arg-type]

    return build


@pytest.fixture()
def closed_port() -> int:
    """A local TCP port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
