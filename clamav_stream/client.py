"""Synchronous TCP client for the ClamAV daemon (clamd)."""

from __future__ import annotations

import contextlib
import io
import logging
import os
import selectors
import socket
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Union

from clamav_stream import protocol
from clamav_stream.exceptions import (
    ClamAVConnectionError,
    ClamAVError,
    ClamAVErrorKind,
    ClamAVSizeLimitError,
    ClamAVStreamTerminatedError,
    ClamAVTimeoutError,
    UnknownCommandError,
)
from clamav_stream.models import ScanResult, ScanStatus

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3310
DEFAULT_CONNECT_TIMEOUT = 3.0
DEFAULT_READ_TIMEOUT = 15.0
DEFAULT_CHUNK_SIZE = 2048

NO_PONG_MESSAGE = "ClamAV did not respond to ping request"

ConnectionFactory = Callable[[], socket.socket]
ScanTarget = Union[bytes, bytearray, memoryview, str, os.PathLike, BinaryIO]


class ClamAVClient:
    """Client for a clamd daemon listening on a TCP socket.

    Every command and every scan runs over its own short-lived connection;
    the client holds configuration only and can be shared between threads.

    Args:
        host: Hostname or IP address of clamd.
        port: TCP port of clamd.
        connect_timeout: Seconds to wait for the connection to open.
        read_timeout: Seconds to wait on each socket read or write.
        chunk_size: Maximum payload size of one ``INSTREAM`` frame. Must stay
            below ``StreamMaxLength`` in ``clamd.conf``.
        connection_factory: Optional zero-argument callable returning a
            connected socket, used instead of opening a TCP connection to
            *host*:*port*.

    Example::

        client = ClamAVClient("localhost", 3310)
        result = client.scan_file("/tmp/sample.txt")
        print(result.status, result.signature)
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        if not 0 < chunk_size <= protocol.MAX_FRAME_LENGTH:
            raise ValueError(f"chunk_size must be between 1 and {protocol.MAX_FRAME_LENGTH}")
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout
        self._chunk_size = chunk_size
        self._connection_factory = connection_factory or self._connect

    @classmethod
    def from_env(cls, **kwargs: object) -> ClamAVClient:
        """Build a client from ``CLAMD_*`` environment variables.

        Reads ``CLAMD_HOST``, ``CLAMD_PORT``, ``CLAMD_CONNECT_TIMEOUT`` and
        ``CLAMD_READ_TIMEOUT``; unset variables fall back to the defaults.
        Keyword arguments override both.
        """
        env = os.environ
        settings: dict[str, object] = {
            "host": env.get("CLAMD_HOST", DEFAULT_HOST),
            "port": int(env.get("CLAMD_PORT", DEFAULT_PORT)),
            "connect_timeout": float(env.get("CLAMD_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT)),
            "read_timeout": float(env.get("CLAMD_READ_TIMEOUT", DEFAULT_READ_TIMEOUT)),
        }
        settings.update(kwargs)
        return cls(**settings)  # type: ignore[arg-type]

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def connect_timeout(self) -> float:
        return self._connect_timeout

    @property
    def read_timeout(self) -> float:
        return self._read_timeout

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def __repr__(self) -> str:
        return f"{type(self).__name__}(host={self._host!r}, port={self._port})"

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def send_command(self, command: str) -> str:
        """Send a raw command to clamd and return its trimmed reply.

        Prefix the command with ``z`` and end it with a NUL byte
        (``"zPING\\0"``) so clamd knows how it is delimited; the command is
        written verbatim.

        Args:
            command: Command string including its terminator.

        Returns:
            The reply with surrounding whitespace and NUL bytes removed.

        Raises:
            UnknownCommandError: If clamd does not recognise *command*.
            ClamAVTimeoutError: If connecting or reading times out.
            ClamAVConnectionError: If clamd is unreachable or the connection
                fails.
        """
        with self._connection() as sock:
            sock.sendall(command.encode("utf-8"))
            raw = _read_until_eof(sock)

        response = protocol.decode_reply(raw)
        logger.debug("Response from [%s:%s]: %s", self._host, self._port, response)

        if response == protocol.UNKNOWN_COMMAND:
            raise UnknownCommandError(f"Command {command!r} was not recognized")
        return response

    def ping(self) -> bool:
        """Check whether clamd is reachable and answers ``PONG``.

        Never raises; any failure yields ``False``.
        """
        try:
            return self.send_command(protocol.PING).upper() == protocol.PONG
        except Exception as exc:
            logger.debug("Ping to [%s:%s] failed: %s", self._host, self._port, exc)
            return False

    def version(self) -> str:
        """Return the version string reported by clamd.

        Raises:
            ClamAVError: If the ``VERSION`` command fails for any reason. The
                original exception is chained and its ``kind`` is kept.
        """
        try:
            return self.send_command(protocol.VERSION)
        except Exception as exc:
            kind = exc.kind if isinstance(exc, ClamAVError) else ClamAVErrorKind.TRANSPORT_FAILURE
            raise ClamAVError(
                "Failed to retrieve ClamAV version: error occurred while sending 'VERSION' command.",
                kind=kind,
            ) from exc

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan_stream(self, stream: BinaryIO) -> ScanResult:
        """Scan the content of a readable binary stream with ``INSTREAM``.

        Failures are reported in the returned result: ``CONNECTION_ERROR``
        when clamd does not answer a ping, ``ERROR`` when the exchange breaks
        down.

        Args:
            stream: Binary stream read until exhausted. It is not closed.

        Returns:
            A :class:`ScanResult` with the verdict.

        Raises:
            ClamAVSizeLimitError: If clamd rejects the stream as larger than
                its configured ``StreamMaxLength``.
        """
        if not self.ping():
            return ScanResult(status=ScanStatus.CONNECTION_ERROR, result=NO_PONG_MESSAGE)

        try:
            with self._connection() as sock:
                sock.sendall(protocol.INSTREAM.encode("utf-8"))
                frames = self._upload(sock, stream)
                sock.sendall(protocol.TERMINATOR)
                verdict = protocol.decode_reply(_read_until_eof(sock))
            logger.debug("Sent %d frame(s) to [%s:%s], verdict: %s", frames, self._host, self._port, verdict)
            return protocol.classify_verdict(verdict)
        except ClamAVSizeLimitError:
            raise
        except Exception as exc:
            logger.error("An error occurred while scanning stream: %s", exc, exc_info=True)
            return ScanResult(status=ScanStatus.ERROR, result=str(exc))

    def scan_bytes(self, data: Union[bytes, bytearray, memoryview]) -> ScanResult:
        """Scan in-memory bytes.

        Args:
            data: Raw content.

        Returns:
            A :class:`ScanResult` with the verdict.
        """
        return self.scan_stream(io.BytesIO(bytes(data)))

    def scan_file(self, file_path: Union[str, Path]) -> ScanResult:
        """Scan a file on disk.

        Args:
            file_path: Path to the file to scan.

        Returns:
            A :class:`ScanResult` with the verdict.

        Raises:
            FileNotFoundError: If *file_path* does not exist.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(path, "rb") as fh:
            return self.scan_stream(fh)

    def scan(self, target: ScanTarget) -> ScanResult:
        """Scan bytes, a file path or a binary stream.

        ``str`` and :class:`os.PathLike` values are treated as paths.
        """
        if isinstance(target, (bytes, bytearray, memoryview)):
            return self.scan_bytes(target)
        if isinstance(target, (str, os.PathLike)):
            return self.scan_file(target)  # type: ignore[arg-type]
        return self.scan_stream(target)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _connect(self) -> socket.socket:
        return socket.create_connection((self._host, self._port), timeout=self._connect_timeout)

    def _open(self) -> socket.socket:
        try:
            return self._connection_factory()
        except TimeoutError as exc:
            raise ClamAVTimeoutError(
                f"Timed out connecting to {self._host}:{self._port}.",
                kind=ClamAVErrorKind.UNREACHABLE_DAEMON,
            ) from exc
        except OSError as exc:
            raise ClamAVConnectionError(
                f"Error connecting to {self._host}:{self._port}. {exc}",
                kind=ClamAVErrorKind.UNREACHABLE_DAEMON,
            ) from exc

    @contextlib.contextmanager
    def _connection(self) -> Iterator[socket.socket]:
        sock = self._open()
        try:
            sock.settimeout(self._read_timeout)
            yield sock
        except TimeoutError as exc:
            raise ClamAVTimeoutError(f"Timed out waiting for {self._host}:{self._port}.") from exc
        except OSError as exc:
            raise ClamAVConnectionError(f"Error communicating with {self._host}:{self._port}. {exc}") from exc
        finally:
            sock.close()

    def _upload(self, sock: socket.socket, stream: BinaryIO) -> int:
        frames = 0
        with selectors.DefaultSelector() as selector:
            selector.register(sock, selectors.EVENT_READ)
            while True:
                chunk = stream.read(self._chunk_size)
                if not chunk:
                    break
                try:
                    sock.sendall(protocol.encode_frame(chunk))
                except OSError as exc:
                    # clamd resets the connection after an early reply it sent
                    reply = _read_pending(sock, selector)
                    if not reply:
                        raise
                    raise _terminated(reply) from exc
                frames += 1
                if selector.select(timeout=0):
                    # clamd only answers early when it gives up on the stream
                    raise _terminated(_read_reply(sock))
        return frames


def _terminated(reply: bytes) -> ClamAVStreamTerminatedError:
    return ClamAVStreamTerminatedError(
        f"Scan command has been terminated. Reply from server: {protocol.decode_reply(reply)}"
    )


def _read_until_eof(sock: socket.socket) -> bytes:
    buf = bytearray()
    while True:
        chunk = sock.recv(DEFAULT_CHUNK_SIZE)
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf)


def _read_reply(sock: socket.socket) -> bytes:
    """Read to end-of-stream, keeping what arrived before a reset."""
    buf = bytearray()
    while True:
        try:
            chunk = sock.recv(DEFAULT_CHUNK_SIZE)
        except OSError:
            if buf:
                break
            raise
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf)


def _read_pending(sock: socket.socket, selector: selectors.BaseSelector) -> bytes:
    """Read whatever is already buffered on *sock* without blocking."""
    buf = bytearray()
    while selector.select(timeout=0):
        try:
            chunk = sock.recv(DEFAULT_CHUNK_SIZE)
        except OSError:
            break
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf)
