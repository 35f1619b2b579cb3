"""Wire-level helpers for the clamd TCP protocol.

Commands are prefixed with ``z`` so clamd expects them (and terminates its
replies) with a NUL byte. ``INSTREAM`` uploads are a sequence of frames, each
a 4-byte big-endian unsigned length followed by that many payload bytes,
closed by a zero-length frame.
"""

from __future__ import annotations

import struct

from clamav_stream.exceptions import ClamAVSizeLimitError
from clamav_stream.models import ScanResult, ScanStatus

PING = "zPING\0"
VERSION = "zVERSION\0"
INSTREAM = "zINSTREAM\0"

PONG = "PONG"
UNKNOWN_COMMAND = "UNKNOWN COMMAND"
RESPONSE_OK = "stream: OK"
FOUND_SUFFIX = "FOUND"
ERROR_SUFFIX = "ERROR"
SIZE_LIMIT_EXCEEDED = "INSTREAM size limit exceeded"

MAX_FRAME_LENGTH = 2**32 - 1
TERMINATOR = struct.pack("!L", 0)

# Everything up to and including the space, so NUL terminators go too.
_TRIM_CHARS = "".join(chr(c) for c in range(0x21))


def encode_frame(chunk: bytes) -> bytes:
    """Prefix *chunk* with its 4-byte big-endian length."""
    if len(chunk) > MAX_FRAME_LENGTH:
        raise ValueError(f"Chunk of {len(chunk)} bytes does not fit in a frame")
    return struct.pack("!L", len(chunk)) + bytes(chunk)


def decode_reply(raw: bytes) -> str:
    """Decode a clamd reply and trim whitespace, control bytes and NULs."""
    return raw.decode("utf-8", errors="replace").strip(_TRIM_CHARS)


def extract_signature(verdict: str) -> str | None:
    """Return ``<signature>`` from ``"<name>: <signature> FOUND"``.

    The name is whatever precedes the first colon (``stream`` for
    ``INSTREAM``). Returns ``None`` when the ``<name>:`` prefix is missing or
    nothing sits between the delimiters.
    """
    end = verdict.rfind(FOUND_SUFFIX)
    colon = verdict.find(":", 0, end)
    if end == -1 or colon == -1:
        return None
    start = colon + 1
    signature = verdict[start:end].strip()
    return signature or None


def classify_verdict(verdict: str) -> ScanResult:
    """Turn a trimmed ``INSTREAM`` reply into a :class:`ScanResult`.

    Raises:
        ClamAVSizeLimitError: If clamd refused the stream for its size.
    """
    if verdict.startswith(SIZE_LIMIT_EXCEEDED):
        raise ClamAVSizeLimitError(f"Clamd size limit exceeded: {verdict}")

    if not verdict or verdict.endswith(ERROR_SUFFIX):
        return ScanResult(status=ScanStatus.ERROR, result=verdict)
    if verdict == RESPONSE_OK:
        return ScanResult(status=ScanStatus.PASSED, result=verdict)
    if verdict.endswith(FOUND_SUFFIX):
        return ScanResult(
            status=ScanStatus.FAILED,
            result=verdict,
            signature=extract_signature(verdict),
        )
    return ScanResult(status=ScanStatus.FAILED, result=verdict)
