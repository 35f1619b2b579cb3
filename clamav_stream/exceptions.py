"""Exception hierarchy for the clamd stream client."""

from __future__ import annotations

import enum


class ClamAVErrorKind(str, enum.Enum):
    """Failure class carried by every :class:`ClamAVError`.

    Lets callers branch on what went wrong without parsing messages.
    """

    UNREACHABLE_DAEMON = "UNREACHABLE_DAEMON"
    UNRECOGNIZED_COMMAND = "UNRECOGNIZED_COMMAND"
    SIZE_LIMIT_EXCEEDED = "SIZE_LIMIT_EXCEEDED"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    PROTOCOL_VIOLATION = "PROTOCOL_VIOLATION"


class ClamAVError(Exception):
    """Base exception for all clamd client errors.

    Args:
        message: Human-readable description.
        kind: Overrides the class default :attr:`kind`.
    """

    kind: ClamAVErrorKind = ClamAVErrorKind.TRANSPORT_FAILURE

    def __init__(self, message: str = "", kind: ClamAVErrorKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ClamAVConnectionError(ClamAVError):
    """Raised when the socket to clamd cannot be opened, read or written.

    ``kind`` is ``UNREACHABLE_DAEMON`` when raised while connecting and
    ``TRANSPORT_FAILURE`` once the connection was established.
    """


class ClamAVTimeoutError(ClamAVConnectionError):
    """Raised when connecting to or reading from clamd exceeds its timeout."""


class UnknownCommandError(ClamAVError):
    """Raised when clamd replies ``UNKNOWN COMMAND``."""

    kind = ClamAVErrorKind.UNRECOGNIZED_COMMAND


class ClamAVStreamTerminatedError(ClamAVConnectionError):
    """Raised when clamd replies before the ``INSTREAM`` upload was terminated.

    The message embeds the daemon's early reply verbatim, typically a size
    limit or malformed stream complaint.
    """

    kind = ClamAVErrorKind.PROTOCOL_VIOLATION


class ClamAVSizeLimitError(ClamAVError):
    """Raised when clamd reports ``INSTREAM size limit exceeded``.

    Signals that ``StreamMaxLength`` in ``clamd.conf`` is too small for the
    payload. This is a deployment problem, not a scan verdict, so it is
    raised out of the scan methods instead of being folded into a result.
    """

    kind = ClamAVErrorKind.SIZE_LIMIT_EXCEEDED
