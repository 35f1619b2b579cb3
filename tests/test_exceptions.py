"""Tests for clamav_stream.exceptions."""

from clamav_stream.exceptions import (
    ClamAVConnectionError,
    ClamAVError,
    ClamAVErrorKind,
    ClamAVSizeLimitError,
    ClamAVStreamTerminatedError,
    ClamAVTimeoutError,
    UnknownCommandError,
)


def test_hierarchy():
    assert issubclass(ClamAVConnectionError, ClamAVError)
    assert issubclass(ClamAVTimeoutError, ClamAVConnectionError)
    assert issubclass(ClamAVStreamTerminatedError, ClamAVConnectionError)
    assert issubclass(UnknownCommandError, ClamAVError)
    assert issubclass(ClamAVSizeLimitError, ClamAVError)


def test_base_is_exception():
    assert issubclass(ClamAVError, Exception)


def test_default_kinds():
    assert ClamAVError("x").kind is ClamAVErrorKind.TRANSPORT_FAILURE
    assert ClamAVConnectionError("x").kind is ClamAVErrorKind.TRANSPORT_FAILURE
    assert UnknownCommandError("x").kind is ClamAVErrorKind.UNRECOGNIZED_COMMAND
    assert ClamAVStreamTerminatedError("x").kind is ClamAVErrorKind.PROTOCOL_VIOLATION
    assert ClamAVSizeLimitError("x").kind is ClamAVErrorKind.SIZE_LIMIT_EXCEEDED


def test_kind_override_is_per_instance():
    exc = ClamAVConnectionError("refused", kind=ClamAVErrorKind.UNREACHABLE_DAEMON)
    assert exc.kind is ClamAVErrorKind.UNREACHABLE_DAEMON
    assert ClamAVConnectionError("other").kind is ClamAVErrorKind.TRANSPORT_FAILURE


def test_message_preserved():
    exc = ClamAVStreamTerminatedError("Reply from server: INSTREAM size limit exceeded. ERROR")
    assert "size limit" in str(exc)
