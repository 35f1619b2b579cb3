"""clamav-stream — Python client for the ClamAV daemon (clamd) TCP protocol."""

from clamav_stream.client import ClamAVClient
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

__all__ = [
    "ClamAVClient",
    "ScanResult",
    "ScanStatus",
    "ClamAVError",
    "ClamAVErrorKind",
    "ClamAVConnectionError",
    "ClamAVTimeoutError",
    "ClamAVStreamTerminatedError",
    "ClamAVSizeLimitError",
    "UnknownCommandError",
]
