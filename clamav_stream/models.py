"""Data models for clamd scan results."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ScanStatus(str, enum.Enum):
    """Outcome of a stream scan."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    ERROR = "ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Result of an ``INSTREAM`` scan.

    Attributes:
        status: Scan outcome, see :class:`ScanStatus`.
        result: Trimmed reply text from clamd, or an error description when
            the exchange failed. ``None`` when there is nothing to report.
        signature: Malware signature name; set only for ``FAILED`` results
            whose reply ended in ``FOUND``.
    """

    status: ScanStatus
    result: str | None = None
    signature: str | None = None

    @property
    def passed(self) -> bool:
        return self.status is ScanStatus.PASSED

    @property
    def infected(self) -> bool:
        return self.status is ScanStatus.FAILED and self.signature is not None
