"""Tests for clamav_stream.models."""

import pytest

from clamav_stream.models import ScanResult, ScanStatus


class TestScanResult:
    def test_defaults(self):
        r = ScanResult(status=ScanStatus.ERROR)
        assert r.result is None
        assert r.signature is None

    def test_all_fields(self):
        r = ScanResult(status=ScanStatus.FAILED, result="stream: Eicar FOUND", signature="Eicar")
        assert r.status is ScanStatus.FAILED
        assert r.result == "stream: Eicar FOUND"
        assert r.signature == "Eicar"

    def test_frozen(self):
        r = ScanResult(status=ScanStatus.PASSED, result="stream: OK")
        with pytest.raises(AttributeError):
            r.status = ScanStatus.FAILED  # type: ignore[misc]

    def test_passed(self):
        assert ScanResult(ScanStatus.PASSED, "stream: OK").passed is True
        assert ScanResult(ScanStatus.ERROR, "").passed is False

    def test_infected(self):
        assert ScanResult(ScanStatus.FAILED, "stream: Eicar FOUND", "Eicar").infected is True
        assert ScanResult(ScanStatus.FAILED, "stream: odd").infected is False
        assert ScanResult(ScanStatus.CONNECTION_ERROR, "down").infected is False


class TestScanStatus:
    def test_values(self):
        assert {s.value for s in ScanStatus} == {"PASSED", "FAILED", "ERROR", "CONNECTION_ERROR"}

    def test_compares_as_str(self):
        assert ScanStatus.PASSED == "PASSED"
