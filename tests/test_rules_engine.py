import pytest

from errors import InvalidRangeError
from models import SafetyStatus
from rules_engine import classify_safety, format_safe_range


class TestClassifySafety:

    @pytest.mark.parametrize("volume", [0.5, 2.0, 5.0])
    def test_inclusive_band_is_safe(self, volume):
        assert classify_safety(volume, 0.5, 5.0) is SafetyStatus.SAFE

    def test_below(self):
        assert classify_safety(0.49, 0.5, 5.0) is SafetyStatus.BELOW_RANGE

    def test_above(self):
        assert classify_safety(5.01, 0.5, 5.0) is SafetyStatus.ABOVE_RANGE

    def test_zero_width_band(self):
        assert classify_safety(1.0, 1.0, 1.0) is SafetyStatus.SAFE
        assert classify_safety(0.0, 1.0, 1.0) is SafetyStatus.BELOW_RANGE

    def test_inverted_band_is_rejected(self):
        with pytest.raises(InvalidRangeError):
            classify_safety(1.0, 5.0, 0.5)


def test_format_safe_range():
    assert format_safe_range(0.5, 5) == "0.50 - 5.00 ml"
