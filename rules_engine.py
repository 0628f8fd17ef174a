"""
Deterministic safety checks

Purpose: apply hard rules independent of the LLM: compare a computed per-dose volume
against the medicine's safe-volume band.

Input: per-dose volume (ml), safe band min/max (ml).

Output: SafetyStatus.SAFE, BELOW_RANGE or ABOVE_RANGE.

Example: classify_safety(0.5, 0.5, 5.0) -> SafetyStatus.SAFE (the band is inclusive).

Notes: always run before any advisory is requested; the advisory never changes the status.
"""
from errors import InvalidRangeError
from models import SafetyStatus


def classify_safety(volume_ml: float, min_ml: float, max_ml: float) -> SafetyStatus:
    if min_ml > max_ml:
        raise InvalidRangeError(min_ml, max_ml)
    if volume_ml < min_ml:
        return SafetyStatus.BELOW_RANGE
    if volume_ml > max_ml:
        return SafetyStatus.ABOVE_RANGE
    return SafetyStatus.SAFE


def format_safe_range(min_ml: float, max_ml: float) -> str:
    return f"{min_ml:.2f} - {max_ml:.2f} ml"
