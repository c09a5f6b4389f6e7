"""Time-code conversion.

Analyzer output carries times as ``MM:SS.mmm`` or ``HH:MM:SS.mmm`` strings.
Everything inside the pipeline works in float seconds; strings only appear
at the JSON boundary.
"""
import math
import re
from typing import Union

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

INVALID_TIME = "--:--.--"


def _leading_int(text: str) -> float:
    match = _LEADING_INT.match(text)
    return float(int(match.group(1))) if match else math.nan


def _leading_float(text: str) -> float:
    match = _LEADING_FLOAT.match(text)
    return float(match.group(1)) if match else math.nan


def parse_time(code: Union[str, int, float, None]) -> float:
    """
    Convert a time-code to seconds.

    Numbers pass through unchanged. Strings with two parts are read as
    minutes:seconds, three parts as hours:minutes:seconds. Anything else is
    parsed as a leading float; text with no number in front yields NaN.
    Never raises.
    """
    if code is None:
        return math.nan
    if isinstance(code, (int, float)):
        return float(code)

    parts = str(code).split(":")
    if len(parts) == 2:
        minutes, seconds = parts
        return _leading_int(minutes) * 60 + _leading_float(seconds)
    if len(parts) == 3:
        hours, minutes, seconds = parts
        return _leading_int(hours) * 3600 + _leading_int(minutes) * 60 + _leading_float(seconds)
    return _leading_float(str(code))


def format_time(seconds: float) -> str:
    """Format seconds as ``MM:SS.ss`` (always the two-part form)."""
    if seconds is None or not math.isfinite(seconds):
        return INVALID_TIME
    minutes = math.floor(seconds / 60)
    secs = seconds - minutes * 60
    return f"{minutes:02d}:{secs:05.2f}"
