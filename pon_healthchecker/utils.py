#!/usr/bin/env python3
"""
Utility Functions
Common helpers shared by the probe, scheduler and CLI modules
"""

import logging
import math
import re
import sys

from .exceptions import ValidationError

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)')


def setup_logging(level=logging.INFO):
    """Set up logging configuration to stderr only"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


def parse_interval(value: str) -> float:
    """
    Parse an interval into seconds

    Accepts plain numbers (seconds) and duration strings such as
    ``10s``, ``1m30s`` or ``500ms``.
    """
    text = str(value).strip()
    if not text:
        raise ValidationError("empty interval")

    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValidationError(f"invalid interval: {value!r}")
        return seconds

    position = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(text) or not math.isfinite(seconds):
        raise ValidationError(f"invalid interval: {value!r}")
    return seconds


def elapsed_ms(start: float, end: float) -> float:
    """Whole milliseconds between two clock readings, truncated"""
    return float(int((end - start) * 1000))
