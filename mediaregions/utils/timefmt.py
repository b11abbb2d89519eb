"""Time formatting utilities.

Provides `format_time` (seconds as mm:ss.mmm) and `format_range` for the
``[start - end]`` spans printed in region descriptions and log lines.
"""

from __future__ import annotations

import math

__all__ = ["format_time", "format_range"]


def format_time(seconds: float) -> str:
    """Return a human-friendly timestamp mm:ss.mmm.

    Uses ROUND_HALF_UP semantics for milliseconds to avoid Python's bankers rounding
    edge cases (e.g., 1.2345 -> 1.235). Negative values clamp to 0. Non-finite
    values (open-ended seek ranges, malformed regions) render as ``--:--.---``.
    """
    if not math.isfinite(seconds):
        return "--:--.---"
    if seconds < 0:
        seconds = 0.0
    from decimal import Decimal, ROUND_HALF_UP

    ms_total = int(
        (Decimal(str(seconds)) * Decimal(1000)).to_integral_value(
            rounding=ROUND_HALF_UP
        )
    )
    m, rem = divmod(ms_total, 60000)
    s, ms = divmod(rem, 1000)
    return f"{m:02d}:{s:02d}.{ms:03d}"  # mm:ss.mmm


def format_range(start: float, end: float) -> str:
    return f"[{format_time(start)} - {format_time(end)}]"
