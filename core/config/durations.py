# ============================================================================
# DURATION PARSING
# ============================================================================
# STATUS: Core - Human duration strings
# PURPOSE: Parse and format durations such as "500ms", "2s", "1m30s"
# CREATED: 19 OCT 2026
# ============================================================================
"""
Duration Parsing

Durations are written the way operators write them in deployment
manifests: a sequence of decimal numbers, each with a unit suffix.

Units: ns, us (or µs), ms, s, m, h
Examples: "300ms", "1.5s", "2m", "1h15m"

A bare "0" is accepted, and numbers (int/float) are taken as seconds.
All values are returned as float seconds.
"""

import re
from typing import Union

# unit -> (multiplier, divisor)
_UNITS = {
    "ns": (1.0, 1e9),
    "us": (1.0, 1e6),
    "µs": (1.0, 1e6),
    "ms": (1.0, 1e3),
    "s": (1.0, 1.0),
    "m": (60.0, 1.0),
    "h": (3600.0, 1.0),
}

_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parse a duration into seconds.

    Args:
        value: Duration string, or a number of seconds

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the string is not a valid duration
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip()
    original = text
    if not text:
        raise ValueError("invalid duration: empty string")

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return 0.0

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _PART.match(text, pos)
        if match is None:
            if re.fullmatch(r"\d+(?:\.\d*)?", text[pos:]):
                raise ValueError(f"missing unit in duration {original!r}")
            raise ValueError(f"invalid duration {original!r}")
        multiplier, divisor = _UNITS[match.group(2)]
        total += float(match.group(1)) * multiplier / divisor
        pos = match.end()

    return sign * total


def format_duration(seconds: float) -> str:
    """Render seconds compactly: 0.5 -> "500ms", 90 -> "1m30s"."""
    if seconds == 0:
        return "0s"
    if seconds < 1:
        millis = seconds * 1000
        if millis >= 1 and float(millis).is_integer():
            return f"{int(millis)}ms"
        return f"{millis:g}ms"

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if hours or minutes:
        parts.append(f"{int(minutes)}m")
    parts.append(f"{secs:g}s")
    return "".join(parts)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "parse_duration",
    "format_duration",
]
