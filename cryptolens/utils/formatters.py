"""
Cryptolens Shared Formatters

Human-readable formatting for prices, percentage changes, volumes and kline
timestamps. Used by the summary engine and the CLI.
"""

from __future__ import annotations

from datetime import datetime, timezone

_PRICE_PRECISION = [
    (1000, 2),
    (100, 3),
    (1, 5),
    (0.1, 6),
    (0.01, 7),
]


def _trim(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_price(value: float | str) -> str:
    """Format a price with precision scaled to its magnitude.

    At most the given number of fraction digits, no trailing zeros, with
    thousands separators.

    >>> format_price(64203.5)
    '64,203.5'
    >>> format_price(0.0000125)
    '0.0000125'
    >>> format_price(-1234.56789)
    '-1,234.57'
    """
    num = float(value)
    magnitude = abs(num)
    for threshold, digits in _PRICE_PRECISION:
        if magnitude >= threshold:
            return _trim(f"{num:,.{digits}f}")
    return _trim(f"{num:,.8f}")


def format_price_change(value: float | str) -> str:
    """Signed percentage with two decimals.

    >>> format_price_change(3.456)
    '+3.46%'
    >>> format_price_change(-1)
    '-1.00%'
    """
    num = float(value)
    if num >= 0:
        return f"+{num:.2f}%"
    return f"{num:.2f}%"


_VOLUME_SUFFIXES = [
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
]


def format_volume(value: float | str) -> str:
    """Abbreviate a volume with K/M/B suffix.

    >>> format_volume(1_234_567)
    '1.23M'
    >>> format_volume(999)
    '999.00'
    """
    num = float(value)
    for threshold, suffix in _VOLUME_SUFFIXES:
        if num >= threshold:
            return f"{num / threshold:.2f}{suffix}"
    return f"{num:.2f}"


def format_open_time(open_time_ms: int) -> str:
    """Format a kline open time (epoch milliseconds) as UTC.

    >>> format_open_time(0)
    '1970-01-01 00:00'
    """
    dt = datetime.fromtimestamp(open_time_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M")
