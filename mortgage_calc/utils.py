"""Utility functions for the mortgage calculator.

This module provides helpers for turning the free-form text typed into the
form fields into numbers, and for rendering numbers back with thousands
separators. Parsing never raises: anything that cannot be read as a number
becomes ``0``, which the rest of the calculator treats as "not entered yet".
"""

from __future__ import annotations

import math
import re
from typing import Any

# Leading decimal number, optionally signed, with an optional exponent.
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(value: Any) -> float:
    """Convert user input into a float.

    Parameters
    ----------
    value: Any
        A string such as ``"250,000"`` or ``" 4.5 "``, a number, or ``None``.

    Returns
    -------
    float
        The parsed value. Thousands commas and surrounding whitespace are
        removed and the leading number is read, so ``"4.5%"`` gives ``4.5``.
        Absent, empty, unparseable and non-finite input gives ``0.0``.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # int beyond the float range
            return 0.0
    else:
        cleaned = str(value).replace(",", "").strip()
        match = _NUMBER_PREFIX.match(cleaned)
        if not match:
            return 0.0
        number = float(match.group(0))
    if not math.isfinite(number):
        return 0.0
    return number


def format_grouped(value: float, max_fraction_digits: int = 2) -> str:
    """Format ``value`` with comma grouping and at most ``max_fraction_digits``.

    Trailing zeros in the fraction are dropped, so ``1500.5`` renders as
    ``"1,500.5"`` and ``1500.0`` as ``"1,500"``.
    """
    text = f"{value:,.{max_fraction_digits}f}"
    if max_fraction_digits > 0:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_number_string(value: Any) -> str:
    """Return the display form of a field value, or ``""`` if it parses to 0.

    This is the inverse direction of :func:`parse_number` and is lossy: only
    two fractional digits survive.
    """
    number = parse_number(value)
    if not number:
        return ""
    return format_grouped(number, 2)
