"""
Number range arithmetic for finding free numbers.

A range is a pattern whose trailing ``x`` characters are variable digits,
e.g. ``tel:+1555123xxxx`` (10,000 numbers) or ``1234xxx`` (extensions).
"""

import math
import re
from collections.abc import Iterable

from src.db.phone_numbers.schemas import NextAvailableResponse

_DIGITS = re.compile(r"\d+")


class InvalidRangeError(ValueError):
    pass


def _strip_tel(value: str) -> str:
    return value[4:] if value.lower().startswith("tel:") else value


def find_next_available(
    number_range: str, line_uris: Iterable[str]
) -> NextAvailableResponse:
    """
    Find the lowest unused number in a range.

    Args:
        number_range: Pattern containing ``x`` wildcards
        line_uris: Line URIs already present in the inventory

    Returns:
        NextAvailableResponse: The next free number and range utilization

    Raises:
        InvalidRangeError: If the pattern has no ``x`` wildcards
    """
    pattern = number_range.lower()
    if "x" not in pattern:
        raise InvalidRangeError(
            "Number range must contain 'x' characters to represent variable digits"
        )

    prefix = number_range[: pattern.index("x")]
    variable_length = pattern.count("x")
    capacity = 10**variable_length
    match_prefix = _strip_tel(prefix).lower()

    used: set[int] = set()
    for line_uri in line_uris:
        normalized = _strip_tel(line_uri).lower()
        if not normalized.startswith(match_prefix):
            continue
        digits = _DIGITS.search(normalized[len(match_prefix) :])
        if digits and len(digits.group()) == variable_length:
            used.add(int(digits.group()))

    # The first gap is at most len(used) positions in
    candidate = next(
        (value for value in range(min(capacity, len(used) + 1)) if value not in used),
        None,
    )
    utilization = math.floor(len(used) * 100 / capacity + 0.5)

    if candidate is None:
        return NextAvailableResponse(
            number_range=number_range,
            available=False,
            total_capacity=capacity,
            used_count=len(used),
            remaining_capacity=0,
            utilization_percent=utilization,
        )

    variable_digits = str(candidate).zfill(variable_length)
    if prefix.lower().startswith("tel:"):
        next_line_uri = f"{prefix}{variable_digits}"
    elif prefix.startswith(("+", "1")):
        next_line_uri = f"tel:{prefix}{variable_digits}"
    else:
        next_line_uri = f"{prefix}{variable_digits}"

    return NextAvailableResponse(
        number_range=number_range,
        available=True,
        next_available=next_line_uri,
        next_variable_digits=variable_digits,
        total_capacity=capacity,
        used_count=len(used),
        remaining_capacity=capacity - len(used),
        utilization_percent=utilization,
    )
