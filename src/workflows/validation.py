"""
Line URI validation and normalisation.

Operator forms gate submission on ``validate_line_uri``; the five checks run
in a fixed order and the first failure determines the reason.
"""

import re
from enum import Enum

from pydantic import BaseModel

TEL_PREFIX = "tel:"

_E164_DIGITS = re.compile(r"[0-9]{1,15}")
_MIN_DIGITS = 7


class ValidationReason(str, Enum):
    REQUIRED = "Phone number is required"
    MISSING_TEL_PREFIX = "Must start with 'tel:'"
    MISSING_PLUS = "Number must start with + after tel:"
    INVALID_DIGITS = "Must contain 1-15 digits (E.164 format)"
    TOO_SHORT = "Must contain at least 7 digits"


class ValidationResult(BaseModel):
    valid: bool
    reason: str | None = None


def validate_line_uri(candidate: str | None) -> ValidationResult:
    """Validate a ``tel:+<digits>`` line URI."""

    def fail(reason: ValidationReason) -> ValidationResult:
        return ValidationResult(valid=False, reason=reason.value)

    if not candidate:
        return fail(ValidationReason.REQUIRED)
    if not candidate.startswith(TEL_PREFIX):
        return fail(ValidationReason.MISSING_TEL_PREFIX)

    number = candidate[len(TEL_PREFIX) :]
    if not number.startswith("+"):
        return fail(ValidationReason.MISSING_PLUS)

    digits = number[1:]
    if not _E164_DIGITS.fullmatch(digits):
        return fail(ValidationReason.INVALID_DIGITS)
    if len(digits) < _MIN_DIGITS:
        return fail(ValidationReason.TOO_SHORT)

    return ValidationResult(valid=True)


def normalize_line_uri(raw: str) -> str:
    """
    Bring a directory-reported number into ``tel:+<digits>`` form.

    Teams may report numbers with or without the ``tel:`` scheme, without a
    leading ``+``, or with an ``;ext=`` suffix. Ten digit numbers are assumed
    to be North American. Blank input, with or without the scheme, stays blank.
    """
    number = raw.strip()
    if number.lower().startswith(TEL_PREFIX):
        number = number[len(TEL_PREFIX) :]
    number = number.split(";", 1)[0].strip()
    if not number:
        return ""

    if not number.startswith("+"):
        if len(number) == 10 and number.isdigit():
            number = f"+1{number}"
        else:
            number = f"+{number}"

    return f"{TEL_PREFIX}{number}"
