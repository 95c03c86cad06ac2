"""
Barcode Codec - validate and repair 13-digit (EAN-13) codes.

Construction is non-strict: the payload digits are always trusted over
any check digit supplied with them, so the check digit is recomputed.
"""

import re
from dataclasses import dataclass
from typing import Optional

PAYLOAD_LENGTH = 12
CODE_LENGTH = 13
MIN_REPAIRABLE_LENGTH = 11
PLACEHOLDER_DIGIT = "0"

_NON_DIGIT = re.compile(r"\D")


def compute_check_digit(payload: str) -> int:
    """
    Compute the EAN-13 check digit for a 12-digit payload.

    Positions are 1-indexed from the left: odd positions weigh 1,
    even positions weigh 3.
    """
    if len(payload) != PAYLOAD_LENGTH or not payload.isdigit():
        raise ValueError(f"Payload must be {PAYLOAD_LENGTH} digits: {payload!r}")

    total = 0
    for position, digit in enumerate(payload, start=1):
        weight = 1 if position % 2 else 3
        total += int(digit) * weight
    return (10 - total % 10) % 10


def is_valid(code: str) -> bool:
    """Return True if code is 13 digits with a correct check digit."""
    if len(code) != CODE_LENGTH or not code.isdigit():
        return False
    return compute_check_digit(code[:PAYLOAD_LENGTH]) == int(code[-1])


@dataclass(frozen=True, order=True)
class Ean13:
    """A validated 13-digit barcode. Equal iff the digit strings are equal."""
    code: str

    def __post_init__(self):
        if not is_valid(self.code):
            raise ValueError(f"Not a valid EAN-13 code: {self.code!r}")

    def __str__(self) -> str:
        return self.code

    @property
    def payload(self) -> str:
        return self.code[:PAYLOAD_LENGTH]

    @property
    def check_digit(self) -> int:
        return int(self.code[-1])


def repair_or_reject(raw: str) -> Optional[Ean13]:
    """
    Repair a raw barcode token into an Ean13, or reject it.

    Non-digit characters are stripped first. Then:
    - fewer than 11 digits, or all zeros: dead code, returns None
    - exactly 11 digits: a placeholder digit is appended, then the
      check digit is computed over the resulting 12-digit payload
    - 12 or more digits: the check digit is recomputed from the leading
      12 digits and replaces whatever followed them
    """
    digits = _NON_DIGIT.sub("", raw or "")
    if len(digits) < MIN_REPAIRABLE_LENGTH or not digits.strip("0"):
        return None

    if len(digits) == MIN_REPAIRABLE_LENGTH:
        digits += PLACEHOLDER_DIGIT

    payload = digits[:PAYLOAD_LENGTH]
    return Ean13(payload + str(compute_check_digit(payload)))
