"""Utility helpers for the models package."""

from __future__ import annotations

import re
import secrets
import string
from typing import Container, Optional

BASE62_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase

PARTICIPANT_ID_PREFIX = "PT"
PRIZE_ID_PREFIX = "PZ"


def generate_entity_id(
    prefix: str,
    taken: Optional[Container[str]] = None,
    length: int = 12,
    max_attempts: int = 32,
) -> str:
    """Return an opaque identifier made of ``prefix`` and base62 random characters.

    When ``taken`` is provided, the helper retries while the generated value is
    already present in it.
    """

    attempts = 0
    while attempts < max_attempts:
        suffix = "".join(secrets.choice(BASE62_ALPHABET) for _ in range(length))
        candidate = f"{prefix}-{suffix}"[:64]
        if taken is not None and candidate in taken:
            attempts += 1
            continue
        return candidate

    raise RuntimeError(
        f"Unable to generate a unique '{prefix}' identifier after multiple attempts"
    )


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_leading_int(value: object) -> Optional[int]:
    """Read the integer at the start of ``value`` (``"3 units"`` -> 3).

    Integral floats are accepted as well; anything else yields ``None``.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))
