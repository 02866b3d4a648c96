"""Normalization helpers.

Centralizes defensive parsing of feed values so the derivation layer can
assume well-formed input.
"""

from __future__ import annotations

import math
from typing import Any

from stoptiles._constants import MS_THRESHOLD


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def safe_timestamp(value: Any) -> float | None:
    """Normalize an epoch timestamp to seconds.

    Values above ``1e11`` are treated as milliseconds.  Missing,
    unparseable and non-positive values yield ``None``.
    """
    ts = safe_float(value)
    if ts is None or ts <= 0:
        return None
    if ts > MS_THRESHOLD:
        ts /= 1000.0
    return ts


def as_sequence(value: Any) -> list[Any]:
    """Return *value* as a list; ``None`` and non-sequences become empty."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return []
