"""Ordered fallback selection for merging caller and catalog values."""

from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple

Candidate = Tuple[Any, str]


def is_present(value: Any) -> bool:
    """Empty strings and whitespace count as missing, like None."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def first_present(candidates: Iterable[Candidate], default: Any = None) -> Tuple[Any, Optional[str]]:
    """Return ``(value, source)`` for the first candidate carrying a value.

    Candidates are ``(value, source)`` pairs in precedence order, e.g.
    ``[(payload_nationality, "request"), (facts.nationality, "artsy")]``.
    When nothing qualifies ``(default, None)`` is returned.
    """
    for value, source in candidates:
        if is_present(value):
            return value, source
    return default, None


__all__ = ["first_present", "is_present", "Candidate"]
