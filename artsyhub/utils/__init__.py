"""Shared helpers (caching, value fallbacks)."""

from .cache import MISSING, TTLCache
from .fallback import first_present, is_present

__all__ = ["MISSING", "TTLCache", "first_present", "is_present"]
