"""
api/limiter.py -- Shared slowapi rate limiter instance and per-route limits.

Import this in both api/main.py (to mount as middleware) and the route
modules (to apply per-route limits with @limiter.limit()).

Using a single shared instance ensures all routes share the same in-memory
counter store. If this were instantiated in each module separately, each
module would get its own isolated counter and rate limits would never trigger.

The limit strings are callables so the values come from Settings at request
time rather than at import time.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def write_limit() -> str:
    return get_settings().write_rate_limit


def read_limit() -> str:
    return get_settings().read_rate_limit
