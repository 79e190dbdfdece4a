#!/usr/bin/env python3
"""Per-client fixed-window request limiting."""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

from .search import META_ONLY_VALUES

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
METADATA_LIMIT = 200
WINDOW_SECONDS = 60
MAX_TRACKED_CLIENTS = 1000


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Counts requests per client key; stale windows reset, oldest clients are evicted"""

    def __init__(self, window_seconds: int = WINDOW_SECONDS, max_clients: int = MAX_TRACKED_CLIENTS,
                 clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self.max_clients = max_clients
        self._clock = clock
        self._windows: 'OrderedDict[str, _Window]' = OrderedDict()
        self._lock = Lock()

    def hit(self, key: str, limit: int) -> bool:
        """Record a request; False when the client is over its limit"""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or window.reset_at <= now:
                window = _Window(count=0, reset_at=now + self.window_seconds)
            if window.count >= limit:
                return False
            window.count += 1
            self._windows[key] = window
            self._windows.move_to_end(key)
            while len(self._windows) > self.max_clients:
                self._windows.popitem(last=False)
            return True

    def reset(self):
        with self._lock:
            self._windows.clear()


def client_key(request) -> str:
    forwarded_for = request.headers.get('x-forwarded-for')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip() or 'anonymous'
    return 'anonymous'


def apply_rate_limit(request, limiter: 'RateLimiter', limit: Optional[int] = None) -> bool:
    if limit is None:
        meta_only = (request.query_params.get('metaOnly') or '').lower() in META_ONLY_VALUES
        limit = METADATA_LIMIT if meta_only else DEFAULT_LIMIT
    allowed = limiter.hit(client_key(request), limit)
    if not allowed:
        logger.warning(f"Rate limit exceeded for {client_key(request)} on {request.url.path}")
    return allowed


rate_limiter = RateLimiter()
