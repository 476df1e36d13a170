"""
Short-lived response cache.

Dashboards fire the same GETs in bursts; identical requests within the TTL
are answered from memory. Keys are (method, path, sorted query string), so
entries never cross teams.
"""

import logging
import time
from typing import Any, Dict, Optional, Tuple

from fastapi import Request

from ppewatch.config import settings

logger = logging.getLogger(__name__)


class ResponseCache:
    """In-process TTL cache keyed by request identity."""
    
    def __init__(self, ttl_seconds: float = 5.0, max_entries: int = 512):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: Dict[Tuple[str, str, str], Tuple[float, Any]] = {}
    
    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0
    
    @staticmethod
    def key_for(request: Request) -> Tuple[str, str, str]:
        query = "&".join(f"{k}={v}" for k, v in sorted(request.query_params.multi_items()))
        return request.method.upper(), request.url.path, query
    
    def get(self, request: Request) -> Optional[Any]:
        if not self.enabled:
            return None
        key = self.key_for(request)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= time.monotonic():
            del self._entries[key]
            return None
        logger.debug(f"Cache hit {key[0]} {key[1]}")
        return value
    
    def put(self, request: Request, value: Any):
        if not self.enabled:
            return
        now = time.monotonic()
        if len(self._entries) >= self.max_entries:
            self._prune(now)
        self._entries[self.key_for(request)] = (now + self.ttl_seconds, value)
    
    def invalidate_prefix(self, path_prefix: str):
        """Drop entries whose path starts with ``path_prefix``."""
        for key in [k for k in self._entries if k[1].startswith(path_prefix)]:
            del self._entries[key]
    
    def clear(self):
        self._entries.clear()
    
    def _prune(self, now: float):
        for key in [k for k, (exp, _) in self._entries.items() if exp <= now]:
            del self._entries[key]
        # Still full: drop the oldest half
        if len(self._entries) >= self.max_entries:
            ordered = sorted(self._entries, key=lambda k: self._entries[k][0])
            for key in ordered[: len(ordered) // 2]:
                del self._entries[key]


response_cache = ResponseCache(ttl_seconds=settings.RESPONSE_CACHE_TTL_SECONDS)
