"""
Services package initialization.
"""

from ppewatch.services.response_cache import ResponseCache, response_cache
from ppewatch.services import team_context

__all__ = ["ResponseCache", "response_cache", "team_context"]
