# apps/analytics/repositories/cached.py
import hashlib
from functools import wraps

from django.conf import settings
from django.core.cache import cache


def cache_heavy_query(timeout=None):
    """Cache a reporting result; callers accept slightly stale figures."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            # args[0] is the component instance, not part of the key
            raw_key = f"{func.__qualname__}:{args[1:]!r}:{sorted(kwargs.items())!r}"
            cache_key = f"analytics:{hashlib.md5(raw_key.encode()).hexdigest()}"
            result = cache.get(cache_key)
            if result is None:
                result = func(*args, **kwargs)
                ttl = timeout if timeout is not None else getattr(settings, 'LEADERBOARD_CACHE_TIMEOUT', 300)
                cache.set(cache_key, result, ttl)
            return result
        return wrapper
    return decorator
