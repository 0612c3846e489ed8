"""
Cache utilities for the pick'em pool
Standings are a full recompute, so they are cached until the next submission
or result update invalidates them.
"""

import functools

from flask import current_app

from pickpool import cache

STANDINGS_CACHE_KEY = "query_standings"


def make_query_key(name, *args, **kwargs):
    """Generate a cache key from a query name and its arguments"""
    args_str = "_".join(str(arg) for arg in args)
    kwargs_str = "_".join(f"{k}_{v}" for k, v in sorted(kwargs.items()))
    return "_".join(part for part in (f"query_{name}", args_str, kwargs_str) if part)


def cached_query(name, timeout=300):
    """
    Decorator for caching query results

    Args:
        name: Name used for cache key generation
        timeout: Cache timeout in seconds
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            cache_key = make_query_key(name, *args, **kwargs)

            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Query cache hit: {cache_key}")
                return result

            result = f(*args, **kwargs)
            cache.set(cache_key, result, timeout=timeout)
            current_app.logger.debug(f"Query cache set: {cache_key}")

            return result

        return wrapped

    return decorator


def invalidate_standings_cache():
    """Drop cached standings after picks or results change"""
    try:
        cache.delete(STANDINGS_CACHE_KEY)
        current_app.logger.debug("Standings cache invalidated")
    except Exception as e:
        # A stale leaderboard is preferable to failing the submission
        current_app.logger.error(f"Failed to invalidate standings cache: {e}")
