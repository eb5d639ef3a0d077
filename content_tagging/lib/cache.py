"""
Clearable LRU caching.

Content type descriptors are reference data that hardly ever change, so their
lookups are cached per process. Tests (and type registration) need a way to
throw those caches away, which plain ``functools.lru_cache`` doesn't track.
"""
import functools

_lru_cached_fns = []


def lru_cache(*args, **kwargs):
    """
    Thin wrapper over functools.lru_cache that lets us clear all caches later.
    """
    def decorator(fn):
        wrapped_fn = functools.lru_cache(*args, **kwargs)(fn)
        _lru_cached_fns.append(wrapped_fn)
        return wrapped_fn
    return decorator


def clear_lru_caches():
    """
    Clear every cache created with our ``lru_cache`` decorator.
    """
    for fn in _lru_cached_fns:
        fn.cache_clear()
