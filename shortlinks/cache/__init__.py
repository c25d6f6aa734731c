from shortlinks.cache.rwlock import ReadWriteLock
from shortlinks.cache.single_flight import SingleFlight
from shortlinks.cache.redirect_cache import CacheEntry, RedirectCache

__all__ = [
    'ReadWriteLock',
    'SingleFlight',
    'CacheEntry',
    'RedirectCache',
]
