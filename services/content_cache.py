"""Per-process TTL cache of content sections.

One `ContentCache` is built in `create_app()` and stored on
`app.extensions['content_cache']`. Entries are keyed by section only, so any
write to a section drops the whole entry.
"""
import time
from metrics import track_cache_lookup, update_cache_size

DEFAULT_TTL = 300


class ContentCache:
    def __init__(self, fetcher, ttl=DEFAULT_TTL, clock=time.monotonic):
        if ttl is None or ttl < 0:
            raise ValueError('ttl must be a non-negative number of seconds')
        self._fetcher = fetcher
        self.ttl = ttl
        self._clock = clock
        # section -> (fetched_at, items)
        self._entries = {}

    def _is_fresh(self, fetched_at, now):
        return now - fetched_at < self.ttl

    def get(self, section):
        """Cached items for `section`, fetching on a miss or an expired entry.

        Fetch errors propagate and leave the cache untouched.
        """
        now = self._clock()
        entry = self._entries.get(section)
        if entry is not None and self._is_fresh(entry[0], now):
            track_cache_lookup(section, hit=True)
            return entry[1]

        track_cache_lookup(section, hit=False)
        items = self._fetcher(section)
        self._entries[section] = (self._clock(), items)
        update_cache_size(len(self._entries))
        return items

    def invalidate(self, section):
        self._entries.pop(section, None)
        update_cache_size(len(self._entries))

    def clear(self):
        self._entries.clear()
        update_cache_size(0)

    def __contains__(self, section):
        entry = self._entries.get(section)
        return entry is not None and self._is_fresh(entry[0], self._clock())

    def stats(self):
        now = self._clock()
        sections = []
        valid = 0
        for section, (fetched_at, items) in sorted(self._entries.items()):
            fresh = self._is_fresh(fetched_at, now)
            valid += int(fresh)
            sections.append({
                'section': section,
                'items': len(items),
                'ageSeconds': round(now - fetched_at, 3),
                'valid': fresh,
            })
        return {
            'totalCached': len(self._entries),
            'valid': valid,
            'expired': len(self._entries) - valid,
            'ttlSeconds': self.ttl,
            'sections': sections,
        }


def get_cache(app=None):
    """The content cache of `app` (defaults to the current app)."""
    if app is None:
        from flask import current_app
        app = current_app
    return app.extensions['content_cache']
