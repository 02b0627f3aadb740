import pytest

from services.content_cache import ContentCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class CountingFetcher:
    def __init__(self):
        self.calls = []

    def __call__(self, section):
        self.calls.append(section)
        return [{'section': section, 'content': f'fetch {len(self.calls)}'}]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return CountingFetcher()


def test_second_get_within_ttl_is_served_from_cache(clock, fetcher):
    cache = ContentCache(fetcher, ttl=300, clock=clock)

    first = cache.get('hero')
    clock.advance(299)
    second = cache.get('hero')

    assert second == first
    assert fetcher.calls == ['hero']


def test_get_after_ttl_refetches(clock, fetcher):
    cache = ContentCache(fetcher, ttl=300, clock=clock)

    cache.get('hero')
    clock.advance(300)
    result = cache.get('hero')

    assert fetcher.calls == ['hero', 'hero']
    assert result[0]['content'] == 'fetch 2'


def test_invalidate_forces_fresh_fetch(clock, fetcher):
    cache = ContentCache(fetcher, ttl=300, clock=clock)

    cache.get('hero')
    cache.invalidate('hero')
    cache.get('hero')

    assert fetcher.calls == ['hero', 'hero']


def test_entries_are_keyed_by_section(clock, fetcher):
    cache = ContentCache(fetcher, ttl=300, clock=clock)

    cache.get('hero')
    cache.get('about')
    cache.invalidate('about')
    cache.get('hero')
    cache.get('about')

    assert fetcher.calls == ['hero', 'about', 'about']


def test_fetch_error_propagates_and_caches_nothing(clock):
    def broken(section):
        raise RuntimeError('database down')

    cache = ContentCache(broken, ttl=300, clock=clock)

    with pytest.raises(RuntimeError):
        cache.get('hero')
    assert 'hero' not in cache
    assert cache.stats()['totalCached'] == 0


def test_zero_ttl_never_serves_cached_data(clock, fetcher):
    cache = ContentCache(fetcher, ttl=0, clock=clock)
    cache.get('hero')
    cache.get('hero')
    assert len(fetcher.calls) == 2


def test_negative_ttl_rejected(fetcher):
    with pytest.raises(ValueError):
        ContentCache(fetcher, ttl=-1)


def test_stats_report_valid_and_expired_sections(clock, fetcher):
    cache = ContentCache(fetcher, ttl=300, clock=clock)
    cache.get('about')
    clock.advance(400)
    cache.get('hero')

    stats = cache.stats()

    assert stats['totalCached'] == 2
    assert stats['valid'] == 1
    assert stats['expired'] == 1
    assert stats['ttlSeconds'] == 300
    by_section = {s['section']: s for s in stats['sections']}
    assert by_section['about']['valid'] is False
    assert by_section['about']['ageSeconds'] == 400
    assert by_section['hero']['items'] == 1


def test_clear_drops_everything(clock, fetcher):
    cache = ContentCache(fetcher, ttl=300, clock=clock)
    cache.get('hero')
    cache.get('about')
    cache.clear()
    assert cache.stats()['totalCached'] == 0
