from study_catalog.data.cache import QueryCache


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_hit_returns_same_object():
    cache = QueryCache(max_entries=4, ttl_seconds=0, enabled=True)
    calls = []
    loader = lambda: calls.append(1) or ['a']
    first = cache.get_or_load('k', loader)
    assert cache.get_or_load('k', loader) is first
    assert len(calls) == 1
    assert cache.stats() == {'hits': 1, 'misses': 1, 'size': 1}


def test_ttl_expiry():
    clock = Clock()
    cache = QueryCache(max_entries=4, ttl_seconds=10, enabled=True, clock=clock)
    first = cache.get_or_load('k', lambda: ['old'])
    clock.now = 9.5
    assert cache.get_or_load('k', lambda: ['new']) is first
    clock.now = 10.0
    assert cache.get_or_load('k', lambda: ['new']) == ['new']


def test_lru_eviction():
    cache = QueryCache(max_entries=2, ttl_seconds=0, enabled=True)
    cache.get_or_load('a', lambda: 1)
    cache.get_or_load('b', lambda: 2)
    cache.get_or_load('a', lambda: 99)
    cache.get_or_load('c', lambda: 3)
    assert cache.get_or_load('a', lambda: 100) == 1
    assert cache.get_or_load('b', lambda: 200) == 200


def test_disabled_cache_always_loads():
    cache = QueryCache(enabled=False)
    assert cache.get_or_load('k', lambda: [1]) is not cache.get_or_load('k', lambda: [1])
    assert cache.stats()['size'] == 0


def test_clear():
    cache = QueryCache(max_entries=4, ttl_seconds=0, enabled=True)
    cache.get_or_load('a', lambda: 1)
    assert cache.clear() == 1
    assert cache.get_or_load('a', lambda: 2) == 2
