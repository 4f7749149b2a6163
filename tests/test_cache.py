import pytest

from aegisprobe.infra.cache import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire() -> None:
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("key", "value")
    clock.now += 9.9
    assert cache.get("key") == "value"
    clock.now += 0.1
    assert cache.get("key") is None
    assert len(cache) == 0


def test_oldest_entry_is_evicted() -> None:
    cache = TTLCache(ttl_seconds=60, max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 3)
    cache.set("c", 4)
    assert cache.get("b") is None
    assert cache.get("a") == 3
    assert cache.get("c") == 4


def test_clear() -> None:
    cache = TTLCache(ttl_seconds=60)
    cache.set(("magic", "x"), object())
    cache.clear()
    assert len(cache) == 0


@pytest.mark.parametrize("ttl, size", [(0, 10), (10, 0)])
def test_rejects_non_positive_bounds(ttl: float, size: int) -> None:
    with pytest.raises(ValueError):
        TTLCache(ttl_seconds=ttl, max_entries=size)
