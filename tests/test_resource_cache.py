"""Tests for the suspending resource cache."""

import asyncio
import traceback

import pytest

from services.resource_cache import (
    ResourceCache,
    ResourcePending,
    ResourceState,
    suspend,
)


class Producer:
    """Counts calls and settles only when released."""

    def __init__(self, value="ok", error=None):
        self.value = value
        self.error = error
        self.calls = 0
        self.release = asyncio.Event()

    async def __call__(self):
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.value


@pytest.fixture
def cache() -> ResourceCache:
    return ResourceCache()


class TestResourceStates:
    """Tests for pending, success and error reads."""

    async def test_read_is_pending_until_settled(self, cache: ResourceCache) -> None:
        """Test that read raises ResourcePending while the task runs."""
        producer = Producer()
        resource = cache.get("all-countries", producer)

        assert resource.state is ResourceState.PENDING
        with pytest.raises(ResourcePending) as info:
            resource.read()
        assert info.value.resource is resource

        producer.release.set()
        await resource.wait()

        assert resource.state is ResourceState.SUCCESS
        assert resource.read() == "ok"

    async def test_success_is_repeated(self, cache: ResourceCache) -> None:
        """Test that every read after success returns the same value."""
        producer = Producer(value=["DEU"])
        resource = cache.get("code-DEU", producer)
        producer.release.set()
        await resource.wait()

        first = resource.read()
        assert resource.read() is first
        assert resource.read() is first

    async def test_error_is_reraised_on_every_read(self, cache: ResourceCache) -> None:
        """Test that a failed resource keeps raising the captured error."""
        error = ValueError("upstream down")
        producer = Producer(error=error)
        resource = cache.get("region-Europe", producer)
        producer.release.set()
        await resource.wait()

        assert resource.state is ResourceState.ERROR
        for _ in range(3):
            with pytest.raises(ValueError) as info:
                resource.read()
            assert info.value is error
        assert producer.calls == 1

    async def test_error_traceback_does_not_grow(self, cache: ResourceCache) -> None:
        """Test that repeated reads of a failed resource keep a fixed traceback."""
        producer = Producer(error=LookupError("no such region"))
        resource = cache.get("region-Atlantis", producer)
        producer.release.set()
        await resource.wait()

        depths = []
        for _ in range(20):
            with pytest.raises(LookupError) as info:
                await suspend(resource.read)
            depths.append(len(traceback.extract_tb(info.value.__traceback__)))

        assert len(set(depths)) == 1

    async def test_wait_does_not_raise(self, cache: ResourceCache) -> None:
        """Test that waiting on a failing resource only settles it."""
        producer = Producer(error=RuntimeError("boom"))
        producer.release.set()
        resource = cache.get("name-x", producer)

        await resource.wait()

        assert resource.state is ResourceState.ERROR


class TestResourceCache:
    """Tests for keyed sharing and invalidation."""

    async def test_same_key_returns_same_resource(self, cache: ResourceCache) -> None:
        """Test that a cached key hands back the same object without refetching."""
        producer = Producer()
        first = cache.get("region-Asia", producer)
        second = cache.get("region-Asia", producer)

        assert first is second
        producer.release.set()
        await first.wait()
        assert cache.get("region-Asia", producer) is first
        assert producer.calls == 1

    async def test_concurrent_readers_share_one_fetch(self, cache: ResourceCache) -> None:
        """Test that concurrent requests for an uncached key make a single call."""
        producer = Producer(value=[1, 2, 3])

        async def reader():
            return await suspend(lambda: cache.get("all-countries", producer).read())

        readers = asyncio.gather(reader(), reader(), reader())
        await asyncio.sleep(0)
        producer.release.set()
        results = await readers

        assert results == [[1, 2, 3]] * 3
        assert producer.calls == 1

    async def test_different_keys_are_separate(self, cache: ResourceCache) -> None:
        """Test that each key gets its own producer call."""
        producer = Producer()
        producer.release.set()

        a = cache.get("region-Asia", producer)
        b = cache.get("region-Europe", producer)
        await a.wait()
        await b.wait()

        assert a is not b
        assert producer.calls == 2
        assert sorted(cache.keys()) == ["region-Asia", "region-Europe"]

    async def test_invalidate_triggers_one_new_fetch(self, cache: ResourceCache) -> None:
        """Test that a key refetches exactly once after invalidation."""
        producer = Producer(error=ValueError("first attempt"))
        producer.release.set()
        failed = cache.get("name-ger", producer)
        await failed.wait()

        cache.invalidate("name-ger")
        assert "name-ger" not in cache

        producer.error = None
        retried = cache.get("name-ger", producer)
        cache.get("name-ger", producer)
        await retried.wait()

        assert retried is not failed
        assert retried.read() == "ok"
        assert producer.calls == 2

    async def test_invalidate_keeps_inflight_holders_working(self, cache: ResourceCache) -> None:
        """Test that a stale resource still settles after its key is dropped."""
        producer = Producer(value="stale")
        stale = cache.get("language-French", producer)

        cache.invalidate("language-French")
        producer.release.set()
        await stale.wait()

        assert stale.read() == "stale"
        assert len(cache) == 0

    async def test_invalidate_unknown_key_is_noop(self, cache: ResourceCache) -> None:
        """Test that invalidating a missing key does nothing."""
        cache.invalidate("never-requested")
        assert len(cache) == 0

    async def test_invalidate_all(self, cache: ResourceCache) -> None:
        """Test that invalidate_all empties the cache."""
        producer = Producer()
        producer.release.set()
        resources = [cache.get(key, producer) for key in ("a", "b", "c")]
        for resource in resources:
            await resource.wait()

        cache.invalidate_all()

        assert len(cache) == 0
        assert cache.keys() == []

    def test_instances_are_independent(self) -> None:
        """Test that two caches never share entries."""
        assert ResourceCache().keys() == ResourceCache().keys() == []


class TestSuspend:
    """Tests for the suspend scheduling helper."""

    async def test_reruns_render_after_resource_settles(self, cache: ResourceCache) -> None:
        """Test that render runs again once the pending resource is ready."""
        producer = Producer(value=21)
        renders = 0

        def render():
            nonlocal renders
            renders += 1
            return cache.get("answer", producer).read() * 2

        pending = asyncio.ensure_future(suspend(render))
        await asyncio.sleep(0)
        producer.release.set()

        assert await pending == 42
        assert renders == 2

    async def test_propagates_resource_errors(self, cache: ResourceCache) -> None:
        """Test that suspend raises the resource's captured error."""
        producer = Producer(error=LookupError("missing"))
        producer.release.set()

        with pytest.raises(LookupError):
            await suspend(lambda: cache.get("code-XXX", producer).read())

    async def test_returns_immediately_when_nothing_pending(self) -> None:
        """Test that a render that never suspends runs once."""
        assert await suspend(lambda: "done") == "done"
