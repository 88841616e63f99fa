"""Tests for the keyed query cache."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from birdatlas.cache.query_cache import QueryCache, QueryResult, format_key, make_key
from birdatlas.errors import RemoteCallError


def gated_fetch(result="data"):
    """Fetch function that blocks until its event is set, counting calls."""
    gate = asyncio.Event()
    calls = []

    async def fetch():
        calls.append(len(calls))
        await gate.wait()
        return f"{result}-{len(calls)}"

    return fetch, gate, calls


class TestKeys:
    """Test key normalization."""

    def test_make_key(self):
        """Should wrap a bare namespace in a tuple."""
        assert make_key("allBirdData") == ("allBirdData",)
        assert make_key(["birdDetails", "Owl"]) == ("birdDetails", "Owl")

    def test_format_key(self):
        """Should join key parts for log output."""
        assert format_key(("birdDetails", "Owl")) == "birdDetails:Owl"


class TestQuery:
    """Test cached reads."""

    @pytest.mark.asyncio
    async def test_miss_then_hit(self, query_cache):
        """Should fetch once and serve the second read from cache."""
        fetch = AsyncMock(return_value=["Owl"])

        first = await query_cache.query("allBirdData", fetch)
        second = await query_cache.query("allBirdData", fetch)

        assert first.data == ["Owl"]
        assert first.is_success
        assert second.data == ["Owl"]
        assert fetch.await_count == 1
        stats = query_cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 50.0

    @pytest.mark.asyncio
    async def test_refetches_after_stale_time(self, query_cache, clock):
        """Should go back to the network once an entry is older than stale_time."""
        fetch = AsyncMock(side_effect=[["Owl"], ["Owl", "Hoopoe"]])

        await query_cache.query("allBirdData", fetch)
        clock.advance(5.1)
        result = await query_cache.query("allBirdData", fetch)

        assert result.data == ["Owl", "Hoopoe"]
        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_disabled_query_reports_loading_without_calling(self, query_cache):
        """Should report loading and never call fetch while disabled."""
        fetch = AsyncMock()

        result = await query_cache.query("allBirdData", fetch, enabled=False)

        assert result == QueryResult(is_loading=True)
        assert not result.is_success
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_reads_share_one_request(self, query_cache):
        """Should de-duplicate identical in-flight reads."""
        fetch, gate, calls = gated_fetch()

        first = asyncio.create_task(query_cache.query("allBirdData", fetch))
        second = asyncio.create_task(query_cache.query("allBirdData", fetch))
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(first, second)

        assert len(calls) == 1
        assert results[0].data == results[1].data == "data-1"
        assert query_cache.get_stats()["deduplicated"] == 1

    @pytest.mark.asyncio
    async def test_distinct_keys_fetch_separately(self, query_cache):
        """Should keep argument variants of a namespace apart."""
        fetch_owl = AsyncMock(return_value="owl")
        fetch_hoopoe = AsyncMock(return_value="hoopoe")

        owl = await query_cache.query(("birdDetails", "Owl"), fetch_owl)
        hoopoe = await query_cache.query(("birdDetails", "Hoopoe"), fetch_hoopoe)

        assert owl.data == "owl"
        assert hoopoe.data == "hoopoe"

    @pytest.mark.asyncio
    async def test_failed_fetch_is_cached_as_error(self, query_cache):
        """Should store the error and not retry within the stale window."""
        error = RemoteCallError("getAllBirdData", "canister stopped")
        fetch = AsyncMock(side_effect=error)

        first = await query_cache.query("allBirdData", fetch)
        second = await query_cache.query("allBirdData", fetch)

        assert first.error is error
        assert first.data is None
        assert not first.is_success
        assert second.error is error
        assert fetch.await_count == 1
        assert query_cache.get_stats()["errors"] == 1

    @pytest.mark.asyncio
    async def test_failed_refetch_keeps_last_good_data(self, query_cache):
        """Should keep the previous data next to the new error."""
        error = RemoteCallError("getAllBirdData", "timeout")
        fetch = AsyncMock(side_effect=[["Owl"], error])

        await query_cache.query("allBirdData", fetch)
        query_cache.invalidate(["allBirdData"])
        result = await query_cache.query("allBirdData", fetch)

        assert result.data == ["Owl"]
        assert result.error is error
        assert query_cache.peek("allBirdData") == ["Owl"]

    @pytest.mark.asyncio
    async def test_successful_refetch_clears_error(self, query_cache, clock):
        """Should drop the stored error once a fetch succeeds."""
        fetch = AsyncMock(side_effect=[RemoteCallError("m", "boom"), ["Owl"]])

        await query_cache.query("allBirdData", fetch)
        clock.advance(10)
        result = await query_cache.query("allBirdData", fetch)

        assert result.error is None
        assert result.data == ["Owl"]

    @pytest.mark.asyncio
    async def test_fetch_raises_cached_error(self, query_cache):
        """Should raise the cached error from fetch()."""
        error = RemoteCallError("getBirdNames", "denied")

        with pytest.raises(RemoteCallError):
            await query_cache.fetch("birdNames", AsyncMock(side_effect=error))

    @pytest.mark.asyncio
    async def test_fetch_returns_data(self, query_cache):
        """Should return the data directly from fetch()."""
        assert await query_cache.fetch("birdNames", AsyncMock(return_value=["Owl"])) == ["Owl"]


class TestMutate:
    """Test writes and invalidation."""

    @pytest.mark.asyncio
    async def test_successful_mutation_causes_exactly_one_refetch(self, query_cache):
        """Should read from the network exactly once after an invalidating write."""
        fetch = AsyncMock(side_effect=[["Owl"], ["Owl", "Hoopoe"]])
        write = AsyncMock(return_value=None)

        await query_cache.query("allBirdData", fetch)
        await query_cache.mutate(write, invalidates=["allBirdData"])
        after_write = await query_cache.query("allBirdData", fetch)
        again = await query_cache.query("allBirdData", fetch)

        write.assert_awaited_once()
        assert fetch.await_count == 2
        assert after_write.data == ["Owl", "Hoopoe"]
        assert again.data == ["Owl", "Hoopoe"]

    @pytest.mark.asyncio
    async def test_mutation_returns_write_result(self, query_cache):
        """Should pass the write's return value through."""
        assert await query_cache.mutate(AsyncMock(return_value=7)) == 7

    @pytest.mark.asyncio
    async def test_failed_mutation_leaves_cache_untouched(self, query_cache):
        """Should propagate the error without invalidating anything."""
        fetch = AsyncMock(return_value=["Owl"])
        write = AsyncMock(side_effect=RemoteCallError("addBirdData", "rejected"))

        await query_cache.query("allBirdData", fetch)
        with pytest.raises(RemoteCallError):
            await query_cache.mutate(write, invalidates=["allBirdData"])
        result = await query_cache.query("allBirdData", fetch)

        write.assert_awaited_once()
        assert fetch.await_count == 1
        assert result.data == ["Owl"]
        assert not result.is_stale
        assert query_cache.get_stats()["invalidations"] == 0

    @pytest.mark.asyncio
    async def test_mutation_is_not_retried(self, query_cache):
        """Should run the write exactly once even when it fails."""
        write = AsyncMock(side_effect=RemoteCallError("saveBirdData", "boom"))

        with pytest.raises(RemoteCallError):
            await query_cache.mutate(write)

        assert write.await_count == 1

    @pytest.mark.asyncio
    async def test_namespace_invalidation_covers_all_arguments(self, query_cache):
        """Should mark every argument variant of a namespace stale."""
        await query_cache.query(("birdDetails", "Owl"), AsyncMock(return_value=1))
        await query_cache.query(("birdDetails", "Hoopoe"), AsyncMock(return_value=2))
        await query_cache.query("birdNames", AsyncMock(return_value=[]))

        count = query_cache.invalidate(["birdDetails"])

        assert count == 2
        assert query_cache.snapshot(("birdDetails", "Owl")).is_stale
        assert query_cache.snapshot(("birdDetails", "Hoopoe")).is_stale
        assert not query_cache.snapshot("birdNames").is_stale

    @pytest.mark.asyncio
    async def test_fetch_in_flight_during_invalidation_cannot_satisfy_later_reads(
        self, query_cache
    ):
        """Should store a pre-invalidation response as stale and refetch on next read."""
        fetch, gate, calls = gated_fetch()

        pending = asyncio.create_task(query_cache.query("allBirdData", fetch))
        await asyncio.sleep(0)
        query_cache.invalidate(["allBirdData"])
        gate.set()
        early = await pending
        later = await query_cache.query("allBirdData", fetch)

        assert early.data == "data-1"
        assert early.is_stale
        assert len(calls) == 2
        assert later.data == "data-2"
        assert not later.is_stale


class TestObservers:
    """Test mounted queries."""

    @pytest.mark.asyncio
    async def test_observer_receives_initial_and_refetched_results(self, query_cache):
        """Should fetch on mount and refetch in the background on invalidation."""
        fetch = AsyncMock(side_effect=[["Owl"], ["Owl", "Hoopoe"]])
        callback = MagicMock()

        observer = query_cache.observe("allBirdData", fetch, callback)
        await query_cache.wait_idle()
        query_cache.invalidate(["allBirdData"])
        await query_cache.wait_idle()

        assert fetch.await_count == 2
        assert [call.args[0].data for call in callback.call_args_list] == [
            ["Owl"],
            ["Owl", "Hoopoe"],
        ]
        assert observer.result.data == ["Owl", "Hoopoe"]
        assert observer.deliveries == 2

    @pytest.mark.asyncio
    async def test_mount_on_fresh_key_does_not_fetch(self, query_cache):
        """Should reuse a fresh entry when mounting."""
        fetch = AsyncMock(return_value=["Owl"])
        await query_cache.query("allBirdData", fetch)

        observer = query_cache.observe("allBirdData", fetch)
        await query_cache.wait_idle()

        assert fetch.await_count == 1
        assert observer.result.data == ["Owl"]

    @pytest.mark.asyncio
    async def test_closed_observer_gets_no_late_result(self, query_cache):
        """Should discard a response that arrives after the observer closed."""
        fetch, gate, calls = gated_fetch()
        callback = MagicMock()

        observer = query_cache.observe("allBirdData", fetch, callback)
        await asyncio.sleep(0)
        observer.close()
        gate.set()
        await query_cache.wait_idle()

        callback.assert_not_called()
        assert observer.closed

    @pytest.mark.asyncio
    async def test_closed_observer_is_not_refetched(self, query_cache):
        """Should stop background refetches once no observer is mounted."""
        fetch = AsyncMock(return_value=["Owl"])

        observer = query_cache.observe("allBirdData", fetch)
        await query_cache.wait_idle()
        observer.close()
        query_cache.invalidate(["allBirdData"])
        await query_cache.wait_idle()

        assert fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_disabled_observer_reports_loading(self, query_cache):
        """Should not fetch for a disabled observer."""
        fetch = AsyncMock()

        observer = query_cache.observe("allBirdData", fetch, enabled=False)
        await query_cache.wait_idle()

        assert observer.result.is_loading
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_break_delivery(self, query_cache):
        """Should log a callback error and keep delivering to other observers."""
        fetch = AsyncMock(return_value=["Owl"])
        broken = MagicMock(side_effect=ValueError("render failed"))
        healthy = MagicMock()

        query_cache.observe("allBirdData", fetch, broken)
        query_cache.observe("allBirdData", fetch, healthy)
        await query_cache.wait_idle()

        healthy.assert_called_once()


class TestLifecycle:
    """Test remove, clear and stats."""

    @pytest.mark.asyncio
    async def test_remove_drops_matching_entries(self, query_cache):
        """Should delete entries under a prefix and refetch on next read."""
        fetch = AsyncMock(return_value="owl")
        await query_cache.query(("birdDetails", "Owl"), fetch)

        assert query_cache.remove(["birdDetails"]) == 1
        assert query_cache.peek(("birdDetails", "Owl")) is None

        await query_cache.query(("birdDetails", "Owl"), fetch)
        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_clear_discards_late_responses(self, query_cache):
        """Should drop a response that belongs to a cleared session."""
        fetch, gate, calls = gated_fetch()

        pending = asyncio.create_task(query_cache.query("allBirdData", fetch))
        await asyncio.sleep(0)
        query_cache.clear()
        gate.set()
        result = await pending

        assert result.data is None
        assert query_cache.peek("allBirdData") is None
        assert query_cache.get_stats()["entries"] == 0

    @pytest.mark.asyncio
    async def test_clear_closes_observers(self, query_cache):
        """Should close every mounted observer."""
        observer = query_cache.observe("allBirdData", AsyncMock(return_value=[]))
        await query_cache.wait_idle()

        query_cache.clear()

        assert observer.closed

    def test_repr(self):
        """Should summarize entries and hit rate."""
        assert repr(QueryCache()) == "<QueryCache entries=0 hit_rate=0.0% reads=0>"
