"""Tests for the keyed batch loader.

This test suite verifies:
- Deduplication: one upstream call per distinct key per window
- Order preservation for load_many, duplicates included
- Partial failure isolation and the strict error mode
- Window boundaries: tick, delay and explicit dispatch
- No caching across windows
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from strawberry.dataloader import DataLoader

from src.integrations.hackernews.errors import TransportError
from src.loaders.batch_loader import BatchLoader


class FakeFetcher:
    """Per-key fetch function recording every call."""

    def __init__(self, values: dict, errors: dict | None = None):
        self.values = values
        self.errors = errors or {}
        self.calls: list = []

    async def __call__(self, key):
        self.calls.append(key)
        await asyncio.sleep(0)
        if key in self.errors:
            raise self.errors[key]
        return self.values.get(key)


VALUES = {1: "one", 2: "two", 3: "three", 4: "four"}


class TestDeduplication:
    """One fetch per distinct key within a window."""

    @pytest.mark.asyncio
    async def test_concurrent_loads_share_one_window(self):
        """Test concurrent load calls coalesce and deduplicate."""
        fetch = FakeFetcher(VALUES)
        loader = BatchLoader(fetch)

        results = await asyncio.gather(
            loader.load(1), loader.load(2), loader.load(1), loader.load(3), loader.load(2)
        )

        assert results == ["one", "two", "one", "three", "two"]
        assert sorted(fetch.calls) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_load_many_preserves_order_with_duplicates(self):
        """Test load_many returns one entry per requested key, in order."""
        fetch = FakeFetcher(VALUES)
        loader = BatchLoader(fetch)

        results = await loader.load_many([1, 2, 1, 3])

        assert results == ["one", "two", "one", "three"]
        assert fetch.calls.count(1) == 1
        assert len(fetch.calls) == 3

    @pytest.mark.asyncio
    async def test_overlapping_load_many_calls(self):
        """Test keys repeated across callers are fetched once."""
        fetch = FakeFetcher(VALUES)
        loader = BatchLoader(fetch)

        first, second = await asyncio.gather(
            loader.load_many([3, 1]), loader.load_many([1, 4, 3])
        )

        assert first == ["three", "one"]
        assert second == ["one", "four", "three"]
        assert sorted(fetch.calls) == [1, 3, 4]

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self):
        """Test every distinct key is in flight at the same time."""
        release = asyncio.Event()
        started: list[int] = []

        async def fetch(key):
            started.append(key)
            await release.wait()
            return key * 10

        loader = BatchLoader(fetch)
        task = asyncio.create_task(loader.load_many([1, 2, 3]))

        for _ in range(10):
            await asyncio.sleep(0)
        assert sorted(started) == [1, 2, 3]

        release.set()
        assert await task == [10, 20, 30]

    @pytest.mark.asyncio
    async def test_batch_function_deduplicates_keys(self):
        """Test the DataLoader batch sees every request but fetches distinct keys."""
        fetch = FakeFetcher(VALUES)
        loader = BatchLoader(fetch)

        assert isinstance(loader, DataLoader)
        assert loader.cache is False
        assert await loader._load_batch([2, 1, 2, 2]) == ["two", "one", "two", "two"]
        assert fetch.calls == [2, 1]

    @pytest.mark.asyncio
    async def test_load_many_empty(self):
        """Test loading no keys issues no fetches."""
        fetch = AsyncMock()
        loader = BatchLoader(fetch)

        assert await loader.load_many([]) == []
        fetch.assert_not_called()


class TestMissingAndFailedKeys:
    """Missing and failed keys are omitted, siblings unaffected."""

    @pytest.mark.asyncio
    async def test_not_found_yields_none(self):
        """Test a key the fetcher reports as absent yields None."""
        loader = BatchLoader(FakeFetcher(VALUES))

        assert await loader.load(99) is None

    @pytest.mark.asyncio
    async def test_timeout_is_isolated_to_its_key(self):
        """Test a timed-out key is dropped while siblings resolve."""
        fetch = FakeFetcher(
            VALUES, errors={2: TransportError("timed out", endpoint="item/2.json")}
        )
        loader = BatchLoader(fetch)

        results = await asyncio.gather(loader.load(1), loader.load(2), loader.load(3))

        assert results == ["one", None, "three"]

    @pytest.mark.asyncio
    async def test_failures_logged_as_warning(self, caplog: pytest.LogCaptureFixture):
        """Test dropped keys are reported in the logs."""
        fetch = FakeFetcher(VALUES, errors={2: RuntimeError("boom")})
        loader = BatchLoader(fetch, name="items")

        with caplog.at_level("WARNING"):
            await loader.load_many([1, 2])

        assert any("dropped 1 of 2" in record.message for record in caplog.records)

    @pytest.mark.asyncio
    async def test_load_map_omits_missing_keys(self):
        """Test load_map returns only resolved keys."""
        fetch = FakeFetcher(VALUES, errors={3: RuntimeError("boom")})
        loader = BatchLoader(fetch)

        assert await loader.load_map([1, 3, 99]) == {1: "one"}

    @pytest.mark.asyncio
    async def test_raise_errors_mode_surfaces_key_error(self):
        """Test strict mode raises the failing key's error to its callers only."""
        error = TransportError("timed out", endpoint="item/2.json")
        fetch = FakeFetcher(VALUES, errors={2: error})
        loader = BatchLoader(fetch, raise_errors=True)

        ok, failed, missing = await asyncio.gather(
            loader.load(1), loader.load(2), loader.load(99), return_exceptions=True
        )

        assert ok == "one"
        assert failed is error
        assert missing is None

    @pytest.mark.asyncio
    async def test_raise_errors_mode_load_many_raises_first_failure(self):
        """Test strict load_many raises the first failing key in request order."""
        fetch = FakeFetcher(
            VALUES, errors={3: ValueError("three"), 2: ValueError("two")}
        )
        loader = BatchLoader(fetch, raise_errors=True)

        with pytest.raises(ValueError, match="three"):
            await loader.load_many([1, 3, 2])


class TestWindows:
    """Window boundaries and lifecycle."""

    @pytest.mark.asyncio
    async def test_no_caching_across_windows(self):
        """Test a key loaded in two sequential windows is fetched twice."""
        fetch = FakeFetcher(VALUES)
        loader = BatchLoader(fetch)

        assert await loader.load(1) == "one"
        assert await loader.load(1) == "one"
        assert fetch.calls == [1, 1]

    @pytest.mark.asyncio
    async def test_keys_after_dispatch_open_new_window(self):
        """Test a key submitted while a window is in flight is not merged into it."""
        release = asyncio.Event()
        started = asyncio.Event()
        calls: list[int] = []

        async def fetch(key):
            calls.append(key)
            if key == 1:
                started.set()
                await release.wait()
            return key

        loader = BatchLoader(fetch)
        first = asyncio.create_task(loader.load(1))
        await asyncio.wait_for(started.wait(), timeout=1)
        assert calls == [1]
        assert loader.pending_keys == []

        # The first window is dispatching; this starts a second one
        second = asyncio.create_task(loader.load(2))
        assert await asyncio.wait_for(second, timeout=1) == 2
        assert not first.done()

        release.set()
        assert await first == 1
        assert calls == [1, 2]

    @pytest.mark.asyncio
    async def test_delay_keeps_window_open(self):
        """Test loads spaced inside the delay share one window."""
        fetch = FakeFetcher(VALUES)
        loader = BatchLoader(fetch, delay=0.05)

        first = asyncio.create_task(loader.load(1))
        await asyncio.sleep(0)
        await asyncio.sleep(0.01)
        assert loader.pending_keys == [1]
        second = asyncio.create_task(loader.load(2))

        assert await asyncio.gather(first, second) == ["one", "two"]
        assert sorted(fetch.calls) == [1, 2]

    @pytest.mark.asyncio
    async def test_explicit_dispatch_closes_window(self):
        """Test dispatch() flushes the window without waiting for the delay."""
        fetch = FakeFetcher(VALUES)
        loader = BatchLoader(fetch, delay=60)

        task = asyncio.create_task(loader.load_many([2, 1]))
        await asyncio.sleep(0)
        assert loader.pending_keys == [2, 1]

        assert loader.dispatch() is True
        assert loader.pending_keys == []
        assert await asyncio.wait_for(task, timeout=1) == ["two", "one"]

    @pytest.mark.asyncio
    async def test_loads_after_dispatch_wait_for_next_delay(self):
        """Test a key arriving after an explicit flush is held for a new window."""
        fetch = FakeFetcher(VALUES)
        loader = BatchLoader(fetch, delay=60)

        first = asyncio.create_task(loader.load(1))
        await asyncio.sleep(0)
        loader.dispatch()
        second = asyncio.create_task(loader.load(2))
        await asyncio.sleep(0)

        assert await asyncio.wait_for(first, timeout=1) == "one"
        assert loader.pending_keys == [2]
        assert fetch.calls == [1]

        loader.dispatch()
        assert await asyncio.wait_for(second, timeout=1) == "two"

    @pytest.mark.asyncio
    async def test_dispatch_without_open_window(self):
        """Test dispatch() is a no-op when nothing is pending."""
        loader = BatchLoader(FakeFetcher(VALUES))

        assert loader.dispatch() is False

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_window(self):
        """Test cancelling one waiter leaves the others' results intact."""
        release = asyncio.Event()

        async def fetch(key):
            await release.wait()
            return key

        loader = BatchLoader(fetch)
        doomed = asyncio.create_task(loader.load(1))
        survivor = asyncio.create_task(loader.load(2))
        for _ in range(10):
            await asyncio.sleep(0)

        doomed.cancel()
        release.set()

        assert await survivor == 2
        with pytest.raises(asyncio.CancelledError):
            await doomed

    def test_negative_delay_rejected(self):
        """Test the window delay cannot be negative."""
        with pytest.raises(ValueError, match="non-negative"):
            BatchLoader(AsyncMock(), delay=-1)
