"""Keyed batch loader.

GraphQL resolves fields node by node, so a page of stories asking for their
comments would issue one upstream request per story. ``BatchLoader`` is a
strawberry ``DataLoader`` whose batch function fetches each distinct key once,
all of them concurrently, and maps the outcomes back onto every requested key.

Window lifecycle:
    1. Collecting: ``load``/``load_many`` calls made before the window closes
       join the current batch.
    2. Dispatching: DataLoader marks the batch dispatched and calls the batch
       function with every requested key. Calls arriving from now on start a
       new batch.
    3. Resolved: keys whose fetch returned None or raised resolve to None, and
       every caller is released with its keys in its own order.

A window closes on the next event-loop iteration by default. With a positive
``delay`` keys are held back until the delay expires or ``dispatch()`` is
called, then enter DataLoader together as one batch.

The loader never caches: ``cache=False`` makes every window fetch its keys
again.
"""

import asyncio
from collections.abc import Awaitable, Callable, Hashable, Iterable
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar, Union

from strawberry.dataloader import DataLoader

from src.utils.logging_config import get_logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

FetchFn = Callable[[K], Awaitable[Optional[V]]]


def _get_logger():
    """Get logger instance lazily to avoid import-time config loading."""
    return get_logger(__name__)


@dataclass
class BatchResult(Generic[K, V]):
    """Outcome of one dispatched batch.

    Attributes:
        values: Result map; only keys whose fetch returned a value
        errors: Exceptions raised by failed fetches, by key
    """

    values: dict[K, V] = field(default_factory=dict)
    errors: dict[K, BaseException] = field(default_factory=dict)


@dataclass
class _HeldWindow(Generic[K]):
    """Keys held back by a delayed window until its gate opens."""

    gate: asyncio.Future
    keys: dict[K, None] = field(default_factory=dict)  # insertion-ordered set
    handle: Optional[asyncio.TimerHandle] = None


class BatchLoader(DataLoader[K, Optional[V]]):
    """Coalesce concurrent key lookups into one deduplicated, concurrent fetch.

    Args:
        fetch: Coroutine function fetching a single key. Returns the value or
            None when the key does not exist; may raise on failure.
        delay: Seconds a window stays open after its first key. 0 closes it on
            the next event-loop iteration.
        raise_errors: If False (default) a failed key is simply missing from
            the result. If True callers receive the exception raised for it.
        name: Label used in log messages.
    """

    def __init__(
        self,
        fetch: FetchFn,
        *,
        delay: float = 0.0,
        raise_errors: bool = False,
        name: str = "loader",
    ):
        if delay < 0:
            raise ValueError("Delay must be non-negative")
        super().__init__(load_fn=self._load_batch, cache=False)
        self._fetch = fetch
        self.delay = delay
        self.raise_errors = raise_errors
        self.name = name
        self._held: Optional[_HeldWindow[K]] = None

    @property
    def pending_keys(self) -> list[K]:
        """Keys waiting for the open window, in first-requested order."""
        keys: dict[K, None] = dict(self._held.keys) if self._held else {}
        if self.batch is not None and not self.batch.dispatched:
            keys.update(dict.fromkeys(task.key for task in self.batch.tasks))
        return list(keys)

    async def load(self, key: K) -> Optional[V]:
        """Load one key. Returns None if the key is missing or failed."""
        return (await self.load_many([key]))[0]

    async def load_many(self, keys: Iterable[K]) -> list[Optional[V]]:
        """Load several keys.

        Returns:
            One entry per requested key, in the requested order (duplicates
            included), None where the key is missing or failed.

        Raises:
            Exception: In raise_errors mode, the error of the first requested
                key whose fetch failed
        """
        keys = list(keys)
        if not keys:
            return []

        if self.delay > 0:
            # shield: a cancelled caller must not cancel the gate for the others
            await asyncio.shield(self._hold(keys))

        outcomes = await asyncio.gather(*map(super().load, keys), return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return list(outcomes)

    async def load_map(self, keys: Iterable[K]) -> dict[K, V]:
        """Load several keys and return only the ones that resolved."""
        keys = list(keys)
        values = await self.load_many(keys)
        return {key: value for key, value in zip(keys, values) if value is not None}

    def dispatch(self) -> bool:
        """Release a delayed window now instead of waiting for its timer.

        Returns:
            True if a held window was released, False when none was open
        """
        held = self._held
        if held is None:
            return False
        self._held = None
        if held.handle is not None:
            held.handle.cancel()
        held.gate.set_result(None)
        return True

    def _hold(self, keys: list[K]) -> asyncio.Future:
        if self._held is None:
            loop = asyncio.get_running_loop()
            held: _HeldWindow[K] = _HeldWindow(gate=loop.create_future())
            held.handle = loop.call_later(self.delay, self.dispatch)
            self._held = held
        for key in keys:
            self._held.keys.setdefault(key, None)
        return self._held.gate

    async def _load_batch(self, keys: list[K]) -> list[Union[V, BaseException, None]]:
        """Fetch each distinct key once and map the outcomes back onto ``keys``."""
        distinct = list(dict.fromkeys(keys))
        _get_logger().debug(
            f"{self.name}: dispatching {len(distinct)} key(s) for {len(keys)} request(s)"
        )
        outcomes = await asyncio.gather(
            *(self._fetch(key) for key in distinct), return_exceptions=True
        )

        result: BatchResult[K, V] = BatchResult()
        for key, outcome in zip(distinct, outcomes):
            if isinstance(outcome, BaseException):
                result.errors[key] = outcome
            elif outcome is not None:
                result.values[key] = outcome

        if result.errors:
            action = "failed" if self.raise_errors else "dropped"
            _get_logger().warning(
                f"{self.name}: {action} {len(result.errors)} of {len(distinct)} key(s) "
                f"after fetch errors",
                extra={
                    "extra_fields": {
                        "failed_keys": [str(k) for k in result.errors],
                        "errors": [repr(e) for e in result.errors.values()],
                    }
                },
            )

        if self.raise_errors:
            return [result.errors.get(key, result.values.get(key)) for key in keys]
        return [result.values.get(key) for key in keys]
