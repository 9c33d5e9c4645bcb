"""
Keyed cache of suspending resources.

A ``Resource`` wraps one in-flight asyncio task and exposes a synchronous
``read()``:

* pending: raises ``ResourcePending`` so the caller's scheduler can await
  the resource and try again (see ``suspend``)
* success: returns the value
* error: re-raises the captured exception, on every read

``ResourceCache`` hands out one ``Resource`` per key until the key is
invalidated, so concurrent readers of the same key share a single producer
call. There is no expiry; entries live until ``invalidate`` or
``invalidate_all``.

The cache must be used from a running event loop. It is not thread-safe and
takes no locks: every mutation happens on the loop thread.
"""
import asyncio
import logging
from enum import Enum
from types import TracebackType
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ResourceState(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class ResourcePending(Exception):
    """Raised by ``Resource.read()`` while the backing task is unsettled."""

    def __init__(self, resource: "Resource[Any]"):
        self.resource = resource
        super().__init__(f"Resource {resource.key!r} is not ready")


class Resource(Generic[T]):
    def __init__(self, key: str, task: "asyncio.Future[T]"):
        self.key = key
        self._task = task
        self._state = ResourceState.PENDING
        self._value: Optional[T] = None
        self._error: Optional[BaseException] = None
        self._traceback: Optional[TracebackType] = None
        task.add_done_callback(self._settle)

    def _settle(self, task: "asyncio.Future[T]") -> None:
        if self._state is not ResourceState.PENDING:
            return
        if task.cancelled():
            self._error = asyncio.CancelledError()
            self._state = ResourceState.ERROR
        elif task.exception() is not None:
            self._error = task.exception()
            self._traceback = self._error.__traceback__
            self._state = ResourceState.ERROR
        else:
            self._value = task.result()
            self._state = ResourceState.SUCCESS

    @property
    def state(self) -> ResourceState:
        # Done callbacks run on the next loop iteration; settle eagerly.
        if self._state is ResourceState.PENDING and self._task.done():
            self._settle(self._task)
        return self._state

    def read(self) -> T:
        state = self.state
        if state is ResourceState.PENDING:
            raise ResourcePending(self)
        if state is ResourceState.ERROR:
            # Each read carries only the producer's traceback.
            raise self._error.with_traceback(self._traceback)
        return self._value

    async def wait(self) -> None:
        """Wait until the resource settles, without raising its error."""
        await asyncio.wait([self._task])
        self._settle(self._task)

    def __repr__(self) -> str:
        return f"<Resource {self.key!r} {self.state.value}>"


class ResourceCache:
    def __init__(self) -> None:
        self._entries: Dict[str, Resource[Any]] = {}

    def get(self, key: str, producer: Callable[[], Awaitable[T]]) -> Resource[T]:
        """
        Return the resource cached under ``key``.

        ``producer`` is only called when the key is absent; its awaitable is
        scheduled immediately and the new resource starts out pending.
        """
        resource = self._entries.get(key)
        if resource is None:
            logger.debug("Cache miss for %s", key)
            task = asyncio.ensure_future(producer())
            resource = Resource(key, task)
            self._entries[key] = resource
        return resource

    def invalidate(self, key: str) -> None:
        # In-flight tasks keep running; only the cached handle is dropped.
        if self._entries.pop(key, None) is not None:
            logger.debug("Invalidated %s", key)

    def invalidate_all(self) -> None:
        self._entries.clear()
        logger.debug("Invalidated all cache entries")

    def keys(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


async def suspend(render: Callable[[], T]) -> T:
    """
    Drive a synchronous computation that reads resources.

    ``render`` is re-run each time it raises ``ResourcePending``, after the
    pending resource settles. Any other outcome is returned or raised.
    """
    while True:
        try:
            return render()
        except ResourcePending as pending:
            await pending.resource.wait()
