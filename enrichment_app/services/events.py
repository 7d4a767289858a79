"""
Typed publish/subscribe channels for inter-service notification.

Each event kind gets its own EventChannel carrying one payload type, so
unrelated events never share an emitter. Handlers may be plain callables or
coroutine functions; coroutine handlers are scheduled as tasks on the running
loop. A failing handler is logged and never affects the publisher or the
other subscribers.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Generic, List, Set, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

Handler = Callable[[T], Union[None, Awaitable[None]]]


class EventChannel(Generic[T]):
    """Named channel delivering payloads of a single type to its subscribers."""

    def __init__(self, name: str):
        self.name = name
        self._handlers: List[Handler] = []
        self._pending: Set[asyncio.Future] = set()

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        """
        Register a handler.

        Returns:
            A callable that removes the handler again
        """
        self._handlers.append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to '{self.name}'")

        def unsubscribe():
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def emit(self, payload: T) -> None:
        """Deliver payload to every current subscriber, in subscription order."""
        for handler in list(self._handlers):
            try:
                result = handler(payload)
            except Exception:
                logger.exception(f"Handler for '{self.name}' failed")
                continue

            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._on_handler_done)

    def _on_handler_done(self, task: asyncio.Future) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Async handler for '{self.name}' failed: {error!r}", exc_info=error)

    async def drain(self) -> None:
        """Wait until every scheduled async handler has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
