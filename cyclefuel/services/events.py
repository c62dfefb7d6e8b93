"""
In-process event bus.

Handlers are registered per event type. Publishing runs every handler for
the event's type concurrently and waits for all of them; a handler that
raises or times out is logged and does not affect its siblings or the
publisher.

Typical usage:
    bus = EventBus()
    bus.subscribe(EventType.FOOD_LOGGED, updater.on_food_logged)
    await bus.publish(FoodLogged(user_id="u1", food_id="f1", food_name="Lentils"))
"""
import asyncio
import inspect
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Set, Union

from aws_lambda_powertools import Logger

from cyclefuel.models.events import DomainEvent, EventType
from cyclefuel.utils.logging import log_exception

logger = Logger()

EventHandler = Callable[[DomainEvent], Union[Awaitable[Any], Any]]

def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)

class EventBus:
    """Explicitly constructed dispatcher; one per process or per test."""

    def __init__(self, event_log_size: int = 100, handler_timeout: Optional[float] = None):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._event_log: Deque[DomainEvent] = deque(maxlen=event_log_size)
        self._pending: Set[asyncio.Task] = set()
        self.handler_timeout = handler_timeout

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Register a handler for an event type.

        Args:
            event_type: Type of event to listen for
            handler: Sync or async callable receiving the event
        """
        self._handlers.setdefault(EventType(event_type), []).append(handler)
        logger.debug("Handler subscribed", extra={
            "event_type": EventType(event_type).value,
            "handler": _handler_name(handler)
        })

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> bool:
        handlers = self._handlers.get(EventType(event_type), [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def handler_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(EventType(event_type), []))

    def clear(self) -> None:
        """Remove all handlers and forget logged events."""
        self._handlers.clear()
        self._event_log.clear()

    def get_event_log(self) -> List[DomainEvent]:
        return list(self._event_log)

    def clear_event_log(self) -> None:
        self._event_log.clear()

    async def _invoke(self, handler: EventHandler, event: DomainEvent) -> None:
        result = handler(event)
        if inspect.isawaitable(result):
            if self.handler_timeout is None:
                await result
            else:
                await asyncio.wait_for(result, self.handler_timeout)

    async def publish(self, event: DomainEvent) -> None:
        """
        Deliver an event to every handler registered for its type.

        Resolves once all handlers have settled. Never raises because of a
        handler failure.
        """
        self._event_log.append(event)
        handlers = list(self._handlers.get(event.event_type, []))

        if not handlers:
            logger.debug("No handlers for event", extra={"event_type": event.event_type.value})
            return

        logger.info("Publishing event", extra={
            "event_type": event.event_type.value,
            "event_id": str(event.event_id),
            "user_id": event.user_id,
            "handler_count": len(handlers)
        })

        results = await asyncio.gather(
            *(self._invoke(h, event) for h in handlers),
            return_exceptions=True
        )
        for handler, result in zip(handlers, results):
            if isinstance(result, BaseException):
                log_exception(logger, "Event handler failed", exc_info=result, extra={
                    "event_type": event.event_type.value,
                    "event_id": str(event.event_id),
                    "handler": _handler_name(handler),
                    "error": str(result) or result.__class__.__name__
                })

    def publish_nowait(self, event: DomainEvent) -> asyncio.Task:
        """
        Schedule a publish on the running loop without waiting for handlers.

        The task is tracked until it finishes so ``drain`` can await it.
        """
        task = asyncio.get_running_loop().create_task(self.publish(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every publish scheduled with ``publish_nowait``."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
