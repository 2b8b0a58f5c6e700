"""EventBus — decoupled Observer for per-card progress during a pipeline run."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[..., None]

# Events emitted by ``PipelineEngine.execute``.
RUN_STARTED = "run_started"
CARD_STARTED = "card_started"
CARD_FINISHED = "card_finished"
CARD_FAILED = "card_failed"
RUN_FINISHED = "run_finished"


class EventBus:
    """Publish/subscribe bus between the engine and its observers.

    The engine only ever publishes; CLI progress output or a UI refreshing
    card previews subscribe.  A failing handler is logged and skipped so an
    observer can never break a run.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event: str, handler: EventHandler) -> None:
        """Register *handler* for *event*; handlers run in subscription order.

        Args:
            event: Event name (e.g. ``CARD_FINISHED``).
            handler: Callable invoked with the event's keyword arguments.
        """
        self._subscribers.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        """Remove *handler* from *event*; unknown handlers only log a warning."""
        handlers = self._subscribers.get(event, [])
        if handler not in handlers:
            logger.warning("Handler %r was not subscribed to event %r", handler, event)
            return
        handlers.remove(handler)

    def emit(self, event: str, **payload: Any) -> None:
        """Deliver *payload* to every handler of *event*.

        Handlers added or removed while dispatching take effect from the
        next ``emit``.

        Args:
            event: Event name.
            **payload: Keyword arguments forwarded to each handler.
        """
        for handler in tuple(self._subscribers.get(event, ())):
            try:
                handler(**payload)
            except Exception:
                logger.exception("Handler %r failed while handling event %r", handler, event)
