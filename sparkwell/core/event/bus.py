"""
Sparkwell EventBus: async publish/subscribe with listener priorities.

Purpose
-------
Decouple the economy and progression services from their side effects.
Services publish domain events (`points.debited`, `reward.redeemed`, ...)
after their transaction commits; listeners react without the publisher
knowing about them.

Responsibilities
----------------
- Register/unregister listeners with priorities and one-shot semantics
- Publish events to all matching listeners (exact + wildcard patterns)
- Execute listeners by tier:
  * CRITICAL / HIGH: sequential, ordered, awaited with a timeout
  * NORMAL / LOW: concurrent (gather), awaited
- Error isolation: a failing listener is logged and never blocks the others
  nor propagates to the publisher

Non-Responsibilities
--------------------
- Durable delivery or retries
- Any business logic
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Optional

from sparkwell.core.event.router import EventRouter
from sparkwell.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from sparkwell.core.exceptions import EventBusError
from sparkwell.core.logging.logger import get_logger

logger = get_logger(__name__)

_SEQUENTIAL_TIERS = (ListenerPriority.CRITICAL, ListenerPriority.HIGH)


class EventBus:
    """
    In-process async EventBus.

    Designed for single-threaded asyncio usage; registry mutations happen
    between awaits and are therefore atomic.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("reward.*", on_reward_event)
    >>> await bus.publish("reward.redeemed", {"user_id": 1, "reward_id": "mood_boost"})
    """

    def __init__(
        self,
        config_manager: Optional[Any] = None,
        *,
        router: Optional[EventRouter] = None,
        listener_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._config_manager = config_manager
        self._router = router or EventRouter()
        self._listeners: dict[str, list[EventListener]] = {}
        self._published: dict[str, int] = {}
        self._errors: dict[str, int] = {}

        self._listener_timeout = self._load_timeout(
            key="events.listener_timeout_seconds",
            override=listener_timeout_seconds,
            default=5.0,
        )

        logger.info(
            "EventBus initialized",
            extra={"listener_timeout_seconds": self._listener_timeout},
        )

    def _load_timeout(
        self, key: str, override: Optional[float], default: float
    ) -> float:
        if override is not None:
            return float(override)
        if self._config_manager is None:
            return float(default)
        return float(self._config_manager.get(key, default))

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        """Reject callbacks that cannot take exactly one payload argument."""
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            return

        params = [
            p
            for p in sig.parameters.values()
            if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        ]
        if len(params) != 1:
            name = getattr(callback, "__qualname__", repr(callback))
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(params)} parameters for '{name}'"
            )

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event name or wildcard pattern.

        Returns the listener identifier for later `unsubscribe`. Registering
        the same identifier twice for one event is ignored.
        """
        self._validate_callback_signature(callback)

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        bucket = self._listeners.setdefault(event_name, [])
        if any(existing.identifier == listener.identifier for existing in bucket):
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )
            return listener.identifier

        bucket.append(listener)
        logger.debug(
            "EventBus: subscribed listener",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
                "once": once,
            },
        )
        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        bucket = self._listeners.get(event_name, [])
        remaining = [l for l in bucket if l.identifier != identifier]
        removed = len(remaining) != len(bucket)

        if remaining:
            self._listeners[event_name] = remaining
        else:
            self._listeners.pop(event_name, None)

        if removed:
            logger.debug(
                "EventBus: unsubscribed listener",
                extra={"event_name": event_name, "listener_id": identifier},
            )
        return removed

    def clear(self) -> None:
        total = self.get_listener_count()
        self._listeners.clear()
        logger.info(
            "EventBus: cleared all listeners",
            extra={"previous_listener_count": total},
        )

    def _extract_listeners(self, event_name: str) -> list[EventListener]:
        """Collect matching listeners in priority order and prune one-shots."""
        matched: list[EventListener] = []
        for key, bucket in list(self._listeners.items()):
            if key == event_name or (
                self._router.is_pattern(key) and self._router.matches(event_name, key)
            ):
                matched.extend(bucket)
                kept = [l for l in bucket if not l.once]
                if kept:
                    self._listeners[key] = kept
                else:
                    del self._listeners[key]

        matched.sort(key=lambda l: (l.priority.value, l.sequence))
        return matched

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    async def publish(self, event_name: str, data: EventPayload) -> list[Any]:
        """
        Publish an event to every matching listener.

        Returns the results of listeners that completed successfully, in
        execution order. Listener failures are logged and counted, never
        raised.

        Raises
        ------
        EventBusError
            If the event name is empty or itself a wildcard pattern.
        """
        if not event_name or self._router.is_pattern(event_name):
            raise EventBusError(event_name, "cannot publish to an empty or wildcard name")

        self._published[event_name] = self._published.get(event_name, 0) + 1

        listeners = self._extract_listeners(event_name)
        if not listeners:
            logger.debug(
                "EventBus: no listeners for event", extra={"event_name": event_name}
            )
            return []

        logger.debug(
            "EventBus: executing listeners",
            extra={"event_name": event_name, "listener_count": len(listeners)},
        )

        results: list[Any] = []
        sequential = [l for l in listeners if l.priority in _SEQUENTIAL_TIERS]
        concurrent = [l for l in listeners if l.priority not in _SEQUENTIAL_TIERS]

        for listener in sequential:
            ok, value = await self._run_listener(
                event_name, listener, data, timeout=self._listener_timeout
            )
            if ok:
                results.append(value)

        if concurrent:
            outcomes = await asyncio.gather(
                *(self._run_listener(event_name, l, data) for l in concurrent)
            )
            results.extend(value for ok, value in outcomes if ok)

        return results

    async def _run_listener(
        self,
        event_name: str,
        listener: EventListener,
        data: EventPayload,
        timeout: Optional[float] = None,
    ) -> tuple[bool, Any]:
        try:
            outcome = listener.callback(data)
            if inspect.isawaitable(outcome):
                if timeout is not None:
                    outcome = await asyncio.wait_for(outcome, timeout=timeout)
                else:
                    outcome = await outcome
            return True, outcome
        except Exception as exc:
            self._errors[event_name] = self._errors.get(event_name, 0) + 1
            logger.error(
                "EventBus: listener failed",
                extra={
                    "event_name": event_name,
                    "listener_id": listener.identifier,
                    "priority": listener.priority.name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            return False, None

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        if event_name is None:
            return sum(len(bucket) for bucket in self._listeners.values())
        return sum(
            len(bucket)
            for key, bucket in self._listeners.items()
            if key == event_name
            or (self._router.is_pattern(key) and self._router.matches(event_name, key))
        )

    def get_all_events(self) -> list[str]:
        return sorted(self._listeners.keys())

    def get_metrics_summary(self) -> dict[str, Any]:
        total_published = sum(self._published.values())
        total_errors = sum(self._errors.values())
        return {
            "total_events_published": total_published,
            "events_by_type": dict(self._published),
            "total_errors": total_errors,
            "errors_by_event": dict(self._errors),
            "total_listeners": self.get_listener_count(),
        }
