"""
Core event types for the Sparkwell EventBus.

- `EventPayload`: plain dict, JSON-serializable by convention
- `ListenerPriority`: numeric priorities (lower runs earlier)
- `EventListener`: immutable listener registration record
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

EventPayload = dict[str, Any]


class ListenerPriority(Enum):
    """
    Priority levels for event listeners.

    CRITICAL and HIGH listeners run sequentially, in order, with a timeout.
    NORMAL and LOW listeners run concurrently after them.
    """

    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100


CallbackType = Union[
    Callable[[EventPayload], Any],
    Callable[[EventPayload], Awaitable[Any]],
]

_listener_sequence = itertools.count()


@dataclass(slots=True, frozen=True)
class EventListener:
    """A registered callback with its priority and identity."""

    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    once: bool = False
    sequence: int = 0

    @classmethod
    def from_callback(
        cls,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority,
        identifier: Optional[str],
        once: bool,
    ) -> EventListener:
        """Create a listener, deriving an identifier from the callback if needed."""
        if identifier is None:
            module = getattr(callback, "__module__", "unknown")
            qualname = getattr(callback, "__qualname__", None) or getattr(
                callback, "__name__", repr(callback)
            )
            identifier = f"{module}.{qualname}@{event_name}"

        return cls(
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
            sequence=next(_listener_sequence),
        )
