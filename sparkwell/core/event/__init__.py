"""
Sparkwell event system.

Usage
-----
```python
from sparkwell.core.event import EventBus, ListenerPriority

bus = EventBus()
bus.subscribe("reward.*", on_reward, priority=ListenerPriority.HIGH)
await bus.publish("reward.redeemed", {"user_id": 1, "reward_id": "mood_boost"})
```
"""

from sparkwell.core.event.bus import EventBus
from sparkwell.core.event.router import EventRouter
from sparkwell.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)

__all__ = [
    "EventBus",
    "EventRouter",
    "EventListener",
    "EventPayload",
    "CallbackType",
    "ListenerPriority",
]
