"""
Wildcard routing for event names.

Patterns may contain `*`, matching any run of characters (dots included):
`reward.*`, `*.completed`, `*`.
"""

from __future__ import annotations


class EventRouter:
    """
    Stateless matcher for event names against subscription patterns.

    Examples
    --------
    >>> router = EventRouter()
    >>> router.matches("reward.redeemed", "reward.*")
    True
    >>> router.matches("quest.completed", "*.completed")
    True
    >>> router.matches("quest.started", "reward.*")
    False
    """

    def matches(self, event_name: str, pattern: str) -> bool:
        if pattern == "*":
            return True

        if "*" not in pattern:
            return event_name == pattern

        while "**" in pattern:
            pattern = pattern.replace("**", "*")

        parts = pattern.split("*")

        if parts[0] and not event_name.startswith(parts[0]):
            return False

        if parts[-1] and not event_name.endswith(parts[-1]):
            return False

        if len(event_name) < len(parts[0]) + len(parts[-1]):
            return False

        idx = len(parts[0])
        for mid in parts[1:-1]:
            if not mid:
                continue
            next_idx = event_name.find(mid, idx)
            if next_idx == -1:
                return False
            idx = next_idx + len(mid)

        return idx <= len(event_name) - len(parts[-1])

    @staticmethod
    def is_pattern(event_name: str) -> bool:
        return "*" in event_name
