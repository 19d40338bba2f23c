"""Shared evacuation state: one object that can be evacuated, queried and awaited."""

from __future__ import annotations

import threading


class EvacuationContext:
    """Records whether the cell has been told to evacuate.

    The context plays three roles: it can be evacuated (``evacuate``),
    it reports the current state (``evacuating``) and it hands out an
    event that is set once evacuation begins (``evacuate_notify``).
    """

    def __init__(self) -> None:
        self._evacuated = threading.Event()

    def evacuate(self) -> None:
        """Mark the cell as evacuating. Calling this again has no effect."""
        self._evacuated.set()

    def evacuating(self) -> bool:
        """Return True once ``evacuate`` has been called."""
        return self._evacuated.is_set()

    def evacuate_notify(self) -> threading.Event:
        """Return an event that becomes set when evacuation starts."""
        return self._evacuated


def new_context() -> tuple[EvacuationContext, EvacuationContext, EvacuationContext]:
    """Create a context and return it as (evacuatable, reporter, notifier)."""
    context = EvacuationContext()
    return context, context, context