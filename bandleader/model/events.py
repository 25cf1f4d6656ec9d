"""Event registration: modules that react to things happening inside the wrapper."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, NamedTuple, Optional

import discord

from bandleader.commands.command_enums import EventKind

logger = logging.getLogger("bandleader")


class EventData(NamedTuple):
    """What an event handler gets to know about the occurrence."""
    command: Optional[Any] = None
    arguments: tuple = ()  # Raw words, for incorrect argument events
    message: Optional[discord.Message] = None
    interaction: Optional[discord.Interaction] = None
    missing_permissions: tuple[str, ...] = ()


class BotEvent(NamedTuple):
    """An event handler, awaited as ``handler(wrapper, data)`` for each trigger."""
    name: str
    triggers: tuple[EventKind, ...]
    handler: Callable[[Any, EventData], Awaitable[Any]]


class EventRegistry:
    """Registry of event handlers, rebuilt as a whole on reload."""

    def __init__(self):
        self.events: Dict[str, BotEvent] = {}

    def load(self, events: Iterable[BotEvent]) -> None:
        loaded: Dict[str, BotEvent] = {}
        for event in events:
            problem = self._problem(loaded, event)
            if problem:
                logger.error(f"{problem} - skipping")
                continue
            loaded[event.name] = event._replace(triggers=tuple(event.triggers))
        self.events = loaded

    def register(self, event: BotEvent) -> None:
        problem = self._problem(self.events, event)
        if problem:
            raise ValueError(problem)
        events = dict(self.events)
        events[event.name] = event._replace(triggers=tuple(event.triggers))
        self.events = events

    def handlers_for(self, kind: EventKind) -> list[BotEvent]:
        return [event for event in self.events.values() if kind in event.triggers]

    @staticmethod
    def _problem(events: Dict[str, BotEvent], event: BotEvent) -> Optional[str]:
        if not isinstance(event, BotEvent):
            return f"{event!r} is not an event"
        if event.name in events:
            return f"Event {event.name} is being registered twice"
        if not event.triggers:
            return f"Event {event.name} has no triggers"
        return None
