"""
Event Notification - typed publish/subscribe between the engine and any UI.

The engine only emits; presentation code subscribes. subscribe() returns a
Subscription handle whose unsubscribe() is idempotent, so per-level teardown
can drop every handle without tracking which ones already fired.

Usage:
    bus = EventBus()
    sub = bus.subscribe(GameEvent.GOLD_GAINED, lambda e: print(e.amount, e.source))
    ...
    sub.unsubscribe()
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class GameEvent(Enum):
    LEVEL_STARTED = "onLevelStart"
    TILE_REVEALED = "onTileRevealed"
    GOLD_GAINED = "onGoldGained"
    LIFE_CHANGED = "onLifeChanged"
    LEVEL_END_TRIGGERED = "onLevelEndTriggered"
    LEVEL_END_RESOLVED = "onLevelEndResolved"
    BOARD_CHANGED = "onBoardChanged"


# =============================================================================
# Payloads
# =============================================================================

@dataclass(frozen=True)
class LevelStarted:
    level: int
    width: int
    height: int


@dataclass(frozen=True)
class TileRevealed:
    tile: Any


@dataclass(frozen=True)
class GoldGained:
    """amount is negative for losses."""
    amount: int
    source: str


@dataclass(frozen=True)
class LifeChanged:
    delta: int


@dataclass(frozen=True)
class LevelEndTriggered:
    reason: str


@dataclass(frozen=True)
class LevelEndResolved:
    survived: bool
    gold_awarded: int = 0


@dataclass(frozen=True)
class BoardChanged:
    reason: str


Listener = Callable[[Any], None]


class Subscription:
    """Handle returned by EventBus.subscribe."""

    def __init__(self, bus: "EventBus", event: GameEvent, listener: Listener):
        self._bus: Optional[EventBus] = bus
        self.event = event
        self.listener = listener

    @property
    def active(self) -> bool:
        return self._bus is not None

    def unsubscribe(self) -> None:
        """Detach the listener. Safe to call more than once."""
        if self._bus is None:
            return
        self._bus._remove(self)
        self._bus = None


class EventBus:
    """Synchronous event bus. Listeners run in subscription order."""

    def __init__(self):
        self._listeners: Dict[GameEvent, List[Subscription]] = {}

    def subscribe(self, event: GameEvent, listener: Listener) -> Subscription:
        sub = Subscription(self, event, listener)
        self._listeners.setdefault(event, []).append(sub)
        return sub

    def emit(self, event: GameEvent, payload: Any) -> None:
        # Snapshot so listeners may unsubscribe while being notified
        for sub in list(self._listeners.get(event, ())):
            if sub.active:
                sub.listener(payload)

    def listener_count(self, event: Optional[GameEvent] = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, ()))
        return sum(len(subs) for subs in self._listeners.values())

    def clear(self) -> None:
        """Detach every listener."""
        for subs in list(self._listeners.values()):
            for sub in list(subs):
                sub.unsubscribe()
        self._listeners.clear()

    def _remove(self, sub: Subscription) -> None:
        subs = self._listeners.get(sub.event)
        if subs and sub in subs:
            subs.remove(sub)
