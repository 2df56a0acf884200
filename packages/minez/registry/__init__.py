"""
Unified Registry System for the Minez engine.

Provides decorator-based registration for every effect the reveal engine
dispatches to:
- Shop tile effects (one handler per ShopTileId, fired on reveal)
- Challenge tile effects (one handler per ChallengeId, fired on reveal)
- Collectible triggers (handlers per hook, gated on owned stacks)

Adding or removing an effect is a single decorated function; the catalog
tests check that every shop tile and challenge id has exactly one handler.

Usage:
    from packages.minez.registry import shop_tile_effect, challenge_effect, relic_trigger

    @shop_tile_effect(ShopTileId.ONE_UP)
    def one_up(ctx: EffectContext) -> None:
        ctx.gain_lives(1, "1Up")

    @challenge_effect(ChallengeId.MATH_TEST)
    def math_test(ctx: EffectContext) -> None:
        ctx.effects.math_test = True

    @relic_trigger("onMineRevealed", relic=RelicId.LAPIDARIST)
    def lapidarist(ctx: EffectContext) -> None:
        ctx.gain_gold(3 * ctx.stacks, "Lapidarist")
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, TYPE_CHECKING

from ..content.challenges import ChallengeId
from ..content.relics import RelicId
from ..content.shop_tiles import ShopTileId
from ..state.board import Board, FlagColor, Tile, TransformKind
from ..state.rng import Random

if TYPE_CHECKING:
    from ..handlers.reveal import RevealEngine, RevealResult
    from ..state.run import LevelEffects, LevelStats, RunState


# =============================================================================
# Trigger Hooks - All possible trigger points
# =============================================================================

class TriggerHook(Enum):
    """Every point at which registered effects run."""
    # Level lifecycle
    LEVEL_START = "levelStart"
    LEVEL_END = "levelEnd"

    # Economy
    ON_GOLD_GAINED = "onGoldGained"
    ON_GOLD_LOST = "onGoldLost"

    # Reveal
    ON_REVEAL = "onReveal"
    ON_TILE_REVEALED = "onTileRevealed"
    ON_MINE_REVEALED = "onMineRevealed"
    ON_NUMBER_REVEALED = "onNumberRevealed"
    ON_CHALLENGE_REVEALED = "onChallengeRevealed"


# =============================================================================
# Context - Passed to every handler
# =============================================================================

@dataclass
class EffectContext:
    """
    Context for effect handlers.

    Every gold/life change made through the context lands in `result`, so a
    whole reveal cascade reports one consistent delta.
    """
    engine: RevealEngine
    result: RevealResult
    tile: Optional[Tile] = None
    entity_id: Optional[str] = None
    stacks: int = 0
    rng: Optional[Random] = None
    trigger_data: Dict[str, Any] = field(default_factory=dict)

    # ----- STATE ACCESS -----

    @property
    def run(self) -> RunState:
        return self.engine.run

    @property
    def board(self) -> Board:
        return self.engine.board

    @property
    def effects(self) -> LevelEffects:
        return self.engine.run.effects

    @property
    def stats(self) -> LevelStats:
        return self.engine.run.stats

    def relic_stacks(self, relic_id: RelicId) -> int:
        return self.engine.run.relic_stacks(relic_id)

    def has_relic(self, relic_id: RelicId) -> bool:
        return self.engine.run.has_relic(relic_id)

    def neighbors(self) -> List[Tile]:
        if self.tile is None:
            return []
        return self.board.neighbors(self.tile)

    # ----- RANDOMNESS -----

    def _rng(self) -> Random:
        if self.rng is None:
            self.rng = self.engine.rng_for_effect(self.entity_id or "effect",
                                                  self.stats.revealed_count)
        return self.rng

    def roll(self, chance: float) -> bool:
        """True with probability `chance` on this handler's stream."""
        return self._rng().random() < chance

    def roll_per_stack(self, chance: float, stacks: Optional[int] = None) -> bool:
        """One independent roll per stack; True as soon as any succeeds."""
        count = self.stacks if stacks is None else stacks
        for _ in range(count):
            if self.roll(chance):
                return True
        return False

    def random_int(self, low: int, high: int) -> int:
        return self._rng().random_int(low, high)

    def random_choice(self, values: List[Any]) -> Any:
        """Deterministic random choice on this handler's stream."""
        return self._rng().choice(values)

    def shuffle_in_place(self, values: List[Any]) -> None:
        self._rng().shuffle(values)

    # ----- ECONOMY -----

    def gain_gold(self, amount: int, source: str) -> None:
        self.engine.gain_gold(amount, source, self.result)

    def credit_gold(self, amount: int, source: str) -> None:
        """Gain gold without firing gold hooks (for hook handlers themselves)."""
        self.engine.credit_gold(amount, source, self.result)

    def lose_gold(self, amount: int, source: str, spending: bool = False) -> None:
        self.engine.lose_gold(amount, source, self.result, spending=spending)

    def lose_life(self, source: str) -> None:
        self.engine.lose_life(source, self.result)

    def gain_lives(self, count: int, source: str) -> None:
        self.engine.gain_lives(count, source, self.result)

    def collect_resource(self, resource: TransformKind, source: str,
                         upgradable: bool = True) -> TransformKind:
        return self.engine.collect_resource(resource, source, self.result, self._rng(),
                                            tile=self.tile, upgradable=upgradable)

    # ----- BOARD -----

    def reveal(self, tile: Tile) -> None:
        """Reveal another tile as part of this cascade."""
        self.engine.reveal_nested(tile, self.result)

    def flag(self, tile: Tile, color: FlagColor = FlagColor.BLUE) -> bool:
        return self.engine.flag_tile(tile, color)

    def board_changed(self, reason: str) -> None:
        self.engine.emit_board_changed(reason)

    def steal_relic(self, offset: int = 0) -> Optional[RelicId]:
        return self.engine.steal_relic(self.engine.rng_for_effect("Thief", offset))


# =============================================================================
# Registry Classes
# =============================================================================

class TriggerRegistry:
    """Base registry for trigger handlers."""

    def __init__(self, name: str):
        self.name = name
        # handlers[hook][entity_id] = (handler_func, priority)
        self._handlers: Dict[str, Dict[str, Tuple[Callable, int]]] = {}

    def register(self, hook: str, entity_id: str, handler: Callable, priority: int = 100):
        """Register a handler for a hook."""
        if hook not in self._handlers:
            self._handlers[hook] = {}
        self._handlers[hook][entity_id] = (handler, priority)

    def get_handlers(self, hook: str, entity_ids: Optional[Set[str]] = None) -> List[Tuple[str, Callable]]:
        """Get all handlers for a hook, filtered by entity IDs, sorted by priority."""
        if hook not in self._handlers:
            return []

        handlers = []
        for entity_id, (handler, priority) in self._handlers[hook].items():
            if entity_ids is None or entity_id in entity_ids:
                handlers.append((entity_id, handler, priority))

        # Sort by priority (lower = earlier); stable, so ties keep registration order
        handlers.sort(key=lambda x: x[2])
        return [(h[0], h[1]) for h in handlers]

    def get_handler(self, hook: str, entity_id: str) -> Optional[Callable]:
        """Get a specific handler."""
        if hook in self._handlers and entity_id in self._handlers[hook]:
            return self._handlers[hook][entity_id][0]
        return None

    def has_handler(self, hook: str, entity_id: str) -> bool:
        """Check if a handler exists."""
        return hook in self._handlers and entity_id in self._handlers[hook]

    def list_hooks(self) -> List[str]:
        """List all registered hooks."""
        return list(self._handlers.keys())

    def list_entities(self, hook: str) -> List[str]:
        """List all entities registered for a hook."""
        return list(self._handlers.get(hook, {}).keys())


# Global registries
RELIC_REGISTRY = TriggerRegistry("relics")
SHOP_TILE_REGISTRY = TriggerRegistry("shop_tiles")
CHALLENGE_REGISTRY = TriggerRegistry("challenges")


# =============================================================================
# Decorators
# =============================================================================

def relic_trigger(hook: str, relic: RelicId, priority: int = 100):
    """
    Decorator to register a collectible trigger handler.

    Args:
        hook: Trigger hook name (e.g., "levelStart", "onGoldGained")
        relic: Collectible id
        priority: Execution order within the hook (lower = earlier)

    Example:
        @relic_trigger("levelEnd", relic=RelicId.MINIMALIST, priority=20)
        def minimalist_end(ctx: EffectContext) -> None:
            ...
    """
    def decorator(func: Callable[[EffectContext], Any]) -> Callable:
        RELIC_REGISTRY.register(hook, relic, func, priority)

        @functools.wraps(func)
        def wrapper(ctx: EffectContext) -> Any:
            return func(ctx)

        return wrapper
    return decorator


def shop_tile_effect(tile_id: ShopTileId):
    """Decorator to register the on-reveal effect of a shop tile."""
    def decorator(func: Callable[[EffectContext], Any]) -> Callable:
        SHOP_TILE_REGISTRY.register(TriggerHook.ON_REVEAL.value, tile_id, func)

        @functools.wraps(func)
        def wrapper(ctx: EffectContext) -> Any:
            return func(ctx)

        return wrapper
    return decorator


def challenge_effect(challenge_id: ChallengeId):
    """Decorator to register the on-reveal effect of a challenge tile."""
    def decorator(func: Callable[[EffectContext], Any]) -> Callable:
        CHALLENGE_REGISTRY.register(TriggerHook.ON_REVEAL.value, challenge_id, func)

        @functools.wraps(func)
        def wrapper(ctx: EffectContext) -> Any:
            return func(ctx)

        return wrapper
    return decorator


# =============================================================================
# Execution Functions
# =============================================================================

def execute_relic_triggers(hook: str, engine: RevealEngine, result: RevealResult,
                           tile: Optional[Tile] = None, rng: Optional[Random] = None,
                           trigger_data: Optional[Dict[str, Any]] = None) -> None:
    """
    Execute all collectible triggers for a hook.

    Args:
        hook: Trigger hook name
        engine: Reveal engine for the current level
        result: Result accumulating this operation's deltas
        tile: Tile that caused the trigger, if any
        rng: Stream shared with the caller (tile stream during a reveal)
        trigger_data: Additional data for the trigger
    """
    if trigger_data is None:
        trigger_data = {}

    owned = {rid for rid, n in engine.run.owned_relics.items() if n > 0}
    handlers = RELIC_REGISTRY.get_handlers(hook, owned)

    for relic_id, handler in handlers:
        ctx = EffectContext(
            engine=engine,
            result=result,
            tile=tile,
            entity_id=relic_id.value,
            stacks=engine.run.relic_stacks(relic_id),
            rng=rng,
            trigger_data=trigger_data,
        )
        handler(ctx)


def execute_shop_tile_effect(engine: RevealEngine, tile: Tile, result: RevealResult,
                             rng: Optional[Random] = None) -> None:
    """Fire the effect of a revealed shop tile."""
    handler = SHOP_TILE_REGISTRY.get_handler(TriggerHook.ON_REVEAL.value, tile.sub_id)
    if handler is None:
        raise ValueError(f"No effect registered for shop tile: {tile.sub_id}")
    handler(EffectContext(engine=engine, result=result, tile=tile,
                          entity_id=tile.sub_id.value, stacks=1, rng=rng))


def execute_challenge_effect(engine: RevealEngine, tile: Tile, result: RevealResult,
                             rng: Optional[Random] = None) -> None:
    """Fire the effect of a revealed challenge tile."""
    handler = CHALLENGE_REGISTRY.get_handler(TriggerHook.ON_REVEAL.value, tile.sub_id)
    if handler is None:
        raise ValueError(f"No effect registered for challenge: {tile.sub_id}")
    handler(EffectContext(engine=engine, result=result, tile=tile,
                          entity_id=tile.sub_id.value, stacks=1, rng=rng))


__all__ = [
    # Hooks
    "TriggerHook",

    # Context
    "EffectContext",

    # Registries
    "TriggerRegistry",
    "RELIC_REGISTRY",
    "SHOP_TILE_REGISTRY",
    "CHALLENGE_REGISTRY",

    # Decorators
    "relic_trigger",
    "shop_tile_effect",
    "challenge_effect",

    # Execution
    "execute_relic_triggers",
    "execute_shop_tile_effect",
    "execute_challenge_effect",
]

# Import handlers to register them (decorators populate the registries)
from . import shop_tiles as _shop_tiles  # noqa: F401, E402
from . import challenges as _challenges  # noqa: F401, E402
from . import relics as _relics  # noqa: F401, E402
