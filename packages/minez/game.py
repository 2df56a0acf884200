"""
Game Runner - Main orchestrator for a Minez run.

This module provides the GameRunner class that manages a complete run from
seed to victory/defeat. It handles:
- Run initialization with a seed
- Level lifecycle (generate, start-of-level activation, reveal, resolution)
- Per-level listener teardown on the event bus
- Challenge drafting and shop purchases between levels

Usage:
    runner = GameRunner(seed=12345)
    runner.start_level()
    runner.reveal(2, 3)
    ...
    if runner.phase == GamePhase.BETWEEN_LEVELS:
        runner.draft_challenge(runner.offer_challenges()[0])
        runner.advance_level()
        runner.start_level()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from .content.challenges import ChallengeId
from .content.levels import STARTING_GOLD, STARTING_LIVES, board_size_for_level
from .events import EventBus, GameEvent, Subscription
from .generation.draft import offer_challenges
from .generation.level import GenerationConfig, generate_level
from .handlers.reveal import RevealEngine, RevealResult
from .state.board import Board, FlagColor, TileKind, board_to_string
from .state.run import RunState, create_run

logger = logging.getLogger(__name__)


# =============================================================================
# Game Phase Enumeration
# =============================================================================

class GamePhase(Enum):
    """Current phase of the run."""
    NOT_STARTED = auto()     # Before the first level is generated
    LEVEL = auto()           # Board in play
    BETWEEN_LEVELS = auto()  # Level survived, shop/draft may run
    RUN_COMPLETE = auto()    # Run ended (win or loss)


# =============================================================================
# Game Runner
# =============================================================================

class GameRunner:
    """
    Main orchestrator for a Minez run.

    Owns one RunState and one EventBus for the whole run, plus the current
    level's Board and RevealEngine.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        config: Optional[GenerationConfig] = None,
        lives: int = STARTING_LIVES,
        gold: int = STARTING_GOLD,
        verbose: bool = False,
    ):
        """
        Initialize a new run.

        Args:
            seed: Run seed (a random one is drawn when omitted)
            config: Level generation tuning
            lives: Starting lives
            gold: Starting gold
            verbose: If True, print level summaries
        """
        self.verbose = verbose
        self.run_state: RunState = create_run(seed, lives=lives, gold=gold)
        self.seed = self.run_state.seed
        self.config = config or GenerationConfig()
        self.bus = EventBus()

        self.board: Optional[Board] = None
        self.engine: Optional[RevealEngine] = None
        self.phase = GamePhase.NOT_STARTED

        # Run status flags
        self.run_over = False
        self.run_won = False
        self.run_lost = False

        self._level_subscriptions: List[Subscription] = []
        self.level_history: List[Dict[str, Any]] = []

        self._log(f"=== Run Started (seed {self.seed}) ===")

    def _log(self, message: str):
        logger.info(message)
        if self.verbose:
            print(message)

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe(self, event: GameEvent, listener: Callable[[Any], None],
                  level_scoped: bool = True) -> Subscription:
        """
        Subscribe to an engine event.

        Level-scoped subscriptions are dropped automatically when the current
        level resolves.
        """
        sub = self.bus.subscribe(event, listener)
        if level_scoped:
            self._level_subscriptions.append(sub)
        return sub

    def _teardown_level(self) -> None:
        for sub in self._level_subscriptions:
            sub.unsubscribe()
        self._level_subscriptions = []

    # =========================================================================
    # Level Lifecycle
    # =========================================================================

    def start_level(self) -> RevealResult:
        """Generate the current level and run start-of-level activation."""
        if self.run_over:
            raise RuntimeError("Run is over")
        if self.phase == GamePhase.LEVEL:
            raise RuntimeError(f"Level {self.run_state.level} is already in play")

        size = board_size_for_level(self.run_state.level)
        self.board = generate_level(self.run_state, size, size, self.config)
        self.engine = RevealEngine(self.run_state, self.board, self.bus)
        self.phase = GamePhase.LEVEL

        result = self.engine.start_level()
        self._after_action(result)
        return result

    def reveal(self, x: int, y: int) -> RevealResult:
        """Player click on a tile."""
        engine = self._require_level()
        result = engine.reveal(x, y, by_player=True)
        self._after_action(result)
        return result

    def toggle_flag(self, x: int, y: int, color: Optional[FlagColor] = None) -> bool:
        return self._require_level().toggle_flag(x, y, color)

    def chord(self, x: int, y: int) -> RevealResult:
        engine = self._require_level()
        result = engine.chord(x, y)
        self._after_action(result)
        return result

    def set_flag_color(self, color: FlagColor) -> None:
        self.run_state.flag_color = color

    def advance_level(self) -> int:
        """Move to the next level after a survived, non-final level."""
        if self.phase != GamePhase.BETWEEN_LEVELS:
            raise RuntimeError(f"Cannot advance from phase {self.phase.name}")
        level = self.run_state.advance_level()
        self.phase = GamePhase.NOT_STARTED
        return level

    def _require_level(self) -> RevealEngine:
        if self.phase != GamePhase.LEVEL or self.engine is None:
            raise RuntimeError("No level in play")
        return self.engine

    def _after_action(self, result: RevealResult) -> None:
        if result.ended_level:
            self._end_level(result)

    def _end_level(self, result: RevealResult) -> None:
        run = self.run_state
        survived = bool(result.survived)
        self.level_history.append({
            "level": run.level,
            "survived": survived,
            "lives": run.lives,
            "gold": run.gold,
            "revealed": run.stats.revealed_count,
        })
        self._teardown_level()
        run.shop_life_bought = False

        if not survived:
            self.run_over = True
            self.run_lost = True
            self.phase = GamePhase.RUN_COMPLETE
            self._log(f"Level {run.level} lost (gold {run.gold})")
        elif result.run_won:
            self.run_over = True
            self.run_won = True
            self.phase = GamePhase.RUN_COMPLETE
            self._log(f"Run won on level {run.level} (lives {run.lives}, gold {run.gold})")
        else:
            self.phase = GamePhase.BETWEEN_LEVELS
            self._log(f"Level {run.level} cleared (lives {run.lives}, gold {run.gold})")

    # =========================================================================
    # Drafting
    # =========================================================================

    def offer_challenges(self, count: int = 2) -> List[ChallengeId]:
        return offer_challenges(self.run_state, count)

    def draft_challenge(self, challenge_id: str) -> None:
        """Add one stack of a drafted challenge to the run."""
        self.run_state.add_challenge(challenge_id)
        logger.debug("Drafted %s", challenge_id)

    # =========================================================================
    # Shop
    # =========================================================================

    def _require_shop(self) -> RunState:
        if self.phase != GamePhase.BETWEEN_LEVELS:
            raise RuntimeError(f"Shop is closed in phase {self.phase.name}")
        return self.run_state

    def buy_shop_tile(self, tile_id: str) -> bool:
        """Buy a shop tile between levels. Returns False if gold is short."""
        bought = self._require_shop().purchase_shop_tile(tile_id)
        if bought:
            self._log(f"Bought {tile_id} (gold {self.run_state.gold})")
        return bought

    def buy_relic(self, relic_id: str) -> bool:
        bought = self._require_shop().purchase_relic(relic_id)
        if bought:
            self._log(f"Bought {relic_id} (gold {self.run_state.gold})")
        return bought

    def buy_life(self) -> bool:
        bought = self._require_shop().buy_life()
        if bought:
            self._log(f"Bought a life (lives {self.run_state.lives})")
        return bought

    # =========================================================================
    # Inspection
    # =========================================================================

    def display_board(self, reveal_all: bool = False) -> str:
        if self.board is None:
            return ""
        return board_to_string(self.board, reveal_all)

    def get_run_statistics(self) -> Dict[str, Any]:
        """Get statistics for the current run."""
        return {
            "seed": self.seed,
            "run_won": self.run_won,
            "run_lost": self.run_lost,
            "final_level": self.run_state.level,
            "lives": self.run_state.lives,
            "gold": self.run_state.gold,
            "levels_played": len(self.level_history),
            "relics": sum(self.run_state.owned_relics.values()),
            "challenges": sum(self.run_state.owned_challenges.values()),
        }


# =============================================================================
# Headless Mode
# =============================================================================

@dataclass
class RunResult:
    """Result of a headless run."""
    seed: int
    victory: bool
    level_reached: int
    lives: int
    gold: int
    stats: Dict[str, Any] = field(default_factory=dict)


def autoplay_level(runner: GameRunner) -> RevealResult:
    """
    Deterministic bot for one level: open every empty region, then walk
    out through the exit. Reads the board directly, so it never hits a mine
    unless an effect does it.
    """
    board = runner.board
    for tile in board.tiles_of_kind(TileKind.SAFE):
        if runner.phase != GamePhase.LEVEL:
            return RevealResult()
        if not tile.revealed and not tile.flagged:
            runner.reveal(tile.x, tile.y)

    result = RevealResult()
    for _ in range(5):
        exit_tile = board.find(lambda t: t.kind == TileKind.EXIT)
        if runner.phase != GamePhase.LEVEL or exit_tile is None:
            break
        result = runner.reveal(exit_tile.x, exit_tile.y)
        if result.exit_locked:
            key = board.find(lambda t: t.kind == TileKind.CHALLENGE and not t.revealed
                             and t.sub_id == ChallengeId.KEY)
            if key is not None:
                if key.flagged:
                    runner.toggle_flag(key.x, key.y)
                runner.reveal(key.x, key.y)
    return result


def run_headless(seed: int, levels: int = 16, verbose: bool = False) -> RunResult:
    """Play up to `levels` levels with the autoplay bot, drafting the first offer each time."""
    runner = GameRunner(seed=seed, verbose=verbose)
    for _ in range(levels):
        runner.start_level()
        autoplay_level(runner)
        if runner.phase != GamePhase.BETWEEN_LEVELS:
            break
        offers = runner.offer_challenges()
        if offers:
            runner.draft_challenge(offers[0])
        runner.advance_level()

    return RunResult(
        seed=runner.seed,
        victory=runner.run_won,
        level_reached=runner.run_state.level,
        lives=runner.run_state.lives,
        gold=runner.run_state.gold,
        stats=runner.get_run_statistics(),
    )
