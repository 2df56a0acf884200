"""
Minez engine - deterministic level generation and reveal rules for a
roguelike minesweeper.

Pure simulation: no rendering, no input handling. The presentation layer
subscribes to the EventBus and drives a GameRunner (or a RevealEngine
directly).

Usage:
    from packages.minez import GameRunner

    runner = GameRunner(seed=42)
    runner.start_level()
    result = runner.reveal(0, 0)
    print(result.gold_delta, result.life_delta, result.ended_level)
"""

__version__ = "0.1.0"

from .events import EventBus, GameEvent, Subscription
from .game import GamePhase, GameRunner, RunResult, run_headless
from .generation import GenerationConfig, generate_level, offer_challenges
from .handlers import RevealEngine, RevealResult
from .state import Board, FlagColor, RunState, Tile, TileKind, create_run

__all__ = [
    "__version__",
    "EventBus",
    "GameEvent",
    "Subscription",
    "GamePhase",
    "GameRunner",
    "RunResult",
    "run_headless",
    "GenerationConfig",
    "generate_level",
    "offer_challenges",
    "RevealEngine",
    "RevealResult",
    "Board",
    "FlagColor",
    "RunState",
    "Tile",
    "TileKind",
    "create_run",
]
