"""
Shared pytest fixtures for the Minez test suite.

This module provides reusable fixtures for:
- Fresh run state with a known seed
- Hand-built boards wired to a reveal engine
- A fixed-sequence RNG stub for probabilistic effects
"""

import pytest
import sys

# Ensure project root is in path
import os
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)

from packages.minez.events import EventBus, GameEvent
from packages.minez.generation.level import write_level_stats
from packages.minez.handlers.reveal import RevealEngine
from packages.minez.state.board import board_from_rows
from packages.minez.state.rng import Random
from packages.minez.state.run import create_run


# =============================================================================
# RNG Stub
# =============================================================================


class FixedRandom(Random):
    """
    Random that replays a fixed list of floats, then a default.

    The default of 0.99 makes every "chance" roll fail, so tests only see
    the effects they ask for.
    """

    def __init__(self, values=None, default: float = 0.99):
        super().__init__(0)
        self.values = list(values or [])
        self.default = default

    def random(self) -> float:
        self.counter += 1
        if self.values:
            return self.values.pop(0)
        return self.default


def make_engine(rows, specials=None, run=None, rng_values=None, default=0.99,
                auto_commit=True, **run_kwargs):
    """
    Build a RevealEngine over a text layout.

    Every tile and effect stream is replaced by one shared FixedRandom so
    tests control the exact roll sequence.
    """
    if run is None:
        run = create_run(seed=12345, **run_kwargs)
    board = board_from_rows(rows, specials)
    write_level_stats(run, board)
    engine = RevealEngine(run, board, EventBus(), auto_commit=auto_commit)
    shared = FixedRandom(rng_values, default=default)
    engine.rng_for_tile = lambda tile: shared
    engine.rng_for_effect = lambda effect_id, offset=0: shared
    engine.test_rng = shared
    return engine


def record_events(bus, *events):
    """Subscribe to events and return the list payloads are appended to."""
    seen = []
    targets = events or tuple(GameEvent)
    for event in targets:
        bus.subscribe(event, lambda payload, e=event: seen.append((e, payload)))
    return seen


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def run():
    """Run state with seed 12345, 3 lives, 0 gold."""
    return create_run(seed=12345)


@pytest.fixture
def engine_factory():
    """Factory for hand-built boards (see make_engine)."""
    return make_engine


@pytest.fixture
def rng_seed_42():
    """RNG initialized with seed 42 for deterministic tests."""
    return Random(42)


@pytest.fixture
def runner():
    """GameRunner on seed 12345, before the first level."""
    from packages.minez.game import GameRunner
    return GameRunner(seed=12345)
