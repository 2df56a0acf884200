"""
Handlers - the reveal engine and the level lifecycle around it.
"""

from .reveal import RevealEngine, RevealResult
from .level_start import activate_level_start
from .level_end import resolve_level

__all__ = [
    "RevealEngine",
    "RevealResult",
    "activate_level_start",
    "resolve_level",
]
