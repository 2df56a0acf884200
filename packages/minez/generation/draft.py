"""
Challenge draft offers between levels.

The player picks one of `count` distinct challenge ids drawn from the
challenge stream (seed + level + 75000). Excluded ids are never offered.
"""

from typing import List

from ..content.challenges import DRAFTABLE_CHALLENGES, ChallengeId
from ..state.rng import RNGStream, get_stream
from ..state.run import RunState


def offer_challenges(run: RunState, count: int = 2) -> List[ChallengeId]:
    """Distinct draftable ids for the current level, in draw order."""
    if count <= 0:
        return []
    rng = get_stream(RNGStream.CHALLENGE, run.seed, run.level)
    pool = list(DRAFTABLE_CHALLENGES)
    offers = []
    while pool and len(offers) < count:
        offers.append(pool.pop(rng.random_index(len(pool))))
    return offers
