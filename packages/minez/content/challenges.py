"""
Challenge tile definitions and spawn tuning.

Challenges are drafted between levels and are mostly harmful. Each drafted
id appears at least once per board; extra copies are weighted by
SPAWN_TARGET[band] * stacks owned.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List


class ChallengeId(str, Enum):
    AUTO_GRAT = "AutoGrat"
    STOPWATCH = "Stopwatch"
    MATH_TEST = "MathTest"
    BAD_DEAL = "BadDeal"
    CLOVER2 = "Clover2"
    SNAKE_OIL = "SnakeOil"
    SNAKE_VENOM = "SnakeVenom"
    BLOOD_PACT = "BloodPact"
    CAR_LOAN = "CarLoan"
    MEGA_MINE = "MegaMine"
    BLOOD_DIAMOND = "BloodDiamond"
    FINDERS_FEE = "FindersFee"
    ATM_FEE = "ATMFee"
    COAL = "Coal"
    BOXING_DAY = "BoxingDay"
    THIEF = "Thief"
    JACKHAMMER = "Jackhammer"
    DONATION_BOX = "DonationBox"
    APPRAISAL = "Appraisal"
    KEY = "Key"


class SpawnBand(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"


SPAWN_TARGET: Dict[SpawnBand, int] = {
    SpawnBand.LOW: 2,
    SpawnBand.MEDIUM: 4,
    SpawnBand.HIGH: 7,
    SpawnBand.VERY_HIGH: 10,
}

# Count as mines for adjacency numbers and detection, but never explode as mines
MINE_EQUIVALENT: FrozenSet[ChallengeId] = frozenset({
    ChallengeId.CLOVER2,
    ChallengeId.MEGA_MINE,
})

# Never placed through the draft pool
EXCLUDED: FrozenSet[ChallengeId] = frozenset({ChallengeId.COAL})


@dataclass(frozen=True)
class Challenge:
    """A challenge tile definition."""
    id: ChallengeId
    name: str
    band: SpawnBand
    description: str

    @property
    def spawn_target(self) -> int:
        return SPAWN_TARGET[self.band]

    @property
    def draftable(self) -> bool:
        return self.id not in EXCLUDED


ALL_CHALLENGES: Dict[ChallengeId, Challenge] = {
    c.id: c for c in [
        Challenge(ChallengeId.AUTO_GRAT, "Auto Grat", SpawnBand.HIGH,
                  "Lose 1 gold."),
        Challenge(ChallengeId.STOPWATCH, "Stopwatch", SpawnBand.MEDIUM,
                  "No effect."),
        Challenge(ChallengeId.MATH_TEST, "Math Test", SpawnBand.LOW,
                  "Numbers above 1 revealed after this are shown as '?'."),
        Challenge(ChallengeId.BAD_DEAL, "Bad Deal", SpawnBand.LOW,
                  "Gain 1 gold, then lose 1 life."),
        Challenge(ChallengeId.CLOVER2, "Clover", SpawnBand.HIGH,
                  "Counts as a mine for numbers but is harmless."),
        Challenge(ChallengeId.SNAKE_OIL, "Snake Oil", SpawnBand.MEDIUM,
                  "Ore, quartz and diamonds give no gold this level."),
        Challenge(ChallengeId.SNAKE_VENOM, "Snake Venom", SpawnBand.MEDIUM,
                  "Revealing a 3 or higher has a 25% chance to cost a life."),
        Challenge(ChallengeId.BLOOD_PACT, "Blood Pact", SpawnBand.HIGH,
                  "Lose 1 life if you have 3 or more."),
        Challenge(ChallengeId.CAR_LOAN, "Car Loan", SpawnBand.MEDIUM,
                  "Special tiles cost 1 gold to reveal this level."),
        Challenge(ChallengeId.MEGA_MINE, "Mega Mine", SpawnBand.MEDIUM,
                  "Explodes for 2 lives if you have more than 2."),
        Challenge(ChallengeId.BLOOD_DIAMOND, "Blood Diamond", SpawnBand.LOW,
                  "Ore, quartz and diamonds also cost a life this level."),
        Challenge(ChallengeId.FINDERS_FEE, "Finder's Fee", SpawnBand.HIGH,
                  "No end-of-level gold."),
        Challenge(ChallengeId.ATM_FEE, "ATM Fee", SpawnBand.MEDIUM,
                  "Every gold loss costs 1 extra gold this level."),
        Challenge(ChallengeId.COAL, "Coal", SpawnBand.LOW,
                  "No effect."),
        Challenge(ChallengeId.BOXING_DAY, "Boxing Day", SpawnBand.MEDIUM,
                  "Halve your gold."),
        Challenge(ChallengeId.THIEF, "Thief", SpawnBand.MEDIUM,
                  "Steals a random collectible."),
        Challenge(ChallengeId.JACKHAMMER, "Jackhammer", SpawnBand.HIGH,
                  "Reveal every surrounding tile, mines included."),
        Challenge(ChallengeId.DONATION_BOX, "Donation Box", SpawnBand.HIGH,
                  "Each gold gain reveals a random tile this level."),
        Challenge(ChallengeId.APPRAISAL, "Appraisal", SpawnBand.HIGH,
                  "Quartz costs a life this level."),
        Challenge(ChallengeId.KEY, "Key", SpawnBand.MEDIUM,
                  "Must be revealed before the exit can be used."),
    ]
}

CHALLENGE_SPAWN_BAND: Dict[ChallengeId, SpawnBand] = {
    cid: c.band for cid, c in ALL_CHALLENGES.items() if cid not in EXCLUDED
}

DRAFTABLE_CHALLENGES: List[ChallengeId] = [
    cid for cid in ChallengeId if cid not in EXCLUDED
]


def get_challenge(challenge_id: str) -> Challenge:
    """Get a challenge definition by id."""
    try:
        return ALL_CHALLENGES[ChallengeId(challenge_id)]
    except ValueError:
        raise ValueError(f"Unknown challenge: {challenge_id}") from None


def spawn_weight(challenge_id: ChallengeId, stacks: int) -> int:
    """Extra-copy weight for a drafted challenge."""
    band = CHALLENGE_SPAWN_BAND.get(challenge_id)
    if band is None or stacks <= 0:
        return 0
    return SPAWN_TARGET[band] * stacks
