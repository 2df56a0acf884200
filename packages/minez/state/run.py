"""
Run State - everything that survives from one level to the next.

The RunState is passed explicitly into the generator and the reveal engine;
there is no module-level singleton, so several runs can be simulated side by
side.

Two groups of fields reset every level and must never leak across levels:
- effects: per-level toggles and stack counters armed by tiles
- stats: per-level counters written by the generator and the reveal engine
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..content.challenges import ChallengeId
from ..content.levels import ECONOMY, FINAL_LEVEL, STARTING_GOLD, STARTING_LIVES
from ..content.relics import RelicId, get_relic
from ..content.shop_tiles import ShopTileId, get_shop_tile
from .board import FlagColor
from .rng import new_run_seed

logger = logging.getLogger(__name__)


@dataclass
class LevelEffects:
    """Per-level toggles. A fresh instance is installed by every generation."""
    # Armed by challenge tiles
    car_loan: bool = False
    snake_venom: bool = False
    math_test: bool = False
    snake_oil: bool = False
    no_end_gold: bool = False
    atm_fee: bool = False
    blood_diamond: bool = False
    appraisal: bool = False
    donation_box_stacks: int = 0

    # Armed by shop tiles
    scratchcard_stacks: int = 0
    lucky_penny_stacks: int = 0
    nine_to_five_stacks: int = 0
    cheat_sheet_stacks: int = 0
    tarot_card: bool = False

    # Once-per-level consumables
    optimist_used: bool = False
    poker_chip_used: bool = False
    cartographer_awarded: bool = False


@dataclass
class LevelStats:
    """Per-level counters."""
    revealed_count: int = 0
    special_revealed: int = 0

    mines_total: int = 0
    mines_remaining: int = 0
    ore_total: int = 0
    ore_remaining: int = 0
    exits_remaining: int = 0

    shop_counts: Dict[ShopTileId, int] = field(default_factory=dict)
    challenge_counts: Dict[ChallengeId, int] = field(default_factory=dict)
    shop_remaining: int = 0
    challenge_remaining: int = 0


@dataclass
class RunState:
    """
    Complete state of a run in progress.

    lives may grow without bound; a level is lost once lives reach 0.
    gold is signed and may go negative.
    """

    # ==================== SEED ====================
    seed: int

    # ==================== PROGRESS ====================
    level: int = 1

    # ==================== RESOURCES ====================
    lives: int = STARTING_LIVES
    gold: int = STARTING_GOLD
    shop_free_purchases: int = 0
    shop_life_bought: bool = False

    # ==================== INPUT ====================
    flag_color: FlagColor = FlagColor.WHITE

    # ==================== OWNED ITEMS ====================
    # id -> stack count
    owned_shop_tiles: Dict[ShopTileId, int] = field(default_factory=dict)
    owned_relics: Dict[RelicId, int] = field(default_factory=dict)
    owned_challenges: Dict[ChallengeId, int] = field(default_factory=dict)

    # ==================== PER-LEVEL ====================
    effects: LevelEffects = field(default_factory=LevelEffects)
    stats: LevelStats = field(default_factory=LevelStats)

    # ==================== METHODS ====================

    # ----- COLLECTIBLES -----

    def relic_stacks(self, relic_id: RelicId) -> int:
        return self.owned_relics.get(relic_id, 0)

    def has_relic(self, relic_id: RelicId) -> bool:
        return self.relic_stacks(relic_id) > 0

    def add_relic(self, relic_id: str, count: int = 1) -> None:
        """Add stacks of a collectible. Raises ValueError for unknown ids."""
        try:
            rid = RelicId(relic_id)
        except ValueError:
            raise ValueError(f"Unknown relic: {relic_id}") from None
        self.owned_relics[rid] = self.owned_relics.get(rid, 0) + count

    def remove_relic(self, relic_id: RelicId) -> bool:
        """Remove one stack (theft). Returns False if none owned."""
        stacks = self.owned_relics.get(relic_id, 0)
        if stacks <= 0:
            return False
        if stacks == 1:
            del self.owned_relics[relic_id]
        else:
            self.owned_relics[relic_id] = stacks - 1
        return True

    # ----- SHOP TILES -----

    def shop_tile_stacks(self, tile_id: ShopTileId) -> int:
        return self.owned_shop_tiles.get(tile_id, 0)

    def add_shop_tile(self, tile_id: str, count: int = 1) -> None:
        try:
            tid = ShopTileId(tile_id)
        except ValueError:
            raise ValueError(f"Unknown shop tile: {tile_id}") from None
        self.owned_shop_tiles[tid] = self.owned_shop_tiles.get(tid, 0) + count

    # ----- CHALLENGES -----

    def challenge_stacks(self, challenge_id: ChallengeId) -> int:
        return self.owned_challenges.get(challenge_id, 0)

    def add_challenge(self, challenge_id: str, count: int = 1) -> None:
        try:
            cid = ChallengeId(challenge_id)
        except ValueError:
            raise ValueError(f"Unknown challenge: {challenge_id}") from None
        self.owned_challenges[cid] = self.owned_challenges.get(cid, 0) + count

    # ----- SHOP FLOW -----

    def item_price(self, base: int) -> int:
        """Couponer takes 1 gold per stack off shop tiles and collectibles."""
        return max(0, base - self.relic_stacks(RelicId.COUPONER))

    def service_price(self, base: int) -> int:
        """Barterer takes 1 gold per stack off shop services."""
        return max(0, base - self.relic_stacks(RelicId.BARTERER))

    def spend_gold(self, price: int) -> bool:
        """
        Pay for a purchase.

        A banked free purchase is consumed first and makes the price 0.
        ATM Fee adds 1 to any non-zero price. Shop spending does not fire
        gold-lost effects. Returns False (no change) if gold is short.
        """
        if price < 0:
            raise ValueError("price must be non-negative")
        if self.shop_free_purchases > 0:
            self.shop_free_purchases -= 1
            return True
        total = price + (1 if price > 0 and self.effects.atm_fee else 0)
        if self.gold < total:
            return False
        self.gold -= total
        return True

    def purchase_shop_tile(self, tile_id: str) -> bool:
        """Buy one copy of a shop tile. A Receipt banks a free purchase at once."""
        tile = get_shop_tile(tile_id)
        if not self.spend_gold(self.item_price(tile.price)):
            return False
        self.add_shop_tile(tile.id)
        if tile.id == ShopTileId.RECEIPT:
            self.shop_free_purchases += 1
        return True

    def purchase_relic(self, relic_id: str) -> bool:
        get_relic(relic_id)
        if not self.spend_gold(self.item_price(ECONOMY["relic_price"])):
            return False
        self.add_relic(relic_id)
        return True

    def buy_life(self) -> bool:
        """Shop service: +1 life. Once per shop visit unless Surgeon is owned."""
        if self.shop_life_bought and not self.has_relic(RelicId.SURGEON):
            return False
        if not self.spend_gold(self.service_price(ECONOMY["buy_life_price"])):
            return False
        self.lives += 1
        if not self.has_relic(RelicId.SURGEON):
            self.shop_life_bought = True
        return True

    # ----- LEVEL LIFECYCLE -----

    def reset_level_state(self) -> None:
        """Install fresh per-level effects and stats."""
        self.effects = LevelEffects()
        self.stats = LevelStats()

    @property
    def is_final_level(self) -> bool:
        return self.level >= FINAL_LEVEL

    def advance_level(self) -> int:
        self.level += 1
        logger.debug("Advanced to level %d", self.level)
        return self.level


def create_run(seed: Optional[int] = None, lives: int = STARTING_LIVES,
               gold: int = STARTING_GOLD) -> RunState:
    """Start a new run at level 1. A random seed is drawn when none is given."""
    if seed is None:
        seed = new_run_seed()
    return RunState(seed=seed, lives=lives, gold=gold)
