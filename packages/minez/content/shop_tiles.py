"""
Shop Tile Definitions.

Shop tiles are bought between levels. Every owned copy raises the odds that
the tile spawns on future boards; revealing a spawned copy fires its effect
once.

Rarity drives the shop price (see levels.ECONOMY):
- COMMON: 5 gold
- UNCOMMON: 7 gold
- RARE / VERY_RARE: 10 gold
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from .levels import ECONOMY


class Rarity(Enum):
    """Shared rarity scale for shop tiles and collectibles."""
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    VERY_RARE = "VeryRare"


class ShopTileId(str, Enum):
    """Closed set of shop tiles. Values are the stable save-format ids."""
    DIAMOND = "Diamond"
    ONE_UP = "1Up"
    PICKAXE = "Pickaxe"
    COMPASS = "Compass"
    SCRATCHCARD = "Scratchcard"
    GOOD_DEAL = "GoodDeal"
    REMOTE_CONTROL = "RemoteControl"
    ADVANCE_PAYMENT = "AdvancePayment"
    QUARTZ = "Quartz"
    MAGNET = "Magnet"
    RECEIPT = "Receipt"
    TWO_UP = "2Up"
    LUCKY_CAT = "LuckyCat"
    TAROT_CARD = "TarotCard"
    METAL_DETECTOR = "MetalDetector"
    LAUNDRY_MONEY = "LaundryMoney"
    POKER_CHIP = "PokerChip"
    LUCKY_PENNY = "LuckyPenny"
    NINE_TO_FIVE = "NineToFive"
    CHEAT_SHEET = "CheatSheet"


@dataclass(frozen=True)
class ShopTile:
    """A shop tile definition."""
    id: ShopTileId
    name: str
    rarity: Rarity
    description: str

    @property
    def price(self) -> int:
        return price_for_rarity(self.rarity)


def price_for_rarity(rarity: Rarity) -> int:
    """Shop price in gold for a rarity."""
    if rarity == Rarity.COMMON:
        return ECONOMY["shop_price_common"]
    if rarity == Rarity.UNCOMMON:
        return ECONOMY["shop_price_uncommon"]
    return ECONOMY["shop_price_rare"]


# Hard per-board copy limits regardless of stacks owned
MAX_COPIES_PER_BOARD: Dict[ShopTileId, int] = {
    ShopTileId.POKER_CHIP: 1,
}

# Force-placed on every board if it did not spawn naturally
GUARANTEED_SHOP_TILE = ShopTileId.ONE_UP


# ============================================================================
# SHOP TILES
# ============================================================================

ALL_SHOP_TILES: Dict[ShopTileId, ShopTile] = {
    tile.id: tile for tile in [
        ShopTile(ShopTileId.DIAMOND, "Diamond", Rarity.RARE,
                 "Gain 7-10 gold."),
        ShopTile(ShopTileId.ONE_UP, "1 Up", Rarity.UNCOMMON,
                 "Gain 1 life."),
        ShopTile(ShopTileId.PICKAXE, "Pickaxe", Rarity.COMMON,
                 "Reveal up to 2 random adjacent tiles that are not mines."),
        ShopTile(ShopTileId.COMPASS, "Compass", Rarity.UNCOMMON,
                 "Points toward the nearest exit."),
        ShopTile(ShopTileId.SCRATCHCARD, "Scratchcard", Rarity.RARE,
                 "+1 gold for every special tile revealed after this one this level."),
        ShopTile(ShopTileId.GOOD_DEAL, "Good Deal", Rarity.COMMON,
                 "Spend 1 gold to gain 1 life (needs positive gold)."),
        ShopTile(ShopTileId.REMOTE_CONTROL, "Remote Control", Rarity.COMMON,
                 "Flag a mine (or a Clover if no mines remain)."),
        ShopTile(ShopTileId.ADVANCE_PAYMENT, "Advance Payment", Rarity.COMMON,
                 "Reveal an ore tile."),
        ShopTile(ShopTileId.QUARTZ, "Quartz", Rarity.COMMON,
                 "Gain 1 gold."),
        ShopTile(ShopTileId.MAGNET, "Magnet", Rarity.UNCOMMON,
                 "Reveal all adjacent ore tiles."),
        ShopTile(ShopTileId.RECEIPT, "Receipt", Rarity.UNCOMMON,
                 "Your next shop purchase is free."),
        ShopTile(ShopTileId.TWO_UP, "2 Up", Rarity.RARE,
                 "Gain 2 lives."),
        ShopTile(ShopTileId.LUCKY_CAT, "Lucky Cat", Rarity.UNCOMMON,
                 "Gain gold equal to your lives."),
        ShopTile(ShopTileId.TAROT_CARD, "Tarot Card", Rarity.UNCOMMON,
                 "Masked numbers have a 5% chance to become Quartz, Ore or Diamond this level."),
        ShopTile(ShopTileId.METAL_DETECTOR, "Metal Detector", Rarity.UNCOMMON,
                 "Flag all adjacent mines."),
        ShopTile(ShopTileId.LAUNDRY_MONEY, "Laundry Money", Rarity.UNCOMMON,
                 "Round your gold up to the next multiple of 5."),
        ShopTile(ShopTileId.POKER_CHIP, "Poker Chip", Rarity.RARE,
                 "Flag the exit and one mine without saying which is which. Once per board."),
        ShopTile(ShopTileId.LUCKY_PENNY, "Lucky Penny", Rarity.UNCOMMON,
                 "Masked numbers have a 5% chance to become Quartz this level."),
        ShopTile(ShopTileId.NINE_TO_FIVE, "9-5", Rarity.COMMON,
                 "Gain 2 gold whenever you lose a life this level."),
        ShopTile(ShopTileId.CHEAT_SHEET, "Cheat Sheet", Rarity.UNCOMMON,
                 "Numbers are 5% less likely to be masked this level."),
    ]
}


def get_shop_tile(tile_id: str) -> ShopTile:
    """Get a shop tile definition by id."""
    try:
        return ALL_SHOP_TILES[ShopTileId(tile_id)]
    except ValueError:
        raise ValueError(f"Unknown shop tile: {tile_id}") from None


def get_shop_tiles_by_rarity(rarity: Rarity) -> List[ShopTile]:
    """All shop tiles of a rarity, in catalog order."""
    return [t for t in ALL_SHOP_TILES.values() if t.rarity == rarity]
