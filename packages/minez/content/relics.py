"""
Collectible (relic) definitions.

Collectibles are permanent for the run and stack by quantity. Each entry
documents the hook it acts on; the behavior itself lives in
registry/relics.py (hook triggers) or inline in the reveal engine for the
few that alter a reveal mid-flight (Optimist, Gambler, Billionaire,
Investor).

Hooks:
- levelStart: once per level, after generation
- levelEnd: on a survived level, before base gold
- onGoldGained / onGoldLost: every gold movement outside the shop
- onTileRevealed, onMineRevealed, onNumberRevealed, onChallengeRevealed
- generation: read by the level generator (Diffuser, Entrepreneur, Accountant)
- shop: read by the shop flow only (PersonalShopper, Couponer, Barterer, ...)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from .shop_tiles import Rarity


class RelicId(str, Enum):
    VEXILLOLOGIST = "Vexillologist"
    PIONEER = "Pioneer"
    TAX_COLLECTOR = "TaxCollector"
    DIFFUSER = "Diffuser"
    MATHEMATICIAN = "Mathematician"
    ACCOUNTANT = "Accountant"
    MINIMALIST = "Minimalist"
    LAPIDARIST = "Lapidarist"
    GAMBLER = "Gambler"
    PERSONAL_SHOPPER = "PersonalShopper"
    CHEAPSKATE = "Cheapskate"
    CARTOGRAPHER = "Cartographer"
    COUPONER = "Couponer"
    RESURRECTOR = "Resurrector"
    NUMBER_CRUNCHER = "NumberCruncher"
    ENTREPRENEUR = "Entrepreneur"
    RESEARCHER = "Researcher"
    DEBT_COLLECTOR = "DebtCollector"
    BILLIONAIRE = "Billionaire"
    INVESTOR = "Investor"
    OPTIMIST = "Optimist"
    SUGAR_DADDY = "SugarDaddy"
    FORTUNE_TELLER = "FortuneTeller"
    PHILANTHROPIST = "Philanthropist"
    BARTERER = "Barterer"
    GAMER = "Gamer"
    SURGEON = "Surgeon"
    SALES_ASSOCIATE = "SalesAssociate"
    AUDITOR = "Auditor"


@dataclass(frozen=True)
class Relic:
    """A collectible definition."""
    id: RelicId
    name: str
    rarity: Rarity
    hook: str
    description: str


# ============================================================================
# COLLECTIBLES
# ============================================================================

ALL_RELICS: Dict[RelicId, Relic] = {
    relic.id: relic for relic in [
        Relic(RelicId.VEXILLOLOGIST, "Vexillologist", Rarity.RARE, "levelEnd",
              "+5 gold if every mine is flagged and no flag is wrong."),
        Relic(RelicId.PIONEER, "Pioneer", Rarity.UNCOMMON, "levelStart",
              "Flag a random mine at the start of each level."),
        Relic(RelicId.TAX_COLLECTOR, "Tax Collector", Rarity.UNCOMMON, "onGoldGained",
              "+1 gold whenever you gain gold."),
        Relic(RelicId.DIFFUSER, "Diffuser", Rarity.UNCOMMON, "generation",
              "5 fewer mines per level."),
        Relic(RelicId.MATHEMATICIAN, "Mathematician", Rarity.UNCOMMON, "levelStart",
              "Reveal the highest number at the start of each level."),
        Relic(RelicId.ACCOUNTANT, "Accountant", Rarity.RARE, "generation",
              "Shop tiles are 1% more likely to spawn."),
        Relic(RelicId.MINIMALIST, "Minimalist", Rarity.RARE, "levelEnd",
              "+6 gold if you finish a level without revealing a special tile."),
        Relic(RelicId.LAPIDARIST, "Lapidarist", Rarity.UNCOMMON, "onMineRevealed",
              "+3 gold whenever a mine is revealed."),
        Relic(RelicId.GAMBLER, "Gambler", Rarity.UNCOMMON, "onMineRevealed",
              "25% chance a revealed mine does not explode."),
        Relic(RelicId.PERSONAL_SHOPPER, "Personal Shopper", Rarity.UNCOMMON, "shop",
              "One more offer in the shop."),
        Relic(RelicId.CHEAPSKATE, "Cheapskate", Rarity.UNCOMMON, "levelStart",
              "+1 life when starting a level with 10 or more gold."),
        Relic(RelicId.CARTOGRAPHER, "Cartographer", Rarity.UNCOMMON, "onTileRevealed",
              "+5 gold when all four corners are revealed."),
        Relic(RelicId.COUPONER, "Couponer", Rarity.UNCOMMON, "shop",
              "Shop tiles and collectibles cost 1 less gold."),
        Relic(RelicId.RESURRECTOR, "Resurrector", Rarity.UNCOMMON, "levelEnd",
              "+1 life when finishing a level with exactly 1 life."),
        Relic(RelicId.NUMBER_CRUNCHER, "Number Cruncher", Rarity.RARE, "onNumberRevealed",
              "Revealing a number N has an N% chance to give +1 gold."),
        Relic(RelicId.ENTREPRENEUR, "Entrepreneur", Rarity.UNCOMMON, "generation",
              "One more ore per level."),
        Relic(RelicId.RESEARCHER, "Researcher", Rarity.UNCOMMON, "levelStart",
              "Flag a random challenge tile at the start of each level."),
        Relic(RelicId.DEBT_COLLECTOR, "Debt Collector", Rarity.UNCOMMON, "levelStart",
              "+1 life when starting a level in debt."),
        Relic(RelicId.BILLIONAIRE, "Billionaire", Rarity.RARE, "onLifeLost",
              "Pay 5 gold instead of losing a life (never your last life)."),
        Relic(RelicId.INVESTOR, "Investor", Rarity.RARE, "onResourceRevealed",
              "25% chance ore and quartz become diamonds."),
        Relic(RelicId.OPTIMIST, "Optimist", Rarity.RARE, "onMineRevealed",
              "The first mine each level turns into quartz."),
        Relic(RelicId.SUGAR_DADDY, "Sugar Daddy", Rarity.RARE, "shop",
              "Gold gifts in the shop."),
        Relic(RelicId.FORTUNE_TELLER, "Fortune Teller", Rarity.UNCOMMON, "levelStart",
              "Reveal an ore at the start of each level."),
        Relic(RelicId.PHILANTHROPIST, "Philanthropist", Rarity.RARE, "onGoldLost",
              "25% chance to gain a life whenever you lose gold."),
        Relic(RelicId.BARTERER, "Barterer", Rarity.UNCOMMON, "shop",
              "Shop services cost 1 less gold."),
        Relic(RelicId.GAMER, "Gamer", Rarity.RARE, "shop",
              "Free shop rerolls."),
        Relic(RelicId.SURGEON, "Surgeon", Rarity.RARE, "shop",
              "Buy any number of lives per shop visit."),
        Relic(RelicId.SALES_ASSOCIATE, "Sales Associate", Rarity.RARE, "shop",
              "Discounted collectibles."),
        Relic(RelicId.AUDITOR, "Auditor", Rarity.RARE, "onChallengeRevealed",
              "+1 gold whenever a challenge tile is revealed."),
    ]
}


def get_relic(relic_id: str) -> Relic:
    """Get a collectible definition by id."""
    try:
        return ALL_RELICS[RelicId(relic_id)]
    except ValueError:
        raise ValueError(f"Unknown relic: {relic_id}") from None


def get_relics_by_rarity(rarity: Rarity) -> List[Relic]:
    return [r for r in ALL_RELICS.values() if r.rarity == rarity]
