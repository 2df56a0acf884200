"""
Board Model - the grid for one level.

Tiles are stored row-major in a flat list: index = y * width + x.
Neighbors are the up-to-8 surrounding cells, clamped at the edges.

A Board is produced fresh by the level generator and discarded when the
level ends. It holds no reference back to the run state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from ..content.challenges import ChallengeId, MINE_EQUIVALENT
from ..content.shop_tiles import ShopTileId


class TileKind(Enum):
    """What a cell holds. HIDDEN only exists before generation finishes."""
    HIDDEN = "hidden"
    SAFE = "safe"
    NUMBER = "number"
    MINE = "mine"
    EXIT = "exit"
    ORE = "ore"
    SHOP = "shop"
    CHALLENGE = "challenge"


class FlagColor(Enum):
    WHITE = "white"
    YELLOW = "yellow"
    BLUE = "blue"


class Direction(Enum):
    """Compass hint arrows."""
    UP = "↑"
    DOWN = "↓"
    LEFT = "←"
    RIGHT = "→"


# Display-only kinds a tile can turn into after a reveal
class TransformKind(Enum):
    QUARTZ = "Quartz"
    ORE = "Ore"
    DIAMOND = "Diamond"


SubId = Union[ShopTileId, ChallengeId]


@dataclass
class Tile:
    """
    One grid cell.

    kind is fixed at generation. Reveal effects never rewrite it; display
    upgrades go through pending_transform and commit into `display`.
    """
    x: int
    y: int
    kind: TileKind = TileKind.HIDDEN
    revealed: bool = False
    flagged: bool = False
    flag_color: Optional[FlagColor] = None
    number: int = 0
    sub_id: Optional[SubId] = None
    compass_dir: Optional[Direction] = None

    # Masking (display state tracked for hover consistency)
    math_masked: bool = False
    random_masked: bool = False
    pending_transform: Optional[TransformKind] = None
    display: Optional[TransformKind] = None

    # Set on a cascading tile revealed by another cascade of the same kind
    cascade_suppressed: bool = False

    @property
    def pos(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def is_masked(self) -> bool:
        return (self.math_masked or self.random_masked) and self.number > 0

    @property
    def is_special(self) -> bool:
        return self.kind in (TileKind.SHOP, TileKind.CHALLENGE)

    @property
    def is_mine_like(self) -> bool:
        """Counts as a mine for adjacency numbers and detection."""
        if self.kind == TileKind.MINE:
            return True
        return self.kind == TileKind.CHALLENGE and self.sub_id in MINE_EQUIVALENT

    def is_shop(self, tile_id: ShopTileId) -> bool:
        return self.kind == TileKind.SHOP and self.sub_id == tile_id

    def is_challenge(self, challenge_id: ChallengeId) -> bool:
        return self.kind == TileKind.CHALLENGE and self.sub_id == challenge_id

    def symbol(self, reveal_all: bool = False) -> str:
        """Single-character rendering."""
        if not (self.revealed or reveal_all):
            return "F" if self.flagged else "#"
        if self.kind == TileKind.NUMBER:
            if self.is_masked and not reveal_all:
                return "?"
            return str(self.number)
        return _KIND_SYMBOLS[self.kind]

    def __repr__(self) -> str:
        sub = f":{self.sub_id.value}" if self.sub_id is not None else ""
        state = "R" if self.revealed else ("F" if self.flagged else "H")
        return f"Tile({self.x},{self.y} {self.kind.value}{sub} {state})"


_KIND_SYMBOLS: Dict[TileKind, str] = {
    TileKind.HIDDEN: "#",
    TileKind.SAFE: ".",
    TileKind.MINE: "*",
    TileKind.EXIT: "X",
    TileKind.ORE: "o",
    TileKind.SHOP: "$",
    TileKind.CHALLENGE: "!",
}


@dataclass
class Board:
    """Fixed-size grid of tiles for the current level."""
    width: int
    height: int
    tiles: List[Tile] = field(default_factory=list)

    @classmethod
    def empty(cls, width: int, height: int) -> "Board":
        """All-HIDDEN board."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid board size: {width}x{height}")
        tiles = [Tile(x=i % width, y=i // width) for i in range(width * height)]
        return cls(width=width, height=height, tiles=tiles)

    @property
    def size(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def index_at(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise ValueError(f"Out of bounds: ({x}, {y}) on {self.width}x{self.height} board")
        return y * self.width + x

    def position_of(self, index: int) -> Tuple[int, int]:
        return (index % self.width, index // self.width)

    def tile_at(self, x: int, y: int) -> Tile:
        return self.tiles[self.index_at(x, y)]

    def index_of(self, tile: Tile) -> int:
        return tile.y * self.width + tile.x

    def neighbor_indices(self, index: int) -> List[int]:
        x, y = self.position_of(index)
        result = []
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                nx, ny = x + dx, y + dy
                if self.in_bounds(nx, ny):
                    result.append(ny * self.width + nx)
        return result

    def neighbors(self, tile: Tile) -> List[Tile]:
        """Up to 8 surrounding tiles, row-major order."""
        return [self.tiles[i] for i in self.neighbor_indices(self.index_of(tile))]

    def corners(self) -> List[Tile]:
        w, h = self.width, self.height
        return [self.tiles[0], self.tiles[w - 1], self.tiles[(h - 1) * w], self.tiles[h * w - 1]]

    def find(self, predicate: Callable[[Tile], bool]) -> Optional[Tile]:
        """First tile in row-major order matching predicate."""
        for tile in self.tiles:
            if predicate(tile):
                return tile
        return None

    def filter(self, predicate: Callable[[Tile], bool]) -> List[Tile]:
        return [t for t in self.tiles if predicate(t)]

    def tiles_of_kind(self, kind: TileKind, sub_id: Optional[SubId] = None) -> List[Tile]:
        return [t for t in self.tiles if t.kind == kind and (sub_id is None or t.sub_id == sub_id)]

    def count(self, kind: TileKind, sub_id: Optional[SubId] = None) -> int:
        return len(self.tiles_of_kind(kind, sub_id))

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)


# =============================================================================
# Adjacency
# =============================================================================

def count_adjacent_mines(board: Board, tile: Tile) -> int:
    """Mines and mine-equivalent challenge tiles around a cell."""
    return sum(1 for n in board.neighbors(tile) if n.is_mine_like)


def assign_numbers(board: Board) -> None:
    """Turn every HIDDEN cell into SAFE (0) or NUMBER (1-8)."""
    for tile in board.tiles:
        if tile.kind != TileKind.HIDDEN:
            continue
        n = count_adjacent_mines(board, tile)
        tile.number = n
        tile.kind = TileKind.SAFE if n == 0 else TileKind.NUMBER


# =============================================================================
# Construction helpers
# =============================================================================

_LAYOUT_KINDS: Dict[str, TileKind] = {
    "*": TileKind.MINE,
    "X": TileKind.EXIT,
    "o": TileKind.ORE,
    ".": TileKind.HIDDEN,
}


def board_from_rows(rows: List[str],
                    specials: Optional[Dict[Tuple[int, int], SubId]] = None) -> Board:
    """
    Build a board from a text layout, then assign numbers.

    Layout characters: '*' mine, 'X' exit, 'o' ore, '.' empty (numbered),
    '$' shop tile, '!' challenge tile. Shop/challenge cells take their id
    from `specials[(x, y)]`.

    Example:
        board_from_rows(["*..", ".$.", "..X"], {(1, 1): ShopTileId.ONE_UP})
    """
    if not rows:
        raise ValueError("Layout must have at least one row")
    width = len(rows[0])
    board = Board.empty(width, len(rows))
    specials = specials or {}
    for y, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"Row {y} has length {len(row)}, expected {width}")
        for x, ch in enumerate(row):
            tile = board.tile_at(x, y)
            if ch in ("$", "!"):
                sub_id = specials.get((x, y))
                if sub_id is None:
                    raise ValueError(f"No special id for ({x}, {y})")
                tile.kind = TileKind.SHOP if ch == "$" else TileKind.CHALLENGE
                tile.sub_id = sub_id
            elif ch in _LAYOUT_KINDS:
                tile.kind = _LAYOUT_KINDS[ch]
            else:
                raise ValueError(f"Unknown layout character: {ch!r}")
    assign_numbers(board)
    return board


def board_to_string(board: Board, reveal_all: bool = False) -> str:
    """ASCII rendering, one row per line."""
    lines = []
    for y in range(board.height):
        row = board.tiles[y * board.width:(y + 1) * board.width]
        lines.append(" ".join(t.symbol(reveal_all) for t in row))
    return "\n".join(lines)
