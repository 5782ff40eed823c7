"""
Board Module
============

The playing field: dimensions, a cosmetic style, and tile validation.

Board Limits:
- Width and height are each restricted to 3..8 inclusive
- Positions are valid when 0 <= x < width and 0 <= y < height
- Level codes store width - 1 and height - 1 in three bits each
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .pieces import Mage, MageSort
from .position import Position, Team


DEFAULT_BOARD_SIZE: Tuple[int, int] = (6, 6)
BOARD_LIMITS: Tuple[int, int] = (3, 8)


class BoardSizeError(ValueError):
    """Raised when a board's dimensions fall outside the limits."""

    def __init__(self, width: int, height: int):
        super().__init__("board size does not conform to limits")
        self.width = width
        self.height = height


class BoardStyle(Enum):
    """Cosmetic style of a board."""
    GRASS = "grass"
    TELEPORT = "teleport"
    DESERT = "desert"
    FLESH = "flesh"
    CRUST = "crust"
    ELDRITCH = "eldritch"

    def sprite_offset(self) -> Tuple[int, int]:
        offsets = {
            BoardStyle.GRASS: (0, 0),
            BoardStyle.TELEPORT: (0, 64),
            BoardStyle.DESERT: (0, 128),
            BoardStyle.FLESH: (0, 256),
            BoardStyle.CRUST: (0, 320),
            BoardStyle.ELDRITCH: (0, 384),
        }
        return offsets[self]

    def next(self) -> 'BoardStyle':
        # Teleport is reserved for menus and drops back into the cycle
        if self == BoardStyle.TELEPORT:
            return BoardStyle.GRASS
        index = _STYLE_CYCLE.index(self)
        return _STYLE_CYCLE[(index + 1) % len(_STYLE_CYCLE)]

    def previous(self) -> 'BoardStyle':
        if self == BoardStyle.TELEPORT:
            return BoardStyle.GRASS
        index = _STYLE_CYCLE.index(self)
        return _STYLE_CYCLE[(index - 1) % len(_STYLE_CYCLE)]


_STYLE_CYCLE: Tuple[BoardStyle, ...] = (
    BoardStyle.GRASS,
    BoardStyle.DESERT,
    BoardStyle.FLESH,
    BoardStyle.CRUST,
    BoardStyle.ELDRITCH,
)


def _within_limits(width: int, height: int) -> bool:
    low, high = BOARD_LIMITS
    return low <= width <= high and low <= height <= high


@dataclass
class Board:
    """
    Size and style of the playing field.

    Attributes:
        width: Number of columns (3..8)
        height: Number of rows (3..8)
        style: Cosmetic style, carried through serialization

    Raises:
        BoardSizeError: if either dimension is outside the limits
    """
    width: int = DEFAULT_BOARD_SIZE[0]
    height: int = DEFAULT_BOARD_SIZE[1]
    style: BoardStyle = field(default=BoardStyle.GRASS)

    def __post_init__(self):
        if not _within_limits(self.width, self.height):
            raise BoardSizeError(self.width, self.height)

    @classmethod
    def unchecked(cls, width: int, height: int,
                  style: BoardStyle = BoardStyle.GRASS) -> 'Board':
        """Build a board without the size check, for drawing code."""
        board = cls.__new__(cls)
        board.width = width
        board.height = height
        board.style = style
        return board

    def is_valid(self) -> bool:
        return _within_limits(self.width, self.height)

    def copy(self) -> 'Board':
        return Board.unchecked(self.width, self.height, self.style)

    def place_mages(self, team: Team, mage_sorts: Sequence[MageSort],
                    offset: int) -> List[Mage]:
        """
        Create a team's mages lined up on its home row.

        The line is centered horizontally and sits on the first row
        (second row on boards 7 or more tall), rotated for Red.
        Indices start at ``offset``.
        """
        x_offset = (self.width - len(mage_sorts)) // 2
        row = 1 if self.height >= 7 else 0

        mages = []
        for index, sort in enumerate(mage_sorts):
            position = Position(x_offset + index, row).align(self, team)
            mages.append(Mage(offset + index, team, sort, position))
        return mages

    def validate_position(self, position: Position) -> Optional[Position]:
        """Return the position if it lies on the board, else None."""
        if position == position.wrap(self.width, self.height):
            return position
        return None

    def clamp_position(self, position: Position) -> Position:
        return Position(
            min(max(position.x, 0), self.width - 1),
            min(max(position.y, 0), self.height - 1),
        )

    def location_as_position(self, location: Tuple[int, int],
                             offset: Tuple[int, int],
                             scale: Tuple[int, int]) -> Optional[Position]:
        """
        Convert a pixel location to a tile.

        Rejects locations left of or above the offset, and tiles past the
        board's far edges.
        """
        dx = location[0] - offset[0]
        dy = location[1] - offset[1]
        if dx < 0 or dy < 0:
            return None

        x = dx // scale[0]
        y = dy // scale[1]
        if x < self.width and y < self.height:
            return Position(x, y)
        return None

    def __repr__(self) -> str:
        return f"Board({self.width}x{self.height}, {self.style.value})"
