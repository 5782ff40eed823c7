"""
Geometry Module
===============

Board coordinates and the two teams.

Coordinate Model:
- A position is a pair of signed 8-bit integers (x, y), (0, 0) top-left
- Vector arithmetic wraps around the signed 8-bit range
- Red sits at the bottom of the board; its positions are rotated
  180 degrees to face Blue when aligned
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .board import Board


def _wrap_i8(value: int) -> int:
    """Wrap an integer into the signed 8-bit range."""
    return ((value + 128) & 0xFF) - 128


class Team(Enum):
    """The two sides of a game. Values are the level-code indices."""
    RED = 0
    BLUE = 1

    def enemy(self) -> 'Team':
        return Team.BLUE if self == Team.RED else Team.RED

    @classmethod
    def from_index(cls, index: int) -> 'Team':
        return cls.RED if index == 0 else cls.BLUE

    @classmethod
    def default(cls) -> 'Team':
        return cls.RED

    def __repr__(self) -> str:
        return "Red" if self == Team.RED else "Blue"


@dataclass(frozen=True, order=True)
class Position:
    """
    Reference to a tile on the board, or a relative offset.

    Positions compare and hash by their raw (x, y) pair, so they can be
    used as dictionary keys for power-ups and shielded tiles.
    """
    x: int
    y: int

    def __add__(self, other: 'Position') -> 'Position':
        return Position(_wrap_i8(self.x + other.x), _wrap_i8(self.y + other.y))

    def __sub__(self, other: 'Position') -> 'Position':
        return Position(_wrap_i8(self.x - other.x), _wrap_i8(self.y - other.y))

    def __iter__(self):
        yield self.x
        yield self.y

    def __repr__(self) -> str:
        return f"({self.x},{self.y})"

    def length(self) -> int:
        """Manhattan length of the position as a vector."""
        return abs(self.x) + abs(self.y)

    def wrap(self, xmax: int, ymax: int) -> 'Position':
        """
        Wrap the position into (0, 0)..(xmax - 1, ymax - 1).

        Negative and positive coordinates wrap as if on an infinite grid:
        ((v % m) + m) % m on each axis.
        """
        return Position(((self.x % xmax) + xmax) % xmax,
                        ((self.y % ymax) + ymax) % ymax)

    def rotate(self, board: 'Board') -> 'Position':
        """Rotate the position 180 degrees about the board center."""
        return Position(board.width - 1 - self.x, board.height - 1 - self.y)

    def align(self, board: 'Board', team: Team) -> 'Position':
        """Align the position into a team's perspective."""
        if team == Team.RED:
            return self.rotate(board)
        return self
