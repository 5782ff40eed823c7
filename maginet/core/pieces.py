"""
Mage Module
===========

Defines mana, mage sorts, spell patterns, power-ups and the mage unit.

Every mage moves the same way (one step, diagonals only with the
Diagonal power-up); the sort only selects which fixed pattern of tiles
is attacked after a move. Patterns are part of the level code contract
and must not be reordered.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .position import Position, Team


DEFAULT_MANA = 4


@dataclass(frozen=True, eq=False)
class Mana:
    """
    Current and maximum mana of a mage.

    Arithmetic saturates into [0, maximum]. Equality and ordering are
    defined over the current value only, against another Mana or an int.
    """
    current: int
    maximum: int = DEFAULT_MANA

    @classmethod
    def with_max(cls, maximum: int) -> 'Mana':
        return cls(maximum, maximum)

    @classmethod
    def select(cls, sort: 'MageSort') -> 'Mana':
        """Starting mana for a sort. Every sort currently starts full at 4."""
        return cls.with_max(DEFAULT_MANA)

    def __add__(self, amount: int) -> 'Mana':
        return Mana(min(self.current + amount, self.maximum), self.maximum)

    def __sub__(self, amount: int) -> 'Mana':
        return Mana(max(self.current - amount, 0), self.maximum)

    def _value(self, other) -> int:
        return other.current if isinstance(other, Mana) else other

    def __eq__(self, other) -> bool:
        if not isinstance(other, (Mana, int)):
            return NotImplemented
        return self.current == self._value(other)

    def __lt__(self, other) -> bool:
        return self.current < self._value(other)

    def __le__(self, other) -> bool:
        return self.current <= self._value(other)

    def __gt__(self, other) -> bool:
        return self.current > self._value(other)

    def __ge__(self, other) -> bool:
        return self.current >= self._value(other)

    __hash__ = None

    def to_byte(self) -> int:
        return ((self.current & 0b1111) << 4) | (self.maximum & 0b1111)

    @classmethod
    def from_byte(cls, value: int) -> 'Mana':
        return cls((value >> 4) & 0b1111, value & 0b1111)

    def __repr__(self) -> str:
        return f"{self.current}/{self.maximum}"


class MageSort(Enum):
    """
    Distinct type of a mage, selecting its spell pattern.

    Values are the level-code indices.
    """
    DIAMOND = 0  # Outer cardinals and inner diagonals
    CROSS = 1    # X shape
    KNIGHT = 2   # Chess knight jumps
    SPIKE = 3    # Outer diagonals and inner cardinals
    PLUS = 4     # + shape

    def next(self) -> 'MageSort':
        return _SORT_CYCLE[(_SORT_CYCLE.index(self) + 1) % len(_SORT_CYCLE)]

    def previous(self) -> 'MageSort':
        return _SORT_CYCLE[(_SORT_CYCLE.index(self) - 1) % len(_SORT_CYCLE)]

    @classmethod
    def from_index(cls, index: int) -> 'MageSort':
        """Unknown or overflowing indices map to PLUS."""
        for sort in cls:
            if sort.value == index:
                return sort
        return cls.PLUS

    @classmethod
    def default(cls) -> 'MageSort':
        return cls.CROSS


_SORT_CYCLE: Tuple[MageSort, ...] = tuple(MageSort)


class PowerUp(Enum):
    """
    Items lying on tiles, picked up by the mage stepping onto them.

    Values are the level-code indices.
    """
    SHIELD = 0    # Defensive mode, reflects attacks onto the attacker
    BEAM = 1      # Next attack hits the whole row and column
    DIAGONAL = 2  # Unlocks the four diagonal moves
    BOULDER = 3   # Obstacle occupying a tile

    def next(self) -> 'PowerUp':
        return _POWERUP_CYCLE[(_POWERUP_CYCLE.index(self) + 1) % len(_POWERUP_CYCLE)]

    def previous(self) -> 'PowerUp':
        return _POWERUP_CYCLE[(_POWERUP_CYCLE.index(self) - 1) % len(_POWERUP_CYCLE)]

    @classmethod
    def from_index(cls, index: int) -> 'PowerUp':
        """Unknown indices map to BOULDER."""
        for powerup in cls:
            if powerup.value == index:
                return powerup
        return cls.BOULDER


_POWERUP_CYCLE: Tuple[PowerUp, ...] = tuple(PowerUp)


def _pattern(*offsets: Tuple[int, int]) -> Tuple[Position, ...]:
    return tuple(Position(x, y) for x, y in offsets)


# Attack offsets for each sort, relative to the tile the mage moved to
SPELL_PATTERNS: Dict[MageSort, Tuple[Position, ...]] = {
    MageSort.DIAMOND: _pattern(
        (-2, 0), (-1, -1), (0, -2), (1, -1),
        (2, 0), (1, 1), (0, 2), (-1, 1),
    ),
    MageSort.CROSS: _pattern(
        (-2, -2), (-2, 2), (2, -2), (2, 2),
        (-1, -1), (-1, 1), (1, -1), (1, 1),
    ),
    MageSort.KNIGHT: _pattern(
        (-2, -1), (-1, -2), (1, 2), (2, 1),
        (1, -2), (2, -1), (-2, 1), (-1, 2),
    ),
    MageSort.SPIKE: _pattern(
        (-2, -2), (-2, 2), (2, -2), (2, 2),
        (-1, 0), (0, -1), (1, 0), (0, 1),
    ),
    MageSort.PLUS: _pattern(
        (-2, 0), (-1, 0), (1, 0), (2, 0),
        (0, -2), (0, -1), (0, 1), (0, 2),
    ),
}


@dataclass(frozen=True)
class Spell:
    """Ordered relative tiles attacked after a move."""
    pattern: Tuple[Position, ...]

    @classmethod
    def select(cls, sort: MageSort) -> 'Spell':
        return cls(SPELL_PATTERNS[sort])


class Mage:
    """
    Playable unit on the board.

    Attributes:
        index: Stable identifier assigned by the owning Level
        position: Tile the mage stands on
        sort: Selects the spell pattern
        mana: Health; a mage with no mana left is sleeping
        team: Owning side
        spell: Attack pattern derived from the sort
        powerup: Held power-up, if any

    Two mages are equal when their indices are equal.
    """

    __slots__ = ("index", "position", "sort", "mana", "team", "spell", "powerup")

    def __init__(self, index: int, team: Team, sort: MageSort, position: Position,
                 mana: Optional[Mana] = None, powerup: Optional[PowerUp] = None):
        self.index = index
        self.position = position
        self.sort = sort
        self.mana = mana if mana is not None else Mana.select(sort)
        self.team = team
        self.spell = Spell.select(sort)
        self.powerup = powerup

    @classmethod
    def default(cls) -> 'Mage':
        return cls(0, Team.default(), MageSort.default(), Position(0, 0))

    def copy(self) -> 'Mage':
        clone = Mage.__new__(Mage)
        clone.index = self.index
        clone.position = self.position
        clone.sort = self.sort
        clone.mana = self.mana
        clone.team = self.team
        clone.spell = self.spell
        clone.powerup = self.powerup
        return clone

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mage):
            return NotImplemented
        return self.index == other.index

    def __hash__(self) -> int:
        return hash(self.index)

    def __repr__(self) -> str:
        held = f" {self.powerup.name}" if self.powerup else ""
        return (f"Mage#{self.index}({self.team!r} {self.sort.name} "
                f"@{self.position!r} {self.mana!r}{held})")

    def state(self) -> tuple:
        """Everything except the index, for value comparisons."""
        return (self.position, self.sort, self.mana.current, self.mana.maximum,
                self.team, self.powerup)

    def is_alive(self) -> bool:
        """A sleeping mage has no mana left."""
        return self.mana.current > 0

    def has_diagonals(self) -> bool:
        return self.powerup == PowerUp.DIAGONAL

    def is_defensive(self) -> bool:
        return self.powerup == PowerUp.SHIELD

    def targets(self, board, at: Position) -> List[Position]:
        """Spell pattern translated to ``at``, limited to on-board tiles."""
        moves = []
        for offset in self.spell.pattern:
            position = board.validate_position(at + offset)
            if position is not None:
                moves.append(position)
        return moves

    def to_bytes(self) -> bytes:
        x, y = self.position
        return bytes([
            ((x & 0b111) << 5) | ((y & 0b111) << 2) | (self.team.value & 0b11),
            self.sort.value,
            self.mana.to_byte(),
        ])

    @classmethod
    def from_bytes(cls, value: Sequence[int]) -> 'Mage':
        """Decode three mage bytes; anything else yields the default mage."""
        if len(value) != 3:
            return cls.default()

        pos_team_byte, sort_byte, mana_byte = value
        position = Position((pos_team_byte >> 5) & 0b111, (pos_team_byte >> 2) & 0b111)
        team = Team.from_index(pos_team_byte & 0b11)

        return cls(0, team, MageSort.from_index(sort_byte), position,
                   mana=Mana.from_byte(mana_byte))


# Helpers over a list of mages

def occupant(mages: Iterable[Mage], position: Position) -> Optional[Mage]:
    """Mage standing on a tile, alive or sleeping."""
    for mage in mages:
        if mage.position == position:
            return mage
    return None


def occupied(mages: Iterable[Mage], position: Position) -> bool:
    return occupant(mages, position) is not None


def live_occupant(mages: Iterable[Mage], position: Position) -> Optional[Mage]:
    for mage in mages:
        if mage.position == position and mage.is_alive():
            return mage
    return None


def live_occupied(mages: Iterable[Mage], position: Position) -> bool:
    return live_occupant(mages, position) is not None


def live_occupied_by(mages: Iterable[Mage], position: Position, team: Team) -> bool:
    mage = live_occupant(mages, position)
    return mage is not None and mage.team == team
