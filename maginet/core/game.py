"""
Game Module: Turns, Rules and Results
=====================================

Implements the authoritative rules engine for Maginet.

Game Flow:
1. Teams alternate turns, starting with the level's starting team
2. Each turn: one live mage steps to a free neighbouring tile
3. Stepping onto a power-up picks it up
4. The mage then casts its spell from the destination tile
5. The game ends when the side to move has no moves, or after a long
   run of turns without damage (stalemate), and is decided on mana

A game is a pure function of its level and its turn history: replaying
the same turns from the same level reaches the same state.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterator, List, Optional, Tuple

from .board import Board, BoardSizeError
from .level import Level
from .pieces import (
    Mage, PowerUp, live_occupant, live_occupied, live_occupied_by, occupant, occupied,
)
from .position import Position, Team

if TYPE_CHECKING:
    from ..algorithms.search import TurnLeaf

logger = logging.getLogger(__name__)


# Turns without damage tolerated past the opening grace period
STALEMATE_GAP = 8
# Opening grace period, in turns per mage on the board
STALEMATE_GRACE_PER_MAGE = 3
WIN_SCORE = 99999

_POWERUP_SYMBOLS: Dict[PowerUp, str] = {
    PowerUp.SHIELD: "s",
    PowerUp.BEAM: "+",
    PowerUp.DIAGONAL: "x",
    PowerUp.BOULDER: "o",
}

# Unit steps in generation order: N, W, E, S, then the diagonals
DIRECTIONS: Tuple[Tuple[Position, bool], ...] = (
    (Position(0, -1), False),
    (Position(-1, 0), False),
    (Position(1, 0), False),
    (Position(0, 1), False),
    (Position(-1, -1), True),
    (Position(-1, 1), True),
    (Position(1, -1), True),
    (Position(1, 1), True),
)


@dataclass(frozen=True)
class Turn:
    """A mage moving from one tile to another."""
    from_pos: Position
    to_pos: Position

    @classmethod
    def sentinel(cls) -> 'Turn':
        """Placeholder returned by search where no move applies. Never legal."""
        return cls(Position(0, 0), Position(0, 0))

    def is_sentinel(self) -> bool:
        return self.from_pos == self.to_pos

    def __iter__(self) -> Iterator[Position]:
        yield self.from_pos
        yield self.to_pos

    def __repr__(self) -> str:
        return f"{self.from_pos!r}->{self.to_pos!r}"


class GameResult(Enum):
    """Possible game outcomes."""
    RED_WIN = auto()
    BLUE_WIN = auto()
    STALEMATE = auto()

    @classmethod
    def win(cls, team: Team) -> 'GameResult':
        return cls.RED_WIN if team == Team.RED else cls.BLUE_WIN

    @property
    def winner(self) -> Optional[Team]:
        if self == GameResult.RED_WIN:
            return Team.RED
        if self == GameResult.BLUE_WIN:
            return Team.BLUE
        return None


class Game:
    """
    Deterministically replicable game state.

    The game keeps an untouched copy of its level for rewinding, a working
    copy that moves mutate, and the turn history. Available turns and
    shielded tiles are regenerated after every accepted move.

    Raises:
        BoardSizeError: if the level's board is outside the size limits
    """

    def __init__(self, level: Level, can_stalemate: bool = True):
        board = level.board
        if not board.is_valid():
            raise BoardSizeError(board.width, board.height)

        self._level_prototype = level.copy()
        self.level = level.copy()
        self._turns: List[Turn] = []
        self._last_nominal = 0
        self._can_stalemate = can_stalemate

        self._available_turns: Tuple[Turn, ...] = self._generate_available_turns()
        self._shielded_positions: FrozenSet[Tuple[Position, Team]] = \
            self._generate_shielded_positions()

    def copy(self) -> 'Game':
        """Copy the game; the prototype level is shared."""
        clone = Game.__new__(Game)
        clone._level_prototype = self._level_prototype
        clone.level = self.level.copy()
        clone._turns = list(self._turns)
        clone._last_nominal = self._last_nominal
        clone._can_stalemate = self._can_stalemate
        clone._available_turns = self._available_turns
        clone._shielded_positions = self._shielded_positions
        return clone

    def _key(self) -> tuple:
        return (
            self.level._key(),
            tuple(self._turns),
            self._last_nominal,
            self._can_stalemate,
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Game):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None

    # State predicates

    def can_stalemate(self) -> bool:
        return self._can_stalemate

    def stalemate(self) -> Tuple[bool, int]:
        """
        Whether the game is stalemated, and the current damage-free gap.

        The gap counts turns since the last damaging turn, after an opening
        grace period of three turns per mage.
        """
        if not self._can_stalemate:
            return False, 0

        grace = len(self.level.mages) * STALEMATE_GRACE_PER_MAGE
        gap = max(0, self.turns() - max(self._last_nominal, grace))
        return gap > STALEMATE_GAP, gap

    def mana_difference(self) -> int:
        """Total red mana minus total blue mana."""
        return sum(
            mage.mana.current if mage.team == Team.RED else -mage.mana.current
            for mage in self.level.mages
        )

    def result(self) -> Optional[GameResult]:
        """The outcome, or None while the game is ongoing."""
        if self._available_turns and not self.stalemate()[0]:
            return None

        mana_diff = self.mana_difference()
        if mana_diff > 0:
            return GameResult.RED_WIN
        if mana_diff < 0:
            return GameResult.BLUE_WIN
        return GameResult.STALEMATE

    def is_terminal(self) -> bool:
        return self.result() is not None

    def turns(self) -> int:
        """Number of turns taken so far."""
        return len(self._turns)

    def turns_since(self, since: int) -> List[Turn]:
        """Turns after skipping the first ``since``."""
        return self._turns[since:]

    def last_turn(self) -> Optional[Turn]:
        return self._turns[-1] if self._turns else None

    def turn_for(self) -> Team:
        """The team making the next move."""
        if len(self._turns) % 2 == 0:
            return self.level.starting_team
        return self.level.starting_team.enemy()

    def starting_team(self) -> Team:
        return self.level.starting_team

    # Accessors

    def iter_mages(self) -> Iterator[Mage]:
        return iter(self.level.mages)

    def get_mage(self, index: int) -> Optional[Mage]:
        if 0 <= index < len(self.level.mages):
            return self.level.mages[index]
        return None

    def powerups(self) -> Dict[Position, PowerUp]:
        return self.level.powerups

    def shielded_positions(self) -> FrozenSet[Tuple[Position, Team]]:
        return self._shielded_positions

    def board(self) -> Board:
        return self.level.board

    def board_size(self) -> Tuple[int, int]:
        return self.level.board.width, self.level.board.height

    def location_as_position(self, location: Tuple[int, int], offset: Tuple[int, int],
                             scale: Tuple[int, int]) -> Optional[Position]:
        return self.level.board.location_as_position(location, offset, scale)

    def occupant(self, position: Position) -> Optional[Mage]:
        return occupant(self.level.mages, position)

    def occupied(self, position: Position) -> bool:
        return occupied(self.level.mages, position)

    def live_occupant(self, position: Position) -> Optional[Mage]:
        return live_occupant(self.level.mages, position)

    def live_occupied(self, position: Position) -> bool:
        return live_occupied(self.level.mages, position)

    def live_occupied_by(self, position: Position, team: Team) -> bool:
        return live_occupied_by(self.level.mages, position, team)

    # Move generation

    def available_moves(self, mage: Mage) -> List[Tuple[Position, Position, bool]]:
        """
        Tiles a mage can step to, as (destination, direction, is_diagonal).

        A destination must be on the board, free of any mage (sleeping
        mages still block) and free of boulders. Diagonals need the
        Diagonal power-up.
        """
        board = self.level.board
        taken = {other.position for other in self.level.mages}
        powerups = self.level.powerups
        diagonals = mage.has_diagonals()

        moves = []
        for direction, diagonal in DIRECTIONS:
            if diagonal and not diagonals:
                continue
            position = board.validate_position(mage.position + direction)
            if position is None or position in taken:
                continue
            if powerups.get(position) == PowerUp.BOULDER:
                continue
            moves.append((position, direction, diagonal))
        return moves

    def available_turns(self) -> Tuple[Turn, ...]:
        return self._available_turns

    def _generate_available_turns(self) -> Tuple[Turn, ...]:
        team = self.turn_for()
        turns = []
        for mage in self.level.mages:
            if mage.is_alive() and mage.team == team:
                for to, _, _ in self.available_moves(mage):
                    turns.append(Turn(mage.position, to))
        return tuple(turns)

    def _generate_shielded_positions(self) -> FrozenSet[Tuple[Position, Team]]:
        board = self.level.board
        return frozenset(
            (target, mage.team)
            for mage in self.level.mages
            if mage.is_alive() and mage.powerup == PowerUp.SHIELD
            for target in mage.targets(board, mage.position)
        )

    # Move execution

    def _movable_mage(self, from_pos: Position, to_pos: Position) -> Optional[Mage]:
        if self.result() is not None:
            return None

        mage = self.live_occupant(from_pos)
        if mage is None or mage.team != self.turn_for():
            return None

        if all(position != to_pos for position, _, _ in self.available_moves(mage)):
            return None
        return mage

    def try_move(self, from_pos: Position, to_pos: Position) -> bool:
        """Check a move without taking it."""
        return self._movable_mage(from_pos, to_pos) is not None

    def take_move(self, from_pos: Position, to_pos: Position) -> Optional[List[Position]]:
        """
        Execute a turn, returning the tiles that were hit.

        Returns None, leaving the game untouched, if the move is illegal.
        """
        mage = self._movable_mage(from_pos, to_pos)
        if mage is None:
            logger.debug("Rejected move %r->%r on turn %d", from_pos, to_pos, self.turns())
            return None

        mage.position = to_pos
        powerup = self.level.powerups.pop(to_pos, None)
        if powerup is not None:
            mage.powerup = powerup

        hits = self._attack(mage, to_pos)
        if hits:
            self._last_nominal = self.turns()

        self._turns.append(Turn(from_pos, to_pos))

        self._available_turns = self._generate_available_turns()
        self._shielded_positions = self._generate_shielded_positions()

        return hits

    def targets(self, mage: Mage, at: Position) -> List[Tuple[bool, Position]]:
        """
        Tiles attacked by ``mage`` acting from ``at``, each flagged with
        whether it is hit.

        Also serves as a preview before a move: a Beam lying on ``at``
        already widens the attack to the full row and column.
        """
        enemy = mage.team.enemy()
        mages = self.level.mages

        if self.level.powerups.get(at) == PowerUp.BEAM or mage.powerup == PowerUp.BEAM:
            width, height = self.board_size()
            line = [Position(x, at.y) for x in range(width)]
            line.extend(Position(at.x, y) for y in range(height))
            attack_targets = [
                (live_occupied_by(mages, position, enemy) and position != mage.position,
                 position)
                for position in line
            ]
        else:
            defensive = mage.is_defensive()
            attack_targets = [
                (not defensive and live_occupied_by(mages, position, enemy), position)
                for position in mage.targets(self.level.board, at)
            ]

        # Stepping into an enemy shield ring reflects a hit onto the attacker
        if (at, enemy) in self._shielded_positions:
            attack_targets.append((True, at))

        return attack_targets

    def _attack(self, mage: Mage, at: Position) -> List[Position]:
        hits = []
        for is_hit, tile in self.targets(mage, at):
            if not is_hit:
                continue
            target = self.live_occupant(tile)
            if target is None:
                continue
            target.mana = target.mana - 1
            hits.append(tile)

        if mage.powerup == PowerUp.BEAM:
            mage.powerup = None

        return hits

    def rewind(self, delta: int) -> 'Game':
        """Replay the game from its level, leaving out the last ``delta`` turns."""
        rewound = Game(self._level_prototype, self._can_stalemate)
        for turn in self._turns[:max(0, self.turns() - delta)]:
            rewound.take_move(turn.from_pos, turn.to_pos)
        return rewound

    # Evaluation and search

    def evaluate(self) -> int:
        """
        Heuristic evaluation, positive in favour of Red.

        Decided games score +/-99999 (0 for a stalemate). Otherwise mana
        difference dominates quadratically, and live mages are rewarded
        for keeping away from the center, measured in Manhattan length.
        """
        result = self.result()
        if result is not None:
            if result == GameResult.RED_WIN:
                return WIN_SCORE
            if result == GameResult.BLUE_WIN:
                return -WIN_SCORE
            return 0

        width, height = self.board_size()
        corner = Position(width - 1, height - 1)

        pos_adv = 0
        for mage in self.level.mages:
            if not mage.is_alive():
                continue
            centre_dist = (Position(mage.position.x * 2, mage.position.y * 2) - corner).length()
            pos_adv += -centre_dist if mage.team == Team.RED else centre_dist

        mana_diff = self.mana_difference()
        sign = (mana_diff > 0) - (mana_diff < 0)
        return mana_diff * mana_diff * sign * 20 + pos_adv * 5

    def best_turn(self, depth: int, seed: int) -> Optional['TurnLeaf']:
        """Alpha-beta search to ``depth``; None once the game is decided."""
        from ..algorithms.search import best_turn
        return best_turn(self, depth, seed)

    def best_turn_auto(self, seed: int) -> Optional['TurnLeaf']:
        """Principal variation search at a depth chosen from the live mages."""
        from ..algorithms.search import best_turn_auto
        return best_turn_auto(self, seed)

    # Replay form

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self._level_prototype.to_code(),
            "turns": [[t.from_pos.x, t.from_pos.y, t.to_pos.x, t.to_pos.y] for t in self._turns],
            "can_stalemate": self._can_stalemate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Game':
        """
        Rebuild a game by replaying its turn list.

        Replay stops at the first turn the engine rejects.
        """
        game = cls(Level.from_code(data.get("level", "")), bool(data.get("can_stalemate", True)))
        for fx, fy, tx, ty in data.get("turns", []):
            if game.take_move(Position(fx, fy), Position(tx, ty)) is None:
                logger.debug("Replay stopped at turn %d", game.turns())
                break
        return game

    def __repr__(self) -> str:
        """ASCII board: R/B for live mages, r/b sleeping, symbols for power-ups."""
        width, height = self.board_size()
        lines = ["  " + " ".join(str(x) for x in range(width))]
        for y in range(height):
            cells = []
            for x in range(width):
                position = Position(x, y)
                mage = self.occupant(position)
                if mage is not None:
                    symbol = "R" if mage.team == Team.RED else "B"
                    cells.append(symbol if mage.is_alive() else symbol.lower())
                elif position in self.level.powerups:
                    cells.append(_POWERUP_SYMBOLS[self.level.powerups[position]])
                else:
                    cells.append("·")
            lines.append(f"{y} " + " ".join(cells))
        lines.append(f"Turn {self.turns()}: {self.turn_for()!r} to move")
        return "\n".join(lines)
