"""
Level Module
============

The initial configuration of a game and its compact level code.

Byte Layout:
- Board byte: (w-1) << 5 | (h-1) << 2 | starting team
- Mage count N, then three bytes per mage:
  x << 5 | y << 2 | team, sort, current mana << 4 | max mana
- Power-up count P, then two bytes per power-up: x << 5 | y << 2, kind

The bytes are then written in Base32 using the Crockford alphabet
(lowercase, no padding). Decoding never raises: malformed input yields
the default level.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

import numpy as np

from .board import Board, BoardSizeError, BoardStyle, DEFAULT_BOARD_SIZE
from .pieces import Mage, MageSort, Mana, PowerUp
from .position import Position, Team

logger = logging.getLogger(__name__)


CROCKFORD_ALPHABET = "0123456789abcdefghjkmnpqrstvwxyz"
_RFC4648_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"

_TO_CROCKFORD = str.maketrans(_RFC4648_ALPHABET, CROCKFORD_ALPHABET)
_FROM_CROCKFORD = str.maketrans(CROCKFORD_ALPHABET, _RFC4648_ALPHABET)

DEFAULT_LOADOUT: List[MageSort] = [
    MageSort.DIAMOND,
    MageSort.SPIKE,
    MageSort.KNIGHT,
    MageSort.CROSS,
]


class MalformedLevelError(ValueError):
    """Internal signal for undecodable level data."""


def base32_encode(data: bytes) -> str:
    """Encode bytes with the Crockford alphabet, without padding."""
    return base64.b32encode(data).decode("ascii").rstrip("=").translate(_TO_CROCKFORD)


def base32_decode(code: str) -> bytes:
    """
    Decode a Crockford Base32 string.

    Raises:
        MalformedLevelError: on foreign symbols, impossible lengths or
            non-zero trailing bits
    """
    code = code.strip().lower()
    if any(symbol not in CROCKFORD_ALPHABET for symbol in code):
        raise MalformedLevelError("symbol outside the base32 alphabet")

    padded = code.translate(_FROM_CROCKFORD)
    padded += "=" * (-len(padded) % 8)
    try:
        data = base64.b32decode(padded)
    except binascii.Error as exc:
        raise MalformedLevelError(str(exc)) from exc

    # Only the canonical spelling of the bytes is accepted
    if base32_encode(data) != code:
        raise MalformedLevelError("non-canonical base32 code")
    return data


class Level:
    """
    Prototype of a game: board, mages, power-ups and who moves first.

    Mage indices are rewritten to their list position on construction and
    on every copy, so ``mages[i].index == i`` always holds.

    Attributes:
        board: The playing field
        mages: Mages in index order
        mage_index: Number of mages at construction
        powerups: Power-ups keyed by tile
        starting_team: Team making the first move
    """

    def __init__(self, board: Board, mages: List[Mage],
                 powerups: Optional[Dict[Position, PowerUp]] = None,
                 starting_team: Team = Team.RED):
        self.board = board
        self.mages = [mage.copy() for mage in mages]
        for index, mage in enumerate(self.mages):
            mage.index = index
        self.mage_index = len(self.mages)
        self.powerups: Dict[Position, PowerUp] = dict(powerups or {})
        self.starting_team = starting_team

    @classmethod
    def default(cls) -> 'Level':
        """A 6x6 board with the standard loadout on both sides, Red first."""
        board = Board(*DEFAULT_BOARD_SIZE)
        return cls.default_with_mages(_standard_placement(board, DEFAULT_LOADOUT, DEFAULT_LOADOUT))

    @classmethod
    def default_with_mages(cls, mages: List[Mage]) -> 'Level':
        return cls(Board(*DEFAULT_BOARD_SIZE), mages, {}, Team.default())

    @classmethod
    def random(cls, seed: int, symmetric: bool = True) -> 'Level':
        """
        Default board with four randomly drawn sorts per team.

        Sorts are drawn from the first four kinds (no Plus), matching the
        lobby's random loadout.
        """
        rng = np.random.Generator(np.random.PCG64(seed))

        def loadout() -> List[MageSort]:
            return [MageSort.from_index(int(rng.integers(0, 4))) for _ in range(4)]

        red = loadout()
        blue = list(red) if symmetric else loadout()
        board = Board(*DEFAULT_BOARD_SIZE)
        return cls.default_with_mages(_standard_placement(board, red, blue))

    def copy(self) -> 'Level':
        clone = Level.__new__(Level)
        clone.board = self.board
        clone.mages = [mage.copy() for mage in self.mages]
        for index, mage in enumerate(clone.mages):
            mage.index = index
        clone.mage_index = self.mage_index
        clone.powerups = dict(self.powerups)
        clone.starting_team = self.starting_team
        return clone

    def _key(self) -> tuple:
        return (
            self.board.width,
            self.board.height,
            self.starting_team,
            tuple(mage.state() for mage in self.mages),
            tuple(sorted(self.powerups.items(), key=lambda item: item[0])),
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None

    def __repr__(self) -> str:
        return (f"Level({self.board!r}, mages={self.mages}, "
                f"powerups={self.powerups}, starting_team={self.starting_team!r})")

    # Byte codec

    def to_bytes(self) -> bytes:
        result = bytearray()
        result.append(
            (((self.board.width - 1) & 0b111) << 5)
            | (((self.board.height - 1) & 0b111) << 2)
            | (self.starting_team.value & 0b11)
        )

        result.append(len(self.mages))
        for mage in self.mages:
            result.extend(mage.to_bytes())

        # Sorted by tile so equal levels always produce equal codes
        result.append(len(self.powerups))
        for position in sorted(self.powerups):
            x, y = position
            result.append(((x & 0b111) << 5) | ((y & 0b111) << 2))
            result.append(self.powerups[position].value)

        return bytes(result)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Level':
        """Decode a level; malformed data yields the default level."""
        try:
            return cls._decode(bytes(data))
        except (MalformedLevelError, BoardSizeError, IndexError) as exc:
            logger.debug("Falling back to the default level: %s", exc)
            return cls.default()

    @classmethod
    def _decode(cls, data: bytes) -> 'Level':
        if len(data) < 3:
            raise MalformedLevelError("level data too short")

        board_byte = data[0]
        board = Board(((board_byte >> 5) & 0b111) + 1, ((board_byte >> 2) & 0b111) + 1)
        starting_team = Team.from_index(board_byte & 0b11)

        num_mages = data[1]
        mage_end = 2 + num_mages * 3
        mages = [Mage.from_bytes(data[i:i + 3]) for i in range(2, mage_end, 3)]

        num_powerups = data[mage_end]
        powerup_end = mage_end + 1 + num_powerups * 2
        if len(data) != powerup_end:
            raise MalformedLevelError(
                f"expected {powerup_end} bytes, got {len(data)}")

        powerups: Dict[Position, PowerUp] = {}
        for i in range(mage_end + 1, powerup_end, 2):
            position = Position((data[i] >> 5) & 0b111, (data[i] >> 2) & 0b111)
            if position in powerups:
                raise MalformedLevelError(f"two power-ups on {position!r}")
            powerups[position] = PowerUp.from_index(data[i + 1])

        level = cls(board, mages, powerups, starting_team)
        level._check_placement()
        return level

    def _check_placement(self) -> None:
        """One mage per tile, mana within maximum, nothing off the board or under a mage."""
        seen = set()
        for mage in self.mages:
            if self.board.validate_position(mage.position) is None:
                raise MalformedLevelError(f"mage off the board at {mage.position!r}")
            if mage.position in seen:
                raise MalformedLevelError(f"two mages on {mage.position!r}")
            if mage.mana.current > mage.mana.maximum:
                raise MalformedLevelError(f"mana {mage.mana!r} above maximum")
            seen.add(mage.position)

        for position in self.powerups:
            if self.board.validate_position(position) is None:
                raise MalformedLevelError(f"power-up off the board at {position!r}")
            if position in seen:
                raise MalformedLevelError(f"power-up under a mage at {position!r}")

    # Level codes

    def to_code(self) -> str:
        return base32_encode(self.to_bytes())

    @classmethod
    def from_code(cls, code: str) -> 'Level':
        """Decode a level code; malformed codes yield the default level."""
        try:
            data = base32_decode(code)
        except MalformedLevelError as exc:
            logger.debug("Rejected level code %r: %s", code, exc)
            return cls.default()
        return cls.from_bytes(data)

    # Plain data form, keeping style and held power-ups

    def to_dict(self) -> Dict[str, Any]:
        return {
            "board": {
                "width": self.board.width,
                "height": self.board.height,
                "style": self.board.style.value,
            },
            "mages": [
                {
                    "position": [mage.position.x, mage.position.y],
                    "team": mage.team.name.lower(),
                    "sort": mage.sort.name.lower(),
                    "mana": [mage.mana.current, mage.mana.maximum],
                    "powerup": mage.powerup.name.lower() if mage.powerup else None,
                }
                for mage in self.mages
            ],
            "powerups": [
                {"position": [position.x, position.y], "powerup": powerup.name.lower()}
                for position, powerup in sorted(self.powerups.items(), key=lambda item: item[0])
            ],
            "starting_team": self.starting_team.name.lower(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Level':
        """Inverse of ``to_dict``; malformed data yields the default level."""
        try:
            board_data = data["board"]
            board = Board(int(board_data["width"]), int(board_data["height"]),
                          BoardStyle(board_data.get("style", BoardStyle.GRASS.value)))

            mages = []
            for entry in data["mages"]:
                powerup = entry.get("powerup")
                mages.append(Mage(
                    0,
                    Team[entry["team"].upper()],
                    MageSort[entry["sort"].upper()],
                    Position(*entry["position"]),
                    mana=Mana(*entry["mana"]),
                    powerup=PowerUp[powerup.upper()] if powerup else None,
                ))

            powerups: Dict[Position, PowerUp] = {}
            for entry in data.get("powerups", []):
                position = Position(*entry["position"])
                if position in powerups:
                    raise MalformedLevelError(f"two power-ups on {position!r}")
                powerups[position] = PowerUp[entry["powerup"].upper()]

            level = cls(board, mages, powerups,
                        Team[data.get("starting_team", "red").upper()])
            level._check_placement()
            return level
        except (MalformedLevelError, KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.debug("Falling back to the default level: %s", exc)
            return cls.default()


def _standard_placement(board: Board, red_sorts: List[MageSort],
                        blue_sorts: List[MageSort]) -> List[Mage]:
    mages = board.place_mages(Team.RED, red_sorts, 0)
    mages.extend(board.place_mages(Team.BLUE, blue_sorts, len(mages)))
    return mages
