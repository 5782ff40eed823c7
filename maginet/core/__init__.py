"""
Core game components for Maginet.
"""

from .position import Position, Team
from .pieces import (
    Mage, MageSort, Mana, PowerUp, Spell, SPELL_PATTERNS, DEFAULT_MANA,
    occupant, occupied, live_occupant, live_occupied, live_occupied_by,
)
from .board import Board, BoardSizeError, BoardStyle, DEFAULT_BOARD_SIZE, BOARD_LIMITS
from .level import Level, CROCKFORD_ALPHABET, DEFAULT_LOADOUT, base32_encode, base32_decode
from .game import Game, GameResult, Turn, DIRECTIONS, WIN_SCORE

__all__ = [
    "Position", "Team",
    "Mage", "MageSort", "Mana", "PowerUp", "Spell", "SPELL_PATTERNS", "DEFAULT_MANA",
    "occupant", "occupied", "live_occupant", "live_occupied", "live_occupied_by",
    "Board", "BoardSizeError", "BoardStyle", "DEFAULT_BOARD_SIZE", "BOARD_LIMITS",
    "Level", "CROCKFORD_ALPHABET", "DEFAULT_LOADOUT", "base32_encode", "base32_decode",
    "Game", "GameResult", "Turn", "DIRECTIONS", "WIN_SCORE",
]
