"""
Maginet - Turn-Based Tactics Engine
===================================

A Python implementation of the Maginet rules engine and its computer
opponent: two teams of mages step around a small board, casting fixed
spell patterns after every move until one side runs out of mana.

Key Features:
-------------
1. Deterministic rules engine: a level plus a turn list always
   reproduces the same game
2. Power-ups: shields that reflect attacks, row-and-column beams,
   diagonal movement and boulders
3. Alpha-beta and principal variation search with seeded tie-breaks
4. Compact Base32 level codes for sharing puzzles
5. Self-play simulation for balancing levels

Usage:
------
    from maginet import Game, Level

    level = Level.default()
    game = Game(level)

    leaf = game.best_turn(depth=3, seed=7)
    game.take_move(leaf.turn.from_pos, leaf.turn.to_pos)

    code = level.to_code()
    assert Level.from_code(code) == level
"""

__version__ = "0.1.0"

from maginet.core.game import Game, GameResult, Turn
from maginet.core.level import Level
from maginet.core.board import Board, BoardSizeError, BoardStyle
from maginet.core.pieces import Mage, MageSort, Mana, PowerUp, Spell
from maginet.core.position import Position, Team
from maginet.algorithms.search import SearchConfig, TurnLeaf

__all__ = [
    "Game",
    "GameResult",
    "Turn",
    "Level",
    "Board",
    "BoardSizeError",
    "BoardStyle",
    "Mage",
    "MageSort",
    "Mana",
    "PowerUp",
    "Spell",
    "Position",
    "Team",
    "SearchConfig",
    "TurnLeaf",
]
