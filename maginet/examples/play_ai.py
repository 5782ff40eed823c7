#!/usr/bin/env python3
"""
Example: Computer vs Computer on a Shared Level
===============================================

This script demonstrates how to:
1. Build a level and share it as a level code
2. Let alpha-beta and PVS play against each other
3. Rewind a finished game
4. Simulate a batch of games to judge a level's balance

Usage:
    python maginet/examples/play_ai.py

Expected output: The level code, a move-by-move game and a balance report.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import logging

from maginet.core.board import Board
from maginet.core.game import Game
from maginet.core.level import Level, DEFAULT_LOADOUT
from maginet.core.pieces import PowerUp
from maginet.core.position import Position, Team
from maginet.analysis.simulation import SimulationReport, simulate


def build_level() -> Level:
    """Default loadout on a 6x6 board with a few power-ups in the middle."""
    board = Board(6, 6)
    mages = board.place_mages(Team.RED, DEFAULT_LOADOUT, 0)
    mages.extend(board.place_mages(Team.BLUE, DEFAULT_LOADOUT, len(mages)))

    powerups = {
        Position(0, 2): PowerUp.SHIELD,
        Position(5, 3): PowerUp.SHIELD,
        Position(2, 2): PowerUp.DIAGONAL,
        Position(3, 3): PowerUp.BEAM,
    }
    return Level(board, mages, powerups, Team.RED)


def play_sample_game(level: Level, seed: int = 0, max_turns: int = 40) -> Game:
    """Red plays alpha-beta at depth 3, Blue plays PVS."""
    print("\n" + "=" * 60)
    print("Sample Game")
    print("=" * 60)

    game = Game(level)
    print("\nInitial State:")
    print(game)

    while game.result() is None and game.turns() < max_turns:
        team = game.turn_for()
        if team == Team.RED:
            leaf = game.best_turn(3, seed + game.turns())
        else:
            leaf = game.best_turn_auto(seed + game.turns())

        hits = game.take_move(leaf.turn.from_pos, leaf.turn.to_pos)
        print(f"Turn {game.turns():2d}: {team!r} plays {leaf.turn!r} "
              f"(score {leaf.score:+d}, hits {hits})")

    print("\n" + "-" * 40)
    result = game.result()
    if result is not None:
        print(f"Game Over: {result.name}")
    else:
        print(f"Game truncated at {max_turns} turns")

    print("\nFinal State:")
    print(game)
    return game


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Maginet - Level Sharing")
    print("=" * 60)

    level = build_level()
    code = level.to_code()
    print(f"\nLevel code: {code}")
    print(f"Round trip: {Level.from_code(code) == level}")

    game = play_sample_game(Level.from_code(code))

    rewound = game.rewind(game.turns())
    print(f"\nRewound to start: {rewound.turns()} turns, "
          f"matches fresh game: {rewound == Game(level)}")

    print("\n" + "=" * 60)
    print("Balance")
    print("=" * 60)
    games = simulate(level, n=4, seed=1, depth=2, max_turns=30)
    print(SimulationReport.from_games(games).generate_report())


if __name__ == "__main__":
    main()
