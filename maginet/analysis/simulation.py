"""
Self-Play Simulation
====================

Plays AI-vs-AI games from a level and summarises the outcomes.

Used to sanity-check levels before sharing them: a level where one side
wins every simulated game, or where games mostly run into stalemate,
is probably not worth publishing.

Seeding:
- Turn i of game m searches with seed (seed + m + i), so every game in a
  batch follows its own reproducible line
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from ..core.game import Game, GameResult
from ..core.level import Level
from ..core.position import Team

logger = logging.getLogger(__name__)


def simulate(level: Level, n: int, seed: int, depth: int = 3,
             max_turns: int = 50, can_stalemate: bool = True) -> List[Game]:
    """
    Play ``n`` games of alpha-beta against itself.

    Args:
        level: Starting configuration shared by every game
        n: Number of games
        seed: Base seed for the search streams
        depth: Alpha-beta depth for both sides
        max_turns: Games still running after this many turns are left unfinished
        can_stalemate: Whether games may end in stalemate
    """
    games = []
    for m in range(n):
        game = Game(level, can_stalemate)
        for i in range(max_turns):
            leaf = game.best_turn(depth, seed + m + i)
            if leaf is None:
                break
            game.take_move(leaf.turn.from_pos, leaf.turn.to_pos)
            if game.result() is not None:
                break
        games.append(game)
    return games


@dataclass
class SimulationReport:
    """
    Outcome statistics over a batch of simulated games.

    Attributes:
        games: Number of games
        red_wins: Games won by Red
        blue_wins: Games won by Blue
        stalemates: Games ending level on mana
        unfinished: Games cut off at the turn limit
        mean_length: Mean number of turns played
        std_length: Standard deviation of turns played
        mean_mana_difference: Mean final red-minus-blue mana
    """
    games: int
    red_wins: int
    blue_wins: int
    stalemates: int
    unfinished: int
    mean_length: float
    std_length: float
    mean_mana_difference: float

    @classmethod
    def from_games(cls, games: List[Game]) -> 'SimulationReport':
        results = [game.result() for game in games]
        lengths = np.array([game.turns() for game in games], dtype=float)
        mana = np.array([game.mana_difference() for game in games], dtype=float)

        report = cls(
            games=len(games),
            red_wins=results.count(GameResult.RED_WIN),
            blue_wins=results.count(GameResult.BLUE_WIN),
            stalemates=results.count(GameResult.STALEMATE),
            unfinished=results.count(None),
            mean_length=float(np.mean(lengths)) if len(games) else 0.0,
            std_length=float(np.std(lengths)) if len(games) else 0.0,
            mean_mana_difference=float(np.mean(mana)) if len(games) else 0.0,
        )
        logger.info("Simulated %d games: %d red, %d blue, %d stalemate, %d unfinished",
                    report.games, report.red_wins, report.blue_wins,
                    report.stalemates, report.unfinished)
        return report

    def win_rate(self, team: Team) -> float:
        if self.games == 0:
            return 0.0
        wins = self.red_wins if team == Team.RED else self.blue_wins
        return wins / self.games

    def balance(self) -> float:
        """Red win rate minus Blue win rate, in [-1, 1]. Zero is balanced."""
        return self.win_rate(Team.RED) - self.win_rate(Team.BLUE)

    def generate_report(self) -> str:
        lines = [
            "Simulation Report",
            "=" * 40,
            f"Games:            {self.games}",
            f"Red wins:         {self.red_wins} ({self.win_rate(Team.RED):.0%})",
            f"Blue wins:        {self.blue_wins} ({self.win_rate(Team.BLUE):.0%})",
            f"Stalemates:       {self.stalemates}",
            f"Unfinished:       {self.unfinished}",
            f"Game length:      {self.mean_length:.1f} ± {self.std_length:.1f} turns",
            f"Mana difference:  {self.mean_mana_difference:+.2f}",
            f"Balance:          {self.balance():+.2f}",
        ]
        return "\n".join(lines)
