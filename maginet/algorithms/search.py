"""
Adversarial Search
==================

Selects moves for the computer opponent.

Algorithms:
- Alpha-beta: classical minimax with pruning, Red maximizing and Blue
  minimizing, over the evaluation from ``Game.evaluate``
- Principal variation search: negamax form, searching the first child
  with a full window and the rest with a null window, re-searching when
  a null-window probe lands inside (alpha, beta)

Determinism:
- Leaf scores get a small tie-break drawn from a numpy PCG64 stream
  seeded with the caller's 64-bit seed
- Children are expanded in move generation order, so the same game,
  depth and seed always yield the same turn and score
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.game import Game, Turn
from ..core.position import Team


# Machine-word bounds, as used by the root windows
VALUE_MIN = -(2 ** 63)
VALUE_MAX = 2 ** 63 - 1
# Root window, kept clear of the bounds so negation and null windows stay in range
WINDOW_MIN = VALUE_MIN + 0xff
WINDOW_MAX = VALUE_MAX - 0xff


@dataclass
class SearchConfig:
    """
    Search tunables.

    Attributes:
        base_depth: PVS depth chosen by ``best_turn_auto`` before adjustment
        alphabeta_noise: Leaf tie-break range for alpha-beta, [0, n)
        pvs_noise: Leaf tie-break range for PVS, [0, n)
    """
    base_depth: int = 4
    alphabeta_noise: int = 8
    pvs_noise: int = 4


DEFAULT_CONFIG = SearchConfig()


@dataclass(frozen=True)
class TurnLeaf:
    """A turn together with its search score."""
    turn: Turn
    score: int

    def __neg__(self) -> 'TurnLeaf':
        """Negates the score only."""
        return TurnLeaf(self.turn, -self.score)

    def __iter__(self):
        yield self.turn
        yield self.score


def make_rng(seed: int) -> np.random.Generator:
    """Reproducible stream for a 64-bit seed."""
    return np.random.Generator(np.random.PCG64(seed & 0xFFFF_FFFF_FFFF_FFFF))


def _noise(rng: np.random.Generator, bound: int) -> int:
    return int(rng.integers(0, bound))


def _child(game: Game, turn: Turn) -> Game:
    next_game = game.copy()
    next_game.take_move(turn.from_pos, turn.to_pos)
    return next_game


def alphabeta(game: Game, depth: int, alpha: int, beta: int,
              rng: np.random.Generator,
              config: SearchConfig = DEFAULT_CONFIG) -> TurnLeaf:
    """
    Minimax with alpha-beta pruning.

    Decided games are scored as leaves. The returned turn is the earliest
    child reaching the best value, defaulting to the first available turn.
    """
    if depth == 0 or game.result() is not None:
        return TurnLeaf(Turn.sentinel(), game.evaluate() + _noise(rng, config.alphabeta_noise))

    turns = game.available_turns()
    best_turn = turns[0] if turns else Turn.sentinel()

    if game.turn_for() == Team.RED:
        # Maximizing
        value = VALUE_MIN
        for turn in turns:
            next_value = alphabeta(_child(game, turn), depth - 1, alpha, beta, rng, config).score
            if next_value > value:
                value = next_value
                alpha = max(alpha, value)
                best_turn = turn
            if value >= beta:
                break
    else:
        # Minimizing
        value = VALUE_MAX
        for turn in turns:
            next_value = alphabeta(_child(game, turn), depth - 1, alpha, beta, rng, config).score
            if next_value < value:
                value = next_value
                beta = min(beta, value)
                best_turn = turn
            if value <= alpha:
                break

    return TurnLeaf(best_turn, value)


def pvs(game: Game, depth: int, alpha: int, beta: int,
        rng: np.random.Generator,
        config: SearchConfig = DEFAULT_CONFIG) -> TurnLeaf:
    """
    Principal variation search in negamax form.

    Scores are from the perspective of the side to move.
    """
    if depth == 0 or game.result() is not None:
        color = 1 if game.turn_for() == Team.RED else -1
        return TurnLeaf(Turn.sentinel(), color * game.evaluate() + _noise(rng, config.pvs_noise))

    turns = game.available_turns()
    best_turn = turns[0] if turns else Turn.sentinel()

    for i, turn in enumerate(turns):
        next_game = _child(game, turn)

        if i == 0:
            score = -pvs(next_game, depth - 1, -beta, -alpha, rng, config)
        else:
            # Null window probe, full re-search if it fails high inside the window
            score = -pvs(next_game, depth - 1, -alpha - 1, -alpha, rng, config)
            if alpha < score.score < beta:
                score = -pvs(next_game, depth - 1, -beta, -score.score, rng, config)

        if score.score > alpha:
            alpha = score.score
            best_turn = turn

        if alpha > beta:
            break

    return TurnLeaf(best_turn, alpha)


def best_turn(game: Game, depth: int, seed: int,
              config: SearchConfig = DEFAULT_CONFIG) -> Optional[TurnLeaf]:
    """Alpha-beta to a fixed depth. None once the game is decided."""
    if game.result() is not None:
        return None
    return alphabeta(game, depth, WINDOW_MIN, WINDOW_MAX, make_rng(seed), config)


def auto_depth(game: Game, config: SearchConfig = DEFAULT_CONFIG) -> int:
    """Search depth for ``best_turn_auto``, deepening as mages fall asleep."""
    alive_mages = sum(1 for mage in game.iter_mages() if mage.is_alive())
    return config.base_depth + max(0, 2 - alive_mages) // 3


def best_turn_auto(game: Game, seed: int,
                   config: SearchConfig = DEFAULT_CONFIG) -> Optional[TurnLeaf]:
    """PVS at ``auto_depth``. None once the game is decided."""
    if game.result() is not None:
        return None
    return pvs(game, auto_depth(game, config), WINDOW_MIN, WINDOW_MAX, make_rng(seed), config)
