"""
Search algorithms for the Maginet computer opponent.

Available Searches:
- alphabeta: Minimax with alpha-beta pruning, fixed depth
- pvs: Principal variation search (negamax with null windows)
- best_turn / best_turn_auto: Seeded entry points used by Game
"""

from .search import (
    SearchConfig,
    TurnLeaf,
    alphabeta,
    pvs,
    best_turn,
    best_turn_auto,
    auto_depth,
    make_rng,
)

__all__ = [
    "SearchConfig",
    "TurnLeaf",
    "alphabeta",
    "pvs",
    "best_turn",
    "best_turn_auto",
    "auto_depth",
    "make_rng",
]
