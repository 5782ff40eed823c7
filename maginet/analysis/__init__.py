"""
Analysis tools for Maginet levels.

Provides:
- Self-play simulation of a level
- Outcome statistics and balance reports
"""

from .simulation import SimulationReport, simulate

__all__ = [
    "SimulationReport",
    "simulate",
]
