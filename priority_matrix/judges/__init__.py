"""
Judge implementations.

Provides implementations of the Judge interface that decide tournament
match-ups.

Available implementations:
- InteractiveJudge: Asks a human on a text stream
- SimulatedJudge: Picks by hidden ground-truth scores with optional noise
"""

from .interactive_judge import InteractiveJudge
from .sim_judge import SimulatedJudge

__all__ = ["InteractiveJudge", "SimulatedJudge"]
