"""
Runtime module - napęd meczu w czasie rzeczywistym.

Zawiera:
- MatchRunner: Pętla asyncio wołająca Simulation.advance()
"""

from .runner import MatchRunner

__all__ = ["MatchRunner"]
