"""
Core module - podstawowe komponenty silnika.

Zawiera:
- ConfigLoader: Wczytywanie konfiguracji YAML z defaults
- GameRNG: Deterministyczny generator losowości
- Scheduler: Wirtualny zegar z timerami okresowymi
- find_target: Wybór celu na torze
"""

from .config_loader import ConfigLoader
from .rng import GameRNG
from .scheduler import Scheduler, Timer
from .targeting import find_target, resolve_target, RANGE_SCALE

__all__ = [
    "ConfigLoader", "GameRNG", "Scheduler", "Timer",
    "find_target", "resolve_target", "RANGE_SCALE",
]
