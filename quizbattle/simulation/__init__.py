"""
Simulation module - orkiestrator meczu.

Zawiera:
- Simulation: Pętla ticków, deploy, quiz, koniec meczu
- MatchConfig: Konfiguracja meczu z defaults.yaml
- MatchState / MatchSnapshot / MatchResult: Stan, migawki, wynik
- Economy: Złoto gracza
- EnemySpawner: AI przeciwnika
"""

from .simulation import Simulation, MatchConfig
from .match_state import MatchState, MatchSnapshot, MatchResult, Winner, EndReason
from .economy import Economy, EconomyConfig
from .enemy_ai import EnemySpawner

__all__ = [
    "Simulation", "MatchConfig",
    "MatchState", "MatchSnapshot", "MatchResult", "Winner", "EndReason",
    "Economy", "EconomyConfig",
    "EnemySpawner",
]
