"""
Ekonomia gracza: dochód, koszty, nagrody i kary za quiz.

Złoto gracza nigdy nie spada poniżej zera. Kolejność operacji
przy deployu:

    gold -= cost
    gold += correct_bonus                  (dobra odpowiedź)
    gold  = max(0, gold - wrong_penalty)   (zła odpowiedź)

Przykład:
    gold=200, cost=200, bonus=50  -> 0 + 50 = 50
    gold=220, cost=200, kara=30   -> max(0, 20 - 30) = 0
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .match_state import MatchState


@dataclass
class EconomyConfig:
    """
    Stałe ekonomii (sekcja `economy` w defaults.yaml).

    Attributes:
        start_gold (int): Złoto na start meczu
        gold_per_second (int): Pasywny dochód co sekundę
        correct_bonus (int): Nagroda za dobrą odpowiedź
        wrong_penalty (int): Kara za złą odpowiedź
    """
    start_gold: int = 400
    gold_per_second: int = 10
    correct_bonus: int = 50
    wrong_penalty: int = 10

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EconomyConfig":
        data = data or {}
        return cls(
            start_gold=int(data.get("start_gold", cls.start_gold)),
            gold_per_second=int(data.get("gold_per_second", cls.gold_per_second)),
            correct_bonus=int(data.get("correct_bonus", cls.correct_bonus)),
            wrong_penalty=int(data.get("wrong_penalty", cls.wrong_penalty)),
        )


class Economy:
    """Operacje na złocie w MatchState."""

    def __init__(self, config: Optional[EconomyConfig] = None):
        self.config = config or EconomyConfig()

    def accrue(self, state: MatchState) -> int:
        """Dodaje dochód pasywny. Zwraca przyrost."""
        state.player_gold += self.config.gold_per_second
        return self.config.gold_per_second

    def can_afford(self, state: MatchState, cost: int) -> bool:
        return state.player_gold >= cost

    def spend(self, state: MatchState, cost: int) -> bool:
        """
        Pobiera koszt jednostki.

        Returns:
            bool: False (bez zmian) jeśli złota nie wystarcza
        """
        if not self.can_afford(state, cost):
            return False
        state.player_gold -= cost
        return True

    def apply_quiz_outcome(self, state: MatchState, correct: bool) -> int:
        """
        Nagroda lub kara za odpowiedź.

        Returns:
            int: Faktyczna zmiana złota (ujemna przy karze)
        """
        before = state.player_gold
        if correct:
            state.player_gold += self.config.correct_bonus
        else:
            state.player_gold = max(0, state.player_gold - self.config.wrong_penalty)
        return state.player_gold - before
