"""
AI przeciwnika.

Bezstanowe i nieadaptacyjne: każdy deploy gracza wywołuje dokładnie
jeden spawn przeciwnika. Typ losowany jednostajnie z rejestru,
osłabienie (modyfikatory złej odpowiedzi) z niezależnym
prawdopodobieństwem weak_chance.

Wszystkie losowania idą przez GameRNG meczu, więc ten sam seed
i ta sama sekwencja deployów daje tych samych przeciwników.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from ..core.rng import GameRNG
from ..units.unit_type import UnitRegistry, UnitTypeConfig


# Szansa na słabą jednostkę przeciwnika
DEFAULT_WEAK_CHANCE = 0.3


@dataclass
class EnemySpawner:
    """
    Wybiera typ i wariant jednostki przeciwnika.

    Attributes:
        registry (UnitRegistry): Dostępne typy
        rng (GameRNG): Generator meczu
        weak_chance (float): Szansa na wariant osłabiony
    """
    registry: UnitRegistry
    rng: GameRNG
    weak_chance: float = DEFAULT_WEAK_CHANCE

    def pick(self) -> Tuple[UnitTypeConfig, bool]:
        """
        Losuje przeciwnika.

        Returns:
            Tuple: (typ jednostki, czy osłabiona)
        """
        unit_type = self.rng.choice(self.registry.all())
        is_weak = self.rng.roll_chance(self.weak_chance)
        return unit_type, is_weak
