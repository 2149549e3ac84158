"""
Deterministyczny generator liczb losowych (RNG).

Mecz musi być powtarzalny - ten sam seed i te same decyzje gracza
dają zawsze ten sam przebieg bitwy. To pozwala na:
- Replay/odtwarzanie meczów z logu zdarzeń
- Debugowanie balansu
- Testy jednostkowe AI przeciwnika

Jak używać:
    - Każdy mecz ma WŁASNĄ instancję GameRNG
    - NIE używaj globalnego random - jest współdzielony między meczami
    - Pod-systemy (np. losowanie pytań) dostają własny fork()

Przykład użycia:
    >>> rng = GameRNG(seed=12345)
    >>> rng.roll_chance(0.3)  # 30% szansy na słabą jednostkę
    False
    >>> rng.choice(["knight", "mage", "archer"])
    'mage'
"""

from __future__ import annotations
import random
from typing import TypeVar, Sequence

T = TypeVar('T')


class GameRNG:
    """
    Deterministyczny generator losowości dla meczu.

    Attributes:
        seed (int): Ziarno użyte do inicjalizacji
        _rng (random.Random): Wewnętrzny generator

    Example:
        >>> GameRNG(42).random() == GameRNG(42).random()
        True
    """

    def __init__(self, seed: int):
        """
        Tworzy nowy generator z podanym seedem.

        Args:
            seed: Ziarno losowości. Ten sam seed = te same wyniki.
        """
        self.seed = seed
        self._rng = random.Random(seed)

    # ─────────────────────────────────────────────────────────────────────────
    # PODSTAWOWE METODY
    # ─────────────────────────────────────────────────────────────────────────

    def random(self) -> float:
        """Zwraca losową liczbę z przedziału [0.0, 1.0)."""
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        """Zwraca losową liczbę całkowitą z przedziału [a, b] (włącznie)."""
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        """
        Wybiera losowy element z sekwencji (rozkład jednostajny).

        Raises:
            IndexError: Jeśli sekwencja jest pusta
        """
        return self._rng.choice(seq)

    # ─────────────────────────────────────────────────────────────────────────
    # METODY SPECYFICZNE DLA GRY
    # ─────────────────────────────────────────────────────────────────────────

    def roll_chance(self, chance: float) -> bool:
        """
        Rzuca kością na szansę (0.0 - 1.0).

        Args:
            chance: Szansa na sukces (0.0 = 0%, 1.0 = 100%)

        Returns:
            bool: True jeśli sukces
        """
        return self.random() < chance

    def fork(self) -> "GameRNG":
        """
        Tworzy nowy RNG z seedem bazowanym na aktualnym stanie.

        Losowanie pytań dostaje własny fork, więc liczba zadanych
        pytań nie przesuwa sekwencji decyzji AI przeciwnika.

        Returns:
            GameRNG: Nowy generator
        """
        new_seed = self.randint(0, 2**31 - 1)
        return GameRNG(new_seed)

    def __repr__(self) -> str:
        return f"GameRNG(seed={self.seed})"
