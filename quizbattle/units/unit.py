"""
Unit - jednostka walcząca na torze.

Jednostka łączy:
- Referencję do typu (UnitTypeConfig) - tylko do odczytu
- Statystyki bojowe ustalone przy tworzeniu (HP, DPS, zasięg, prędkość)
- Pozycję na torze (jedna oś X)
- Cel (po ID, nie referencja!)
- Znacznik czasu ostatniego ataku

Cykl życia jednostki:
═══════════════════════════════════════════════════════════════════

    1. TWORZENIE
       - factory.create_unit() - HP/DPS przeskalowane przy złej odpowiedzi
       - Simulation.spawn_unit() - rejestracja w kolekcji, UNIT_SPAWN

    2. PĘTLA WALKI (per tick)
       - odświeżenie celu (tylko gdy brak/martwy/poza zasięgiem)
       - atak (cel w zasięgu) ALBO ruch (brak celu)

    3. KONIEC
       - HP <= 0 -> usunięcie na początku następnego ticka (UNIT_DESTROYED)
       - dotarcie do bazy wroga -> BASE_HIT, jednostka zużyta

Kierunek ruchu:
    Gracz idzie w prawo (+1), przeciwnik w lewo (-1).

Przykład użycia:
    >>> unit = create_unit(knight_cfg, x=200, team=Team.PLAYER, wrong_answer=False)
    >>> unit.is_alive()
    True
    >>> unit.direction
    1
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .unit_type import UnitTypeConfig


class Team(Enum):
    """Strona konfliktu."""

    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def direction(self) -> int:
        """Kierunek ruchu na torze: gracz +1, przeciwnik -1."""
        return 1 if self is Team.PLAYER else -1

    @property
    def opponent(self) -> "Team":
        return Team.ENEMY if self is Team.PLAYER else Team.PLAYER

    def __str__(self) -> str:
        return self.value


@dataclass
class Unit:
    """
    Reprezentuje jednostkę na torze.

    Attributes:
        id (str): Unikalny identyfikator
        unit_type (UnitTypeConfig): Typ jednostki
        team (Team): Strona
        x (float): Pozycja na torze
        max_health (int): Maksymalne HP (ustalone przy tworzeniu)
        current_health (int): Aktualne HP, zawsze w [0, max_health]
        dps (int): Obrażenia jednego ataku (atak co 1s)
        range (int): Zasięg w jednostkach toru
        speed (float): Piksele toru na sekundę
        is_weak (bool): Czy stworzona z modyfikatorami złej odpowiedzi

        target_id (Optional[str]): ID celu w kolekcji żywych jednostek
        last_attack_ms (Optional[float]): Czas ostatniego ataku (None = nigdy)
        consumed (bool): Jednostka uderzyła w bazę i znika z toru

    Note:
        Cel jest trzymany jako ID - jednostka nie "posiada" swojego celu
        i nie utrzymuje go przy życiu. Symulacja rozwiązuje ID co tick.
    """

    id: str
    unit_type: UnitTypeConfig = field(repr=False)
    team: Team
    x: float
    max_health: int
    current_health: int
    dps: int
    range: int = 1
    speed: float = 0.0
    is_weak: bool = False

    target_id: Optional[str] = field(default=None, repr=False)
    last_attack_ms: Optional[float] = field(default=None, repr=False)
    consumed: bool = field(default=False, repr=False)

    # ─────────────────────────────────────────────────────────────────────────
    # STAN I ŻYCIE
    # ─────────────────────────────────────────────────────────────────────────

    def is_alive(self) -> bool:
        """Żywa = HP > 0 i nie zużyta na bazie."""
        return self.current_health > 0 and not self.consumed

    def is_dead(self) -> bool:
        return self.current_health <= 0

    def take_damage(self, amount: float) -> int:
        """
        Odejmuje HP z klampem do zera.

        Args:
            amount: Obrażenia (ujemne traktowane jako 0)

        Returns:
            int: Faktycznie odjęte HP
        """
        before = self.current_health
        self.current_health = int(max(0, self.current_health - max(0, amount)))
        return before - self.current_health

    def clear_target(self) -> None:
        self.target_id = None

    # ─────────────────────────────────────────────────────────────────────────
    # POZYCJA
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def direction(self) -> int:
        return self.team.direction

    @property
    def unit_type_id(self) -> str:
        return self.unit_type.id

    def distance_to(self, other: "Unit") -> float:
        """Odległość na torze (tylko oś X)."""
        return abs(self.x - other.x)

    def reach(self, range_scale: float) -> float:
        """Zasięg ataku w pikselach toru."""
        return self.range * range_scale

    def in_attack_range(self, other: "Unit", range_scale: float) -> bool:
        return self.distance_to(other) <= self.reach(range_scale)

    def is_enemy(self, other: "Unit") -> bool:
        return self.team != other.team

    # ─────────────────────────────────────────────────────────────────────────
    # SERIALIZACJA
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """Pełny stan jednostki (dla API i logu końcowego)."""
        return {
            "id": self.id,
            "unit_type": self.unit_type.id,
            "team": self.team.value,
            "x": round(self.x, 2),
            "hp": self.current_health,
            "max_hp": self.max_health,
            "dps": self.dps,
            "range": self.range,
            "speed": self.speed,
            "is_weak": self.is_weak,
            "target_id": self.target_id,
        }

    def to_snapshot(self) -> Dict[str, Any]:
        """Minimalny snapshot (dla logu zdarzeń UNIT_SPAWN)."""
        return {
            "id": self.id,
            "unit_type": self.unit_type.id,
            "team": self.team.value,
            "x": round(self.x, 2),
            "hp": self.current_health,
            "dps": self.dps,
            "is_weak": self.is_weak,
        }
