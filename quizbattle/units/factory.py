"""
Fabryka jednostek.

create_unit() przelicza statystyki typu na konkretną instancję:

    max_health = floor(base_health × (wrong_mod.hp  jeśli zła odpowiedź, inaczej 1))
    dps        = floor(base_dps    × (wrong_mod.dps jeśli zła odpowiedź, inaczej 1))
    range      = type.range lub 1 (walka wręcz)

Przykład (Math Knight, zła odpowiedź):
    base_health = 120, wrong_mod.hp = 0.67
    max_health  = floor(120 × 0.67) = floor(80.4) = 80

Modyfikatory są aplikowane tylko tutaj. Jednostka nigdy nie jest
przeliczana ponownie - max_health zostaje 80 do końca życia.

Rejestracja w kolekcji i zdarzenie UNIT_SPAWN należą do
Simulation.spawn_unit() - fabryka nie zna symulacji.
"""

from __future__ import annotations
import uuid
import math
from typing import Optional

from .unit import Team, Unit
from .unit_type import UnitTypeConfig


def scaled_stat(base: float, factor: float) -> int:
    """Skaluje statystykę i zaokrągla w dół."""
    return int(math.floor(base * factor))


def create_unit(
    type_config: UnitTypeConfig,
    x: float,
    team: Team,
    wrong_answer: bool = False,
    unit_id: Optional[str] = None,
) -> Unit:
    """
    Tworzy jednostkę z konfiguracji typu.

    Args:
        type_config: Typ jednostki z UnitRegistry
        x: Pozycja startowa na torze
        team: Strona (gracz/przeciwnik)
        wrong_answer: Czy zastosować modyfikatory złej odpowiedzi
        unit_id: Opcjonalne ID (generowane jeśli brak)

    Returns:
        Unit: Nowa jednostka z pełnym HP
    """
    hp_factor = type_config.wrong_mod.hp if wrong_answer else 1.0
    dps_factor = type_config.wrong_mod.dps if wrong_answer else 1.0

    max_health = scaled_stat(type_config.base_health, hp_factor)

    if unit_id is None:
        unit_id = f"{type_config.id}_{team.value}_{uuid.uuid4().hex[:6]}"

    return Unit(
        id=unit_id,
        unit_type=type_config,
        team=team,
        x=float(x),
        max_health=max_health,
        current_health=max_health,
        dps=scaled_stat(type_config.base_dps, dps_factor),
        range=type_config.effective_range,
        speed=type_config.speed,
        is_weak=wrong_answer,
    )
