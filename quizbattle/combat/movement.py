"""
Ruch jednostek po torze.

    x += speed × delta_ms / 1000 × direction

Gracz idzie w prawo (direction = +1) w stronę bazy przeciwnika,
przeciwnik w lewo (direction = -1) w stronę bazy gracza.
Jednostka w promieniu base_proximity od bazy wroga uderza w nią
i znika z toru (patrz Simulation._execute_move).
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..units.unit import Unit


def advance(unit: "Unit", delta_ms: float) -> float:
    """
    Przesuwa jednostkę w stronę bazy przeciwnika.

    Args:
        unit: Jednostka
        delta_ms: Czas od poprzedniego ticka

    Returns:
        float: Nowa pozycja x
    """
    unit.x += unit.speed * delta_ms / 1000.0 * unit.direction
    return unit.x


def reached_base(unit: "Unit", base_x: float, proximity: float) -> bool:
    """
    Sprawdza czy jednostka dotarła do bazy wroga.

    Liczy się odległość mierzona w kierunku ruchu, więc jednostka,
    która w jednym ticku przeskoczyła bazę, też uderza.
    """
    return (base_x - unit.x) * unit.direction < proximity
