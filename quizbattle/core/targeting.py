"""
Wybór celu na torze.

Tor jest jednowymiarowy, więc odległość to |x1 - x2|.
Zasięg jednostki w pikselach toru = range × RANGE_SCALE.

REGUŁY:
═══════════════════════════════════════════════════════════════════

    1. Kandydaci: żywe jednostki przeciwnej strony
    2. Tylko kandydaci w zasięgu (distance <= range × RANGE_SCALE)
    3. Wygrywa najbliższy
    4. Przy równej odległości - pierwszy w kolejności kolekcji
       (czyli najwcześniej wystawiony)
    5. Brak kandydata w zasięgu -> None (jednostka idzie naprzód)

STABILNOŚĆ CELU:
═══════════════════════════════════════════════════════════════════

    resolve_target() zachowuje aktualny cel, dopóki ten żyje
    i jest w zasięgu. find_target() jest wołane TYLKO gdy:
        • brak celu
        • cel zginął / zniknął z kolekcji
        • cel wyszedł poza zasięg
    Dzięki temu jednostka nie przeskakuje między celami co tick.

Przykład:
    >>> target = find_target(archer, units)
    >>> target.id if target else None
    'knight_enemy_3'
"""

from __future__ import annotations
from typing import Dict, Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..units.unit import Unit


# Piksele toru na jednostkę zasięgu
RANGE_SCALE = 60.0


def find_target(
    unit: "Unit",
    all_units: Iterable["Unit"],
    range_scale: float = RANGE_SCALE,
) -> Optional["Unit"]:
    """
    Znajduje najbliższego żywego wroga w zasięgu.

    Args:
        unit: Jednostka szukająca celu
        all_units: Wszystkie jednostki na torze
        range_scale: Piksele toru na jednostkę zasięgu

    Returns:
        Optional[Unit]: Cel lub None jeśli nikt nie jest w zasięgu
    """
    reach = unit.reach(range_scale)
    closest: Optional["Unit"] = None
    closest_distance = reach

    for other in all_units:
        if other.team == unit.team or not other.is_alive():
            continue

        distance = unit.distance_to(other)
        if distance > reach:
            continue

        # Ścisła nierówność: przy remisie zostaje wcześniejszy
        if closest is None or distance < closest_distance:
            closest = other
            closest_distance = distance

    return closest


def get_valid_target(
    unit: "Unit",
    units_by_id: Dict[str, "Unit"],
    range_scale: float = RANGE_SCALE,
) -> Optional["Unit"]:
    """
    Zwraca aktualny cel jednostki, jeśli nadal jest ważny.

    Ważny cel: istnieje w kolekcji, żyje, jest w zasięgu.
    """
    if unit.target_id is None:
        return None

    target = units_by_id.get(unit.target_id)
    if target is None or not target.is_alive():
        return None
    if not unit.in_attack_range(target, range_scale):
        return None

    return target


def resolve_target(
    unit: "Unit",
    units_by_id: Dict[str, "Unit"],
    range_scale: float = RANGE_SCALE,
) -> Optional["Unit"]:
    """
    Odświeża cel jednostki na początku jej tury.

    Zachowuje ważny cel, w przeciwnym razie szuka nowego
    i zapisuje jego ID w unit.target_id.

    Returns:
        Optional[Unit]: Cel w zasięgu lub None
    """
    target = get_valid_target(unit, units_by_id, range_scale)
    if target is not None:
        return target

    target = find_target(unit, units_by_id.values(), range_scale)
    unit.target_id = target.id if target else None
    return target
