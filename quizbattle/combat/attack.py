"""
Rozstrzyganie ataków.

SEKWENCJA ATAKU:
═══════════════════════════════════════════════════════════════════

    1. Cooldown: now - last_attack_ms < 1000 ms -> brak ataku (False)
    2. Obrażenia: target.hp = max(0, target.hp - attacker.dps)
    3. Znacznik: attacker.last_attack_ms = now
    4. Zwróć True (symulacja loguje UNIT_ATTACK)

Atak NIE usuwa celu z kolekcji, nawet gdy HP spadnie do 0.
Usunięcie następuje w fazie cleanup następnego ticka - kolekcja
nie jest modyfikowana w trakcie iteracji.

Dwie jednostki mogą zabić się nawzajem w tym samym ticku:
atak nie sprawdza HP atakującego, więc druga strona też trafia.

Przykład:
    >>> attack(knight, archer, now_ms=1000)
    True
    >>> attack(knight, archer, now_ms=1500)   # cooldown
    False
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..units.unit import Unit


ATTACK_COOLDOWN_MS = 1000.0


def can_attack(attacker: "Unit", now_ms: float, cooldown_ms: float = ATTACK_COOLDOWN_MS) -> bool:
    """Sprawdza czy minął cooldown od ostatniego ataku."""
    if attacker.last_attack_ms is None:
        return True
    return now_ms - attacker.last_attack_ms >= cooldown_ms


def attack(
    attacker: "Unit",
    target: "Unit",
    now_ms: float,
    cooldown_ms: float = ATTACK_COOLDOWN_MS,
) -> bool:
    """
    Wykonuje atak, jeśli cooldown na to pozwala.

    Args:
        attacker: Atakujący
        target: Cel
        now_ms: Aktualny czas meczu (monotoniczny)
        cooldown_ms: Minimalny odstęp między atakami

    Returns:
        bool: True jeśli atak faktycznie nastąpił
    """
    if not can_attack(attacker, now_ms, cooldown_ms):
        return False

    target.take_damage(attacker.dps)
    attacker.last_attack_ms = now_ms
    return True
