"""
Combat module - ataki i ruch na torze.

Zawiera:
- attack: Atak z cooldownem 1000 ms
- can_attack: Sprawdzenie cooldownu
- advance: Ruch jednostki po torze
- reached_base: Czy jednostka dotarła do bazy wroga
"""

from .attack import attack, can_attack, ATTACK_COOLDOWN_MS
from .movement import advance, reached_base

__all__ = ["attack", "can_attack", "ATTACK_COOLDOWN_MS", "advance", "reached_base"]
