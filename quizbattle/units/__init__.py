"""
Units module - typy jednostek, instancje i fabryka.

Zawiera:
- UnitTypeConfig: Niezmienna definicja typu (z units.yaml)
- WrongAnswerModifier: Mnożniki HP/DPS za złą odpowiedź
- UnitRegistry: Tablica typów tylko do odczytu
- Team: Strona (gracz/przeciwnik)
- Unit: Jednostka na torze
- create_unit: Fabryka jednostek
"""

from .unit_type import UnitTypeConfig, WrongAnswerModifier, UnitRegistry
from .unit import Team, Unit
from .factory import create_unit

__all__ = [
    "UnitTypeConfig", "WrongAnswerModifier", "UnitRegistry",
    "Team", "Unit", "create_unit",
]
