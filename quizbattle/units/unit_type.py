"""
UnitTypeConfig - niezmienna definicja typu jednostki.

Typy jednostek pochodzą z units.yaml (uzupełnione o unit_defaults)
i są współdzielone przez wszystkie instancje danego typu.
Symulacja czyta je wyłącznie do odczytu.

Pola:
─────────────────────────────────────────────────────────────────
Pole            | Opis                                   | YAML
─────────────────────────────────────────────────────────────────
id              | Klucz typu (np. "knight")              | klucz
subject         | Przedmiot quizu (math/science/...)     | subject
name            | Nazwa wyświetlana                      | name
base_health     | Bazowe HP                              | hp
base_dps        | Bazowe obrażenia na atak (co 1s)       | dps
cost            | Koszt w złocie                         | cost
range           | Zasięg w jednostkach toru (None=1)     | range
speed           | Prędkość (piksele toru / sekundę)      | speed
wrong_mod       | Mnożniki HP/DPS przy złej odpowiedzi   | wrong_mod
sprite          | Klucz grafiki (tylko prezentacja)      | sprite
─────────────────────────────────────────────────────────────────

Modyfikatory złej odpowiedzi są aplikowane RAZ, przy tworzeniu
jednostki (patrz factory.create_unit) - nigdy ponownie.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional

from ..core.config_loader import ConfigLoader


@dataclass(frozen=True)
class WrongAnswerModifier:
    """
    Mnożniki aplikowane przy błędnej odpowiedzi.

    Attributes:
        hp (float): Mnożnik max HP (np. 0.67)
        dps (float): Mnożnik DPS (np. 0.67)
    """
    hp: float = 1.0
    dps: float = 1.0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "WrongAnswerModifier":
        data = data or {}
        return cls(hp=float(data.get("hp", 1.0)), dps=float(data.get("dps", 1.0)))


@dataclass(frozen=True)
class UnitTypeConfig:
    """
    Statyczna konfiguracja typu jednostki.

    Example:
        >>> cfg = UnitTypeConfig.from_config(loader.load_unit("knight"))
        >>> cfg.effective_range
        1
    """
    id: str
    subject: str
    name: str
    base_health: int
    base_dps: int
    cost: int
    speed: float
    range: Optional[int] = None
    wrong_mod: WrongAnswerModifier = field(default_factory=WrongAnswerModifier)
    sprite: str = "basic"
    special_ability: Optional[str] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "UnitTypeConfig":
        """
        Tworzy konfigurację ze słownika z ConfigLoader.load_unit().

        Args:
            config: Definicja jednostki (z uzupełnionymi defaults)
        """
        unit_id = config.get("id", "unknown")
        return cls(
            id=unit_id,
            subject=config.get("subject", "math"),
            name=config.get("name", unit_id.title()),
            base_health=int(config.get("hp", 100)),
            base_dps=int(config.get("dps", 10)),
            cost=int(config.get("cost", 0)),
            speed=float(config.get("speed", 50)),
            range=config.get("range"),
            wrong_mod=WrongAnswerModifier.from_dict(config.get("wrong_mod")),
            sprite=config.get("sprite", unit_id),
            special_ability=config.get("special_ability"),
        )

    @property
    def effective_range(self) -> int:
        """Zasięg w jednostkach toru (brak = walka wręcz = 1)."""
        return self.range if self.range else 1

    def to_dict(self) -> Dict[str, Any]:
        """Serializuje do słownika (dla API/katalogu)."""
        return {
            "id": self.id,
            "subject": self.subject,
            "name": self.name,
            "hp": self.base_health,
            "dps": self.base_dps,
            "cost": self.cost,
            "range": self.effective_range,
            "speed": self.speed,
            "wrong_mod": {"hp": self.wrong_mod.hp, "dps": self.wrong_mod.dps},
            "sprite": self.sprite,
            "special_ability": self.special_ability,
        }


class UnitRegistry:
    """
    Tablica typów jednostek tylko do odczytu: unit_type_id -> UnitTypeConfig.

    Zachowuje kolejność z units.yaml, więc losowanie typu przez AI
    jest deterministyczne dla danego seeda.
    """

    def __init__(self, types: List[UnitTypeConfig]):
        self._types: Dict[str, UnitTypeConfig] = {t.id: t for t in types}

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> "UnitRegistry":
        """Buduje rejestr ze wszystkich jednostek w units.yaml."""
        return cls([
            UnitTypeConfig.from_config(loader.load_unit(uid))
            for uid in loader.get_unit_ids()
        ])

    def get(self, unit_type_id: str) -> Optional[UnitTypeConfig]:
        """Zwraca konfigurację lub None dla nieznanego typu."""
        return self._types.get(unit_type_id)

    def all(self) -> List[UnitTypeConfig]:
        """Wszystkie typy w kolejności definicji."""
        return list(self._types.values())

    def ids(self) -> List[str]:
        return list(self._types.keys())

    def __contains__(self, unit_type_id: object) -> bool:
        return unit_type_id in self._types

    def __iter__(self) -> Iterator[UnitTypeConfig]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)
