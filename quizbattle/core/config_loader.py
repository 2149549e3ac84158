"""
Loader konfiguracji z automatycznym uzupełnianiem wartości domyślnych.

Gra jest data-driven - wszystkie liczby balansu leżą w plikach YAML:
- defaults.yaml: ekonomia, parametry meczu, stałe symulacji, unit_defaults
- units.yaml: katalog jednostek (knight, mage, archer)
- quiz.yaml: bank pytań

Logika merge (uzupełniania defaults):
    1. Wczytaj defaults.yaml - sekcja unit_defaults
    2. Wczytaj konkretną definicję (np. jednostka "knight")
    3. Dla każdego klucza w defaults, którego brak w definicji:
       - Użyj wartości z defaults
    4. Definicja może nadpisać defaults (także zagnieżdżone, np. wrong_mod)

Przykład:
    defaults.yaml:
        unit_defaults:
            speed: 50
            wrong_mod: {hp: 0.67, dps: 0.67}

    units.yaml:
        archer:
            hp: 70
            range: 4
            # speed nie podane -> 50 z defaults
            # wrong_mod nie podane -> 0.67 / 0.67 z defaults

Użycie:
    >>> loader = ConfigLoader()
    >>> knight = loader.load_unit("knight")
    >>> knight["wrong_mod"]["hp"]
    0.67
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, List, Optional
import yaml
import copy


# Katalog data/ w korzeniu repozytorium
DEFAULT_DATA_PATH = Path(__file__).resolve().parents[2] / "data"


class ConfigLoader:
    """
    Ładuje konfigurację z plików YAML z automatycznym merge defaults.

    Attributes:
        data_path (Path): Ścieżka do folderu data/
        _defaults (Dict): Cache wczytanych defaults
        _units (Dict): Cache surowych definicji jednostek
        _quiz (List): Cache pytań quizowych

    Example:
        >>> loader = ConfigLoader()
        >>> loader.get_unit_ids()
        ['knight', 'mage', 'archer']
        >>> loader.get_economy_config()["correct_bonus"]
        50
    """

    def __init__(self, data_path: Optional[str] = None):
        """
        Inicjalizuje loader z ścieżką do danych.

        Args:
            data_path: Ścieżka do folderu z plikami YAML
                (None = katalog data/ w repozytorium)
        """
        self.data_path = Path(data_path) if data_path else DEFAULT_DATA_PATH
        self._defaults: Optional[Dict] = None
        self._units: Optional[Dict] = None
        self._quiz: Optional[List[Dict]] = None

    # ─────────────────────────────────────────────────────────────────────────
    # WCZYTYWANIE PLIKÓW
    # ─────────────────────────────────────────────────────────────────────────

    def _load_yaml(self, filename: str) -> Dict:
        """
        Wczytuje plik YAML.

        Raises:
            FileNotFoundError: Jeśli plik nie istnieje
        """
        filepath = self.data_path / filename
        with open(filepath, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def get_defaults(self) -> Dict:
        """
        Zwraca słownik z wartościami domyślnymi.

        Cache'uje wczytany plik - kolejne wywołania są szybkie.
        """
        if self._defaults is None:
            self._defaults = self._load_yaml("defaults.yaml")
        return self._defaults

    def get_unit_defaults(self) -> Dict:
        """Zwraca sekcję unit_defaults."""
        return self.get_defaults().get("unit_defaults", {})

    def get_economy_config(self) -> Dict:
        """Zwraca ustawienia ekonomii (złoto startowe, przyrost, bonus/kara)."""
        return self.get_defaults().get("economy", {})

    def get_battle_config(self) -> Dict:
        """Zwraca ustawienia meczu (czas trwania, HP baz)."""
        return self.get_defaults().get("battle", {})

    def get_simulation_config(self) -> Dict:
        """Zwraca stałe symulacji (tick, zasięg, pozycje na torze)."""
        return self.get_defaults().get("simulation", {})

    # ─────────────────────────────────────────────────────────────────────────
    # ŁADOWANIE JEDNOSTEK
    # ─────────────────────────────────────────────────────────────────────────

    def _get_all_units_raw(self) -> Dict:
        """Zwraca wszystkie surowe definicje jednostek."""
        if self._units is None:
            data = self._load_yaml("units.yaml")
            self._units = data.get("units", {})
        return self._units

    def load_unit(self, unit_id: str) -> Dict:
        """
        Wczytuje definicję jednostki z uzupełnionymi defaults.

        Args:
            unit_id: ID jednostki (klucz w units.yaml)

        Returns:
            Dict: Pełna definicja jednostki

        Raises:
            KeyError: Jeśli jednostka nie istnieje
        """
        units = self._get_all_units_raw()

        if unit_id not in units:
            raise KeyError(f"Unit '{unit_id}' not found in units.yaml")

        result = copy.deepcopy(self.get_unit_defaults())
        result = self._deep_merge(result, units[unit_id] or {})
        result["id"] = unit_id

        return result

    def get_unit_ids(self) -> list[str]:
        """Zwraca listę ID jednostek w kolejności z pliku."""
        return list(self._get_all_units_raw().keys())

    # ─────────────────────────────────────────────────────────────────────────
    # ŁADOWANIE QUIZU
    # ─────────────────────────────────────────────────────────────────────────

    def load_quiz_questions(self) -> List[Dict]:
        """
        Wczytuje bank pytań z quiz.yaml.

        Returns:
            List[Dict]: Kopia listy pytań
        """
        if self._quiz is None:
            data = self._load_yaml("quiz.yaml")
            self._quiz = data.get("questions", [])
        return copy.deepcopy(self._quiz)

    # ─────────────────────────────────────────────────────────────────────────
    # HELPERY
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _deep_merge(base: Dict, override: Dict) -> Dict:
        """
        Głęboko łączy dwa słowniki.

        Override nadpisuje wartości w base.
        Nested dicts są merge'owane rekurencyjnie.
        """
        result = copy.deepcopy(base)

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def reload(self) -> None:
        """
        Czyści cache i wymusza ponowne wczytanie plików.

        Przydatne podczas edycji plików YAML w runtime.
        """
        self._defaults = None
        self._units = None
        self._quiz = None
