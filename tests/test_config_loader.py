"""
Testy loadera konfiguracji YAML.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from quizbattle.core.config_loader import ConfigLoader


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def loader():
    return ConfigLoader()


@pytest.fixture
def custom_data(tmp_path):
    """Minimalny katalog danych z jedną jednostką."""
    (tmp_path / "defaults.yaml").write_text(
        "unit_defaults:\n"
        "  hp: 100\n"
        "  speed: 50\n"
        "  wrong_mod: {hp: 0.5, dps: 0.5}\n"
        "economy:\n"
        "  start_gold: 1000\n",
        encoding="utf-8",
    )
    (tmp_path / "units.yaml").write_text(
        "units:\n"
        "  scout:\n"
        "    subject: language\n"
        "    dps: 5\n"
        "    cost: 50\n"
        "    wrong_mod: {dps: 0.9}\n",
        encoding="utf-8",
    )
    return tmp_path


# ═══════════════════════════════════════════════════════════════════════════
# TEST: DEFAULTS MERGE
# ═══════════════════════════════════════════════════════════════════════════

def test_unit_ids_in_file_order(loader):
    assert loader.get_unit_ids() == ["knight", "mage", "archer"]


def test_unit_gets_id_and_defaults(loader):
    knight = loader.load_unit("knight")

    assert knight["id"] == "knight"
    assert knight["hp"] == 120
    assert knight["wrong_mod"] == {"hp": 0.67, "dps": 0.67}


def test_nested_override_keeps_missing_defaults(custom_data):
    loader = ConfigLoader(str(custom_data))
    scout = loader.load_unit("scout")

    assert scout["hp"] == 100
    assert scout["speed"] == 50
    assert scout["wrong_mod"] == {"hp": 0.5, "dps": 0.9}


def test_unknown_unit_raises_key_error(loader):
    with pytest.raises(KeyError):
        loader.load_unit("dragon")


def test_missing_file_raises(tmp_path):
    loader = ConfigLoader(str(tmp_path))
    with pytest.raises(FileNotFoundError):
        loader.get_defaults()


def test_sections(loader):
    assert loader.get_economy_config()["correct_bonus"] == 50
    assert loader.get_battle_config()["base_max_health"] == 100
    assert loader.get_simulation_config()["tick_ms"] == 16


def test_loaded_unit_is_a_copy(loader):
    knight = loader.load_unit("knight")
    knight["hp"] = 1

    assert loader.load_unit("knight")["hp"] == 120


def test_quiz_questions_are_copies(loader):
    questions = loader.load_quiz_questions()
    questions.clear()

    assert len(loader.load_quiz_questions()) > 0


def test_reload_clears_cache(custom_data):
    loader = ConfigLoader(str(custom_data))
    assert loader.get_economy_config()["start_gold"] == 1000

    (custom_data / "defaults.yaml").write_text("economy:\n  start_gold: 5\n", encoding="utf-8")
    loader.reload()

    assert loader.get_economy_config()["start_gold"] == 5
