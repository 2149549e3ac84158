"""
Testy wyboru celu na torze.

Testuje:
- Najbliższy wróg w zasięgu
- Zasięg włącznie z granicą (range × 60)
- Remis odległości -> pierwszy w kolejności
- Stabilność celu (resolve_target)
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from quizbattle.core.targeting import find_target, get_valid_target, resolve_target, RANGE_SCALE
from quizbattle.units import UnitTypeConfig, Team, Unit, create_unit


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

MELEE = UnitTypeConfig(
    id="knight", subject="math", name="Knight",
    base_health=120, base_dps=12, cost=200, speed=60,
)
ARCHER = UnitTypeConfig(
    id="archer", subject="history", name="Archer",
    base_health=70, base_dps=14, cost=180, speed=55, range=4,
)


def create_lane_unit(unit_id: str, team: Team, x: float, cfg: UnitTypeConfig = MELEE) -> Unit:
    """Tworzy jednostkę na pozycji x."""
    return create_unit(cfg, x=x, team=team, unit_id=unit_id)


def by_id(*units: Unit):
    return {u.id: u for u in units}


# ═══════════════════════════════════════════════════════════════════════════
# TEST: FIND TARGET
# ═══════════════════════════════════════════════════════════════════════════

def test_no_enemies_returns_none():
    unit = create_lane_unit("p1", Team.PLAYER, 200)
    ally = create_lane_unit("p2", Team.PLAYER, 220)

    assert find_target(unit, [unit, ally]) is None


def test_enemy_out_of_range_returns_none():
    """Melee: zasięg 60 pikseli toru."""
    unit = create_lane_unit("p1", Team.PLAYER, 200)
    enemy = create_lane_unit("e1", Team.ENEMY, 261)

    assert find_target(unit, [unit, enemy]) is None


def test_range_boundary_is_inclusive():
    unit = create_lane_unit("p1", Team.PLAYER, 200)
    enemy = create_lane_unit("e1", Team.ENEMY, 200 + RANGE_SCALE)

    assert find_target(unit, [unit, enemy]) is enemy


def test_picks_closest_enemy():
    archer = create_lane_unit("p1", Team.PLAYER, 100, ARCHER)
    far = create_lane_unit("e1", Team.ENEMY, 300)
    near = create_lane_unit("e2", Team.ENEMY, 150)

    assert find_target(archer, [archer, far, near]) is near


def test_equal_distance_picks_first_in_collection():
    unit = create_lane_unit("p1", Team.PLAYER, 200)
    first = create_lane_unit("e1", Team.ENEMY, 240)
    second = create_lane_unit("e2", Team.ENEMY, 240)

    assert find_target(unit, [unit, first, second]) is first
    assert find_target(unit, [unit, second, first]) is second


def test_dead_enemies_are_ignored():
    unit = create_lane_unit("p1", Team.PLAYER, 200)
    dead = create_lane_unit("e1", Team.ENEMY, 210)
    dead.take_damage(1000)
    alive = create_lane_unit("e2", Team.ENEMY, 250)

    assert find_target(unit, [unit, dead, alive]) is alive


def test_enemy_side_targets_player_units():
    enemy = create_lane_unit("e1", Team.ENEMY, 1000, ARCHER)
    player = create_lane_unit("p1", Team.PLAYER, 800)

    assert find_target(enemy, [enemy, player]) is player


# ═══════════════════════════════════════════════════════════════════════════
# TEST: TARGET STABILITY
# ═══════════════════════════════════════════════════════════════════════════

def test_valid_target_is_kept_even_if_closer_enemy_appears():
    """Żywy cel w zasięgu nigdy nie jest podmieniany."""
    archer = create_lane_unit("p1", Team.PLAYER, 100, ARCHER)
    current = create_lane_unit("e1", Team.ENEMY, 300)
    units = by_id(archer, current)

    assert resolve_target(archer, units) is current
    assert archer.target_id == "e1"

    closer = create_lane_unit("e2", Team.ENEMY, 120)
    units[closer.id] = closer

    assert resolve_target(archer, units) is current


def test_dead_target_is_replaced():
    unit = create_lane_unit("p1", Team.PLAYER, 200)
    first = create_lane_unit("e1", Team.ENEMY, 230)
    second = create_lane_unit("e2", Team.ENEMY, 250)
    units = by_id(unit, first, second)

    resolve_target(unit, units)
    first.take_damage(1000)

    assert get_valid_target(unit, units) is None
    assert resolve_target(unit, units) is second
    assert unit.target_id == "e2"


def test_missing_target_id_is_dropped():
    """Cel usunięty z kolekcji -> target_id wyczyszczone."""
    unit = create_lane_unit("p1", Team.PLAYER, 200)
    unit.target_id = "ghost"

    assert resolve_target(unit, by_id(unit)) is None
    assert unit.target_id is None


def test_target_out_of_range_is_dropped():
    unit = create_lane_unit("p1", Team.PLAYER, 200)
    enemy = create_lane_unit("e1", Team.ENEMY, 240)
    units = by_id(unit, enemy)

    resolve_target(unit, units)
    enemy.x = 400

    assert resolve_target(unit, units) is None
    assert unit.target_id is None
