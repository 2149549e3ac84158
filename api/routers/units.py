"""
Units router - katalog typów jednostek.
"""

from fastapi import APIRouter
from typing import List, Dict, Any

from quizbattle.core.config_loader import ConfigLoader
from quizbattle.units.factory import scaled_stat
from quizbattle.units.unit_type import UnitRegistry, UnitTypeConfig


router = APIRouter()

# Katalog jest tylko do odczytu
_loader = ConfigLoader()
_registry = UnitRegistry.from_loader(_loader)


@router.get("/units")
async def get_units() -> List[Dict[str, Any]]:
    """
    Zwraca listę wszystkich typów jednostek.

    Returns:
        Lista jednostek ze statystykami, kosztem i przedmiotem quizu.
    """
    return [unit_type.to_dict() for unit_type in _registry]


@router.get("/units/{unit_id}")
async def get_unit(unit_id: str) -> Dict[str, Any]:
    """
    Zwraca szczegóły typu jednostki.

    Args:
        unit_id: ID typu (np. "knight")

    Returns:
        Pełne dane typu + statystyki wariantu po złej odpowiedzi
    """
    try:
        unit_type = UnitTypeConfig.from_config(_loader.load_unit(unit_id))
    except KeyError:
        return {"error": f"Unit '{unit_id}' not found"}

    data = unit_type.to_dict()
    data["weak_variant"] = {
        "hp": scaled_stat(unit_type.base_health, unit_type.wrong_mod.hp),
        "dps": scaled_stat(unit_type.base_dps, unit_type.wrong_mod.dps),
    }
    return data
