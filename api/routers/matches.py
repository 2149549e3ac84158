"""
Matches router - mecze, deploy z quizem, log zdarzeń.

Każdy mecz to niezależna instancja Simulation w rejestrze aplikacji.
Mecz "realtime" napędza MatchRunner (asyncio), pozostałe są
przesuwane ręcznie przez POST /advance.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
import random
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from quizbattle.core.config_loader import ConfigLoader
from quizbattle.events.event_logger import EventType
from quizbattle.runtime.runner import MatchRunner
from quizbattle.simulation.simulation import Simulation


router = APIRouter()


# ═══════════════════════════════════════════════════════════════════════════
# REJESTR MECZÓW
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class MatchEntry:
    """Mecz w rejestrze."""
    match_id: str
    simulation: Simulation
    runner: Optional[MatchRunner] = None

    @property
    def realtime(self) -> bool:
        return self.runner is not None

    async def call(self, action, *args, **kwargs):
        """Akcja gracza - przez lock runnera, jeśli mecz jest realtime."""
        if self.runner is not None:
            return await self.runner.call(action, *args, **kwargs)
        return action(*args, **kwargs)


class MatchRegistry:
    """Rejestr niezależnych meczów jednej aplikacji."""

    def __init__(self, loader: ConfigLoader):
        self.loader = loader
        self._matches: Dict[str, MatchEntry] = {}

    async def create(
        self,
        seed: int,
        realtime: bool = False,
        time_compression: float = 1.0,
    ) -> MatchEntry:
        simulation = Simulation.from_loader(self.loader, seed=seed)
        simulation.start()

        entry = MatchEntry(match_id=uuid.uuid4().hex[:8], simulation=simulation)
        if realtime:
            entry.runner = MatchRunner(simulation, time_compression=time_compression)
            await entry.runner.start()

        self._matches[entry.match_id] = entry
        return entry

    def get(self, match_id: str) -> MatchEntry:
        """Raises KeyError dla nieznanego meczu."""
        return self._matches[match_id]

    async def remove(self, match_id: str) -> MatchEntry:
        entry = self._matches.pop(match_id)
        if entry.runner is not None:
            await entry.runner.stop()
        return entry

    async def close_all(self) -> None:
        for match_id in list(self._matches):
            await self.remove(match_id)

    def __len__(self) -> int:
        return len(self._matches)


def get_registry(request: Request) -> MatchRegistry:
    return request.app.state.matches


def get_match(match_id: str, registry: MatchRegistry = Depends(get_registry)) -> MatchEntry:
    try:
        return registry.get(match_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Match '{match_id}' not found")


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST MODELS
# ═══════════════════════════════════════════════════════════════════════════

class CreateMatchRequest(BaseModel):
    """Request do utworzenia meczu."""
    seed: Optional[int] = None
    realtime: bool = False
    time_compression: float = Field(default=1.0, gt=0, le=1000)


class AdvanceRequest(BaseModel):
    """Ręczne przesunięcie zegara meczu."""
    ms: float = Field(gt=0, le=600_000)


class DeployRequest(BaseModel):
    """Prośba o wystawienie jednostki (wydaje quiz)."""
    unit_type_id: str


class AnswerRequest(BaseModel):
    """Odpowiedź gracza na quiz."""
    answer: Union[int, float, str]


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def _state_payload(entry: MatchEntry) -> Dict[str, Any]:
    return {
        "match_id": entry.match_id,
        "seed": entry.simulation.seed,
        "realtime": entry.realtime,
        "state": entry.simulation.snapshot().to_dict(),
    }


def _last_rejection(simulation: Simulation) -> Optional[str]:
    """Powód ostatniego odrzuconego deployu (z logu)."""
    rejected = simulation.logger.get_events_by_type(EventType.DEPLOY_REJECTED)
    if not rejected:
        return None
    return rejected[-1].data.get("reason")


# ═══════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════

@router.post("/matches")
async def create_match(
    request: CreateMatchRequest,
    registry: MatchRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """
    Tworzy nowy mecz.

    Args:
        request.seed: Ziarno (losowe jeśli brak)
        request.realtime: Czy mecz ma iść sam (MatchRunner)
    """
    seed = request.seed if request.seed is not None else random.randint(0, 999999)
    entry = await registry.create(seed, request.realtime, request.time_compression)
    return _state_payload(entry)


@router.get("/matches/{match_id}")
async def get_match_state(entry: MatchEntry = Depends(get_match)) -> Dict[str, Any]:
    """Aktualny snapshot meczu."""
    if entry.runner is not None:
        snapshot = await entry.runner.snapshot()
        payload = _state_payload(entry)
        payload["state"] = snapshot.to_dict()
        return payload
    return _state_payload(entry)


@router.post("/matches/{match_id}/advance")
async def advance_match(
    request: AdvanceRequest,
    entry: MatchEntry = Depends(get_match),
) -> Dict[str, Any]:
    """Przesuwa zegar meczu (tylko mecze bez runnera)."""
    if entry.realtime:
        raise HTTPException(status_code=409, detail="Match is driven in real time")

    entry.simulation.advance(request.ms)
    return _state_payload(entry)


@router.post("/matches/{match_id}/deploy")
async def request_deploy(
    request: DeployRequest,
    entry: MatchEntry = Depends(get_match),
) -> Dict[str, Any]:
    """
    Rozpoczyna deploy: zwraca bilet quizu z pytaniem.

    Odrzucenie nie jest błędem HTTP - odpowiedź ma accepted=False
    i powód (game_over, quiz_pending, unknown_unit, insufficient_gold).
    """
    ticket = await entry.call(entry.simulation.request_deploy, request.unit_type_id)
    if ticket is None:
        return {"accepted": False, "reason": _last_rejection(entry.simulation)}

    return {"accepted": True, "ticket": ticket.to_dict()}


@router.post("/matches/{match_id}/quiz/{token}/answer")
async def answer_quiz(
    token: str,
    request: AnswerRequest,
    entry: MatchEntry = Depends(get_match),
) -> Dict[str, Any]:
    """Sprawdza odpowiedź i wykonuje deploy."""
    simulation = entry.simulation
    correct = await entry.call(simulation.answer_quiz, token, request.answer)
    if correct is None:
        raise HTTPException(status_code=409, detail=f"Quiz '{token}' is not pending")

    ticket = simulation.get_ticket(token)
    question = simulation.quiz_bank.get(ticket.question_id) if ticket.question_id else None
    return {
        "correct": correct,
        "explanation": question.explanation if question else None,
        "ticket": ticket.to_dict(),
        "state": simulation.snapshot().to_dict(),
    }


@router.post("/matches/{match_id}/quiz/{token}/cancel")
async def cancel_quiz(token: str, entry: MatchEntry = Depends(get_match)) -> Dict[str, Any]:
    """Anuluje quiz (liczony jako zła odpowiedź)."""
    simulation = entry.simulation
    if not await entry.call(simulation.cancel_quiz, token):
        raise HTTPException(status_code=409, detail=f"Quiz '{token}' is not pending")

    return {
        "ticket": simulation.get_ticket(token).to_dict(),
        "state": simulation.snapshot().to_dict(),
    }


@router.get("/matches/{match_id}/events")
async def get_events(
    since: int = Query(default=0, ge=0),
    limit: int = Query(default=500, ge=1, le=5000),
    entry: MatchEntry = Depends(get_match),
) -> Dict[str, Any]:
    """Wycinek logu zdarzeń (polling)."""
    events, next_offset = entry.simulation.logger.since(since, limit)
    return {
        "events": [e.to_dict() for e in events],
        "next": next_offset,
    }


@router.get("/matches/{match_id}/result")
async def get_result(entry: MatchEntry = Depends(get_match)) -> Dict[str, Any]:
    """Wynik meczu (409 dopóki trwa)."""
    result = entry.simulation.get_result()
    if result is None:
        raise HTTPException(status_code=409, detail="Match is still running")
    return result.to_dict()


@router.delete("/matches/{match_id}")
async def delete_match(
    match_id: str,
    registry: MatchRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """Zatrzymuje i usuwa mecz."""
    try:
        await registry.remove(match_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Match '{match_id}' not found")
    return {"deleted": match_id}
