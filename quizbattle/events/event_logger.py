"""
System logowania zdarzeń meczu do formatu JSON dla replay.

Każde zdarzenie (spawn, atak, śmierć, uderzenie w bazę, deploy,
quiz...) jest zapisywane z numerem ticka i czasem meczu. Ten sam
log zasila warstwę prezentacji (API /events) i zapis do pliku.

TYPY ZDARZEŃ:
═══════════════════════════════════════════════════════════════════

    MATCH_START / MATCH_END
    ─────────────────────────────────────────────────────────────
    Początek i koniec meczu.
    Data: stan początkowy / winner, end_reason, final_state

    UNIT_SPAWN
    ─────────────────────────────────────────────────────────────
    Jednostka pojawiła się na torze.
    Data: unit snapshot

    UNIT_ATTACK
    ─────────────────────────────────────────────────────────────
    Atak trafił (efekt wizualny/dźwiękowy po stronie UI).
    Data: damage, hp_after

    UNIT_DESTROYED
    ─────────────────────────────────────────────────────────────
    Martwa jednostka usunięta w fazie cleanup.

    TARGET_ACQUIRED
    ─────────────────────────────────────────────────────────────
    Jednostka wybrała nowy cel.

    BASE_HIT
    ─────────────────────────────────────────────────────────────
    Jednostka dotarła do bazy wroga.
    Data: base (player/enemy), damage, base_hp_after

    GOLD_CHANGE
    ─────────────────────────────────────────────────────────────
    Zmiana złota gracza.
    Data: reason (income/deploy_cost/quiz_bonus/quiz_penalty), delta, gold

    DEPLOY / DEPLOY_REJECTED
    ─────────────────────────────────────────────────────────────
    Wystawienie jednostki lub odrzucenie (reason: game_over,
    unknown_unit, insufficient_gold).

    QUIZ_REQUESTED / QUIZ_RESOLVED
    ─────────────────────────────────────────────────────────────
    Bilet quizu wydany / rozstrzygnięty.
    Data: token, unit_type, correct, outcome (answered/cancelled/expired)

    TIMER_TICK
    ─────────────────────────────────────────────────────────────
    Odliczanie zegara meczu (co sekundę).
    Data: time_left

FORMAT LOGU:
═══════════════════════════════════════════════════════════════════

{
    "metadata": {"version": "1.0", "seed": 12345, "tick_ms": 16, ...},
    "initial_state": {...},
    "events": [
        {"tick": 0, "time_ms": 0, "type": "MATCH_START", "data": {...}},
        {"tick": 62, "time_ms": 992, "type": "UNIT_ATTACK",
         "unit_id": "knight_player_1", "target_id": "mage_enemy_2",
         "data": {"damage": 12, "hp_after": 68}},
        ...
    ],
    "final_state": {...}
}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
import json
from pathlib import Path


class EventType(Enum):
    """Typ zdarzenia w meczu."""

    # Mecz
    MATCH_START = auto()
    MATCH_END = auto()
    TIMER_TICK = auto()

    # Jednostki
    UNIT_SPAWN = auto()
    UNIT_ATTACK = auto()
    UNIT_DESTROYED = auto()
    TARGET_ACQUIRED = auto()

    # Bazy i ekonomia
    BASE_HIT = auto()
    GOLD_CHANGE = auto()

    # Akcje gracza
    DEPLOY = auto()
    DEPLOY_REJECTED = auto()
    QUIZ_REQUESTED = auto()
    QUIZ_RESOLVED = auto()


@dataclass
class GameEvent:
    """
    Pojedyncze zdarzenie w meczu.

    Attributes:
        tick (int): Numer ticka walki
        time_ms (float): Czas meczu w ms
        event_type (EventType): Typ zdarzenia
        unit_id (Optional[str]): ID jednostki (jeśli dotyczy)
        target_id (Optional[str]): ID celu (jeśli dotyczy)
        data (Dict): Dane specyficzne dla typu zdarzenia
    """
    tick: int
    time_ms: float
    event_type: EventType
    unit_id: Optional[str] = None
    target_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serializuje zdarzenie do słownika."""
        result = {
            "tick": self.tick,
            "time_ms": round(self.time_ms, 1),
            "type": self.event_type.name,
        }

        if self.unit_id:
            result["unit_id"] = self.unit_id
        if self.target_id:
            result["target_id"] = self.target_id
        if self.data:
            result["data"] = self.data

        return result


class EventLogger:
    """
    Logger zdarzeń meczu.

    Zbiera wszystkie zdarzenia i może je zapisać do pliku JSON.

    Example:
        >>> logger = EventLogger(seed=12345, tick_ms=16)
        >>> logger.log_event(0, 0.0, EventType.MATCH_START)
        >>> logger.save("output/match_12345.json")
    """

    def __init__(
        self,
        seed: int,
        tick_ms: int = 16,
        lane_length: float = 3200,
    ):
        """
        Inicjalizuje logger.

        Args:
            seed: Ziarno losowości meczu
            tick_ms: Kadencja ticka walki
            lane_length: Długość toru (dla wizualizacji)
        """
        self.events: List[GameEvent] = []
        self.metadata: Dict[str, Any] = {
            "version": "1.0",
            "seed": seed,
            "tick_ms": tick_ms,
            "lane_length": lane_length,
            "timestamp": datetime.now().isoformat(),
        }
        self.initial_state: Dict[str, Any] = {}
        self.final_state: Dict[str, Any] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # LOGOWANIE OGÓLNE
    # ─────────────────────────────────────────────────────────────────────────

    def log(self, event: GameEvent) -> None:
        self.events.append(event)

    def log_event(
        self,
        tick: int,
        time_ms: float,
        event_type: EventType,
        unit_id: Optional[str] = None,
        target_id: Optional[str] = None,
        **data: Any,
    ) -> GameEvent:
        """
        Tworzy i loguje zdarzenie.

        Returns:
            GameEvent: Utworzone zdarzenie
        """
        event = GameEvent(
            tick=tick,
            time_ms=time_ms,
            event_type=event_type,
            unit_id=unit_id,
            target_id=target_id,
            data=dict(data),
        )
        self.log(event)
        return event

    # ─────────────────────────────────────────────────────────────────────────
    # POMOCNICZE METODY LOGOWANIA
    # ─────────────────────────────────────────────────────────────────────────

    def log_match_start(self, tick: int, time_ms: float, state: Dict[str, Any]) -> GameEvent:
        """Loguje start meczu."""
        self.initial_state = state
        return self.log_event(tick, time_ms, EventType.MATCH_START, **state)

    def log_match_end(
        self,
        tick: int,
        time_ms: float,
        winner: Optional[str],
        end_reason: Optional[str],
        final_state: Dict[str, Any],
    ) -> GameEvent:
        """Loguje koniec meczu."""
        self.final_state = dict(final_state, total_ticks=tick)
        return self.log_event(
            tick, time_ms,
            EventType.MATCH_END,
            winner=winner,
            end_reason=end_reason,
            total_ticks=tick,
        )

    def log_spawn(self, tick: int, time_ms: float, snapshot: Dict[str, Any]) -> GameEvent:
        """Loguje pojawienie się jednostki."""
        return self.log_event(
            tick, time_ms,
            EventType.UNIT_SPAWN,
            unit_id=snapshot["id"],
            unit=snapshot,
        )

    def log_attack(
        self,
        tick: int,
        time_ms: float,
        unit_id: str,
        target_id: str,
        damage: int,
        hp_after: int,
    ) -> GameEvent:
        """Loguje atak."""
        return self.log_event(
            tick, time_ms,
            EventType.UNIT_ATTACK,
            unit_id=unit_id,
            target_id=target_id,
            damage=damage,
            hp_after=hp_after,
        )

    def log_destroyed(self, tick: int, time_ms: float, unit_id: str, team: str) -> GameEvent:
        """Loguje usunięcie martwej jednostki."""
        return self.log_event(
            tick, time_ms,
            EventType.UNIT_DESTROYED,
            unit_id=unit_id,
            team=team,
        )

    def log_target_acquired(
        self,
        tick: int,
        time_ms: float,
        unit_id: str,
        target_id: str,
    ) -> GameEvent:
        """Loguje znalezienie celu."""
        return self.log_event(
            tick, time_ms,
            EventType.TARGET_ACQUIRED,
            unit_id=unit_id,
            target_id=target_id,
        )

    def log_base_hit(
        self,
        tick: int,
        time_ms: float,
        unit_id: str,
        base: str,
        damage: int,
        base_hp_after: int,
    ) -> GameEvent:
        """Loguje uderzenie jednostki w bazę."""
        return self.log_event(
            tick, time_ms,
            EventType.BASE_HIT,
            unit_id=unit_id,
            base=base,
            damage=damage,
            base_hp_after=base_hp_after,
        )

    def log_gold_change(
        self,
        tick: int,
        time_ms: float,
        reason: str,
        delta: int,
        gold: int,
    ) -> GameEvent:
        """Loguje zmianę złota."""
        return self.log_event(
            tick, time_ms,
            EventType.GOLD_CHANGE,
            reason=reason,
            delta=delta,
            gold=gold,
        )

    def log_deploy(
        self,
        tick: int,
        time_ms: float,
        unit_id: str,
        unit_type: str,
        correct: bool,
    ) -> GameEvent:
        """Loguje wystawienie jednostki gracza."""
        return self.log_event(
            tick, time_ms,
            EventType.DEPLOY,
            unit_id=unit_id,
            unit_type=unit_type,
            correct=correct,
        )

    def log_deploy_rejected(
        self,
        tick: int,
        time_ms: float,
        unit_type: str,
        reason: str,
    ) -> GameEvent:
        """Loguje odrzucenie deployu."""
        return self.log_event(
            tick, time_ms,
            EventType.DEPLOY_REJECTED,
            unit_type=unit_type,
            reason=reason,
        )

    def log_quiz_requested(
        self,
        tick: int,
        time_ms: float,
        token: str,
        unit_type: str,
        expires_at_ms: float,
    ) -> GameEvent:
        """Loguje wydanie biletu quizu."""
        return self.log_event(
            tick, time_ms,
            EventType.QUIZ_REQUESTED,
            token=token,
            unit_type=unit_type,
            expires_at_ms=expires_at_ms,
        )

    def log_quiz_resolved(
        self,
        tick: int,
        time_ms: float,
        token: str,
        unit_type: str,
        correct: bool,
        outcome: str,
    ) -> GameEvent:
        """Loguje rozstrzygnięcie quizu."""
        return self.log_event(
            tick, time_ms,
            EventType.QUIZ_RESOLVED,
            token=token,
            unit_type=unit_type,
            correct=correct,
            outcome=outcome,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # SERIALIZACJA
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """Serializuje cały log do słownika."""
        return {
            "metadata": self.metadata,
            "initial_state": self.initial_state,
            "events": [e.to_dict() for e in self.events],
            "final_state": self.final_state,
        }

    def save(self, filepath: str) -> None:
        """
        Zapisuje log do pliku JSON.

        Args:
            filepath: Ścieżka do pliku (katalogi tworzone automatycznie)
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Zwraca log jako string JSON."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    # ─────────────────────────────────────────────────────────────────────────
    # ZAPYTANIA
    # ─────────────────────────────────────────────────────────────────────────

    def get_event_count(self) -> int:
        return len(self.events)

    def get_events_by_type(self, event_type: EventType) -> List[GameEvent]:
        """Filtruje zdarzenia po typie."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_for_unit(self, unit_id: str) -> List[GameEvent]:
        """Filtruje zdarzenia dla jednostki."""
        return [e for e in self.events if e.unit_id == unit_id]

    def since(self, offset: int, limit: int = 500) -> Tuple[List[GameEvent], int]:
        """
        Zwraca wycinek zdarzeń od offsetu (dla pollingu z UI).

        Returns:
            Tuple: (zdarzenia, następny offset)
        """
        offset = max(0, offset)
        chunk = self.events[offset:offset + limit]
        return chunk, offset + len(chunk)
