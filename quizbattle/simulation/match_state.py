"""
Stan meczu i jego niezmienne migawki.

MatchState jest jedną instancją na mecz, należy wyłącznie do
Simulation i jest modyfikowany tylko przez jej fazy/timery.

Przejścia stanu:
═══════════════════════════════════════════════════════════════════

    RUNNING ──(baza <= 0 / zegar = 0)──> GAME_OVER

    GAME_OVER jest terminalny: żadna operacja nie zmienia już
    złota, HP baz ani zegara.

Rozstrzygnięcie:
─────────────────────────────────────────────────────────────────
Przyczyna        | Warunek                        | Zwycięzca
─────────────────────────────────────────────────────────────────
base_destroyed   | enemy_base <= 0                | player
base_destroyed   | player_base <= 0               | enemy
base_destroyed   | obie bazy <= 0 w jednym ticku  | draw
time_expired     | player_base > enemy_base       | player
time_expired     | player_base < enemy_base       | enemy
time_expired     | równe HP baz                   | draw
─────────────────────────────────────────────────────────────────
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Winner(Enum):
    """Wynik meczu."""

    PLAYER = "player"
    ENEMY = "enemy"
    DRAW = "draw"

    def __str__(self) -> str:
        return self.value


class EndReason(Enum):
    """Przyczyna końca meczu."""

    BASE_DESTROYED = "base_destroyed"
    TIME_EXPIRED = "time_expired"

    def __str__(self) -> str:
        return self.value


@dataclass
class MatchState:
    """
    Mutowalny stan meczu.

    Attributes:
        player_gold (int): Złoto gracza, zawsze >= 0
        player_base_health (int): HP bazy gracza, klamp do 0
        enemy_base_health (int): HP bazy przeciwnika, klamp do 0
        base_max_health (int): Startowe HP obu baz
        match_time_left (int): Pozostałe sekundy meczu
        is_game_over (bool): Flaga jednokierunkowa
        winner (Optional[Winner]): Ustawiany tylko przy końcu meczu
        end_reason (Optional[EndReason]): Przyczyna końca
        elapsed_ms (float): Czas meczu w ms (zegar symulacji)
    """
    player_gold: int
    player_base_health: int
    enemy_base_health: int
    base_max_health: int
    match_time_left: int
    is_game_over: bool = False
    winner: Optional[Winner] = None
    end_reason: Optional[EndReason] = None
    elapsed_ms: float = 0.0

    @classmethod
    def initial(
        cls,
        start_gold: int,
        base_max_health: int,
        match_duration_seconds: int,
    ) -> "MatchState":
        """Stan na początku meczu: pełne bazy, pełny zegar."""
        return cls(
            player_gold=start_gold,
            player_base_health=base_max_health,
            enemy_base_health=base_max_health,
            base_max_health=base_max_health,
            match_time_left=match_duration_seconds,
        )

    def damage_base(self, base_team: str, amount: int) -> int:
        """
        Zadaje obrażenia bazie (tylko w dół, klamp do 0).

        Args:
            base_team: "player" lub "enemy" - czyja baza
            amount: Obrażenia

        Returns:
            int: HP bazy po uderzeniu
        """
        amount = max(0, int(amount))
        if base_team == "player":
            self.player_base_health = max(0, self.player_base_health - amount)
            return self.player_base_health
        self.enemy_base_health = max(0, self.enemy_base_health - amount)
        return self.enemy_base_health

    def finish(self, winner: Winner, reason: EndReason) -> bool:
        """
        Przechodzi w GAME_OVER.

        Returns:
            bool: False jeśli mecz był już zakończony (brak zmian)
        """
        if self.is_game_over:
            return False
        self.is_game_over = True
        self.winner = winner
        self.end_reason = reason
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_gold": self.player_gold,
            "player_base_health": self.player_base_health,
            "enemy_base_health": self.enemy_base_health,
            "base_max_health": self.base_max_health,
            "match_time_left": self.match_time_left,
            "is_game_over": self.is_game_over,
            "winner": self.winner.value if self.winner else None,
            "end_reason": self.end_reason.value if self.end_reason else None,
            "elapsed_ms": round(self.elapsed_ms, 1),
        }


@dataclass(frozen=True)
class MatchSnapshot:
    """
    Niezmienna kopia stanu dla listenerów i warstwy prezentacji.

    Listener nigdy nie dostaje referencji do żywych jednostek -
    `units` to świeżo zbudowane słowniki.
    """
    tick: int
    time_ms: float
    player_gold: int
    player_base_health: int
    enemy_base_health: int
    base_max_health: int
    match_time_left: int
    is_game_over: bool
    winner: Optional[str]
    end_reason: Optional[str]
    units: Tuple[Dict[str, Any], ...] = ()
    pending_quiz: Optional[str] = None

    @classmethod
    def capture(
        cls,
        state: MatchState,
        tick: int,
        units: Tuple[Dict[str, Any], ...] = (),
        pending_quiz: Optional[str] = None,
    ) -> "MatchSnapshot":
        return cls(
            tick=tick,
            time_ms=state.elapsed_ms,
            player_gold=state.player_gold,
            player_base_health=state.player_base_health,
            enemy_base_health=state.enemy_base_health,
            base_max_health=state.base_max_health,
            match_time_left=state.match_time_left,
            is_game_over=state.is_game_over,
            winner=state.winner.value if state.winner else None,
            end_reason=state.end_reason.value if state.end_reason else None,
            units=tuple(units),
            pending_quiz=pending_quiz,
        )

    def unit_count(self, team: str) -> int:
        return sum(1 for u in self.units if u["team"] == team)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "time_ms": round(self.time_ms, 1),
            "player_gold": self.player_gold,
            "player_base_health": self.player_base_health,
            "enemy_base_health": self.enemy_base_health,
            "base_max_health": self.base_max_health,
            "match_time_left": self.match_time_left,
            "is_game_over": self.is_game_over,
            "winner": self.winner,
            "end_reason": self.end_reason,
            "units": [dict(u) for u in self.units],
            "pending_quiz": self.pending_quiz,
        }


@dataclass(frozen=True)
class MatchResult:
    """
    Wynik meczu przekazywany warstwie persystencji.

    Rdzeń niczego nie zapisuje - przekazuje MatchResult
    zarejestrowanym hookom game-over.

    Attributes:
        won (bool): Czy wygrał gracz
        winner (str): player / enemy / draw
        score (int): 100 za wygraną, inaczej 0
        game_data (Dict): HP baz i pozostały czas
    """
    won: bool
    winner: str
    score: int
    end_reason: Optional[str] = None
    game_data: Dict[str, Any] = field(default_factory=dict)

    WIN_SCORE = 100

    @classmethod
    def from_state(cls, state: MatchState) -> "MatchResult":
        """
        Buduje wynik z zakończonego stanu.

        Raises:
            ValueError: Jeśli mecz jeszcze trwa
        """
        if not state.is_game_over or state.winner is None:
            raise ValueError("Match is still running")

        won = state.winner is Winner.PLAYER
        return cls(
            won=won,
            winner=state.winner.value,
            score=cls.WIN_SCORE if won else 0,
            end_reason=state.end_reason.value if state.end_reason else None,
            game_data={
                "player_base_hp": state.player_base_health,
                "enemy_base_hp": state.enemy_base_health,
                "match_time_left": state.match_time_left,
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "won": self.won,
            "winner": self.winner,
            "score": self.score,
            "end_reason": self.end_reason,
            "game_data": dict(self.game_data),
        }
