"""
Główny silnik meczu na torze.

Mecz toczy się na wirtualnym zegarze (Scheduler). Niezależne
kadencje to osobne timery na tym samym zegarze:

    combat_tick  co tick_ms (16 ms)  -> pętla walki
    gold         co 1000 ms          -> dochód pasywny
    countdown    co 1000 ms          -> zegar meczu
    quiz_expiry  jednorazowo         -> quiz bez odpowiedzi

PĘTLA TICKA WALKI:
═══════════════════════════════════════════════════════════════════

    0. GAME_OVER?
       ─────────────────────────────────────────────────────────
       • Po końcu meczu tick nic nie robi

    1. CLEANUP
       ─────────────────────────────────────────────────────────
       • Usuń jednostki z HP <= 0 (zabite w poprzednim ticku)
       • Loguj UNIT_DESTROYED

    2. COMBAT
       ─────────────────────────────────────────────────────────
       • Dla każdej jednostki (kolejność wystawienia):
         - Odśwież cel (tylko gdy brak / martwy / poza zasięgiem)
         - Cel w zasięgu -> atak (jeśli minął cooldown)
         - Brak celu     -> ruch w stronę bazy wroga
         - Dotarcie do bazy -> BASE_HIT, jednostka zużyta
       • Jednostka zabita w tym ticku i tak wykonuje swój atak
         (wzajemne zabójstwa), ale już się nie rusza
       • Zużyte jednostki znikają na końcu fazy

    3. CHECK_END
       ─────────────────────────────────────────────────────────
       • player_base <= 0 -> wygrywa przeciwnik (sprawdzane pierwsze)
       • enemy_base <= 0 -> wygrywa gracz

    4. EMIT
       ─────────────────────────────────────────────────────────
       • MatchSnapshot do listenerów

DEPLOY:
═══════════════════════════════════════════════════════════════════

    request_deploy(type) -> QuizTicket   (pytanie dla gracza)
    resolve_quiz(token, correct)         -> deploy_unit(type, correct)
    cancel_quiz(token) / upływ czasu     -> deploy_unit(type, False)

    deploy_unit() pobiera koszt, nalicza nagrodę/karę, wystawia
    jednostkę gracza i jedną losową jednostkę przeciwnika.

DETERMINIZM:
═══════════════════════════════════════════════════════════════════

    • Ten sam seed + ta sama sekwencja wywołań = ten sam mecz
    • ID jednostek i tokeny quizu są numerowane, nie losowe
    • Pytania losowane z osobnego forka RNG

Przykład użycia:
    >>> sim = Simulation.from_loader(ConfigLoader(), seed=12345)
    >>> ticket = sim.request_deploy("knight")
    >>> sim.resolve_quiz(ticket.token, correct=True)
    True
    >>> _ = sim.advance(5000)
    >>> result = sim.run()
    >>> result.score in (0, 100)
    True
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..core.config_loader import ConfigLoader
from ..core.rng import GameRNG
from ..core.scheduler import Scheduler, Timer
from ..core.targeting import resolve_target
from ..combat.attack import attack
from ..combat.movement import advance as move_unit, reached_base
from ..events.event_logger import EventLogger, EventType, GameEvent
from ..quiz.quiz_bank import QuizBank
from ..quiz.tickets import QuizTicket, TicketStatus
from ..units.factory import create_unit
from ..units.unit import Team, Unit
from ..units.unit_type import UnitRegistry, UnitTypeConfig
from .economy import Economy, EconomyConfig
from .enemy_ai import EnemySpawner
from .match_state import EndReason, MatchResult, MatchSnapshot, MatchState, Winner


Listener = Callable[[Optional[GameEvent], MatchSnapshot], None]
GameOverHook = Callable[[MatchResult], None]


@dataclass
class MatchConfig:
    """
    Konfiguracja meczu.

    Attributes:
        tick_ms (int): Kadencja pętli walki
        range_scale (float): Piksele toru na jednostkę zasięgu
        attack_cooldown_ms (float): Przerwa między atakami
        base_proximity (float): Odległość od bazy, przy której jednostka uderza
        lane_length (float): Długość toru (dla prezentacji)
        player_base_x / enemy_base_x (float): Pozycje baz
        player_spawn_x / enemy_spawn_x (float): Pozycje spawnu
        match_duration_seconds (int): Długość meczu
        base_max_health (int): Startowe HP baz
        gold_interval_ms (float): Co ile dochód pasywny
        countdown_interval_ms (float): Co ile zegar spada o 1s
        quiz_timer_seconds (int): Czas na odpowiedź
        pause_timer_during_quiz (bool): Zegar meczu stoi, gdy quiz czeka
        enemy_weak_chance (float): Szansa na słabego przeciwnika
        economy (EconomyConfig): Stałe ekonomii
    """
    tick_ms: int = 16
    range_scale: float = 60.0
    attack_cooldown_ms: float = 1000.0
    base_proximity: float = 30.0
    lane_length: float = 3200.0
    player_base_x: float = 40.0
    enemy_base_x: float = 3160.0
    player_spawn_x: float = 200.0
    enemy_spawn_x: float = 3000.0
    match_duration_seconds: int = 240
    base_max_health: int = 100
    gold_interval_ms: float = 1000.0
    countdown_interval_ms: float = 1000.0
    quiz_timer_seconds: int = 10
    pause_timer_during_quiz: bool = False
    enemy_weak_chance: float = 0.3
    economy: EconomyConfig = field(default_factory=EconomyConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchConfig":
        """
        Tworzy konfigurację z defaults.yaml (ConfigLoader.get_defaults()).

        Nieznane klucze są ignorowane, brakujące biorą wartości domyślne.
        """
        sim = data.get("simulation", {}) or {}
        battle = data.get("battle", {}) or {}
        enemy_ai = data.get("enemy_ai", {}) or {}
        quiz = data.get("quiz", {}) or {}
        defaults = cls()

        minutes = battle.get("match_duration_minutes")
        duration = int(minutes * 60) if minutes is not None else defaults.match_duration_seconds

        return cls(
            tick_ms=int(sim.get("tick_ms", defaults.tick_ms)),
            range_scale=float(sim.get("range_scale", defaults.range_scale)),
            attack_cooldown_ms=float(sim.get("attack_cooldown_ms", defaults.attack_cooldown_ms)),
            base_proximity=float(sim.get("base_proximity", defaults.base_proximity)),
            lane_length=float(sim.get("lane_length", defaults.lane_length)),
            player_base_x=float(sim.get("player_base_x", defaults.player_base_x)),
            enemy_base_x=float(sim.get("enemy_base_x", defaults.enemy_base_x)),
            player_spawn_x=float(sim.get("player_spawn_x", defaults.player_spawn_x)),
            enemy_spawn_x=float(sim.get("enemy_spawn_x", defaults.enemy_spawn_x)),
            match_duration_seconds=duration,
            base_max_health=int(battle.get("base_max_health", defaults.base_max_health)),
            quiz_timer_seconds=int(quiz.get("timer_seconds", defaults.quiz_timer_seconds)),
            pause_timer_during_quiz=bool(
                sim.get("pause_timer_during_quiz", defaults.pause_timer_during_quiz)
            ),
            enemy_weak_chance=float(enemy_ai.get("weak_chance", defaults.enemy_weak_chance)),
            economy=EconomyConfig.from_dict(data.get("economy")),
        )


class Simulation:
    """
    Orkiestrator meczu.

    Jedyny właściciel jednostek i stanu meczu. Wszystkie zmiany
    dzieją się w callbackach timerów albo w jawnych akcjach gracza
    (deploy, quiz) - nigdy równolegle.

    Attributes:
        seed (int): Ziarno losowości
        tick (int): Liczba wykonanych ticków walki
        config (MatchConfig): Konfiguracja
        registry (UnitRegistry): Typy jednostek
        state (MatchState): Stan meczu
        units (List[Unit]): Jednostki na torze (kolejność wystawienia)
        scheduler (Scheduler): Wirtualny zegar
        rng (GameRNG): Generator meczu
        logger (EventLogger): Logger zdarzeń
        pending_quiz (Optional[QuizTicket]): Quiz czekający na odpowiedź
    """

    def __init__(
        self,
        seed: int = 0,
        config: Optional[MatchConfig] = None,
        registry: Optional[UnitRegistry] = None,
        quiz_bank: Optional[QuizBank] = None,
        loader: Optional[ConfigLoader] = None,
    ):
        """
        Inicjalizuje mecz (timery startują przy start()).

        Args:
            seed: Ziarno losowości (determinizm)
            config: Konfiguracja (domyślne wartości jeśli None)
            registry: Typy jednostek (z units.yaml jeśli None)
            quiz_bank: Bank pytań (z quiz.yaml jeśli None)
            loader: Loader danych dla brakujących komponentów
        """
        if registry is None or quiz_bank is None:
            loader = loader or ConfigLoader()

        self.seed = seed
        self.config = config or MatchConfig()
        self.registry = registry or UnitRegistry.from_loader(loader)
        self.quiz_bank = quiz_bank if quiz_bank is not None else QuizBank.from_loader(loader)
        self.tick = 0

        # Komponenty
        self.scheduler = Scheduler()
        self.rng = GameRNG(seed)
        self._quiz_rng = self.rng.fork()
        self.logger = EventLogger(
            seed=seed,
            tick_ms=self.config.tick_ms,
            lane_length=self.config.lane_length,
        )
        self.economy = Economy(self.config.economy)
        self.enemy_spawner = EnemySpawner(
            registry=self.registry,
            rng=self.rng,
            weak_chance=self.config.enemy_weak_chance,
        )

        # Stan
        self.state = MatchState.initial(
            start_gold=self.config.economy.start_gold,
            base_max_health=self.config.base_max_health,
            match_duration_seconds=self.config.match_duration_seconds,
        )
        self.units: List[Unit] = []
        self.is_started = False
        self._unit_seq = 0

        # Quiz
        self.pending_quiz: Optional[QuizTicket] = None
        self.tickets: Dict[str, QuizTicket] = {}
        self._quiz_seq = 0
        self._quiz_timer: Optional[Timer] = None

        # Obserwatorzy
        self._listeners: List[Listener] = []
        self._game_over_hooks: List[GameOverHook] = []
        self._result: Optional[MatchResult] = None

    @classmethod
    def from_loader(cls, loader: ConfigLoader, seed: int = 0) -> "Simulation":
        """Tworzy mecz w całości z plików YAML."""
        return cls(
            seed=seed,
            config=MatchConfig.from_dict(loader.get_defaults()),
            registry=UnitRegistry.from_loader(loader),
            quiz_bank=QuizBank.from_loader(loader),
            loader=loader,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # ZEGAR I START
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def now_ms(self) -> float:
        return self.scheduler.now_ms

    @property
    def is_game_over(self) -> bool:
        return self.state.is_game_over

    def start(self) -> None:
        """Rejestruje timery meczu. Kolejne wywołania nic nie robią."""
        if self.is_started:
            return
        self.is_started = True

        # Kolejność rejestracji = kolejność przy równym czasie
        self.scheduler.every(self.config.tick_ms, self._on_combat_tick, name="combat_tick")
        self.scheduler.every(self.config.gold_interval_ms, self._on_gold_tick, name="gold")
        self.scheduler.every(self.config.countdown_interval_ms, self._on_countdown_tick, name="countdown")

        event = self.logger.log_match_start(self.tick, self.now_ms, self.state.to_dict())
        self._emit(event)

    def advance(self, delta_ms: float) -> MatchSnapshot:
        """
        Przesuwa mecz o delta_ms i wykonuje wszystkie należne timery.

        Returns:
            MatchSnapshot: Stan po przesunięciu
        """
        self.start()
        self.scheduler.advance(delta_ms)
        self._sync_clock()
        return self.snapshot()

    def run(self, max_ms: Optional[float] = None, step_ms: float = 1000.0) -> Optional[MatchResult]:
        """
        Przewija mecz do końca (bez interakcji gracza).

        Args:
            max_ms: Limit czasu meczu (domyślnie długość meczu + 1s)
            step_ms: Krok przesuwania zegara

        Returns:
            Optional[MatchResult]: Wynik lub None jeśli limit minął przed końcem
        """
        if max_ms is None:
            max_ms = self.config.match_duration_seconds * 1000 + self.config.countdown_interval_ms

        self.start()
        while not self.is_game_over and self.now_ms < max_ms:
            self.advance(min(step_ms, max_ms - self.now_ms))

        return self.get_result()

    def _sync_clock(self) -> None:
        if not self.state.is_game_over:
            self.state.elapsed_ms = self.now_ms

    # ─────────────────────────────────────────────────────────────────────────
    # TIMERY
    # ─────────────────────────────────────────────────────────────────────────

    def _on_combat_tick(self) -> None:
        """Jeden tick walki."""
        if self.state.is_game_over:
            return

        self.tick += 1
        self._sync_clock()

        # 1. Cleanup
        self._phase_cleanup()

        # 2. Cele, ataki, ruch
        self._phase_combat()

        # 3. Koniec meczu?
        self._phase_check_end()

        # 4. Snapshot
        self._emit(None)

    def _on_gold_tick(self) -> None:
        if self.state.is_game_over:
            return
        self._sync_clock()

        gained = self.economy.accrue(self.state)
        event = self.logger.log_gold_change(
            self.tick, self.now_ms, "income", gained, self.state.player_gold,
        )
        self._emit(event)

    def _on_countdown_tick(self) -> None:
        if self.state.is_game_over:
            return
        self._sync_clock()

        if self.config.pause_timer_during_quiz and self.pending_quiz is not None:
            return

        self.state.match_time_left = max(0, self.state.match_time_left - 1)
        event = self.logger.log_event(
            self.tick, self.now_ms, EventType.TIMER_TICK,
            time_left=self.state.match_time_left,
        )
        self._emit(event)

        if self.state.match_time_left <= 0:
            self._resolve_time_expired()

    def _on_quiz_expired(self, token: str) -> None:
        if self.state.is_game_over:
            return
        self._sync_clock()
        self._settle_quiz(token, TicketStatus.EXPIRED, correct=False)

    # ─────────────────────────────────────────────────────────────────────────
    # FAZY TICKA
    # ─────────────────────────────────────────────────────────────────────────

    def _phase_cleanup(self) -> None:
        """Faza 1: Usunięcie jednostek zabitych w poprzednim ticku."""
        dead = [u for u in self.units if u.is_dead()]
        if not dead:
            return

        self.units = [u for u in self.units if not u.is_dead()]
        for unit in dead:
            event = self.logger.log_destroyed(self.tick, self.now_ms, unit.id, unit.team.value)
            self._emit(event)

    def _phase_combat(self) -> None:
        """Faza 2: Cel -> atak albo ruch, dla każdej jednostki."""
        units_by_id = {u.id: u for u in self.units}

        for unit in list(self.units):
            if unit.consumed:
                continue

            previous_target = unit.target_id
            target = resolve_target(unit, units_by_id, self.config.range_scale)

            if target is not None:
                if unit.target_id != previous_target:
                    self.logger.log_target_acquired(self.tick, self.now_ms, unit.id, target.id)
                self._execute_attack(unit, target)
                continue

            # Zabity w tym ticku nie idzie dalej
            if unit.is_dead():
                continue

            self._execute_move(unit)

        self.units = [u for u in self.units if not u.consumed]

    def _phase_check_end(self) -> None:
        """Faza 3: Zniszczenie baz."""
        player_down = self.state.player_base_health <= 0
        enemy_down = self.state.enemy_base_health <= 0

        # Baza gracza sprawdzana pierwsza
        if player_down:
            winner = Winner.ENEMY
        elif enemy_down:
            winner = Winner.PLAYER
        else:
            return

        self.end_match(winner, EndReason.BASE_DESTROYED)

    def _resolve_time_expired(self) -> None:
        """Koniec czasu: wygrywa baza z większym HP, równe = remis."""
        player_hp = self.state.player_base_health
        enemy_hp = self.state.enemy_base_health

        if player_hp > enemy_hp:
            winner = Winner.PLAYER
        elif enemy_hp > player_hp:
            winner = Winner.ENEMY
        else:
            winner = Winner.DRAW

        self.end_match(winner, EndReason.TIME_EXPIRED)

    # ─────────────────────────────────────────────────────────────────────────
    # AKCJE JEDNOSTEK
    # ─────────────────────────────────────────────────────────────────────────

    def _execute_attack(self, unit: Unit, target: Unit) -> None:
        if not attack(unit, target, self.now_ms, self.config.attack_cooldown_ms):
            return

        event = self.logger.log_attack(
            self.tick, self.now_ms,
            unit.id, target.id,
            damage=unit.dps,
            hp_after=target.current_health,
        )
        self._emit(event)

    def _execute_move(self, unit: Unit) -> None:
        move_unit(unit, self.config.tick_ms)

        base_x = self.config.enemy_base_x if unit.team is Team.PLAYER else self.config.player_base_x
        if reached_base(unit, base_x, self.config.base_proximity):
            self._hit_base(unit)

    def _hit_base(self, unit: Unit) -> None:
        """Jednostka uderza w bazę wroga i znika z toru."""
        unit.consumed = True
        unit.clear_target()

        base_team = unit.team.opponent.value
        hp_after = self.state.damage_base(base_team, unit.dps)

        event = self.logger.log_base_hit(
            self.tick, self.now_ms,
            unit.id, base_team,
            damage=unit.dps,
            base_hp_after=hp_after,
        )
        self._emit(event)

    # ─────────────────────────────────────────────────────────────────────────
    # JEDNOSTKI
    # ─────────────────────────────────────────────────────────────────────────

    def spawn_unit(
        self,
        type_config: UnitTypeConfig,
        team: Team,
        wrong_answer: bool = False,
        x: Optional[float] = None,
    ) -> Unit:
        """
        Tworzy jednostkę i dodaje ją do toru.

        Args:
            type_config: Typ jednostki
            team: Strona
            wrong_answer: Czy zastosować modyfikatory złej odpowiedzi
            x: Pozycja (domyślnie punkt spawnu strony)

        Returns:
            Unit: Nowa jednostka
        """
        if x is None:
            x = self.config.player_spawn_x if team is Team.PLAYER else self.config.enemy_spawn_x

        self._unit_seq += 1
        unit = create_unit(
            type_config,
            x=x,
            team=team,
            wrong_answer=wrong_answer,
            unit_id=f"{type_config.id}_{team.value}_{self._unit_seq}",
        )
        self.units.append(unit)

        event = self.logger.log_spawn(self.tick, self.now_ms, unit.to_snapshot())
        self._emit(event)
        return unit

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return next((u for u in self.units if u.id == unit_id), None)

    def get_units(self, team: Optional[Team] = None) -> List[Unit]:
        """Jednostki na torze (opcjonalnie jednej strony)."""
        if team is None:
            return list(self.units)
        return [u for u in self.units if u.team is team]

    # ─────────────────────────────────────────────────────────────────────────
    # DEPLOY
    # ─────────────────────────────────────────────────────────────────────────

    def deploy_unit(self, unit_type_id: str, quiz_was_correct: bool) -> Optional[Unit]:
        """
        Wystawia jednostkę gracza po rozstrzygniętym quizie.

        Odrzucenie (None, bez zmian stanu): koniec meczu, nieznany typ,
        za mało złota.

        Args:
            unit_type_id: Typ jednostki
            quiz_was_correct: Wynik quizu

        Returns:
            Optional[Unit]: Wystawiona jednostka gracza
        """
        self.start()

        type_config = self._check_deploy(unit_type_id)
        if type_config is None:
            return None

        self.economy.spend(self.state, type_config.cost)
        self.logger.log_gold_change(
            self.tick, self.now_ms, "deploy_cost", -type_config.cost, self.state.player_gold,
        )

        delta = self.economy.apply_quiz_outcome(self.state, quiz_was_correct)
        self.logger.log_gold_change(
            self.tick, self.now_ms,
            "quiz_bonus" if quiz_was_correct else "quiz_penalty",
            delta, self.state.player_gold,
        )

        unit = self.spawn_unit(type_config, Team.PLAYER, wrong_answer=not quiz_was_correct)
        event = self.logger.log_deploy(
            self.tick, self.now_ms, unit.id, type_config.id, quiz_was_correct,
        )
        self._emit(event)

        self._spawn_enemy_response()
        return unit

    def _check_deploy(self, unit_type_id: str) -> Optional[UnitTypeConfig]:
        """Warunki deployu. Zwraca typ lub None (i loguje odrzucenie)."""
        reason = None
        type_config = self.registry.get(unit_type_id)

        if self.state.is_game_over:
            reason = "game_over"
        elif type_config is None:
            reason = "unknown_unit"
        elif not self.economy.can_afford(self.state, type_config.cost):
            reason = "insufficient_gold"

        if reason is not None:
            self.logger.log_deploy_rejected(self.tick, self.now_ms, unit_type_id, reason)
            return None
        return type_config

    def _spawn_enemy_response(self) -> Unit:
        """Przeciwnik odpowiada jedną losową jednostką."""
        unit_type, is_weak = self.enemy_spawner.pick()
        return self.spawn_unit(unit_type, Team.ENEMY, wrong_answer=is_weak)

    # ─────────────────────────────────────────────────────────────────────────
    # QUIZ
    # ─────────────────────────────────────────────────────────────────────────

    def request_deploy(self, unit_type_id: str) -> Optional[QuizTicket]:
        """
        Rozpoczyna deploy: wydaje bilet quizu.

        Odrzucenie (None): koniec meczu, quiz już czeka,
        nieznany typ, za mało złota.

        Returns:
            Optional[QuizTicket]: Bilet do rozstrzygnięcia
        """
        self.start()

        if self.pending_quiz is not None:
            self.logger.log_deploy_rejected(self.tick, self.now_ms, unit_type_id, "quiz_pending")
            return None

        type_config = self._check_deploy(unit_type_id)
        if type_config is None:
            return None

        question = self.quiz_bank.pick(type_config.subject, self._quiz_rng)

        self._quiz_seq += 1
        token = f"quiz_{self._quiz_seq}"
        delay_ms = self.config.quiz_timer_seconds * 1000
        ticket = QuizTicket(
            token=token,
            unit_type_id=type_config.id,
            issued_ms=self.now_ms,
            expires_ms=self.now_ms + delay_ms,
            question=question.to_public_dict() if question else None,
            question_id=question.id if question else None,
        )
        self.pending_quiz = ticket
        self.tickets[token] = ticket
        self._quiz_timer = self.scheduler.after(
            delay_ms, lambda: self._on_quiz_expired(token), name="quiz_expiry",
        )

        event = self.logger.log_quiz_requested(
            self.tick, self.now_ms, token, type_config.id, ticket.expires_ms,
        )
        self._emit(event)
        return ticket

    def resolve_quiz(self, token: str, correct: bool) -> bool:
        """
        Rozstrzyga oczekujący quiz i wykonuje deploy.

        Returns:
            bool: False dla nieznanego lub już rozstrzygniętego tokena
        """
        return self._settle_quiz(token, TicketStatus.ANSWERED, correct=bool(correct))

    def answer_quiz(self, token: str, answer: Any) -> Optional[bool]:
        """
        Sprawdza odpowiedź w banku pytań i rozstrzyga quiz.

        Returns:
            Optional[bool]: Czy odpowiedź poprawna, None dla nieaktualnego tokena
        """
        ticket = self.pending_quiz
        if ticket is None or ticket.token != token or self.state.is_game_over:
            return None

        question = self.quiz_bank.get(ticket.question_id) if ticket.question_id else None
        correct = question.check_answer(answer) if question else False
        self.resolve_quiz(token, correct)
        return correct

    def cancel_quiz(self, token: str) -> bool:
        """Anulowanie liczy się jak zła odpowiedź."""
        return self._settle_quiz(token, TicketStatus.CANCELLED, correct=False)

    def get_ticket(self, token: str) -> Optional[QuizTicket]:
        return self.tickets.get(token)

    def _settle_quiz(self, token: str, status: TicketStatus, correct: bool) -> bool:
        ticket = self.pending_quiz
        if ticket is None or ticket.token != token or self.state.is_game_over:
            return False

        ticket.settle(status, correct)
        self.pending_quiz = None
        if self._quiz_timer is not None:
            self.scheduler.cancel(self._quiz_timer)
            self._quiz_timer = None

        event = self.logger.log_quiz_resolved(
            self.tick, self.now_ms, token, ticket.unit_type_id, correct, status.value,
        )
        self._emit(event)

        unit = self.deploy_unit(ticket.unit_type_id, correct)
        ticket.unit_id = unit.id if unit else None
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # KONIEC MECZU
    # ─────────────────────────────────────────────────────────────────────────

    def end_match(self, winner: Winner, reason: EndReason) -> bool:
        """
        Przechodzi w GAME_OVER i anuluje wszystkie timery.

        Returns:
            bool: False jeśli mecz był już zakończony
        """
        if not self.state.finish(winner, reason):
            return False

        self.scheduler.cancel_all()
        self._quiz_timer = None

        if self.pending_quiz is not None:
            self.pending_quiz.settle(TicketStatus.CANCELLED, False)
            self.pending_quiz = None

        final_state = self.state.to_dict()
        final_state["units"] = [u.to_dict() for u in self.units]
        event = self.logger.log_match_end(
            self.tick, self.now_ms, winner.value, reason.value, final_state,
        )

        self._result = MatchResult.from_state(self.state)
        self._emit(event)

        for hook in list(self._game_over_hooks):
            hook(self._result)
        return True

    def get_result(self) -> Optional[MatchResult]:
        """Wynik meczu (None dopóki mecz trwa)."""
        return self._result

    # ─────────────────────────────────────────────────────────────────────────
    # OBSERWATORZY
    # ─────────────────────────────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Rejestruje listenera (zdarzenie lub None po ticku, snapshot).

        Returns:
            Callable: Funkcja wyrejestrowująca
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def on_game_over(self, hook: GameOverHook) -> None:
        """Rejestruje hook persystencji (wołany raz, z MatchResult)."""
        self._game_over_hooks.append(hook)
        if self._result is not None:
            hook(self._result)

    def snapshot(self) -> MatchSnapshot:
        """Niezmienna kopia aktualnego stanu."""
        return MatchSnapshot.capture(
            self.state,
            tick=self.tick,
            units=tuple(u.to_dict() for u in self.units),
            pending_quiz=self.pending_quiz.token if self.pending_quiz else None,
        )

    def _emit(self, event: Optional[GameEvent]) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(event, snapshot)

    # ─────────────────────────────────────────────────────────────────────────
    # LOG
    # ─────────────────────────────────────────────────────────────────────────

    def save_log(self, filepath: str) -> None:
        """Zapisuje log do pliku JSON."""
        self.logger.save(filepath)

    def get_log(self) -> Dict[str, Any]:
        """Zwraca log jako słownik."""
        return self.logger.to_dict()
