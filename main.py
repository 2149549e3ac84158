#!/usr/bin/env python3
"""
Quiz Battle - Entry Point
═══════════════════════════════════════════════════════════════════════════

Rozgrywa bezgłowy mecz: bot gracza co kilka sekund wystawia losową
jednostkę, na którą go stać, i odpowiada na quiz poprawnie
z zadanym prawdopodobieństwem.

Użycie:
    python main.py                          # Domyślny seed
    python main.py --seed 12345             # Konkretny seed
    python main.py --accuracy 0.5           # Słabszy "uczeń"
    python main.py --deploy-every 5         # Deploy co 5 sekund
    python main.py --verbose                # Przebieg meczu na konsolę

Wynik:
    - Wypisuje wynik meczu na konsolę
    - Zapisuje pełny log do output/match_{seed}.json
"""

import argparse
import sys
from typing import Optional

from quizbattle.core.config_loader import ConfigLoader
from quizbattle.core.rng import GameRNG
from quizbattle.events.event_logger import EventType, GameEvent
from quizbattle.simulation.match_state import MatchSnapshot
from quizbattle.simulation.simulation import Simulation


# Zdarzenia wypisywane w trybie --verbose
VERBOSE_EVENTS = {
    EventType.DEPLOY,
    EventType.UNIT_SPAWN,
    EventType.UNIT_DESTROYED,
    EventType.BASE_HIT,
    EventType.QUIZ_RESOLVED,
    EventType.MATCH_END,
}


def print_event(event: Optional[GameEvent], snapshot: MatchSnapshot) -> None:
    """Listener meczu dla trybu --verbose."""
    if event is None or event.event_type not in VERBOSE_EVENTS:
        return

    seconds = event.time_ms / 1000
    details = ", ".join(f"{k}={v}" for k, v in event.data.items() if k != "unit")
    subject = event.unit_id or ""
    print(f"  [{seconds:6.1f}s] {event.event_type.name:<15} {subject} {details}")


def play_turn(sim: Simulation, bot_rng: GameRNG, accuracy: float) -> None:
    """Bot wybiera jednostkę i odpowiada na quiz."""
    affordable = [t for t in sim.registry if t.cost <= sim.state.player_gold]
    if not affordable:
        return

    unit_type = bot_rng.choice(affordable)
    ticket = sim.request_deploy(unit_type.id)
    if ticket is None:
        return

    sim.resolve_quiz(ticket.token, bot_rng.roll_chance(accuracy))


def main():
    """Główna funkcja."""
    parser = argparse.ArgumentParser(
        description="Quiz Battle - headless match",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=12345,
        help="Ziarno losowości (domyślnie: 12345)"
    )
    parser.add_argument(
        "--accuracy",
        type=float,
        default=0.7,
        help="Szansa poprawnej odpowiedzi bota (domyślnie: 0.7)"
    )
    parser.add_argument(
        "--deploy-every",
        type=float,
        default=8.0,
        help="Co ile sekund bot próbuje wystawić jednostkę (domyślnie: 8)"
    )
    parser.add_argument(
        "--data",
        default=None,
        help="Katalog z plikami YAML (domyślnie: data/)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Szczegółowy output"
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Nie zapisuj logu do pliku"
    )

    args = parser.parse_args()

    if not 0.0 <= args.accuracy <= 1.0:
        parser.error("--accuracy must be between 0 and 1")
    if args.deploy_every <= 0:
        parser.error("--deploy-every must be positive")

    print("=" * 60)
    print("QUIZ BATTLE")
    print("=" * 60)
    print(f"Seed: {args.seed}")
    print(f"Celność bota: {args.accuracy:.0%}, deploy co {args.deploy_every:g}s")
    print()

    # Załaduj konfigurację
    loader = ConfigLoader(args.data)
    sim = Simulation.from_loader(loader, seed=args.seed)
    bot_rng = GameRNG(args.seed).fork()

    print("Jednostki:")
    for unit_type in sim.registry:
        print(f"  - {unit_type.name} ({unit_type.subject}): "
              f"{unit_type.base_health} HP, {unit_type.base_dps} DPS, {unit_type.cost}g")

    print()
    print("-" * 60)
    print("ROZPOCZYNAM MECZ...")
    print("-" * 60)

    if args.verbose:
        sim.subscribe(print_event)

    # Główna pętla bota
    sim.start()
    step_ms = args.deploy_every * 1000
    while not sim.is_game_over:
        play_turn(sim, bot_rng, args.accuracy)
        sim.advance(step_ms)

    result = sim.get_result()

    # Wyniki
    print()
    print("=" * 60)
    print("WYNIKI")
    print("=" * 60)

    if result.winner == "player":
        print("🏆 ZWYCIĘSTWO GRACZA")
    elif result.winner == "enemy":
        print("💀 PORAŻKA")
    else:
        print("🤝 REMIS!")

    print(f"Powód: {result.end_reason}")
    print(f"Wynik: {result.score}")
    print(f"Baza gracza: {result.game_data['player_base_hp']} HP, "
          f"baza wroga: {result.game_data['enemy_base_hp']} HP")
    print(f"Czas meczu: {sim.state.elapsed_ms / 1000:.1f}s ({sim.tick} ticks), "
          f"pozostało {result.game_data['match_time_left']}s")

    # Zapisz log
    if not args.no_save:
        output_path = f"output/match_{args.seed}.json"
        sim.save_log(output_path)
        print()
        print(f"📄 Log zapisany: {output_path}")

    # Verbose: pokaż statystyki
    if args.verbose:
        print()
        print("-" * 60)
        print("STATYSTYKI ZDARZEŃ")
        print("-" * 60)

        for event_type in EventType:
            count = len(sim.logger.get_events_by_type(event_type))
            if count > 0:
                print(f"  {event_type.name}: {count}")

    print()
    print("Mecz zakończony!")

    return 0


if __name__ == "__main__":
    sys.exit(main())
