"""
Harmonogram timerów na wirtualnym zegarze meczu.

Mecz ma kilka niezależnych kadencji:

    ┌────────────────────┬───────────┬──────────────────────────────┐
    │ Timer              │ Interwał  │ Efekt                        │
    ├────────────────────┼───────────┼──────────────────────────────┤
    │ combat_tick        │ 16 ms     │ pętla walki (cleanup/atak)   │
    │ gold               │ 1000 ms   │ +gold_per_second             │
    │ countdown          │ 1000 ms   │ match_time_left -= 1         │
    │ quiz_expiry        │ 1 raz     │ quiz bez odpowiedzi = błąd   │
    └────────────────────┴───────────┴──────────────────────────────┘

Wszystkie timery żyją na JEDNYM zegarze (now_ms) i są wykonywane
jeden po drugim - callback zawsze kończy się przed następnym.
Nie ma wątków, więc stan meczu nigdy nie jest modyfikowany równolegle.

KOLEJNOŚĆ:
═══════════════════════════════════════════════════════════════════

    • Timery odpalają w kolejności czasu (due_ms)
    • Przy równym due_ms decyduje kolejność rejestracji
    • Timer okresowy po odpaleniu wraca na kopiec z due_ms += interval
    • Anulowany timer nigdy więcej nie odpali (także w trakcie advance)

Przykład:
    >>> scheduler = Scheduler()
    >>> hits = []
    >>> _ = scheduler.every(1000, lambda: hits.append(scheduler.now_ms), name="gold")
    >>> scheduler.advance(2500)
    2
    >>> hits
    [1000, 2000]
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional
import heapq
import itertools


@dataclass
class Timer:
    """
    Pojedynczy timer w harmonogramie.

    Attributes:
        name (str): Nazwa (do debugowania i logów)
        callback (Callable): Funkcja bez argumentów
        due_ms (float): Czas następnego odpalenia
        interval_ms (Optional[float]): Interwał (None = jednorazowy)
        seq (int): Kolejność rejestracji (tie-break)
        cancelled (bool): Czy timer został anulowany
        fire_count (int): Ile razy odpalił
    """
    name: str
    callback: Callable[[], None] = field(repr=False)
    due_ms: float
    interval_ms: Optional[float] = None
    seq: int = 0
    cancelled: bool = False
    fire_count: int = 0

    @property
    def is_periodic(self) -> bool:
        return self.interval_ms is not None

    def cancel(self) -> None:
        """Anuluje timer - nie odpali już nigdy."""
        self.cancelled = True


class Scheduler:
    """
    Wirtualny zegar z kopcem timerów.

    Attributes:
        now_ms (float): Aktualny czas meczu (monotoniczny)
        _heap (List): Kopiec (due_ms, seq, timer)
        _timers (List[Timer]): Timery, które mogą jeszcze odpalić
            (jednorazowe znikają po odpaleniu lub anulowaniu)
    """

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms
        self._heap: List[tuple] = []
        self._timers: List[Timer] = []
        self._counter = itertools.count()

    # ─────────────────────────────────────────────────────────────────────────
    # REJESTRACJA
    # ─────────────────────────────────────────────────────────────────────────

    def every(
        self,
        interval_ms: float,
        callback: Callable[[], None],
        name: str = "timer",
    ) -> Timer:
        """
        Rejestruje timer okresowy.

        Pierwsze odpalenie następuje po pełnym interwale.

        Raises:
            ValueError: Jeśli interval_ms <= 0
        """
        if interval_ms <= 0:
            raise ValueError(f"Timer '{name}' needs a positive interval, got {interval_ms}")
        return self._register(name, callback, self.now_ms + interval_ms, interval_ms)

    def after(
        self,
        delay_ms: float,
        callback: Callable[[], None],
        name: str = "timer",
    ) -> Timer:
        """Rejestruje timer jednorazowy (odpala po delay_ms)."""
        return self._register(name, callback, self.now_ms + max(0.0, delay_ms), None)

    def _register(
        self,
        name: str,
        callback: Callable[[], None],
        due_ms: float,
        interval_ms: Optional[float],
    ) -> Timer:
        timer = Timer(
            name=name,
            callback=callback,
            due_ms=due_ms,
            interval_ms=interval_ms,
            seq=next(self._counter),
        )
        self._timers.append(timer)
        heapq.heappush(self._heap, (timer.due_ms, timer.seq, timer))
        return timer

    # ─────────────────────────────────────────────────────────────────────────
    # UPŁYW CZASU
    # ─────────────────────────────────────────────────────────────────────────

    def advance(self, delta_ms: float) -> int:
        """
        Przesuwa zegar o delta_ms i odpala wszystkie należne timery.

        Każdy callback widzi now_ms równe swojemu due_ms.

        Args:
            delta_ms: O ile przesunąć zegar (ujemne = 0)

        Returns:
            int: Liczba odpalonych callbacków
        """
        target = self.now_ms + max(0.0, delta_ms)
        fired = 0

        while self._heap and self._heap[0][0] <= target:
            due_ms, _, timer = heapq.heappop(self._heap)
            if timer.cancelled:
                self._forget(timer)
                continue

            self.now_ms = due_ms
            timer.fire_count += 1
            timer.callback()
            fired += 1

            if timer.is_periodic and not timer.cancelled:
                timer.due_ms = due_ms + timer.interval_ms
                heapq.heappush(self._heap, (timer.due_ms, timer.seq, timer))
            else:
                self._forget(timer)

        self.now_ms = target
        return fired

    def cancel(self, timer: Timer) -> None:
        """Anuluje timer i od razu usuwa go z harmonogramu."""
        timer.cancel()
        self._heap = [entry for entry in self._heap if entry[2] is not timer]
        heapq.heapify(self._heap)
        self._forget(timer)

    def cancel_all(self) -> None:
        """Anuluje wszystkie timery (koniec meczu)."""
        for timer in self._timers:
            timer.cancel()
        self._heap.clear()
        self._timers.clear()

    def _forget(self, timer: Timer) -> None:
        self._timers = [t for t in self._timers if t is not timer]

    def active_timers(self) -> List[Timer]:
        """Zwraca timery, które jeszcze mogą odpalić."""
        return [
            t for t in self._timers
            if not t.cancelled and (t.is_periodic or t.fire_count == 0)
        ]

    def __len__(self) -> int:
        """Liczba timerów trzymanych w harmonogramie."""
        return len(self._timers)

    def __repr__(self) -> str:
        return f"Scheduler(now_ms={self.now_ms}, active={len(self.active_timers())})"
