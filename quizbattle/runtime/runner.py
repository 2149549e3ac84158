"""
Asynchroniczny driver meczu w czasie rzeczywistym.

Simulation sama nie zna zegara ściennego - MatchRunner co tick_ms
(podzielone przez time_compression) woła simulation.advance(tick_ms).
Akcje gracza (deploy, odpowiedź na quiz) przechodzą przez ten sam
asyncio.Lock, więc nigdy nie przeplatają się z tickiem.

    ┌──────────────┐  advance(tick_ms)  ┌────────────┐
    │ MatchRunner  │ ─────────────────> │ Simulation │
    │ (asyncio)    │ <── snapshot() ─── │            │
    └──────────────┘                    └────────────┘

Pętla kończy się sama, gdy mecz przejdzie w GAME_OVER.
"""

from __future__ import annotations
import asyncio
from typing import Any, Callable, Optional, TypeVar

from ..simulation.match_state import MatchSnapshot
from ..simulation.simulation import Simulation

T = TypeVar("T")


class MatchRunner:
    """
    Asynchroniczny driver: przesuwa Simulation w stałym rytmie.

    Attributes:
        simulation (Simulation): Prowadzony mecz
        tick_ms (int): Krok wirtualnego zegara na obrót pętli
        time_compression (float): Przyspieszenie względem czasu rzeczywistego
        sleep_s (float): Pauza między krokami (zegar ścienny)
    """

    def __init__(
        self,
        simulation: Simulation,
        tick_ms: Optional[int] = None,
        time_compression: float = 1.0,
    ):
        self.simulation = simulation
        self.tick_ms = tick_ms or simulation.config.tick_ms
        self.time_compression = time_compression
        self.sleep_s = (self.tick_ms / 1000.0) / max(0.001, time_compression)
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Uruchamia pętlę ticków. Ponowne wywołanie nic nie robi."""
        if self._task:
            return
        self.simulation.start()
        print(f"[MatchRunner] Starting match seed={self.simulation.seed} "
              f"(tick {self.tick_ms} ms, x{self.time_compression})")
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        """Zatrzymuje pętlę i czeka na jej zakończenie."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def wait(self) -> None:
        """Czeka aż pętla skończy się sama (koniec meczu)."""
        if self._task:
            await self._task

    async def _loop(self) -> None:
        """Główna pętla: advance pod lockiem, koniec przy GAME_OVER."""
        while True:
            async with self._lock:
                self.simulation.advance(self.tick_ms)
                finished = self.simulation.is_game_over

            if finished:
                result = self.simulation.get_result()
                print(f"[MatchRunner] Match over: {result.winner if result else '?'} "
                      f"after {self.simulation.tick} ticks")
                return
            await asyncio.sleep(self.sleep_s)

    async def call(self, action: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Wykonuje akcję gracza między tickami (pod lockiem)."""
        async with self._lock:
            return action(*args, **kwargs)

    async def snapshot(self) -> MatchSnapshot:
        """Zwraca aktualny snapshot meczu (pod lockiem)."""
        async with self._lock:
            return self.simulation.snapshot()

    def set_time_compression(self, time_compression: float) -> None:
        """
        Zmienia przyspieszenie czasu (1.0 = czas rzeczywisty).

        Wartość obcinana do przedziału [0.1, 1000].
        """
        self.time_compression = max(0.1, min(1000.0, time_compression))
        self.sleep_s = (self.tick_ms / 1000.0) / self.time_compression
        print(f"[MatchRunner] Time compression set to {self.time_compression}x "
              f"(sleep: {self.sleep_s:.4f}s)")
