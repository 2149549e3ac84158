"""
Bilety quizu - jawna wymiana "zapytaj i rozstrzygnij".

Deploy gracza nie dzieje się natychmiast: Simulation.request_deploy()
wydaje QuizTicket, a wywołujący (UI, API, bot CLI) odpowiada później
przez resolve_quiz(token, correct) albo cancel_quiz(token).
Pętla walki działa dalej, dopóki bilet czeka.

Cykl życia biletu:
═══════════════════════════════════════════════════════════════════

    PENDING ──resolve_quiz(correct)──> ANSWERED
       │
       ├──cancel_quiz()─────────────> CANCELLED   (liczone jako zła)
       │
       └──upływ timer_seconds───────> EXPIRED     (liczone jako zła)

    Stan końcowy jest ostateczny - ponowne rozstrzygnięcie tego
    samego tokena nic nie robi.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class TicketStatus(Enum):
    """Stan biletu quizu."""

    PENDING = "pending"
    ANSWERED = "answered"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


@dataclass
class QuizTicket:
    """
    Oczekujący quiz przed wystawieniem jednostki.

    Attributes:
        token (str): Identyfikator do rozstrzygnięcia
        unit_type_id (str): Typ jednostki do wystawienia
        issued_ms (float): Czas wydania (zegar meczu)
        expires_ms (float): Czas automatycznego wygaśnięcia
        question (Optional[Dict]): Pytanie (bez odpowiedzi) dla UI
        status (TicketStatus): Aktualny stan
        correct (Optional[bool]): Wynik po rozstrzygnięciu
        unit_id (Optional[str]): Jednostka wystawiona po rozstrzygnięciu
    """
    token: str
    unit_type_id: str
    issued_ms: float
    expires_ms: float
    question: Optional[Dict[str, Any]] = None
    status: TicketStatus = TicketStatus.PENDING
    correct: Optional[bool] = None
    question_id: Optional[str] = field(default=None, repr=False)
    unit_id: Optional[str] = None

    def is_pending(self) -> bool:
        return self.status is TicketStatus.PENDING

    def settle(self, status: TicketStatus, correct: bool) -> bool:
        """
        Zamyka bilet.

        Returns:
            bool: False jeśli bilet był już rozstrzygnięty
        """
        if not self.is_pending():
            return False
        self.status = status
        self.correct = correct
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "unit_type": self.unit_type_id,
            "issued_ms": round(self.issued_ms, 1),
            "expires_ms": round(self.expires_ms, 1),
            "status": self.status.value,
            "correct": self.correct,
            "unit_id": self.unit_id,
            "question": self.question,
        }
