"""
Bank pytań quizu ładowany z quiz.yaml.

Każdy typ jednostki ma przedmiot (subject). Przy deployu losowane
jest pytanie z tego przedmiotu; jeśli przedmiot nie ma pytań,
losowanie idzie z całego banku.

Sprawdzanie odpowiedzi:
─────────────────────────────────────────────────────────────────
Oczekiwana     | Porównanie
─────────────────────────────────────────────────────────────────
liczba (8)     | numerycznie: "8", "8.0", 8 -> poprawne
tekst          | bez wielkości liter i białych znaków na brzegach
─────────────────────────────────────────────────────────────────
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.config_loader import ConfigLoader
from ..core.rng import GameRNG


@dataclass(frozen=True)
class QuizQuestion:
    """Pojedyncze pytanie z banku."""

    id: str
    subject: str
    question: str
    answer: Any
    difficulty: str = "easy"
    options: List[str] = field(default_factory=list)
    explanation: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizQuestion":
        return cls(
            id=str(data["id"]),
            subject=data.get("subject", "math"),
            question=data["question"],
            answer=data["answer"],
            difficulty=data.get("difficulty", "easy"),
            options=list(data.get("options") or []),
            explanation=data.get("explanation"),
        )

    def check_answer(self, given: Any) -> bool:
        """Sprawdza odpowiedź gracza."""
        if given is None:
            return False

        if isinstance(self.answer, (int, float)) and not isinstance(self.answer, bool):
            try:
                return float(str(given).strip()) == float(self.answer)
            except ValueError:
                return False

        return str(given).strip().lower() == str(self.answer).strip().lower()

    def to_public_dict(self) -> Dict[str, Any]:
        """Pytanie bez odpowiedzi (dla UI)."""
        result = {
            "id": self.id,
            "subject": self.subject,
            "difficulty": self.difficulty,
            "question": self.question,
        }
        if self.options:
            result["options"] = list(self.options)
        return result


class QuizBank:
    """
    Kolekcja pytań pogrupowanych po przedmiocie.

    Example:
        >>> bank = QuizBank.from_loader(ConfigLoader())
        >>> q = bank.pick("math", rng)
        >>> q.check_answer("8")
        True
    """

    def __init__(self, questions: List[QuizQuestion]):
        self.questions = list(questions)
        self._by_id = {q.id: q for q in self.questions}

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> "QuizBank":
        return cls([QuizQuestion.from_dict(q) for q in loader.load_quiz_questions()])

    def get(self, question_id: str) -> Optional[QuizQuestion]:
        return self._by_id.get(question_id)

    def for_subject(self, subject: str) -> List[QuizQuestion]:
        return [q for q in self.questions if q.subject == subject]

    def subjects(self) -> List[str]:
        return sorted({q.subject for q in self.questions})

    def pick(self, subject: str, rng: GameRNG) -> Optional[QuizQuestion]:
        """
        Losuje pytanie z przedmiotu.

        Returns:
            Optional[QuizQuestion]: None tylko dla pustego banku
        """
        pool = self.for_subject(subject) or self.questions
        if not pool:
            return None
        return rng.choice(pool)

    def __len__(self) -> int:
        return len(self.questions)
