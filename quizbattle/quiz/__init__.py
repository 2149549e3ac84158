"""
Quiz module - pytania i bilety deployu.

Zawiera:
- QuizBank / QuizQuestion: Bank pytań z quiz.yaml
- QuizTicket / TicketStatus: Oczekujący quiz przed wystawieniem jednostki
"""

from .quiz_bank import QuizBank, QuizQuestion
from .tickets import QuizTicket, TicketStatus

__all__ = ["QuizBank", "QuizQuestion", "QuizTicket", "TicketStatus"]
