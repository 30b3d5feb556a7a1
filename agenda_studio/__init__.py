"""Agenda Studio: motor de agendamento para estúdios."""

__version__ = "1.0.0"
