"""
Motor de Agendamento

Lógica de negócio da agenda do estúdio:
- Agenda semanal e aplicação em dias úteis (schedule.py)
- Geração da grade de horários (grid.py)
- Bloqueios de data/horário (blocked.py)
- Ocupação, conflitos e pré-visualização (occupancy.py)
- Ciclo de vida do status do agendamento (lifecycle.py)
- Fluxo de agendamento em passos (flow.py)
- Filtros e contagens da lista de agendamentos (listing.py)
"""
