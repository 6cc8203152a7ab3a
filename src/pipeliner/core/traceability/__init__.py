# src/pipeliner/core/traceability/__init__.py
"""
Pacote de rastreabilidade (traceability) do Pipeliner — Event Log v1.

API pública exposta:
    - EventLog          → estrutura canônica do Event Log
    - create_event_log  → criação explícita do Event Log de uma sessão
    - save_event_log    → persistência em JSON
    - load_event_log    → restauração determinística

Invariantes:
    - O Event Log inicia com `events` e `warnings` vazios
    - Eventos nunca são reordenados automaticamente
"""

from .event_log import (
    EventLog,
    create_event_log,
    save_event_log,
    load_event_log,
)

__all__ = [
    "EventLog",
    "create_event_log",
    "save_event_log",
    "load_event_log",
]
