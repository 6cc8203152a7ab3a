# src/pipeliner/core/traceability/event_log.py
"""
Event Log v1 — rastreabilidade das mutações do grafo do Pipeliner.

Este módulo define a estrutura e as operações canônicas do Event Log,
o registro ordenado de tudo o que acontece com um `PipeLine` durante
uma sessão: Nodes registrados, Processes adicionados ou removidos,
transições de status detectadas por probing, avisos de filesystem e
leituras/escritas de snapshot.

O Event Log consolida:
    - metadados da sessão (nome do pipeline, criação, hash da configuração)
    - eventos estruturados (nível, tipo, mensagem, timestamp, campos extras)
    - avisos não fatais (ex.: producer sobrescrito, artefato inacessível)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico
    - A ordem dos eventos reflete a ordem de chamada
    - Nenhum evento é emitido implicitamente pelo Event Log em si

Limites explícitos:
    - Não decide políticas do grafo
    - Não realiza migração de versões de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


@dataclass
class EventLog:
    """
    Event Log v1 — registro estruturado de uma sessão do grafo.

    Campos principais:
        - pipeline: metadados da sessão (name, created_at, config_hash)
        - events: lista ordenada de eventos estruturados
        - warnings: mensagens de aviso, na ordem em que ocorreram

    Invariantes:
        - `events` é sempre uma lista ordenada
        - Todo evento possui `level`, `event_type`, `message` e `timestamp`
        - Todo aviso também é registrado como evento de nível WARNING
    """

    pipeline: Dict[str, Any]
    events: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def log(
        self,
        *,
        event_type: str,
        message: str,
        level: str = "INFO",
        ts: Optional[datetime] = None,
        **extra: Any,
    ) -> Dict[str, Any]:
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")

        event: Dict[str, Any] = {
            "level": level,
            "event_type": event_type,
            "message": message,
            "timestamp": _iso(ts or datetime.now(timezone.utc)),
        }
        event.update(extra)
        self.events.append(event)
        return event

    def add_warning(self, *, event_type: str, message: str, **extra: Any) -> Dict[str, Any]:
        self.warnings.append(message)
        return self.log(event_type=event_type, message=message, level="WARNING", **extra)

    def of_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["event_type"] == event_type]

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return {
            "pipeline": dict(self.pipeline),
            "events": [dict(e) for e in self.events],
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EventLog":
        """Reconstrução permissiva: campos ausentes viram coleções vazias."""
        return cls(
            pipeline=dict(data.get("pipeline", {})),
            events=[dict(e) for e in (data.get("events", []) or [])],
            warnings=list(data.get("warnings", []) or []),
        )


def create_event_log(
    *,
    pipeline_name: str,
    created_at: Optional[datetime] = None,
    config_hash: Optional[str] = None,
) -> EventLog:
    """
    Cria o Event Log inicial de uma sessão.

    ⚠️ Importante: esta função **não emite eventos implicitamente**.
    A lista de eventos inicia vazia.

    Args:
        pipeline_name (str): Rótulo do pipeline.
        created_at (Optional[datetime]): Início da sessão (default: agora, UTC).
        config_hash (Optional[str]): Hash da configuração efetiva, se houver.

    Returns:
        EventLog: Instância inicializada.
    """
    return EventLog(
        pipeline={
            "name": pipeline_name,
            "created_at": _iso(created_at or datetime.now(timezone.utc)),
            "config_hash": config_hash,
        },
    )


def save_event_log(event_log: EventLog, path: Path) -> None:
    """
    Persiste o Event Log em JSON determinístico (`sort_keys=True`).

    Diretórios intermediários são criados automaticamente.

    Raises:
        OSError: Em caso de falha ao criar diretórios ou escrever o arquivo.
        TypeError: Se algum campo extra de evento não for serializável.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(event_log.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_event_log(path: Path) -> EventLog:
    data = json.loads(path.read_text(encoding="utf-8"))
    return EventLog.from_dict(data)
