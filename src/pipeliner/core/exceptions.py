"""
Pipeliner — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Pipeliner.

Objetivo:
- Permitir que registries, PipeLine e persistência levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para PipelineErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos do grafo

Regras:
- Falhas de lookup por nome NÃO são exceções (retornam o sentinela NOT_FOUND).
- Exceções devem carregar apenas dados estruturados (serializáveis).
- Cada classe declara um `code` estável, espelhado no catálogo de `errors.py`.
- Dataclasses não congeladas: o interpretador precisa atribuir `__traceback__`
  (ex.: ao atravessar um `contextlib.contextmanager`). `eq=False` mantém
  igualdade e hash por identidade, como em qualquer exceção.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(eq=False)
class PipelinerException(Exception):
    """Base class para exceções internas do Pipeliner.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    code = "GRAPH_INTERNAL_ERROR"

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Grafo (registries / controller)
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class UnknownIndex(PipelinerException):
    """Índice fora do intervalo ou apontando para um slot removido."""

    code = "GRAPH_UNKNOWN_INDEX"


@dataclass(eq=False)
class InvalidStatusTransition(PipelinerException):
    """Transição de status não permitida (ex.: finished -> running)."""

    code = "GRAPH_INVALID_STATUS_TRANSITION"


# ---------------------------------------------------------------------------
# Persistência (snapshot STAR)
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class SnapshotNotFound(PipelinerException):
    """Arquivo de snapshot inexistente no caminho solicitado."""

    code = "SNAPSHOT_NOT_FOUND"


@dataclass(eq=False)
class SnapshotMalformed(PipelinerException):
    """Snapshot ilegível: bloco/coluna ausente, valor inválido ou referência pendente."""

    code = "SNAPSHOT_MALFORMED"


@dataclass(eq=False)
class DeletionMaskMismatch(PipelinerException):
    """Máscara de deleção com tamanho diferente do número de slots."""

    code = "SNAPSHOT_MASK_MISMATCH"
