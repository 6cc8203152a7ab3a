"""
Pipeliner — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Pipeliner.
Erros são tratados como artefatos de domínio e fazem parte do contrato
operacional do grafo, devendo ser:

- explícitos
- serializáveis
- rastreáveis (registrados no Event Log)

Falhas de filesystem durante probing/marcação NÃO abortam a operação:
viram payloads de aviso (ARTIFACT_UNREACHABLE) anexados ao Event Log.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import PipelinerException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PipelineErrorPayload:
    """
    Payload canônico de erro do Pipeliner.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Grafo
GRAPH_UNKNOWN_INDEX = "GRAPH_UNKNOWN_INDEX"
GRAPH_INVALID_STATUS_TRANSITION = "GRAPH_INVALID_STATUS_TRANSITION"
GRAPH_INTERNAL_ERROR = "GRAPH_INTERNAL_ERROR"

# Snapshot
SNAPSHOT_NOT_FOUND = "SNAPSHOT_NOT_FOUND"
SNAPSHOT_MALFORMED = "SNAPSHOT_MALFORMED"
SNAPSHOT_MASK_MISMATCH = "SNAPSHOT_MASK_MISMATCH"

# Filesystem
ARTIFACT_UNREACHABLE = "ARTIFACT_UNREACHABLE"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def artifact_unreachable(
    *,
    path: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    operation: str = "probe",
    hint: str = "Verifique permissões e montagem do filesystem; o artefato é tratado como ausente até o próximo probing.",
) -> PipelineErrorPayload:
    return PipelineErrorPayload(
        type=ARTIFACT_UNREACHABLE,
        message="Artefato inacessível no filesystem",
        details={
            "path": path,
            "operation": operation,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def exception_to_error(exc: BaseException) -> PipelineErrorPayload:
    """Converte exceções em PipelineErrorPayload (serializável, acionável).

    Regras:
    - PipelinerException: já vem com code/message/details/hint.
    - Outras exceções: encapsular como GRAPH_INTERNAL_ERROR sem expor stack trace.
    """
    if isinstance(exc, PipelinerException):
        return PipelineErrorPayload(
            type=exc.code,
            message=exc.message,
            details=dict(exc.details),
            hint=exc.hint,
        )

    return PipelineErrorPayload(
        type=GRAPH_INTERNAL_ERROR,
        message="Falha inesperada no grafo do pipeline",
        details={
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        },
        hint="Verifique o stacktrace; nenhum estado parcial é aplicado automaticamente.",
    )
