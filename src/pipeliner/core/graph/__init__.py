# src/pipeliner/core/graph/__init__.py
"""
Estruturas do grafo do Pipeliner.

Componentes:
    - types    → NodeKind, ProcessKind, ProcessStatus, Node, Process, NOT_FOUND
    - registry → NodeRegistry (deduplicado por nome) e ProcessRegistry
    - probe    → verificação de existência de artefatos (completude de jobs)
    - markers  → arquivos marcadores zero-byte por Node

Invariantes:
    - Índices de registros nunca são reutilizados dentro da sessão
    - Nenhum componente deste pacote mantém simetria de arestas
      (responsabilidade do `PipeLine`)
"""

from .registry import NodeRegistry, ProcessRegistry
from .types import NOT_FOUND, Node, NodeKind, Process, ProcessKind, ProcessStatus

__all__ = [
    "NodeRegistry",
    "ProcessRegistry",
    "NOT_FOUND",
    "Node",
    "NodeKind",
    "Process",
    "ProcessKind",
    "ProcessStatus",
]
