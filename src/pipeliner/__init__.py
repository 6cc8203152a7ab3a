# src/pipeliner/__init__.py
"""
Pipeliner — grafo persistido de dependências entre artefatos e jobs.

Este pacote raiz define o namespace público do Pipeliner, que rastreia
um workflow de processamento de imagens em lote como um grafo bipartido:
artefatos de dados (Nodes) ligados aos jobs (Processes) que os consomem
e produzem.

Princípios centrais:
    - O grafo é a fonte de verdade sobre "quem produziu o quê"
    - Referências cruzadas são índices estáveis, nunca ponteiros
    - A conclusão de jobs é detectada por probing do filesystem
    - Toda mutação é registrada no Event Log

Arquitetura em alto nível:
    - core.graph        → tipos, registries, probing e marcadores
    - core.pipeline     → controlador `PipeLine` (dono do grafo)
    - core.persistence  → snapshot STAR do grafo
    - core.config       → carregamento, merge e hashing de configuração
    - core.traceability → Event Log

Limites explícitos:
    - Não executa jobs nem os agenda
    - Não contém UI
"""

from .core.pipeline import PipeLine
from .core.graph.types import NOT_FOUND, Node, NodeKind, Process, ProcessKind, ProcessStatus

__all__ = [
    "PipeLine",
    "NOT_FOUND",
    "Node",
    "NodeKind",
    "Process",
    "ProcessKind",
    "ProcessStatus",
]
