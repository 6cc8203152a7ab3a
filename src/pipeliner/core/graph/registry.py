# src/pipeliner/core/graph/registry.py
"""
Registros indexados de Nodes e Processes.

Este módulo define as duas tabelas co-indexadas do grafo:

    - NodeRegistry    → artefatos deduplicados por nome
    - ProcessRegistry → jobs, com duplicatas de nome toleradas

Ambas são coleções append-only de slots. A deleção é lógica: o slot
passa a conter um tombstone (`None`) e o índice nunca é reutilizado
dentro da sessão, mantendo válidas as referências cruzadas por índice.

Decisões arquiteturais:
    - Lookups por nome retornam o sentinela NOT_FOUND em vez de levantar
    - Desreferenciar um índice inválido levanta `UnknownIndex`
    - Os registros armazenados nunca carregam arestas recebidas de fora;
      arestas são criadas exclusivamente pelo PipeLine

Invariantes:
    - Índices são estáveis: `remove` não desloca nenhum outro registro
    - `find_by_name` devolve a primeira ocorrência em ordem de inserção

Limites explícitos:
    - Não mantém simetria entre Nodes e Processes
    - Não acessa o filesystem
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterator, List, Optional, Tuple, TypeVar

from pipeliner.core.exceptions import UnknownIndex

from .types import NOT_FOUND, Node, Process


T = TypeVar("T", Node, Process)


@dataclass
class _SlotTable(Generic[T]):
    _slots: List[Optional[T]] = field(default_factory=list, init=False, repr=False)

    label = "record"

    @classmethod
    def from_slots(cls, slots: List[Optional[T]]):
        """Reconstrói a tabela a partir de slots (tombstones preservados)."""
        table = cls()
        table._slots = list(slots)
        return table

    @property
    def slot_count(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return sum(1 for s in self._slots if s is not None)

    def is_live(self, index: int) -> bool:
        return 0 <= index < len(self._slots) and self._slots[index] is not None

    def get(self, index: int) -> T:
        if not self.is_live(index):
            raise UnknownIndex(
                message=f"Unknown {self.label} index: {index}",
                details={"kind": self.label, "index": index, "slot_count": len(self._slots)},
                hint="O índice está fora do intervalo ou o registro foi removido.",
            )
        return self._slots[index]

    def items(self) -> Iterator[Tuple[int, T]]:
        for index, record in enumerate(self._slots):
            if record is not None:
                yield index, record

    def find_by_name(self, name: str) -> int:
        for index, record in self.items():
            if record.name == name:
                return index
        return NOT_FOUND

    def remove(self, index: int) -> T:
        record = self.get(index)
        self._slots[index] = None
        return record

    def slots(self) -> List[Optional[T]]:
        return list(self._slots)

    def _append(self, record: T) -> int:
        self._slots.append(record)
        return len(self._slots) - 1


@dataclass
class NodeRegistry(_SlotTable[Node]):
    """
    Tabela de Nodes deduplicada por nome.

    `register_or_find` é o único caminho de deduplicação: chamadores nunca
    devem assumir que dois Nodes com o mesmo nome são objetos distintos.
    """

    label = "node"

    def register_or_find(self, node: Node) -> int:
        existing = self.find_by_name(node.name)
        if existing != NOT_FOUND:
            return existing
        return self._append(Node(name=node.name, kind=node.kind))


@dataclass
class ProcessRegistry(_SlotTable[Process]):
    """Tabela de Processes; nomes duplicados são tolerados salvo `overwrite`."""

    label = "process"

    def append(self, process: Process, overwrite: bool = False) -> int:
        record = Process(name=process.name, kind=process.kind, status=process.status)

        if overwrite:
            existing = self.find_by_name(process.name)
            if existing != NOT_FOUND:
                self._slots[existing] = record
                return existing

        return self._append(record)
