# tests/core/graph/test_registry.py
"""
Testes dos registries indexados (NodeRegistry, ProcessRegistry).

Os testes asseguram que:
- Nodes são deduplicados por nome (primeiro registro vence)
- Processes com nome duplicado são tolerados, salvo `overwrite`
- registros armazenados nunca carregam arestas recebidas de fora
- remoção deixa tombstone e não desloca índices
- índices inválidos levantam UnknownIndex; lookups por nome retornam NOT_FOUND
"""

import pytest

from pipeliner.core.exceptions import UnknownIndex
from pipeliner.core.graph.registry import NodeRegistry, ProcessRegistry
from pipeliner.core.graph.types import NOT_FOUND, Node, NodeKind, Process, ProcessKind, ProcessStatus


def _process(name: str, status: ProcessStatus = ProcessStatus.RUNNING) -> Process:
    return Process(name, ProcessKind.IMPORT, status)


def test_register_same_name_twice_returns_same_index():
    nodes = NodeRegistry()
    first = nodes.register_or_find(Node("micrographs.star", NodeKind.MICROGRAPH))
    second = nodes.register_or_find(Node("micrographs.star", NodeKind.MASK))

    assert first == second == 0
    assert nodes.slot_count == 1
    # o kind do primeiro registro vence
    assert nodes.get(first).kind == NodeKind.MICROGRAPH


def test_registered_node_is_a_fresh_record_without_edges():
    """
    Arestas só são criadas pelo controlador: consumers/producer passados
    pelo chamador são descartados no registro.
    """
    nodes = NodeRegistry()
    incoming = Node("ctf.star", NodeKind.MICROGRAPH, consumers=[7, 8], producer=3)

    index = nodes.register_or_find(incoming)
    stored = nodes.get(index)

    assert stored is not incoming
    assert stored.consumers == []
    assert stored.producer is None


def test_find_by_name():
    nodes = NodeRegistry()
    nodes.register_or_find(Node("a.star", NodeKind.MOVIE))
    nodes.register_or_find(Node("b.star", NodeKind.MOVIE))

    assert nodes.find_by_name("b.star") == 1
    assert nodes.find_by_name("missing.star") == NOT_FOUND


def test_process_duplicates_are_tolerated_without_overwrite():
    processes = ProcessRegistry()
    a = processes.append(_process("Import/job001"))
    b = processes.append(_process("Import/job001"))

    assert (a, b) == (0, 1)
    assert processes.find_by_name("Import/job001") == 0
    assert len(processes) == 2


def test_process_overwrite_replaces_in_place():
    processes = ProcessRegistry()
    processes.append(_process("Import/job001"))
    processes.append(_process("CtfFind/job002"))

    index = processes.append(_process("Import/job001", ProcessStatus.SCHEDULED), overwrite=True)

    assert index == 0
    assert processes.slot_count == 2
    assert processes.get(0).status == ProcessStatus.SCHEDULED


def test_process_overwrite_without_match_appends():
    processes = ProcessRegistry()
    processes.append(_process("Import/job001"))
    assert processes.append(_process("Sort/job002"), overwrite=True) == 1


def test_remove_leaves_tombstone_and_keeps_indices():
    nodes = NodeRegistry()
    for name in ("a.star", "b.star", "c.star"):
        nodes.register_or_find(Node(name, NodeKind.MOVIE))

    removed = nodes.remove(1)

    assert removed.name == "b.star"
    assert nodes.slot_count == 3
    assert len(nodes) == 2
    assert not nodes.is_live(1)
    assert nodes.get(2).name == "c.star"
    assert [i for i, _ in nodes.items()] == [0, 2]
    assert nodes.find_by_name("b.star") == NOT_FOUND

    # índice removido nunca é reutilizado
    assert nodes.register_or_find(Node("b.star", NodeKind.MOVIE)) == 3


@pytest.mark.parametrize("index", [-1, 5])
def test_get_unknown_index_raises(index):
    processes = ProcessRegistry()
    processes.append(_process("Import/job001"))

    with pytest.raises(UnknownIndex) as exc_info:
        processes.get(index)

    assert exc_info.value.details["kind"] == "process"
    assert exc_info.value.code == "GRAPH_UNKNOWN_INDEX"


def test_get_tombstone_raises():
    processes = ProcessRegistry()
    processes.append(_process("Import/job001"))
    processes.remove(0)

    with pytest.raises(UnknownIndex):
        processes.get(0)


def test_from_slots_preserves_tombstones():
    table = NodeRegistry.from_slots([Node("a.star", NodeKind.MOVIE), None])
    assert table.slot_count == 2
    assert len(table) == 1
    assert table.slots()[1] is None
