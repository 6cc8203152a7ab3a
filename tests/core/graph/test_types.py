# tests/core/graph/test_types.py
"""
Testes dos tipos canônicos do grafo (enums, Node, Process).

Os testes asseguram que:
- enums possuem valores textuais estáveis (persistidos no snapshot)
- a tabela de transições de status é respeitada
- FINALMAP e RESMAP não são aceitos como input
- cada ProcessKind mapeia para um diretório de jobs
"""

import pytest

try:
    from pipeliner.core.graph.types import (
        NOT_FOUND,
        Node,
        NodeKind,
        Process,
        ProcessKind,
        ProcessStatus,
    )
except Exception as e:  # noqa: BLE001
    NOT_FOUND = None
    Node = None
    NodeKind = None
    Process = None
    ProcessKind = None
    ProcessStatus = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing graph types. Implement:\n"
            "- src/pipeliner/core/graph/types.py (NodeKind, ProcessKind, ProcessStatus, Node, Process)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_not_found_sentinel_is_minus_one():
    _require_imports()
    assert NOT_FOUND == -1


def test_status_values_are_canonical():
    _require_imports()
    assert {s.value for s in ProcessStatus} == {"running", "scheduled", "finished", "cancelled"}
    assert ProcessStatus("running") is ProcessStatus.RUNNING


def test_status_transition_table():
    """
    Verifica a tabela de transições.

    Invariantes:
        - RUNNING → FINISHED | CANCELLED
        - SCHEDULED → RUNNING | FINISHED | CANCELLED
        - FINISHED e CANCELLED são terminais
    """
    _require_imports()
    assert ProcessStatus.RUNNING.can_become(ProcessStatus.FINISHED)
    assert ProcessStatus.RUNNING.can_become(ProcessStatus.CANCELLED)
    assert not ProcessStatus.RUNNING.can_become(ProcessStatus.SCHEDULED)

    assert ProcessStatus.SCHEDULED.can_become(ProcessStatus.RUNNING)
    assert ProcessStatus.SCHEDULED.can_become(ProcessStatus.FINISHED)

    assert ProcessStatus.FINISHED.is_terminal
    assert ProcessStatus.CANCELLED.is_terminal
    assert not ProcessStatus.RUNNING.is_terminal
    assert not ProcessStatus.FINISHED.can_become(ProcessStatus.RUNNING)


def test_final_and_resolution_maps_are_not_inputs():
    _require_imports()
    assert not NodeKind.FINALMAP.accepts_as_input
    assert not NodeKind.RESMAP.accepts_as_input
    assert NodeKind.MICROGRAPH.accepts_as_input
    assert NodeKind.HALFMAP.accepts_as_input


def test_every_process_kind_has_a_directory():
    _require_imports()
    for kind in ProcessKind:
        assert kind.directory
    assert ProcessKind.CTFFIND.directory == "CtfFind"
    assert ProcessKind.CLASSSELECT.directory == "Select"


def test_new_node_is_an_import():
    _require_imports()
    node = Node("movies.star", NodeKind.MOVIE)
    assert node.is_import
    assert node.consumers == []

    node.producer = 0
    assert not node.is_import


def test_process_edge_lists_are_independent():
    """Listas default não são compartilhadas entre instâncias."""
    _require_imports()
    a = Process("Import/job001", ProcessKind.IMPORT, ProcessStatus.RUNNING)
    b = Process("Import/job002", ProcessKind.IMPORT, ProcessStatus.RUNNING)
    a.outputs.append(0)
    assert b.outputs == []
