# src/pipeliner/core/persistence/pipeline_store.py
"""Persistência canônica do grafo do pipeline em STAR (v1).

O snapshot é um arquivo STAR legível por humanos com cinco blocos:

- `pipeline_general`       → nome, contador de jobs e número de slots
- `pipeline_processes`     → índice, nome, tipo e status de cada Process
- `pipeline_nodes`         → índice, nome, tipo e producer (`none` se importado)
- `pipeline_input_edges`   → (process, node); a ordem das linhas é a ordem dos inputs
- `pipeline_output_edges`  → (process, node); a ordem das linhas é a ordem dos outputs

Decisões (v1):
- Índices são persistidos explicitamente; slots ausentes viram tombstones
  na leitura, preservando a identidade por índice (round-trip).
- Máscaras de deleção (uma por slot) omitem registros sem mutar o grafo
  em memória. Arestas que tocam registros omitidos são omitidas e um
  producer omitido é escrito como `none`, de modo que o snapshot nunca
  contém referências pendentes.
- `consumers` não é persistido: é reconstruído a partir das arestas de input.
- Leitura é tudo-ou-nada: qualquer inconsistência levanta
  `SnapshotMalformed` antes de qualquer registro ser entregue ao chamador.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from pipeliner.core.exceptions import DeletionMaskMismatch, SnapshotMalformed, SnapshotNotFound
from pipeliner.core.graph.registry import NodeRegistry, ProcessRegistry
from pipeliner.core.graph.types import Node, NodeKind, Process, ProcessKind, ProcessStatus

from .star import Block, read_star, write_star


GENERAL_BLOCK = "pipeline_general"
PROCESSES_BLOCK = "pipeline_processes"
NODES_BLOCK = "pipeline_nodes"
INPUT_EDGES_BLOCK = "pipeline_input_edges"
OUTPUT_EDGES_BLOCK = "pipeline_output_edges"

PROCESS_COLUMNS = [
    "pipelineProcessIndex",
    "pipelineProcessName",
    "pipelineProcessKind",
    "pipelineProcessStatus",
]
NODE_COLUMNS = [
    "pipelineNodeIndex",
    "pipelineNodeName",
    "pipelineNodeKind",
    "pipelineNodeProducer",
]
INPUT_EDGE_COLUMNS = ["pipelineEdgeProcess", "pipelineEdgeFromNode"]
OUTPUT_EDGE_COLUMNS = ["pipelineEdgeProcess", "pipelineEdgeToNode"]

NO_PRODUCER = "none"
SNAPSHOT_HEADER = "pipeliner snapshot v1"


@dataclass
class PipelineSnapshot:
    """Estado persistível do grafo: rótulo, contador de jobs e as duas tabelas."""

    name: str
    job_counter: int
    nodes: NodeRegistry
    processes: ProcessRegistry


# ------------------------------------------------------------------
# Escrita
# ------------------------------------------------------------------

def _mask(mask: Optional[Sequence[bool]], slot_count: int, label: str) -> List[bool]:
    if mask is None:
        return [False] * slot_count
    if len(mask) != slot_count:
        raise DeletionMaskMismatch(
            message=f"Deletion mask for {label}s has {len(mask)} entries, expected {slot_count}",
            details={"kind": label, "mask_length": len(mask), "slot_count": slot_count},
            hint="Forneça exatamente uma entrada por slot (inclusive slots já removidos).",
        )
    return [bool(m) for m in mask]


def snapshot_tables(
    snapshot: PipelineSnapshot,
    *,
    delete_nodes: Optional[Sequence[bool]] = None,
    delete_processes: Optional[Sequence[bool]] = None,
) -> Dict[str, Block]:
    node_mask = _mask(delete_nodes, snapshot.nodes.slot_count, "node")
    process_mask = _mask(delete_processes, snapshot.processes.slot_count, "process")

    processes = [(i, p) for i, p in snapshot.processes.items() if not process_mask[i]]
    nodes = [(i, n) for i, n in snapshot.nodes.items() if not node_mask[i]]
    kept_processes = {i for i, _ in processes}
    kept_nodes = {i for i, _ in nodes}

    def producer_cell(node: Node) -> str:
        if node.producer is None or node.producer not in kept_processes:
            return NO_PRODUCER
        return str(node.producer)

    general = {
        "pipelineName": snapshot.name,
        "pipelineJobCounter": str(snapshot.job_counter),
        "pipelineNodeSlots": str(snapshot.nodes.slot_count),
        "pipelineProcessSlots": str(snapshot.processes.slot_count),
    }

    processes_df = pd.DataFrame(
        [[i, p.name, p.kind.value, p.status.value] for i, p in processes],
        columns=PROCESS_COLUMNS,
    )
    nodes_df = pd.DataFrame(
        [[i, n.name, n.kind.value, producer_cell(n)] for i, n in nodes],
        columns=NODE_COLUMNS,
    )
    inputs_df = pd.DataFrame(
        [[i, n] for i, p in processes for n in p.inputs if n in kept_nodes],
        columns=INPUT_EDGE_COLUMNS,
    )
    outputs_df = pd.DataFrame(
        [[i, n] for i, p in processes for n in p.outputs if n in kept_nodes],
        columns=OUTPUT_EDGE_COLUMNS,
    )

    return {
        GENERAL_BLOCK: general,
        PROCESSES_BLOCK: processes_df,
        NODES_BLOCK: nodes_df,
        INPUT_EDGES_BLOCK: inputs_df,
        OUTPUT_EDGES_BLOCK: outputs_df,
    }


def write_snapshot(
    snapshot: PipelineSnapshot,
    path: Path,
    *,
    delete_nodes: Optional[Sequence[bool]] = None,
    delete_processes: Optional[Sequence[bool]] = None,
) -> None:
    blocks = snapshot_tables(
        snapshot,
        delete_nodes=delete_nodes,
        delete_processes=delete_processes,
    )
    write_star(blocks, path, header=SNAPSHOT_HEADER)


# ------------------------------------------------------------------
# Leitura
# ------------------------------------------------------------------

def _malformed(path: Path, reason: str, **details) -> SnapshotMalformed:
    payload = {"path": str(path), "reason": reason}
    payload.update(details)
    return SnapshotMalformed(
        message=f"Malformed pipeline snapshot {path}: {reason}",
        details=payload,
        hint="Restaure o snapshot a partir de uma cópia válida; o grafo em memória não foi alterado.",
    )


def _table(blocks: Dict[str, Block], name: str, columns: List[str], path: Path) -> pd.DataFrame:
    block = blocks.get(name)
    if not isinstance(block, pd.DataFrame):
        raise _malformed(path, f"missing table block '{name}'", block=name)
    missing = [c for c in columns if c not in block.columns]
    if missing:
        raise _malformed(path, f"block '{name}' lacks columns {missing}", block=name)
    return block


def _ints(table: pd.DataFrame, column: str, path: Path) -> List[int]:
    if table.empty:
        return []
    values = pd.to_numeric(table[column], errors="coerce")
    bad = values.isna() | (values % 1 != 0) | (values < 0)
    if bad.any():
        raw = table[column][bad].iloc[0]
        raise _malformed(path, f"invalid index '{raw}' in column '{column}'", column=column)
    return [int(v) for v in values]


def _int_value(general: Dict[str, str], key: str, path: Path) -> Optional[int]:
    if key not in general:
        return None
    try:
        value = int(general[key])
    except ValueError:
        raise _malformed(path, f"invalid integer '{general[key]}' for '{key}'", block=GENERAL_BLOCK)
    if value < 0:
        raise _malformed(path, f"negative value for '{key}'", block=GENERAL_BLOCK)
    return value


def _enum(cls, raw: str, path: Path, column: str):
    try:
        return cls(raw)
    except ValueError:
        raise _malformed(path, f"unknown {cls.__name__} '{raw}'", column=column)


def _slot_count(indices: List[int], declared: Optional[int], key: str, path: Path) -> int:
    needed = max(indices) + 1 if indices else 0
    if declared is None:
        return needed
    if declared < needed:
        raise _malformed(path, f"'{key}' = {declared} is smaller than the highest index + 1 ({needed})")
    return declared


def read_snapshot(path: Path) -> PipelineSnapshot:
    if not path.exists():
        raise SnapshotNotFound(
            message=f"Pipeline snapshot not found: {path}",
            details={"path": str(path)},
            hint="Escreva o snapshot com PipeLine.write() antes de lê-lo.",
        )

    blocks = read_star(path)

    general = blocks.get(GENERAL_BLOCK)
    if not isinstance(general, dict):
        raise _malformed(path, f"missing key/value block '{GENERAL_BLOCK}'", block=GENERAL_BLOCK)
    if "pipelineName" not in general:
        raise _malformed(path, "missing key 'pipelineName'", block=GENERAL_BLOCK)

    processes_df = _table(blocks, PROCESSES_BLOCK, PROCESS_COLUMNS, path)
    nodes_df = _table(blocks, NODES_BLOCK, NODE_COLUMNS, path)
    inputs_df = _table(blocks, INPUT_EDGES_BLOCK, INPUT_EDGE_COLUMNS, path)
    outputs_df = _table(blocks, OUTPUT_EDGES_BLOCK, OUTPUT_EDGE_COLUMNS, path)

    for table, column in ((processes_df, "pipelineProcessIndex"), (nodes_df, "pipelineNodeIndex")):
        if table[column].duplicated().any():
            raise _malformed(path, f"duplicate index in column '{column}'", column=column)

    # Processes
    process_indices = _ints(processes_df, "pipelineProcessIndex", path)
    process_slots: List[Optional[Process]] = [None] * _slot_count(
        process_indices, _int_value(general, "pipelineProcessSlots", path), "pipelineProcessSlots", path
    )
    for index, name, kind, status in zip(
        process_indices,
        processes_df["pipelineProcessName"],
        processes_df["pipelineProcessKind"],
        processes_df["pipelineProcessStatus"],
    ):
        process_slots[index] = Process(
            name=name,
            kind=_enum(ProcessKind, kind, path, "pipelineProcessKind"),
            status=_enum(ProcessStatus, status, path, "pipelineProcessStatus"),
        )

    def live_process(index: int, column: str) -> Process:
        if index >= len(process_slots) or process_slots[index] is None:
            raise _malformed(path, f"reference to missing process {index}", column=column)
        return process_slots[index]

    # Nodes
    node_indices = _ints(nodes_df, "pipelineNodeIndex", path)
    node_slots: List[Optional[Node]] = [None] * _slot_count(
        node_indices, _int_value(general, "pipelineNodeSlots", path), "pipelineNodeSlots", path
    )
    for index, name, kind, producer in zip(
        node_indices,
        nodes_df["pipelineNodeName"],
        nodes_df["pipelineNodeKind"],
        nodes_df["pipelineNodeProducer"],
    ):
        node = Node(name=name, kind=_enum(NodeKind, kind, path, "pipelineNodeKind"))
        if producer != NO_PRODUCER:
            try:
                node.producer = int(producer)
            except ValueError:
                raise _malformed(path, f"invalid producer '{producer}'", column="pipelineNodeProducer")
            live_process(node.producer, "pipelineNodeProducer")
        node_slots[index] = node

    def live_node(index: int, column: str) -> Node:
        if index >= len(node_slots) or node_slots[index] is None:
            raise _malformed(path, f"reference to missing node {index}", column=column)
        return node_slots[index]

    # Arestas
    for p, n in zip(
        _ints(inputs_df, "pipelineEdgeProcess", path),
        _ints(inputs_df, "pipelineEdgeFromNode", path),
    ):
        process = live_process(p, "pipelineEdgeProcess")
        node = live_node(n, "pipelineEdgeFromNode")
        process.inputs.append(n)
        if p not in node.consumers:
            node.consumers.append(p)

    for p, n in zip(
        _ints(outputs_df, "pipelineEdgeProcess", path),
        _ints(outputs_df, "pipelineEdgeToNode", path),
    ):
        process = live_process(p, "pipelineEdgeProcess")
        live_node(n, "pipelineEdgeToNode")
        process.outputs.append(n)

    job_counter = _int_value(general, "pipelineJobCounter", path)

    return PipelineSnapshot(
        name=general["pipelineName"],
        job_counter=job_counter if job_counter is not None else len(process_indices) + 1,
        nodes=NodeRegistry.from_slots(node_slots),
        processes=ProcessRegistry.from_slots(process_slots),
    )
