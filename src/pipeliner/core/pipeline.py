# src/pipeliner/core/pipeline.py
"""
Controlador do grafo do pipeline (`PipeLine`).

Este módulo define o `PipeLine`, dono exclusivo das duas tabelas
co-indexadas do grafo (Nodes e Processes). Toda mutação do grafo passa
por ele, o que garante por construção o invariante de simetria:

    - `node.consumers` contém J  ⇔  `processes[J].inputs` contém o índice do Node
    - `node.producer == J`       ⇔  `processes[J].outputs` contém o índice do Node
      (exceto quando um producer é sobrescrito; ver `add_output_edge`)

Responsabilidades do módulo:
    - Adicionar Nodes, Processes e arestas (com deduplicação de Nodes por nome)
    - Remover Processes com cascata de outputs (e, opcionalmente, de jobs downstream)
    - Promover jobs RUNNING → FINISHED por probing do filesystem
    - Escrever marcadores de Nodes para ferramentas de browsing
    - Persistir e restaurar o grafo completo (snapshot STAR)
    - Registrar cada mutação no Event Log

Decisões arquiteturais:
    - Referências cruzadas são índices estáveis; deleção deixa tombstones
    - Lookups por nome retornam NOT_FOUND; índices inválidos levantam UnknownIndex
    - Completude é pull-based: o chamador decide quando chamar o probing
    - Máscaras de deleção são parâmetros explícitos de `write`, nunca estado implícito
    - Não há locking: um único dono muta o grafo

Limites explícitos:
    - Não executa jobs nem os agenda
    - Não move jobs de SCHEDULED para RUNNING por conta própria
    - Não aplica timeouts
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union

from pipeliner.core.config.hashing import compute_config_hash
from pipeliner.core.config.loader import resolve_pipeline_settings
from pipeliner.core.errors import artifact_unreachable, exception_to_error
from pipeliner.core.exceptions import InvalidStatusTransition, PipelinerException
from pipeliner.core.graph import markers, probe
from pipeliner.core.graph.registry import NodeRegistry, ProcessRegistry
from pipeliner.core.graph.types import (
    NOT_FOUND,
    Node,
    Process,
    ProcessKind,
    ProcessStatus,
)
from pipeliner.core.persistence.pipeline_store import (
    PipelineSnapshot,
    read_snapshot,
    write_snapshot,
)
from pipeliner.core.traceability.event_log import EventLog, create_event_log, save_event_log


PathLike = Union[str, Path]


def _masked_count(mask: Optional[Sequence[bool]]) -> int:
    # máscaras podem ser arrays numpy/pandas: sem avaliar a verdade do container
    return 0 if mask is None else sum(bool(m) for m in mask)


class PipeLine:
    """Grafo persistido de Nodes (artefatos) e Processes (jobs)."""

    def __init__(
        self,
        name: str = "default",
        *,
        project_dir: PathLike = ".",
        snapshot_file: PathLike = "default_pipeline.star",
        marker_dir: PathLike = ".Nodes",
        event_log_file: PathLike = ".pipeline_events.json",
        events: Optional[EventLog] = None,
    ):
        self.name = name
        self.project_dir = Path(project_dir)
        self.snapshot_file = Path(snapshot_file)
        self.marker_dir = Path(marker_dir)
        self.event_log_file = Path(event_log_file)
        self.nodes = NodeRegistry()
        self.processes = ProcessRegistry()
        self.job_counter = 1
        self._unreachable: Set[str] = set()
        self.events = events if events is not None else create_event_log(pipeline_name=name)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PipeLine":
        """Constrói a partir da seção `pipeline` (chaves ausentes vêm dos defaults do pacote)."""
        settings = resolve_pipeline_settings(config)
        events = create_event_log(
            pipeline_name=settings["name"],
            config_hash=compute_config_hash(config),
        )
        return cls(
            settings["name"],
            project_dir=settings["project_dir"],
            snapshot_file=settings["snapshot_file"],
            marker_dir=settings["marker_dir"],
            event_log_file=settings["event_log_file"],
            events=events,
        )

    def __repr__(self) -> str:
        return (
            f"PipeLine(name={self.name!r}, nodes={len(self.nodes)}, "
            f"processes={len(self.processes)}, job_counter={self.job_counter})"
        )

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _resolve(self, path: PathLike) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.project_dir / path

    @property
    def snapshot_path(self) -> Path:
        return self._resolve(self.snapshot_file)

    @property
    def marker_root(self) -> Path:
        return self._resolve(self.marker_dir)

    # ------------------------------------------------------------------
    # Identity / lifecycle
    # ------------------------------------------------------------------

    def set_name(self, name: str) -> None:
        self.name = name

    def clear(self) -> None:
        self.nodes = NodeRegistry()
        self.processes = ProcessRegistry()
        self.job_counter = 1
        self._unreachable = set()
        self.events.log(event_type="pipeline_cleared", message=f"Pipeline '{self.name}' cleared")

    def next_process_name(self, kind: ProcessKind) -> str:
        return f"{kind.directory}/job{self.job_counter:03d}"

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_node_by_name(self, name: str) -> int:
        return self.nodes.find_by_name(name)

    def find_process_by_name(self, name: str) -> int:
        return self.processes.find_by_name(name)

    def node(self, index: int) -> Node:
        return self.nodes.get(index)

    def process(self, index: int) -> Process:
        return self.processes.get(index)

    def iter_nodes(self) -> Iterator[Tuple[int, Node]]:
        return self.nodes.items()

    def iter_processes(self) -> Iterator[Tuple[int, Process]]:
        return self.processes.items()

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def add_node(self, node: Node) -> int:
        before = self.nodes.slot_count
        index = self.nodes.register_or_find(node)
        if index >= before:
            self.events.log(
                event_type="node_registered",
                message=f"Node '{node.name}' registered",
                node=index,
                kind=node.kind.value,
            )
        return index

    def add_process(self, process: Process, overwrite: bool = False) -> int:
        """
        Registra um Process sem arestas e devolve seu índice.

        Com `overwrite=True` e um Process vivo de mesmo nome, o registro é
        substituído no mesmo índice; as arestas do registro anterior são
        desligadas primeiro (inputs deixam de listá-lo como consumer, outputs
        cujo producer era ele voltam a ser importações).
        """
        existing = self.processes.find_by_name(process.name) if overwrite else NOT_FOUND
        if existing != NOT_FOUND:
            self._detach_edges(existing)

        index = self.processes.append(process, overwrite=overwrite)

        if existing != NOT_FOUND:
            self.events.log(
                event_type="process_replaced",
                message=f"Process '{process.name}' replaced in place",
                process=index,
            )
        else:
            self.job_counter += 1
            self.events.log(
                event_type="process_added",
                message=f"Process '{process.name}' added",
                process=index,
                kind=process.kind.value,
                status=process.status.value,
            )
        return index

    def _detach_edges(self, index: int) -> None:
        old = self.processes.get(index)
        for n in old.inputs:
            if self.nodes.is_live(n):
                consumers = self.nodes.get(n).consumers
                if index in consumers:
                    consumers.remove(index)
        for n in old.outputs:
            if self.nodes.is_live(n) and self.nodes.get(n).producer == index:
                self.nodes.get(n).producer = None

    def add_input_edge(self, node: Node, process_index: int) -> int:
        process = self.processes.get(process_index)
        index = self.add_node(node)
        stored = self.nodes.get(index)

        if not stored.kind.accepts_as_input:
            self.events.add_warning(
                event_type="input_kind_restricted",
                message=f"Node '{stored.name}' of kind '{stored.kind.value}' is not meant to be used as input",
                node=index,
                process=process_index,
            )

        if process_index not in stored.consumers:
            stored.consumers.append(process_index)
            process.inputs.append(index)
            self.events.log(
                event_type="edge_added",
                message=f"'{stored.name}' -> '{process.name}'",
                direction="input",
                node=index,
                process=process_index,
            )
        return index

    def add_output_edge(self, process_index: int, node: Node) -> int:
        """
        Liga um Node como output de um Process.

        Um producer anterior diferente é sobrescrito (último a escrever vence)
        e o fato é registrado como WARNING `producer_overwritten`; o Process
        anterior mantém o Node em sua lista de outputs.
        """
        process = self.processes.get(process_index)
        index = self.add_node(node)
        stored = self.nodes.get(index)

        previous = stored.producer
        if previous is not None and previous != process_index:
            self.events.add_warning(
                event_type="producer_overwritten",
                message=(
                    f"Producer of '{stored.name}' overwritten: "
                    f"process {previous} -> process {process_index}"
                ),
                node=index,
                previous_producer=previous,
                producer=process_index,
            )
        stored.producer = process_index

        if index not in process.outputs:
            process.outputs.append(index)
            self.events.log(
                event_type="edge_added",
                message=f"'{process.name}' -> '{stored.name}'",
                direction="output",
                node=index,
                process=process_index,
            )
        return index

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_process(self, index: int, recursive: bool = False) -> List[int]:
        """
        Remove um Process e todos os seus Nodes de output.

        Cada output removido é retirado dos inputs de todo Process que o
        consumia. Com `recursive=True` esses consumidores também são
        removidos, transitivamente. Índices dos registros não afetados
        nunca mudam.

        Returns:
            List[int]: índices dos Processes removidos, em ordem de remoção.
        """
        self.processes.get(index)

        deleted: List[int] = []
        pending = [index]
        while pending:
            current = pending.pop(0)
            if not self.processes.is_live(current):
                continue

            process = self.processes.remove(current)
            deleted.append(current)
            self.events.log(
                event_type="process_deleted",
                message=f"Process '{process.name}' deleted",
                process=current,
                recursive=recursive,
            )

            for n in process.inputs:
                if self.nodes.is_live(n):
                    consumers = self.nodes.get(n).consumers
                    if current in consumers:
                        consumers.remove(current)

            for n in process.outputs:
                if not self.nodes.is_live(n):
                    continue
                node = self.nodes.remove(n)
                self.events.log(
                    event_type="node_deleted",
                    message=f"Node '{node.name}' deleted with its producer",
                    node=n,
                    process=current,
                )

                # producers sobrescritos ainda podem listar o Node
                for _, other in self.processes.items():
                    if n in other.outputs:
                        other.outputs = [o for o in other.outputs if o != n]

                for consumer in node.consumers:
                    if not self.processes.is_live(consumer):
                        continue
                    downstream = self.processes.get(consumer)
                    downstream.inputs = [i for i in downstream.inputs if i != n]
                    if recursive:
                        pending.append(consumer)

        return deleted

    # ------------------------------------------------------------------
    # Status / completion
    # ------------------------------------------------------------------

    def set_process_status(self, index: int, status: ProcessStatus) -> None:
        process = self.processes.get(index)
        if process.status == status:
            return
        if not process.status.can_become(status):
            raise InvalidStatusTransition(
                message=f"Process '{process.name}' cannot go from {process.status.value} to {status.value}",
                details={"process": index, "from": process.status.value, "to": status.value},
                hint="finished e cancelled são terminais; use add_process(overwrite=True) para re-executar.",
            )
        previous = process.status
        process.status = status
        self.events.log(
            event_type="status_changed",
            message=f"Process '{process.name}': {previous.value} -> {status.value}",
            process=index,
            previous=previous.value,
            status=status.value,
        )

    def cancel_process(self, index: int) -> bool:
        """Cancela um job não terminal. Em job terminal é um no-op registrado; retorna se cancelou."""
        process = self.processes.get(index)
        if process.status.is_terminal:
            self.events.add_warning(
                event_type="cancel_ignored",
                message=f"Process '{process.name}' is already {process.status.value}; cancel ignored",
                process=index,
            )
            return False
        self.set_process_status(index, ProcessStatus.CANCELLED)
        return True

    def _report_unreachable(self, path: Path, exc: OSError, operation: str) -> None:
        # um aviso por caminho até ele voltar a responder
        key = str(path)
        if key in self._unreachable:
            return
        self._unreachable.add(key)
        error = artifact_unreachable(
            path=str(path),
            exc_type=type(exc).__name__,
            exc_message=str(exc),
            operation=operation,
        )
        self.events.add_warning(
            event_type="artifact_unreachable",
            message=error.message,
            error=error.to_dict(),
        )

    def _artifact_exists(self, path: Path, operation: str) -> bool:
        failures: List[OSError] = []
        found = probe.artifact_exists(path, on_error=lambda _, exc: failures.append(exc))
        if failures:
            self._report_unreachable(path, failures[0], operation)
        else:
            self._unreachable.discard(str(path))
        return found

    def check_process_completion(self) -> List[int]:
        """
        Promove RUNNING → FINISHED todo Process cujos outputs existem todos.

        Idempotente; erros de filesystem contam como "ausente" e não
        interrompem o passe. Um caminho inacessível gera um único WARNING
        até voltar a responder, por mais passes que ocorram.

        Returns:
            List[int]: índices promovidos neste passe.
        """
        finished: List[int] = []
        for index, process in list(self.processes.items()):
            if process.status != ProcessStatus.RUNNING:
                continue
            paths = [
                probe.artifact_path(self.nodes.get(n).name, self.project_dir)
                for n in process.outputs
                if self.nodes.is_live(n)
            ]
            # todos os caminhos são verificados, sem curto-circuito
            present = [self._artifact_exists(path, "probe") for path in paths]
            if all(present):
                process.status = ProcessStatus.FINISHED
                finished.append(index)
                self.events.log(
                    event_type="process_finished",
                    message=f"Process '{process.name}' finished: all {len(paths)} outputs present",
                    process=index,
                )
        return finished

    # ------------------------------------------------------------------
    # Markers
    # ------------------------------------------------------------------

    def touch_node_marker(self, node: Node, force: bool = False) -> bool:
        """
        Escreve o marcador zero-byte do Node se o arquivo real existir (ou se `force`).

        Returns:
            bool: True se o arquivo real foi encontrado e o marcador escrito.
        """
        found = self._artifact_exists(probe.artifact_path(node.name, self.project_dir), "marker")
        if not (found or force):
            return False

        target = markers.marker_path(node, self.marker_root)
        if target is None:
            self.events.add_warning(
                event_type="marker_refused",
                message=f"Marker for '{node.name}' would escape {self.marker_root}",
                node_name=node.name,
            )
            return False

        try:
            markers.write_marker(target)
        except OSError as exc:
            self._report_unreachable(target, exc, "marker")
            return False
        self._unreachable.discard(str(target))
        return found

    def make_node_directory(self) -> int:
        """Toca o marcador de cada Node vivo; retorna quantos foram escritos."""
        return sum(1 for _, node in list(self.nodes.items()) if self.touch_node_marker(node))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _snapshot(self) -> PipelineSnapshot:
        return PipelineSnapshot(
            name=self.name,
            job_counter=self.job_counter,
            nodes=self.nodes,
            processes=self.processes,
        )

    def write(
        self,
        path: Optional[PathLike] = None,
        *,
        delete_nodes: Optional[Sequence[bool]] = None,
        delete_processes: Optional[Sequence[bool]] = None,
    ) -> Path:
        """
        Persiste o grafo em STAR. Máscaras (uma entrada por slot) omitem
        registros do snapshot sem alterar o grafo em memória.
        """
        target = self._resolve(path) if path is not None else self.snapshot_path
        write_snapshot(
            self._snapshot(),
            target,
            delete_nodes=delete_nodes,
            delete_processes=delete_processes,
        )
        self.events.log(
            event_type="snapshot_written",
            message=f"Snapshot written to {target}",
            path=str(target),
            omitted_nodes=_masked_count(delete_nodes),
            omitted_processes=_masked_count(delete_processes),
        )
        return target

    def read(self, path: Optional[PathLike] = None) -> Path:
        """
        Substitui o grafo em memória pelo snapshot. Em caso de falha o grafo
        anterior é mantido intacto, o erro é registrado e a exceção propagada.
        """
        source = self._resolve(path) if path is not None else self.snapshot_path
        try:
            snapshot = read_snapshot(source)
        except (PipelinerException, OSError, ValueError) as exc:
            error = exception_to_error(exc)
            self.events.log(
                event_type="snapshot_read_failed",
                message=error.message,
                level="ERROR",
                path=str(source),
                error=error.to_dict(),
            )
            raise

        self.name = snapshot.name
        self.job_counter = snapshot.job_counter
        self.nodes = snapshot.nodes
        self.processes = snapshot.processes
        self.events.log(
            event_type="snapshot_read",
            message=f"Snapshot read from {source}",
            path=str(source),
            nodes=len(self.nodes),
            processes=len(self.processes),
        )
        return source

    def save_event_log(self, path: Optional[PathLike] = None) -> Path:
        target = self._resolve(path) if path is not None else self._resolve(self.event_log_file)
        save_event_log(self.events, target)
        return target
