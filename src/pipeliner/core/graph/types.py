# src/pipeliner/core/graph/types.py
"""
Tipos canônicos do grafo do Pipeliner.

Este módulo define as estruturas e enums fundamentais do grafo de
dependências: os artefatos de dados (Nodes), os jobs que os consomem e
produzem (Processes) e o ciclo de vida de status de um job.

Componentes principais:
    - NodeKind      → enum fechado de tipos de artefato
    - ProcessKind   → enum fechado de estágios do workflow
    - ProcessStatus → enum de status com tabela de transições
    - Node          → artefato nomeado e tipado + arestas (por índice)
    - Process       → job nomeado e tipado + arestas (por índice)
    - NOT_FOUND     → sentinela de lookup por nome

Princípios fundamentais:
    - Nodes e Processes referenciam-se apenas por índice inteiro estável
    - Enums possuem valores textuais canônicos (persistidos no snapshot)
    - Nenhuma lógica de grafo vive neste módulo

Limites explícitos:
    - Não garante simetria de arestas (responsabilidade do PipeLine)
    - Não acessa o filesystem
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional


NOT_FOUND = -1


class NodeKind(str, Enum):
    """
    Tipos de artefato de dados rastreados pelo grafo.

    Exemplos de arquivos por tipo:
        - MOVIE: Falcon001_movie.mrcs, micrograph_movies.star
        - MICROGRAPH: Falcon001.mrc, micrographs.star (possivelmente com CTF)
        - TOMOGRAM: tomo001.mrc, tomograms.star
        - COORDINATES: *_autopick.star
        - PARTICLE_DATA: particles.star, run1_data.star
        - MOVIE_PARTICLE_DATA: particles_movie.star, run1_ct27_data.star
        - REFERENCE: map.mrc, refs.star, 1@refs.star
        - MASK: mask.mrc, masks.star
        - MODEL: model.star para seleção de classes
        - OPTIMISER: optimiser.star para continuação de jobs
        - HALFMAP: run1_half?_class001_unfil.mrc
        - FINALMAP: mapa final pós-processado (não pode ser input)
        - RESMAP: mapa de resolução local (não pode ser input)
    """
    MOVIE = "movie"
    MICROGRAPH = "micrograph"
    TOMOGRAM = "tomogram"
    COORDINATES = "coordinates"
    PARTICLE_DATA = "particle_data"
    MOVIE_PARTICLE_DATA = "movie_particle_data"
    REFERENCE = "reference"
    MASK = "mask"
    MODEL = "model"
    OPTIMISER = "optimiser"
    HALFMAP = "halfmap"
    FINALMAP = "finalmap"
    RESMAP = "resmap"

    @property
    def accepts_as_input(self) -> bool:
        return self not in (NodeKind.FINALMAP, NodeKind.RESMAP)


class ProcessKind(str, Enum):
    """
    Estágios do workflow. A ordem de declaração é a ordem de navegação
    dos jobs em ferramentas de browsing.
    """
    IMPORT = "import"
    MOTIONCORR = "motioncorr"
    CTFFIND = "ctffind"
    MANUALPICK = "manualpick"
    AUTOPICK = "autopick"
    SORT = "sort"
    EXTRACT = "extract"
    CLASS2D = "class2d"
    CLASS3D = "class3d"
    CLASSSELECT = "classselect"
    REFINE3D = "refine3d"
    POLISH = "polish"
    POSTPROCESS = "postprocess"
    RESMAP = "resmap"
    PUBLISH = "publish"

    @property
    def directory(self) -> str:
        return _PROCESS_DIRECTORIES[self]


_PROCESS_DIRECTORIES: Dict[ProcessKind, str] = {
    ProcessKind.IMPORT: "Import",
    ProcessKind.MOTIONCORR: "MotionCorr",
    ProcessKind.CTFFIND: "CtfFind",
    ProcessKind.MANUALPICK: "ManualPick",
    ProcessKind.AUTOPICK: "AutoPick",
    ProcessKind.SORT: "Sort",
    ProcessKind.EXTRACT: "Extract",
    ProcessKind.CLASS2D: "Class2D",
    ProcessKind.CLASS3D: "Class3D",
    ProcessKind.CLASSSELECT: "Select",
    ProcessKind.REFINE3D: "Refine3D",
    ProcessKind.POLISH: "Polish",
    ProcessKind.POSTPROCESS: "PostProcess",
    ProcessKind.RESMAP: "ResMap",
    ProcessKind.PUBLISH: "Publish",
}


class ProcessStatus(str, Enum):
    """
    Status de um Process.

    Transições permitidas:
        - RUNNING   → FINISHED, CANCELLED
        - SCHEDULED → RUNNING, FINISHED, CANCELLED
        - FINISHED e CANCELLED são terminais

    O probing de completude só conduz RUNNING → FINISHED; SCHEDULED →
    RUNNING é decisão de um driver externo.
    """
    RUNNING = "running"
    SCHEDULED = "scheduled"
    FINISHED = "finished"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]

    def can_become(self, other: "ProcessStatus") -> bool:
        return other in _TRANSITIONS[self]


_TRANSITIONS: Dict[ProcessStatus, FrozenSet[ProcessStatus]] = {
    ProcessStatus.RUNNING: frozenset({ProcessStatus.FINISHED, ProcessStatus.CANCELLED}),
    ProcessStatus.SCHEDULED: frozenset(
        {ProcessStatus.RUNNING, ProcessStatus.FINISHED, ProcessStatus.CANCELLED}
    ),
    ProcessStatus.FINISHED: frozenset(),
    ProcessStatus.CANCELLED: frozenset(),
}


@dataclass
class Node:
    """
    Artefato de dados (arquivo) rastreado pelo grafo.

    Campos:
        - name: identificador único, convencionalmente um caminho relativo ao projeto
        - kind: tipo do artefato
        - consumers: índices dos Processes que usam este Node como input
          (semântica de conjunto: sem duplicatas, ordem irrelevante)
        - producer: índice do Process que criou o Node; None se importado

    Invariantes:
        - No máximo um producer por Node
        - Node sem producer é um input/importação do pipeline
    """
    name: str
    kind: NodeKind
    consumers: List[int] = field(default_factory=list)
    producer: Optional[int] = None

    @property
    def is_import(self) -> bool:
        return self.producer is None


@dataclass
class Process:
    """
    Job do workflow: converte Nodes de input em Nodes de output.

    Campos:
        - name: identificador, convencionalmente `<Diretório>/jobNNN`
        - kind: estágio do workflow
        - status: status corrente
        - inputs: índices ordenados dos Nodes consumidos
        - outputs: índices ordenados dos Nodes produzidos
    """
    name: str
    kind: ProcessKind
    status: ProcessStatus
    inputs: List[int] = field(default_factory=list)
    outputs: List[int] = field(default_factory=list)
