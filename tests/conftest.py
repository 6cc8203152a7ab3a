# tests/conftest.py
"""
Fixtures compartilhados para testes do Pipeliner.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (YAML como string)
- um `PipeLine` vazio ancorado em um diretório temporário
- um grafo pequeno e conhecido (Import → CtfFind) para testes de
  arestas, deleção, probing e persistência

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Todo I/O acontece sob `tmp_path`
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture cria arquivos de artefato (o teste decide quando)
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração (ver tests/e2e)
"""

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de defaults semelhante ao `defaults.yaml` distribuído no pacote.

    Usado por:
        - Testes do loader de config
        - Testes de deep-merge (defaults + local)
        - Testes de `PipeLine.from_config`

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """

    return """\
pipeline:
  name: default
  project_dir: "."
  snapshot_file: default_pipeline.star
  marker_dir: .Nodes
  event_log_file: .pipeline_events.json
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML de override local: apenas as chaves que mudam."""

    return """\
pipeline:
  name: betagal
  marker_dir: .Markers
"""


# =====================================================
# Graph fixtures
# =====================================================

@pytest.fixture
def empty_pipeline(tmp_path):
    """
    `PipeLine` vazio cujo diretório de projeto é `tmp_path`.

    Nomes de Nodes relativos (ex.: `ctf.star`) são resolvidos contra
    `tmp_path`, e snapshot/marcadores/Event Log também ficam lá.
    """
    from pipeliner.core.pipeline import PipeLine

    return PipeLine("test", project_dir=tmp_path)


@pytest.fixture
def ctf_pipeline(empty_pipeline):
    """
    Grafo mínimo de duas etapas:

        Import/job001 (scheduled) ──► micrographs.star ──► CtfFind/job002 (running) ──► ctf.star

    Returns:
        tuple: (pipeline, índice de job001, índice de job002)
    """
    from pipeliner.core.graph.types import (
        Node,
        NodeKind,
        Process,
        ProcessKind,
        ProcessStatus,
    )

    p = empty_pipeline
    job001 = p.add_process(Process("Import/job001", ProcessKind.IMPORT, ProcessStatus.SCHEDULED))
    p.add_output_edge(job001, Node("micrographs.star", NodeKind.MICROGRAPH))

    job002 = p.add_process(Process("CtfFind/job002", ProcessKind.CTFFIND, ProcessStatus.RUNNING))
    p.add_input_edge(Node("micrographs.star", NodeKind.MICROGRAPH), job002)
    p.add_output_edge(job002, Node("ctf.star", NodeKind.MICROGRAPH))

    return p, job001, job002
