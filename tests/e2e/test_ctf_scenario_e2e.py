# tests/e2e/test_ctf_scenario_e2e.py
"""
E2E — cenário Import → CTF com probing real de filesystem.

Fluxo exercitado (apenas APIs públicas):
    1) Import/job001 (scheduled) produz `micrographs.star`
    2) CTFFind/job002 (running) consome `micrographs.star` e produz `ctf.star`
    3) probing antes de `ctf.star` existir → job002 continua running
    4) `ctf.star` é criado → probing promove job002 a finished
    5) snapshot é escrito, relido em um novo PipeLine e os marcadores gerados
    6) remoção não recursiva de job001 esvazia os inputs de job002

Invariantes:
    - Nenhum atalho: o grafo é construído via add_process/add_*_edge
    - Todo I/O acontece sob `tmp_path`
"""

from pathlib import Path

from pipeliner import NOT_FOUND, Node, NodeKind, PipeLine, Process, ProcessKind, ProcessStatus


def _build(project_dir: Path) -> PipeLine:
    p = PipeLine("ctf-demo", project_dir=project_dir)

    job001 = p.add_process(Process("Import/job001", ProcessKind.IMPORT, ProcessStatus.SCHEDULED))
    p.add_output_edge(job001, Node("micrographs.star", NodeKind.MICROGRAPH))

    job002 = p.add_process(Process("CTFFind/job002", ProcessKind.CTFFIND, ProcessStatus.RUNNING))
    p.add_input_edge(Node("micrographs.star", NodeKind.MICROGRAPH), job002)
    p.add_output_edge(job002, Node("ctf.star", NodeKind.MICROGRAPH))
    return p


def test_ctf_scenario_probing_and_persistence(tmp_path: Path):
    p = _build(tmp_path)

    mics = p.find_node_by_name("micrographs.star")
    assert mics != NOT_FOUND
    job002 = p.find_process_by_name("CTFFind/job002")
    assert len(p.process(job002).inputs) == 1

    # ctf.star ainda não existe
    assert p.check_process_completion() == []
    assert p.process(job002).status == ProcessStatus.RUNNING

    (tmp_path / "ctf.star").write_text("data_\n", encoding="utf-8")
    assert p.check_process_completion() == [job002]
    assert p.process(job002).status == ProcessStatus.FINISHED

    # job001 está SCHEDULED: nunca é sondado
    assert p.process(p.find_process_by_name("Import/job001")).status == ProcessStatus.SCHEDULED

    snapshot = p.write()
    restored = PipeLine(project_dir=tmp_path)
    restored.read(snapshot)

    assert restored.name == "ctf-demo"
    assert restored.process(job002).status == ProcessStatus.FINISHED
    assert restored.node(mics).consumers == [job002]
    assert restored.next_process_name(ProcessKind.AUTOPICK) == "AutoPick/job003"

    # apenas ctf.star existe de fato
    assert restored.make_node_directory() == 1
    assert (tmp_path / ".Nodes" / "micrograph" / "ctf.star").exists()

    events = p.save_event_log()
    assert events.exists()


def test_ctf_scenario_deleting_import_job(tmp_path: Path):
    p = _build(tmp_path)
    job001 = p.find_process_by_name("Import/job001")
    job002 = p.find_process_by_name("CTFFind/job002")

    assert p.delete_process(job001) == [job001]

    assert p.find_node_by_name("micrographs.star") == NOT_FOUND
    assert p.process(job002).inputs == []
    assert p.find_process_by_name("CTFFind/job002") == job002
    assert p.find_node_by_name("ctf.star") != NOT_FOUND

    # o estado removido também sobrevive à persistência
    p.write()
    restored = PipeLine(project_dir=tmp_path)
    restored.read()
    assert len(restored.processes) == 1
    assert restored.process(job002).inputs == []
