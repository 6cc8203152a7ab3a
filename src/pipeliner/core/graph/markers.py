# src/pipeliner/core/graph/markers.py
"""Arquivos marcadores (zero bytes) que espelham os Nodes conhecidos.

Ferramentas de browsing enumeram os nomes de artefatos do pipeline
listando `<marker_root>/<kind>/<name>` em vez de re-derivá-los dos
parâmetros de cada job. O marcador espelha o arquivo real: o prefixo de
membro de pilha (`1@refs.star`) é removido, como no probing.
"""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Optional

from .probe import strip_stack_member
from .types import Node


def marker_path(node: Node, marker_root: Path) -> Optional[Path]:
    """Caminho do marcador, ou None se o nome escaparia de `marker_root`."""
    name = PurePath(strip_stack_member(node.name))
    parts = name.parts[1:] if name.anchor else name.parts
    if not parts or ".." in parts:
        return None
    return marker_root / node.kind.value / Path(*parts)


def write_marker(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
