# src/pipeliner/core/graph/probe.py
"""
Probing de completude de Processes via filesystem.

Como a computação acontece fora do processo (execução local ou fila de
batch), o único sinal observável de que um job terminou é a existência
de todos os seus arquivos de output. Este módulo oferece a resolução de
caminhos e a verificação de existência usadas pelo
`PipeLine.check_process_completion`.

Regras:
    - Nome de Node relativo é resolvido contra o diretório do projeto
    - Prefixo de membro de pilha (`1@refs.star`) é removido antes do check
    - `OSError` durante o check conta como "ausente" e é reportado ao
      chamador via callback, sem interromper o probing
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, Optional, Union

_STACK_MEMBER_RE = re.compile(r"^\d+@")

OnError = Callable[[Path, OSError], None]


def strip_stack_member(name: str) -> str:
    """`1@refs.star` → `refs.star`; outros nomes são devolvidos intactos."""
    return _STACK_MEMBER_RE.sub("", name, count=1)


def artifact_path(name: str, project_dir: Union[str, Path] = ".") -> Path:
    path = Path(strip_stack_member(name))
    if path.is_absolute():
        return path
    return Path(project_dir) / path


def artifact_exists(path: Path, on_error: Optional[OnError] = None) -> bool:
    try:
        return path.exists()
    except OSError as exc:
        if on_error is not None:
            on_error(path, exc)
        return False
