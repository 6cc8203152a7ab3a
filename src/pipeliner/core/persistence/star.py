# src/pipeliner/core/persistence/star.py
"""
Codec STAR (Self-defining Text Archival and Retrieval) sobre pandas.

Um arquivo STAR é uma sequência de blocos `data_<nome>`. Cada bloco é:
    - um conjunto de pares chave/valor (`_chave  valor`), ou
    - uma tabela `loop_`: rótulos `_coluna #i` seguidos de linhas de valores

Neste módulo:
    - pares chave/valor são representados como `Dict[str, str]`
    - tabelas são representadas como `pandas.DataFrame` de strings
    - rótulos são guardados sem o `_` inicial

Decisões (v1):
    - Valores com espaço ou caracteres especiais são citados com aspas
      simples no estilo shell (lidos de volta com `shlex`)
    - Valores vazios ou iniciados por `_`, `data_` ou `loop_` são sempre citados
    - Valores com quebra de linha (qualquer separador de `str.splitlines`) são recusados na
      escrita com `SnapshotMalformed`, antes de qualquer arquivo ser tocado
    - Linhas iniciadas por `#` são comentários
    - Qualquer inconsistência estrutural levanta `SnapshotMalformed`

Limites explícitos:
    - Não converte tipos (tudo é string; conversão é do chamador)
    - Não suporta blocos aninhados (save frames)
"""

from __future__ import annotations

import re
import shlex
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from pipeliner.core.exceptions import SnapshotMalformed


Block = Union[Dict[str, str], pd.DataFrame]

_UNSAFE_RE = re.compile(r"[^\w@%+=:,./-]")
_RESERVED_PREFIXES = ("_", "data_", "loop_")


def has_line_break(value: str) -> bool:
    # mesmo conjunto de separadores usado por str.splitlines na leitura
    return "".join(value.splitlines()) != value


def quote(value: str) -> str:
    """
    Cita um valor para uma única linha STAR.

    Raises:
        SnapshotMalformed: se o valor contém quebra de linha (não representável
            em um registro de linha única; nada é escrito).
    """
    if has_line_break(value):
        raise _malformed(f"value {value!r} contains a line break", value=value)
    if value and not _UNSAFE_RE.search(value) and not value.startswith(_RESERVED_PREFIXES):
        return value
    return "'" + value.replace("'", "'\"'\"'") + "'"


def _malformed(reason: str, *, line_no: Optional[int] = None, **details) -> SnapshotMalformed:
    payload = {"reason": reason, "line": line_no}
    payload.update(details)
    where = f" (line {line_no})" if line_no is not None else ""
    return SnapshotMalformed(
        message=f"Malformed STAR content{where}: {reason}",
        details=payload,
        hint="Restaure o snapshot a partir de uma cópia válida; nenhuma leitura parcial é aplicada.",
    )


def _split(line: str, line_no: int) -> List[str]:
    try:
        return shlex.split(line, comments=False, posix=True)
    except ValueError as exc:
        raise _malformed(f"unparseable record ({exc})", line_no=line_no)


# ---------------------------------------------------------------------------
# Escrita
# ---------------------------------------------------------------------------

def _format_pairs(pairs: Dict[str, str]) -> List[str]:
    width = max((len(k) for k in pairs), default=0) + 1
    return [f"_{key.ljust(width)}  {quote(str(value))}" for key, value in pairs.items()]


def _format_table(table: pd.DataFrame) -> List[str]:
    lines = ["loop_"]
    lines += [f"_{column} #{i}" for i, column in enumerate(table.columns, start=1)]
    if table.empty:
        return lines

    cells = pd.DataFrame({c: table[c].astype(str).map(quote) for c in table.columns})
    widths = {c: int(cells[c].str.len().max()) for c in cells.columns}
    for row in cells.itertuples(index=False, name=None):
        line = "  ".join(v.ljust(widths[c]) for c, v in zip(cells.columns, row))
        lines.append(line.rstrip())
    return lines


def format_star(blocks: Dict[str, Block], *, header: Optional[str] = None) -> str:
    lines: List[str] = []
    if header:
        lines += [f"# {header}", ""]

    for name, block in blocks.items():
        lines += [f"data_{name}", ""]
        if isinstance(block, pd.DataFrame):
            lines += _format_table(block)
        else:
            lines += _format_pairs(block)
        lines.append("")

    return "\n".join(lines) + "\n"


def write_star(blocks: Dict[str, Block], path: Path, *, header: Optional[str] = None) -> None:
    """Escreve via arquivo temporário irmão + rename (nunca meio-escrito)."""
    text = format_star(blocks, header=header)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


# ---------------------------------------------------------------------------
# Leitura
# ---------------------------------------------------------------------------

def parse_star(text: str) -> Dict[str, Block]:
    blocks: Dict[str, Block] = {}

    name: Optional[str] = None
    pairs: Dict[str, str] = {}
    labels: List[str] = []
    rows: List[List[str]] = []
    in_loop = False

    def close() -> None:
        if name is None:
            return
        if in_loop:
            blocks[name] = pd.DataFrame(rows, columns=labels, dtype=str)
        else:
            blocks[name] = dict(pairs)

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("data_"):
            close()
            name = line[len("data_"):]
            if not name:
                raise _malformed("data block without a name", line_no=line_no)
            if name in blocks:
                raise _malformed(f"duplicate data block '{name}'", line_no=line_no)
            pairs, labels, rows, in_loop = {}, [], [], False
            continue

        if name is None:
            raise _malformed("content outside of a data block", line_no=line_no)

        if line == "loop_":
            if in_loop or pairs:
                raise _malformed("loop_ must open its own data block", line_no=line_no)
            in_loop = True
            continue

        if line.startswith("_"):
            tokens = _split(line, line_no)
            label = tokens[0][1:]
            if in_loop:
                if rows:
                    raise _malformed("column label after loop rows", line_no=line_no)
                if label in labels:
                    raise _malformed(f"duplicate column '{label}'", line_no=line_no)
                labels.append(label)
                continue
            if len(tokens) != 2:
                raise _malformed(f"expected '_key value', got {len(tokens)} tokens", line_no=line_no)
            if label in pairs:
                raise _malformed(f"duplicate key '{label}'", line_no=line_no)
            pairs[label] = tokens[1]
            continue

        if not in_loop:
            raise _malformed("value outside of a loop_", line_no=line_no)

        tokens = _split(line, line_no)
        if len(tokens) != len(labels):
            raise _malformed(
                f"row has {len(tokens)} values for {len(labels)} columns",
                line_no=line_no,
            )
        rows.append(tokens)

    close()
    return blocks


def read_star(path: Path) -> Dict[str, Block]:
    return parse_star(path.read_text(encoding="utf-8"))
