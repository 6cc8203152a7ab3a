# src/pipeliner/core/config/loader.py
"""
Loader canônico de configuração do Pipeliner.

Este módulo é responsável por carregar, validar estruturalmente e resolver
a configuração efetiva utilizada para ancorar um `PipeLine` no filesystem.

A configuração é resolvida a partir de:
    - um arquivo de defaults (obrigatório; o pacote distribui `defaults.yaml`)
    - um arquivo local de overrides (opcional)

Chaves reconhecidas (seção `pipeline`):
    - name            → rótulo do pipeline
    - project_dir     → diretório base para resolver nomes de Nodes
    - snapshot_file   → arquivo STAR do snapshot (relativo ao projeto)
    - marker_dir      → diretório de marcadores (relativo ao projeto)
    - event_log_file  → arquivo JSON do Event Log (relativo ao projeto)

Invariantes:
    - O arquivo de defaults é obrigatório
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults

Limites explícitos:
    - Não valida semântica de domínio
    - Não persiste configuração ou hash
    - Não instancia o grafo
"""

from pathlib import Path
from typing import Any, Dict, Optional
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva.

    Política de resolução:
        - O arquivo de defaults é obrigatório
        - O arquivo local é opcional (ausência não é erro)
        - Quando presente, o local sempre tem prioridade sobre defaults
        - A resolução utiliza `deep_merge` com política determinística

    Args:
        defaults_path (str): Caminho para o arquivo de configuração base.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """

    defaults_file = Path(defaults_path)
    defaults = _load_file(defaults_file)

    effective = defaults

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            local = _load_file(local_file)
            effective = deep_merge(defaults, local)

    return effective


def resolve_pipeline_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """Seção `pipeline` efetiva: defaults do pacote + a seção fornecida."""
    packaged = _load_file(DEFAULTS_PATH).get("pipeline", {}) or {}
    section = (config or {}).get("pipeline", {}) or {}
    return deep_merge(packaged, section)
