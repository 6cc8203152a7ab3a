# src/pipeliner/core/config/__init__.py

"""
Camada de configuração do Pipeliner.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, validar estruturalmente e identificar a configuração que ancora
um `PipeLine` no filesystem (diretório do projeto, arquivo de snapshot,
diretório de marcadores e arquivo de Event Log).

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Validação estrutural básica da configuração
    - Geração de hash canônico para rastreabilidade

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - A estrutura resultante é determinística
    - Conflitos estruturais são tratados como erro

Limites explícitos:
    - Não valida semântica de domínio
    - Não interage com o grafo diretamente
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import DEFAULTS_PATH, load_config, resolve_pipeline_settings
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "DEFAULTS_PATH",
    "load_config",
    "resolve_pipeline_settings",
    "deep_merge",
]
