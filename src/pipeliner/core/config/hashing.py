# src/pipeliner/core/config/hashing.py
import json
import hashlib
from typing import Dict, Any


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva.

    Política de hashing (v1):
        - Serialização JSON canônica (chaves ordenadas, separadores compactos)
        - Codificação UTF-8
        - Algoritmo SHA-256

    O hash é registrado nos metadados do Event Log do `PipeLine`,
    permitindo identificar com qual configuração uma sessão foi aberta.

    Args:
        config (Dict[str, Any]): Configuração efetiva.

    Returns:
        str: Hash SHA-256 hexadecimal (64 caracteres).

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
