# src/pipeliner/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Pipeliner.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento, validação estrutural e resolução de configuração.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais são tratados como falhas fatais
    - Mensagens de erro são claras e direcionadas ao usuário

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro do grafo ou do snapshot
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Pipeliner.

    Todas as exceções levantadas durante carregamento, validação estrutural
    e resolução de configuração devem herdar desta classe.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base (defaults)
    não é encontrado no caminho especificado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - Não tenta inferir ou criar defaults automaticamente
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"pipeline": {"name": "default"}}
        - override: {"pipeline": "betagal"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito

    Limites explícitos:
        - Não realiza coerção ou conversão de tipos
    """
