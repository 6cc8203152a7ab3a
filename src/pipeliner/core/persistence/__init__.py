# src/pipeliner/core/persistence/__init__.py
"""Persistência do grafo: codec STAR e snapshot canônico do pipeline."""

from .pipeline_store import PipelineSnapshot, read_snapshot, snapshot_tables, write_snapshot
from .star import parse_star, read_star, write_star

__all__ = [
    "PipelineSnapshot",
    "read_snapshot",
    "snapshot_tables",
    "write_snapshot",
    "parse_star",
    "read_star",
    "write_star",
]
