# tests/core/test_errors.py
"""
Testes do padrão canônico de erros (exceções tipadas → PipelineErrorPayload).
"""

import contextlib
import json

import pytest

from pipeliner.core import errors
from pipeliner.core.errors import PipelineErrorPayload, artifact_unreachable, exception_to_error
from pipeliner.core.exceptions import (
    DeletionMaskMismatch,
    InvalidStatusTransition,
    PipelinerException,
    SnapshotMalformed,
    SnapshotNotFound,
    UnknownIndex,
)


@pytest.mark.parametrize(
    "cls, code",
    [
        (UnknownIndex, errors.GRAPH_UNKNOWN_INDEX),
        (InvalidStatusTransition, errors.GRAPH_INVALID_STATUS_TRANSITION),
        (SnapshotNotFound, errors.SNAPSHOT_NOT_FOUND),
        (SnapshotMalformed, errors.SNAPSHOT_MALFORMED),
        (DeletionMaskMismatch, errors.SNAPSHOT_MASK_MISMATCH),
    ],
)
def test_typed_exception_maps_to_its_code(cls, code):
    exc = cls(message="boom", details={"index": 3}, hint="fix it")

    payload = exception_to_error(exc)

    assert isinstance(exc, PipelinerException)
    assert payload == PipelineErrorPayload(type=code, message="boom", details={"index": 3}, hint="fix it")


def test_unknown_exception_becomes_internal_error():
    payload = exception_to_error(RuntimeError("kaput"))
    assert payload.type == errors.GRAPH_INTERNAL_ERROR
    assert payload.details == {"exc_type": "RuntimeError", "exc_message": "kaput"}


def test_exceptions_are_raisable():
    with pytest.raises(UnknownIndex) as exc_info:
        raise UnknownIndex(message="Unknown node index: 9", details={"index": 9})

    assert str(exc_info.value) == "Unknown node index: 9"


@pytest.mark.parametrize("cls", [UnknownIndex, SnapshotNotFound, SnapshotMalformed, DeletionMaskMismatch])
def test_exceptions_cross_context_managers(cls):
    """
    O interpretador atribui `__traceback__` ao re-lançar a exceção dentro
    do gerador; o tipo original precisa chegar intacto ao chamador.
    """

    @contextlib.contextmanager
    def scope():
        yield

    with pytest.raises(cls) as exc_info:
        with scope():
            raise cls(message="boom", details={})

    assert exc_info.value.__traceback__ is not None
    assert exception_to_error(exc_info.value).type == cls.code


def test_exceptions_hash_by_identity():
    a = SnapshotNotFound(message="x", details={})
    b = SnapshotNotFound(message="x", details={})
    assert a != b
    assert len({a, b}) == 2


def test_artifact_unreachable_payload_is_serializable():
    payload = artifact_unreachable(path="/data/a.star", exc_type="PermissionError", exc_message="denied")
    data = payload.to_dict()

    assert data["type"] == errors.ARTIFACT_UNREACHABLE
    assert data["details"]["operation"] == "probe"
    json.dumps(data)
