"""Normalize driver return values to a single result count.

Each kind of value a lab step can return gets its own variant:

- CURSOR: a pymongo ``Cursor``/``CommandCursor`` or any other iterator,
  materialized and counted. A ``ChangeStream`` never ends, so it is a
  VALUE instead.
- SEQUENCE: any other sized collection (list, tuple, set, range, dict
  view), counted. Strings, bytes and documents are VALUEs.
- WRITE_ACK: a pymongo write result (or a mapping carrying
  ``acknowledged``). The first non-zero of inserted, modified and deleted
  counts wins, then the number of inserted ids, then 1 for an
  acknowledged write that touched nothing (index or collection creation).
  Unacknowledged writes count 0.
- NUMERIC: an int or float, truncated. NaN and infinity count 0.
- VALUE: anything else that is not None counts 1 (``False`` counts 0).
- NONE: None counts 0.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sized
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pymongo.change_stream import ChangeStream
from pymongo.command_cursor import CommandCursor
from pymongo.cursor import Cursor
from pymongo.results import (
    BulkWriteResult,
    DeleteResult,
    InsertManyResult,
    InsertOneResult,
    UpdateResult,
)


class ResultKind(str, Enum):
    """Variant of a normalized step result."""
    CURSOR = "CURSOR"
    SEQUENCE = "SEQUENCE"
    WRITE_ACK = "WRITE_ACK"
    NUMERIC = "NUMERIC"
    VALUE = "VALUE"
    NONE = "NONE"


@dataclass(frozen=True)
class NormalizedResult:
    kind: ResultKind
    count: int


def _ack_count(
    inserted: int,
    modified: int,
    deleted: int,
    id_count: int,
    acknowledged: bool,
) -> int:
    for count in (inserted, modified, deleted):
        if count:
            return int(count)
    if id_count:
        return id_count
    return 1 if acknowledged else 0


def _count_driver_write(result: Any) -> int:
    if not result.acknowledged:
        return 0

    if isinstance(result, InsertOneResult):
        return _ack_count(int(result.inserted_id is not None), 0, 0, 0, True)
    if isinstance(result, InsertManyResult):
        return _ack_count(0, 0, 0, len(result.inserted_ids), True)
    if isinstance(result, UpdateResult):
        return _ack_count(int(result.upserted_id is not None), result.modified_count, 0, 0, True)
    if isinstance(result, DeleteResult):
        return _ack_count(0, 0, result.deleted_count, 0, True)
    # BulkWriteResult
    return _ack_count(
        result.inserted_count + result.upserted_count,
        result.modified_count,
        result.deleted_count,
        0,
        True,
    )


def _count_mapping_write(result: Mapping[str, Any]) -> int:
    inserted_ids = result.get("insertedIds") or ()
    return _ack_count(
        result.get("insertedCount") or 0,
        result.get("modifiedCount") or 0,
        result.get("deletedCount") or 0,
        len(inserted_ids) if isinstance(inserted_ids, Sized) else 0,
        bool(result.get("acknowledged")),
    )


_DRIVER_WRITE_RESULTS = (InsertOneResult, InsertManyResult, UpdateResult, DeleteResult, BulkWriteResult)


def normalize_result(value: Any) -> NormalizedResult:
    """Reduce a step's return value to a result count."""
    if value is None:
        return NormalizedResult(ResultKind.NONE, 0)

    if isinstance(value, ChangeStream):
        return NormalizedResult(ResultKind.VALUE, 1)

    if isinstance(value, (Cursor, CommandCursor, Iterator)):
        return NormalizedResult(ResultKind.CURSOR, len(list(value)))

    if isinstance(value, _DRIVER_WRITE_RESULTS):
        return NormalizedResult(ResultKind.WRITE_ACK, _count_driver_write(value))

    if isinstance(value, Mapping):
        if "acknowledged" in value:
            return NormalizedResult(ResultKind.WRITE_ACK, _count_mapping_write(value))
        return NormalizedResult(ResultKind.VALUE, 1)

    if isinstance(value, Sized) and not isinstance(value, (str, bytes, bytearray)):
        return NormalizedResult(ResultKind.SEQUENCE, len(value))

    if isinstance(value, bool):
        return NormalizedResult(ResultKind.VALUE, int(value))

    if isinstance(value, float) and not math.isfinite(value):
        return NormalizedResult(ResultKind.NUMERIC, 0)

    if isinstance(value, (int, float)):
        return NormalizedResult(ResultKind.NUMERIC, int(value))

    return NormalizedResult(ResultKind.VALUE, 1)
