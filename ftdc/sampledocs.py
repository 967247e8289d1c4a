"""Sample metric documents and helpers that count their metric values."""

from __future__ import annotations

import random
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Sequence

from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.objectid import ObjectId
from bson.timestamp import Timestamp

_INT63_LIMIT = 1 << 63


def create_event_record(count: int, duration: int, size: int, workers: int) -> dict:
    """A flat event document of four 64-bit integer fields."""
    return {
        "count": Int64(count),
        "duration": Int64(duration),
        "size": Int64(size),
        "workers": Int64(workers),
    }


def rand_flat_document(num_keys: int) -> dict:
    """Keys ``"0"`` .. ``num_keys - 1`` mapped to random integers below ``num_keys``."""
    return {str(i): Int64(random.randrange(num_keys)) for i in range(num_keys)}


def rand_flat_document_with_floats(num_keys: int) -> dict:
    """A flat document of ``num_keys`` random doubles and ``num_keys`` random longs."""
    doc: dict[str, Any] = {}
    for i in range(num_keys):
        doc[f"{i}_float"] = random.random()
        doc[f"{i}_long"] = Int64(random.randrange(_INT63_LIMIT))
    return doc


def rand_complex_document(num_keys: int, other_num: int) -> dict:
    """A nested document of random metrics.

    Each of the ``num_keys`` rounds adds an integer and a double; when
    ``other_num`` is a multiple of 5 an array of ``other_num`` integers,
    of 3 a flat sub-document, and of 12 a nested complex sub-document.
    """
    doc: dict[str, Any] = {}
    for i in range(num_keys):
        suffix = f"{num_keys} {other_num} {i}"
        doc[suffix] = Int64(random.randrange(num_keys))
        doc[f"float {suffix}"] = random.random()

        if other_num % 5 == 0:
            doc[f"first {suffix}"] = [
                Int64(random.randrange(1 + ii * num_keys)) for ii in range(other_num)
            ]
        if other_num % 3 == 0:
            doc[f"second {suffix}"] = rand_flat_document(other_num)
        if other_num % 12 == 0:
            doc[f"third {suffix}"] = rand_complex_document(other_num, 10)
    return doc


def is_metrics_document(key: str, doc: Mapping[str, Any]) -> tuple[list[str], int]:
    """Metric keys of ``doc`` below ``key`` and the number of values they hold."""
    keys: list[str] = []
    seen = 0
    for name, value in doc.items():
        found, num = is_metrics_value(f"{key}/{name}", value)
        if num > 0:
            seen += num
            keys.extend(found)
    return keys, seen


def is_metrics_array(key: str, array: Sequence[Any]) -> tuple[list[str], int]:
    """Metric keys of ``array`` (``key`` followed by the index) and their count."""
    keys: list[str] = []
    seen = 0
    for idx, value in enumerate(array):
        found, num = is_metrics_value(key + str(idx), value)
        if num > 0:
            seen += num
            keys.extend(found)
    return keys, seen


def is_metrics_value(key: str, value: Any) -> tuple[list[str], int]:
    """Metric keys held by ``value`` and the number of metric values.

    Timestamps count as two values; strings, object ids, decimals and
    other non-numeric types hold none.
    """
    if isinstance(value, (ObjectId, str, Decimal128)):
        return [], 0
    if isinstance(value, (list, tuple)):
        return is_metrics_array(key, value)
    if isinstance(value, Mapping):
        return is_metrics_document(key, value)
    if isinstance(value, Timestamp):
        return [key], 2
    if isinstance(value, (bool, int, float, datetime)):
        return [key], 1
    return [], 0