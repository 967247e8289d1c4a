"""Low-level helpers for the FTDC metric encoding."""

from __future__ import annotations

import dataclasses
import struct
import zlib
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from itertools import accumulate
from typing import Any, Iterable

import bson
from bson.codec_options import CodecOptions
from bson.errors import BSONError

_UINT64_MASK = (1 << 64) - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_CODEC_OPTIONS = CodecOptions(tz_aware=True, tzinfo=timezone.utc)


def _to_int64(value: int) -> int:
    """Wrap an integer into the signed 64-bit range."""
    value &= _UINT64_MASK
    return value - (1 << 64) if value >= 1 << 63 else value


def _decode(data: bytes) -> dict:
    try:
        return bson.decode(bytes(data), codec_options=_CODEC_OPTIONS)
    except (BSONError, ValueError, IndexError, struct.error) as exc:
        raise ValueError(f"invalid bson document: {exc}") from exc


def read_document(obj: Any) -> dict:
    """Turn ``obj`` into a metrics document (an ordered dict).

    Accepts dict-like documents, raw BSON bytes, objects with a
    ``to_document()`` or ``to_bson()`` method, and dataclass instances.
    """
    if obj is None:
        raise TypeError("cannot read a metrics document from None")
    if isinstance(obj, dict):
        return obj
    to_document = getattr(obj, "to_document", None)
    if callable(to_document):
        return to_document()
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return _decode(obj)
    to_bson = getattr(obj, "to_bson", None)
    if callable(to_bson):
        try:
            data = to_bson()
        except Exception as exc:
            raise ValueError(f"problem with unmarshaler: {exc}") from exc
        return _decode(data)
    if isinstance(obj, Mapping):
        if not all(isinstance(key, str) for key in obj):
            raise TypeError("metrics document keys must be strings")
        return dict(sorted(obj.items(), key=lambda item: item[0]))
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        try:
            data = bson.encode(dataclasses.asdict(obj))
        except (BSONError, TypeError) as exc:
            raise TypeError(f"problem with fallback marshaling: {exc}") from exc
        return _decode(data)
    raise TypeError(f"cannot read a metrics document from {type(obj).__name__}")


def get_offset(count: int, sample: int, metric: int) -> int:
    """Position of ``sample`` for ``metric`` in a metric-major matrix."""
    return metric * count + sample


def undelta(value: int, deltas: Iterable[int]) -> list[int]:
    """Rebuild a series from its starting value and successive deltas."""
    return list(accumulate(deltas, lambda acc, delta: _to_int64(acc + delta), initial=value))


def encode_size_value(value: int) -> bytes:
    """Encode ``value`` as a little-endian unsigned 32-bit integer."""
    return struct.pack("<I", value)


def encode_value(value: int) -> bytes:
    """Encode ``value`` (as an unsigned 64-bit integer) as a varint."""
    remaining = value & _UINT64_MASK
    out = bytearray()
    while remaining >= 0x80:
        out.append((remaining & 0x7F) | 0x80)
        remaining >>= 7
    out.append(remaining)
    return bytes(out)


def compress_buffer(data: bytes) -> bytes:
    """Prefix the uncompressed length and zlib-compress ``data``."""
    return encode_size_value(len(data)) + zlib.compress(data)


def normalize_float(value: float) -> int:
    """Return the IEEE-754 bit pattern of ``value`` as a signed 64-bit int."""
    return struct.unpack("<q", struct.pack("<d", value))[0]


def restore_float(value: int) -> float:
    """Inverse of :func:`normalize_float`."""
    return struct.unpack("<d", struct.pack("<Q", value & _UINT64_MASK))[0]


def epoch_ms(moment: datetime) -> int:
    """Milliseconds since the Unix epoch, truncated toward zero.

    Naive datetimes are taken to be in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - _EPOCH
    micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    millis = abs(micros) // 1000
    return millis if micros >= 0 else -millis


def time_epoch_ms(value: int) -> datetime:
    """UTC datetime for ``value`` milliseconds since the Unix epoch."""
    return _EPOCH + timedelta(milliseconds=value)


def is_num(num: int, value: Any) -> bool:
    """True when ``value`` is an integer or double equal to ``num``."""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == num
    return False