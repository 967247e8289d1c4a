"""High dynamic range histogram for recording skewed distributions such as latency."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

import bson
from bson.errors import BSONError
from bson.int64 import Int64


@dataclass(frozen=True)
class Bracket:
    """One step of a cumulative distribution."""

    quantile: float
    count: int
    value_at: int


@dataclass(frozen=True)
class Bar:
    """One bar of a histogram plot: the value range and the count inside it."""

    from_value: int
    to_value: int
    count: int

    def __str__(self) -> str:
        return f"{self.from_value}, {self.to_value}, {self.count}\n"


@dataclass
class Snapshot:
    """An exported view of a Histogram, suitable for serialisation."""

    lowest_trackable_value: int
    highest_trackable_value: int
    significant_figures: int
    counts: list[int] = field(default_factory=list)


def _bit_len(value: int) -> int:
    return value.bit_length() if value >= 0 else 0


def _percentile_step(percentile: float) -> float:
    """How far the reporting percentile advances after ``percentile``."""
    if percentile >= 100.0:
        return 0.0
    half_distance = math.trunc(
        2.0 ** (math.trunc(math.log2(100.0 / (100.0 - percentile))) + 1)
    )
    return 100.0 / half_distance


class _Cursor:
    """Walks the buckets of a histogram in value order."""

    __slots__ = ("_hist", "bucket", "sub", "count_at", "count_to", "value_from", "highest")

    def __init__(self, hist: "Histogram") -> None:
        self._hist = hist
        self.bucket = 0
        self.sub = -1
        self.count_at = 0
        self.count_to = 0
        self.value_from = 0
        self.highest = 0

    def advance(self) -> bool:
        hist = self._hist
        if self.count_to >= hist._total_count:
            return False
        self.sub += 1
        if self.sub >= hist._sub_bucket_count:
            self.sub = hist._sub_bucket_half_count
            self.bucket += 1
        if self.bucket >= hist._bucket_count:
            return False
        self.count_at = hist._counts[hist._counts_index(self.bucket, self.sub)]
        self.count_to += self.count_at
        self.value_from = hist._value_from_index(self.bucket, self.sub)
        self.highest = hist._highest_equivalent_value(self.value_from)
        return True


class Histogram:
    """A lossy record of a value distribution with bounded relative precision."""

    def __init__(self, min_value: int, max_value: int, sigfigs: int) -> None:
        if sigfigs < 1 or sigfigs > 5:
            raise ValueError(f"sigfigs must be [1,5] (was {sigfigs})")

        largest_single_unit = 2 * 10.0**sigfigs
        sub_bucket_count_magnitude = math.ceil(math.log2(largest_single_unit))
        half_magnitude = max(sub_bucket_count_magnitude, 1) - 1

        unit_magnitude = math.floor(math.log2(min_value)) if min_value > 0 else 0
        unit_magnitude = max(unit_magnitude, 0)

        sub_bucket_count = 2 ** (half_magnitude + 1)
        sub_bucket_half_count = sub_bucket_count // 2

        smallest_untrackable = sub_bucket_count << unit_magnitude
        buckets_needed = 1
        while smallest_untrackable < max_value:
            smallest_untrackable <<= 1
            buckets_needed += 1

        self._lowest_trackable_value = min_value
        self._highest_trackable_value = max_value
        self._unit_magnitude = unit_magnitude
        self._significant_figures = sigfigs
        self._sub_bucket_half_count_magnitude = half_magnitude
        self._sub_bucket_half_count = sub_bucket_half_count
        self._sub_bucket_mask = (sub_bucket_count - 1) << unit_magnitude
        self._sub_bucket_count = sub_bucket_count
        self._bucket_count = buckets_needed
        self._counts_len = (buckets_needed + 1) * sub_bucket_half_count
        self._total_count = 0
        self._counts = [0] * self._counts_len

    def __repr__(self) -> str:
        return (
            f"Histogram(min_value={self._lowest_trackable_value}, "
            f"max_value={self._highest_trackable_value}, "
            f"sigfigs={self._significant_figures}, total={self._total_count})"
        )

    def byte_size(self) -> int:
        """Estimate of the memory the histogram's state would occupy, in bytes."""
        return 6 * 8 + 5 * 4 + len(self._counts) * 8

    def merge(self, other: "Histogram") -> int:
        """Add the values of ``other``; return how many could not be recorded."""
        dropped = 0
        for step in other._steps():
            if step.count_at == 0:
                continue
            try:
                self.record_values(step.value_from, step.count_at)
            except ValueError:
                dropped += step.count_at
        return dropped

    def total_count(self) -> int:
        return self._total_count

    def max(self) -> int:
        """Approximate largest recorded value."""
        largest = 0
        for step in self._steps():
            if step.count_at != 0:
                largest = step.highest
        return self._highest_equivalent_value(largest)

    def min(self) -> int:
        """Approximate smallest recorded value."""
        smallest = 0
        for step in self._steps():
            if step.count_at != 0:
                smallest = step.highest
                break
        return self._lowest_equivalent_value(smallest)

    def mean(self) -> float:
        """Approximate arithmetic mean of the recorded values."""
        if self._total_count == 0:
            return 0.0
        total = sum(
            step.count_at * self._median_equivalent_value(step.value_from)
            for step in self._steps()
            if step.count_at != 0
        )
        return float(total) / float(self._total_count)

    def std_dev(self) -> float:
        """Approximate standard deviation of the recorded values."""
        if self._total_count == 0:
            return 0.0
        mean = self.mean()
        deviation_total = 0.0
        for step in self._steps():
            if step.count_at != 0:
                dev = float(self._median_equivalent_value(step.value_from)) - mean
                deviation_total += (dev * dev) * float(step.count_at)
        return math.sqrt(deviation_total / float(self._total_count))

    def reset(self) -> None:
        """Forget every recorded value."""
        self._total_count = 0
        self._counts = [0] * len(self._counts)

    def record_value(self, value: int) -> None:
        """Record ``value``; raise ValueError if it is out of range."""
        self.record_values(value, 1)

    def record_corrected_value(self, value: int, expected_interval: int) -> None:
        """Record ``value`` and back-fill the samples a stall would have hidden."""
        self.record_value(value)
        if expected_interval <= 0 or value <= expected_interval:
            return
        missing = value - expected_interval
        while missing >= expected_interval:
            self.record_value(missing)
            missing -= expected_interval

    def record_values(self, value: int, count: int) -> None:
        """Record ``count`` occurrences of ``value``; raise ValueError if out of range."""
        if value < 0:
            raise ValueError(f"value {value} is too large to be recorded")
        idx = self._counts_index_for(value)
        if idx < 0 or idx >= self._counts_len:
            raise ValueError(f"value {value} is too large to be recorded")
        self._counts[idx] += count
        self._total_count += count

    def value_at_quantile(self, q: float) -> int:
        """Recorded value at quantile ``q`` (0..100)."""
        q = min(q, 100.0)
        target = int((q / 100.0) * float(self._total_count) + 0.5)
        running = 0
        for step in self._steps():
            running += step.count_at
            if running >= target:
                return self._highest_equivalent_value(step.value_from)
        return 0

    def cumulative_distribution(self) -> list[Bracket]:
        """Ordered brackets of the cumulative distribution of recorded values."""
        return [
            Bracket(quantile=percentile, count=cursor.count_to, value_at=cursor.highest)
            for percentile, cursor in self._percentiles(1)
        ]

    def significant_figures(self) -> int:
        return self._significant_figures

    def lowest_trackable_value(self) -> int:
        return self._lowest_trackable_value

    def highest_trackable_value(self) -> int:
        return self._highest_trackable_value

    def distribution(self) -> list[Bar]:
        """Ordered bars covering the recorded values."""
        return [
            Bar(
                from_value=self._lowest_equivalent_value(step.value_from),
                to_value=step.highest,
                count=step.count_at,
            )
            for step in self._steps()
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Histogram):
            return NotImplemented
        return (
            self._lowest_trackable_value == other._lowest_trackable_value
            and self._highest_trackable_value == other._highest_trackable_value
            and self._unit_magnitude == other._unit_magnitude
            and self._significant_figures == other._significant_figures
            and self._sub_bucket_half_count_magnitude == other._sub_bucket_half_count_magnitude
            and self._sub_bucket_half_count == other._sub_bucket_half_count
            and self._sub_bucket_mask == other._sub_bucket_mask
            and self._sub_bucket_count == other._sub_bucket_count
            and self._bucket_count == other._bucket_count
            and self._counts_len == other._counts_len
            and self._total_count == other._total_count
            and self._counts == other._counts[: len(self._counts)]
        )

    __hash__ = None  # type: ignore[assignment]

    def export(self) -> Snapshot:
        """Snapshot of the histogram's state."""
        return Snapshot(
            lowest_trackable_value=self._lowest_trackable_value,
            highest_trackable_value=self._highest_trackable_value,
            significant_figures=self._significant_figures,
            counts=list(self._counts),
        )

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "Histogram":
        """Build a histogram holding the state of ``snapshot``."""
        hist = cls(
            int(snapshot.lowest_trackable_value),
            int(snapshot.highest_trackable_value),
            int(snapshot.significant_figures),
        )
        counts = [int(count) for count in snapshot.counts]
        if len(counts) < hist._counts_len:
            raise ValueError(
                f"snapshot holds {len(counts)} counts, expected {hist._counts_len}"
            )
        hist._counts = counts
        hist._total_count = sum(count for count in counts[: hist._counts_len] if count > 0)
        return hist

    def to_document(self) -> dict:
        """The histogram as a BSON-ready document."""
        return {
            "lowest": Int64(self._lowest_trackable_value),
            "highest": Int64(self._highest_trackable_value),
            "figures": Int64(self._significant_figures),
            "counts": [Int64(count) for count in self._counts],
        }

    def to_bson(self) -> bytes:
        return bson.encode(self.to_document())

    def to_json(self) -> str:
        return json.dumps(
            {
                "lowest": self._lowest_trackable_value,
                "highest": self._highest_trackable_value,
                "figures": self._significant_figures,
                "counts": self._counts,
            }
        )

    @classmethod
    def from_bson(cls, data: bytes) -> "Histogram":
        try:
            doc = bson.decode(bytes(data))
        except (BSONError, ValueError, IndexError) as exc:
            raise ValueError(f"invalid histogram document: {exc}") from exc
        return cls._from_mapping(doc)

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "Histogram":
        return cls._from_mapping(json.loads(data))

    @classmethod
    def _from_mapping(cls, doc: dict) -> "Histogram":
        counts = doc.get("counts") or []
        return cls.from_snapshot(
            Snapshot(
                lowest_trackable_value=int(doc.get("lowest", 0)),
                highest_trackable_value=int(doc.get("highest", 0)),
                significant_figures=int(doc.get("figures", 0)),
                counts=[int(count) for count in counts],
            )
        )

    def _steps(self) -> Iterator[_Cursor]:
        cursor = _Cursor(self)
        while cursor.advance():
            yield cursor

    def _percentiles(self, ticks_per_half_distance: int) -> Iterator[tuple[float, _Cursor]]:
        cursor = _Cursor(self)
        total = self._total_count
        target = 0.0
        percentile = 0.0
        while True:
            if cursor.count_to >= total:
                yield 100.0, cursor
                return
            if cursor.sub == -1 and not cursor.advance():
                return
            while True:
                current = (100.0 * float(cursor.count_to)) / float(total)
                if cursor.count_at != 0 and target <= current:
                    percentile = target
                    target += _percentile_step(target) / ticks_per_half_distance
                    yield percentile, cursor
                    break
                if not cursor.advance():
                    if cursor.count_to < total:
                        return
                    yield percentile, cursor
                    break

    def _size_of_equivalent_value_range(self, value: int) -> int:
        bucket = self._bucket_index(value)
        sub = self._sub_bucket_index(value, bucket)
        adjusted = bucket + 1 if sub >= self._sub_bucket_count else bucket
        return 1 << (self._unit_magnitude + adjusted)

    def _value_from_index(self, bucket: int, sub: int) -> int:
        return sub << (bucket + self._unit_magnitude)

    def _lowest_equivalent_value(self, value: int) -> int:
        bucket = self._bucket_index(value)
        return self._value_from_index(bucket, self._sub_bucket_index(value, bucket))

    def _next_non_equivalent_value(self, value: int) -> int:
        return self._lowest_equivalent_value(value) + self._size_of_equivalent_value_range(value)

    def _highest_equivalent_value(self, value: int) -> int:
        return self._next_non_equivalent_value(value) - 1

    def _median_equivalent_value(self, value: int) -> int:
        return self._lowest_equivalent_value(value) + (
            self._size_of_equivalent_value_range(value) >> 1
        )

    def _counts_index(self, bucket: int, sub: int) -> int:
        base = (bucket + 1) << self._sub_bucket_half_count_magnitude
        return base + (sub - self._sub_bucket_half_count)

    def _bucket_index(self, value: int) -> int:
        pow2_ceiling = _bit_len(value | self._sub_bucket_mask)
        return pow2_ceiling - self._unit_magnitude - (self._sub_bucket_half_count_magnitude + 1)

    def _sub_bucket_index(self, value: int, bucket: int) -> int:
        return value >> (bucket + self._unit_magnitude)

    def _counts_index_for(self, value: int) -> int:
        bucket = self._bucket_index(value)
        return self._counts_index(bucket, self._sub_bucket_index(value, bucket))