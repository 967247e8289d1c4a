# ftdc

Python building blocks for full-time diagnostic data capture (FTDC): the
compact, delta-encoded, zlib-compressed way of storing streams of numeric
metrics taken from BSON documents. BSON handling comes from the `bson`
package that ships with `pymongo`.

The package provides:

- `ftdc.encoding` – low-level pieces of the format:
  - `read_document(obj)` turns input into a metrics document (a dict). It
    accepts dicts (returned as they are), objects with a `to_document()` or
    `to_bson()` method, raw BSON bytes, other mappings with string keys
    (returned sorted by key) and dataclass instances. `None` and unsupported
    types raise `TypeError`; bytes that are not valid BSON, or a failing
    `to_bson()`, raise `ValueError`.
  - `undelta(value, deltas)` rebuilds a series from a starting value and its
    deltas, wrapping at the signed 64-bit range.
  - `encode_value(value)` writes an unsigned 64-bit varint;
    `encode_size_value(value)` writes a little-endian unsigned 32-bit integer.
  - `compress_buffer(data)` prefixes the uncompressed length and
    zlib-compresses the data.
  - `normalize_float` / `restore_float` store a double losslessly as its
    64-bit bit pattern and back.
  - `epoch_ms(moment)` gives milliseconds since the Unix epoch (naive
    datetimes are taken as UTC); `time_epoch_ms(value)` gives the UTC
    datetime back.
  - `is_num(num, value)` is true for an integer or float equal to `num`
    (booleans never match).
  - `get_offset(count, sample, metric)` is the position of a sample in a
    metric-major matrix.
- `ftdc.sampledocs` – builders of sample metric documents
  (`create_event_record`, `rand_flat_document`,
  `rand_flat_document_with_floats`, `rand_complex_document`) and
  `is_metrics_value`, `is_metrics_document`, `is_metrics_array`, which
  return the metric keys a value holds and the number of metric values
  (timestamps count twice; strings, object ids and decimals not at all).
- `ftdc.catcher` – `Catcher`, a thread-safe collector of errors for
  continue-on-error code, which resolves what it gathered into one
  `CatcherError`.
- `ftdc.hdrhist.histogram` and `ftdc.hdrhist.window` – an HDR histogram
  (`Histogram`) for recording values with bounded precision over a wide
  range, and a `WindowedHistogram` for rolling windows.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Histograms

```python
from ftdc.hdrhist.histogram import Histogram

first = Histogram(1, 1000, 3)
second = Histogram(1, 1000, 3)
for value in range(100):
    first.record_value(value)
for value in range(100, 200):
    second.record_value(value)

first.merge(second)
print(first.value_at_quantile(50))   # 99
print(first.total_count())           # 200
```

`Histogram(min_value, max_value, sigfigs)` requires `sigfigs` between 1 and
5 and raises `ValueError` otherwise. `record_value` and `record_values`
raise `ValueError` for negative values and for values too large to fit the
histogram's buckets. `merge` returns the number of values it could not
record.

Other queries: `min()`, `max()`, `mean()`, `std_dev()`,
`value_at_quantile(q)`, `byte_size()`, `significant_figures()`,
`lowest_trackable_value()`, `highest_trackable_value()`, and `reset()` to
forget everything. `record_corrected_value(value, expected_interval)` also
back-fills the samples a stall would have hidden.

`cumulative_distribution()` returns `Bracket` entries (`quantile`, `count`,
`value_at`) and `distribution()` returns `Bar` entries (`from_value`,
`to_value`, `count`) whose string form is a CSV line, ready for plotting.

A histogram can be exported to a `Snapshot` with `export()` and restored
with `Histogram.from_snapshot`, and serialised with `to_bson` /
`from_bson` or `to_json` / `from_json`; `to_document` gives the fields
`lowest`, `highest`, `figures` and `counts`. Two histograms compare equal
with `==` when their settings and counts match.

### Windowed statistics

```python
from ftdc.hdrhist.window import WindowedHistogram

window = WindowedHistogram(2, 1, 1000, 3)
for value in range(100):
    window.current.record_value(value)
window.rotate()
for value in range(100, 200):
    window.current.record_value(value)
window.rotate()   # the oldest section is cleared and reused
for value in range(200, 300):
    window.current.record_value(value)

print(window.merge().value_at_quantile(50))   # 199
```

## Collecting errors

```python
from ftdc.catcher import Catcher, CatcherError

catcher = Catcher()
catcher.add(None)                          # ignored
catcher.new_when(True, "flush interval too short")
catcher.errorf("sample count %d too small", 3)

print(len(catcher), catcher.has_errors())  # 2 True
try:
    catcher.resolve()
except CatcherError as exc:
    print(exc)   # every collected message, one per line
```

`errorf` and `wrapf` format with `%`; `wrap` prefixes a message and keeps
the original as `__cause__`; `check(fn)` records what `fn` raises or
returns as an error. Each method has a `*_when(cond, ...)` form that does
nothing when `cond` is false.

## Encoding helpers

```python
from ftdc.encoding import undelta, encode_value, normalize_float, restore_float

undelta(10, [1, 2, 3])                     # [10, 11, 13, 16]
encode_value(300)                          # b"\xac\x02"
restore_float(normalize_float(42.42))      # 42.42
```

## What this package does not do

It has no reader or writer of FTDC files or streams: it does not split a
file into chunks, decode or produce chunks of metrics, or iterate over the
samples they hold. It has no metric collectors and no command-line tool.
The encoding helpers are the pieces such code would be built from.