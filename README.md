# dbmscore

The storage core of a small table-oriented database, plus a client for the
server's length-prefixed wire protocol.

## Contents

- **Typed values**: `dbmscore.numeric` (`Integer`, `IntegerMeta`,
  `AutoIncrement`, `Float`, `FloatMeta`), `dbmscore.text` (`String`,
  `StringMeta`, `Varchar`, `VarcharMeta`) and `dbmscore.temporal`
  (`DateTime`, `DateTimeMeta`, `format_time`, `parse_time`). Every value has a
  binary encoding (`marshal_binary` / `unmarshal_binary`), key bytes for
  ordering (`key_bytes`), `compare`, `compare_op` with an `Operator`, `cast`
  to another type, `fill` / `zero` and `to_json`. Datetimes are Unix seconds,
  shown as `YYYY-MM-DD HH:MM:SS` in UTC.
- **Base types** (`dbmscore.base`): `TypeCode`, `Operator`, and the abstract
  `DataTypeMeta` and `DataType`.
- **Type registry** (`dbmscore.registry`): `meta_for` builds a meta from a
  `TypeCode` and parameters, `meta_from_dict` rebuilds one from its
  dictionary form, `new_value` makes an empty value, `parse_type` reads
  tokenised declarations such as `["UInt32", "AUTO", "INCREMENT"]`,
  `["Float64"]`, `["VARCHAR", "(", "32", ")"]`, `["STRING"]` or
  `["DATETIME"]`, `parse_json_value` turns a JSON scalar into a value, and
  `compare_rows` orders two rows by key columns.
- **Columns** (`dbmscore.column.Column`): a name and a meta, with
  `to_dict` / `from_dict` and `to_json` / `from_json`.
- **Records** (`dbmscore.record`): `Metadata` (the 14-byte data file header)
  and `Record` (one row's binary layout).
- **Data files** (`dbmscore.datafile`): `DataFile` stores rows in blocks of
  one file and addresses them by `Pointer`. It supports `insert`, `get`,
  `get_map`, `update`, `delete` (each with a `*_mem` variant that defers the
  disk write until `flush`), `scan`, `prepare_space`, `count`, `heap_size`
  and `close`, and works as a context manager. Freed blocks are reused.
- **Sorted merging** (`dbmscore.sorting`): `RowHeap`, `HeapItem` and
  `merge_sorted`, which merges sources already ordered by key columns into
  one ordered stream.
- **Framing** (`dbmscore.pipe`, `dbmscore.response`): `frame` prefixes a
  message with its 4-byte big-endian length; `Pipe` is a thread-safe
  in-process pipe of framed messages that closes its writing side when the
  `EOS` marker is written; `ResponseReader.read_line` reads one framed
  message from any object with `read`.
- **Client** (`dbmscore.client`): `Client` connects over TCP, authenticates
  with `user:password` and sends queries; `Rows` iterates the result rows,
  decoded from JSON arrays, until the `EOS` frame.
- **Configuration** (`dbmscore.config`): `AppConfig` and `ServerConfig`
  (defaults: host `localhost`, port `8080`, auth timeout `10`).

Errors are subclasses of `dbmscore.errors.DBMSError`, for example
`InvalidDataTypeError` when a value of the wrong kind is set, `CastError`
when a conversion is not supported, `TypeSyntaxError` for a bad declaration
and `NotFoundError` for a pointer with no live row.

## Installation

```
pip install .
```

With test dependencies:

```
pip install ".[test]"
```

## Typed values

```python
from dbmscore.base import Operator, TypeCode
from dbmscore.registry import meta_for, new_value, parse_type

int_meta = parse_type(["UInt32"])
a = new_value(int_meta).set(7)
b = new_value(int_meta).set(42)

a.compare(b)                       # -1
a.compare_op(Operator.LESS, b)     # True
a.value()                          # 7

name = new_value(meta_for(TypeCode.VARCHAR, 16)).set("Alice")
name.value()                       # "Alice"
```

## Data files

```python
from dbmscore.column import Column
from dbmscore.datafile import DataFile, Options
from dbmscore.registry import new_value, parse_type

columns = [
    Column("id", parse_type(["UInt32"])),
    Column("name", parse_type(["VARCHAR", "(", "32", ")"])),
]

with DataFile("people", Options(columns=columns)) as df:   # writes people.dat
    ptr = df.insert([
        new_value(columns[0].meta).set(1),
        new_value(columns[1].meta).set("Alice"),
    ])
    print(df.get_map(ptr)["name"].value(), df.count())
    for pointer, row in df.scan():
        print(pointer, [value.value() for value in row])
```

## Merging sorted streams

```python
from dbmscore.sorting import merge_sorted

merged = list(merge_sorted({"a": rows_a, "b": rows_b}, ["id"]))
```

Each source must already be ordered by the key columns; closing the
generator early closes the sources still open.

## Client

```python
from dbmscore.client import Client

password = "password"
with Client("localhost", 8080, "username", password) as client:
    for row in client.query("SELECT id, firstname FROM testtable;"):
        print(row)
```

The package installs a command that sends one query and prints each row:

```
dbmscore-client "SELECT id FROM testtable;"
```

With no query argument it reads the query from standard input. Options:
`--host` (default `localhost`), `--port` (default `8080`), `--user` and
`--password`.

## What this package does not do

It has no server, no query language parser or executor, and no tables or
indexes built on top of the data files. The client needs a compatible
server to talk to; the storage pieces can be used on their own.

## Running the tests

```
pytest
```