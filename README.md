# spbproto

Tools for working with protocol buffer definitions:

- `spbproto.textstream`: `CharStream`, a whitespace-aware character stream
  for scanning `.proto` text. `CharStream.parse_error` builds a `ParseError`
  that carries the line and column of the cursor.
- `spbproto.proto`: the data model of a parsed proto file (`ProtoFile`,
  `ProtoMessage`, `ProtoField`, `ProtoEnum`, `ProtoEnumValue`, `ProtoOneof`,
  `ProtoMap`, `ProtoImport`, `ProtoComment`, `Label`), plus `replace` and
  `raise_parse_error`.
- `spbproto.cppheader`: renders a `ProtoFile` as a C++ header with one
  `struct` per message and one `enum class` per enum
  (`render_cpp_definitions`, `dump_cpp_definitions`, `collect_includes`,
  `convert_to_ctype`). Field types honour the `field.type`, `enum.type`,
  `optional.type`, `repeated.type`, `pointer.type`, `string.type` and
  `bytes.type` options, and the matching `*.include` options add includes.
- `spbproto.jsonreader`: `JsonReader`, a streaming JSON reader with the
  primitives that message readers build on: keys, numbers (also when quoted),
  strings with escapes, bitfields, lists, maps, optionals, objects and
  skipping of unknown values. It raises `JsonDecodeError` on malformed input.
  `djb2_hash` and `fnv1a_hash` are hash helpers for key dispatch.
- `spbproto.json_io`: `loads`, `load` and `deserialize_into` for reading
  message objects from JSON.

## Installation

```
pip install spbproto
```

Python 3.10 or later is required. There are no runtime dependencies.

## Examples

Scan proto text:

```python
from spbproto.textstream import CharStream

stream = CharStream('syntax = "proto3";')
assert stream.consume("syntax")
assert stream.consume_char("=")
```

Helpers used while generating C++:

```python
from spbproto.proto import replace
from spbproto.cppheader import trim_include, type_literal_suffix, types_are_compatible

replace("UnitTest.dependency", ".", "::")   # "UnitTest::dependency"
trim_include("my/header.h")                 # '"my/header.h"'
trim_include("<map>")                       # "<map>"
type_literal_suffix("uint64")               # "ULL"
types_are_compatible("uint32", "uint8")     # True
types_are_compatible("uint32", "uint64")    # False
```

Generate a header from a `ProtoFile`:

```python
from spbproto.cppheader import render_cpp_definitions

header_text = render_cpp_definitions(proto_file)   # proto_file: a ProtoFile
```

Errors found while generating, such as an incompatible `field.type`, an
unknown `enum.type`, or a bitfield on a field that is not `required`, are
raised as `ParseError` with the line and column of the offending text in
`ProtoFile.content`.

Read a message from JSON. A message class can be built with no arguments
and has a `read_json_member(reader)` method that reads one key and its value:

```python
from spbproto.json_io import loads

class Point:
    def __init__(self):
        self.x = 0
        self.y = 0

    def read_json_member(self, reader):
        key = reader.read_key(1, 16)
        if key == "x":
            self.x = reader.read_int()
        elif key == "y":
            self.y = reader.read_int()
        else:
            reader.skip_value()

point = loads(Point, '{"x": 1, "y": -2, "z": [true]}')
```

`load(cls, read)` does the same with a `read(size)` callable that returns
`str` or `bytes`, an empty result marking the end.

```python
from spbproto.jsonreader import djb2_hash

djb2_hash("")    # 5381
```

## What the package does not do

- It does not read `.proto` files: a `ProtoFile` is built by the caller.
- It writes only the C++ header with the struct and enum declarations; it
  does not generate the C++ serialization code.
- It reads JSON but does not write it, and has no protobuf binary format.
- It has no command-line tool.

## Running the tests

```
pip install -e .[test]
pytest
```