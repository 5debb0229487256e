from __future__ import annotations

import io
from dataclasses import dataclass, field

import pytest

from spbproto.json_io import deserialize_into, load, loads
from spbproto.jsonreader import JsonDecodeError, JsonReader


@dataclass
class Person:
    name: str = ""
    id: int = 0
    tags: list = field(default_factory=list)
    friend: Person | None = None

    def read_json_member(self, reader: JsonReader) -> None:
        key = reader.read_key(1, 16)
        if key == "name":
            self.name = reader.read_string()
        elif key == "id":
            self.id = reader.read_int()
        elif key == "tags":
            self.tags = reader.read_list(JsonReader.read_string)
        elif key == "friend":
            self.friend = reader.read_optional(lambda r: deserialize_into(r, Person))
        else:
            reader.skip_value()


class NoReader:
    pass


def test_loads_reads_fields_from_str():
    person = loads(Person, '{"name": "Ann", "id": 7, "tags": ["a", "b"]}')
    assert person == Person(name="Ann", id=7, tags=["a", "b"])


def test_loads_reads_from_bytes():
    person = loads(Person, b'{"name":"Bob","id":"12"}')
    assert person.name == "Bob"
    assert person.id == 12


def test_empty_object_gives_defaults():
    assert loads(Person, "  {  }  ") == Person()


def test_nested_message_and_null():
    person = loads(Person, '{"name":"A","friend":{"name":"B","friend":null}}')
    assert person.friend == Person(name="B")
    assert person.friend.friend is None


def test_unknown_keys_are_skipped():
    text = '{"extra": {"x": [1, 2.5, true, null, "s"]}, "name": "C", "other": -3}'
    assert loads(Person, text) == Person(name="C")


def test_load_from_chunked_reader():
    text = '{"name": "' + "x" * 10000 + '", "id": 3}'
    person = load(Person, io.BytesIO(text.encode("utf-8")).read)
    assert person.name == "x" * 10000
    assert person.id == 3


def test_load_matches_loads():
    text = '{"name":"D","tags":["\\u00e9","q"],"id":-5}'
    assert load(Person, io.StringIO(text).read) == loads(Person, text)


def test_escapes_in_strings():
    assert loads(Person, '{"name": "a\\nb\\"c"}').name == 'a\nb"c'


def test_deserialize_into_uses_given_reader():
    reader = JsonReader('{"id": 4}')
    assert deserialize_into(reader, Person) == Person(id=4)
    assert reader.current_char() == ""


@pytest.mark.parametrize(
    "text",
    [
        "",
        "[]",
        '{"name": "A"',
        '{"name" "A"}',
        '{"name": "A" "id": 1}',
        '{"id": true}',
        '{"name": 5}',
    ],
)
def test_malformed_input_raises(text):
    with pytest.raises(JsonDecodeError):
        loads(Person, text)


def test_class_without_member_reader_is_rejected():
    with pytest.raises(TypeError):
        loads(NoReader, "{}")