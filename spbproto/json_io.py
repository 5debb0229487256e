"""Read whole messages from JSON text, bytes or a ``read(size)`` callable.

A message class is any class that can be built with no arguments and whose
instances have a ``read_json_member(reader)`` method. That method reads one
key with :meth:`JsonReader.read_key` and then its value, or steps over the
value with :meth:`JsonReader.skip_value` when the key is unknown.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from spbproto.jsonreader import JsonReader

T = TypeVar("T")


def deserialize_into(reader: JsonReader, cls: type[T]) -> T:
    """Read one JSON object from ``reader`` into a new instance of ``cls``."""
    message = cls()
    read_member = getattr(message, "read_json_member", None)
    if read_member is None or not callable(read_member):
        raise TypeError(f"{cls.__name__} has no read_json_member method")
    reader.read_object(read_member)
    return message


def loads(cls: type[T], data: str | bytes | bytearray | memoryview) -> T:
    """Read a message of type ``cls`` from JSON held in ``data``."""
    return deserialize_into(JsonReader(data), cls)


def load(cls: type[T], read: Callable[[int], Any]) -> T:
    """Read a message of type ``cls`` from JSON supplied by ``read(size)``.

    ``read`` returns ``str`` or ``bytes``; an empty result marks the end.
    """
    return deserialize_into(JsonReader(read), cls)