"""The parsed form of a proto file and helpers shared by the code generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import NoReturn

from spbproto.textstream import CharStream

ProtoOptions = dict[str, str]


class Label(Enum):
    """How a message field is held."""

    NONE = auto()
    OPTIONAL = auto()
    REPEATED = auto()
    PTR = auto()


@dataclass
class ProtoComment:
    """Comments attached to a definition, each kept with its comment markers."""

    comments: list[str] = field(default_factory=list)


@dataclass
class ProtoField:
    """A single field of a message or a oneof."""

    name: str = ""
    type: str = ""
    number: int = 0
    label: Label = Label.NONE
    options: ProtoOptions = field(default_factory=dict)
    comment: ProtoComment = field(default_factory=ProtoComment)
    bit_field: str = ""


@dataclass
class ProtoEnumValue:
    """A named value of an enum."""

    name: str = ""
    number: int = 0
    options: ProtoOptions = field(default_factory=dict)
    comment: ProtoComment = field(default_factory=ProtoComment)


@dataclass
class ProtoEnum:
    """An enum definition."""

    name: str = ""
    fields: list[ProtoEnumValue] = field(default_factory=list)
    options: ProtoOptions = field(default_factory=dict)
    comment: ProtoComment = field(default_factory=ProtoComment)


@dataclass
class ProtoOneof:
    """A oneof group of fields."""

    name: str = ""
    fields: list[ProtoField] = field(default_factory=list)
    options: ProtoOptions = field(default_factory=dict)
    comment: ProtoComment = field(default_factory=ProtoComment)


@dataclass
class ProtoMap:
    """A map field."""

    name: str = ""
    key_type: str = ""
    value_type: str = ""
    number: int = 0
    options: ProtoOptions = field(default_factory=dict)
    comment: ProtoComment = field(default_factory=ProtoComment)


@dataclass
class ProtoMessage:
    """A message definition; the package of a file is held as one too."""

    name: str = ""
    fields: list[ProtoField] = field(default_factory=list)
    maps: list[ProtoMap] = field(default_factory=list)
    oneofs: list[ProtoOneof] = field(default_factory=list)
    enums: list[ProtoEnum] = field(default_factory=list)
    messages: list[ProtoMessage] = field(default_factory=list)
    forwards: list[str] = field(default_factory=list)
    options: ProtoOptions = field(default_factory=dict)
    comment: ProtoComment = field(default_factory=ProtoComment)


@dataclass
class ProtoImport:
    """An import statement of a proto file."""

    path: Path = field(default_factory=Path)
    comment: ProtoComment = field(default_factory=ProtoComment)


@dataclass
class ProtoFile:
    """A parsed proto file together with its source text."""

    path: Path = field(default_factory=Path)
    content: str = ""
    syntax: str = ""
    syntax_comment: ProtoComment = field(default_factory=ProtoComment)
    package: ProtoMessage = field(default_factory=ProtoMessage)
    file_imports: list[ProtoImport] = field(default_factory=list)
    options: ProtoOptions = field(default_factory=dict)


def replace(text: str, what: str, with_: str) -> str:
    """Replace every occurrence of ``what`` in ``text`` with ``with_``, left to right."""
    if not what:
        raise ValueError("the text to replace must not be empty")
    return text.replace(what, with_)


def raise_parse_error(file: ProtoFile, at: int | str, message: str) -> NoReturn:
    """Raise a :class:`ParseError` located in ``file.content``.

    ``at`` is an offset into the content, or a piece of the content whose
    first occurrence marks the place; text not found points at the start.
    """
    if isinstance(at, str):
        offset = file.content.find(at)
        if offset < 0:
            offset = 0
    else:
        offset = at
    stream = CharStream(file.content)
    stream.skip_to(offset)
    raise stream.parse_error(message)