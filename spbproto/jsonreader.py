"""A streaming JSON reader with the primitives that generated message readers build on."""

from __future__ import annotations

import codecs
import re
import struct
from collections.abc import Callable
from typing import Any, Union

_ALL = 0xFFFFFFFF
_CHUNK = 4096
_ESCAPE = "\\"
_WHITE_SPACE = frozenset(" \t\n\v\f\r")
_ALNUM = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")
_STRING_STOP = re.compile(r'["\\]')
_SIGNED = re.compile(r"-?[0-9]+")
_UNSIGNED = re.compile(r"[0-9]+")
_FLOAT = re.compile(
    r"-?(?:infinity|inf|nan|(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?)",
    re.IGNORECASE,
)

_INT_RANGES: dict[str, tuple[int, int]] = {
    "int8": (-(2**7), 2**7 - 1),
    "uint8": (0, 2**8 - 1),
    "int16": (-(2**15), 2**15 - 1),
    "uint16": (0, 2**16 - 1),
    "int32": (-(2**31), 2**31 - 1),
    "uint32": (0, 2**32 - 1),
    "int64": (-(2**63), 2**63 - 1),
    "uint64": (0, 2**64 - 1),
}
_FLOAT_KINDS = frozenset({"float", "double"})

Source = Union[str, bytes, bytearray, memoryview, Callable[[int], Any]]


class JsonDecodeError(ValueError):
    """Raised when the JSON input does not match what is being read."""


def djb2_hash(text: str | bytes) -> int:
    """The 32-bit djb2 hash of the UTF-8 bytes of ``text``."""
    data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    value = 5381
    for byte in data:
        value = (value * 33 + byte) & 0xFFFFFFFF
    return value


def fnv1a_hash(text: str | bytes) -> int:
    """The 64-bit FNV hash (multiply, then xor) of the UTF-8 bytes of ``text``."""
    data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    mask = 0xFFFFFFFFFFFFFFFF
    prime = 1099511628211
    value = 14695981039346656037
    for byte in data:
        value = (value * prime) & mask
        # bytes are taken as signed chars, so high bytes are sign-extended
        value ^= (byte - 256) & mask if byte >= 0x80 else byte
    return value


def _normalise_kind(kind: Any) -> str:
    if kind is int:
        return "int64"
    if kind is float:
        return "double"
    if kind in _INT_RANGES or kind in _FLOAT_KINDS:
        return kind
    raise ValueError(f"unknown number kind: {kind!r}")


def _parse_number(text: str, kind: str) -> tuple[int | float, int]:
    """Parse a number at the start of ``text``; return it and the characters used."""
    if kind in _FLOAT_KINDS:
        match = _FLOAT.match(text)
        if match is None:
            raise JsonDecodeError("invalid number")
        literal = match.group()
        value = float(literal)
        if value in (float("inf"), float("-inf")) and "inf" not in literal.lower():
            raise JsonDecodeError("invalid number")
        if kind == "float":
            try:
                value = struct.unpack("<f", struct.pack("<f", value))[0]
            except OverflowError:
                raise JsonDecodeError("invalid number") from None
        return value, match.end()

    low, high = _INT_RANGES[kind]
    match = (_SIGNED if low < 0 else _UNSIGNED).match(text)
    if match is None:
        raise JsonDecodeError("invalid number")
    number = int(match.group())
    if not low <= number <= high:
        raise JsonDecodeError("invalid number")
    return number, match.end()


class JsonReader:
    """Reads JSON tokens from a string, bytes, or a ``read(size)`` callable.

    ``current_char`` is ``""`` once the input is exhausted.
    """

    def __init__(self, source: Source) -> None:
        self._read: Callable[[int], Any] | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        if isinstance(source, str):
            self._buffer = source
        elif isinstance(source, (bytes, bytearray, memoryview)):
            try:
                self._buffer = bytes(source).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise JsonDecodeError("invalid utf-8 input") from exc
        elif callable(source):
            self._buffer = ""
            self._read = source
        else:
            raise TypeError(f"cannot read JSON from {type(source).__name__}")
        self._pos = 0
        self._current: str | None = None
        self._current_key = ""

    # -- buffering -------------------------------------------------------

    def _fill(self, size: int) -> None:
        while self._read is not None and len(self._buffer) - self._pos < size:
            if self._pos:
                self._buffer = self._buffer[self._pos :]
                self._pos = 0
            chunk = self._read(_CHUNK)
            try:
                if not chunk:
                    self._buffer += self._decoder.decode(b"", final=True)
                    self._read = None
                    break
                if isinstance(chunk, str):
                    self._buffer += chunk
                else:
                    self._buffer += self._decoder.decode(bytes(chunk))
            except UnicodeDecodeError as exc:
                raise JsonDecodeError("invalid utf-8 input") from exc

    def _peek(self, size: int) -> str:
        self._fill(size)
        return self._buffer[self._pos : self._pos + size]

    def _advance(self, size: int) -> None:
        self._fill(size)
        self._pos = min(self._pos + size, len(self._buffer))

    def _update_current(self, skip_white_space: bool) -> None:
        while True:
            c = self._peek(1)
            if not c:
                self._current = ""
                return
            if skip_white_space and c in _WHITE_SPACE:
                self._pos += 1
                continue
            self._current = c
            return

    # -- tokens ----------------------------------------------------------

    def current_char(self) -> str:
        """The character under the cursor after white space, or ``""`` at the end."""
        if self._current is None:
            self._update_current(True)
        return self._current or ""

    def consume_char(self, c: str) -> bool:
        """Consume the current character if it equals ``c``."""
        if c and self.current_char() == c:
            self.consume_current_char(True)
            return True
        return False

    def consume(self, token: str) -> bool:
        """Consume ``token`` if it stands at the cursor as a whole word."""
        if not token:
            raise ValueError("token must not be empty")
        if self.current_char() != token[0]:
            return False
        text = self._peek(len(token) + 1)
        if not text.startswith(token):
            return False
        if len(text) == len(token):
            ends_word = True
        else:
            following = text[-1]
            ends_word = following in _WHITE_SPACE or (
                following not in _ALNUM and following != "_"
            )
        if ends_word:
            self._advance(len(token))
            self._update_current(True)
            return True
        return False

    def consume_current_char(self, skip_white_space: bool) -> None:
        """Step past the current character, optionally skipping white space after it."""
        self._advance(1)
        self._update_current(skip_white_space)

    def view(self, size: int) -> str:
        """Up to ``size`` characters at the cursor; raises at the end of input."""
        result = self._peek(size)
        if not result:
            raise JsonDecodeError("unexpected end of stream")
        return result

    def skip(self, size: int) -> None:
        """Step past ``size`` characters."""
        self._advance(size)
        self._current = None

    # -- skipping --------------------------------------------------------

    def _ignore_string(self) -> None:
        if self.current_char() != '"':
            raise JsonDecodeError("expecting '\"'")
        last = _ESCAPE
        while True:
            chunk = self.view(_ALL)
            for length, current in enumerate(chunk, 1):
                if current == '"' and last != _ESCAPE:
                    self.skip(length)
                    return
                last = current if current != _ESCAPE or last != _ESCAPE else " "
            self.skip(len(chunk))

    def _ignore_object(self) -> None:
        self.consume_current_char(True)
        if self.consume_char("}"):
            return
        while True:
            self._ignore_string()
            if not self.consume_char(":"):
                raise JsonDecodeError("expecting ':'")
            self.skip_value()
            if not self.consume_char(","):
                break
        if not self.consume_char("}"):
            raise JsonDecodeError("expecting '}'")

    def _ignore_array(self) -> None:
        self.consume_current_char(True)
        if self.consume_char("]"):
            return
        while True:
            self.skip_value()
            if not self.consume_char(","):
                break
        if not self.consume_char("]"):
            raise JsonDecodeError("expecting ']'")

    def skip_value(self) -> None:
        """Step over one JSON value of any kind."""
        current = self.current_char()
        if current == "{":
            self._ignore_object()
        elif current == "[":
            self._ignore_array()
        elif current == '"':
            self._ignore_string()
        elif current == "n":
            if not self.consume("null"):
                raise JsonDecodeError("expecting 'null'")
        elif current in ("t", "f"):
            self.read_bool()
        else:
            self.read_number("double")

    # -- strings ---------------------------------------------------------

    def _unicode_from_hex(self) -> int:
        digits = self.view(4)
        if _HEX4.fullmatch(digits) is None:
            raise JsonDecodeError("invalid escape sequence")
        self.skip(4)
        return int(digits, 16)

    def _unescape_unicode(self) -> str:
        value = self._unicode_from_hex()
        if 0xD800 <= value <= 0xDBFF and self.view(2).startswith("\\u"):
            self.skip(2)
            low = self._unicode_from_hex()
            if not 0xDC00 <= low <= 0xDFFF:
                raise JsonDecodeError("invalid escape sequence")
            value = ((value - 0xD800) << 10) + (low - 0xDC00) + 0x10000
        if 0xD800 <= value <= 0xDFFF:
            raise JsonDecodeError("invalid escape sequence")
        return chr(value)

    def _unescape(self) -> str:
        c = self.current_char()
        self.consume_current_char(False)
        simple = {
            '"': '"',
            "\\": "\\",
            "/": "/",
            "b": "\b",
            "f": "\f",
            "n": "\n",
            "r": "\r",
            "t": "\t",
        }
        if c in simple:
            return simple[c]
        if c == "u":
            return self._unescape_unicode()
        raise JsonDecodeError("invalid escape sequence")

    def read_string(self) -> str:
        """Read a JSON string, resolving its escape sequences."""
        if self.current_char() != '"':
            raise JsonDecodeError("expecting '\"'")
        self.consume_current_char(False)
        parts: list[str] = []
        while True:
            chunk = self.view(_ALL)
            found = _STRING_STOP.search(chunk)
            if found is None:
                parts.append(chunk)
                self.skip(len(chunk))
                continue
            index = found.start()
            parts.append(chunk[:index])
            self.skip(index + 1)
            if chunk[index] == '"':
                return "".join(parts)
            parts.append(self._unescape())

    def read_string_view(self, min_size: int, max_size: int) -> str:
        """Read a string's raw text; ``""`` when its length is outside the bounds."""
        if self.current_char() != '"':
            raise JsonDecodeError("expecting '\"'")
        chunk = self.view(max_size + 2)
        last = _ESCAPE
        for length, current in enumerate(chunk, 1):
            if current == '"' and last != _ESCAPE:
                self.skip(length)
                if min_size <= length - 2 <= max_size:
                    return chunk[1 : length - 1]
                return ""
            last = current if current != _ESCAPE or last != _ESCAPE else " "
        self._ignore_string()
        return ""

    # -- scalars ---------------------------------------------------------

    def read_number(self, kind: Any) -> int | float:
        """Read a number of ``kind`` ("int8" .. "uint64", "float", "double", int or float).

        The number may also be written as a JSON string.
        """
        name = _normalise_kind(kind)
        if self.current_char() == '"':
            text = self.read_string_view(1, _ALL)
            value, _ = _parse_number(text, name)
            return value
        chunk = self.view(_ALL)
        value, used = _parse_number(chunk, name)
        self.skip(used)
        return value

    def read_int(self) -> int:
        """Read a 32-bit signed integer."""
        return int(self.read_number("int32"))

    def read_bool(self) -> bool:
        """Read ``true`` or ``false``."""
        if self.consume("true"):
            return True
        if self.consume("false"):
            return False
        raise JsonDecodeError("expecting 'true' or 'false'")

    def read_string_or_int(self, min_size: int, max_size: int) -> str | int:
        """Read a raw string (as :meth:`read_string_view`) or a 32-bit integer."""
        if self.current_char() == '"':
            return self.read_string_view(min_size, max_size)
        return self.read_int()

    def read_key(self, min_size: int, max_size: int) -> str:
        """Read an object key and the ``:`` after it."""
        self._current_key = self.read_string_view(min_size, max_size)
        if not self.consume_char(":"):
            raise JsonDecodeError("expecting ':'")
        return self._current_key

    def current_key(self) -> str:
        """The key most recently read by :meth:`read_key`."""
        return self._current_key

    def read_bitfield(self, kind: Any, bits: int) -> int:
        """Read an integer of ``kind`` that must fit in ``bits`` bits."""
        name = _normalise_kind(kind)
        if name not in _INT_RANGES:
            raise ValueError("bitfields hold integers only")
        value = int(self.read_number(name))
        if _INT_RANGES[name][0] < 0:
            fits = -(1 << (bits - 1)) <= value < (1 << (bits - 1)) if bits > 0 else value == 0
        else:
            fits = 0 <= value < (1 << bits)
        if not fits:
            raise JsonDecodeError("bitfield overflow")
        return value

    # -- containers ------------------------------------------------------

    def read_list(self, read_item: Callable[[JsonReader], Any]) -> list[Any]:
        """Read an array (or ``null``) with ``read_item`` for each element."""
        if self.consume("null"):
            return []
        if not self.consume_char("["):
            raise JsonDecodeError("expecting '['")
        items: list[Any] = []
        if self.consume_char("]"):
            return items
        while True:
            items.append(read_item(self))
            if not self.consume_char(","):
                break
        if not self.consume_char("]"):
            raise JsonDecodeError("expecting ']'")
        return items

    def read_map(
        self,
        read_key: Callable[[JsonReader], Any] | None,
        read_value: Callable[[JsonReader], Any],
    ) -> dict[Any, Any]:
        """Read an object as a map; the first value wins for a repeated key.

        With ``read_key`` as None the keys are strings; otherwise ``read_key``
        is given a reader over the text of each key.
        """
        if self.consume("null"):
            return {}
        if not self.consume_char("{"):
            raise JsonDecodeError("expecting '{'")
        result: dict[Any, Any] = {}
        if self.consume_char("}"):
            return result
        while True:
            if read_key is None:
                key = self.read_string()
            else:
                key = read_key(JsonReader(self.read_string_view(1, _ALL)))
            if not self.consume_char(":"):
                raise JsonDecodeError("expecting ':'")
            value = read_value(self)
            result.setdefault(key, value)
            if not self.consume_char(","):
                break
        if not self.consume_char("}"):
            raise JsonDecodeError("expecting '}'")
        return result

    def read_optional(self, read_value: Callable[[JsonReader], Any]) -> Any:
        """Read ``null`` as None, anything else with ``read_value``."""
        if self.consume("null"):
            return None
        return read_value(self)

    def read_object(self, read_member: Callable[[JsonReader], Any]) -> None:
        """Read an object, calling ``read_member`` once for each key and value."""
        if not self.consume_char("{"):
            raise JsonDecodeError("expecting '{'")
        if self.consume_char("}"):
            return
        while True:
            read_member(self)
            if self.consume_char(","):
                continue
            if self.consume_char("}"):
                return
            raise JsonDecodeError("expecting '}' or ','")