"""Generate the C++ header that declares the structs and enums of a proto file."""

from __future__ import annotations

import io
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from spbproto.proto import (
    Label,
    ProtoComment,
    ProtoEnum,
    ProtoEnumValue,
    ProtoField,
    ProtoFile,
    ProtoMap,
    ProtoMessage,
    ProtoOneof,
    ProtoOptions,
    raise_parse_error,
    replace,
)

OPTION_FIELD_TYPE = "field.type"
OPTION_ENUM_TYPE = "enum.type"
OPTION_OPTIONAL_TYPE = "optional.type"
OPTION_OPTIONAL_INCLUDE = "optional.include"
OPTION_REPEATED_TYPE = "repeated.type"
OPTION_REPEATED_INCLUDE = "repeated.include"
OPTION_POINTER_TYPE = "pointer.type"
OPTION_POINTER_INCLUDE = "pointer.include"
OPTION_STRING_TYPE = "string.type"
OPTION_STRING_INCLUDE = "string.include"
OPTION_BYTES_TYPE = "bytes.type"
OPTION_BYTES_INCLUDE = "bytes.include"

_WHITE_SPACE = " \t\n\v\f\r"

_SCALAR_TYPES = frozenset(
    {
        "bool",
        "float",
        "double",
        "int32",
        "int64",
        "uint32",
        "uint64",
        "sint32",
        "sint64",
        "fixed32",
        "fixed64",
        "sfixed32",
        "sfixed64",
        "string",
        "bytes",
    }
)

_LITERAL_SUFFIXES = {
    "int64": "LL",
    "uint8": "U",
    "uint16": "U",
    "uint32": "U",
    "uint64": "ULL",
    "sint64": "LL",
    "fixed32": "U",
    "fixed64": "ULL",
    "sfixed64": "ULL",
    "float": "F",
}


def _padded(*names: str) -> tuple[str, ...]:
    # each list of compatible types has four slots; unused slots hold ""
    return names + ("",) * (4 - len(names))


_COMPATIBLE_TYPES = {
    "int8": _padded("int8"),
    "uint8": _padded("uint8"),
    "int16": _padded("int8", "int16"),
    "uint16": _padded("uint8", "uint16"),
    "int32": _padded("int8", "int16", "int32"),
    "int64": _padded("int8", "int16", "int32", "int64"),
    "uint32": _padded("uint8", "uint16", "uint32"),
    "uint64": _padded("uint8", "uint16", "uint32", "uint64"),
    "sint32": _padded("int8", "int16", "int32"),
    "sint64": _padded("int8", "int16", "int32", "int64"),
    "fixed32": _padded("uint8", "uint16", "uint32"),
    "fixed64": _padded("uint8", "uint16", "uint32", "uint64"),
    "sfixed32": _padded("int8", "int16", "int32"),
    "sfixed64": _padded("int8", "int16", "int32", "int64"),
    "": _padded(),
}

_ENUM_CTYPES = {
    "int8": "int8_t",
    "uint8": "uint8_t",
    "int16": "int16_t",
    "uint16": "uint16_t",
    "int32": "int32_t",
    "": "",
}

_INT_CTYPES = {
    "int8": "int8_t",
    "uint8": "uint8_t",
    "int16": "int16_t",
    "uint16": "uint16_t",
    "int32": "int32_t",
    "int64": "int64_t",
    "uint32": "uint32_t",
    "uint64": "uint64_t",
    "sint32": "int32_t",
    "sint64": "int64_t",
    "fixed32": "uint32_t",
    "fixed64": "uint64_t",
    "sfixed32": "int32_t",
    "sfixed64": "int64_t",
    "": "",
}

_LABEL_CONTAINERS = {
    Label.OPTIONAL: (OPTION_OPTIONAL_TYPE, "std::optional<$>"),
    Label.REPEATED: (OPTION_REPEATED_TYPE, "std::vector<$>"),
    Label.PTR: (OPTION_POINTER_TYPE, "std::unique_ptr<$>"),
}

_LABEL_INCLUDES = {
    Label.OPTIONAL: OPTION_OPTIONAL_INCLUDE,
    Label.REPEATED: OPTION_REPEATED_INCLUDE,
    Label.PTR: OPTION_POINTER_INCLUDE,
}


def _is_scalar_type(proto_type: str) -> bool:
    return proto_type in _SCALAR_TYPES


def _header_name_for(proto_path: Path | str) -> str:
    return str(Path(proto_path).with_suffix(".pb.h"))


def _first_option(option: str, *scopes: ProtoOptions | None) -> str | None:
    for scope in scopes:
        if scope and option in scope:
            return scope[option]
    return None


def trim_include(text: str) -> str:
    """Return an include target ready for ``#include``; ``""`` for blank text.

    Text not already wrapped in quotes or angle brackets is put in quotes.
    """
    stripped = text.strip(_WHITE_SPACE)
    if not stripped:
        return ""
    add_prefix = stripped[0] not in ('"', "<")
    add_postfix = stripped[-1] not in ('"', ">")
    if add_prefix or add_postfix:
        return f'"{text}"'
    return text


def type_literal_suffix(proto_type: str) -> str:
    """The C++ literal suffix used for default values of ``proto_type``."""
    return _LITERAL_SUFFIXES.get(proto_type, "")


def types_are_compatible(proto_type: str, field_type: str) -> bool:
    """True when a field of ``proto_type`` may be stored as ``field_type``."""
    compatible = _COMPATIBLE_TYPES.get(proto_type)
    return compatible is not None and field_type in compatible


def _remove_bitfield(text: str) -> str:
    return text.split(":", 1)[0]


def _field_type(file: ProtoFile, options: ProtoOptions | None, ctype: str) -> str:
    if options and OPTION_FIELD_TYPE in options:
        field_type = _remove_bitfield(options[OPTION_FIELD_TYPE])
        if types_are_compatible(ctype, field_type):
            return field_type
        raise_parse_error(
            file, field_type, f"incompatible int type: {ctype} and {field_type}"
        )
    return ctype


def _field_bits(field: ProtoField) -> str:
    """Return the ``:bits`` part of the field type option and record it on the field."""
    option = field.options.get(OPTION_FIELD_TYPE)
    if option is not None:
        index = option.find(":")
        if index != -1:
            field.bit_field = option[index + 1 :]
            return option[index:]
    return ""


def _container_type(
    options: ProtoOptions | None,
    message_options: ProtoOptions | None,
    file_options: ProtoOptions | None,
    option: str,
    ctype: str,
    default_type: str = "",
) -> str:
    chosen = _first_option(option, options, message_options, file_options)
    return replace(default_type if chosen is None else chosen, "$", ctype)


def _enum_type(
    file: ProtoFile,
    options: ProtoOptions,
    message_options: ProtoOptions,
    file_options: ProtoOptions,
    default_type: str,
) -> str:
    chosen = _first_option(OPTION_ENUM_TYPE, options, message_options, file_options)
    if chosen is None:
        return default_type
    ctype = _ENUM_CTYPES.get(chosen)
    if ctype is None:
        raise_parse_error(file, chosen, f"invalid enum type: {chosen}")
    return ctype


def convert_to_ctype(
    file: ProtoFile,
    proto_type: str,
    options: ProtoOptions | None = None,
    message_options: ProtoOptions | None = None,
    file_options: ProtoOptions | None = None,
) -> str:
    """The C++ type that holds a value of ``proto_type``, honouring type options."""
    if proto_type == "string":
        return _container_type(
            options, message_options, file_options, OPTION_STRING_TYPE, "char", "std::string"
        )
    if proto_type == "bytes":
        return _container_type(
            options,
            message_options,
            file_options,
            OPTION_BYTES_TYPE,
            "std::byte",
            "std::vector<$>",
        )
    type_name = _field_type(file, options, proto_type)
    ctype = _INT_CTYPES.get(type_name)
    if ctype is not None:
        return ctype
    return replace(proto_type, ".", "::")


# -- includes ------------------------------------------------------------


def _contains(messages: Iterable[ProtoMessage], attribute: str) -> bool:
    return any(
        getattr(message, attribute) or _contains(message.messages, attribute)
        for message in messages
    )


def _add_option_include(
    includes: set[str], field: ProtoField, message: ProtoMessage, file: ProtoFile, option: str
) -> None:
    chosen = _first_option(option, field.options, message.options, file.options)
    if chosen is not None:
        includes.add(chosen)


def _field_includes(
    includes: set[str], field: ProtoField, message: ProtoMessage, file: ProtoFile
) -> None:
    label_option = _LABEL_INCLUDES.get(field.label)
    if label_option is not None:
        _add_option_include(includes, field, message, file, label_option)
    if field.type == "string":
        _add_option_include(includes, field, message, file, OPTION_STRING_INCLUDE)
    if field.type == "bytes":
        _add_option_include(includes, field, message, file, OPTION_BYTES_INCLUDE)


def _message_includes(includes: set[str], message: ProtoMessage, file: ProtoFile) -> None:
    for field in message.fields:
        _field_includes(includes, field, message, file)
    for oneof in message.oneofs:
        for field in oneof.fields:
            _field_includes(includes, field, message, file)
    for proto_map in message.maps:
        for map_type in (proto_map.key_type, proto_map.value_type):
            _field_includes(includes, ProtoField(type=map_type), message, file)
    for sub_message in message.messages:
        _message_includes(includes, sub_message, file)


def collect_includes(file: ProtoFile) -> list[str]:
    """Every include the header needs, sorted, as given before trimming."""
    includes = {f'"{_header_name_for(item.path)}"' for item in file.file_imports}
    includes.update({"<spb/json.hpp>", "<spb/pb.hpp>", "<cstdint>", "<cstddef>"})
    if _contains(file.package.messages, "maps"):
        includes.add("<map>")
    if _contains(file.package.messages, "oneofs"):
        includes.add("<variant>")
    _message_includes(includes, file.package, file)
    return sorted(includes)


# -- dumping -------------------------------------------------------------


def _dump_comment(out: TextIO, comment: ProtoComment) -> None:
    for text in comment.comments:
        if text.startswith("//[["):
            continue
        out.write(text)
        if not text.endswith("\n"):
            out.write("\n")


def _dump_includes(out: TextIO, includes: Iterable[str]) -> None:
    for include in includes:
        target = trim_include(include)
        if target:
            out.write(f"#include {target}\n")
    out.write("\n")


def _field_type_and_name(field: ProtoField, message: ProtoMessage, file: ProtoFile) -> str:
    ctype = convert_to_ctype(file, field.type, field.options, message.options, file.options)
    if field.label is Label.NONE:
        return f"{ctype} {field.name}{_field_bits(field)}"
    option, default_type = _LABEL_CONTAINERS[field.label]
    container = _container_type(
        field.options, message.options, file.options, option, ctype, default_type
    )
    bits = _field_bits(field)
    if bits:
        raise_parse_error(file, bits, "bitfield can be used only with `required` label")
    return f"{container} {field.name}"


def _default_value(field: ProtoField) -> str:
    value = field.options.get("default")
    if value is None:
        return ""
    if _is_scalar_type(field.type):
        quoted = len(value) >= 2 and value[0] == '"' and value[-1] == '"'
        if field.type == "string" and not quoted:
            return f' = "{value}"'
        return f" = {value}{type_literal_suffix(field.type)}"
    # not a scalar, so the type is an enum
    return f" = {replace(field.type, '.', '::')}::{value}"


def _dump_field(out: TextIO, field: ProtoField, message: ProtoMessage, file: ProtoFile) -> None:
    _dump_comment(out, field.comment)
    if field.options.get("deprecated") == "true":
        out.write("[[deprecated]] ")
    out.write(_field_type_and_name(field, message, file))
    out.write(_default_value(field))
    out.write(";\n")


def _dump_enum_value(out: TextIO, value: ProtoEnumValue) -> None:
    _dump_comment(out, value.comment)
    out.write(f"{value.name} = {value.number},\n")


def _dump_enum(
    out: TextIO, proto_enum: ProtoEnum, message: ProtoMessage, file: ProtoFile
) -> None:
    _dump_comment(out, proto_enum.comment)
    base = _enum_type(file, proto_enum.options, message.options, file.options, "int32_t")
    out.write(f"enum class {proto_enum.name} : {base}\n{{\n")
    for value in proto_enum.fields:
        _dump_enum_value(out, value)
    out.write("};\n")


def _dump_oneof(out: TextIO, oneof: ProtoOneof, file: ProtoFile) -> None:
    _dump_comment(out, oneof.comment)
    types = ", ".join(convert_to_ctype(file, field.type) for field in oneof.fields)
    out.write(f"std::variant< {types} > {oneof.name};\n")


def _dump_map(out: TextIO, proto_map: ProtoMap, file: ProtoFile) -> None:
    _dump_comment(out, proto_map.comment)
    key = convert_to_ctype(file, proto_map.key_type)
    value = convert_to_ctype(file, proto_map.value_type)
    out.write(f"std::map< {key}, {value} > {proto_map.name};\n")


def _dump_forwards(out: TextIO, forwards: list[str]) -> None:
    for forward in forwards:
        out.write(f"struct {forward};\n")
    if forwards:
        out.write("\n")


def _dump_message(out: TextIO, message: ProtoMessage, file: ProtoFile) -> None:
    _dump_comment(out, message.comment)
    out.write(f"struct {message.name}\n{{\n")
    _dump_forwards(out, message.forwards)
    for sub_enum in message.enums:
        _dump_enum(out, sub_enum, message, file)
    for sub_message in message.messages:
        _dump_message(out, sub_message, file)
    for field in message.fields:
        _dump_field(out, field, message, file)
    for proto_map in message.maps:
        _dump_map(out, proto_map, file)
    for oneof in message.oneofs:
        _dump_oneof(out, oneof, file)
    out.write("};\n")


def dump_cpp_definitions(file: ProtoFile, stream: TextIO) -> None:
    """Write the C++ header with all structs and enums of ``file`` to ``stream``."""
    package = file.package
    namespace = replace(package.name, ".", "::") if package.name else ""

    stream.write("#pragma once\n\n")
    _dump_includes(stream, collect_includes(file))
    _dump_comment(stream, file.syntax_comment)
    _dump_comment(stream, package.comment)
    if namespace:
        stream.write(f"namespace {namespace}\n{{\n")
    for proto_enum in package.enums:
        _dump_enum(stream, proto_enum, package, file)
    _dump_forwards(stream, package.forwards)
    for message in package.messages:
        _dump_message(stream, message, file)
    if namespace:
        stream.write(f"}}// namespace {namespace}\n\n")


def render_cpp_definitions(file: ProtoFile) -> str:
    """Return the C++ header for ``file`` as a string."""
    buffer = io.StringIO()
    dump_cpp_definitions(file, buffer)
    return buffer.getvalue()