import pytest

from spbproto.proto import (
    Label,
    ProtoComment,
    ProtoEnum,
    ProtoEnumValue,
    ProtoField,
    ProtoFile,
    ProtoImport,
    ProtoMap,
    ProtoMessage,
    ProtoOneof,
    raise_parse_error,
    replace,
)
from spbproto.textstream import ParseError


def test_replace_package_separator():
    assert replace("UnitTest.dependency", ".", "::") == "UnitTest::dependency"


def test_replace_container_placeholder():
    assert replace("std::vector<$>", "$", "std::byte") == "std::vector<std::byte>"


def test_replace_without_match_returns_input():
    assert replace("int32", ".", "::") == "int32"


def test_replace_does_not_rescan_inserted_text():
    result = replace("a.b", ".", "..")
    assert result.count(".") == 2
    assert replace(result, "..", ".") == "a.b"


def test_replace_empty_pattern_raises():
    with pytest.raises(ValueError):
        replace("abc", "", "x")


def _sample_file():
    content = "package UnitTest;\nmessage A {\n    required B b = 1;\n}\n"
    return ProtoFile(path="tmp_test.proto", content=content)


def test_raise_parse_error_at_offset():
    file = _sample_file()
    with pytest.raises(ParseError) as info:
        raise_parse_error(file, file.content.index("required"), "unknown type")
    assert info.value.line == 3
    assert info.value.message == "unknown type"
    assert str(info.value).endswith(": unknown type")


def test_raise_parse_error_at_text():
    file = _sample_file()
    with pytest.raises(ParseError) as info:
        raise_parse_error(file, "message A", "bad message")
    assert info.value.line == 2


def test_raise_parse_error_text_not_found_points_at_start():
    file = _sample_file()
    with pytest.raises(ParseError) as info:
        raise_parse_error(file, "not in the file", "oops")
    assert info.value.line == 1
    assert info.value.column == 1


def test_field_defaults():
    proto_field = ProtoField(name="value", type="uint32", number=1)
    assert proto_field.label is Label.NONE
    assert proto_field.options == {}
    assert proto_field.comment.comments == []
    assert proto_field.bit_field == ""


def test_mutable_defaults_are_not_shared():
    first = ProtoMessage(name="A")
    second = ProtoMessage(name="B")
    first.fields.append(ProtoField(name="x"))
    first.options["enum.type"] = "uint8"
    assert second.fields == []
    assert second.options == {}


def test_message_tree():
    inner_enum = ProtoEnum(
        name="PhoneType",
        fields=[ProtoEnumValue(name="MOBILE", number=0), ProtoEnumValue(name="HOME", number=1)],
    )
    oneof = ProtoOneof(
        name="oneof_field",
        fields=[ProtoField(name="oneof_uint32", type="uint32", number=1)],
    )
    mapping = ProtoMap(name="m_int32", key_type="int32", value_type="int32", number=2)
    message = ProtoMessage(name="A", enums=[inner_enum], oneofs=[oneof], maps=[mapping])
    package = ProtoMessage(name="UnitTest", messages=[message])
    file = ProtoFile(
        package=package,
        file_imports=[ProtoImport(path="empty.proto", comment=ProtoComment(["// c"]))],
    )
    assert file.package.messages[0].enums[0].fields[1].name == "HOME"
    assert file.package.messages[0].maps[0].key_type == "int32"
    assert file.package.messages[0].oneofs[0].fields[0].type == "uint32"
    assert file.file_imports[0].comment.comments == ["// c"]


def test_fields_keep_each_label():
    labels = [Label.NONE, Label.OPTIONAL, Label.REPEATED, Label.PTR]
    fields = [ProtoField(name=f"f{number}", label=label) for number, label in enumerate(labels)]
    assert [proto_field.label for proto_field in fields] == labels
    assert len({proto_field.label for proto_field in fields}) == 4