import pytest

from spbproto.textstream import CharStream, ParseError


def test_leading_white_space_is_skipped():
    stream = CharStream("  \n\t abc")
    assert stream.current_char() == "a"
    assert stream.content() == "abc"


def test_blank_stream_is_empty():
    stream = CharStream("   \n ")
    assert stream.empty()
    assert stream.current_char() == ""


def test_consume_char_matches_only_current():
    stream = CharStream("{ x")
    assert stream.consume_char("{")
    assert stream.current_char() == "x"
    assert not stream.consume_char("{")
    assert stream.current_char() == "x"


def test_consume_char_at_end_fails():
    stream = CharStream("")
    assert not stream.consume_char("")
    assert stream.empty()


def test_consume_whole_word():
    stream = CharStream("message Foo")
    assert stream.consume("message")
    assert stream.content() == "Foo"


def test_consume_rejects_prefix_of_longer_word():
    stream = CharStream("messages Foo")
    assert not stream.consume("message")
    assert stream.content() == "messages Foo"
    assert stream.current_char() == "m"


def test_consume_token_followed_by_punctuation():
    stream = CharStream("syntax= \"proto3\"")
    assert stream.consume("syntax")
    assert stream.current_char() == "="


def test_consume_token_at_end_of_text():
    stream = CharStream("import")
    assert stream.consume("import")
    assert stream.empty()


def test_consume_current_char_without_skipping_space():
    stream = CharStream("a  b")
    stream.consume_current_char(False)
    assert stream.current_char() == " "
    stream.consume_space()
    assert stream.current_char() == "b"


def test_consume_current_char_with_skipping_space():
    stream = CharStream("a  b")
    stream.consume_current_char(True)
    assert stream.current_char() == "b"


def test_consume_current_char_at_end_is_noop():
    stream = CharStream("a")
    stream.consume_current_char(True)
    stream.consume_current_char(True)
    assert stream.empty()
    assert stream.content() == ""


def test_start_position_is_first_line_first_column():
    stream = CharStream("abc")
    assert stream.current_line() == 1
    assert stream.current_column() == 1


def test_skip_to_tracks_lines():
    text = "a\nb\nc"
    stream = CharStream(text)
    stream.skip_to(text.index("c"))
    assert stream.current_char() == "c"
    assert stream.current_line() == 3


def test_columns_advance_along_a_line():
    text = "ab\ncd"
    stream = CharStream(text)
    stream.skip_to(text.index("c"))
    column_c = stream.current_column()
    stream.skip_to(text.index("d"))
    assert stream.current_column() == column_c + 1
    assert stream.current_line() == 2


def test_skip_to_skips_white_space():
    text = "x   y"
    stream = CharStream(text)
    stream.skip_to(1)
    assert stream.current_char() == "y"


def test_skip_to_out_of_range_raises():
    stream = CharStream("abc")
    with pytest.raises(ValueError):
        stream.skip_to(10)
    with pytest.raises(ValueError):
        stream.skip_to(-1)


def test_parse_error_carries_location():
    text = "first\nsecond"
    stream = CharStream(text)
    stream.skip_to(text.index("second"))
    error = stream.parse_error("unexpected token")
    assert isinstance(error, ParseError)
    assert error.line == stream.current_line()
    assert error.column == stream.current_column()
    assert error.message == "unexpected token"
    assert str(error) == f"{error.line}:{error.column}: unexpected token"


def test_parse_error_can_be_raised():
    stream = CharStream("x")
    error = stream.parse_error("bad input")
    assert error.line == 1
    assert error.column == 1
    assert error.message == "bad input"
    assert str(error) == "1:1: bad input"
    with pytest.raises(ParseError, match="bad input") as info:
        raise error
    assert info.value is error