"""A character stream with line and column tracking, used while parsing proto text."""

from __future__ import annotations

from dataclasses import dataclass


class ParseError(ValueError):
    """An error found at a known line and column of the parsed text."""

    def __init__(self, line: int, column: int, message: str) -> None:
        super().__init__(f"{line}:{column}: {message}")
        self.line = line
        self.column = column
        self.message = message


@dataclass
class _State:
    position: int
    current: str


class CharStream:
    """Walks over a piece of text one character or one token at a time.

    The current character is ``""`` once the end of the text is reached.
    """

    def __init__(self, content: str) -> None:
        self._text = content
        self._position = 0
        self._current = ""
        self._update_current(True)

    def _update_current(self, skip_white_space: bool) -> None:
        while self._position < len(self._text):
            self._current = self._text[self._position]
            if not skip_white_space or not self._current.isspace():
                return
            self._position += 1
        self._current = ""

    def _save(self) -> _State:
        return _State(self._position, self._current)

    def _restore(self, state: _State) -> None:
        self._position = state.position
        self._current = state.current

    def current_char(self) -> str:
        """The character under the cursor, or ``""`` at the end."""
        return self._current

    def empty(self) -> bool:
        """True when nothing is left to read."""
        return self._position >= len(self._text)

    def content(self) -> str:
        """The text from the cursor to the end."""
        return self._text[self._position :]

    def consume_char(self, c: str) -> bool:
        """Consume the current character if it equals ``c``."""
        if self._current and self._current == c:
            self.consume_current_char(True)
            return True
        return False

    def consume(self, token: str) -> bool:
        """Consume ``token`` if it stands at the cursor as a whole word."""
        state = self._save()
        if self.content().startswith(token):
            self._position += len(token)
            self._update_current(False)
            following = self._current
            if following.isspace() or not following.isalnum():
                self._update_current(True)
                return True
            self._restore(state)
        return False

    def consume_current_char(self, skip_white_space: bool) -> None:
        """Step past the current character, optionally skipping white space after it."""
        if self._position < len(self._text):
            self._position += 1
            self._update_current(skip_white_space)

    def consume_space(self) -> None:
        """Skip white space at the cursor."""
        self._update_current(True)

    def skip_to(self, offset: int) -> None:
        """Move the cursor to ``offset`` in the text, then skip white space."""
        if not 0 <= offset <= len(self._text):
            raise ValueError(f"offset {offset} is outside the text")
        self._position = offset
        self._update_current(True)

    def current_line(self) -> int:
        """The 1-based line number of the cursor."""
        return self._text.count("\n", 0, self._position) + 1

    def current_column(self) -> int:
        """The column of the cursor, counted from the preceding newline."""
        parsed = self._text[: self._position]
        newline = parsed.rfind("\n")
        if newline != -1:
            parsed = parsed[newline:]
        return max(len(parsed), 1)

    def parse_error(self, message: str) -> ParseError:
        """Build a :class:`ParseError` located at the cursor."""
        return ParseError(self.current_line(), self.current_column(), message)