"""Cursor over raw request/response text.

All decoders share this scanner so that quote handling and brace counting are
implemented once. Every method is bounds-checked: lookups past the end return
empty/absent values instead of raising, and every scan terminates at the end of
the text.
"""

from __future__ import annotations

import re


class Scanner:
    """A forward cursor over a string.

    Lookups (`find`, `peek`) never move the cursor. Consuming methods
    (`advance`, `skip_to`, `skip_past`, `read_quoted`, `match_balanced`) move it
    only on success.
    """

    def __init__(self, text: str, pos: int = 0) -> None:
        self._text = text
        self._pos = min(max(pos, 0), len(text))

    @property
    def text(self) -> str:
        return self._text

    @property
    def pos(self) -> int:
        return self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._text)

    def seek(self, pos: int) -> None:
        self._pos = min(max(pos, 0), len(self._text))

    def peek(self, offset: int = 0) -> str:
        i = self._pos + offset
        if 0 <= i < len(self._text):
            return self._text[i]
        return ""

    def advance(self, n: int = 1) -> str:
        start = self._pos
        self.seek(start + n)
        return self._text[start : self._pos]

    def find(self, pattern: str, start: int | None = None) -> int:
        """Index of the next `pattern` at or after `start` (default: cursor), or -1."""
        begin = self._pos if start is None else start
        if begin < 0 or begin > len(self._text):
            return -1
        return self._text.find(pattern, begin)

    def skip_to(self, pattern: str) -> bool:
        i = self.find(pattern)
        if i == -1:
            return False
        self._pos = i
        return True

    def skip_past(self, pattern: str) -> bool:
        i = self.find(pattern)
        if i == -1:
            return False
        self._pos = i + len(pattern)
        return True

    def skip_whitespace(self) -> None:
        while self.peek().isspace():
            self._pos += 1

    def match_prefix(self, regex: re.Pattern[str]) -> re.Match[str] | None:
        """Anchored match of `regex` at the cursor. Does not move the cursor."""
        return regex.match(self._text, self._pos)

    def read_quoted(self, *, escaped_quotes: bool = False) -> str | None:
        """Read the next double-quoted string at or after the cursor.

        With `escaped_quotes`, a quote directly preceded by a backslash does not
        close the string. The raw text between the quotes is returned without
        unescaping, and the cursor moves past the closing quote. Returns None
        (cursor unchanged) when either quote is missing.
        """
        open_at = self.find('"')
        if open_at == -1:
            return None
        start = open_at + 1
        end = self._text.find('"', start)
        if escaped_quotes:
            while end != -1 and self._text[end - 1] == "\\":
                end = self._text.find('"', end + 1)
        if end == -1:
            return None
        self._pos = end + 1
        return self._text[start:end]

    def match_balanced(self, open: str = "{", close: str = "}") -> str | None:
        """Return the delimited span starting at the cursor, delimiters included.

        The cursor must sit on `open`. Every `open`/`close` counts toward the
        nesting depth until it returns to zero, quoted or not, so a stray quote
        in model output does not hide the end of the span. Only if the text ends
        before that is the scan repeated skipping delimiters inside quoted
        strings. Returns None (cursor unchanged) if the cursor is not on `open`
        or neither scan closes the span.
        """
        if self.peek() != open:
            return None
        end = self._balanced_end(open, close, skip_strings=False)
        if end == -1:
            end = self._balanced_end(open, close, skip_strings=True)
        if end == -1:
            return None
        start = self._pos
        self._pos = end
        return self._text[start:end]

    def _balanced_end(self, open: str, close: str, *, skip_strings: bool) -> int:
        """Index just past the closing delimiter, or -1."""
        text = self._text
        depth = 0
        in_string = False
        i = self._pos
        n = len(text)
        while i < n:
            c = text[i]
            if in_string:
                if c == "\\":
                    i += 1
                elif c == '"':
                    in_string = False
            elif skip_strings and c == '"':
                in_string = True
            elif c == open:
                depth += 1
            elif c == close:
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
        return -1
