"""Chat history decoding.

Input is a JSON array of `{"role": ..., "content": ...}` objects:

[{"role": "system", "content": "Be brief."}, {"role": "user", "content": "Hi"}]

Only the two keys are read; any other keys are ignored. Content values may
contain escaped quotes and newlines, which are resolved in the returned turns.
"""

from __future__ import annotations

import logging

from .errors import MalformedInput
from .scanner import Scanner
from .types import ChatTurn, Decoded

logger = logging.getLogger(__name__)

_ROLE_KEY = '"role"'
_CONTENT_KEY = '"content"'


def unescape_content(raw: str) -> str:
    """Resolve `\\n` then `\\"`, in that order, one pass each."""
    return raw.replace("\\n", "\n").replace('\\"', '"')


def decode_messages(text: str) -> Decoded[list[ChatTurn]]:
    """Decode a chat history array into ordered turns.

    Raises:
        MalformedInput: If the text contains no array at all.
    """
    scanner = Scanner(text)
    if not scanner.skip_to("["):
        raise MalformedInput("Invalid JSON: expected array")

    turns: list[ChatTurn] = []
    while scanner.skip_to("{"):
        role_at = scanner.find(_ROLE_KEY)
        if role_at == -1:
            return _partial(turns, "role")
        scanner.seek(role_at + len(_ROLE_KEY))
        role = scanner.read_quoted()
        if role is None:
            return _partial(turns, "role")

        content_at = scanner.find(_CONTENT_KEY)
        if content_at == -1:
            return _partial(turns, "content")
        scanner.seek(content_at + len(_CONTENT_KEY))
        raw = scanner.read_quoted(escaped_quotes=True)
        if raw is None:
            return _partial(turns, "content")

        turns.append(ChatTurn(role=role, content=unescape_content(raw)))

    return Decoded(turns)


def _partial(turns: list[ChatTurn], missing: str) -> Decoded[list[ChatTurn]]:
    logger.debug("Message decode stopped at turn %d: missing %r", len(turns), missing)
    return Decoded(turns, partial=True)
