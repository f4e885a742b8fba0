import pytest

from chatwire.codec.errors import MalformedInput
from chatwire.codec.messages import decode_messages
from chatwire.codec.types import ChatTurn


def test_decode_messages_in_order():
    text = (
        '[{"role":"system","content":"Be brief."},'
        '{"role":"user","content":"Hi"},'
        '{"role":"assistant","content":"Hello!"}]'
    )
    decoded = decode_messages(text)
    assert decoded.partial is False
    assert decoded.value == [
        ChatTurn("system", "Be brief."),
        ChatTurn("user", "Hi"),
        ChatTurn("assistant", "Hello!"),
    ]


def test_decode_messages_resolves_newline_and_quote_escapes():
    text = r'[{"role":"user","content":"Line1\nLine2 said \"hi\""}]'
    decoded = decode_messages(text)
    assert decoded.value[0].content == 'Line1\nLine2 said "hi"'


def test_decode_messages_escape_passes_are_literal():
    # Only \n and \" are resolved; an escaped backslash before n still reads as \n.
    text = r'[{"role":"user","content":"x\\ny \t"}]'
    decoded = decode_messages(text)
    assert decoded.value[0].content == "x\\\ny \\t"


def test_decode_messages_tolerates_whitespace_and_extra_keys():
    text = """[
      {"role": "user", "name": "bob", "content": "a"},
      {"role": "assistant", "content": "b"}
    ]"""
    decoded = decode_messages(text)
    assert [t.role for t in decoded.value] == ["user", "assistant"]
    assert [t.content for t in decoded.value] == ["a", "b"]


def test_decode_messages_empty_array():
    decoded = decode_messages("[]")
    assert decoded.value == []
    assert decoded.partial is False


@pytest.mark.parametrize("text", ["", '{"role":"user","content":"hi"}', "null"])
def test_decode_messages_without_array_raises(text):
    with pytest.raises(MalformedInput):
        decode_messages(text)


def test_decode_messages_missing_content_returns_partial():
    text = '[{"role":"user","content":"a"},{"role":"assistant"}]'
    decoded = decode_messages(text)
    assert decoded.partial is True
    assert decoded.value == [ChatTurn("user", "a")]


def test_decode_messages_missing_role_returns_partial():
    text = '[{"role":"user","content":"a"},{"content":"b"}]'
    decoded = decode_messages(text)
    assert decoded.partial is True
    assert decoded.value == [ChatTurn("user", "a")]


def test_decode_messages_unterminated_content_returns_partial():
    text = '[{"role":"user","content":"a"},{"role":"user","content":"never closed'
    decoded = decode_messages(text)
    assert decoded.partial is True
    assert len(decoded.value) == 1
