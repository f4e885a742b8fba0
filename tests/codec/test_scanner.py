from chatwire.codec.scanner import Scanner


def test_peek_and_advance_are_bounded():
    s = Scanner("ab")
    assert s.peek() == "a"
    assert s.peek(1) == "b"
    assert s.peek(2) == ""
    assert s.advance(5) == "ab"
    assert s.at_end
    assert s.advance() == ""
    assert s.peek() == ""


def test_find_does_not_move_cursor():
    s = Scanner('x "k": 1')
    assert s.find('"k"') == 2
    assert s.pos == 0
    assert s.find("missing") == -1
    assert s.find("x", start=100) == -1


def test_skip_to_and_skip_past():
    s = Scanner("abc[def]")
    assert s.skip_to("[")
    assert s.pos == 3
    assert s.skip_past("]")
    assert s.at_end
    assert not s.skip_to("[")
    assert s.pos == 8


def test_read_quoted_plain_stops_at_first_quote():
    s = Scanner(r'key "a\"b" tail')
    assert s.read_quoted() == "a\\"


def test_read_quoted_with_escaped_quotes():
    s = Scanner(r'key "a\"b" tail')
    assert s.read_quoted(escaped_quotes=True) == 'a\\"b'
    assert s.text[s.pos :] == " tail"


def test_read_quoted_unterminated_leaves_cursor():
    s = Scanner('x "open')
    assert s.read_quoted() is None
    assert s.pos == 0


def test_match_balanced_nested():
    s = Scanner('{"a":{"b":{}}} rest')
    assert s.match_balanced() == '{"a":{"b":{}}}'
    assert s.text[s.pos :] == " rest"


def test_match_balanced_counts_braces_inside_strings():
    s = Scanner('{"s":"}"} x')
    assert s.match_balanced() == '{"s":"}'


def test_match_balanced_stray_quote_does_not_hide_end():
    s = Scanner('{"q":"5"inch"} tail')
    assert s.match_balanced() == '{"q":"5"inch"}'


def test_match_balanced_falls_back_to_skipping_strings():
    # Plain counting never closes here; skipping the quoted "{" does.
    s = Scanner('{"a":"{"} x')
    assert s.match_balanced() == '{"a":"{"}'
    assert s.text[s.pos :] == " x"


def test_match_balanced_unterminated_returns_none():
    s = Scanner('{"a":{"b":1}')
    assert s.match_balanced() is None
    assert s.pos == 0


def test_match_balanced_requires_open_at_cursor():
    s = Scanner(' {"a":1}')
    assert s.match_balanced() is None
    s.skip_whitespace()
    assert s.match_balanced() == '{"a":1}'


def test_match_balanced_brackets():
    s = Scanner('["a", ["b"]]')
    assert s.match_balanced("[", "]") == '["a", ["b"]]'
