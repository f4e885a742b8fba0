import pytest

from chatwire.codec.errors import NumericParseFailure
from chatwire.codec.options import decode_options
from chatwire.codec.types import SamplingOptions


def test_decode_options_defaults_for_empty_input():
    assert decode_options("").value == SamplingOptions()
    assert decode_options("{}").value == SamplingOptions(
        temperature=-1.0, top_p=-1.0, top_k=0, max_tokens=100, stop_sequences=()
    )


def test_decode_options_partial_with_stop_sequences():
    opts = decode_options('{"temperature":0.7,"stop_sequences":["END","STOP"]}').value
    assert opts.temperature == pytest.approx(0.7)
    assert opts.top_p == -1.0
    assert opts.top_k == 0
    assert opts.max_tokens == 100
    assert opts.stop_sequences == ("END", "STOP")


def test_decode_options_all_fields_with_whitespace():
    text = '{"temperature": 1e-1, "top_p": 0.95, "top_k": 40, "max_tokens": 256, "stop_sequences": [ "</s>" , "\\n\\n" ]}'
    opts = decode_options(text).value
    assert opts.temperature == pytest.approx(0.1)
    assert opts.top_p == pytest.approx(0.95)
    assert opts.top_k == 40
    assert opts.max_tokens == 256
    # Stop sequences are kept in their raw wire form.
    assert opts.stop_sequences == ("</s>", "\\n\\n")


def test_decode_options_empty_stop_list():
    assert decode_options('{"stop_sequences":[]}').value.stop_sequences == ()


def test_decode_options_ignores_quotes_after_stop_list():
    opts = decode_options('{"stop_sequences":["a"],"note":"b"}').value
    assert opts.stop_sequences == ("a",)


@pytest.mark.parametrize(
    "text",
    [
        '{"top_k":"oops"}',
        '{"max_tokens":-5}',
        '{"temperature":"hot"}',
        '{"top_p":}',
    ],
)
def test_decode_options_numeric_failure(text):
    with pytest.raises(NumericParseFailure):
        decode_options(text)


def test_numeric_failure_names_field():
    with pytest.raises(NumericParseFailure) as exc_info:
        decode_options('{"top_k":"oops"}')
    assert exc_info.value.field == "top_k"
    assert "top_k" in str(exc_info.value)


def test_decode_options_oversized_integer_is_numeric_failure():
    with pytest.raises(NumericParseFailure) as exc_info:
        decode_options('{"max_tokens": ' + "9" * 5000 + "}")
    assert exc_info.value.field == "max_tokens"


def test_decode_options_oversized_float_is_not_an_error():
    opts = decode_options('{"temperature": ' + "9" * 5000 + "}").value
    assert opts.temperature > 1e300
