import string

import pytest

from cozeclient.utils import bytes_to_hex, generate_random_string, must_to_json


def test_bytes_to_hex_pins_values():
    assert bytes_to_hex(b"\x00\x0f\xab\xff") == "000fabff"
    assert bytes_to_hex(b"") == ""


def test_generate_random_string_differs_between_calls():
    first = generate_random_string(10)
    second = generate_random_string(10)
    assert first != second
    assert len(first) == 10
    assert set(first) <= set(string.hexdigits.lower())


@pytest.mark.parametrize("length, expected", [(0, 0), (1, 0), (11, 10), (32, 32)])
def test_generate_random_string_length(length, expected):
    assert len(generate_random_string(length)) == expected


def test_must_to_json_encodes_map():
    assert must_to_json({"test": "test"}) == '{"test":"test"}'


def test_must_to_json_falls_back_on_unencodable():
    assert must_to_json({"value": object()}) == "{}"