"""Tests for the fixed-radix codec."""

import pytest

from catch_cli.exceptions import MalformedTokenError
from catch_cli.storage.codec import (
    decode_hex,
    decode_hex_token,
    encode,
    encode_decimal,
    encode_hex,
    encode_octal,
)


def test_encodings_of_edge_bytes():
    data = bytes([0, 15, 255])
    assert encode_hex(data) == "00 0F FF"
    assert encode_octal(data) == "0 17 377"
    assert encode_decimal(data) == "0 15 255"


def test_empty_input_encodes_to_empty_string():
    assert encode_hex(b"") == ""
    assert encode_octal(b"") == ""
    assert encode_decimal(b"") == ""


@pytest.mark.parametrize("data", [b"", b"\x00", bytes(range(256)), b"hello world"])
def test_hex_decode_inverts_encode(data):
    assert decode_hex(encode_hex(data)) == data


def test_decode_hex_token():
    assert decode_hex_token("FF") == 255
    assert decode_hex_token("0f") == 15
    assert decode_hex_token("A") == 10
    assert decode_hex_token("ZZ") is None
    assert decode_hex_token("100") is None
    assert decode_hex_token("0x1F") is None
    assert decode_hex_token("-1") is None


def test_lenient_decode_skips_only_bad_token():
    assert decode_hex("68 65 ZZ 6C 6C 6F") == b"hello"


def test_strict_decode_rejects_bad_token():
    with pytest.raises(MalformedTokenError, match="ZZ"):
        decode_hex("68 65 ZZ 6C 6C 6F", strict=True)


def test_decode_tolerates_extra_whitespace():
    assert decode_hex("  68\t65  \n") == b"he"


def test_encode_dispatch():
    assert encode(b"\x08", "oct") == "10"
    assert encode(b"\x08", "dec") == "8"
    assert encode(b"\x08", "hex") == "08"
    with pytest.raises(ValueError):
        encode(b"\x08", "bin")
