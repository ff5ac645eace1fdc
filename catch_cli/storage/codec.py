"""
Fixed-radix text encodings of byte strings, used both for display and for
the payload lines of a record store.
"""

import logging
import re

from catch_cli.exceptions import MalformedTokenError

log = logging.getLogger(__name__)

_HEX_TOKEN = re.compile(r"\+?[0-9A-Fa-f]+")


def encode_hex(data: bytes) -> str:
    """Renders each byte as two uppercase hex digits, space-joined."""
    return " ".join(f"{b:02X}" for b in data)


def encode_octal(data: bytes) -> str:
    """Renders each byte as unpadded octal digits, space-joined."""
    return " ".join(f"{b:o}" for b in data)


def encode_decimal(data: bytes) -> str:
    """Renders each byte as unpadded decimal digits, space-joined."""
    return " ".join(str(b) for b in data)


_ENCODERS = {
    "hex": encode_hex,
    "oct": encode_octal,
    "dec": encode_decimal,
}


def encode(data: bytes, radix: str) -> str:
    """Encodes `data` in the named radix ('hex', 'oct' or 'dec')."""
    try:
        encoder = _ENCODERS[radix]
    except KeyError:
        raise ValueError(
            f"Unknown radix '{radix}', expected one of {', '.join(_ENCODERS)}."
        ) from None
    return encoder(data)


def decode_hex_token(token: str) -> int | None:
    """
    Parses one whitespace-delimited token as a base-16 byte.

    Returns:
        The byte value, or None if the token is not hex or falls outside 0-255.
    """
    if not _HEX_TOKEN.fullmatch(token):
        return None
    value = int(token, 16)
    return value if value <= 0xFF else None


def decode_hex(text: str, strict: bool = False) -> bytes:
    """
    Decodes a run of whitespace-delimited hex tokens.

    In the default lenient mode, tokens that do not parse as a byte are dropped
    and the rest of the run is kept, so a damaged line still yields most of its
    bytes (and silently loses the rest). Strict mode refuses such input.

    Args:
        text: The encoded run, e.g. '68 65 6C 6C 6F'.
        strict: Raise instead of skipping malformed tokens.

    Raises:
        MalformedTokenError: In strict mode, on the first malformed token.
    """
    out = bytearray()
    for token in text.split():
        value = decode_hex_token(token)
        if value is None:
            if strict:
                raise MalformedTokenError(f"Invalid hex byte token: '{token}'")
            log.debug(f"Skipping malformed hex token '{token}'")
            continue
        out.append(value)
    return bytes(out)
