"""Opaque value decoder — byte carriers and encoded strings to display values.

decode() is total: every input yields a DecodedValue. The rules below are
evaluated in order and the first one that returns a value wins:

    1. plain scalars (None/bool/int/float, strkey strings, non-base64 strings)
    2. exactly 32 raw bytes -> contract address, then account address, else hex
    3. base64-shaped strings -> bytes, re-entering the byte rules
    4. printable ASCII bytes -> text
    5. up to 8 bytes -> big-endian unsigned integer
    6. anything else -> abbreviated hex

Addresses are tried before generic hex, and base64 detection runs before
plain-text detection so encoded binary is never shown as text.
"""

import base64
import binascii
import re
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from stellarflow.domain.enums import DecodedKind
from stellarflow.parser.utils.strkey import KEY_LENGTH, encode_account, encode_contract, is_address
from stellarflow.parser.utils.types import DecodedValue

_B64_ALPHABET = re.compile(r"^[A-Za-z0-9+/]+$")
_B64_PADDED = re.compile(r"^[A-Za-z0-9+/]+={1,2}$")
_TYPE_TAG_PREFIXES = ("sym:", "str:")

MIN_UNPADDED_BASE64 = 20
MAX_INTEGER_BYTES = 8
HEX_KEEP = 16

_PRINTABLE = frozenset(range(32, 127)) | {9, 10, 13}


def looks_base64(text: str) -> bool:
    """Padding present, or alphabet-only with a length that is a multiple of 4 and > 20."""
    if not text or len(text) % 4 != 0:
        return False
    if _B64_PADDED.match(text):
        return True
    return bool(_B64_ALPHABET.match(text)) and len(text) > MIN_UNPADDED_BASE64


def abbreviate(text: str, keep: int = 4, min_length: int = 12) -> str:
    """Shorten to prefix…suffix when longer than min_length."""
    if not text or len(text) <= min_length:
        return text
    return f"{text[:keep]}…{text[-keep:]}"


def abbreviated_hex(data: bytes) -> str:
    hex_str = data.hex()
    if len(hex_str) > HEX_KEEP * 2:
        return f"0x{hex_str[:HEX_KEEP]}…{hex_str[-HEX_KEEP:]}"
    return f"0x{hex_str}"


# --- byte carriers ---

def _is_byte(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 255


def _index_keyed_bytes(value: Mapping) -> bytes | None:
    """{"0": 12, "1": 255, ...} as produced by serialising a 32-byte key into JSON."""
    if len(value) != KEY_LENGTH:
        return None
    keys = list(value.keys())
    if not all(isinstance(k, int) or (isinstance(k, str) and k.isdigit()) for k in keys):
        return None
    ordered = sorted(int(k) for k in keys)
    if ordered != list(range(len(ordered))):
        return None
    by_index = {int(k): v for k, v in value.items()}
    if not all(_is_byte(by_index[i]) for i in ordered):
        return None
    return bytes(by_index[i] for i in ordered)


def as_bytes(value: Any) -> bytes | None:
    """Return the bytes carried by value, or None when it is not a byte carrier."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, Mapping):
        return _index_keyed_bytes(value)
    # Index-keyed maps and plain lists count as bytes only at key length; shorter ones are data
    if isinstance(value, (list, tuple)) and len(value) == KEY_LENGTH and all(_is_byte(v) for v in value):
        return bytes(value)
    return None


# --- byte rules (2, 4, 5, 6) ---

def _bytes_address(data: bytes) -> DecodedValue | None:
    if len(data) != KEY_LENGTH:
        return None
    address = encode_contract(data) or encode_account(data)
    if address is None:
        return DecodedValue(kind=DecodedKind.HEX, value=abbreviated_hex(data))
    return DecodedValue(kind=DecodedKind.ADDRESS, value=address)


def _bytes_text(data: bytes) -> DecodedValue | None:
    if all(b in _PRINTABLE for b in data):
        return DecodedValue(kind=DecodedKind.TEXT, value=data.decode("ascii"))
    return None


def _bytes_integer(data: bytes) -> DecodedValue | None:
    if len(data) <= MAX_INTEGER_BYTES:
        return DecodedValue(kind=DecodedKind.NUMBER, value=int.from_bytes(data, "big"))
    return None


def _bytes_hex(data: bytes) -> DecodedValue | None:
    return DecodedValue(kind=DecodedKind.HEX, value=abbreviated_hex(data))


_BYTE_RULES: tuple[Callable[[bytes], DecodedValue | None], ...] = (
    _bytes_address,
    _bytes_text,
    _bytes_integer,
    _bytes_hex,
)


def decode_bytes(data: bytes) -> DecodedValue:
    for rule in _BYTE_RULES:
        result = rule(data)
        if result is not None:
            return result
    return _bytes_hex(data)  # type: ignore[return-value]  # _bytes_hex always answers


# --- value rules (1, 2, 3, containers) ---

def _plain_scalar(value: Any) -> DecodedValue | None:
    if value is None:
        return DecodedValue(kind=DecodedKind.NULL)
    if isinstance(value, bool):
        return DecodedValue(kind=DecodedKind.BOOL, value=value)
    if isinstance(value, int):
        return DecodedValue(kind=DecodedKind.NUMBER, value=value)
    if isinstance(value, (float, Decimal)):
        return DecodedValue(kind=DecodedKind.NUMBER, value=str(value))
    if isinstance(value, str):
        if is_address(value):
            return DecodedValue(kind=DecodedKind.ADDRESS, value=value)
        if not looks_base64(value):
            return DecodedValue(kind=DecodedKind.TEXT, value=value)
    return None


def _raw_bytes(value: Any) -> DecodedValue | None:
    data = as_bytes(value)
    if data is None:
        return None
    return decode_bytes(data)


def _base64_string(value: Any) -> DecodedValue | None:
    if not isinstance(value, str):
        return None
    try:
        data = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return None
    return decode_bytes(data)


def _container(value: Any) -> DecodedValue | None:
    if isinstance(value, (list, tuple)):
        return DecodedValue(kind=DecodedKind.LIST, value=[decode(v) for v in value])
    if isinstance(value, Mapping):
        return DecodedValue(kind=DecodedKind.MAP, value={str(k): decode(v) for k, v in value.items()})
    return None


_VALUE_RULES: tuple[Callable[[Any], DecodedValue | None], ...] = (
    _plain_scalar,
    _raw_bytes,
    _base64_string,
    _container,
)


def decode(value: Any) -> DecodedValue:
    """Decode any opaque value into a display-safe DecodedValue. Never raises."""
    if isinstance(value, DecodedValue):
        return value
    for rule in _VALUE_RULES:
        result = rule(value)
        if result is not None:
            return result
    return DecodedValue(kind=DecodedKind.TEXT, value=str(value))


def decode_address(value: Any) -> str:
    """Decode a contract/account id from a topic or field. "Unknown" when empty."""
    if value is None or value == "":
        return "Unknown"
    if isinstance(value, str) and len(value) == 56 and value[:1] in ("C", "G"):
        return value
    return decode(value).display


def topic_name(value: Any) -> str:
    """Decoded topic text with a leading sym:/str: type tag removed."""
    text = decode(value).display
    lowered = text.lower()
    for prefix in _TYPE_TAG_PREFIXES:
        if lowered.startswith(prefix):
            return text[len(prefix):].strip()
    return text
