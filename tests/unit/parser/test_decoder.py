import base64

from stellarflow.domain.enums import DecodedKind
from stellarflow.parser.utils.decoder import (
    abbreviate,
    as_bytes,
    decode,
    decode_address,
    looks_base64,
    topic_name,
)
from stellarflow.parser.utils.strkey import encode_contract

PAYLOAD = bytes(range(32))


class TestScalars:
    def test_none(self):
        result = decode(None)
        assert result.kind == DecodedKind.NULL
        assert result.display == "null"

    def test_bool(self):
        assert decode(True).kind == DecodedKind.BOOL
        assert decode(False).display == "false"

    def test_int(self):
        result = decode(42)
        assert result.kind == DecodedKind.NUMBER
        assert result.value == 42

    def test_plain_text(self):
        result = decode("hello")
        assert result.kind == DecodedKind.TEXT
        assert result.display == "hello"

    def test_short_alphanumeric_stays_text(self):
        # 8 chars, multiple of 4, unpadded: too short to be treated as base64
        assert decode("transfer").kind == DecodedKind.TEXT


class TestAddressRoundTrip:
    def test_raw_bytes(self):
        result = decode(PAYLOAD)
        assert result.kind == DecodedKind.ADDRESS
        assert result.value == encode_contract(PAYLOAD)

    def test_int_list_of_key_length(self):
        assert decode(list(PAYLOAD)).value == encode_contract(PAYLOAD)

    def test_index_keyed_dict(self):
        serialized = {str(i): b for i, b in enumerate(PAYLOAD)}
        assert decode(serialized).value == encode_contract(PAYLOAD)

    def test_base64_string(self):
        encoded = base64.b64encode(PAYLOAD).decode()
        assert decode(encoded).value == encode_contract(PAYLOAD)

    def test_address_string_passthrough(self):
        address = encode_contract(PAYLOAD)
        result = decode(address)
        assert result.kind == DecodedKind.ADDRESS
        assert result.value == address


class TestBytes:
    def test_base64_text(self):
        result = decode(base64.b64encode(b"hello world").decode())
        assert result.kind == DecodedKind.TEXT
        assert result.value == "hello world"

    def test_base64_small_integer(self):
        result = decode(base64.b64encode(b"\x00\x00\x01\x00").decode())
        assert result.kind == DecodedKind.NUMBER
        assert result.value == 256

    def test_long_binary_is_abbreviated_hex(self):
        data = bytes(range(200, 240))
        result = decode(data)
        assert result.kind == DecodedKind.HEX
        assert result.value == f"0x{data.hex()[:16]}…{data.hex()[-16:]}"

    def test_short_binary_is_full_hex(self):
        data = bytes([0, 1, 2, 3, 4, 5, 6, 7, 8, 9])
        result = decode(data)
        assert result.kind == DecodedKind.HEX
        assert result.value == "0x00010203040506070809"

    def test_short_int_list_is_not_bytes(self):
        assert as_bytes([1, 2, 3]) is None

    def test_dict_with_gaps_is_not_bytes(self):
        assert as_bytes({"0": 1, "2": 3}) is None

    def test_short_index_keyed_dict_is_a_map(self):
        assert as_bytes({"0": 1}) is None
        result = decode({"0": 1, "1": 2})
        assert result.kind == DecodedKind.MAP
        assert result.display == "{0: 1, 1: 2}"


class TestContainers:
    def test_list(self):
        result = decode([1, 2, 3])
        assert result.kind == DecodedKind.LIST
        assert result.display == "[1, 2, 3]"

    def test_map(self):
        result = decode({"amount": 5, "memo": "hi"})
        assert result.kind == DecodedKind.MAP
        assert result.display == "{amount: 5, memo: hi}"


class TestTotality:
    def test_arbitrary_object(self):
        class Opaque:
            def __str__(self):
                return "opaque"

        result = decode(Opaque())
        assert result.kind == DecodedKind.TEXT
        assert result.value == "opaque"

    def test_invalid_base64_falls_back(self):
        # Padded shape but invalid content
        result = decode("abc=defg====")
        assert result is not None

    def test_float(self):
        assert decode(1.5).display == "1.5"


class TestHelpers:
    def test_looks_base64(self):
        assert looks_base64("aGVsbG8=")
        assert not looks_base64("abc")
        assert not looks_base64("abcd")
        assert looks_base64("A" * 24)

    def test_abbreviate(self):
        assert abbreviate("GABCDEFGHIJKLMNOP") == "GABC…MNOP"
        assert abbreviate("short") == "short"

    def test_decode_address(self):
        address = encode_contract(PAYLOAD)
        assert decode_address(address) == address
        assert decode_address(PAYLOAD) == address
        assert decode_address(None) == "Unknown"
        assert decode_address("") == "Unknown"

    def test_topic_name(self):
        assert topic_name("sym:transfer") == "transfer"
        assert topic_name("fn_call") == "fn_call"
