"""StrKey address helpers over stellar_sdk.StrKey, for 32-byte account and contract payloads."""

from stellar_sdk import StrKey

ACCOUNT_VERSION = 6 << 3  # "G..."
CONTRACT_VERSION = 2 << 3  # "C..."

KEY_LENGTH = 32
STRKEY_LENGTH = 56


def encode_contract(payload: bytes) -> str | None:
    if len(payload) != KEY_LENGTH:
        return None
    return StrKey.encode_contract(payload)


def encode_account(payload: bytes) -> str | None:
    if len(payload) != KEY_LENGTH:
        return None
    return StrKey.encode_ed25519_public_key(payload)


def is_contract_id(value: str) -> bool:
    return isinstance(value, str) and len(value) == STRKEY_LENGTH and StrKey.is_valid_contract(value)


def is_account_id(value: str) -> bool:
    return isinstance(value, str) and len(value) == STRKEY_LENGTH and StrKey.is_valid_ed25519_public_key(value)


def is_address(value: str) -> bool:
    return is_contract_id(value) or is_account_id(value)


def decode_strkey(address: str) -> tuple[int, bytes] | None:
    """Return (version_byte, payload) for a valid account or contract StrKey, else None."""
    if is_contract_id(address):
        return CONTRACT_VERSION, StrKey.decode_contract(address)
    if is_account_id(address):
        return ACCOUNT_VERSION, StrKey.decode_ed25519_public_key(address)
    return None
