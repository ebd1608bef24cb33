from enum import Enum


class DecodedKind(str, Enum):
    """Semantic kind of a decoded opaque value."""

    ADDRESS = "address"
    HEX = "hex"
    TEXT = "text"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"
    LIST = "list"
    MAP = "map"
