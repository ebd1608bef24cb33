from enum import Enum


class SourceKind(str, Enum):
    """Which source universe produced an effect."""

    CLASSIC = "classic"
    SOROBAN = "soroban"


class InvokerKind(str, Enum):
    ACCOUNT = "account"
    CONTRACT = "contract"
