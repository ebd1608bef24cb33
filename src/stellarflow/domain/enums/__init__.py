from stellarflow.domain.enums.decoded_kind import DecodedKind
from stellarflow.domain.enums.effect_category import BALANCE_CATEGORIES, EffectCategory
from stellarflow.domain.enums.effect_kind import TRADING_EFFECT_KINDS, EffectKind
from stellarflow.domain.enums.operation_kind import OperationKind
from stellarflow.domain.enums.source_kind import InvokerKind, SourceKind

__all__ = [
    "BALANCE_CATEGORIES",
    "DecodedKind",
    "EffectCategory",
    "EffectKind",
    "InvokerKind",
    "OperationKind",
    "SourceKind",
    "TRADING_EFFECT_KINDS",
]
