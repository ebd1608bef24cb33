from enum import Enum


class EffectCategory(str, Enum):
    """Canonical balance-change taxonomy. Raw source kinds never leak past the classifier."""

    CREDITED = "credited"
    DEBITED = "debited"
    MINTED = "minted"
    BURNED = "burned"
    TRADE = "trade"
    POOL_TRADE = "pool_trade"
    POOL_UPDATED = "pool_updated"
    OFFER_UPDATED = "offer_updated"


# Only these four represent an actual balance change
BALANCE_CATEGORIES: frozenset[EffectCategory] = frozenset({
    EffectCategory.CREDITED,
    EffectCategory.DEBITED,
    EffectCategory.MINTED,
    EffectCategory.BURNED,
})
