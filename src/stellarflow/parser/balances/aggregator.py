"""Balance delta aggregation — net change per (account, asset)."""

from collections.abc import Iterable
from decimal import Decimal

from stellarflow.domain.enums import EffectCategory
from stellarflow.parser.utils.amounts import parse_amount
from stellarflow.parser.utils.types import AssetIdentity, BalanceDelta, ClassifiedEffect

_FIELD_BY_CATEGORY = {
    EffectCategory.CREDITED: "credited",
    EffectCategory.DEBITED: "debited",
    EffectCategory.MINTED: "minted",
    EffectCategory.BURNED: "burned",
}


def net_amount(credited: Decimal, debited: Decimal, minted: Decimal, burned: Decimal) -> Decimal:
    """Gross in minus gross out.

    When minted equals credited they are the same mint seen through two
    sources, so it counts once.
    """
    if minted > 0 and minted == credited:
        gross_in = minted
    else:
        gross_in = credited + minted
    return gross_in - (debited + burned)


def aggregate(effects: Iterable[ClassifiedEffect]) -> list[BalanceDelta]:
    """Group balance effects by (account, asset code) and return the non-zero nets in first-seen order.

    The code, not the full identity, is the key: a ledger effect names the
    classic issuer while the converted contract event names the token
    contract, and both describe the same asset. A group reports the identity
    it was first seen with. Recomputed from scratch on every call.
    Non-balance categories and unparseable amounts are ignored.
    """
    totals: dict[tuple[str, str], dict[str, Decimal]] = {}
    identities: dict[tuple[str, str], AssetIdentity] = {}
    for effect in effects:
        field_name = _FIELD_BY_CATEGORY.get(effect.category)
        amount = parse_amount(effect.amount)
        if field_name is None or amount is None:
            continue
        key = (effect.account_id, effect.asset.code)
        identities.setdefault(key, effect.asset)
        group = totals.setdefault(key, {name: Decimal(0) for name in _FIELD_BY_CATEGORY.values()})
        group[field_name] += amount

    deltas: list[BalanceDelta] = []
    for key, group in totals.items():
        net = net_amount(**group)
        if net == 0:
            continue
        deltas.append(BalanceDelta(account_id=key[0], asset=identities[key], net_amount=net, **group))
    return deltas
