"""Adapter boundary — raw ledger/indexer dicts to canonical RawEffect/RawOperation/RawEvent.

Source records arrive in several shapes (contractId vs contract, name vs
data_name, source_account as [n, "G..."], token transfer counter-parties only
inside a description). They are translated here once; nothing downstream
inspects the source shape again.
"""

import re
from collections.abc import Iterable
from typing import Any

from stellarflow.domain.enums import EffectKind, OperationKind
from stellarflow.parser.utils.types import AssetRef, RawEffect, RawEvent, RawOperation

_DESCRIPTION_FROM = re.compile(r"from ([A-Z0-9]+(?:…[A-Z0-9]+)?)")
_DESCRIPTION_TO = re.compile(r"to ([A-Z0-9]+(?:…[A-Z0-9]+)?)")

# Source fields mapped 1:1 onto RawEffect fields of the same name
_EFFECT_PASSTHROUGH = (
    "amount", "starting_balance", "asset_type", "asset_code", "asset_issuer", "balance_id",
    "sponsor", "liquidity_pool_id", "offer_id", "sold_amount", "sold_asset_type", "sold_asset_code",
    "sold_asset_issuer", "bought_amount", "bought_asset_type", "bought_asset_code",
    "bought_asset_issuer", "selling_asset_type", "selling_asset_code", "buying_asset_type",
    "buying_asset_code", "price", "shares", "total_shares",
)
_EFFECT_CONSUMED = set(_EFFECT_PASSTHROUGH) | {
    "type", "kind", "account", "to", "from", "asset", "contract_id", "contractId", "contract",
    "name", "data_name", "reserves", "liquidity_pool", "description", "sold", "bought",
}


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def extract_account(value: Any) -> str | None:
    """Account ids sometimes arrive as [muxed_id, "G..."]; keep the address."""
    if isinstance(value, (list, tuple)):
        return _text(value[-1]) if value else None
    return _text(value)


def _asset_string(value: Any) -> str | None:
    if isinstance(value, dict):
        code = value.get("code") or value.get("asset_code")
        issuer = value.get("issuer") or value.get("asset_issuer")
        if value.get("type") == "native" or value.get("asset_type") == "native":
            return "native"
        if code and issuer:
            return f"{code}:{issuer}"
        return _text(code)
    return _text(value)


def canonicalize_effect(raw: dict | RawEffect, index: int = 0) -> RawEffect:
    """Translate one source effect record into a RawEffect."""
    if isinstance(raw, RawEffect):
        return raw.model_copy(update={"index": index})

    kind = str(raw.get("type") or raw.get("kind") or "")
    fields: dict[str, Any] = {name: _text(raw.get(name)) for name in _EFFECT_PASSTHROUGH}

    account = extract_account(raw.get("account"))
    to_account = extract_account(raw.get("to"))
    if kind == EffectKind.TOKEN_TRANSFER.value:
        description = str(raw.get("description") or "")
        account = extract_account(raw.get("from")) or account
        if account is None and (m := _DESCRIPTION_FROM.search(description)):
            account = m.group(1)
        if to_account is None and (m := _DESCRIPTION_TO.search(description)):
            to_account = m.group(1)

    liquidity_pool = raw.get("liquidity_pool")
    if not isinstance(liquidity_pool, dict):
        liquidity_pool = {}
    pool_id = fields.pop("liquidity_pool_id") or _text(liquidity_pool.get("id"))
    reserves = raw.get("reserves") or liquidity_pool.get("reserves") or []
    if pool_id is not None and fields["total_shares"] is None:
        fields["total_shares"] = _text(liquidity_pool.get("total_shares"))

    # Pool trades nest each leg as {"asset": "code:issuer" | "native", "amount": ...}
    for leg in ("sold", "bought"):
        nested = raw.get(leg)
        if not isinstance(nested, dict):
            continue
        fields[f"{leg}_amount"] = fields[f"{leg}_amount"] or _text(nested.get("amount"))
        leg_asset = _asset_string(nested.get("asset")) or ""
        if leg_asset == "native":
            fields[f"{leg}_asset_type"] = "native"
        elif ":" in leg_asset:
            fields[f"{leg}_asset_code"], fields[f"{leg}_asset_issuer"] = leg_asset.split(":", 1)

    return RawEffect(
        kind=kind,
        index=index,
        account=account,
        to_account=to_account,
        asset=_asset_string(raw.get("asset")),
        contract_id=_text(raw.get("contract_id") or raw.get("contractId") or raw.get("contract")),
        data_name=_text(raw.get("name") or raw.get("data_name")),
        liquidity_pool_id=pool_id,
        reserves=[r for r in reserves if isinstance(r, dict)],
        extra={k: v for k, v in raw.items() if k not in _EFFECT_CONSUMED},
        **fields,
    )


def canonicalize_effects(raws: Iterable[dict | RawEffect]) -> list[RawEffect]:
    return [canonicalize_effect(raw, i) for i, raw in enumerate(raws)]


# --- operations ---

def _asset_ref(raw: dict, prefix: str = "asset_") -> AssetRef | None:
    asset_type = raw.get(f"{prefix}type")
    code = raw.get(f"{prefix}code")
    issuer = raw.get(f"{prefix}issuer")
    nested = raw.get(prefix.rstrip("_")) if prefix == "asset_" else None
    if isinstance(nested, dict):
        asset_type = asset_type or nested.get("type")
        code = code or nested.get("code")
        issuer = issuer or nested.get("issuer")
    elif isinstance(nested, str) and not code:
        if nested == "native":
            asset_type = asset_type or "native"
        elif ":" in nested:
            code, issuer = nested.split(":", 1)

    if asset_type is None and code is None:
        return None
    if asset_type is None:
        asset_type = "credit_alphanum4" if len(str(code)) <= 4 else "credit_alphanum12"
    return AssetRef(asset_type=str(asset_type), code=_text(code), issuer=_text(issuer))


def _has_prefix(raw: dict, prefix: str) -> bool:
    return any(f"{prefix}{suffix}" in raw for suffix in ("type", "code", "issuer"))


def _path_payment_assets(raw: dict, kind: str) -> tuple[AssetRef, AssetRef]:
    """Resolve (source_asset, dest_asset) for either path payment flavour.

    source_asset_* is the source asset when present; a strict-send record
    without it carries the source in asset_*. dest_asset_* is the destination
    when present, otherwise asset_*.
    """
    native = AssetRef()
    if _has_prefix(raw, "source_asset_"):
        source = _asset_ref(raw, "source_asset_")
    elif kind == OperationKind.PATH_PAYMENT_STRICT_SEND.value:
        source = _asset_ref(raw, "asset_")
    else:
        source = None

    if _has_prefix(raw, "dest_asset_"):
        dest = _asset_ref(raw, "dest_asset_")
    else:
        dest = _asset_ref(raw, "asset_")
    return source or native, dest or native


def canonicalize_operation(raw: dict | RawOperation, index: int = 0, tx_source_account: str | None = None) -> RawOperation:
    """Translate one source operation record into a RawOperation."""
    if isinstance(raw, RawOperation):
        update: dict[str, Any] = {"index": index}
        if raw.source_account is None and tx_source_account:
            update["source_account"] = tx_source_account
        return raw.model_copy(update=update)

    kind = str(raw.get("type") or raw.get("kind") or "")
    source_account = extract_account(raw.get("source_account")) or tx_source_account

    source_asset = dest_asset = None
    if kind in (OperationKind.PATH_PAYMENT_STRICT_SEND.value, OperationKind.PATH_PAYMENT_STRICT_RECEIVE.value):
        source_asset, dest_asset = _path_payment_assets(raw, kind)

    consumed = {
        "type", "kind", "source_account", "from", "to", "destination", "amount", "asset_type",
        "asset_code", "asset_issuer", "asset", "limit", "balance_id", "name", "account",
        "starting_balance", "offer_id",
    }
    return RawOperation(
        kind=kind,
        index=index,
        source_account=source_account,
        from_account=extract_account(raw.get("from")) or source_account,
        to_account=extract_account(raw.get("to") or raw.get("destination")),
        amount=_text(raw.get("amount")),
        asset=_asset_ref(raw),
        source_asset=source_asset,
        dest_asset=dest_asset,
        limit=_text(raw.get("limit")),
        balance_id=_text(raw.get("balance_id")),
        data_name=_text(raw.get("name")),
        account=extract_account(raw.get("account")),
        starting_balance=_text(raw.get("starting_balance")),
        offer_id=_text(raw.get("offer_id")),
        extra={k: v for k, v in raw.items() if k not in consumed},
    )


def canonicalize_operations(raws: Iterable[dict | RawOperation], tx_source_account: str | None = None) -> list[RawOperation]:
    return [canonicalize_operation(raw, i, tx_source_account) for i, raw in enumerate(raws)]


# --- events ---

def canonicalize_event(raw: dict | RawEvent, index: int = 0) -> RawEvent:
    if isinstance(raw, RawEvent):
        return raw.model_copy(update={"index": index})
    topics = raw.get("topics") or []
    return RawEvent(
        contract_id=_text(raw.get("contract_id") or raw.get("contractId")),
        topics=list(topics) if isinstance(topics, (list, tuple)) else [topics],
        data=raw.get("data", raw.get("value")),
        event_type=_text(raw.get("type")),
        index=index,
    )


def canonicalize_events(raws: Iterable[dict | RawEvent]) -> list[RawEvent]:
    return [canonicalize_event(raw, i) for i, raw in enumerate(raws)]
