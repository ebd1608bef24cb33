"""Contract events -> effects.

Two universes are produced from the same token events:
    events_to_effects        account_debited/credited, account_minted, account_burned
    token_events_to_effects  token_transfer, token_mint, token_burn, token_approval
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from stellarflow.domain.enums import DecodedKind, EffectKind
from stellarflow.infra.metadata.cache import MetadataCache
from stellarflow.parser.effects.assets import PLACEHOLDER_CODE, is_native_alias, is_unset
from stellarflow.parser.utils.amounts import format_token_amount
from stellarflow.parser.utils.decoder import decode, decode_address, topic_name
from stellarflow.parser.utils.types import NATIVE_CODE, AssetMetadata, RawEffect, RawEvent

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 7
CONTRACT_ASSET_TYPE = "credit_alphanum12"

# Event name -> position of the asset topic (after the name topic is removed)
_ASSET_TOPIC = {"transfer": 2, "mint": 1, "burn": 1}


def event_name(event: RawEvent) -> str:
    if not event.topics:
        return ""
    return topic_name(event.topics[0]).lower()


def _scalar_amount(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, str)):
        return str(value) if str(value) != "" else None
    if isinstance(value, Mapping) and "value" in value:
        return _scalar_amount(value["value"])
    decoded = decode(value)
    if decoded.kind == DecodedKind.NUMBER:
        return str(decoded.value)
    return None


def event_amount(data: Any) -> str | None:
    """Raw integer amount carried by an event payload, if any.

    Payloads are either the amount itself or a list whose first element is it.
    """
    if isinstance(data, (list, tuple)):
        return _scalar_amount(data[0]) if data else None
    return _scalar_amount(data)


def _topic_code(value: Any) -> str | None:
    text = decode(value).display
    if is_native_alias(text):
        return NATIVE_CODE
    if ":" in text:
        code = text.split(":", 1)[0]
        return None if is_unset(code) else code
    return None if is_unset(text) else text


def _topic_issuer(value: Any) -> str | None:
    text = decode(value).display
    if ":" not in text or is_native_alias(text):
        return None
    issuer = text.split(":", 1)[1]
    return None if is_unset(issuer) else issuer


def _metadata_code(metadata: AssetMetadata | None) -> str | None:
    if metadata is None or not metadata.symbol or is_unset(metadata.symbol):
        return None
    if is_native_alias(metadata.symbol):
        return NATIVE_CODE
    return metadata.symbol


def _held(cache: MetadataCache | None, contract_id: str | None) -> AssetMetadata | None:
    if cache is None or not contract_id:
        return None
    return cache.get(contract_id)


def events_to_effects(
    events: Iterable[RawEvent],
    cache: MetadataCache | None = None,
    default_decimals: int = DEFAULT_DECIMALS,
) -> list[RawEffect]:
    """Convert transfer/mint/burn token events into account effects.

    Asset code: metadata symbol, else the asset topic ("native" -> XLM,
    "code:issuer" -> code), else "TOKEN". Amounts are scaled by the metadata
    decimals when known, else by default_decimals. Other events, and events
    without an amount, produce nothing.
    """
    effects: list[RawEffect] = []
    for event in events:
        name = event_name(event)
        if name not in _ASSET_TOPIC:
            continue
        raw_amount = event_amount(event.data)
        if raw_amount is None:
            continue

        topics = event.topics[1:]
        metadata = _held(cache, event.contract_id)
        asset_position = _ASSET_TOPIC[name]
        asset_topic = topics[asset_position] if len(topics) > asset_position else None
        topic_code = _topic_code(asset_topic) if asset_topic is not None else None
        metadata_code = _metadata_code(metadata)
        code = metadata_code or topic_code or PLACEHOLDER_CODE
        if metadata is not None and metadata_code is not None:
            is_native = is_native_alias(metadata.symbol)
        else:
            is_native = topic_code == NATIVE_CODE
        decimals = metadata.decimals if metadata is not None and metadata.decimals is not None else default_decimals
        amount = format_token_amount(raw_amount, decimals)

        def _effect(kind: EffectKind, account: str) -> RawEffect:
            return RawEffect(
                kind=kind.value,
                account=account,
                amount=amount,
                asset_code=code,
                asset_issuer=None if is_native or asset_topic is None else _topic_issuer(asset_topic),
                asset_type="native" if is_native else CONTRACT_ASSET_TYPE,
                contract_id=event.contract_id,
            )

        first = decode_address(topics[0]) if topics else "Unknown"
        if name == "transfer":
            second = decode_address(topics[1]) if len(topics) > 1 else "Unknown"
            if first == "Unknown" or second == "Unknown":
                continue
            effects.append(_effect(EffectKind.ACCOUNT_DEBITED, first))
            effects.append(_effect(EffectKind.ACCOUNT_CREDITED, second))
        elif first != "Unknown":
            kind = EffectKind.ACCOUNT_MINTED if name == "mint" else EffectKind.ACCOUNT_BURNED
            effects.append(_effect(kind, first))

    return [e.model_copy(update={"index": i}) for i, e in enumerate(effects)]


_TOKEN_KINDS = {
    "transfer": EffectKind.TOKEN_TRANSFER,
    "mint": EffectKind.TOKEN_MINT,
    "burn": EffectKind.TOKEN_BURN,
    "approve": EffectKind.TOKEN_APPROVAL,
}


def _token_effect(event: RawEvent, name: str, metadata: AssetMetadata, default_decimals: int) -> RawEffect | None:
    topics = [decode_address(t) for t in event.topics[1:]]
    raw_amount = event_amount(event.data)
    if raw_amount is None:
        return None

    decimals = metadata.decimals if metadata.decimals is not None else default_decimals
    amount = format_token_amount(raw_amount, decimals)
    account = to_account = None
    if name in ("transfer", "approve") and len(topics) >= 2:
        account, to_account = topics[0], topics[1]
    elif name == "mint" and topics:
        account = topics[0]
    elif name == "burn" and topics:
        account = topics[0]

    return RawEffect(
        kind=_TOKEN_KINDS[name].value,
        account=account,
        to_account=to_account,
        amount=amount,
        asset_code=_metadata_code(metadata),
        contract_id=event.contract_id,
    )


def token_events_to_effects(
    events: Iterable[RawEvent],
    cache: MetadataCache | None = None,
    default_decimals: int = DEFAULT_DECIMALS,
) -> list[RawEffect]:
    """Convert events of known token contracts into token_* effects.

    Events of contracts not known to be tokens become contract_event effects.
    Token events of other kinds, or without an amount, produce nothing.
    """
    effects: list[RawEffect] = []
    for event in events:
        if not event.topics:
            continue
        name = event_name(event)
        metadata = _held(cache, event.contract_id)
        if metadata is None or not metadata.is_token:
            effects.append(RawEffect(
                kind=EffectKind.CONTRACT_EVENT.value,
                contract_id=event.contract_id,
                extra={"event": name, "topic_count": len(event.topics) - 1},
            ))
            continue
        if name not in _TOKEN_KINDS:
            continue
        effect = _token_effect(event, name, metadata, default_decimals)
        if effect is None:
            logger.debug("Token event %r from %s carries no amount", name, event.contract_id)
            continue
        effects.append(effect)

    return [e.model_copy(update={"index": i}) for i, e in enumerate(effects)]
