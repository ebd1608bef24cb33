"""EffectClassifier — canonical effect categories from heterogeneous raw effects."""

import logging
from collections.abc import Iterable
from typing import Any

from stellarflow.domain.enums import BALANCE_CATEGORIES, EffectCategory, EffectKind, SourceKind
from stellarflow.parser.effects.assets import AssetResolver, is_unset
from stellarflow.parser.utils.amounts import parse_amount
from stellarflow.parser.utils.types import AssetIdentity, ClassifiedEffect, RawEffect

logger = logging.getLogger(__name__)

_K = EffectKind


class EffectClassifier:
    """Maps raw effect kinds onto the canonical categories.

    KIND_HANDLERS maps a raw kind to a handler method name. Handlers return every
    view of one effect; classify() keeps the primary one.

    Handler method signature:
        def _handle_xxx(self, effect, operation_index, include_mint_credit) -> list[ClassifiedEffect]
    """

    KIND_HANDLERS: dict[str, str] = {
        _K.ACCOUNT_CREATED.value: "_handle_account_created",
        _K.ACCOUNT_CREDITED.value: "_handle_credit",
        _K.CONTRACT_CREDITED.value: "_handle_contract_credit",
        _K.ACCOUNT_DEBITED.value: "_handle_debit",
        _K.CONTRACT_DEBITED.value: "_handle_contract_debit",
        _K.ACCOUNT_MINTED.value: "_handle_mint",
        _K.TOKEN_MINT.value: "_handle_mint",
        _K.ACCOUNT_BURNED.value: "_handle_burn",
        _K.TOKEN_BURN.value: "_handle_burn",
        _K.TOKEN_TRANSFER.value: "_handle_token_transfer",
        _K.TRADE.value: "_handle_trade",
        _K.LIQUIDITY_POOL_TRADE.value: "_handle_pool_trade",
        _K.LIQUIDITY_POOL_UPDATED.value: "_handle_pool_updated",
        _K.LIQUIDITY_POOL_DEPOSITED.value: "_handle_pool_updated",
        _K.LIQUIDITY_POOL_WITHDREW.value: "_handle_pool_updated",
        _K.OFFER_CREATED.value: "_handle_offer",
        _K.OFFER_UPDATED.value: "_handle_offer",
        _K.OFFER_REMOVED.value: "_handle_offer",
    }
    # Recognised, but carry no balance or market meaning
    IGNORED_KINDS: set[str] = {_K.TOKEN_APPROVAL.value, _K.CONTRACT_EVENT.value}

    def __init__(self, resolver: AssetResolver | None = None, include_mint_credit: bool = False) -> None:
        self._resolver = resolver or AssetResolver()
        self._include_mint_credit = include_mint_credit

    @property
    def resolver(self) -> AssetResolver:
        return self._resolver

    def classify(self, effect: RawEffect, operation_index: int | None = None) -> ClassifiedEffect | None:
        """Primary classified view of one effect, or None for kinds without one."""
        views = self.classify_views(effect, operation_index, include_mint_credit=False)
        return views[0] if views else None

    def classify_views(
        self,
        effect: RawEffect,
        operation_index: int | None = None,
        include_mint_credit: bool | None = None,
    ) -> list[ClassifiedEffect]:
        """Every classified view of one effect.

        A token transfer yields a debit and a credit. A mint yields an extra
        credited view only when include_mint_credit is requested.
        """
        if effect.kind in self.IGNORED_KINDS:
            return []
        handler_name = self.KIND_HANDLERS.get(effect.kind)
        if handler_name is None:
            logger.debug("No classification for effect kind %r (index %d)", effect.kind, effect.index)
            return []
        if include_mint_credit is None:
            include_mint_credit = self._include_mint_credit
        return getattr(self, handler_name)(effect, operation_index, include_mint_credit)

    def classify_all(
        self,
        effects: Iterable[RawEffect],
        operation_index: int | None = None,
        include_mint_credit: bool | None = None,
    ) -> list[ClassifiedEffect]:
        """One logical pass over effects, recording each (account, asset, amount, category) once."""
        seen: set[tuple[str, str, str, str]] = set()
        result: list[ClassifiedEffect] = []
        for effect in effects:
            for view in self.classify_views(effect, operation_index, include_mint_credit):
                if view.dedup_key in seen:
                    continue
                seen.add(view.dedup_key)
                result.append(view)
        return result

    # --- helpers ---

    def _make(
        self,
        effect: RawEffect,
        category: EffectCategory,
        account_id: str,
        amount: str,
        source_kind: SourceKind,
        operation_index: int | None,
        asset: AssetIdentity | None = None,
        source_effect_kind: str | None = None,
        **extras: Any,
    ) -> ClassifiedEffect:
        return ClassifiedEffect(
            category=category,
            account_id=account_id,
            asset=asset or self._resolver.resolve(effect),
            amount=amount,
            source_kind=source_kind,
            original_index=effect.index,
            operation_index=operation_index,
            source_effect_kind=source_effect_kind or effect.kind,
            contract_id=effect.contract_id,
            **extras,
        )

    @staticmethod
    def _leg_asset(asset_type: str | None, code: str | None, issuer: str | None) -> AssetIdentity:
        if asset_type == "native":
            return AssetIdentity.native()
        return AssetIdentity(code=code or "Unknown", issuer_or_contract=issuer)

    # --- handlers ---

    def _handle_account_created(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        if not effect.account or not effect.starting_balance:
            return []
        return [self._make(
            effect, EffectCategory.CREDITED, effect.account, effect.starting_balance,
            SourceKind.CLASSIC, operation_index, asset=AssetIdentity.native(),
        )]

    def _handle_credit(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        if not effect.account or not effect.amount:
            return []
        source = SourceKind.SOROBAN if effect.contract_id else SourceKind.CLASSIC
        return [self._make(effect, EffectCategory.CREDITED, effect.account, effect.amount, source, operation_index)]

    def _handle_debit(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        if not effect.account or not effect.amount:
            return []
        # An issuer sending its own asset is minting it
        if effect.asset_issuer and effect.account == effect.asset_issuer:
            return [self._make(
                effect, EffectCategory.MINTED, effect.account, effect.amount,
                SourceKind.CLASSIC, operation_index, source_effect_kind=_K.ACCOUNT_MINTED.value,
            )]
        source = SourceKind.SOROBAN if effect.contract_id else SourceKind.CLASSIC
        return [self._make(effect, EffectCategory.DEBITED, effect.account, effect.amount, source, operation_index)]

    def _handle_contract_credit(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        if not effect.amount:
            return []
        account = effect.contract_id or effect.account or "Unknown"
        return [self._make(effect, EffectCategory.CREDITED, account, effect.amount, SourceKind.SOROBAN, operation_index)]

    def _handle_contract_debit(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        if not effect.amount:
            return []
        account = effect.contract_id or effect.account or "Unknown"
        return [self._make(effect, EffectCategory.DEBITED, account, effect.amount, SourceKind.SOROBAN, operation_index)]

    def _handle_mint(self, effect: RawEffect, operation_index: int | None, include_mint_credit: bool) -> list[ClassifiedEffect]:
        if not effect.account or not effect.amount:
            return []
        asset = self._resolver.resolve(effect)
        views = [self._make(
            effect, EffectCategory.MINTED, effect.account, effect.amount,
            SourceKind.SOROBAN, operation_index, asset=asset,
        )]
        if include_mint_credit:
            views.append(self._make(
                effect, EffectCategory.CREDITED, effect.account, effect.amount,
                SourceKind.SOROBAN, operation_index, asset=asset,
            ))
        return views

    def _handle_burn(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        if not effect.account or not effect.amount:
            return []
        return [self._make(effect, EffectCategory.BURNED, effect.account, effect.amount, SourceKind.SOROBAN, operation_index)]

    def _handle_token_transfer(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        if not effect.amount:
            return []
        asset = self._resolver.resolve(effect)
        views: list[ClassifiedEffect] = []
        if effect.account:
            views.append(self._make(
                effect, EffectCategory.DEBITED, effect.account, effect.amount,
                SourceKind.SOROBAN, operation_index, asset=asset,
            ))
        if effect.to_account:
            views.append(self._make(
                effect, EffectCategory.CREDITED, effect.to_account, effect.amount,
                SourceKind.SOROBAN, operation_index, asset=asset,
            ))
        return views

    def _handle_trade(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        if not effect.account:
            return []
        asset = self._leg_asset(effect.sold_asset_type, effect.sold_asset_code, effect.sold_asset_issuer)
        bought = self._leg_asset(effect.bought_asset_type, effect.bought_asset_code, effect.bought_asset_issuer)
        return [self._make(
            effect, EffectCategory.TRADE, effect.account, effect.sold_amount or "0",
            SourceKind.CLASSIC, operation_index, asset=asset,
            offer_id=effect.offer_id, price=effect.price,
            sold_amount=effect.sold_amount, sold_asset_code=asset.code,
            bought_amount=effect.bought_amount, bought_asset_code=bought.code,
        )]

    def _handle_pool_trade(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        account = effect.liquidity_pool_id or effect.account
        if not account:
            return []
        asset = self._leg_asset(effect.sold_asset_type, effect.sold_asset_code, effect.sold_asset_issuer)
        bought = self._leg_asset(effect.bought_asset_type, effect.bought_asset_code, effect.bought_asset_issuer)
        return [self._make(
            effect, EffectCategory.POOL_TRADE, account, effect.sold_amount or "0",
            SourceKind.CLASSIC, operation_index, asset=asset,
            pool_id=effect.liquidity_pool_id,
            sold_amount=effect.sold_amount, sold_asset_code=asset.code,
            bought_amount=effect.bought_amount, bought_asset_code=bought.code,
        )]

    def _handle_pool_updated(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        pool_id = effect.liquidity_pool_id
        return [self._make(
            effect, EffectCategory.POOL_UPDATED, pool_id or "Pool", effect.total_shares or effect.shares or "0",
            SourceKind.CLASSIC, operation_index,
            asset=AssetIdentity(code="Pool", issuer_or_contract=pool_id), pool_id=pool_id,
        )]

    def _handle_offer(self, effect: RawEffect, operation_index: int | None, _: bool) -> list[ClassifiedEffect]:
        selling = self._leg_asset(effect.selling_asset_type, effect.selling_asset_code, None)
        buying = self._leg_asset(effect.buying_asset_type, effect.buying_asset_code, None)
        return [self._make(
            effect, EffectCategory.OFFER_UPDATED, effect.account or "Unknown", effect.amount or "0",
            SourceKind.CLASSIC, operation_index, asset=selling,
            offer_id=effect.offer_id, price=effect.price,
            sold_asset_code=selling.code, bought_asset_code=buying.code,
        )]


def is_balance_change(effect: ClassifiedEffect) -> bool:
    if effect.category not in BALANCE_CATEGORIES:
        return False
    if is_unset(effect.asset.code):
        return False
    amount = parse_amount(effect.amount)
    return amount is not None and amount != 0


def filter_balance_changes(effects: Iterable[ClassifiedEffect]) -> list[ClassifiedEffect]:
    """Keep credited/debited/minted/burned effects with a real asset and a non-zero amount."""
    return [e for e in effects if is_balance_change(e)]
