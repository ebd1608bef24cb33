"""Per-operation effect matchers."""

from collections.abc import Sequence

from stellarflow.domain.enums import TRADING_EFFECT_KINDS, EffectKind, OperationKind
from stellarflow.parser.matching.base import OperationMatcher, PredicateMatcher
from stellarflow.parser.utils.amounts import parse_amount, same_amount
from stellarflow.parser.utils.types import AssetRef, RawEffect, RawOperation

_K = EffectKind
_O = OperationKind

DEFAULT_PATH_PAYMENT_LOOKAHEAD = 100


def asset_matches(effect: RawEffect, asset: AssetRef | None) -> bool:
    """Does the effect move the given asset? An unknown asset matches anything."""
    if asset is None:
        return True
    if asset.is_native:
        return effect.asset_type == "native"
    return effect.asset_code == asset.code and effect.asset_issuer == asset.issuer


def is_zero_limit(limit: str | None) -> bool:
    """A missing or zero trustline limit means the trustline is being removed."""
    if limit is None or limit == "":
        return True
    value = parse_amount(limit)
    return value is not None and value == 0


class PaymentMatcher(PredicateMatcher):
    """Debit of the sent asset from the sender, credit of the same asset and amount to the receiver."""

    MATCHER_NAME = "PaymentMatcher"
    OPERATION_KINDS = (_O.PAYMENT.value,)

    def accepts(self, op: RawOperation, effect: RawEffect, claimed: list[RawEffect]) -> bool:
        if not same_amount(effect.amount, op.amount) or not asset_matches(effect, op.asset):
            return False
        # at most one debit and one credit per payment
        if any(c.kind == effect.kind for c in claimed):
            return False
        if effect.kind == _K.ACCOUNT_DEBITED.value:
            return effect.account == op.from_account
        if effect.kind == _K.ACCOUNT_CREDITED.value:
            return effect.account == op.to_account
        return False


class PathPaymentMatcher(OperationMatcher):
    """Debit of the source asset, then the first credit to the destination.

    Trading effects and unrelated debits/credits between the two are skipped,
    for at most `lookahead` effects past the debit. The credit is accepted
    whatever its asset.
    """

    MATCHER_NAME = "PathPaymentMatcher"
    OPERATION_KINDS = (_O.PATH_PAYMENT_STRICT_SEND.value, _O.PATH_PAYMENT_STRICT_RECEIVE.value)
    SKIPPABLE_KINDS: frozenset[str] = TRADING_EFFECT_KINDS | {_K.ACCOUNT_DEBITED.value, _K.ACCOUNT_CREDITED.value}

    def __init__(self, lookahead: int = DEFAULT_PATH_PAYMENT_LOOKAHEAD) -> None:
        self._lookahead = lookahead

    def match(self, op: RawOperation, effects: Sequence[RawEffect], cursor: int) -> tuple[list[int], int]:
        debit_index: int | None = None
        for i in range(cursor, len(effects)):
            effect = effects[i]
            if debit_index is None:
                if (
                    effect.kind == _K.ACCOUNT_DEBITED.value
                    and effect.account == op.from_account
                    and asset_matches(effect, op.source_asset)
                ):
                    debit_index = i
                continue

            if effect.kind == _K.ACCOUNT_CREDITED.value and effect.account == op.to_account:
                return [debit_index, i], i + 1
            if effect.kind in self.SKIPPABLE_KINDS and i - debit_index <= self._lookahead:
                continue
            break

        if debit_index is None:
            return [], cursor
        return [debit_index], debit_index + 1


class ChangeTrustMatcher(PredicateMatcher):
    """trustline_removed for a zero limit, trustline_created/updated otherwise, plus sponsorship."""

    MATCHER_NAME = "ChangeTrustMatcher"
    OPERATION_KINDS = (_O.CHANGE_TRUST.value,)
    REMOVAL_KINDS = frozenset({_K.TRUSTLINE_REMOVED.value})
    UPSERT_KINDS = frozenset({_K.TRUSTLINE_CREATED.value, _K.TRUSTLINE_UPDATED.value})
    SPONSORSHIP_KINDS = frozenset({_K.TRUSTLINE_SPONSORSHIP_CREATED.value, _K.TRUSTLINE_SPONSORSHIP_UPDATED.value})

    def accepts(self, op: RawOperation, effect: RawEffect, claimed: list[RawEffect]) -> bool:
        if effect.account != op.source_account:
            return False
        if effect.kind in self.SPONSORSHIP_KINDS:
            return True
        expected = self.REMOVAL_KINDS if is_zero_limit(op.limit) else self.UPSERT_KINDS
        if effect.kind not in expected:
            return False
        code = op.asset.code if op.asset else None
        issuer = op.asset.issuer if op.asset else None
        return effect.asset_code == code and effect.asset_issuer == issuer


class ClaimClaimableBalanceMatcher(OperationMatcher):
    """claimable_balance_claimed, then the first credit after it, then an optional sponsorship removal."""

    MATCHER_NAME = "ClaimClaimableBalanceMatcher"
    OPERATION_KINDS = (_O.CLAIM_CLAIMABLE_BALANCE.value,)

    def match(self, op: RawOperation, effects: Sequence[RawEffect], cursor: int) -> tuple[list[int], int]:
        claimed: list[int] = []
        found_claim = found_credit = False
        for i in range(cursor, len(effects)):
            effect = effects[i]
            if not found_claim:
                if effect.kind == _K.CLAIMABLE_BALANCE_CLAIMED.value and effect.balance_id == op.balance_id:
                    claimed.append(i)
                    found_claim = True
                continue

            if (
                effect.kind == _K.CLAIMABLE_BALANCE_SPONSORSHIP_REMOVED.value
                and effect.balance_id == op.balance_id
            ):
                claimed.append(i)
                break
            if not found_credit and effect.kind == _K.ACCOUNT_CREDITED.value:
                claimed.append(i)
                found_credit = True
                continue
            if found_credit and effect.kind != _K.CLAIMABLE_BALANCE_SPONSORSHIP_REMOVED.value:
                break

        if claimed:
            cursor = claimed[-1] + 1
        return claimed, cursor


class CreateClaimableBalanceMatcher(PredicateMatcher):
    MATCHER_NAME = "CreateClaimableBalanceMatcher"
    OPERATION_KINDS = (_O.CREATE_CLAIMABLE_BALANCE.value,)
    CREATED_KINDS = frozenset({_K.CLAIMABLE_BALANCE_CREATED.value, _K.CLAIMABLE_BALANCE_CLAIMANT_CREATED.value})
    SPONSORSHIP_KINDS = frozenset({
        _K.CLAIMABLE_BALANCE_SPONSORSHIP_CREATED.value,
        _K.CLAIMABLE_BALANCE_SPONSORSHIP_UPDATED.value,
    })

    def accepts(self, op: RawOperation, effect: RawEffect, claimed: list[RawEffect]) -> bool:
        if effect.kind in self.CREATED_KINDS:
            return same_amount(effect.amount, op.amount)
        if effect.kind in self.SPONSORSHIP_KINDS:
            balance_id = next(
                (e.balance_id for e in claimed if e.kind == _K.CLAIMABLE_BALANCE_CREATED.value and e.balance_id),
                None,
            )
            return effect.sponsor == op.source_account and (balance_id is None or effect.balance_id == balance_id)
        if effect.kind == _K.ACCOUNT_DEBITED.value:
            return effect.account == op.source_account and same_amount(effect.amount, op.amount)
        return False


class CreateAccountMatcher(PredicateMatcher):
    MATCHER_NAME = "CreateAccountMatcher"
    OPERATION_KINDS = (_O.CREATE_ACCOUNT.value,)
    SPONSORSHIP_KINDS = frozenset({_K.ACCOUNT_SPONSORSHIP_CREATED.value, _K.ACCOUNT_SPONSORSHIP_UPDATED.value})

    def accepts(self, op: RawOperation, effect: RawEffect, claimed: list[RawEffect]) -> bool:
        new_account = op.account or op.to_account
        if effect.kind == _K.ACCOUNT_CREATED.value or effect.kind in self.SPONSORSHIP_KINDS:
            return effect.account == new_account
        if effect.kind == _K.ACCOUNT_DEBITED.value:
            return effect.account == op.source_account and effect.asset_type == "native"
        if effect.kind == _K.ACCOUNT_CREDITED.value:
            return effect.account == new_account and effect.asset_type == "native"
        return False


class ManageDataMatcher(PredicateMatcher):
    MATCHER_NAME = "ManageDataMatcher"
    OPERATION_KINDS = (_O.MANAGE_DATA.value,)
    DATA_KINDS = frozenset({
        _K.DATA_CREATED.value,
        _K.DATA_UPDATED.value,
        _K.DATA_REMOVED.value,
        _K.DATA_SPONSORSHIP_CREATED.value,
        _K.DATA_SPONSORSHIP_UPDATED.value,
    })

    def accepts(self, op: RawOperation, effect: RawEffect, claimed: list[RawEffect]) -> bool:
        return effect.kind in self.DATA_KINDS and effect.data_name == op.data_name


class ManageOfferMatcher(OperationMatcher):
    """Claims the first offer effect at or after the cursor."""

    MATCHER_NAME = "ManageOfferMatcher"
    OPERATION_KINDS = (
        _O.MANAGE_SELL_OFFER.value,
        _O.MANAGE_BUY_OFFER.value,
        _O.CREATE_PASSIVE_SELL_OFFER.value,
    )
    OFFER_KINDS = frozenset({_K.OFFER_CREATED.value, _K.OFFER_UPDATED.value, _K.OFFER_REMOVED.value})

    def match(self, op: RawOperation, effects: Sequence[RawEffect], cursor: int) -> tuple[list[int], int]:
        for i in range(cursor, len(effects)):
            if effects[i].kind in self.OFFER_KINDS:
                return [i], i + 1
        return [], cursor


class SetOptionsMatcher(PredicateMatcher):
    MATCHER_NAME = "SetOptionsMatcher"
    OPERATION_KINDS = (_O.SET_OPTIONS.value,)
    OPTION_KINDS = frozenset({
        _K.SIGNER_CREATED.value,
        _K.SIGNER_UPDATED.value,
        _K.SIGNER_REMOVED.value,
        _K.SIGNER_SPONSORSHIP_CREATED.value,
        _K.SIGNER_SPONSORSHIP_UPDATED.value,
        _K.ACCOUNT_THRESHOLDS_UPDATED.value,
        _K.ACCOUNT_FLAGS_UPDATED.value,
        _K.ACCOUNT_HOME_DOMAIN_UPDATED.value,
        _K.ACCOUNT_INFLATION_DESTINATION_UPDATED.value,
    })

    def accepts(self, op: RawOperation, effect: RawEffect, claimed: list[RawEffect]) -> bool:
        return effect.kind in self.OPTION_KINDS and effect.account == op.source_account
