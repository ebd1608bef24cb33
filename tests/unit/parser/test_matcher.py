import random

from stellarflow.domain.enums import EffectCategory
from stellarflow.parser.matching.matcher import EffectMatcher, match_effects
from stellarflow.parser.matching.operations import (
    ChangeTrustMatcher,
    ClaimClaimableBalanceMatcher,
    CreateAccountMatcher,
    CreateClaimableBalanceMatcher,
    ManageDataMatcher,
    ManageOfferMatcher,
    PathPaymentMatcher,
    PaymentMatcher,
    SetOptionsMatcher,
    is_zero_limit,
)
from stellarflow.parser.matching.registry import MatcherRegistry, build_default_registry
from stellarflow.parser.utils.types import AssetRef, RawEffect, RawOperation

USDC = AssetRef(asset_type="credit_alphanum4", code="USDC", issuer="GISS")
NATIVE = AssetRef()


def _make_op(kind: str, **kwargs) -> RawOperation:
    source = kwargs.pop("source_account", "GA")
    return RawOperation(kind=kind, source_account=source, from_account=kwargs.pop("from_account", source), **kwargs)


def _make_effects(*specs: tuple[str, dict]) -> list[RawEffect]:
    return [RawEffect(kind=kind, index=i, **fields) for i, (kind, fields) in enumerate(specs)]


def _native(account: str, amount: str) -> dict:
    return {"account": account, "amount": amount, "asset_type": "native"}


def _usdc(account: str, amount: str) -> dict:
    return {"account": account, "amount": amount, "asset_type": "credit_alphanum4", "asset_code": "USDC", "asset_issuer": "GISS"}


class TestPayment:
    def test_debit_and_credit(self):
        op = _make_op("payment", to_account="GB", amount="10", asset=NATIVE)
        effects = _make_effects(("account_debited", _native("GA", "10")), ("account_credited", _native("GB", "10")))
        assert PaymentMatcher().match(op, effects, 0) == ([0, 1], 2)

    def test_skips_leading_unrelated(self):
        op = _make_op("payment", to_account="GB", amount="10", asset=NATIVE)
        effects = _make_effects(
            ("signer_created", {"account": "GA"}),
            ("account_debited", _native("GA", "10")),
            ("account_credited", _native("GB", "10")),
        )
        assert PaymentMatcher().match(op, effects, 0) == ([1, 2], 3)

    def test_stops_at_first_miss_after_claim(self):
        op = _make_op("payment", to_account="GB", amount="10", asset=NATIVE)
        effects = _make_effects(
            ("account_debited", _native("GA", "10")),
            ("trade", {"account": "GA"}),
            ("account_credited", _native("GB", "10")),
        )
        assert PaymentMatcher().match(op, effects, 0) == ([0], 1)

    def test_amount_and_asset_must_match(self):
        op = _make_op("payment", to_account="GB", amount="10", asset=USDC)
        effects = _make_effects(
            ("account_debited", _native("GA", "10")),
            ("account_credited", _usdc("GB", "9")),
        )
        assert PaymentMatcher().match(op, effects, 0) == ([], 0)

    def test_amount_compared_numerically(self):
        op = _make_op("payment", to_account="GB", amount="10", asset=USDC)
        effects = _make_effects(("account_credited", _usdc("GB", "10.0000000")))
        assert PaymentMatcher().match(op, effects, 0) == ([0], 1)

    def test_respects_cursor(self):
        op = _make_op("payment", to_account="GB", amount="10", asset=NATIVE)
        effects = _make_effects(("account_debited", _native("GA", "10")), ("account_credited", _native("GB", "10")))
        assert PaymentMatcher().match(op, effects, 1) == ([1], 2)


class TestPathPayment:
    def _op(self) -> RawOperation:
        return _make_op(
            "path_payment_strict_send", to_account="GB", amount="10",
            source_asset=NATIVE, dest_asset=USDC,
        )

    def test_hundred_intermediate_trades(self):
        specs = [("account_debited", _native("GA", "10"))]
        specs += [("trade", {"account": "GMM"})] * 100
        specs += [("account_credited", _usdc("GB", "5"))]
        effects = _make_effects(*specs)
        assert PathPaymentMatcher().match(self._op(), effects, 0) == ([0, 101], 102)

    def test_lookahead_exceeded(self):
        specs = [("account_debited", _native("GA", "10"))]
        specs += [("trade", {"account": "GMM"})] * 101
        specs += [("account_credited", _usdc("GB", "5"))]
        effects = _make_effects(*specs)
        assert PathPaymentMatcher().match(self._op(), effects, 0) == ([0], 1)

    def test_custom_lookahead(self):
        specs = [("account_debited", _native("GA", "10"))]
        specs += [("trade", {"account": "GMM"})] * 3
        specs += [("account_credited", _usdc("GB", "5"))]
        effects = _make_effects(*specs)
        assert PathPaymentMatcher(lookahead=2).match(self._op(), effects, 0) == ([0], 1)
        assert PathPaymentMatcher(lookahead=3).match(self._op(), effects, 0) == ([0, 4], 5)

    def test_any_credit_to_destination_accepted(self):
        effects = _make_effects(
            ("account_debited", _native("GA", "10")),
            ("account_credited", _native("GB", "99")),
        )
        assert PathPaymentMatcher().match(self._op(), effects, 0) == ([0, 1], 2)

    def test_skips_unrelated_debits_and_credits(self):
        effects = _make_effects(
            ("account_debited", _native("GA", "10")),
            ("account_credited", _usdc("GMM", "10")),
            ("account_debited", _usdc("GMM", "5")),
            ("liquidity_pool_trade", {"liquidity_pool_id": "p1"}),
            ("account_credited", _usdc("GB", "5")),
        )
        assert PathPaymentMatcher().match(self._op(), effects, 0) == ([0, 4], 5)

    def test_stops_at_unrelated_kind(self):
        effects = _make_effects(
            ("account_debited", _native("GA", "10")),
            ("signer_created", {"account": "GA"}),
            ("account_credited", _usdc("GB", "5")),
        )
        assert PathPaymentMatcher().match(self._op(), effects, 0) == ([0], 1)

    def test_source_asset_checked(self):
        effects = _make_effects(("account_debited", _usdc("GA", "10")), ("account_credited", _usdc("GB", "5")))
        assert PathPaymentMatcher().match(self._op(), effects, 0) == ([], 0)


class TestChangeTrust:
    def test_create_with_sponsorship(self):
        op = _make_op("change_trust", asset=USDC, limit="1000")
        effects = _make_effects(
            ("trustline_created", _usdc("GA", "0")),
            ("trustline_sponsorship_created", {"account": "GA"}),
            ("account_debited", _native("GA", "1")),
        )
        assert ChangeTrustMatcher().match(op, effects, 0) == ([0, 1], 2)

    def test_zero_limit_expects_removal(self):
        op = _make_op("change_trust", asset=USDC, limit="0")
        created = _make_effects(("trustline_created", _usdc("GA", "0")))
        removed = _make_effects(("trustline_removed", _usdc("GA", "0")))
        assert ChangeTrustMatcher().match(op, created, 0) == ([], 0)
        assert ChangeTrustMatcher().match(op, removed, 0) == ([0], 1)

    def test_other_account_or_asset_ignored(self):
        op = _make_op("change_trust", asset=USDC, limit="1000")
        effects = _make_effects(
            ("trustline_created", _usdc("GOTHER", "0")),
            ("trustline_updated", {"account": "GA", "asset_code": "EURC", "asset_issuer": "GISS"}),
        )
        assert ChangeTrustMatcher().match(op, effects, 0) == ([], 0)

    def test_is_zero_limit(self):
        assert is_zero_limit(None)
        assert is_zero_limit("0")
        assert is_zero_limit("0.0000000")
        assert not is_zero_limit("922337203685.4775807")


class TestClaimableBalances:
    def test_claim_credit_and_sponsorship(self):
        op = _make_op("claim_claimable_balance", balance_id="B1")
        effects = _make_effects(
            ("claimable_balance_claimed", {"balance_id": "B1"}),
            ("account_credited", _native("GA", "10")),
            ("claimable_balance_sponsorship_removed", {"balance_id": "B1"}),
            ("account_credited", _native("GA", "20")),
        )
        assert ClaimClaimableBalanceMatcher().match(op, effects, 0) == ([0, 1, 2], 3)

    def test_only_first_credit(self):
        op = _make_op("claim_claimable_balance", balance_id="B1")
        effects = _make_effects(
            ("claimable_balance_claimed", {"balance_id": "B1"}),
            ("account_credited", _native("GA", "10")),
            ("account_credited", _native("GA", "20")),
        )
        assert ClaimClaimableBalanceMatcher().match(op, effects, 0) == ([0, 1], 2)

    def test_other_balance_not_claimed(self):
        op = _make_op("claim_claimable_balance", balance_id="B1")
        effects = _make_effects(("claimable_balance_claimed", {"balance_id": "B2"}), ("account_credited", _native("GA", "1")))
        assert ClaimClaimableBalanceMatcher().match(op, effects, 0) == ([], 0)

    def test_create(self):
        op = _make_op("create_claimable_balance", amount="50")
        effects = _make_effects(
            ("claimable_balance_created", {"balance_id": "B1", "amount": "50"}),
            ("claimable_balance_claimant_created", {"balance_id": "B1", "amount": "50"}),
            ("claimable_balance_sponsorship_created", {"balance_id": "B1", "sponsor": "GA"}),
            ("account_debited", _native("GA", "50")),
            ("claimable_balance_sponsorship_created", {"balance_id": "B9", "sponsor": "GA"}),
        )
        assert CreateClaimableBalanceMatcher().match(op, effects, 0) == ([0, 1, 2, 3], 4)


class TestSimpleMatchers:
    def test_create_account(self):
        op = _make_op("create_account", account="GNEW", starting_balance="100")
        effects = _make_effects(
            ("account_created", {"account": "GNEW", "starting_balance": "100"}),
            ("account_debited", _native("GA", "100")),
            ("signer_created", {"account": "GNEW"}),
        )
        assert CreateAccountMatcher().match(op, effects, 0) == ([0, 1], 2)

    def test_manage_data(self):
        op = _make_op("manage_data", data_name="config")
        effects = _make_effects(
            ("data_created", {"account": "GA", "data_name": "config"}),
            ("data_sponsorship_created", {"data_name": "config"}),
            ("data_created", {"account": "GA", "data_name": "other"}),
        )
        assert ManageDataMatcher().match(op, effects, 0) == ([0, 1], 2)

    def test_manage_offer_first_offer_effect(self):
        op = _make_op("manage_sell_offer")
        effects = _make_effects(
            ("trade", {"account": "GA"}),
            ("offer_created", {"account": "GA"}),
            ("offer_updated", {"account": "GA"}),
        )
        assert ManageOfferMatcher().match(op, effects, 0) == ([1], 2)

    def test_manage_offer_without_offer_effect(self):
        op = _make_op("manage_buy_offer")
        effects = _make_effects(("trade", {"account": "GA"}))
        assert ManageOfferMatcher().match(op, effects, 0) == ([], 0)

    def test_set_options(self):
        op = _make_op("set_options")
        effects = _make_effects(
            ("signer_created", {"account": "GA"}),
            ("account_thresholds_updated", {"account": "GA"}),
            ("account_home_domain_updated", {"account": "GA"}),
            ("signer_created", {"account": "GB"}),
        )
        assert SetOptionsMatcher().match(op, effects, 0) == ([0, 1, 2], 3)


class TestRegistry:
    def test_default_kinds(self):
        registry = build_default_registry()
        for kind in (
            "payment", "path_payment_strict_send", "path_payment_strict_receive", "change_trust",
            "claim_claimable_balance", "create_claimable_balance", "create_account", "manage_data",
            "manage_sell_offer", "manage_buy_offer", "set_options",
        ):
            assert registry.get(kind) is not None
        assert registry.get("bump_sequence") is None

    def test_register_override(self):
        registry = MatcherRegistry()
        matcher = ManageOfferMatcher()
        registry.register(matcher, kinds=("custom",))
        assert registry.get("custom") is matcher
        assert registry.kinds() == ["custom"]


class TestEffectMatcher:
    def test_two_payments_share_cursor(self):
        ops = [
            _make_op("payment", to_account="GB", amount="10", asset=NATIVE),
            _make_op("payment", to_account="GB", amount="10", asset=NATIVE),
        ]
        effects = _make_effects(
            ("account_debited", _native("GA", "10")),
            ("account_credited", _native("GB", "10")),
            ("account_debited", _native("GA", "10")),
            ("account_credited", _native("GB", "10")),
        )
        result = EffectMatcher().match(ops, effects)
        assert result.claims == {0: [0, 1], 1: [2, 3]}
        assert result.cursor == 4

    def test_unmatched_operation_gets_empty_list(self):
        ops = [_make_op("bump_sequence"), _make_op("payment", to_account="GB", amount="1", asset=NATIVE)]
        effects = _make_effects(("account_credited", _native("GB", "1")))
        result = EffectMatcher().match(ops, effects)
        assert result.claims[0] == []
        assert result.effects[0] == []
        assert result.claims[1] == [0]

    def test_claimed_effects_classified(self):
        ops = [_make_op("payment", to_account="GB", amount="10", asset=NATIVE)]
        effects = _make_effects(("account_debited", _native("GA", "10")), ("account_credited", _native("GB", "10")))
        grouped = match_effects(ops, effects)
        assert [(e.category, e.account_id, e.operation_index) for e in grouped[0]] == [
            (EffectCategory.DEBITED, "GA", 0),
            (EffectCategory.CREDITED, "GB", 0),
        ]

    def test_non_balance_claims_not_classified(self):
        ops = [_make_op("set_options")]
        effects = _make_effects(("signer_created", {"account": "GA"}))
        result = EffectMatcher().match(ops, effects)
        assert result.claims[0] == [0]
        assert result.effects[0] == []

    def test_cursor_monotonic_and_claims_disjoint(self):
        rng = random.Random(7)
        effect_kinds = [
            ("account_debited", _native("GA", "10")),
            ("account_credited", _native("GB", "10")),
            ("trade", {"account": "GMM"}),
            ("signer_created", {"account": "GA"}),
            ("offer_created", {"account": "GA"}),
            ("data_created", {"account": "GA", "data_name": "k"}),
            ("trustline_created", _usdc("GA", "0")),
        ]
        op_kinds = [
            _make_op("payment", to_account="GB", amount="10", asset=NATIVE),
            _make_op("path_payment_strict_send", to_account="GB", source_asset=NATIVE, dest_asset=NATIVE),
            _make_op("set_options"),
            _make_op("manage_sell_offer"),
            _make_op("manage_data", data_name="k"),
            _make_op("change_trust", asset=USDC, limit="1"),
            _make_op("bump_sequence"),
        ]
        for _ in range(50):
            effects = _make_effects(*(rng.choice(effect_kinds) for _ in range(rng.randint(0, 30))))
            ops = [rng.choice(op_kinds) for _ in range(rng.randint(1, 8))]
            result = EffectMatcher().match(ops, effects)

            last = -1
            for op_index in range(len(ops)):
                claimed = result.claims[op_index]
                assert claimed == sorted(claimed)
                if claimed:
                    assert claimed[0] > last
                    last = claimed[-1]
            assert result.cursor >= last + 1 or last == -1
