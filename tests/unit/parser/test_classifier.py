from stellarflow.domain.enums import EffectCategory, SourceKind
from stellarflow.parser.effects.classifier import EffectClassifier, filter_balance_changes
from stellarflow.parser.utils.types import AssetIdentity, ClassifiedEffect, RawEffect


def _make_effect(kind: str, index: int = 0, **kwargs) -> RawEffect:
    return RawEffect(kind=kind, index=index, **kwargs)


def _credit(account: str = "GA", amount: str = "10", code: str = "USDC", index: int = 0) -> RawEffect:
    return _make_effect("account_credited", index, account=account, amount=amount, asset_code=code, asset_issuer="GISS")


def _make_classified(category: EffectCategory, amount: str, code: str = "USDC") -> ClassifiedEffect:
    return ClassifiedEffect(
        category=category,
        account_id="GA",
        asset=AssetIdentity(code=code),
        amount=amount,
        source_kind=SourceKind.CLASSIC,
        original_index=0,
        source_effect_kind="account_credited",
    )


class TestClassify:
    def test_credit(self):
        result = EffectClassifier().classify(_credit(), operation_index=2)
        assert result.category == EffectCategory.CREDITED
        assert result.account_id == "GA"
        assert result.amount == "10"
        assert result.asset.code == "USDC"
        assert result.source_kind == SourceKind.CLASSIC
        assert result.operation_index == 2

    def test_debit(self):
        effect = _make_effect("account_debited", account="GA", amount="3", asset_type="native")
        result = EffectClassifier().classify(effect)
        assert result.category == EffectCategory.DEBITED
        assert result.asset.is_native

    def test_self_issuance_is_minted(self):
        effect = _make_effect("account_debited", account="GISS", amount="5", asset_code="USDC", asset_issuer="GISS")
        result = EffectClassifier().classify(effect)
        assert result.category == EffectCategory.MINTED
        assert result.source_kind == SourceKind.CLASSIC

    def test_account_created(self):
        effect = _make_effect("account_created", account="GNEW", starting_balance="100")
        result = EffectClassifier().classify(effect)
        assert result.category == EffectCategory.CREDITED
        assert result.amount == "100"
        assert result.asset.is_native

    def test_contract_credited_uses_contract(self):
        effect = _make_effect("contract_credited", contract_id="CPOOL", amount="7", asset_type="native")
        result = EffectClassifier().classify(effect)
        assert result.account_id == "CPOOL"
        assert result.source_kind == SourceKind.SOROBAN

    def test_soroban_credit(self):
        effect = _make_effect("account_credited", account="GA", amount="1", asset_code="TKN", contract_id="CTKN")
        assert EffectClassifier().classify(effect).source_kind == SourceKind.SOROBAN

    def test_burn(self):
        effect = _make_effect("account_burned", account="GA", amount="2", asset_code="TKN")
        assert EffectClassifier().classify(effect).category == EffectCategory.BURNED

    def test_trade(self):
        effect = _make_effect(
            "trade", account="GA", offer_id="42", price="0.5",
            sold_amount="10", sold_asset_type="native",
            bought_amount="5", bought_asset_code="USDC", bought_asset_issuer="GISS",
        )
        result = EffectClassifier().classify(effect)
        assert result.category == EffectCategory.TRADE
        assert result.asset.is_native
        assert result.amount == "10"
        assert result.sold_asset_code == "XLM"
        assert result.bought_asset_code == "USDC"
        assert result.offer_id == "42"

    def test_pool_trade(self):
        effect = _make_effect(
            "liquidity_pool_trade", liquidity_pool_id="pool1",
            sold_amount="10", sold_asset_type="native", bought_amount="5", bought_asset_code="USDC",
        )
        result = EffectClassifier().classify(effect)
        assert result.category == EffectCategory.POOL_TRADE
        assert result.account_id == "pool1"
        assert result.pool_id == "pool1"

    def test_pool_updated(self):
        effect = _make_effect("liquidity_pool_deposited", liquidity_pool_id="pool1", total_shares="250")
        result = EffectClassifier().classify(effect)
        assert result.category == EffectCategory.POOL_UPDATED
        assert result.account_id == "pool1"
        assert result.asset.code == "Pool"
        assert result.amount == "250"

    def test_offer(self):
        effect = _make_effect("offer_created", account="GA", amount="100", selling_asset_type="native", buying_asset_code="USDC")
        result = EffectClassifier().classify(effect)
        assert result.category == EffectCategory.OFFER_UPDATED
        assert result.asset.code == "XLM"
        assert result.bought_asset_code == "USDC"

    def test_unknown_kind(self):
        assert EffectClassifier().classify(_make_effect("signer_created", account="GA")) is None

    def test_approval_yields_nothing(self):
        effect = _make_effect("token_approval", account="GA", amount="10")
        assert EffectClassifier().classify(effect) is None
        assert EffectClassifier().classify_views(effect) == []

    def test_missing_amount(self):
        assert EffectClassifier().classify(_make_effect("account_credited", account="GA")) is None


class TestViews:
    def test_token_transfer_debit_and_credit(self):
        effect = _make_effect("token_transfer", account="GA", to_account="GB", amount="4", asset_code="TKN")
        views = EffectClassifier().classify_views(effect)
        assert [(v.category, v.account_id) for v in views] == [
            (EffectCategory.DEBITED, "GA"),
            (EffectCategory.CREDITED, "GB"),
        ]
        assert EffectClassifier().classify(effect).category == EffectCategory.DEBITED

    def test_mint_credit_view_only_on_request(self):
        effect = _make_effect("token_mint", account="GA", amount="10", asset_code="TKN")
        assert len(EffectClassifier().classify_views(effect)) == 1
        views = EffectClassifier().classify_views(effect, include_mint_credit=True)
        assert [v.category for v in views] == [EffectCategory.MINTED, EffectCategory.CREDITED]

    def test_mint_credit_default_from_constructor(self):
        effect = _make_effect("account_minted", account="GA", amount="10", asset_code="TKN")
        assert len(EffectClassifier(include_mint_credit=True).classify_views(effect)) == 2
        # classify() is always the primary view
        assert EffectClassifier(include_mint_credit=True).classify(effect).category == EffectCategory.MINTED


class TestClassifyAll:
    def test_duplicates_collapse(self):
        result = EffectClassifier().classify_all([_credit(index=0), _credit(index=1)])
        assert len(result) == 1
        assert result[0].original_index == 0

    def test_amounts_compared_numerically(self):
        result = EffectClassifier().classify_all([_credit(amount="10.0000000"), _credit(amount="10", index=1)])
        assert len(result) == 1

    def test_different_amounts_kept(self):
        result = EffectClassifier().classify_all([_credit(amount="10"), _credit(amount="11", index=1)])
        assert len(result) == 2

    def test_same_values_different_category_kept(self):
        debit = _make_effect("account_debited", 1, account="GA", amount="10", asset_code="USDC", asset_issuer="GISS")
        result = EffectClassifier().classify_all([_credit(), debit])
        assert [r.category for r in result] == [EffectCategory.CREDITED, EffectCategory.DEBITED]

    def test_unclassifiable_skipped(self):
        result = EffectClassifier().classify_all([_make_effect("signer_created"), _credit(index=1)])
        assert len(result) == 1


class TestFilterBalanceChanges:
    def test_keeps_balance_categories(self):
        effects = [
            _make_classified(EffectCategory.CREDITED, "1"),
            _make_classified(EffectCategory.DEBITED, "2"),
            _make_classified(EffectCategory.MINTED, "3"),
            _make_classified(EffectCategory.BURNED, "4"),
            _make_classified(EffectCategory.TRADE, "5"),
            _make_classified(EffectCategory.OFFER_UPDATED, "6"),
        ]
        result = filter_balance_changes(effects)
        assert [e.amount for e in result] == ["1", "2", "3", "4"]

    def test_zero_and_non_numeric_removed(self):
        effects = [
            _make_classified(EffectCategory.CREDITED, "0"),
            _make_classified(EffectCategory.CREDITED, "0.0000000"),
            _make_classified(EffectCategory.CREDITED, "abc"),
            _make_classified(EffectCategory.CREDITED, "NaN"),
            _make_classified(EffectCategory.CREDITED, "1.5"),
        ]
        assert [e.amount for e in filter_balance_changes(effects)] == ["1.5"]

    def test_unset_asset_removed(self):
        effects = [_make_classified(EffectCategory.CREDITED, "1", code="undefined")]
        assert filter_balance_changes(effects) == []
