from enum import Enum


class EffectKind(str, Enum):
    """Raw effect kinds from both source universes. Values match the ledger's strings."""

    # Ledger universe
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_REMOVED = "account_removed"
    ACCOUNT_CREDITED = "account_credited"
    ACCOUNT_DEBITED = "account_debited"
    ACCOUNT_THRESHOLDS_UPDATED = "account_thresholds_updated"
    ACCOUNT_HOME_DOMAIN_UPDATED = "account_home_domain_updated"
    ACCOUNT_FLAGS_UPDATED = "account_flags_updated"
    ACCOUNT_INFLATION_DESTINATION_UPDATED = "account_inflation_destination_updated"
    ACCOUNT_SPONSORSHIP_CREATED = "account_sponsorship_created"
    ACCOUNT_SPONSORSHIP_UPDATED = "account_sponsorship_updated"
    SIGNER_CREATED = "signer_created"
    SIGNER_UPDATED = "signer_updated"
    SIGNER_REMOVED = "signer_removed"
    SIGNER_SPONSORSHIP_CREATED = "signer_sponsorship_created"
    SIGNER_SPONSORSHIP_UPDATED = "signer_sponsorship_updated"
    TRUSTLINE_CREATED = "trustline_created"
    TRUSTLINE_UPDATED = "trustline_updated"
    TRUSTLINE_REMOVED = "trustline_removed"
    TRUSTLINE_SPONSORSHIP_CREATED = "trustline_sponsorship_created"
    TRUSTLINE_SPONSORSHIP_UPDATED = "trustline_sponsorship_updated"
    OFFER_CREATED = "offer_created"
    OFFER_UPDATED = "offer_updated"
    OFFER_REMOVED = "offer_removed"
    TRADE = "trade"
    DATA_CREATED = "data_created"
    DATA_UPDATED = "data_updated"
    DATA_REMOVED = "data_removed"
    DATA_SPONSORSHIP_CREATED = "data_sponsorship_created"
    DATA_SPONSORSHIP_UPDATED = "data_sponsorship_updated"
    CLAIMABLE_BALANCE_CREATED = "claimable_balance_created"
    CLAIMABLE_BALANCE_CLAIMANT_CREATED = "claimable_balance_claimant_created"
    CLAIMABLE_BALANCE_CLAIMED = "claimable_balance_claimed"
    CLAIMABLE_BALANCE_SPONSORSHIP_CREATED = "claimable_balance_sponsorship_created"
    CLAIMABLE_BALANCE_SPONSORSHIP_UPDATED = "claimable_balance_sponsorship_updated"
    CLAIMABLE_BALANCE_SPONSORSHIP_REMOVED = "claimable_balance_sponsorship_removed"
    LIQUIDITY_POOL_DEPOSITED = "liquidity_pool_deposited"
    LIQUIDITY_POOL_WITHDREW = "liquidity_pool_withdrew"
    LIQUIDITY_POOL_TRADE = "liquidity_pool_trade"
    LIQUIDITY_POOL_CREATED = "liquidity_pool_created"
    LIQUIDITY_POOL_REMOVED = "liquidity_pool_removed"
    LIQUIDITY_POOL_UPDATED = "liquidity_pool_updated"
    CONTRACT_CREDITED = "contract_credited"
    CONTRACT_DEBITED = "contract_debited"

    # Contract-event universe
    ACCOUNT_MINTED = "account_minted"
    ACCOUNT_BURNED = "account_burned"
    TOKEN_TRANSFER = "token_transfer"
    TOKEN_MINT = "token_mint"
    TOKEN_BURN = "token_burn"
    TOKEN_APPROVAL = "token_approval"
    CONTRACT_EVENT = "contract_event"


# Effects a path payment walks over while looking for the destination credit
TRADING_EFFECT_KINDS: frozenset[str] = frozenset({
    EffectKind.TRADE.value,
    EffectKind.OFFER_CREATED.value,
    EffectKind.OFFER_UPDATED.value,
    EffectKind.OFFER_REMOVED.value,
    EffectKind.LIQUIDITY_POOL_DEPOSITED.value,
    EffectKind.LIQUIDITY_POOL_WITHDREW.value,
    EffectKind.LIQUIDITY_POOL_TRADE.value,
    EffectKind.LIQUIDITY_POOL_CREATED.value,
    EffectKind.LIQUIDITY_POOL_REMOVED.value,
})
