from enum import Enum


class OperationKind(str, Enum):
    """Transaction operation kinds. Values match the ledger's snake_case names."""

    CREATE_ACCOUNT = "create_account"
    PAYMENT = "payment"
    PATH_PAYMENT_STRICT_RECEIVE = "path_payment_strict_receive"
    PATH_PAYMENT_STRICT_SEND = "path_payment_strict_send"
    MANAGE_SELL_OFFER = "manage_sell_offer"
    MANAGE_BUY_OFFER = "manage_buy_offer"
    CREATE_PASSIVE_SELL_OFFER = "create_passive_sell_offer"
    SET_OPTIONS = "set_options"
    CHANGE_TRUST = "change_trust"
    ALLOW_TRUST = "allow_trust"
    ACCOUNT_MERGE = "account_merge"
    MANAGE_DATA = "manage_data"
    BUMP_SEQUENCE = "bump_sequence"
    CREATE_CLAIMABLE_BALANCE = "create_claimable_balance"
    CLAIM_CLAIMABLE_BALANCE = "claim_claimable_balance"
    BEGIN_SPONSORING_FUTURE_RESERVES = "begin_sponsoring_future_reserves"
    END_SPONSORING_FUTURE_RESERVES = "end_sponsoring_future_reserves"
    REVOKE_SPONSORSHIP = "revoke_sponsorship"
    CLAWBACK = "clawback"
    SET_TRUST_LINE_FLAGS = "set_trust_line_flags"
    LIQUIDITY_POOL_DEPOSIT = "liquidity_pool_deposit"
    LIQUIDITY_POOL_WITHDRAW = "liquidity_pool_withdraw"
    INVOKE_HOST_FUNCTION = "invoke_host_function"
