"""Core data types for the reconstruction engine."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict

from stellarflow.domain.enums import DecodedKind, EffectCategory, InvokerKind, SourceKind
from stellarflow.parser.utils.amounts import format_summary_amount, parse_amount

NATIVE_CODE = "XLM"


class AssetRef(BaseModel):
    """Asset descriptor as it appears on an operation."""

    model_config = ConfigDict(frozen=True)

    asset_type: str = "native"  # native | credit_alphanum4 | credit_alphanum12
    code: str | None = None
    issuer: str | None = None

    @property
    def is_native(self) -> bool:
        return self.asset_type == "native"


class RawEffect(BaseModel):
    """One ledger effect in canonical shape. Produced once by the adapter, never mutated."""

    model_config = ConfigDict(frozen=True)

    kind: str
    index: int = 0  # position in the canonical effect list
    account: str | None = None
    to_account: str | None = None  # counter-party of a token transfer event
    amount: str | None = None
    starting_balance: str | None = None
    asset_type: str | None = None
    asset_code: str | None = None
    asset_issuer: str | None = None
    asset: str | None = None  # string form, e.g. "USDC:GA5Z..." or "native"
    contract_id: str | None = None
    balance_id: str | None = None
    data_name: str | None = None
    sponsor: str | None = None
    liquidity_pool_id: str | None = None
    offer_id: str | None = None
    sold_amount: str | None = None
    sold_asset_type: str | None = None
    sold_asset_code: str | None = None
    sold_asset_issuer: str | None = None
    bought_amount: str | None = None
    bought_asset_type: str | None = None
    bought_asset_code: str | None = None
    bought_asset_issuer: str | None = None
    selling_asset_type: str | None = None
    selling_asset_code: str | None = None
    buying_asset_type: str | None = None
    buying_asset_code: str | None = None
    price: str | None = None
    shares: str | None = None
    total_shares: str | None = None
    reserves: list[dict[str, Any]] = []
    extra: dict[str, Any] = {}


class RawOperation(BaseModel):
    """One transaction operation in canonical shape."""

    model_config = ConfigDict(frozen=True)

    kind: str
    index: int = 0
    source_account: str | None = None
    from_account: str | None = None
    to_account: str | None = None
    amount: str | None = None
    asset: AssetRef | None = None
    source_asset: AssetRef | None = None  # path payments only
    dest_asset: AssetRef | None = None  # path payments only
    limit: str | None = None
    balance_id: str | None = None
    data_name: str | None = None
    account: str | None = None  # create_account destination
    starting_balance: str | None = None
    offer_id: str | None = None
    extra: dict[str, Any] = {}


class RawEvent(BaseModel):
    """A diagnostic/contract event. topics[0] is the discriminator."""

    model_config = ConfigDict(frozen=True)

    contract_id: str | None = None
    topics: list[Any] = []
    data: Any = None
    event_type: str | None = None  # contract | system | diagnostic
    index: int = 0


class DecodedValue(BaseModel):
    """Display-safe result of decoding an opaque value."""

    model_config = ConfigDict(frozen=True)

    kind: DecodedKind
    value: Any = None

    @property
    def display(self) -> str:
        if self.kind == DecodedKind.NULL:
            return "null"
        if self.kind == DecodedKind.BOOL:
            return "true" if self.value else "false"
        if self.kind == DecodedKind.LIST:
            return "[" + ", ".join(v.display for v in self.value) + "]"
        if self.kind == DecodedKind.MAP:
            return "{" + ", ".join(f"{k}: {v.display}" for k, v in self.value.items()) + "}"
        return str(self.value)


class AssetIdentity(BaseModel):
    """Resolved asset. Hashable so it can key aggregation groups."""

    model_config = ConfigDict(frozen=True)

    is_native: bool = False
    code: str
    issuer_or_contract: str | None = None

    @classmethod
    def native(cls) -> "AssetIdentity":
        return cls(is_native=True, code=NATIVE_CODE)


class ClassifiedEffect(BaseModel):
    """Canonical output of the classifier."""

    model_config = ConfigDict(frozen=True)

    category: EffectCategory
    account_id: str
    asset: AssetIdentity
    amount: str  # decimal string, as reported by the source
    source_kind: SourceKind
    original_index: int
    operation_index: int | None = None
    source_effect_kind: str
    contract_id: str | None = None
    # Display extras for non-balance categories
    pool_id: str | None = None
    offer_id: str | None = None
    price: str | None = None
    sold_amount: str | None = None
    sold_asset_code: str | None = None
    bought_amount: str | None = None
    bought_asset_code: str | None = None

    @property
    def dedup_key(self) -> tuple[str, str, str, str]:
        # "10.0000000" from the ledger and "10" from a scaled event amount are one value
        amount = parse_amount(self.amount)
        normalized = self.amount
        if amount is not None:
            normalized = format(amount, "f")
            if "." in normalized:
                normalized = normalized.rstrip("0").rstrip(".")
        return (self.account_id, self.asset.code, normalized, self.category.value)


class Invocation(BaseModel):
    """A node of the contract call tree. Built in one pass, frozen afterwards."""

    model_config = ConfigDict(frozen=True)

    depth: int
    invoker: str
    invoker_kind: InvokerKind
    contract_id: str
    function_name: str
    parameters: list[DecodedValue] = []
    return_value: DecodedValue | None = None
    children: list["Invocation"] = []
    events: list[RawEvent] = []
    completed: bool = False  # True when a return marker closed this frame


class BalanceDelta(BaseModel):
    """Net change of one asset for one account across a transaction."""

    account_id: str
    asset: AssetIdentity
    net_amount: Decimal  # positive = received
    credited: Decimal = Decimal(0)
    debited: Decimal = Decimal(0)
    minted: Decimal = Decimal(0)
    burned: Decimal = Decimal(0)

    @property
    def display_amount(self) -> str:
        """Signed human amount, e.g. "+1,250.50" or "-0.00000123"."""
        sign = "+" if self.net_amount > 0 else "-"
        return f"{sign}{format_summary_amount(abs(self.net_amount))}"


class AssetMetadata(BaseModel):
    """Contract metadata as returned by the external lookup."""

    contract_id: str
    network: str = "testnet"
    symbol: str | None = None
    name: str | None = None
    decimals: int | None = None
    functions: list[dict[str, Any]] = []
    events: list[dict[str, Any]] = []
    is_token: bool = False


class MatchResult(BaseModel):
    """Output of the effect-operation matcher."""

    claims: dict[int, list[int]]  # operation index -> claimed effect indices
    effects: dict[int, list[ClassifiedEffect]]
    cursor: int = 0


class Reconstruction(BaseModel):
    """Everything one reconstruction pass derives from a transaction."""

    effects_by_operation: dict[int, list[ClassifiedEffect]] = {}
    claims: dict[int, list[int]] = {}
    balance_changes: list[ClassifiedEffect] = []
    balance_deltas: list[BalanceDelta] = []
    token_effects: list[ClassifiedEffect] = []  # token_* view of contract events, only on request
    invocations: list[Invocation] = []
    pending_contracts: list[str] = []  # contract ids whose metadata is not held yet
