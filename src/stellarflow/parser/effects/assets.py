"""AssetResolver — resolve an AssetIdentity for a raw effect.

Precedence, first hit wins:
    native detection
    -> metadata symbol for the contract id
    -> explicit asset code (not the "TOKEN" placeholder)
    -> "code:issuer" asset string
    -> abbreviated contract id
    -> asset code even if it is the placeholder
    -> literal "TOKEN"
"""

from collections.abc import Callable, Iterable

from stellarflow.infra.metadata.cache import MetadataCache
from stellarflow.parser.utils.decoder import abbreviate
from stellarflow.parser.utils.types import AssetIdentity, RawEffect

PLACEHOLDER_CODE = "TOKEN"
UNSET_CODES = frozenset({"", "undefined", "null", "None"})
NATIVE_ALIASES = frozenset({"native", "stellar:native", "xlm:native"})


def is_unset(value: str | None) -> bool:
    return value is None or value.strip() in UNSET_CODES


def is_native_alias(value: str | None) -> bool:
    return value is not None and value.strip().lower() in NATIVE_ALIASES


Rule = Callable[[RawEffect, str | None], AssetIdentity | None]


class AssetResolver:
    """Resolves assets from local effect fields plus whatever metadata the cache holds."""

    def __init__(self, cache: MetadataCache | None = None) -> None:
        self._cache = cache
        self._rules: tuple[Rule, ...] = (
            self._native,
            self._metadata_symbol,
            self._explicit_code,
            self._asset_string,
            self._contract_fallback,
            self._placeholder_code,
        )

    def resolve(self, effect: RawEffect, contract_id: str | None = None) -> AssetIdentity:
        contract_id = contract_id or effect.contract_id
        for rule in self._rules:
            identity = rule(effect, contract_id)
            if identity is not None:
                return identity
        return AssetIdentity(code=PLACEHOLDER_CODE)

    def decimals_for(self, contract_id: str | None) -> int | None:
        if not contract_id or self._cache is None:
            return None
        metadata = self._cache.get(contract_id)
        return metadata.decimals if metadata is not None else None

    @staticmethod
    def contract_ids(effects: Iterable[RawEffect]) -> list[str]:
        """Distinct contract ids referenced by effects, in first-seen order."""
        return list(dict.fromkeys(e.contract_id for e in effects if e.contract_id))

    def unresolved_contracts(self, effects: Iterable[RawEffect]) -> list[str]:
        """Contract ids referenced by effects whose metadata is not held yet."""
        ids = self.contract_ids(effects)
        if self._cache is None:
            return ids
        return [cid for cid in ids if not self._cache.is_held(cid)]

    # --- rules ---

    @staticmethod
    def _native(effect: RawEffect, contract_id: str | None) -> AssetIdentity | None:
        if effect.asset_type == "native" or is_native_alias(effect.asset) or is_native_alias(effect.asset_code):
            return AssetIdentity.native()
        return None

    def _metadata_symbol(self, effect: RawEffect, contract_id: str | None) -> AssetIdentity | None:
        if not contract_id or self._cache is None:
            return None
        metadata = self._cache.get(contract_id)
        symbol = metadata.symbol if metadata is not None else None
        if symbol is None or is_unset(symbol):
            return None
        # The native asset's wrapper contract reports "native" as its symbol
        if is_native_alias(symbol):
            return AssetIdentity.native()
        return AssetIdentity(code=symbol, issuer_or_contract=contract_id)

    @staticmethod
    def _explicit_code(effect: RawEffect, contract_id: str | None) -> AssetIdentity | None:
        code = effect.asset_code or ""
        if is_unset(code) or code == PLACEHOLDER_CODE:
            return None
        return AssetIdentity(code=code, issuer_or_contract=effect.asset_issuer or contract_id)

    @staticmethod
    def _asset_string(effect: RawEffect, contract_id: str | None) -> AssetIdentity | None:
        asset = effect.asset or ""
        if is_unset(asset):
            return None
        if ":" in asset:
            code, issuer = asset.split(":", 1)
            if is_unset(code):
                return None
            return AssetIdentity(code=code, issuer_or_contract=issuer or None)
        return AssetIdentity(code=asset, issuer_or_contract=contract_id)

    @staticmethod
    def _contract_fallback(effect: RawEffect, contract_id: str | None) -> AssetIdentity | None:
        if not contract_id:
            return None
        return AssetIdentity(code=abbreviate(contract_id, keep=6, min_length=11), issuer_or_contract=contract_id)

    @staticmethod
    def _placeholder_code(effect: RawEffect, contract_id: str | None) -> AssetIdentity | None:
        code = effect.asset_code or ""
        if is_unset(code):
            return None
        return AssetIdentity(code=code, issuer_or_contract=effect.asset_issuer)
