"""Contract metadata client — function/event spec and token details over the contract-spec endpoint."""

import logging
from typing import Any

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stellarflow.exceptions import ExternalServiceError, MetadataLookupError
from stellarflow.infra.http.rate_limited_client import RateLimitedClient
from stellarflow.parser.utils.types import AssetMetadata

logger = logging.getLogger(__name__)

SPEC_PATH = "/functions/v1/fetch-contract-spec"

# A contract exposing at least TOKEN_FUNCTION_THRESHOLD of these is treated as a token
TOKEN_FUNCTIONS = ("transfer", "balance", "decimals", "name", "symbol")
TOKEN_FUNCTION_THRESHOLD = 3


def looks_like_token(functions: list[dict[str, Any]]) -> bool:
    names = {str(f.get("name", "")).lower() for f in functions if isinstance(f, dict)}
    return sum(1 for name in TOKEN_FUNCTIONS if name in names) >= TOKEN_FUNCTION_THRESHOLD


def _parse_decimals(value: Any) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class ContractMetadataClient:
    """Resolves AssetMetadata for a contract id. Implements the AssetMetadataResolver protocol.

    404 and other non-retriable 4xx answers mean "no metadata". 429, 5xx and
    transport failures raise ExternalServiceError and are retried.
    """

    def __init__(self, base_url: str, http_client: RateLimitedClient) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_client

    @property
    def enabled(self) -> bool:
        return bool(self._base_url)

    @retry(
        retry=retry_if_exception_type(ExternalServiceError) & retry_if_not_exception_type(MetadataLookupError),
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=2, min=3, max=30),
        before_sleep=before_sleep_log(logger, logging.INFO),
        reraise=True,
    )
    async def _get_json(self, params: dict[str, str]) -> dict | None:
        try:
            resp = await self._http.get(f"{self._base_url}{SPEC_PATH}", params=params)
        except httpx.TransportError as e:
            raise ExternalServiceError(f"Contract spec request failed: {e}") from e

        status = resp.status_code
        if status == 429 or status >= 500:
            raise ExternalServiceError(f"Contract spec endpoint error {status}")
        if status >= 400:
            if status != 404:
                logger.info("Contract spec endpoint answered %d for %s", status, params.get("contractId"))
            return None

        try:
            data = resp.json()
        except ValueError as e:
            raise MetadataLookupError(f"Malformed contract spec response: {e}") from e
        if not isinstance(data, dict):
            raise MetadataLookupError(f"Unexpected contract spec response type: {type(data).__name__}")
        return data

    async def fetch_spec(self, contract_id: str, network: str) -> dict | None:
        """Function and event spec of a contract, or None when the endpoint has none."""
        return await self._get_json({"contractId": contract_id, "network": network})

    async def call_token_function(self, contract_id: str, network: str, function_name: str) -> str | None:
        """Result of a read-only token function (symbol, name, decimals), or None."""
        data = await self._get_json({"contractId": contract_id, "network": network, "tokenFunction": function_name})
        if data is None or data.get("value") is None:
            return None
        return str(data["value"])

    async def resolve_asset(self, contract_id: str, network: str) -> AssetMetadata | None:
        if not self.enabled:
            return None

        spec = await self.fetch_spec(contract_id, network) or {}
        functions = [f for f in spec.get("functions") or [] if isinstance(f, dict)]
        events = [e for e in spec.get("events") or [] if isinstance(e, dict)]

        symbol = name = None
        decimals = None
        is_token = False
        # Without a spec the token functions are probed anyway
        if looks_like_token(functions) or not functions:
            symbol = await self.call_token_function(contract_id, network, "symbol")
            is_token = symbol is not None
            if is_token or not functions:
                name = await self.call_token_function(contract_id, network, "name")
                is_token = is_token or name is not None
            if is_token or not functions:
                decimals = _parse_decimals(await self.call_token_function(contract_id, network, "decimals"))
                is_token = is_token or decimals is not None

        if not functions and not events and not is_token:
            logger.debug("No metadata for contract %s on %s", contract_id, network)
            return None

        return AssetMetadata(
            contract_id=contract_id,
            network=network,
            symbol=symbol,
            name=name,
            decimals=decimals,
            functions=functions,
            events=events,
            is_token=is_token,
        )
