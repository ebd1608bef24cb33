"""MetadataCache — per-session contract metadata keyed by (contract_id, network)."""

import asyncio
import logging
from collections.abc import Iterable
from typing import Any, Protocol

from stellarflow.parser.utils.types import AssetMetadata

logger = logging.getLogger(__name__)


class AssetMetadataResolver(Protocol):
    """The external lookup capability. Must be idempotent and safe to call concurrently."""

    async def resolve_asset(self, contract_id: str, network: str) -> AssetMetadata | dict[str, Any] | None: ...


def _coerce(result: AssetMetadata | dict[str, Any] | None, contract_id: str, network: str) -> AssetMetadata | None:
    if result is None:
        return None
    if isinstance(result, AssetMetadata):
        return result
    data = {"contract_id": contract_id, "network": network, **result}
    return AssetMetadata.model_validate(data)


class MetadataCache:
    """Holds resolved metadata and in-flight lookups for one session.

    get() only reads what is already held and never dispatches. ensure() checks
    held results, then in-flight lookups, and only then dispatches a single
    lookup per key. A failed lookup is logged and treated as absent without
    being held, so a later ensure() may try again.
    """

    def __init__(self, resolver: AssetMetadataResolver | None = None, network: str = "testnet") -> None:
        self._resolver = resolver
        self._network = network
        self._held: dict[tuple[str, str], AssetMetadata | None] = {}
        self._in_flight: dict[tuple[str, str], asyncio.Task] = {}

    @property
    def network(self) -> str:
        return self._network

    def _key(self, contract_id: str) -> tuple[str, str]:
        return (contract_id, self._network)

    def get(self, contract_id: str) -> AssetMetadata | None:
        return self._held.get(self._key(contract_id))

    def is_held(self, contract_id: str) -> bool:
        return self._key(contract_id) in self._held

    def is_pending(self, contract_id: str) -> bool:
        return self._key(contract_id) in self._in_flight

    def put(self, metadata: AssetMetadata) -> None:
        """Seed the cache with metadata obtained elsewhere."""
        self._held[(metadata.contract_id, self._network)] = metadata

    async def ensure(self, contract_id: str) -> AssetMetadata | None:
        key = self._key(contract_id)
        if key in self._held:
            return self._held[key]
        if self._resolver is None:
            return None

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._lookup(contract_id))
            self._in_flight[key] = task
        # Shielded so one abandoned caller does not cancel a lookup others await
        return await asyncio.shield(task)

    async def prefetch(self, contract_ids: Iterable[str]) -> dict[str, AssetMetadata | None]:
        """Resolve distinct contract ids concurrently."""
        unique = list(dict.fromkeys(c for c in contract_ids if c))
        if not unique:
            return {}
        results = await asyncio.gather(*(self.ensure(c) for c in unique))
        resolved = sum(1 for r in results if r is not None)
        logger.info("Prefetched metadata for %d/%d contracts on %s", resolved, len(unique), self._network)
        return dict(zip(unique, results))

    def cancel_pending(self) -> None:
        """Abandon unresolved lookups when the surrounding request is discarded."""
        for task in self._in_flight.values():
            task.cancel()
        self._in_flight.clear()

    async def _lookup(self, contract_id: str) -> AssetMetadata | None:
        key = self._key(contract_id)
        try:
            result = await self._resolver.resolve_asset(contract_id, self._network)  # type: ignore[union-attr]
            metadata = _coerce(result, contract_id, self._network)
        except Exception:
            logger.warning("Metadata lookup failed for %s on %s, treating as absent", contract_id, self._network, exc_info=True)
            return None
        finally:
            self._in_flight.pop(key, None)

        self._held[key] = metadata
        return metadata
