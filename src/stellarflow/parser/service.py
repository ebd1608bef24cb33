"""ReconstructionService — runs the full pipeline over one transaction.

reconstruct() is synchronous and only uses what is locally resolvable plus
whatever metadata the cache already holds. refine() prefetches the missing
metadata and replays the same pipeline over the same raw inputs; earlier
results are never mutated.
"""

import logging
from collections.abc import Sequence

from stellarflow.infra.metadata.cache import MetadataCache
from stellarflow.parser.balances.aggregator import aggregate
from stellarflow.parser.effects.adapter import canonicalize_effects, canonicalize_events, canonicalize_operations
from stellarflow.parser.effects.assets import AssetResolver
from stellarflow.parser.effects.classifier import EffectClassifier, filter_balance_changes
from stellarflow.parser.effects.events import DEFAULT_DECIMALS, events_to_effects, token_events_to_effects
from stellarflow.parser.invocations.call_tree import build_tree
from stellarflow.parser.matching.matcher import EffectMatcher
from stellarflow.parser.matching.operations import DEFAULT_PATH_PAYMENT_LOOKAHEAD
from stellarflow.parser.matching.registry import build_default_registry
from stellarflow.parser.utils.types import ClassifiedEffect, RawEffect, RawEvent, RawOperation, Reconstruction

logger = logging.getLogger(__name__)


class ReconstructionService:
    def __init__(
        self,
        cache: MetadataCache | None = None,
        path_payment_lookahead: int = DEFAULT_PATH_PAYMENT_LOOKAHEAD,
        include_mint_credit: bool = False,
        default_decimals: int = DEFAULT_DECIMALS,
        include_token_events: bool = False,
    ) -> None:
        self._cache = cache or MetadataCache()
        self._include_token_events = include_token_events
        self._registry = build_default_registry(path_payment_lookahead)
        self._include_mint_credit = include_mint_credit
        self._default_decimals = default_decimals

    @property
    def cache(self) -> MetadataCache:
        return self._cache

    def _inputs(
        self,
        operations: Sequence[dict | RawOperation],
        effects: Sequence[dict | RawEffect],
        events: Sequence[dict | RawEvent],
        source_account: str,
    ) -> tuple[list[RawOperation], list[RawEffect], list[RawEvent]]:
        ops = canonicalize_operations(operations, source_account or None)
        raw_events = canonicalize_events(events)
        ledger_effects = canonicalize_effects(effects)
        # Effects derived from token events follow the ledger effects
        offset = len(ledger_effects)
        event_effects = [
            e.model_copy(update={"index": offset + e.index})
            for e in events_to_effects(raw_events, self._cache, self._default_decimals)
        ]
        return ops, ledger_effects + event_effects, raw_events

    def reconstruct(
        self,
        operations: Sequence[dict | RawOperation],
        effects: Sequence[dict | RawEffect],
        events: Sequence[dict | RawEvent] = (),
        source_account: str = "",
    ) -> Reconstruction:
        ops, all_effects, raw_events = self._inputs(operations, effects, events, source_account)

        resolver = AssetResolver(self._cache)
        classifier = EffectClassifier(resolver, include_mint_credit=self._include_mint_credit)
        matched = EffectMatcher(classifier, self._registry).match(ops, all_effects)

        balance_changes = filter_balance_changes(classifier.classify_all(all_effects))
        # token_* view of the same events, never part of balance_changes
        token_effects: list[ClassifiedEffect] = []
        if self._include_token_events:
            token_effects = classifier.classify_all(
                token_events_to_effects(raw_events, self._cache, self._default_decimals),
            )
        pending = resolver.unresolved_contracts(all_effects)
        for event in raw_events:
            if event.contract_id and event.contract_id not in pending and not self._cache.is_held(event.contract_id):
                pending.append(event.contract_id)

        logger.debug(
            "Reconstructed %d operations, %d effects, %d balance changes, %d pending contracts",
            len(ops), len(all_effects), len(balance_changes), len(pending),
        )
        return Reconstruction(
            effects_by_operation=matched.effects,
            claims=matched.claims,
            balance_changes=balance_changes,
            balance_deltas=aggregate(balance_changes),
            token_effects=token_effects,
            invocations=build_tree(raw_events, source_account),
            pending_contracts=pending,
        )

    async def refine(
        self,
        operations: Sequence[dict | RawOperation],
        effects: Sequence[dict | RawEffect],
        events: Sequence[dict | RawEvent] = (),
        source_account: str = "",
    ) -> Reconstruction:
        """Resolve metadata for every referenced contract, then reconstruct again."""
        first = self.reconstruct(operations, effects, events, source_account)
        if first.pending_contracts:
            await self._cache.prefetch(first.pending_contracts)
            return self.reconstruct(operations, effects, events, source_account)
        return first
