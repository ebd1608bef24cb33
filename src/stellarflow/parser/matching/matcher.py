"""EffectMatcher — attribute a transaction's effects to its operations.

One forward-only cursor is threaded through the per-operation matchers, so
effects are never revisited and no effect is claimed by two operations.
"""

import logging
from collections.abc import Sequence

from stellarflow.parser.effects.classifier import EffectClassifier
from stellarflow.parser.matching.registry import MatcherRegistry, build_default_registry
from stellarflow.parser.utils.types import ClassifiedEffect, MatchResult, RawEffect, RawOperation

logger = logging.getLogger(__name__)


class EffectMatcher:
    def __init__(self, classifier: EffectClassifier | None = None, registry: MatcherRegistry | None = None) -> None:
        self._classifier = classifier or EffectClassifier()
        self._registry = registry or build_default_registry()

    def match(self, operations: Sequence[RawOperation], effects: Sequence[RawEffect]) -> MatchResult:
        claims: dict[int, list[int]] = {}
        grouped: dict[int, list[ClassifiedEffect]] = {}
        cursor = 0

        for op_index, op in enumerate(operations):
            claims[op_index] = []
            grouped[op_index] = []
            matcher = self._registry.get(op.kind)
            if matcher is None:
                continue

            claimed, new_cursor = matcher.match(op, effects, cursor)
            claimed = [i for i in claimed if cursor <= i < len(effects)]
            if new_cursor < cursor:
                logger.debug("%s tried to move the cursor back (%d -> %d), ignored", matcher.MATCHER_NAME, cursor, new_cursor)
                new_cursor = cursor
            cursor = max(new_cursor, claimed[-1] + 1) if claimed else new_cursor

            claims[op_index] = claimed
            grouped[op_index] = self._classifier.classify_all(
                (effects[i] for i in claimed), operation_index=op_index,
            )
            logger.debug(
                "Operation %d (%s): %s claimed effects %s, cursor at %d",
                op_index, op.kind, matcher.MATCHER_NAME, claimed, cursor,
            )

        return MatchResult(claims=claims, effects=grouped, cursor=cursor)


def match_effects(
    operations: Sequence[RawOperation],
    effects: Sequence[RawEffect],
    classifier: EffectClassifier | None = None,
) -> dict[int, list[ClassifiedEffect]]:
    """Operation index -> classified effects attributed to it. Unmatched operations map to []."""
    return EffectMatcher(classifier).match(operations, effects).effects
