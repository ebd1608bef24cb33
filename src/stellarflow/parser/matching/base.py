"""Base matcher interfaces."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from stellarflow.parser.utils.types import RawEffect, RawOperation


class OperationMatcher(ABC):
    """Claims the contiguous run of effects that belong to one operation.

    match() is pure: the cursor comes in, the claimed effect indices and the
    advanced cursor come out. Claimed indices are always >= the incoming cursor
    and the returned cursor is one past the last claim (or unchanged).
    """

    MATCHER_NAME: str = "OperationMatcher"
    OPERATION_KINDS: tuple[str, ...] = ()

    @abstractmethod
    def match(self, op: RawOperation, effects: Sequence[RawEffect], cursor: int) -> tuple[list[int], int]:
        """Return (claimed effect indices, new cursor)."""


class PredicateMatcher(OperationMatcher):
    """Claim every effect the predicate accepts; stop at the first miss after a claim.

    Effects before the first claim are skipped, not claimed.
    """

    @abstractmethod
    def accepts(self, op: RawOperation, effect: RawEffect, claimed: list[RawEffect]) -> bool:
        """Does this effect belong to the operation, given what is claimed so far?"""

    def match(self, op: RawOperation, effects: Sequence[RawEffect], cursor: int) -> tuple[list[int], int]:
        claimed: list[int] = []
        claimed_effects: list[RawEffect] = []
        for i in range(cursor, len(effects)):
            if self.accepts(op, effects[i], claimed_effects):
                claimed.append(i)
                claimed_effects.append(effects[i])
                cursor = i + 1
            elif claimed:
                break
        return claimed, cursor
