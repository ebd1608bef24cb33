"""MatcherRegistry — operation kind → matcher lookup."""

from stellarflow.parser.matching.base import OperationMatcher


class MatcherRegistry:
    """Registry mapping an operation kind to the matcher that claims its effects."""

    def __init__(self) -> None:
        self._matchers: dict[str, OperationMatcher] = {}

    def register(self, matcher: OperationMatcher, kinds: tuple[str, ...] | None = None) -> None:
        """Register for the given kinds, or for the matcher's own OPERATION_KINDS."""
        for kind in kinds or matcher.OPERATION_KINDS:
            self._matchers[kind] = matcher

    def get(self, kind: str) -> OperationMatcher | None:
        return self._matchers.get(kind)

    def kinds(self) -> list[str]:
        return list(self._matchers)


def build_default_registry(path_payment_lookahead: int | None = None) -> MatcherRegistry:
    """Create a MatcherRegistry with every operation matcher registered."""
    from stellarflow.parser.matching.operations import (
        DEFAULT_PATH_PAYMENT_LOOKAHEAD,
        ChangeTrustMatcher,
        ClaimClaimableBalanceMatcher,
        CreateAccountMatcher,
        CreateClaimableBalanceMatcher,
        ManageDataMatcher,
        ManageOfferMatcher,
        PathPaymentMatcher,
        PaymentMatcher,
        SetOptionsMatcher,
    )

    registry = MatcherRegistry()
    registry.register(PaymentMatcher())
    if path_payment_lookahead is None:
        path_payment_lookahead = DEFAULT_PATH_PAYMENT_LOOKAHEAD
    registry.register(PathPaymentMatcher(path_payment_lookahead))
    registry.register(ChangeTrustMatcher())
    registry.register(ClaimClaimableBalanceMatcher())
    registry.register(CreateClaimableBalanceMatcher())
    registry.register(CreateAccountMatcher())
    registry.register(ManageDataMatcher())
    registry.register(ManageOfferMatcher())
    registry.register(SetOptionsMatcher())
    return registry
