"""Invocation call-tree builder.

Walks a flat diagnostic event trace with an explicit stack:
    fn_call    push a frame at depth = stack size, child of the current top
    fn_return  pop the top frame and give it the event payload as return value
    other      attach to the frame on top of the stack

Returns are matched by stack position, never by call order. An orphan return
is ignored; frames still open at the end are kept without a return value.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from stellarflow.domain.enums import InvokerKind
from stellarflow.parser.utils.decoder import decode, decode_address, topic_name
from stellarflow.parser.utils.types import DecodedValue, Invocation, RawEvent

logger = logging.getLogger(__name__)

CALL_MARKER = "fn_call"
RETURN_MARKER = "fn_return"
UNKNOWN_FUNCTION = "unknown"


@dataclass
class _Frame:
    depth: int
    invoker: str
    invoker_kind: InvokerKind
    contract_id: str
    function_name: str
    parameters: list[DecodedValue]
    children: list["_Frame"] = field(default_factory=list)
    events: list[RawEvent] = field(default_factory=list)
    return_value: DecodedValue | None = None
    completed: bool = False

    def freeze(self) -> Invocation:
        return Invocation(
            depth=self.depth,
            invoker=self.invoker,
            invoker_kind=self.invoker_kind,
            contract_id=self.contract_id,
            function_name=self.function_name,
            parameters=self.parameters,
            return_value=self.return_value,
            children=[child.freeze() for child in self.children],
            events=self.events,
            completed=self.completed,
        )


def _marker(event: RawEvent) -> str:
    return topic_name(event.topics[0]).lower() if event.topics else ""


def _parameters(data: Any) -> list[DecodedValue]:
    if data is None:
        return []
    if isinstance(data, (list, tuple)):
        return [decode(item) for item in data]
    return [decode(data)]


def _open_frame(event: RawEvent, stack: list[_Frame], source_account: str) -> _Frame:
    topics = event.topics
    contract_id = decode_address(topics[1] if len(topics) > 1 else event.contract_id)
    function_name = topic_name(topics[2]) if len(topics) > 2 else UNKNOWN_FUNCTION
    depth = len(stack)
    if depth == 0:
        invoker, invoker_kind = source_account, InvokerKind.ACCOUNT
    else:
        invoker, invoker_kind = stack[-1].contract_id, InvokerKind.CONTRACT
    return _Frame(
        depth=depth,
        invoker=invoker,
        invoker_kind=invoker_kind,
        contract_id=contract_id,
        function_name=function_name or UNKNOWN_FUNCTION,
        parameters=_parameters(event.data),
    )


def build_tree(events: Iterable[RawEvent], source_account: str = "") -> list[Invocation]:
    """Reconstruct root invocations (depth 0) from a diagnostic event trace."""
    roots: list[_Frame] = []
    stack: list[_Frame] = []

    for event in events:
        marker = _marker(event)
        if marker == CALL_MARKER:
            frame = _open_frame(event, stack, source_account)
            if stack:
                stack[-1].children.append(frame)
            else:
                roots.append(frame)
            stack.append(frame)
        elif marker == RETURN_MARKER:
            if not stack:
                logger.debug("Orphan return marker at event %d ignored", event.index)
                continue
            frame = stack.pop()
            frame.return_value = decode(event.data)
            frame.completed = True
        elif stack:
            contract_id = decode_address(event.contract_id) if event.contract_id else None
            stack[-1].events.append(event.model_copy(update={"contract_id": contract_id}))

    if stack:
        logger.debug("%d invocation frame(s) left open at end of trace", len(stack))
    return [root.freeze() for root in roots]


def walk(invocations: Iterable[Invocation]) -> Iterator[Invocation]:
    """Every invocation node, depth-first in call order."""
    for invocation in invocations:
        yield invocation
        yield from walk(invocation.children)
