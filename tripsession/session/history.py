"""Structural acceptance rules for replayed history.

Applied only on the history-replay path. A turn that parses cleanly can
still be rejected here when it would produce a history the chat API
refuses: two consecutive turns from the same role, or parts placed in a
turn whose role cannot carry them.
"""

from __future__ import annotations

from tripsession.session.blocks import (
    FunctionCallBlock,
    FunctionResponseBlock,
    TextBlock,
    ThoughtBlock,
    Turn,
)
from tripsession.session.errors import ProtocolViolation


def check_turn(turn: Turn, previous: Turn | None) -> None:
    """Validate ``turn`` as the successor of ``previous``.

    Raises:
        ProtocolViolation: with a message naming the first broken rule.
    """
    if previous is not None and previous.role == turn.role:
        raise ProtocolViolation(
            f"turn role '{turn.role}' repeats the previous turn's role; "
            "roles must alternate between 'user' and 'model'"
        )

    for index, block in enumerate(turn.blocks):
        if isinstance(block, FunctionCallBlock):
            if turn.role != "model":
                raise ProtocolViolation(
                    f"parts.{index}: functionCall '{block.name}' is only allowed in model turns"
                )
        elif isinstance(block, ThoughtBlock):
            if turn.role != "model":
                raise ProtocolViolation(
                    f"parts.{index}: thought is only allowed in model turns"
                )
        elif isinstance(block, FunctionResponseBlock):
            if turn.role != "user":
                raise ProtocolViolation(
                    f"parts.{index}: functionResponse '{block.name}' is only allowed in user turns"
                )
        elif isinstance(block, TextBlock):
            continue
        else:
            raise ProtocolViolation(f"parts.{index}: unsupported block {type(block).__name__}")
