"""Collapse a turn into user-visible text."""

from __future__ import annotations

from tripsession.session.blocks import (
    FunctionCallBlock,
    FunctionResponseBlock,
    TextBlock,
    ThoughtBlock,
    Turn,
)

DEFAULT_SEPARATOR = "\n"


def display_text(turn: Turn, separator: str = DEFAULT_SEPARATOR) -> str:
    """Join the Text blocks of ``turn`` in order.

    Thought blocks are model-internal and always excluded. Function calls and
    responses carry no display text. Returns "" when the turn has no Text
    blocks.
    """
    texts: list[str] = []
    for block in turn.blocks:
        if isinstance(block, TextBlock):
            texts.append(block.text)
        elif isinstance(block, (ThoughtBlock, FunctionCallBlock, FunctionResponseBlock)):
            continue
        else:
            raise TypeError(f"Unsupported block: {type(block).__name__}")
    return separator.join(texts)
