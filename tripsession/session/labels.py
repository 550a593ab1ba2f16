"""Status labels for in-flight tool calls.

Maps the function names the planner's tools expose to short present-tense
phrases for a progress display. The table never changes at runtime.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from tripsession.session.blocks import (
    FunctionCallBlock,
    FunctionResponseBlock,
    TextBlock,
    ThoughtBlock,
    Turn,
)

FALLBACK_LABEL = "Magic!"

LABEL_SEPARATOR = ","

# Function name -> status label
STATUS_LABELS: Mapping[str, str] = MappingProxyType({
    "flights_between": "Searching flights",
    "flight_booking_link": "Getting flight booking link",
    "flight_booking_details": "Reading flight details",
    "trains_between": "Searching trains",
    "train_seats_available": "Checking seats available",
    "get_about_place": "Finding best scenery",
    "get_hotel_by_coordinates": "Searching hotels",
    "get_hotel_details": "Getting hotel booking link",
    "get_room_availability": "Checking available rooms",
    "get_hotel_description": "Reading about a hotel",
})


def label_for(function_name: str) -> str:
    """Status label for one function name; unknown names get FALLBACK_LABEL."""
    return STATUS_LABELS.get(function_name, FALLBACK_LABEL)


def pending_labels(turn: Turn) -> list[str]:
    """Labels for every function call in ``turn``, deduplicated and sorted.

    Independent of call order and repeat count, so the display stays stable
    while the model streams calls in.
    """
    labels: set[str] = set()
    for block in turn.blocks:
        if isinstance(block, FunctionCallBlock):
            labels.add(label_for(block.name))
        elif isinstance(block, (TextBlock, ThoughtBlock, FunctionResponseBlock)):
            continue
        else:
            raise TypeError(f"Unsupported block: {type(block).__name__}")
    return sorted(labels)


def pending_labels_text(turn: Turn, separator: str = LABEL_SEPARATOR) -> str:
    """pending_labels() joined into one string."""
    return separator.join(pending_labels(turn))
