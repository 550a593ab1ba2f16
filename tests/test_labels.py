"""Tests for tool-call status labels."""

import pytest

from tripsession.session import (
    FALLBACK_LABEL,
    STATUS_LABELS,
    Turn,
    label_for,
    parse_blocks,
    pending_labels,
    pending_labels_text,
)


def _model_turn(*names: str, extra: list | None = None) -> Turn:
    parts = [{"functionCall": {"name": n, "args": {}}} for n in names]
    return Turn(role="model", blocks=parse_blocks(parts + (extra or [])))


class TestLabelFor:
    def test_known_names(self):
        assert label_for("flights_between") == "Searching flights"
        assert label_for("get_hotel_description") == "Reading about a hotel"

    def test_unknown_name(self):
        assert label_for("book_cab") == FALLBACK_LABEL == "Magic!"

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            STATUS_LABELS["book_cab"] = "Booking cab"

    def test_table_covers_planner_tools(self):
        assert len(STATUS_LABELS) == 10


class TestPendingLabels:
    def test_dedup_and_sort(self):
        # A, B, A, C
        turn = _model_turn("trains_between", "flights_between", "trains_between", "get_hotel_details")
        assert pending_labels(turn) == [
            "Getting hotel booking link",
            "Searching flights",
            "Searching trains",
        ]

    def test_order_independent(self):
        a = _model_turn("get_about_place", "flights_between", "get_room_availability")
        b = _model_turn("get_room_availability", "get_about_place", "flights_between", "flights_between")
        assert pending_labels(a) == pending_labels(b)

    def test_unknown_name_appears_once(self):
        turn = _model_turn("book_cab", "flights_between", "rent_bike", "book_cab")
        assert pending_labels(turn) == ["Magic!", "Searching flights"]

    def test_ignores_other_blocks(self):
        turn = _model_turn(
            "get_hotel_details",
            extra=[
                {"text": "Looking", "thought": True},
                {"text": "One moment"},
                {"functionResponse": {"name": "flights_between", "response": {}}},
            ],
        )
        assert pending_labels(turn) == ["Getting hotel booking link"]

    def test_no_calls(self):
        assert pending_labels(Turn.from_text("model", "Done")) == []


class TestPendingLabelsText:
    def test_joined_with_comma(self):
        turn = _model_turn("train_seats_available", "trains_between", "train_seats_available")
        assert pending_labels_text(turn) == "Checking seats available,Searching trains"

    def test_same_rule_as_sequence_form(self):
        turn = _model_turn("book_cab", "get_hotel_by_coordinates", "flight_booking_link", "book_cab")
        assert pending_labels_text(turn).split(",") == pending_labels(turn)

    def test_custom_separator(self):
        turn = _model_turn("flights_between", "trains_between")
        assert pending_labels_text(turn, " / ") == "Searching flights / Searching trains"

    def test_empty(self):
        assert pending_labels_text(Turn.from_text("user", "hi")) == ""
