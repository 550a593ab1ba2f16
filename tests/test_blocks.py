"""Tests for content block and turn parsing."""

import json

import pytest
from pydantic import ValidationError

from tripsession.session import (
    FunctionCallBlock,
    FunctionResponseBlock,
    ParseError,
    TextBlock,
    ThoughtBlock,
    Turn,
    parse_blocks,
    parse_turn,
)


# ------------------------------------------------------------------
# parse_blocks
# ------------------------------------------------------------------


class TestParseBlocks:
    def test_each_variant(self):
        payload = json.dumps([
            {"text": "hello"},
            {"text": "planning the route", "thought": True},
            {"functionCall": {"name": "flights_between", "args": {"from": "DEL", "to": "BOM"}}},
            {"functionResponse": {"name": "flights_between", "response": {"flights": []}}},
        ])
        blocks = parse_blocks(payload)
        assert [type(b) for b in blocks] == [
            TextBlock, ThoughtBlock, FunctionCallBlock, FunctionResponseBlock,
        ]
        assert blocks[0].text == "hello"
        assert blocks[1].text == "planning the route"
        assert blocks[2].name == "flights_between"
        assert blocks[2].arguments == {"from": "DEL", "to": "BOM"}
        assert blocks[3].name == "flights_between"
        assert blocks[3].result == {"flights": []}

    def test_accepts_decoded_data(self):
        blocks = parse_blocks([{"text": "hi"}])
        assert blocks == (TextBlock(text="hi"),)

    def test_accepts_snake_case_keys(self):
        blocks = parse_blocks([
            {"function_call": {"name": "trains_between"}},
            {"function_response": {"name": "trains_between", "response": {"ok": True}}},
        ])
        assert isinstance(blocks[0], FunctionCallBlock)
        assert blocks[0].arguments == {}
        assert isinstance(blocks[1], FunctionResponseBlock)

    def test_thought_false_is_plain_text(self):
        blocks = parse_blocks([{"text": "visible", "thought": False}])
        assert blocks == (TextBlock(text="visible"),)

    def test_ignores_unknown_part_keys(self):
        blocks = parse_blocks([{"text": "hi", "thoughtSignature": "abc"}])
        assert blocks == (TextBlock(text="hi"),)

    def test_invalid_json(self):
        with pytest.raises(ParseError, match="Invalid JSON"):
            parse_blocks("not json")

    def test_not_a_list(self):
        with pytest.raises(ParseError):
            parse_blocks('{"text": "hi"}')

    def test_empty_list(self):
        with pytest.raises(ParseError, match="at least 1"):
            parse_blocks("[]")

    def test_unrecognised_part(self):
        with pytest.raises(ParseError):
            parse_blocks('[{"inlineData": {"mimeType": "image/png"}}]')

    def test_error_names_location(self):
        with pytest.raises(ParseError) as exc_info:
            parse_blocks('[{"text": "ok"}, {"text": 5}]')
        assert "1" in str(exc_info.value)

    @pytest.mark.parametrize("name", ["", "1flights", "flights between", "flights;drop"])
    def test_rejects_bad_function_names(self, name):
        with pytest.raises(ParseError):
            parse_blocks([{"functionCall": {"name": name, "args": {}}}])

    def test_function_response_requires_response(self):
        with pytest.raises(ParseError):
            parse_blocks([{"functionResponse": {"name": "get_hotel_details"}}])

    def test_function_response_accepts_any_json_value(self):
        (block,) = parse_blocks('[{"functionResponse": {"name": "list_hotels", "response": [1, 2]}}]')
        assert isinstance(block, FunctionResponseBlock)
        assert block.result == [1, 2]

    @pytest.mark.parametrize("number", ["Infinity", "-Infinity", "NaN"])
    def test_rejects_non_finite_numbers(self, number):
        with pytest.raises(ParseError, match="non-finite"):
            parse_blocks(f'[{{"functionCall": {{"name": "book_cab", "args": {{"fare": {number}}}}}}}]')
        with pytest.raises(ParseError, match="non-finite"):
            parse_blocks(f'[{{"functionResponse": {{"name": "book_cab", "response": {{"quotes": [1, {number}]}}}}}}]')

    def test_rejects_non_finite_decoded_floats(self):
        with pytest.raises(ParseError):
            parse_blocks([{"functionResponse": {"name": "book_cab", "response": float("inf")}}])


# ------------------------------------------------------------------
# parse_turn / Turn
# ------------------------------------------------------------------


class TestTurn:
    def test_parse_turn(self):
        turn = parse_turn('{"role": "model", "parts": [{"text": "Here you go"}]}')
        assert turn.role == "model"
        assert turn.blocks == (TextBlock(text="Here you go"),)

    def test_parse_turn_rejects_unknown_role(self):
        with pytest.raises(ParseError, match="role"):
            parse_turn({"role": "system", "parts": [{"text": "x"}]})

    def test_parse_turn_requires_parts(self):
        with pytest.raises(ParseError):
            parse_turn({"role": "user", "parts": []})
        with pytest.raises(ParseError):
            parse_turn({"role": "user"})

    def test_from_text(self):
        turn = Turn.from_text("user", "Plan a trip to Goa")
        assert turn == Turn(role="user", blocks=(TextBlock(text="Plan a trip to Goa"),))

    def test_to_wire_uses_api_shape(self):
        turn = Turn(
            role="model",
            blocks=parse_blocks([
                {"text": "why", "thought": True},
                {"functionCall": {"name": "get_about_place", "args": {"place": "Goa"}}},
            ]),
        )
        assert turn.to_wire() == {
            "role": "model",
            "parts": [
                {"text": "why", "thought": True},
                {"functionCall": {"name": "get_about_place", "args": {"place": "Goa"}}},
            ],
        }

    def test_turns_are_immutable(self):
        turn = Turn.from_text("user", "hi")
        with pytest.raises(ValidationError):
            turn.role = "model"
        with pytest.raises(ValidationError):
            turn.blocks[0].text = "changed"
