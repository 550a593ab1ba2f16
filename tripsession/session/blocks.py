"""Content blocks and turns.

Parts use the Gemini ``Content``/``Part`` JSON shape so the serialized
history can be forwarded to the model API unchanged:

  {"text": "..."}                                        -> TextBlock
  {"text": "...", "thought": true}                       -> ThoughtBlock
  {"functionCall": {"name": "...", "args": {...}}}       -> FunctionCallBlock
  {"functionResponse": {"name": "...", "response": ...}} -> FunctionResponseBlock

ContentBlock is a closed union. Consumers dispatch with isinstance over the
four block classes; a new kind means a new class here plus a branch at every
consumer.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    JsonValue,
    Tag,
    TypeAdapter,
    ValidationError,
)

from tripsession.session.errors import ParseError, describe_validation_error

Role = Literal["user", "model"]

FUNCTION_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_.\-]*$"


class _Value(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


def _finite(value: JsonValue) -> JsonValue:
    """Reject NaN and Infinity anywhere inside a JSON value.

    They parse but cannot be written back as JSON.
    """
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"non-finite number {value!r} is not valid JSON")
    if isinstance(value, dict):
        for item in value.values():
            _finite(item)
    elif isinstance(value, list):
        for item in value:
            _finite(item)
    return value


FiniteJson = Annotated[JsonValue, AfterValidator(_finite)]


# --- Function payloads ---


class FunctionCall(_Value):
    """A tool invocation requested by the model. Arguments are named."""

    name: str = Field(pattern=FUNCTION_NAME_PATTERN)
    args: dict[str, FiniteJson] = Field(default_factory=dict)


class FunctionResponse(_Value):
    """The result of a tool invocation, fed back to the model. Any JSON value."""

    name: str = Field(pattern=FUNCTION_NAME_PATTERN)
    response: FiniteJson


# --- Blocks ---


class TextBlock(_Value):
    kind: ClassVar[str] = "text"

    text: str


class ThoughtBlock(_Value):
    """Model-internal reasoning. Never part of user-visible text."""

    kind: ClassVar[str] = "thought"

    text: str
    thought: Literal[True] = True


class FunctionCallBlock(_Value):
    kind: ClassVar[str] = "function_call"

    function_call: FunctionCall = Field(alias="functionCall")

    @property
    def name(self) -> str:
        return self.function_call.name

    @property
    def arguments(self) -> dict[str, Any]:
        return self.function_call.args


class FunctionResponseBlock(_Value):
    kind: ClassVar[str] = "function_response"

    function_response: FunctionResponse = Field(alias="functionResponse")

    @property
    def name(self) -> str:
        return self.function_response.name

    @property
    def result(self) -> Any:
        return self.function_response.response


def _block_kind(value: Any) -> str | None:
    """Pick the union member for a raw part dict or a block instance."""
    if isinstance(value, dict):
        if "functionCall" in value or "function_call" in value:
            return "function_call"
        if "functionResponse" in value or "function_response" in value:
            return "function_response"
        if "text" in value:
            return "thought" if value.get("thought") is True else "text"
        return None
    return getattr(value, "kind", None)


ContentBlock = Annotated[
    Union[
        Annotated[TextBlock, Tag("text")],
        Annotated[ThoughtBlock, Tag("thought")],
        Annotated[FunctionCallBlock, Tag("function_call")],
        Annotated[FunctionResponseBlock, Tag("function_response")],
    ],
    Discriminator(_block_kind),
]


class Turn(_Value):
    """One message in the conversation: a role and its ordered blocks."""

    role: Role
    blocks: tuple[ContentBlock, ...] = Field(alias="parts", min_length=1)

    @classmethod
    def from_text(cls, role: Role, text: str) -> Turn:
        """Single Text block turn."""
        return cls(role=role, blocks=(TextBlock(text=text),))

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict in the wire shape."""
        return self.model_dump(mode="json", by_alias=True)


# ------------------------------------------------------------------
# Payload parsing
# ------------------------------------------------------------------

_BLOCKS: TypeAdapter[list[Any]] = TypeAdapter(
    Annotated[list[ContentBlock], Field(min_length=1)]
)


def _is_raw_text(payload: Any) -> bool:
    return isinstance(payload, (str, bytes, bytearray))


def parse_blocks(payload: Any) -> tuple[ContentBlock, ...]:
    """Parse a JSON array of parts (text, or already-decoded data).

    Raises:
        ParseError: payload is not a non-empty sequence of valid parts.
    """
    try:
        if _is_raw_text(payload):
            blocks = _BLOCKS.validate_json(payload)
        else:
            blocks = _BLOCKS.validate_python(payload)
    except ValidationError as e:
        raise ParseError(describe_validation_error(e)) from e
    return tuple(blocks)


def parse_turn(payload: Any) -> Turn:
    """Parse a full turn object (role + parts).

    Raises:
        ParseError: payload is not a valid turn.
    """
    try:
        if _is_raw_text(payload):
            return Turn.model_validate_json(payload)
        return Turn.model_validate(payload)
    except ValidationError as e:
        raise ParseError(describe_validation_error(e)) from e
