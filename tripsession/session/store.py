"""Bounded conversational session store.

A Session keeps the most recent ``window`` turns of one conversation. Every
mutating call appends exactly one turn and then evicts the oldest turns
(FIFO) until the window holds again. The just-appended turn is never
evicted because the window is at least 1.

Malformed input is handled per ingestion path:
  ask_structured  -> in-band user turn "INVALID_RESPONSE:\\n<error>" so the
                     model can correct itself on its next turn
  reply_structured -> ParseError raised to the caller, nothing appended
  append_turn     -> in-band model turn "ERROR: INVALID RESPONSE FORMAT" or
                     "ERROR: INVALID SESSION HISTORY" so replay can go on

Not thread-safe: one logical caller drives a Session at a time.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from tripsession.session.blocks import Turn, parse_blocks, parse_turn
from tripsession.session.errors import (
    EmptySession,
    ParseError,
    ProtocolViolation,
    describe_validation_error,
)
from tripsession.session.history import check_turn
from tripsession.session.labels import LABEL_SEPARATOR, pending_labels, pending_labels_text
from tripsession.session.text import DEFAULT_SEPARATOR, display_text

logger = logging.getLogger(__name__)

INVALID_USER_PARTS_PREFIX = "INVALID_RESPONSE:"
INVALID_FORMAT_PREFIX = "ERROR: INVALID RESPONSE FORMAT"
INVALID_HISTORY_PREFIX = "ERROR: INVALID SESSION HISTORY"


class SessionSnapshot(BaseModel):
    """Canonical serialized form: window capacity plus retained turns."""

    model_config = ConfigDict(frozen=True)

    window: int = Field(ge=1, strict=True)
    contents: tuple[Turn, ...] = ()

    @model_validator(mode="after")
    def _fits_window(self) -> SessionSnapshot:
        if len(self.contents) > self.window:
            raise ValueError(
                f"{len(self.contents)} turns exceed the window of {self.window}"
            )
        return self


class Session:
    """Ordered, size-bounded history of turns."""

    def __init__(self, window: int) -> None:
        if isinstance(window, bool) or not isinstance(window, int) or window < 1:
            raise ValueError(f"window must be a positive integer, got {window!r}")
        self._window = window
        self._turns: list[Turn] = []

    @property
    def window(self) -> int:
        return self._window

    @property
    def turns(self) -> tuple[Turn, ...]:
        """Retained turns, oldest first."""
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Session):
            return NotImplemented
        return self._window == other._window and self._turns == other._turns

    def __repr__(self) -> str:
        return f"Session(window={self._window}, turns={len(self._turns)})"

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ask(self, text: str) -> Turn:
        """Append a user turn holding ``text``."""
        return self._append(Turn.from_text("user", text))

    def ask_structured(self, payload: Any) -> Turn:
        """Append a user turn built from a JSON array of parts.

        Never raises for malformed payloads: the parse error is recorded as
        the user turn's text instead.
        """
        try:
            blocks = parse_blocks(payload)
        except ParseError as e:
            logger.warning("Malformed user parts recorded in-band: %s", e)
            return self._append(
                Turn.from_text("user", f"{INVALID_USER_PARTS_PREFIX}\n{e}")
            )
        return self._append(Turn(role="user", blocks=blocks))

    def reply(self, text: str) -> Turn:
        """Append a model turn holding ``text``."""
        return self._append(Turn.from_text("model", text))

    def reply_structured(self, payload: Any) -> Turn:
        """Append a model turn built from a JSON array of parts.

        Raises:
            ParseError: payload is malformed; the session is left unchanged.
        """
        try:
            blocks = parse_blocks(payload)
        except ParseError as e:
            logger.warning("Rejected malformed model parts: %s", e)
            raise
        return self._append(Turn(role="model", blocks=blocks))

    def append_turn(self, payload: Any) -> Turn:
        """Replay one persisted turn (role + parts) verbatim.

        A payload that does not parse, or parses but breaks the history
        rules, is replaced by a diagnostic model turn. Either way exactly
        one turn is appended.
        """
        try:
            turn = parse_turn(payload)
        except ParseError as e:
            logger.warning("Replayed turn is malformed: %s", e)
            return self._append(Turn.from_text("model", f"{INVALID_FORMAT_PREFIX}\n{e}"))

        try:
            check_turn(turn, self._turns[-1] if self._turns else None)
        except ProtocolViolation as e:
            logger.warning("Replayed turn breaks session history: %s", e)
            return self._append(Turn.from_text("model", f"{INVALID_HISTORY_PREFIX}\n{e}"))

        return self._append(turn)

    def _append(self, turn: Turn) -> Turn:
        self._turns.append(turn)
        overflow = len(self._turns) - self._window
        if overflow > 0:
            del self._turns[:overflow]
            logger.debug("Evicted %d oldest turn(s), window=%d", overflow, self._window)
        logger.debug(
            "Appended %s turn (%d block(s)), %d/%d retained",
            turn.role, len(turn.blocks), len(self._turns), self._window,
        )
        return turn

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def last_turn(self) -> Turn:
        """Most recent turn.

        Raises:
            EmptySession: no turn has been appended yet.
        """
        if not self._turns:
            raise EmptySession("Session has no turns yet")
        return self._turns[-1]

    def display_text(self, separator: str = DEFAULT_SEPARATOR) -> str:
        return display_text(self.last_turn(), separator)

    def pending_labels(self) -> list[str]:
        return pending_labels(self.last_turn())

    def pending_labels_text(self, separator: str = LABEL_SEPARATOR) -> str:
        return pending_labels_text(self.last_turn(), separator)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(window=self._window, contents=tuple(self._turns))

    def serialize(self) -> str:
        """Canonical JSON text of the whole session."""
        return self.snapshot().model_dump_json(by_alias=True)

    @classmethod
    def deserialize(cls, payload: Any) -> Session:
        """Rebuild a session from serialize() output (text or decoded JSON).

        Raises:
            ParseError: payload is not a valid session snapshot.
        """
        try:
            if isinstance(payload, (str, bytes, bytearray)):
                snapshot = SessionSnapshot.model_validate_json(payload)
            else:
                snapshot = SessionSnapshot.model_validate(payload)
        except ValidationError as e:
            raise ParseError(describe_validation_error(e)) from e
        return cls.from_snapshot(snapshot)

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> Session:
        session = cls(snapshot.window)
        session._turns = list(snapshot.contents)
        return session
