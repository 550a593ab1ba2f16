"""Session store: bounded turn history for a tool-calling chat model.

Public API: Session + block/turn types, error types and the read helpers.
"""

from tripsession.session.blocks import (
    ContentBlock,
    FunctionCall,
    FunctionCallBlock,
    FunctionResponse,
    FunctionResponseBlock,
    Role,
    TextBlock,
    ThoughtBlock,
    Turn,
    parse_blocks,
    parse_turn,
)
from tripsession.session.errors import (
    EmptySession,
    ParseError,
    ProtocolViolation,
    SessionError,
)
from tripsession.session.labels import (
    FALLBACK_LABEL,
    STATUS_LABELS,
    label_for,
    pending_labels,
    pending_labels_text,
)
from tripsession.session.store import (
    INVALID_FORMAT_PREFIX,
    INVALID_HISTORY_PREFIX,
    INVALID_USER_PARTS_PREFIX,
    Session,
    SessionSnapshot,
)
from tripsession.session.text import display_text

__all__ = [
    "Session",
    "SessionSnapshot",
    # Blocks
    "ContentBlock",
    "FunctionCall",
    "FunctionCallBlock",
    "FunctionResponse",
    "FunctionResponseBlock",
    "Role",
    "TextBlock",
    "ThoughtBlock",
    "Turn",
    "parse_blocks",
    "parse_turn",
    # Errors
    "EmptySession",
    "ParseError",
    "ProtocolViolation",
    "SessionError",
    # Diagnostics
    "INVALID_FORMAT_PREFIX",
    "INVALID_HISTORY_PREFIX",
    "INVALID_USER_PARTS_PREFIX",
    # Read helpers
    "FALLBACK_LABEL",
    "STATUS_LABELS",
    "display_text",
    "label_for",
    "pending_labels",
    "pending_labels_text",
]
