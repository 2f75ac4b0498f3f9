"""Context pruner exception hierarchy.

All context-pruner exceptions inherit from PrunerError. The scorer and the
pruning engine never raise them; they come from the collaborators
(record parsing, record stores, the service facade).
"""


class PrunerError(Exception):
    """Base exception for all context-pruner errors."""


class RecordValidationError(PrunerError):
    """Raised when a dict cannot be turned into a Record.

    Named RecordValidationError (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """


class RecordIndexError(PrunerError, IndexError):
    """Raised when a record position is outside the current sequence."""

    def __init__(self, index: int, count: int) -> None:
        self.index = index
        self.count = count
        if count == 0:
            msg = f"Invalid index {index}: no records"
        else:
            msg = f"Invalid index {index}. Records: 0-{count - 1}"
        super().__init__(msg)


class StoreError(PrunerError):
    """Raised when a record store operation fails."""


class ConversationNotFoundError(StoreError):
    """Raised when a conversation lookup fails."""

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__(f"Conversation not found: {conversation_id}")
