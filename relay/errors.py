"""Error taxonomy for message mutations."""


class RelayError(Exception):
    """Base class for errors reported back to the requesting client."""

    public_message = "server error"


class InvalidPayload(RelayError):
    """A required field is missing or malformed."""

    public_message = "Invalid message payload"


class NotFoundOrForbidden(RelayError):
    """No editable message matched both the id and the author."""

    public_message = "Message not found or not allowed"

    def __init__(self, message_id: str, detail: str | None = None):
        self.message_id = message_id
        super().__init__(detail or f"message {message_id!r} not found or not owned by caller")


class NotFound(NotFoundOrForbidden):
    """No message with this id exists (or it is already deleted)."""


class Forbidden(NotFoundOrForbidden):
    """The caller is not the author of the message."""


class DuplicateId(RelayError):
    """A message with this id is already stored."""

    public_message = "Duplicate message id"

    def __init__(self, message_id: str):
        self.message_id = message_id
        super().__init__(f"message {message_id!r} already exists")


class StorageError(RelayError):
    """The underlying database failed."""

    public_message = "server error"
