"""Error taxonomy for codexchat.

Provider failures are recoverable: the chat session converts them into a
fallback reply. Everything else is a contract violation and propagates.
"""


class ChatError(Exception):
    """Base class for codexchat errors."""


class ProviderError(ChatError):
    """The completion provider failed or returned a malformed payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RequestTimedOut(ProviderError):
    """The completion request did not finish within the configured timeout."""

    def __init__(self, timeout: float | None):
        if timeout is None:
            message = "Completion request timed out"
        else:
            message = f"Completion request timed out after {timeout:g}s"
        super().__init__(message)
        self.timeout = timeout


class AlreadyRevealingError(ChatError):
    """A reveal is already running for this message."""

    def __init__(self, message_id: str):
        super().__init__(f"Reveal already running for message {message_id}")
        self.message_id = message_id


class InvalidStateError(ChatError):
    """Operation not allowed in the message's current state."""


class UnknownMessageError(ChatError, KeyError):
    """No message with this id exists in the conversation."""

    def __init__(self, message_id: str):
        super().__init__(message_id)
        self.message_id = message_id

    def __str__(self) -> str:
        return f"Unknown message: {self.message_id}"


class SessionBusyError(ChatError):
    """A response is still loading or being revealed."""

    def __init__(self):
        super().__init__("A response is still in progress; stop it or wait for it to finish")
