"""Exceptions raised by values_tools."""


class ValuesToolsError(Exception):
    """Base class for all values_tools errors."""
    pass


class GenerationError(ValuesToolsError):
    """Raised when a structured-object or text generation call fails.

    Covers provider/network errors, timeouts, invalid JSON and responses
    that fail schema validation.
    """
    pass


class EmbeddingError(ValuesToolsError):
    """Raised when an embedding call fails or returns the wrong number of vectors."""
    pass


class TargetMismatchError(ValuesToolsError):
    """Raised when a generated upgrade does not point at the requested target value."""
    pass
