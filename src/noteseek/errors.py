"""Exception hierarchy shared by the indexing and search layers."""


class NoteseekError(Exception):
    """Base exception for all noteseek errors."""


class ValidationError(NoteseekError):
    """Invalid input, rejected before any store mutation."""


class EmbeddingError(NoteseekError):
    """The embedding provider failed or returned an unusable vector.

    Attributes:
        cause: The original exception raised by the provider, if any
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class StoreError(NoteseekError):
    """A transaction or schema failure in the document store."""


class DimensionMismatchError(StoreError):
    """A vector's length disagrees with the store's configured dimension."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Vector has {actual} dimensions, store is configured for {expected}"
        )
        self.expected = expected
        self.actual = actual
