"""Exceptions raised by the extractly core."""


class ExtractlyError(Exception):
    """Base class for all extractly errors."""


class ValidationError(ExtractlyError):
    """Input data does not match the expected contract.

    Search terms are never invalid; this is raised only when loading
    extraction results or history pages from malformed data.
    """


class NotFoundError(ExtractlyError):
    """An operation referenced a row id that is not in the collection."""


class PersistenceError(ExtractlyError):
    """An external save or delete hook reported a failure."""

    def __init__(self, message: str, row_id: int | None = None):
        super().__init__(message)
        self.row_id = row_id
