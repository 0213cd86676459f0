"""Exceptions for source enumeration and reading."""


class IndexingError(Exception):
    """Base exception for all source indexing operations."""


class SourceUnreadableError(IndexingError):
    """Raised when a baseline archive or working tree cannot be enumerated."""


class EntryReadError(IndexingError):
    """Raised when a single entry of a source cannot be read."""
