"""Exceptions for orchestrator operations."""

from upgrade_differ.models.index_models import SourceKey


class OrchestratorError(Exception):
    """Base exception for all orchestrator operations."""


class GraphBuildError(OrchestratorError):
    """Raised when graph construction fails."""


class EmissionError(OrchestratorError):
    """Base exception for failures that skip a single entry."""

    kind = "emission_error"

    def __init__(self, source_key: SourceKey, message: str):
        super().__init__(message)
        self.source_key = source_key


class EntryUnreadableError(EmissionError):
    """Raised when a baseline or working file cannot be read or decoded."""

    kind = "entry_unreadable"


class DestinationUnwritableError(EmissionError):
    """Raised when a patch file cannot be written."""

    kind = "destination_unwritable"
