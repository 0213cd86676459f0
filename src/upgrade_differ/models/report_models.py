"""Report models for per-entry outcomes and whole runs."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from upgrade_differ.models.index_models import SourceKey


class EntryStatus(str, Enum):
    NEW_FILE = "new_file"
    NO_DIFFERENCES = "no_differences"
    PATCH_WRITTEN = "patch_written"
    SKIPPED = "skipped"


class EntryOutcome(BaseModel):
    model_config = ConfigDict(frozen=False)

    source_key: SourceKey
    status: EntryStatus
    working_location: str
    destination: str | None = None    # Set when a patch was written
    error_kind: str | None = None     # "entry_unreadable" | "destination_unwritable"
    message: str | None = None

    def status_line(self) -> str:
        """Render the one-line human-readable status for this entry."""
        if self.status == EntryStatus.NEW_FILE:
            return f"new file: {self.source_key.key}"
        if self.status == EntryStatus.NO_DIFFERENCES:
            return f"no differences: {self.source_key.key}"
        if self.status == EntryStatus.PATCH_WRITTEN:
            return f"patch written: {self.destination}"
        return f"skipped: {self.source_key.key} ({self.message})"


class RunReport(BaseModel):
    model_config = ConfigDict(frozen=False)

    baseline_label: str
    working_root: str
    outcomes: list[EntryOutcome] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    finished_at: datetime = Field(default_factory=datetime.now)

    def count(self, status: EntryStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def succeeded(self) -> bool:
        """True if nothing was skipped and no run-level error occurred."""
        return not self.errors and self.count(EntryStatus.SKIPPED) == 0
