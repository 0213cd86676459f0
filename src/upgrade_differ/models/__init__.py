"""Data models for the upgrade differ."""

from upgrade_differ.models.diff_models import (
    EditOperation,
    EditScript,
    Hunk,
    OpType,
    PatchDocument,
)
from upgrade_differ.models.index_models import (
    DEFAULT_SOURCE_ROOTS,
    IndexSide,
    ModificationEntry,
    ModifiedFile,
    NewFile,
    ReconciliationIndex,
    SourceKey,
    SourceRoot,
)
from upgrade_differ.models.report_models import EntryOutcome, EntryStatus, RunReport

__all__ = [
    "DEFAULT_SOURCE_ROOTS",
    "EditOperation",
    "EditScript",
    "EntryOutcome",
    "EntryStatus",
    "Hunk",
    "IndexSide",
    "ModificationEntry",
    "ModifiedFile",
    "NewFile",
    "OpType",
    "PatchDocument",
    "ReconciliationIndex",
    "RunReport",
    "SourceKey",
    "SourceRoot",
]
