"""Source enumeration and reconciliation of working files against a baseline."""

from upgrade_differ.index.exceptions import (
    EntryReadError,
    IndexingError,
    SourceUnreadableError,
)
from upgrade_differ.index.reconciler import (
    build_index,
    key_after_prefix,
    match_root,
    reconcile,
    select_candidates,
)
from upgrade_differ.index.sources import (
    BaselineSource,
    DirectoryBaselineSource,
    WorkingTree,
    ZipBaselineSource,
    open_baseline_source,
)

__all__ = [
    "BaselineSource",
    "DirectoryBaselineSource",
    "EntryReadError",
    "IndexingError",
    "SourceUnreadableError",
    "WorkingTree",
    "ZipBaselineSource",
    "build_index",
    "key_after_prefix",
    "match_root",
    "open_baseline_source",
    "reconcile",
    "select_candidates",
]
