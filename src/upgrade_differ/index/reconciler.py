"""Build source-key indexes and pair working files with their baselines.

Both indexes use the same root table. A location belongs to a root when the
root's prefix for that side occurs in it; the source key is whatever follows
the first occurrence. So "portal-impl/src/com/Foo.java" in the baseline and
".../ext/foo-ext/docroot/WEB-INF/ext-impl/src/com/Foo.java" in the working
tree share the key ("portal-impl", "com/Foo.java").
"""

import logging
import re
from pathlib import PurePosixPath
from typing import Iterable, Sequence

from upgrade_differ.models.index_models import (
    IndexSide,
    ModificationEntry,
    ModifiedFile,
    NewFile,
    ReconciliationIndex,
    SourceKey,
    SourceRoot,
)

logger = logging.getLogger(__name__)


def key_after_prefix(location: str, prefix: str) -> str | None:
    """Return the part of location after the first occurrence of prefix.

    Returns None when the prefix is empty, absent, or nothing follows it.
    """
    if not prefix:
        return None
    index = location.find(prefix)
    if index == -1:
        return None
    key = location[index + len(prefix):]
    return key or None


def match_root(
    location: str,
    roots: Sequence[SourceRoot],
    side: IndexSide,
) -> SourceKey | None:
    """Source key for the first root in table order that matches location."""
    for root in roots:
        key = key_after_prefix(location, root.prefix_for(side))
        if key is not None:
            return SourceKey(root=root.name, key=key)
    return None


def build_index(
    locations: Iterable[str],
    roots: Sequence[SourceRoot],
    side: IndexSide,
) -> ReconciliationIndex:
    """Map (root, key) to location for every location under a configured root.

    A location matching several roots is recorded under each. Locations
    matching no root are ignored. Later duplicates of a key replace earlier
    ones.
    """
    entries: dict[SourceKey, str] = {}
    for location in locations:
        for root in roots:
            key = key_after_prefix(location, root.prefix_for(side))
            if key is not None:
                entries[SourceKey(root=root.name, key=key)] = location

    logger.debug("Built %s index with %d entries", side.value, len(entries))
    return ReconciliationIndex(side=side, entries=entries)


def is_in_output_tree(location: str, working_root: str, output_dir: str) -> bool:
    path = PurePosixPath(location)
    root = PurePosixPath(working_root)
    parts = path.relative_to(root).parts if path.is_relative_to(root) else path.parts
    return output_dir in parts


def select_candidates(
    locations: Iterable[str],
    working_root: str,
    scope_pattern: str,
    output_dir: str,
) -> list[str]:
    """Working locations inside an extension module and outside the output tree.

    Args:
        locations: Working-tree locations in discovery order.
        working_root: Absolute POSIX path of the working tree.
        scope_pattern: Regex a location must match in full to be in scope.
        output_dir: Name of the patch output directory to exclude.

    Returns:
        Candidate locations, discovery order preserved.
    """
    pattern = re.compile(scope_pattern)
    return [
        location
        for location in locations
        if pattern.fullmatch(location) and not is_in_output_tree(location, working_root, output_dir)
    ]


def reconcile(
    baseline_index: ReconciliationIndex,
    working_index: ReconciliationIndex,
    candidates: Sequence[str],
    roots: Sequence[SourceRoot],
) -> list[ModificationEntry]:
    """Classify each candidate as a new or a modified file.

    Every candidate under a configured root yields exactly one entry, in
    candidate order. Candidates under no root are logged and dropped.
    """
    entries: list[ModificationEntry] = []
    for location in candidates:
        source_key = match_root(location, roots, IndexSide.WORKING)
        if source_key is None:
            logger.debug("No source root matches %s, ignoring", location)
            continue

        indexed = working_index.lookup(source_key)
        if indexed is not None and indexed != location:
            logger.warning(
                "Source key %s is provided by both %s and %s", source_key, location, indexed
            )

        baseline_location = baseline_index.lookup(source_key)
        if baseline_location is None:
            entries.append(NewFile(source_key=source_key, working_location=location))
        else:
            entries.append(ModifiedFile(
                source_key=source_key,
                baseline_location=baseline_location,
                working_location=location,
            ))

    return entries
