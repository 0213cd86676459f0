"""Per-entry patch emission.

Each entry reads two texts and writes at most one file, so entries are
independent and may run on a thread pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Sequence

from upgrade_differ.config import DifferConfig
from upgrade_differ.diff import build_patch_document, decode_lines, is_identical, render_patch
from upgrade_differ.index.exceptions import EntryReadError
from upgrade_differ.index.sources import BaselineSource, WorkingTree
from upgrade_differ.models import (
    EntryOutcome,
    EntryStatus,
    ModificationEntry,
    NewFile,
    SourceKey,
)
from upgrade_differ.orchestrator.exceptions import (
    DestinationUnwritableError,
    EmissionError,
    EntryUnreadableError,
)

logger = logging.getLogger(__name__)

ABORT_PREFIX = "ABORT:"


def write_patch(destination: Path, text: str, encoding: str, source_key: SourceKey) -> None:
    """Write patch text as encoded bytes, creating parent directories.

    Raises:
        DestinationUnwritableError: If the directory or file cannot be written.
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(text.encode(encoding))
    except (OSError, UnicodeEncodeError) as exc:
        raise DestinationUnwritableError(
            source_key, f"cannot write {destination}: {exc}"
        ) from exc


class PatchEmitter:
    """Turns modification entries into patch files and status outcomes."""

    def __init__(self, baseline: BaselineSource, working_tree: WorkingTree, config: DifferConfig):
        self.baseline = baseline
        self.working_tree = working_tree
        self.config = config

    def _load_lines(
        self,
        reader: Callable[[str], bytes],
        location: str,
        source_key: SourceKey,
    ) -> list[str]:
        try:
            data = reader(location)
            return decode_lines(data, self.config.encoding, self.config.line_terminator)
        except EntryReadError as exc:
            raise EntryUnreadableError(source_key, str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise EntryUnreadableError(
                source_key, f"cannot decode {location} as {self.config.encoding}: {exc}"
            ) from exc

    def emit(self, entry: ModificationEntry) -> EntryOutcome:
        """Process one entry.

        Raises:
            EntryUnreadableError: If either text cannot be read.
            DestinationUnwritableError: If the patch cannot be written.
        """
        if isinstance(entry, NewFile):
            logger.info("New file %s", entry.source_key)
            return EntryOutcome(
                source_key=entry.source_key,
                status=EntryStatus.NEW_FILE,
                working_location=entry.working_location,
            )

        source_lines = self._load_lines(self.baseline.read, entry.baseline_location, entry.source_key)
        target_lines = self._load_lines(self.working_tree.read, entry.working_location, entry.source_key)

        document = None
        if not is_identical(source_lines, target_lines):
            document = build_patch_document(
                entry.baseline_location,
                entry.working_location,
                source_lines,
                target_lines,
                context_lines=self.config.context_lines,
                line_terminator=self.config.line_terminator,
            )
        if document is None:
            logger.info("No differences for %s", entry.source_key)
            return EntryOutcome(
                source_key=entry.source_key,
                status=EntryStatus.NO_DIFFERENCES,
                working_location=entry.working_location,
            )

        destination = self.working_tree.destination_for(
            entry.working_location, self.config.output_dir, self.config.patch_suffix
        )
        write_patch(destination, render_patch(document), self.config.encoding, entry.source_key)
        logger.info("Wrote %d hunk(s) for %s to %s", len(document.hunks), entry.source_key, destination)

        return EntryOutcome(
            source_key=entry.source_key,
            status=EntryStatus.PATCH_WRITTEN,
            working_location=entry.working_location,
            destination=str(destination),
        )

    def emit_or_skip(self, entry: ModificationEntry) -> EntryOutcome:
        """Process one entry, turning emission errors into a skipped outcome."""
        try:
            return self.emit(entry)
        except EmissionError as exc:
            logger.warning("Skipping %s: %s", exc.source_key, exc)
            return EntryOutcome(
                source_key=exc.source_key,
                status=EntryStatus.SKIPPED,
                working_location=entry.working_location,
                error_kind=exc.kind,
                message=str(exc),
            )

    def emit_all(self, entries: Sequence[ModificationEntry]) -> tuple[list[EntryOutcome], list[str]]:
        """Process all entries, in order or on a thread pool.

        Returns:
            Tuple of (outcomes in entry order, run-level error messages).
        """
        if self.config.max_workers > 1 and len(entries) > 1:
            return self._emit_parallel(entries)
        return self._emit_sequential(entries)

    def _emit_sequential(self, entries: Sequence[ModificationEntry]) -> tuple[list[EntryOutcome], list[str]]:
        outcomes: list[EntryOutcome] = []
        errors: list[str] = []
        for position, entry in enumerate(entries):
            outcome = self.emit_or_skip(entry)
            outcomes.append(outcome)
            if outcome.status == EntryStatus.SKIPPED and self.config.fail_fast:
                remaining = len(entries) - position - 1
                errors.append(
                    f"{ABORT_PREFIX} emission stopped at {outcome.source_key} "
                    f"({outcome.message}); {remaining} entries not processed"
                )
                break
        return outcomes, errors

    def _emit_parallel(self, entries: Sequence[ModificationEntry]) -> tuple[list[EntryOutcome], list[str]]:
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            futures = [pool.submit(self.emit_or_skip, entry) for entry in entries]
            outcomes = [future.result() for future in futures]

        errors: list[str] = []
        failures = [outcome for outcome in outcomes if outcome.status == EntryStatus.SKIPPED]
        if failures and self.config.fail_fast:
            details = "; ".join(f"{o.source_key} ({o.message})" for o in failures)
            errors.append(f"{ABORT_PREFIX} {len(failures)} entries failed: {details}")
        return outcomes, errors
