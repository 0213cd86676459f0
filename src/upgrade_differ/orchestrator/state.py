"""State definition for the LangGraph differ pipeline."""

import operator
from enum import Enum
from typing import Annotated, TypedDict

from upgrade_differ.config import DifferConfig
from upgrade_differ.models import EntryOutcome, ModificationEntry, ReconciliationIndex


class RunPhase(str, Enum):
    """Phase the run is in; DONE is terminal."""

    INDEXING = "indexing"
    RECONCILING = "reconciling"
    EMITTING = "emitting"
    DONE = "done"


class DifferState(TypedDict):
    """State for the LangGraph differ orchestrator.

    Fields with Annotated[list, operator.add] reducers accumulate across nodes.
    All other fields use default overwrite semantics.
    """

    # Input
    working_root: str
    baseline_label: str
    differ_config: DifferConfig
    phase: RunPhase

    # Indexing
    baseline_index: ReconciliationIndex | None
    working_index: ReconciliationIndex | None
    candidates: list[str]

    # Reconciling
    entries: list[ModificationEntry]

    # Emitting (accumulating reducers)
    outcomes: Annotated[list[EntryOutcome], operator.add]

    # Error accumulation
    errors: Annotated[list[str], operator.add]


def make_initial_state(
    working_root: str,
    baseline_label: str,
    config: DifferConfig | None = None,
) -> DifferState:
    """Create the initial state for a differ run.

    Args:
        working_root: Absolute path of the plugin SDK working tree.
        baseline_label: Human-readable name of the baseline source.
        config: Run configuration; defaults to DifferConfig().

    Returns:
        DifferState dict with all fields initialised to defaults.
    """
    return {
        "working_root": working_root,
        "baseline_label": baseline_label,
        "differ_config": config if config is not None else DifferConfig(),
        "phase": RunPhase.INDEXING,
        "baseline_index": None,
        "working_index": None,
        "candidates": [],
        "entries": [],
        "outcomes": [],
        "errors": [],
    }
