"""LangGraph orchestrator package for the differ pipeline."""

from upgrade_differ.orchestrator.emission import PatchEmitter, write_patch
from upgrade_differ.orchestrator.exceptions import (
    DestinationUnwritableError,
    EmissionError,
    EntryUnreadableError,
    GraphBuildError,
    OrchestratorError,
)
from upgrade_differ.orchestrator.graph import build_graph, run_differ
from upgrade_differ.orchestrator.state import DifferState, RunPhase, make_initial_state

__all__ = [
    "DestinationUnwritableError",
    "DifferState",
    "EmissionError",
    "EntryUnreadableError",
    "GraphBuildError",
    "OrchestratorError",
    "PatchEmitter",
    "RunPhase",
    "build_graph",
    "make_initial_state",
    "run_differ",
    "write_patch",
]
