"""LangGraph orchestrator graph for the differ pipeline.

Wires indexing, reconciliation and patch emission into a StateGraph:
Indexing -> Reconciling -> Emitting -> Done, with an early exit to Done when
either source cannot be enumerated.
"""

import logging
from typing import Callable

from langgraph.graph import END, START, StateGraph

from upgrade_differ.config import DifferConfig
from upgrade_differ.index.exceptions import SourceUnreadableError
from upgrade_differ.index.reconciler import build_index, reconcile, select_candidates
from upgrade_differ.index.sources import BaselineSource, WorkingTree
from upgrade_differ.models import IndexSide, RunReport
from upgrade_differ.orchestrator.emission import PatchEmitter
from upgrade_differ.orchestrator.exceptions import GraphBuildError
from upgrade_differ.orchestrator.state import DifferState, RunPhase, make_initial_state

logger = logging.getLogger(__name__)


def make_index_node(
    baseline: BaselineSource,
    working_tree: WorkingTree,
) -> Callable[[DifferState], dict]:
    """Factory: returns a node closure that builds both indexes.

    The closure:
    1. Enumerates the baseline source and walks the working tree
    2. Builds the baseline and working ReconciliationIndex
    3. Selects in-scope working candidates
    4. Returns {"baseline_index", "working_index", "candidates", "phase"}

    On SourceUnreadableError: returns {"errors": [str], "phase": DONE}
    """

    def index_node(state: DifferState) -> dict:
        config = state["differ_config"]
        try:
            baseline_locations = baseline.entries()
            working_locations = working_tree.walk()
        except SourceUnreadableError as exc:
            logger.error("Indexing failed: %s", exc)
            return {
                "errors": [f"index_node error: {exc}"],
                "phase": RunPhase.DONE,
            }

        baseline_index = build_index(baseline_locations, config.source_roots, IndexSide.BASELINE)
        working_index = build_index(working_locations, config.source_roots, IndexSide.WORKING)
        candidates = select_candidates(
            working_locations,
            state["working_root"],
            config.scope_pattern,
            config.output_dir,
        )
        logger.info(
            "Indexed %d baseline and %d working entries, %d candidates",
            len(baseline_index),
            len(working_index),
            len(candidates),
        )
        return {
            "baseline_index": baseline_index,
            "working_index": working_index,
            "candidates": candidates,
            "phase": RunPhase.RECONCILING,
        }

    return index_node


def reconcile_node(state: DifferState) -> dict:
    """Pair candidates with baseline files.

    Returns:
        {"entries": [...], "phase": EMITTING}
    """
    entries = reconcile(
        state["baseline_index"],
        state["working_index"],
        state["candidates"],
        state["differ_config"].source_roots,
    )
    return {"entries": entries, "phase": RunPhase.EMITTING}


def make_emit_node(
    baseline: BaselineSource,
    working_tree: WorkingTree,
) -> Callable[[DifferState], dict]:
    """Factory: returns a node closure that writes patches for all entries.

    Entry-level failures become skipped outcomes. Any other exception is
    recorded in errors; the run still ends in DONE.

    IMPORTANT: always returns outcomes as list (never None) for Annotated reducer.
    """

    def emit_node(state: DifferState) -> dict:
        emitter = PatchEmitter(baseline, working_tree, state["differ_config"])
        try:
            outcomes, errors = emitter.emit_all(state["entries"])
        except Exception as exc:
            logger.exception("Emission failed")
            return {
                "outcomes": [],
                "errors": [f"emit_node error: {exc}"],
                "phase": RunPhase.DONE,
            }
        return {"outcomes": outcomes, "errors": errors, "phase": RunPhase.DONE}

    return emit_node


def route_after_index(state: DifferState) -> str:
    """Router for the post-index conditional edge: "reconcile" or "done"."""
    if state["phase"] == RunPhase.DONE:
        return "done"
    return "reconcile"


def build_graph(baseline: BaselineSource, working_tree: WorkingTree):
    """Build and compile the orchestrator StateGraph.

    Edge topology:
      START -> index_node -> conditional(route_after_index) -> {reconcile_node, END}
      reconcile_node -> emit_node -> END

    Args:
        baseline: Baseline source to read pristine files from.
        working_tree: Working tree to scan and write patches into.

    Returns:
        CompiledStateGraph ready to invoke.

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(DifferState)

        graph.add_node("index_node", make_index_node(baseline, working_tree))
        graph.add_node("reconcile_node", reconcile_node)
        graph.add_node("emit_node", make_emit_node(baseline, working_tree))

        graph.add_edge(START, "index_node")
        graph.add_conditional_edges(
            "index_node",
            route_after_index,
            {
                "reconcile": "reconcile_node",
                "done": END,
            },
        )
        graph.add_edge("reconcile_node", "emit_node")
        graph.add_edge("emit_node", END)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build orchestrator graph: {exc}") from exc


def run_differ(
    baseline: BaselineSource,
    working_tree: WorkingTree,
    config: DifferConfig | None = None,
) -> RunReport:
    """Run the whole pipeline and summarise it as a RunReport."""
    graph = build_graph(baseline, working_tree)
    state = make_initial_state(
        working_root=working_tree.root.as_posix(),
        baseline_label=baseline.label,
        config=config,
    )
    result = graph.invoke(state)
    return RunReport(
        baseline_label=baseline.label,
        working_root=working_tree.root.as_posix(),
        outcomes=result.get("outcomes", []),
        errors=result.get("errors", []),
    )
