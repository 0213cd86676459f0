"""Unit tests for individual orchestrator graph nodes."""
from unittest.mock import MagicMock

import pytest

from upgrade_differ.config import DifferConfig
from upgrade_differ.index.exceptions import SourceUnreadableError
from upgrade_differ.index.reconciler import build_index
from upgrade_differ.models import (
    DEFAULT_SOURCE_ROOTS,
    EntryStatus,
    IndexSide,
    ModifiedFile,
    NewFile,
    SourceKey,
)
from upgrade_differ.orchestrator.exceptions import GraphBuildError
from upgrade_differ.orchestrator.graph import (
    build_graph,
    make_emit_node,
    make_index_node,
    reconcile_node,
    route_after_index,
)
from upgrade_differ.orchestrator.state import RunPhase, make_initial_state

ROOT = "/work/plugins-sdk"
EXT = f"{ROOT}/ext/foo-ext/docroot/WEB-INF"


# ---------------------------------------------------------------------------
# Helpers / shared fixtures
# ---------------------------------------------------------------------------

def make_baseline(entries=None, contents=None) -> MagicMock:
    baseline = MagicMock()
    baseline.label = "portal.zip"
    baseline.entries.return_value = entries if entries is not None else []
    contents = contents or {}
    baseline.read.side_effect = lambda name: contents[name]
    return baseline


def make_working_tree(locations=None) -> MagicMock:
    tree = MagicMock()
    tree.walk.return_value = locations if locations is not None else []
    return tree


# ---------------------------------------------------------------------------
# index_node
# ---------------------------------------------------------------------------

class TestIndexNode:
    def test_builds_indexes_and_candidates(self):
        baseline = make_baseline(entries=["portal/portal-impl/src/com/A.java", "portal/build.xml"])
        tree = make_working_tree(locations=[
            f"{EXT}/ext-impl/src/com/A.java",
            f"{ROOT}/portlets/p-portlet/view.jsp",
            f"{ROOT}/diffs/ext/foo-ext/docroot/WEB-INF/ext-impl/src/com/A.java.patch",
        ])
        node = make_index_node(baseline, tree)

        result = node(make_initial_state(ROOT, "portal.zip"))

        assert result["phase"] == RunPhase.RECONCILING
        assert len(result["baseline_index"]) == 1
        assert SourceKey(root="portal-impl", key="com/A.java") in result["working_index"]
        assert result["candidates"] == [f"{EXT}/ext-impl/src/com/A.java"]
        assert "errors" not in result

    def test_unreadable_baseline_ends_run(self):
        baseline = make_baseline()
        baseline.entries.side_effect = SourceUnreadableError("bad zip")
        node = make_index_node(baseline, make_working_tree())

        result = node(make_initial_state(ROOT, "portal.zip"))

        assert result["phase"] == RunPhase.DONE
        assert result["errors"] == ["index_node error: bad zip"]

    def test_unreadable_working_tree_ends_run(self):
        tree = make_working_tree()
        tree.walk.side_effect = SourceUnreadableError("no such dir")
        result = make_index_node(make_baseline(), tree)(make_initial_state(ROOT, "portal.zip"))
        assert result["phase"] == RunPhase.DONE
        assert result["errors"][0].startswith("index_node error:")

    def test_uses_configured_scope(self):
        tree = make_working_tree(locations=[f"{ROOT}/custom/ext-impl/src/A.java"])
        state = make_initial_state(ROOT, "portal.zip", DifferConfig(scope_pattern=r".*/custom/.*"))
        result = make_index_node(make_baseline(), tree)(state)
        assert result["candidates"] == [f"{ROOT}/custom/ext-impl/src/A.java"]


# ---------------------------------------------------------------------------
# reconcile_node
# ---------------------------------------------------------------------------

def test_reconcile_node_produces_entries():
    baseline_index = build_index(
        ["portal/portal-impl/src/com/A.java"], DEFAULT_SOURCE_ROOTS, IndexSide.BASELINE
    )
    candidates = [f"{EXT}/ext-impl/src/com/A.java", f"{EXT}/ext-impl/src/com/B.java"]
    state = make_initial_state(ROOT, "portal.zip")
    state.update(
        baseline_index=baseline_index,
        working_index=build_index(candidates, DEFAULT_SOURCE_ROOTS, IndexSide.WORKING),
        candidates=candidates,
        phase=RunPhase.RECONCILING,
    )

    result = reconcile_node(state)

    assert result["phase"] == RunPhase.EMITTING
    assert isinstance(result["entries"][0], ModifiedFile)
    assert isinstance(result["entries"][1], NewFile)


# ---------------------------------------------------------------------------
# emit_node
# ---------------------------------------------------------------------------

class TestEmitNode:
    def test_new_files_only(self):
        state = make_initial_state(ROOT, "portal.zip")
        state["entries"] = [
            NewFile(source_key=SourceKey(root="portal-impl", key="B.java"), working_location=f"{EXT}/B.java")
        ]
        result = make_emit_node(make_baseline(), make_working_tree())(state)
        assert result["phase"] == RunPhase.DONE
        assert [o.status for o in result["outcomes"]] == [EntryStatus.NEW_FILE]
        assert result["errors"] == []

    def test_unexpected_failure_is_recorded(self):
        baseline = make_baseline()
        baseline.read.side_effect = RuntimeError("boom")
        tree = make_working_tree()
        state = make_initial_state(ROOT, "portal.zip")
        state["entries"] = [
            ModifiedFile(
                source_key=SourceKey(root="portal-impl", key="A.java"),
                baseline_location="portal/portal-impl/src/A.java",
                working_location=f"{EXT}/ext-impl/src/A.java",
            )
        ]

        result = make_emit_node(baseline, tree)(state)

        assert result["phase"] == RunPhase.DONE
        assert result["outcomes"] == []
        assert result["errors"] == ["emit_node error: boom"]

    def test_empty_entries(self):
        result = make_emit_node(make_baseline(), make_working_tree())(make_initial_state(ROOT, "x"))
        assert result["outcomes"] == []
        assert result["phase"] == RunPhase.DONE


# ---------------------------------------------------------------------------
# routing and graph
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "phase, expected",
    [(RunPhase.DONE, "done"), (RunPhase.RECONCILING, "reconcile")],
)
def test_route_after_index(phase, expected):
    state = make_initial_state(ROOT, "portal.zip")
    state["phase"] = phase
    assert route_after_index(state) == expected


def test_build_graph_compiles():
    graph = build_graph(make_baseline(), make_working_tree())
    assert hasattr(graph, "invoke")


def test_graph_skips_to_done_when_indexing_fails():
    baseline = make_baseline()
    baseline.entries.side_effect = SourceUnreadableError("corrupt")
    graph = build_graph(baseline, make_working_tree())

    result = graph.invoke(make_initial_state(ROOT, "portal.zip"))

    assert result["phase"] == RunPhase.DONE
    assert result["errors"] == ["index_node error: corrupt"]
    assert result["outcomes"] == []
    assert result["entries"] == []


def test_build_graph_wraps_failures(monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("nope")

    monkeypatch.setattr("upgrade_differ.orchestrator.graph.StateGraph", broken)
    with pytest.raises(GraphBuildError):
        build_graph(make_baseline(), make_working_tree())
