"""Tests for orchestrator state module."""
from upgrade_differ.config import DifferConfig
from upgrade_differ.orchestrator.state import RunPhase, make_initial_state


class TestMakeInitialState:
    """Tests for the make_initial_state factory function."""

    def test_make_initial_state_defaults(self):
        """All 10 keys present with correct defaults."""
        state = make_initial_state("/tmp/sdk", "portal.zip")

        assert state["working_root"] == "/tmp/sdk"
        assert state["baseline_label"] == "portal.zip"
        assert state["differ_config"] == DifferConfig()
        assert state["phase"] == RunPhase.INDEXING
        assert state["baseline_index"] is None
        assert state["working_index"] is None
        assert state["candidates"] == []
        assert state["entries"] == []
        assert state["outcomes"] == []
        assert state["errors"] == []

        assert len(state) == 10

    def test_make_initial_state_custom_config(self):
        config = DifferConfig(context_lines=1, max_workers=2)
        state = make_initial_state("/tmp/sdk", "portal.zip", config=config)
        assert state["differ_config"] is config

    def test_initial_state_errors_empty_list(self):
        """errors starts as an empty list (not None)."""
        state = make_initial_state("/tmp/sdk", "portal.zip")
        assert isinstance(state["errors"], list)
        assert isinstance(state["outcomes"], list)


def test_run_phase_values():
    assert [phase.value for phase in RunPhase] == ["indexing", "reconciling", "emitting", "done"]
