"""Tests for hunk grouping."""

import random

import pytest

from upgrade_differ.diff.diff_engine import compute_edit_script
from upgrade_differ.diff.hunk_grouper import group_hunks
from upgrade_differ.models import EditScript, OpType


def ten_lines_two_changes():
    source = [str(i) for i in range(10)]
    target = list(source)
    target[1] = "x"
    target[8] = "y"
    return source, target


def rebuild(hunks, lines, start_attr, count_attr, skip_op, index_attr):
    """Rebuild one side from hunk spans plus the unchanged gaps between them."""
    rebuilt = []
    position = 0
    for hunk in hunks:
        start = getattr(hunk, start_attr)
        rebuilt.extend(lines[position:start])
        for op in hunk.operations:
            if op.op != skip_op:
                rebuilt.append(lines[getattr(op, index_attr)])
        position = start + getattr(hunk, count_attr)
    rebuilt.extend(lines[position:])
    return rebuilt


def test_no_changes_gives_no_hunks():
    script = compute_edit_script(["a", "b"], ["a", "b"])
    assert group_hunks(script) == []


def test_empty_script_gives_no_hunks():
    assert group_hunks(EditScript()) == []


def test_single_change_with_one_line_of_context_each_side():
    script = compute_edit_script(["a", "b", "c"], ["a", "x", "c"])
    hunks = group_hunks(script, 3)
    assert len(hunks) == 1
    hunk = hunks[0]
    assert (hunk.source_start, hunk.source_count) == (0, 3)
    assert (hunk.target_start, hunk.target_count) == (0, 3)
    assert [op.op for op in hunk.operations] == [
        OpType.EQUAL, OpType.DELETE, OpType.INSERT, OpType.EQUAL,
    ]


def test_leading_and_trailing_context_truncated():
    source = [str(i) for i in range(20)]
    target = list(source)
    target[10] = "ten"
    hunks = group_hunks(compute_edit_script(source, target), 3)
    assert len(hunks) == 1
    assert hunks[0].source_start == 7
    assert hunks[0].source_count == 7
    assert hunks[0].target_start == 7
    assert hunks[0].target_count == 7


def test_long_unchanged_run_splits_hunks():
    source, target = ten_lines_two_changes()
    hunks = group_hunks(compute_edit_script(source, target), 1)
    assert len(hunks) == 2
    first, second = hunks
    assert (first.source_start, first.source_count, first.target_start, first.target_count) == (0, 3, 0, 3)
    assert (second.source_start, second.source_count, second.target_start, second.target_count) == (7, 3, 7, 3)


def test_unchanged_run_of_exactly_twice_context_is_kept_together():
    source, target = ten_lines_two_changes()
    # Six unchanged lines sit between the changes.
    hunks = group_hunks(compute_edit_script(source, target), 3)
    assert len(hunks) == 1
    assert hunks[0].source_count == 10
    assert hunks[0].target_count == 10


def test_unchanged_run_longer_than_twice_context_splits():
    source, target = ten_lines_two_changes()
    hunks = group_hunks(compute_edit_script(source, target), 2)
    assert len(hunks) == 2


def test_zero_context():
    hunks = group_hunks(compute_edit_script(["a", "b", "c"], ["a", "x", "c"]), 0)
    assert len(hunks) == 1
    assert (hunks[0].source_start, hunks[0].source_count) == (1, 1)
    assert (hunks[0].target_start, hunks[0].target_count) == (1, 1)


def test_pure_insertion_into_empty_source():
    hunks = group_hunks(compute_edit_script([], ["new"]))
    assert len(hunks) == 1
    assert (hunks[0].source_start, hunks[0].source_count) == (0, 0)
    assert (hunks[0].target_start, hunks[0].target_count) == (0, 1)


def test_negative_context_rejected():
    with pytest.raises(ValueError):
        group_hunks(compute_edit_script(["a"], ["b"]), -1)


@pytest.mark.parametrize("context", [0, 1, 3])
def test_hunks_cover_both_sequences(context):
    rng = random.Random(context)
    for _ in range(150):
        source = [rng.choice("abcde") for _ in range(rng.randint(0, 30))]
        target = [rng.choice("abcde") for _ in range(rng.randint(0, 30))]
        hunks = group_hunks(compute_edit_script(source, target), context)

        assert rebuild(hunks, source, "source_start", "source_count", OpType.INSERT, "source_index") == source
        assert rebuild(hunks, target, "target_start", "target_count", OpType.DELETE, "target_index") == target

        previous_source_end = previous_target_end = 0
        for hunk in hunks:
            # Ascending, non-overlapping, and gaps of equal length on both sides
            assert hunk.source_start >= previous_source_end
            assert hunk.source_start - previous_source_end == hunk.target_start - previous_target_end
            previous_source_end = hunk.source_start + hunk.source_count
            previous_target_end = hunk.target_start + hunk.target_count
