"""Line diffing: sequencing, Myers edit scripts, hunks and unified diff output."""

from upgrade_differ.diff.diff_engine import (
    apply_edit_script,
    compute_edit_script,
    invert_edit_script,
    is_identical,
)
from upgrade_differ.diff.hunk_grouper import DEFAULT_CONTEXT_LINES, group_hunks
from upgrade_differ.diff.line_sequencer import (
    DEFAULT_LINE_TERMINATOR,
    decode_lines,
    split_lines,
)
from upgrade_differ.diff.patch_renderer import (
    build_patch_document,
    format_range,
    generate_unified_diff,
    render_patch,
)

__all__ = [
    "DEFAULT_CONTEXT_LINES",
    "DEFAULT_LINE_TERMINATOR",
    "apply_edit_script",
    "build_patch_document",
    "compute_edit_script",
    "decode_lines",
    "format_range",
    "generate_unified_diff",
    "group_hunks",
    "invert_edit_script",
    "is_identical",
    "render_patch",
    "split_lines",
]
