"""Render patch documents as unified diff text."""

from upgrade_differ.diff.diff_engine import compute_edit_script
from upgrade_differ.diff.hunk_grouper import DEFAULT_CONTEXT_LINES, group_hunks
from upgrade_differ.diff.line_sequencer import DEFAULT_LINE_TERMINATOR, split_lines
from upgrade_differ.models.diff_models import Hunk, OpType, PatchDocument

_PREFIXES = {
    OpType.EQUAL: " ",
    OpType.DELETE: "-",
    OpType.INSERT: "+",
}


def format_range(start: int, count: int) -> str:
    """Format one side of a hunk header from a 0-based start.

    Empty spans point at the line before them, so an insertion at the top
    of a file reads "0,0".
    """
    if count == 0:
        return f"{start},0"
    return f"{start + 1},{count}"


def render_hunk(hunk: Hunk, document: PatchDocument) -> str:
    terminator = document.line_terminator
    parts = [
        f"@@ -{format_range(hunk.source_start, hunk.source_count)} "
        f"+{format_range(hunk.target_start, hunk.target_count)} @@{terminator}"
    ]
    for operation in hunk.operations:
        if operation.op == OpType.INSERT:
            content = document.target_lines[operation.target_index]
        else:
            content = document.source_lines[operation.source_index]
        parts.append(f"{_PREFIXES[operation.op]}{content}{terminator}")
    return "".join(parts)


def render_patch(document: PatchDocument) -> str:
    """Serialise a patch document to unified diff text.

    Every emitted line, headers included, ends with exactly one terminator.
    Rendering is pure, so the same document always renders identically.
    """
    terminator = document.line_terminator
    parts = [
        f"--- {document.source_label}{terminator}",
        f"+++ {document.target_label}{terminator}",
    ]
    parts.extend(render_hunk(hunk, document) for hunk in document.hunks)
    return "".join(parts)


def build_patch_document(
    source_label: str,
    target_label: str,
    source_lines: list[str],
    target_lines: list[str],
    context_lines: int = DEFAULT_CONTEXT_LINES,
    line_terminator: str = DEFAULT_LINE_TERMINATOR,
) -> PatchDocument | None:
    """Diff two line sequences and group the result.

    Returns:
        PatchDocument, or None when the sequences have no differences.
    """
    script = compute_edit_script(source_lines, target_lines)
    hunks = group_hunks(script, context_lines)
    if not hunks:
        return None
    return PatchDocument(
        source_label=source_label,
        target_label=target_label,
        source_lines=source_lines,
        target_lines=target_lines,
        hunks=hunks,
        line_terminator=line_terminator,
    )


def generate_unified_diff(
    source_text: str,
    target_text: str,
    source_label: str,
    target_label: str,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    line_terminator: str = DEFAULT_LINE_TERMINATOR,
) -> str:
    """Generate a unified diff between two texts.

    Args:
        source_text: Baseline content.
        target_text: Working content.
        source_label: Label for the "---" header.
        target_label: Label for the "+++" header.
        context_lines: Unchanged lines kept around each change.
        line_terminator: Terminator used to split input and end output lines.

    Returns:
        Unified diff text. Empty string if there are no differences.
    """
    document = build_patch_document(
        source_label,
        target_label,
        split_lines(source_text, line_terminator),
        split_lines(target_text, line_terminator),
        context_lines=context_lines,
        line_terminator=line_terminator,
    )
    if document is None:
        return ""
    return render_patch(document)
