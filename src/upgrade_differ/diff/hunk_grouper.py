"""Group an edit script into context-bounded hunks."""

from upgrade_differ.models.diff_models import EditScript, Hunk, OpType

DEFAULT_CONTEXT_LINES = 3


def group_hunks(script: EditScript, context: int = DEFAULT_CONTEXT_LINES) -> list[Hunk]:
    """Split an edit script into hunks with up to `context` lines around changes.

    An unchanged run longer than 2 * context between two changes starts a
    new hunk; shorter runs are kept whole inside one hunk. Unchanged runs at
    the start and end of the script are cut down to `context` lines.

    Args:
        script: Edit script from compute_edit_script.
        context: Number of unchanged lines kept on each side of a change.

    Returns:
        Hunks in ascending source order. Empty if the script has no changes.

    Raises:
        ValueError: If context is negative.
    """
    if context < 0:
        raise ValueError(f"Context size must be non-negative, got {context}")

    operations = script.operations
    change_positions = [i for i, op in enumerate(operations) if op.op != OpType.EQUAL]
    if not change_positions:
        return []

    # source_before[i] / target_before[i]: lines consumed before operation i
    source_before: list[int] = []
    target_before: list[int] = []
    source_seen = target_seen = 0
    for operation in operations:
        source_before.append(source_seen)
        target_before.append(target_seen)
        if operation.op != OpType.INSERT:
            source_seen += 1
        if operation.op != OpType.DELETE:
            target_seen += 1
    source_before.append(source_seen)
    target_before.append(target_seen)

    groups: list[tuple[int, int]] = []
    first = previous = change_positions[0]
    for position in change_positions[1:]:
        if position - previous - 1 > 2 * context:
            groups.append((first, previous))
            first = position
        previous = position
    groups.append((first, previous))

    hunks = []
    for first, last in groups:
        lo = max(0, first - context)
        hi = min(len(operations), last + context + 1)
        hunks.append(Hunk(
            source_start=source_before[lo],
            source_count=source_before[hi] - source_before[lo],
            target_start=target_before[lo],
            target_count=target_before[hi] - target_before[lo],
            operations=operations[lo:hi],
        ))
    return hunks
