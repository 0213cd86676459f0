"""Shortest edit script between two line sequences (Myers' algorithm).

The search runs over diagonals k = x - y of the edit graph, where x indexes
the source and y the target. Round d records, for every diagonal reachable
with d edits, the furthest x reached. The common prefix and suffix are
stripped first so near-identical files only search their differing middle.

Large regions use the linear-space refinement: a forward search from the
top-left and a reverse search from the bottom-right run until they overlap,
which yields a point on a shortest path; both halves are then solved
recursively. Only regions small enough for their per-round trace to stay
tiny are searched directly with a backtracking trace.

See E. Myers, "An O(ND) Difference Algorithm and Its Variations" (1986).
"""

from typing import Sequence

from upgrade_differ.models.diff_models import EditOperation, EditScript, OpType

# Regions with at most this many lines on both sides together are searched
# directly; larger ones are split first.
_DIRECT_SEARCH_LIMIT = 64


def is_identical(source: Sequence[str], target: Sequence[str]) -> bool:
    """Cheap check for "no differences" that never runs the search."""
    return len(source) == len(target) and list(source) == list(target)


def compute_edit_script(source: Sequence[str], target: Sequence[str]) -> EditScript:
    """Compute the minimal edit script turning source into target.

    When several minimal scripts exist the search takes the deletion move on
    ties, and every run of changes lists its deletions before its insertions.

    Args:
        source: Baseline lines.
        target: Working lines.

    Returns:
        EditScript covering every index of both sequences exactly once.
    """
    source = list(source)
    target = list(target)
    n, m = len(source), len(target)

    if is_identical(source, target):
        return EditScript(
            operations=[EditOperation.equal(i, i) for i in range(n)],
            source_length=n,
            target_length=m,
        )

    prefix = _common_prefix_length(source, target)
    suffix = _common_suffix_length(source, target, prefix)
    moves: list[OpType] = []
    _collect_moves(source, target, prefix, n - suffix, prefix, m - suffix, moves)

    operations = [EditOperation.equal(i, i) for i in range(prefix)]
    x = y = prefix
    for move in _deletions_first(moves):
        if move == OpType.EQUAL:
            operations.append(EditOperation.equal(x, y))
            x += 1
            y += 1
        elif move == OpType.DELETE:
            operations.append(EditOperation.delete(x))
            x += 1
        else:
            operations.append(EditOperation.insert(y))
            y += 1

    for offset in range(suffix):
        operations.append(EditOperation.equal(x + offset, y + offset))

    return EditScript(operations=operations, source_length=n, target_length=m)


def apply_edit_script(
    script: EditScript,
    source: Sequence[str],
    target: Sequence[str],
) -> list[str]:
    """Replay a script: copy source lines on Equal, target lines on Insert."""
    result: list[str] = []
    for operation in script.operations:
        if operation.op == OpType.EQUAL:
            result.append(source[operation.source_index])
        elif operation.op == OpType.INSERT:
            result.append(target[operation.target_index])
    return result


def invert_edit_script(script: EditScript) -> EditScript:
    """Return the script that turns the target back into the source."""
    operations = []
    for operation in script.operations:
        if operation.op == OpType.EQUAL:
            operations.append(EditOperation.equal(operation.target_index, operation.source_index))
        elif operation.op == OpType.DELETE:
            operations.append(EditOperation.insert(operation.source_index))
        else:
            operations.append(EditOperation.delete(operation.target_index))
    return EditScript(
        operations=list(_deletions_first_operations(operations)),
        source_length=script.target_length,
        target_length=script.source_length,
    )


def _common_prefix_length(a: list[str], b: list[str]) -> int:
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[i] == b[i]:
        i += 1
    return i


def _common_suffix_length(a: list[str], b: list[str], prefix: int) -> int:
    # Never overlap the prefix already consumed.
    limit = min(len(a), len(b)) - prefix
    i = 0
    while i < limit and a[len(a) - 1 - i] == b[len(b) - 1 - i]:
        i += 1
    return i


def _collect_moves(
    a: list[str],
    b: list[str],
    a_lo: int,
    a_hi: int,
    b_lo: int,
    b_hi: int,
    moves: list[OpType],
) -> None:
    """Append the moves of a shortest path through a[a_lo:a_hi] x b[b_lo:b_hi]."""
    head = 0
    while a_lo + head < a_hi and b_lo + head < b_hi and a[a_lo + head] == b[b_lo + head]:
        head += 1
    a_lo += head
    b_lo += head
    tail = 0
    while a_hi - tail > a_lo and b_hi - tail > b_lo and a[a_hi - 1 - tail] == b[b_hi - 1 - tail]:
        tail += 1
    a_hi -= tail
    b_hi -= tail

    moves.extend([OpType.EQUAL] * head)
    n, m = a_hi - a_lo, b_hi - b_lo
    if n == 0 or m == 0:
        moves.extend([OpType.DELETE] * n + [OpType.INSERT] * m)
    elif n + m <= _DIRECT_SEARCH_LIMIT:
        moves.extend(_shortest_path_moves(a[a_lo:a_hi], b[b_lo:b_hi]))
    else:
        split = None
        if not set(a[a_lo:a_hi]).isdisjoint(b[b_lo:b_hi]):
            split = _bisect(a, b, a_lo, a_hi, b_lo, b_hi)
        if split is None:
            moves.extend([OpType.DELETE] * n + [OpType.INSERT] * m)
        else:
            x, y = split
            _collect_moves(a, b, a_lo, x, b_lo, y, moves)
            _collect_moves(a, b, x, a_hi, y, b_hi, moves)
    moves.extend([OpType.EQUAL] * tail)


def _bisect(
    a: list[str],
    b: list[str],
    a_lo: int,
    a_hi: int,
    b_lo: int,
    b_hi: int,
) -> tuple[int, int] | None:
    """Find the end of the middle snake of the region.

    The region must start and end with differing lines on both sides, so
    the returned point lies strictly inside it. Each search keeps, per
    diagonal, the furthest point reachable with exactly d edits, or -1.

    Returns:
        Absolute (x, y) on a shortest path, or None when the two sides
        have no line in common.
    """
    n = a_hi - a_lo
    m = b_hi - b_lo
    delta = n - m
    # With an odd delta the searches can only meet during a forward round.
    odd = delta % 2 != 0
    max_d = (n + m + 1) // 2
    offset = max_d
    size = 2 * max_d + 1
    forward = [-1] * size
    reverse = [-1] * size

    for d in range(max_d + 1):
        for k in range(-d, d + 1, 2):
            x = _furthest_start(forward, offset, k, d, n, m)
            if x != -1:
                y = x - k
                while x < n and y < m and a[a_lo + x] == b[b_lo + y]:
                    x += 1
                    y += 1
            forward[offset + k] = x
            if x == -1 or not odd:
                continue
            r = offset + delta - k
            if 0 <= r < size and reverse[r] != -1 and x + reverse[r] >= n:
                return a_lo + x, b_lo + x - k

        for k in range(-d, d + 1, 2):
            x = _furthest_start(reverse, offset, k, d, n, m)
            if x != -1:
                y = x - k
                while x < n and y < m and a[a_hi - 1 - x] == b[b_hi - 1 - y]:
                    x += 1
                    y += 1
            reverse[offset + k] = x
            if x == -1 or odd:
                continue
            f = offset + delta - k
            if 0 <= f < size and forward[f] != -1 and x + forward[f] >= n:
                return a_hi - x, b_hi - (x - k)

    return None


def _furthest_start(v: list[int], offset: int, k: int, d: int, n: int, m: int) -> int:
    """Furthest x on diagonal k after the d-th edit, before following the snake.

    Only moves that stay inside the n x m edit graph are taken; -1 means no
    d-edit path reaches diagonal k. Of two moves the one reaching further
    wins, so a deletion is taken whenever both neighbours reached equally far.
    """
    if d == 0:
        return 0
    x = -1
    if k > -d:
        previous = v[offset + k - 1]
        if previous != -1 and previous < n:
            x = previous + 1
    if k < d:
        previous = v[offset + k + 1]
        if previous != -1 and previous - (k + 1) < m and previous > x:
            x = previous
    return x


def _shortest_path_moves(a: list[str], b: list[str]) -> list[OpType]:
    """Forward greedy search; returns the moves of one shortest path.

    Keeps one diagonal array per round, so it is only used on small regions.
    """
    n, m = len(a), len(b)
    if n == 0:
        return [OpType.INSERT] * m
    if m == 0:
        return [OpType.DELETE] * n

    max_d = n + m
    offset = max_d + 1
    v = [0] * (2 * max_d + 3)
    # trace[d] holds v for diagonals -d..d after round d.
    trace: list[list[int]] = []

    for d in range(max_d + 1):
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[offset + k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m, d)
        trace.append(v[offset - d:offset + d + 1])

    # Unreachable: a path of n + m edits always exists.
    raise AssertionError("edit graph search did not terminate")


def _backtrack(trace: list[list[int]], n: int, m: int, d_final: int) -> list[OpType]:
    moves: list[OpType] = []
    x, y = n, m

    for d in range(d_final, 0, -1):
        previous = trace[d - 1]
        base = d - 1
        k = x - y
        if k == -d or (k != d and previous[base + k - 1] < previous[base + k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = previous[base + prev_k]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            moves.append(OpType.EQUAL)
            x -= 1
            y -= 1
        moves.append(OpType.INSERT if prev_k == k + 1 else OpType.DELETE)
        x, y = prev_x, prev_y

    # Initial snake from (0, 0).
    while x > 0 and y > 0:
        moves.append(OpType.EQUAL)
        x -= 1
        y -= 1

    moves.reverse()
    return moves


def _deletions_first(moves: list[OpType]) -> list[OpType]:
    """Reorder each run of changes so its deletions precede its insertions."""
    result: list[OpType] = []
    deletes = inserts = 0
    for move in moves:
        if move == OpType.DELETE:
            deletes += 1
        elif move == OpType.INSERT:
            inserts += 1
        else:
            result.extend([OpType.DELETE] * deletes + [OpType.INSERT] * inserts)
            deletes = inserts = 0
            result.append(move)
    result.extend([OpType.DELETE] * deletes + [OpType.INSERT] * inserts)
    return result


def _deletions_first_operations(operations: list[EditOperation]):
    deletes: list[EditOperation] = []
    inserts: list[EditOperation] = []
    for operation in operations:
        if operation.op == OpType.DELETE:
            deletes.append(operation)
        elif operation.op == OpType.INSERT:
            inserts.append(operation)
        else:
            yield from deletes
            yield from inserts
            deletes, inserts = [], []
            yield operation
    yield from deletes
    yield from inserts
