"""Line diffs (Myers' algorithm) and the text edits that turn one document into another."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Sequence

from bqls.protocol import Position, Range, TextEdit


class OpKind(IntEnum):
    """What an operation does to a run of lines."""

    DELETE = 0
    INSERT = 1
    EQUAL = 2


@dataclass
class Operation:
    """A run of lines deleted from ``a`` or inserted from ``b``.

    ``i1``/``i2`` index lines of ``a``; ``j1`` indexes ``b``, with the end implied by ``content``.
    """

    kind: OpKind
    content: list[str] = field(default_factory=list)
    i1: int = 0
    i2: int = 0
    j1: int = 0


def _shortest_edit_sequence(a: Sequence[str], b: Sequence[str]) -> tuple[list[Optional[list[int]]], int]:
    m, n = len(a), len(b)
    offset = n + m
    v = [0] * (2 * (n + m) + 1)
    trace: list[Optional[list[int]]] = [None] * (n + m + 1)

    for d in range(n + m + 1):
        for k in range(-d, d + 1, 2):
            # Prefer the larger x: deletions come before insertions.
            if k == -d or (k != d and v[k - 1 + offset] < v[k + 1 + offset]):
                x = v[k + 1 + offset]
            else:
                x = v[k - 1 + offset] + 1
            y = x - k

            while x < m and y < n and a[x] == b[y]:
                x += 1
                y += 1

            v[k + offset] = x

            if x == m and y == n:
                trace[d] = list(v)
                return trace, offset

        trace[d] = list(v)
    return [], 0


def _backtrack(trace: list[Optional[list[int]]], x: int, y: int, offset: int) -> list[Optional[list[int]]]:
    snakes: list[Optional[list[int]]] = [None] * len(trace)
    d = len(trace) - 1
    while x > 0 and y > 0 and d > 0:
        v = trace[d]
        if not v:
            d -= 1
            continue
        snakes[d] = [x, y]

        k = x - y
        if k == -d or (k != d and v[k - 1 + offset] < v[k + 1 + offset]):
            k_prev = k + 1
        else:
            k_prev = k - 1

        x = v[k_prev + offset]
        y = x - k_prev
        d -= 1

    if x < 0 or y < 0:
        return snakes
    snakes[d] = [x, y]
    return snakes


def operations(a: Sequence[str], b: Sequence[str]) -> list[Operation]:
    """Return the consolidated delete/insert operations that turn ``a`` into ``b``."""
    if not a and not b:
        return []

    trace, offset = _shortest_edit_sequence(a, b)
    snakes = _backtrack(trace, len(a), len(b), offset)
    m, n = len(a), len(b)

    solution: list[Operation] = []

    def add(op: Optional[Operation], i2: int, j2: int) -> None:
        if op is None:
            return
        op.i2 = i2
        if op.kind is OpKind.INSERT:
            op.content = list(b[op.j1:j2])
        solution.append(op)

    x = y = 0
    for snake in snakes:
        if snake is None or len(snake) < 2:
            continue
        target_x, target_y = snake

        op: Optional[Operation] = None
        while target_x - target_y > x - y:
            if op is None:
                op = Operation(OpKind.DELETE, i1=x, j1=y)
            x += 1
            if x == m:
                break
        add(op, x, y)

        op = None
        while target_x - target_y < x - y:
            if op is None:
                op = Operation(OpKind.INSERT, i1=x, j1=y)
            y += 1
        add(op, x, y)

        while x < target_x:
            x += 1
            y += 1
        if x >= m and y >= n:
            break
    return solution


def split_lines(text: str) -> list[str]:
    """Split text into lines that keep their trailing newline."""
    pieces = text.split("\n")
    lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def compute_edits(before: str, after: str) -> list[TextEdit]:
    """Compute whole-line text edits that turn ``before`` into ``after``."""
    edits: list[TextEdit] = []
    for op in operations(split_lines(before), split_lines(after)):
        span = Range(Position(op.i1, 0), Position(op.i2, 0))
        if op.kind is OpKind.DELETE:
            edits.append(TextEdit(span))
        elif op.kind is OpKind.INSERT:
            content = "".join(op.content)
            if content:
                edits.append(TextEdit(span, content))
    return edits