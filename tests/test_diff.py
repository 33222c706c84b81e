import pytest

from bqls.diff import OpKind, compute_edits, operations, split_lines
from bqls.protocol import Position, Range, TextEdit

PAIRS = [
    ("", ""),
    ("a\nb\n", "a\nb\n"),
    ("", "a\nb\n"),
    ("a\nb\n", ""),
    ("a\nb\n", "a\nc\n"),
    ("a\nc\n", "a\nb\nc\n"),
    ("a\nb\nc\n", "a\nc\n"),
    ("SELECT 1", "SELECT\n  1\n"),
]


def _apply_operations(a, ops):
    lines = list(a)
    for op in reversed(ops):
        if op.kind is OpKind.DELETE:
            lines[op.i1:op.i2] = []
        elif op.kind is OpKind.INSERT:
            lines[op.i1:op.i1] = op.content
    return lines


def _apply_edits(before, edits):
    lines = split_lines(before)
    for edit in reversed(edits):
        start, end = edit.range.start.line, edit.range.end.line
        lines[start:end] = [edit.new_text] if edit.new_text else []
    return "".join(lines)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", []),
        ("a", ["a"]),
        ("a\nb\n", ["a\n", "b\n"]),
        ("a\n\nb", ["a\n", "\n", "b"]),
    ],
)
def test_split_lines(text, expected):
    assert split_lines(text) == expected


@pytest.mark.parametrize("text", ["", "a", "a\nb", "x\n\ny\n"])
def test_split_lines_joins_back(text):
    assert "".join(split_lines(text)) == text


def test_operations_empty_and_identical():
    assert operations([], []) == []
    assert operations(["a\n", "b\n"], ["a\n", "b\n"]) == []


@pytest.mark.parametrize("before, after", PAIRS)
def test_operations_transform_a_into_b(before, after):
    a, b = split_lines(before), split_lines(after)
    ops = operations(a, b)
    assert _apply_operations(a, ops) == b
    assert all(op.kind in (OpKind.DELETE, OpKind.INSERT) for op in ops)


def test_operations_pure_insert_and_delete():
    inserted = operations([], ["a\n", "b\n"])
    assert [(op.kind, op.content) for op in inserted] == [(OpKind.INSERT, ["a\n", "b\n"])]
    deleted = operations(["a\n", "b\n"], [])
    assert [(op.kind, op.i1, op.i2) for op in deleted] == [(OpKind.DELETE, 0, 2)]


@pytest.mark.parametrize("before, after", PAIRS)
def test_compute_edits_apply(before, after):
    edits = compute_edits(before, after)
    assert _apply_edits(before, edits) == after
    assert all(e.range.start.character == 0 and e.range.end.character == 0 for e in edits)


def test_compute_edits_identical_is_empty():
    assert compute_edits("SELECT 1\n", "SELECT 1\n") == []


def test_compute_edits_single_line_change():
    assert compute_edits("a\nb\n", "a\nc\n") == [
        TextEdit(Range(Position(1, 0), Position(2, 0))),
        TextEdit(Range(Position(2, 0), Position(2, 0)), "c\n"),
    ]


def test_compute_edits_insert_ranges_are_empty():
    edits = compute_edits("a\nc\n", "a\nb\nc\n")
    assert [e.new_text for e in edits] == ["b\n"]
    assert edits[0].range.start == edits[0].range.end