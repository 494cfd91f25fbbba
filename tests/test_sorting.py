import itertools

import pytest

from dbmscore.numeric import IntegerMeta
from dbmscore.sorting import HeapItem, RowHeap, merge_sorted


def _row(**values):
    meta = IntegerMeta(signed=False, byte_size=4)
    return {name: meta.copy().new_value().set(n) for name, n in values.items()}


def _values(rows, *names):
    return [tuple(row[name].value() for name in names) for row in rows]


def _closing_source(values, closed):
    try:
        for value in values:
            yield _row(a=value)
    finally:
        closed.append(values)


def test_row_heap_pops_in_key_order():
    heap = RowHeap(["a"])
    for n in (5, 1, 3):
        heap.push(HeapItem(_row(a=n), n))
    assert len(heap) == 3
    assert [heap.pop().val for _ in range(3)] == sorted((5, 1, 3))
    assert len(heap) == 0


def test_row_heap_pop_empty_raises():
    with pytest.raises(IndexError):
        RowHeap(["a"]).pop()


def test_row_heap_ties_keep_push_order():
    heap = RowHeap([])
    for label in ("first", "second", "third"):
        heap.push(HeapItem(_row(a=1), label))
    assert [heap.pop().val for _ in range(3)] == ["first", "second", "third"]


def test_row_heap_orders_by_several_keys():
    heap = RowHeap(["a", "b"])
    pairs = [(1, 2), (1, 1), (0, 9)]
    for a, b in pairs:
        heap.push(HeapItem(_row(a=a, b=b), (a, b)))
    assert [heap.pop().val for _ in pairs] == sorted(pairs)


def test_merge_sorted_interleaves_sources():
    sources = {
        "x": [_row(a=n) for n in (1, 4, 7)],
        "y": [_row(a=n) for n in (2, 5)],
        "z": [],
    }
    merged = _values(merge_sorted(sources, ["a"]), "a")
    assert merged == sorted((n,) for n in (1, 4, 7, 2, 5))


def test_merge_sorted_accepts_plain_sequences():
    sources = [[_row(a=n) for n in (3, 6)], [_row(a=n) for n in (1, 8)]]
    merged = _values(merge_sorted(sources, ["a"]), "a")
    assert merged == sorted((n,) for n in (3, 6, 1, 8))


def test_merge_sorted_multi_key():
    first = [_row(a=1, b=1), _row(a=2, b=0)]
    second = [_row(a=1, b=3), _row(a=2, b=5)]
    merged = _values(merge_sorted({"p": first, "q": second}, ["a", "b"]), "a", "b")
    assert merged == sorted(_values(first + second, "a", "b"))


def test_merge_sorted_closes_sources_when_stopped_early():
    closed = []
    sources = {
        "p": _closing_source((1, 3), closed),
        "q": _closing_source((2, 4), closed),
    }
    merged = merge_sorted(sources, ["a"])
    taken = _values(itertools.islice(merged, 2), "a")
    assert taken == [(1,), (2,)]
    merged.close()
    assert len(closed) == 2


def test_merge_sorted_of_nothing_is_empty():
    assert list(merge_sorted({}, ["a"])) == []