"""Row ordering heap and k-way merge of sorted row streams."""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .base import DataType
from .registry import compare_rows

T = TypeVar("T")
Row = Mapping[str, DataType]
_EXHAUSTED = object()


@dataclass
class HeapItem(Generic[T]):
    """A row used as the sort key, with a payload that travels with it."""

    key: Row
    val: T


class _Entry:
    __slots__ = ("item", "keys", "seq")

    def __init__(self, item: HeapItem[Any], keys: Sequence[str], seq: int) -> None:
        self.item = item
        self.keys = keys
        self.seq = seq

    def __lt__(self, other: _Entry) -> bool:
        result = compare_rows(self.item.key, other.item.key, self.keys)
        if result:
            return result < 0
        return self.seq < other.seq


class RowHeap(Generic[T]):
    """Min-heap of items ordered by their rows over the given key columns."""

    def __init__(self, keys: Sequence[str]) -> None:
        self.keys = list(keys)
        self._entries: list[_Entry] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, item: HeapItem[T]) -> None:
        heapq.heappush(self._entries, _Entry(item, self.keys, next(self._counter)))

    def pop(self) -> HeapItem[T]:
        if not self._entries:
            raise IndexError("pop from empty heap")
        return heapq.heappop(self._entries).item


def merge_sorted(
    sources: Mapping[Any, Iterable[Row]] | Iterable[Iterable[Row]],
    keys: Sequence[str],
) -> Iterator[Row]:
    """Merge streams already sorted by ``keys`` into one sorted stream.

    Closing the generator early closes every source that is still open.
    """
    named = sources.items() if isinstance(sources, Mapping) else enumerate(sources)
    iterators = {name: iter(source) for name, source in named}
    heap: RowHeap[Any] = RowHeap(keys)
    try:
        for name, iterator in list(iterators.items()):
            row = next(iterator, _EXHAUSTED)
            if row is _EXHAUSTED:
                del iterators[name]
            else:
                heap.push(HeapItem(row, name))

        while heap:
            item = heap.pop()
            yield item.key
            row = next(iterators[item.val], _EXHAUSTED)
            if row is _EXHAUSTED:
                del iterators[item.val]
            else:
                heap.push(HeapItem(row, item.val))
    finally:
        for iterator in iterators.values():
            close = getattr(iterator, "close", None)
            if close is not None:
                close()