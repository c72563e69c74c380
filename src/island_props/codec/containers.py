"""Map and Set values whose members need not be hashable.

Browser-side ``Map`` keys and ``Set`` members may be records, arrays or
buffers, so both types keep their members in insertion order and compare
them with ``==`` instead of hashing.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, List, Mapping, Sequence, Tuple

import numpy as np


def same_value(left: object, right: object) -> bool:
    if isinstance(left, np.ndarray) or isinstance(right, np.ndarray):
        return (
            isinstance(left, np.ndarray)
            and isinstance(right, np.ndarray)
            and left.dtype == right.dtype
            and np.array_equal(left, right)
        )
    return bool(left == right)


def _same_pair(left: Tuple[Any, Any], right: Tuple[Any, Any]) -> bool:
    return same_value(left[0], right[0]) and same_value(left[1], right[1])


def _unordered_equal(
    left: Sequence[object],
    right: Sequence[object],
    match: Callable[[Any, Any], bool] = same_value,
) -> bool:
    if len(left) != len(right):
        return False
    remaining = list(right)
    for item in left:
        for index, candidate in enumerate(remaining):
            if match(item, candidate):
                del remaining[index]
                break
        else:
            return False
    return True


class PropSet:
    """Insertion-ordered set; members passed to the constructor are kept as given."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, items: Iterable[object] = ()) -> None:
        self._items: List[object] = list(items)

    def add(self, item: object) -> None:
        if item not in self:
            self._items.append(item)

    def discard(self, item: object) -> None:
        for index, candidate in enumerate(self._items):
            if same_value(candidate, item):
                del self._items[index]
                return

    def __contains__(self, item: object) -> bool:
        return any(same_value(candidate, item) for candidate in self._items)

    def __iter__(self) -> Iterator[object]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (PropSet, set, frozenset)):
            return _unordered_equal(self._items, list(other))
        return NotImplemented

    def __repr__(self) -> str:
        return f"PropSet({self._items!r})"


class PropMap:
    """Insertion-ordered mapping keyed by value equality."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, pairs: Iterable[Tuple[object, object]] = ()) -> None:
        self._pairs: List[Tuple[object, object]] = [(key, value) for key, value in pairs]

    def _index(self, key: object) -> int:
        for index, (candidate, _) in enumerate(self._pairs):
            if same_value(candidate, key):
                return index
        return -1

    def __getitem__(self, key: object) -> object:
        index = self._index(key)
        if index < 0:
            raise KeyError(key)
        return self._pairs[index][1]

    def get(self, key: object, default: object = None) -> object:
        index = self._index(key)
        return default if index < 0 else self._pairs[index][1]

    def __setitem__(self, key: object, value: object) -> None:
        index = self._index(key)
        if index < 0:
            self._pairs.append((key, value))
        else:
            self._pairs[index] = (self._pairs[index][0], value)

    def __delitem__(self, key: object) -> None:
        index = self._index(key)
        if index < 0:
            raise KeyError(key)
        del self._pairs[index]

    def __contains__(self, key: object) -> bool:
        return self._index(key) >= 0

    def __iter__(self) -> Iterator[object]:
        return (key for key, _ in self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def keys(self) -> List[object]:
        return [key for key, _ in self._pairs]

    def values(self) -> List[object]:
        return [value for _, value in self._pairs]

    def items(self) -> List[Tuple[object, object]]:
        return list(self._pairs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (PropMap, Mapping)):
            return _unordered_equal(self._pairs, list(other.items()), _same_pair)
        return NotImplemented

    def __repr__(self) -> str:
        return f"PropMap({self._pairs!r})"


__all__ = ["PropMap", "PropSet", "same_value"]
