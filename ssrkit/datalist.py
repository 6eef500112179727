"""Ordered collection with match-based lookup and selection sort."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator

Match = Callable[[Any, Any], Any]


class DataList:
    """An ordered list of items with predicate-driven search and removal."""

    def __init__(self, items: Iterable[Any] | None = None) -> None:
        self._items: list[Any] = list(items) if items is not None else []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"DataList({self._items!r})"

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError(f"index {index} out of range for list of size {len(self._items)}")

    def add_back(self, data: Any) -> None:
        """Append an item at the end."""
        self._items.append(data)

    def add_front(self, data: Any) -> None:
        """Insert an item at the start."""
        self._items.insert(0, data)

    def delete_node(self, data: Any, match: Match) -> bool:
        """Remove the first item for which ``match(item, data)`` is true."""
        for position, item in enumerate(self._items):
            if match(item, data):
                del self._items[position]
                return True
        return False

    def delete_at(self, index: int) -> None:
        """Remove the item at ``index``; raises IndexError when out of range."""
        self._check_index(index)
        del self._items[index]

    def modify_at(self, index: int, data: Any) -> None:
        """Replace the item at ``index``; raises IndexError when out of range."""
        self._check_index(index)
        self._items[index] = data

    def have_same(self, data: Any, match: Match) -> bool:
        """Tell whether any item satisfies ``match(item, data)``."""
        return any(match(item, data) for item in self._items)

    def have_different(self, data: Any) -> bool:
        """Tell whether any item differs from ``data``."""
        return any(item != data for item in self._items)

    def foreach(self, action: Callable[[Any], Any]) -> None:
        """Call ``action`` on every item in order."""
        for item in self._items:
            action(item)

    def sort(self, greater: Match) -> None:
        """Selection-sort in place; ``greater(a, b)`` is true when ``a`` goes after ``b``."""
        items = self._items
        for start in range(len(items)):
            smallest = start
            for candidate in range(start + 1, len(items)):
                if greater(items[smallest], items[candidate]):
                    smallest = candidate
            if smallest != start:
                items[start], items[smallest] = items[smallest], items[start]

    def clear(self) -> None:
        """Remove every item."""
        self._items.clear()