from typing import Iterable, Iterator, List, Set


class OrderedTokenSet:
    """Insertion-ordered set of strings.

    Used for CSP source lists and origin sets so that policies serialize the
    same way for the same input regardless of hash seeding. Equality is
    order-sensitive because source order is visible in the serialized
    policy; ResourceManifest compares its origin sets by membership.
    """

    def __init__(self, items: Iterable[str] = ()):
        self._items: List[str] = []
        self._index: Set[str] = set()
        self.update(items)

    def add(self, item: str) -> bool:
        """Add item if unseen. Returns True when it was added."""
        if item in self._index:
            return False
        self._index.add(item)
        self._items.append(item)
        return True

    def update(self, items: Iterable[str]) -> None:
        for item in items:
            self.add(item)

    def as_list(self) -> List[str]:
        return list(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedTokenSet):
            return self._items == other._items
        return NotImplemented

    def __repr__(self) -> str:
        return f"OrderedTokenSet({self._items!r})"
