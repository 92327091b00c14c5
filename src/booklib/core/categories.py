"""The set of categories a catalog can be filtered by."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

ALL_CATEGORIES = "All"


class CategorySet:
    """Ordered, de-duplicated category names.

    Grows as books with new categories are added. ``ALL_CATEGORIES`` is a
    filter value, never a member.
    """

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._names: dict[str, None] = {}
        for name in initial:
            self.add(name)

    def add(self, name: str) -> bool:
        """Register a category. Returns True if it was not known before."""
        name = (name or "").strip()
        if not name or name == ALL_CATEGORIES or name in self._names:
            return False
        self._names[name] = None
        return True

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def as_list(self) -> list[str]:
        return list(self._names)
