"""Data models for the book catalog and its history log."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum


class BookStatus(str, Enum):
    AVAILABLE = "Available"
    BORROWED = "Borrowed"


class HistoryAction(str, Enum):
    BORROWED = "Borrowed"
    RETURNED = "Returned"


@dataclass
class Book:
    id: int
    title: str
    author: str
    category: str
    status: BookStatus = BookStatus.AVAILABLE
    image: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Book:
        """Build a Book from its stored form.

        Raises KeyError, TypeError or ValueError when the record is malformed.
        """
        if not isinstance(data, dict):
            raise TypeError(f"book record must be an object, got {type(data).__name__}")
        book_id = data["id"]
        if isinstance(book_id, bool) or not isinstance(book_id, int):
            raise TypeError(f"book id must be an integer, got {book_id!r}")
        fields = {}
        for name in ("title", "author", "category"):
            value = data[name]
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"book {name} must be a non-empty string")
            fields[name] = value
        image = data.get("image")
        if image is not None and not isinstance(image, str):
            raise TypeError("book image must be a string")
        return cls(
            id=book_id,
            status=BookStatus(data["status"]),
            image=image,
            **fields,
        )


@dataclass(frozen=True)
class HistoryEntry:
    action: HistoryAction
    title: str
    date: str

    def to_dict(self) -> dict:
        return {"action": self.action.value, "title": self.title, "date": self.date}

    @classmethod
    def from_dict(cls, data: dict) -> HistoryEntry:
        if not isinstance(data, dict):
            raise TypeError(f"history record must be an object, got {type(data).__name__}")
        title, date = data["title"], data["date"]
        if not isinstance(title, str) or not isinstance(date, str):
            raise TypeError("history title and date must be strings")
        return cls(action=HistoryAction(data["action"]), title=title, date=date)
