"""The catalog store: books and history, kept in sync with persistent storage."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime

import structlog

from .categories import CategorySet
from .images import placeholder_image_data_url
from .models import Book, BookStatus, HistoryAction, HistoryEntry
from .storage import Persistence

log = structlog.get_logger()

BOOKS_KEY = "booklib_books_v1"
HISTORY_KEY = "booklib_history_v1"


def seed_books() -> list[Book]:
    """The sample catalog used when nothing usable is stored."""
    return [
        Book(1, "Atomic Habits", "James Clear", "Self-help", BookStatus.AVAILABLE,
             "https://m.media-amazon.com/images/I/91bYsX41DVL.jpg"),
        Book(2, "The Pragmatic Programmer", "Andrew Hunt", "Programming", BookStatus.AVAILABLE,
             "https://m.media-amazon.com/images/I/81Apz7r0w-L.jpg"),
        Book(3, "Clean Code", "Robert C. Martin", "Programming", BookStatus.BORROWED,
             "https://m.media-amazon.com/images/I/41xShlnTZTL.jpg"),
        Book(4, "1984", "George Orwell", "Fiction", BookStatus.AVAILABLE,
             "https://m.media-amazon.com/images/I/71kxa1-0mfL.jpg"),
    ]


def format_timestamp(moment: datetime) -> str:
    """Format like an en-US locale string, e.g. ``10/17/2026, 3:04:05 PM``."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{moment.month}/{moment.day}/{moment.year}, "
        f"{hour}:{moment.minute:02d}:{moment.second:02d} {meridiem}"
    )


class ValidationError(ValueError):
    """A book was submitted without a title, author or category."""


class Store:
    """Owns the catalog and the history log.

    Every mutation writes both collections through ``persistence`` before it
    returns. Writes are best-effort: if one fails, the in-memory collections
    remain the source of truth for the rest of the session.
    """

    def __init__(self, persistence: Persistence, now: Callable[[], datetime] = datetime.now) -> None:
        self.persistence = persistence
        self.now = now
        self.books: list[Book] = []
        self.history: list[HistoryEntry] = []
        self.categories = CategorySet()
        self._last_id = 0

    def initialize(self) -> None:
        self.books = self._load_books()
        self.history = self._load_history()
        self.categories = CategorySet(book.category for book in self.books)
        self._last_id = max((book.id for book in self.books), default=0)
        log.info("store_initialized", books=len(self.books), history=len(self.history))

    def _load_books(self) -> list[Book]:
        raw = self.persistence.load(BOOKS_KEY)
        if raw is None:
            return seed_books()
        try:
            if not isinstance(raw, list):
                raise TypeError(f"stored books must be a list, got {type(raw).__name__}")
            return [Book.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as exc:
            self.persistence.report_failure("load", BOOKS_KEY, exc)
            return seed_books()

    def _load_history(self) -> list[HistoryEntry]:
        raw = self.persistence.load(HISTORY_KEY)
        if raw is None:
            return []
        try:
            if not isinstance(raw, list):
                raise TypeError(f"stored history must be a list, got {type(raw).__name__}")
            return [HistoryEntry.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as exc:
            self.persistence.report_failure("load", HISTORY_KEY, exc)
            return []

    def _next_id(self) -> int:
        # Millisecond timestamps, bumped past anything already issued.
        self._last_id = max(time.time_ns() // 1_000_000, self._last_id + 1)
        return self._last_id

    def save(self) -> None:
        self.persistence.save(BOOKS_KEY, [book.to_dict() for book in self.books])
        self.persistence.save(HISTORY_KEY, [entry.to_dict() for entry in self.history])

    def find_book(self, book_id: int) -> Book | None:
        for book in self.books:
            if book.id == book_id:
                return book
        return None

    def add_book(self, title: str, author: str, category: str, image: str | None = None) -> Book:
        title = (title or "").strip()
        author = (author or "").strip()
        category = (category or "").strip()
        image = (image or "").strip()
        if not title or not author or not category:
            raise ValidationError("Title, author and category are required.")

        book = Book(
            id=self._next_id(),
            title=title,
            author=author,
            category=category,
            status=BookStatus.AVAILABLE,
            image=image or placeholder_image_data_url(),
        )
        self.books.insert(0, book)
        if self.categories.add(category):
            log.info("category_registered", category=category)
        self.save()
        log.info("book_added", book_id=book.id, title=book.title)
        return book

    def toggle_borrow(self, book_id: int) -> Book | None:
        book = self.find_book(book_id)
        if book is None:
            log.debug("toggle_unknown_book", book_id=book_id)
            return None

        if book.status is BookStatus.AVAILABLE:
            book.status = BookStatus.BORROWED
            action = HistoryAction.BORROWED
        else:
            book.status = BookStatus.AVAILABLE
            action = HistoryAction.RETURNED
        self.history.insert(
            0, HistoryEntry(action=action, title=book.title, date=format_timestamp(self.now()))
        )
        self.save()
        log.info("book_toggled", book_id=book.id, action=action.value)
        return book

    def close(self) -> None:
        self.persistence.medium.close()
