"""Project catalog and history state into display views."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .categories import ALL_CATEGORIES
from .images import cover_or_placeholder, placeholder_image_data_url
from .models import Book, BookStatus, HistoryEntry

NO_BOOKS_MESSAGE = "No books found."
NO_HISTORY_MESSAGE = "No history yet."


@dataclass
class BookCard:
    id: int
    image: str
    fallback_image: str
    title: str
    author: str
    category: str
    status: str
    status_class: str
    action_label: str


@dataclass
class CatalogView:
    cards: list[BookCard] = field(default_factory=list)
    empty_message: str | None = None


@dataclass
class HistoryView:
    lines: list[str] = field(default_factory=list)
    empty_message: str | None = None


def matches(book: Book, query: str, category: str) -> bool:
    """Check a book against an already-normalized query and category."""
    matches_query = not query or query in book.title.lower() or query in book.author.lower()
    matches_category = category == ALL_CATEGORIES or book.category == category
    return matches_query and matches_category


def _card(book: Book) -> BookCard:
    available = book.status is BookStatus.AVAILABLE
    return BookCard(
        id=book.id,
        image=cover_or_placeholder(book.image),
        fallback_image=placeholder_image_data_url(),
        title=book.title,
        author=book.author,
        category=book.category,
        status=book.status.value,
        status_class="available" if available else "borrowed",
        action_label="Borrow" if available else "Return",
    )


def render_catalog(books: Sequence[Book], query: str = "", category: str = ALL_CATEGORIES) -> CatalogView:
    """Filter books by search text and category, keeping collection order.

    The query matches case-insensitively against title or author.
    """
    query = (query or "").strip().lower()
    category = category or ALL_CATEGORIES
    cards = [_card(book) for book in books if matches(book, query, category)]
    if not cards:
        return CatalogView(cards=[], empty_message=NO_BOOKS_MESSAGE)
    return CatalogView(cards=cards)


def format_history_line(entry: HistoryEntry) -> str:
    return f"{entry.date} → {entry.action.value}: {entry.title}"


def render_history(history: Sequence[HistoryEntry]) -> HistoryView:
    if not history:
        return HistoryView(lines=[], empty_message=NO_HISTORY_MESSAGE)
    return HistoryView(lines=[format_history_line(entry) for entry in history])
