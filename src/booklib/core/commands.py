"""User-facing commands: each mutates the store (if at all) and re-renders."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from .categories import ALL_CATEGORIES
from .render import CatalogView, HistoryView, render_catalog, render_history
from .store import Store, ValidationError

log = structlog.get_logger()

MISSING_FIELDS_MESSAGE = "Please fill Title, Author and Category."


@dataclass
class FilterState:
    query: str = ""
    category: str = ALL_CATEGORIES


@dataclass
class SubmitResult:
    catalog: CatalogView
    categories: list[str]
    reset_form: bool = False
    error: str | None = None


@dataclass
class ToggleResult:
    catalog: CatalogView
    history: HistoryView


@dataclass
class Snapshot:
    catalog: CatalogView
    history: HistoryView
    categories: list[str]
    filters: FilterState = field(default_factory=FilterState)


class Bookshelf:
    """Command handlers over a Store plus the active search/category filter."""

    def __init__(self, store: Store) -> None:
        self.store = store
        self.filters = FilterState()

    def catalog(self) -> CatalogView:
        return render_catalog(self.store.books, self.filters.query, self.filters.category)

    def history(self) -> HistoryView:
        return render_history(self.store.history)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            catalog=self.catalog(),
            history=self.history(),
            categories=self.store.categories.as_list(),
            filters=FilterState(self.filters.query, self.filters.category),
        )

    def search(self, query: str) -> CatalogView:
        self.filters.query = query or ""
        return self.catalog()

    def select_category(self, category: str) -> CatalogView:
        self.filters.category = category or ALL_CATEGORIES
        return self.catalog()

    def clear_filters(self) -> CatalogView:
        self.filters = FilterState()
        return self.catalog()

    def submit_book(self, title: str, author: str, category: str, image: str = "") -> SubmitResult:
        try:
            self.store.add_book(title, author, category, image or None)
        except ValidationError as exc:
            log.info("book_rejected", reason=str(exc))
            return SubmitResult(
                catalog=self.catalog(),
                categories=self.store.categories.as_list(),
                error=MISSING_FIELDS_MESSAGE,
            )
        return SubmitResult(
            catalog=self.catalog(),
            categories=self.store.categories.as_list(),
            reset_form=True,
        )

    def toggle(self, book_id: int) -> ToggleResult:
        self.store.toggle_borrow(book_id)
        return ToggleResult(catalog=self.catalog(), history=self.history())
