"""Tests for the web API."""
import pytest
from fastapi.testclient import TestClient

from booklib.core.storage import KeyValueStorage
from booklib.web.app import create_app


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "app.db"


@pytest.fixture
def client(db_path):
    app = create_app(lambda: KeyValueStorage(db_path))
    with TestClient(app) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["books"] == 4
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_index_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "addBookForm" in resp.text


def test_initial_state(client):
    data = client.get("/api/state").json()
    assert len(data["catalog"]["cards"]) == 4
    assert data["history"]["empty_message"] == "No history yet."
    assert data["filters"] == {"query": "", "category": "All"}


def test_search_and_clear(client):
    data = client.post("/api/search", json={"query": "ORWELL"}).json()
    assert [c["title"] for c in data["catalog"]["cards"]] == ["1984"]

    data = client.post("/api/category", json={"category": "Programming"}).json()
    assert data["catalog"]["empty_message"] == "No books found."

    data = client.post("/api/filters/clear").json()
    assert len(data["catalog"]["cards"]) == 4


def test_state_reports_active_filters(client):
    client.post("/api/search", json={"query": "orwell"})
    client.post("/api/category", json={"category": "Fiction"})

    data = client.get("/api/state").json()
    assert data["filters"] == {"query": "orwell", "category": "Fiction"}
    assert [c["title"] for c in data["catalog"]["cards"]] == ["1984"]


def test_add_book(client):
    resp = client.post(
        "/api/books",
        json={"title": "Dune", "author": "Frank Herbert", "category": "Sci-Fi", "image": ""},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["reset_form"] is True
    assert data["catalog"]["cards"][0]["title"] == "Dune"
    assert data["catalog"]["cards"][0]["status"] == "Available"
    assert "Sci-Fi" in data["categories"]


def test_add_book_validation_error(client):
    resp = client.post("/api/books", json={"title": "", "author": "Author", "category": "Cat"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Please fill Title, Author and Category."}
    assert len(client.get("/api/state").json()["catalog"]["cards"]) == 4


def test_malformed_body_counts_as_empty(client):
    resp = client.post(
        "/api/books", content=b"{broken", headers={"content-type": "application/json"}
    )
    assert resp.status_code == 400


def test_oversized_body_rejected(client):
    resp = client.post("/api/search", json={"query": "x" * 60_000})
    assert resp.status_code == 413


def test_toggle_and_history(client):
    data = client.post("/api/books/1/toggle").json()
    atomic = next(c for c in data["catalog"]["cards"] if c["id"] == 1)
    assert atomic["action_label"] == "Return"
    assert data["history"]["lines"][0].endswith("→ Borrowed: Atomic Habits")


def test_toggle_unknown_book(client):
    resp = client.post("/api/books/999/toggle")
    assert resp.status_code == 200
    assert resp.json()["history"]["empty_message"] == "No history yet."


def test_state_persists_across_restarts(db_path):
    app = create_app(lambda: KeyValueStorage(db_path))
    with TestClient(app) as c:
        c.post("/api/books", json={"title": "Dune", "author": "Frank Herbert", "category": "Fiction"})
        c.post("/api/books/2/toggle")

    app = create_app(lambda: KeyValueStorage(db_path))
    with TestClient(app) as c:
        data = c.get("/api/state").json()
    assert data["catalog"]["cards"][0]["title"] == "Dune"
    assert len(data["catalog"]["cards"]) == 5
    assert data["history"]["lines"][0].endswith("→ Borrowed: The Pragmatic Programmer")
