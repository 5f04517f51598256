"""
Tests for the FastAPI application.
"""

from datetime import date

from fastapi.testclient import TestClient

from api.config import APIConfig
from api.main import create_app

BOOKS_URL = "/api/v1/book"


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database_status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert "timestamp" in data


def test_list_books_empty(client):
    """Test listing books with an empty store."""
    response = client.get(BOOKS_URL)
    assert response.status_code == 200
    assert response.json() == []


def test_create_book(client, sample_book_json):
    """Test creating a book returns 201 with wire field names."""
    response = client.post(BOOKS_URL, json=sample_book_json)
    assert response.status_code == 201
    data = response.json()
    assert isinstance(data["id"], int)
    assert data["title"] == "Rajesh assignment"
    assert data["author"] == "Rajesh"
    assert data["numberOfPages"] == 1
    assert data["publishedDate"] is None


def test_list_books(client, sample_book_json):
    """Test listing returns created books."""
    client.post(BOOKS_URL, json=sample_book_json)

    response = client.get(BOOKS_URL)
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["title"] == "Rajesh assignment"
    assert data[0]["author"] == "Rajesh"
    assert data[0]["numberOfPages"] == 1


def test_get_book_by_id(client, sample_book_json):
    """Test fetching a book by id."""
    book_id = client.post(BOOKS_URL, json=sample_book_json).json()["id"]

    response = client.get(f"{BOOKS_URL}/{book_id}")
    assert response.status_code == 200
    assert response.json()["title"] == "Rajesh assignment"


def test_book_not_found(client):
    """Test fetching an unknown book."""
    response = client.get(f"{BOOKS_URL}/10")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found", "detail": "Book not found id : 10"}


def test_create_book_duplicate_title(client, sample_book_json):
    """Test creating the same title twice."""
    client.post(BOOKS_URL, json=sample_book_json)

    response = client.post(BOOKS_URL, json=sample_book_json)
    assert response.status_code == 409
    assert response.json() == {"message": "Book with title Rajesh assignment already exists"}


def test_create_book_empty_author(client):
    """Test creating a book with an empty author."""
    response = client.post(BOOKS_URL, json={"title": "Rajesh assignment", "author": "", "numberOfPages": 1})
    assert response.status_code == 400
    assert response.json() == {"message": "Adding Book input is not valid"}


def test_create_book_missing_title(client):
    """Test creating a book without a title."""
    response = client.post(BOOKS_URL, json={"author": "Rajesh"})
    assert response.status_code == 400
    assert response.json()["message"] == "Adding Book input is not valid"


def test_create_book_malformed_body(client):
    """Test wrongly typed fields are reported per field."""
    response = client.post(BOOKS_URL, json={"title": "T", "author": "A", "numberOfPages": "many"})
    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Invalid Request"
    assert any("numberOfPages" in detail for detail in data["details"])


def test_non_integer_id(client):
    """Test a non-numeric path id is rejected."""
    response = client.get(f"{BOOKS_URL}/abc")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid Request"


def test_update_existing_book(client, sample_book_json):
    """Test updating an existing book."""
    book_id = client.post(BOOKS_URL, json=sample_book_json).json()["id"]

    response = client.put(
        f"{BOOKS_URL}/{book_id}",
        json={"title": "Rajesh updated test", "author": "Rajesh", "numberOfPages": 10}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == book_id
    assert data["title"] == "Rajesh updated test"
    assert data["numberOfPages"] == 10
    assert data["publishedDate"] == date.today().isoformat()


def test_update_missing_book_creates_it(client, sample_book_json):
    """Test updating an unknown id creates a new book."""
    response = client.put(f"{BOOKS_URL}/1000", json=sample_book_json)
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Rajesh assignment"
    assert data["author"] == "Rajesh"
    assert data["numberOfPages"] == 1

    listed = client.get(BOOKS_URL).json()
    assert [book["id"] for book in listed] == [data["id"]]


def test_delete_book(client, sample_book_json):
    """Test deleting a book, then fetching it."""
    book_id = client.post(BOOKS_URL, json=sample_book_json).json()["id"]

    response = client.delete(f"{BOOKS_URL}/{book_id}")
    assert response.status_code == 204
    assert response.content == b""

    response = client.get(f"{BOOKS_URL}/{book_id}")
    assert response.status_code == 404


def test_delete_missing_book(client):
    """Test deleting an unknown book."""
    response = client.delete(f"{BOOKS_URL}/1")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found", "detail": "Book id not found for delete : 1"}


def test_unknown_route(client):
    """Test unknown paths use the error body shape."""
    response = client.get("/api/v1/unknown")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


def test_book_lifecycle(client):
    """Test the create, conflict, miss, and delete scenario end to end."""
    created = client.post(BOOKS_URL, json={"title": "X", "author": "Y", "numberOfPages": 1})
    assert created.status_code == 201
    book_id = created.json()["id"]

    assert client.post(BOOKS_URL, json={"title": "X", "author": "Y", "numberOfPages": 1}).status_code == 409

    missing = client.get(f"{BOOKS_URL}/{book_id + 100}")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Not Found"

    assert client.delete(f"{BOOKS_URL}/{book_id + 100}").status_code == 404
    assert client.delete(f"{BOOKS_URL}/{book_id}").status_code == 204
    assert client.get(f"{BOOKS_URL}/{book_id}").status_code == 404


def test_unhandled_error_returns_500(database_url, monkeypatch):
    """Test unexpected failures are reported as internal errors."""
    from api.service import BookService

    async def broken_list(self):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(BookService, "list", broken_list)
    app = create_app(APIConfig(database_url=database_url, log_format="console"))

    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.get(BOOKS_URL)

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


def test_openapi_metadata(client):
    """Test the generated API documentation."""
    schema = client.get("/openapi.json").json()
    assert schema["info"]["title"] == "Service Creation Documentation"
    assert schema["info"]["version"] == "1.0.0"
    assert "/api/v1/book/{book_id}" in schema["paths"]


def test_out_of_range_id_rejected(client, sample_book_json):
    """Test ids beyond the 64-bit storage range are rejected before reaching the store."""
    huge_id = 10**20

    for method in ("get", "delete"):
        response = getattr(client, method)(f"{BOOKS_URL}/{huge_id}")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid Request"

    response = client.put(f"{BOOKS_URL}/{huge_id}", json=sample_book_json)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid Request"
    assert client.get(BOOKS_URL).json() == []


def test_largest_id_is_a_miss(client):
    """Test the largest storable id is looked up normally."""
    response = client.get(f"{BOOKS_URL}/{2**63 - 1}")
    assert response.status_code == 404
    assert response.json()["message"] == "Not Found"


def test_out_of_range_pages_rejected(client):
    """Test page counts beyond the 32-bit range are rejected on create and update."""
    payload = {"title": "T", "author": "A", "numberOfPages": 10**20}

    response = client.post(BOOKS_URL, json=payload)
    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Invalid Request"
    assert any("numberOfPages" in detail for detail in data["details"])

    assert client.put(f"{BOOKS_URL}/1", json=payload).status_code == 400
    assert client.get(BOOKS_URL).json() == []
