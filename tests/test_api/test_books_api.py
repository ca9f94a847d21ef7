"""HTTP-level tests for the /books routes and the response envelope."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from apps.api.core.auth import ALGORITHM
from apps.api.core.config import settings

MISSING_ID = "9b2e4f6a-1c3d-4e5f-8a7b-0c1d2e3f4a5b"


def _book_payload(**overrides):
    payload = {
        "title": "Dune",
        "description": "A desert planet and its spice.",
        "format": "PAPERBACK",
        "price": 10.99,
        "coverImageUrl": "https://covers.example.com/dune.jpg",
    }
    payload.update(overrides)
    return payload


def _create(client, headers, **overrides):
    response = client.post("/books", json=_book_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestAuthGuards:
    def test_missing_token(self, client):
        response = client.get("/books")
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"
        assert body["error"]["message"] == "No authorization token provided"

    def test_invalid_token(self, client):
        response = client.get("/books", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"

    def test_expired_token(self, client):
        token = jwt.encode(
            {
                "sub": "admin-1",
                "role": "admin",
                "exp": datetime.now(timezone.utc) - timedelta(minutes=5),
            },
            settings.JWT_SECRET,
            algorithm=ALGORITHM,
        )
        response = client.get("/books", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Token has expired"

    def test_non_admin_forbidden(self, client, user_headers):
        response = client.post("/books", json=_book_payload(), headers=user_headers)
        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "FORBIDDEN"
        assert error["message"] == "Access denied. Required role: admin"


class TestCreateBook:
    def test_created(self, client, admin_headers):
        response = client.post("/books", json=_book_payload(isbn13="9780441172719"), headers=admin_headers)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Book created successfully"
        book = body["data"]
        assert book["title"] == "Dune"
        assert book["isbn13"] == "9780441172719"
        assert book["price"] == pytest.approx(10.99)
        assert book["language"] == "en"
        assert book["stockQuantity"] == 0
        assert book["isActive"] is True
        assert book["authors"] == []
        assert book["categories"] == []

    def test_short_isbn13_rejected(self, client, admin_headers):
        response = client.post("/books", json=_book_payload(isbn13="123"), headers=admin_headers)
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["errors"] == [{"field": "isbn13", "message": "Invalid ISBN-13 format", "value": "123"}]

        listing = client.get("/books", headers=admin_headers).json()["data"]
        assert listing["pagination"]["total"] == 0

    def test_missing_fields_reported_together(self, client, admin_headers):
        response = client.post("/books", json={"title": "Only a title"}, headers=admin_headers)
        assert response.status_code == 400
        fields = [e["field"] for e in response.json()["error"]["errors"]]
        assert fields == ["description", "format", "price", "coverImageUrl"]

    @pytest.mark.parametrize(
        "field, value",
        [("price", 1e30), ("discountPrice", 1e30), ("pageCount", 10**20), ("stockQuantity", 2**31)],
    )
    def test_out_of_range_numbers_rejected(self, client, admin_headers, field, value):
        response = client.post("/books", json=_book_payload(**{field: value}), headers=admin_headers)
        assert response.status_code == 400
        errors = response.json()["error"]["errors"]
        assert [e["field"] for e in errors] == [field]

    def test_price_with_too_many_decimals_rejected(self, client, admin_headers):
        response = client.post("/books", json=_book_payload(price="9.999"), headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"]["errors"][0]["field"] == "price"

    def test_title_stored_as_sent(self, client, admin_headers):
        book = _create(client, admin_headers, title="  Dune ")
        assert book["title"] == "  Dune "

    def test_non_object_body(self, client, admin_headers):
        response = client.post("/books", json=[1, 2, 3], headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_duplicate_isbn(self, client, admin_headers):
        _create(client, admin_headers, isbn="0441172717")
        response = client.post(
            "/books", json=_book_payload(title="Dune again", isbn="0441172717"), headers=admin_headers,
        )
        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "CONFLICT"
        assert error["message"] == "A book with this ISBN already exists"

    def test_with_authors_and_categories(self, client, admin_headers):
        author = client.post("/authors", json={"name": "Frank Herbert"}, headers=admin_headers).json()["data"]
        category = client.post("/categories", json={"name": "Science Fiction"}, headers=admin_headers).json()["data"]

        book = _create(client, admin_headers, authorIds=[author["id"]], categoryIds=[category["id"]])

        assert book["authors"] == [{"id": author["id"], "name": "Frank Herbert", "order": 1}]
        assert book["categories"] == [
            {"id": category["id"], "name": "Science Fiction", "slug": "science-fiction", "isPrimary": True}
        ]

    def test_unknown_author(self, client, admin_headers):
        response = client.post("/books", json=_book_payload(authorIds=[MISSING_ID]), headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"]["errors"][0]["field"] == "authorIds"


class TestReadBooks:
    def test_get_by_id(self, client, admin_headers):
        created = _create(client, admin_headers)
        response = client.get(f"/books/{created['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Book retrieved successfully"
        assert response.json()["data"] == created

    def test_not_found(self, client, admin_headers):
        response = client.get(f"/books/{MISSING_ID}", headers=admin_headers)
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "NOT_FOUND"
        assert error["message"] == f"Book with identifier '{MISSING_ID}' not found"

    def test_malformed_id(self, client, admin_headers):
        response = client.get("/books/not-a-uuid", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"]["errors"][0]["field"] == "book_id"

    def test_list_with_filters_and_pagination(self, client, admin_headers):
        for i in range(3):
            _create(client, admin_headers, title=f"Dune {i}", format="EBOOK")
        _create(client, admin_headers, title="Emma", isFeatured=True)

        response = client.get(
            "/books", params={"search": "DUNE", "format": "EBOOK", "limit": 2}, headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["books"]) == 2
        assert data["pagination"] == {
            "page": 1,
            "limit": 2,
            "total": 3,
            "totalPages": 2,
            "hasNext": True,
            "hasPrev": False,
        }

        featured = client.get("/books", params={"isFeatured": "true"}, headers=admin_headers).json()["data"]
        assert [b["title"] for b in featured["books"]] == ["Emma"]

    def test_list_rejects_bad_query(self, client, admin_headers):
        response = client.get("/books", params={"limit": 500, "isActive": "maybe"}, headers=admin_headers)
        assert response.status_code == 400
        fields = [e["field"] for e in response.json()["error"]["errors"]]
        assert fields == ["limit", "isActive"]


class TestUpdateBook:
    def test_partial_update(self, client, admin_headers):
        created = _create(client, admin_headers)
        response = client.put(f"/books/{created['id']}", json={"stockQuantity": 7}, headers=admin_headers)
        assert response.status_code == 200
        updated = response.json()["data"]
        assert response.json()["message"] == "Book updated successfully"
        assert updated["stockQuantity"] == 7
        assert updated["title"] == created["title"]
        assert updated["price"] == created["price"]

    def test_update_missing(self, client, admin_headers):
        response = client.put(f"/books/{MISSING_ID}", json={"title": "X"}, headers=admin_headers)
        assert response.status_code == 404

    def test_update_invalid_field(self, client, admin_headers):
        created = _create(client, admin_headers)
        response = client.put(f"/books/{created['id']}", json={"price": -3}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"]["errors"][0] == {
            "field": "price",
            "message": "Input should be greater than 0",
            "value": -3,
        }


class TestDeleteBook:
    def test_delete_twice(self, client, admin_headers):
        created = _create(client, admin_headers)
        first = client.delete(f"/books/{created['id']}", headers=admin_headers)
        assert first.status_code == 200
        assert first.json() == {"success": True, "data": None, "message": "Book deleted successfully"}

        second = client.delete(f"/books/{created['id']}", headers=admin_headers)
        assert second.status_code == 404


class TestRequestId:
    def test_echoes_header(self, client, admin_headers):
        response = client.get(f"/books/{MISSING_ID}", headers={**admin_headers, "x-request-id": "req-42"})
        assert response.headers["x-request-id"] == "req-42"
        assert response.json()["error"]["requestId"] == "req-42"

    def test_generates_header(self, client):
        response = client.get("/health")
        assert response.headers["x-request-id"]
        assert response.json()["data"]["status"] == "healthy"
