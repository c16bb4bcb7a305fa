"""
LibraryHub Backend — HTTP Route Tests
=======================================

What:  End-to-end checks through the FastAPI app with httpx, backed by the
       in-memory database from conftest.

What we test:
    ✅ Envelope shape ({message, data}) and camelCase keys
    ✅ Search: 400 on blank query, 200 with [] on no match
    ✅ Cookie-protected routes: 401 without or with a bad cookie
    ✅ Explicit-account routes: 404 for unknown accounts
    ✅ Recommendation lists and /health
    ✅ Error bodies carry the request id header value
"""

from datetime import date, timedelta

import pytest

from libraryhub.config import settings
from libraryhub.security import create_access_token


def session_cookie(token: str) -> dict:
    return {"Cookie": f"{settings.auth_cookie_name}={token}"}


class TestCategoryRoutes:
    @pytest.mark.asyncio
    async def test_tree_envelope(self, test_client, library):
        science = await library.category("Ciencias", icon="flask")
        await library.category("Física", parent=science)

        response = await test_client.get("/api/categories/tree")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "categories handled successfully"
        assert body["data"][0]["name"] == "Ciencias"
        assert body["data"][0]["icon"] == "flask"
        assert body["data"][0]["children"][0]["children"] == []


class TestSearchRoutes:
    @pytest.mark.asyncio
    async def test_missing_query_is_400(self, test_client):
        response = await test_client.get("/api/search")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"] == {"field": "query"}
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_no_match_is_empty_success(self, test_client):
        response = await test_client.get("/api/search", params={"query": "nada"})

        assert response.status_code == 200
        assert response.json() == {"message": "search handled successfully", "data": []}

    @pytest.mark.asyncio
    async def test_hit_uses_camel_case_keys(self, test_client, library):
        science = await library.category("Ciencias")
        book = await library.book("Óptica", categories=[science], edition=2, units_available=0)

        response = await test_client.get("/api/search", params={"query": "ptica"})

        hit = response.json()["data"][0]
        assert hit["bookId"] == book.id
        assert hit["bookEdition"] == "2da"
        assert hit["stockState"] == 0
        assert hit["category"] == "Ciencias"
        assert response.headers["X-Total-Count"] == "1"


class TestStudentRoutes:
    @pytest.mark.asyncio
    async def test_home_without_cookie_is_401(self, test_client):
        response = await test_client.get("/api/home")

        assert response.status_code == 401
        assert response.json()["message"] == "access denied"

    @pytest.mark.asyncio
    async def test_home_with_bad_cookie_is_401(self, test_client):
        response = await test_client.get("/api/home", headers=session_cookie("not-a-jwt"))

        assert response.status_code == 401
        assert response.json()["message"] == "could not authenticate"

    @pytest.mark.asyncio
    async def test_home_with_cookie(self, test_client, library):
        student = await library.user("20240300", first_name="Iris")
        book = await library.book("Geometría")
        today = date.today()
        await library.loan(student, book, today, today + timedelta(days=10))

        response = await test_client.get(
            "/api/home", headers=session_cookie(create_access_token("20240300"))
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "data handled successfully"
        data = body["data"]
        assert data["userName"] == "Iris"
        assert data["loans"][0]["porcentLoan"] == 0.0
        assert data["popularBooks"][0]["bookId"] == book.id
        assert set(data) >= {"recommended", "newBooks", "categoryMostRequested", "degraded"}
        assert response.headers["Cache-Control"] == "private, no-store"

    @pytest.mark.asyncio
    async def test_home_for_unknown_account_is_404(self, test_client):
        response = await test_client.get("/api/students/00000000/home")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_loans_by_account(self, test_client, library):
        student = await library.user("20240301")
        book = await library.book("Termodinámica")
        loan = await library.loan(student, book, date(2024, 1, 1), date(2099, 1, 11))

        response = await test_client.get("/api/students/20240301/loans")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "loans handled successfully"
        assert body["data"]["loans"][0]["loanId"] == loan.id
        assert body["data"]["loans"][0]["returnDate"] == "11/01/2099"
        assert body["data"]["byMonth"][0]["month"] == "01/2099"
        assert body["data"]["degraded"] is False

    @pytest.mark.asyncio
    async def test_own_loans_with_cookie(self, test_client, library):
        await library.user("20240302")

        response = await test_client.get(
            "/api/loans", headers=session_cookie(create_access_token("20240302"))
        )

        assert response.status_code == 200
        assert response.json()["data"]["loans"] == []

    @pytest.mark.asyncio
    async def test_loans_for_unknown_account_is_404(self, test_client):
        response = await test_client.get("/api/students/00000000/loans")
        assert response.status_code == 404


class TestRecommendationRoutes:
    @pytest.mark.asyncio
    async def test_popular(self, test_client, library):
        student = await library.user("20240400")
        book = await library.book("Biología")
        await library.reserve(student, book)

        response = await test_client.get("/api/recommendations/popular")

        assert response.status_code == 200
        body = response.json()
        assert [e["bookId"] for e in body["data"]] == [book.id]
        assert body["degraded"] is False

    @pytest.mark.asyncio
    async def test_recent(self, test_client, library):
        book = await library.book("Novedad", entry_date=date.today())

        response = await test_client.get("/api/recommendations/recent")

        assert [e["bookId"] for e in response.json()["data"]] == [book.id]

    @pytest.mark.asyncio
    async def test_most_loaned_empty_catalogue(self, test_client):
        response = await test_client.get("/api/recommendations/most-loaned")

        assert response.status_code == 200
        assert response.json()["data"] == []


class TestHealthAndMiddleware:
    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    @pytest.mark.asyncio
    async def test_malformed_request_id_is_replaced(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "bad id!"})
        assert response.headers["X-Request-ID"] != "bad id!"
        assert len(response.headers["X-Request-ID"]) == 8
