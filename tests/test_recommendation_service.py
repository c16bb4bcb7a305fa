"""
LibraryHub Backend — Recommendation Service Tests
===================================================

What we test:
    ✅ Category ranking: loan count desc, category id on ties, zero dropped
    ✅ Most-loaned lists: ranking order, unique books, cap of 8
    ✅ Per-account vs global aggregation
    ✅ Popular (most reserved) and recently added lists
    ✅ Query failures degrade to an empty, failed result
"""

from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from libraryhub.models import LoanState
from libraryhub.services.recommendation_service import (
    RecommendationService,
    months_before,
    rank_categories,
)


def count(category_id, loan_count):
    return SimpleNamespace(category_id=category_id, loan_count=loan_count)


class TestRankCategories:
    def test_orders_by_count_descending(self):
        assert rank_categories([count(1, 2), count(2, 5), count(3, 1)]) == [2, 1, 3]

    def test_ties_go_to_lowest_category_id(self):
        assert rank_categories([count(9, 3), count(4, 3)]) == [4, 9]

    def test_zero_and_missing_counts_are_dropped(self):
        assert rank_categories([count(1, 0), count(2, None), count(None, 4)]) == []


class TestMonthsBefore:
    @pytest.mark.parametrize(
        "day, expected",
        [
            (date(2024, 3, 31), date(2024, 2, 29)),
            (date(2023, 3, 31), date(2023, 2, 28)),
            (date(2024, 1, 15), date(2023, 12, 15)),
            (date(2024, 7, 1), date(2024, 6, 1)),
        ],
    )
    def test_one_calendar_month_back(self, day, expected):
        assert months_before(day) == expected


class TestMostLoaned:
    def setup_method(self):
        self.service = RecommendationService()

    @pytest.mark.asyncio
    async def test_most_loaned_category_books_come_first(self, db_session, library):
        """Math 5 loans, Physics 2, Chemistry 0."""
        student = await library.user("20240001")
        math = await library.category("Math")
        physics = await library.category("Physics")
        chemistry = await library.category("Chemistry")

        physics_books = [await library.book(f"Physics {i}", categories=[physics]) for i in range(2)]
        math_books = [await library.book(f"Math {i}", categories=[math]) for i in range(3)]
        chemistry_book = await library.book("Chemistry 1", categories=[chemistry])

        for book in math_books + math_books[:2]:
            await library.loan(student, book, state=LoanState.RETURNED)
        for book in physics_books:
            await library.loan(student, book)

        result = await self.service.most_loaned_by_account(db_session, "20240001")

        assert not result.failed
        ids = [entry.book_id for entry in result.items]
        assert ids == [b.id for b in math_books] + [b.id for b in physics_books]
        assert chemistry_book.id not in ids

    @pytest.mark.asyncio
    async def test_account_without_loans_gets_empty_list(self, db_session, library):
        await library.user("20240002")
        other = await library.user("20240003")
        math = await library.category("Math")
        book = await library.book("Math 1", categories=[math])
        await library.loan(other, book)

        result = await self.service.most_loaned_by_account(db_session, "20240002")

        assert result.items == []
        assert not result.failed

    @pytest.mark.asyncio
    async def test_list_is_capped_at_eight(self, db_session, library):
        student = await library.user("20240004")
        math = await library.category("Math")
        books = [await library.book(f"Math {i}", categories=[math]) for i in range(10)]
        await library.loan(student, books[0])

        result = await self.service.most_loaned_by_account(db_session, "20240004")

        assert len(result.items) == 8
        assert [e.book_id for e in result.items] == [b.id for b in books[:8]]

    @pytest.mark.asyncio
    async def test_book_in_two_ranked_categories_appears_once(self, db_session, library):
        student = await library.user("20240005")
        math = await library.category("Math")
        physics = await library.category("Physics")
        shared = await library.book("Mechanics", categories=[math, physics])
        await library.loan(student, shared)
        await library.loan(student, shared)

        result = await self.service.most_loaned_by_account(db_session, "20240005")

        assert [e.book_id for e in result.items] == [shared.id]

    @pytest.mark.asyncio
    async def test_expired_and_pending_loans_do_not_count(self, db_session, library):
        student = await library.user("20240006")
        math = await library.category("Math")
        book = await library.book("Math 1", categories=[math])
        await library.loan(student, book, state=LoanState.EXPIRED)
        await library.loan(student, book, state=LoanState.PENDING)

        result = await self.service.most_loaned_by_account(db_session, "20240006")

        assert result.items == []

    @pytest.mark.asyncio
    async def test_global_ranking_counts_every_account(self, db_session, library):
        first = await library.user("20240007")
        second = await library.user("20240008")
        math = await library.category("Math")
        physics = await library.category("Physics")
        math_book = await library.book("Math 1", categories=[math])
        physics_book = await library.book("Physics 1", categories=[physics])
        await library.loan(first, physics_book)
        await library.loan(second, math_book)
        await library.loan(second, math_book)

        result = await self.service.most_loaned_globally(db_session)

        assert [e.book_id for e in result.items] == [math_book.id, physics_book.id]

    @pytest.mark.asyncio
    async def test_entries_carry_authors(self, db_session, library):
        student = await library.user("20240009")
        math = await library.category("Math")
        ada = await library.author("Ada", "Lovelace")
        book = await library.book("Notes", authors=[ada], categories=[math])
        await library.loan(student, book)

        result = await self.service.most_loaned_by_account(db_session, "20240009")

        assert result.items[0].authors == "Ada Lovelace"
        assert result.items[0].isbn == book.isbn

    @pytest.mark.asyncio
    async def test_query_failure_degrades_to_empty(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        result = await self.service.most_loaned_by_account(mock_db_session, "20240001")

        assert result.items == []
        assert result.failed
        assert result.error.startswith("OperationalError")
        mock_db_session.rollback.assert_awaited_once()


class TestPopularAndRecent:
    def setup_method(self):
        self.service = RecommendationService()

    @pytest.mark.asyncio
    async def test_popular_orders_by_reservation_count(self, db_session, library):
        student = await library.user("20240010")
        once = await library.book("Once")
        twice = await library.book("Twice")
        await library.book("Never")
        await library.reserve(student, once)
        await library.reserve(student, twice)
        await library.reserve(student, twice)

        result = await self.service.popular(db_session)

        assert [e.book_id for e in result.items] == [twice.id, once.id]

    @pytest.mark.asyncio
    async def test_popular_is_capped_at_eight(self, db_session, library):
        student = await library.user("20240011")
        for i in range(10):
            book = await library.book(f"Book {i}")
            await library.reserve(student, book)

        result = await self.service.popular(db_session)

        assert len(result.items) == 8
        assert len({e.book_id for e in result.items}) == 8

    @pytest.mark.asyncio
    async def test_recently_added_uses_one_calendar_month(self, db_session, library):
        today = date(2024, 3, 31)
        boundary = await library.book("Boundary", entry_date=date(2024, 2, 29))
        fresh = await library.book("Fresh", entry_date=today - timedelta(days=3))
        await library.book("Old", entry_date=date(2024, 2, 28))
        await library.book("Undated")

        result = await self.service.recently_added(db_session, today=today)

        assert [e.book_id for e in result.items] == [boundary.id, fresh.id]

    @pytest.mark.asyncio
    async def test_recently_added_is_capped_at_fifteen(self, db_session, library):
        today = date(2024, 5, 10)
        for i in range(17):
            await library.book(f"New {i}", entry_date=today)

        result = await self.service.recently_added(db_session, today=today)

        assert len(result.items) == 15

    @pytest.mark.asyncio
    async def test_popular_failure_degrades_to_empty(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        result = await self.service.popular(mock_db_session)

        assert result.items == []
        assert result.failed
