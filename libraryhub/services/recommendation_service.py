"""
LibraryHub Backend — Recommendation Service
=============================================

What:  The four book lists of the student home page:
         - most_loaned_by_account: books from the categories this account
           borrows most
         - most_loaned_globally:   the same ranking over every account
         - popular:                most reserved books
         - recently_added:         books that entered the catalogue within
                                   the last calendar month

Category ranking and backfill:
    1. Count loans (state active or returned) per category, following
       loan → reserve → categories of the reserved book.
    2. Rank by count descending; equal counts go to the lower category id.
       Categories without loans and disabled categories never rank.
    3. Walk the ranking in order and take each category's books (by book id),
       skipping books already taken, until the cap (8) is reached or the
       categories run out.

    Example: Math 5 loans, Physics 2, Chemistry 0
        → Math books first, then Physics books; Chemistry contributes nothing.

Error policy:
    Best-effort. Every public method returns a BestEffortResult and never
    raises; a failure yields an empty list flagged as failed.
"""

import calendar
import logging
from datetime import date
from typing import Iterable, List, NamedTuple, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from libraryhub.config import settings
from libraryhub.models.catalog import (
    Author,
    AuthorsPerBook,
    Book,
    CategoriesPerBook,
    Category,
)
from libraryhub.models.circulation import COUNTED_LOAN_STATES, Loan, Reserve, User
from libraryhub.schemas.catalog import RecommendationEntry
from libraryhub.services.author_names import aggregate_author_names, format_author_names
from libraryhub.services.best_effort import BestEffortResult, run_best_effort

logger = logging.getLogger(__name__)


class CategoryLoanCount(NamedTuple):
    category_id: int
    loan_count: int


def rank_categories(rows: Iterable) -> List[int]:
    """
    Category ids ordered by loan count (desc), then category id (asc).

    Rows need `category_id` and `loan_count`; rows without a category or
    without loans are dropped.
    """
    counts = [
        CategoryLoanCount(row.category_id, int(row.loan_count or 0))
        for row in rows
        if row.category_id is not None
    ]
    ranked = sorted(
        (count for count in counts if count.loan_count > 0),
        key=lambda count: (-count.loan_count, count.category_id),
    )
    return [count.category_id for count in ranked]


def months_before(day: date, months: int = 1) -> date:
    """
    Same day `months` calendar months earlier, clamped to the month length
    (31 March → 28/29 February).
    """
    month_index = day.year * 12 + (day.month - 1) - months
    year, month0 = divmod(month_index, 12)
    month = month0 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class RecommendationService:
    async def most_loaned_by_account(
        self, db: AsyncSession, account_number: str
    ) -> BestEffortResult[RecommendationEntry]:
        return await run_best_effort(
            "most-loaned recommendations",
            lambda: self._most_loaned(db, account_number),
            session=db,
        )

    async def most_loaned_globally(
        self, db: AsyncSession
    ) -> BestEffortResult[RecommendationEntry]:
        return await run_best_effort(
            "global most-loaned recommendations",
            lambda: self._most_loaned(db, None),
            session=db,
        )

    async def popular(self, db: AsyncSession) -> BestEffortResult[RecommendationEntry]:
        return await run_best_effort("popular books", lambda: self._popular(db), session=db)

    async def recently_added(
        self, db: AsyncSession, today: Optional[date] = None
    ) -> BestEffortResult[RecommendationEntry]:
        return await run_best_effort(
            "recently added books",
            lambda: self._recently_added(db, today or date.today()),
            session=db,
        )

    # ── Queries ───────────────────────────────────────────────────────────

    async def _most_loaned(
        self, db: AsyncSession, account_number: Optional[str]
    ) -> List[RecommendationEntry]:
        loan_count = func.count(Loan.id).label("loan_count")
        statement = (
            select(CategoriesPerBook.category_id, loan_count)
            .select_from(Loan)
            .join(Reserve, Reserve.id == Loan.reserve_id)
            .join(CategoriesPerBook, CategoriesPerBook.book_id == Reserve.book_id)
            .join(Category, Category.id == CategoriesPerBook.category_id)
            .where(Loan.state.in_(COUNTED_LOAN_STATES), Category.enabled.is_(True))
        )
        if account_number is not None:
            statement = statement.join(User, User.id == Reserve.user_id).where(
                User.account_number == account_number
            )
        statement = statement.group_by(CategoriesPerBook.category_id)

        ranked = rank_categories((await db.execute(statement)).all())
        if not ranked:
            return []

        limit = settings.recommendation_limit
        selected = []
        seen = set()
        for category_id in ranked:
            if len(selected) >= limit:
                break
            result = await db.execute(
                select(Book.id, Book.title, Book.isbn)
                .join(CategoriesPerBook, CategoriesPerBook.book_id == Book.id)
                .where(CategoriesPerBook.category_id == category_id)
                .order_by(Book.id)
            )
            for row in result.all():
                if row.id in seen:
                    continue
                seen.add(row.id)
                selected.append(row)
                if len(selected) >= limit:
                    break

        logger.debug(
            "Most-loaned (%s): %d ranked categories, %d books",
            account_number or "all accounts",
            len(ranked),
            len(selected),
        )
        return await self._with_authors(db, selected)

    async def _popular(self, db: AsyncSession) -> List[RecommendationEntry]:
        reserve_count = func.count(Reserve.id).label("reserve_count")
        result = await db.execute(
            select(Book.id, Book.title, Book.isbn, reserve_count)
            .join(Reserve, Reserve.book_id == Book.id)
            .group_by(Book.id, Book.title, Book.isbn)
            .order_by(reserve_count.desc(), Book.id)
            .limit(settings.popular_limit)
        )
        return await self._with_authors(db, result.all())

    async def _recently_added(self, db: AsyncSession, today: date) -> List[RecommendationEntry]:
        cutoff = months_before(today, settings.recent_window_months)
        result = await db.execute(
            select(Book.id, Book.title, Book.isbn)
            .where(Book.entry_date >= cutoff)
            .order_by(Book.id)
            .limit(settings.recent_limit)
        )
        return await self._with_authors(db, result.all())

    async def _with_authors(self, db: AsyncSession, rows) -> List[RecommendationEntry]:
        """Attaches joined author names to (id, title, isbn) rows, keeping order."""
        rows = list(rows)
        if not rows:
            return []
        result = await db.execute(
            select(AuthorsPerBook.book_id, Author.first_name, Author.last_name)
            .join(Author, Author.id == AuthorsPerBook.author_id)
            .where(AuthorsPerBook.book_id.in_([row.id for row in rows]))
            .order_by(AuthorsPerBook.book_id, Author.id)
        )
        names = aggregate_author_names(result.all())
        return [
            RecommendationEntry(
                book_id=row.id,
                title=row.title,
                isbn=row.isbn,
                authors=format_author_names(names, row.id),
            )
            for row in rows
        ]


recommendation_service = RecommendationService()
