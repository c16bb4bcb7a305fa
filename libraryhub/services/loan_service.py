"""
LibraryHub Backend — Loan History Service
===========================================

What:  A student's active loans, with how far each loan period has run and
       when the book is due.
Who:   Called by the loan routes (cookie account or explicit account number)
       and by the home service.

Progress:
    porcent_loan = days since loaned_at / days from loaned_at to expires_on
                   × 100, rounded to 2 decimals, clamped to [0, 100].

    loaned_at 2024-01-01, expires_on 2024-01-11, today 2024-01-06 → 50.0

    A zero-length period (loaned and due the same day) reports 100.0 from
    that day on, and 0.0 before it; the division is never attempted.

Error policy:
    Best-effort, like the recommendation blocks: a failed query yields an
    empty list flagged as failed, never an exception.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libraryhub.models.catalog import Author, AuthorsPerBook, Book
from libraryhub.models.circulation import Loan, LoanState, Reserve, User
from libraryhub.schemas.circulation import LoanEntry, LoanHistory, LoanMonthGroup
from libraryhub.services.author_names import aggregate_author_names, format_author_names
from libraryhub.services.best_effort import BestEffortResult, run_best_effort

logger = logging.getLogger(__name__)

DUE_DATE_FORMAT = "%d/%m/%Y"


class LoanRow(NamedTuple):
    loan_id: int
    loaned_at: date
    expires_on: date
    book_id: int
    isbn: str
    title: Optional[str]


def loan_progress(loaned_at: date, expires_on: date, today: date) -> float:
    """Percentage of the loan period elapsed on `today`, within [0, 100]."""
    if today < loaned_at:
        return 0.0
    period = (expires_on - loaned_at).days
    if period <= 0:
        return 100.0
    elapsed = (today - loaned_at).days
    return round(min(100.0, elapsed / period * 100), 2)


def format_due_date(expires_on: date) -> str:
    return expires_on.strftime(DUE_DATE_FORMAT)


def format_loan_history(
    rows: Iterable, author_names: Dict[int, List[str]], today: date
) -> List[LoanEntry]:
    """
    One LoanEntry per loan id (the first row of a loan wins), ordered by due
    date and then loan id.
    """
    unique: Dict[int, object] = {}
    for row in rows:
        unique.setdefault(row.loan_id, row)

    ordered = sorted(unique.values(), key=lambda row: (row.expires_on, row.loan_id))
    return [
        LoanEntry(
            loan_id=row.loan_id,
            porcent_loan=loan_progress(row.loaned_at, row.expires_on, today),
            return_date=format_due_date(row.expires_on),
            book_id=row.book_id,
            isbn=row.isbn,
            title=row.title,
            authors=format_author_names(author_names, row.book_id),
        )
        for row in ordered
    ]


def group_loans_by_month(entries: Iterable[LoanEntry]) -> List[LoanMonthGroup]:
    """
    Groups entries by due month ("MM/YYYY"), in ascending month order.
    """
    groups: Dict[str, List[LoanEntry]] = {}
    for entry in entries:
        # return_date is DD/MM/YYYY
        month = entry.return_date[3:]
        groups.setdefault(month, []).append(entry)

    def sort_key(month: str):
        mm, yyyy = month.split("/")
        return int(yyyy), int(mm)

    return [
        LoanMonthGroup(month=month, loans=groups[month])
        for month in sorted(groups, key=sort_key)
    ]


class LoanService:
    async def active_loans(
        self, db: AsyncSession, account_number: str, today: Optional[date] = None
    ) -> BestEffortResult[LoanEntry]:
        return await run_best_effort(
            "loan history",
            lambda: self._active_loans(db, account_number, today or date.today()),
            session=db,
        )

    async def history(
        self, db: AsyncSession, account_number: str, today: Optional[date] = None
    ) -> LoanHistory:
        """Active loans plus their month grouping, for the loan routes."""
        result = await self.active_loans(db, account_number, today)
        return LoanHistory(
            loans=result.items,
            by_month=group_loans_by_month(result.items),
            degraded=result.failed,
        )

    async def _active_loans(
        self, db: AsyncSession, account_number: str, today: date
    ) -> List[LoanEntry]:
        result = await db.execute(
            select(
                Loan.id.label("loan_id"),
                Loan.loaned_at,
                Loan.expires_on,
                Book.id.label("book_id"),
                Book.isbn,
                Book.title,
            )
            .select_from(Loan)
            .join(Reserve, Reserve.id == Loan.reserve_id)
            .join(User, User.id == Reserve.user_id)
            .join(Book, Book.id == Reserve.book_id)
            .where(
                User.account_number == account_number,
                Loan.state == LoanState.ACTIVE.value,
            )
            .order_by(Loan.expires_on, Loan.id)
        )
        rows = [LoanRow(*row) for row in result.all()]
        if not rows:
            return []

        authors_result = await db.execute(
            select(AuthorsPerBook.book_id, Author.first_name, Author.last_name)
            .join(Author, Author.id == AuthorsPerBook.author_id)
            .where(AuthorsPerBook.book_id.in_(sorted({row.book_id for row in rows})))
            .order_by(AuthorsPerBook.book_id, Author.id)
        )
        author_names = aggregate_author_names(authors_result.all())

        entries = format_loan_history(rows, author_names, today)
        logger.debug("Account %s has %d active loans", account_number, len(entries))
        return entries


loan_service = LoanService()
