"""
LibraryHub Backend — Circulation Response Schemas
===================================================

What:  Loan-history entries and the student home payload.
"""

from typing import List

from pydantic import Field

from libraryhub.schemas.catalog import RecommendationEntry
from libraryhub.schemas.common import CamelModel


class LoanEntry(CamelModel):
    """
    An active loan as shown on the student home page.

    Example:
        {"loanId": 7, "porcentLoan": 50.0, "returnDate": "11/01/2024",
         "bookId": 3, "isbn": "978-0-00-000000-0", "title": "Física",
         "authors": "Ada Lovelace"}
    """
    loan_id: int
    porcent_loan: float = Field(ge=0, le=100, description="Share of the loan period already elapsed")
    return_date: str = Field(description="Due date as DD/MM/YYYY")
    book_id: int
    isbn: str
    title: str | None = None
    authors: str = ""


class LoanMonthGroup(CamelModel):
    month: str = Field(description="Due month as MM/YYYY")
    loans: List[LoanEntry] = Field(default_factory=list)


class LoanHistory(CamelModel):
    loans: List[LoanEntry] = Field(default_factory=list)
    by_month: List[LoanMonthGroup] = Field(default_factory=list)
    degraded: bool = False


class LoanHistoryResponse(CamelModel):
    message: str = Field(default="loans handled successfully")
    data: LoanHistory


class HomeData(CamelModel):
    """
    Everything the student home page shows in one payload.

    Each list is produced independently; `degraded` names the lists that are
    empty because their query failed.
    """
    user_name: str
    loans: List[LoanEntry] = Field(default_factory=list)
    recommended: List[RecommendationEntry] = Field(default_factory=list)
    popular_books: List[RecommendationEntry] = Field(default_factory=list)
    new_books: List[RecommendationEntry] = Field(default_factory=list)
    category_most_requested: List[RecommendationEntry] = Field(default_factory=list)
    degraded: List[str] = Field(default_factory=list)


class HomeResponse(CamelModel):
    message: str = Field(default="data handled successfully")
    data: HomeData
