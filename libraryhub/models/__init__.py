# Importing the models here registers every table on Base.metadata.
from libraryhub.models.catalog import (
    Author,
    AuthorsPerBook,
    Book,
    CategoriesPerBook,
    Category,
)
from libraryhub.models.circulation import (
    COUNTED_LOAN_STATES,
    LOAN_TRANSITIONS,
    Loan,
    LoanState,
    ReputationTier,
    Reserve,
    ReserveStatus,
    User,
)

__all__ = [
    "Author",
    "AuthorsPerBook",
    "Book",
    "CategoriesPerBook",
    "Category",
    "COUNTED_LOAN_STATES",
    "LOAN_TRANSITIONS",
    "Loan",
    "LoanState",
    "ReputationTier",
    "Reserve",
    "ReserveStatus",
    "User",
]
