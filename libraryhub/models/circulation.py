"""
LibraryHub Backend — Circulation Models
=========================================

What:  Users, reservations (reserves) and loans, plus the canonical state
       enumerations they share.
Who:   Read by the loan-history, recommendation and home services.

Lifecycle:
    A user places a Reserve on a book (status 'pending'). When the library
    hands the book over, the reserve becomes 'active' and exactly one Loan is
    created for it (loans.reserve_id is unique). The loan ends 'returned' or
    'expired'.

State values:
    Older data stores free-text states ("Activo", "EN CURSO", "activo").
    Columns only ever receive LoanState values; LoanState.parse() is the one
    place that understands the legacy spellings, and LOAN_TRANSITIONS is the
    one place that says which changes are legal.
"""

import enum
from datetime import date
from typing import Dict, FrozenSet

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from libraryhub.database import Base
from libraryhub.exceptions import ValidationError


class LoanState(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    RETURNED = "returned"
    EXPIRED = "expired"

    @classmethod
    def parse(cls, value: str) -> "LoanState":
        """
        Normalises a stored or user-supplied state string.

        Accepts the canonical values and the legacy Spanish spellings, in any
        case and with surrounding whitespace. Raises ValueError otherwise.
        """
        if isinstance(value, cls):
            return value
        key = (value or "").strip().lower()
        try:
            return _STATE_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown loan state: {value!r}") from None

    def can_transition_to(self, target: "LoanState") -> bool:
        return target in LOAN_TRANSITIONS[self]


# Reserves move through the same states as the loan they lead to.
ReserveStatus = LoanState

_STATE_ALIASES: Dict[str, LoanState] = {
    "pending": LoanState.PENDING,
    "pendiente": LoanState.PENDING,
    "active": LoanState.ACTIVE,
    "activo": LoanState.ACTIVE,
    "en curso": LoanState.ACTIVE,
    "returned": LoanState.RETURNED,
    "devuelto": LoanState.RETURNED,
    "expired": LoanState.EXPIRED,
    "vencido": LoanState.EXPIRED,
}

LOAN_TRANSITIONS: Dict[LoanState, FrozenSet[LoanState]] = {
    LoanState.PENDING: frozenset({LoanState.ACTIVE}),
    LoanState.ACTIVE: frozenset({LoanState.RETURNED, LoanState.EXPIRED}),
    LoanState.EXPIRED: frozenset({LoanState.RETURNED}),
    LoanState.RETURNED: frozenset(),
}

# Loans that count towards category rankings.
COUNTED_LOAN_STATES = (LoanState.ACTIVE.value, LoanState.RETURNED.value)


class ReputationTier(enum.IntEnum):
    RESTRICTED = 1
    REGULAR = 2
    TRUSTED = 3


class User(Base):
    """
    A library patron. account_number is the external identity carried in
    the session token and used by every per-user endpoint.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(35), nullable=False)
    first_surname: Mapped[str] = mapped_column(String(35), nullable=False)
    email: Mapped[str] = mapped_column(String(60), nullable=False, unique=True)
    account_number: Mapped[str] = mapped_column(
        String(11), nullable=False, unique=True, index=True
    )
    reputation: Mapped[int] = mapped_column(
        Integer, nullable=False, default=int(ReputationTier.REGULAR)
    )

    @property
    def can_reserve(self) -> bool:
        """Only the top reputation tier may create reservations."""
        return self.reputation >= ReputationTier.TRUSTED

    def __repr__(self) -> str:
        return f"<User(id={self.id}, account='{self.account_number}')>"


class Reserve(Base):
    __tablename__ = "reserves"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ReserveStatus.PENDING.value
    )
    checkout_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<Reserve(id={self.id}, book={self.book_id}, user={self.user_id}, status='{self.status}')>"


class Loan(Base):
    """
    The lending record of a fulfilled reserve.

    The loan period is [loaned_at, expires_on]; the loan-history formatter
    reports how much of it has elapsed.
    """

    __tablename__ = "loans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reserve_id: Mapped[int] = mapped_column(
        ForeignKey("reserves.id"), nullable=False, unique=True
    )
    loaned_at: Mapped[date] = mapped_column(Date, nullable=False)
    expires_on: Mapped[date] = mapped_column(Date, nullable=False)
    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LoanState.ACTIVE.value, index=True
    )

    @property
    def loan_state(self) -> LoanState:
        return LoanState.parse(self.state)

    def transition_to(self, target: LoanState) -> None:
        """
        Moves the loan to `target`, rejecting any change not listed in
        LOAN_TRANSITIONS.

        Raises:
            ValidationError: the transition is not allowed.
        """
        current = self.loan_state
        if not current.can_transition_to(target):
            raise ValidationError(
                message=f"A loan cannot go from '{current.value}' to '{target.value}'",
                field="state",
                context={"loan_id": self.id},
            )
        self.state = target.value

    def __repr__(self) -> str:
        return f"<Loan(id={self.id}, reserve={self.reserve_id}, state='{self.state}')>"
