"""
LibraryHub Backend — Student Home Service
===========================================

What:  Assembles the student home page: greeting name, active loans and the
       four recommendation lists.
How:   Looks the user up (fail-visible: unknown account → 404), then runs
       each block in turn on the request session. Blocks are independent and
       best-effort; a failed block contributes an empty list and its name in
       `degraded`.

    HomeData
    ├── user_name                ← users.first_name
    ├── loans                    ← LoanService.active_loans
    ├── recommended              ← RecommendationService.most_loaned_by_account
    ├── popular_books            ← RecommendationService.popular
    ├── new_books                ← RecommendationService.recently_added
    └── category_most_requested  ← RecommendationService.most_loaned_globally
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libraryhub.exceptions import DatabaseError, NotFoundError
from libraryhub.models.circulation import User
from libraryhub.schemas.circulation import HomeData
from libraryhub.services.loan_service import loan_service
from libraryhub.services.recommendation_service import recommendation_service

logger = logging.getLogger(__name__)


class HomeService:
    async def get_user(self, db: AsyncSession, account_number: str) -> User:
        """
        Raises:
            NotFoundError: no user has this account number (→ 404)
            DatabaseError: the lookup failed (→ 500)
        """
        try:
            result = await db.execute(select(User).where(User.account_number == account_number))
            user = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching user %s: %s", account_number, str(e))
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"account_number": account_number},
            )
        if user is None:
            raise NotFoundError("user", account_number)
        return user

    async def get_home(
        self, db: AsyncSession, account_number: str, today: Optional[date] = None
    ) -> HomeData:
        user = await self.get_user(db, account_number)
        # A failed block rolls the session back, which expires `user`.
        user_name = user.first_name
        today = today or date.today()

        loans = await loan_service.active_loans(db, account_number, today)
        recommended = await recommendation_service.most_loaned_by_account(db, account_number)
        popular = await recommendation_service.popular(db)
        new_books = await recommendation_service.recently_added(db, today)
        most_requested = await recommendation_service.most_loaned_globally(db)

        blocks = {
            "loans": loans,
            "recommended": recommended,
            "popularBooks": popular,
            "newBooks": new_books,
            "categoryMostRequested": most_requested,
        }
        degraded = [name for name, result in blocks.items() if result.failed]
        if degraded:
            logger.warning("Home for %s served with degraded blocks: %s", account_number, degraded)

        return HomeData(
            user_name=user_name,
            loans=loans.items,
            recommended=recommended.items,
            popular_books=popular.items,
            new_books=new_books.items,
            category_most_requested=most_requested.items,
            degraded=degraded,
        )


home_service = HomeService()
