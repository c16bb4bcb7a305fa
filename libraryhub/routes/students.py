"""
LibraryHub Backend — Student Route Handlers
=============================================

What:  The student home page and loan history, in two access modes:

    Cookie session (the caller's own data):
        GET /api/home
        GET /api/loans
    Explicit account number (staff screens, integrations):
        GET /api/students/{account_number}/home
        GET /api/students/{account_number}/loans

Home responses are per-user and change as loans progress, so they are
marked private and never cached.
"""

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from libraryhub.database import get_db_session
from libraryhub.schemas.circulation import HomeResponse, LoanHistoryResponse
from libraryhub.schemas.common import ErrorResponse
from libraryhub.security import get_current_account
from libraryhub.services.home_service import home_service
from libraryhub.services.loan_service import loan_service

router = APIRouter(prefix="/api", tags=["Students"])

ACCOUNT_PATH = Path(..., min_length=1, max_length=11, description="Student account number")

_HOME_RESPONSES = {
    200: {"description": "Home page data", "model": HomeResponse},
    401: {"description": "Missing or invalid session cookie", "model": ErrorResponse},
    404: {"description": "Unknown account", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}

_LOANS_RESPONSES = {
    200: {"description": "Active loans grouped by due month", "model": LoanHistoryResponse},
    401: {"description": "Missing or invalid session cookie", "model": ErrorResponse},
    404: {"description": "Unknown account", "model": ErrorResponse},
}


@router.get(
    "/home",
    response_model=HomeResponse,
    responses=_HOME_RESPONSES,
    summary="Home page of the signed-in student",
)
async def get_own_home(
    response: Response,
    account_number: str = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> HomeResponse:
    response.headers["Cache-Control"] = "private, no-store"
    return HomeResponse(data=await home_service.get_home(db, account_number))


@router.get(
    "/students/{account_number}/home",
    response_model=HomeResponse,
    responses=_HOME_RESPONSES,
    summary="Home page of a student by account number",
)
async def get_student_home(
    response: Response,
    account_number: str = ACCOUNT_PATH,
    db: AsyncSession = Depends(get_db_session),
) -> HomeResponse:
    response.headers["Cache-Control"] = "private, no-store"
    return HomeResponse(data=await home_service.get_home(db, account_number))


@router.get(
    "/loans",
    response_model=LoanHistoryResponse,
    responses=_LOANS_RESPONSES,
    summary="Active loans of the signed-in student",
)
async def get_own_loans(
    response: Response,
    account_number: str = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> LoanHistoryResponse:
    response.headers["Cache-Control"] = "private, no-store"
    return LoanHistoryResponse(data=await loan_service.history(db, account_number))


@router.get(
    "/students/{account_number}/loans",
    response_model=LoanHistoryResponse,
    responses=_LOANS_RESPONSES,
    summary="Active loans of a student by account number",
)
async def get_student_loans(
    response: Response,
    account_number: str = ACCOUNT_PATH,
    db: AsyncSession = Depends(get_db_session),
) -> LoanHistoryResponse:
    # Unknown accounts are a 404 here too, rather than an empty history.
    await home_service.get_user(db, account_number)
    response.headers["Cache-Control"] = "private, no-store"
    return LoanHistoryResponse(data=await loan_service.history(db, account_number))
