"""
LibraryHub Backend — Recommendation Route Handlers
====================================================

What:  The account-independent recommendation lists on their own:

    GET /api/recommendations/popular      most reserved books (max 8)
    GET /api/recommendations/recent       added in the last month (max 15)
    GET /api/recommendations/most-loaned  books of the most loaned categories (max 8)

These never fail: a broken query returns an empty list with `degraded: true`.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from libraryhub.database import get_db_session
from libraryhub.schemas.catalog import RecommendationListResponse
from libraryhub.services.best_effort import BestEffortResult
from libraryhub.services.recommendation_service import recommendation_service

router = APIRouter(prefix="/api/recommendations", tags=["Recommendations"])


def _to_response(result: BestEffortResult) -> RecommendationListResponse:
    return RecommendationListResponse(data=result.items, degraded=result.failed)


@router.get("/popular", response_model=RecommendationListResponse, summary="Most reserved books")
async def get_popular_books(
    db: AsyncSession = Depends(get_db_session),
) -> RecommendationListResponse:
    return _to_response(await recommendation_service.popular(db))


@router.get("/recent", response_model=RecommendationListResponse, summary="Recently added books")
async def get_recent_books(
    db: AsyncSession = Depends(get_db_session),
) -> RecommendationListResponse:
    return _to_response(await recommendation_service.recently_added(db))


@router.get(
    "/most-loaned",
    response_model=RecommendationListResponse,
    summary="Books from the most loaned categories",
)
async def get_most_loaned_books(
    db: AsyncSession = Depends(get_db_session),
) -> RecommendationListResponse:
    return _to_response(await recommendation_service.most_loaned_globally(db))
