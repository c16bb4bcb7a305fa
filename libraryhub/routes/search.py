"""
LibraryHub Backend — Search Route Handler
===========================================

What:  GET /api/search?query=<text>

A missing or blank `query` is a 400 from the service (ValidationError), not
FastAPI's 422, so the frontend gets one error shape for "nothing to search".
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from libraryhub.database import get_db_session
from libraryhub.schemas.catalog import SearchResponse
from libraryhub.schemas.common import ErrorResponse
from libraryhub.services.search_service import search_service

router = APIRouter(prefix="/api", tags=["Search"])


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={
        200: {"description": "Matching books (possibly none)", "model": SearchResponse},
        400: {"description": "Empty query", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Search books by any text",
    description=(
        "Case-insensitive substring search over book titles, ISBNs, author names "
        "and category names. Each hit carries joined author names, the ordinal "
        "edition, stock state and the book's most specific category."
    ),
)
async def search_books(
    response: Response,
    query: str = Query(default="", description="Text to look for"),
    db: AsyncSession = Depends(get_db_session),
) -> SearchResponse:
    hits = await search_service.search(db, query)
    response.headers["X-Total-Count"] = str(len(hits))
    return SearchResponse(data=hits)
