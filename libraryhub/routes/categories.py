"""
LibraryHub Backend — Category Route Handlers
==============================================

What:  GET /api/categories/tree, the nested category browser.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from libraryhub.database import get_db_session
from libraryhub.schemas.catalog import CategoryTreeResponse
from libraryhub.schemas.common import ErrorResponse
from libraryhub.services.category_service import category_service

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get(
    "/tree",
    response_model=CategoryTreeResponse,
    responses={
        200: {"description": "Enabled categories as a forest", "model": CategoryTreeResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get the category tree",
    description=(
        "Returns every enabled top-level category with its enabled descendants "
        "nested under `children`. Disabled categories hide their whole subtree."
    ),
)
async def get_category_tree(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryTreeResponse:
    tree = await category_service.get_tree(db)
    # Categories change rarely; a short shared cache absorbs page reloads.
    response.headers["Cache-Control"] = "public, max-age=60"
    return CategoryTreeResponse(data=tree)
