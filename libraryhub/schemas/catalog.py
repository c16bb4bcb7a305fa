"""
LibraryHub Backend — Catalogue Response Schemas
=================================================

What:  Transient shapes built per request by the category-tree, search and
       recommendation services. Nothing here is persisted.
"""

from typing import List, Optional

from pydantic import Field

from libraryhub.schemas.common import CamelModel


class CategoryNode(CamelModel):
    """
    One enabled category with its enabled descendants.

    `children` is always a list; leaves carry an empty list, never null.
    """
    id: int = Field(description="Category identifier")
    name: Optional[str] = Field(default=None, description="Display name")
    icon: Optional[str] = Field(default=None, description="Icon name or URL for the frontend")
    children: List["CategoryNode"] = Field(default_factory=list)


class CategoryTreeResponse(CamelModel):
    message: str = Field(default="categories handled successfully")
    data: List[CategoryNode] = Field(default_factory=list)


class SearchHit(CamelModel):
    """
    A book matched by free-text search.

    Example:
        {"bookId": 1, "title": "Cálculo", "isbn": "978-3-16-148410-0",
         "authors": "Ada Lovelace, Alan Turing", "bookEdition": "3ra",
         "stockState": 1, "category": "Cálculo diferencial"}
    """
    book_id: int
    title: Optional[str] = None
    isbn: str
    authors: str = Field(default="", description="Comma-separated author names")
    book_edition: str = Field(description="Ordinal edition ('3ra') or the raw value")
    stock_state: int = Field(ge=0, le=1, description="1 when at least one copy is available")
    category: str = Field(description="Most specific category attached to the book")


class SearchResponse(CamelModel):
    message: str = Field(default="search handled successfully")
    data: List[SearchHit] = Field(default_factory=list)


class RecommendationEntry(CamelModel):
    book_id: int
    title: Optional[str] = None
    isbn: str
    authors: str = ""


class RecommendationListResponse(CamelModel):
    """
    `degraded` is true when the list is empty because the underlying query
    failed rather than because there was nothing to recommend.
    """
    message: str = Field(default="recommendations handled successfully")
    data: List[RecommendationEntry] = Field(default_factory=list)
    degraded: bool = False
