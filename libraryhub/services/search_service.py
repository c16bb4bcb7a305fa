"""
LibraryHub Backend — Search Service
=====================================

What:  Free-text search over the catalogue.
Who:   Called by GET /api/search.

Flow:
    1. Validate the query (blank → ValidationError, HTTP 400)
    2. Collect matching book ids, case-insensitive substring match on:
         category name → author first/last name → book title / ISBN
       (first-match order; each group ordered by book id; duplicates dropped)
    3. Load the matched books, their author rows, their category rows and the
       category parent map
    4. build_search_hits(): enrich each book with authors, ordinal edition,
       stock state and its least (most specific) category

Least category:
    A book usually carries a broad category ("Ciencias") and a narrow one
    ("Cálculo diferencial"). The hit shows the deepest enabled category in
    the forest; equal depths go to the lowest category id. A book with no
    resolvable category is left out of the results.

Error policy:
    Fail-visible. A query that matches nothing returns []; a store error
    becomes DatabaseError (HTTP 500).
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from libraryhub.exceptions import DatabaseError, ValidationError
from libraryhub.models.catalog import (
    Author,
    AuthorsPerBook,
    Book,
    CategoriesPerBook,
    Category,
)
from libraryhub.schemas.catalog import SearchHit
from libraryhub.services.author_names import aggregate_author_names, format_author_names
from libraryhub.services.editions import format_edition

logger = logging.getLogger(__name__)


class CategoryRow(NamedTuple):
    book_id: int
    category_id: Optional[int]
    name: Optional[str]


def category_depth(category_id: int, parents: Mapping[int, Optional[int]]) -> int:
    """
    Number of ancestors above `category_id` (a root has depth 0).

    Stops at the first repeated id, so a looping parent chain yields a finite
    depth instead of hanging the request.
    """
    depth = 0
    seen = {category_id}
    current = parents.get(category_id)
    while current is not None:
        if current in seen:
            logger.warning("Category parent chain of %s loops at %s", category_id, current)
            break
        seen.add(current)
        depth += 1
        current = parents.get(current)
    return depth


def least_category(
    rows: Iterable[CategoryRow], parents: Mapping[int, Optional[int]]
) -> Optional[str]:
    """Deepest resolvable category name; ties broken by lowest id. None if none."""
    candidates = [row for row in rows if row.category_id is not None and row.name]
    if not candidates:
        return None
    best = min(
        candidates,
        key=lambda row: (-category_depth(row.category_id, parents), row.category_id),
    )
    return best.name


def stock_state(units_available: Optional[int]) -> int:
    return 1 if units_available is not None and units_available > 0 else 0


def build_search_hits(
    book_ids: Sequence[int],
    books: Mapping[int, object],
    author_names: Dict[int, List[str]],
    category_rows: Iterable[CategoryRow],
    parents: Mapping[int, Optional[int]],
) -> List[SearchHit]:
    """
    Builds one SearchHit per book id, in the order of `book_ids`.

    `books` maps id → object with id, title, isbn, edition and
    units_available. Ids missing from `books`, and books without a
    resolvable category, produce no hit.
    """
    categories_by_book: Dict[int, List[CategoryRow]] = defaultdict(list)
    for row in category_rows:
        categories_by_book[row.book_id].append(row)

    hits: List[SearchHit] = []
    for book_id in book_ids:
        book = books.get(book_id)
        if book is None:
            continue
        category = least_category(categories_by_book.get(book_id, ()), parents)
        if category is None:
            logger.debug("Search hit %s dropped: no resolvable category", book_id)
            continue
        hits.append(
            SearchHit(
                book_id=book.id,
                title=book.title,
                isbn=book.isbn,
                authors=format_author_names(author_names, book.id),
                book_edition=format_edition(book.edition),
                stock_state=stock_state(book.units_available),
                category=category,
            )
        )
    return hits


class SearchService:
    async def search(self, db: AsyncSession, query: Optional[str]) -> List[SearchHit]:
        """
        Searches books by title, ISBN, author name or category name.

        Raises:
            ValidationError: the query is missing or blank (→ 400)
            DatabaseError: a query failed (→ 500)
        """
        text = (query or "").strip()
        if not text:
            raise ValidationError(message="query was empty", field="query")

        try:
            book_ids = await self._matching_book_ids(db, text)
            if not book_ids:
                logger.info("Search '%s' matched nothing", text)
                return []

            books_result = await db.execute(select(Book).where(Book.id.in_(book_ids)))
            books = {book.id: book for book in books_result.scalars().all()}

            authors_result = await db.execute(
                select(AuthorsPerBook.book_id, Author.first_name, Author.last_name)
                .join(Author, Author.id == AuthorsPerBook.author_id)
                .where(AuthorsPerBook.book_id.in_(book_ids))
                .order_by(AuthorsPerBook.book_id, Author.id)
            )
            author_names = aggregate_author_names(authors_result.all())

            # Outer join: a link to a missing or disabled category yields a
            # row with no category id, which least_category() ignores.
            categories_result = await db.execute(
                select(
                    CategoriesPerBook.book_id,
                    Category.id.label("category_id"),
                    Category.name,
                )
                .outerjoin(
                    Category,
                    and_(
                        Category.id == CategoriesPerBook.category_id,
                        Category.enabled.is_(True),
                    ),
                )
                .where(CategoriesPerBook.book_id.in_(book_ids))
            )
            category_rows = [CategoryRow(*row) for row in categories_result.all()]

            parents_result = await db.execute(select(Category.id, Category.parent_category_id))
            parents = {row.id: row.parent_category_id for row in parents_result.all()}
        except Exception as e:
            logger.error("Database error searching '%s': %s", text, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not process the search. Please try again.",
                context={"error_type": type(e).__name__},
            )

        hits = build_search_hits(book_ids, books, author_names, category_rows, parents)
        logger.info("Search '%s': %d candidate books, %d hits", text, len(book_ids), len(hits))
        return hits

    async def _matching_book_ids(self, db: AsyncSession, text: str) -> List[int]:
        """Book ids matching `text`, in first-match order without duplicates."""
        statements = [
            select(CategoriesPerBook.book_id)
            .join(Category, Category.id == CategoriesPerBook.category_id)
            .where(
                Category.enabled.is_(True),
                Category.name.icontains(text, autoescape=True),
            )
            .order_by(CategoriesPerBook.book_id),
            select(AuthorsPerBook.book_id)
            .join(Author, Author.id == AuthorsPerBook.author_id)
            .where(
                or_(
                    Author.first_name.icontains(text, autoescape=True),
                    Author.last_name.icontains(text, autoescape=True),
                )
            )
            .order_by(AuthorsPerBook.book_id),
            select(Book.id)
            .where(
                or_(
                    Book.title.icontains(text, autoescape=True),
                    Book.isbn.icontains(text, autoescape=True),
                )
            )
            .order_by(Book.id),
        ]

        ordered: List[int] = []
        seen = set()
        for statement in statements:
            result = await db.execute(statement)
            for book_id in result.scalars().all():
                if book_id not in seen:
                    seen.add(book_id)
                    ordered.append(book_id)
        return ordered


search_service = SearchService()
