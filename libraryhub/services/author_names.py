"""
LibraryHub Backend — Author Name Aggregation
==============================================

What:  Collapses book → author join rows into one ordered, de-duplicated list
       of "First Last" names per book.
Who:   Used by search, recommendations and loan history to fill the
       `authors` field of their responses.

Input rows only need `book_id`, `first_name` and `last_name` attributes, so
SQLAlchemy result rows, ORM objects and the AuthorRow tuple below all work.

    rows:   (1, "Ada", "Lovelace"), (2, "Alan", "Turing"),
            (1, "Ada", "Lovelace"), (1, "Grace", "Hopper")
    result: {1: ["Ada Lovelace", "Grace Hopper"], 2: ["Alan Turing"]}
"""

from typing import Dict, Iterable, List, NamedTuple, Optional

AUTHOR_SEPARATOR = ", "


class AuthorRow(NamedTuple):
    book_id: int
    first_name: Optional[str]
    last_name: Optional[str]


def full_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """Joins the non-empty name parts; returns "" when both are missing."""
    parts = [part.strip() for part in (first_name, last_name) if part and part.strip()]
    return " ".join(parts)


def aggregate_author_names(rows: Iterable) -> Dict[int, List[str]]:
    """
    Groups author names by book id, keeping first-appearance order.

    Rows with no name at all (an outer join that matched no author) are
    skipped, so a book without authors is simply absent from the result.
    """
    names_by_book: Dict[int, List[str]] = {}
    for row in rows:
        if row.book_id is None:
            continue
        name = full_name(row.first_name, row.last_name)
        if not name:
            continue
        names = names_by_book.setdefault(row.book_id, [])
        if name not in names:
            names.append(name)
    return names_by_book


def format_author_names(names_by_book: Dict[int, List[str]], book_id: int) -> str:
    """Renders one book's authors as "A, B"; unknown books render as ""."""
    return AUTHOR_SEPARATOR.join(names_by_book.get(book_id, ()))
