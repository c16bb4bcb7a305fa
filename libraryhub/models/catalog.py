"""
LibraryHub Backend — Catalogue Models
=======================================

What:  ORM models for books, authors, categories and the two many-to-many
       link tables (authors_per_book, categories_per_book).
Who:   Read by the search, category-tree and recommendation services;
       Alembic reads them through Base.metadata.

Category forest:
    categories.parent_category_id references categories.id. A null parent
    marks a top-level category. Disabled categories (enabled = false) are
    soft-deleted: they stay in the table but never appear in trees, search
    hits or rankings.
"""

from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from libraryhub.database import Base


class Book(Base):
    """
    A catalogue title. Copies are tracked as counts, not as rows:
    units_available is the number of copies that can be loaned right now
    (null when the stock has never been counted).
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str | None] = mapped_column(String(120), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    edition: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    publisher: Mapped[str | None] = mapped_column(String(45), nullable=True)
    language: Mapped[str | None] = mapped_column(String(15), nullable=True)
    isbn: Mapped[str] = mapped_column(String(17), nullable=False, unique=True)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    units_available: Mapped[int | None] = mapped_column(Integer, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    entry_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, isbn='{self.isbn}', title='{self.title}')>"


class Author(Base):
    """Either name part may be null in legacy data."""

    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str | None] = mapped_column(String(60), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(60), nullable=True)

    def __repr__(self) -> str:
        return f"<Author(id={self.id}, name='{self.first_name} {self.last_name}')>"


class AuthorsPerBook(Base):
    __tablename__ = "authors_per_book"

    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"), primary_key=True
    )
    author_id: Mapped[int] = mapped_column(
        ForeignKey("authors.id", ondelete="CASCADE"), primary_key=True
    )


class Category(Base):
    """
    A node of the category forest.

    Invariant (assumed, not enforced by the database): parent chains never
    loop. Code that walks the forest still guards against loops.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    parent_category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id"), nullable=True, index=True
    )
    name: Mapped[str | None] = mapped_column(String(60), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(100), nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return (
            f"<Category(id={self.id}, name='{self.name}', "
            f"parent={self.parent_category_id}, enabled={self.enabled})>"
        )


class CategoriesPerBook(Base):
    __tablename__ = "categories_per_book"

    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"), primary_key=True
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True
    )
