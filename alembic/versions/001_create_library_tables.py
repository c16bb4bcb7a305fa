"""Create library tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the catalogue tables (books, authors, categories and their
       link tables) and the circulation tables (users, reserves, loans).

Rollback: downgrade() drops every table in reverse dependency order.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Catalogue ─────────────────────────────────────────────────────────
    op.create_table(
        "books",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(120), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("edition", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("publisher", sa.String(45), nullable=True),
        sa.Column("language", sa.String(15), nullable=True),
        sa.Column("isbn", sa.String(17), nullable=False),
        sa.Column("total_amount", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "units_available",
            sa.Integer(),
            nullable=True,
            comment="Copies that can be loaned now; null when never counted",
        ),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "entry_date",
            sa.Date(),
            nullable=True,
            comment="Day the title entered the catalogue; drives 'new books'",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("isbn"),
    )
    op.create_index("ix_books_entry_date", "books", ["entry_date"])

    op.create_table(
        "authors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(60), nullable=True),
        sa.Column("last_name", sa.String(60), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "parent_category_id",
            sa.Integer(),
            nullable=True,
            comment="Null for top-level categories",
        ),
        sa.Column("name", sa.String(60), nullable=True),
        sa.Column("icon", sa.String(100), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(["parent_category_id"], ["categories.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_categories_parent_category_id", "categories", ["parent_category_id"])

    op.create_table(
        "authors_per_book",
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["authors.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("book_id", "author_id"),
    )

    op.create_table(
        "categories_per_book",
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("book_id", "category_id"),
    )

    # ── Circulation ───────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(35), nullable=False),
        sa.Column("first_surname", sa.String(35), nullable=False),
        sa.Column("email", sa.String(60), nullable=False),
        sa.Column("account_number", sa.String(11), nullable=False),
        sa.Column(
            "reputation",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("2"),
            comment="1 restricted, 2 regular, 3 trusted (may reserve)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_account_number", "users", ["account_number"], unique=True)

    op.create_table(
        "reserves",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.Date(), nullable=False, server_default=sa.func.current_date()),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("checkout_date", sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reserves_book_id", "reserves", ["book_id"])
    op.create_index("ix_reserves_user_id", "reserves", ["user_id"])

    op.create_table(
        "loans",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("reserve_id", sa.Integer(), nullable=False),
        sa.Column("loaned_at", sa.Date(), nullable=False),
        sa.Column("expires_on", sa.Date(), nullable=False),
        sa.Column(
            "state",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'active'"),
            comment="pending, active, returned, expired",
        ),
        sa.ForeignKeyConstraint(["reserve_id"], ["reserves.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reserve_id"),
    )
    op.create_index("ix_loans_state", "loans", ["state"])


def downgrade() -> None:
    """Drops every library table. Destructive: all data is lost."""
    op.drop_index("ix_loans_state", table_name="loans")
    op.drop_table("loans")
    op.drop_index("ix_reserves_user_id", table_name="reserves")
    op.drop_index("ix_reserves_book_id", table_name="reserves")
    op.drop_table("reserves")
    op.drop_index("ix_users_account_number", table_name="users")
    op.drop_table("users")
    op.drop_table("categories_per_book")
    op.drop_table("authors_per_book")
    op.drop_index("ix_categories_parent_category_id", table_name="categories")
    op.drop_table("categories")
    op.drop_table("authors")
    op.drop_index("ix_books_entry_date", table_name="books")
    op.drop_table("books")
