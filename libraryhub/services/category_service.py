"""
LibraryHub Backend — Category Tree Service
============================================

What:  Turns the flat `categories` table into the nested tree shown in the
       frontend's category browser.
How:   One table scan, then an in-memory adjacency list keyed by parent id.

    rows (id, parent, enabled):          tree:
        1  None  yes                      1 ─┬─ 2 ── 4
        2  1     yes                         └─ 3
        3  1     yes                      5
        4  2     yes
        5  None  yes
        6  5     no   (hidden, with any descendants)

Rules:
    - Roots are enabled rows without a parent, in input order.
    - Children are enabled rows whose parent is the node, in input order.
    - A disabled row hides its entire subtree.
    - Each category id is materialised once. Malformed data that would lead
      back to an already built node is skipped and logged, so a parent loop
      can never recurse forever.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libraryhub.exceptions import DatabaseError
from libraryhub.models.catalog import Category
from libraryhub.schemas.catalog import CategoryNode

logger = logging.getLogger(__name__)


def build_category_tree(rows: Iterable) -> List[CategoryNode]:
    """
    Builds the enabled category forest from flat rows.

    Rows need `id`, `parent_category_id`, `name`, `icon` and `enabled`
    attributes (ORM objects or result rows).
    """
    children_by_parent: Dict[Optional[int], List] = defaultdict(list)
    for row in rows:
        if row.enabled:
            children_by_parent[row.parent_category_id].append(row)

    materialised: Set[int] = set()

    def build(row) -> CategoryNode:
        materialised.add(row.id)
        children = []
        for child in children_by_parent.get(row.id, ()):
            if child.id in materialised:
                logger.warning(
                    "Category %s already placed in the tree; skipping it under %s",
                    child.id,
                    row.id,
                )
                continue
            children.append(build(child))
        return CategoryNode(id=row.id, name=row.name, icon=row.icon, children=children)

    roots = []
    for row in children_by_parent.get(None, ()):
        if row.id in materialised:
            continue
        roots.append(build(row))
    return roots


class CategoryService:
    """Fail-visible: store errors surface as DatabaseError (HTTP 500)."""

    async def get_tree(self, db: AsyncSession) -> List[CategoryNode]:
        try:
            result = await db.execute(select(Category).order_by(Category.id))
            categories = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error loading categories: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not load categories. Please try again.",
                context={"error_type": type(e).__name__},
            )

        tree = build_category_tree(categories)
        logger.debug("Built category tree: %d rows, %d roots", len(categories), len(tree))
        return tree


category_service = CategoryService()
