"""
LibraryHub Backend — Best-Effort Results
==========================================

What:  The result type of the degrade-gracefully services (recommendations,
       loan history).
Why:   Those blocks are personalisation extras; one failing must not break
       the page or the other blocks. Callers still need to know whether an
       empty list means "nothing to show" or "the query failed", so the
       failure is recorded next to the (empty) items instead of being lost.

Usage:
    result = await run_best_effort(
        "popular books", lambda: self._popular(db), session=db
    )
    if result.failed:
        ...  # result.items == [], result.error == "OperationalError: ..."
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class BestEffortResult(Generic[T]):
    items: List[T] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def success(cls, items: List[T]) -> "BestEffortResult[T]":
        return cls(items=list(items))

    @classmethod
    def failure(cls, exc: BaseException) -> "BestEffortResult[T]":
        return cls(items=[], error=f"{type(exc).__name__}: {exc}")


async def run_best_effort(
    label: str,
    operation: Callable[[], Awaitable[List[T]]],
    session: Optional[AsyncSession] = None,
) -> BestEffortResult[T]:
    """
    Awaits `operation()` and wraps its list in a BestEffortResult.

    Any exception is logged with its traceback and turned into an empty,
    failed result. When a session is given it is rolled back after a
    failure: a failed statement leaves PostgreSQL transactions aborted, and
    the next block on the same request session must still be able to query.
    """
    try:
        items = await operation()
    except Exception as e:
        logger.warning("%s degraded to an empty result: %s", label, e, exc_info=True)
        if session is not None:
            try:
                await session.rollback()
            except Exception:
                logger.error("Rollback after failed %s also failed", label, exc_info=True)
        return BestEffortResult.failure(e)
    return BestEffortResult.success(items)
