"""Best-effort side effects.

A side effect runs after the primary write has already been committed. Its
failure is rolled back, logged and reported as an outcome; it never reaches
the caller as an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SideEffectOutcome:
    name: str
    ok: bool
    error: Optional[str] = None


async def run_best_effort(
    db: AsyncSession,
    name: str,
    action: Callable[[], Awaitable[object]],
) -> SideEffectOutcome:
    """Run ``action`` and commit it; on failure roll back and report instead of raising."""
    try:
        await action()
        await db.commit()
        return SideEffectOutcome(name=name, ok=True)
    except Exception as exc:
        await db.rollback()
        logger.warning("Side effect %s failed: %s", name, exc, exc_info=True)
        return SideEffectOutcome(name=name, ok=False, error=str(exc) or exc.__class__.__name__)
