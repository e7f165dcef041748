"""Skip list repository.

Read access to the range-check skip list. Editing the list belongs to the
administration screens, not to report presentation.
"""

import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from labreport.models.skip_range import SkipRangeCheck
from labreport.schemas.results import ExceptionEntry

logger = logging.getLogger(__name__)


class SkipRangeRepository:
    """Repository for the skip_range_check table."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session.

        Args:
            db: Async SQLAlchemy session.
        """
        self.db = db

    async def list_entries(self) -> list[ExceptionEntry]:
        """Return all skip list entries, ordered by type then value.

        Rows with an unknown type are skipped with a warning.
        """
        result = await self.db.execute(
            select(SkipRangeCheck).order_by(SkipRangeCheck.type, SkipRangeCheck.value)
        )
        entries: list[ExceptionEntry] = []
        for row in result.scalars().all():
            try:
                entries.append(ExceptionEntry(value=row.value, type=row.type))
            except ValidationError:
                logger.warning("Ignoring skip list row %s with type %r", row.id, row.type)
        return entries
