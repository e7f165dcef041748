"""Skip list API routes.

The skip list is loaded once at startup into app.state and served from that
snapshot. A refresh re-reads the table; until then, edits made elsewhere are
not reflected in classification.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from labreport.database import get_db
from labreport.repositories.skip_range import SkipRangeRepository
from labreport.schemas.results import ExceptionEntry
from labreport.services.skip_list import SkipListStore

router = APIRouter(prefix="/skip-ranges", tags=["skip-ranges"])


def get_skip_list(request: Request) -> SkipListStore:
    """Return the app's skip list snapshot, or an empty one if never loaded."""
    store = getattr(request.app.state, "skip_list", None)
    if store is None:
        store = SkipListStore()
        request.app.state.skip_list = store
    return store


@router.get("", response_model=list[ExceptionEntry])
async def list_skip_ranges(
    store: SkipListStore = Depends(get_skip_list),
) -> list[ExceptionEntry]:
    """List the skip list entries currently applied to classification."""
    return list(store.entries)


@router.post("/refresh", response_model=list[ExceptionEntry])
async def refresh_skip_ranges(
    store: SkipListStore = Depends(get_skip_list),
    db: AsyncSession = Depends(get_db),
) -> list[ExceptionEntry]:
    """Re-read the skip list table and replace the snapshot.

    A failed read leaves an empty snapshot rather than an error.
    """
    await store.refresh(SkipRangeRepository(db).list_entries)
    return list(store.entries)
