"""Snapshot of the range-check skip list.

The skip list names categories and test types for which automatic range
checking is disabled. It is read once, before the first classification, and
then queried synchronously. Later edits are only seen after an explicit
refresh.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable

from labreport.schemas.results import ExceptionEntry, ExceptionKind

logger = logging.getLogger(__name__)

SkipListFetcher = Callable[[], Awaitable[Iterable[ExceptionEntry]]]


class SkipListStore:
    """Immutable-snapshot view of the skip list."""

    def __init__(self, entries: Iterable[ExceptionEntry] = ()):
        self._set_entries(entries)

    def _set_entries(self, entries: Iterable[ExceptionEntry]) -> None:
        self._entries: tuple[ExceptionEntry, ...] = tuple(entries)
        self._names: frozenset[str] = frozenset(e.value for e in self._entries if e.value)

    @staticmethod
    async def _fetch(fetch: SkipListFetcher) -> list[ExceptionEntry]:
        try:
            return list(await fetch())
        except Exception as e:
            # Classification proceeds without exceptions rather than blocking the report
            logger.warning("Skip list unavailable, range checks apply to all tests: %s", e)
            return []

    @classmethod
    async def load(cls, fetch: SkipListFetcher) -> "SkipListStore":
        """Fetch the skip list once and return a snapshot of it.

        Args:
            fetch: Async callable returning the exception entries.

        Returns:
            A store holding the fetched entries, or an empty store if the
            fetch failed.
        """
        entries = await cls._fetch(fetch)
        logger.debug("Loaded %d skip list entries", len(entries))
        return cls(entries)

    async def refresh(self, fetch: SkipListFetcher) -> None:
        """Replace the snapshot with a fresh read.

        A failed refresh leaves an empty snapshot, like a failed load.
        """
        self._set_entries(await self._fetch(fetch))

    @property
    def entries(self) -> tuple[ExceptionEntry, ...]:
        return self._entries

    @property
    def names(self) -> frozenset[str]:
        """All names in the skip list, whatever their kind."""
        return self._names

    def names_of_kind(self, kind: ExceptionKind) -> frozenset[str]:
        return frozenset(e.value for e in self._entries if e.type == kind)

    def contains(self, name: str | None) -> bool:
        return bool(name) and name in self._names

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __iter__(self):
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._entries)
