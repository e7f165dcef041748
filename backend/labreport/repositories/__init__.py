"""Repository layer for data access.

Repositories encapsulate database operations and hand back schema objects.
"""

from labreport.repositories.skip_range import SkipRangeRepository

__all__ = ["SkipRangeRepository"]
