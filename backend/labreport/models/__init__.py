"""SQLAlchemy models."""

from labreport.models.skip_range import SkipRangeCheck

__all__ = [
    "SkipRangeCheck",
]
