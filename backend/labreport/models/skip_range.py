"""Skip list model: names exempt from automatic range checking."""

from sqlalchemy import CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from labreport.config import settings
from labreport.database import Base


class SkipRangeCheck(Base):
    """A category or test-type name for which range checking is disabled.

    Matching against report data is by exact name, so renaming a category
    silently re-enables its range checks.
    """

    __tablename__ = settings.skip_range_table

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    __table_args__ = (
        CheckConstraint("type IN ('category', 'test_type')", name="ck_skip_range_check_type"),
        Index("idx_skip_range_type_value", "type", "value"),
    )

    def __repr__(self) -> str:
        return f"<SkipRangeCheck(id={self.id}, type={self.type}, value={self.value!r})>"
