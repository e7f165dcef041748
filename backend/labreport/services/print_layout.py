"""Print layout flags for lab reports.

Holds the per-category page-break and inclusion flags and the shared column
widths the renderer uses. Nothing here renders; the coordinator only answers
"is this category printed", "does it start a new page" and "how wide is each
column".
"""

from collections.abc import Mapping

from labreport.config import settings
from labreport.schemas.report import CategoryLayout, ColumnWidths, LayoutFlags
from labreport.schemas.results import GroupedTree, TestTypeGroup


def default_column_widths() -> ColumnWidths:
    """Column widths configured for this deployment."""
    return ColumnWidths(
        parameter=settings.column_width_parameter,
        value=settings.column_width_value,
        unit=settings.column_width_unit,
        reference=settings.column_width_reference,
    )


def show_test_type_header(group: TestTypeGroup) -> bool:
    """A test type with a single parameter prints as a bare row, no header."""
    return len(group.parameters) != 1


class PrintLayoutCoordinator:
    """Per-category print flags and column widths.

    Categories never seen before are included and do not force a page break.
    Column widths are taken as given; they are not required to sum to 100.
    """

    def __init__(
        self,
        column_widths: ColumnWidths | None = None,
        categories: Mapping[str, CategoryLayout] | None = None,
    ):
        self._column_widths = column_widths or ColumnWidths()
        self._categories: dict[str, CategoryLayout] = {
            str(k): v.model_copy() for k, v in (categories or {}).items()
        }

    @classmethod
    def from_flags(
        cls,
        flags: LayoutFlags | None,
        default_widths: ColumnWidths | None = None,
    ) -> "PrintLayoutCoordinator":
        """Build a coordinator from a caller-held LayoutFlags snapshot.

        Widths the snapshot leaves unset fall back to default_widths.
        """
        if flags is None:
            return cls(column_widths=default_widths)
        widths = default_widths or ColumnWidths()
        if flags.column_widths is not None:
            widths = widths.model_copy(
                update=flags.column_widths.model_dump(exclude_unset=True)
            )
        return cls(column_widths=widths, categories=flags.categories)

    # --- per-category flags ---

    def category_layout(self, category_id: str) -> CategoryLayout:
        return self._categories.get(str(category_id), CategoryLayout()).model_copy()

    def force_break_before(self, category_id: str) -> bool:
        return self.category_layout(category_id).force_break_before

    def include_in_print(self, category_id: str) -> bool:
        return self.category_layout(category_id).include_in_print

    def set_break_before(self, category_id: str, value: bool) -> None:
        layout = self.category_layout(category_id)
        layout.force_break_before = value
        self._categories[str(category_id)] = layout

    def set_include(self, category_id: str, value: bool) -> None:
        layout = self.category_layout(category_id)
        layout.include_in_print = value
        self._categories[str(category_id)] = layout

    def toggle_break_before(self, category_id: str) -> bool:
        value = not self.force_break_before(category_id)
        self.set_break_before(category_id, value)
        return value

    def toggle_include(self, category_id: str) -> bool:
        value = not self.include_in_print(category_id)
        self.set_include(category_id, value)
        return value

    # --- column widths ---

    @property
    def column_widths(self) -> ColumnWidths:
        return self._column_widths.model_copy()

    def set_column_widths(self, **widths: float) -> ColumnWidths:
        """Update some or all of parameter/value/unit/reference widths."""
        unknown = set(widths) - set(ColumnWidths.model_fields)
        if unknown:
            raise ValueError(f"Unknown column(s): {', '.join(sorted(unknown))}")
        self._column_widths = ColumnWidths.model_validate(
            {**self._column_widths.model_dump(), **widths}
        )
        return self.column_widths

    # --- views ---

    def printable(self, tree: GroupedTree) -> GroupedTree:
        """Categories of tree that are included in print, in tree order."""
        return [c for c in tree if self.include_in_print(c.category_id)]

    def flags(self) -> LayoutFlags:
        return LayoutFlags(
            categories={k: v.model_copy() for k, v in self._categories.items()},
            column_widths=self.column_widths,
        )
