"""Pydantic schemas for report presentation state and the rendered payload.

Override and layout state is presentation state owned by the caller. It is
never attached to the parameter or category records themselves.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from labreport.schemas.results import Classification, Identifier


class OverrideState(str, Enum):
    """Manual highlight chosen by the operator for one parameter."""

    OFF = "off"
    ON = "on"
    WARN = "warn"


# === Layout ===


class CategoryLayout(BaseModel):
    """Print flags for one category."""

    force_break_before: bool = False
    include_in_print: bool = True


class ColumnWidths(BaseModel):
    """Column widths of the result tables, in percent.

    The four values are not required to sum to 100.
    """

    parameter: float = 40
    value: float = 20
    unit: float = 15
    reference: float = 25


class LayoutFlags(BaseModel):
    """Snapshot of per-category print flags and shared column widths."""

    categories: dict[Identifier, CategoryLayout] = Field(default_factory=dict)
    column_widths: ColumnWidths | None = None


# === Presented report ===


class PresentedParameter(BaseModel):
    """A parameter row with its automatic and effective classification."""

    parameter_id: str
    name: str
    unit: str | None = None
    reference_range: str | None = None
    order: int = 0
    value: str | None = None
    auto_status: Classification
    override: OverrideState | None = None
    status: Classification


class PresentedTestType(BaseModel):
    """A test type block; single-parameter test types render without a header."""

    test_type_id: str
    name: str
    show_header: bool = True
    parameters: list[PresentedParameter] = Field(default_factory=list)


class PresentedCategory(BaseModel):
    """A category section with its print flags."""

    category_id: str
    name: str
    force_break_before: bool = False
    include_in_print: bool = True
    test_types: list[PresentedTestType] = Field(default_factory=list)


class PresentedReport(BaseModel):
    """Everything the renderer needs: ordered sections and column sizing."""

    categories: list[PresentedCategory] = Field(default_factory=list)
    column_widths: ColumnWidths
    total: int = Field(default=0, description="Number of parameter rows in the report")


# === API bodies ===


class RenderReportRequest(BaseModel):
    """Body of POST /reports/render.

    Rows stay loosely typed here and are validated one by one, so a single
    malformed row is dropped instead of rejecting the whole report.
    """

    rows: list[Any] = Field(default_factory=list)
    overrides: dict[Identifier, OverrideState] = Field(default_factory=dict)
    custom_order: list[Identifier] | None = None
    layout: LayoutFlags | None = None
    printable_only: bool = False


class ReorderRequest(BaseModel):
    """Body of POST /reports/reorder."""

    ids: list[Identifier]
    from_index: int
    to_index: int


class ReorderResponse(BaseModel):
    ids: list[str]


class ClassifyRequest(BaseModel):
    """Body of POST /classify."""

    value: str | None = None
    reference_range: str | None = None
    category_name: str = ""
    test_type_name: str = ""


class ClassifyResponse(BaseModel):
    status: Classification
