"""Pydantic schemas."""

from labreport.schemas.report import (
    CategoryLayout,
    ClassifyRequest,
    ClassifyResponse,
    ColumnWidths,
    LayoutFlags,
    OverrideState,
    PresentedCategory,
    PresentedParameter,
    PresentedReport,
    PresentedTestType,
    ReorderRequest,
    ReorderResponse,
    RenderReportRequest,
)
from labreport.schemas.results import (
    CategoryGroup,
    CategoryRef,
    Classification,
    ExceptionEntry,
    ExceptionKind,
    GroupedTree,
    ParameterRef,
    ParameterResult,
    ResultJoinRow,
    TestTypeGroup,
    TestTypeRef,
)

__all__ = [
    "CategoryGroup",
    "CategoryLayout",
    "CategoryRef",
    "Classification",
    "ClassifyRequest",
    "ClassifyResponse",
    "ColumnWidths",
    "ExceptionEntry",
    "ExceptionKind",
    "GroupedTree",
    "LayoutFlags",
    "OverrideState",
    "ParameterRef",
    "ParameterResult",
    "PresentedCategory",
    "PresentedParameter",
    "PresentedReport",
    "PresentedTestType",
    "ReorderRequest",
    "ReorderResponse",
    "RenderReportRequest",
    "ResultJoinRow",
    "TestTypeGroup",
    "TestTypeRef",
]
