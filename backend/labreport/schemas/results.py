"""Pydantic schemas for lab result rows and the grouped result tree.

The join row shape mirrors what the data layer returns when a result value is
selected together with its parameter, test type and category. Rows are
validated here, at the boundary, so the grouping and classification services
only ever see typed records.
"""

from enum import Enum
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _coerce_identifier(value: Any) -> Any:
    # Backends hand out integer or UUID ids depending on the table
    if isinstance(value, (int, UUID)) and not isinstance(value, bool):
        return str(value)
    return value


def _coerce_order(value: Any) -> Any:
    return 0 if value is None else value


def _coerce_value(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


Identifier = Annotated[str, BeforeValidator(_coerce_identifier)]


# === Enums ===


class Classification(str, Enum):
    """Tri-state judgment of a value against its reference range."""

    IN_RANGE = "in-range"
    OUT_OF_RANGE = "out-of-range"
    INDETERMINATE = "indeterminate"


class ExceptionKind(str, Enum):
    """What an exception entry names."""

    CATEGORY = "category"
    TEST_TYPE = "test_type"


# === Join row (boundary input) ===


class CategoryRef(BaseModel):
    """Top-level grouping of test types."""

    model_config = ConfigDict(frozen=True)

    id: Identifier
    name: str


class TestTypeRef(BaseModel):
    """A named lab test, joined with its category."""

    model_config = ConfigDict(frozen=True)

    id: Identifier
    name: str
    category: CategoryRef | None = None


class ParameterRef(BaseModel):
    """A measured quantity within a test type."""

    model_config = ConfigDict(frozen=True)

    id: Identifier
    name: str
    unit: str | None = None
    reference_range: str | None = None
    order: Annotated[int, BeforeValidator(_coerce_order)] = 0
    test_type: TestTypeRef | None = None


class ResultJoinRow(BaseModel):
    """One result value with its denormalized parameter/test type/category."""

    model_config = ConfigDict(frozen=True)

    value: Annotated[str | None, BeforeValidator(_coerce_value)] = None
    parameter: ParameterRef | None = None


class ExceptionEntry(BaseModel):
    """A category or test-type name for which range checking is disabled."""

    model_config = ConfigDict(frozen=True)

    value: str
    type: ExceptionKind = Field(description="Whether value names a category or a test type")


# === Grouped tree ===


class ParameterResult(BaseModel):
    """A parameter together with its measured value."""

    parameter_id: str
    name: str
    unit: str | None = None
    reference_range: str | None = None
    order: int = 0
    value: str | None = None


class TestTypeGroup(BaseModel):
    """Parameters of one test type, ordered for display."""

    test_type_id: str
    name: str
    parameters: list[ParameterResult] = Field(default_factory=list)


class CategoryGroup(BaseModel):
    """Test types of one category, ordered for display."""

    category_id: str
    name: str
    test_types: list[TestTypeGroup] = Field(default_factory=list)


GroupedTree = list[CategoryGroup]