"""Report presentation API routes.

Turns the flat result-value join rows of one patient result into the ordered,
classified tree the report page and print view render. Overrides, custom
category order and layout flags are sent by the client on each call; the
server keeps no presentation state.
"""

from fastapi import APIRouter, Depends

from labreport.schemas.report import (
    ClassifyRequest,
    ClassifyResponse,
    PresentedReport,
    RenderReportRequest,
    ReorderRequest,
    ReorderResponse,
)
from labreport.routes.skip_ranges import get_skip_list
from labreport.services.print_layout import PrintLayoutCoordinator, default_column_widths
from labreport.services.range_evaluator import classify
from labreport.services.report_builder import build_report
from labreport.services.result_grouper import reorder, validate_rows
from labreport.services.skip_list import SkipListStore

router = APIRouter(tags=["reports"])


@router.post("/reports/render", response_model=PresentedReport)
async def render_report(
    body: RenderReportRequest,
    store: SkipListStore = Depends(get_skip_list),
) -> PresentedReport:
    """Group, classify and lay out result rows for rendering.

    Malformed rows, and rows whose test type or category is missing, are
    dropped from the report rather than rejected.

    Returns:
        PresentedReport with categories in display order.
    """
    rows = validate_rows(body.rows)
    layout = PrintLayoutCoordinator.from_flags(body.layout, default_widths=default_column_widths())
    return build_report(
        rows,
        store,
        overrides=body.overrides,
        custom_order=body.custom_order,
        layout=layout,
        printable_only=body.printable_only,
    )


@router.post("/reports/reorder", response_model=ReorderResponse)
async def reorder_categories(body: ReorderRequest) -> ReorderResponse:
    """Move one category id within a custom order."""
    return ReorderResponse(ids=reorder(body.ids, body.from_index, body.to_index))


@router.post("/classify", response_model=ClassifyResponse)
async def classify_value(
    body: ClassifyRequest,
    store: SkipListStore = Depends(get_skip_list),
) -> ClassifyResponse:
    """Classify a single value against a reference range."""
    status = classify(
        body.value,
        body.reference_range,
        body.category_name,
        body.test_type_name,
        store.names,
    )
    return ClassifyResponse(status=status)
