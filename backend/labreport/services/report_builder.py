"""Report presentation pipeline.

Runs the full presentation pass for one report:

    join rows -> group -> classify each parameter (skip list aware)
              -> apply manual overrides -> attach print layout

The result is a PresentedReport, shaped for the renderer. Inputs are never
mutated; overrides, custom order and layout stay owned by the caller.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence

from labreport.schemas.report import (
    OverrideState,
    PresentedCategory,
    PresentedParameter,
    PresentedReport,
    PresentedTestType,
)
from labreport.schemas.results import ExceptionEntry, ResultJoinRow
from labreport.services.overrides import OverrideStateMachine
from labreport.services.print_layout import PrintLayoutCoordinator, show_test_type_header
from labreport.services.range_evaluator import classify
from labreport.services.result_grouper import group
from labreport.services.skip_list import SkipListStore

logger = logging.getLogger(__name__)


def build_report(
    rows: Iterable[ResultJoinRow],
    exceptions: SkipListStore | Iterable[str | ExceptionEntry] | None = None,
    overrides: OverrideStateMachine | Mapping[str, OverrideState] | None = None,
    custom_order: Sequence[str] | None = None,
    layout: PrintLayoutCoordinator | None = None,
    *,
    printable_only: bool = False,
) -> PresentedReport:
    """Build the presented report for a set of result rows.

    Args:
        rows: Validated join rows for one patient result.
        exceptions: Skip list snapshot, or names for which range checking is
            disabled.
        overrides: Manual overrides keyed by parameter id.
        custom_order: Category ids in user-arranged order.
        layout: Print layout coordinator; defaults apply when omitted.
        printable_only: Drop categories excluded from print.

    Returns:
        PresentedReport with classified parameters and layout flags.
    """
    if isinstance(exceptions, SkipListStore):
        skip_names = exceptions.names
    elif isinstance(exceptions, str):
        skip_names = frozenset({exceptions})
    elif isinstance(exceptions, ExceptionEntry):
        skip_names = frozenset({exceptions.value})
    else:
        skip_names = frozenset(
            e.value if isinstance(e, ExceptionEntry) else e for e in (exceptions or ())
        )
    if not isinstance(overrides, OverrideStateMachine):
        overrides = OverrideStateMachine.from_mapping(overrides)
    layout = layout or PrintLayoutCoordinator()

    tree = group(rows, custom_order)
    if printable_only:
        tree = layout.printable(tree)

    categories: list[PresentedCategory] = []
    total = 0
    for category_group in tree:
        category_layout = layout.category_layout(category_group.category_id)
        test_types: list[PresentedTestType] = []
        for test_type_group in category_group.test_types:
            parameters: list[PresentedParameter] = []
            for param in test_type_group.parameters:
                auto_status = classify(
                    param.value,
                    param.reference_range,
                    category_group.name,
                    test_type_group.name,
                    skip_names,
                )
                parameters.append(
                    PresentedParameter(
                        **param.model_dump(),
                        auto_status=auto_status,
                        override=overrides.get(param.parameter_id),
                        status=overrides.effective_status(param.parameter_id, auto_status),
                    )
                )
            total += len(parameters)
            test_types.append(
                PresentedTestType(
                    test_type_id=test_type_group.test_type_id,
                    name=test_type_group.name,
                    show_header=show_test_type_header(test_type_group),
                    parameters=parameters,
                )
            )
        categories.append(
            PresentedCategory(
                category_id=category_group.category_id,
                name=category_group.name,
                force_break_before=category_layout.force_break_before,
                include_in_print=category_layout.include_in_print,
                test_types=test_types,
            )
        )

    logger.debug("Built report: %d categories, %d parameters", len(categories), total)
    return PresentedReport(
        categories=categories,
        column_widths=layout.column_widths,
        total=total,
    )
