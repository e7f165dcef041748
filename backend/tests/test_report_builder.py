"""Tests for the report presentation pipeline."""

from labreport.schemas.report import ColumnWidths, OverrideState
from labreport.schemas.results import Classification
from labreport.services.overrides import OverrideStateMachine
from labreport.services.print_layout import PrintLayoutCoordinator
from labreport.services.report_builder import build_report
from labreport.services.skip_list import SkipListStore


def _params(report):
    return {
        p.parameter_id: p
        for c in report.categories
        for t in c.test_types
        for p in t.parameters
    }


class TestBuildReport:
    """Grouping + classification + overrides + layout."""

    def test_automatic_classification(self, rows):
        params = _params(build_report(rows))
        assert params["p-hb"].status is Classification.IN_RANGE
        assert params["p-gb"].status is Classification.OUT_OF_RANGE
        assert params["p-vs"].status is Classification.OUT_OF_RANGE
        assert params["p-gly"].status is Classification.IN_RANGE
        assert params["p-hiv"].status is Classification.IN_RANGE

    def test_skip_list_store_forces_indeterminate(self, rows, skip_entries):
        report = build_report(rows, SkipListStore(skip_entries))
        params = _params(report)
        assert params["p-hiv"].auto_status is Classification.INDETERMINATE
        assert params["p-gb"].auto_status is Classification.OUT_OF_RANGE

    def test_plain_names_accepted(self, rows):
        params = _params(build_report(rows, ["NFS"]))
        assert params["p-gb"].status is Classification.INDETERMINATE
        assert params["p-vs"].status is Classification.OUT_OF_RANGE

    def test_single_name_accepted(self, rows):
        params = _params(build_report(rows, "NFS"))
        assert params["p-gb"].status is Classification.INDETERMINATE
        assert params["p-vs"].status is Classification.OUT_OF_RANGE

    def test_override_replaces_status_and_keeps_auto(self, rows):
        overrides = OverrideStateMachine()
        overrides.toggle("p-gb")  # off
        params = _params(build_report(rows, overrides=overrides))
        assert params["p-gb"].auto_status is Classification.OUT_OF_RANGE
        assert params["p-gb"].override is OverrideState.OFF
        assert params["p-gb"].status is Classification.IN_RANGE

    def test_override_mapping(self, rows):
        params = _params(build_report(rows, overrides={"p-hb": OverrideState.WARN}))
        assert params["p-hb"].status is Classification.INDETERMINATE
        assert params["p-plq"].override is None

    def test_custom_order(self, rows):
        report = build_report(rows, custom_order=["c-sero", "c-hema", "c-bio"])
        assert [c.category_id for c in report.categories] == ["c-sero", "c-hema", "c-bio"]

    def test_layout_flags_attached(self, rows):
        layout = PrintLayoutCoordinator(column_widths=ColumnWidths(parameter=50))
        layout.set_break_before("c-sero", True)
        layout.set_include("c-bio", False)
        report = build_report(rows, layout=layout)
        by_id = {c.category_id: c for c in report.categories}
        assert by_id["c-sero"].force_break_before is True
        assert by_id["c-bio"].include_in_print is False
        assert by_id["c-hema"].include_in_print is True
        assert report.column_widths.parameter == 50

    def test_printable_only(self, rows):
        layout = PrintLayoutCoordinator()
        layout.set_include("c-bio", False)
        report = build_report(rows, layout=layout, printable_only=True)
        assert [c.category_id for c in report.categories] == ["c-hema", "c-sero"]
        assert report.total == 5

    def test_show_header(self, rows):
        hema = build_report(rows).categories[1]
        assert [t.show_header for t in hema.test_types] == [True, False]

    def test_total(self, rows):
        assert build_report(rows).total == len(rows)

    def test_rebuild_is_identical(self, rows):
        overrides = {"p-hb": OverrideState.ON}
        first = build_report(rows, ["Sérologie"], overrides, ["c-bio"])
        second = build_report(rows, ["Sérologie"], overrides, ["c-bio"])
        assert first == second

    def test_empty(self):
        report = build_report([])
        assert report.categories == []
        assert report.total == 0
