"""Tests for the export and monthly-grid timesheet parsers."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from tests.fakes import MemoryFileStore, MemoryTeamConfig, build_workbook
from timeledger.core.exceptions import FileStoreError
from timeledger.ingest.parser import (
    ExportTimesheetParser,
    MonthlyGridParser,
    TimesheetParser,
    discover_columns,
)
from timeledger.models.time_entry import IssueKind, SourceFile

HEADER = ["Date", "Personnel ID", "Charge Number", "Premium", "Extension",
          "Hours", "Description", "Explanation", "Modified"]

EXPORT_ROWS = [
    HEADER,
    [date(2024, 1, 8), "1001", "CN200", "1", "B2", 8, "Project work", "Regular", "Y"],
    [date(2024, 1, 9), "1001", "CN100", "1", "A1", 7.5, "Project work", "Regular", None],
    [None, None, None, None, None, 15.5, None, "Total for 1001", None],
    [date(2024, 1, 10), "1001", None, None, None, "Vacation", "Vacation", "Planned", None],
    [date(2024, 1, 1), "1002", None, None, None, "Holiday", "Holiday", "H1 New Years", None],
    [date(2024, 1, 11), "9999", "CN100", "1", "A1", 8, "Project work", "Regular", None],
    [date(2024, 1, 12), "1001", "CN100", "1", "A1", "V", None, "Regular", None],
    [date(2023, 6, 1), "1001", "CN100", "1", "A1", 8, None, "Regular", None],
    ["not a date", "1001", "CN100", "1", "A1", 8, None, "Regular", None],
]


@pytest.fixture
def parser(employees, forecasts, workcodes, settings):
    return ExportTimesheetParser(
        employees=employees, forecasts=forecasts, workcodes=workcodes,
        company_id="acme", settings=settings,
    )


@pytest.fixture
def export_file():
    return SourceFile(name="export.xlsx", data=build_workbook(EXPORT_ROWS))


class TestDiscoverColumns:
    def test_case_insensitive_first_occurrence(self):
        columns = discover_columns(["DATE", None, "Hours", "hours", " Explanation "])
        assert columns == {"date": 0, "hours": 2, "explanation": 4}


class TestExportRows:
    def test_entries_are_emitted_and_sorted(self, parser, export_file):
        result = parser.parse([export_file])

        assert [(e.employee_id, e.date) for e in result.entries] == [
            ("1001", date(2024, 1, 8)),
            ("1001", date(2024, 1, 9)),
            ("1001", date(2024, 1, 10)),
            ("1002", date(2024, 1, 1)),
        ]

    def test_work_entry_fields(self, parser, export_file):
        first, second = parser.parse([export_file]).entries[:2]
        assert (first.charge_number, first.extension, first.hours) == ("CN200", "B2", Decimal("8"))
        assert first.modified is True
        assert (second.charge_number, second.extension, second.hours) == ("CN100", "A1", Decimal("7.5"))
        assert second.modified is False
        assert second.comment == "Regular"

    def test_leave_entries_use_standard_workday(self, parser, export_file):
        entries = parser.parse([export_file]).entries
        vacation, holiday = entries[2], entries[3]
        assert vacation.code == "V"
        assert vacation.hours == Decimal("8.0")
        assert vacation.charge_number == ""
        assert holiday.code == "H"
        assert holiday.hours == Decimal("10")
        assert holiday.holiday_id == "H1"

    def test_dropped_rows_reported_not_raised(self, parser, export_file):
        result = parser.parse([export_file])

        assert result.failures == ()
        assert [(i.row, i.kind) for i in result.issues] == [
            (7, IssueKind.UNKNOWN_EMPLOYEE),
            (8, IssueKind.UNRECOGNIZED_VALUE),
            (9, IssueKind.UNRESOLVED_CHARGE),
            (10, IssueKind.INVALID_DATE),
        ]

    def test_subtotal_rows_skipped_silently(self, parser, export_file):
        result = parser.parse([export_file])
        assert all(issue.row != 4 for issue in result.issues)

    def test_reparse_is_identical(self, parser, export_file):
        assert parser.parse([export_file]) == parser.parse([export_file])


class TestFileIsolation:
    def test_missing_explanation_rejects_only_that_file(self, parser, export_file):
        header = [h for h in HEADER if h != "Explanation"]
        bad = SourceFile(name="bad.xlsx", data=build_workbook([header]))

        result = parser.parse([bad, export_file])

        assert len(result.entries) == 4
        assert len(result.failures) == 1
        assert result.failures[0].filename == "bad.xlsx"
        assert result.failures[0].error_type == "MissingHeaderError"
        assert "explanation" in result.failures[0].error
        assert result.processed_files == ("export.xlsx",)

    def test_unreadable_bytes(self, parser, export_file):
        junk = SourceFile(name="junk.xlsx", data=b"definitely not a workbook")
        result = parser.parse([export_file, junk])
        assert [f.error_type for f in result.failures] == ["UnreadableFileError"]
        assert len(result.entries) == 4

    def test_missing_worksheet(self, parser):
        other = SourceFile(name="other.xlsx", data=build_workbook(EXPORT_ROWS, sheet="Summary"))
        result = parser.parse([other])
        assert result.entries == ()
        assert result.failures[0].error_type == "MissingWorksheetError"

    def test_file_order_does_not_change_output(self, parser, export_file):
        second = SourceFile(name="second.xlsx", data=build_workbook([
            HEADER,
            [date(2024, 1, 15), "1002", "CN300", "1", "C3", 9, "Ops", "Regular", None],
        ]))
        forward = parser.parse([export_file, second])
        backward = parser.parse([second, export_file])
        assert forward.entries == backward.entries
        assert len(forward.entries) == 5


class TestStoreIngest:
    def test_reads_and_archives(self, parser):
        store = MemoryFileStore()
        store.write("dropzone/export.xlsx", build_workbook(EXPORT_ROWS))
        store.write("dropzone/junk.xlsx", b"junk")

        result = parser.parse_store(store, store.list_files("dropzone/"), archive=True)

        assert len(result.entries) == 4
        assert [f.filename for f in result.failures] == ["dropzone/junk.xlsx"]
        assert store.list_files("dropzone/") == []
        assert store.list_files("processed/") == ["processed/dropzone/export.xlsx"]
        assert store.list_files("failed/") == ["failed/dropzone/junk.xlsx"]
        assert result.archived == {
            "dropzone/export.xlsx": "processed/dropzone/export.xlsx",
            "dropzone/junk.xlsx": "failed/dropzone/junk.xlsx",
        }

    def test_missing_object_is_a_file_failure(self, parser):
        store = MemoryFileStore()
        result = parser.parse_store(store, ["dropzone/gone.xlsx"])
        assert result.failures[0].error_type == "UnreadableFileError"

    def test_unreadable_path_is_not_archived(self, parser):
        store = MemoryFileStore()
        store.write("dropzone/good.xlsx", build_workbook(EXPORT_ROWS))

        result = parser.parse_store(
            store, ["dropzone/good.xlsx", "dropzone/gone.xlsx"], archive=True
        )

        assert len(result.entries) == 4
        assert [f.filename for f in result.failures] == ["dropzone/gone.xlsx"]
        assert result.archived == {"dropzone/good.xlsx": "processed/dropzone/good.xlsx"}
        assert result.archive_failures == ()
        assert store.list_files("failed/") == []

    def test_same_file_name_in_two_folders_both_archived(self, parser):
        store = MemoryFileStore()
        store.write("dropzone/a/export.xlsx", build_workbook(EXPORT_ROWS))
        store.write("dropzone/b/export.xlsx", build_workbook(EXPORT_ROWS))

        parser.parse_store(store, store.list_files("dropzone/"), archive=True)

        assert store.list_files("processed/") == [
            "processed/dropzone/a/export.xlsx",
            "processed/dropzone/b/export.xlsx",
        ]

    def test_archive_failure_is_reported_not_raised(self, parser):
        class StuckStore(MemoryFileStore):
            def archive(self, path, prefix):
                raise FileStoreError(f"access denied for {path}")

        store = StuckStore()
        store.write("dropzone/export.xlsx", build_workbook(EXPORT_ROWS))

        result = parser.parse_store(store, ["dropzone/export.xlsx"], archive=True)

        assert len(result.entries) == 4
        assert result.failures == ()
        assert result.archived == {}
        assert [(f.filename, f.error_type) for f in result.archive_failures] == [
            ("dropzone/export.xlsx", "FileStoreError"),
        ]
        assert store.list_files("dropzone/") == ["dropzone/export.xlsx"]


class TestDuplicateCharges:
    def test_rows_resolving_to_same_charge_are_merged(self, parser):
        source = SourceFile(name="dupes.xlsx", data=build_workbook([
            HEADER,
            [date(2024, 1, 8), "1001", "CN999", "1", "Z9", 6, "Project work", "Regular", None],
            [date(2024, 1, 8), "1001", "CN100", "1", "A1", 2, "Project work", "Regular", "Y"],
        ]))

        result = parser.parse([source])

        assert len(result.entries) == 1
        entry = result.entries[0]
        assert (entry.charge_number, entry.extension, entry.hours) == ("CN100", "A1", Decimal("8"))
        assert entry.modified is True
        assert [(i.row, i.kind) for i in result.issues] == [(3, IssueKind.DUPLICATE_CHARGE)]

    def test_distinct_charges_same_day_kept(self, parser):
        source = SourceFile(name="split.xlsx", data=build_workbook([
            HEADER,
            [date(2024, 1, 8), "1001", "CN100", "1", "A1", 4, None, "Regular", None],
            [date(2024, 1, 8), "1001", "CN200", "1", "B2", 4, None, "Regular", None],
        ]))
        result = parser.parse([source])
        assert [e.charge_number for e in result.entries] == ["CN100", "CN200"]
        assert result.issues == ()


class TestConstruction:
    def test_base_parser_is_abstract(self, employees, forecasts, workcodes):
        with pytest.raises(TypeError):
            TimesheetParser(employees=employees, forecasts=forecasts,
                            workcodes=workcodes, company_id="acme")

    def test_for_team_uses_configured_leave_codes(self, employees, forecasts, workcodes, settings):
        team_config = MemoryTeamConfig()
        team_config.set_workcodes("ops", workcodes)
        parser = ExportTimesheetParser.for_team(
            team_config, "ops",
            employees=employees, forecasts=forecasts, company_id="acme", settings=settings,
        )
        result = parser.parse([SourceFile(name="export.xlsx", data=build_workbook(EXPORT_ROWS))])
        assert [e.code for e in result.entries if e.is_leave] == ["V", "H"]

    def test_for_team_without_codes_rejects_leave_text(self, employees, forecasts, settings):
        parser = ExportTimesheetParser.for_team(
            MemoryTeamConfig(), "unknown",
            employees=employees, forecasts=forecasts, company_id="acme", settings=settings,
        )
        result = parser.parse([SourceFile(name="export.xlsx", data=build_workbook(EXPORT_ROWS))])
        assert all(not e.is_leave for e in result.entries)
        assert IssueKind.UNRECOGNIZED_VALUE in {i.kind for i in result.issues}


class TestMonthlyGrid:
    @pytest.fixture
    def grid_parser(self, employees, forecasts, workcodes, settings):
        return MonthlyGridParser(
            month=date(2024, 2, 14),
            employees=employees, forecasts=forecasts, workcodes=workcodes,
            company_id="acme", settings=settings,
        )

    def test_days_map_to_month_columns(self, grid_parser):
        days = [None] * 31
        days[0] = 8
        days[1] = "vacation"
        days[29] = 8  # Feb 30 does not exist
        rows = [
            ["Name", None] + list(range(1, 32)),
            ["Smith, John", "ops"] + days,
            ["Remarks", None, "closed Monday"],
            ["Nobody, Xavier", None, 8],
        ]
        source = SourceFile(name="grid.xlsx", data=build_workbook(rows, sheet="Sheet1"))

        result = grid_parser.parse([source])

        assert [(e.date, e.code, e.charge_number) for e in result.entries] == [
            (date(2024, 2, 1), None, "CN100"),
            (date(2024, 2, 2), "V", ""),
        ]
        assert result.entries[1].hours == Decimal("8.0")
        assert [(i.row, i.kind) for i in result.issues] == [(4, IssueKind.UNKNOWN_EMPLOYEE)]
