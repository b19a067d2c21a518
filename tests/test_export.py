"""Tests for the export pipeline and the CSV writer."""

import csv
import logging
from datetime import date

import pytest

from config.defaults import EXPORT_COLUMNS
from config.schema import SyncConfig
from export.csv_export import TrainingUnitExporter
from export.helpers import export_file_path, write_rows_csv
from models.training_unit import LinkedProcessLink

from conftest import FakeClient, paged, scim_routes


LIST = "Training/Register/ListPage"
DETAILS = "Training/Unit/GetTrainingUnitDetails"
TRAINEES = "Training/Trainee"


# ─── Test data helpers ────────────────────────────────────────────────────────

def _detail(title, **overrides) -> dict:
    unit = {
        "Title": title,
        "Description": f"{title} description",
        "Type": 1,
        "AssessmentMethod": 2,
        "RenewCycle": 12,
        "Provider": "Internal",
        "OwnerId": 100,
        "LinkedProcesses": [],
        "LinkedDocuments": [],
    }
    unit.update(overrides)
    return {"success": True, "trainingUnit": unit}


def _make_client(units, details, trainees=None, users=None) -> FakeClient:
    """units: register entries; details/trainees keyed by UniqueId."""
    trainees = trainees or {}
    routes = {
        ("GET", LIST): paged("trainingUnits", [units]),
        ("GET", DETAILS): lambda params, _b: details.get(params["unitUniqueId"]),
        ("GET", TRAINEES): lambda params, _b: {
            "success": True,
            "trainees": trainees.get(params["unitUniqueId"], []) if params["page"] == 1 else [],
            "paging": {"HasNextPage": False},
        },
    }
    routes.update(scim_routes(users or {"owner@example.com": 100}))
    return FakeClient(routes)


def _read_csv(path):
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return reader.fieldnames, list(reader)


@pytest.fixture
def config(tmp_path) -> SyncConfig:
    return SyncConfig(export_dir=str(tmp_path), page_size=2, trainee_page_size=5)


# ─── Helpers ──────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_export_file_name_carries_date(self, tmp_path):
        path = export_file_path(tmp_path, date(2024, 3, 5))
        assert path.name == "TrainingUnits_Export_20240305.csv"

    def test_empty_export_still_has_header(self, tmp_path):
        out = write_rows_csv([], tmp_path / "sub" / "empty.csv")
        header, rows = _read_csv(out)
        assert header == EXPORT_COLUMNS
        assert rows == []

    @pytest.mark.parametrize("url,expected", [
        ("https://x/Process/View?uniqueId=abc-123", "abc-123"),
        ("https://x/Process/View?id=1&uniqueId=abc&tab=2", "abc"),
        ("https://x/Process/View?UNIQUEID=Q9", "Q9"),
        ("https://x/Process/View?id=1", None),
        (None, None),
    ])
    def test_unique_id_from_process_url(self, url, expected):
        assert LinkedProcessLink(Title="P", Url=url).unique_id == expected


# ─── Pipeline ─────────────────────────────────────────────────────────────────

class TestExportPipeline:
    def test_full_row_is_flattened(self, config):
        details = {"u1": _detail(
            "Forklift",
            LinkedProcesses=[
                {"Title": "Loading", "Url": "https://x/p?uniqueId=P-1"},
                {"Title": "Unloading", "Url": "https://x/p?uniqueId=P-2"},
            ],
            LinkedDocuments=[{"Title": "Manual"}, {"Title": ""}, {"Title": "Checklist"}],
        )}
        client = _make_client(
            [{"Id": 1, "UniqueId": "u1", "Title": "Forklift"}], details,
            trainees={"u1": [{"UserId": 7, "UserFullName": "Ann"},
                             {"UserId": 8, "UserFullName": "Bob"}]},
            users={"owner@example.com": 100, "ann": 7, "bob": 8},
        )
        report = TrainingUnitExporter(client, config).run(today=date(2024, 1, 2))

        assert report.units_listed == 1
        assert report.units_exported == 1
        header, rows = _read_csv(report.output_path)
        assert header == EXPORT_COLUMNS
        row = rows[0]
        assert row["Title"] == "Forklift"
        assert row["Type"] == "Course"
        assert row["Assessment Label"] == "Supervisor Sign Off"
        assert row["Renew Cycle"] == "12"
        assert row["Owner Username"] == "owner@example.com"
        assert row["Linked Processes: Title"] == "Loading;Unloading"
        assert row["Linked Processes: uniqueId"] == "P-1;P-2"
        assert row["Linked Documents: Titles"] == "Manual;Checklist"
        assert row["Trainees: Usernames"] == "ann;bob"

    def test_failed_detail_fetch_skips_only_that_unit(self, config, caplog):
        units = [
            {"UniqueId": "u1", "Title": "First"},
            {"UniqueId": "u2", "Title": "Broken"},
            {"UniqueId": "u3", "Title": "Third"},
        ]
        details = {"u1": _detail("First"), "u3": _detail("Third")}
        client = _make_client(units, details)

        with caplog.at_level(logging.WARNING):
            report = TrainingUnitExporter(client, config).run()

        assert report.units_listed == 3
        assert report.units_exported == 2
        assert report.skipped_titles == ["Broken"]
        assert "Broken" in caplog.text
        _, rows = _read_csv(report.output_path)
        assert [r["Title"] for r in rows] == ["First", "Third"]
        # No trainee lookup for the skipped unit
        assert all(c.params["unitUniqueId"] != "u2" for c in client.calls_to(TRAINEES))

    def test_success_false_detail_is_skipped(self, config):
        details = {"u1": {"success": False, "trainingUnit": None}}
        client = _make_client([{"UniqueId": "u1", "Title": "X"}], details)
        assert TrainingUnitExporter(client, config).collect() == []

    def test_unresolved_trainee_is_left_out(self, config, caplog):
        client = _make_client(
            [{"UniqueId": "u1", "Title": "Unit"}], {"u1": _detail("Unit")},
            trainees={"u1": [{"UserId": 7, "UserFullName": "Ann"},
                             {"UserId": 9, "UserFullName": "Ghost"}]},
            users={"owner@example.com": 100, "ann": 7},
        )
        with caplog.at_level(logging.WARNING):
            rows = TrainingUnitExporter(client, config).collect()

        assert rows[0].trainee_usernames == ["ann"]
        assert rows[0].title == "Unit"
        assert rows[0].owner_username == "owner@example.com"
        assert "Ghost" in caplog.text

    def test_process_without_unique_id_keeps_title(self, config):
        details = {"u1": _detail("Unit", LinkedProcesses=[
            {"Title": "Has id", "Url": "https://x/p?uniqueId=A"},
            {"Title": "No id", "Url": "https://x/p?id=2"},
        ])}
        client = _make_client([{"UniqueId": "u1"}], details)
        row = TrainingUnitExporter(client, config).collect()[0]
        csv_row = row.to_csv_dict()
        assert csv_row["Linked Processes: Title"] == "Has id;No id"
        assert csv_row["Linked Processes: uniqueId"] == "A"

    def test_unknown_codes_and_missing_owner(self, config):
        details = {"u1": _detail("Unit", Type=9, AssessmentMethod=None, OwnerId=None,
                                 RenewCycle=None)}
        client = _make_client([{"UniqueId": "u1"}], details)
        csv_row = TrainingUnitExporter(client, config).collect()[0].to_csv_dict()
        assert csv_row["Type"] == "Unknown (9)"
        assert csv_row["Assessment Label"] == "Unknown (None)"
        assert csv_row["Owner Username"] == ""
        assert csv_row["Renew Cycle"] == ""

    def test_register_pages_are_followed(self, config):
        pages = [[{"UniqueId": "u1"}, {"UniqueId": "u2"}], [{"UniqueId": "u3"}]]
        details = {u: _detail(u) for u in ("u1", "u2", "u3")}
        client = _make_client([], details)
        client.routes[("GET", LIST)] = paged("trainingUnits", pages)

        rows = TrainingUnitExporter(client, config).collect()
        assert [r.title for r in rows] == ["u1", "u2", "u3"]
        list_calls = client.calls_to(LIST)
        assert [c.params["page"] for c in list_calls] == [1, 2]
        assert list_calls[0].params["pageSize"] == 2
        assert list_calls[0].params["ListFilter"] == 0

    def test_write_failure_is_reported(self, config, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        config = config.model_copy(update={"export_dir": str(blocker)})
        client = _make_client([{"UniqueId": "u1"}], {"u1": _detail("Unit")})

        report = TrainingUnitExporter(client, config).run()
        assert report.output_path is None
        assert report.write_error
        assert report.units_exported == 1
