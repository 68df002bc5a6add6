from __future__ import annotations

from datetime import date

import httpx
import pytest

from salesboard.core.config import Settings
from salesboard.core.errors import UpstreamError
from salesboard.models.sales import SpaLeg, Tenure
from salesboard.repositories.sales_sheets_repository import SalesSheetsRepository
from salesboard.repositories.sheet_rows import parse_dpr_rows, parse_roster_entries, parse_sales_rows
from salesboard.shared.parsing import currency_to_number, month_approved_to_date, parse_date

SALES_HEADER = [
    "Month Approved",
    "Policy Number",
    "Advisor",
    "Unit Manager",
    "Policy Owner",
    "Product",
    "ANP",
    "FYP",
    "FYC",
    "Mode",
    "MDRT FYP",
    "AFYC",
    "Case Count",
    "Face Amount",
    "Date Submitted",
    "Date Paid",
    "Date Approved",
    "Remarks / Status",
]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("₱12,345.50", 12_345.5),
        ("PHP 1,000", 1_000.0),
        ("", 0.0),
        ("n/a", 0.0),
        (None, 0.0),
        (250, 250.0),
    ],
)
def test_currency_to_number(raw, expected):
    assert currency_to_number(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12/5/2022", date(2022, 12, 5)),
        ("2026-01-09", date(2026, 1, 9)),
        ("3/4/26", date(2026, 3, 4)),
        ("Feb 3, 2026", date(2026, 2, 3)),
        ("2/30/2026", None),
        ("pending", None),
        ("", None),
    ],
)
def test_parse_date(raw, expected):
    assert parse_date(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2026-01", date(2026, 1, 1)),
        ("2026/11", date(2026, 11, 1)),
        ("2026-03-18", date(2026, 3, 1)),
        ("January 2026", date(2026, 1, 1)),
        ("Sept 2025", date(2025, 9, 1)),
        ("2026-13", None),
        ("0000-01", None),
        ("January 0000", None),
        ("Someday 2026", None),
        ("January", None),
    ],
)
def test_month_approved_to_date(raw, expected):
    assert month_approved_to_date(raw) == expected


def test_parse_sales_rows_skips_title_row():
    values = [
        ["New Business Tracker 2026"],
        [],
        SALES_HEADER,
        [
            "January 2026",
            "P-001",
            " Ana  Cruz ",
            "Unit Alpha",
            "Juan",
            "Ascend",
            "₱24,000",
            "24,000",
            "9,600.00",
            "Annual",
            "24000",
            "8000",
            "1",
            "1,000,000",
            "1/3/2026",
            "1/5/2026",
            "1/20/2026",
            "Issued",
        ],
        ["", "", "", ""],
        ["", "P-002", "Bea", "", "", "Guardian", "", "", "bad", "", "", "", "", "", "", "", "", ""],
    ]

    records = parse_sales_rows(values)

    assert len(records) == 2
    first = records[0]
    assert first.advisor == "Ana Cruz"
    assert first.month_approved == "January 2026"
    assert first.anp == 24_000
    assert first.fyc == 9_600
    assert first.mdrt_fyp == 24_000
    assert first.face_amount == 1_000_000
    assert first.date_approved == date(2026, 1, 20)
    assert first.remarks == "Issued"
    second = records[1]
    assert second.fyc == 0.0
    assert second.date_approved is None
    assert second.month_approved is None


def test_parse_sales_rows_handles_short_rows():
    values = [SALES_HEADER, ["March 2026", "P-9", "Cy"]]
    records = parse_sales_rows(values)
    assert records[0].advisor == "Cy"
    assert records[0].date_paid is None
    assert parse_sales_rows([SALES_HEADER]) == []


def test_parse_roster_entries_with_headers():
    values = [
        ["Team Roster"],
        ["Advisors", "Unit", "SPA / LEG", "Program", "PA Date", "Tenure", "Months CMP 2025"],
        ["Ana Cruz", "Alpha", "SPA", "Core", "3/1/2024", "Rookie", "4"],
        ["ana  cruz", "Beta", "LEG", "", "", "", ""],
        ["Ben Uy", "", "Legacy Group", "", "2019-05-01", "Tenured", ""],
        ["", "Alpha", "", "", "", "", ""],
        ["Cy", "Alpha", "other", "", "", "First 2 years", "x"],
    ]

    entries = parse_roster_entries(values)

    assert [entry.advisor for entry in entries] == ["Ana Cruz", "Ben Uy", "Cy"]
    ana, ben, cy = entries
    assert ana.unit == "Alpha"
    assert ana.spa_leg == SpaLeg.SPARTAN
    assert ana.pa_date == date(2024, 3, 1)
    assert ana.tenure == Tenure.ROOKIE
    assert ana.months_cmp_carryover == 4
    assert ben.unit is None
    assert ben.spa_leg == SpaLeg.LEGACY
    assert ben.tenure == Tenure.TENURED
    assert ben.tenure_label == "Tenured"
    assert cy.spa_leg == SpaLeg.UNKNOWN
    assert cy.tenure == Tenure.ROOKIE
    assert cy.months_cmp_carryover == 0


def test_parse_roster_entries_falls_back_to_first_column():
    values = [["Sales Force"], ["Ana"], ["ANA"], [""], ["Ben"]]
    assert [entry.advisor for entry in parse_roster_entries(values)] == ["Ana", "Ben"]


def test_parse_dpr_rows():
    values = [
        ["Month", "Advisor", "FYC", "ANP", "FYP", "Persistency"],
        ["January 2026", "Ana", "12,000", "30,000", "30,000", "85%"],
        ["2026-02", "Ben", "5000", "", "", "0.9"],
        ["", "Cy", "100", "", "", ""],
        ["2026-02", "", "100", "", "", ""],
        ["0000-01", "Dee", "100", "", "", ""],
    ]

    rows = parse_dpr_rows(values)

    assert [(row.month, row.advisor, row.fyc) for row in rows] == [
        ("2026-01", "Ana", 12_000),
        ("2026-02", "Ben", 5_000),
    ]
    assert rows[0].persistency == pytest.approx(0.85)
    assert rows[1].persistency == pytest.approx(0.9)


class _StubSheetsClient:
    def __init__(self, grids=None, failing=()):
        self.grids = grids or {}
        self.failing = set(failing)

    def get_values(self, sheet_name, cell_range="A:Z"):
        if sheet_name in self.failing:
            request = httpx.Request("GET", "https://sheets.example/values")
            raise httpx.HTTPStatusError(
                "400 Bad Request", request=request, response=httpx.Response(400, request=request)
            )
        return self.grids.get(sheet_name, [])


def test_repository_treats_missing_dpr_sheet_as_empty():
    client = _StubSheetsClient(
        grids={"Roster": [["Advisors"], ["Ana"]]},
        failing={"DPR"},
    )
    repository = SalesSheetsRepository(settings=Settings(), client=client)

    assert repository.list_dpr_rows() == []
    assert [entry.advisor for entry in repository.list_roster()] == ["Ana"]


def test_repository_wraps_sheet_failures():
    repository = SalesSheetsRepository(
        settings=Settings(), client=_StubSheetsClient(failing={"New Business"})
    )
    with pytest.raises(UpstreamError) as exc_info:
        repository.list_transactions()
    assert exc_info.value.status_code == 502
    assert exc_info.value.details == {"sheet": "New Business"}
