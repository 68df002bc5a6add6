from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from salesboard.models.sales import DprRow, RosterEntry, TransactionRecord
from salesboard.shared.parsing import (
    clean_text,
    currency_to_number,
    month_approved_to_date,
    month_key,
    normalize_name,
    optional_text,
    parse_date,
    parse_spa_leg,
    parse_tenure,
)

HEADER_SCAN_LIMIT = 10
MIN_SALES_HEADER_SCORE = 3

SALES_EXPECTED_HEADERS = (
    "month approved",
    "policy number",
    "advisor",
    "unit manager",
    "product",
    "date submitted",
    "date paid",
    "date approved",
)
ROSTER_EXPECTED_HEADERS = (
    "advisors",
    "advisor",
    "unit",
    "spa / leg",
    "spa/leg",
    "program",
    "pa date",
    "tenure",
    "months cmp 2025",
    "months cmp",
)
DPR_EXPECTED_HEADERS = ("month", "advisor", "advisors", "fyc", "anp", "fyp", "persistency")

ROSTER_COLUMNS: Dict[str, Sequence[str]] = {
    "advisor": ("Advisors", "Advisor", "Name"),
    "unit": ("Unit",),
    "spa_leg": ("SPA / LEG", "SPA/LEG", "SPA LEG"),
    "program": ("Program",),
    "pa_date": ("PA Date", "PA"),
    "tenure": ("Tenure",),
    "months_cmp": ("Months CMP 2025", "Months CMP2025", "CMP 2025", "Months CMP"),
}
DPR_COLUMNS: Dict[str, Sequence[str]] = {
    "month": ("Month", "Month Approved", "Period"),
    "advisor": ("Advisor", "Advisors", "Name"),
    "fyc": ("FYC",),
    "anp": ("ANP",),
    "fyp": ("FYP",),
    "persistency": ("Persistency", "Persistency %"),
}


def normalize_header(value: object) -> str:
    return clean_text(value).lower()


def _is_blank_row(row: Sequence[str]) -> bool:
    return not any(clean_text(cell) for cell in row)


def detect_header_row(values: Sequence[Sequence[str]], expected: Iterable[str]) -> tuple[int, int]:
    """Index and score of the row holding the most expected headers among the first rows.

    Sheets often carry a title row above the real header, so the first row is not trusted.
    """
    expected_headers = list(expected)
    best_index = 0
    best_score = -1
    for index, row in enumerate(values[:HEADER_SCAN_LIMIT]):
        present = {normalize_header(cell) for cell in row}
        score = sum(1 for header in expected_headers if header in present)
        if score > best_score:
            best_index, best_score = index, score
    return best_index, best_score


class _HeaderLookup:
    def __init__(self, header_row: Sequence[str]) -> None:
        self._positions: Dict[str, int] = {}
        for position, cell in enumerate(header_row):
            self._positions.setdefault(normalize_header(cell), position)

    def index_of(self, *candidates: str) -> Optional[int]:
        for candidate in candidates:
            position = self._positions.get(normalize_header(candidate))
            if position is not None:
                return position
        return None

    def cell(self, row: Sequence[str], *candidates: str) -> str:
        position = self.index_of(*candidates)
        if position is None or position >= len(row):
            return ""
        return row[position]


def parse_sales_rows(values: Sequence[Sequence[str]]) -> List[TransactionRecord]:
    if not values or len(values) < 2:
        return []
    header_index, score = detect_header_row(values, SALES_EXPECTED_HEADERS)
    if score < MIN_SALES_HEADER_SCORE:
        header_index = 0
    lookup = _HeaderLookup(values[header_index])

    records: List[TransactionRecord] = []
    for row in values[header_index + 1 :]:
        if _is_blank_row(row):
            continue
        records.append(
            TransactionRecord(
                month_approved=optional_text(lookup.cell(row, "Month Approved")),
                policy_number=optional_text(lookup.cell(row, "Policy Number")),
                advisor=clean_text(lookup.cell(row, "Advisor")),
                unit_manager=optional_text(lookup.cell(row, "Unit Manager")),
                policy_owner=optional_text(lookup.cell(row, "Policy Owner")),
                product=optional_text(lookup.cell(row, "Product")),
                anp=currency_to_number(lookup.cell(row, "ANP")),
                fyp=currency_to_number(lookup.cell(row, "FYP")),
                fyc=currency_to_number(lookup.cell(row, "FYC")),
                mode=optional_text(lookup.cell(row, "Mode")),
                mdrt_fyp=currency_to_number(lookup.cell(row, "MDRT FYP")),
                afyc=currency_to_number(lookup.cell(row, "AFYC")),
                case_count=currency_to_number(lookup.cell(row, "Case Count")),
                face_amount=currency_to_number(lookup.cell(row, "Face Amount")),
                date_submitted=parse_date(lookup.cell(row, "Date Submitted")),
                date_paid=parse_date(lookup.cell(row, "Date Paid")),
                date_approved=parse_date(lookup.cell(row, "Date Approved")),
                remarks=optional_text(lookup.cell(row, "Remarks / Status", "Remarks")),
            )
        )
    return records


def _dedupe_roster(entries: Iterable[RosterEntry]) -> List[RosterEntry]:
    unique: Dict[str, RosterEntry] = {}
    for entry in entries:
        key = normalize_name(entry.advisor)
        if key and key not in unique:
            unique[key] = entry
    return list(unique.values())


def parse_roster_entries(values: Sequence[Sequence[str]]) -> List[RosterEntry]:
    if not values:
        return []
    header_index, score = detect_header_row(values, ROSTER_EXPECTED_HEADERS)
    if score < 1:
        # Older rosters are a bare list of names under a title cell.
        names = (clean_text(row[0]) if row else "" for row in values[1:])
        return _dedupe_roster(RosterEntry(advisor=name) for name in names if name)

    lookup = _HeaderLookup(values[header_index])
    advisor_index = lookup.index_of(*ROSTER_COLUMNS["advisor"])
    entries: List[RosterEntry] = []
    for row in values[header_index + 1 :]:
        if _is_blank_row(row):
            continue
        if advisor_index is None:
            advisor = clean_text(row[0]) if row else ""
        else:
            advisor = clean_text(row[advisor_index]) if advisor_index < len(row) else ""
        if not advisor:
            continue
        tenure_label = optional_text(lookup.cell(row, *ROSTER_COLUMNS["tenure"]))
        carryover = currency_to_number(lookup.cell(row, *ROSTER_COLUMNS["months_cmp"]))
        entries.append(
            RosterEntry(
                advisor=advisor,
                unit=optional_text(lookup.cell(row, *ROSTER_COLUMNS["unit"])),
                spa_leg=parse_spa_leg(lookup.cell(row, *ROSTER_COLUMNS["spa_leg"])),
                program=optional_text(lookup.cell(row, *ROSTER_COLUMNS["program"])),
                pa_date=parse_date(lookup.cell(row, *ROSTER_COLUMNS["pa_date"])),
                tenure=parse_tenure(tenure_label),
                tenure_label=tenure_label,
                months_cmp_carryover=max(0, int(carryover)),
            )
        )
    return _dedupe_roster(entries)


def _parse_persistency(value: str) -> Optional[float]:
    if not clean_text(value):
        return None
    number = currency_to_number(value)
    # "85%" and "85" both mean 0.85.
    return number / 100 if number > 1 else number


def parse_dpr_rows(values: Sequence[Sequence[str]]) -> List[DprRow]:
    if not values or len(values) < 2:
        return []
    header_index, _ = detect_header_row(values, DPR_EXPECTED_HEADERS)
    lookup = _HeaderLookup(values[header_index])

    rows: List[DprRow] = []
    for row in values[header_index + 1 :]:
        if _is_blank_row(row):
            continue
        advisor = clean_text(lookup.cell(row, *DPR_COLUMNS["advisor"]))
        month_cell = lookup.cell(row, *DPR_COLUMNS["month"])
        month = month_approved_to_date(month_cell) or parse_date(month_cell)
        if not advisor or month is None:
            continue
        rows.append(
            DprRow(
                month=month_key(month),
                advisor=advisor,
                fyc=currency_to_number(lookup.cell(row, *DPR_COLUMNS["fyc"])),
                anp=currency_to_number(lookup.cell(row, *DPR_COLUMNS["anp"])),
                fyp=currency_to_number(lookup.cell(row, *DPR_COLUMNS["fyp"])),
                persistency=_parse_persistency(lookup.cell(row, *DPR_COLUMNS["persistency"])),
            )
        )
    return rows
