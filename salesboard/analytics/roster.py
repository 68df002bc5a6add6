from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from salesboard.models.sales import RosterEntry, SpaLeg
from salesboard.shared.parsing import clean_text, normalize_name

ALL_FILTER = "All"
UNASSIGNED_UNIT = "Unassigned"


def resolve_unit(unit: Optional[str]) -> str:
    return clean_text(unit) or UNASSIGNED_UNIT


def is_unfiltered(filter_value: Optional[str]) -> bool:
    text = clean_text(filter_value)
    return not text or text == ALL_FILTER


def matches_advisor(advisor: Optional[str], advisor_filter: Optional[str]) -> bool:
    if is_unfiltered(advisor_filter):
        return True
    return normalize_name(advisor) == normalize_name(advisor_filter)


class RosterIndex:
    """Roster entries keyed by normalized advisor name, first occurrence wins."""

    def __init__(self, entries: Iterable[RosterEntry]) -> None:
        self._by_key: Dict[str, RosterEntry] = {}
        for entry in entries:
            key = normalize_name(entry.advisor)
            if not key or key in self._by_key:
                continue
            self._by_key[key] = entry

    @property
    def entries(self) -> List[RosterEntry]:
        return list(self._by_key.values())

    def get(self, advisor: Optional[str]) -> Optional[RosterEntry]:
        return self._by_key.get(normalize_name(advisor))

    def unit_of(self, advisor: Optional[str]) -> str:
        entry = self.get(advisor)
        return resolve_unit(entry.unit if entry else None)

    def spa_leg_of(self, advisor: Optional[str]) -> SpaLeg:
        entry = self.get(advisor)
        return entry.spa_leg if entry else SpaLeg.UNKNOWN

    def display_name(self, advisor: Optional[str]) -> str:
        entry = self.get(advisor)
        return entry.advisor if entry else clean_text(advisor)

    def in_unit(self, advisor: Optional[str], unit_filter: Optional[str]) -> bool:
        if is_unfiltered(unit_filter):
            return True
        return self.unit_of(advisor) == clean_text(unit_filter)
