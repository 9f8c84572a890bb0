"""
Time-clash detection over the slot grid.

Two slots clash when any occurrence of one shares a day with an occurrence of
the other and their column time ranges overlap. Theory and lab columns have
different boundaries, so a lab pair can clash with one or two theory slots.
"""

from typing import Dict, Iterable, List, Optional, Set

from models import Occurrence, TimeRange
from timeslots import iter_cells, split_alternatives, time_range_of


def _hosts(cell: str, code: str, preferences: Dict[str, str]) -> bool:
    if cell == code:
        return True
    if code not in split_alternatives(cell):
        return False
    # An alternative only occupies the cell when it is the chosen one (or nothing is chosen)
    return preferences.get(cell, code) == code


def occurrences_of(code: str, preferences: Optional[Dict[str, str]] = None) -> List[Occurrence]:
    """Every grid cell where `code` takes place (a code may appear twice in a day)."""
    prefs = preferences or {}
    return [occ for occ, cell in iter_cells() if _hosts(cell, code, prefs)]


def overlaps(range_a: TimeRange, range_b: TimeRange) -> bool:
    return range_a.overlaps(range_b)


def _occurrences_clash(first: List[Occurrence], second: List[Occurrence]) -> bool:
    for occ_a in first:
        for occ_b in second:
            # Must be on the same day to clash
            if occ_a.day != occ_b.day:
                continue
            if overlaps(time_range_of(occ_a.type, occ_a.column),
                        time_range_of(occ_b.type, occ_b.column)):
                return True
    return False


def find_clashes(
    candidate: str,
    assigned: Iterable[str],
    preferences: Optional[Dict[str, str]] = None,
) -> List[str]:
    """
    Assigned codes that overlap `candidate` in time.

    If `candidate` is itself assigned it is reported first, meaning
    "already taken" rather than a time conflict.
    """
    assigned = list(assigned)
    clashing: List[str] = []
    if candidate in assigned:
        clashing.append(candidate)

    candidate_occ = occurrences_of(candidate, preferences)
    if not candidate_occ:
        return clashing

    for code in assigned:
        if code == candidate or code in clashing:
            continue
        if _occurrences_clash(candidate_occ, occurrences_of(code, preferences)):
            clashing.append(code)
    return clashing


def find_all_clashing_codes(
    assigned: Iterable[str],
    preferences: Optional[Dict[str, str]] = None,
) -> Set[str]:
    """Unassigned grid codes that would clash with the current assignments."""
    prefs = preferences or {}
    assigned = set(assigned)
    clashing: Set[str] = set()
    checked: Set[str] = set()

    for _, cell in iter_cells():
        code = prefs.get(cell, cell)
        if code in checked:
            continue
        checked.add(code)
        if code in assigned or assigned.intersection(split_alternatives(code)):
            continue
        if find_clashes(code, assigned, prefs):
            clashing.add(code)
    return clashing
