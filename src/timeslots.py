# timeslots.py
#
# Authoritative slot grid of the Freshers Winter Semester 2025-26 slot timetable.
#
# Each day has two rows:
#   theory: 10 columns (5 morning + 5 afternoon, lunch between)
#   lab:     6 columns (3 morning + 3 afternoon), each a fused pair like "L61+L62"
#
# A theory cell may carry alternatives joined by "/" ("A1/SE2"); the student's
# section decides which one applies. G1 and G2 slots are not part of this grid.

from typing import Iterator, List, Optional, Set, Tuple

from config import LAB_TIME_RANGES, THEORY_TIME_RANGES
from models import SLOT_TYPES, Occurrence, TimeRange

DAYS = ["MON", "TUE", "WED", "THU", "FRI", "SAT"]

TIMETABLE_STRUCTURE = {

    # ============================================================
    #  MONDAY
    # ============================================================
    "MON": {
        "theory": [None, "TA1", "TB1", "E1", "E1", "TA2", "TB2", "E2", "E2", None],
        "lab": ["L61+L62", "L63+L64", "L65+L66", "L67+L68", "L69+L70", "L71+L72"],
    },

    # ============================================================
    #  TUESDAY
    # ============================================================
    "TUE": {
        "theory": ["TFF1", "A1/SE2", "B1/SD2", "C1", "D1", "F2", "A2/SF1", "B2/SC1", "C2", "TDD2"],
        "lab": ["L1+L2", "L3+L4", "L5+L6", "L31+L32", "L33+L34", "L35+L36"],
    },

    # ============================================================
    #  WEDNESDAY
    # ============================================================
    "WED": {
        "theory": ["TEE1", "D1", "F1", "TE1", "B1/SC2", "D2", "F2", "B2/SD1", "TE2", None],
        "lab": ["L7+L8", "L9+L10", "L11+L12", "L37+L38", "L39+L40", "L41+L42"],
    },

    # ============================================================
    #  THURSDAY
    # ============================================================
    "THU": {
        "theory": [None, "C1", "D1", "A1/SB2", "F1", "E2", "C2", "A2/SB1", "D2", "TFF2"],
        "lab": ["L13+L14", "L15+L16", "L17+L18", "L43+L44", "L45+L46", "L47+L48"],
    },

    # ============================================================
    #  FRIDAY
    # ============================================================
    "FRI": {
        "theory": ["TDD1", "B1/SA2", "A1/SF2", "TF1", "E1", "TC2", "B2/SA1", "A2/SE1", "TF2", "TEE2"],
        "lab": ["L19+L20", "L21+L22", "L23+L24", "L49+L50", "L51+L52", "L53+L54"],
    },

    # ============================================================
    #  SATURDAY
    # ============================================================
    "SAT": {
        "theory": [None, "TC1", "C1", "F1", "TD1", "TD2", "D2", "F2", "C2", None],
        "lab": ["L25+L26", "L27+L28", "L29+L30", "L55+L56", "L57+L58", "L59+L60"],
    },
}

# Sidebar ordering of every theory code in the grid
ALL_THEORY_SLOTS = [
    "A1", "A2", "B1", "B2", "C1", "C2", "D1", "D2", "E1", "E2", "F1", "F2",
    "TA1", "TA2", "TB1", "TB2", "TC1", "TC2", "TD1", "TD2", "TDD1", "TDD2",
    "TE1", "TE2", "TEE1", "TEE2", "TF1", "TF2", "TFF1", "TFF2",
    "SA1", "SA2", "SB1", "SB2", "SC1", "SC2", "SD1", "SD2", "SE1", "SE2", "SF1", "SF2",
]

# Lab slots are fused pairs
ALL_LAB_SLOTS = [f"L{n}+L{n + 1}" for n in range(1, 72, 2)]


# ================================================================
# Lookups
# ================================================================

def _check_type(slot_type: str) -> None:
    if slot_type not in SLOT_TYPES:
        raise ValueError(f"Unknown slot type: {slot_type!r}")


def lookup(day: str, slot_type: str, column: int) -> Optional[str]:
    """Cell code at (day, type, column), or None for an empty cell."""
    if day not in TIMETABLE_STRUCTURE:
        raise ValueError(f"Unknown day: {day!r}")
    _check_type(slot_type)
    row = TIMETABLE_STRUCTURE[day][slot_type]
    if not 0 <= column < len(row):
        raise IndexError(f"{slot_type} column {column} out of range (0-{len(row) - 1})")
    return row[column]


def all_slots_of_type(slot_type: str) -> List[str]:
    _check_type(slot_type)
    if slot_type == "theory":
        return list(ALL_THEORY_SLOTS)
    return list(ALL_LAB_SLOTS)


def time_range_of(slot_type: str, column: int) -> TimeRange:
    _check_type(slot_type)
    ranges = THEORY_TIME_RANGES if slot_type == "theory" else LAB_TIME_RANGES
    if not 0 <= column < len(ranges):
        raise IndexError(f"{slot_type} column {column} out of range (0-{len(ranges) - 1})")
    start, end = ranges[column]
    return TimeRange(start, end)


def iter_cells() -> Iterator[Tuple[Occurrence, str]]:
    """Every non-empty cell, by day, then theory columns, then lab columns."""
    for day in DAYS:
        for slot_type in SLOT_TYPES:
            for column, code in enumerate(TIMETABLE_STRUCTURE[day][slot_type]):
                if code:
                    yield Occurrence(day, slot_type, column), code


def split_alternatives(code: str) -> List[str]:
    """'A1/SE2' -> ['A1', 'SE2']. '+' pairs stay whole."""
    return code.split("/")


def known_codes() -> Set[str]:
    """Every cell code plus every '/'-alternative of a cell."""
    codes = set()
    for _, cell in iter_cells():
        codes.add(cell)
        codes.update(split_alternatives(cell))
    return codes


_KNOWN_CODES = known_codes()


def is_recognized(code: str) -> bool:
    return code in _KNOWN_CODES
