import os
import sys

from loguru import logger

# --- TIME SLOT DEFINITIONS ---

# Theory: 5 morning slots + LUNCH + 5 afternoon slots (header labels)
THEORY_TIMES = [
    "8.00-8.50", "9.00-9.50", "10.00-10.50", "11.00-11.50", "12.00-12.50",
    "2.00-2.50", "3.00-3.50", "4.00-4.50", "5.00-5.50", "6.00-6.50",
]

# Lab: 3 morning + 3 afternoon double-length sessions
LAB_TIMES = [
    "8.00-9.40", "9.50-11.30", "11.40-1.10",
    "2.00-3.40", "3.50-5.30", "5.40-7.10",
]

# Minutes from midnight, one range per column index (shared by every day)
THEORY_TIME_RANGES = [
    (480, 530),    # 08:00-08:50
    (540, 590),    # 09:00-09:50
    (600, 650),    # 10:00-10:50
    (660, 710),    # 11:00-11:50
    (720, 770),    # 12:00-12:50
    (840, 890),    # 14:00-14:50
    (900, 950),    # 15:00-15:50
    (960, 1010),   # 16:00-16:50
    (1020, 1070),  # 17:00-17:50
    (1080, 1130),  # 18:00-18:50
]

LAB_TIME_RANGES = [
    (480, 580),    # 08:00-09:40
    (590, 690),    # 09:50-11:30
    (700, 790),    # 11:40-13:10
    (840, 940),    # 14:00-15:40
    (950, 1050),   # 15:50-17:30
    (1060, 1150),  # 17:40-19:10
]

# Columns before the lunch break
THEORY_MORNING_COLUMNS = 5
LAB_MORNING_COLUMNS = 3

SLOT_COLORS = [
    "#3B82F6",  # Blue
    "#10B981",  # Emerald
    "#F59E0B",  # Amber
    "#EF4444",  # Red
    "#8B5CF6",  # Violet
    "#EC4899",  # Pink
    "#14B8A6",  # Teal
    "#F97316",  # Orange
    "#6366F1",  # Indigo
    "#84CC16",  # Lime
]

# --- RUNTIME SETTINGS ---

EQUIVALENCE_RULE = os.getenv("FFCS_EQUIVALENCE_RULE", "prefix")
DATA_FILE = os.getenv("FFCS_DATA_FILE", "ffcs-timetable.json")
LOG_LEVEL = os.getenv("FFCS_LOG_LEVEL", "INFO")

TIMETABLE_TITLE = "Freshers Winter Semester 2025-26 Slot Timetable"


# --- OVERLAP CALCULATION ---

def format_minutes(minutes: int) -> str:
    """Converts 510 to '08:30'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def check_overlap(r1, r2) -> bool:
    """Returns True if two (start, end) minute pairs overlap.

    Touching endpoints (one ends when the other starts) do not overlap.
    """
    s1, e1 = r1
    s2, e2 = r2
    # Overlap if Start1 < End2 and Start2 < End1
    return s1 < e2 and s2 < e1


def configure_logging(log_level: str = LOG_LEVEL) -> None:
    """Configure loguru with a single stderr sink at the given level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
            "<level>{message}</level>"
        ),
    )
    logger.debug(f"Logging configured at level {log_level}")
