# models.py
"""
Core domain models for the FFCS timetable builder.
These are used by:
- slot catalog and clash detector (TimeRange, Occurrence)
- assignment store (SlotAssignment, Course)
- exporters and Streamlit UI
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List

from config import check_overlap

SLOT_TYPES = ("theory", "lab")


# ======================================================================
# Time Range
# ======================================================================

@dataclass(frozen=True)
class TimeRange:
    """Half-open [start, end) interval in minutes from midnight."""

    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Invalid time range: {self.start}-{self.end}")

    def overlaps(self, other: "TimeRange") -> bool:
        return check_overlap((self.start, self.end), (other.start, other.end))


# ======================================================================
# Occurrence (one cell of the weekly grid)
# ======================================================================

@dataclass(frozen=True)
class Occurrence:
    day: str          # "MON" ... "SAT"
    type: str         # "theory" / "lab"
    column: int

    def __post_init__(self):
        if self.type not in SLOT_TYPES:
            raise ValueError(f"Invalid slot type for Occurrence: {self.type!r}")


# ======================================================================
# Slot Assignment
# ======================================================================

@dataclass
class SlotAssignment:
    course_code: str
    course_name: str
    professor_name: str
    color_tag: str

    def as_dict(self) -> Dict[str, str]:
        return {
            "courseCode": self.course_code,
            "courseName": self.course_name,
            "professorName": self.professor_name,
            "colorTag": self.color_tag,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlotAssignment":
        return cls(
            course_code=_require_str(data, "courseCode"),
            course_name=_require_str(data, "courseName"),
            professor_name=_require_str(data, "professorName"),
            color_tag=_require_str(data, "colorTag"),
        )


# ======================================================================
# Course
# ======================================================================

@dataclass
class Course:
    """
    A user-defined label grouping every slot assigned to one course code.

    slots: kept equal to the assignment keys carrying this course code;
           the store deletes the course once it becomes empty.
    """

    code: str
    name: str
    professor: str
    color: str
    slots: List[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def add_slots(self, codes: List[str]) -> None:
        for code in codes:
            if code not in self.slots:
                self.slots.append(code)

    def remove_slots(self, codes: List[str]) -> None:
        self.slots = [s for s in self.slots if s not in codes]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "professor": self.professor,
            "color": self.color,
            "slots": list(self.slots),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Course":
        if not isinstance(data, dict):
            raise ValueError(f"Course must be an object, got {type(data).__name__}")
        slots = data.get("slots")
        if not isinstance(slots, list) or not all(isinstance(s, str) for s in slots):
            raise ValueError("Course 'slots' must be a list of slot codes")
        return cls(
            id=_require_str(data, "id"),
            code=_require_str(data, "code"),
            name=_require_str(data, "name"),
            professor=_require_str(data, "professor"),
            color=_require_str(data, "color"),
            slots=list(slots),
        )


def _require_str(data: Dict[str, Any], key: str) -> str:
    if not isinstance(data, dict):
        raise ValueError(f"Expected an object, got {type(data).__name__}")
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"Field {key!r} must be a string")
    return value
