"""
Assignment store: slot -> assignment and course -> slots, kept consistent on
every mutation, with a JSON snapshot handed to storage after each change.
"""

import json
import os
import tempfile
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from clashes import find_all_clashing_codes, find_clashes
from config import EQUIVALENCE_RULE, SLOT_COLORS
from equivalence import EquivalenceResolver, get_rule
from errors import SnapshotImportError, ValidationError
from models import Course, SlotAssignment
from timeslots import all_slots_of_type, is_recognized, split_alternatives


# ================================================================
# Snapshot storage
# ================================================================

class SnapshotFile:
    """Keeps the latest snapshot blob in a single JSON file."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Optional[str]:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def save(self, blob: str) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        # Whole blob replaced at once: write a sibling temp file, then rename
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


# ================================================================
# Store
# ================================================================

class TimetableStore:
    def __init__(
        self,
        resolver: Optional[EquivalenceResolver] = None,
        storage: Optional[SnapshotFile] = None,
    ):
        self.resolver = resolver or EquivalenceResolver(get_rule(EQUIVALENCE_RULE))
        self.storage = storage
        self._assignments: Dict[str, SlotAssignment] = {}
        self._courses: List[Course] = []
        self._preferences: Dict[str, str] = {}
        self.next_color_index = 0

    @classmethod
    def open(cls, storage: SnapshotFile, resolver: Optional[EquivalenceResolver] = None) -> "TimetableStore":
        """Store backed by `storage`, pre-loaded with its last snapshot if readable."""
        store = cls(resolver=resolver, storage=storage)
        blob = storage.load()
        if blob:
            try:
                store.load_snapshot(blob)
            except SnapshotImportError as e:
                logger.warning(f"Ignoring unreadable snapshot at {storage.path}: {e}")
        return store

    # ------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------

    @property
    def assignments(self) -> Dict[str, SlotAssignment]:
        return {code: replace(a) for code, a in self._assignments.items()}

    @property
    def courses(self) -> List[Course]:
        return [_copy_course(c) for c in self._courses]

    @property
    def slot_preferences(self) -> Dict[str, str]:
        return dict(self._preferences)

    def get_course(self, course_code: str) -> Optional[Course]:
        course = self._find_course(course_code)
        return _copy_course(course) if course else None

    def _find_course(self, course_code: str) -> Optional[Course]:
        for course in self._courses:
            if course.code == course_code:
                return course
        return None

    def resolve_slot(self, cell_code: str) -> str:
        """Applies the saved preference of an ambiguous cell ("A1/SE2" -> "A1")."""
        return self._preferences.get(cell_code, cell_code)

    def get_assignment(self, slot_code: str) -> Optional[SlotAssignment]:
        assignment = self._assignments.get(self.resolve_slot(slot_code))
        return replace(assignment) if assignment else None

    def cell_assignment(self, cell_code: str) -> Optional[SlotAssignment]:
        """Assignment shown in a grid cell; an undecided "/" cell shows whichever alternative is taken."""
        assignment = self.get_assignment(cell_code)
        if assignment is None and self.resolve_slot(cell_code) == cell_code:
            for part in split_alternatives(cell_code):
                assignment = self.get_assignment(part)
                if assignment is not None:
                    break
        return assignment

    def is_slot_assigned(self, slot_code: str) -> bool:
        return self.get_assignment(slot_code) is not None

    def get_slot_clashes(self, slot_code: str) -> List[str]:
        return find_clashes(self.resolve_slot(slot_code), self._assignments, self._preferences)

    def clashing_codes(self):
        return find_all_clashing_codes(self._assignments, self._preferences)

    def is_slot_clashing(self, slot_code: str) -> bool:
        return self.resolve_slot(slot_code) in self.clashing_codes()

    def available_slots(self, slot_type: str) -> List[str]:
        return [s for s in all_slots_of_type(slot_type) if s not in self._assignments]

    # ------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------

    def assign(
        self,
        slot_code: str,
        course_code: str,
        course_name: str,
        professor_name: str = "",
        color: Optional[str] = None,
        combination: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """Assigns a course to the slot and every related slot. Returns the codes written."""
        course_code = (course_code or "").strip()
        course_name = (course_name or "").strip()
        professor_name = (professor_name or "").strip()
        if not course_code:
            raise ValidationError("Course code is required")
        if not course_name:
            raise ValidationError("Course name is required")

        related = self.resolver.resolve(self.resolve_slot(slot_code), combination)

        course = self._find_course(course_code)
        if course is None:
            color = color or SLOT_COLORS[self.next_color_index % len(SLOT_COLORS)]
            self.next_color_index += 1
            course = Course(code=course_code, name=course_name, professor=professor_name, color=color)
            self._courses.append(course)
        else:
            color = color or course.color
            course.name = course_name
            course.professor = professor_name
            course.color = color

        # Slots taken over from another course leave that course
        for code in related:
            previous = self._assignments.get(code)
            if previous is not None and previous.course_code != course_code:
                self._detach(previous.course_code, [code])

        course.add_slots(related)
        assignment = SlotAssignment(course_code, course_name, professor_name, color)
        for code in course.slots:
            self._assignments[code] = replace(assignment)

        logger.info(f"Assigned {course_code} to {', '.join(related)}")
        self._persist()
        return related

    def clear(self, slot_code: str) -> List[str]:
        """Clears the slot and its related slots. Returns the codes cleared."""
        related = self.resolver.expand_all(self.resolve_slot(slot_code))
        primary = self._assignments.get(related[0])
        if primary is None:
            return []

        cleared = [
            code for code in related
            if code in self._assignments and self._assignments[code].course_code == primary.course_code
        ]
        for code in cleared:
            del self._assignments[code]
        self._detach(primary.course_code, cleared)

        logger.info(f"Cleared {', '.join(cleared)} ({primary.course_code})")
        self._persist()
        return cleared

    def clear_all(self) -> None:
        self._assignments = {}
        self._courses = []
        self.next_color_index = 0
        logger.info("Cleared the whole timetable")
        self._persist()

    def set_slot_preference(self, cell_code: str, choice: str) -> None:
        options = split_alternatives(cell_code)
        if len(options) < 2 or not is_recognized(cell_code):
            raise ValidationError(f"Slot {cell_code} has no alternatives to choose from")
        if choice not in options:
            raise ValidationError(f"{choice} is not an option of slot {cell_code}")
        taken = [o for o in options if o != choice and o in self._assignments]
        if taken:
            raise ValidationError(
                f"Cannot choose {choice} for slot {cell_code}: {taken[0]} is assigned to "
                f"{self._assignments[taken[0]].course_code}; clear it first"
            )
        self._preferences[cell_code] = choice
        logger.info(f"Slot preference {cell_code} -> {choice}")
        self._persist()

    def _detach(self, course_code: str, codes: List[str]) -> None:
        course = self._find_course(course_code)
        if course is None:
            return
        course.remove_slots(codes)
        if not course.slots:
            self._courses = [c for c in self._courses if c.code != course_code]

    # ------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        return {
            "assignments": {code: a.as_dict() for code, a in self._assignments.items()},
            "courses": [c.as_dict() for c in self._courses],
            "slotPreferences": dict(self._preferences),
            "nextColorIndex": self.next_color_index,
        }

    def export_data(self) -> str:
        return json.dumps(self.snapshot(), indent=2)

    def load_snapshot(self, blob: str) -> None:
        """Replaces the whole state with `blob`; on any error the state is untouched."""
        try:
            data = json.loads(blob)
        except (TypeError, ValueError) as e:
            raise SnapshotImportError(f"Not valid JSON: {e}") from e

        try:
            assignments, courses, preferences, color_index = _parse_snapshot(data)
        except (TypeError, ValueError) as e:
            raise SnapshotImportError(str(e)) from e

        self._assignments = assignments
        self._courses = courses
        self._preferences = preferences
        self.next_color_index = color_index

    def import_data(self, blob: str) -> bool:
        try:
            self.load_snapshot(blob)
        except SnapshotImportError as e:
            logger.warning(f"Failed to import timetable data: {e}")
            return False
        logger.info(f"Imported {len(self._assignments)} assignments, {len(self._courses)} courses")
        self._persist()
        return True

    def _persist(self) -> None:
        if self.storage is not None:
            self.storage.save(self.export_data())


def _parse_snapshot(data: Any):
    if not isinstance(data, dict):
        raise ValueError("Snapshot must be a JSON object")

    raw_assignments = data.get("assignments")
    raw_courses = data.get("courses")
    if not isinstance(raw_assignments, dict):
        raise ValueError("'assignments' must be an object")
    if not isinstance(raw_courses, list):
        raise ValueError("'courses' must be an array")

    assignments = {}
    for code, raw in raw_assignments.items():
        if "/" in code or not is_recognized(code):
            raise ValueError(f"Unknown slot code {code!r}")
        assignments[code] = SlotAssignment.from_dict(raw)

    courses = [Course.from_dict(raw) for raw in raw_courses]
    seen_codes = set()
    for course in courses:
        if course.code in seen_codes:
            raise ValueError(f"Duplicate course {course.code!r}")
        seen_codes.add(course.code)
        owned = {code for code, a in assignments.items() if a.course_code == course.code}
        if not course.slots or len(course.slots) != len(set(course.slots)) or set(course.slots) != owned:
            raise ValueError(f"Course {course.code!r} slots do not match its assignments")
    orphans = {a.course_code for a in assignments.values()} - seen_codes
    if orphans:
        raise ValueError(f"Assignments reference unknown courses: {sorted(orphans)}")

    preferences = data.get("slotPreferences", {})
    if not isinstance(preferences, dict):
        raise ValueError("'slotPreferences' must be an object")
    for cell, choice in preferences.items():
        options = split_alternatives(cell)
        if len(options) < 2 or not is_recognized(cell) or choice not in options:
            raise ValueError(f"Invalid slot preference {cell!r} -> {choice!r}")

    color_index = data.get("nextColorIndex", len(courses))
    if not isinstance(color_index, int) or isinstance(color_index, bool) or color_index < 0:
        raise ValueError("'nextColorIndex' must be a non-negative integer")

    return assignments, courses, dict(preferences), color_index


def _copy_course(course: Course) -> Course:
    return replace(course, slots=list(course.slots))
