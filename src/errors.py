"""Error taxonomy for the timetable builder."""


class TimetableError(Exception):
    """Base class for every error raised by the timetable core."""


class ValidationError(TimetableError, ValueError):
    """User input rejected before any store mutation."""


class AmbiguousSlotError(ValidationError):
    """A slot belongs to several combinations and none was chosen."""

    def __init__(self, slot_code: str, combinations):
        self.slot_code = slot_code
        self.combinations = [tuple(c) for c in combinations]
        options = ", ".join(" + ".join(c) for c in self.combinations)
        super().__init__(f"Slot {slot_code} needs a combination choice: {options}")


class SnapshotImportError(TimetableError):
    """A persisted timetable blob could not be parsed or validated."""


class UnknownSlotError(TimetableError, LookupError):
    """A slot code is missing from the slot catalog (data-table bug)."""

    def __init__(self, slot_code: str):
        self.slot_code = slot_code
        super().__init__(f"Slot code {slot_code!r} is not in the slot catalog")
