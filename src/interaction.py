# interaction.py

"""
Pending decisions of a single slot click.

Flow:

    click → (AwaitingAlternativeChoice) → (AwaitingCombinationChoice) → AwaitingFormSubmit
                                                                              ↘ submit / clear → Idle

Nothing is written to the store until submit() or clear(); choosing an
alternative of a "/" cell saves that preference so the question is not asked
again.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from errors import ValidationError
from models import SlotAssignment
from store import TimetableStore
from timeslots import split_alternatives


# ---------------------------------------------------------
# STATES
# ---------------------------------------------------------

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class AwaitingAlternativeChoice:
    cell_code: str
    options: Tuple[str, ...]


@dataclass(frozen=True)
class AwaitingCombinationChoice:
    slot_code: str
    combinations: Tuple[Tuple[str, ...], ...]


@dataclass(frozen=True)
class AwaitingFormSubmit:
    slot_code: str
    combination: Optional[Tuple[str, ...]] = None
    existing: Optional[SlotAssignment] = None
    clashes: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        if self.combination:
            return " + ".join(self.combination)
        return self.slot_code


State = Union[Idle, AwaitingAlternativeChoice, AwaitingCombinationChoice, AwaitingFormSubmit]


# ---------------------------------------------------------
# MACHINE
# ---------------------------------------------------------

class SlotInteraction:
    def __init__(self, store: TimetableStore):
        self.store = store
        self.state: State = Idle()

    def _expect(self, state_type):
        if not isinstance(self.state, state_type):
            raise ValidationError(
                f"Expected {state_type.__name__}, current step is {type(self.state).__name__}"
            )
        return self.state

    def _route(self, slot_code: str) -> State:
        """Router: decides which step follows once a single slot code is known."""
        combinations = self.store.resolver.candidate_groups(slot_code)
        existing = self.store.get_assignment(slot_code)
        if existing is not None:
            # Editing keeps the combination the course already occupies
            assignments = self.store.assignments
            for combination in combinations:
                if all(
                    code in assignments and assignments[code].course_code == existing.course_code
                    for code in combination
                ):
                    return self._form(slot_code, combination if len(combination) > 1 else None)
            return self._form(slot_code, None)

        if len(combinations) > 1:
            return AwaitingCombinationChoice(slot_code, tuple(combinations))
        combination = combinations[0] if len(combinations[0]) > 1 else None
        return self._form(slot_code, combination)

    def _form(self, slot_code: str, combination) -> AwaitingFormSubmit:
        return AwaitingFormSubmit(
            slot_code=slot_code,
            combination=tuple(combination) if combination else None,
            existing=self.store.get_assignment(slot_code),
            clashes=tuple(self.store.get_slot_clashes(slot_code)),
        )

    # ---------------------------------------------------------
    # EVENTS
    # ---------------------------------------------------------

    def click(self, cell_code: str) -> State:
        slot_code = self.store.resolve_slot(cell_code)
        options = split_alternatives(slot_code)
        if len(options) > 1:
            self.state = AwaitingAlternativeChoice(cell_code, tuple(options))
        else:
            self.state = self._route(slot_code)
        return self.state

    def choose_alternative(self, option: str) -> State:
        pending = self._expect(AwaitingAlternativeChoice)
        self.store.set_slot_preference(pending.cell_code, option)
        self.state = self._route(option)
        return self.state

    def choose_combination(self, combination) -> State:
        pending = self._expect(AwaitingCombinationChoice)
        combination = tuple(combination)
        if combination not in pending.combinations:
            raise ValidationError(
                f"{' + '.join(combination)} is not a combination of slot {pending.slot_code}"
            )
        self.state = self._form(pending.slot_code, combination)
        return self.state

    def submit(self, course_code: str, course_name: str, professor_name: str = "",
               color: Optional[str] = None) -> List[str]:
        pending = self._expect(AwaitingFormSubmit)
        assigned = self.store.assign(
            pending.slot_code,
            course_code,
            course_name,
            professor_name,
            color,
            combination=pending.combination,
        )
        self.state = Idle()
        return assigned

    def clear(self) -> List[str]:
        pending = self._expect(AwaitingFormSubmit)
        cleared = self.store.clear(pending.slot_code)
        self.state = Idle()
        return cleared

    def cancel(self) -> None:
        self.state = Idle()
