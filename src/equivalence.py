# equivalence.py
"""
Slot equivalence rules and the resolver that expands a clicked slot into every
slot code that must be assigned or cleared together.

A rule is plain data: a list of groups. The candidate groups of a code are the
groups containing it, or the singleton (code,) when no group does. A rule
whose groups are disjoint behaves as a partition (one class per code); a rule
where a code sits in several groups asks the student to choose one.

Versions:
    v1 "independent"  every slot is its own class
    v2 "prefix"       A1 ~ TA1 ~ SA1, ..., F2 ~ TF2 ~ SF2
    v3 "combination"  explicit theory combinations, some codes in two groups
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from errors import AmbiguousSlotError, UnknownSlotError, ValidationError
from timeslots import is_recognized, iter_cells, split_alternatives

Group = Tuple[str, ...]


# ================================================================
# Rule tables
# ================================================================

INDEPENDENT_GROUPS: List[Group] = []

PREFIX_GROUPS: List[Group] = [
    ("A1", "TA1", "SA1"),
    ("A2", "TA2", "SA2"),
    ("B1", "TB1", "SB1"),
    ("B2", "TB2", "SB2"),
    ("C1", "TC1", "SC1"),
    ("C2", "TC2", "SC2"),
    ("D1", "TD1", "SD1"),
    ("D2", "TD2", "SD2"),
    ("E1", "TE1", "SE1"),
    ("E2", "TE2", "SE2"),
    ("F1", "TF1", "SF1"),
    ("F2", "TF2", "SF2"),
]

COMBINATION_GROUPS: List[Group] = [
    ("A1", "TA1"),
    ("A2", "TA2"),
    ("B1", "SB1", "TB1"),
    ("B2", "SB2", "TB2"),
    ("C1", "TC1"),
    ("C2", "TC2"),
    ("D1", "TD1"),
    ("D1", "TDD1"),
    ("E1", "SE1", "TE1"),
    ("E2", "TE2", "TEE2"),
    ("E2", "SE2", "TE2"),
    ("F1", "TF1", "TFF1"),
    ("F1", "SF1", "TF1"),
    ("F2", "TF2", "TFF2"),
    ("F2", "SF2", "TF2"),
]


@dataclass(frozen=True)
class EquivalenceRule:
    name: str
    version: int
    groups: Tuple[Group, ...]

    def __post_init__(self):
        for group in self.groups:
            for code in group:
                if not is_recognized(code):
                    raise UnknownSlotError(code)

    @property
    def is_partition(self) -> bool:
        seen = set()
        for group in self.groups:
            if seen.intersection(group):
                return False
            seen.update(group)
        return True

    def candidate_groups(self, code: str) -> List[Group]:
        matches = [g for g in self.groups if code in g]
        return matches or [(code,)]


RULES: Dict[str, EquivalenceRule] = {
    rule.name: rule
    for rule in (
        EquivalenceRule("independent", 1, tuple(INDEPENDENT_GROUPS)),
        EquivalenceRule("prefix", 2, tuple(PREFIX_GROUPS)),
        EquivalenceRule("combination", 3, tuple(COMBINATION_GROUPS)),
    )
}


def get_rule(name: str) -> EquivalenceRule:
    try:
        return RULES[name]
    except KeyError:
        raise ValidationError(
            f"Unknown equivalence rule {name!r}; expected one of {sorted(RULES)}"
        ) from None


# ================================================================
# Resolver
# ================================================================

class EquivalenceResolver:
    """Expands slot codes into the full set of related codes under one rule."""

    def __init__(self, rule: EquivalenceRule):
        self.rule = rule

    def candidate_groups(self, code: str) -> List[Group]:
        return self.rule.candidate_groups(code)

    def has_multiple_combinations(self, code: str) -> bool:
        return len(self.candidate_groups(code)) > 1

    def _parts(self, code: str) -> List[str]:
        parts = split_alternatives(code)
        for part in parts:
            if not is_recognized(part):
                raise UnknownSlotError(part)
        return parts

    def resolve(self, code: str, combination: Optional[Sequence[str]] = None) -> List[str]:
        """
        Related codes of `code`, input parts first, then catalog discovery order.

        combination: the chosen group when a part sits in several groups.
        """
        parts = self._parts(code)

        if combination is not None:
            chosen = tuple(combination)
            if not any(chosen in self.candidate_groups(p) for p in parts):
                raise ValidationError(
                    f"Combination {' + '.join(chosen)} does not apply to slot {code}"
                )
            members = set(chosen)
        else:
            members = set()
            for part in parts:
                groups = self.candidate_groups(part)
                if len(groups) > 1:
                    raise AmbiguousSlotError(part, groups)
                members.update(groups[0])

        return self._collect(parts, members)

    def expand_all(self, code: str) -> List[str]:
        """Union of every candidate group of every part (no choice needed)."""
        parts = self._parts(code)
        members = set()
        for part in parts:
            for group in self.candidate_groups(part):
                members.update(group)
        return self._collect(parts, members)

    def _collect(self, parts: List[str], members: set) -> List[str]:
        related = list(parts)
        for _, cell in iter_cells():
            for cell_part in split_alternatives(cell):
                if cell_part in members and cell_part not in related:
                    related.append(cell_part)

        # Group members that never appear in the grid are a data-table bug
        missing = members.difference(related)
        if missing:
            raise UnknownSlotError(sorted(missing)[0])

        logger.debug(f"Resolved {'/'.join(parts)} -> {related} ({self.rule.name})")
        return related
