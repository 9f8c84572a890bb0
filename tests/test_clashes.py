"""Tests for time-clash detection."""

import itertools

from clashes import find_all_clashing_codes, find_clashes, occurrences_of, overlaps
from models import Occurrence, TimeRange
from timeslots import iter_cells, time_range_of


class TestOverlaps:
    def test_overlapping_ranges(self) -> None:
        assert overlaps(TimeRange(480, 530), TimeRange(500, 550))
        assert overlaps(TimeRange(500, 550), TimeRange(480, 530))

    def test_touching_ranges_do_not_clash(self) -> None:
        assert not overlaps(TimeRange(480, 530), TimeRange(530, 580))

    def test_containment(self) -> None:
        assert overlaps(TimeRange(480, 580), TimeRange(540, 590))
        assert overlaps(TimeRange(480, 580), TimeRange(500, 510))


class TestOccurrences:
    def test_slot_repeated_within_a_day(self) -> None:
        assert occurrences_of("E1") == [
            Occurrence("MON", "theory", 3),
            Occurrence("MON", "theory", 4),
            Occurrence("FRI", "theory", 4),
        ]

    def test_alternative_occupies_undecided_cells(self) -> None:
        assert occurrences_of("A1") == [
            Occurrence("TUE", "theory", 1),
            Occurrence("THU", "theory", 3),
            Occurrence("FRI", "theory", 2),
        ]

    def test_preference_for_the_other_alternative_frees_the_cell(self) -> None:
        occ = occurrences_of("A1", {"A1/SE2": "SE2"})
        assert Occurrence("TUE", "theory", 1) not in occ
        assert occurrences_of("SE2", {"A1/SE2": "SE2"}) == [Occurrence("TUE", "theory", 1)]

    def test_lab_pair(self) -> None:
        assert occurrences_of("L61+L62") == [Occurrence("MON", "lab", 0)]

    def test_unknown_code_has_no_occurrences(self) -> None:
        assert occurrences_of("G1") == []


class TestFindClashes:
    def test_lab_overlapping_theory_on_same_day(self) -> None:
        """MON lab 08:00-09:40 overlaps MON theory 09:00-09:50."""
        assert find_clashes("TA1", ["L61+L62"]) == ["L61+L62"]
        assert find_clashes("L61+L62", ["TA1"]) == ["TA1"]

    def test_different_days_never_clash(self) -> None:
        # TUE lab 08:00-09:40 vs MON theory 09:00-09:50
        assert find_clashes("TA1", ["L1+L2"]) == []

    def test_disjoint_times_never_clash(self) -> None:
        # MON theory 09:00-09:50 vs MON lab 11:40-13:10
        assert find_clashes("TA1", ["L65+L66"]) == []

    def test_assigned_candidate_reports_itself(self) -> None:
        assert find_clashes("TA1", ["TA1"]) == ["TA1"]
        assert find_clashes("TA1", ["L61+L62", "TA1"]) == ["TA1", "L61+L62"]

    def test_each_clashing_code_reported_once(self) -> None:
        # E1 sits twice on MON, both under the 11:40-13:10 lab
        assert find_clashes("L65+L66", ["E1"]) == ["E1"]

    def test_clash_matches_cell_arithmetic(self) -> None:
        """Brute force over every pair of cells: clash iff same day and overlapping range."""
        cells = [(occ, cell) for occ, cell in iter_cells() if "/" not in cell]
        for (occ_a, a), (occ_b, b) in itertools.combinations(cells[:40], 2):
            if a == b:
                continue
            expected = any(
                x.day == y.day
                and time_range_of(x.type, x.column).overlaps(time_range_of(y.type, y.column))
                for x in occurrences_of(a)
                for y in occurrences_of(b)
            )
            assert (find_clashes(a, [b]) == [b]) == expected, (a, b)
            if occ_a.day != occ_b.day and expected:
                # Only possible through a repeated code on another day
                assert len(occurrences_of(a)) > 1 or len(occurrences_of(b)) > 1


class TestFindAllClashingCodes:
    def test_empty_assignment_set(self) -> None:
        assert find_all_clashing_codes([]) == set()

    def test_monday_lab_blocks_overlapping_theory(self) -> None:
        assert find_all_clashing_codes(["L61+L62"]) == {"TA1"}

    def test_assigned_codes_are_not_reported(self) -> None:
        clashing = find_all_clashing_codes(["TA1", "L61+L62"])
        assert "TA1" not in clashing
        assert "L61+L62" not in clashing

    def test_preferences_rename_cells(self) -> None:
        # FRI theory col2 (A1/SF2) 10:00-10:50 overlaps FRI lab col1 09:50-11:30
        undecided = find_all_clashing_codes(["L21+L22"])
        assert "A1/SF2" in undecided
        decided = find_all_clashing_codes(["L21+L22"], {"A1/SF2": "SF2"})
        assert "SF2" in decided
        assert "A1/SF2" not in decided
