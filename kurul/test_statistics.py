"""
Statistics aggregator tests. Incidents are built in memory; no store needed.
"""

import pytest

from kurul.catalog import DISMISSAL
from kurul.models import Incident, InvolvedStudent, Role, Status, Student
from kurul.statistics import (
    TOP_TITLE_COUNT,
    _js_round,
    compute_statistics,
    filter_incidents,
    penalized_incidents,
    penalized_students,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def incident(title="Kavga", status=Status.PENDING, *rels) -> Incident:
    return Incident(title=title, status=status, involved_students=list(rels))


def rel(student_id, decision="", role=Role.SUSPECT) -> InvolvedStudent:
    return InvolvedStudent(student_id=student_id, role=role, decision=decision)


STUDENTS = [
    Student(id="a", number="1", name="Ali", grade="9-A"),
    Student(id="b", number="2", name="Can", grade="10-B"),
    Student(id="c", number="3", name="Ece", grade="9-A"),
]


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

class TestJsRound:
    def test_half_rounds_up(self):
        assert _js_round(62.5) == 63
        assert _js_round(12.5) == 13

    def test_below_half(self):
        assert _js_round(33.333) == 33


# ---------------------------------------------------------------------------
# compute_statistics
# ---------------------------------------------------------------------------

class TestComputeStatistics:
    def test_empty(self):
        stats = compute_statistics([], [])
        assert (stats.total, stats.decided, stats.pending) == (0, 0, 0)
        assert stats.penalty_rate == 0
        assert stats.top_titles == []
        assert stats.grade_distribution == []

    def test_counts(self):
        incidents = [
            incident("Kavga", Status.DECIDED, rel("a", "KINAMA"), rel("b", DISMISSAL)),
            incident("Kopya", Status.INVESTIGATING, rel("c")),
            incident("Kavga", Status.PENDING),
        ]
        stats = compute_statistics(incidents, STUDENTS)
        assert stats.total == 3
        assert stats.decided == 1
        assert stats.pending == 2
        assert stats.total_decisions == 2
        assert stats.total_penalties == 1
        assert stats.penalty_rate == 50
        assert stats.penalty_incident_count == 1

    def test_rate_over_decisions_not_incidents(self):
        incidents = [
            incident("A", Status.DECIDED, rel("a", "KINAMA")),
            incident("B", Status.PENDING),
            incident("C", Status.PENDING),
        ]
        assert compute_statistics(incidents, STUDENTS).penalty_rate == 100

    def test_penalty_incident_counted_once(self):
        inc = incident("Kavga", Status.DECIDED, rel("a", "KINAMA"), rel("b", "UYARMA"))
        stats = compute_statistics([inc], STUDENTS)
        assert stats.total_penalties == 2
        assert stats.penalty_incident_count == 1

    def test_top_titles_ranked_with_stable_ties(self):
        incidents = [incident(t) for t in ("Kopya", "Kavga", "Kavga", "Sigara", "Kopya", "Geç kalma")]
        stats = compute_statistics(incidents, [])
        assert stats.top_titles[:2] == [("Kopya", 2), ("Kavga", 2)]
        assert stats.top_titles[2:] == [("Sigara", 1), ("Geç kalma", 1)]

    def test_top_titles_limited(self):
        incidents = [incident(f"Olay {n}") for n in range(TOP_TITLE_COUNT + 3)]
        assert len(compute_statistics(incidents, []).top_titles) == TOP_TITLE_COUNT

    def test_grade_distribution_counts_rows(self):
        incidents = [
            incident("A", Status.PENDING, rel("a"), rel("b")),
            incident("B", Status.PENDING, rel("a"), rel("c")),
        ]
        stats = compute_statistics(incidents, STUDENTS)
        assert stats.grade_distribution == [("9-A", 3), ("10-B", 1)]

    def test_removed_student_left_out_of_grades(self):
        incidents = [incident("A", Status.PENDING, rel("gone"), rel("b"))]
        assert compute_statistics(incidents, STUDENTS).grade_distribution == [("10-B", 1)]

    def test_as_text(self):
        text = compute_statistics([incident("Kavga", Status.DECIDED, rel("a", "KINAMA"))], STUDENTS).as_text()
        assert "DİSİPLİN İSTATİSTİKLERİ" in text
        assert "Ceza oranı    : %100" in text
        assert "Kavga: 1" in text


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

class TestFilterIncidents:
    INCIDENTS = [
        incident("A", Status.DECIDED, rel("a", "KINAMA")),
        incident("B", Status.DECIDED, rel("b", DISMISSAL)),
        incident("C", Status.INVESTIGATING, rel("c")),
    ]

    def test_all(self):
        assert len(filter_incidents(self.INCIDENTS, "all")) == 3

    def test_decided(self):
        assert [i.title for i in filter_incidents(self.INCIDENTS, "decided")] == ["A", "B"]

    def test_pending_is_not_decided(self):
        assert [i.title for i in filter_incidents(self.INCIDENTS, "pending")] == ["C"]

    def test_penalty_excludes_dismissal(self):
        assert [i.title for i in filter_incidents(self.INCIDENTS, "penalty")] == ["A"]

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            filter_incidents(self.INCIDENTS, "archived")


class TestPenalized:
    def test_only_suspect_penalties(self):
        incidents = [
            incident("A", Status.DECIDED, rel("a", "KINAMA")),
            incident("B", Status.DECIDED, rel("a", "KINAMA", role=Role.WITNESS)),
            incident("C", Status.DECIDED, rel("a", DISMISSAL)),
        ]
        assert [i.title for i in penalized_incidents(incidents, "a")] == ["A"]

    def test_penalized_students(self):
        incidents = [incident("A", Status.DECIDED, rel("b", "UYARMA"))]
        assert [s.id for s in penalized_students(STUDENTS, incidents)] == ["b"]
