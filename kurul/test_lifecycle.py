"""
Incident lifecycle tests: involvement writes and the derived status.
"""

import pytest

from kurul.errors import DuplicateInvolvementError, MissingSelectionError
from kurul.lifecycle import IncidentLifecycle, derive_status
from kurul.models import DELETED_STUDENT_NAME, Decision, InvolvedStudent, Role, Status, Student
from kurul.store import EntityStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def store(tmp_path):
    return EntityStore(data_dir=tmp_path)


@pytest.fixture
def lifecycle(store):
    return IncidentLifecycle(store)


def add_student(store, number="1", name="Ali Kaya") -> Student:
    return store.upsert_student(Student(number=number, name=name, grade="9-A"))


# ---------------------------------------------------------------------------
# derive_status
# ---------------------------------------------------------------------------

class TestDeriveStatus:
    def test_empty_is_decided(self):
        assert derive_status([]) == Status.DECIDED

    def test_undecided_suspect(self):
        assert derive_status([InvolvedStudent("a", Role.SUSPECT)]) == Status.INVESTIGATING

    def test_witnesses_only_is_decided(self):
        rels = [InvolvedStudent("a", Role.WITNESS), InvolvedStudent("b", Role.VICTIM)]
        assert derive_status(rels) == Status.DECIDED

    def test_all_suspects_decided(self):
        rels = [
            InvolvedStudent("a", Role.SUSPECT, decision="KINAMA"),
            InvolvedStudent("b", Role.WITNESS),
        ]
        assert derive_status(rels) == Status.DECIDED

    def test_one_suspect_open(self):
        rels = [
            InvolvedStudent("a", Role.SUSPECT, decision="KINAMA"),
            InvolvedStudent("b", Role.SUSPECT),
        ]
        assert derive_status(rels) == Status.INVESTIGATING


# ---------------------------------------------------------------------------
# Involvements
# ---------------------------------------------------------------------------

class TestInvolvements:
    def test_create_incident_is_pending(self, lifecycle):
        inc = lifecycle.create_incident("Kavga", "2025-03-01", location="Bahçe")
        assert inc.status == Status.PENDING
        assert inc.code.startswith("OLAY")

    def test_add_suspect_starts_investigation(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        updated = lifecycle.add_involvement(inc.id, s.id, Role.SUSPECT)
        assert updated.status == Status.INVESTIGATING
        assert updated.involvement(s.id).role == Role.SUSPECT

    def test_add_witness_only_decides(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        assert lifecycle.add_involvement(inc.id, s.id, Role.WITNESS).status == Status.DECIDED

    def test_role_accepts_plain_string(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        updated = lifecycle.add_involvement(inc.id, s.id, "victim")
        assert updated.involvement(s.id).role == Role.VICTIM

    def test_duplicate_rejected(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        lifecycle.add_involvement(inc.id, s.id)
        with pytest.raises(DuplicateInvolvementError):
            lifecycle.add_involvement(inc.id, s.id, Role.WITNESS)
        assert len(store.get_incident(inc.id).involved_students) == 1

    def test_unknown_student_rejected(self, lifecycle):
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        with pytest.raises(MissingSelectionError):
            lifecycle.add_involvement(inc.id, "missing")

    def test_no_incident_selected(self, store, lifecycle):
        s = add_student(store)
        with pytest.raises(MissingSelectionError):
            lifecycle.add_involvement("", s.id)

    def test_remove_last_suspect(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        lifecycle.add_involvement(inc.id, s.id)
        updated = lifecycle.remove_involvement(inc.id, s.id)
        assert updated.involved_students == []
        assert updated.status == Status.DECIDED

    def test_update_notes_keeps_status_rule(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        lifecycle.add_involvement(inc.id, s.id)
        updated = lifecycle.update_involvement(inc.id, s.id, notes="ilk kavga")
        assert updated.involvement(s.id).notes == "ilk kavga"
        assert updated.status == Status.INVESTIGATING

    def test_update_unknown_field(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        lifecycle.add_involvement(inc.id, s.id)
        with pytest.raises(TypeError):
            lifecycle.update_involvement(inc.id, s.id, student_id="other")

    def test_update_missing_involvement(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        with pytest.raises(MissingSelectionError):
            lifecycle.update_involvement(inc.id, s.id, notes="x")


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------

class TestDecisions:
    def test_save_decision_closes_incident(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        lifecycle.add_involvement(inc.id, s.id)
        decision = Decision(penalty="KINAMA", decision_no="2025/4", decision_date="2025-03-10",
                            reason="Madde 164/2-ı) Kavga etmek", score="10")
        updated = lifecycle.save_decision(inc.id, s.id, decision)
        rel = updated.involvement(s.id)
        assert updated.status == Status.DECIDED
        assert (rel.decision, rel.decision_no, rel.penalty_score) == ("KINAMA", "2025/4", "10")
        assert store.get_incident(inc.id).status == Status.DECIDED

    def test_one_of_two_suspects_decided(self, store, lifecycle):
        a = add_student(store, "1", "Ali Kaya")
        b = add_student(store, "2", "Can Demir")
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        lifecycle.add_involvement(inc.id, a.id)
        lifecycle.add_involvement(inc.id, b.id)
        updated = lifecycle.save_decision(inc.id, a.id, Decision(penalty="KINAMA"))
        assert updated.status == Status.INVESTIGATING

    def test_cache_analysis(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        lifecycle.add_involvement(inc.id, s.id)
        updated = lifecycle.cache_analysis(inc.id, s.id, "Analiz metni")
        assert updated.involvement(s.id).ai_analysis == "Analiz metni"


class TestParticipants:
    def test_removed_student_is_placeholder(self, store, lifecycle):
        s = add_student(store)
        inc = lifecycle.create_incident("Kavga", "2025-03-01")
        lifecycle.add_involvement(inc.id, s.id)
        store.remove_student(s.id)
        [(student, rel)] = lifecycle.participants(inc.id)
        assert student.deleted
        assert student.name == DELETED_STUDENT_NAME
        assert rel.student_id == s.id
