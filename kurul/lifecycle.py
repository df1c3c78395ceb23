"""
Incident Lifecycle Manager.

Status is never set directly. It is derived from the involvement list after
every involvement write:

    pending        on creation
    decided        every suspect has a non-empty decision
    investigating  otherwise

An incident with no suspects is therefore ``decided`` as soon as any
involvement is written. ``archived`` exists in the enum but nothing enters
or leaves it.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import TYPE_CHECKING, Iterable

from kurul.errors import DuplicateInvolvementError, MissingSelectionError
from kurul.models import Decision, Incident, InvolvedStudent, Role, Status, Student

if TYPE_CHECKING:
    from kurul.store import EntityStore

logger = logging.getLogger(__name__)

MISSING_SELECTION_MESSAGE = "Lütfen önce listeden olay ve öğrenci seçiniz."

_WRITABLE_FIELDS: frozenset[str] = frozenset(
    f.name for f in fields(InvolvedStudent) if f.name != "student_id"
)


def derive_status(involved: Iterable[InvolvedStudent]) -> Status:
    all_decided = all(rel.role != Role.SUSPECT or bool(rel.decision) for rel in involved)
    return Status.DECIDED if all_decided else Status.INVESTIGATING


class IncidentLifecycle:
    def __init__(self, store: "EntityStore"):
        self.store = store

    def _incident(self, incident_id: str, message: str = MISSING_SELECTION_MESSAGE) -> Incident:
        incident = self.store.get_incident(incident_id) if incident_id else None
        if incident is None:
            raise MissingSelectionError(message)
        return incident

    def create_incident(
        self,
        title: str,
        date: str,
        time: str = "",
        location: str = "",
        description: str = "",
        petitioner: str = "",
        petitioner_info: str = "",
    ) -> Incident:
        incident = Incident(
            title=title,
            date=date,
            time=time,
            location=location,
            description=description,
            petitioner=petitioner,
            petitioner_info=petitioner_info,
        )
        return self.store.upsert_incident(incident)

    def add_involvement(
        self,
        incident_id: str,
        student_id: str,
        role: Role = Role.SUSPECT,
        notes: str = "",
    ) -> Incident:
        incident = self._incident(incident_id)
        if not student_id or self.store.get_student(student_id) is None:
            raise MissingSelectionError(MISSING_SELECTION_MESSAGE)
        if incident.involvement(student_id) is not None:
            raise DuplicateInvolvementError()

        involved = incident.involved_students + [
            InvolvedStudent(student_id=student_id, role=Role(role), notes=notes)
        ]
        updated = self.store.replace_involvements(incident.id, involved)
        logger.info("Added student %s to %s as %s", student_id, incident.code, Role(role).value)
        return updated

    def remove_involvement(self, incident_id: str, student_id: str) -> Incident:
        incident = self._incident(incident_id)
        involved = [rel for rel in incident.involved_students if rel.student_id != student_id]
        return self.store.replace_involvements(incident.id, involved)

    def update_involvement(self, incident_id: str, student_id: str, **changes) -> Incident:
        """Merge ``changes`` into one involvement and re-derive the incident status."""
        unknown = set(changes) - _WRITABLE_FIELDS
        if unknown:
            raise TypeError(f"Unknown involvement field(s): {', '.join(sorted(unknown))}")

        incident = self._incident(incident_id)
        rel = incident.involvement(student_id) if student_id else None
        if rel is None:
            raise MissingSelectionError(MISSING_SELECTION_MESSAGE)

        for name, value in changes.items():
            setattr(rel, name, Role(value) if name == "role" else value)
        return self.store.replace_involvements(incident.id, incident.involved_students)

    def save_decision(self, incident_id: str, student_id: str, decision: Decision) -> Incident:
        """Finalize a decision. A decision number turns a proposal into a decision."""
        updated = self.update_involvement(
            incident_id,
            student_id,
            decision=decision.penalty,
            decision_no=decision.decision_no,
            decision_date=decision.decision_date,
            decision_reason=decision.reason,
            penalty_score=decision.score,
        )
        logger.info("Decision saved for %s / %s: %s", updated.code, student_id, decision.penalty)
        return updated

    def cache_analysis(self, incident_id: str, student_id: str, text: str) -> Incident:
        return self.update_involvement(incident_id, student_id, ai_analysis=text)

    def participants(self, incident_id: str) -> list[tuple[Student, InvolvedStudent]]:
        """Involvements with their student records; removed students come back as placeholders."""
        incident = self._incident(incident_id)
        return [(self.store.resolve_student(rel.student_id), rel) for rel in incident.involved_students]
