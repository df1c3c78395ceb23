"""
Render contexts for the document templates.

A context is either ``Bound`` (a real student, incident and decision) or
``Blank`` (a printable form with nothing filled in). Templates never see the
raw records: they get views whose fields are already strings, with every
absent value replaced by its dotted placeholder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional, Union

from kurul.catalog import load_decision
from kurul.models import (
    BoardMember,
    Decision,
    Incident,
    InvolvedStudent,
    Institution,
    Meeting,
    Role,
    Student,
)

if TYPE_CHECKING:
    from kurul.store import EntityStore

# ---------------------------------------------------------------------------
# Placeholders
# ---------------------------------------------------------------------------

PLACEHOLDERS: dict[str, str] = {
    "name": "." * 46,
    "grade": "." * 10,
    "number": "." * 10,
    "parent": "." * 46,
    "dob": "..../..../.......",
    "tc": "." * 21,
    "address": "." * 59,
    "incident_date": "..../..../20....",
    "time": "..... : .....",
    "location": "." * 30,
    "title": "." * 30,
    "desc": "." * 99,
    "decision_no": "." * 10,
    "decision_date": "..../..../20....",
    "penalty": "." * 30,
    "reason": "." * 99,
    "score": "....",
    "analysis": "." * 99,
}

EMPTY_DATE = ".../.../...."


def format_date(iso: str) -> str:
    """'2025-03-05' -> '05.03.2025'. Empty gives the short placeholder; anything unparseable is returned as is."""
    if not iso:
        return EMPTY_DATE
    try:
        return datetime.strptime(iso[:10], "%Y-%m-%d").strftime("%d.%m.%Y")
    except ValueError:
        return iso


def display_today(today: Optional[date] = None) -> str:
    return (today or date.today()).strftime("%d.%m.%Y")


def _or(value: str, key: str) -> str:
    return value if value else PLACEHOLDERS[key]


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


@dataclass
class StudentView:
    name: str = PLACEHOLDERS["name"]
    grade: str = PLACEHOLDERS["grade"]
    number: str = PLACEHOLDERS["number"]
    parent: str = PLACEHOLDERS["parent"]
    dob: str = PLACEHOLDERS["dob"]
    tc: str = PLACEHOLDERS["tc"]
    address: str = PLACEHOLDERS["address"]

    @classmethod
    def of(cls, student: Student) -> "StudentView":
        return cls(
            name=_or(student.name, "name"),
            grade=_or(student.grade, "grade"),
            number=_or(student.number, "number"),
            parent=_or(student.parent_name, "parent"),
            dob=_or(student.birth_place_date, "dob"),
            tc=_or(student.tc_no, "tc"),
            address=_or(student.address, "address"),
        )

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0]

    @property
    def last_name(self) -> str:
        return " ".join(self.name.split(" ")[1:])

    @property
    def parent_first_name(self) -> str:
        return self.parent.split(" ")[0]

    @property
    def birth_place(self) -> str:
        return self.dob.split("/")[0] or "..."


@dataclass
class IncidentView:
    date: str = PLACEHOLDERS["incident_date"]
    time: str = PLACEHOLDERS["time"]
    location: str = PLACEHOLDERS["location"]
    title: str = PLACEHOLDERS["title"]
    desc: str = PLACEHOLDERS["desc"]

    @classmethod
    def of(cls, incident: Incident) -> "IncidentView":
        return cls(
            date=format_date(incident.date) if incident.date else PLACEHOLDERS["incident_date"],
            time=_or(incident.time, "time"),
            location=_or(incident.location, "location"),
            title=_or(incident.title, "title"),
            desc=_or(incident.description, "desc"),
        )


@dataclass
class DecisionView:
    no: str = PLACEHOLDERS["decision_no"]
    date: str = PLACEHOLDERS["decision_date"]
    penalty: str = PLACEHOLDERS["penalty"]
    reason: str = PLACEHOLDERS["reason"]
    score: str = PLACEHOLDERS["score"]

    @classmethod
    def of(cls, decision: Decision) -> "DecisionView":
        return cls(
            no=_or(decision.decision_no, "decision_no"),
            date=format_date(decision.decision_date) if decision.decision_date else PLACEHOLDERS["decision_date"],
            penalty=_or(decision.penalty, "penalty"),
            reason=_or(decision.reason, "reason"),
            score=_or(decision.score, "score"),
        )

    @property
    def article_ref(self) -> str:
        """The 'Madde 164/2-a)' head of the reason."""
        return self.reason.split(")")[0] + ")"

    @property
    def reason_excerpt(self) -> str:
        return self.reason[:50] + "..."


@dataclass
class MeetingView:
    number: str
    subject: str
    date: str
    time: str
    location: str
    agenda: list[str]

    @classmethod
    def of(cls, meeting: Meeting) -> "MeetingView":
        return cls(
            number=meeting.number,
            subject=meeting.subject,
            date=format_date(meeting.date),
            time=meeting.time,
            location=meeting.location,
            agenda=list(meeting.agenda),
        )


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


@dataclass
class Blank:
    institution: Institution
    board: list[BoardMember]
    meeting: Meeting = field(default_factory=Meeting)


@dataclass
class Bound:
    institution: Institution
    board: list[BoardMember]
    meeting: Meeting = field(default_factory=Meeting)
    student: Optional[Student] = None
    incident: Optional[Incident] = None
    decision: Decision = field(default_factory=Decision)
    involvement: Optional[InvolvedStudent] = None

    @property
    def role(self) -> Optional[Role]:
        return self.involvement.role if self.involvement else None


RenderContext = Union[Bound, Blank]


def build_context(
    store: "EntityStore",
    incident_id: str = "",
    student_id: str = "",
    blank: bool = False,
    decision: Optional[Decision] = None,
    meeting: Optional[Meeting] = None,
) -> RenderContext:
    """
    Assemble a render context from the store.

    In blank mode the ids are not looked at. In bound mode a missing incident
    or student is left as ``None``; the engine decides whether the template
    can do without it. A student that was removed but is still referenced by
    the incident resolves to the placeholder record. Without an explicit
    ``decision`` the one recorded on the involvement is used.
    """
    institution = store.institution
    board = store.board
    meeting = meeting or Meeting()
    if blank:
        return Blank(institution=institution, board=board, meeting=meeting)

    incident = store.get_incident(incident_id) if incident_id else None
    involvement = incident.involvement(student_id) if incident and student_id else None

    student = store.get_student(student_id) if student_id else None
    if student is None and involvement is not None:
        student = Student.placeholder(student_id)

    return Bound(
        institution=institution,
        board=board,
        meeting=meeting,
        student=student,
        incident=incident,
        decision=decision if decision is not None else load_decision(involvement),
        involvement=involvement,
    )
