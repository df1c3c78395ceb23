"""
Domain records.

Every record is a plain dataclass. ``to_dict`` / ``from_dict`` use the
camelCase keys of the persisted layout (``tcNo``, ``involvedStudents``, ...)
so the JSON files stay readable by earlier versions of the app.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any, Optional

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Role(str, Enum):
    SUSPECT = "suspect"
    WITNESS = "witness"
    VICTIM = "victim"

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]


ROLE_LABELS: dict[Role, str] = {
    Role.SUSPECT: "Fail",
    Role.WITNESS: "Tanık",
    Role.VICTIM: "Mağdur",
}


class Status(str, Enum):
    PENDING = "pending"
    INVESTIGATING = "investigating"
    DECIDED = "decided"
    # Reserved; nothing transitions into or out of it.
    ARCHIVED = "archived"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS: dict[Status, str] = {
    Status.PENDING: "Beklemede",
    Status.INVESTIGATING: "İnceleniyor",
    Status.DECIDED: "Karara Bağlandı",
    Status.ARCHIVED: "Arşiv",
}


class SchoolType(str, Enum):
    ORTAOKUL = "Ortaokul"
    LISE = "Lise"

    @classmethod
    def of(cls, institution_type: str) -> "SchoolType":
        # Anything that is not explicitly a middle school is treated as a high school.
        return cls.ORTAOKUL if institution_type == cls.ORTAOKUL.value else cls.LISE


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def new_id() -> str:
    return uuid.uuid4().hex[:9]


def today_iso() -> str:
    return date.today().isoformat()


def turkish_upper(text: str) -> str:
    """Uppercase with Turkish dotted/dotless i rules ("Süreli" -> "SÜRELİ")."""
    return text.replace("i", "İ").replace("ı", "I").upper()


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _persisted_fields(cls) -> list:
    return [f for f in fields(cls) if f.metadata.get("persist", True)]


class _Record:
    """Flat camelCase (de)serialization for dataclasses of strings."""

    def to_dict(self) -> dict[str, Any]:
        return {_camel(f.name): getattr(self, f.name) for f in _persisted_fields(type(self))}

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        kwargs = {}
        for f in _persisted_fields(cls):
            key = _camel(f.name)
            if key in data and data[key] is not None:
                kwargs[f.name] = data[key]
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

DELETED_STUDENT_NAME = "Silinmiş Öğrenci"


@dataclass
class Student(_Record):
    id: str = field(default_factory=new_id)
    number: str = ""
    name: str = ""
    grade: str = ""
    tc_no: str = ""
    father_name: str = ""
    mother_name: str = ""
    birth_place_date: str = ""
    province: str = ""
    district: str = ""
    neighborhood: str = ""
    volume_no: str = ""
    family_order_no: str = ""
    order_no: str = ""
    registration_type: str = ""
    previous_school_info: str = ""
    registration_date: str = ""
    parent_name: str = ""
    exam_status: str = ""
    boarding_status: str = ""
    scholarship_status: str = ""
    address: str = ""
    parent_phone: str = ""
    deleted: bool = field(default=False, compare=False, metadata={"persist": False})

    @classmethod
    def placeholder(cls, student_id: str) -> "Student":
        """Stand-in for an incident reference whose student record was removed."""
        return cls(id=student_id, name=DELETED_STUDENT_NAME, deleted=True)


@dataclass
class InvolvedStudent(_Record):
    student_id: str
    role: Role = Role.SUSPECT
    notes: str = ""
    decision: str = ""
    decision_no: str = ""
    decision_date: str = ""
    decision_reason: str = ""
    penalty_score: str = ""
    ai_analysis: str = ""

    def __post_init__(self) -> None:
        self.role = Role(self.role)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["role"] = self.role.value
        return data


@dataclass
class Incident:
    id: str = field(default_factory=new_id)
    code: str = ""
    title: str = ""
    date: str = ""
    time: str = ""
    location: str = ""
    description: str = ""
    status: Status = Status.PENDING
    involved_students: list[InvolvedStudent] = field(default_factory=list)
    petitioner: str = ""
    petitioner_info: str = ""

    def __post_init__(self) -> None:
        self.status = Status(self.status)

    def involvement(self, student_id: str) -> Optional[InvolvedStudent]:
        for rel in self.involved_students:
            if rel.student_id == student_id:
                return rel
        return None

    @property
    def year(self) -> Optional[int]:
        try:
            return int(self.date[:4])
        except (TypeError, ValueError):
            return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "title": self.title,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "description": self.description,
            "status": self.status.value,
            "involvedStudents": [rel.to_dict() for rel in self.involved_students],
            "petitioner": self.petitioner,
            "petitionerInfo": self.petitioner_info,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Incident":
        return cls(
            id=data.get("id") or new_id(),
            code=data.get("code", ""),
            title=data.get("title", ""),
            date=data.get("date", ""),
            time=data.get("time", ""),
            location=data.get("location", ""),
            description=data.get("description", ""),
            status=data.get("status", Status.PENDING.value),
            involved_students=[
                InvolvedStudent.from_dict(rel) for rel in data.get("involvedStudents", [])
            ],
            petitioner=data.get("petitioner") or "",
            petitioner_info=data.get("petitionerInfo") or "",
        )


@dataclass
class Institution(_Record):
    name: str = ""
    code: str = ""
    type: str = SchoolType.LISE.value
    year: str = "2025-2026"
    province: str = ""
    district: str = ""
    manager_name: str = ""
    address: str = ""
    phone: str = ""
    fax: str = ""
    header_text: str = ""
    ebys_code: str = ""

    @property
    def school_type(self) -> SchoolType:
        return SchoolType.of(self.type)


@dataclass
class BoardMember(_Record):
    id: str = field(default_factory=new_id)
    role: str = "ÜYE"
    main_name: str = ""
    main_title: str = "Öğretmen"
    reserve_name: str = ""
    reserve_title: str = "Öğretmen"

    @property
    def is_chair(self) -> bool:
        return "BAŞKAN" in self.role


def default_board() -> list[BoardMember]:
    return [
        BoardMember(id="1", role="BAŞKAN", main_title="Müdür Başyardımcısı", reserve_title="Müdür Yardımcısı"),
        BoardMember(id="2", role="1. ÜYE"),
        BoardMember(id="3", role="2. ÜYE"),
        BoardMember(id="4", role="3. ÜYE"),
        BoardMember(id="5", role="4. ÜYE (VELİ)", main_title="Okul Aile Bir. Üyesi", reserve_title="Yedek Veli"),
    ]


def board_chair(board: list[BoardMember]) -> Optional[BoardMember]:
    return next((m for m in board if m.is_chair), None)


@dataclass
class Settings:
    """The persisted settings bundle."""
    institution: Institution = field(default_factory=Institution)
    board: list[BoardMember] = field(default_factory=default_board)
    api_key: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "institution": self.institution.to_dict(),
            "boardMembers": [m.to_dict() for m in self.board],
            "apiKey": self.api_key,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        board = data.get("boardMembers")
        return cls(
            institution=Institution.from_dict(data.get("institution") or {}),
            board=[BoardMember.from_dict(m) for m in board] if board else default_board(),
            api_key=data.get("apiKey") or "",
        )


@dataclass
class Meeting:
    """Board meeting details printed on the call and summons documents."""
    number: str = "2025/1"
    subject: str = "Disiplin Kurulu Toplantısı"
    date: str = field(default_factory=today_iso)
    time: str = "12:30"
    location: str = "Müdür Yardımcısı Odası"
    agenda: list[str] = field(default_factory=lambda: [
        "Açılış ve yoklama",
        "Kurula sevk edilen disiplin dosyalarının görüşülmesi",
        "Dilek ve temenniler",
        "Kapanış",
    ])


@dataclass
class Decision:
    """The decision form: what gets written onto an involvement when finalized."""
    penalty: str = "KINAMA"
    decision_no: str = ""
    decision_date: str = field(default_factory=today_iso)
    reason: str = ""
    score: str = "10"
