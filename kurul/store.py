"""
Entity Store.

Owns the student list, the incident list and the settings bundle. Each is a
JSON file in the data directory, loaded once at construction and rewritten
in full on every mutation. A failed write is logged and otherwise ignored:
the in-memory state stays authoritative for the session.

Readers get copies; every change goes back through a mutation method.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

from kurul import config
from kurul.errors import BoardSizeError, DuplicateStudentNumberError
from kurul.lifecycle import derive_status
from kurul.models import BoardMember, Incident, Institution, Settings, Status, Student

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_BOARD_SIZE: int = 3
UNKNOWN_GRADE: str = "Belirsiz"
INCIDENT_CODE_PATTERN = re.compile(r"^OLAY(\d{4})-(\d+)$")


def format_incident_code(year: int, seq: int) -> str:
    return f"OLAY{year}-{seq:03d}"


def grade_key(student: Student) -> str:
    return student.grade.strip() if student.grade and student.grade.strip() else UNKNOWN_GRADE


def natural_key(text: str) -> list:
    """'9-A' < '10-A' ordering for class labels."""
    return [int(part) if part.isdigit() else part for part in re.split(r"(\d+)", text.casefold())]


class EntityStore:
    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR
        self._students: list[Student] = self._load_records(config.STUDENTS_FILE, Student)
        self._incidents: list[Incident] = self._load_records(config.INCIDENTS_FILE, Incident)
        self._settings: Settings = self._load_settings()
        self._sequence: dict[str, int] = self._load_sequence()
        logger.info(
            "Loaded %d students, %d incidents from %s",
            len(self._students), len(self._incidents), self.data_dir,
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _read(self, name: str, default: Any) -> Any:
        path = self.data_dir / name
        try:
            with path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return default
        except (OSError, ValueError) as e:
            logger.error("Could not load %s, starting empty: %s", path, e)
            return default
        if not isinstance(data, type(default)):
            logger.error("Unexpected layout in %s, starting empty", path)
            return default
        return data

    def _load_records(self, name: str, cls) -> list:
        """Parse each row on its own; a malformed row is logged and skipped."""
        records = []
        for index, row in enumerate(self._read(name, [])):
            try:
                records.append(cls.from_dict(row))
            except (ValueError, TypeError, AttributeError, KeyError) as e:
                logger.error("Skipping malformed record %d in %s: %s", index, name, e)
        return records

    def _load_settings(self) -> Settings:
        try:
            return Settings.from_dict(self._read(config.SETTINGS_FILE, {}))
        except (ValueError, TypeError, AttributeError, KeyError) as e:
            logger.error("Malformed %s, using default settings: %s", config.SETTINGS_FILE, e)
            return Settings()

    def _load_sequence(self) -> dict[str, int]:
        try:
            return {str(k): int(v) for k, v in self._read(config.SEQUENCE_FILE, {}).items()}
        except (ValueError, TypeError) as e:
            logger.error("Malformed %s, recovering codes from incidents: %s", config.SEQUENCE_FILE, e)
            return {}

    def _write(self, name: str, payload: Any) -> None:
        path = self.data_dir / name
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            logger.error("Could not persist %s (kept in memory): %s", path, e)

    def _save_students(self) -> None:
        self._write(config.STUDENTS_FILE, [s.to_dict() for s in self._students])

    def _save_incidents(self) -> None:
        self._write(config.INCIDENTS_FILE, [i.to_dict() for i in self._incidents])

    def _save_settings(self) -> None:
        self._write(config.SETTINGS_FILE, self._settings.to_dict())

    # ------------------------------------------------------------------
    # Students
    # ------------------------------------------------------------------

    def list_students(self) -> list[Student]:
        return copy.deepcopy(self._students)

    def get_student(self, student_id: str) -> Optional[Student]:
        for s in self._students:
            if s.id == student_id:
                return copy.deepcopy(s)
        return None

    def resolve_student(self, student_id: str) -> Student:
        """Like get_student, but a removed student comes back as a placeholder."""
        return self.get_student(student_id) or Student.placeholder(student_id)

    def student_numbers(self) -> set[str]:
        return {s.number for s in self._students}

    def upsert_student(self, student: Student) -> Student:
        clash = next(
            (s for s in self._students if s.number == student.number and s.id != student.id),
            None,
        )
        if clash is not None:
            raise DuplicateStudentNumberError(number=student.number)

        stored = copy.deepcopy(student)
        for idx, s in enumerate(self._students):
            if s.id == student.id:
                self._students[idx] = stored
                break
        else:
            self._students.append(stored)
        self._save_students()
        return copy.deepcopy(stored)

    def add_students(self, batch: list[Student]) -> int:
        """Append a whole import batch with a single write."""
        seen = self.student_numbers()
        for s in batch:
            if s.number in seen:
                raise DuplicateStudentNumberError(number=s.number)
            seen.add(s.number)
        self._students.extend(copy.deepcopy(batch))
        self._save_students()
        logger.info("Added %d students", len(batch))
        return len(batch)

    def remove_student(self, student_id: str) -> bool:
        before = len(self._students)
        self._students = [s for s in self._students if s.id != student_id]
        if len(self._students) == before:
            return False
        self._save_students()
        return True

    def remove_grade(self, grade: str) -> int:
        before = len(self._students)
        self._students = [s for s in self._students if grade_key(s) != grade]
        removed = before - len(self._students)
        if removed:
            self._save_students()
            logger.info("Removed class %s (%d students)", grade, removed)
        return removed

    def class_groups(self) -> list[tuple[str, int]]:
        counts: dict[str, int] = {}
        for s in self._students:
            key = grade_key(s)
            counts[key] = counts.get(key, 0) + 1
        return sorted(counts.items(), key=lambda item: natural_key(item[0]))

    def search_students(self, term: str = "", grade: Optional[str] = None) -> list[Student]:
        result = self._students
        if grade:
            result = [s for s in result if grade_key(s) == grade]
        if term:
            lowered = term.lower()
            result = [
                s for s in result
                if lowered in s.name.lower() or term in s.number or term in s.tc_no
            ]
        return copy.deepcopy(result)

    # ------------------------------------------------------------------
    # Incidents
    # ------------------------------------------------------------------

    def list_incidents(self) -> list[Incident]:
        return copy.deepcopy(self._incidents)

    def get_incident(self, incident_id: str) -> Optional[Incident]:
        for inc in self._incidents:
            if inc.id == incident_id:
                return copy.deepcopy(inc)
        return None

    def _high_water(self, year: int) -> int:
        mark = self._sequence.get(str(year), 0)
        for inc in self._incidents:
            m = INCIDENT_CODE_PATTERN.match(inc.code)
            if m and int(m.group(1)) == year:
                mark = max(mark, int(m.group(2)))
        return mark

    def next_incident_code(self, year: Optional[int] = None) -> str:
        """The code the next created incident will get. Does not reserve it."""
        year = year or date.today().year
        return format_incident_code(year, self._high_water(year) + 1)

    def _allocate_code(self, year: int) -> str:
        seq = self._high_water(year) + 1
        self._sequence[str(year)] = seq
        self._write(config.SEQUENCE_FILE, self._sequence)
        return format_incident_code(year, seq)

    def _note_code(self, code: str) -> None:
        m = INCIDENT_CODE_PATTERN.match(code)
        if m:
            year, seq = m.group(1), int(m.group(2))
            if seq > self._sequence.get(year, 0):
                self._sequence[year] = seq
                self._write(config.SEQUENCE_FILE, self._sequence)

    def upsert_incident(self, incident: Incident) -> Incident:
        """
        Insert or replace an incident.

        New incidents get a code (unless they already carry one) and start as
        ``pending``. For existing incidents the stored code is kept and the
        caller's status is ignored: status is re-derived when the involvement
        list changed, otherwise the stored status stands.
        """
        stored = copy.deepcopy(incident)
        existing_idx = next(
            (idx for idx, inc in enumerate(self._incidents) if inc.id == incident.id), None
        )

        if existing_idx is None:
            if stored.code:
                self._note_code(stored.code)
            else:
                stored.code = self._allocate_code(date.today().year)
            stored.status = Status.PENDING
            self._incidents.insert(0, stored)
            logger.info("Created incident %s", stored.code)
        else:
            existing = self._incidents[existing_idx]
            stored.code = existing.code
            if stored.involved_students != existing.involved_students:
                stored.status = derive_status(stored.involved_students)
            else:
                stored.status = existing.status
            self._incidents[existing_idx] = stored

        self._save_incidents()
        return copy.deepcopy(stored)

    def replace_involvements(self, incident_id: str, involved: list) -> Optional[Incident]:
        """Write an incident's involvement list and re-derive its status unconditionally."""
        for inc in self._incidents:
            if inc.id == incident_id:
                inc.involved_students = copy.deepcopy(involved)
                inc.status = derive_status(inc.involved_students)
                self._save_incidents()
                return copy.deepcopy(inc)
        return None

    def remove_incident(self, incident_id: str) -> bool:
        before = len(self._incidents)
        self._incidents = [inc for inc in self._incidents if inc.id != incident_id]
        if len(self._incidents) == before:
            return False
        self._save_incidents()
        return True

    def search_incidents(self, term: str = "", current_year_only: bool = False) -> list[Incident]:
        result = self._incidents
        if current_year_only:
            this_year = date.today().year
            result = [inc for inc in result if inc.year == this_year]
        if term:
            lowered = term.lower()
            result = [
                inc for inc in result
                if lowered in inc.title.lower() or lowered in inc.code.lower()
            ]
        return copy.deepcopy(result)

    # ------------------------------------------------------------------
    # Settings bundle
    # ------------------------------------------------------------------

    def get_config(self) -> Settings:
        return copy.deepcopy(self._settings)

    def set_config(self, settings: Settings) -> None:
        self._settings = copy.deepcopy(settings)
        self._save_settings()

    @property
    def institution(self) -> Institution:
        return copy.deepcopy(self._settings.institution)

    @property
    def board(self) -> list[BoardMember]:
        return copy.deepcopy(self._settings.board)

    @property
    def api_key(self) -> str:
        return self._settings.api_key or config.GEMINI_API_KEY

    def set_institution(self, institution: Institution) -> None:
        self._settings.institution = copy.deepcopy(institution)
        self._save_settings()

    def set_board(self, members: list[BoardMember]) -> None:
        self._settings.board = copy.deepcopy(members)
        self._save_settings()

    def add_board_member(self, member: Optional[BoardMember] = None) -> BoardMember:
        member = member or BoardMember()
        self._settings.board.append(copy.deepcopy(member))
        self._save_settings()
        return member

    def remove_board_member(self, member_id: str) -> None:
        if len(self._settings.board) <= MIN_BOARD_SIZE:
            raise BoardSizeError()
        self._settings.board = [m for m in self._settings.board if m.id != member_id]
        self._save_settings()

    def set_api_key(self, key: str) -> None:
        self._settings.api_key = key
        self._save_settings()
