"""
Student register import (e-Okul Öğrenci Künye Defteri).

CONTRACT
--------
- Input: .xlsx / .xls / .csv, first sheet, no header row.
- One 19-row block per student, anchored by a cell starting with "Okul No".
- A block without a number or a name is skipped.
- A number already in the store, or earlier in the same file, is skipped.
- Grade "9. Sınıf / A Şubesi" becomes "9-A"; an empty grade becomes
  "Belirtilmedi"; anything else is kept as written.
- No students found is a halt, not an empty success.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Optional, Sequence, Union

import pandas as pd

from kurul.errors import StudentImportError
from kurul.ingestion.label_mapper import BLOCK_HEIGHT, is_anchor_row, read_block
from kurul.models import Student

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

GRADE_PATTERN = re.compile(r"(\d+)\.\s*Sınıf.*?([A-Z])\s*Şubesi", re.IGNORECASE)
UNSPECIFIED_GRADE: str = "Belirtilmedi"
SUPPORTED_SUFFIXES: tuple[str, ...] = (".xlsx", ".xls", ".csv")

NO_STUDENTS_MESSAGE = (
    "Dosyada uygun formatta öğrenci verisi bulunamadı. "
    "Lütfen dosyanın 'Okul No:' formatına uygun olduğundan emin olun."
)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass
class SkippedBlock:
    row_index: int
    number: str
    reason: str


@dataclass
class ImportReport:
    timestamp: str
    source_file: str
    row_count: int
    blocks_found: int
    imported: int
    skipped: list[SkippedBlock] = field(default_factory=list)

    def as_text(self) -> str:
        lines = [
            "═" * 60,
            "ÖĞRENCİ AKTARIM RAPORU",
            "═" * 60,
            f"Oluşturma       : {self.timestamp}",
            f"Dosya           : {self.source_file}",
            "",
            f"  Satır sayısı  : {self.row_count}",
            f"  Öğrenci bloğu : {self.blocks_found}",
            f"  Aktarılan     : {self.imported}",
            "",
            "ATLANAN BLOKLAR",
        ]
        if not self.skipped:
            lines.append("  Yok")
        for s in self.skipped:
            lines.append(f"  Satır {s.row_index + 1} (Okul No '{s.number}'): {s.reason}")
        lines.append("═" * 60)
        return "\n".join(lines)


@dataclass
class ImportResult:
    students: list[Student]
    report: ImportReport


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def normalize_grade(raw: str) -> str:
    if not raw:
        return UNSPECIFIED_GRADE
    m = GRADE_PATTERN.search(raw)
    if m:
        return f"{m.group(1)}-{m.group(2)}"
    return raw


def parse_student_blocks(
    rows: Sequence[Sequence[Any]],
    existing_numbers: Iterable[str] = (),
) -> tuple[list[Student], list[SkippedBlock]]:
    """
    Turn register rows into students.

    Parameters
    ----------
    rows : sequence of rows
        The sheet, cells in column order, no header.
    existing_numbers : iterable of str
        School numbers already in the store.

    Returns
    -------
    (students, skipped)
        New students in file order, and the blocks that were passed over.
    """
    taken = set(existing_numbers)
    students: list[Student] = []
    skipped: list[SkippedBlock] = []

    i = 0
    while i < len(rows):
        row = rows[i]
        if not row or not is_anchor_row(row):
            i += 1
            continue

        values = read_block(rows, i)
        number = values.pop("number")
        name = f"{values.pop('first_name')} {values.pop('last_name')}".strip()
        grade = normalize_grade(values.pop("grade"))

        if not number or not name:
            skipped.append(SkippedBlock(i, number, "Okul No veya ad eksik"))
        elif number in taken:
            skipped.append(SkippedBlock(i, number, "Bu okul numarası zaten kayıtlı"))
        else:
            taken.add(number)
            students.append(Student(number=number, name=name, grade=grade, **values))

        i += BLOCK_HEIGHT

    return students, skipped


def _read_rows(source: Union[str, Path, BinaryIO], filename: str) -> list[list[Any]]:
    suffix = Path(filename).suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(source, header=None, dtype=str, skip_blank_lines=False)
    else:
        df = pd.read_excel(source, header=None, dtype=str, sheet_name=0)
    return df.values.tolist()


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def run_student_import(
    source: Union[str, Path, BinaryIO],
    existing_numbers: Iterable[str] = (),
    filename: Optional[str] = None,
) -> ImportResult:
    """
    Read a Künye Defteri export and return the students to add.

    Nothing is written to the store; the caller commits ``result.students``.

    Parameters
    ----------
    source : path or binary file object
        The uploaded spreadsheet.
    existing_numbers : iterable of str
        School numbers already in the store; matching blocks are skipped.
    filename : str, optional
        Needed when ``source`` is a file object, to pick the reader.

    Raises
    ------
    StudentImportError
        Missing or unreadable file, unsupported type, or no students found.
    """
    label = filename or str(source)
    if isinstance(source, (str, Path)) and not Path(source).exists():
        raise StudentImportError(
            message="Dosya bulunamadı",
            affected_file=label,
            operator_fix_steps=[f"Dosya yolunu kontrol edin: {label}"],
        )

    if Path(label).suffix.lower() not in SUPPORTED_SUFFIXES:
        raise StudentImportError(
            message="Desteklenmeyen dosya türü",
            affected_file=label,
            operator_fix_steps=[
                "e-Okul'dan Öğrenci Künye Defteri raporunu Excel (.xlsx / .xls) olarak indirin.",
            ],
        )

    try:
        rows = _read_rows(source, label)
    except (ValueError, OSError, ImportError) as e:
        raise StudentImportError(
            message="Dosya okunamadı",
            affected_file=label,
            operator_fix_steps=[
                "Dosyanın bozuk olmadığından ve Excel ile açılabildiğinden emin olun.",
                f"Okuma hatası: {e}",
            ],
        )

    students, skipped = parse_student_blocks(rows, existing_numbers)
    logger.info(
        "Import %s: %d rows, %d new students, %d skipped",
        Path(label).name, len(rows), len(students), len(skipped),
    )

    if not students:
        raise StudentImportError(
            message=NO_STUDENTS_MESSAGE,
            affected_file=label,
            operator_fix_steps=[
                "Her öğrenci kartının 'Okul No' hücresiyle başladığını kontrol edin.",
                "Dosyadaki öğrencilerin daha önce aktarılmadığını kontrol edin.",
            ],
        )

    report = ImportReport(
        timestamp=datetime.now().isoformat(timespec="seconds"),
        source_file=Path(label).name,
        row_count=len(rows),
        blocks_found=len(students) + len(skipped),
        imported=len(students),
        skipped=skipped,
    )
    return ImportResult(students=students, report=report)


# ---------------------------------------------------------------------------
# CLI / direct execution
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import sys

    if len(sys.argv) != 2:
        print("Usage: python -m kurul.ingestion.student_import <kunye_defteri.xlsx>")
        sys.exit(1)

    try:
        result = run_student_import(sys.argv[1])
        print(result.report.as_text())
        for s in result.students:
            print(f"  {s.number:>6}  {s.grade:<8}  {s.name}")
    except StudentImportError as e:
        print(str(e))
        sys.exit(2)
