"""
Student register import test suite.

Covers block scanning, skipping rules, grade normalization and the halt
conditions of run_student_import. Files are written to pytest's tmp_path.
"""

import pandas as pd
import pytest

from kurul.errors import StudentImportError
from kurul.ingestion.label_mapper import BLOCK_HEIGHT
from kurul.ingestion.student_import import (
    NO_STUDENTS_MESSAGE,
    UNSPECIFIED_GRADE,
    ImportResult,
    normalize_grade,
    parse_student_blocks,
    run_student_import,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_block(number: str, first: str, last: str, grade: str = "9. Sınıf / A Şubesi") -> list[list]:
    rows = [["", "", "", ""] for _ in range(BLOCK_HEIGHT)]
    rows[0] = ["Okul No:", "", number, ""]
    rows[1] = ["Adı", "", first, ""]
    rows[2] = ["Soyadı", "", last, ""]
    rows[13] = ["Yeni Kayıt", "Nakil", "Kabul Ed. Sınıf", grade]
    rows[16] = ["Veli Adı", "Fatma " + last, "", ""]
    return rows


def make_sheet(*blocks: list[list], preamble: int = 2) -> list[list]:
    rows = [["ÖĞRENCİ KÜNYE DEFTERİ", "", "", ""]] + [["", "", "", ""]] * (preamble - 1)
    for block in blocks:
        rows.extend(block)
    return rows


def write_csv(tmp_path, rows: list[list], name: str = "kunye.csv") -> str:
    path = tmp_path / name
    pd.DataFrame(rows).to_csv(path, header=False, index=False)
    return str(path)


# ---------------------------------------------------------------------------
# Grade normalization
# ---------------------------------------------------------------------------

class TestNormalizeGrade:
    def test_class_and_section(self):
        assert normalize_grade("9. Sınıf / A Şubesi") == "9-A"

    def test_without_slash(self):
        assert normalize_grade("9. Sınıf A Şubesi") == "9-A"

    def test_two_digit_grade(self):
        assert normalize_grade("10. Sınıf / C Şubesi") == "10-C"

    def test_empty_is_unspecified(self):
        assert normalize_grade("") == UNSPECIFIED_GRADE

    def test_unrecognized_kept_verbatim(self):
        assert normalize_grade("Hazırlık") == "Hazırlık"


# ---------------------------------------------------------------------------
# Block parsing
# ---------------------------------------------------------------------------

class TestParseStudentBlocks:
    def test_single_block(self):
        students, skipped = parse_student_blocks(make_sheet(make_block("123", "Ayşe", "Yılmaz")))
        assert len(students) == 1
        assert skipped == []
        s = students[0]
        assert s.number == "123"
        assert s.name == "Ayşe Yılmaz"
        assert s.grade == "9-A"
        assert s.parent_name == "Fatma Yılmaz"
        assert s.registration_type == "Nakil"

    def test_multiple_blocks_in_file_order(self):
        rows = make_sheet(make_block("1", "Ali", "Kaya"), make_block("2", "Can", "Demir"))
        students, _ = parse_student_blocks(rows)
        assert [s.number for s in students] == ["1", "2"]

    def test_existing_number_skipped(self):
        rows = make_sheet(make_block("123", "Ayşe", "Yılmaz"))
        students, skipped = parse_student_blocks(rows, existing_numbers={"123"})
        assert students == []
        assert len(skipped) == 1
        assert skipped[0].number == "123"

    def test_duplicate_within_file_skipped(self):
        rows = make_sheet(make_block("5", "Ali", "Kaya"), make_block("5", "Veli", "Kaya"))
        students, skipped = parse_student_blocks(rows)
        assert [s.name for s in students] == ["Ali Kaya"]
        assert len(skipped) == 1

    def test_block_without_number_skipped(self):
        students, skipped = parse_student_blocks(make_sheet(make_block("", "Ali", "Kaya")))
        assert students == []
        assert len(skipped) == 1

    def test_block_without_name_skipped(self):
        students, _ = parse_student_blocks(make_sheet(make_block("7", "", "")))
        assert students == []

    def test_every_student_gets_an_id(self):
        rows = make_sheet(make_block("1", "Ali", "Kaya"), make_block("2", "Can", "Demir"))
        students, _ = parse_student_blocks(rows)
        assert len({s.id for s in students}) == 2

    def test_no_anchor_no_students(self):
        students, skipped = parse_student_blocks([["Adı", "Ali"], ["Soyadı", "Kaya"]])
        assert students == [] and skipped == []


# ---------------------------------------------------------------------------
# run_student_import
# ---------------------------------------------------------------------------

class TestRunStudentImport:
    def test_csv_import(self, tmp_path):
        path = write_csv(tmp_path, make_sheet(make_block("123", "Ayşe", "Yılmaz")))
        result = run_student_import(path)
        assert isinstance(result, ImportResult)
        assert [(s.number, s.name, s.grade) for s in result.students] == [("123", "Ayşe Yılmaz", "9-A")]
        assert result.report.imported == 1

    def test_xlsx_import(self, tmp_path):
        path = tmp_path / "kunye.xlsx"
        pd.DataFrame(make_sheet(make_block("77", "Zeynep", "Arslan"))).to_excel(
            path, header=False, index=False, engine="openpyxl"
        )
        result = run_student_import(str(path))
        assert [s.number for s in result.students] == ["77"]

    def test_file_object_with_filename(self, tmp_path):
        path = write_csv(tmp_path, make_sheet(make_block("9", "Ali", "Kaya")))
        with open(path, "rb") as fh:
            result = run_student_import(fh, filename="kunye.csv")
        assert result.students[0].name == "Ali Kaya"

    def test_existing_numbers_respected(self, tmp_path):
        rows = make_sheet(make_block("1", "Ali", "Kaya"), make_block("2", "Can", "Demir"))
        result = run_student_import(write_csv(tmp_path, rows), existing_numbers={"1"})
        assert [s.number for s in result.students] == ["2"]
        assert len(result.report.skipped) == 1

    def test_missing_file_halts(self):
        with pytest.raises(StudentImportError) as exc_info:
            run_student_import("/nonexistent/kunye.xlsx")
        assert "bulunamadı" in str(exc_info.value)

    def test_unsupported_suffix_halts(self, tmp_path):
        path = tmp_path / "kunye.txt"
        path.write_text("Okul No: 1", encoding="utf-8")
        with pytest.raises(StudentImportError):
            run_student_import(str(path))

    def test_no_students_halts(self, tmp_path):
        path = write_csv(tmp_path, [["başka", "bir", "rapor"]])
        with pytest.raises(StudentImportError) as exc_info:
            run_student_import(path)
        assert exc_info.value.message == NO_STUDENTS_MESSAGE

    def test_all_duplicates_halts(self, tmp_path):
        path = write_csv(tmp_path, make_sheet(make_block("1", "Ali", "Kaya")))
        with pytest.raises(StudentImportError):
            run_student_import(path, existing_numbers={"1"})

    def test_halt_message_is_framed(self, tmp_path):
        path = write_csv(tmp_path, [["x"]])
        with pytest.raises(StudentImportError) as exc_info:
            run_student_import(path)
        text = str(exc_info.value)
        assert "ÖĞRENCİ AKTARIMI DURDURULDU" in text
        assert "Yapılacaklar:" in text


class TestImportReport:
    def test_report_text(self, tmp_path):
        rows = make_sheet(make_block("1", "Ali", "Kaya"), make_block("1", "Veli", "Kaya"))
        result = run_student_import(write_csv(tmp_path, rows))
        text = result.report.as_text()
        assert "ÖĞRENCİ AKTARIM RAPORU" in text
        assert "Aktarılan     : 1" in text
        assert "Okul No '1'" in text
