"""
Error taxonomy.

Validation and duplicate errors abort the operation before any state
changes; the UI shows ``message`` as a blocking alert. External-service and
persistence failures never reach this module: they degrade to text or a log
line where they happen.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class KurulError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class MissingSelectionError(KurulError):
    message: str = "Lütfen önce olay ve öğrenci seçiniz."


@dataclass
class DuplicateInvolvementError(KurulError):
    message: str = "Bu öğrenci zaten olaya eklenmiş."


@dataclass
class DuplicateStudentNumberError(KurulError):
    message: str = "Bu okul numarası başka bir öğrenciye ait."
    number: str = ""

    def __str__(self) -> str:
        if self.number:
            return f"{self.message} (Okul No: {self.number})"
        return self.message


@dataclass
class BoardSizeError(KurulError):
    message: str = "Kurul en az 3 kişiden oluşmalıdır."


@dataclass
class UnknownPenaltyError(KurulError):
    message: str = "Seçilen ceza maddesi katalogda bulunamadı."


@dataclass
class UnknownTemplateError(KurulError):
    message: str = "Tanımsız belge türü."
    template_type: str = ""

    def __str__(self) -> str:
        return f"{self.message} ({self.template_type})" if self.template_type else self.message


@dataclass
class StudentImportError(KurulError):
    """Halt raised by the Künye Defteri import, with steps for the operator."""
    affected_file: str = ""
    operator_fix_steps: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        lines = [
            "═" * 60,
            "ÖĞRENCİ AKTARIMI DURDURULDU",
            "═" * 60,
            f"Neden           : {self.message}",
            f"Dosya           : {self.affected_file}",
        ]
        if self.operator_fix_steps:
            lines.append("Yapılacaklar:")
            for i, step in enumerate(self.operator_fix_steps, 1):
                lines.append(f"  {i}. {step}")
        lines.append("═" * 60)
        return "\n".join(lines)
