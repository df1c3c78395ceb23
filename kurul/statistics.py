"""
Statistics Aggregator.

Read-side figures for the dashboard, recomputed from the incident list on
every call. Nothing here is cached or written back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from kurul.catalog import is_penalty
from kurul.models import Incident, Role, Status, Student

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TOP_TITLE_COUNT: int = 5

FILTER_KINDS: tuple[str, ...] = ("all", "decided", "pending", "penalty")

_INVOLVEMENT_COLUMNS = ["incident_id", "student_id", "role", "decision"]


def _js_round(value: float) -> int:
    # Half rounds up, as on the dashboard; Python's round() would go to even.
    return int(value + 0.5)


def _involvement_frame(incidents: list[Incident]) -> pd.DataFrame:
    rows = [
        {
            "incident_id": inc.id,
            "student_id": rel.student_id,
            "role": rel.role.value,
            "decision": rel.decision,
        }
        for inc in incidents
        for rel in inc.involved_students
    ]
    return pd.DataFrame(rows, columns=_INVOLVEMENT_COLUMNS)


def _ranked(values: pd.Series) -> list[tuple[str, int]]:
    """Counts per value, most frequent first; ties keep first-appearance order."""
    if values.empty:
        return []
    counts = values.groupby(values, sort=False).size()
    counts = counts.sort_values(ascending=False, kind="stable")
    return [(str(k), int(v)) for k, v in counts.items()]


@dataclass
class IncidentStatistics:
    total: int
    decided: int
    pending: int
    penalty_incident_count: int
    total_decisions: int
    total_penalties: int
    penalty_rate: int
    top_titles: list[tuple[str, int]] = field(default_factory=list)
    grade_distribution: list[tuple[str, int]] = field(default_factory=list)

    def as_text(self) -> str:
        lines = [
            "═" * 60,
            "DİSİPLİN İSTATİSTİKLERİ",
            "═" * 60,
            f"Oluşturma       : {datetime.now().isoformat(timespec='seconds')}",
            "",
            "OLAYLAR",
            f"  Toplam        : {self.total}",
            f"  Karara bağlı  : {self.decided}",
            f"  Bekleyen      : {self.pending}",
            f"  Cezalı olay   : {self.penalty_incident_count}",
            "",
            "KARARLAR",
            f"  Toplam karar  : {self.total_decisions}",
            f"  Ceza          : {self.total_penalties}",
            f"  Ceza oranı    : %{self.penalty_rate}",
            "",
            f"EN SIK {TOP_TITLE_COUNT} OLAY TÜRÜ",
        ]
        if not self.top_titles:
            lines.append("  Yok")
        for title, count in self.top_titles:
            lines.append(f"  {title}: {count}")
        lines += ["", "SINIF DÜZEYİNE GÖRE DAĞILIM"]
        if not self.grade_distribution:
            lines.append("  Yok")
        for grade, count in self.grade_distribution:
            lines.append(f"  {grade}: {count}")
        lines.append("═" * 60)
        return "\n".join(lines)


def compute_statistics(incidents: list[Incident], students: list[Student]) -> IncidentStatistics:
    """
    Dashboard figures for the given incidents.

    Parameters
    ----------
    incidents : list[Incident]
        Every incident in the store.
    students : list[Student]
        Live students; involvements of removed students are left out of the
        grade distribution.

    Returns
    -------
    IncidentStatistics
        ``pending`` is everything that is not ``decided``. ``penalty_rate`` is
        penalties over decisions made (not over incidents), 0 with no
        decisions. The grade distribution counts involvement rows, so a
        student in three incidents counts three times.
    """
    total = len(incidents)
    decided = sum(1 for inc in incidents if inc.status == Status.DECIDED)

    rel_df = _involvement_frame(incidents)
    decisions = rel_df[rel_df["decision"].astype(bool)] if not rel_df.empty else rel_df
    penalties = decisions[decisions["decision"].map(is_penalty)] if not decisions.empty else decisions

    total_decisions = len(decisions)
    total_penalties = len(penalties)
    penalty_rate = _js_round(total_penalties / total_decisions * 100) if total_decisions > 0 else 0

    titles = pd.Series([inc.title.strip() for inc in incidents], dtype=object)

    grade_by_id = {s.id: s.grade for s in students if not s.deleted}
    grades = rel_df["student_id"].map(grade_by_id) if not rel_df.empty else pd.Series([], dtype=object)
    grades = grades[grades.notna() & grades.astype(bool)] if not grades.empty else grades

    return IncidentStatistics(
        total=total,
        decided=decided,
        pending=total - decided,
        penalty_incident_count=int(penalties["incident_id"].nunique()) if total_penalties else 0,
        total_decisions=total_decisions,
        total_penalties=total_penalties,
        penalty_rate=penalty_rate,
        top_titles=_ranked(titles)[:TOP_TITLE_COUNT],
        grade_distribution=_ranked(grades),
    )


def filter_incidents(incidents: list[Incident], kind: str) -> list[Incident]:
    if kind == "all":
        return list(incidents)
    if kind == "decided":
        return [inc for inc in incidents if inc.status == Status.DECIDED]
    if kind == "pending":
        return [inc for inc in incidents if inc.status != Status.DECIDED]
    if kind == "penalty":
        return [
            inc for inc in incidents
            if any(is_penalty(rel.decision) for rel in inc.involved_students)
        ]
    raise ValueError(f"Unknown filter '{kind}'. Expected one of: {', '.join(FILTER_KINDS)}")


# ---------------------------------------------------------------------------
# Penalty removal (ceza kaldırma) candidates
# ---------------------------------------------------------------------------


def penalized_incidents(incidents: list[Incident], student_id: str) -> list[Incident]:
    """Incidents in which the student was sanctioned as a suspect."""
    return [
        inc for inc in incidents
        if any(
            rel.student_id == student_id and rel.role == Role.SUSPECT and is_penalty(rel.decision)
            for rel in inc.involved_students
        )
    ]


def penalized_students(students: list[Student], incidents: list[Incident]) -> list[Student]:
    return [s for s in students if penalized_incidents(incidents, s.id)]
