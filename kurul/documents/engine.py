"""
Document Template Engine.

Each document type is a Jinja2 template under ``documents/templates`` plus a
registry entry saying which letterhead it carries and what it needs bound.

LETTERHEAD RULES:
- auto        district set -> KAYMAKAMLIĞI variant, otherwise VALİLİK variant
- province    always the VALİLİK variant
- directorate T.C. / VALİLİK / <school> MÜDÜRLÜĞÜ
- none        forms and checklists carry no letterhead

Public API:
  render(template_type, context) -> Document
  list_templates() -> list[TemplateSpec]
  remaining_score(score) -> str
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from kurul.catalog import regulation_for
from kurul.documents.context import (
    PLACEHOLDERS,
    Blank,
    Bound,
    DecisionView,
    IncidentView,
    MeetingView,
    RenderContext,
    StudentView,
    display_today,
)
from kurul.errors import MissingSelectionError, UnknownTemplateError
from kurul.models import Institution, Role, board_chair, turkish_upper

logger = logging.getLogger(__name__)

RENDER_SELECTION_MESSAGE = "Lütfen önce olay ve öğrenci seçiniz veya 'Boş Şablon' modunu açınız."
CHAIR_PLACEHOLDER = "." * 39

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateSpec:
    type: str
    title: str
    letterhead: str = "auto"
    needs_student: bool = True
    needs_incident: bool = True
    # Shows the broken / remaining behaviour score.
    scored: bool = False

    @property
    def filename(self) -> str:
        return f"{self.type}.html"


_LETTERHEADS = ("auto", "province", "directorate", "none")

_TEMPLATE_LIST: list[TemplateSpec] = [
    TemplateSpec("student_summons", "Öğrenci Çağrı Pusulası"),
    TemplateSpec("parent_summons", "Veli Çağrı Pusulası"),
    TemplateSpec("ek10_decision", "EK-10 Kurul Kararı", letterhead="province", scored=True),
    TemplateSpec("ek1_student_info", "EK-1 Öğrenci Bilgileri", letterhead="none"),
    TemplateSpec("dizi_pusulasi", "Dizi Pusulası", letterhead="none"),
    TemplateSpec(
        "ek1_meeting", "EK-1 Kurul Toplantı Çağrısı",
        letterhead="province", needs_student=False, needs_incident=False,
    ),
    TemplateSpec("sanction_student", "Yaptırım Tebliği (Öğrenci)", scored=True),
    TemplateSpec("sanction_parent", "Yaptırım Tebliği (Veli)", scored=True),
    TemplateSpec("opinion_counselor", "Rehberlik Görüş Talebi"),
    TemplateSpec("witness_student", "Tanık Öğrenci İfade İstemi"),
    TemplateSpec("witness_teacher", "Tanık Öğretmen İfade İstemi"),
    TemplateSpec("statement_request", "İfade Talebi"),
    TemplateSpec("defense_request", "Savunma Talebi"),
    TemplateSpec("verbal_warning", "Sözlü Uyarı Tutanağı"),
    TemplateSpec("contract", "Öğrenci Sözleşmesi"),
    TemplateSpec("parent_meeting", "Veli Görüşme Tutanağı"),
    TemplateSpec("penalty_removal_meeting", "Ceza Kaldırma Toplantı Çağrısı", letterhead="province"),
    TemplateSpec(
        "observation_request", "Öğretmen Gözlem Raporu Talebi",
        letterhead="directorate", needs_incident=False,
    ),
    TemplateSpec("analysis_report", "AI Analiz ve Mevzuat Raporu", letterhead="none"),
]


def _build_registry() -> dict[str, TemplateSpec]:
    """
    Index the template list by type.

    Raises ValueError on a duplicate type or an unknown letterhead rule.
    """
    registry: dict[str, TemplateSpec] = {}
    for template in _TEMPLATE_LIST:
        if template.type in registry:
            raise ValueError(f"Template conflict: '{template.type}' is registered twice.")
        if template.letterhead not in _LETTERHEADS:
            raise ValueError(f"Template '{template.type}' has unknown letterhead '{template.letterhead}'.")
        registry[template.type] = template
    return registry


TEMPLATES: dict[str, TemplateSpec] = _build_registry()

_env = Environment(
    loader=PackageLoader("kurul", "documents/templates"),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@dataclass
class Document:
    type: str
    title: str
    header: str
    body: str

    @property
    def header_lines(self) -> list[str]:
        return self.header.split("\n") if self.header else []

    def html(self) -> str:
        """Letterhead and body as one HTML fragment, for preview and export."""
        if not self.header:
            return self.body
        lines = "<br>".join(html.escape(line, quote=False) for line in self.header_lines)
        return f'<div class="letterhead">{lines}</div>\n{self.body}'


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def remaining_score(score: str) -> str:
    """
    ``100 - score`` as printed on the sanction notices.

    The score is free text; only its leading integer counts ("15 puan" gives
    85). Without one the result is the literal ``NaN``.
    """
    m = _LEADING_INT.match(score or "")
    if not m:
        return "NaN"
    return str(100 - int(m.group(1)))


def letterhead(institution: Institution, rule: str) -> list[str]:
    province = f"{turkish_upper(institution.province)} VALİLİĞİ"
    if rule == "none":
        return []
    if rule == "directorate":
        return ["T.C.", province, f"{institution.name} MÜDÜRLÜĞÜ"]
    if rule == "auto" and institution.district:
        return [
            "T.C.",
            f"{turkish_upper(institution.district)} KAYMAKAMLIĞI",
            "İLÇE MİLLİ EĞİTİM MÜDÜRLÜĞÜ",
            institution.name,
        ]
    return ["T.C.", province, f"{institution.district} İLÇE MİLLİ EĞİTİM MÜDÜRLÜĞÜ", institution.name]


def list_templates() -> list[TemplateSpec]:
    return list(TEMPLATES.values())


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def render(template_type: str, context: RenderContext, today: Optional[date] = None) -> Document:
    """
    Render one document.

    Parameters
    ----------
    template_type : str
        A key of ``TEMPLATES``.
    context : Bound or Blank
        Blank renders every data field as its dotted placeholder.
    today : date, optional
        Issue date printed on letters; defaults to today.

    Returns
    -------
    Document
        ``header`` holds the letterhead lines (empty for forms), ``body`` the
        HTML of the document itself.

    Raises
    ------
    UnknownTemplateError
        ``template_type`` is not registered.
    MissingSelectionError
        Bound context without the student or incident the template needs.
    """
    template = TEMPLATES.get(template_type)
    if template is None:
        raise UnknownTemplateError(template_type=template_type)

    if isinstance(context, Blank):
        s, i, d = StudentView(), IncidentView(), DecisionView()
        remaining = PLACEHOLDERS["score"]
        role = None
        analysis = PLACEHOLDERS["analysis"]
    elif isinstance(context, Bound):
        if (template.needs_student and context.student is None) or (
            template.needs_incident and context.incident is None
        ):
            raise MissingSelectionError(RENDER_SELECTION_MESSAGE)
        s = StudentView.of(context.student) if context.student else StudentView()
        i = IncidentView.of(context.incident) if context.incident else IncidentView()
        d = DecisionView.of(context.decision)
        remaining = remaining_score(context.decision.score)
        role = context.role
        analysis = (context.involvement.ai_analysis if context.involvement else "") or PLACEHOLDERS["analysis"]
    else:
        raise TypeError(f"Unsupported render context: {type(context).__name__}")

    chair = board_chair(context.board)
    header_lines = letterhead(context.institution, template.letterhead)

    body = _env.get_template(template.filename).render(
        s=s,
        i=i,
        d=d,
        institution=context.institution,
        board=context.board,
        meeting=MeetingView.of(context.meeting),
        chair_name=chair.main_name if chair and chair.main_name else CHAIR_PLACEHOLDER,
        is_suspect=role == Role.SUSPECT,
        remaining=remaining,
        analysis=analysis,
        removal_article=_removal_article(context.institution),
        today=display_today(today),
    )
    logger.debug("Rendered %s (%s)", template_type, type(context).__name__)
    return Document(type=template.type, title=template.title, header="\n".join(header_lines), body=body)


def _removal_article(institution: Institution) -> str:
    return regulation_for(institution.school_type).removal_article
