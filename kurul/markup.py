"""
HTML snippets the Streamlit pages render with ``unsafe_allow_html``.

Every user-entered value is escaped here; the pages pass the result straight
to ``st.markdown``.
"""

from __future__ import annotations

from html import escape

from kurul.catalog import regulation_for
from kurul.documents.context import format_date
from kurul.models import Incident, Institution

NO_SCHOOL_NAME = "Okul adı girilmemiş"


def case_card_html(incident: Incident) -> str:
    return (
        f'<div class="case-card"><b>{escape(incident.code)}</b> | {escape(incident.title)}<br>'
        f"{escape(format_date(incident.date))} {escape(incident.time)} / {escape(incident.location)}<br>"
        f"Durum: <b>{incident.status.label}</b></div>"
    )


def subtitle_html(institution: Institution) -> str:
    return (
        f'<div class="subtitle">{escape(institution.name or NO_SCHOOL_NAME)} | {escape(institution.year)} | '
        f"{regulation_for(institution.school_type).name}</div>"
    )
