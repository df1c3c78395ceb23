import asyncio
import logging
from datetime import date

import pandas as pd
import streamlit as st

from kurul import config
from kurul.ai_service import DOCUMENT_KINDS, REGULATION_URLS, AdvisorClient
from kurul.catalog import (
    DECISION_OPTIONS,
    apply_proposal,
    is_proposal,
    load_decision,
    regulation_for,
    search_items,
    suggest_score,
)
from kurul.documents.context import build_context, format_date
from kurul.documents.engine import list_templates, render
from kurul.documents.pdf_export import export_pdf
from kurul.errors import KurulError, StudentImportError
from kurul.ingestion.student_import import run_student_import
from kurul.markup import case_card_html, subtitle_html
from kurul.lifecycle import IncidentLifecycle
from kurul.models import BoardMember, Decision, Meeting, Role, SchoolType, Student
from kurul.statistics import (
    FILTER_KINDS,
    compute_statistics,
    filter_incidents,
    penalized_incidents,
    penalized_students,
)
from kurul.store import EntityStore

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

# Page config
st.set_page_config(
    page_title="Disiplin Kurulu Asistanı",
    page_icon="⚖️",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    :root {
        --primary-color: #1e3a8a;
        --secondary-color: #3b82f6;
        --accent-color: #10b981;
        --text-dark: #1f2937;
        --text-light: #6b7280;
        --background-light: #f9fafb;
        --border-color: #e5e7eb;
    }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}

    h1 {
        color: var(--primary-color);
        font-weight: 700;
        font-size: 2.2rem;
        margin-bottom: 0.5rem;
        letter-spacing: -0.02em;
    }

    .subtitle {
        color: var(--text-light);
        font-size: 1.05rem;
        font-weight: 500;
        margin-bottom: 1.5rem;
        padding-bottom: 1rem;
        border-bottom: 2px solid var(--border-color);
    }

    [data-testid="stMetricValue"] {
        font-size: 2rem;
        font-weight: 700;
        color: var(--primary-color);
    }

    [data-testid="stMetricLabel"] {
        font-size: 0.875rem;
        font-weight: 600;
        color: var(--text-light);
        text-transform: uppercase;
        letter-spacing: 0.05em;
    }

    .stButton > button {
        background-color: var(--primary-color);
        color: white;
        border: none;
        border-radius: 0.5rem;
        font-weight: 600;
    }

    .stDownloadButton > button {
        background-color: var(--accent-color);
        color: white;
        border: none;
        border-radius: 0.5rem;
        font-weight: 600;
    }

    [data-testid="stSidebar"] {
        background-color: var(--background-light);
    }

    .doc-preview {
        background-color: white;
        color: black;
        font-family: 'Times New Roman', serif;
        border: 1px solid var(--border-color);
        border-radius: 0.5rem;
        padding: 2rem 2.5rem;
        line-height: 1.5;
    }
    .doc-preview .letterhead, .doc-preview .center, .doc-preview h2, .doc-preview h3 {text-align: center; font-weight: 700;}
    .doc-preview .right {text-align: right;}
    .doc-preview .indent {text-indent: 2rem; text-align: justify;}
    .doc-preview table {width: 100%; border-collapse: collapse; margin: 0.75rem 0;}
    .doc-preview table.grid td {border: 1px solid black; padding: 0.25rem 0.5rem;}
    .doc-preview .footnote {font-size: 0.75rem; color: var(--text-light);}

    .case-card {
        background-color: white;
        border: 1px solid var(--border-color);
        border-left: 4px solid var(--secondary-color);
        border-radius: 0.5rem;
        padding: 1rem 1.25rem;
        margin-bottom: 0.75rem;
    }
</style>
""", unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

@st.cache_resource
def get_store() -> EntityStore:
    return EntityStore()


store = get_store()
lifecycle = IncidentLifecycle(store)


def advisor() -> AdvisorClient:
    # Built per call: the key can change on the settings page.
    return AdvisorClient(store.api_key)


def parse_date(iso: str) -> date:
    try:
        return date.fromisoformat(iso[:10])
    except ValueError:
        return date.today()


def run_ai(coro, spinner: str) -> str:
    with st.spinner(spinner):
        return asyncio.run(coro)


def show_document(doc, key: str) -> None:
    st.markdown(f'<div class="doc-preview">{doc.html()}</div>', unsafe_allow_html=True)
    st.markdown("<br>", unsafe_allow_html=True)
    st.download_button(
        label="📥 PDF İndir",
        data=export_pdf(doc),
        file_name=f"{doc.type}.pdf",
        mime="application/pdf",
        use_container_width=True,
        key=f"pdf_{key}",
    )


def meeting_inputs(prefix: str) -> Meeting:
    default = Meeting()
    col1, col2, col3 = st.columns(3)
    with col1:
        number = st.text_input("Toplantı Sayısı", value=default.number, key=f"{prefix}_mno")
        meeting_date = st.date_input("Toplantı Tarihi", value=date.today(), key=f"{prefix}_mdate")
    with col2:
        subject = st.text_input("Konu", value=default.subject, key=f"{prefix}_msubj")
        meeting_time = st.text_input("Saat", value=default.time, key=f"{prefix}_mtime")
    with col3:
        location = st.text_input("Yer", value=default.location, key=f"{prefix}_mloc")
    return Meeting(
        number=number,
        subject=subject,
        date=meeting_date.isoformat(),
        time=meeting_time,
        location=location,
    )


def pick_incident(prefix: str):
    incidents = store.list_incidents()
    if not incidents:
        st.info("Henüz kayıtlı olay yok. 'Olaylar' sayfasından yeni olay ekleyiniz.")
        return None
    labels = {inc.id: f"{inc.code} | {inc.title} ({format_date(inc.date)}) [{inc.status.label}]" for inc in incidents}
    incident_id = st.selectbox(
        "Olay", options=list(labels), format_func=labels.get, key=f"{prefix}_incident"
    )
    return store.get_incident(incident_id)


def pick_participant(incident, prefix: str, suspects_only: bool = False):
    participants = [
        (s, rel) for s, rel in lifecycle.participants(incident.id)
        if not suspects_only or rel.role == Role.SUSPECT
    ]
    if not participants:
        st.info("Bu olaya henüz öğrenci eklenmemiş.")
        return None, None
    labels = {s.id: f"{s.name} ({s.grade or '-'} / {s.number or '-'}) - {rel.role.label}" for s, rel in participants}
    student_id = st.selectbox(
        "Öğrenci", options=list(labels), format_func=labels.get, key=f"{prefix}_student"
    )
    return next((s, rel) for s, rel in participants if s.id == student_id)


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------

def page_dashboard():
    st.markdown("## Kontrol Paneli")
    incidents = store.list_incidents()
    stats = compute_statistics(incidents, store.list_students())

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Toplam Olay", stats.total)
    with col2:
        st.metric("Karara Bağlanan", stats.decided)
    with col3:
        st.metric("Bekleyen", stats.pending)
    with col4:
        st.metric("Ceza Oranı", f"%{stats.penalty_rate}")

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("### En Sık Olay Türleri")
        if stats.top_titles:
            st.dataframe(
                pd.DataFrame(stats.top_titles, columns=["Olay", "Sayı"]),
                use_container_width=True, hide_index=True,
            )
        else:
            st.info("Veri yok.")
    with col2:
        st.markdown("### Sınıflara Göre Dağılım")
        if stats.grade_distribution:
            st.bar_chart(pd.DataFrame(stats.grade_distribution, columns=["Sınıf", "Sayı"]).set_index("Sınıf"))
        else:
            st.info("Veri yok.")

    st.markdown("### Olay Listesi")
    filter_labels = {"all": "Tümü", "decided": "Karara Bağlananlar", "pending": "Bekleyenler", "penalty": "Cezalı Olaylar"}
    kind = st.radio("Filtre", FILTER_KINDS, format_func=filter_labels.get, horizontal=True)
    rows = [
        {
            "Kod": inc.code,
            "Başlık": inc.title,
            "Tarih": format_date(inc.date),
            "Durum": inc.status.label,
            "Öğrenci": len(inc.involved_students),
        }
        for inc in filter_incidents(incidents, kind)
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    st.download_button(
        label="📥 İstatistik Raporu (TXT)",
        data=stats.as_text().encode("utf-8"),
        file_name="disiplin_istatistikleri.txt",
        mime="text/plain",
    )


def page_students():
    st.markdown("## Öğrenciler")
    tab_list, tab_import, tab_edit = st.tabs(["📋 Liste", "📥 Künye Defteri Aktarımı", "✏️ Öğrenci Ekle / Düzenle"])

    with tab_list:
        groups = store.class_groups()
        col1, col2 = st.columns([1, 2])
        with col1:
            grade = st.selectbox(
                "Sınıf", options=[""] + [g for g, _ in groups],
                format_func=lambda g: "Tüm sınıflar" if not g else f"{g} ({dict(groups)[g]})",
            )
        with col2:
            term = st.text_input("Ara (ad, okul no, TC)")
        students = store.search_students(term, grade or None)
        st.dataframe(
            pd.DataFrame(
                [{"Okul No": s.number, "Ad Soyad": s.name, "Sınıf": s.grade, "Veli": s.parent_name} for s in students]
            ),
            use_container_width=True, hide_index=True,
        )
        if grade and st.button(f"🗑️ {grade} sınıfını sil"):
            removed = store.remove_grade(grade)
            st.success(f"{removed} öğrenci silindi.")
            st.rerun()

    with tab_import:
        st.markdown("e-Okul'dan alınan **Öğrenci Künye Defteri** dosyasını yükleyiniz.")
        uploaded_file = st.file_uploader(
            "Dosya seçiniz", type=["xlsx", "xls", "csv"], label_visibility="collapsed"
        )
        if uploaded_file is not None:
            try:
                result = run_student_import(
                    uploaded_file, existing_numbers=store.student_numbers(), filename=uploaded_file.name
                )
            except StudentImportError as e:
                st.error(e.message)
                with st.expander("Ayrıntılar"):
                    st.code(str(e))
            else:
                st.success(f"✅ **{len(result.students)} öğrenci** bulundu.")
                with st.expander("📋 Aktarım Raporu", expanded=False):
                    st.code(result.report.as_text())
                st.dataframe(
                    pd.DataFrame([{"Okul No": s.number, "Ad Soyad": s.name, "Sınıf": s.grade} for s in result.students]),
                    use_container_width=True, hide_index=True,
                )
                if st.button("💾 Öğrencileri Kaydet", use_container_width=True):
                    try:
                        added = store.add_students(result.students)
                    except KurulError as e:
                        st.error(str(e))
                    else:
                        st.success(f"{added} öğrenci eklendi.")

    with tab_edit:
        students = store.list_students()
        labels = {"": "➕ Yeni öğrenci"}
        labels.update({s.id: f"{s.number} - {s.name}" for s in students})
        student_id = st.selectbox("Kayıt", options=list(labels), format_func=labels.get)
        student = store.get_student(student_id) if student_id else Student()
        with st.form("student_form"):
            col1, col2 = st.columns(2)
            with col1:
                student.number = st.text_input("Okul No", value=student.number)
                student.name = st.text_input("Ad Soyad", value=student.name)
                student.grade = st.text_input("Sınıf", value=student.grade)
                student.tc_no = st.text_input("TC Kimlik No", value=student.tc_no)
            with col2:
                student.parent_name = st.text_input("Veli Adı", value=student.parent_name)
                student.parent_phone = st.text_input("Veli Telefonu", value=student.parent_phone)
                student.birth_place_date = st.text_input("Doğum Yeri / Tarihi", value=student.birth_place_date)
                student.address = st.text_input("Adres", value=student.address)
            if st.form_submit_button("💾 Kaydet"):
                try:
                    store.upsert_student(student)
                except KurulError as e:
                    st.error(str(e))
                else:
                    st.success("Öğrenci kaydedildi.")
        if student_id and st.button("🗑️ Öğrenciyi Sil"):
            store.remove_student(student_id)
            st.rerun()


def page_incidents():
    st.markdown("## Olaylar")
    with st.expander("➕ Yeni Olay", expanded=not store.list_incidents()):
        with st.form("incident_form"):
            st.caption(f"Olay kodu: {store.next_incident_code()}")
            title = st.text_input("Olay Başlığı")
            col1, col2, col3 = st.columns(3)
            with col1:
                incident_date = st.date_input("Tarih", value=date.today())
            with col2:
                incident_time = st.text_input("Saat")
            with col3:
                location = st.text_input("Yer")
            description = st.text_area("Olay Tanımı")
            col1, col2 = st.columns(2)
            with col1:
                petitioner = st.text_input("Şikayetçi")
            with col2:
                petitioner_info = st.text_input("Şikayetçi Bilgisi")
            if st.form_submit_button("💾 Olayı Kaydet"):
                inc = lifecycle.create_incident(
                    title, incident_date.isoformat(), incident_time, location, description,
                    petitioner, petitioner_info,
                )
                st.success(f"{inc.code} kaydedildi.")

    incident = pick_incident("inc")
    if incident is None:
        return

    st.markdown(case_card_html(incident), unsafe_allow_html=True)
    if incident.description:
        st.markdown(incident.description)

    st.markdown("### İlgili Öğrenciler")
    for student, rel in lifecycle.participants(incident.id):
        col1, col2, col3 = st.columns([3, 2, 1])
        with col1:
            st.markdown(f"**{student.name}** ({student.grade or '-'} / {student.number or '-'})")
            if rel.decision:
                st.caption(f"Karar: {rel.decision}{' (öneri)' if is_proposal(rel) else ''}")
        with col2:
            st.markdown(rel.role.label)
        with col3:
            if st.button("Çıkar", key=f"rm_{incident.id}_{rel.student_id}"):
                lifecycle.remove_involvement(incident.id, rel.student_id)
                st.rerun()

    with st.form("involvement_form"):
        students = store.list_students()
        labels = {s.id: f"{s.number} - {s.name} ({s.grade})" for s in students}
        col1, col2 = st.columns([3, 1])
        with col1:
            student_id = st.selectbox("Öğrenci", options=[""] + list(labels), format_func=lambda i: labels.get(i, "Seçiniz"))
        with col2:
            role = st.selectbox("Rol", options=list(Role), format_func=lambda r: r.label)
        notes = st.text_input("Not")
        if st.form_submit_button("➕ Olaya Ekle"):
            try:
                lifecycle.add_involvement(incident.id, student_id, role, notes)
            except KurulError as e:
                st.error(str(e))
            else:
                st.rerun()

    st.markdown("### AI Olay Analizi")
    student, rel = pick_participant(incident, "analysis")
    if rel is not None:
        if rel.ai_analysis:
            st.markdown(rel.ai_analysis)
        if st.button("🤖 Analiz Et", use_container_width=True):
            text = run_ai(advisor().analyze(incident, student), "Olay analiz ediliyor...")
            lifecycle.cache_analysis(incident.id, student.id, text)
            st.rerun()

    st.markdown("---")
    if st.button("🗑️ Olayı Sil"):
        store.remove_incident(incident.id)
        st.rerun()


def page_catalog():
    st.markdown("## Ceza Kataloğu")
    institution = store.institution
    regulation = regulation_for(institution.school_type)
    st.caption(f"{regulation.name}, Madde {regulation.article_ref}")

    incident = pick_incident("cat")
    student = None
    if incident is not None:
        student, _ = pick_participant(incident, "cat", suspects_only=True)

    categories = {c.key: c for c in regulation.categories}
    key = st.radio("Kategori", options=list(categories), format_func=lambda k: categories[k].title, horizontal=True)
    category = categories[key]
    st.info(category.description)
    term = st.text_input("Madde ara")

    for item in search_items(category, term):
        col1, col2 = st.columns([5, 1])
        with col1:
            st.markdown(f"**{item.code})** {item.text}")
        with col2:
            if st.button("Uygula", key=f"apply_{key}_{item.code}"):
                try:
                    apply_proposal(
                        lifecycle, institution.school_type,
                        incident.id if incident else "", student.id if student else "",
                        key, item.code,
                    )
                except KurulError as e:
                    st.error(str(e))
                else:
                    st.success(f"{category.decision_label} önerisi kaydedildi. 'Karar ve Evrak' sayfasından kesinleştiriniz.")


def page_decisions():
    st.markdown("## Karar ve Evrak")
    blank = st.toggle("Boş Şablon (Matbu) Modu")
    incident, student, rel = None, None, None
    form_decision = None
    if not blank:
        incident = pick_incident("dec")
        if incident is not None:
            student, rel = pick_participant(incident, "dec")

    if rel is not None:
        st.markdown("### Karar Formu")
        current = load_decision(rel)
        options = list(DECISION_OPTIONS)
        if current.penalty not in options:
            options.insert(0, current.penalty)
        penalty = st.selectbox("Verilen Ceza", options=options, index=options.index(current.penalty))
        col1, col2, col3 = st.columns(3)
        with col1:
            decision_no = st.text_input("Karar No", value=current.decision_no)
        with col2:
            decision_date = st.date_input("Karar Tarihi", value=parse_date(current.decision_date))
        with col3:
            score = st.text_input("Kırılan Puan", value=current.score if penalty == current.penalty else suggest_score(penalty, current.score))
        reason_key = f"reason_{incident.id}_{student.id}"
        if reason_key not in st.session_state:
            st.session_state[reason_key] = current.reason
        if st.button("🤖 Gerekçe Oluştur"):
            st.session_state[reason_key] = run_ai(
                advisor().generate_reason(incident, student, penalty, store.institution.type),
                "Gerekçe hazırlanıyor...",
            )
        reason = st.text_area("Gerekçe", key=reason_key)
        form_decision = Decision(
            penalty=penalty, decision_no=decision_no,
            decision_date=decision_date.isoformat(), reason=reason, score=score,
        )
        if st.button("💾 Kararı Kaydet", use_container_width=True):
            try:
                lifecycle.save_decision(incident.id, student.id, form_decision)
            except KurulError as e:
                st.error(str(e))
            else:
                st.success("Karar kaydedildi.")

    st.markdown("### Evrak")
    templates = {t.type: t for t in list_templates()}
    template_type = st.selectbox("Belge", options=list(templates), format_func=lambda t: templates[t].title)
    meeting = meeting_inputs("dec")
    context = build_context(
        store,
        incident.id if incident else "",
        student.id if student else "",
        blank=blank,
        decision=form_decision,
        meeting=meeting,
    )
    try:
        doc = render(template_type, context)
    except KurulError as e:
        st.error(str(e))
        return
    show_document(doc, "dec")


def page_penalty_removal():
    st.markdown("## Ceza Kaldırma")
    incidents = store.list_incidents()
    candidates = penalized_students(store.list_students(), incidents)
    if not candidates:
        st.info("Ceza almış öğrenci bulunmuyor.")
        return

    labels = {s.id: f"{s.number} - {s.name} ({s.grade})" for s in candidates}
    student_id = st.selectbox("Öğrenci", options=list(labels), format_func=labels.get)
    cases = {inc.id: inc for inc in penalized_incidents(incidents, student_id)}
    incident_id = st.selectbox(
        "Ceza Aldığı Olay", options=list(cases),
        format_func=lambda i: f"{cases[i].code} | {cases[i].title} - {cases[i].involvement(student_id).decision}",
    )
    meeting = meeting_inputs("rem")
    context = build_context(store, incident_id, student_id, meeting=meeting)

    tab_meeting, tab_observation = st.tabs(["📄 Kurul Toplantı Çağrısı", "📄 Gözlem Raporu Talebi"])
    with tab_meeting:
        show_document(render("penalty_removal_meeting", context), "rem_meeting")
    with tab_observation:
        show_document(render("observation_request", context), "rem_observation")


def page_assistant():
    st.markdown("## Mevzuat Asistanı")
    tab_search, tab_board, tab_draft = st.tabs(["🔎 Mevzuat Arama", "👥 Kurul Yapısı", "📝 Belge Taslağı"])

    with tab_search:
        query = st.text_input("Sorunuz", placeholder="Örn: Kopya çekmenin cezası nedir?")
        if st.button("Ara", disabled=not query):
            st.markdown(run_ai(advisor().search_regulations(query), "Mevzuat taranıyor..."))

    with tab_board:
        school_type = store.institution.school_type
        st.caption(REGULATION_URLS[school_type])
        if st.button("Kurul bilgisini getir"):
            st.markdown(run_ai(
                advisor().fetch_board_info(REGULATION_URLS[school_type], school_type.value),
                "Mevzuat okunuyor...",
            ))

    with tab_draft:
        incident = pick_incident("draft")
        if incident is None:
            return
        student, _ = pick_participant(incident, "draft")
        if student is None:
            return
        kind = st.selectbox("Belge türü", options=list(DOCUMENT_KINDS), format_func=DOCUMENT_KINDS.get)
        if st.button("Taslak oluştur"):
            st.text_area(
                "Taslak",
                value=run_ai(advisor().draft_document(kind, incident, student), "Taslak hazırlanıyor..."),
                height=400,
            )


def page_settings():
    st.markdown("## Ayarlar")
    tab_inst, tab_board, tab_api = st.tabs(["🏫 Kurum", "👥 Kurul Üyeleri", "🔑 API Anahtarı"])

    with tab_inst:
        inst = store.institution
        with st.form("institution_form"):
            col1, col2 = st.columns(2)
            with col1:
                inst.name = st.text_input("Okul Adı", value=inst.name)
                inst.type = st.selectbox(
                    "Okul Türü", options=[t.value for t in SchoolType],
                    index=[t.value for t in SchoolType].index(inst.school_type.value),
                )
                inst.province = st.text_input("İl", value=inst.province)
                inst.district = st.text_input("İlçe", value=inst.district)
                inst.manager_name = st.text_input("Okul Müdürü", value=inst.manager_name)
            with col2:
                inst.code = st.text_input("Kurum Kodu", value=inst.code)
                inst.year = st.text_input("Eğitim Öğretim Yılı", value=inst.year)
                inst.ebys_code = st.text_input("EBYS Sayı", value=inst.ebys_code)
                inst.phone = st.text_input("Telefon", value=inst.phone)
                inst.address = st.text_input("Adres", value=inst.address)
            if st.form_submit_button("💾 Kaydet"):
                store.set_institution(inst)
                st.success("Kurum bilgileri kaydedildi.")

    with tab_board:
        board = store.board
        edited = st.data_editor(
            pd.DataFrame([m.to_dict() for m in board]).set_index("id"),
            column_config={
                "role": "Görev",
                "mainName": "Asil Üye",
                "mainTitle": "Asil Unvan",
                "reserveName": "Yedek Üye",
                "reserveTitle": "Yedek Unvan",
            },
            use_container_width=True,
        )
        col1, col2 = st.columns(2)
        with col1:
            if st.button("💾 Kurulu Kaydet", use_container_width=True):
                store.set_board([
                    BoardMember.from_dict({"id": member_id, **row})
                    for member_id, row in edited.fillna("").to_dict("index").items()
                ])
                st.success("Kurul kaydedildi.")
            if st.button("➕ Üye Ekle", use_container_width=True):
                store.add_board_member()
                st.rerun()
        with col2:
            labels = {m.id: f"{m.role} - {m.main_name or '...'}" for m in board}
            member_id = st.selectbox("Üye", options=list(labels), format_func=labels.get)
            if st.button("🗑️ Üyeyi Çıkar", use_container_width=True):
                try:
                    store.remove_board_member(member_id)
                except KurulError as e:
                    st.error(str(e))
                else:
                    st.rerun()

    with tab_api:
        key = st.text_input("Gemini API Anahtarı", value=store.get_config().api_key, type="password")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("💾 Kaydet", use_container_width=True):
                store.set_api_key(key)
                st.success("API anahtarı kaydedildi.")
        with col2:
            if st.button("🔌 Bağlantıyı Test Et", use_container_width=True):
                if run_ai(advisor().validate_api_key(key), "Anahtar doğrulanıyor..."):
                    st.success("✅ API anahtarı geçerli.")
                else:
                    st.error("❌ API anahtarı doğrulanamadı veya internet bağlantısı yok.")


PAGES = {
    "📊 Kontrol Paneli": page_dashboard,
    "🎓 Öğrenciler": page_students,
    "📁 Olaylar": page_incidents,
    "📚 Ceza Kataloğu": page_catalog,
    "⚖️ Karar ve Evrak": page_decisions,
    "♻️ Ceza Kaldırma": page_penalty_removal,
    "🤖 Mevzuat Asistanı": page_assistant,
    "⚙️ Ayarlar": page_settings,
}

# Header
st.markdown("# ⚖️ Disiplin Kurulu Asistanı")
institution = store.institution
st.markdown(subtitle_html(institution), unsafe_allow_html=True)

# Sidebar
with st.sidebar:
    st.markdown("## Menü")
    page = st.radio("Sayfa", list(PAGES), label_visibility="collapsed")
    st.markdown("---")
    st.caption(f"Veri klasörü: {store.data_dir}")

PAGES[page]()
