"""
Penalty Catalog Resolver.

Two fixed regulation datasets, one per school type:

    Ortaokul  İlköğretim Kurumları Yönetmeliği, Madde 55/1
    Lise      Ortaöğretim Kurumları Yönetmeliği, Madde 164/2

Applying a catalog item writes a *proposal* onto an involvement: decision,
reason and date are set, the decision number is left empty. Finalizing the
decision (with a number) happens through the decision form.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Optional

from kurul.errors import MissingSelectionError, UnknownPenaltyError
from kurul.models import Decision, Incident, InvolvedStudent, SchoolType, today_iso, turkish_upper

if TYPE_CHECKING:
    from kurul.lifecycle import IncidentLifecycle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PenaltyItem:
    code: str
    text: str


@dataclass(frozen=True)
class PenaltyCategory:
    key: str
    title: str
    color: str
    description: str
    items: tuple[PenaltyItem, ...]

    @property
    def decision_label(self) -> str:
        return turkish_upper(self.title)

    def item(self, code: str) -> Optional[PenaltyItem]:
        return next((i for i in self.items if i.code == code), None)


@dataclass(frozen=True)
class Regulation:
    school_type: SchoolType
    name: str
    article: str
    subsection: str
    categories: tuple[PenaltyCategory, ...]
    # Article that governs lifting an earlier sanction.
    removal_article: str

    @property
    def article_ref(self) -> str:
        return f"{self.article}/{self.subsection}"

    def category(self, key: str) -> Optional[PenaltyCategory]:
        return next((c for c in self.categories if c.key == key), None)


def _items(*pairs: tuple[str, str]) -> tuple[PenaltyItem, ...]:
    return tuple(PenaltyItem(code, text) for code, text in pairs)


# ---------------------------------------------------------------------------
# Ortaokul (Madde 55)
# ---------------------------------------------------------------------------

MIDDLE_SCHOOL = Regulation(
    school_type=SchoolType.ORTAOKUL,
    name="İlköğretim Kurumları Yönetmeliği",
    article="55",
    subsection="1",
    removal_article="Milli Eğitim Bakanlığı Okul Öncesi Eğitim ve İlköğretim Kurumları Yönetmeliğinin 58. Maddesi",
    categories=(
        PenaltyCategory(
            key="uyarma",
            title="Uyarma",
            color="blue",
            description="Bilinçlendirme ile düzeltilebilecek davranışlar için uygulanan yaptırım.",
            items=_items(
                ("1", "Derse ve diğer etkinliklere vaktinde gelmemek ve geçerli bir neden olmaksızın bu davranışı tekrar etmek"),
                ("2", "Okula özürsüz devamsızlığını alışkanlık hâline getirmek"),
                ("3", "Yatılı bölge ortaokullarında öğrenci dolaplarını amacı dışında kullanmak"),
                ("4", "Okula, yönetimce yasaklanmış malzeme getirmek ve bunları kullanmak"),
                ("5", "Yalan söylemek"),
                ("6", "Duvarları, sıraları ve okul çevresini kirletmek"),
                ("7", "Görgü kurallarına uymamak"),
                ("8", "Okul kütüphanesinden aldığı kitapları zamanında teslim etmemek"),
                ("10", "Kılık ve kıyafetle ilgili kurallara uymamak"),
            ),
        ),
        PenaltyCategory(
            key="kinama",
            title="Kınama",
            color="yellow",
            description="Öğrenciye davranışının kusurlu olduğunun yazılı bildirilmesi.",
            items=_items(
                ("1", "Yöneticilere, öğretmenlere, görevlilere ve arkadaşlarına kaba ve saygısız davranmak"),
                ("2", "Okul kurallarını ve ders ortamını bozmak"),
                ("3", "Okul yönetimini yanlış bilgilendirmek"),
                ("4", "Törenlere özürsüz katılmamak"),
                ("5", "Okulda ya da okul dışında sigara içmek"),
                ("6", "Resmî evrakta değişiklik yapmak"),
                ("7", "Okulda kavga etmek"),
                ("8", "Sınıfta cep telefonu kullanmak"),
                ("9", "Başkasının malını haberi olmadan almak"),
                ("10", "Okul eşyasına zarar vermek"),
                ("15", "Akran zorbalığı yapmak"),
            ),
        ),
        PenaltyCategory(
            key="degistirme",
            title="Okul Değiştirme",
            color="red",
            description="Öğrencinin başka bir okula nakledilmesi.",
            items=_items(
                ("2", "Sarkıntılık, hakaret, iftira, tehdit ve taciz etmek"),
                ("3", "Okula yaralayıcı, öldürücü aletler getirmek"),
                ("9", "Başkasının malına zarar vermeyi alışkanlık haline getirmek"),
                ("12", "Okul personeline ve arkadaşlarına şiddet uygulamak"),
                ("16", "Alkol veya bağımlılık yapan maddeleri kullanmak"),
                ("18", "Bilişim araçlarıyla kişilik haklarını ihlal etmek (Ses/Görüntü kaydı)"),
            ),
        ),
    ),
)

# ---------------------------------------------------------------------------
# Lise (Madde 164)
# ---------------------------------------------------------------------------

HIGH_SCHOOL = Regulation(
    school_type=SchoolType.LISE,
    name="Ortaöğretim Kurumları Yönetmeliği",
    article="164",
    subsection="2",
    removal_article="Milli Eğitim Bakanlığı Ortaöğretim Kurumları Yönetmeliğinin 171. Maddesi",
    categories=(
        PenaltyCategory(
            key="kinama",
            title="Kınama",
            color="yellow",
            description=(
                "Öğrenciye, cezayı gerektiren davranışta bulunduğunun ve tekrarından "
                "kaçınmasının kesin bir dille ve yazılı olarak bildirilmesidir."
            ),
            items=_items(
                ("a", "Okulu, okul eşyasını ve çevresini kirletmek"),
                ("b", "Okul yönetimi veya öğretmenler tarafından verilen eğitim ve öğretime ilişkin görevleri yapmamak"),
                ("c", "Kılık-kıyafete ilişkin mevzuat hükümlerine uymamak"),
                ("ç", "Tütün, tütün mamulleri veya tütün içermeyen ancak tütün mamulünü taklit eder tarzda kullanılan her türlü ürünü bulundurmak veya kullanmak"),
                ("d", "Başkasına ait eşyayı izinsiz almak veya kullanmak"),
                ("e", "Yalan söylemek"),
                ("f", "Okula geldiği hâlde özürsüz eğitim ve öğretim faaliyetlerine katılmamak"),
                ("g", "Okul kütüphanesi ve laboratuvar malzemelerini eksik vermek veya kötü kullanmak"),
                ("ğ", "Okul yöneticilerine, öğretmenlerine, çalışanlarına ve arkadaşlarına kaba ve saygısız davranmak"),
                ("h", "Dersin ve ders dışı eğitim faaliyetlerinin akışını ve düzenini bozacak davranışlarda bulunmak"),
                ("ı", "Kopya çekmek veya çekilmesine yardımcı olmak"),
                ("i", "Yatılı okullarda pansiyon kurallarına uymamak"),
                ("j", "Müstehcen veya yasaklanmış araç, gereç ve dokümanları okula sokmak"),
                ("k", "Kumar oynamaya yarayan araç-gereç bulundurmak"),
                ("l", "Bilişim araçlarını belirlenen usul ve esaslara aykırı şekilde kullanmak"),
                ("n", "Ders saatleri içinde bilişim araçlarını açık tutarak dersin akışını bozmak"),
                ("o", "Eğitim ortamlarında okul yönetiminin izni dışında bilişim araçlarını yanında bulundurmak ve kullanmak"),
                ("ö", "Okula, okul yönetiminin izni dışında okulla ilgisi olmayan kişileri getirmek"),
            ),
        ),
        PenaltyCategory(
            key="uzaklastirma",
            title="Kısa Süreli Uzaklaştırma",
            color="orange",
            description="Okuldan 1-5 gün arasında uzaklaştırma cezasını gerektiren fiil ve davranışlar.",
            items=_items(
                ("a", "Okul personeline veya öğrencilere sözle, davranışla veya sosyal medya üzerinden hakaret etmek, tehdit etmek"),
                ("b", "Pansiyonun düzenini bozmak, pansiyonu terk etmek, gece izinsiz dışarıda kalmak"),
                ("c", "Ayrımcılığı körükleyici davranışlarda bulunmak"),
                ("ç", "Okul binası ve eklentilerinde izinsiz gösteri, etkinlik ve toplantı düzenlemek"),
                ("d", "Her türlü ortamda kumar oynamak veya oynatmak"),
                ("e", "Okul kurallarının uygulanmasını engellemek"),
                ("g", "Yasaklanmış araç, gereç ve dokümanları paylaşmak, dağıtmak"),
                ("ğ", "Bilişim araçları veya sosyal medya yoluyla eğitim faaliyetlerine veya kişilere zarar vermek"),
                ("ı", "Kavga etmek, başkalarına fiili şiddet uygulamak"),
                ("j", "Toplu kopya çekmek veya çekilmesine yardımcı olmak"),
                ("k", "Sarhoşluk veren zararlı maddeleri bulundurmak veya kullanmak"),
                ("m", "Okul personelinin malına zarar vermek"),
                ("n", "İzinsiz olarak görüntü çekmek, kaydetmek, paylaşmak"),
                ("ö", "Akran zorbalığı yapmak"),
            ),
        ),
        PenaltyCategory(
            key="degistirme",
            title="Okul Değiştirme",
            color="red",
            description="Öğrencinin başka bir okula naklinin yapılması.",
            items=_items(
                ("a", "Türk Bayrağına, ülkeyi, milleti ve devleti temsil eden sembollere saygısızlık etmek"),
                ("b", "Millî ve manevi değerleri aşağılamak, hakaret etmek"),
                ("ç", "Hırsızlık yapmak"),
                ("e", "Resmî belgelerde değişiklik yapmak; sahte belge düzenlemek"),
                ("g", "Okula ait taşınır veya taşınmaz mallara zarar vermek"),
                ("h", "Eğitim ortamına yaralayıcı, öldürücü silah ve alet getirmek"),
                ("ı", "Zor kullanarak veya tehditle kopya çekmek"),
                ("i", "Bağımlılık yapan zararlı maddeleri bulundurmak veya kullanmak"),
                ("k", "Siyasi ve ideolojik amaçlı eylem düzenlemek, katılmak"),
                ("m", "Bilişim araçları veya sosyal medya yoluyla kişilere ağır derecede maddi ve manevi zarar vermek"),
                ("r", "Sarkıntılık, iftira, taciz etmek veya bunları sosyal medyada paylaşmak"),
                ("ş", "Kesici, delici aletlerle kendine zarar vermek"),
            ),
        ),
        PenaltyCategory(
            key="orgun_disi",
            title="Örgün Eğitim Dışına Çıkarma",
            color="slate",
            description="Öğrencinin örgün ortaöğretim kurumları ile ilişiğinin kesilmesidir.",
            items=_items(
                ("a", "Türk Bayrağına, sembollere hakaret etmek"),
                ("b", "Bölücü ve yıkıcı toplu eylemler düzenlemek veya katılmak"),
                ("d", "Bağımlılık yapan zararlı maddelerin ticaretini yapmak"),
                ("g", "Okul personeline karşı saldırıda bulunmak"),
                ("ı", "Silah veya güç kullanarak yaralamak, öldürmek"),
                ("i", "Cinsel istismar ve bu konuda suç sayılan fiilleri işlemek"),
                ("j", "Çete kurmak, gasp, haraç almak"),
                ("l", "Bilişim araçlarıyla bölücü, ahlak dışı ve şiddeti özendiren içerik yaymak"),
            ),
        ),
    ),
)

REGULATIONS: dict[SchoolType, Regulation] = {
    SchoolType.ORTAOKUL: MIDDLE_SCHOOL,
    SchoolType.LISE: HIGH_SCHOOL,
}

# ---------------------------------------------------------------------------
# Decision form vocabulary
# ---------------------------------------------------------------------------

DISMISSAL = "CEZA VERİLMESİNE YER OLMADIĞINA"

DECISION_OPTIONS: tuple[str, ...] = (
    "KINAMA",
    "UYARMA",
    "KISA SÜRELİ UZAKLAŞTIRMA",
    "OKUL DEĞİŞTİRME",
    "ÖRGÜN EĞİTİM DIŞINA ÇIKARMA",
    DISMISSAL,
)

# Checked in order; the first keyword found in the penalty label wins.
SCORE_SUGGESTIONS: tuple[tuple[str, str], ...] = (
    ("UYARMA", "0"),
    ("KINAMA", "10"),
    ("UZAKLAŞTIRMA", "20"),
    ("DEĞİŞTİRME", "40"),
    ("ÖRGÜN", "80"),
)

CATALOG_SELECTION_MESSAGE = "Lütfen önce yukarıdan bir olay ve öğrenci seçiniz."


def regulation_for(school_type: SchoolType) -> Regulation:
    return REGULATIONS[school_type]


def default_category(school_type: SchoolType) -> PenaltyCategory:
    return regulation_for(school_type).categories[0]


def search_items(category: PenaltyCategory, term: str) -> list[PenaltyItem]:
    if not term:
        return list(category.items)
    lowered = term.lower()
    return [item for item in category.items if lowered in item.text.lower()]


def is_penalty(decision: str) -> bool:
    """A recorded decision that actually sanctions the student."""
    return bool(decision) and "YER OLMADIĞINA" not in decision


def suggest_score(penalty: str, fallback: str = "0") -> str:
    for keyword, score in SCORE_SUGGESTIONS:
        if keyword in penalty:
            return score
    return fallback


def is_proposal(rel: InvolvedStudent) -> bool:
    """Written by the catalog: has a decision and reason but no decision number yet."""
    return bool(rel.decision) and not rel.decision_no and bool(rel.decision_reason)


def load_decision(rel: Optional[InvolvedStudent]) -> Decision:
    """Fill the decision form from an involvement."""
    if rel is None or not rel.decision:
        return Decision()
    decision = Decision(
        penalty=rel.decision,
        decision_no=rel.decision_no,
        decision_date=rel.decision_date or today_iso(),
        reason=rel.decision_reason,
        score=rel.penalty_score or "10",
    )
    if is_proposal(rel) and not rel.penalty_score:
        decision.score = suggest_score(rel.decision)
    return decision


def proposal_reason(regulation: Regulation, item: PenaltyItem) -> str:
    return f"Madde {regulation.article_ref}-{item.code}) {item.text}"


def apply_proposal(
    lifecycle: "IncidentLifecycle",
    school_type: SchoolType,
    incident_id: str,
    student_id: str,
    category_key: str,
    item_code: str,
    today: Optional[date] = None,
) -> Incident:
    """
    Write a catalog item onto an involvement as a proposal.

    Parameters
    ----------
    lifecycle : IncidentLifecycle
        Used for the write, so the incident status is re-derived.
    school_type : SchoolType
        Selects the regulation dataset.
    incident_id, student_id : str
        The target involvement. Either one missing aborts with no change.
    category_key, item_code : str
        The catalog selection.

    Returns
    -------
    Incident
        The updated incident.

    Raises
    ------
    MissingSelectionError
        No incident or student selected, or the pair is not an involvement.
    UnknownPenaltyError
        The category or item does not exist in the dataset.
    """
    if not incident_id or not student_id:
        raise MissingSelectionError(CATALOG_SELECTION_MESSAGE)

    regulation = regulation_for(school_type)
    category = regulation.category(category_key)
    item = category.item(item_code) if category else None
    if category is None or item is None:
        raise UnknownPenaltyError(
            f"Seçilen ceza maddesi katalogda bulunamadı: {category_key} / {item_code}"
        )

    try:
        updated = lifecycle.update_involvement(
            incident_id,
            student_id,
            decision=category.decision_label,
            decision_reason=proposal_reason(regulation, item),
            decision_date=(today or date.today()).isoformat(),
        )
    except MissingSelectionError as e:
        raise MissingSelectionError(CATALOG_SELECTION_MESSAGE) from e

    logger.info(
        "Proposal %s (item %s) written for %s / %s",
        category.decision_label, item.code, updated.code, student_id,
    )
    return updated
