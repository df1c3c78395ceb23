"""
AI advisor: Gemini ``generateContent`` over REST.

Every call is text in, text out. Offline, a missing key and any HTTP or
parse failure all come back as a fixed Turkish message; nothing here raises
into the UI. There is no timeout, no retry and no queuing.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import Any, Callable, Optional

import httpx

from kurul import config
from kurul.models import Incident, SchoolType, Student

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fixed texts
# ---------------------------------------------------------------------------

SYSTEM_INSTRUCTION = (
    "Sen Türk Milli Eğitim Bakanlığı yönetmeliklerine hakim, tecrübeli bir okul müdür "
    "yardımcısı ve disiplin kurulu uzmanısın.\n"
    "Görevin, okulda yaşanan disiplin olaylarını analiz etmek, ilgili yönetmelik maddelerini "
    "bulmak ve resmi evrak (tutanak, savunma isteme, karar) taslakları hazırlamaktır.\n"
    "Her zaman resmi, tarafsız ve yapıcı bir dil kullan."
)

OFFLINE_ANALYSIS = (
    "⚠️ İNTERNET BAĞLANTISI YOK\n\n"
    "Cihazınız çevrimdışı olduğu için Yapay Zeka analizi yapılamıyor. "
    "Lütfen internet bağlantınızı kontrol ediniz veya manuel giriş yapınız."
)
OFFLINE_REASON = "Bağlantı yok."
OFFLINE_SEARCH = "⚠️ İnternet bağlantısı olmadığı için mevzuat taraması yapılamıyor."
OFFLINE_BOARD = "⚠️ İnternet bağlantısı yok. Mevzuat bilgisi çekilemedi."
OFFLINE_DOCUMENT = (
    "⚠️ İNTERNET YOK: Otomatik belge oluşturma servisi çevrimdışı. "
    "Lütfen 'Matbu (Boş) Modu' kullanarak taslak üzerinden ilerleyiniz."
)

ERROR_ANALYSIS = (
    "Analiz sırasında bir hata oluştu. Lütfen Ayarlar kısmından API anahtarınızı kontrol edin."
)
ERROR_REASON = "Gerekçe oluşturulamadı. Lütfen gerekçeyi elle giriniz."
ERROR_SEARCH = "Yönetmelik araması başarısız oldu. API anahtarınızı kontrol ediniz."
ERROR_BOARD = (
    "Mevzuat bilgisi alınamadı. Lütfen API anahtarınızı ve internet bağlantınızı kontrol ediniz."
)
ERROR_DOCUMENT = "Belge oluşturulamadı."
MISSING_KEY = "API Key eksik. Lütfen Ayarlar sayfasından Gemini API anahtarınızı giriniz."

REGULATION_URLS: dict[SchoolType, str] = {
    SchoolType.ORTAOKUL: "https://www.mevzuat.gov.tr/mevzuat?MevzuatNo=18812&MevzuatTur=7&MevzuatTertip=5",
    SchoolType.LISE: "https://www.mevzuat.gov.tr/mevzuat?MevzuatNo=19942&MevzuatTur=7&MevzuatTertip=5",
}

DOCUMENT_KINDS: dict[str, str] = {
    "defense": "Öğrenci Savunma İsteme Yazısı",
    "summons": "Veli Çağrı Pusulası",
    "decision": "Disiplin Kurulu Karar Tutanağı Taslağı",
}


class AdvisorError(Exception):
    """Internal: a request that produced no usable text. Never leaves this module."""


def has_connectivity(host: str = config.CONNECTIVITY_HOST, timeout: float = config.CONNECTIVITY_TIMEOUT) -> bool:
    try:
        with socket.create_connection((host, 443), timeout=timeout):
            return True
    except OSError:
        return False


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def analysis_prompt(incident: Incident, student: Student) -> str:
    return (
        "Aşağıdaki olayı analiz et:\n\n"
        f"Öğrenci: {student.name} ({student.grade} - {student.number})\n"
        f"Tarih: {incident.date}\n"
        f"Yer: {incident.location}\n"
        f"Olay Tanımı: {incident.description}\n\n"
        "Lütfen bu olayın ciddiyetini değerlendir, hangi disiplin maddesinin ihlal edilmiş "
        "olabileceğini belirt ve izlenmesi gereken yasal süreci adım adım özetle.\n\n"
        "ÖNEMLİ:\n"
        '1. Çıktı sadece "Analiz ve Yol Haritası" raporu olmalı.\n'
        '2. Asla tutanak, dilekçe veya savunma isteme yazısı gibi "boş belge taslakları" oluşturma.\n'
        "3. Doğrudan konuya gir, başlıkları net kullan.\n"
        "4. Rapor dili resmi ve teknik olsun."
    )


def reason_prompt(incident: Incident, student: Student, penalty: str, school_type: str) -> str:
    return (
        f"Öğrenci: {student.name}\n"
        f"Olay: {incident.description}\n"
        f"Verilen Ceza: {penalty}\n"
        f"Okul Türü: {school_type}\n\n"
        "Yukarıdaki bilgilere göre, MEB yönetmeliğine uygun, resmi bir karar gerekçesi ve "
        "ilgili madde metnini oluştur.\n"
        "Sadece gerekçe metnini ver."
    )


def search_prompt(query: str) -> str:
    return (
        f'Kullanıcı şu konuda mevzuat/yönetmelik bilgisi arıyor: "{query}".\n\n'
        "Lütfen cevabı verirken aşağıdaki İKİ resmi kaynağı temel al ve tarayarak cevapla:\n\n"
        f"1. MEB Ortaöğretim Kurumları Yönetmeliği:\n   {REGULATION_URLS[SchoolType.LISE]}\n\n"
        "2. MEB Okul Öncesi Eğitim ve İlköğretim Kurumları Yönetmeliği:\n"
        f"   {REGULATION_URLS[SchoolType.ORTAOKUL]}\n\n"
        "Sorunun içeriğine göre (ortaokul veya lise ayrımı varsa) ilgili yönetmeliği referans "
        "göster. Madde numaralarını belirterek (Örn: Madde 164'e göre...) net bir açıklama yap."
    )


def board_prompt(url: str, school_type: str) -> str:
    return (
        "Sen bir mevzuat uzmanısın. Aşağıdaki resmi mevzuat bağlantısını referans alarak, "
        f'"{school_type}" türündeki okullar için oluşturulması gereken "Öğrenci Davranışlarını '
        'Değerlendirme Kurulu" veya "Disiplin Kurulu"nun:\n'
        "1. Kimin başkanlığında toplandığını,\n"
        "2. Hangi üyelerden oluştuğunu (asil ve yedek),\n"
        "3. Veli veya öğrenci temsilcisi durumunu\n\n"
        "Maddeler halinde, net ve kısa bir özet olarak Türkçe yaz.\n\n"
        f"Mevzuat Adresi: {url}"
    )


def document_prompt(kind: str, incident: Incident, student: Student) -> str:
    return (
        f'Aşağıdaki bilgiler ışığında resmi bir "{DOCUMENT_KINDS[kind]}" hazırla. Metin boşluk '
        "doldurma formatında değil, doğrudan kullanılabilir bir taslak olmalı.\n\n"
        f"Öğrenci: {student.name}\n"
        f"Sınıf/No: {student.grade} / {student.number}\n"
        f"Olay: {incident.description}\n"
        f"Tarih: {incident.date}"
    )


def extract_text(payload: dict[str, Any]) -> str:
    """Concatenated text parts of the first candidate."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        raise AdvisorError(f"Unexpected response layout: {e}")
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text:
        raise AdvisorError("Empty response")
    return text


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class AdvisorClient:
    """
    Text-in, text-out calls against the Gemini REST API.

    Parameters
    ----------
    api_key : str
        Gemini key; an empty key fails every call with the call's error text.
    model : str, optional
        Model name in the ``models/{model}:generateContent`` path.
    is_online : callable, optional
        Blocking connectivity check, run in a worker thread before every
        call. Defaults to a TCP probe of the API host.
    transport : httpx.AsyncBaseTransport, optional
        Injected transport, used by tests.
    """

    def __init__(
        self,
        api_key: str,
        model: str = config.GEMINI_MODEL,
        is_online: Optional[Callable[[], bool]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        endpoint: str = config.GEMINI_ENDPOINT,
    ):
        self.api_key = api_key
        self.model = model
        self.is_online = is_online or has_connectivity
        self.transport = transport
        self.endpoint = endpoint.rstrip("/")

    def _url(self) -> str:
        return f"{self.endpoint}/{self.model}:generateContent"

    async def _generate(
        self,
        prompt: str,
        api_key: Optional[str] = None,
        grounded: bool = False,
        system: bool = True,
    ) -> str:
        key = self.api_key if api_key is None else api_key
        if not key:
            raise AdvisorError(MISSING_KEY)

        body: dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if system:
            body["systemInstruction"] = {"parts": [{"text": SYSTEM_INSTRUCTION}]}
        if grounded:
            body["tools"] = [{"google_search": {}}]

        async with httpx.AsyncClient(timeout=None, transport=self.transport) as client:
            try:
                r = await client.post(self._url(), json=body, headers={"x-goog-api-key": key})
                r.raise_for_status()
                payload = r.json()
            except httpx.HTTPError as e:
                raise AdvisorError(f"Gemini request failed: {e}")
            except ValueError as e:
                raise AdvisorError(f"Gemini returned invalid JSON: {e}")
        return extract_text(payload)

    async def _call(self, prompt: str, offline_text: str, error_text: str, grounded: bool = False) -> str:
        if not await asyncio.to_thread(self.is_online):
            return offline_text
        try:
            return await self._generate(prompt, grounded=grounded)
        except AdvisorError as e:
            logger.error("AI call failed: %s", e)
            return error_text

    # ------------------------------------------------------------------
    # Public calls
    # ------------------------------------------------------------------

    async def analyze(self, incident: Incident, student: Student) -> str:
        return await self._call(analysis_prompt(incident, student), OFFLINE_ANALYSIS, ERROR_ANALYSIS)

    async def generate_reason(
        self, incident: Incident, student: Student, penalty: str, school_type: str
    ) -> str:
        return await self._call(
            reason_prompt(incident, student, penalty, school_type), OFFLINE_REASON, ERROR_REASON
        )

    async def search_regulations(self, query: str) -> str:
        return await self._call(search_prompt(query), OFFLINE_SEARCH, ERROR_SEARCH, grounded=True)

    async def fetch_board_info(self, url: str, school_type: str) -> str:
        return await self._call(
            board_prompt(url, school_type), OFFLINE_BOARD, ERROR_BOARD, grounded=True
        )

    async def draft_document(self, kind: str, incident: Incident, student: Student) -> str:
        """Free-form draft of a defense request, parent call or decision record."""
        if kind not in DOCUMENT_KINDS:
            raise ValueError(f"Unknown document kind '{kind}'. Expected one of: {', '.join(DOCUMENT_KINDS)}")
        return await self._call(
            document_prompt(kind, incident, student), OFFLINE_DOCUMENT, ERROR_DOCUMENT
        )

    async def validate_api_key(self, key: str) -> bool:
        if not await asyncio.to_thread(self.is_online):
            return False
        try:
            await self._generate("Test", api_key=key, system=False)
        except AdvisorError as e:
            logger.warning("API key validation failed: %s", e)
            return False
        return True
