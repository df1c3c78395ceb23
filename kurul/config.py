"""
Runtime configuration.

Every value has a working default; environment variables override them at
import time.
"""

from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

DATA_DIR: Path = Path(os.getenv("KURUL_DATA_DIR", str(Path.home() / ".disiplin-kurulu")))

STUDENTS_FILE: str = "students.json"
INCIDENTS_FILE: str = "incidents.json"
SETTINGS_FILE: str = "settings.json"
SEQUENCE_FILE: str = "sequence.json"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL: str = os.getenv("KURUL_LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# ---------------------------------------------------------------------------
# AI service (Gemini REST)
# ---------------------------------------------------------------------------

GEMINI_MODEL: str = os.getenv("KURUL_GEMINI_MODEL", "gemini-3-flash-preview")
GEMINI_ENDPOINT: str = os.getenv(
    "KURUL_GEMINI_ENDPOINT",
    "https://generativelanguage.googleapis.com/v1beta/models",
)
# Used only when no key has been saved in the settings bundle.
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", os.getenv("API_KEY", ""))

# Host probed by the connectivity check before each AI call.
CONNECTIVITY_HOST: str = os.getenv("KURUL_CONNECTIVITY_HOST", "generativelanguage.googleapis.com")
CONNECTIVITY_TIMEOUT: float = float(os.getenv("KURUL_CONNECTIVITY_TIMEOUT", "2.0"))

# ---------------------------------------------------------------------------
# PDF export
# ---------------------------------------------------------------------------

# A TTF with Turkish glyphs; Helvetica is used when it cannot be found.
PDF_FONT_PATH: str = os.getenv("KURUL_PDF_FONT", "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf")
PDF_FONT_BOLD_PATH: str = os.getenv(
    "KURUL_PDF_FONT_BOLD", "/usr/share/fonts/truetype/dejavu/DejaVuSerif-Bold.ttf"
)
