"""
e-Okul Künye Defteri block layout.

The student register export is not a table. Each student is a block of 19
rows that starts with a row holding an ``Okul No`` cell. Every field sits at
a fixed row offset inside the block, to the right of its label:

    row +0   Okul No : 123
    row +1   Adı     : Ayşe
    ...
    row +18  Adresi  : ...

RULES:
- A label matches a cell by case-insensitive substring.
- The value is the next non-empty cell to the right of the label.
- A label missing from its row yields an empty string, never an error.

Public API:
  find_value_by_label(row, label) -> str
  read_block(rows, start) -> dict[str, str]
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import pandas as pd

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Block geometry
# ---------------------------------------------------------------------------

BLOCK_ANCHOR: str = "Okul No"
# Rows a block spans, anchor row included.
BLOCK_HEIGHT: int = 19

# ---------------------------------------------------------------------------
# Field layout: row offset -> ordered (label, field) pairs on that row
# ---------------------------------------------------------------------------

_BLOCK_LAYOUT: dict[int, list[tuple[str, str]]] = {
    0:  [("Okul No", "number")],
    1:  [("Adı", "first_name")],
    2:  [("Soyadı", "last_name")],
    3:  [("Baba Adı", "father_name")],
    4:  [("Anne Adı", "mother_name")],
    5:  [("Doğum Yeri", "birth_place_date")],
    7:  [("T.C. Kimlik No", "tc_no"), ("Cilt No", "volume_no")],
    8:  [("İli", "province"), ("Aile Sıra No", "family_order_no")],
    9:  [("İlçesi", "district"), ("Sıra No", "order_no")],
    10: [("Mahalle", "neighborhood")],
    13: [("Yeni Kayıt", "registration_type"), ("Kabul Ed. Sınıf", "grade")],
    14: [("Get. Öğr. Belgesi", "previous_school_info"), ("Sınavlı", "exam_status")],
    15: [("Tarih / Numarası", "registration_date"), ("Yatılı", "boarding_status")],
    16: [("Veli Adı", "parent_name"), ("Bursluluk", "scholarship_status")],
    18: [("Adresi", "address")],
}


def _build_field_index() -> dict[str, tuple[int, str]]:
    """
    Flatten the layout into {field: (offset, label)}.

    Raises ValueError if a field is placed twice or an offset falls outside
    the block.
    """
    index: dict[str, tuple[int, str]] = {}
    for offset, pairs in _BLOCK_LAYOUT.items():
        if not 0 <= offset < BLOCK_HEIGHT:
            raise ValueError(f"Layout offset {offset} is outside the {BLOCK_HEIGHT}-row block.")
        for label, field_name in pairs:
            if field_name in index:
                raise ValueError(
                    f"Layout conflict: field '{field_name}' is placed at offset "
                    f"{index[field_name][0]} and again at offset {offset}."
                )
            index[field_name] = (offset, label)
    return index


# Module-level field index, built once.
FIELD_INDEX: dict[str, tuple[int, str]] = _build_field_index()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def cell_text(cell: Any) -> str:
    """Stringify a spreadsheet cell; blanks and NaN become ''."""
    if cell is None:
        return ""
    if isinstance(cell, float):
        if pd.isna(cell):
            return ""
        if cell.is_integer():
            return str(int(cell))
    return str(cell).strip()


def is_anchor_row(row: Sequence[Any]) -> bool:
    return any(cell_text(cell).startswith(BLOCK_ANCHOR) for cell in row)


def find_value_by_label(row: Sequence[Any], label: str) -> str:
    """
    Value that follows ``label`` in ``row``.

    Parameters
    ----------
    row : sequence
        One spreadsheet row, cells in column order.
    label : str
        Label text, matched case-insensitively as a substring of a cell.

    Returns
    -------
    str
        The first non-empty cell right of the first matching label cell, or
        '' when the label is absent or has no value after it.
    """
    if not row:
        return ""
    needle = label.lower()
    for idx, cell in enumerate(row):
        if needle in cell_text(cell).lower():
            for value in row[idx + 1:]:
                text = cell_text(value)
                if text:
                    return text
            return ""
    return ""


def read_block(rows: Sequence[Sequence[Any]], start: int) -> dict[str, str]:
    """Read every layout field of the block anchored at ``rows[start]``."""
    values: dict[str, str] = {}
    for field_name, (offset, label) in FIELD_INDEX.items():
        idx = start + offset
        row = rows[idx] if idx < len(rows) else []
        values[field_name] = find_value_by_label(row, label)
    logger.debug("[label_mapper] block at row %d: number=%r", start, values.get("number"))
    return values
