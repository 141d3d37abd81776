"""Write the winners list as an ``.xlsx`` workbook."""

from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from ..models import DrawRecord

RESULTS_SHEET_TITLE = "Winners"
RESULTS_HEADERS = ("No.", "Name", "Prize", "Time")


def default_export_filename(today: Optional[date] = None) -> str:
    """Suggested file name for an export made on ``today``."""
    today = today or date.today()
    return f"winners_{today.isoformat()}.xlsx"


def build_results_workbook(records: Sequence[DrawRecord]) -> bytes:
    """Serialize ``records`` (oldest first) into workbook bytes.

    One sheet with a header row and one row per record: sequence number,
    participant name, prize name and timestamp.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = RESULTS_SHEET_TITLE
    ws.append(list(RESULTS_HEADERS))
    for col in range(1, len(RESULTS_HEADERS) + 1):
        ws.cell(row=1, column=col).font = Font(bold=True)

    for idx, record in enumerate(records, start=1):
        ws.append([idx, record.participant_name, record.prize_name, record.timestamp])

    for col, width in zip(range(1, len(RESULTS_HEADERS) + 1), (8, 24, 24, 22)):
        ws.column_dimensions[get_column_letter(col)].width = width

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


__all__ = [
    "RESULTS_HEADERS",
    "RESULTS_SHEET_TITLE",
    "build_results_workbook",
    "default_export_filename",
]
