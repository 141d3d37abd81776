"""Read participant and prize lists out of ``.xlsx`` workbooks."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
import logging
from typing import Any, Iterable, Optional, Sequence
import zipfile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from ..models.utils import parse_leading_int
from ..models import DEFAULT_PRIZE_NAMES
from .errors import SpreadsheetFormatError

logger = logging.getLogger(__name__)

NAME_HEADER_TOKENS = ("姓名", "名字", "name", "人员", "员工")
PRIZE_HEADER_TOKENS = ("奖品", "奖项", "prize", "level", "奖")
COUNT_HEADER_TOKENS = ("数量", "份数", "count", "qty", "num", "number")


@dataclass(frozen=True)
class PrizeSpec:
    """Prize row read from a sheet: display name and number of units."""

    name: str
    total: int


@dataclass(frozen=True)
class RosterImport:
    """Combined import result: participants from sheet 1, prizes from sheet 2."""

    participant_names: list[str]
    prizes: list[PrizeSpec]


def default_prize_specs() -> list[PrizeSpec]:
    return [PrizeSpec(name=name, total=1) for name in DEFAULT_PRIZE_NAMES]


def normalize_cell(value: Any) -> str:
    """Return ``value`` as stripped text; empty cells become ``""``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def looks_like_header(row: Sequence[Any]) -> bool:
    """Guess whether ``row`` is a header rather than data.

    The first column is checked for name- or prize-like words and the second
    for count-like words (case-insensitive substring match).
    """
    first = normalize_cell(row[0] if len(row) > 0 else None).lower()
    second = normalize_cell(row[1] if len(row) > 1 else None).lower()
    return (
        any(token in first for token in NAME_HEADER_TOKENS)
        or any(token in first for token in PRIZE_HEADER_TOKENS)
        or any(token in second for token in COUNT_HEADER_TOKENS)
    )


def _sheet_rows(sheet: Worksheet) -> list[tuple[Any, ...]]:
    return [tuple(row) for row in sheet.iter_rows(values_only=True)]


def _data_rows(rows: list[tuple[Any, ...]]) -> list[tuple[Any, ...]]:
    if rows and looks_like_header(rows[0]):
        return rows[1:]
    return rows


def parse_participant_rows(rows: Iterable[Sequence[Any]]) -> list[str]:
    """Extract unique, non-blank names from the first column of ``rows``."""
    names: list[str] = []
    seen: set[str] = set()
    for row in _data_rows([tuple(r) for r in rows]):
        name = normalize_cell(row[0] if row else None)
        if not name or name in seen:
            continue
        seen.add(name)
        names.append(name)
    return names


def parse_prize_rows(rows: Iterable[Sequence[Any]]) -> list[PrizeSpec]:
    """Extract ``(name, quantity)`` pairs from the first two columns of ``rows``.

    A missing, invalid or non-positive quantity counts as 1.
    """
    prizes: list[PrizeSpec] = []
    for row in _data_rows([tuple(r) for r in rows]):
        name = normalize_cell(row[0] if len(row) > 0 else None)
        if not name:
            continue
        raw_qty = normalize_cell(row[1] if len(row) > 1 else None)
        total = parse_leading_int(raw_qty) if raw_qty else 1
        prizes.append(PrizeSpec(name=name, total=total if total and total > 0 else 1))
    return prizes


def _open_sheets(data: bytes) -> list[Worksheet]:
    try:
        workbook = load_workbook(BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise SpreadsheetFormatError(f"Unreadable workbook: {exc}") from exc
    return list(workbook.worksheets)


def _first_sheet(data: bytes) -> Optional[Worksheet]:
    sheets = _open_sheets(data)
    return sheets[0] if sheets else None


def read_participant_names(data: bytes) -> list[str]:
    """Read participant names from the first column of the first sheet.

    Raises
    ------
    SpreadsheetFormatError
        If the workbook cannot be read or no name was found.
    """
    sheet = _first_sheet(data)
    names = parse_participant_rows(_sheet_rows(sheet)) if sheet is not None else []
    if not names:
        raise SpreadsheetFormatError(
            "No participants found (the first column of the first sheet is used)"
        )
    logger.debug(f"Parsed {len(names)} participant names")
    return names


def read_prizes(data: bytes) -> list[PrizeSpec]:
    """Read prizes from the first two columns (name, quantity) of the first sheet.

    Raises
    ------
    SpreadsheetFormatError
        If the workbook cannot be read or no prize was found.
    """
    sheet = _first_sheet(data)
    prizes = parse_prize_rows(_sheet_rows(sheet)) if sheet is not None else []
    if not prizes:
        raise SpreadsheetFormatError(
            "No prizes found (the first two columns of the first sheet are used: "
            "prize, quantity)"
        )
    logger.debug(f"Parsed {len(prizes)} prizes")
    return prizes


def read_participants_and_prizes(data: bytes) -> RosterImport:
    """Read participants from sheet 1 and prizes from sheet 2 of one workbook.

    Without a second sheet, or when it holds no prize rows, the four default
    prizes are used.

    Raises
    ------
    SpreadsheetFormatError
        If the workbook cannot be read or sheet 1 holds no participants.
    """
    sheets = _open_sheets(data)
    names = parse_participant_rows(_sheet_rows(sheets[0])) if sheets else []
    if not names:
        raise SpreadsheetFormatError(
            "No participants found (the first column of sheet 1 is used)"
        )
    prizes = parse_prize_rows(_sheet_rows(sheets[1])) if len(sheets) > 1 else []
    if not prizes:
        prizes = default_prize_specs()
    return RosterImport(participant_names=names, prizes=prizes)


__all__ = [
    "PrizeSpec",
    "RosterImport",
    "default_prize_specs",
    "looks_like_header",
    "normalize_cell",
    "parse_participant_rows",
    "parse_prize_rows",
    "read_participant_names",
    "read_participants_and_prizes",
    "read_prizes",
]
