from __future__ import annotations

import unittest
from datetime import date
from io import BytesIO

from openpyxl import Workbook, load_workbook

from luckydraw.models import DEFAULT_PRIZE_NAMES, DrawRecord
from luckydraw.spreadsheet.errors import SpreadsheetFormatError
from luckydraw.spreadsheet.exporter import (
    RESULTS_HEADERS,
    RESULTS_SHEET_TITLE,
    build_results_workbook,
    default_export_filename,
)
from luckydraw.spreadsheet.importer import (
    PrizeSpec,
    looks_like_header,
    normalize_cell,
    read_participant_names,
    read_participants_and_prizes,
    read_prizes,
)


def workbook_bytes(*sheets: list) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for idx, rows in enumerate(sheets, start=1):
        ws = wb.create_sheet(f"Sheet{idx}")
        for row in rows:
            ws.append(list(row))
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class HeaderHeuristicTests(unittest.TestCase):
    def test_name_and_prize_words_in_first_column(self) -> None:
        self.assertTrue(looks_like_header(("Name",)))
        self.assertTrue(looks_like_header(("Employee NAME", None)))
        self.assertTrue(looks_like_header(("姓名",)))
        self.assertTrue(looks_like_header(("Prize level", None)))

    def test_count_words_in_second_column(self) -> None:
        self.assertTrue(looks_like_header(("Award", "Qty")))
        self.assertTrue(looks_like_header(("Award", "数量")))

    def test_data_rows(self) -> None:
        self.assertFalse(looks_like_header(("Alice", None)))
        self.assertFalse(looks_like_header(("Bike", 2)))
        self.assertFalse(looks_like_header(()))

    def test_normalize_cell(self) -> None:
        self.assertEqual(normalize_cell(None), "")
        self.assertEqual(normalize_cell("  Bob "), "Bob")
        self.assertEqual(normalize_cell(2.0), "2")
        self.assertEqual(normalize_cell(2.5), "2.5")


class ReadParticipantNamesTests(unittest.TestCase):
    def test_header_skipped_duplicates_and_blanks_dropped(self) -> None:
        data = workbook_bytes(
            [("Name",), ("Alice",), ("  Bob ",), ("",), ("Alice",), ("Carol",)]
        )
        self.assertEqual(read_participant_names(data), ["Alice", "Bob", "Carol"])

    def test_first_row_kept_when_not_a_header(self) -> None:
        data = workbook_bytes([("Alice", "x"), ("Bob", "y")])
        self.assertEqual(read_participant_names(data), ["Alice", "Bob"])

    def test_only_first_sheet_is_read(self) -> None:
        data = workbook_bytes([("Alice",)], [("Bob",)])
        self.assertEqual(read_participant_names(data), ["Alice"])

    def test_numeric_names_are_text(self) -> None:
        data = workbook_bytes([(1001,), (1002,)])
        self.assertEqual(read_participant_names(data), ["1001", "1002"])

    def test_no_rows_raises(self) -> None:
        with self.assertRaises(SpreadsheetFormatError):
            read_participant_names(workbook_bytes([("Name",)]))

    def test_unreadable_bytes_raise(self) -> None:
        with self.assertRaises(SpreadsheetFormatError):
            read_participant_names(b"definitely not xlsx")


class ReadPrizesTests(unittest.TestCase):
    def test_quantities(self) -> None:
        data = workbook_bytes(
            [
                ("Prize", "Quantity"),
                ("TV", 2),
                ("Phone", None),
                ("Mug", "abc"),
                ("Pen", -1),
                ("Cup", "3 units"),
                (None, 4),
            ]
        )
        self.assertEqual(
            read_prizes(data),
            [
                PrizeSpec("TV", 2),
                PrizeSpec("Phone", 1),
                PrizeSpec("Mug", 1),
                PrizeSpec("Pen", 1),
                PrizeSpec("Cup", 3),
            ],
        )

    def test_empty_sheet_raises(self) -> None:
        with self.assertRaises(SpreadsheetFormatError):
            read_prizes(workbook_bytes([]))


class ReadRosterTests(unittest.TestCase):
    def test_two_sheets(self) -> None:
        data = workbook_bytes(
            [("Name",), ("Alice",), ("Bob",)],
            [("Award", "Count"), ("Bike", 1), ("Book", 5)],
        )
        roster = read_participants_and_prizes(data)
        self.assertEqual(roster.participant_names, ["Alice", "Bob"])
        self.assertEqual(roster.prizes, [PrizeSpec("Bike", 1), PrizeSpec("Book", 5)])

    def test_missing_prize_sheet_uses_defaults(self) -> None:
        roster = read_participants_and_prizes(workbook_bytes([("Alice",)]))
        self.assertEqual(
            roster.prizes, [PrizeSpec(name, 1) for name in DEFAULT_PRIZE_NAMES]
        )

    def test_empty_prize_sheet_uses_defaults(self) -> None:
        roster = read_participants_and_prizes(workbook_bytes([("Alice",)], []))
        self.assertEqual(len(roster.prizes), len(DEFAULT_PRIZE_NAMES))

    def test_no_participants_raises(self) -> None:
        with self.assertRaises(SpreadsheetFormatError):
            read_participants_and_prizes(workbook_bytes([], [("Bike", 1)]))


class ExportTests(unittest.TestCase):
    def test_results_workbook_layout(self) -> None:
        records = [
            DrawRecord(participant_name="Alice", prize_name="Bike", timestamp="2024-01-01 10:00:00"),
            DrawRecord(participant_name="Bob", prize_name="Book", timestamp="2024-01-01 10:01:00"),
        ]
        wb = load_workbook(BytesIO(build_results_workbook(records)))
        self.assertEqual(wb.sheetnames, [RESULTS_SHEET_TITLE])
        rows = list(wb.active.iter_rows(values_only=True))
        self.assertEqual(rows[0], RESULTS_HEADERS)
        self.assertEqual(rows[1], (1, "Alice", "Bike", "2024-01-01 10:00:00"))
        self.assertEqual(rows[2], (2, "Bob", "Book", "2024-01-01 10:01:00"))
        self.assertEqual(len(rows), 3)

    def test_default_filename_embeds_date(self) -> None:
        self.assertEqual(
            default_export_filename(date(2024, 3, 9)), "winners_2024-03-09.xlsx"
        )
        self.assertTrue(default_export_filename().startswith("winners_"))


if __name__ == "__main__":
    unittest.main()
