class SpreadsheetFormatError(ValueError):
    """Raised when workbook bytes cannot be read or contain no usable rows."""
