"""
Parse error hierarchy for spreadsheet ingestion.

    ParseError (base, surfaced to the user)
    ├── SpreadsheetReadError      - bytes are not a readable xlsx/csv file
    ├── HeaderNotFoundError       - no header row with the required columns
    ├── NoValidTransactionsError  - structure ok, but zero rows passed the filters
    ├── MalformedDateError        - row level, caught and counted as a skip
    └── UnparsableAmountError     - row level, caught and counted as a skip
"""
from typing import List, Optional


class ParseError(Exception):
    """Base exception for ingestion failures; message is shown to the user verbatim."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class SpreadsheetReadError(ParseError):
    """The uploaded bytes could not be opened as a spreadsheet."""


class HeaderNotFoundError(ParseError):
    """
    No header row yielded the required columns.

    The most common real-world failure: exports drift, so the message lists the exact
    column labels that were searched for.
    """

    def __init__(self, message: str, expected_columns: List[str], details: Optional[str] = None):
        super().__init__(message, details)
        self.expected_columns = list(expected_columns)


class NoValidTransactionsError(ParseError):
    """The file parsed, but no row passed the status / value filters."""

    def __init__(
        self,
        message: str,
        accepted_statuses: List[str],
        details: Optional[str] = None,
        skipped: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.accepted_statuses = list(accepted_statuses)
        self.skipped = dict(skipped or {})


class MalformedDateError(ParseError):
    """A date cell did not normalize to YYYY-MM-DD. Never leaves the parser."""


class UnparsableAmountError(ParseError):
    """A money cell could not be read as a number. Never leaves the parser."""
