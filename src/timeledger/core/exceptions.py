"""TimeLedger exception hierarchy."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date


class TimeLedgerError(Exception):
    """Base exception for all TimeLedger errors."""


# ---------------------------------------------------------------------------
# Structural failures: fatal for a single source file
# ---------------------------------------------------------------------------

class StructuralError(TimeLedgerError):
    """A source file cannot be processed at all."""


class MissingHeaderError(StructuralError):
    """Required column headers are absent from the header row."""

    def __init__(self, filename: str, missing: Iterable[str]) -> None:
        self.filename = filename
        self.missing = tuple(missing)
        super().__init__(f"{filename}: missing required column(s): {', '.join(self.missing)}")


class MissingWorksheetError(StructuralError):
    """The expected worksheet is not present in the workbook."""

    def __init__(self, filename: str, worksheet: str) -> None:
        self.filename = filename
        self.worksheet = worksheet
        super().__init__(f"{filename}: no worksheet named {worksheet!r}")


class UnreadableFileError(StructuralError):
    """The file bytes could not be read or decoded as a workbook."""


# ---------------------------------------------------------------------------
# Configuration failures: fatal for a whole report request
# ---------------------------------------------------------------------------

class ConfigurationError(TimeLedgerError):
    """A request lacks the configuration needed to build a period hierarchy."""


class MissingIdentifierError(ConfigurationError):
    """Team, site, or company identifier not provided."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"Missing identifier(s): {', '.join(self.missing)}")


class FiscalWindowNotFoundError(ConfigurationError):
    """No configured fiscal window contains the requested date."""

    def __init__(self, as_of: date, company_id: str = "") -> None:
        self.as_of = as_of
        self.company_id = company_id
        target = f" for company {company_id!r}" if company_id else ""
        super().__init__(f"No mod period{target} contains {as_of.isoformat()}")


class InvalidFiscalWindowError(ConfigurationError):
    """Fiscal window ends before it starts."""

    def __init__(self, start: date, end: date) -> None:
        self.start = start
        self.end = end
        super().__init__(f"Fiscal window end {end.isoformat()} precedes start {start.isoformat()}")


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class FileStoreError(TimeLedgerError):
    """File store operation failed."""


class StoreObjectNotFoundError(FileStoreError):
    """The requested object is not in the store."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"No such object {path!r}")
