"""RowClassifier — decides whether a timesheet cell is worked hours or a leave code."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel

from timeledger.models.labor import Workcode

logger = logging.getLogger(__name__)

HOURS_PATTERN = re.compile(r"^[0-9]{1,2}(\.[0-9]+)?$")
HOLIDAY_PATTERN = re.compile(r"[hfHF][0-9]{1,2}")


class ClassificationKind(StrEnum):
    EMPTY = "empty"
    HOURS = "hours"
    LEAVE = "leave"
    UNRECOGNIZED = "unrecognized"


class Classification(BaseModel):
    """Outcome of classifying one cell. Exactly one kind; payload fields per kind."""

    model_config = {"frozen": True}

    kind: ClassificationKind
    value: str = ""
    hours: Optional[Decimal] = None
    code: Optional[str] = None
    holiday_id: Optional[str] = None


class RowClassifier:
    """Classifies cell text against a team's leave-code configuration.

    Leave codes are tried in configured order and the first whose search text
    appears in the row wins.
    """

    def __init__(self, workcodes: Iterable[Workcode], holiday_code: str = "h") -> None:
        self._leave_codes = [
            wc for wc in workcodes if wc.is_leave and (wc.search or wc.altcode)
        ]
        self._holiday_code = holiday_code.lower()

    def classify(
        self, value: str, *, row_text: str = "", explanation: Optional[str] = None
    ) -> Classification:
        value = value.strip()
        if value == "":
            return Classification(kind=ClassificationKind.EMPTY)

        if HOURS_PATTERN.match(value):
            return Classification(
                kind=ClassificationKind.HOURS, value=value, hours=Decimal(value)
            )

        code = self._match_leave_code(f"{value} {row_text}".lower())
        if code is None:
            return Classification(kind=ClassificationKind.UNRECOGNIZED, value=value)

        holiday_id = None
        if code.lower() == self._holiday_code and explanation:
            found = HOLIDAY_PATTERN.search(explanation)
            holiday_id = found.group(0) if found else None
        return Classification(
            kind=ClassificationKind.LEAVE, value=value, code=code, holiday_id=holiday_id
        )

    def _match_leave_code(self, haystack: str) -> Optional[str]:
        for wc in self._leave_codes:
            needle = (wc.search or wc.altcode or "").lower()
            if needle and needle in haystack:
                logger.debug("Matched leave code %s on %r", wc.id, needle)
                return wc.id
        return None
