"""
Sentinel values used in place of missing fields.

Downstream UI code matches on these exact strings, so they are defined once here
and never spelled inline anywhere else. The screenshot path and the email path
historically used different "not found" strings; both sets are kept and looked
up by source type instead of being unified.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet


class SourceType(str, Enum):
    SCREENSHOT = "screenshot"
    EMAIL = "email"


NOT_SPECIFIED = "Not specified"
COMPANY_NOT_SPECIFIED = "Company not specified"
UNKNOWN_COMPANY = "Unknown Company"
POSITION_NOT_SPECIFIED = "Position not specified"
SALARY_NOT_SPECIFIED = "Salary not specified"

SENIORITY_MID_LEVEL = "Mid-level"
SENIORITY_ENTRY_LEVEL = "Entry-level"


@dataclass(frozen=True)
class SentinelSet:
    """The "not found" values one pipeline path emits."""
    company: str
    job_title: str
    salary: str
    seniority_default: str
    generic: str = NOT_SPECIFIED


SENTINELS: Dict[SourceType, SentinelSet] = {
    SourceType.SCREENSHOT: SentinelSet(
        company=COMPANY_NOT_SPECIFIED,
        job_title=POSITION_NOT_SPECIFIED,
        salary=SALARY_NOT_SPECIFIED,
        seniority_default=SENIORITY_MID_LEVEL,
    ),
    SourceType.EMAIL: SentinelSet(
        company=UNKNOWN_COMPANY,
        job_title=POSITION_NOT_SPECIFIED,
        salary=NOT_SPECIFIED,
        seniority_default=SENIORITY_ENTRY_LEVEL,
    ),
}

# Seniority defaults are real labels, not sentinels, so they are excluded here.
ALL_SENTINELS: FrozenSet[str] = frozenset({
    NOT_SPECIFIED,
    COMPANY_NOT_SPECIFIED,
    UNKNOWN_COMPANY,
    POSITION_NOT_SPECIFIED,
    SALARY_NOT_SPECIFIED,
})


def sentinels_for(source: SourceType) -> SentinelSet:
    return SENTINELS[SourceType(source)]


def is_sentinel(value) -> bool:
    """True for None, empty strings, empty lists and any registered sentinel string."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip() or value.strip() in ALL_SENTINELS
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False
