"""
Match a freshly built record against already tracked entries.

A candidate matches an entry when either
  (a) company names are equal ignoring case AND one job title contains the
      other ignoring case (sentinel company/title never match), or
  (b) email records only: emailId or emailSubject equals the entry's.

The first matching entry in store order wins. Tracked entries are never
mutated; a match returns an overlaid copy for the caller to persist.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Union

from app.core.schemas import EmailDerivedRecord, JobRecord, MatchDecision, TrackedEntry
from app.core.sentinels import SourceType, is_sentinel

logger = logging.getLogger(__name__)

Record = Union[JobRecord, EmailDerivedRecord]

SCREENSHOT_DEFAULT_STATUS = "interested"
ID_PREFIXES = {SourceType.EMAIL: "email", SourceType.SCREENSHOT: "shot"}

# Status only moves forward on overlay; an "application received" mail must not
# undo an interview already on record.
STATUS_RANK = {"interested": 0, "applied": 1, "interview": 2, "offer": 3, "rejected": 3}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_entry_id(source: SourceType, now: Optional[datetime] = None) -> str:
    """'email_1718000000000_3f2a9c1b0' style identifiers."""
    now = now or _utc_now()
    millis = int(now.timestamp() * 1000)
    return f"{ID_PREFIXES[SourceType(source)]}_{millis}_{uuid.uuid4().hex[:9]}"


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().casefold()


def _source_of(record: Record) -> SourceType:
    return SourceType(record.extraction_metadata.source_type)


# ============================================================================
# Matching rules
# ============================================================================

def _matches_company_and_title(record: Record, entry: TrackedEntry) -> bool:
    if is_sentinel(record.company) or is_sentinel(record.job_title):
        return False
    if _norm(record.company) != _norm(entry.company_name):
        return False
    mine, theirs = _norm(record.job_title), _norm(entry.job_title)
    if not mine or not theirs:
        return False
    return mine in theirs or theirs in mine


def _matches_email_identity(record: Record, entry: TrackedEntry) -> bool:
    if not isinstance(record, EmailDerivedRecord):
        return False
    if record.email_id and entry.email_id and record.email_id == entry.email_id:
        return True
    return bool(record.email_subject and entry.email_subject and record.email_subject == entry.email_subject)


def find_match(record: Record, existing: Sequence[TrackedEntry]) -> Optional[TrackedEntry]:
    for entry in existing:
        if _matches_email_identity(record, entry):
            logger.debug("Matched %s by email identity", entry.id)
            return entry
        if _matches_company_and_title(record, entry):
            logger.debug("Matched %s by company and title", entry.id)
            return entry
    return None


# ============================================================================
# Proposals
# ============================================================================

def _record_fields(record: Record) -> Dict[str, Any]:
    """Tracker columns a record can supply. Sentinels are kept here and filtered by callers."""
    fields: Dict[str, Any] = {
        "company_name": record.company,
        "job_title": record.job_title,
        "location": record.location,
        "confidence": record.extraction_metadata.confidence_score,
    }
    if isinstance(record, EmailDerivedRecord):
        fields.update(
            status=record.status,
            source_id=record.email_id,
            email_id=record.email_id,
            email_subject=record.email_subject,
            email_from=record.email_from,
            email_date=record.email_date,
            notes=record.notes,
        )
    return fields


def to_tracked_entry(record: Record, now: Optional[datetime] = None) -> TrackedEntry:
    """Propose a brand-new tracker entry for a record."""
    now = now or _utc_now()
    source = _source_of(record)
    fields = _record_fields(record)
    fields.setdefault("status", SCREENSHOT_DEFAULT_STATUS)
    return TrackedEntry(
        id=new_entry_id(source, now),
        added_at=now.isoformat(),
        source=source.value,
        auto_detected=source == SourceType.EMAIL,
        **fields,
    )


def overlay(entry: TrackedEntry, record: Record, now: Optional[datetime] = None) -> TrackedEntry:
    """
    Shallow overlay of a record onto an existing entry.

    Existing values survive unless the record supplies a non-sentinel value.
    Status never moves backwards. The entry itself is left untouched.
    """
    now = now or _utc_now()
    updates: Dict[str, Any] = {}
    for key, value in _record_fields(record).items():
        if value is None or (isinstance(value, str) and is_sentinel(value)):
            continue
        if key == "status" and STATUS_RANK.get(value, 0) < STATUS_RANK.get(entry.status, 0):
            continue
        updates[key] = value
    updates["updated_at"] = now.isoformat()
    return entry.model_copy(update=updates)


def match(record: Record, existing: Sequence[TrackedEntry], now: Optional[datetime] = None) -> MatchDecision:
    """
    Decide whether `record` is new or refers to an entry already tracked.

    An empty store always yields isNew=True.
    """
    now = now or _utc_now()
    found = find_match(record, existing) if existing else None
    if found is None:
        entry = to_tracked_entry(record, now)
        logger.info("New entry %s: %s / %s", entry.id, entry.company_name, entry.job_title)
        return MatchDecision(is_new=True, entry=entry)

    merged = overlay(found, record, now)
    logger.info("Existing entry %s updated from %s record", found.id, _source_of(record).value)
    return MatchDecision(is_new=False, existing_id=found.id, entry=merged)
