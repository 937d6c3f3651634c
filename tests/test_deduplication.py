"""
Tests for matching records against tracked entries.
"""

from datetime import datetime, timezone

import pytest

from app.core.deduplication import match, new_entry_id, overlay, to_tracked_entry
from app.core.schemas import EmailDerivedRecord, ExtractionMetadata, JobRecord, TrackedEntry
from app.core.sentinels import COMPANY_NOT_SPECIFIED, NOT_SPECIFIED, POSITION_NOT_SPECIFIED, SourceType

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _screenshot_record(**fields):
    metadata = ExtractionMetadata(source_type=SourceType.SCREENSHOT, extraction_date=NOW, confidence="Medium", confidence_score=60)
    return JobRecord(extraction_metadata=metadata, **fields)


def _email_record(**fields):
    metadata = ExtractionMetadata(source_type=SourceType.EMAIL, extraction_date=NOW, confidence=75, confidence_score=75)
    fields.setdefault("email_id", "msg-1")
    return EmailDerivedRecord(extraction_metadata=metadata, **fields)


class TestEmptyStore:

    @pytest.mark.parametrize("record", [
        _screenshot_record(company="Stripe", job_title="Software Engineer Intern"),
        _email_record(company="Acme Corp", job_title="Data Analyst"),
    ])
    def test_always_new(self, record):
        decision = match(record, [], NOW)
        assert decision.is_new is True
        assert decision.existing_id is None

    def test_new_screenshot_entry(self):
        decision = match(_screenshot_record(company="Stripe", job_title="Software Engineer Intern"), [], NOW)
        entry = decision.entry
        assert entry.id.startswith("shot_")
        assert entry.status == "interested"
        assert entry.company_name == "Stripe"
        assert entry.auto_detected is False
        assert entry.added_at == NOW.isoformat()

    def test_new_email_entry(self):
        decision = match(_email_record(company="Acme Corp", job_title="Data Analyst", status="interview"), [], NOW)
        entry = decision.entry
        assert entry.id.startswith("email_")
        assert entry.status == "interview"
        assert entry.email_id == "msg-1"
        assert entry.source_id == "msg-1"
        assert entry.auto_detected is True


class TestMatchingRules:

    def test_same_email_id(self):
        first = _email_record(company="Acme Corp", job_title="Data Analyst", email_id="msg-1")
        entry = to_tracked_entry(first, NOW)
        second = _email_record(company="ACME CORP", job_title="Data Analyst", email_id="msg-1")
        decision = match(second, [entry], NOW)
        assert decision.is_new is False
        assert decision.existing_id == entry.id

    def test_same_email_subject(self):
        entry = TrackedEntry(id="app-1", company_name="Other", job_title="Other", email_subject="Your application to Acme")
        record = _email_record(company="Acme", job_title="Analyst", email_id="msg-9", email_subject="Your application to Acme")
        assert match(record, [entry], NOW).existing_id == "app-1"

    def test_company_and_contained_title(self):
        entry = TrackedEntry(id="app-1", company_name="Stripe", job_title="Software Engineer Intern")
        record = _screenshot_record(company="stripe", job_title="Software Engineer")
        decision = match(record, [entry], NOW)
        assert decision.is_new is False
        assert decision.existing_id == "app-1"

    def test_different_company(self):
        entry = TrackedEntry(id="app-1", company_name="Stripe", job_title="Software Engineer Intern")
        record = _screenshot_record(company="Square", job_title="Software Engineer Intern")
        assert match(record, [entry], NOW).is_new is True

    def test_sentinels_never_match(self):
        entry = TrackedEntry(id="app-1", company_name=COMPANY_NOT_SPECIFIED, job_title=POSITION_NOT_SPECIFIED)
        record = _screenshot_record(company=COMPANY_NOT_SPECIFIED, job_title=POSITION_NOT_SPECIFIED)
        assert match(record, [entry], NOW).is_new is True

    def test_first_match_in_store_order_wins(self):
        entries = [
            TrackedEntry(id="app-1", company_name="Stripe", job_title="Software Engineer Intern"),
            TrackedEntry(id="app-2", company_name="Stripe", job_title="Software Engineer"),
        ]
        record = _screenshot_record(company="Stripe", job_title="Software Engineer")
        assert match(record, entries, NOW).existing_id == "app-1"


class TestOverlay:

    def test_sentinels_keep_existing_values(self):
        entry = TrackedEntry(id="app-1", company_name="Stripe", job_title="Software Engineer Intern", location="Austin, TX")
        record = _screenshot_record(company="Stripe", job_title="Software Engineer Intern", location=NOT_SPECIFIED)
        merged = overlay(entry, record, NOW)
        assert merged.location == "Austin, TX"
        assert merged.updated_at == NOW.isoformat()
        assert entry.updated_at is None

    def test_real_values_replace(self):
        entry = TrackedEntry(id="app-1", company_name="Stripe", job_title="Software Engineer Intern")
        record = _screenshot_record(company="Stripe", job_title="Software Engineer Intern", location="Seattle, WA")
        assert overlay(entry, record, NOW).location == "Seattle, WA"

    def test_unknown_keys_survive(self):
        entry = TrackedEntry(id="app-1", company_name="Stripe", job_title="Engineer", priority="high")
        merged = overlay(entry, _screenshot_record(company="Stripe", job_title="Engineer"), NOW)
        assert merged.model_extra["priority"] == "high"

    def test_status_never_regresses(self):
        entry = TrackedEntry(id="app-1", company_name="Acme", job_title="Analyst", status="interview")
        assert overlay(entry, _email_record(company="Acme", job_title="Analyst", status="applied"), NOW).status == "interview"
        assert overlay(entry, _email_record(company="Acme", job_title="Analyst", status="offer"), NOW).status == "offer"


class TestEntryIds:

    def test_format(self):
        entry_id = new_entry_id(SourceType.EMAIL, NOW)
        prefix, millis, suffix = entry_id.split("_")
        assert prefix == "email"
        assert millis == str(int(NOW.timestamp() * 1000))
        assert len(suffix) == 9

    def test_unique(self):
        assert new_entry_id(SourceType.SCREENSHOT, NOW) != new_entry_id(SourceType.SCREENSHOT, NOW)
