"""
Tests for email relevance scoring, email-derived records and mailbox scans.
"""

from datetime import datetime, timezone

import pytest

from app.core import email_analyzer
from app.core.email_analyzer import (
    analyze_email,
    application_date,
    build_notes,
    company_hint_from_sender,
    scan_messages,
    strip_html,
)
from app.core.schemas import MailMessage, TrackedEntry

NOW = datetime(2025, 3, 2, 9, 0, tzinfo=timezone.utc)

APPLIED = MailMessage(
    id="m1",
    subject="Thank you for applying to Software Engineer Intern",
    sender="Acme Careers <no-reply@acme.com>",
    date="2025-03-01T10:00:00Z",
    body_text=(
        "Hi Sam,\n\n"
        "Thank you for applying to the Software Engineer Intern position at Acme. "
        "We have received your application and will review it shortly.\n\n"
        "Best,\nAcme Recruiting"
    ),
)

INTERVIEW = MailMessage(
    id="m2",
    subject="Interview invitation: Software Engineer Intern",
    sender="Acme Careers <careers@acme.com>",
    date="2025-03-10T15:30:00Z",
    body_text=(
        "Hi Sam,\n\n"
        "We would like to invite you to interview for the Software Engineer Intern position. "
        "Next steps: pick a time that works for you."
    ),
)

LUNCH = MailMessage(
    id="m3",
    subject="Lunch on Friday?",
    sender="Pat <pat@gmail.com>",
    date="2025-03-05T12:00:00Z",
    body_text="Want to grab lunch on Friday at noon?",
)


class TestSenderHints:

    @pytest.mark.parametrize("sender, expected", [
        ("Acme Careers <careers@acme.com>", "Acme"),
        ("jobs@mail.widgets.co.uk", "Widgets"),
        ("Jane <jane@gmail.com>", None),
        ("Acme Recruiting <no-reply@greenhouse.io>", "Acme"),
        ("", None),
    ])
    def test_company_hint_from_sender(self, sender, expected):
        assert company_hint_from_sender(sender) == expected


class TestHtmlStripping:

    def test_html_body(self):
        html = (
            "<html><head><title>Update</title><style>p {color: red}</style></head>"
            "<body><p>Hello</p><script>track()</script><p>World &amp; co</p></body></html>"
        )
        assert strip_html(html) == "Hello\nWorld & co"

    def test_plain_text_untouched(self):
        assert strip_html("Salary < 100k is fine") == "Salary < 100k is fine"

    def test_empty(self):
        assert strip_html("") == ""


class TestAnalyzeEmail:

    def test_relevant_application(self):
        analysis = analyze_email(APPLIED, now=NOW)
        assert analysis.is_relevant is True
        assert analysis.score >= 30
        assert analysis.signals.subject_match is True
        assert analysis.signals.sender_match is True
        assert analysis.signals.automated_sender is True
        assert "thank you for applying" in analysis.signals.strong_indicators

        record = analysis.record
        assert record.company == "Acme"
        assert record.job_title == "Software Engineer Intern"
        assert record.status == "applied"
        assert record.email_id == "m1"
        assert record.email_from == "Acme Careers <no-reply@acme.com>"
        assert record.application_date == "2025-03-01"
        assert record.extraction_metadata.confidence == analysis.score
        assert record.extraction_metadata.extraction_date == NOW

    def test_irrelevant_message(self):
        analysis = analyze_email(LUNCH, now=NOW)
        assert analysis.is_relevant is False
        assert analysis.score == 0
        assert analysis.record is None

    def test_rejection(self):
        message = MailMessage(
            id="m4",
            subject="Your application to Acme",
            sender="Acme Talent <talent@acme.com>",
            body_text=(
                "Thank you for your interest in Acme. Unfortunately, we have decided "
                "not to move forward with your application."
            ),
        )
        assert analyze_email(message, now=NOW).record.status == "rejected"

    def test_offer(self):
        message = MailMessage(
            id="m5",
            subject="Offer letter",
            sender="Acme HR <hr@acme.com>",
            body_text="We are pleased to offer you the position of Data Analyst.",
        )
        assert analyze_email(message, now=NOW).record.status == "offer"


class TestRecordDetails:

    def test_application_date_phrase(self):
        message = MailMessage(id="x", date="2025-04-01T00:00:00Z")
        assert application_date("You applied on March 3, 2025 for the role", message) == "2025-03-03"

    def test_application_date_falls_back_to_message_date(self):
        message = MailMessage(id="x", date="Tue, 01 Apr 2025 08:00:00 +0000")
        assert application_date("No dates in here", message) == "2025-04-01"

    def test_application_date_unknown(self):
        assert application_date("No dates in here", MailMessage(id="x")) == ""

    def test_notes(self):
        text = "Please complete the coding challenge and send two references"
        assert build_notes(text) == "Coding challenge mentioned; References requested"

    def test_no_notes(self):
        assert build_notes("Thanks for applying") == ""


class TestScanMessages:

    def test_irrelevant_messages_excluded(self):
        report = scan_messages([APPLIED, LUNCH], now=NOW)
        assert [item.message_id for item in report.results] == ["m1"]
        assert report.stats.total_messages == 2
        assert report.stats.total_emails_found == 1

    def test_two_mails_one_application(self):
        report = scan_messages([APPLIED, LUNCH, INTERVIEW], now=NOW)
        first, second = report.results
        assert first.decision.is_new is True
        assert second.decision.is_new is False
        assert second.decision.existing_id == first.decision.entry.id
        assert second.decision.entry.status == "interview"

        stats = report.stats
        assert stats.total_messages == 3
        assert stats.total_emails_found == 2
        assert stats.new_applications == 1
        assert stats.unique_companies == 1
        assert stats.by_status == {"applied": 1, "interview": 1}

    def test_existing_tracker_entry(self):
        existing = [TrackedEntry(id="app-1", company_name="Acme", job_title="Software Engineer Intern", status="applied")]
        report = scan_messages([INTERVIEW], existing, now=NOW)
        decision = report.results[0].decision
        assert decision.is_new is False
        assert decision.existing_id == "app-1"
        assert decision.entry.status == "interview"

    def test_one_bad_message_does_not_stop_scan(self, monkeypatch):
        real = email_analyzer.analyze_email

        def flaky(message, config=None, now=None):
            if message.id == "bad":
                raise RuntimeError("mailbox hiccup")
            return real(message, config, now)

        monkeypatch.setattr(email_analyzer, "analyze_email", flaky)
        bad = APPLIED.model_copy(update={"id": "bad"})
        report = scan_messages([bad, INTERVIEW], now=NOW)
        assert [e.message_id for e in report.errors] == ["bad"]
        assert "mailbox hiccup" in report.errors[0].error
        assert [item.message_id for item in report.results] == ["m2"]

    def test_empty_batch(self):
        report = scan_messages([], now=NOW)
        assert report.results == []
        assert report.stats.total_messages == 0
