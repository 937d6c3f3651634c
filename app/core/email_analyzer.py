"""
Email relevance analysis and mailbox scanning.

Messages arrive already fetched from the mail provider. For each one:
1. Strip HTML, cap the body, collect relevance signals from subject, sender
   and content
2. Score the signals; below the relevance threshold the message is dropped
3. Relevant messages go through the normal extraction pipeline and become an
   EmailDerivedRecord with status, application date and notes
4. scan_messages() deduplicates each record against the tracker and against
   entries proposed earlier in the same scan

One bad message never stops a scan; it is logged and reported in `errors`.
"""

import logging
import re
from collections import Counter
from datetime import date, datetime, timezone
from email.utils import parseaddr, parsedate_to_datetime
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from app.core.config import DEFAULT_CONFIG, PipelineConfig
from app.core.confidence_calculator import ConfidenceCalculator
from app.core.deduplication import match
from app.core.field_extractors import DATE_TOKEN, ExtractionContext, company_from_host, parse_date_lenient, run_extractors
from app.core.record_builder import build_record
from app.core.schemas import (
    EmailAnalysis,
    EmailDerivedRecord,
    EmailSignals,
    FieldName,
    MailMessage,
    ScanError,
    ScanItem,
    ScanReport,
    ScanStats,
    TrackedEntry,
)
from app.core.sentinels import SourceType, is_sentinel
from app.core.text_normalization import normalize_text
from app.core import vocabulary as vocab

logger = logging.getLogger(__name__)


# ============================================================================
# Relevance patterns
# ============================================================================

SUBJECT_PATTERNS = [re.compile(p, re.IGNORECASE) for p in (
    r"internship.*application",
    r"application.*internship",
    r"thank.*you.*(?:for\s+)?applying",
    r"application.*received",
    r"application.*submitted",
    r"confirmation.*application",
    r"your.*application.*(?:for|to)",
    r"application.*status",
    r"application.*update",
    r"interview.*invitation",
    r"invitation.*interview",
    r"next.*steps",
    r"application.*review",
    r"position.*application",
    r"job.*application",
    r"summer.*internship",
    r"co-?op.*application",
    r"graduate.*program",
    r"entry.*level.*position",
    r"online.*assessment",
    r"offer.*letter",
)]

SENDER_PATTERNS = [re.compile(p, re.IGNORECASE) for p in (
    r"no-?reply",
    r"careers?",
    r"recruit",
    r"talent",
    r"\bhr\b",
    r"\bjobs?\b",
    r"hiring",
    r"workday",
    r"greenhouse",
    r"lever",
    r"bamboohr",
    r"jobvite",
    r"smartrecruiters",
    r"successfactors",
    r"icims",
    r"ashbyhq",
)]

AUTOMATED_SENDER_RE = re.compile(r"\b(?:no-?reply|do-?not-?reply|notifications?|mailer|automated)\b", re.IGNORECASE)

KEYWORDS = [
    "application", "internship", "position", "role", "opportunity", "interview",
    "assessment", "coding challenge", "technical screen", "onsite", "virtual interview",
    "phone screen", "recruiter", "hiring manager", "next steps", "offer", "compensation",
    "start date", "background check", "references",
]
KEYWORD_RES = [(kw, re.compile(r"\b" + re.escape(kw) + r"\b")) for kw in KEYWORDS]

STRONG_INDICATORS = [
    "application submitted", "thank you for applying", "application received", "next steps",
    "interview invitation", "coding challenge", "technical assessment", "background check",
    "offer letter", "internship position", "summer internship", "co-op position",
]

NOTE_RULES = [
    (re.compile(r"coding\s+challenge", re.IGNORECASE), "Coding challenge mentioned"),
    (re.compile(r"\binterview", re.IGNORECASE), "Interview scheduled"),
    (re.compile(r"\breferences\b", re.IGNORECASE), "References requested"),
    (re.compile(r"background\s+check", re.IGNORECASE), "Background check required"),
]

APPLICATION_DATE_RE = re.compile(
    r"\b(?:applied\s+on|submitted\s+on|application\s+date\s*:)\s*(" + DATE_TOKEN + r")",
    re.IGNORECASE,
)

HTML_HINT_RE = re.compile(r"<(?:html|body|div|p|br|table|span|a)\b", re.IGNORECASE)


# ============================================================================
# Body and sender helpers
# ============================================================================

def strip_html(body: str) -> str:
    """Plain text of an HTML body; plain-text bodies pass through untouched."""
    if not body or not HTML_HINT_RE.search(body):
        return body or ""
    soup = BeautifulSoup(body, "html.parser")
    for element in soup(["script", "style", "head", "meta", "link"]):
        element.decompose()
    return soup.get_text(separator="\n", strip=True)


def _company_from_display_name(display: str) -> Optional[str]:
    """'Acme Recruiting Team' → 'Acme'."""
    words = [w for w in re.split(r"[\s|,-]+", display) if w]
    kept = [w for w in words if w.lower() not in vocab.RECRUITING_NAME_WORDS]
    if not kept or len(kept) == len(words) or len(kept) > 4:
        return None
    return " ".join(kept)


def company_hint_from_sender(sender: str) -> Optional[str]:
    """
    Company name implied by a From header.

    Examples:
    - "Acme Careers <careers@acme.com>" → "Acme"
    - "jobs@mail.widgets.co.uk" → "Widgets"
    - "Jane <jane@gmail.com>" → None (free mail provider)
    - "Acme Recruiting <no-reply@greenhouse.io>" → "Acme" (tracking system domain)
    """
    display, address = parseaddr(sender or "")
    if "@" not in address:
        return None
    host = address.rsplit("@", 1)[1]
    name = company_from_host(host)
    if name:
        return name
    label = host.lower().split(".")
    if any(part in vocab.JOB_PLATFORM_DOMAINS for part in label) and display:
        return _company_from_display_name(display)
    return None


def _employer_mention(content: str) -> Optional[str]:
    for mention, display in vocab.KNOWN_EMPLOYERS.items():
        if re.search(r"\b" + re.escape(mention) + r"\b", content):
            return display
    return None


def _message_date(message: MailMessage) -> Optional[date]:
    raw = (message.date or "").strip()
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(raw).date()
    except (TypeError, ValueError):
        logger.debug("Unparseable message date %r", raw)
        return None


# ============================================================================
# Signals and record details
# ============================================================================

def collect_signals(subject: str, sender: str, body: str) -> EmailSignals:
    content = f"{subject}\n{sender}\n{body}".lower()
    company = company_hint_from_sender(sender) or _employer_mention(content) or ""
    return EmailSignals(
        subject_match=any(p.search(subject) for p in SUBJECT_PATTERNS),
        sender_match=any(p.search(sender) for p in SENDER_PATTERNS),
        company_resolved=bool(company),
        company_match=company,
        keyword_hits=[kw for kw, regex in KEYWORD_RES if regex.search(content)],
        strong_indicators=[s for s in STRONG_INDICATORS if s in content],
        automated_sender=bool(AUTOMATED_SENDER_RE.search(sender)),
    )


def application_date(text: str, message: MailMessage) -> str:
    """Date mentioned as the application date, else the message date, ISO formatted."""
    sent = _message_date(message)
    for m in APPLICATION_DATE_RE.finditer(text):
        parsed = parse_date_lenient(m.group(1), sent)
        if parsed:
            return parsed
    return sent.isoformat() if sent else ""


def build_notes(text: str) -> str:
    return "; ".join(note for pattern, note in NOTE_RULES if pattern.search(text))


# ============================================================================
# Public API
# ============================================================================

def analyze_email(
    message: MailMessage,
    config: Optional[PipelineConfig] = None,
    now: Optional[datetime] = None,
) -> EmailAnalysis:
    """
    Score one message and, when relevant, extract an EmailDerivedRecord.

    Irrelevant messages come back with record=None so callers can drop them.
    """
    config = config or DEFAULT_CONFIG
    body = strip_html(message.body_text)[: config.email_body_max_chars]
    signals = collect_signals(message.subject, message.sender, body)
    score, method = ConfidenceCalculator.email(signals)
    relevant = ConfidenceCalculator.is_relevant(score, config.email_relevance_threshold)
    logger.debug("Message %s scored %d (%s)", message.id, score, method)

    if not relevant:
        return EmailAnalysis(message_id=message.id, is_relevant=False, score=score, signals=signals)

    text = normalize_text(f"{message.subject}\n\n{body}")
    context = ExtractionContext(
        source=SourceType.EMAIL,
        company_hint=signals.company_match or None,
        config=config,
        reference_date=_message_date(message),
    )
    candidates = run_extractors(text, context)

    record, warnings = build_record(
        candidates,
        source=SourceType.EMAIL,
        text=text,
        extracted_at=now,
        confidence_score=score,
        config=config,
        record_cls=EmailDerivedRecord,
        extra={
            "email_id": message.id,
            "email_subject": message.subject,
            "email_from": message.sender,
            "email_date": message.date,
            "application_date": application_date(text, message),
            "notes": build_notes(text),
        },
    )
    logger.info(
        "Relevant message %s: %s / %s [%s]",
        message.id, record.company, record.job_title, candidates[FieldName.STATUS].value,
    )
    return EmailAnalysis(
        message_id=message.id,
        is_relevant=True,
        score=score,
        signals=signals,
        record=record,
        warnings=warnings,
    )


def _stats(total: int, results: List[ScanItem]) -> ScanStats:
    records = [item.analysis.record for item in results if item.analysis.record is not None]
    companies = {r.company.casefold() for r in records if not is_sentinel(r.company)}
    return ScanStats(
        total_messages=total,
        total_emails_found=len(results),
        new_applications=sum(1 for item in results if item.decision and item.decision.is_new),
        unique_companies=len(companies),
        by_status=dict(Counter(r.status for r in records)),
    )


def scan_messages(
    messages: Sequence[MailMessage],
    existing: Sequence[TrackedEntry] = (),
    config: Optional[PipelineConfig] = None,
    now: Optional[datetime] = None,
) -> ScanReport:
    """
    Analyze a batch of fetched messages and propose tracker changes.

    Irrelevant messages are left out of the results entirely. Each relevant
    record is matched against the tracker plus every entry this scan already
    proposed, so two mails about one application yield one new entry.
    """
    config = config or DEFAULT_CONFIG
    now = now or datetime.now(timezone.utc)
    known: List[TrackedEntry] = list(existing)
    results: List[ScanItem] = []
    errors: List[ScanError] = []
    batch_size = max(1, config.email_batch_size)

    for start in range(0, len(messages), batch_size):
        batch = messages[start:start + batch_size]
        for message in batch:
            try:
                analysis = analyze_email(message, config, now)
                if not analysis.is_relevant:
                    continue
                decision = match(analysis.record, known, now)
                if decision.is_new:
                    known.append(decision.entry)
                else:
                    known = [decision.entry if e.id == decision.existing_id else e for e in known]
                results.append(ScanItem(message_id=message.id, analysis=analysis, decision=decision))
            except Exception as e:
                logger.error("Failed to analyze message %s", message.id, exc_info=True)
                errors.append(ScanError(message_id=message.id, error=str(e)))

        logger.info(
            "Scanned %d/%d messages, %d relevant so far",
            min(start + batch_size, len(messages)), len(messages), len(results),
        )

    stats = _stats(len(messages), results)
    logger.info(
        "Scan complete: %d relevant of %d, %d new, %d companies",
        stats.total_emails_found, stats.total_messages, stats.new_applications, stats.unique_companies,
    )
    return ScanReport(results=results, errors=errors, stats=stats)
