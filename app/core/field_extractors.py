"""
Field extractors: one heuristic per semantic field of a job record.

Every extractor implements FieldExtractor.extract(text, context) and returns a
FieldCandidate whose value is either a real value or the field's sentinel. No
extractor depends on another's output; the only shared input is the
ExtractionContext (source path, company hint, configuration), built once per
unit by the caller.

Strategy order inside an extractor is first-match-wins unless noted.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union

from app.core.config import DEFAULT_CONFIG, PipelineConfig
from app.core.schemas import FieldCandidate, FieldName
from app.core.sentinels import SourceType, is_sentinel, sentinels_for
from app.core.text_normalization import extract_email_flexible
from app.core import vocabulary as vocab

logger = logging.getLogger(__name__)

CandidateValue = Union[str, List[str]]
ExtractResult = Optional[Tuple[CandidateValue, str]]


@dataclass(frozen=True)
class ExtractionContext:
    """Per-unit inputs shared by all extractors. Never mutated."""
    source: SourceType = SourceType.SCREENSHOT
    company_hint: Optional[str] = None
    config: PipelineConfig = DEFAULT_CONFIG
    # Year used for dates written without one ("apply by March 3")
    reference_date: Optional[date] = None


# ============================================================================
# Shared helpers
# ============================================================================

EMAIL_RE = re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE)
PHONE_RE = re.compile(r"(?<!\d)(?:\+?\d{1,3}[-.\s]?)?(?:\(?\d{3}\)?[-.\s]?)\d{3}[-.\s]?\d{4}\b")
URL_RE = re.compile(r"\b(?:https?://|www\.)[^\s<>()\"']+", re.IGNORECASE)
LINKEDIN_RE = re.compile(r"\b(?:https?://)?(?:www\.)?linkedin\.com/(?:in|company)/[^\s)>\]]+", re.IGNORECASE)

MONTHS = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?"
DATE_TOKEN = (
    r"(?:\d{4}-\d{1,2}-\d{1,2}"
    r"|\d{1,2}/\d{1,2}/\d{2,4}"
    r"|" + MONTHS + r"\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s+\d{4})?"
    r"|\d{1,2}(?:st|nd|rd|th)?\s+" + MONTHS + r"(?:,?\s+\d{4})?)"
)

DATE_FORMATS_WITH_YEAR = ["%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%B %d %Y", "%b %d %Y", "%d %B %Y", "%d %b %Y"]
DATE_FORMATS_NO_YEAR = ["%B %d", "%b %d", "%d %B", "%d %b"]


def _title_case_each_word(text: str) -> str:
    return " ".join(w[0].upper() + w[1:].lower() if w else w for w in text.split(" "))


def parse_date_lenient(token: str, reference: Optional[date] = None) -> Optional[str]:
    """
    Parse a loosely written date into ISO YYYY-MM-DD. Returns None when the token
    is not a real calendar date.

    Examples:
    - "March 15, 2025" → "2025-03-15"
    - "15th Mar 2025" → "2025-03-15"
    - "3/15/25" → "2025-03-15"
    - "Feb 30, 2025" → None
    - "Sept 1" → "<reference year>-09-01"
    """
    if not token:
        return None

    cleaned = re.sub(r"(\d)(?:st|nd|rd|th)\b", r"\1", token.strip(), flags=re.IGNORECASE)
    cleaned = cleaned.replace(",", " ").replace(".", " ")
    cleaned = re.sub(r"\bsept\b", "sep", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    for fmt in DATE_FORMATS_WITH_YEAR:
        try:
            return datetime.strptime(cleaned, fmt).date().isoformat()
        except ValueError:
            continue

    year = (reference or date.today()).year
    for fmt in DATE_FORMATS_NO_YEAR:
        try:
            return datetime.strptime(f"{cleaned} {year}", f"{fmt} %Y").date().isoformat()
        except ValueError:
            continue
    return None


def registrable_label(host: str) -> Optional[str]:
    """
    The label a person would call the company for a host name.

    Examples:
    - "careers.acme.com" → "acme"
    - "mail.widgets.co.uk" → "widgets"
    - "localhost" → None
    """
    labels = [l for l in host.lower().strip(".").split(".") if l]
    while labels and labels[0] in vocab.DOMAIN_SUBDOMAIN_PREFIXES:
        labels = labels[1:]
    if len(labels) < 2:
        return None
    if len(labels) >= 3 and labels[-2] in vocab.SECOND_LEVEL_TLDS and len(labels[-1]) == 2:
        return labels[-3]
    return labels[-2]


def format_company_name(label: str) -> str:
    """'acme' → 'Acme', 'jane-street' → 'Jane Street'."""
    words = [w for w in re.split(r"[-_]+", label) if w]
    return " ".join(w[0].upper() + w[1:] for w in words)


def company_from_host(host: str) -> Optional[str]:
    """Company name for a host, or None for mail providers and job platforms."""
    label = registrable_label(host)
    if not label or label in vocab.FREE_MAIL_PROVIDERS or label in vocab.JOB_PLATFORM_DOMAINS:
        return None
    return format_company_name(label)


def _lines(text: str) -> List[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def _strip_bullet(line: str) -> str:
    return re.sub(r"^(?:•|\d{1,2}[.)])\s*", "", line).strip()


def _dedupe(values: Sequence[str]) -> List[str]:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


# ============================================================================
# Extractor interface
# ============================================================================

class FieldExtractor(ABC):
    """
    Common interface for all field extractors.

    Subclasses implement _extract() and return (value, method) or None. The
    public extract() never raises and never returns None: misses, empty values
    and internal errors all become the field's sentinel with found=False.
    """

    field: FieldName

    def extract(self, text: str, context: Optional[ExtractionContext] = None) -> FieldCandidate:
        context = context or ExtractionContext()
        try:
            result = self._extract(text or "", context)
        except Exception:
            logger.warning("Extractor for '%s' failed; using default", self.field.value, exc_info=True)
            return self.default(context)

        if result is None:
            return self.default(context)
        value, method = result
        if is_sentinel(value):
            return self.default(context)

        logger.debug("%s=%r via %s", self.field.value, value, method)
        return FieldCandidate(field=self.field, value=value, found=True, method=method)

    def sentinel(self, context: ExtractionContext) -> CandidateValue:
        return sentinels_for(context.source).generic

    def default(self, context: ExtractionContext) -> FieldCandidate:
        return FieldCandidate(field=self.field, value=self.sentinel(context), found=False, method="default")

    @abstractmethod
    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        ...


class ListFieldExtractor(FieldExtractor):
    """List-valued field: sentinel is the empty list, output deduplicated and capped."""

    def sentinel(self, context: ExtractionContext) -> CandidateValue:
        return []

    def cap(self, context: ExtractionContext) -> Optional[int]:
        return None

    def extract(self, text: str, context: Optional[ExtractionContext] = None) -> FieldCandidate:
        context = context or ExtractionContext()
        candidate = super().extract(text, context)
        if not candidate.found:
            return candidate
        values = _dedupe(candidate.value)
        limit = self.cap(context)
        if limit is not None:
            values = values[:limit]
        return candidate.model_copy(update={"value": values})


class KeywordClassifier(FieldExtractor):
    """Single-label classifier: ordered (label, regex) groups tested against lowercased text."""

    groups: Sequence[Tuple[str, str]] = ()

    def __init__(self):
        self._compiled = [(label, re.compile(pattern)) for label, pattern in self.groups]

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        lowered = text.lower()
        for label, pattern in self._compiled:
            if pattern.search(lowered):
                return label, "keyword"
        return None


# ============================================================================
# Company
# ============================================================================

LEGAL_SUFFIX_ALT = "|".join(re.escape(s) for s in sorted(vocab.LEGAL_SUFFIXES, key=len, reverse=True))
LEGAL_SUFFIX_RE = re.compile(
    r"((?:[A-Z][\w&'.-]*[ \t]+){0,3}[A-Z][\w&'.-]*),?[ \t]+(" + LEGAL_SUFFIX_ALT + r")(?!\w)"
)
ONE_WORD_RE = re.compile(r"^[A-Z][A-Za-z&'.-]*$")
PROPER_NOUN_CONNECTORS = {"of", "and", "&", "the", "for", "de"}


class CompanyExtractor(FieldExtractor):
    field = FieldName.COMPANY

    def sentinel(self, context: ExtractionContext) -> CandidateValue:
        return sentinels_for(context.source).company

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        if context.company_hint and not is_sentinel(context.company_hint):
            return context.company_hint.strip(), "company_hint"

        legal = self._from_legal_suffix(text)
        if legal:
            return legal, "legal_suffix"

        if context.source == SourceType.SCREENSHOT:
            header = self._from_header_lines(text)
            if header:
                return header, "proper_noun_line"

        for m in URL_RE.finditer(text):
            host = re.sub(r"^(?:https?://)", "", m.group(0), flags=re.IGNORECASE).split("/")[0]
            name = company_from_host(host)
            if name:
                return name, "url_domain"
        return None

    @staticmethod
    def _from_legal_suffix(text: str) -> Optional[str]:
        for m in LEGAL_SUFFIX_RE.finditer(text):
            words = m.group(1).split()
            while words and words[0].lower() in vocab.COMPANY_LEAD_STOPWORDS:
                words = words[1:]
            if not words:
                continue
            return f"{' '.join(words)} {m.group(2)}"
        return None

    @staticmethod
    def _from_header_lines(text: str) -> Optional[str]:
        for line in _lines(text)[:5]:
            if _looks_like_company_line(line):
                return line
        return None


def _looks_like_company_line(line: str) -> bool:
    """
    A short proper-noun line such as "Stripe" or "Bank of America".

    Rejects lines with digits, punctuation typical of sentences or labels,
    title words, locations and common page chrome.
    """
    if not (2 <= len(line) <= 50):
        return False
    if re.search(r"[\d:@/|,!?•]", line) or line.endswith("."):
        return False
    lowered = line.lower()
    if lowered in vocab.COMPANY_LINE_BLACKLIST:
        return False
    words = line.split()
    if not (1 <= len(words) <= 5):
        return False
    if any(w.lower() in vocab.TITLE_ROLES or w.lower() in vocab.TITLE_INDICATORS for w in words):
        return False
    if re.search(r"\b(?:remote|hybrid|on-?site|full-?time|part-?time|internship|contract)\b", lowered):
        return False
    if any(city.lower() == lowered for city in vocab.KNOWN_CITIES):
        return False
    return all(ONE_WORD_RE.match(w) or w.lower() in PROPER_NOUN_CONNECTORS for w in words)


# ============================================================================
# Job title
# ============================================================================

def _alternation(words: Sequence[str]) -> str:
    return "|".join("[ \\t-]".join(re.escape(part) for part in w.split(" ")) for w in sorted(words, key=len, reverse=True))


SENIORITY_PREFIX = r"(?:(?:senior|sr\.?|junior|jr\.?|lead|staff|principal|associate|entry[- ]level)[ \t]+)?"
INTERN_SUFFIX = r"(?P<intern>[ \t]+(?:intern(?:ship)?|co-?op))?"
TITLE_RE = re.compile(
    r"(?<![A-Za-z])" + SENIORITY_PREFIX
    + r"(?:" + _alternation(vocab.TITLE_FAMILIES) + r")"
    + r"(?:[ \t]+(?:" + _alternation(vocab.TITLE_FAMILIES) + r"))?"
    + r"[ \t]+(?P<role>" + _alternation(vocab.TITLE_ROLES) + r")"
    + INTERN_SUFFIX + r"(?![A-Za-z])",
    re.IGNORECASE,
)
# Discipline nouns ("software engineering") only count as a title with an
# intern suffix or when they make up the whole line.
DISCIPLINE_ROLES = {"engineering", "development", "science", "design", "analytics", "management"}

LABELED_TITLE_RE = re.compile(r"^(?:job title|position|role|title)\s*:\s*(.{2,80})$", re.IGNORECASE | re.MULTILINE)
APPLICATION_FOR_RE = re.compile(
    r"\b(?:applying|application|applied|interest)\s+(?:to|for|in)\s+(?:the\s+|our\s+)?(?:position\s+of\s+)?"
    r"([A-Za-z][A-Za-z/&+ -]{2,60}?)\s+(?:position|role|opening|internship|program)\b",
    re.IGNORECASE,
)
TITLE_INDICATOR_RE = re.compile(r"\b(?:" + "|".join(vocab.TITLE_INDICATORS) + r")s?\b", re.IGNORECASE)


def _tidy_title(title: str, context: ExtractionContext) -> str:
    title = _strip_bullet(title).strip(" -:|")
    if context.company_hint:
        title = re.sub(r"\s+(?:at|@|-)\s+" + re.escape(context.company_hint) + r".*$", "", title, flags=re.IGNORECASE)
    title = re.sub(r"\s+at\s+[A-Z][\w&. ]*$", "", title)
    if title.islower():
        words = []
        for w in title.split(" "):
            words.append(w.upper() if w in vocab.TITLE_ACRONYMS else _title_case_each_word(w))
        title = " ".join(words)
    return title.strip()


class JobTitleExtractor(FieldExtractor):
    field = FieldName.JOB_TITLE

    def sentinel(self, context: ExtractionContext) -> CandidateValue:
        return sentinels_for(context.source).job_title

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        keyword = self._from_title_keywords(text)
        if keyword:
            return _tidy_title(keyword, context), "title_keyword"

        m = LABELED_TITLE_RE.search(text)
        if m:
            return _tidy_title(m.group(1), context), "labeled_line"
        m = APPLICATION_FOR_RE.search(text)
        if m:
            return _tidy_title(m.group(1), context), "application_phrase"

        for line in _lines(text):
            if not (5 <= len(line) <= 80):
                continue
            lowered = line.lower()
            if "company" in lowered or "about" in lowered:
                continue
            if TITLE_INDICATOR_RE.search(line):
                return _tidy_title(line, context), "indicator_line"
        return None

    @staticmethod
    def _from_title_keywords(text: str) -> Optional[str]:
        for line in _lines(text):
            core = _strip_bullet(line)
            for m in TITLE_RE.finditer(core):
                role = m.group("role").lower()
                whole_line = m.group(0).strip() == core.strip(" .")
                if role in DISCIPLINE_ROLES and not m.group("intern") and not whole_line:
                    continue
                return m.group(0).strip()
        return None


# ============================================================================
# Location
# ============================================================================

CITY_STATE_RE = re.compile(r"\b([A-Z][A-Za-z.'-]+(?:[ \t][A-Z][A-Za-z.'-]+){0,2}),[ \t]*([A-Z]{2})\b")
CITY_REGION_RE = re.compile(r"\b([A-Z][A-Za-z.'-]+(?:[ \t][A-Z][A-Za-z.'-]+){0,2}),[ \t]*([A-Z][A-Za-z]+(?:[ \t][A-Z][A-Za-z]+)?)\b")
LABELED_LOCATION_RE = re.compile(r"^(?:location|office location|based in|work location)\s*:\s*(.{2,80})$", re.IGNORECASE | re.MULTILINE)
LOCATION_LEAD_WORDS = {"location", "located", "based", "office", "in", "at", "hq", "headquarters", "near"}
ARRANGEMENT_LOCATION_RE = re.compile(r"\b(remote|hybrid|on-?site|on site|in-office)\b", re.IGNORECASE)


def _clean_city(city: str) -> Optional[str]:
    words = city.split()
    while words and words[0].lower() in LOCATION_LEAD_WORDS:
        words = words[1:]
    if not words or any(w.lower().strip(".") in vocab.NOT_A_CITY for w in words):
        return None
    return " ".join(words)


class LocationExtractor(FieldExtractor):
    field = FieldName.LOCATION

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        found: List[Tuple[str, str]] = []

        m = ARRANGEMENT_LOCATION_RE.search(text)
        if m:
            word = m.group(1).lower()
            label = "Remote" if word == "remote" else "Hybrid" if word == "hybrid" else "On-site"
            found.append((label, "arrangement_keyword"))

        found.extend((loc, "city_region") for loc in self._city_region_matches(text))

        lowered = text.lower()
        positions = []
        for city in vocab.KNOWN_CITIES:
            cm = re.search(r"(?<![a-z])" + re.escape(city.lower()) + r"(?![a-z])", lowered)
            if cm:
                positions.append((cm.start(), city))
        found.extend((city, "known_city") for _, city in sorted(positions))

        m = LABELED_LOCATION_RE.search(text)
        if m:
            found.append((m.group(1).strip(), "labeled_line"))

        seen = set()
        unique = []
        for value, method in found:
            if value.lower() not in seen:
                seen.add(value.lower())
                unique.append((value, method))
        return unique[0] if unique else None

    @staticmethod
    def _city_region_matches(text: str) -> List[str]:
        hits: List[Tuple[int, str]] = []
        for m in CITY_STATE_RE.finditer(text):
            city = _clean_city(m.group(1))
            if city and m.group(2) in vocab.US_STATES:
                hits.append((m.start(1), f"{city}, {m.group(2)}"))
        for m in CITY_REGION_RE.finditer(text):
            region = m.group(2)
            lowered = region.lower()
            known = (
                lowered in vocab.COUNTRIES
                or lowered in vocab.US_STATE_NAMES
                or lowered in vocab.MULTI_WORD_REGIONS
            )
            if not known:
                # "Paris, France Full-time": keep the first word of a two-word match
                first = lowered.split()[0]
                if first in vocab.COUNTRIES or first in vocab.US_STATE_NAMES:
                    region = region.split()[0]
                    known = True
            city = _clean_city(m.group(1))
            if city and known:
                hits.append((m.start(1), f"{city}, {region}"))
        return [value for _, value in sorted(hits)]


# ============================================================================
# Salary
# ============================================================================

AMOUNT = r"(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?(?:\s?[kK](?![A-Za-z]))?"
PERIOD = r"(?:\s*(?:/|per|an|a)\s*(?:hour|hr|year|yr|month|mo|week|wk|annum))"
CURRENCY_SALARY_RE = re.compile(
    r"[$€£]\s?" + AMOUNT + r"(?P<range>\s*(?:-|to)\s*[$€£]?\s?" + AMOUNT + r")?(?P<period>" + PERIOD + r")?",
    re.IGNORECASE,
)
K_RANGE_SALARY_RE = re.compile(r"\b\d{2,3}\s?[kK]\s*(?:-|to)\s*\d{2,3}\s?[kK]\b")
LABELED_SALARY_RE = re.compile(
    r"^(?:salary|compensation|pay|pay range|salary range|hourly rate|stipend)\s*:\s*(.{2,80})$",
    re.IGNORECASE | re.MULTILINE,
)
UNPAID_MARKERS = [
    (re.compile(r"\bunpaid\b", re.IGNORECASE), "Unpaid"),
    (re.compile(r"\bstipend\b", re.IGNORECASE), "Stipend provided"),
    (re.compile(r"\bvolunteer\b", re.IGNORECASE), "Volunteer (unpaid)"),
]


class SalaryExtractor(FieldExtractor):
    field = FieldName.SALARY

    def sentinel(self, context: ExtractionContext) -> CandidateValue:
        return sentinels_for(context.source).salary

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        for m in CURRENCY_SALARY_RE.finditer(text):
            amount = m.group(0).strip()
            # A bare "$5" is usually not pay; ranges, periods, "k" and thousands are.
            if m.group("range") or m.group("period") or re.search(r"[kK]|\d{4,}|,\d{3}", amount):
                return amount, "currency_amount"

        m = K_RANGE_SALARY_RE.search(text)
        if m:
            return m.group(0), "k_range"

        m = LABELED_SALARY_RE.search(text)
        if m:
            return m.group(1).strip(), "labeled_line"

        for pattern, label in UNPAID_MARKERS:
            if pattern.search(text):
                return label, "pay_marker"
        return None


# ============================================================================
# Skills
# ============================================================================

def _skill_patterns() -> List[Tuple[str, re.Pattern]]:
    patterns = []
    for category in vocab.SKILL_VOCABULARY.values():
        for canonical, aliases in category.items():
            for alias in aliases:
                body = r"\s+".join(re.escape(part) for part in alias.split(" "))
                regex = re.compile(r"(?<![\w+#.])" + body + r"(?![\w+#])", re.IGNORECASE)
                patterns.append((canonical, regex))
    return patterns


SKILL_PATTERNS = _skill_patterns()


class SkillsExtractor(ListFieldExtractor):
    field = FieldName.SKILLS

    def cap(self, context: ExtractionContext) -> Optional[int]:
        return context.config.skills_cap

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        first_seen: Dict[str, int] = {}
        for canonical, regex in SKILL_PATTERNS:
            m = regex.search(text)
            if m and (canonical not in first_seen or m.start() < first_seen[canonical]):
                first_seen[canonical] = m.start()
        if not first_seen:
            return None
        ordered = sorted(first_seen, key=lambda k: first_seen[k])
        return ordered, "vocabulary"


# ============================================================================
# Requirements
# ============================================================================

LABELED_REQUIREMENT_RE = re.compile(
    r"^(?:required|preferred|must[- ]haves?|nice[- ]to[- ]haves?|requirements?|qualifications?|"
    r"minimum qualifications|preferred qualifications|basic qualifications)\s*:\s*(.{5,})$",
    re.IGNORECASE,
)
REQUIREMENT_HEADER_RE = re.compile(
    r"^(?:requirements|qualifications|minimum qualifications|preferred qualifications|basic qualifications|"
    r"required skills|must[- ]haves?|what we're looking for|what you'll need|what you bring|who you are|you have|"
    r"you should have)\s*:?$",
    re.IGNORECASE,
)
SECTION_HEADER_RE = re.compile(
    r"^(?:responsibilities|what you'll do|about (?:us|the role|the team|the job)|benefits|perks|"
    r"compensation|how to apply|why join us|what we offer|job description|overview)\s*:?$",
    re.IGNORECASE,
)
YEARS_EXPERIENCE_RE = re.compile(r"\b\d+\+?\s*(?:-\s*\d+\s*)?(?:years?|yrs?)\b.*\bexperience\b|\bexperience\b.*\b\d+\+?\s*(?:years?|yrs?)\b", re.IGNORECASE)
DEGREE_RE = re.compile(r"\b(?:bachelor'?s?|master'?s?|ph\.?d\.?|doctorate|mba|b\.s\.|m\.s\.|degree)\b", re.IGNORECASE)
ENROLLMENT_RE = re.compile(
    r"\b(?:pursuing|currently enrolled|enrolled in|currently a student|rising (?:sophomore|junior|senior)|"
    r"graduating in|expected graduation|graduation date)\b",
    re.IGNORECASE,
)
MIN_REQUIREMENT_CHARS = 5
MAX_REQUIREMENT_CHARS = 300


class RequirementsExtractor(ListFieldExtractor):
    field = FieldName.REQUIREMENTS

    def cap(self, context: ExtractionContext) -> Optional[int]:
        return context.config.requirements_cap

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        found: List[str] = []
        in_section = False

        for raw in text.split("\n"):
            line = raw.strip()
            if not line:
                in_section = False
                continue
            if REQUIREMENT_HEADER_RE.match(line):
                in_section = True
                continue
            if SECTION_HEADER_RE.match(line):
                in_section = False
                continue

            item = _strip_bullet(line)
            m = LABELED_REQUIREMENT_RE.match(item)
            if m:
                item = m.group(1).strip()
            elif not (
                in_section
                or YEARS_EXPERIENCE_RE.search(item)
                or DEGREE_RE.search(item)
                or ENROLLMENT_RE.search(item)
            ):
                continue

            if MIN_REQUIREMENT_CHARS <= len(item) <= MAX_REQUIREMENT_CHARS:
                found.append(item)

        return (found, "pattern_lines") if found else None


# ============================================================================
# Benefits
# ============================================================================

def _benefit_patterns() -> List[Tuple[List[re.Pattern], str]]:
    compiled = []
    for keywords, label in vocab.BENEFIT_KEYWORDS:
        patterns = []
        for kw in keywords:
            if len(kw) <= 4:
                patterns.append(re.compile(r"\b" + re.escape(kw) + r"\b"))
            else:
                patterns.append(re.compile(re.escape(kw)))
        compiled.append((patterns, label))
    return compiled


BENEFIT_PATTERNS = _benefit_patterns()


class BenefitsExtractor(ListFieldExtractor):
    field = FieldName.BENEFITS

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        lowered = text.lower()
        found = [label for patterns, label in BENEFIT_PATTERNS if any(p.search(lowered) for p in patterns)]
        return (found, "keyword") if found else None


# ============================================================================
# Single-label classifiers
# ============================================================================

class JobTypeExtractor(KeywordClassifier):
    field = FieldName.JOB_TYPE
    groups = vocab.JOB_TYPE_GROUPS


class WorkArrangementExtractor(KeywordClassifier):
    field = FieldName.WORK_ARRANGEMENT
    groups = vocab.WORK_ARRANGEMENT_GROUPS


class SeniorityExtractor(KeywordClassifier):
    """Undetected seniority falls back to the path default, reported with found=False."""
    field = FieldName.SENIORITY
    groups = vocab.SENIORITY_GROUPS

    def sentinel(self, context: ExtractionContext) -> CandidateValue:
        return sentinels_for(context.source).seniority_default


class DepartmentExtractor(KeywordClassifier):
    field = FieldName.DEPARTMENT
    groups = vocab.DEPARTMENT_GROUPS


class IndustryExtractor(KeywordClassifier):
    field = FieldName.INDUSTRY
    groups = vocab.INDUSTRY_GROUPS


class SecurityClearanceExtractor(KeywordClassifier):
    field = FieldName.SECURITY_CLEARANCE
    groups = vocab.SECURITY_CLEARANCE_GROUPS


class StatusExtractor(KeywordClassifier):
    """
    Application status of an email (email path only).

    Precedence is offer > rejected > interview > applied. A message matching
    nothing is still "applied", but reported with found=False.
    """
    field = FieldName.STATUS
    groups = vocab.STATUS_GROUPS

    def sentinel(self, context: ExtractionContext) -> CandidateValue:
        return "applied"


# ============================================================================
# Contact info and dates
# ============================================================================

class ContactInfoExtractor(FieldExtractor):
    field = FieldName.CONTACT_INFO

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        parts = []
        email = extract_email_flexible(text)
        if email:
            parts.append(email)
        phone = PHONE_RE.search(text)
        if phone:
            parts.append(phone.group(0).strip())
        linkedin = LINKEDIN_RE.search(text)
        if linkedin:
            parts.append(linkedin.group(0).rstrip(".,;"))
        return (" | ".join(parts), "contact_patterns") if parts else None


DEADLINE_RE = re.compile(
    r"\b(?:apply by|application deadline|deadline|due date|due|applications? close[sd]?(?: on)?|"
    r"closing date|submit by|no later than)\s*:?\s*(?:on\s+)?(" + DATE_TOKEN + r")",
    re.IGNORECASE,
)


class ApplicationDeadlineExtractor(FieldExtractor):
    field = FieldName.APPLICATION_DEADLINE

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        for m in DEADLINE_RE.finditer(text):
            parsed = parse_date_lenient(m.group(1), context.reference_date)
            if parsed:
                return parsed, "deadline_phrase"
            logger.debug("Discarding unparseable deadline %r", m.group(1))
        return None


START_DATE_LABEL_RE = re.compile(r"\b(?:start date|starts?|starting|start(?:ing)? on|start(?:ing)? in)\s*:?\s*(" + DATE_TOKEN + r")", re.IGNORECASE)
SEASON_RE = re.compile(r"\b(summer|fall|autumn|spring|winter)\s+(20\d{2})\b", re.IGNORECASE)
IMMEDIATE_START_RE = re.compile(r"\b(?:start immediately|immediate start|asap start|start asap)\b", re.IGNORECASE)


class StartDateExtractor(FieldExtractor):
    field = FieldName.START_DATE

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        for m in START_DATE_LABEL_RE.finditer(text):
            parsed = parse_date_lenient(m.group(1), context.reference_date)
            if parsed:
                return parsed, "start_phrase"
        m = SEASON_RE.search(text)
        if m:
            return f"{m.group(1).capitalize()} {m.group(2)}", "season"
        if IMMEDIATE_START_RE.search(text):
            return "Immediate", "immediate"
        return None


DURATION_RE = re.compile(r"\b(\d{1,2})(?:\s*(?:-|to)\s*(\d{1,2}))?[\s-]*(week|month)s?\b(?!\s+ago)", re.IGNORECASE)
LABELED_DURATION_RE = re.compile(r"^(?:duration|length|program length)\s*:\s*(.{2,60})$", re.IGNORECASE | re.MULTILINE)


class DurationExtractor(FieldExtractor):
    field = FieldName.DURATION

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        m = LABELED_DURATION_RE.search(text)
        if m:
            return m.group(1).strip(), "labeled_line"
        m = DURATION_RE.search(text)
        if m:
            low, high, unit = m.group(1), m.group(2), m.group(3).lower()
            count = f"{low}-{high}" if high else low
            plural = "" if not high and low == "1" else "s"
            return f"{count} {unit}{plural}", "duration_phrase"
        return None


# ============================================================================
# Application process
# ============================================================================

APPLY_URL_HINTS = ("apply", "career", "job", "greenhouse", "lever.co", "workday", "ashbyhq",
                   "smartrecruiters", "icims", "jobvite", "recruit")
HOW_TO_APPLY_RE = re.compile(r"^(?:how to apply|to apply|application process)\s*:\s*(.{5,200})$", re.IGNORECASE | re.MULTILINE)
PROCESS_STEPS = [
    (re.compile(r"\bresume\b|\bcv\b", re.IGNORECASE), "Resume"),
    (re.compile(r"\bcover letter\b", re.IGNORECASE), "Cover letter"),
    (re.compile(r"\bportfolio\b", re.IGNORECASE), "Portfolio"),
    (re.compile(r"\btranscripts?\b", re.IGNORECASE), "Transcript"),
    (re.compile(r"\bwriting sample\b", re.IGNORECASE), "Writing sample"),
    (re.compile(r"\b(?:online assessment|coding challenge|take-home|hackerrank|codesignal)\b", re.IGNORECASE), "Online assessment"),
    (re.compile(r"\bphone screen\b", re.IGNORECASE), "Phone screen"),
    (re.compile(r"\b(?:technical|onsite|on-site|final[- ]round) interviews?\b", re.IGNORECASE), "Interviews"),
    (re.compile(r"\breferences\b", re.IGNORECASE), "References"),
]


class ApplyUrlExtractor(FieldExtractor):
    field = FieldName.APPLY_URL

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        for m in URL_RE.finditer(text):
            url = m.group(0).rstrip(".,;:")
            lowered = url.lower()
            if "linkedin.com/in/" in lowered:
                continue
            if any(hint in lowered for hint in APPLY_URL_HINTS):
                return url, "apply_link"
        return None


class ApplicationProcessExtractor(FieldExtractor):
    field = FieldName.APPLICATION_PROCESS

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        m = HOW_TO_APPLY_RE.search(text)
        if m:
            return m.group(1).strip(), "labeled_line"
        steps = [label for pattern, label in PROCESS_STEPS if pattern.search(text)]
        return (", ".join(steps), "process_keywords") if steps else None


# ============================================================================
# Company profile and logistics
# ============================================================================

EMPLOYEE_COUNT_RE = re.compile(
    r"\b(\d{1,3}(?:,\d{3})*\+?(?:\s*(?:-|to)\s*\d{1,3}(?:,\d{3})*)?\+?)\s*(?:employees|people|team members)\b",
    re.IGNORECASE,
)
COMPANY_SIZE_KEYWORDS = [
    (re.compile(r"\bfortune 500\b", re.IGNORECASE), "Fortune 500"),
    (re.compile(r"\b(?:start-?up|early[- ]stage|seed[- ]stage|series [ab])\b", re.IGNORECASE), "Startup"),
    (re.compile(r"\b(?:small team|small business|small company)\b", re.IGNORECASE), "Small"),
    (re.compile(r"\b(?:enterprise|global leader|multinational)\b", re.IGNORECASE), "Large enterprise"),
]


class CompanySizeExtractor(FieldExtractor):
    field = FieldName.COMPANY_SIZE

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        m = EMPLOYEE_COUNT_RE.search(text)
        if m:
            return f"{m.group(1).replace(' ', '')} employees", "employee_count"
        for pattern, label in COMPANY_SIZE_KEYWORDS:
            if pattern.search(text):
                return label, "keyword"
        return None


NAMED_TIMEZONE_RE = re.compile(r"\b(pacific|mountain|central|eastern)\s+(?:standard\s+|daylight\s+)?time\b", re.IGNORECASE)
TIMEZONE_ABBREV_RE = re.compile(
    r"(?i:time\s?zones?|hours|\d\s?(?:am|pm)|\d:\d{2})[^\n]{0,20}?\b(PST|PDT|PT|MST|MDT|MT|CST|CDT|CT|EST|EDT|ET|GMT|UTC|BST|CET|IST)\b"
    r"((?:\s*[+-]\s*\d{1,2})?)",
)
LABELED_TIMEZONE_RE = re.compile(r"^(?:time\s?zone)s?\s*:\s*(.{2,40})$", re.IGNORECASE | re.MULTILINE)


class TimezoneExtractor(FieldExtractor):
    field = FieldName.TIMEZONE

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        m = LABELED_TIMEZONE_RE.search(text)
        if m:
            return m.group(1).strip(), "labeled_line"
        m = NAMED_TIMEZONE_RE.search(text)
        if m:
            return f"{m.group(1).capitalize()} Time", "named_zone"
        m = TIMEZONE_ABBREV_RE.search(text)
        if m:
            return (m.group(1).upper() + m.group(2).replace(" ", "")), "zone_abbreviation"
        return None


TRAVEL_PERCENT_RE = re.compile(r"\b(?:up to\s+)?(\d{1,3})\s?%\s*(?:of\s+)?(?:the\s+time\s+)?travel|travel[^\n.]{0,20}?(\d{1,3})\s?%", re.IGNORECASE)
NO_TRAVEL_RE = re.compile(r"\b(?:no travel|travel is not required|no travel required)\b", re.IGNORECASE)
OCCASIONAL_TRAVEL_RE = re.compile(r"\b(?:occasional|some|minimal|limited) travel\b", re.IGNORECASE)
TRAVEL_REQUIRED_RE = re.compile(r"\b(?:travel required|travel is required|willing(?:ness)? to travel|ability to travel|must travel)\b", re.IGNORECASE)


class TravelRequiredExtractor(FieldExtractor):
    field = FieldName.TRAVEL_REQUIRED

    def _extract(self, text: str, context: ExtractionContext) -> ExtractResult:
        if NO_TRAVEL_RE.search(text):
            return "No", "no_travel"
        m = TRAVEL_PERCENT_RE.search(text)
        if m:
            return f"Up to {m.group(1) or m.group(2)}%", "travel_percent"
        if OCCASIONAL_TRAVEL_RE.search(text):
            return "Occasional", "keyword"
        if TRAVEL_REQUIRED_RE.search(text):
            return "Required", "keyword"
        return None


# ============================================================================
# Registry
# ============================================================================

COMMON_EXTRACTORS: Tuple[FieldExtractor, ...] = (
    CompanyExtractor(),
    JobTitleExtractor(),
    LocationExtractor(),
    SalaryExtractor(),
    JobTypeExtractor(),
    WorkArrangementExtractor(),
    SeniorityExtractor(),
    DepartmentExtractor(),
    SkillsExtractor(),
    RequirementsExtractor(),
    BenefitsExtractor(),
    ApplicationDeadlineExtractor(),
    ContactInfoExtractor(),
    DurationExtractor(),
    ApplyUrlExtractor(),
    ApplicationProcessExtractor(),
    StartDateExtractor(),
    IndustryExtractor(),
    CompanySizeExtractor(),
    TimezoneExtractor(),
    TravelRequiredExtractor(),
    SecurityClearanceExtractor(),
)

EMAIL_ONLY_EXTRACTORS: Tuple[FieldExtractor, ...] = (StatusExtractor(),)


def extractors_for(source: SourceType) -> Tuple[FieldExtractor, ...]:
    if SourceType(source) == SourceType.EMAIL:
        return COMMON_EXTRACTORS + EMAIL_ONLY_EXTRACTORS
    return COMMON_EXTRACTORS


def run_extractors(text: str, context: Optional[ExtractionContext] = None) -> Dict[FieldName, FieldCandidate]:
    """Run every extractor registered for the context's path over one normalized text."""
    context = context or ExtractionContext()
    return {ex.field: ex.extract(text, context) for ex in extractors_for(context.source)}
