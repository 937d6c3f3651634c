"""
Assemble field candidates into one immutable JobRecord.

The builder never fails: missing candidates take the path default, malformed
ones are logged as MalformedCandidateWarning and replaced by the default, and
an empty candidate set still produces a fully shaped record of sentinels.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, Union, get_args

from app.core.config import DEFAULT_CONFIG, PipelineConfig
from app.core.confidence_calculator import ConfidenceCalculator
from app.core.errors import MalformedCandidateWarning
from app.core.field_extractors import (
    DEGREE_RE,
    ENROLLMENT_RE,
    SKILL_PATTERNS,
    YEARS_EXPERIENCE_RE,
    ExtractionContext,
    extractors_for,
)
from app.core.schemas import (
    LIST_FIELDS,
    AdditionalInfo,
    ApplicationInfo,
    ApplicationStatus,
    CompanyInfo,
    EmailDerivedRecord,
    ExtractionMetadata,
    FieldCandidate,
    FieldName,
    JobRecord,
    RequirementBreakdown,
)
from app.core.sentinels import SourceType, is_sentinel
from app.core.vocabulary import SOFT_SKILLS

logger = logging.getLogger(__name__)

# FieldName -> (section, attribute); section None means a top-level slot
FIELD_SLOTS: Dict[FieldName, Tuple[Optional[str], str]] = {
    FieldName.COMPANY: (None, "company"),
    FieldName.JOB_TITLE: (None, "job_title"),
    FieldName.LOCATION: (None, "location"),
    FieldName.WORK_ARRANGEMENT: (None, "work_arrangement"),
    FieldName.SALARY: (None, "salary"),
    FieldName.JOB_TYPE: (None, "job_type"),
    FieldName.DURATION: (None, "duration"),
    FieldName.DEPARTMENT: (None, "department"),
    FieldName.SENIORITY: (None, "seniority"),
    FieldName.SKILLS: (None, "skills"),
    FieldName.BENEFITS: (None, "benefits"),
    FieldName.STATUS: (None, "status"),
    FieldName.APPLICATION_DEADLINE: ("application_info", "deadline"),
    FieldName.APPLICATION_PROCESS: ("application_info", "process"),
    FieldName.CONTACT_INFO: ("application_info", "contact"),
    FieldName.APPLY_URL: ("application_info", "apply_url"),
    FieldName.INDUSTRY: ("company_info", "industry"),
    FieldName.COMPANY_SIZE: ("company_info", "size"),
    FieldName.START_DATE: ("additional_info", "start_date"),
    FieldName.TIMEZONE: ("additional_info", "timezone"),
    FieldName.TRAVEL_REQUIRED: ("additional_info", "travel_required"),
    FieldName.SECURITY_CLEARANCE: ("additional_info", "security_clearance"),
}

SECTION_MODELS = {
    "application_info": ApplicationInfo,
    "company_info": CompanyInfo,
    "additional_info": AdditionalInfo,
}

TEMPLATE_DESCRIPTION = "Join {company} as a {job_title} and contribute to innovative projects in a collaborative environment."
GENERIC_DESCRIPTION = (
    "An internship opportunity to gain hands-on experience, learn from experienced mentors "
    "and contribute to real-world projects."
)

TECHNICAL_HINT_RE = re.compile(
    r"\b(?:programming|software|coding|technical|framework|database|algorithms?|data structures|"
    r"computer science|engineering|api|cloud|statistics|machine learning)\b",
    re.IGNORECASE,
)
EDUCATION_HINT_RE = re.compile(r"\b(?:gpa|university|college|major|coursework|student)\b", re.IGNORECASE)
SENTENCE_END_RE = re.compile(r"[.!?](?:\s|$)")
ABOUT_HEADER_RE = re.compile(r"^about (?:us|the company|the team|[A-Z][\w&. -]{1,40})\s*:?$", re.IGNORECASE)

APPLICATION_STATUSES = get_args(ApplicationStatus)

Candidates = Union[Dict[FieldName, FieldCandidate], Iterable[FieldCandidate]]


# ============================================================================
# Candidate validation
# ============================================================================

def _index_candidates(candidates: Candidates) -> Dict[FieldName, FieldCandidate]:
    items = candidates.values() if isinstance(candidates, dict) else candidates
    indexed: Dict[FieldName, FieldCandidate] = {}
    for candidate in items:
        # first candidate per field wins
        indexed.setdefault(candidate.field, candidate)
    return indexed


def _shape_problem(name: FieldName, value: Any) -> Optional[MalformedCandidateWarning]:
    if name in LIST_FIELDS:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            return MalformedCandidateWarning(name.value, "list of strings", type(value).__name__)
        return None
    if not isinstance(value, str):
        return MalformedCandidateWarning(name.value, "string", type(value).__name__)
    if name == FieldName.STATUS and value not in APPLICATION_STATUSES:
        return MalformedCandidateWarning(name.value, "one of " + "/".join(APPLICATION_STATUSES), repr(value))
    return None


# ============================================================================
# Requirements breakdown
# ============================================================================

def _soft_skill_labels(text: str) -> List[str]:
    lowered = text.lower()
    labels: List[str] = []
    for keyword, label in SOFT_SKILLS:
        if keyword in lowered and label not in labels:
            labels.append(label)
    return labels


def split_requirements(lines: List[str], text: str, cap: int) -> RequirementBreakdown:
    """
    Sort requirement lines into education / experience / technical / soft.

    Each line lands in the first bucket it qualifies for, in that order; lines
    matching nothing count as technical. Soft-skill mentions anywhere in the
    text are added to `soft` while the total stays within `cap`.
    """
    buckets: Dict[str, List[str]] = {"education": [], "experience": [], "technical": [], "soft": []}
    for line in lines[:cap]:
        if DEGREE_RE.search(line) or ENROLLMENT_RE.search(line) or EDUCATION_HINT_RE.search(line):
            buckets["education"].append(line)
        elif YEARS_EXPERIENCE_RE.search(line) or re.search(r"\bexperience\b", line, re.IGNORECASE):
            buckets["experience"].append(line)
        elif TECHNICAL_HINT_RE.search(line) or any(p.search(line) for _, p in SKILL_PATTERNS):
            buckets["technical"].append(line)
        elif _soft_skill_labels(line):
            buckets["soft"].append(line)
        else:
            buckets["technical"].append(line)

    total = sum(len(v) for v in buckets.values())
    for label in _soft_skill_labels(text):
        if total >= cap:
            break
        if label not in buckets["soft"]:
            buckets["soft"].append(label)
            total += 1
    return RequirementBreakdown(**buckets)


# ============================================================================
# Description
# ============================================================================

def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0]
    return cut.rstrip(" ,;:") + "..."


def natural_description(text: str, min_chars: int, max_chars: int) -> Optional[str]:
    """First prose paragraph of at least `min_chars` characters, if any."""
    for block in re.split(r"\n\s*\n", text):
        lines = [l.strip() for l in block.split("\n") if l.strip()]
        prose = [l for l in lines if not l.startswith("•")]
        for candidate in [" ".join(prose)] + prose:
            if len(candidate) >= min_chars and len(candidate.split()) >= 6 and SENTENCE_END_RE.search(candidate):
                return _truncate(candidate, max_chars)
    return None


def build_description(text: str, company: str, job_title: str, config: PipelineConfig) -> str:
    """
    Three tiers, in order:
    1. a natural paragraph from the text
    2. a sentence built from company and title, unless both are sentinels
    3. a generic internship sentence
    """
    natural = natural_description(text, config.description_min_chars, config.description_max_chars)
    if natural:
        return natural
    if is_sentinel(company) and is_sentinel(job_title):
        return GENERIC_DESCRIPTION
    return TEMPLATE_DESCRIPTION.format(
        company="the team" if is_sentinel(company) else company,
        job_title="team member" if is_sentinel(job_title) else job_title,
    )


def company_description(text: str, config: PipelineConfig) -> Optional[str]:
    """Prose following an "About us" / "About <Company>" header, if present."""
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if not ABOUT_HEADER_RE.match(line.strip()) or line.strip().lower() in ("about the job", "about the role"):
            continue
        follow = "\n".join(lines[i + 1:])
        return natural_description(follow, config.description_min_chars, config.description_max_chars)
    return None


# ============================================================================
# Public API
# ============================================================================

def build_record(
    candidates: Candidates,
    *,
    source: SourceType = SourceType.SCREENSHOT,
    text: str = "",
    extracted_at: Optional[datetime] = None,
    confidence_score: int = 0,
    origin_confidence: Optional[float] = None,
    config: Optional[PipelineConfig] = None,
    record_cls: Type[JobRecord] = JobRecord,
    extra: Optional[Dict[str, Any]] = None,
    requirements: Optional[RequirementBreakdown] = None,
) -> Tuple[JobRecord, List[str]]:
    """
    Map candidates onto a record and stamp extraction metadata.

    Returns the record plus human-readable warnings (one per malformed
    candidate). `extra` carries record-class specific fields such as the email
    linkage of an EmailDerivedRecord. A precomputed `requirements` breakdown
    (the one the confidence score was based on) is used as is.
    """
    config = config or DEFAULT_CONFIG
    source = SourceType(source)
    context = ExtractionContext(source=source, config=config)
    indexed = _index_candidates(candidates)
    warnings: List[str] = []

    top: Dict[str, Any] = {}
    sections: Dict[str, Dict[str, Any]] = {name: {} for name in SECTION_MODELS}
    defaulted: List[str] = []
    requirement_lines: List[str] = []

    for extractor in extractors_for(source):
        name = extractor.field
        default = extractor.default(context)
        candidate = indexed.get(name, default)

        problem = _shape_problem(name, candidate.value)
        if problem is not None:
            logger.warning("%s", problem)
            warnings.append(str(problem))
            candidate = default

        if not candidate.found:
            defaulted.append(name.value)

        value = candidate.value
        if name == FieldName.REQUIREMENTS:
            requirement_lines = list(value)
            continue
        if name == FieldName.SKILLS:
            value = list(value)[: config.skills_cap]
        if name == FieldName.STATUS and not issubclass(record_cls, EmailDerivedRecord):
            continue

        section, attr = FIELD_SLOTS[name]
        if section is None:
            top[attr] = value
        else:
            sections[section][attr] = value

    company = top.get("company", "")
    job_title = top.get("job_title", "")
    description = build_description(text, company, job_title, config)
    about = company_description(text, config)
    if about:
        sections["company_info"]["description"] = about

    confidence_score = max(0, min(100, int(confidence_score)))
    metadata = ExtractionMetadata(
        source_type=source,
        text_length=len(text),
        extraction_date=extracted_at or datetime.now(timezone.utc),
        confidence=ConfidenceCalculator.level(confidence_score) if source == SourceType.SCREENSHOT else confidence_score,
        confidence_score=confidence_score,
        defaulted_fields=defaulted,
        origin_confidence=origin_confidence,
    )

    if requirements is None:
        requirements = split_requirements(requirement_lines, text, config.requirements_cap)

    record = record_cls(
        **top,
        description=description,
        requirements=requirements,
        application_info=ApplicationInfo(**sections["application_info"]),
        company_info=CompanyInfo(**sections["company_info"]),
        additional_info=AdditionalInfo(**sections["additional_info"]),
        extraction_metadata=metadata,
        **(extra or {}),
    )
    logger.info(
        "Built %s record: company=%r title=%r confidence=%d defaulted=%d",
        source.value, record.company, record.job_title, confidence_score, len(defaulted),
    )
    return record, warnings
