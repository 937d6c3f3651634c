from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.sentinels import NOT_SPECIFIED, POSITION_NOT_SPECIFIED, SourceType


ConfidenceLevel = Literal["Very Low", "Low", "Medium", "High"]
ApplicationStatus = Literal["applied", "interview", "offer", "rejected"]
MergeMethod = Literal["single_result", "intelligent_merge"]


class CamelModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class FieldName(str, Enum):
    COMPANY = "company"
    JOB_TITLE = "jobTitle"
    LOCATION = "location"
    SALARY = "salary"
    JOB_TYPE = "jobType"
    WORK_ARRANGEMENT = "workArrangement"
    SENIORITY = "seniority"
    DEPARTMENT = "department"
    SKILLS = "skills"
    REQUIREMENTS = "requirements"
    BENEFITS = "benefits"
    APPLICATION_DEADLINE = "applicationDeadline"
    CONTACT_INFO = "contactInfo"
    STATUS = "status"
    DURATION = "duration"
    APPLY_URL = "applyUrl"
    APPLICATION_PROCESS = "applicationProcess"
    START_DATE = "startDate"
    INDUSTRY = "industry"
    COMPANY_SIZE = "companySize"
    TIMEZONE = "timezone"
    TRAVEL_REQUIRED = "travelRequired"
    SECURITY_CLEARANCE = "securityClearance"


LIST_FIELDS = frozenset({FieldName.SKILLS, FieldName.REQUIREMENTS, FieldName.BENEFITS})


# ============================================================================
# Collaborator inputs (OCR provider, mail provider)
# ============================================================================

class BoundingBox(FrozenCamelModel):
    x0: float
    y0: float
    x1: float
    y1: float


class OcrWord(FrozenCamelModel):
    text: str
    confidence: float = Field(..., description="Word-level OCR confidence (0-100)")
    bbox: Optional[BoundingBox] = None


class OcrPassResult(FrozenCamelModel):
    """One OCR pass over one preprocessed image variant."""
    text: str = ""
    confidence: float = Field(..., description="Pass confidence (0-100). <= 0 marks a failed pass")
    words: List[OcrWord] = Field(default_factory=list)
    description: Optional[str] = Field(default=None, description="Preprocessing variant label, e.g. 'grayscale_2x'")


class MailMessage(FrozenCamelModel):
    id: str
    thread_id: str = ""
    subject: str = ""
    sender: str = Field(default="", alias="from")
    to: str = ""
    date: str = Field(default="", description="ISO-8601 date string")
    body_text: str = ""


class RawTextUnit(FrozenCamelModel):
    source: SourceType
    text: str = ""
    origin_confidence: Optional[float] = Field(default=None, description="OCR pass confidence; unset for email")


# ============================================================================
# Extraction outputs
# ============================================================================

class FieldCandidate(FrozenCamelModel):
    """One extractor's best guess for one field. `value` is never None; misses carry a sentinel."""
    field: FieldName
    value: Union[str, List[str]]
    found: bool = False
    method: str = Field(default="default", description="Strategy that produced the value, or 'default'")


class MergedOcrText(FrozenCamelModel):
    text: str
    confidence: float
    method: MergeMethod
    source_results: int = 1
    improvements: int = 0


class OcrQualityMetrics(FrozenCamelModel):
    confidence: int
    max_confidence: int = 0
    min_confidence: int = 0
    confidence_range: int = 0
    consistency: Literal["high", "medium", "low", "none"] = "none"
    quality: Literal["excellent", "very_good", "good", "fair", "poor", "failed"]
    total_words: int = 0
    passes_used: int = 0
    best_method: str = "unknown"


class RequirementBreakdown(FrozenCamelModel):
    education: List[str] = Field(default_factory=list)
    experience: List[str] = Field(default_factory=list)
    technical: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)

    def has_any(self) -> bool:
        return bool(self.education or self.experience or self.technical or self.soft)


class ApplicationInfo(FrozenCamelModel):
    deadline: str = NOT_SPECIFIED
    process: str = NOT_SPECIFIED
    contact: str = NOT_SPECIFIED
    apply_url: str = NOT_SPECIFIED


class CompanyInfo(FrozenCamelModel):
    industry: str = NOT_SPECIFIED
    size: str = NOT_SPECIFIED
    description: str = NOT_SPECIFIED


class AdditionalInfo(FrozenCamelModel):
    start_date: str = NOT_SPECIFIED
    timezone: str = NOT_SPECIFIED
    travel_required: str = NOT_SPECIFIED
    security_clearance: str = NOT_SPECIFIED


class ExtractionMetadata(FrozenCamelModel):
    source_type: SourceType
    text_length: int = 0
    extraction_date: datetime
    confidence: Union[ConfidenceLevel, int] = Field(
        ..., description="Bucket label on the screenshot path, 0-100 score on the email path"
    )
    confidence_score: int = Field(default=0, ge=0, le=100)
    defaulted_fields: List[str] = Field(default_factory=list)
    origin_confidence: Optional[float] = None


class JobRecord(FrozenCamelModel):
    company: str = NOT_SPECIFIED
    job_title: str = POSITION_NOT_SPECIFIED
    location: str = NOT_SPECIFIED
    work_arrangement: str = NOT_SPECIFIED
    salary: str = NOT_SPECIFIED
    job_type: str = NOT_SPECIFIED
    duration: str = NOT_SPECIFIED
    department: str = NOT_SPECIFIED
    seniority: str = NOT_SPECIFIED
    description: str = ""
    requirements: RequirementBreakdown = Field(default_factory=RequirementBreakdown)
    application_info: ApplicationInfo = Field(default_factory=ApplicationInfo)
    company_info: CompanyInfo = Field(default_factory=CompanyInfo)
    additional_info: AdditionalInfo = Field(default_factory=AdditionalInfo)
    skills: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    extraction_metadata: ExtractionMetadata


class EmailDerivedRecord(JobRecord):
    status: ApplicationStatus = "applied"
    email_id: str
    email_subject: str = ""
    email_from: str = ""
    email_date: str = ""
    application_date: str = ""
    notes: str = ""


# ============================================================================
# Tracking / deduplication
# ============================================================================

class TrackedEntry(CamelModel):
    """A persisted tracker row. Owned by the external store; unknown keys are kept."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    company_name: str = ""
    job_title: str = ""
    location: str = NOT_SPECIFIED
    status: str = "applied"
    added_at: str = ""
    source_id: Optional[str] = None
    source: Optional[str] = None
    email_id: Optional[str] = None
    email_subject: Optional[str] = None
    email_from: Optional[str] = None
    email_date: Optional[str] = None
    notes: Optional[str] = None
    confidence: Optional[float] = None
    auto_detected: bool = False
    updated_at: Optional[str] = None


class MatchDecision(CamelModel):
    is_new: bool
    existing_id: Optional[str] = None
    entry: TrackedEntry = Field(..., description="Proposed new entry, or the existing entry with the candidate overlaid")


# ============================================================================
# Email analysis
# ============================================================================

class EmailSignals(FrozenCamelModel):
    subject_match: bool = False
    sender_match: bool = False
    company_resolved: bool = False
    company_match: str = ""
    keyword_hits: List[str] = Field(default_factory=list)
    strong_indicators: List[str] = Field(default_factory=list)
    automated_sender: bool = False


class EmailAnalysis(CamelModel):
    message_id: str
    is_relevant: bool
    score: int = Field(..., ge=0, le=100)
    signals: EmailSignals
    record: Optional[EmailDerivedRecord] = None
    warnings: List[str] = Field(default_factory=list)


class ScanItem(CamelModel):
    message_id: str
    analysis: EmailAnalysis
    decision: Optional[MatchDecision] = None


class ScanError(CamelModel):
    message_id: str
    error: str


class ScanStats(CamelModel):
    total_messages: int = 0
    total_emails_found: int = 0
    new_applications: int = 0
    unique_companies: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)


class ScanReport(CamelModel):
    results: List[ScanItem] = Field(default_factory=list)
    errors: List[ScanError] = Field(default_factory=list)
    stats: ScanStats = Field(default_factory=ScanStats)


# ============================================================================
# API envelopes
# ============================================================================

class TextExtractionRequest(CamelModel):
    text: str = ""
    source: SourceType = SourceType.SCREENSHOT
    company_hint: Optional[str] = None


class ExtractionResponse(CamelModel):
    record: JobRecord
    confidence: int = Field(..., ge=0, le=100)
    confidence_level: ConfidenceLevel
    warnings: List[str] = Field(default_factory=list)


class ScreenshotRequest(CamelModel):
    passes: List[OcrPassResult] = Field(default_factory=list)


class ScreenshotExtractionResponse(ExtractionResponse):
    merge: MergedOcrText
    quality: OcrQualityMetrics


class EmailScanRequest(CamelModel):
    messages: List[MailMessage] = Field(default_factory=list)
    existing: List[TrackedEntry] = Field(default_factory=list)


class MatchRequest(CamelModel):
    candidate: Union[EmailDerivedRecord, JobRecord]
    existing: List[TrackedEntry] = Field(default_factory=list)
