from fastapi import APIRouter, Depends, HTTPException

from app.core.config import PipelineConfig, get_pipeline_config
from app.core.deduplication import match
from app.core.email_analyzer import scan_messages
from app.core.errors import NoValidOcrResult
from app.core.pipeline import extract_job_record, process_screenshot
from app.core.schemas import (
    EmailScanRequest,
    ExtractionResponse,
    MatchDecision,
    MatchRequest,
    RawTextUnit,
    ScanReport,
    ScreenshotExtractionResponse,
    ScreenshotRequest,
    TextExtractionRequest,
)

router = APIRouter(tags=["extract"])


@router.post(
    "/extract/text",
    response_model=ExtractionResponse,
    response_model_by_alias=True,
    summary="Extract Job Record From Text",
    description="Normalize raw OCR or email text and extract a structured job/internship record.",
    responses={
        200: {
            "description": "Record extracted (fields that were not found carry their sentinel value)",
            "content": {
                "application/json": {
                    "example": {
                        "record": {
                            "company": "Google LLC",
                            "jobTitle": "Software Engineering Intern",
                            "location": "Mountain View, CA",
                            "salary": "Salary not specified",
                            "skills": ["Python", "Java"],
                            "extractionMetadata": {"sourceType": "screenshot", "confidence": "Medium"},
                        },
                        "confidence": 60,
                        "confidenceLevel": "Medium",
                        "warnings": [],
                    }
                }
            },
        },
    },
)
def extract_text(payload: TextExtractionRequest, config: PipelineConfig = Depends(get_pipeline_config)):
    """
    Extract a job record from one piece of text.

    Empty text is not an error: the response is a record made of sentinels.
    """
    unit = RawTextUnit(source=payload.source, text=payload.text)
    result = extract_job_record(unit, config, company_hint=payload.company_hint)
    return ExtractionResponse(
        record=result.record,
        confidence=result.confidence,
        confidence_level=result.confidence_level,
        warnings=result.warnings,
    )


@router.post(
    "/extract/screenshot",
    response_model=ScreenshotExtractionResponse,
    response_model_by_alias=True,
    summary="Extract Job Record From OCR Passes",
    description="Merge several OCR passes of one screenshot, then extract a job record from the merged text.",
    responses={
        400: {"description": "No OCR passes supplied"},
        422: {"description": "Every OCR pass failed (confidence <= 0)"},
    },
)
def extract_screenshot(payload: ScreenshotRequest, config: PipelineConfig = Depends(get_pipeline_config)):
    if not payload.passes:
        raise HTTPException(status_code=400, detail="No OCR passes supplied.")

    try:
        result = process_screenshot(payload.passes, config)
    except NoValidOcrResult as e:
        raise HTTPException(status_code=422, detail=str(e))

    extraction = result.extraction
    return ScreenshotExtractionResponse(
        record=extraction.record,
        confidence=extraction.confidence,
        confidence_level=extraction.confidence_level,
        warnings=extraction.warnings,
        merge=result.merge,
        quality=result.quality,
    )


@router.post(
    "/emails/scan",
    response_model=ScanReport,
    response_model_by_alias=True,
    summary="Scan Fetched Emails",
    description="Score fetched messages for application relevance, extract records and propose tracker changes.",
    responses={400: {"description": "No messages supplied"}},
)
def scan_emails(payload: EmailScanRequest, config: PipelineConfig = Depends(get_pipeline_config)):
    if not payload.messages:
        raise HTTPException(status_code=400, detail="No messages supplied.")
    return scan_messages(payload.messages, payload.existing, config)


@router.post(
    "/match",
    response_model=MatchDecision,
    response_model_by_alias=True,
    summary="Match Record Against Tracker",
    description="Decide whether a record is new or refers to an already tracked entry.",
)
def match_record(payload: MatchRequest):
    return match(payload.candidate, payload.existing)
