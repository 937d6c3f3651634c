"""
Pipeline entry points.

    raw text → normalize_text → run_extractors → ConfidenceCalculator → build_record

Screenshots first merge their OCR passes (ocr_merger) and then follow the same
path. Email messages go through email_analyzer, which adds the relevance gate
and email linkage on top of this flow.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from app.core.config import DEFAULT_CONFIG, PipelineConfig
from app.core.confidence_calculator import ConfidenceCalculator
from app.core.field_extractors import ExtractionContext, run_extractors
from app.core.ocr_merger import assess_ocr_quality, merge_ocr_passes
from app.core.record_builder import build_record, split_requirements
from app.core.schemas import (
    ConfidenceLevel,
    FieldCandidate,
    FieldName,
    JobRecord,
    MergedOcrText,
    OcrPassResult,
    OcrQualityMetrics,
    RawTextUnit,
)
from app.core.sentinels import SourceType
from app.core.text_normalization import normalize_text

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    record: JobRecord
    confidence: int
    confidence_level: ConfidenceLevel
    candidates: Dict[FieldName, FieldCandidate]
    warnings: List[str] = field(default_factory=list)


@dataclass
class ScreenshotResult:
    extraction: ExtractionResult
    merge: MergedOcrText
    quality: OcrQualityMetrics


def extract_job_record(
    unit: RawTextUnit,
    config: Optional[PipelineConfig] = None,
    company_hint: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ExtractionResult:
    """
    Run one raw text unit end to end. Never raises on bad text: an empty or
    unreadable unit produces an all-sentinel record.
    """
    config = config or DEFAULT_CONFIG
    source = SourceType(unit.source)
    text = normalize_text(unit.text)

    context = ExtractionContext(source=source, company_hint=company_hint, config=config)
    candidates = run_extractors(text, context)
    requirements = split_requirements(
        candidates[FieldName.REQUIREMENTS].value, text, config.requirements_cap
    )
    score, method = ConfidenceCalculator.screenshot(candidates, requirements)
    logger.debug("Screenshot-style score %d (%s) for %s unit", score, method, source.value)

    record, warnings = build_record(
        candidates,
        source=source,
        text=text,
        extracted_at=now,
        confidence_score=score,
        origin_confidence=unit.origin_confidence,
        config=config,
        requirements=requirements,
    )
    return ExtractionResult(
        record=record,
        confidence=score,
        confidence_level=ConfidenceCalculator.level(score),
        candidates=candidates,
        warnings=warnings,
    )


def process_screenshot(
    passes: Sequence[OcrPassResult],
    config: Optional[PipelineConfig] = None,
    now: Optional[datetime] = None,
) -> ScreenshotResult:
    """
    Merge OCR passes of one screenshot and extract a record from the result.

    Raises:
        NoValidOcrResult: every pass failed. The caller decides on a fallback.
    """
    config = config or DEFAULT_CONFIG
    merged = merge_ocr_passes(passes, config)
    quality = assess_ocr_quality(passes, merged.text)
    unit = RawTextUnit(source=SourceType.SCREENSHOT, text=merged.text, origin_confidence=merged.confidence)
    extraction = extract_job_record(unit, config, now=now)
    logger.info(
        "Screenshot processed: %s OCR (%s), record confidence %s",
        quality.quality, merged.method, extraction.confidence_level,
    )
    return ScreenshotResult(extraction=extraction, merge=merged, quality=quality)
