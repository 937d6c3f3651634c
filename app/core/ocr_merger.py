"""
Multi-pass OCR merging.

Several preprocessed variants of one screenshot (grayscale, upscaled,
thresholded, ...) are each run through OCR by the caller. This module reduces
the completed passes to one text:

1. Drop failed passes (confidence <= 0); none left → NoValidOcrResult
2. One pass left → returned as is ("single_result")
3. Otherwise rank by confidence, keep the top N, start from the best text
4. Replace weak words in the base with a clearly stronger reading of the same
   spot from another pass (bbox within a pixel tolerance)
5. Confidence is the rank-weighted mean of the kept passes (weights 1/(rank+1))

Pass objects are never modified.
"""

import logging
from typing import List, Optional, Sequence

from app.core.config import DEFAULT_CONFIG, PipelineConfig
from app.core.errors import NoValidOcrResult
from app.core.schemas import MergedOcrText, OcrPassResult, OcrQualityMetrics, OcrWord

logger = logging.getLogger(__name__)

MIN_WORD_LENGTH = 3

QUALITY_LEVELS = [(85, "excellent"), (75, "very_good"), (65, "good"), (55, "fair")]


def _valid_passes(passes: Sequence[OcrPassResult]) -> List[OcrPassResult]:
    return [p for p in passes if p.confidence > 0]


def _rank_weighted_confidence(ranked: Sequence[OcrPassResult]) -> float:
    weights = [1 / (rank + 1) for rank in range(len(ranked))]
    total = sum(p.confidence * w for p, w in zip(ranked, weights))
    # clamp away float rounding so the result stays inside the pass range
    return min(max(total / sum(weights), ranked[-1].confidence), ranked[0].confidence)


def _is_near(a: OcrWord, b: OcrWord, threshold: float) -> bool:
    if a.bbox is None or b.bbox is None:
        return False
    return abs(a.bbox.x0 - b.bbox.x0) < threshold and abs(a.bbox.y0 - b.bbox.y0) < threshold


def _better_reading(target: OcrWord, others: Sequence[OcrPassResult], config: PipelineConfig) -> Optional[OcrWord]:
    for other in others:
        for word in other.words:
            # stray single characters never replace a word
            if len(word.text) < 2 or not _is_near(target, word, config.merge_bbox_threshold_px):
                continue
            if word.confidence > target.confidence + config.merge_confidence_gain:
                return word
    return None


def merge_ocr_passes(passes: Sequence[OcrPassResult], config: Optional[PipelineConfig] = None) -> MergedOcrText:
    """
    Merge OCR passes of one image into a single text and confidence.

    Raises:
        NoValidOcrResult: every pass had confidence <= 0 (or no pass was given).
    """
    config = config or DEFAULT_CONFIG
    valid = _valid_passes(passes)
    if not valid:
        raise NoValidOcrResult(pass_count=len(passes))

    if len(valid) == 1:
        only = valid[0]
        logger.info("Single valid OCR pass (confidence %.1f), no merge needed", only.confidence)
        return MergedOcrText(text=only.text, confidence=only.confidence, method="single_result", source_results=1)

    ranked = sorted(valid, key=lambda p: p.confidence, reverse=True)[: config.merge_top_n]
    best, others = ranked[0], ranked[1:]

    text = best.text
    improvements = 0
    for word in best.words:
        if word.confidence >= config.merge_low_word_confidence or len(word.text) < MIN_WORD_LENGTH:
            continue
        replacement = _better_reading(word, others, config)
        if replacement is None or replacement.text == word.text or word.text not in text:
            continue
        text = text.replace(word.text, replacement.text, 1)
        improvements += 1
        logger.debug("Replaced %r (%.0f) with %r (%.0f)", word.text, word.confidence, replacement.text, replacement.confidence)

    confidence = _rank_weighted_confidence(ranked)
    logger.info(
        "Merged %d OCR passes (of %d valid): confidence %.1f, %d word improvements",
        len(ranked), len(valid), confidence, improvements,
    )
    return MergedOcrText(
        text=text,
        confidence=confidence,
        method="intelligent_merge",
        source_results=len(ranked),
        improvements=improvements,
    )


def assess_ocr_quality(passes: Sequence[OcrPassResult], final_text: str = "") -> OcrQualityMetrics:
    """
    Summarize how trustworthy a set of OCR passes is.

    consistency: high (range < 20), medium (range < 40), low otherwise
    quality: excellent >= 85, very_good >= 75, good >= 65, fair >= 55, poor below,
             failed when no pass succeeded
    """
    valid = _valid_passes(passes)
    if not valid:
        return OcrQualityMetrics(confidence=0, quality="failed", total_words=len(final_text.split()))

    confidences = [p.confidence for p in valid]
    average = sum(confidences) / len(confidences)
    spread = max(confidences) - min(confidences)

    if spread < 20:
        consistency = "high"
    elif spread < 40:
        consistency = "medium"
    else:
        consistency = "low"

    quality = "poor"
    for threshold, label in QUALITY_LEVELS:
        if average >= threshold:
            quality = label
            break

    best = max(valid, key=lambda p: p.confidence)
    return OcrQualityMetrics(
        confidence=round(average),
        max_confidence=round(max(confidences)),
        min_confidence=round(min(confidences)),
        confidence_range=round(spread),
        consistency=consistency,
        quality=quality,
        total_words=len(final_text.split()),
        passes_used=len(valid),
        best_method=best.description or "unknown",
    )
