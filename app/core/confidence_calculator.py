"""
Confidence scoring for extracted job records.

A score is a 0-100 heuristic estimate of how much of a record was actually
found in the text, not a probability.

Screenshot path (weighted presence, max 10 points, scaled to 0-100):
  company 2, job title 2, requirements 2,
  location 1, salary 1, contact 1, skills 1

  Buckets:
    >= 80  High
    >= 60  Medium
    >= 40  Low
    <  40  Very Low

Email path (additive signals, clamped to 0-100):
  subject pattern       +30
  sender pattern        +20
  company resolved      +15
  keyword hit           +3 each, at most +30
  strong indicator      +15 each
  automated sender      +10

Both paths are monotonic: adding a found field or a signal never lowers the
score, because every weight is non-negative and clamping happens last.
"""

from typing import Dict, Iterable, Optional, Tuple, Union

from app.core.schemas import ConfidenceLevel, EmailSignals, FieldCandidate, FieldName, RequirementBreakdown


SCREENSHOT_WEIGHTS: Dict[FieldName, int] = {
    FieldName.COMPANY: 2,
    FieldName.JOB_TITLE: 2,
    FieldName.REQUIREMENTS: 2,
    FieldName.LOCATION: 1,
    FieldName.SALARY: 1,
    FieldName.CONTACT_INFO: 1,
    FieldName.SKILLS: 1,
}
SCREENSHOT_MAX_POINTS = sum(SCREENSHOT_WEIGHTS.values())

LEVEL_THRESHOLDS = [(80, "High"), (60, "Medium"), (40, "Low")]

SUBJECT_MATCH_POINTS = 30
SENDER_MATCH_POINTS = 20
COMPANY_RESOLVED_POINTS = 15
KEYWORD_POINTS = 3
KEYWORD_POINTS_CAP = 30
STRONG_INDICATOR_POINTS = 15
AUTOMATED_SENDER_POINTS = 10

Candidates = Union[Dict[FieldName, FieldCandidate], Iterable[FieldCandidate]]


def _found_fields(candidates: Candidates) -> set:
    items = candidates.values() if isinstance(candidates, dict) else candidates
    return {c.field for c in items if c.found}


class ConfidenceCalculator:
    """Central place for all record confidence logic."""

    @staticmethod
    def screenshot(candidates: Candidates, requirements: Optional[RequirementBreakdown] = None) -> Tuple[int, str]:
        """
        Weighted presence score for a screenshot-derived record.

        Only candidates with found=True count; a field sitting at its sentinel
        or path default contributes nothing. When the record's requirement
        breakdown is given, the requirements weight follows it instead of the
        requirements candidate, so soft skills picked up from the body count.
        """
        found = _found_fields(candidates)
        if requirements is not None:
            found.discard(FieldName.REQUIREMENTS)
            if requirements.has_any():
                found.add(FieldName.REQUIREMENTS)
        if not found:
            return 0, "no_fields_found"

        points = sum(weight for name, weight in SCREENSHOT_WEIGHTS.items() if name in found)
        score = round(points * 100 / SCREENSHOT_MAX_POINTS)
        return score, "weighted_presence"

    @staticmethod
    def level(score: int) -> ConfidenceLevel:
        for threshold, label in LEVEL_THRESHOLDS:
            if score >= threshold:
                return label
        return "Very Low"

    @staticmethod
    def email(signals: EmailSignals) -> Tuple[int, str]:
        """
        Additive relevance score for an email.

        The keyword contribution is capped so a long newsletter full of job
        words cannot pass the gate on keywords alone.
        """
        score = 0
        reasons = []

        if signals.subject_match:
            score += SUBJECT_MATCH_POINTS
            reasons.append("subject")
        if signals.sender_match:
            score += SENDER_MATCH_POINTS
            reasons.append("sender")
        if signals.company_resolved:
            score += COMPANY_RESOLVED_POINTS
            reasons.append("company")
        if signals.keyword_hits:
            score += min(KEYWORD_POINTS * len(signals.keyword_hits), KEYWORD_POINTS_CAP)
            reasons.append("keywords")
        if signals.strong_indicators:
            score += STRONG_INDICATOR_POINTS * len(signals.strong_indicators)
            reasons.append("strong_indicators")
        if signals.automated_sender:
            score += AUTOMATED_SENDER_POINTS
            reasons.append("automated_sender")

        score = max(0, min(100, score))
        return score, "+".join(reasons) if reasons else "no_signals"

    @staticmethod
    def is_relevant(score: int, threshold: int) -> bool:
        return score >= threshold


def score(candidates: Candidates, signals: Optional[EmailSignals] = None) -> int:
    """
    Score a candidate record. With email signals the additive email score is
    used, otherwise the screenshot weighted-presence score.
    """
    if signals is not None:
        return ConfidenceCalculator.email(signals)[0]
    return ConfidenceCalculator.screenshot(candidates)[0]
