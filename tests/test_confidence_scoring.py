"""
Tests for record confidence scoring.

Covers the weighted-presence screenshot score, its buckets, the additive email
relevance score, and monotonicity of both.
"""

from itertools import combinations

import pytest

from app.core.confidence_calculator import (
    SCREENSHOT_WEIGHTS,
    ConfidenceCalculator,
    score,
)
from app.core.pipeline import extract_job_record
from app.core.schemas import EmailSignals, FieldCandidate, FieldName, RawTextUnit, RequirementBreakdown
from app.core.sentinels import SourceType


def _found(*fields):
    return {f: FieldCandidate(field=f, value="x", found=True, method="test") for f in fields}


def _missing(*fields):
    return {f: FieldCandidate(field=f, value="Not specified", found=False) for f in fields}


WEIGHTED = list(SCREENSHOT_WEIGHTS)


class TestScreenshotScore:

    def test_nothing_found(self):
        assert ConfidenceCalculator.screenshot(_missing(*WEIGHTED)) == (0, "no_fields_found")

    def test_empty_candidates(self):
        assert ConfidenceCalculator.screenshot({}) == (0, "no_fields_found")

    def test_everything_found(self):
        assert ConfidenceCalculator.screenshot(_found(*WEIGHTED)) == (100, "weighted_presence")

    def test_header_fields_only(self):
        candidates = _found(FieldName.COMPANY, FieldName.JOB_TITLE, FieldName.LOCATION)
        value, _ = ConfidenceCalculator.screenshot(candidates)
        assert value == 50
        assert ConfidenceCalculator.level(value) == "Low"

    def test_unweighted_fields_do_not_count(self):
        candidates = _found(FieldName.BENEFITS, FieldName.INDUSTRY, FieldName.TIMEZONE)
        assert ConfidenceCalculator.screenshot(candidates)[0] == 0

    def test_accepts_iterable(self):
        candidates = list(_found(FieldName.COMPANY, FieldName.JOB_TITLE).values())
        assert ConfidenceCalculator.screenshot(candidates)[0] == 40

    def test_monotonic(self):
        """Adding one found field never lowers the score."""
        for size in range(len(WEIGHTED)):
            for subset in combinations(WEIGHTED, size):
                before = score(_found(*subset))
                for extra in WEIGHTED:
                    if extra in subset:
                        continue
                    assert score(_found(*subset, extra)) >= before

    @pytest.mark.parametrize("fields", [(), WEIGHTED[:1], WEIGHTED[:3], WEIGHTED])
    def test_bounds(self, fields):
        assert 0 <= score(_found(*fields)) <= 100


class TestRequirementBreakdownScore:
    """The requirements weight follows the record's breakdown when one is given."""

    def test_soft_skills_count_as_requirements(self):
        candidates = {**_found(FieldName.COMPANY), **_missing(FieldName.REQUIREMENTS)}
        breakdown = RequirementBreakdown(soft=["Teamwork"])
        assert ConfidenceCalculator.screenshot(candidates)[0] == 20
        assert ConfidenceCalculator.screenshot(candidates, breakdown)[0] == 40

    def test_empty_breakdown_scores_nothing(self):
        candidates = _found(FieldName.COMPANY, FieldName.REQUIREMENTS)
        assert ConfidenceCalculator.screenshot(candidates, RequirementBreakdown())[0] == 20

    def test_record_and_score_agree(self):
        unit = RawTextUnit(source=SourceType.SCREENSHOT, text="Acme Corp\nWe value teamwork and leadership in everyone.")
        result = extract_job_record(unit)
        assert result.record.requirements.soft == ["Teamwork", "Leadership"]
        assert result.confidence == 40
        assert result.record.extraction_metadata.confidence_score == 40
        assert result.confidence_level == "Low"


class TestLevels:

    @pytest.mark.parametrize("value, expected", [
        (100, "High"),
        (80, "High"),
        (79, "Medium"),
        (60, "Medium"),
        (59, "Low"),
        (40, "Low"),
        (39, "Very Low"),
        (0, "Very Low"),
    ])
    def test_buckets(self, value, expected):
        assert ConfidenceCalculator.level(value) == expected


class TestEmailScore:

    def test_no_signals(self):
        assert ConfidenceCalculator.email(EmailSignals()) == (0, "no_signals")

    def test_subject_only_reaches_threshold(self):
        value, reasons = ConfidenceCalculator.email(EmailSignals(subject_match=True))
        assert value == 30
        assert reasons == "subject"
        assert ConfidenceCalculator.is_relevant(value, 30)

    def test_keywords_capped(self):
        signals = EmailSignals(keyword_hits=[f"kw{i}" for i in range(20)])
        assert ConfidenceCalculator.email(signals)[0] == 30

    def test_clamped_to_100(self):
        signals = EmailSignals(
            subject_match=True,
            sender_match=True,
            company_resolved=True,
            keyword_hits=["application", "interview"],
            strong_indicators=["thank you for applying", "application received"],
            automated_sender=True,
        )
        value, reasons = ConfidenceCalculator.email(signals)
        assert value == 100
        assert reasons == "subject+sender+company+keywords+strong_indicators+automated_sender"

    def test_adding_signal_never_lowers(self):
        base = EmailSignals(sender_match=True, keyword_hits=["role"])
        richer = base.model_copy(update={"keyword_hits": ["role", "position"], "automated_sender": True})
        assert ConfidenceCalculator.email(richer)[0] >= ConfidenceCalculator.email(base)[0]

    def test_score_uses_email_signals_when_given(self):
        assert score({}, EmailSignals(sender_match=True)) == 20

    def test_below_threshold_is_irrelevant(self):
        assert not ConfidenceCalculator.is_relevant(29, 30)
