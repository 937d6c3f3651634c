"""
Unit tests for text_normalization module.

Tests the cleanup pipeline with realistic OCR and email noise.
"""

import pytest
from app.core.text_normalization import extract_email_flexible, normalize_text


NOISY_SAMPLES = [
    "",
    "   \n\t  ",
    "Google LLC\nSoftware Engineering Intern\nMountain View, CA",
    "We are look-\ning for a deve1oper who can\nwork with c|ients.\r\n\r\n\r\n\r\nApply now!",
    "● Python\n▪ SQL\n* Docker\n- Kubernetes",
    "“Smart quotes” and ‘single’ — dashes – everywhere…",
    "PR0GRAM MANAGER\n|\n~~~\n0ffice hours 9-5",
    "Salary: $120,000 - $150,000 per year, 401k, H1B sponsorship, 2nd round",
    "internsh ip experien ce require d\ncontact jobs @ acme.com or hr@acme.c0m",
    "a\n\n\nb\n\n\n\nc",
    "line one,\ncontinued here\nand here-\nafter that",
    "x",
    "!!!\n###\n...",
]


class TestIdempotence:
    """normalize_text(normalize_text(x)) == normalize_text(x)."""

    @pytest.mark.parametrize("raw", NOISY_SAMPLES)
    def test_idempotent(self, raw):
        once = normalize_text(raw)
        assert normalize_text(once) == once


class TestEmptyInput:

    def test_empty_string(self):
        assert normalize_text("") == ""

    def test_whitespace_only(self):
        assert normalize_text("  \n\t \r\n ") == ""

    def test_none_is_treated_as_empty(self):
        assert normalize_text(None) == ""


class TestWhitespaceAndLineBreaks:

    def test_crlf_becomes_lf(self):
        assert normalize_text("Title\r\nBody\rEnd") == "Title\nBody\nEnd"

    def test_horizontal_whitespace_collapsed(self):
        assert normalize_text("Software    Engineer\t\tIntern") == "Software Engineer Intern"

    def test_blank_line_runs_capped_at_one(self):
        assert normalize_text("About\n\n\n\n\nRequirements") == "About\n\nRequirements"

    def test_hyphenated_break_rejoined(self):
        assert normalize_text("software develop-\nment") == "software development"

    def test_soft_wrap_joined(self):
        assert normalize_text("we are looking\nfor a student") == "we are looking for a student"

    def test_uppercase_line_start_not_joined(self):
        assert normalize_text("Acme Corp\nSoftware Engineer") == "Acme Corp\nSoftware Engineer"


class TestCharacterConfusions:

    def test_pipe_as_lowercase_l(self):
        assert normalize_text("emai| the c|ient") == "email the client"

    def test_digit_inside_lowercase_word(self):
        assert normalize_text("deve1oper") == "developer"

    def test_digit_inside_uppercase_word(self):
        assert normalize_text("PR0GRAM") == "PROGRAM"

    def test_leading_zero_word(self):
        assert normalize_text("0ffice") == "Office"

    def test_numbers_untouched(self):
        raw = "Salary: $120,000 - $150,000 per year, 401k, H1B, 2nd round, 2025"
        assert normalize_text(raw) == raw

    def test_split_job_terms(self):
        assert normalize_text("Summer internsh ip") == "Summer internship"
        assert normalize_text("2 years experien ce require d") == "2 years experience required"

    def test_mangled_domain(self):
        assert normalize_text("send to jobs@acme.c0m") == "send to jobs@acme.com"
        assert normalize_text("send to jobs @acme.com") == "send to jobs@acme.com"


class TestPunctuation:

    def test_quotes_and_dashes(self):
        assert normalize_text("“Hello” ‘world’ — test") == "\"Hello\" 'world' - test"

    def test_ellipsis(self):
        assert normalize_text("and more…") == "and more..."

    def test_bullet_variants_canonical(self):
        assert normalize_text("● Python\n▪ SQL\n* Docker\n- Kubernetes") == "• Python\n• SQL\n• Docker\n• Kubernetes"

    def test_bullet_gets_space(self):
        assert normalize_text("•Python") == "• Python"


class TestNoiseLines:

    def test_single_char_and_symbol_lines_removed(self):
        assert normalize_text("Title\n|\n~~~\nBody text") == "Title\nBody text"

    def test_symbol_only_input_becomes_empty(self):
        assert normalize_text("!!!\n###") == ""


class TestExtractEmailFlexible:

    def test_plain(self):
        assert extract_email_flexible("Reach us at careers@acme.com today") == "careers@acme.com"

    def test_spaced(self):
        assert extract_email_flexible("careers @ acme . com") == "careers@acme.com"

    def test_phone_glued_user_rejected(self):
        assert extract_email_flexible("(856)366-5713k.o@gmail.com") is None

    def test_none(self):
        assert extract_email_flexible("no address here") is None
