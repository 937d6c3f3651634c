"""
Text normalization for noisy OCR output and email bodies.

Cleans up the artifacts that make raw screen captures hard to search:
broken line endings, ragged whitespace, hyphenated line breaks, soft-wrapped
lines, OCR character confusions, typographic punctuation and noise lines.

Public API:
- normalize_text(): full cleanup pipeline, idempotent, never raises
- extract_email_flexible(): tolerant email lookup used by contact extraction
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

# Fixed-point iterations before giving up on convergence. Every step only
# removes characters or canonicalizes them, so two or three rounds suffice.
MAX_NORMALIZE_ROUNDS = 8


# ============================================================================
# Email/Protected pattern detection
# ============================================================================

EMAIL_FLEX_RE = re.compile(r"([A-Za-z0-9._%+-]+(?: [A-Za-z0-9._%+-]+)?) ?(@) ?([A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*) ?\. ?([A-Za-z]{2,})\b")
EMAIL_STRICT_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


def _user_looks_like_phone(user: str) -> bool:
    digit_count = sum(1 for c in user if c.isdigit())
    return "(" in user or ")" in user or user.startswith("+") or (digit_count >= 7 and "-" in user)


def extract_email_flexible(text: str) -> Optional[str]:
    """
    Extract an email address, tolerating a stray space around '@' or '.'.

    Examples:
    - "careers@acme.com" → "careers@acme.com"
    - "careers @ acme . com" → "careers@acme.com"
    - "(856)366-5713k.o@gmail.com" → None (user part looks like a phone number)
    """
    if not text:
        return None

    m = EMAIL_STRICT_RE.search(text)
    if m:
        user = m.group(0).split("@")[0]
        if not _user_looks_like_phone(user):
            return m.group(0).rstrip(".")

    m = EMAIL_FLEX_RE.search(text)
    if m:
        user = m.group(1).replace(" ", "")
        if not _user_looks_like_phone(user):
            return f"{user}@{m.group(3)}.{m.group(4)}"

    return None


# ============================================================================
# Constants: punctuation variants and OCR confusions
# ============================================================================

DOUBLE_QUOTES_RE = re.compile(r"[“”„‟″«»]")
SINGLE_QUOTES_RE = re.compile(r"[‘’‚‛′]")
DASHES_RE = re.compile(r"[‒–—―−]")
BULLET_GLYPHS_RE = re.compile(r"[•·▪▫◦‣⁃●○■□➢►✓✔]")
LEADING_ASCII_BULLET_RE = re.compile(r"^[*+] +", re.MULTILINE)
LEADING_DASH_BULLET_RE = re.compile(r"^- +(?=\S)", re.MULTILINE)
CANONICAL_BULLET = "•"

HORIZONTAL_WS_RE = re.compile(r"[ \t\f\v\u00a0\u2000-\u200a\u202f\u205f\u3000]+")
ZERO_WIDTH_RE = re.compile(r"[\u200b\u200c\u200d\ufeff]")

# Pipes standing in for a lowercase 'l' ("emai|", "c|ient")
PIPE_AFTER_LOWER_RE = re.compile(r"(?<=[a-z])\|")
PIPE_BEFORE_LOWER_RE = re.compile(r"\|(?=[a-z])")

# Digits standing in for letters, only when wedged between letters of the same
# case. Numbers next to other digits, units or ordinals are never touched.
LOWER_DIGIT_FIXES = {"0": "o", "1": "l", "5": "s"}
UPPER_DIGIT_FIXES = {"0": "O", "1": "I", "5": "S", "8": "B"}
DIGIT_IN_LOWER_WORD_RE = re.compile(r"(?<=[a-z]{2})([015])(?=[a-z])")
DIGIT_IN_UPPER_WORD_RE = re.compile(r"(?<=[A-Z]{2})([0158])(?=[A-Z])")
# "0ffice", "0pportunity": zero opening a lowercase word
LEADING_ZERO_WORD_RE = re.compile(r"(?<![\w$.,])0(?=[a-z]{3,})")

# Job vocabulary that OCR tends to split with a stray space
SPLIT_JOB_TERMS = [
    (re.compile(r"\binternsh ip\b", re.IGNORECASE), "internship"),
    (re.compile(r"\bexperien ce\b", re.IGNORECASE), "experience"),
    (re.compile(r"\brequire d\b", re.IGNORECASE), "required"),
    (re.compile(r"\bqualificat ion(s?)\b", re.IGNORECASE), r"qualification\1"),
    (re.compile(r"\bresponsibilit (y|ies)\b", re.IGNORECASE), r"responsibilit\1"),
    (re.compile(r"\btechnolog (y|ies)\b", re.IGNORECASE), r"technolog\1"),
    (re.compile(r"\bapplicat ion(s?)\b", re.IGNORECASE), r"application\1"),
    (re.compile(r"\bopportun ity\b", re.IGNORECASE), "opportunity"),
    (re.compile(r"\bsoftwar e\b", re.IGNORECASE), "software"),
    (re.compile(r"\bremot e\b", re.IGNORECASE), "remote"),
    (re.compile(r"\bhybri d\b", re.IGNORECASE), "hybrid"),
    (re.compile(r"\bgit hub\b", re.IGNORECASE), "GitHub"),
    (re.compile(r"\blinked in\b", re.IGNORECASE), "LinkedIn"),
]

MANGLED_DOMAIN_FIXES = [
    (re.compile(r"(@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*)\.c0m\b"), r"\1.com"),
    (re.compile(r"(@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*)\.c om\b"), r"\1.com"),
    (re.compile(r"(www\.[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*)\.c0m\b"), r"\1.com"),
    (re.compile(r"(https?://[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*)\.c0m\b"), r"\1.com"),
    (re.compile(r"(\w)@ +([A-Za-z0-9-]+\.[A-Za-z]{2,})"), r"\1@\2"),
    (re.compile(r"([A-Za-z0-9._%+-]) +@([A-Za-z0-9-]+\.[A-Za-z]{2,})"), r"\1@\2"),
]

SYMBOL_ONLY_LINE_RE = re.compile(r"^[^A-Za-z0-9]+$")


# ============================================================================
# Step 1-2: Line endings and whitespace
# ============================================================================

def _normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _collapse_whitespace(text: str) -> str:
    """Single spaces inside lines, no edge spaces, at most one blank line in a row."""
    text = ZERO_WIDTH_RE.sub("", text)
    text = HORIZONTAL_WS_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    return re.sub(r"\n{3,}", "\n\n", text)


# ============================================================================
# Step 3-4: Line breaks
# ============================================================================

def _rejoin_hyphenated_breaks(text: str) -> str:
    """'develop-\\nment' → 'development'."""
    return re.sub(r"([A-Za-z])-\n([a-z])", r"\1\2", text)


def _join_soft_wraps(text: str) -> str:
    """A line ending in lowercase or a comma continues onto a lowercase-starting line."""
    return re.sub(r"([a-z,])\n([a-z])", r"\1 \2", text)


# ============================================================================
# Step 5: OCR character confusions
# ============================================================================

def _fix_character_confusions(text: str) -> str:
    """
    Repair common OCR substitutions, only inside alphabetic context.

    Examples:
    - "emai|" → "email", "c|ient" → "client"
    - "deve1oper" → "developer", "PR0GRAM" → "PROGRAM"
    - "0ffice" → "Office"
    - "$120,000", "401k", "2nd", "H1B" are left alone
    """
    text = PIPE_AFTER_LOWER_RE.sub("l", text)
    text = PIPE_BEFORE_LOWER_RE.sub("l", text)
    text = DIGIT_IN_LOWER_WORD_RE.sub(lambda m: LOWER_DIGIT_FIXES[m.group(1)], text)
    text = DIGIT_IN_UPPER_WORD_RE.sub(lambda m: UPPER_DIGIT_FIXES[m.group(1)], text)
    text = LEADING_ZERO_WORD_RE.sub("O", text)

    for pattern, replacement in SPLIT_JOB_TERMS:
        text = pattern.sub(replacement, text)
    for pattern, replacement in MANGLED_DOMAIN_FIXES:
        text = pattern.sub(replacement, text)
    return text


# ============================================================================
# Step 6: Punctuation variants
# ============================================================================

def _normalize_punctuation(text: str) -> str:
    text = DOUBLE_QUOTES_RE.sub('"', text)
    text = SINGLE_QUOTES_RE.sub("'", text)
    text = DASHES_RE.sub("-", text)
    text = text.replace("…", "...")
    text = BULLET_GLYPHS_RE.sub(CANONICAL_BULLET, text)
    text = LEADING_ASCII_BULLET_RE.sub(CANONICAL_BULLET + " ", text)
    text = LEADING_DASH_BULLET_RE.sub(CANONICAL_BULLET + " ", text)
    # "•Python" → "• Python"
    return re.sub(r"^" + CANONICAL_BULLET + r"(?=[^\s" + CANONICAL_BULLET + r"])", CANONICAL_BULLET + " ", text, flags=re.MULTILINE)


# ============================================================================
# Step 7: Noise lines
# ============================================================================

def _is_noise_line(line: str) -> bool:
    stripped = line.strip()
    if not stripped:
        return False
    if len(stripped) == 1:
        return True
    return bool(SYMBOL_ONLY_LINE_RE.match(stripped))


def _strip_noise_lines(text: str) -> str:
    return "\n".join(line for line in text.split("\n") if not _is_noise_line(line))


# ============================================================================
# Public API
# ============================================================================

def _normalize_once(text: str) -> str:
    text = _normalize_line_endings(text)
    text = _collapse_whitespace(text)
    text = _rejoin_hyphenated_breaks(text)
    text = _join_soft_wraps(text)
    text = _fix_character_confusions(text)
    text = _normalize_punctuation(text)
    text = _strip_noise_lines(text)
    return text.strip()


def normalize_text(raw: str) -> str:
    """
    Clean raw OCR or email text.

    Steps run in a fixed order, each relying on the previous one:
    1. CRLF/CR → LF
    2. Collapse horizontal whitespace, at most two consecutive newlines
    3. Rejoin hyphen-broken words across line breaks
    4. Join soft-wrapped continuation lines
    5. Repair OCR character confusions in alphabetic context
    6. Canonical quotes, dashes and bullets
    7. Drop single-character and symbol-only lines

    The pipeline is repeated until the text stops changing, so
    normalize_text(normalize_text(x)) == normalize_text(x).

    Never raises: on any internal failure the input is returned unmodified.
    """
    if not raw or not raw.strip():
        return ""

    try:
        text = raw
        for _ in range(MAX_NORMALIZE_ROUNDS):
            cleaned = _normalize_once(text)
            if cleaned == text:
                break
            text = cleaned
        else:
            logger.debug("normalize_text did not converge after %d rounds", MAX_NORMALIZE_ROUNDS)
        return text
    except Exception:
        logger.warning("Text normalization failed; passing input through unmodified", exc_info=True)
        return raw
