"""
Text normalization used for matching counterparties, subjects, plan names
and security identifiers.
"""
import re
from typing import Optional, Pattern

UMLAUTS = (
    ('ä', 'ae'), ('Ä', 'Ae'),
    ('ö', 'oe'), ('Ö', 'Oe'),
    ('ü', 'ue'), ('Ü', 'Ue'),
    ('ß', 'ss'),
)

_WHITESPACE = re.compile(r"\s+")
_CONTRACT_NOISE = re.compile(r"[\s-]")
_NOT_ALNUM = re.compile(r"[^A-Z0-9]")


def fold_umlauts(text: Optional[str]) -> str:
    text = text or ''
    for umlaut, replacement in UMLAUTS:
        text = text.replace(umlaut, replacement)
    return text


def normalize_name(text: Optional[str]) -> str:
    """Lower case, umlauts folded, trailing whitespace removed."""
    return fold_umlauts((text or '').lower().rstrip())


def strip_whitespace(text: Optional[str]) -> str:
    return _WHITESPACE.sub('', text or '')


def normalize_contract_number(text: Optional[str]) -> str:
    return _CONTRACT_NOISE.sub('', text or '').lower()


def normalize_security_text(text: Optional[str]) -> str:
    """Upper case A-Z/0-9 only: 'Mercedes-Benz Group' -> 'MERCEDESBENZGROUP'."""
    return _NOT_ALNUM.sub('', fold_umlauts(text).upper())


def normalize_iban(text: Optional[str]) -> str:
    return strip_whitespace(text).upper()


def glob_to_regex(pattern: str) -> Pattern:
    """Compiles an alias pattern ('*' any run, '?' one character) to an anchored regex."""
    escaped = re.escape(pattern.lower()).replace(r'\*', '.*').replace(r'\?', '.')
    return re.compile(f"^{escaped}$", re.IGNORECASE)
