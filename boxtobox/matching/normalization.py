"""
Shared label normalization for lookup tables and dedup keys.

Single source of truth: the club override table, achievement aliases and
the local player index all key on normalize_label().
"""

import re
import unicodedata


_SAFE_ORG_TOKENS = [
    r"\bfc\b", r"\bcf\b", r"\bsc\b", r"\bafc\b", r"\bssc\b",
    r"\bac\b", r"\bas\b", r"\bcd\b", r"\bud\b", r"\brc\b",
    r"\bsv\b", r"\bvfb\b", r"\btsv\b", r"\bfk\b", r"\bsk\b",
    r"\bclub\b",
]


def fold(text: str) -> str:
    """Trim + case-fold. Used where diacritics are significant (display names)."""
    if not text:
        return ""
    return text.strip().casefold()


def normalize_label(label: str, strip_org_tokens: bool = True) -> str:
    """
    Normalize a free-text label for table lookups.

    Steps:
    1. Lowercase + trim
    2. Strip diacritics (NFKD)
    3. Replace punctuation/hyphens/apostrophes with space
    4. Optionally remove juridical/organizational tokens (fc, cf, ac, ...)
    5. Collapse whitespace

    Examples:
        "FC Barcelona"        -> "barcelona"
        "Atlético Madrid"     -> "atletico madrid"
        "Paris Saint-Germain" -> "paris saint germain"
        "AC Milan"            -> "milan"
        "Ballon d'Or Winner"  -> "ballon d or winner"
    """
    if not label:
        return ""

    name = label.lower().strip()

    # Nordic letters are not decomposed by NFKD
    name = name.replace("ø", "o").replace("æ", "ae").replace("ð", "d")
    name = unicodedata.normalize("NFKD", name)
    name = "".join(c for c in name if not unicodedata.combining(c))

    name = re.sub(r"[^\w\s]", " ", name)

    if strip_org_tokens:
        for token in _SAFE_ORG_TOKENS:
            name = re.sub(token, "", name)

    return " ".join(name.split())
