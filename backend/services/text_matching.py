"""
LEADBANK CRM - Text normalization & matching helpers

Shared by the identity resolver, the ICP scorer and the filter builder.
All comparisons are case-insensitive. An empty needle never matches.
"""

import re
from typing import List, Optional

# Characters with special meaning in a Mongo / Python regex
_PATTERN_SPECIALS = re.compile(r"[.*+?^${}()|\[\]\\]")

_WORD_SPLIT = re.compile(r"[&\s-]+")
_DIGIT_RUN = re.compile(r"\d+")

STOP_WORDS = {"the", "and", "for", "with", "from", "or"}


def normalize(value) -> str:
    """Lowercase + trim, None -> "" """
    if value is None:
        return ""
    return str(value).strip().lower()


def escape_for_pattern(text) -> str:
    """Escape . * + ? ^ $ { } ( ) | [ ] \\ so text can sit inside a regex"""
    if text is None:
        return ""
    return _PATTERN_SPECIALS.sub(lambda m: "\\" + m.group(0), str(text))


def contains_ci(haystack, needle) -> bool:
    """Case-insensitive substring test. Empty needle -> False."""
    needle = normalize(needle)
    if not needle:
        return False
    return needle in normalize(haystack)


def mutual_contains_ci(a, b) -> bool:
    """a contains b OR b contains a (both must be non-empty)"""
    return contains_ci(a, b) or contains_ci(b, a)


def extract_significant_words(phrase) -> List[str]:
    """
    Split on '&', whitespace and hyphens, keep tokens longer than 2 chars
    that are not stop words. Original casing is kept.

    "Web Design & Development" -> ["Web", "Design", "Development"]
    """
    if not phrase:
        return []
    words = []
    for token in _WORD_SPLIT.split(str(phrase)):
        token = token.strip()
        if len(token) > 2 and token.lower() not in STOP_WORDS:
            words.append(token)
    return words


def parse_max_digits_run(text) -> Optional[int]:
    """
    Largest integer found in a free-text field, None if no digits.

    "501-1000 Employees" -> 1000
    "no data" -> None
    """
    if text is None:
        return None
    runs = _DIGIT_RUN.findall(str(text))
    if not runs:
        return None
    return max(int(r) for r in runs)


def exact_ci_regex(value) -> "re.Pattern":
    """Anchored, case-insensitive whole-string pattern"""
    return re.compile(f"^{escape_for_pattern(normalize(value))}$", re.IGNORECASE)


def contains_ci_regex(value) -> "re.Pattern":
    """Unanchored, case-insensitive substring pattern"""
    return re.compile(escape_for_pattern(str(value).strip()), re.IGNORECASE)
