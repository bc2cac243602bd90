"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Lenient category matching                                    ║
║                                                                              ║
║  Historical category labels were typed by hand:                              ║
║  - "IND-IT & Service"          vs "IND-IT&service"                           ║
║  - "Web Design & Development"  vs "Web Development"                          ║
║  - "Web Design & Development"  vs "Web Design & Devlopment"                  ║
║  - "Accounting & Book keeping" vs "Accounting&Book keeping"                  ║
║                                                                              ║
║  RULES (ordered, lowest rank wins):                                          ║
║  0 exact              case-insensitive equality                              ║
║  1 ampersand_spacing  parts around & joined by flexible spacing              ║
║  2 first_last_words   first significant word ... last significant word      ║
║  3 spelling_variant   first word ... known misspelling of last word          ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import re
import logging
from typing import Callable, List, NamedTuple, Optional

from services.text_matching import escape_for_pattern, extract_significant_words

logger = logging.getLogger("category_matcher")

# Known misspellings found in the databank, keyed by the correct word
KNOWN_SPELLING_VARIANTS = {
    "development": ["devlopment", "developement"],
}


class CategoryRule(NamedTuple):
    name: str
    rank: int
    build: Callable[[str, List[str]], List[str]]


class CategoryMatch(NamedTuple):
    rule: str
    rank: int


def _exact(category: str, words: List[str]) -> List[str]:
    return [escape_for_pattern(category)]


def _ampersand_spacing(category: str, words: List[str]) -> List[str]:
    if "&" not in category or not words:
        return []
    parts = [escape_for_pattern(p.strip()) for p in re.split(r"\s*&\s*", category)]
    return ["\\s*&\\s*".join(parts)]


def _first_last_words(category: str, words: List[str]) -> List[str]:
    if not words:
        return []
    first = escape_for_pattern(words[0])
    last = escape_for_pattern(words[-1])
    if "&" in category:
        return [f"{first}.*{last}"]
    if len(words) >= 2:
        return [f".*{first}.*{last}.*"]
    return []


def _spelling_variant(category: str, words: List[str]) -> List[str]:
    if "&" not in category or not words:
        return []
    first = escape_for_pattern(words[0])
    last_lower = words[-1].lower()
    patterns = []
    for correct, variants in KNOWN_SPELLING_VARIANTS.items():
        if correct in last_lower:
            patterns.extend(f"{first}.*{escape_for_pattern(v)}" for v in variants)
    return patterns


CATEGORY_RULES = [
    CategoryRule("exact", 0, _exact),
    CategoryRule("ampersand_spacing", 1, _ampersand_spacing),
    CategoryRule("first_last_words", 2, _first_last_words),
    CategoryRule("spelling_variant", 3, _spelling_variant),
]


def build_rule_patterns(category: str) -> List[tuple]:
    """
    (rule, compiled pattern) for every rule that applies, in rank order.
    Falls back to the exact rule alone when a pattern cannot be compiled.
    """
    category = (category or "").strip()
    if not category:
        return []
    words = extract_significant_words(category)
    compiled = []
    try:
        for rule in CATEGORY_RULES:
            for fragment in rule.build(category, words):
                if fragment and fragment.strip():
                    compiled.append((rule, re.compile(f"^(?:{fragment})$", re.IGNORECASE)))
    except re.error as e:
        logger.warning(f"[CATEGORY] Pattern build failed for '{category}': {e}")
        compiled = []

    if not compiled:
        exact = CATEGORY_RULES[0]
        compiled = [(exact, re.compile(f"^{escape_for_pattern(category)}$", re.IGNORECASE))]
    return compiled


def build_category_regex(category: str) -> Optional["re.Pattern"]:
    """Single alternation pattern usable as a store predicate"""
    patterns = build_rule_patterns(category)
    if not patterns:
        return None
    alternation = "|".join(p.pattern for _, p in patterns)
    return re.compile(f"^(?:{alternation})$", re.IGNORECASE)


def match_category(value: str, category: str) -> Optional[CategoryMatch]:
    """Best (lowest rank) rule accepting a stored value for a requested category"""
    if value is None:
        return None
    value = str(value).strip()
    for rule, pattern in build_rule_patterns(category):
        if pattern.match(value):
            return CategoryMatch(rule.name, rule.rank)
    return None


def category_filter(category: str) -> dict:
    """Store predicate for the category field ({} when no category)"""
    pattern = build_category_regex(category)
    if pattern is None:
        return {}
    return {"category": pattern}
