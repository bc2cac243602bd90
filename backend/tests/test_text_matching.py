"""
LEADBANK CRM — Text matching helpers
Tests: escaping, case-insensitive containment, significant words, size parsing.
Run: pytest backend/tests/test_text_matching.py -v
"""

import re

from services.text_matching import (
    contains_ci,
    contains_ci_regex,
    escape_for_pattern,
    exact_ci_regex,
    extract_significant_words,
    mutual_contains_ci,
    normalize,
    parse_max_digits_run,
)


# ═══════════════════════════════════════════════════════════════
# 1. NORMALIZATION & ESCAPING
# ═══════════════════════════════════════════════════════════════

class TestNormalize:
    def test_lower_and_trim(self):
        assert normalize("  John@Example.COM ") == "john@example.com"

    def test_none(self):
        assert normalize(None) == ""

    def test_number(self):
        assert normalize(42) == "42"


class TestEscape:
    def test_all_specials_escaped(self):
        raw = ".*+?^${}()|[]\\"
        escaped = escape_for_pattern(raw)
        assert re.fullmatch(escaped, raw)

    def test_plain_text_untouched(self):
        assert escape_for_pattern("SaaS B2B") == "SaaS B2B"

    def test_escaped_pattern_is_literal(self):
        """'C++' must not blow up nor match 'CCC'."""
        pattern = contains_ci_regex("C++")
        assert pattern.search("Senior C++ developer")
        assert not pattern.search("CCC")

    def test_exact_regex_anchored(self):
        pattern = exact_ci_regex("  John Smith ")
        assert pattern.match("JOHN SMITH")
        assert not pattern.match("John Smithson")
        assert not pattern.match("Dr John Smith")


# ═══════════════════════════════════════════════════════════════
# 2. CONTAINMENT
# ═══════════════════════════════════════════════════════════════

class TestContains:
    def test_case_insensitive(self):
        assert contains_ci("B2B SaaS", "saas") is True

    def test_empty_needle_never_matches(self):
        assert contains_ci("anything", "") is False
        assert contains_ci("anything", "   ") is False
        assert contains_ci("anything", None) is False

    def test_none_haystack(self):
        assert contains_ci(None, "saas") is False

    def test_mutual(self):
        """'Software' is contained by 'Software Development' and vice versa."""
        assert mutual_contains_ci("Software", "Software Development") is True
        assert mutual_contains_ci("Software Development", "Software") is True
        assert mutual_contains_ci("Retail", "Software") is False

    def test_mutual_empty_side(self):
        assert mutual_contains_ci("", "Software") is False


# ═══════════════════════════════════════════════════════════════
# 3. SIGNIFICANT WORDS
# ═══════════════════════════════════════════════════════════════

class TestSignificantWords:
    def test_ampersand_category(self):
        assert extract_significant_words("Web Design & Development") == ["Web", "Design", "Development"]

    def test_stop_words_and_short_tokens_dropped(self):
        assert extract_significant_words("Tools for the IT and HR") == ["Tools"]

    def test_hyphen_split(self):
        assert extract_significant_words("IND-IT & Service") == ["IND", "Service"]

    def test_empty(self):
        assert extract_significant_words("") == []
        assert extract_significant_words(None) == []


# ═══════════════════════════════════════════════════════════════
# 4. COMPANY SIZE PARSING
# ═══════════════════════════════════════════════════════════════

class TestParseMaxDigitsRun:
    def test_range_takes_max(self):
        assert parse_max_digits_run("501-1000 Employees") == 1000

    def test_single_number(self):
        assert parse_max_digits_run("250") == 250

    def test_no_digits(self):
        assert parse_max_digits_run("no data") is None

    def test_none_and_empty(self):
        assert parse_max_digits_run(None) is None
        assert parse_max_digits_run("") is None

    def test_zero_is_a_number(self):
        assert parse_max_digits_run("0") == 0

    def test_thousands_separator_splits_runs(self):
        assert parse_max_digits_run("10,001+") == 10
        assert parse_max_digits_run("10001+") == 10001
