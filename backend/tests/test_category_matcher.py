"""
LEADBANK CRM — Lenient category matching
Tests: rule table against the historical variants found in the databank,
store predicate through mongomock.
Run: pytest backend/tests/test_category_matcher.py -v
"""

import asyncio

import pytest

from services.category_matcher import (
    CATEGORY_RULES,
    KNOWN_SPELLING_VARIANTS,
    build_category_regex,
    build_rule_patterns,
    category_filter,
    match_category,
)


def _db_op(coro):
    """Run async DB operation in a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# ═══════════════════════════════════════════════════════════════
# 1. RULE TABLE
# ═══════════════════════════════════════════════════════════════

class TestRuleTable:
    def test_ranks_are_ordered(self):
        assert [r.rank for r in CATEGORY_RULES] == [0, 1, 2, 3]
        assert [r.name for r in CATEGORY_RULES] == [
            "exact", "ampersand_spacing", "first_last_words", "spelling_variant"
        ]

    def test_spelling_table_is_explicit(self):
        assert KNOWN_SPELLING_VARIANTS["development"] == ["devlopment", "developement"]

    def test_empty_category_has_no_pattern(self):
        assert build_rule_patterns("") == []
        assert build_rule_patterns("   ") == []
        assert build_category_regex(None) is None
        assert category_filter("") == {}


# ═══════════════════════════════════════════════════════════════
# 2. HISTORICAL VARIANTS
# ═══════════════════════════════════════════════════════════════

class TestHistoricalVariants:
    @pytest.mark.parametrize("stored, rule", [
        ("IND-IT & Service", "exact"),
        ("ind-it & service", "exact"),
        ("IND-IT&service", "ampersand_spacing"),
        ("IND-IT  &  Service", "ampersand_spacing"),
    ])
    def test_ind_it_service(self, stored, rule):
        match = match_category(stored, "IND-IT & Service")
        assert match is not None
        assert match.rule == rule

    def test_web_development_missing_middle(self):
        """'Web Development' is accepted for 'Web Design & Development'."""
        match = match_category("Web Development", "Web Design & Development")
        assert match.rule == "first_last_words"
        assert match.rank == 2

    @pytest.mark.parametrize("typo", ["Web Design & Devlopment", "Web Developement"])
    def test_web_development_typos(self, typo):
        match = match_category(typo, "Web Design & Development")
        assert match.rule == "spelling_variant"
        assert match.rank == 3

    def test_accounting_book_keeping(self):
        match = match_category("Accounting&Book keeping", "Accounting & Book keeping")
        assert match.rule == "ampersand_spacing"

    def test_best_rule_wins(self):
        """An exact value also matches looser rules: the lowest rank is reported."""
        match = match_category("Web Design & Development", "Web Design & Development")
        assert match.rule == "exact"
        assert match.rank == 0


# ═══════════════════════════════════════════════════════════════
# 3. CATEGORIES WITHOUT '&'
# ═══════════════════════════════════════════════════════════════

class TestPlainCategories:
    def test_multi_word_first_last(self):
        match = match_category("Software and IT Services", "Software Development Services")
        assert match.rule == "first_last_words"

    def test_single_word_is_exact_only(self):
        assert match_category("healthcare", "Healthcare").rule == "exact"
        assert match_category("Healthcare Services", "Healthcare") is None

    def test_unrelated(self):
        assert match_category("Graphic Design", "Web Design & Development") is None
        assert match_category(None, "Web Design & Development") is None

    def test_special_characters_are_literal(self):
        """'C++ (Dev)' compiles and only matches itself."""
        assert match_category("c++ (dev)", "C++ (Dev)").rule == "exact"
        assert match_category("CCC Dev", "C++ (Dev)") is None


# ═══════════════════════════════════════════════════════════════
# 4. STORE PREDICATE
# ═══════════════════════════════════════════════════════════════

class TestCategoryFilter:
    def test_filter_on_store(self, contact_store):
        docs = [
            {"id": "c1", "name": "A", "category": "Web Design & Development"},
            {"id": "c2", "name": "B", "category": "Web Development"},
            {"id": "c3", "name": "C", "category": "Web Design & Devlopment"},
            {"id": "c4", "name": "D", "category": "Graphic Design"},
            {"id": "c5", "name": "E", "category": ""},
        ]
        _db_op(contact_store.collection.insert_many(docs))

        found = _db_op(contact_store.find(category_filter("Web Design & Development")))
        assert sorted(c["id"] for c in found) == ["c1", "c2", "c3"]

    def test_regex_agrees_with_in_process_match(self):
        pattern = build_category_regex("IND-IT & Service")
        for value in ["IND-IT&service", "IND-IT & Service", "Retail"]:
            assert bool(pattern.match(value)) == (match_category(value, "IND-IT & Service") is not None)
