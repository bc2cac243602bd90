"""
LEADBANK CRM — Contact filter builder
Tests: has / has-not symmetry (blank + placeholders), email shape,
escaped substring filters, search, category delegation.
Run: pytest backend/tests/test_contact_filters.py -v
"""

import asyncio

import pytest

from services.contact_filters import (
    ContactFilterParams,
    PLACEHOLDER_VALUE,
    build_contact_filter,
)


def _db_op(coro):
    """Run async DB operation in a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _ids(store, params):
    found = _db_op(store.find(build_contact_filter(params)))
    return {c["id"] for c in found}


EMAIL_VALUES = {
    "e-valid": "john@acme.com",
    "e-padded": "  jane@acme.io ",
    "e-empty": "",
    "e-none": None,
    "e-spaces": "   ",
    "e-na": "N/A",
    "e-na2": "na",
    "e-none-word": " None ",
    "e-not-available": "Not Available",
    "e-no-data": "no data",
    "e-no-email": "No Email",
    "e-dash": "-",
    "e-bad-shape": "john at acme",
    "e-no-tld": "john@acme",
}


@pytest.fixture
def email_store(contact_store):
    docs = [{"id": cid, "name": cid, "email": value} for cid, value in EMAIL_VALUES.items()]
    docs.append({"id": "e-missing", "name": "e-missing"})
    _db_op(contact_store.collection.insert_many(docs))
    return contact_store


@pytest.fixture
def directory(contact_store):
    _db_op(contact_store.collection.insert_many([
        {"id": "d1", "name": "Alice", "company": "Acme (US)", "industry": "SaaS",
         "city": "Austin", "first_phone": "+1 512 555 0100",
         "person_linkedin_url": "https://linkedin.com/in/alice", "category": "IND-IT & Service"},
        {"id": "d2", "name": "Bob", "company": "Globex", "industry": "Retail",
         "company_city": "Austin", "first_phone": "n/a",
         "company_linkedin_url": "https://linkedin.com/company/globex", "category": "IND-IT&service"},
        {"id": "d3", "name": "Carol", "company": "Acme Europe", "industry": "SaaS tools",
         "country": "France", "first_phone": "", "person_linkedin_url": "none",
         "keywords": "devops, c++", "category": "Healthcare"},
        {"id": "d4", "name": "Dan", "email": "dan@initech.com", "company": "Initech",
         "company_country": "france", "category": "Retail"},
    ]))
    return contact_store


# ═══════════════════════════════════════════════════════════════
# 1. PRESENCE SYMMETRY
# ═══════════════════════════════════════════════════════════════

class TestEmailPresence:
    def test_has_email(self, email_store):
        assert _ids(email_store, ContactFilterParams(has_email="yes")) == {"e-valid", "e-padded"}

    def test_exact_complements(self, email_store):
        """Every record is in exactly one of has / has-not."""
        everyone = _ids(email_store, ContactFilterParams())
        has = _ids(email_store, ContactFilterParams(has_email="yes"))
        has_not = _ids(email_store, ContactFilterParams(has_email="no"))
        assert has | has_not == everyone
        assert has & has_not == set()
        assert len(everyone) == len(EMAIL_VALUES) + 1

    def test_flag_case_insensitive(self, email_store):
        assert _ids(email_store, ContactFilterParams(has_email="YES")) == {"e-valid", "e-padded"}

    def test_unknown_flag_ignored(self, email_store):
        assert build_contact_filter(ContactFilterParams(has_email="maybe")) == {}


class TestPlaceholders:
    @pytest.mark.parametrize("value", [
        "n/a", "N/A", "na", "none", "not available", "Not  Available", "no data",
        "no email", "-", " - ",
    ])
    def test_placeholders(self, value):
        assert PLACEHOLDER_VALUE.match(value)

    @pytest.mark.parametrize("value", ["nadia", "none@x.com", "--", "n/a/b"])
    def test_real_values(self, value):
        assert not PLACEHOLDER_VALUE.match(value)


class TestPhoneAndLinkedIn:
    def test_phone_symmetry(self, directory):
        has = _ids(directory, ContactFilterParams(has_phone="yes"))
        has_not = _ids(directory, ContactFilterParams(has_phone="no"))
        assert has == {"d1"}
        assert has_not == {"d2", "d3", "d4"}

    def test_linkedin_person_or_company(self, directory):
        has = _ids(directory, ContactFilterParams(has_linkedin="yes"))
        has_not = _ids(directory, ContactFilterParams(has_linkedin="no"))
        assert has == {"d1", "d2"}
        assert has_not == {"d3", "d4"}


# ═══════════════════════════════════════════════════════════════
# 2. TEXT FILTERS
# ═══════════════════════════════════════════════════════════════

class TestTextFilters:
    def test_company_special_characters(self, directory):
        assert _ids(directory, ContactFilterParams(company="acme (us")) == {"d1"}

    def test_company_substring(self, directory):
        assert _ids(directory, ContactFilterParams(company="ACME")) == {"d1", "d3"}

    def test_city_person_or_company(self, directory):
        assert _ids(directory, ContactFilterParams(city="austin")) == {"d1", "d2"}

    def test_country_person_or_company(self, directory):
        assert _ids(directory, ContactFilterParams(country="France")) == {"d3", "d4"}

    def test_keywords_escaped(self, directory):
        assert _ids(directory, ContactFilterParams(keywords="c++")) == {"d3"}

    def test_search_across_fields(self, directory):
        assert _ids(directory, ContactFilterParams(search="initech")) == {"d4"}
        assert _ids(directory, ContactFilterParams(search="saas")) == {"d1", "d3"}

    def test_blank_values_ignored(self, directory):
        assert build_contact_filter(ContactFilterParams(company="  ", search="")) == {}


# ═══════════════════════════════════════════════════════════════
# 3. COMBINATION
# ═══════════════════════════════════════════════════════════════

class TestCombination:
    def test_category_uses_lenient_matcher(self, directory):
        assert _ids(directory, ContactFilterParams(category="IND-IT & Service")) == {"d1", "d2"}

    def test_filters_are_anded(self, directory):
        params = ContactFilterParams(category="IND-IT & Service", has_phone="yes", city="Austin")
        assert _ids(directory, params) == {"d1"}

    def test_single_condition_not_wrapped(self):
        predicate = build_contact_filter(ContactFilterParams(industry="SaaS"))
        assert list(predicate) == ["industry"]
