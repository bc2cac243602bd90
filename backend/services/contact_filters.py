"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Contact filter builder                                       ║
║                                                                              ║
║  Translates user-facing filters into Mongo predicates.                       ║
║                                                                              ║
║  PRESENCE RULE (email / phone / LinkedIn):                                   ║
║  blank = missing | null | "" | whitespace | placeholder                      ║
║  placeholders: n/a, na, none, not available, no data, no email, "-"          ║
║  "has" = P and "has not" = $nor[P]  -> exact complements, no gap/overlap     ║
║                                                                              ║
║  TEXT FILTERS: escaped, case-insensitive substring                           ║
║  CATEGORY: lenient matcher (services.category_matcher)                       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import re
from typing import Iterable, List, Optional

from pydantic import BaseModel

from models import IcpDefinition, LOCATION_FIELDS
from services.category_matcher import category_filter
from services.text_matching import contains_ci_regex, exact_ci_regex

BLANK_VALUE = re.compile(r"^\s*$")
PLACEHOLDER_VALUE = re.compile(
    r"^\s*(no\s*email|n/a|na|none|not\s*available|no\s*data|-)\s*$",
    re.IGNORECASE
)
EMAIL_SHAPE = re.compile(r"^\s*[^\s@]+@[^\s@]+\.[^\s@]+")

SEARCH_FIELDS = ["name", "email", "company", "title", "first_phone", "industry", "keywords"]
EXCLUSION_FIELDS = ["industry", "company", "keywords"]

YES = "yes"
NO = "no"


class ContactFilterParams(BaseModel):
    category: Optional[str] = None
    search: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None
    keywords: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    has_linkedin: Optional[str] = None  # "yes" | "no"
    has_email: Optional[str] = None
    has_phone: Optional[str] = None


# ==================== PRESENCE ====================

def field_present(field: str) -> dict:
    """Non-blank, non-placeholder value"""
    return {"$and": [
        {field: {"$exists": True, "$nin": [None, ""]}},
        {field: {"$not": BLANK_VALUE}},
        {field: {"$not": PLACEHOLDER_VALUE}},
    ]}


def email_present() -> dict:
    return {"$and": [
        field_present("email"),
        {"email": EMAIL_SHAPE},
    ]}


def linkedin_present() -> dict:
    return {"$or": [
        field_present("person_linkedin_url"),
        field_present("company_linkedin_url"),
    ]}


def absent(present: dict) -> dict:
    return {"$nor": [present]}


def presence_filter(flag: Optional[str], present: dict) -> Optional[dict]:
    flag = (flag or "").strip().lower()
    if flag == YES:
        return present
    if flag == NO:
        return absent(present)
    return None


# ==================== TEXT ====================

def substring_filter(fields: Iterable[str], value: Optional[str]) -> Optional[dict]:
    if not value or not value.strip():
        return None
    pattern = contains_ci_regex(value)
    fields = list(fields)
    if len(fields) == 1:
        return {fields[0]: pattern}
    return {"$or": [{f: pattern} for f in fields]}


def combine_and(conditions: List[Optional[dict]]) -> dict:
    conditions = [c for c in conditions if c]
    if not conditions:
        return {}
    if len(conditions) == 1:
        return conditions[0]
    return {"$and": conditions}


def build_contact_filter(params: ContactFilterParams) -> dict:
    """Full predicate for a contact listing"""
    return combine_and([
        category_filter(params.category) if params.category else None,
        substring_filter(SEARCH_FIELDS, params.search),
        substring_filter(["industry"], params.industry),
        substring_filter(["company"], params.company),
        substring_filter(["keywords"], params.keywords),
        substring_filter(["city", "company_city"], params.city),
        substring_filter(["state", "company_state"], params.state),
        substring_filter(["country", "company_country"], params.country),
        presence_filter(params.has_linkedin, linkedin_present()),
        presence_filter(params.has_email, email_present()),
        presence_filter(params.has_phone, field_present("first_phone")),
    ])


# ==================== ICP CANDIDATES ====================

def icp_criteria_conditions(icp: IcpDefinition) -> List[dict]:
    """
    One condition per queryable ICP criterion (industries, titles,
    geographies, keywords). Company size is free text: scored, not queried.
    """
    conditions = []
    if icp.target_industries:
        conditions.append({"industry": {"$in": [contains_ci_regex(v) for v in icp.target_industries]}})
    if icp.target_job_titles:
        conditions.append({"title": {"$in": [contains_ci_regex(v) for v in icp.target_job_titles]}})
    if icp.geographies:
        geo = []
        for g in icp.geographies:
            pattern = contains_ci_regex(g)
            geo.extend({f: pattern} for f in LOCATION_FIELDS)
        conditions.append({"$or": geo})
    if icp.keywords:
        conditions.append({"keywords": {"$in": [contains_ci_regex(v) for v in icp.keywords]}})
    return conditions


def build_icp_candidate_filter(
    icp: IcpDefinition,
    exclude_contact_ids: Iterable[str] = (),
    contact_person_email: Optional[str] = None
) -> Optional[dict]:
    """
    OR-union of the ICP criteria, NOR of the exclusion criteria,
    minus already-linked contacts and the project's own contact person.
    None when the ICP has no queryable criterion.
    """
    conditions = icp_criteria_conditions(icp)
    if not conditions:
        return None

    predicate = {"$or": conditions}

    if contact_person_email and contact_person_email.strip():
        predicate["email"] = {"$not": exact_ci_regex(contact_person_email)}

    if icp.exclusion_criteria:
        nor = []
        for exclusion in icp.exclusion_criteria:
            pattern = contains_ci_regex(exclusion)
            nor.extend({f: pattern} for f in EXCLUSION_FIELDS)
        predicate["$nor"] = nor

    excluded = [i for i in exclude_contact_ids if i]
    if excluded:
        predicate["id"] = {"$nin": excluded}

    return predicate
