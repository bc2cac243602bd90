"""
LEADBANK CRM - Spreadsheet header -> contact field mapping

Rows arrive already parsed (file parsing is done upstream) with whatever
headers the user's spreadsheet had. Headers are normalized (lowercase,
no '#', whitespace, '_' or '-') then looked up in the alias table; when no
alias matches exactly, the longest alias contained in the header wins.
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from models import ColumnMappingReport

_HEADER_NOISE = re.compile(r"[#\s_\-]+")

# Shortest alias accepted for a partial (contained) match
MIN_PARTIAL_ALIAS = 3

COLUMN_ALIASES = {
    # Name
    "name": "name",
    "fullname": "name",
    "contactname": "name",
    "personname": "name",

    # Title
    "title": "title",
    "jobtitle": "title",
    "position": "title",
    "designation": "title",
    "role": "title",

    # Company
    "company": "company",
    "companyname": "company",
    "organization": "company",
    "organisation": "company",
    "org": "company",

    # Email
    "email": "email",
    "emailaddress": "email",
    "mail": "email",

    # Phone
    "firstphone": "first_phone",
    "phone": "first_phone",
    "phonenumber": "first_phone",
    "contactnumber": "first_phone",
    "mobilenumber": "first_phone",
    "mobile": "first_phone",
    "telephone": "first_phone",
    "tel": "first_phone",

    # Employees
    "employees": "employees",
    "noofemployees": "employees",
    "numberofemployees": "employees",
    "employee": "employees",
    "emp": "employees",

    "category": "category",
    "cat": "category",

    "industry": "industry",
    "sector": "industry",

    "keywords": "keywords",
    "keyword": "keywords",
    "tags": "keywords",

    # LinkedIn
    "personlinkedinurl": "person_linkedin_url",
    "personlinkedin": "person_linkedin_url",
    "personlinkedinprofile": "person_linkedin_url",
    "linkedinurl": "person_linkedin_url",
    "linkedin": "person_linkedin_url",
    "companylinkedinurl": "company_linkedin_url",
    "companylinkedin": "company_linkedin_url",
    "companylinkedinprofile": "company_linkedin_url",

    # Web & social
    "website": "website",
    "websiteurl": "website",
    "web": "website",
    "url": "website",
    "facebookurl": "facebook_url",
    "facebook": "facebook_url",
    "fb": "facebook_url",
    "twitterurl": "twitter_url",
    "twitter": "twitter_url",
    "x": "twitter_url",

    # Person location
    "city": "city",
    "personcity": "city",
    "state": "state",
    "personstate": "state",
    "province": "state",
    "country": "country",
    "personcountry": "country",

    # Company details
    "companyaddress": "company_address",
    "companyaddr": "company_address",
    "address": "company_address",
    "companycity": "company_city",
    "companystate": "company_state",
    "companycountry": "company_country",
    "companyphone": "company_phone",
    "companyphonenumber": "company_phone",

    # Additional
    "seodescription": "seo_description",
    "companydescription": "seo_description",
    "description": "seo_description",
    "about": "seo_description",
    "technologies": "technologies",
    "technology": "technologies",
    "tech": "technologies",
    "annualrevenue": "annual_revenue",
    "revenue": "annual_revenue",
}

# Longest first so "companyphone" wins over "phone" on partial matches
_PARTIAL_ALIASES: List[Tuple[str, str]] = sorted(
    ((k, v) for k, v in COLUMN_ALIASES.items() if len(k) >= MIN_PARTIAL_ALIAS),
    key=lambda kv: len(kv[0]),
    reverse=True
)


def normalize_column_name(header) -> str:
    if header is None:
        return ""
    return _HEADER_NOISE.sub("", str(header).strip().lower())


def find_matching_field(header) -> Optional[str]:
    normalized = normalize_column_name(header)
    if not normalized:
        return None
    if normalized in COLUMN_ALIASES:
        return COLUMN_ALIASES[normalized]
    for alias, field in _PARTIAL_ALIASES:
        if alias in normalized:
            return field
    return None


def map_row(row: dict, report: ColumnMappingReport = None) -> Dict[str, str]:
    """
    Raw spreadsheet row -> contact fields. Blank cells are dropped, the first
    non-blank value wins when several headers map to the same field.
    """
    contact = {}
    for header, value in row.items():
        field = find_matching_field(header)

        if report is not None:
            if header not in report.detected:
                report.detected.append(header)
            if field:
                report.mapped.setdefault(header, field)
            elif header not in report.unmapped:
                report.unmapped.append(header)

        if not field or value is None:
            continue
        value = str(value).strip()
        if value and field not in contact:
            contact[field] = value
    return contact


def map_rows(rows: Iterable[dict]) -> Tuple[List[Dict[str, str]], ColumnMappingReport]:
    report = ColumnMappingReport()
    mapped = [map_row(row, report) for row in rows]
    return mapped, report
