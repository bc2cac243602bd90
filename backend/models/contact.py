"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Contact Model (Databank)                                      ║
║                                                                              ║
║  RULES:                                                                      ║
║  - name is the only required field, everything else defaults to ""           ║
║  - identity is contextual (name+email, name+company, bare name)              ║
║  - imports never overwrite a populated field (fill-only)                     ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator


# Every field the schema defines, in display order
CONTACT_FIELDS = [
    "name",
    "title",
    "company",
    "email",
    "first_phone",
    "employees",
    "category",
    "industry",
    "keywords",
    # LinkedIn & social
    "person_linkedin_url",
    "company_linkedin_url",
    "website",
    "facebook_url",
    "twitter_url",
    # Location
    "city",
    "state",
    "country",
    # Company details
    "company_address",
    "company_city",
    "company_state",
    "company_country",
    "company_phone",
    # Additional
    "seo_description",
    "technologies",
    "annual_revenue",
]

# Fields a bulk import may fill on an existing record
UPDATABLE_FIELDS = list(CONTACT_FIELDS)

# Location fields scanned for ICP geographies
LOCATION_FIELDS = [
    "city",
    "state",
    "country",
    "company_city",
    "company_state",
    "company_country",
]

# Projection used when contacts are returned to callers
CONTACT_PROJECTION = {"_id": 0}


def is_blank(value) -> bool:
    """True for None, non-strings coerced to "", and whitespace-only strings"""
    if value is None:
        return True
    return str(value).strip() == ""


class ContactDraft(BaseModel):
    """
    Candidate contact record (manual entry or one import row).
    Values are trimmed; nothing else is validated here.
    """
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    title: str = ""
    company: str = ""
    email: str = ""
    first_phone: str = ""
    employees: str = ""
    category: str = ""
    industry: str = ""
    keywords: str = ""

    person_linkedin_url: str = ""
    company_linkedin_url: str = ""
    website: str = ""
    facebook_url: str = ""
    twitter_url: str = ""

    city: str = ""
    state: str = ""
    country: str = ""

    company_address: str = ""
    company_city: str = ""
    company_state: str = ""
    company_country: str = ""
    company_phone: str = ""

    seo_description: str = ""
    technologies: str = ""
    annual_revenue: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def coerce_and_trim(cls, v):
        # Spreadsheet cells arrive as numbers or None
        if v is None:
            return ""
        return str(v).strip()

    def has_any_data(self) -> bool:
        return any(not is_blank(getattr(self, f)) for f in CONTACT_FIELDS)


class ContactCreate(ContactDraft):
    """Single contact creation (name required)"""
    name: str

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        if not v:
            raise ValueError("Contact name is required")
        return v


class ContactDocument(ContactDraft):
    """Contact as stored in the contacts collection"""
    id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
