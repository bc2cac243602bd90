"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Project Model (client engagement)                             ║
║                                                                              ║
║  ICP RULE:                                                                   ║
║  - An ICP is "defined" only if one list is non-empty                         ║
║    OR the size range differs from the default (0, 1000)                      ║
║  - The default range alone is NOT a criterion                                ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_COMPANY_SIZE_MIN = 0
DEFAULT_COMPANY_SIZE_MAX = 1000


def _clean_list(values) -> List[str]:
    if not values:
        return []
    # "SaaS, Fintech" -> ["SaaS", "Fintech"]
    if isinstance(values, str):
        values = values.split(",")
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


class IcpDefinition(BaseModel):
    """Ideal Customer Profile of a project"""
    model_config = ConfigDict(extra="ignore")

    target_industries: List[str] = Field(default_factory=list)
    target_job_titles: List[str] = Field(default_factory=list)
    company_size_min: int = DEFAULT_COMPANY_SIZE_MIN
    company_size_max: int = DEFAULT_COMPANY_SIZE_MAX
    geographies: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    exclusion_criteria: List[str] = Field(default_factory=list)

    @field_validator(
        "target_industries", "target_job_titles", "geographies",
        "keywords", "exclusion_criteria",
        mode="before"
    )
    @classmethod
    def drop_blank_entries(cls, v):
        return _clean_list(v)

    @field_validator("company_size_min", "company_size_max", mode="before")
    @classmethod
    def default_size(cls, v, info):
        if v is None or v == "":
            if info.field_name == "company_size_min":
                return DEFAULT_COMPANY_SIZE_MIN
            return DEFAULT_COMPANY_SIZE_MAX
        return v

    def has_size_criterion(self) -> bool:
        return not (
            self.company_size_min == DEFAULT_COMPANY_SIZE_MIN
            and self.company_size_max == DEFAULT_COMPANY_SIZE_MAX
        )

    def is_defined(self) -> bool:
        return bool(
            self.target_industries
            or self.target_job_titles
            or self.geographies
            or self.keywords
            or self.has_size_criterion()
        )


class ContactPerson(BaseModel):
    """Client-side contact person of a project"""
    model_config = ConfigDict(extra="ignore")

    full_name: str = ""
    designation: str = ""
    email: str = ""
    phone_number: str = ""
    linkedin_profile_url: str = ""


class Project(BaseModel):
    """Project fields the core reads (CRUD lives outside)"""
    model_config = ConfigDict(extra="ignore")

    id: str
    company_name: str = ""
    assigned_to: str = ""
    status: str = "draft"
    contact_person: ContactPerson = Field(default_factory=ContactPerson)
    icp_definition: IcpDefinition = Field(default_factory=IcpDefinition)
    created_at: Optional[str] = None

    @field_validator("contact_person", "icp_definition", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v if v is not None else {}
