"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Models Package                                               ║
║                                                                              ║
║  Exports all models for easy import                                          ║
║  from models import ContactDraft, IcpDefinition, MatchResult, etc.           ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

# Contact (Databank)
from .contact import (
    CONTACT_FIELDS,
    UPDATABLE_FIELDS,
    LOCATION_FIELDS,
    CONTACT_PROJECTION,
    ContactDraft,
    ContactCreate,
    ContactDocument,
    is_blank,
)

# Project + ICP
from .project import (
    DEFAULT_COMPANY_SIZE_MIN,
    DEFAULT_COMPANY_SIZE_MAX,
    IcpDefinition,
    ContactPerson,
    Project,
)

# Project <-> Contact link
from .project_contact import (
    ProjectStage,
    Priority,
    VALID_STAGES,
    VALID_PRIORITIES,
    DEFAULT_STAGE,
    DEFAULT_PRIORITY,
    ProjectContactUpdate,
    ProjectContactDocument,
)

# ICP matching
from .matching import (
    MatchType,
    MATCH_TYPE_RANK,
    MatchedCriteria,
    RecommendationReason,
    MatchResult,
)

# Imports
from .imports import (
    ImportMode,
    BulkImportReport,
    ColumnMappingReport,
    DatabankImportReport,
)

__all__ = [
    # Contact
    "CONTACT_FIELDS",
    "UPDATABLE_FIELDS",
    "LOCATION_FIELDS",
    "CONTACT_PROJECTION",
    "ContactDraft",
    "ContactCreate",
    "ContactDocument",
    "is_blank",
    # Project
    "DEFAULT_COMPANY_SIZE_MIN",
    "DEFAULT_COMPANY_SIZE_MAX",
    "IcpDefinition",
    "ContactPerson",
    "Project",
    # ProjectContact
    "ProjectStage",
    "Priority",
    "VALID_STAGES",
    "VALID_PRIORITIES",
    "DEFAULT_STAGE",
    "DEFAULT_PRIORITY",
    "ProjectContactUpdate",
    "ProjectContactDocument",
    # Matching
    "MatchType",
    "MATCH_TYPE_RANK",
    "MatchedCriteria",
    "RecommendationReason",
    "MatchResult",
    # Imports
    "ImportMode",
    "BulkImportReport",
    "ColumnMappingReport",
    "DatabankImportReport",
]
