"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Import reports                                               ║
║                                                                              ║
║  RULE: every input row lands in exactly ONE counter                          ║
║  total = empty_rows + invalid_rows + duplicates_in_batch                     ║
║        + already_in_project + failed_rows + imported                         ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Dict, List
from pydantic import BaseModel, Field
from enum import Enum


class ImportMode(str, Enum):
    """
    STRICT: rows need a name, repeated emails in the batch are dropped.
    LENIENT: permissive mode, missing name/email/company are synthesized
             (Contact N, contactN@unknown.com, Unknown Company) and repeated
             emails are rewritten (john1@x.com) so every row survives.
    """
    STRICT = "strict"
    LENIENT = "lenient"


class BulkImportReport(BaseModel):
    """Outcome of a project bulk import"""
    total: int = 0
    imported: int = 0
    skipped: int = 0
    empty_rows: int = 0
    invalid_rows: int = 0
    duplicates_in_batch: int = 0
    emails_rewritten: int = 0
    already_in_project: int = 0
    failed_rows: int = 0
    new_contacts_in_databank: int = 0
    existing_contacts_in_databank: int = 0
    existing_contacts_updated: int = 0
    project_contacts_created: int = 0
    errors: List[str] = Field(default_factory=list)
    message: str = ""

    def accounted_rows(self) -> int:
        return (
            self.empty_rows
            + self.invalid_rows
            + self.duplicates_in_batch
            + self.already_in_project
            + self.failed_rows
            + self.imported
        )


class ColumnMappingReport(BaseModel):
    detected: List[str] = Field(default_factory=list)
    mapped: Dict[str, str] = Field(default_factory=dict)
    unmapped: List[str] = Field(default_factory=list)


class DatabankImportReport(BaseModel):
    """Outcome of an import into the databank (no project)"""
    total_rows: int = 0
    valid_contacts: int = 0
    inserted: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)
    column_mapping: ColumnMappingReport = Field(default_factory=ColumnMappingReport)
