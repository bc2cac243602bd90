"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - ProjectContact (project <-> contact link)                    ║
║                                                                              ║
║  RULE: exactly ONE link per (project_id, contact_id)                         ║
║  Creating an existing link is a no-op, never an error                        ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Optional
from pydantic import BaseModel
from enum import Enum


class ProjectStage(str, Enum):
    """Pipeline stages (legacy values kept for old links)"""
    CIP = "CIP"
    NO_REPLY = "No Reply"
    NOT_INTERESTED = "Not Interested"
    MEETING_PROPOSED = "Meeting Proposed"
    MEETING_SCHEDULED = "Meeting Scheduled"
    IN_PERSON_MEETING = "In-Person Meeting"
    MEETING_COMPLETED = "Meeting Completed"
    SQL = "SQL"
    TECH_DISCUSSION = "Tech Discussion"
    WON = "WON"
    LOST = "Lost"
    LOW_POTENTIAL_OPEN = "Low Potential - Open"
    POTENTIAL_FUTURE = "Potential Future"
    # Legacy
    NEW = "New"
    CONTACTED = "Contacted"
    QUALIFIED = "Qualified"
    PROPOSAL = "Proposal"
    NEGOTIATION = "Negotiation"


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


VALID_STAGES = [s.value for s in ProjectStage]
VALID_PRIORITIES = [p.value for p in Priority]

DEFAULT_STAGE = ProjectStage.NEW.value
DEFAULT_PRIORITY = Priority.MEDIUM.value


class ProjectContactUpdate(BaseModel):
    """Stage / assignment / priority change on a link"""
    stage: Optional[ProjectStage] = None
    assigned_to: Optional[str] = None
    priority: Optional[Priority] = None


class ProjectContactDocument(BaseModel):
    id: str
    project_id: str
    contact_id: str
    stage: ProjectStage = ProjectStage.NEW
    assigned_to: str = ""
    priority: Priority = Priority.MEDIUM
    imported_at: Optional[str] = None
    created_by: str = "system"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
