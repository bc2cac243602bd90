"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Project contacts (links)                                     ║
║                                                                              ║
║  - get_project_contacts     linked contacts, in link order, tagged imported  ║
║  - update_project_contact   stage / assignment / priority (upsert)           ║
║  - remove_project_contacts  bulk unlink                                      ║
║                                                                              ║
║  RULE: one link per (project_id, contact_id), unique index enforced          ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Dict, List, Optional

from models import (
    DEFAULT_PRIORITY,
    DEFAULT_STAGE,
    MatchType,
    ProjectContactUpdate,
    VALID_PRIORITIES,
    VALID_STAGES,
)
from services.errors import InvalidInputError, ProjectNotFoundError

logger = logging.getLogger("project_contacts")

IMPORTED_MATCH_SCORE = 100


async def load_project(project_store, project_id: str) -> dict:
    if not project_id:
        raise ProjectNotFoundError(project_id)
    project = await project_store.get_project(project_id)
    if not project:
        raise ProjectNotFoundError(project_id)
    return project


def tag_imported(contact: dict, link: dict) -> dict:
    """Contact enriched with its link data, flagged as imported"""
    tagged = dict(contact)
    tagged["project_contact_id"] = link.get("id")
    tagged["stage"] = link.get("stage") or DEFAULT_STAGE
    tagged["assigned_to"] = link.get("assigned_to") or ""
    tagged["priority"] = link.get("priority") or DEFAULT_PRIORITY
    tagged["is_imported"] = True
    tagged["match_type"] = MatchType.IMPORTED.value
    tagged["match_score"] = IMPORTED_MATCH_SCORE
    return tagged


async def load_imported_contacts(contact_store, project_store, project_id: str) -> List[dict]:
    """
    Linked contacts in link order. Links whose contact no longer exists
    are ignored.
    """
    links = await project_store.find_links(project_id)
    if not links:
        return []

    contacts = await contact_store.find_by_ids([l["contact_id"] for l in links])
    by_id = {c["id"]: c for c in contacts}

    imported = []
    for link in links:
        contact = by_id.get(link.get("contact_id"))
        if contact:
            imported.append(tag_imported(contact, link))
    return imported


async def get_project_contacts(contact_store, project_store, project_id: str) -> Dict:
    await load_project(project_store, project_id)
    contacts = await load_imported_contacts(contact_store, project_store, project_id)
    return {"contacts": contacts, "count": len(contacts)}


async def update_project_contact(
    contact_store,
    project_store,
    project_id: str,
    contact_id: str,
    stage: Optional[str] = None,
    assigned_to: Optional[str] = None,
    priority: Optional[str] = None,
    updated_by: str = "system"
) -> dict:
    """
    Update the link of a contact in a project, creating it when missing.

    Raises:
        InvalidInputError: unknown stage / priority, or unknown contact
        ProjectNotFoundError: unknown project
    """
    await load_project(project_store, project_id)

    if stage is not None and stage not in VALID_STAGES:
        raise InvalidInputError(f"Invalid stage: {stage}. Valid stages: {', '.join(VALID_STAGES)}")
    if priority is not None and priority not in VALID_PRIORITIES:
        raise InvalidInputError(
            f"Invalid priority: {priority}. Valid priorities: {', '.join(VALID_PRIORITIES)}"
        )

    contact = await contact_store.find_one({"id": contact_id})
    if not contact:
        raise InvalidInputError(f"Contact not found: {contact_id}")

    update = ProjectContactUpdate(stage=stage, assigned_to=assigned_to, priority=priority)
    fields = update.model_dump(exclude_none=True, mode="json")

    link = await project_store.upsert_link(project_id, contact_id, fields, created_by=updated_by)
    logger.info(f"[PROJECT_CONTACT] {project_id}/{contact_id} updated: {fields}")
    return link


async def remove_project_contacts(project_store, project_id: str, contact_ids: List[str]) -> Dict:
    """Unlink contacts from a project. The databank records are kept."""
    if not contact_ids or not isinstance(contact_ids, list):
        raise InvalidInputError("Contact IDs array is required")

    await load_project(project_store, project_id)

    deleted = await project_store.delete_links(project_id, contact_ids)
    logger.info(f"[PROJECT_CONTACT] {deleted} contact(s) removed from project {project_id}")
    return {
        "deleted_count": deleted,
        "message": f"{deleted} contact(s) removed from project successfully"
    }
