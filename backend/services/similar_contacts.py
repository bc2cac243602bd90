"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Similar contacts for a project                               ║
║                                                                              ║
║  FLOW:                                                                       ║
║  1. Linked contacts          -> imported (score 100, always listed first)    ║
║  2. ICP not defined          -> imported only, has_icp = False               ║
║  3. Candidate filter (OR of criteria, NOR of exclusions, minus linked)       ║
║     no queryable criterion   -> imported only                                ║
║  4. Score in batches, yield to the event loop between batches                ║
║  5. Sort: tier rank, then score desc, ties keep store order (id asc)         ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import asyncio
import logging
from typing import Dict, List, Optional

from config import SCORING_BATCH_SIZE, SIMILAR_CONTACTS_LIMIT
from models import (
    DEFAULT_PRIORITY,
    DEFAULT_STAGE,
    MATCH_TYPE_RANK,
    MatchType,
    Project,
)
from services.contact_filters import build_icp_candidate_filter
from services.icp_scoring import calculate_match_score
from services.project_contacts import load_imported_contacts, load_project

logger = logging.getLogger("similar_contacts")

NO_ICP_MESSAGE = "No ICP defined for this project. Please add an ICP definition to get suggestions."
NO_CRITERIA_MESSAGE = "No ICP criteria found. Please add ICP definition to get suggestions."


def _match_stats(scored: List[dict], imported_count: int) -> Dict[str, int]:
    stats = {
        MatchType.EXACT.value: 0,
        MatchType.GOOD.value: 0,
        MatchType.SIMILAR.value: 0,
        MatchType.LOOSE.value: 0,
    }
    for contact in scored:
        stats[contact["match_type"]] += 1
    stats[MatchType.IMPORTED.value] = imported_count
    return stats


def _imported_only(imported: List[dict], message: str) -> Dict:
    return {
        "contacts": imported,
        "count": len(imported),
        "has_icp": False,
        "message": message,
        "match_stats": _match_stats([], len(imported)),
    }


def _scored_contact(contact: dict, icp) -> dict:
    result = calculate_match_score(contact, icp)
    scored = dict(contact)
    scored["match_score"] = result.score
    scored["match_type"] = result.match_type.value
    scored["is_imported"] = False
    scored["matched_criteria"] = result.matched_criteria.model_dump()
    scored["recommendation_reasons"] = [r.model_dump() for r in result.recommendation_reasons]
    scored["stage"] = DEFAULT_STAGE
    scored["assigned_to"] = ""
    scored["priority"] = DEFAULT_PRIORITY
    return scored


def sort_scored(scored: List[dict]) -> List[dict]:
    """Tier rank asc, then score desc. sorted() is stable: ties keep input order."""
    return sorted(
        scored,
        key=lambda c: (MATCH_TYPE_RANK[MatchType(c["match_type"])], -c["match_score"])
    )


async def score_in_batches(candidates: List[dict], icp, batch_size: int = None) -> List[dict]:
    batch_size = batch_size or SCORING_BATCH_SIZE
    scored = []
    for start in range(0, len(candidates), batch_size):
        for contact in candidates[start:start + batch_size]:
            scored.append(_scored_contact(contact, icp))
        if start + batch_size < len(candidates):
            await asyncio.sleep(0)
    return scored


async def find_similar_contacts(
    contact_store,
    project_store,
    project_id: str,
    limit: Optional[int] = None
) -> Dict:
    """
    Imported contacts of a project followed by databank contacts ranked
    against the project's ICP.

    Returns:
        {contacts, count, has_icp, message?, match_stats}

    Raises:
        ProjectNotFoundError: unknown project / missing id
    """
    project = Project.model_validate(await load_project(project_store, project_id))
    icp = project.icp_definition

    imported = await load_imported_contacts(contact_store, project_store, project_id)

    if not icp.is_defined():
        return _imported_only(imported, NO_ICP_MESSAGE)

    predicate = build_icp_candidate_filter(
        icp,
        exclude_contact_ids=[c["id"] for c in imported],
        contact_person_email=project.contact_person.email
    )
    if predicate is None:
        return _imported_only(imported, NO_CRITERIA_MESSAGE)

    limit = limit if limit and limit > 0 else SIMILAR_CONTACTS_LIMIT
    candidates = await contact_store.find(predicate, limit=limit, sort=[("id", 1)])

    scored = sort_scored(await score_in_batches(candidates, icp))

    logger.info(
        f"[SIMILAR] project={project_id} imported={len(imported)} "
        f"candidates={len(candidates)} limit={limit}"
    )

    contacts = imported + scored
    return {
        "contacts": contacts,
        "count": len(contacts),
        "has_icp": True,
        "match_stats": _match_stats(scored, len(imported)),
    }
