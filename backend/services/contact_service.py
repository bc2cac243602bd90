"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Databank contacts                                            ║
║                                                                              ║
║  - create_contact      single entry, conflict on duplicate identity          ║
║  - import_to_databank  spreadsheet rows -> contacts, duplicates skipped      ║
║  - list_contacts       filter builder + pagination (sorted by name)          ║
║  - list_categories     distinct non-blank categories                         ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import math
from typing import Dict, List

from pydantic import ValidationError

from config import new_id, now_iso
from models import ContactCreate, ContactDocument, ContactDraft, DatabankImportReport, is_blank
from services.contact_filters import ContactFilterParams, build_contact_filter
from services.duplicate_detector import check_duplicate
from services.errors import DuplicateContactError, InvalidImportError, InvalidInputError
from services.row_mapping import map_rows

logger = logging.getLogger("contact_service")

DEFAULT_IMPORT_CATEGORY = "IND-IT & Service"
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500


def new_contact_document(draft: ContactDraft) -> dict:
    """Stored form of a draft: fresh id, creation timestamps"""
    now = now_iso()
    return ContactDocument(
        **draft.model_dump(), id=new_id(), created_at=now, updated_at=now
    ).model_dump()


async def create_contact(contact_store, data: dict) -> dict:
    """
    Create one databank contact.

    Raises:
        InvalidInputError: missing name
        DuplicateContactError: identity already stored (carries the record)
    """
    try:
        draft = ContactCreate.model_validate(data or {})
    except ValidationError:
        raise InvalidInputError("Contact name is required")

    duplicate = await check_duplicate(contact_store, draft.name, draft.email, draft.company)
    if duplicate.is_duplicate:
        raise DuplicateContactError(duplicate.reason, existing=duplicate.existing)

    contact = await contact_store.insert_one(new_contact_document(draft))
    logger.info(f"[CONTACT] Created {contact['id']} ({contact['name']})")
    return contact


async def import_to_databank(
    contact_store,
    rows: List[dict],
    category: str = None
) -> DatabankImportReport:
    """
    Raw spreadsheet rows -> databank. Every row is stored under the selected
    category. Rows without a name and duplicates are reported, not stored.
    """
    if not isinstance(rows, list) or not rows:
        raise InvalidImportError("File is empty or could not be parsed")

    category = (category or "").strip() or DEFAULT_IMPORT_CATEGORY
    mapped, mapping = map_rows(rows)

    report = DatabankImportReport(total_rows=len(rows), column_mapping=mapping)
    valid = []
    for i, contact in enumerate(mapped):
        contact["category"] = category
        if is_blank(contact.get("name")):
            report.errors.append(f"Row {i + 2}: Missing name field")
            continue
        valid.append((i, ContactDraft.model_validate(contact)))

    if not valid:
        raise InvalidImportError(
            'No valid contacts found in file. Make sure the file has a "Name" column.'
        )
    report.valid_contacts = len(valid)

    # Row by row: a row can duplicate one inserted earlier in the same file
    for i, draft in valid:
        duplicate = await check_duplicate(
            contact_store, draft.name, draft.email, draft.company, for_import=True
        )
        if duplicate.is_duplicate:
            report.skipped += 1
            report.errors.append(f"Row {i + 2}: Skipped - {duplicate.reason} ({draft.name})")
            continue
        await contact_store.insert_one(new_contact_document(draft))
        report.inserted += 1

    logger.info(
        f"[DATABANK_IMPORT] category={category!r} rows={report.total_rows} "
        f"inserted={report.inserted} skipped={report.skipped} "
        f"unmapped={mapping.unmapped}"
    )
    return report


async def list_contacts(
    contact_store,
    params: ContactFilterParams = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE
) -> Dict:
    params = params or ContactFilterParams()
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)

    predicate = build_contact_filter(params)
    total = await contact_store.count(predicate)
    contacts = await contact_store.find(
        predicate,
        limit=limit,
        skip=(page - 1) * limit,
        sort=[("name", 1), ("id", 1)]
    )
    return {
        "contacts": contacts,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


async def list_categories(contact_store) -> List[str]:
    values = await contact_store.distinct_values("category")
    return sorted({str(v).strip() for v in values if not is_blank(v)}, key=str.lower)
