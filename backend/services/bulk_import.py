"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Bulk import reconciliation (project import)                  ║
║                                                                              ║
║  PHASES:                                                                     ║
║  0. Validate batch + project          -> fail fast, nothing written          ║
║  1. Prepare rows (strict | lenient)   -> empty / invalid / batch duplicates  ║
║  2. Existing lookup (email, else identity resolver)                          ║
║  3. Insert new contacts (ordered=False), duplicate rejections re-resolved    ║
║  4. Fill-only update of existing contacts (never overwrite)                  ║
║  5. Link to project, existing links skipped                                  ║
║                                                                              ║
║  ACCOUNTING: every row lands in exactly one counter                          ║
║  total = empty + invalid + duplicates_in_batch + already_in_project          ║
║        + failed + imported                                                   ║
║                                                                              ║
║  Re-importing the same batch is idempotent.                                  ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Dict, List, Optional

from config import new_id, now_iso
from models import (
    BulkImportReport,
    ContactDraft,
    DEFAULT_PRIORITY,
    DEFAULT_STAGE,
    ImportMode,
    ProjectContactDocument,
    UPDATABLE_FIELDS,
    VALID_STAGES,
    is_blank,
)
from services.contact_service import new_contact_document
from services.duplicate_detector import check_duplicate
from services.errors import InvalidImportError, InvalidInputError
from services.project_contacts import load_project
from services.text_matching import normalize

logger = logging.getLogger("bulk_import")

LENIENT_EMAIL_DOMAIN = "unknown.com"
LENIENT_COMPANY = "Unknown Company"
EMPTY_BATCH_MESSAGE = "No contacts found in file. Please ensure the file contains data."


class PreparedRow:
    """A row that survived preparation, waiting for a contact id"""

    def __init__(self, row_number: int, draft: ContactDraft):
        self.row_number = row_number
        self.draft = draft
        self.contact_id: Optional[str] = None
        self.existing: Optional[dict] = None

    @property
    def email(self) -> str:
        return normalize(self.draft.email)


# ==================== PHASE 1: PREPARATION ====================

def _to_draft(row) -> Optional[ContactDraft]:
    if isinstance(row, ContactDraft):
        return row
    if isinstance(row, dict):
        return ContactDraft.model_validate(row)
    return None


def _rewrite_email(email: str, row_number: int, seen: set) -> str:
    """john@x.com -> john1@x.com, john2@x.com ... until unused in the batch"""
    if "@" in email:
        base, domain = email.split("@", 1)
    else:
        base, domain = f"contact{row_number}", LENIENT_EMAIL_DOMAIN
    counter = 1
    candidate = f"{base}{counter}@{domain}"
    while candidate in seen:
        counter += 1
        candidate = f"{base}{counter}@{domain}"
    return candidate


def prepare_rows(candidates: list, mode: ImportMode, report: BulkImportReport) -> List[PreparedRow]:
    """
    Phase 1. Counts empty / invalid rows and batch duplicates on the report,
    returns the rows to reconcile.
    """
    prepared = []
    seen_emails = set()
    seen_identities = set()

    for index, row in enumerate(candidates):
        row_number = index + 1
        draft = _to_draft(row)

        if draft is None:
            report.invalid_rows += 1
            report.errors.append(f"Row {row_number}: Unsupported row type ({type(row).__name__})")
            continue

        if not draft.has_any_data():
            report.empty_rows += 1
            continue

        if mode == ImportMode.LENIENT:
            # Permissive mode: synthesize identity, never drop a row
            updates = {}
            if not draft.name:
                updates["name"] = f"Contact {row_number}"
            if not draft.company:
                updates["company"] = LENIENT_COMPANY
            email = normalize(draft.email) or f"contact{row_number}@{LENIENT_EMAIL_DOMAIN}"
            if email in seen_emails:
                email = _rewrite_email(email, row_number, seen_emails)
                report.emails_rewritten += 1
            seen_emails.add(email)
            updates["email"] = email
            prepared.append(PreparedRow(row_number, draft.model_copy(update=updates)))
            continue

        if not draft.name:
            report.invalid_rows += 1
            report.errors.append(f"Row {row_number}: Missing name field")
            continue

        email = normalize(draft.email)
        if email:
            if email in seen_emails:
                report.duplicates_in_batch += 1
                continue
            seen_emails.add(email)
        else:
            identity = (normalize(draft.name), normalize(draft.company))
            if identity in seen_identities:
                report.duplicates_in_batch += 1
                continue
            seen_identities.add(identity)

        prepared.append(PreparedRow(row_number, draft.model_copy(update={"email": email})))

    return prepared


# ==================== PHASE 2: LOOKUP ====================

async def _resolve_existing(contact_store, rows: List[PreparedRow]) -> None:
    """Attach the matching stored contact (if any) to each row"""
    by_email: Dict[str, dict] = {}
    for contact in await contact_store.find_by_emails(r.email for r in rows if r.email):
        by_email.setdefault(normalize(contact.get("email")), contact)

    for row in rows:
        if row.email:
            row.existing = by_email.get(row.email)
        else:
            result = await check_duplicate(
                contact_store, row.draft.name, None, row.draft.company, for_import=True
            )
            row.existing = result.existing if result.is_duplicate else None

        if row.existing:
            row.contact_id = row.existing["id"]


# ==================== PHASE 3: INSERT ====================

async def _insert_new(contact_store, rows: List[PreparedRow], report: BulkImportReport) -> List[PreparedRow]:
    """
    Insert rows with no stored match. Rows rejected as duplicates (lost race)
    are re-resolved against the store. Returns the rows that failed.
    """
    if not rows:
        return []

    documents = [new_contact_document(r.draft) for r in rows]
    outcome = await contact_store.insert_many(documents)

    report.new_contacts_in_databank = len(outcome.inserted)
    rejected_indexes = {r.index for r in outcome.rejected}
    for index, row in enumerate(rows):
        if index not in rejected_indexes:
            row.contact_id = documents[index]["id"]

    failed = []
    raced = []
    for rejected in outcome.rejected:
        row = rows[rejected.index]
        if rejected.is_duplicate:
            raced.append(row)
        else:
            report.errors.append(f"Row {row.row_number}: {rejected.message or 'Insert failed'}")
            failed.append(row)

    if raced:
        logger.warning(f"[BULK_IMPORT] {len(raced)} contact(s) inserted concurrently, re-resolving")
        await _resolve_existing(contact_store, raced)
        for row in raced:
            if not row.existing:
                report.errors.append(
                    f"Row {row.row_number}: Duplicate key but no matching contact found ({row.draft.name})"
                )
                failed.append(row)

    return failed


# ==================== PHASE 4: FILL-ONLY UPDATE ====================

def fill_only_fields(stored: dict, draft: ContactDraft) -> dict:
    """Draft values for fields that are blank on the stored record"""
    fields = {}
    for field in UPDATABLE_FIELDS:
        value = getattr(draft, field, "")
        if not is_blank(value) and is_blank(stored.get(field)):
            fields[field] = value
    return fields


async def _fill_existing(contact_store, rows: List[PreparedRow], report: BulkImportReport) -> None:
    report.existing_contacts_in_databank = len(rows)
    for row in rows:
        fields = fill_only_fields(row.existing, row.draft)
        if not fields:
            continue
        modified = await contact_store.update_fields(row.contact_id, fields)
        if modified:
            report.existing_contacts_updated += 1
            logger.info(f"[BULK_IMPORT] Contact {row.contact_id} filled: {sorted(fields)}")


# ==================== PHASE 5: LINKS ====================

async def _link_contacts(
    project_store,
    project: dict,
    rows: List[PreparedRow],
    assign_to: Optional[str],
    default_stage: Optional[str],
    created_by: str,
    report: BulkImportReport
) -> None:
    project_id = project["id"]
    linked = {
        l["contact_id"]
        for l in await project_store.find_links(project_id, [r.contact_id for r in rows])
    }

    to_link = []
    for row in rows:
        if row.contact_id in linked:
            report.already_in_project += 1
        else:
            to_link.append(row)

    now = now_iso()
    documents = [ProjectContactDocument(
        id=new_id(),
        project_id=project_id,
        contact_id=row.contact_id,
        stage=default_stage or DEFAULT_STAGE,
        assigned_to=assign_to or project.get("assigned_to") or "",
        priority=DEFAULT_PRIORITY,
        imported_at=now,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    ).model_dump(mode="json") for row in to_link]

    outcome = await project_store.insert_links(documents)
    report.project_contacts_created = len(outcome.inserted)
    report.already_in_project += len(outcome.duplicates)
    for rejected in outcome.failures:
        row = to_link[rejected.index]
        report.failed_rows += 1
        report.errors.append(f"Row {row.row_number}: Link failed - {rejected.message or 'unknown error'}")


# ==================== ENTRY POINT ====================

def _claim_contact_ids(rows: List[PreparedRow], report: BulkImportReport) -> List[PreparedRow]:
    """First row wins a contact id, later rows resolving to it are batch duplicates"""
    claimed = set()
    unique = []
    for row in rows:
        if row.contact_id in claimed:
            report.duplicates_in_batch += 1
            continue
        claimed.add(row.contact_id)
        unique.append(row)
    return unique


def _summary(report: BulkImportReport) -> str:
    parts = [f"Successfully imported {report.imported} prospects."]
    if report.new_contacts_in_databank:
        parts.append(f"{report.new_contacts_in_databank} new contacts saved to databank.")
    if report.existing_contacts_updated:
        parts.append(f"{report.existing_contacts_updated} existing contacts updated.")
    if report.already_in_project:
        parts.append(f"{report.already_in_project} already in project.")
    if report.duplicates_in_batch:
        parts.append(f"{report.duplicates_in_batch} duplicates in file skipped.")
    if report.failed_rows or report.invalid_rows:
        parts.append(f"{report.failed_rows + report.invalid_rows} rows rejected.")
    return " ".join(parts)


def _validate_batch(candidates, default_stage: Optional[str], mode) -> ImportMode:
    if not isinstance(candidates, list):
        raise InvalidImportError("Contacts must be provided as a list of rows")
    if not candidates:
        raise InvalidImportError(EMPTY_BATCH_MESSAGE)
    if default_stage and default_stage not in VALID_STAGES:
        raise InvalidInputError(f"Invalid stage: {default_stage}")
    try:
        return ImportMode(mode)
    except ValueError:
        raise InvalidInputError(f"Invalid import mode: {mode}")


async def reconcile(
    contact_store,
    project_store,
    project_id: str,
    candidates: list,
    assign_to: Optional[str] = None,
    default_stage: Optional[str] = None,
    mode: ImportMode = ImportMode.STRICT,
    created_by: str = "system"
) -> BulkImportReport:
    """
    Import a parsed batch into a project.

    Args:
        candidates: rows already mapped to contact field names (dict or ContactDraft)
        assign_to: link owner (defaults to the project owner)
        default_stage: stage of the new links (defaults to "New")
        mode: STRICT drops repeated emails, LENIENT rewrites them

    Raises:
        InvalidImportError: not a list / empty or all-blank batch (nothing written)
        ProjectNotFoundError: unknown project
        PyMongoError: store failure other than per-row rejections
    """
    mode = _validate_batch(candidates, default_stage, mode)
    project = await load_project(project_store, project_id)

    report = BulkImportReport(total=len(candidates))
    rows = prepare_rows(candidates, mode, report)
    if report.empty_rows == report.total:
        raise InvalidImportError(EMPTY_BATCH_MESSAGE)

    await _resolve_existing(contact_store, rows)

    new_rows = [r for r in rows if not r.existing]
    failed = await _insert_new(contact_store, new_rows, report)
    report.failed_rows += len(failed)

    resolved = _claim_contact_ids([r for r in rows if r.contact_id], report)

    await _fill_existing(contact_store, [r for r in resolved if r.existing], report)
    await _link_contacts(
        project_store, project, resolved, assign_to, default_stage, created_by, report
    )

    report.imported = report.project_contacts_created
    report.skipped = (
        report.empty_rows
        + report.invalid_rows
        + report.duplicates_in_batch
        + report.already_in_project
    )
    report.message = _summary(report)

    logger.info(
        f"[BULK_IMPORT] project={project_id} mode={mode.value} total={report.total} "
        f"imported={report.imported} new={report.new_contacts_in_databank} "
        f"existing={report.existing_contacts_in_databank} "
        f"updated={report.existing_contacts_updated} "
        f"already_in_project={report.already_in_project} "
        f"batch_dups={report.duplicates_in_batch} failed={report.failed_rows}"
    )
    if report.accounted_rows() != report.total:
        logger.error(
            f"[BULK_IMPORT] Accounting mismatch: {report.accounted_rows()} counted "
            f"for {report.total} rows"
        )
    return report
