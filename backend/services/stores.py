"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Stores (MongoDB via Motor)                                   ║
║                                                                              ║
║  ContactStore  -> collection "contacts"         (databank)                   ║
║  ProjectStore  -> collections "projects" + "project_contacts" (links)        ║
║                                                                              ║
║  BULK WRITES: ordered=False, never atomic.                                   ║
║  Rows rejected by the server are REPORTED (index, code, message),            ║
║  duplicate-key rejections (11000) are flagged so callers can recover.        ║
║  Any other driver error propagates.                                          ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Dict, Iterable, List, Optional

from pymongo.errors import BulkWriteError

from config import db, new_id, now_iso
from models import CONTACT_PROJECTION, DEFAULT_PRIORITY, DEFAULT_STAGE
from services.text_matching import exact_ci_regex, normalize

logger = logging.getLogger("stores")

DUPLICATE_KEY_CODES = {11000, 11001, 12582}


def _strip_mongo_id(doc: dict) -> dict:
    return {k: v for k, v in doc.items() if k != "_id"}


class RejectedRow:
    """A document the server refused during a bulk insert"""

    def __init__(self, index: int, document: dict, code: Optional[int], message: str = ""):
        self.index = index
        self.document = document
        self.code = code
        self.message = message

    @property
    def is_duplicate(self) -> bool:
        if self.code in DUPLICATE_KEY_CODES:
            return True
        return "duplicate key" in (self.message or "").lower()

    def to_dict(self) -> Dict:
        return {
            "index": self.index,
            "code": self.code,
            "message": self.message,
            "is_duplicate": self.is_duplicate,
        }


class InsertOutcome:
    """Partial-failure report of insert_many"""

    def __init__(self, inserted: List[dict] = None, rejected: List[RejectedRow] = None):
        self.inserted = inserted or []
        self.rejected = rejected or []

    @property
    def duplicates(self) -> List[RejectedRow]:
        return [r for r in self.rejected if r.is_duplicate]

    @property
    def failures(self) -> List[RejectedRow]:
        return [r for r in self.rejected if not r.is_duplicate]


async def _insert_many_tolerant(collection, documents: List[dict], label: str) -> InsertOutcome:
    if not documents:
        return InsertOutcome()

    try:
        await collection.insert_many(documents, ordered=False)
        return InsertOutcome(inserted=[_strip_mongo_id(d) for d in documents])
    except BulkWriteError as e:
        write_errors = (e.details or {}).get("writeErrors", [])
        rejected = []
        rejected_indexes = set()
        for err in write_errors:
            index = err.get("index")
            rejected_indexes.add(index)
            doc = documents[index] if index is not None and index < len(documents) else err.get("op", {})
            rejected.append(RejectedRow(
                index=index,
                document=_strip_mongo_id(doc or {}),
                code=err.get("code"),
                message=err.get("errmsg", ""),
            ))
        inserted = [
            _strip_mongo_id(d) for i, d in enumerate(documents)
            if i not in rejected_indexes
        ]
        logger.warning(
            f"[BULK_WRITE] {label}: {len(inserted)} inserted, "
            f"{len(rejected)} rejected"
        )
        return InsertOutcome(inserted=inserted, rejected=rejected)


class ContactStore:
    """Databank persistence"""

    def __init__(self, database=None):
        database = database if database is not None else db
        self.collection = database.contacts

    async def ensure_indexes(self):
        await self.collection.create_index("id", unique=True)
        for field in ("name", "email", "company", "category", "industry", "title"):
            await self.collection.create_index(field)

    async def find(
        self,
        predicate: dict,
        limit: int = 0,
        skip: int = 0,
        sort: Optional[list] = None
    ) -> List[dict]:
        cursor = self.collection.find(
            predicate, CONTACT_PROJECTION, skip=skip, limit=limit, sort=sort
        )
        return await cursor.to_list(None)

    async def find_one(self, predicate: dict) -> Optional[dict]:
        return await self.collection.find_one(predicate, CONTACT_PROJECTION)

    async def find_by_ids(self, contact_ids: Iterable[str]) -> List[dict]:
        ids = [i for i in contact_ids if i]
        if not ids:
            return []
        return await self.find({"id": {"$in": ids}})

    async def find_by_emails(self, emails: Iterable[str]) -> List[dict]:
        """Case-insensitive whole-string email lookup"""
        unique = sorted({normalize(e) for e in emails if normalize(e)})
        if not unique:
            return []
        return await self.find({"$or": [{"email": exact_ci_regex(e)} for e in unique]})

    async def count(self, predicate: dict) -> int:
        return await self.collection.count_documents(predicate)

    async def insert_one(self, document: dict) -> dict:
        await self.collection.insert_one(document)
        return _strip_mongo_id(document)

    async def insert_many(self, documents: List[dict]) -> InsertOutcome:
        return await _insert_many_tolerant(self.collection, documents, "contacts")

    async def update_fields(self, contact_id: str, fields: dict) -> int:
        if not fields:
            return 0
        update = dict(fields)
        update["updated_at"] = now_iso()
        result = await self.collection.update_one({"id": contact_id}, {"$set": update})
        return result.modified_count

    async def distinct_values(self, field: str, predicate: dict = None) -> List:
        return await self.collection.distinct(field, predicate or {})


class ProjectStore:
    """Projects (read-only here) and project <-> contact links"""

    def __init__(self, database=None):
        database = database if database is not None else db
        self.projects = database.projects
        self.links = database.project_contacts

    async def ensure_indexes(self):
        await self.links.create_index(
            [("project_id", 1), ("contact_id", 1)], unique=True
        )
        await self.links.create_index([("project_id", 1), ("stage", 1)])
        await self.links.create_index([("project_id", 1), ("assigned_to", 1)])

    async def get_project(self, project_id: str) -> Optional[dict]:
        if not project_id:
            return None
        return await self.projects.find_one({"id": project_id}, {"_id": 0})

    async def find_links(
        self,
        project_id: str,
        contact_ids: Optional[Iterable[str]] = None
    ) -> List[dict]:
        query = {"project_id": project_id}
        if contact_ids is not None:
            query["contact_id"] = {"$in": list(contact_ids)}
        return await self.links.find(query, {"_id": 0}).to_list(None)

    async def insert_links(self, documents: List[dict]) -> InsertOutcome:
        return await _insert_many_tolerant(self.links, documents, "project_contacts")

    async def upsert_link(
        self,
        project_id: str,
        contact_id: str,
        fields: dict,
        created_by: str = "system"
    ) -> dict:
        now = now_iso()
        set_fields = dict(fields)
        set_fields["updated_at"] = now
        defaults = {
            "id": new_id(),
            "stage": DEFAULT_STAGE,
            "assigned_to": "",
            "priority": DEFAULT_PRIORITY,
            "imported_at": now,
            "created_by": created_by,
            "created_at": now,
        }
        on_insert = {k: v for k, v in defaults.items() if k not in set_fields}
        await self.links.update_one(
            {"project_id": project_id, "contact_id": contact_id},
            {"$set": set_fields, "$setOnInsert": on_insert},
            upsert=True
        )
        return await self.links.find_one(
            {"project_id": project_id, "contact_id": contact_id}, {"_id": 0}
        )

    async def delete_links(self, project_id: str, contact_ids: Iterable[str]) -> int:
        result = await self.links.delete_many({
            "project_id": project_id,
            "contact_id": {"$in": list(contact_ids)}
        })
        return result.deleted_count
