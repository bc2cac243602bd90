"""
LEADBANK CRM — Project contacts (links)
Tests: listing in link order, stage / priority update (upsert), bulk remove,
unique (project_id, contact_id).
Run: pytest backend/tests/test_project_contacts.py -v
"""

import asyncio

import pytest

from services.errors import InvalidInputError, ProjectNotFoundError
from services.project_contacts import (
    get_project_contacts,
    remove_project_contacts,
    update_project_contact,
)


def _db_op(coro):
    """Run async DB operation in a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture
def seeded(contact_store, project_store, make_project):
    make_project()
    _db_op(contact_store.collection.insert_many([
        {"id": "c1", "name": "Alice", "email": "alice@x.com"},
        {"id": "c2", "name": "Bob", "email": "bob@x.com"},
        {"id": "c3", "name": "Carol", "email": "carol@x.com"},
    ]))
    for contact_id in ("c2", "c1"):
        _db_op(project_store.upsert_link("proj-1", contact_id, {}))
    return contact_store, project_store


# ═══════════════════════════════════════════════════════════════
# 1. LISTING
# ═══════════════════════════════════════════════════════════════

class TestGetProjectContacts:
    def test_link_order_and_tags(self, seeded):
        contact_store, project_store = seeded
        result = _db_op(get_project_contacts(contact_store, project_store, "proj-1"))
        assert result["count"] == 2
        assert [c["id"] for c in result["contacts"]] == ["c2", "c1"]
        for contact in result["contacts"]:
            assert contact["is_imported"] is True
            assert contact["match_type"] == "imported"
            assert contact["stage"] == "New"
            assert "_id" not in contact

    def test_dangling_link_ignored(self, seeded):
        contact_store, project_store = seeded
        _db_op(project_store.upsert_link("proj-1", "deleted-contact", {}))
        result = _db_op(get_project_contacts(contact_store, project_store, "proj-1"))
        assert result["count"] == 2

    def test_unknown_project(self, seeded):
        contact_store, project_store = seeded
        with pytest.raises(ProjectNotFoundError):
            _db_op(get_project_contacts(contact_store, project_store, "nope"))


# ═══════════════════════════════════════════════════════════════
# 2. UPDATE (upsert)
# ═══════════════════════════════════════════════════════════════

class TestUpdateProjectContact:
    def test_update_existing_link(self, seeded):
        contact_store, project_store = seeded
        link = _db_op(update_project_contact(
            contact_store, project_store, "proj-1", "c1",
            stage="Meeting Scheduled", priority="High", assigned_to="rep-1"
        ))
        assert link["stage"] == "Meeting Scheduled"
        assert link["priority"] == "High"
        assert link["assigned_to"] == "rep-1"
        assert len(_db_op(project_store.find_links("proj-1", ["c1"]))) == 1

    def test_partial_update_keeps_other_fields(self, seeded):
        contact_store, project_store = seeded
        _db_op(update_project_contact(contact_store, project_store, "proj-1", "c1", priority="Low"))
        link = _db_op(update_project_contact(contact_store, project_store, "proj-1", "c1", stage="SQL"))
        assert link["stage"] == "SQL"
        assert link["priority"] == "Low"

    def test_creates_missing_link(self, seeded):
        contact_store, project_store = seeded
        link = _db_op(update_project_contact(contact_store, project_store, "proj-1", "c3", stage="CIP"))
        assert link["stage"] == "CIP"
        assert link["priority"] == "Medium"
        assert link["id"]
        assert len(_db_op(project_store.find_links("proj-1"))) == 3

    def test_legacy_stage_accepted(self, seeded):
        contact_store, project_store = seeded
        link = _db_op(update_project_contact(contact_store, project_store, "proj-1", "c1", stage="Qualified"))
        assert link["stage"] == "Qualified"

    @pytest.mark.parametrize("kwargs", [{"stage": "Closed"}, {"priority": "Urgent"}])
    def test_invalid_values(self, seeded, kwargs):
        contact_store, project_store = seeded
        with pytest.raises(InvalidInputError):
            _db_op(update_project_contact(contact_store, project_store, "proj-1", "c1", **kwargs))

    def test_unknown_contact(self, seeded):
        contact_store, project_store = seeded
        with pytest.raises(InvalidInputError):
            _db_op(update_project_contact(contact_store, project_store, "proj-1", "ghost", stage="CIP"))


# ═══════════════════════════════════════════════════════════════
# 3. REMOVE
# ═══════════════════════════════════════════════════════════════

class TestRemoveProjectContacts:
    def test_remove(self, seeded):
        contact_store, project_store = seeded
        result = _db_op(remove_project_contacts(project_store, "proj-1", ["c1", "c3"]))
        assert result["deleted_count"] == 1
        assert result["message"] == "1 contact(s) removed from project successfully"
        assert [l["contact_id"] for l in _db_op(project_store.find_links("proj-1"))] == ["c2"]
        # databank untouched
        assert _db_op(contact_store.count({})) == 3

    def test_empty_list(self, seeded):
        _, project_store = seeded
        with pytest.raises(InvalidInputError):
            _db_op(remove_project_contacts(project_store, "proj-1", []))


# ═══════════════════════════════════════════════════════════════
# 4. UNIQUE LINK
# ═══════════════════════════════════════════════════════════════

class TestUniqueLink:
    def test_duplicate_link_rejected_and_reported(self, seeded):
        _, project_store = seeded
        outcome = _db_op(project_store.insert_links([
            {"id": "l-new", "project_id": "proj-1", "contact_id": "c3"},
            {"id": "l-dup", "project_id": "proj-1", "contact_id": "c1"},
        ]))
        assert [d["id"] for d in outcome.inserted] == ["l-new"]
        assert len(outcome.duplicates) == 1
        assert outcome.duplicates[0].index == 1
        assert outcome.failures == []
