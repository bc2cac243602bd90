"""
LEADBANK CRM — Test fixtures
MongoDB is replaced by mongomock-motor: the real stores and the real Mongo
predicates run, without a server.
Run: pytest backend/tests -v
"""

import sys
import asyncio
from pathlib import Path

import pytest
from mongomock_motor import AsyncMongoMockClient

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from services.stores import ContactStore, ProjectStore


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture
def mock_db():
    return AsyncMongoMockClient()["leadbank_test"]


@pytest.fixture
def contact_store(mock_db):
    store = ContactStore(mock_db)
    _run(store.ensure_indexes())
    return store


@pytest.fixture
def project_store(mock_db):
    store = ProjectStore(mock_db)
    _run(store.ensure_indexes())
    return store


@pytest.fixture
def make_project(mock_db):
    """Insert a project document and return it"""
    def _make(project_id="proj-1", icp=None, contact_email="", assigned_to="owner-1"):
        project = {
            "id": project_id,
            "company_name": "Acme Corp",
            "assigned_to": assigned_to,
            "status": "active",
            "contact_person": {"full_name": "Jane Client", "email": contact_email},
            "icp_definition": icp or {},
            "created_at": "2026-01-01T00:00:00+00:00",
        }
        _run(mock_db.projects.insert_one(dict(project)))
        return project
    return _make
