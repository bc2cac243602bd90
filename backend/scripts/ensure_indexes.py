"""
LEADBANK CRM — Maintenance: create the indexes the core relies on.
  - contacts: unique id + lookup indexes (name, email, company, category, ...)
  - project_contacts: UNIQUE (project_id, contact_id) + stage / assignment
Run: cd backend && python3 scripts/ensure_indexes.py
"""

import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config import DB_NAME, client, configure_logging, db
from services.stores import ContactStore, ProjectStore

logger = logging.getLogger("ensure_indexes")


async def ensure_indexes(database=None):
    database = database if database is not None else db
    await ContactStore(database).ensure_indexes()
    await ProjectStore(database).ensure_indexes()

    contact_indexes = await database.contacts.index_information()
    link_indexes = await database.project_contacts.index_information()
    return {
        "contacts": sorted(contact_indexes),
        "project_contacts": sorted(link_indexes),
    }


async def main():
    configure_logging()
    indexes = await ensure_indexes()
    client.close()

    print("\n════════════════════════════════════")
    print("  INDEX REPORT")
    print("════════════════════════════════════")
    print(f"  Database:          {DB_NAME}")
    for collection, names in indexes.items():
        print(f"  {collection + ':':<18} {', '.join(names)}")
    print("════════════════════════════════════\n")
    logger.info(f"[INDEXES] Ensured on {DB_NAME}")


if __name__ == "__main__":
    asyncio.run(main())
