"""
Configuration et utilitaires partagés
"""

import os
import uuid
import logging
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
from pathlib import Path

# Charger .env
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'test_database')  # Default to test_database

client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

# Similar contacts (ICP matching)
SIMILAR_CONTACTS_LIMIT = int(os.environ.get('SIMILAR_CONTACTS_LIMIT', '500'))
SCORING_BATCH_SIZE = int(os.environ.get('SCORING_BATCH_SIZE', '100'))

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

logger = logging.getLogger("config")
logger.info(f"[CONFIG] Using database: {DB_NAME}")


# ==================== HELPERS ====================

def configure_logging(level: str = None) -> None:
    """Configure le root logger (format commun à tous les services)"""
    level_name = (level or LOG_LEVEL or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def new_id() -> str:
    """Génère un identifiant de document"""
    return str(uuid.uuid4())


def now_iso() -> str:
    """Retourne la date/heure actuelle en ISO"""
    return datetime.now(timezone.utc).isoformat()
