import os

import motor.motor_asyncio
from dotenv import load_dotenv
from pymongo import ASCENDING, DESCENDING

from recruit_ai.utils.logging_config import get_logger

logger = get_logger(__name__)

load_dotenv()

MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "recruit_ai")

logger.info(f"Initializing MongoDB connection to database: {DB_NAME}")

# The client connects lazily, so importing this module never blocks.
client = motor.motor_asyncio.AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

scores_coll = db["candidate_scores"]


async def init_indexes():
    """Index initialization for the score history."""
    logger.info("Starting database index initialization")
    try:
        await scores_coll.create_index(
            [("candidate_id", ASCENDING), ("job_id", ASCENDING), ("created_at", DESCENDING)]
        )
        await scores_coll.create_index([("created_at", DESCENDING)])
        logger.info("Database index initialization completed successfully")
    except Exception as e:
        logger.warning(f"Could not create indexes on candidate_scores: {e}")
        logger.info("Application will continue without all indexes - some operations may be slower")


def to_dict(doc):
    if not doc:
        return None
    doc = dict(doc)
    doc.pop("_id", None)
    return doc
