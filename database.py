"""
MongoDB access for the DevConnector API.

The connection is configured from DATABASE_URL / DATABASE_NAME. When either
is missing `db` stays None and the API answers 500 "Database not configured".
"""
import logging
import os
from typing import Iterable, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient

from errors import ApiError

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

client: Optional[MongoClient] = None
db = None

if DATABASE_URL and DATABASE_NAME:
    client = MongoClient(DATABASE_URL)
    db = client[DATABASE_NAME]
else:
    logger.warning("DATABASE_URL / DATABASE_NAME not set, database disabled")


def get_db():
    """FastAPI dependency returning the active database handle."""
    if db is None:
        raise ApiError(500, "Database not configured", envelope="msg")
    return db


def to_object_id(value) -> Optional[ObjectId]:
    """Parse an id from a path or token; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def to_public(doc):
    """Recursively turn ObjectIds into strings so documents can be returned as JSON."""
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, dict):
        return {k: to_public(v) for k, v in doc.items()}
    if isinstance(doc, list):
        return [to_public(v) for v in doc]
    return doc


def populate(database, doc: Optional[dict], field: str, collection: str, fields: Iterable[str]):
    """Replace doc[field] (a foreign key) with the referenced document's selected fields."""
    if not doc:
        return doc
    projection = {f: 1 for f in fields}
    doc = {**doc}
    doc[field] = database[collection].find_one({"_id": doc.get(field)}, projection)
    return doc
