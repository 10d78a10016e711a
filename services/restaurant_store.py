# services/restaurant_store.py
from datetime import datetime
from bson import ObjectId
from pymongo.errors import PyMongoError
from core.exceptions import InvalidIdentifier, ResourceNotFound, UpstreamFailure
from db.db_operation import mongo_conn
from utils.logger import get_logger

logger = get_logger("Restaurant_Store")

# never leaves the store
PRIVATE_FIELDS = ("password",)

def parse_object_id(raw, label: str = "restaurantId") -> ObjectId:
    """Validate the id shape before any lookup; raises InvalidIdentifier."""
    if not raw or not ObjectId.is_valid(str(raw)):
        raise InvalidIdentifier(label)
    return ObjectId(str(raw))

def _plain(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value

def serialize_document(doc: dict) -> dict:
    out = {"id": str(doc["_id"])} if "_id" in doc else {}
    for key, value in doc.items():
        if key == "_id" or key in PRIVATE_FIELDS:
            continue
        out[key] = _plain(value)
    return out

async def create(doc: dict) -> ObjectId:
    try:
        result = await mongo_conn.restaurants.insert_one(doc)
    except PyMongoError:
        logger.exception("DB error creating restaurant")
        raise UpstreamFailure("PERSISTENCE_FAILED")
    return result.inserted_id

async def find_by_id(restaurant_id, projection: dict | None = None) -> dict:
    oid = parse_object_id(restaurant_id)
    try:
        doc = await mongo_conn.restaurants.find_one({"_id": oid}, projection)
    except PyMongoError:
        logger.exception("DB error loading restaurant")
        raise UpstreamFailure("PERSISTENCE_FAILED")
    if not doc:
        raise ResourceNotFound("Restaurant not found.")
    return doc

async def save(doc: dict) -> dict:
    """Whole-document save; the document must carry its _id."""
    doc["updated_at"] = datetime.utcnow()
    try:
        result = await mongo_conn.restaurants.replace_one({"_id": doc["_id"]}, doc)
    except PyMongoError:
        logger.exception("DB error saving restaurant")
        raise UpstreamFailure("PERSISTENCE_FAILED")
    if result.matched_count == 0:
        raise ResourceNotFound("Restaurant not found.")
    return doc

async def delete(restaurant_id) -> None:
    oid = parse_object_id(restaurant_id)
    try:
        result = await mongo_conn.restaurants.delete_one({"_id": oid})
    except PyMongoError:
        logger.exception("DB error deleting restaurant")
        raise UpstreamFailure("PERSISTENCE_FAILED")
    if result.deleted_count == 0:
        raise ResourceNotFound("Restaurant not found.")

async def list_all(query: dict | None = None, projection: dict | None = None, skip: int = 0, limit: int = 0) -> list[dict]:
    cursor = mongo_conn.restaurants.find(query or {}, projection).sort("created_at", -1).skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    try:
        return await cursor.to_list(length=None)
    except PyMongoError:
        logger.exception("DB error listing restaurants")
        raise UpstreamFailure("PERSISTENCE_FAILED")
