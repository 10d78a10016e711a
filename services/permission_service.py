from datetime import datetime
from bson import ObjectId
from db.db_operation import mongo_conn
from models.permission import Permission, PermissionFlags
from utils.logger import get_logger

logger = get_logger("Permission_Service")

DEFAULT_PERMISSIONS = PermissionFlags(
    can_manage_menu=True,
    can_accept_order=False,
    can_reject_order=False,
    can_manage_offers=False,
    can_view_reports=True,
)

async def create_default_permission(restaurant_id: ObjectId) -> Permission:
    """
    Grant the default capability set to a freshly created restaurant.
    PyMongoError propagates so the caller can compensate.
    """
    now = datetime.utcnow()
    doc = {
        "restaurant_id": restaurant_id,
        "permissions": DEFAULT_PERMISSIONS.model_dump(),
        "created_at": now,
    }
    result = await mongo_conn.restaurant_permissions.insert_one(doc)
    logger.info("Default permissions granted", extra={"restaurant_id": str(restaurant_id)})
    return Permission(
        id=str(result.inserted_id),
        restaurant_id=str(restaurant_id),
        permissions=DEFAULT_PERMISSIONS,
        created_at=now,
    )

async def get_permission(restaurant_id: ObjectId) -> Permission | None:
    doc = await mongo_conn.restaurant_permissions.find_one({"restaurant_id": restaurant_id})
    if not doc:
        return None
    return Permission(
        id=str(doc["_id"]),
        restaurant_id=str(doc["restaurant_id"]),
        permissions=PermissionFlags(**doc.get("permissions", {})),
        created_at=doc.get("created_at"),
    )

async def delete_permission(restaurant_id: ObjectId) -> int:
    result = await mongo_conn.restaurant_permissions.delete_one({"restaurant_id": restaurant_id})
    logger.info("Permissions removed", extra={"restaurant_id": str(restaurant_id), "deleted": result.deleted_count})
    return result.deleted_count
