from db.db_operation import mongo_conn
from datetime import datetime
from core.exceptions import AccessDenied, RequestValidationFailed, ResourceNotFound
from core.dependencies import CurrentUser
from services.restaurant_store import parse_object_id, serialize_document
from services.validation import ValidationFailure, validate_order_status
from utils.logger import get_logger

logger = get_logger("Order_Service")

async def update_order_status(order_id: str, new_status, current_user: CurrentUser) -> dict:
    """Set the status of an order owned by one of the caller's restaurants."""
    oid = parse_object_id(order_id, "orderId")
    checked = validate_order_status(new_status)
    if isinstance(checked, ValidationFailure):
        raise RequestValidationFailed(checked)

    orders_collection = mongo_conn.orders_collection
    order = await orders_collection.find_one({"_id": oid})
    if not order:
        raise ResourceNotFound("Order not found")

    if current_user.role != "superadmin" and str(order.get("restaurant_id")) not in current_user.restaurant_ids:
        logger.warning(f"Forbidden: {current_user.email} tried to update order {order_id}")
        raise AccessDenied("Not allowed to update orders for this restaurant")

    previous = order.get("status")
    order["status"] = checked
    order["updated_at"] = datetime.utcnow()
    await orders_collection.update_one(
        {"_id": oid},
        {"$set": {"status": checked, "updated_at": order["updated_at"]}}
    )
    logger.info(f"Order {order_id} status updated from {previous} → {checked}", extra={"actor": current_user.email})
    return serialize_document(order)
