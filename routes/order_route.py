from fastapi import APIRouter, Depends, Request
from core.dependencies import CurrentUser, require_role
from core.exceptions import AppException
from core.responses import fail, from_exception, ok, respond
from services.order_service import update_order_status
from utils.forms import read_request_payload
from utils.logger import get_logger

logger = get_logger("Order_Route")

router = APIRouter(prefix="/orders", tags=["Orders"])

@router.patch("/{order_id}/status")
async def api_update_order_status(
    order_id: str,
    request: Request,
    current_user: CurrentUser = Depends(require_role("restaurant_admin", "superadmin")),
):
    try:
        payload, _ = await read_request_payload(request)
        logger.info(f"Received status update request for {order_id} → {payload.get('status')} from {current_user.email}")
        order = await update_order_status(order_id, payload.get("status"), current_user)
        return respond(ok("Order status updated successfully", data=order))
    except AppException as e:
        return respond(from_exception(e))
    except Exception:
        logger.exception("Error updating order status")
        return respond(fail(500, "INTERNAL_ERROR", "Failed to update order status"))
