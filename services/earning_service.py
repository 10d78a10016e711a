from db.db_operation import mongo_conn
from models.order import EarningSummary
from services.restaurant_store import parse_object_id
from utils.logger import get_logger

logger = get_logger("Earning_Service")

def summarize_earnings(records) -> EarningSummary:
    summary = EarningSummary()
    for record in records:
        summary.totalAmount += record.get("total_order_amount") or 0
        summary.totalRevenue += record.get("revenue_share_amount") or 0
    return summary

async def get_earning_summary(restaurant_id: str) -> EarningSummary:
    oid = parse_object_id(restaurant_id)
    records = await mongo_conn.restaurant_earnings.find({"restaurant_id": oid}).to_list(length=None)
    summary = summarize_earnings(records)
    logger.info("Earning summary computed", extra={"restaurant_id": restaurant_id, "records": len(records)})
    return summary
