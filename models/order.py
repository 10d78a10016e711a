from pydantic import BaseModel, Field

ORDER_STATUSES = (
    "pending",
    "accepted",
    "rejected",
    "preparing",
    "ready",
    "out_for_delivery",
    "delivered",
    "cancelled",
)

class EarningSummary(BaseModel):
    totalAmount: float = Field(default=0)
    totalRevenue: float = Field(default=0)
