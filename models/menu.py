from pydantic import BaseModel, Field
from typing import Any, List, Optional

# internal financial fields never shown on the public menu
HIDDEN_PRODUCT_FIELDS = ("cost_price", "profit_margin", "revenue_share")

class MenuCategory(BaseModel):
    categoryId: str
    categoryName: str
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    totalProducts: int = 0
    items: List[dict[str, Any]] = Field(default_factory=list)
