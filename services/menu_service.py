import asyncio
from db.db_operation import mongo_conn
from core.exceptions import ResourceNotFound
from models.menu import HIDDEN_PRODUCT_FIELDS, MenuCategory
from services.restaurant_store import parse_object_id, serialize_document
from utils.logger import get_logger

logger = get_logger("Menu_Service")

PRODUCT_PROJECTION = {field: 0 for field in HIDDEN_PRODUCT_FIELDS}

async def _load_category(restaurant_oid, category: dict) -> MenuCategory:
    cursor = mongo_conn.products.find(
        {"restaurant_id": restaurant_oid, "category_id": category["_id"]},
        PRODUCT_PROJECTION,
    )
    products = await cursor.to_list(length=None)
    return MenuCategory(
        categoryId=str(category["_id"]),
        categoryName=category.get("name", ""),
        description=category.get("description"),
        images=category.get("images", []),
        totalProducts=len(products),
        items=[serialize_document(p) for p in products],
    )

async def get_restaurant_menu(restaurant_id: str) -> list[dict]:
    """
    Active categories of a restaurant with their products.
    No active category at all is a 404; a category without products is
    returned with an empty item list.
    """
    oid = parse_object_id(restaurant_id)
    categories = await mongo_conn.categories.find({"restaurant_id": oid, "active": True}).to_list(length=None)
    if not categories:
        raise ResourceNotFound("No categories found for this restaurant.")
    menu = await asyncio.gather(*(_load_category(oid, c) for c in categories))
    logger.info("Menu fetched", extra={"restaurant_id": restaurant_id, "categories": len(menu)})
    return [m.model_dump() for m in menu]
