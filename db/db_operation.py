from motor.motor_asyncio import AsyncIOMotorClient
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("DB_OPERATION")

async def create_indexes():
    # slugs are best-effort, so no unique index on restaurants.slug
    await mongo_conn.restaurants.create_index("approval_status")
    await mongo_conn.restaurants.create_index("slug")
    await mongo_conn.restaurant_permissions.create_index("restaurant_id", unique=True)
    await mongo_conn.categories.create_index([("restaurant_id", 1), ("active", 1)])
    await mongo_conn.products.create_index([("restaurant_id", 1), ("category_id", 1)])
    await mongo_conn.orders_collection.create_index("restaurant_id")
    await mongo_conn.orders_collection.create_index("status")
    await mongo_conn.restaurant_earnings.create_index("restaurant_id")
    logger.info("Indexes created")

class MongoConnection:
    def __init__(self):
        logger.info("Initializing MongoDB Connection")
        self.client = AsyncIOMotorClient(settings.MONGO_URI)
        self.db = self.client[settings.DB_NAME]

    def bind(self, database):
        """Point every collection at another database (used by tests)."""
        self.db = database

    @property
    def restaurants(self):
        return self.db["restaurants"]

    @property
    def restaurant_permissions(self):
        return self.db["restaurant_permissions"]

    @property
    def categories(self):
        return self.db["categories"]

    @property
    def products(self):
        return self.db["products"]

    @property
    def orders_collection(self):
        return self.db["orders"]

    @property
    def restaurant_earnings(self):
        return self.db["restaurant_earnings"]

    @property
    def users_collection(self):
        return self.db["users"]

    async def connect(self):
        try:
            # Force an actual connection & authentication check
            await self.db.command("ping")
            logger.info("Successfully connected to MongoDB and authenticated.")
            logger.info(f"Using Database: {settings.DB_NAME}")
        except Exception as e:
            logger.error(f"Could not connect to MongoDB: {e}")
            raise e

# Create the instance
mongo_conn = MongoConnection()
