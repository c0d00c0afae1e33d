from motor.motor_asyncio import AsyncIOMotorClient
from shadeapi.config import settings
import logging
import dns.resolver

logger = logging.getLogger(__name__)

# Patch for Windows DNS resolution issues with SRV records
if settings.MONGO_URI.startswith("mongodb+srv://"):
    try:
        dns.resolver.default_resolver = dns.resolver.Resolver(configure=False)
        dns.resolver.default_resolver.nameservers = settings.dns_nameservers
    except Exception as e:
        logger.warning(f"Failed to patch DNS resolver: {e}")

class Database:
    client: AsyncIOMotorClient = None
    db = None

db_instance = Database()

async def connect_to_mongo():
    db_instance.client = AsyncIOMotorClient(settings.MONGO_URI)
    db_instance.db = db_instance.client.get_database(settings.MONGO_DB_NAME)
    logger.info("Connected to MongoDB.")

    # Users are keyed by lowercased email
    await db_instance.db.users.create_index("email", unique=True)
    await db_instance.db.users.create_index([("role", 1), ("createdAt", -1)])

    logger.info("MongoDB indexes created/verified.")

async def close_mongo_connection():
    if db_instance.client is not None:
        db_instance.client.close()
        logger.info("MongoDB connection closed.")

def get_db():
    return db_instance.db
