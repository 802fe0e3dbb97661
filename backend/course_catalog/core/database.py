import logging
from typing import Optional

import motor.motor_asyncio
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request

from course_catalog.core.config import MONGO_URI, DATABASE_NAME

logger = logging.getLogger(__name__)


class Database:
    """
    Storage handle for one application instance.
    Created and connected in the app lifespan, closed on shutdown,
    and handed to routes through the `get_db` dependency.
    """

    def __init__(self, uri: str = MONGO_URI, name: str = DATABASE_NAME):
        self.uri = uri
        self.name = name
        self.client = None
        self._db = None

    async def connect(self):
        self.client = motor.motor_asyncio.AsyncIOMotorClient(self.uri)
        self._db = self.client[self.name]
        await self.ensure_indexes()
        logger.info("Connected to MongoDB database '%s'", self.name)

    async def ensure_indexes(self):
        # Duplicate registrations are rejected by the store, not by the route.
        await self.users.create_index("email", unique=True)

    def close(self):
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed.")
        self.client = None
        self._db = None

    def __getitem__(self, collection_name: str):
        if self._db is None:
            raise RuntimeError("Database is not connected.")
        return self._db[collection_name]

    @property
    def users(self):
        return self["users"]

    @property
    def courses(self):
        return self["courses"]


def get_db(request: Request) -> Database:
    return request.app.state.db


def parse_object_id(value: str) -> Optional[ObjectId]:
    """Returns None for strings that cannot be an ObjectId, so callers can answer 404."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None
