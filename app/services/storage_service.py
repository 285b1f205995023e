import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from app.config import Settings

logger = logging.getLogger(__name__)

USERS = "users"
INTERVIEWS = "interviews"
FEEDBACK = "feedback"


class StorageService:
    def __init__(self, db: Database, client: MongoClient = None):
        self.db = db
        self.client = client
        self.users = db[USERS]
        self.interviews = db[INTERVIEWS]
        self.feedback = db[FEEDBACK]

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageService":
        client = MongoClient(settings.mongodb_uri)
        return cls(client[settings.mongodb_database], client=client)

    def ensure_indexes(self):
        """Create the indexes the interview and feedback queries rely on."""
        self.interviews.create_index([('userId', ASCENDING), ('createdAt', DESCENDING)])
        self.interviews.create_index([('finalized', ASCENDING), ('userId', ASCENDING)])
        # One feedback document per interview and user
        self.feedback.create_index(
            [('interviewId', ASCENDING), ('userId', ASCENDING)],
            unique=True,
        )
        logger.info("Indexes ensured on database %s", self.db.name)

    def close(self):
        if self.client is not None:
            self.client.close()
