"""MongoDB store for applicant records"""

from typing import Dict, Any, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .logging import logger
from ..config import settings
from ..exceptions import RecordStoreError


def to_object_id(document_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(document_id)
    except (InvalidId, TypeError):
        return None


class MongoDBManager:
    """MongoDB manager for the applicants collection"""

    def __init__(self, uri: str = None, database_name: str = None, collection_name: str = None):
        self.uri = uri or settings.MONGODB_URI
        self.database_name = database_name or settings.DATABASE_NAME
        self.collection_name = collection_name or settings.COLLECTION_NAME
        self.client: Optional[MongoClient] = None
        self.db: Optional[Database] = None
        self.collection: Optional[Collection] = None

    def connect(self):
        """Connect to MongoDB"""
        if self.client is not None:
            return

        logger.log_step("mongodb_connection_attempt", {
            "database": self.database_name,
            "collection": self.collection_name
        })
        try:
            self.client = MongoClient(self.uri, serverSelectionTimeoutMS=5000)
            self.db = self.client[self.database_name]
            self.collection = self.db[self.collection_name]

            # Test connection
            self.client.admin.command('ping')
            logger.log_step("mongodb_connected", {"status": "success"})
        except PyMongoError as e:
            logger.log_error("mongodb_connection_failed", {"error": str(e)})
            self.close()
            raise RecordStoreError("Applicant records are unavailable") from e

    def _collection(self) -> Collection:
        if self.collection is None:
            self.connect()
        return self.collection

    def save_document(self, document_data: Dict[str, Any]) -> str:
        """Insert an applicant record and return its id"""
        try:
            result = self._collection().insert_one(dict(document_data))
            return str(result.inserted_id)
        except PyMongoError as e:
            logger.log_error("mongodb_save_failed", {"error": str(e)})
            raise RecordStoreError("Could not save applicant record") from e

    def get_document(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Get an applicant record by _id"""
        object_id = to_object_id(document_id)
        if object_id is None:
            return None
        try:
            return self._collection().find_one({"_id": object_id})
        except PyMongoError as e:
            logger.log_error("mongodb_get_failed", {"error": str(e), "id": document_id})
            raise RecordStoreError("Could not load applicant record") from e

    def update_document(self, document_id: str, update_data: Dict[str, Any]) -> bool:
        """Set fields on an applicant record. Returns False when no record matched."""
        object_id = to_object_id(document_id)
        if object_id is None:
            return False
        try:
            result = self._collection().update_one(
                {"_id": object_id},
                {"$set": update_data}
            )
            return result.matched_count > 0
        except PyMongoError as e:
            logger.log_error("mongodb_update_failed", {"error": str(e), "id": document_id})
            raise RecordStoreError("Could not update applicant record") from e

    def delete_document(self, document_id: str) -> bool:
        """Delete an applicant record. Stored files are left in place."""
        object_id = to_object_id(document_id)
        if object_id is None:
            return False
        try:
            result = self._collection().delete_one({"_id": object_id})
            return result.deleted_count > 0
        except PyMongoError as e:
            logger.log_error("mongodb_delete_failed", {"error": str(e), "id": document_id})
            raise RecordStoreError("Could not delete applicant record") from e

    def list_documents(self, filter_criteria: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """List applicant records, newest first"""
        try:
            cursor = self._collection().find(filter_criteria or {}).sort("uploadedAt", -1)
            return list(cursor)
        except PyMongoError as e:
            logger.log_error("mongodb_list_failed", {"error": str(e)})
            raise RecordStoreError("Could not list applicant records") from e

    def close(self):
        """Close MongoDB connection"""
        if self.client is not None:
            self.client.close()
            logger.log_step("mongodb_connection_closed")
        self.client = None
        self.db = None
        self.collection = None
