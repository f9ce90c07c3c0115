"""
MongoDB connection and helpers for the LinguaGenius API.

The connection string comes from DATABASE_URL, or is assembled from
DB_USER / DB_PASS / DB_HOST for the hosted cluster. When neither is set,
`db` stays None and routes that need it will fail.
"""

import os
from typing import Any, Dict, List, Optional, Tuple, Union

from bson import ObjectId
from dotenv import load_dotenv
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.server_api import ServerApi

load_dotenv()

DATABASE_NAME = os.getenv("DATABASE_NAME", "LinguaGenius")

CLASSES = "classes"
INSTRUCTORS = "instructors"
USERS = "allUsers"
SELECTED_CLASSES = "selectedClasses"


def build_database_url() -> Optional[str]:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    user = os.getenv("DB_USER")
    password = os.getenv("DB_PASS")
    host = os.getenv("DB_HOST")
    if user and password and host:
        return f"mongodb+srv://{user}:{password}@{host}/?retryWrites=true&w=majority"
    return None


DATABASE_URL = build_database_url()

client = None
db = None
if DATABASE_URL:
    client = MongoClient(
        DATABASE_URL,
        server_api=ServerApi("1", strict=True, deprecation_errors=True),
    )
    db = client[DATABASE_NAME]


def to_object_id(id_str: str) -> ObjectId:
    try:
        return ObjectId(id_str)
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid id format")


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]):
    """Insert a pydantic model or plain dict and return the driver result."""
    if isinstance(data, BaseModel):
        doc = data.model_dump()
    else:
        doc = dict(data)
    return db[collection_name].insert_one(doc)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    sort: Optional[List[Tuple[str, int]]] = None,
) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return [serialize_doc(d) for d in cursor]


def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    return _serialize_value(doc)


# Driver results are echoed with the field names the web client reads.

def insert_result(result) -> Dict[str, Any]:
    return {
        "acknowledged": result.acknowledged,
        "insertedId": _serialize_value(result.inserted_id),
    }


def update_result(result) -> Dict[str, Any]:
    upserted_id = result.upserted_id
    return {
        "acknowledged": result.acknowledged,
        "modifiedCount": result.modified_count,
        "upsertedId": _serialize_value(upserted_id),
        "upsertedCount": 0 if upserted_id is None else 1,
        "matchedCount": result.matched_count,
    }


def delete_result(result) -> Dict[str, Any]:
    return {
        "acknowledged": result.acknowledged,
        "deletedCount": result.deleted_count,
    }
