from datetime import datetime

from bson import ObjectId
from flask import current_app
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import PyMongoError


def init_app(app):
    """Attach a MongoClient to the app and ensure the indexes the queries rely on."""
    client = app.config.get("MONGO_CLIENT")
    if client is None:
        client = MongoClient(
            app.config["MONGO_URI"],
            serverSelectionTimeoutMS=app.config["MONGO_TIMEOUT_MS"],
            tz_aware=False,
        )
    app.extensions["mongo_client"] = client

    db = client[app.config["MONGO_DB_NAME"]]
    try:
        db.tasks.create_index([("assignedTo", ASCENDING)])
        db.tasks.create_index([("status", ASCENDING)])
        db.tasks.create_index([("createdAt", DESCENDING)])
        db.users.create_index([("email", ASCENDING)], unique=True)
    except PyMongoError as exc:
        # The server may come up after the app; queries still work without indexes.
        app.logger.warning("Could not ensure MongoDB indexes: %s", exc)


def get_db():
    client = current_app.extensions["mongo_client"]
    return client[current_app.config["MONGO_DB_NAME"]]


def to_object_id(value):
    """Return an ObjectId for ``value`` or None when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def serialize_doc(doc):
    """Make a Mongo document JSON-friendly: ObjectIds to str, datetimes to ISO."""
    if isinstance(doc, dict):
        return {k: serialize_doc(v) for k, v in doc.items()}
    if isinstance(doc, list):
        return [serialize_doc(v) for v in doc]
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime):
        return doc.isoformat()
    return doc
