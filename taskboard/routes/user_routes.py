from flask import Blueprint, jsonify

from taskboard.services.user_service import UserService
from taskboard.stores.task_store import TaskStore
from taskboard.stores.user_store import UserStore
from taskboard.utils.auth import admin_only, protect
from taskboard.utils.db import get_db, serialize_doc


users_bp = Blueprint("users", __name__)


def _user_service() -> UserService:
    db = get_db()
    return UserService(UserStore(db.users), TaskStore(db.tasks))


@users_bp.get("/")
@admin_only
def list_users():
    return jsonify(serialize_doc(_user_service().list_members())), 200


@users_bp.get("/<user_id>")
@protect
def get_user(user_id):
    return jsonify(serialize_doc(_user_service().get_user(user_id))), 200
