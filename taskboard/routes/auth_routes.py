from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import create_access_token

from taskboard.services.user_service import UserService
from taskboard.stores.task_store import TaskStore
from taskboard.stores.user_store import UserStore
from taskboard.utils.auth import current_caller, protect
from taskboard.utils.db import get_db, serialize_doc
from taskboard.utils.http import json_body


auth_bp = Blueprint("auth", __name__)


def _user_service() -> UserService:
    db = get_db()
    return UserService(UserStore(db.users), TaskStore(db.tasks))


def _token_for(user) -> str:
    return create_access_token(identity=str(user["_id"]))


@auth_bp.post("/register")
def register():
    payload = json_body()
    user = _user_service().register(payload, current_app.config["ADMIN_INVITE_TOKEN"])
    return jsonify(user=serialize_doc(user), token=_token_for(user)), 201


@auth_bp.post("/login")
def login():
    payload = json_body()
    user = _user_service().authenticate(payload.get("email"), payload.get("password"))
    return jsonify(user=serialize_doc(user), token=_token_for(user)), 200


@auth_bp.get("/profile")
@protect
def profile():
    user = _user_service().get_user(current_caller().id)
    return jsonify(serialize_doc(user)), 200
