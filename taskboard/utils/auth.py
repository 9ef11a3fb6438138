from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from taskboard.errors import Forbidden, Unauthenticated
from taskboard.models.user_model import Caller, Role
from taskboard.stores.user_store import UserStore
from taskboard.utils.db import get_db, to_object_id


def current_caller() -> Caller:
    """Resolve the caller for this request from its bearer token (cached on ``g``)."""
    caller = g.get("caller")
    if caller is not None:
        return caller

    verify_jwt_in_request()
    user_id = to_object_id(get_jwt_identity())
    user = UserStore(get_db().users).find_by_id(user_id) if user_id is not None else None
    if user is None:
        raise Unauthenticated("Not authorized, user not found")

    try:
        role = Role(user.get("role", Role.MEMBER.value))
    except ValueError:
        role = Role.MEMBER
    g.caller = Caller(id=user["_id"], role=role)
    return g.caller


def protect(fn):
    """Require a valid bearer token naming an existing user."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        current_caller()
        return fn(*args, **kwargs)

    return wrapper


def admin_only(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_caller().is_admin:
            raise Forbidden("Access denied, admin only")
        return fn(*args, **kwargs)

    return wrapper
