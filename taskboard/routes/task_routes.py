from flask import Blueprint, current_app, jsonify, request

from taskboard.services.dashboard import DashboardAggregator
from taskboard.services.task_service import TaskService
from taskboard.stores.task_store import TaskStore
from taskboard.stores.user_store import UserStore
from taskboard.utils.auth import admin_only, current_caller, protect
from taskboard.utils.db import get_db, serialize_doc
from taskboard.utils.http import json_body


tasks_bp = Blueprint("tasks", __name__)


def _task_service() -> TaskService:
    db = get_db()
    return TaskService(TaskStore(db.tasks), UserStore(db.users))


def _dashboard() -> DashboardAggregator:
    return DashboardAggregator(
        TaskStore(get_db().tasks),
        recent_limit=current_app.config["RECENT_TASKS_LIMIT"],
    )


@tasks_bp.get("/dashboard-data")
@admin_only
def dashboard_data():
    return jsonify(serialize_doc(_dashboard().global_view())), 200


@tasks_bp.get("/user-dashboard-data")
@protect
def user_dashboard_data():
    caller = current_caller()
    return jsonify(serialize_doc(_dashboard().user_view(caller.id))), 200


@tasks_bp.get("/")
@protect
def list_tasks():
    result = _task_service().list_tasks(current_caller(), request.args.get("status"))
    return jsonify(serialize_doc(result)), 200


@tasks_bp.get("/<task_id>")
@protect
def get_task(task_id):
    task = _task_service().get_task(task_id, current_caller())
    return jsonify(serialize_doc(task)), 200


@tasks_bp.post("/")
@admin_only
def create_task():
    payload = json_body()
    task = _task_service().create_task(payload, current_caller())
    return jsonify(message="Task created successfully", task=serialize_doc(task)), 201


@tasks_bp.put("/<task_id>")
@protect
def update_task(task_id):
    payload = json_body()
    task = _task_service().update_task(task_id, payload, current_caller())
    return jsonify(message="Task updated successfully", task=serialize_doc(task)), 200


@tasks_bp.delete("/<task_id>")
@admin_only
def delete_task(task_id):
    _task_service().delete_task(task_id, current_caller())
    return jsonify(message="Task deleted successfully"), 200


@tasks_bp.put("/<task_id>/status")
@protect
def update_task_status(task_id):
    payload = json_body()
    task = _task_service().update_status(task_id, payload.get("status"), current_caller())
    return jsonify(message="Task status updated", task=serialize_doc(task)), 200


@tasks_bp.put("/<task_id>/todo")
@protect
def update_task_checklist(task_id):
    payload = json_body()
    task = _task_service().update_checklist(
        task_id, payload.get("todoChecklist"), current_caller()
    )
    return jsonify(message="Task checklist updated", task=serialize_doc(task)), 200
