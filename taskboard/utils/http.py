from flask import request

from taskboard.errors import ValidationError


def json_body() -> dict:
    """The request's JSON object; an absent or unparsable body counts as empty."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload
