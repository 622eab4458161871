from flask import jsonify, request


def ok(data=None, status=200, **extra):
    payload = {"success": True, "data": data}
    payload.update(extra)
    return jsonify(payload), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def idempotency_key(data: dict):
    return data.get("idempotency_key") or request.headers.get("Idempotency-Key") or None
