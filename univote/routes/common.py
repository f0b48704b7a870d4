# univote/routes/common.py

from flask import jsonify, request


def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def ok(status=200, **payload):
    return jsonify(dict(success=True, **payload)), status
