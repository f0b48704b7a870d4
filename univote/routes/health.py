# univote/routes/health.py

from flask import Blueprint, jsonify

from univote.operations.health_monitor import check_clock, check_health

health_bp = Blueprint('health', __name__)


@health_bp.route('', methods=['GET'])
def liveness():
    res = check_health()
    code = 200 if res["overall_ok"] else 503
    return jsonify(dict(res, success=res["overall_ok"], status="ok" if res["overall_ok"] else "degraded",
                        message="Voting System API is running")), code


@health_bp.route('/time', methods=['GET'])
def clock():
    res = check_clock()
    code = 200 if res["overall_ok"] else 503
    return jsonify(dict(res, success=res["overall_ok"])), code
