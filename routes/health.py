"""
routes/health.py - Liveness and readiness probes

GET /health/live   - 200 while the process is up
GET /health/ready  - 200 when the mix is servable, 503 otherwise
"""

from flask import Blueprint, current_app, jsonify

health_bp = Blueprint('health', __name__)


def _as_json(result):
    return {'healthy': result.healthy, 'message': result.message, 'details': result.details}


@health_bp.route('/health/live', methods=['GET'])
def health_live():
    result = current_app.health_checker.liveness()
    return jsonify(_as_json(result)), 200


@health_bp.route('/health/ready', methods=['GET'])
def health_ready():
    result = current_app.health_checker.readiness()
    code = 200 if result.healthy else 503
    return jsonify(_as_json(result)), code
