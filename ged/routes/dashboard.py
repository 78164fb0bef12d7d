# ged/routes/dashboard.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from ged.errors import handles_failures
from ged.services.activity import DEFAULT_ACTIVITY_LIMIT, get_recent_activity
from ged.services.stats import get_document_stats

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/stats', methods=['GET'])
@login_required
@handles_failures("Failed to fetch stats")
def stats():
    return jsonify(get_document_stats())


@dashboard_bp.route('/activity', methods=['GET'])
@login_required
@handles_failures("Failed to fetch activity")
def activity():
    limit = request.args.get('limit', DEFAULT_ACTIVITY_LIMIT)
    return jsonify([entry.to_dict(with_user=True) for entry in get_recent_activity(limit)])


@dashboard_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify(current_user.to_dict())
