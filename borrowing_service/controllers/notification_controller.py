from flask import Blueprint, current_app, jsonify

from borrowing_service.tasks.overdue_check import run_overdue_check_job
from borrowing_service.utils.identity import role_required

notif_bp = Blueprint("notifications", __name__)


@notif_bp.post("/run-overdue-check")
@role_required()
def run_overdue_check():
    app = current_app._get_current_object()
    counts = run_overdue_check_job(app)
    return jsonify({"success": True, "message": "Overdue check completed", "data": counts})
