from flask import Blueprint, current_app, jsonify, request

from borrowing_service.services.errors import LoanServiceError
from borrowing_service.utils.identity import current_identity, identity_required, role_required

loan_bp = Blueprint("borrows", __name__)


def _service():
    return current_app.extensions["loan_service"]


def _json_error(kind, message, code=400):
    return jsonify({"success": False, "error": kind, "message": message}), code


@loan_bp.errorhandler(LoanServiceError)
def handle_loan_error(e: LoanServiceError):
    if e.status_code >= 500:
        current_app.logger.error(f"[borrows] {e.kind}: {e.message}")
    else:
        current_app.logger.warning(f"[borrows] {e.kind}: {e.message}")
    return jsonify(e.to_dict()), e.status_code


@loan_bp.get("/public-status")
def public_status():
    return "Borrowing Service is up and accessible!", 200, {"Content-Type": "text/plain"}


@loan_bp.post("")
@identity_required
def borrow_book():
    data = request.get_json(silent=True)
    raw = data.get("bookId") if isinstance(data, dict) else None
    if raw is None or isinstance(raw, bool):
        return _json_error("InvalidRequest", "bookId is required")
    try:
        book_id = int(raw)
    except (TypeError, ValueError):
        return _json_error("InvalidRequest", "bookId must be an integer")

    service = _service()
    loan = service.borrow(current_identity().user_id, book_id)
    return jsonify({"success": True, "data": service.view(loan)}), 201


@loan_bp.put("/<int:loan_id>/return")
@identity_required
def return_book(loan_id):
    service = _service()
    loan = service.return_loan(loan_id, current_identity().user_id)
    return jsonify({"success": True, "data": service.view(loan)})


@loan_bp.get("/mine")
@identity_required
def my_borrows():
    return jsonify({"success": True, "data": _service().list_own(current_identity().user_id)})


@loan_bp.get("")
@role_required()
def all_borrows_admin_only():
    return jsonify({"success": True, "data": _service().list_all()})
