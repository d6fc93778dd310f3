from flask import Flask, jsonify

from borrowing_service.config import Config
from borrowing_service.extensions import db, migrate, mail


def create_app(config_class=Config, config_overrides=None, book_client=None, auth_client=None):
    app = Flask(__name__)
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # 1) extension'lar
    db.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)

    # model tablolarinin metadata'ya kayitli olmasi icin (migrate / create_all)
    from borrowing_service.models import loan  # noqa: F401

    # 2) uzak servis client'lari + orchestrator
    from borrowing_service.clients.auth_client import AuthClient
    from borrowing_service.clients.book_client import BookClient
    from borrowing_service.services.loan_service import LoanService
    from borrowing_service.utils.identity import forwarded_identity_headers

    timeout = app.config["REMOTE_TIMEOUT_SECONDS"]
    if book_client is None:
        book_client = BookClient(app.config["BOOK_SERVICE_URL"], timeout, forwarded_identity_headers)
    if auth_client is None:
        auth_client = AuthClient(app.config["AUTH_SERVICE_URL"], timeout, forwarded_identity_headers)

    app.extensions["loan_service"] = LoanService(
        book_client,
        auth_client,
        loan_days=app.config["LOAN_PERIOD_DAYS"],
        compensate_failed_borrow=app.config["COMPENSATE_FAILED_BORROW"],
    )

    # 3) API blueprint'leri
    from borrowing_service.controllers.loan_controller import loan_bp
    from borrowing_service.controllers.notification_controller import notif_bp
    app.register_blueprint(loan_bp, url_prefix="/borrows")
    app.register_blueprint(notif_bp, url_prefix="/notifications")

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    # Scheduler (overdue kontrol)
    from borrowing_service.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
