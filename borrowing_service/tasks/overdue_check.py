# borrowing_service/tasks/overdue_check.py
from flask import current_app

from borrowing_service.repositories.loan_repo import LoanRepo
from borrowing_service.services import policy
from borrowing_service.services.loan_composer import Enrichment, classify
from borrowing_service.services.mail_service import MailService


def _notify(service, loan) -> bool:
    """Returns: True if a reminder mail went out."""
    user_result = service.auth_client.get_user(loan.user_id)
    if classify(user_result) is not Enrichment.PRESENT or not user_result.value.email:
        current_app.logger.warning(
            f"[overdue_check] No email for user {loan.user_id} ({user_result.outcome.value}); loan {loan.id} not mailed"
        )
        return False

    user = user_result.value
    book_title = service.composer.book_fields(loan.book_id)["bookTitle"]
    return MailService.send_overdue_notice(user.email, user.name, book_title, loan.due_at)


def run_overdue_check_job(app) -> dict:
    """
    Teslim tarihi gecmis Borrowed kayitlarini Overdue yapar, sonra hatirlatma maili yollar.
    App context icinde cagrilmali (scheduler wrapper'i push eder).
    - status guncellemesi tek commit, satir basina kosullu
    - sadece gercekten Overdue'ya gecen kayitlara mail
    - mail hatalari job'i durdurmaz
    """
    now = policy.utcnow()
    candidates = [loan.id for loan in LoanRepo.find_overdue(now)]
    changed_ids = LoanRepo.mark_overdue(candidates, now)

    skipped = len(candidates) - len(changed_ids)
    if skipped:
        current_app.logger.info(f"[overdue_check] {skipped} loan(s) changed state during the sweep; left as is")

    service = app.extensions["loan_service"]
    mailed = 0
    for loan_id in changed_ids:
        if _notify(service, LoanRepo.get(loan_id)):
            mailed += 1

    current_app.logger.info(f"[overdue_check] overdue={len(changed_ids)} mailed={mailed}")
    return {"overdue": len(changed_ids), "mailed": mailed}
