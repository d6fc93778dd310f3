# borrowing_service/services/mail_service.py
from __future__ import annotations

from flask import current_app
from flask_mail import Message

from borrowing_service.extensions import mail

OVERDUE_SUBJECT = "Library: overdue book reminder"


class MailService:
    @staticmethod
    def send_overdue_notice(to_email: str, user_name: str | None, book_title: str, due_at) -> bool:
        """Hatirlatma maili; SMTP hatasi loglanir, sweep devam eder."""
        body = (
            f"Hello {user_name or 'reader'},\n\n"
            f"The due date for '{book_title}' has passed.\n"
            f"Due date: {due_at:%Y-%m-%d}\n\n"
            "Please return it as soon as possible.\n"
        )
        try:
            mail.send(Message(subject=OVERDUE_SUBJECT, recipients=[to_email], body=body))
        except Exception as e:  # SMTP/konfig hatasi
            current_app.logger.warning(f"[overdue_check] Reminder for '{book_title}' not delivered to {to_email}: {e}")
            return False
        return True
