from __future__ import annotations

from datetime import datetime, timedelta, timezone

from borrowing_service.models.loan import LoanStatus
from borrowing_service.services.errors import (
    ActiveLoanLimitReached,
    AlreadyBorrowedThisBook,
    BookUnavailable,
)

DEFAULT_LOAN_DAYS = 14
MAX_ACTIVE_LOANS = 1

# Overdue da hala aktif odunc sayilir
ACTIVE_STATUSES = (LoanStatus.BORROWED.value, LoanStatus.OVERDUE.value)


def utcnow() -> datetime:
    """Naive UTC; DB kolonlari timezone tutmuyor."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def compute_due_date(borrowed_at: datetime, days: int = DEFAULT_LOAN_DAYS) -> datetime:
    if days <= 0:
        raise ValueError("days must be positive")
    return borrowed_at + timedelta(days=days)


def is_active(status) -> bool:
    return status in ACTIVE_STATUSES


def ensure_not_already_borrowed(existing_loan) -> None:
    if existing_loan is not None:
        raise AlreadyBorrowedThisBook()


def ensure_within_loan_limit(active_loans) -> None:
    if len(active_loans) >= MAX_ACTIVE_LOANS:
        raise ActiveLoanLimitReached()


def ensure_copies_available(available_copies) -> None:
    if available_copies is None or available_copies <= 0:
        raise BookUnavailable()


def is_overdue(loan, now: datetime) -> bool:
    return loan.status == LoanStatus.BORROWED.value and loan.due_at is not None and loan.due_at < now
