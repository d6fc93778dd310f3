from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from borrowing_service.models.loan import LoanStatus
from borrowing_service.services import policy
from borrowing_service.services.errors import (
    ActiveLoanLimitReached,
    AlreadyBorrowedThisBook,
    BookUnavailable,
)


def test_due_date_is_fourteen_days_by_default():
    borrowed = datetime(2024, 3, 1, 10, 30)
    assert policy.compute_due_date(borrowed) == datetime(2024, 3, 15, 10, 30)


def test_due_date_rejects_non_positive_period():
    with pytest.raises(ValueError):
        policy.compute_due_date(datetime(2024, 3, 1), days=0)


def test_active_statuses():
    assert policy.is_active(LoanStatus.BORROWED.value)
    assert policy.is_active(LoanStatus.OVERDUE.value)
    assert not policy.is_active(LoanStatus.RETURNED.value)


def test_existing_loan_for_same_book_is_rejected():
    policy.ensure_not_already_borrowed(None)
    with pytest.raises(AlreadyBorrowedThisBook):
        policy.ensure_not_already_borrowed(SimpleNamespace(id=1))


def test_single_active_loan_limit():
    policy.ensure_within_loan_limit([])
    with pytest.raises(ActiveLoanLimitReached):
        policy.ensure_within_loan_limit([SimpleNamespace(id=1)])


@pytest.mark.parametrize("copies", [None, 0, -1])
def test_no_copies_means_unavailable(copies):
    with pytest.raises(BookUnavailable):
        policy.ensure_copies_available(copies)


def test_positive_copies_pass():
    policy.ensure_copies_available(1)


def test_is_overdue_only_for_past_due_borrowed_loans():
    now = datetime(2024, 3, 20)
    past = now - timedelta(days=1)
    future = now + timedelta(days=1)

    assert policy.is_overdue(SimpleNamespace(status="Borrowed", due_at=past), now)
    assert not policy.is_overdue(SimpleNamespace(status="Borrowed", due_at=future), now)
    assert not policy.is_overdue(SimpleNamespace(status="Returned", due_at=past), now)
    assert not policy.is_overdue(SimpleNamespace(status="Overdue", due_at=past), now)
