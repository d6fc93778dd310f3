from datetime import datetime

import pytest

from borrowing_service.clients.base import RemoteResult
from borrowing_service.models.loan import Loan
from borrowing_service.services.loan_composer import Enrichment, LoanComposer, classify


def _loan(user_id=1, book_id=10):
    return Loan(
        id=5,
        user_id=user_id,
        book_id=book_id,
        borrowed_at=datetime(2024, 3, 1, 9, 0),
        due_at=datetime(2024, 3, 15, 9, 0),
        returned_at=None,
        status="Borrowed",
    )


@pytest.mark.parametrize(
    "result, expected",
    [
        (RemoteResult.ok({"title": "x"}), Enrichment.PRESENT),
        (RemoteResult.ok(None), Enrichment.UNAVAILABLE),
        (RemoteResult.not_found(), Enrichment.DELETED),
        (RemoteResult.failed("timeout"), Enrichment.ERROR),
    ],
)
def test_classify(result, expected):
    assert classify(result) is expected


def test_present_book_and_user(app, book_client, auth_client):
    book_client.add_book(10, title="Dune", author="Herbert", file_path="/books/dune.pdf")
    auth_client.add_user(1, email="a@b.c", name="Ada")

    view = LoanComposer(book_client, auth_client).compose(_loan())

    assert view == {
        "id": 5,
        "userId": 1,
        "bookId": 10,
        "borrowedAt": "2024-03-01T09:00:00",
        "dueAt": "2024-03-15T09:00:00",
        "returnedAt": None,
        "status": "Borrowed",
        "bookTitle": "Dune",
        "bookAuthor": "Herbert",
        "bookFilePath": "/books/dune.pdf",
        "userEmail": "a@b.c",
        "userName": "Ada",
    }


def test_deleted_placeholders(app, book_client, auth_client):
    view = LoanComposer(book_client, auth_client).compose(_loan())

    assert view["bookTitle"] == view["bookAuthor"] == "[Deleted Book]"
    assert view["bookFilePath"] is None
    assert view["userEmail"] == view["userName"] == "[Deleted User]"


def test_unavailable_placeholders(app, book_client, auth_client):
    book_client.empty.add(10)
    auth_client.empty.add(1)

    view = LoanComposer(book_client, auth_client).compose(_loan())

    assert view["bookTitle"] == "[Unavailable Book]"
    assert view["userEmail"] == "[Unavailable User]"


def test_error_placeholders(app, book_client, auth_client):
    book_client.failing.add("get_book")
    auth_client.failing = True

    view = LoanComposer(book_client, auth_client).compose(_loan())

    assert view["bookTitle"] == view["bookAuthor"] == "[Error Fetching Book]"
    assert view["userEmail"] == view["userName"] == "[Error Fetching User]"


def test_book_failure_does_not_block_user_enrichment(app, book_client, auth_client):
    book_client.failing.add("get_book")
    auth_client.add_user(1, email="a@b.c", name="Ada")

    view = LoanComposer(book_client, auth_client).compose(_loan())

    assert view["bookTitle"] == "[Error Fetching Book]"
    assert view["userEmail"] == "a@b.c"


def test_client_exception_degrades_to_error_placeholder(app, book_client, auth_client):
    book_client.add_book(10)

    def explode(user_id):
        raise RuntimeError("unexpected")

    auth_client.get_user = explode

    view = LoanComposer(book_client, auth_client).compose(_loan())

    assert view["bookTitle"] == "Book 10"
    assert view["userName"] == "[Error Fetching User]"


def test_compose_does_not_touch_loan(app, book_client, auth_client):
    loan = _loan()
    LoanComposer(book_client, auth_client).compose(loan)
    assert loan.status == "Borrowed"
    assert loan.returned_at is None
