import pytest

from borrowing_service import create_app
from borrowing_service.clients.auth_client import UserSummary
from borrowing_service.clients.base import RemoteResult
from borrowing_service.clients.book_client import BookSummary
from borrowing_service.config import TestingConfig
from borrowing_service.extensions import db


class FakeBookClient:
    """In-memory Book service answering with the same RemoteResult contract."""

    def __init__(self):
        self.books = {}
        self.failing = set()     # "available", "decrement", "increment", "get_book"
        self.empty = set()       # book ids answered with an empty 200
        self.vanish_on_decrement = set()
        self.calls = []

    def add_book(self, book_id, copies=1, title=None, author="Author", file_path=None):
        self.books[book_id] = {
            "copies": copies,
            "title": title or f"Book {book_id}",
            "author": author,
            "file_path": file_path or f"/books/{book_id}.pdf",
        }

    def delete_book(self, book_id):
        self.books.pop(book_id, None)

    def copies(self, book_id):
        return self.books[book_id]["copies"]

    def get_available_copies(self, book_id):
        self.calls.append(("available", book_id))
        if "available" in self.failing:
            return RemoteResult.failed("HTTP 503", status_code=503)
        if book_id not in self.books:
            return RemoteResult.not_found()
        return RemoteResult.ok(self.books[book_id]["copies"])

    def decrement_copies(self, book_id):
        self.calls.append(("decrement", book_id))
        if book_id in self.vanish_on_decrement:
            self.delete_book(book_id)
        if "decrement" in self.failing:
            return RemoteResult.failed("timeout after 5.0s")
        if book_id not in self.books:
            return RemoteResult.not_found()
        if self.books[book_id]["copies"] <= 0:
            return RemoteResult.ok(False, status_code=409)
        self.books[book_id]["copies"] -= 1
        return RemoteResult.ok(True)

    def increment_copies(self, book_id):
        self.calls.append(("increment", book_id))
        if "increment" in self.failing:
            return RemoteResult.failed("HTTP 500", status_code=500)
        if book_id not in self.books:
            return RemoteResult.not_found()
        self.books[book_id]["copies"] += 1
        return RemoteResult.ok(True)

    def get_book(self, book_id):
        self.calls.append(("get_book", book_id))
        if "get_book" in self.failing:
            return RemoteResult.failed("HTTP 502", status_code=502)
        if book_id in self.empty:
            return RemoteResult.ok(None)
        if book_id not in self.books:
            return RemoteResult.not_found()
        b = self.books[book_id]
        return RemoteResult.ok(BookSummary(id=book_id, title=b["title"], author=b["author"], file_path=b["file_path"]))


class FakeAuthClient:
    def __init__(self):
        self.users = {}
        self.failing = False
        self.empty = set()

    def add_user(self, user_id, email=None, name=None):
        self.users[user_id] = UserSummary(
            id=user_id,
            email=email or f"user{user_id}@library.local",
            name=name or f"User {user_id}",
        )

    def get_user(self, user_id):
        if self.failing:
            return RemoteResult.failed("connection refused")
        if user_id in self.empty:
            return RemoteResult.ok(None)
        if user_id not in self.users:
            return RemoteResult.not_found()
        return RemoteResult.ok(self.users[user_id])


@pytest.fixture
def book_client():
    return FakeBookClient()


@pytest.fixture
def auth_client():
    return FakeAuthClient()


@pytest.fixture
def app(book_client, auth_client):
    app = create_app(TestingConfig, book_client=book_client, auth_client=auth_client)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return app.extensions["loan_service"]


def identity_headers(user_id, roles="ROLE_USER", email=None):
    headers = {"X-User-ID": str(user_id), "X-User-Roles": roles}
    if email:
        headers["X-User-Email"] = email
    return headers


@pytest.fixture
def headers():
    return identity_headers
