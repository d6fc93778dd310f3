"""
Loan view composition.

Each loan is enriched with book and user display details fetched from the
Book / Auth services. Both lookups are best effort and independent: a lookup
that does not produce data degrades to a fixed placeholder, and the listing
itself never fails because of it.
"""
from __future__ import annotations

from enum import Enum

from flask import current_app

from borrowing_service.clients.base import RemoteResult


class Enrichment(str, Enum):
    PRESENT = "present"
    DELETED = "deleted"
    UNAVAILABLE = "unavailable"
    ERROR = "error"


BOOK_PLACEHOLDERS = {
    Enrichment.DELETED: "[Deleted Book]",
    Enrichment.UNAVAILABLE: "[Unavailable Book]",
    Enrichment.ERROR: "[Error Fetching Book]",
}

USER_PLACEHOLDERS = {
    Enrichment.DELETED: "[Deleted User]",
    Enrichment.UNAVAILABLE: "[Unavailable User]",
    Enrichment.ERROR: "[Error Fetching User]",
}


def classify(result: RemoteResult) -> Enrichment:
    if result.is_not_found:
        return Enrichment.DELETED
    if result.is_failed:
        return Enrichment.ERROR
    if result.value is None:
        return Enrichment.UNAVAILABLE
    return Enrichment.PRESENT


def _iso(value):
    return value.isoformat() if value else None


def base_view(loan) -> dict:
    return {
        "id": loan.id,
        "userId": loan.user_id,
        "bookId": loan.book_id,
        "borrowedAt": _iso(loan.borrowed_at),
        "dueAt": _iso(loan.due_at),
        "returnedAt": _iso(loan.returned_at),
        "status": loan.status,
    }


class LoanComposer:
    def __init__(self, book_client, auth_client):
        self.book_client = book_client
        self.auth_client = auth_client

    def _lookup(self, fetch, entity_id):
        try:
            return fetch(entity_id)
        except Exception as e:  # client sozlesmesi disi bir hata: yine placeholder
            current_app.logger.exception(f"[composer] Lookup crashed for id={entity_id}: {e}")
            return RemoteResult.failed(str(e))

    def book_fields(self, book_id) -> dict:
        result = self._lookup(self.book_client.get_book, book_id)
        state = classify(result)
        if state is Enrichment.PRESENT:
            book = result.value
            return {"bookTitle": book.title, "bookAuthor": book.author, "bookFilePath": book.file_path}

        if state is Enrichment.ERROR:
            current_app.logger.error(f"[composer] Error fetching book {book_id}: {result.error}")
        else:
            current_app.logger.warning(f"[composer] Book {book_id} is {state.value}; using placeholder.")
        placeholder = BOOK_PLACEHOLDERS[state]
        return {"bookTitle": placeholder, "bookAuthor": placeholder, "bookFilePath": None}

    def user_fields(self, user_id) -> dict:
        result = self._lookup(self.auth_client.get_user, user_id)
        state = classify(result)
        if state is Enrichment.PRESENT:
            user = result.value
            return {"userEmail": user.email, "userName": user.name}

        if state is Enrichment.ERROR:
            current_app.logger.error(f"[composer] Error fetching user {user_id}: {result.error}")
        else:
            current_app.logger.warning(f"[composer] User {user_id} is {state.value}; using placeholder.")
        placeholder = USER_PLACEHOLDERS[state]
        return {"userEmail": placeholder, "userName": placeholder}

    def compose(self, loan) -> dict:
        view = base_view(loan)
        if loan.book_id is not None:
            view.update(self.book_fields(loan.book_id))
        if loan.user_id is not None:
            view.update(self.user_fields(loan.user_id))
        return view

    def compose_many(self, loans) -> list:
        return [self.compose(loan) for loan in loans]
