"""Borrow/return failure taxonomy.

Every failure the orchestrator can report is a ``LoanServiceError`` carrying
a stable ``kind`` (what the caller sees in the ``error`` field) and the HTTP
status the controller layer answers with.
"""
from __future__ import annotations


class LoanServiceError(RuntimeError):
    kind = "LoanServiceError"
    status_code = 500
    default_message = "Loan operation failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class AuthenticationRequired(LoanServiceError):
    kind = "AuthenticationRequired"
    status_code = 401
    default_message = "User not authenticated."


# -----------------------------
# Policy violations (4xx, never retried)
# -----------------------------
class AlreadyBorrowedThisBook(LoanServiceError):
    kind = "AlreadyBorrowedThisBook"
    status_code = 400
    default_message = "You have already borrowed this book and have not returned it yet."


class ActiveLoanLimitReached(LoanServiceError):
    kind = "ActiveLoanLimitReached"
    status_code = 400
    default_message = "You must return your currently borrowed book before borrowing another one."


class BookUnavailable(LoanServiceError):
    kind = "BookUnavailable"
    status_code = 400
    default_message = "Book is not currently available."


class AlreadyReturned(LoanServiceError):
    kind = "AlreadyReturned"
    status_code = 400
    default_message = "This book has already been returned or is not currently borrowed."


class NotAuthorized(LoanServiceError):
    kind = "NotAuthorized"
    status_code = 403
    default_message = "You are not authorized to return this book."


# -----------------------------
# Referenced entity missing
# -----------------------------
class BookNotFound(LoanServiceError):
    kind = "BookNotFound"
    status_code = 404
    default_message = "Book not found in the library."


class LoanNotFound(LoanServiceError):
    kind = "LoanNotFound"
    status_code = 404
    default_message = "Borrow record not found."


# -----------------------------
# Remote transient (caller may retry)
# -----------------------------
class InventoryUnavailable(LoanServiceError):
    kind = "InventoryUnavailable"
    status_code = 503
    default_message = "Failed to check book availability. Please try again later."


class InventoryUpdateFailed(LoanServiceError):
    kind = "InventoryUpdateFailed"
    status_code = 503
    default_message = "Failed to update book availability. Please try again later."


class LoanPersistFailed(LoanServiceError):
    kind = "LoanPersistFailed"
    status_code = 500
    default_message = "Could not save the borrow record. Please try again later."
