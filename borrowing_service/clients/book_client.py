from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from borrowing_service.clients.base import RemoteResult, ServiceClient

CONFLICT = 409


@dataclass(frozen=True)
class BookSummary:
    id: Optional[int]
    title: Optional[str]
    author: Optional[str]
    file_path: Optional[str] = None

    @classmethod
    def from_json(cls, data: dict) -> "BookSummary":
        return cls(
            id=data.get("id"),
            title=data.get("title"),
            author=data.get("author"),
            file_path=data.get("filePath"),
        )


class BookClient(ServiceClient):
    """Book service: copy counts and display details."""

    service_name = "book-service"

    def get_available_copies(self, book_id: int) -> RemoteResult:
        result = self.get(f"/api/books/{book_id}/available-copies")
        if not result.is_ok or result.value is None:
            return result
        value = result.value
        if isinstance(value, dict):
            value = value.get("availableCopies")
        if value is None:
            return RemoteResult.ok(None, status_code=result.status_code)
        try:
            return RemoteResult.ok(int(value), status_code=result.status_code)
        except (TypeError, ValueError):
            return RemoteResult.failed(f"unexpected available-copies payload: {result.value!r}", result.status_code)

    def decrement_copies(self, book_id: int) -> RemoteResult:
        """OK(True) when a copy was taken, OK(False) when the service had none left."""
        result = self.post(f"/api/books/{book_id}/decrement-copies")
        if result.is_failed and result.status_code == CONFLICT:
            return RemoteResult.ok(False, status_code=CONFLICT)
        if not result.is_ok:
            return result
        value = result.value
        if isinstance(value, dict) and value.get("decremented") is False:
            return RemoteResult.ok(False, status_code=result.status_code)
        return RemoteResult.ok(True, status_code=result.status_code)

    def increment_copies(self, book_id: int) -> RemoteResult:
        result = self.post(f"/api/books/{book_id}/increment-copies")
        if not result.is_ok:
            return result
        return RemoteResult.ok(True, status_code=result.status_code)

    def get_book(self, book_id: int) -> RemoteResult:
        result = self.get(f"/api/books/{book_id}")
        if not result.is_ok:
            return result
        if not result.value:
            return RemoteResult.ok(None, status_code=result.status_code)
        if not isinstance(result.value, dict):
            return RemoteResult.failed(f"unexpected book payload: {result.value!r}", result.status_code)
        return RemoteResult.ok(BookSummary.from_json(result.value), status_code=result.status_code)
