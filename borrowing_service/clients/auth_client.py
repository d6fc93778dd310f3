from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from borrowing_service.clients.base import RemoteResult, ServiceClient


@dataclass(frozen=True)
class UserSummary:
    id: Optional[int]
    email: Optional[str]
    name: Optional[str]

    @classmethod
    def from_json(cls, data: dict) -> "UserSummary":
        return cls(id=data.get("id"), email=data.get("email"), name=data.get("name"))


class AuthClient(ServiceClient):
    service_name = "auth-service"

    def get_user(self, user_id: int) -> RemoteResult:
        result = self.get(f"/api/users/{user_id}")
        if not result.is_ok:
            return result
        if not result.value:
            return RemoteResult.ok(None, status_code=result.status_code)
        if not isinstance(result.value, dict):
            return RemoteResult.failed(f"unexpected user payload: {result.value!r}", result.status_code)
        return RemoteResult.ok(UserSummary.from_json(result.value), status_code=result.status_code)
