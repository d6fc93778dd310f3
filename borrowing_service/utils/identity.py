"""
Gateway kimligi.

Gateway JWT'yi dogrulayip kimligi header olarak iletir:
X-User-ID, X-User-Email, X-User-Roles (virgulle ayrilmis, ROLE_ oneki olabilir).
Bu servis token dogrulamaz; sadece bu header'lara guvenir.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import Optional

from flask import current_app, has_request_context, jsonify, request

USER_ID_HEADER = "X-User-ID"
USER_EMAIL_HEADER = "X-User-Email"
USER_ROLES_HEADER = "X-User-Roles"
FORWARDED_HEADERS = (USER_ID_HEADER, USER_EMAIL_HEADER, USER_ROLES_HEADER)


@dataclass(frozen=True)
class Identity:
    user_id: Optional[int]
    email: Optional[str] = None
    roles: frozenset = field(default_factory=frozenset)

    def has_role(self, role: str) -> bool:
        return _normalize_role(role) in self.roles


def _normalize_role(role: str) -> str:
    role = role.strip().upper()
    return role[len("ROLE_"):] if role.startswith("ROLE_") else role


def resolve_identity(headers) -> Identity:
    raw_id = (headers.get(USER_ID_HEADER) or "").strip()
    user_id = None
    if raw_id:
        try:
            user_id = int(raw_id)
        except ValueError:
            user_id = None

    raw_roles = headers.get(USER_ROLES_HEADER) or ""
    roles = frozenset(_normalize_role(r) for r in raw_roles.split(",") if r.strip())
    email = (headers.get(USER_EMAIL_HEADER) or "").strip() or None
    return Identity(user_id=user_id, email=email, roles=roles)


def current_identity() -> Identity:
    return resolve_identity(request.headers)


def forwarded_identity_headers() -> dict:
    """Uzak servis cagrilarina kimlik header'larini aynen tasir."""
    if not has_request_context():
        return {}
    return {name: request.headers[name] for name in FORWARDED_HEADERS if request.headers.get(name)}


def identity_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if current_identity().user_id is None:
            return jsonify({"success": False, "error": "AuthenticationRequired",
                            "message": "User not authenticated."}), 401
        return view(*args, **kwargs)
    return wrapped


def role_required(role: Optional[str] = None):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            identity = current_identity()
            if identity.user_id is None:
                return jsonify({"success": False, "error": "AuthenticationRequired",
                                "message": "User not authenticated."}), 401
            needed = role or current_app.config.get("ADMIN_ROLE", "ADMIN")
            if not identity.has_role(needed):
                return jsonify({"success": False, "error": "Forbidden",
                                "message": "Insufficient role."}), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator
