from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_email, optional_text, require_min_length
from ..core.constants import MIN_PASSWORD_LENGTH, USER_SEARCH_LIMIT, USER_SEARCH_MIN_LENGTH
from ..core.exceptions import AuthenticationError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: str
    display_name: str
    email: Optional[str]
    provider: str


class AuthService:
    """Use cases: register, local login, OIDC login."""

    def __init__(self, users: UserRepository, *, id_factory: Callable[[], str] | None = None):
        self._users = users
        self._new_id = id_factory or (lambda: str(uuid.uuid4()))

    def register(
        self,
        *,
        username: str,
        password: str,
        email: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not password or not email:
            raise ValidationError("Vui lòng điền đầy đủ thông tin")
        require_min_length(password, "Mật khẩu", MIN_PASSWORD_LENGTH)
        email = optional_email(email)

        if self._users.get_credential_by_username(username):
            raise ValidationError("Tên đăng nhập đã tồn tại")
        if self._users.get_by_email(email):
            raise ValidationError("Email đã được sử dụng")

        user = self._users.upsert(
            user_id=self._new_id(),
            email=email,
            first_name=optional_text(first_name) or "",
            last_name=optional_text(last_name) or "",
            profile_image_url=None,
        )
        self._users.create_credential(
            user_id=user.id,
            username=username,
            password_hash=generate_password_hash(password),
        )
        logger.info("Registered local user %s (%s)", username, user.id)
        return user

    def authenticate(self, username: str, password: str) -> SessionUser:
        credential = self._users.get_credential_by_username((username or "").strip())
        if not credential:
            raise AuthenticationError("Tên đăng nhập không tồn tại")

        user = self._users.get_by_id(credential.user_id)
        if not user:
            raise AuthenticationError("Người dùng không tồn tại")

        try:
            ok = check_password_hash(credential.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Mật khẩu không đúng")

        return SessionUser(user_id=user.id, display_name=user.display_name, email=user.email, provider="local")

    def login_with_oidc(self, claims: dict) -> SessionUser:
        """Upsert the user described by OIDC userinfo claims."""
        subject = optional_text(claims.get("sub"))
        if not subject:
            raise AuthenticationError("Thông tin đăng nhập không hợp lệ")

        user = self._users.upsert(
            user_id=subject,
            email=optional_text(claims.get("email")),
            first_name=optional_text(claims.get("first_name") or claims.get("given_name")),
            last_name=optional_text(claims.get("last_name") or claims.get("family_name")),
            profile_image_url=optional_text(claims.get("profile_image_url") or claims.get("picture")),
        )
        return SessionUser(user_id=user.id, display_name=user.display_name, email=user.email, provider="oidc")

    def get_current(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("Người dùng không tồn tại")
        return user


class UserService:
    """Use case: look up other users (collaborator picker)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get(self, user_id: str) -> Optional[User]:
        return self._users.get_by_id(user_id)

    def search(self, query: str, *, exclude_user_id: Optional[str] = None) -> Sequence[User]:
        query = (query or "").strip()
        if len(query) < USER_SEARCH_MIN_LENGTH:
            return []
        return list(self._users.search(query, exclude_user_id=exclude_user_id, limit=USER_SEARCH_LIMIT))
