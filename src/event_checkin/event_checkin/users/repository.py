from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import LocalCredential, User


class UserRepository(Protocol):
    """Giao diện repository cho User.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        user_id: str,
        email: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        profile_image_url: Optional[str] = None,
    ) -> User:
        raise NotImplementedError

    def get_credential_by_username(self, username: str) -> Optional[LocalCredential]:
        raise NotImplementedError

    def create_credential(self, *, user_id: str, username: str, password_hash: str) -> None:
        raise NotImplementedError

    def search(self, query: str, *, exclude_user_id: Optional[str], limit: int) -> Sequence[User]:
        raise NotImplementedError
