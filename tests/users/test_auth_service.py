from __future__ import annotations

import pytest

from src.event_checkin.event_checkin.core.exceptions import AuthenticationError, ValidationError


def _register(container, **overrides):
    data = dict(username="organizer", password="secret123", email="org@example.com", first_name="Lan", last_name="Tran")
    data.update(overrides)
    return container.auth_service.register(**data)


def test_register_then_authenticate(container):
    user = _register(container)

    s_user = container.auth_service.authenticate("organizer", "secret123")

    assert s_user.user_id == user.id
    assert s_user.display_name == "Lan Tran"
    assert s_user.provider == "local"


def test_register_requires_username_password_and_email(container):
    with pytest.raises(ValidationError, match="Vui lòng điền đầy đủ thông tin"):
        _register(container, email="")


def test_register_rejects_short_password(container):
    with pytest.raises(ValidationError):
        _register(container, password="12345")


def test_register_rejects_duplicate_username(container):
    _register(container)

    with pytest.raises(ValidationError, match="Tên đăng nhập đã tồn tại"):
        _register(container, email="other@example.com")


def test_authenticate_unknown_username(container):
    with pytest.raises(AuthenticationError, match="Tên đăng nhập không tồn tại"):
        container.auth_service.authenticate("nobody", "secret123")


def test_authenticate_wrong_password(container):
    _register(container)

    with pytest.raises(AuthenticationError, match="Mật khẩu không đúng"):
        container.auth_service.authenticate("organizer", "wrong-pass")


def test_authenticate_credential_without_user(container, db):
    _register(container)
    db.users.clear()

    with pytest.raises(AuthenticationError, match="Người dùng không tồn tại"):
        container.auth_service.authenticate("organizer", "secret123")


def test_oidc_login_upserts_user_from_claims(container, db):
    s_user = container.auth_service.login_with_oidc(
        {"sub": "oidc-42", "email": "mai@example.com", "given_name": "Mai", "family_name": "Pham", "picture": "http://x/p.png"}
    )

    assert s_user.user_id == "oidc-42"
    assert s_user.provider == "oidc"
    assert db.users["oidc-42"].profile_image_url == "http://x/p.png"

    container.auth_service.login_with_oidc({"sub": "oidc-42", "email": "mai@example.com", "first_name": "Mai Anh"})
    assert db.users["oidc-42"].first_name == "Mai Anh"


def test_oidc_login_requires_subject(container):
    with pytest.raises(AuthenticationError):
        container.auth_service.login_with_oidc({"email": "x@example.com"})


def test_search_users_skips_short_queries_and_self(container, make_user):
    make_user("u1", email="hoa@example.com", first_name="Hoa")
    make_user("u2", email="hoang@example.com", first_name="Hoàng")

    assert container.user_service.search("h", exclude_user_id="u1") == []

    found = container.user_service.search("ho", exclude_user_id="u1")
    assert [u.id for u in found] == ["u2"]
