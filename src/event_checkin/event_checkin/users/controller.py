from __future__ import annotations

import logging
from typing import Optional

from authlib.integrations.base_client.errors import OAuthError
from flask import Flask, jsonify, redirect, request, session, url_for

from ..common.http import current_user_id, domain_error_response, json_body, json_error, login_required, server_error
from ..container import Container
from ..core.exceptions import AuthenticationError, DomainError
from .oidc import PROVIDER_NAME, fetch_userinfo
from .service import SessionUser

logger = logging.getLogger(__name__)


def _start_session(s_user: SessionUser, *, remember: bool) -> None:
    session.clear()
    session.permanent = bool(remember)

    session["user_id"] = s_user.user_id
    session["name"] = s_user.display_name
    session["provider"] = s_user.provider


def register(app: Flask, container: Container, *, oauth=None) -> None:
    @app.route("/api/register", methods=["POST"], endpoint="api_register")
    def api_register():
        data = json_body() or request.form.to_dict()
        try:
            user = container.auth_service.register(
                username=data.get("username", ""),
                password=data.get("password", ""),
                email=data.get("email", ""),
                first_name=data.get("firstName"),
                last_name=data.get("lastName"),
            )
            return jsonify({"message": "Đăng ký thành công", "user": user.to_dict()})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi đăng ký")

    @app.route("/api/login-local", methods=["POST"], endpoint="api_login_local")
    def api_login_local():
        data = json_body() or request.form.to_dict()
        try:
            s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
            _start_session(s_user, remember=bool(data.get("rememberMe")))
            user = container.auth_service.get_current(s_user.user_id)
            logger.info("Local login: %s", s_user.user_id)
            return jsonify({"message": "Đăng nhập thành công", "user": user.to_dict()})
        except AuthenticationError as e:
            return json_error(str(e) or "Đăng nhập thất bại", 401)
        except Exception:
            return server_error("Lỗi máy chủ")

    def _oidc_client():
        if oauth is None:
            return None
        return oauth.create_client(PROVIDER_NAME)

    @app.route("/api/login", methods=["GET"], endpoint="api_login")
    def api_login():
        client = _oidc_client()
        if client is None:
            return json_error("Đăng nhập OIDC chưa được cấu hình", 404)
        return client.authorize_redirect(url_for("api_callback", _external=True))

    @app.route("/api/callback", methods=["GET"], endpoint="api_callback")
    def api_callback():
        client = _oidc_client()
        if client is None:
            return json_error("Đăng nhập OIDC chưa được cấu hình", 404)
        try:
            token = client.authorize_access_token()
            s_user = container.auth_service.login_with_oidc(fetch_userinfo(client, token))
            _start_session(s_user, remember=True)
            logger.info("OIDC login: %s", s_user.user_id)
            return redirect("/")
        except (OAuthError, AuthenticationError) as e:
            logger.warning("OIDC callback rejected: %s", e)
            return redirect("/api/login")
        except Exception:
            return server_error("Lỗi khi đăng nhập")

    @app.route("/api/logout", methods=["GET", "POST"], endpoint="api_logout")
    def api_logout():
        provider: Optional[str] = session.get("provider")
        session.clear()
        if request.method == "GET" and provider == PROVIDER_NAME:
            return redirect("/")
        return jsonify({"message": "Đã đăng xuất hệ thống."})

    @app.route("/api/auth/user", methods=["GET"], endpoint="api_auth_user")
    @login_required
    def api_auth_user():
        try:
            user = container.auth_service.get_current(current_user_id())
            return jsonify(user.to_dict())
        except AuthenticationError as e:
            session.clear()
            return json_error(str(e), 401)
        except Exception:
            return server_error("Failed to fetch user")

    @app.route("/api/users/search", methods=["GET"], endpoint="api_users_search")
    @login_required
    def api_users_search():
        try:
            users = container.user_service.search(request.args.get("q", ""), exclude_user_id=current_user_id())
            return jsonify([u.to_dict() for u in users])
        except Exception:
            return server_error("Lỗi khi tìm kiếm người dùng")
