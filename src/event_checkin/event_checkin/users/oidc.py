"""OpenID Connect login (Authlib Flask client).

Only registered when OIDC_CLIENT_ID is configured; local username/password
login keeps working either way.
"""
from __future__ import annotations

import logging
from typing import Optional

from authlib.integrations.flask_client import OAuth
from flask import Flask

logger = logging.getLogger(__name__)

PROVIDER_NAME = "oidc"


def init_oidc(app: Flask) -> Optional[OAuth]:
    client_id = app.config.get("OIDC_CLIENT_ID")
    discovery_url = app.config.get("OIDC_DISCOVERY_URL")
    if not client_id or not discovery_url:
        logger.info("OIDC login disabled (OIDC_CLIENT_ID/OIDC_DISCOVERY_URL not set)")
        return None

    oauth = OAuth(app)
    oauth.register(
        name=PROVIDER_NAME,
        client_id=client_id,
        client_secret=app.config.get("OIDC_CLIENT_SECRET"),
        server_metadata_url=discovery_url,
        client_kwargs={"scope": "openid email profile offline_access"},
    )
    logger.info("OIDC login enabled via %s", discovery_url)
    return oauth


def fetch_userinfo(client, token: dict) -> dict:
    """Claims from the ID token, falling back to the userinfo endpoint."""
    claims = token.get("userinfo")
    if claims:
        return dict(claims)
    return dict(client.userinfo(token=token))
