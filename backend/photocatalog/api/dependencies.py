"""
API Dependencies
Reusable FastAPI dependencies for endpoint protection.
"""

import calendar
import logging
import secrets

from fastapi import Depends, Request
from pydantic import ValidationError

from photocatalog.config import Settings
from photocatalog.context import AppContext
from photocatalog.errors import Forbidden, Unauthorized
from photocatalog.models.user import User
from photocatalog.schemas.user import TokenClaims
from photocatalog.services import auth_service

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_app_settings(context: AppContext = Depends(get_context)) -> Settings:
    return context.settings


def extract_token(request: Request):
    """Token and where it came from: the Authorization header, else ?token=."""
    token = request.headers.get("authorization")
    if token:
        if token.startswith(BEARER_PREFIX):
            token = token[len(BEARER_PREFIX):]
        return token, "header"

    token = request.query_params.get("token")
    if token:
        return token, "query"
    return None, None


async def get_current_claims(
    request: Request,
    context: AppContext = Depends(get_context),
) -> TokenClaims:
    """
    Dependency that enforces a valid session token.
    401 when no token is present, 403 when it is invalid, expired or revoked.
    """
    settings = context.settings
    token, source = extract_token(request)
    if not token:
        logger.warning(f"[AUTH CHECK] No token on {request.url.path}. Returning 401.")
        raise Unauthorized("Access denied. No token provided.")

    payload = auth_service.decode_access_token(token, settings)
    if payload is None:
        logger.warning(f"[AUTH CHECK] Invalid or expired token (source: {source}).")
        raise Forbidden("Invalid or expired token.")

    try:
        claims = TokenClaims.model_validate(payload)
    except ValidationError:
        logger.warning(f"[AUTH CHECK] Token without identity claims (source: {source}).")
        raise Forbidden("Invalid or expired token.")

    if settings.revoke_tokens_on_password_change:
        async with context.session_factory() as session:
            user = await session.get(User, claims.id)
        if user is None or claims.iat < calendar.timegm(user.password_changed_at.utctimetuple()):
            logger.warning(f"[AUTH CHECK] Revoked token for '{claims.login}' (source: {source}).")
            raise Forbidden("Invalid or expired token.")

    request.state.user = claims
    logger.info(f"[AUTH CHECK] Valid token (source: {source}). User: {claims.login}.")
    return claims


async def require_admin_key(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> None:
    """
    Dependency that enforces the shared admin secret.
    Always 403 when no secret is configured.
    """
    provided = request.headers.get(settings.admin_key_header)
    expected = settings.admin_api_key

    if not provided or not expected or not secrets.compare_digest(
        provided.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.warning("[ADMIN AUTH] Admin key missing or invalid.")
        raise Forbidden("Administrator access not authorized.")

    logger.info("[ADMIN AUTH] Administrator access verified.")
