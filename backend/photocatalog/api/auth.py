"""
Authentication Router
Endpoints for registration, login and self-service password change.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from photocatalog.api.dependencies import get_current_claims, get_app_settings
from photocatalog.config import Settings
from photocatalog.database import get_db, is_unique_violation
from photocatalog.errors import BadRequest, Conflict, InternalError, NotFound, Unauthorized
from photocatalog.models.user import User
from photocatalog.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    TokenClaims,
)
from photocatalog.services import auth_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Create a user. The password is stored as a bcrypt hash only.
    """
    if not body.login or not body.password:
        logger.warning("[REGISTER] Login or password missing.")
        raise BadRequest("Login and password are required.")

    logger.info(f"[REGISTER] Creating user: {body.login}")
    password_hash = await run_in_threadpool(
        auth_service.get_password_hash, body.password, settings.bcrypt_rounds
    )
    new_user = User(
        login=body.login,
        password_hash=password_hash,
        display_name=body.display_name,
    )

    try:
        db.add(new_user)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if is_unique_violation(e):
            logger.warning(f"[REGISTER] Login '{body.login}' already exists.")
            raise Conflict("Login already exists.")
        logger.error("[REGISTER] Integrity error while creating user", exc_info=True)
        raise InternalError("Internal error while creating user.")
    except SQLAlchemyError:
        logger.error("[REGISTER] Store failure while creating user", exc_info=True)
        raise InternalError("Internal error while creating user.")

    return RegisterResponse(message="User created successfully!", user_id=new_user.id)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Check credentials and issue a 24h session token.
    Unknown login and wrong password get the same 401.
    """
    if not body.login or not body.password:
        logger.warning("[LOGIN] Login or password missing.")
        raise BadRequest("Login and password are required.")

    try:
        result = await db.execute(select(User).where(User.login == body.login))
        user = result.scalar_one_or_none()
    except SQLAlchemyError:
        logger.error(f"[LOGIN] Store failure looking up '{body.login}'", exc_info=True)
        raise InternalError("Internal error while logging in.")

    if user is None:
        logger.warning(f"[LOGIN] User '{body.login}' not found.")
        raise Unauthorized("Invalid credentials.")

    match = await run_in_threadpool(
        auth_service.verify_password, body.password, user.password_hash, settings.bcrypt_rounds
    )
    if not match:
        logger.warning(f"[LOGIN] Wrong password for '{body.login}'.")
        raise Unauthorized("Invalid credentials.")

    token = auth_service.create_access_token({"id": user.id, "login": user.login}, settings)
    logger.info(f"[LOGIN] Token issued for '{user.login}'.")
    return LoginResponse(message=f"Welcome, {user.display_name or user.login}!", token=token)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Change the caller's own password after checking the old one.
    """
    logger.info(f"[CHANGE PWD] User '{claims.login}' (ID: {claims.id}) changing password.")

    if not body.old_password or not body.new_password:
        raise BadRequest("Old password and new password are required.")

    try:
        user = await db.get(User, claims.id)
    except SQLAlchemyError:
        logger.error(f"[CHANGE PWD] Store failure loading '{claims.login}'", exc_info=True)
        raise InternalError("Internal error while changing password.")

    if user is None:
        raise NotFound("User not found.")

    match = await run_in_threadpool(
        auth_service.verify_password, body.old_password, user.password_hash, settings.bcrypt_rounds
    )
    if not match:
        logger.warning(f"[CHANGE PWD] Wrong old password for '{claims.login}'.")
        raise Unauthorized("Old password is incorrect.")

    user.password_hash = await run_in_threadpool(
        auth_service.get_password_hash, body.new_password, settings.bcrypt_rounds
    )
    user.password_changed_at = datetime.utcnow()

    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.error(f"[CHANGE PWD] Store failure saving '{claims.login}'", exc_info=True)
        raise InternalError("Internal error while changing password.")

    logger.info(f"[CHANGE PWD] Password for '{claims.login}' changed.")
    return MessageResponse(message="Password changed successfully!")
