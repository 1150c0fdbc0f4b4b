"""
Admin Router
Privileged operations gated by the shared admin key.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from photocatalog.api.dependencies import get_app_settings, require_admin_key
from photocatalog.config import Settings
from photocatalog.database import get_db
from photocatalog.errors import BadRequest, InternalError, NotFound
from photocatalog.models.user import User
from photocatalog.schemas.user import AdminResetPasswordRequest, MessageResponse
from photocatalog.services import auth_service

router = APIRouter(dependencies=[Depends(require_admin_key)])
logger = logging.getLogger(__name__)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: AdminResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Overwrite a user's password without checking the old one.
    """
    logger.info(f"[ADMIN RESET PWD] Resetting password for '{body.login}'.")

    if not body.login or not body.new_password:
        raise BadRequest("Target login and new password are required.")

    password_hash = await run_in_threadpool(
        auth_service.get_password_hash, body.new_password, settings.bcrypt_rounds
    )

    try:
        result = await db.execute(
            update(User)
            .where(User.login == body.login)
            .values(password_hash=password_hash, password_changed_at=datetime.utcnow())
        )
        if result.rowcount == 0:
            logger.warning(f"[ADMIN RESET PWD] User '{body.login}' not found.")
            raise NotFound(f"User '{body.login}' not found.")
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.error(f"[ADMIN RESET PWD] Store failure for '{body.login}'", exc_info=True)
        raise InternalError("Internal error while resetting password.")

    logger.info(f"[ADMIN RESET PWD] Password for '{body.login}' reset.")
    return MessageResponse(message=f"Password for '{body.login}' reset successfully.")
