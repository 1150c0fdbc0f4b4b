"""
Catalog Router
Part code listing, photo search and photo streaming.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photocatalog.api.dependencies import get_app_settings, get_context, get_current_claims
from photocatalog.config import Settings
from photocatalog.context import AppContext
from photocatalog.database import get_db
from photocatalog.errors import BadRequest, InternalError, NotFound, os_error_code
from photocatalog.models.catalog import CatalogEntry
from photocatalog.schemas.catalog import SearchResponse
from photocatalog.services import photos
from photocatalog.utils.path_security import UnsafePathError

router = APIRouter(dependencies=[Depends(get_current_claims)])
logger = logging.getLogger(__name__)


async def _get_entry(db: AsyncSession, part_code: str) -> Optional[CatalogEntry]:
    try:
        return await db.get(CatalogEntry, part_code)
    except SQLAlchemyError:
        logger.error(f"[CATALOG] Store failure looking up part '{part_code}'", exc_info=True)
        raise InternalError("Internal error while reading the catalog.")


@router.get("/catalog/all", response_model=List[str])
async def list_part_codes(db: AsyncSession = Depends(get_db)):
    """
    Every indexed part code, for client-side autocomplete.
    """
    try:
        result = await db.execute(select(CatalogEntry.part_code).order_by(CatalogEntry.part_code))
        codes = list(result.scalars().all())
    except SQLAlchemyError:
        logger.error("[CATALOG ALL] Store failure listing part codes", exc_info=True)
        raise InternalError("Internal error while listing part codes.")

    # Database collation may differ from code point order
    codes.sort()
    logger.info(f"[CATALOG ALL] {len(codes)} part codes found.")
    return codes


@router.get("/search", response_model=SearchResponse)
async def search_photos(
    part_code: Optional[str] = Query(None, alias="partCode"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    List the photos stored for a part code.
    Order follows the directory listing.
    """
    logger.info(f"[SEARCH] Part: {part_code}")
    if not part_code:
        raise BadRequest("The part code (partCode) query parameter is required.")

    entry = await _get_entry(db, part_code)
    if entry is None:
        logger.warning(f"[SEARCH] Part '{part_code}' not in catalog.")
        raise NotFound("Part code not found in catalog.")

    try:
        found = await photos.list_photos(part_code, entry.directory_path, settings.api_prefix)
    except OSError as e:
        logger.error(f"[SEARCH] Cannot read folder {entry.directory_path} for '{part_code}'", exc_info=True)
        raise InternalError("Internal error while reading the photo folder.", details=os_error_code(e))

    logger.info(f"[SEARCH] {len(found)} photos found for '{part_code}'.")
    return SearchResponse(part_code=part_code, photos=found)


@router.get("/photo/{part_code}/{filename}")
async def stream_photo(
    part_code: str,
    filename: str,
    context: AppContext = Depends(get_context),
):
    """
    Serve one photo file with a Content-Type inferred from its name.
    The catalog session is closed before the body starts.
    """
    async with context.session_factory() as session:
        entry = await _get_entry(session, part_code)

    if entry is None:
        logger.warning(f"[PHOTO STREAM] Part '{part_code}' not in catalog.")
        raise NotFound("Part code not found in catalog.")

    try:
        path = photos.photo_path(entry.directory_path, filename)
    except UnsafePathError:
        logger.warning(f"[PHOTO STREAM] Rejected filename '{filename}' for '{part_code}'.")
        raise BadRequest("Invalid filename.")

    try:
        stat_result = await photos.check_photo(path)
    except OSError as e:
        logger.error(f"[PHOTO STREAM] Cannot serve {path}: {e}")
        raise InternalError(
            "Error reading the part's file.",
            details=os_error_code(e),
            pathTried=str(path),
        )

    logger.info(f"[PHOTO STREAM] Serving {path}")
    media_type = photos.guess_media_type(filename) or photos.DEFAULT_MEDIA_TYPE
    return FileResponse(path, media_type=media_type, stat_result=stat_result)
