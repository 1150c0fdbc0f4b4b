"""
Photo Service
Lists the photo files kept in a part's directory and checks one before it is served.
"""

import errno
import logging
import mimetypes
import os
import stat
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from starlette.concurrency import run_in_threadpool

from photocatalog.utils.path_security import resolve_within

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/jpeg"


def guess_media_type(filename: str) -> Optional[str]:
    """Media type inferred from the filename extension, None if unknown."""
    media_type, _ = mimetypes.guess_type(filename, strict=False)
    return media_type


def is_image(filename: str) -> bool:
    media_type = guess_media_type(filename)
    return bool(media_type and media_type.startswith("image/"))


def display_name(name: str) -> str:
    """
    Text form of a name read from disk. Bytes that are not UTF-8 arrive as
    lone surrogates from os.listdir and become U+FFFD here.
    """
    return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def photo_url(part_code: str, filename: str, prefix: str = "") -> str:
    return f"{prefix}/photo/{quote(part_code, safe='')}/{quote(filename, safe='')}"


def build_photo_list(part_code: str, filenames: List[str], prefix: str = "") -> List[dict]:
    """Keep image files only, in listing order, each with the URL that streams it."""
    return [
        {"filename": name, "url": photo_url(part_code, name, prefix)}
        for name in filenames
        if is_image(name)
    ]


async def list_photos(part_code: str, directory: str, prefix: str = "") -> List[dict]:
    """
    Read a part directory and return its photos.

    Raises:
        OSError: If the directory cannot be listed.
    """
    names = await run_in_threadpool(os.listdir, directory)
    filenames = []
    for name in names:
        shown = display_name(name)
        if shown != name:
            logger.warning(f"[SEARCH] Filename in {directory} is not valid UTF-8: {shown!r}")
        filenames.append(shown)
    return build_photo_list(part_code, filenames, prefix)


def photo_path(directory: str, filename: str) -> Path:
    """
    Absolute path of a photo inside its part directory.

    Raises:
        UnsafePathError: If filename escapes directory.
    """
    return resolve_within(directory, filename)


def _check_readable_file(path: Path) -> os.stat_result:
    st = os.stat(path)
    if stat.S_ISDIR(st.st_mode):
        raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), str(path))
    if not stat.S_ISREG(st.st_mode):
        raise OSError(errno.EINVAL, "Not a regular file", str(path))
    if not os.access(path, os.R_OK):
        raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), str(path))
    return st


async def check_photo(path: Path) -> os.stat_result:
    """
    Make sure path is a readable regular file before any header is sent.

    Raises:
        OSError: With the errno describing why it cannot be served.
    """
    return await run_in_threadpool(_check_readable_file, path)
