"""Output file writing."""

import logging
from pathlib import Path
from typing import Union

import aiofiles

logger = logging.getLogger(__name__)


async def write_document(path: Union[str, Path], content: Union[str, bytes]) -> Path:
    """
    Write a rendered document to ``path`` atomically.

    The content goes to a ``.tmp`` sibling first and is then renamed over the
    target, so an interrupted write never leaves a truncated document behind.
    Text is written as UTF-8.

    Raises:
        OSError: If the directory cannot be created or the file written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = content.encode("utf-8") if isinstance(content, str) else content
    tmp = path.with_name(path.name + ".tmp")
    try:
        async with aiofiles.open(tmp, "wb") as f:
            await f.write(data)
        tmp.replace(path)
    except OSError:
        if tmp.exists():
            tmp.unlink()
        raise

    logger.info("Wrote %d bytes to %s", len(data), path)
    return path
