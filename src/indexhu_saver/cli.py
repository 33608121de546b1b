"""CLI interface for the Index.hu forum thread saver."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Union

import click

from .config import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_REDIRECTS,
    MIN_PAGE_SIZE,
    OUTPUT_FORMATS,
    REQUEST_DELAY,
    REQUEST_TIMEOUT,
    default_output_path,
)
from .exceptions import ForumSaverError
from .models import ThreadArchive
from .pipeline import CommentPipeline
from .renderer import render_html, render_json
from .transport import Transport
from .writer import write_document

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False):
    """Configure root logging once for a CLI run."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    # httpx logs every request at INFO; only show that with -v
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


async def save_thread(
    thread_id: int,
    output_path: Union[str, Path],
    output_format: str = "html",
    page_size: int = DEFAULT_PAGE_SIZE,
    request_delay: float = REQUEST_DELAY,
    show_progress: bool = True,
    transport: Optional[Transport] = None,
) -> ThreadArchive:
    """
    Crawl a topic and write it to ``output_path``.

    The file is only written after every page was fetched and every comment
    parsed; a failed crawl leaves no output behind.
    """
    async with CommentPipeline(
        transport,
        page_size=page_size,
        request_delay=request_delay,
        show_progress=show_progress,
    ) as pipeline:
        logger.info("Getting comments of topic %d...", thread_id)
        archive = await pipeline.archive(thread_id)

    if output_format == "json":
        content = render_json(archive)
    else:
        content = render_html(archive)

    logger.info("Saving %d comments to %s", len(archive.comments), output_path)
    await write_document(output_path, content)
    return archive


@click.command()
@click.argument('thread_id', type=click.IntRange(min=1))
@click.option(
    '-o', '--output', 'output_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Output file (default: data/result-<THREAD_ID>.<format>)'
)
@click.option(
    '--format', 'output_format',
    type=click.Choice(OUTPUT_FORMATS),
    default='html',
    show_default=True,
    help='Output document format'
)
@click.option(
    '--page-size',
    type=click.IntRange(MIN_PAGE_SIZE, MAX_PAGE_SIZE),
    default=DEFAULT_PAGE_SIZE,
    show_default=True,
    envvar='INDEXHU_PAGE_SIZE',
    help='Comments requested per page'
)
@click.option(
    '--delay',
    type=click.FloatRange(min=0),
    default=REQUEST_DELAY,
    show_default=True,
    envvar='INDEXHU_REQUEST_DELAY',
    help='Seconds to wait before each page request'
)
@click.option(
    '--timeout',
    type=click.FloatRange(min=0, min_open=True),
    default=REQUEST_TIMEOUT,
    show_default=True,
    envvar='INDEXHU_REQUEST_TIMEOUT',
    help='Per-request timeout in seconds'
)
@click.option(
    '--max-redirects',
    type=click.IntRange(min=0),
    default=MAX_REDIRECTS,
    show_default=True,
    help='Redirect hops followed per request'
)
@click.option(
    '--insecure',
    is_flag=True,
    help='Do not verify the server TLS certificate'
)
@click.option(
    '--strict-encoding',
    is_flag=True,
    help='Fail on bytes undefined in the source encoding instead of replacing them'
)
@click.option(
    '--no-progress',
    is_flag=True,
    help='Hide the page progress bar'
)
@click.option(
    '-v', '--verbose',
    is_flag=True,
    help='Log every request'
)
def main(thread_id, output_path, output_format, page_size, delay, timeout,
         max_redirects, insecure, strict_encoding, no_progress, verbose):
    """Save every comment of forum.index.hu topic THREAD_ID into one document."""
    setup_logging(verbose)

    if output_path is None:
        output_path = default_output_path(thread_id, output_format)

    transport = Transport(
        timeout=timeout,
        max_redirects=max_redirects,
        verify_tls=not insecure,
        decode_errors="strict" if strict_encoding else "replace",
    )

    try:
        asyncio.run(save_thread(
            thread_id,
            output_path,
            output_format=output_format,
            page_size=page_size,
            request_delay=delay,
            show_progress=not no_progress,
            transport=transport,
        ))
    except ForumSaverError as e:
        logger.error("Saving topic %d failed: %s", thread_id, e)
        sys.exit(1)
    except OSError as e:
        logger.error("Could not write %s: %s", output_path, e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted, nothing was written")
        sys.exit(130)

    logger.info("Download and save done.")


if __name__ == '__main__':
    main()
