"""
Sequential, rate-limited crawl of every comment page of a topic.

The server lists a topic newest-first and pages it by offset: offset 0 is
the newest ``page_size`` comments, offset ``page_size`` the next older batch,
and so on. The pager first asks for the declared comment count, then walks
the offsets one request at a time with a pause between requests.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from tqdm import tqdm

from .config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MIN_PAGE_SIZE, REQUEST_DELAY
from .exceptions import CommentCountNotFoundError
from .extractor import extract_topic_title, parse_comment_count, split_fragments
from .models import PageWindow
from .session import SessionManager

logger = logging.getLogger(__name__)


class CommentPager:
    """
    Collects the raw comment fragments of a topic, newest-first.

    Pages are never fetched concurrently: each fetch is awaited, and every
    page request is preceded by ``request_delay`` seconds of sleep.

    Usage:
        pager = CommentPager(transport, page_size=500, request_delay=3.0)
        fragments = await pager.fetch_all_fragments(9020254)
    """

    def __init__(
        self,
        transport,
        session: Optional[SessionManager] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        request_delay: float = REQUEST_DELAY,
        show_progress: bool = True,
    ):
        if not MIN_PAGE_SIZE <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(
                f"page_size must be between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE}, got {page_size}"
            )
        if request_delay < 0:
            raise ValueError(f"request_delay must not be negative, got {request_delay}")

        self.transport = transport
        self.session = session or SessionManager(transport)
        self.page_size = page_size
        self.request_delay = request_delay
        self.show_progress = show_progress

        # Per-run state, reset by fetch_all_fragments()
        self.cookies: Dict[str, str] = {}
        self.comment_count: Optional[int] = None
        self.topic_title: Optional[str] = None

    async def _get_page(self, window: PageWindow) -> str:
        return await self.transport.fetch(window.url, self.cookies)

    async def fetch_comment_count(self, thread_id: int) -> int:
        """
        Read the declared comment count from the smallest possible page.

        Also remembers the topic title found on that page.

        Raises:
            CommentCountNotFoundError: If the page has no comment count
        """
        window = PageWindow(thread_id, MIN_PAGE_SIZE, 0)
        page = await self._get_page(window)

        count = parse_comment_count(page)
        if count is None:
            raise CommentCountNotFoundError(thread_id, window.url)

        self.comment_count = count
        self.topic_title = extract_topic_title(page)
        return count

    def windows(self, thread_id: int, comment_count: int) -> List[PageWindow]:
        """Windows covering ``comment_count`` comments: ceil(count / page_size) of them."""
        return [
            PageWindow(thread_id, self.page_size, start)
            for start in range(0, comment_count, self.page_size)
        ]

    async def fetch_all_fragments(self, thread_id: int) -> List[str]:
        """
        Fetch every page of a topic and return its comment fragments.

        Returns:
            Fragments in server order: newest comment first. Only the
            cumulative offset decides when to stop; short pages are not
            treated as errors.
        """
        self.cookies = {}
        self.comment_count = None
        self.topic_title = None

        await self.session.ensure_session(self.cookies)
        comment_count = await self.fetch_comment_count(thread_id)

        windows = self.windows(thread_id, comment_count)
        logger.info("Topic %d: %d comments, %d pages of %d",
                    thread_id, comment_count, len(windows), self.page_size)

        fragments: List[str] = []
        with tqdm(total=len(windows), desc=f"Topic {thread_id}", unit="page",
                  disable=not self.show_progress) as pbar:
            for window in windows:
                # Politeness delay, one pause before every page request
                await asyncio.sleep(self.request_delay)

                page = await self._get_page(window)
                page_fragments = split_fragments(page)
                logger.debug("Offset %d: %d fragments", window.start_offset, len(page_fragments))
                fragments.extend(page_fragments)
                pbar.update(1)

        logger.info("Fetched %d fragments from %d pages", len(fragments), len(windows))
        return fragments
