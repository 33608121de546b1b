"""
End-to-end crawl of one topic: session, pages, fragments, comments.

Ordering strategy: fragments are accumulated in server order across all
pages (newest-first within a page, pages in ascending offset order, so the
whole list is newest-first) and reversed exactly once at the end. Parsing is
per-fragment and stateless, so it happens after the reversal.
"""

import logging
from typing import List, Optional

from .config import DEFAULT_PAGE_SIZE, REQUEST_DELAY
from .extractor import parse_fragment
from .models import Comment, ThreadArchive
from .pager import CommentPager
from .transport import Transport

logger = logging.getLogger(__name__)


class CommentPipeline:
    """
    Retrieves all comments of a topic in chronological order.

    Usage:
        async with CommentPipeline(page_size=500, request_delay=3.0) as pipeline:
            archive = await pipeline.archive(9020254)
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        request_delay: float = REQUEST_DELAY,
        show_progress: bool = True,
    ):
        self.transport = transport or Transport()
        self.pager = CommentPager(
            self.transport,
            page_size=page_size,
            request_delay=request_delay,
            show_progress=show_progress,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.transport.aclose()

    async def run(self, thread_id: int) -> List[Comment]:
        """
        Fetch and parse every comment of a topic.

        Returns:
            Comments sorted oldest to newest (ascending comment id)

        Raises:
            ForumSaverError: Any transport, count or parse failure. Nothing
                is returned on failure, not even the comments parsed so far.
        """
        fragments = await self.pager.fetch_all_fragments(thread_id)
        fragments.reverse()
        comments = [parse_fragment(fragment) for fragment in fragments]
        logger.info("Topic %d: parsed %d comments", thread_id, len(comments))
        return comments

    async def archive(self, thread_id: int) -> ThreadArchive:
        """Run the crawl and bundle the comments with the topic's title and declared count."""
        comments = await self.run(thread_id)
        return ThreadArchive(
            thread_id=thread_id,
            title=self.pager.topic_title,
            comment_count=self.pager.comment_count or 0,
            comments=comments,
        )
