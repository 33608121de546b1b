"""
Data models for the Index.hu forum thread saver.

This module defines typed data structures for a crawled topic.
Using dataclasses provides clear structure, type hints, and easy JSON serialization.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .config import PAGE_URL_TEMPLATE


@dataclass(frozen=True)
class Comment:
    """
    Represents a single comment in a topic.

    Attributes:
        comment_id: Server-assigned id, increases with posting order
        sender_name: Display name of the poster, as it appears in the page markup
                     (entities such as ``&amp;`` are kept, never re-escaped)
        sender_id: Numeric id of the poster's account
        posted_at: Local posting time; the forum gives no timezone, so this
                   is a naive datetime with second precision
        body_html: Inner markup of the comment body, verbatim

    Example:
        comment = Comment(
            comment_id=16970866,
            sender_name="Asszem",
            sender_id=75950,
            posted_at=datetime(2000, 7, 13, 21, 1, 59),
            body_html="Tisztelt autósok!<br>"
        )
    """
    comment_id: int
    sender_name: str
    sender_id: int
    posted_at: datetime
    body_html: str

    def to_dict(self) -> dict:
        """Convert the comment to a dictionary for JSON serialization."""
        return {
            "comment_id": self.comment_id,
            "sender_name": self.sender_name,
            "sender_id": self.sender_id,
            "posted_at": self.posted_at.isoformat(),
            "body_html": self.body_html,
        }


@dataclass(frozen=True)
class PageWindow:
    """One server-side page of a topic: ``page_size`` comments from ``start_offset``.

    Offset 0 is the newest window; the server lists comments newest-first.
    """
    thread_id: int
    page_size: int
    start_offset: int = 0

    @property
    def url(self) -> str:
        return PAGE_URL_TEMPLATE.format(
            start_offset=self.start_offset,
            page_size=self.page_size,
            thread_id=self.thread_id,
        )


@dataclass
class ThreadArchive:
    """
    Everything saved for one topic.

    Attributes:
        thread_id: Topic id (the ``t`` query parameter)
        title: Page title of the topic, None when the page has none
        comment_count: Number of comments the server declared for the topic
        comments: Comments in chronological order (ascending comment_id)

    Design note:
        comment_count is what the server claims; len(comments) may be lower
        when comments were deleted between the count probe and the crawl.
    """
    thread_id: int
    title: Optional[str] = None
    comment_count: int = 0
    comments: List[Comment] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert the archive to a dictionary for JSON serialization."""
        return {
            "thread_id": self.thread_id,
            "title": self.title,
            "comment_count": self.comment_count,
            "comments": [c.to_dict() for c in self.comments],
        }
