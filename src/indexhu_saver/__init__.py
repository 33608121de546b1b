"""
Index.hu Forum Saver

This package downloads every comment of a forum.index.hu topic and saves
them, oldest first, into a single HTML (or JSON) document.

Main components:
- Transport: Redirect-following GET with gzip and Windows-1250 handling
- SessionManager: One-off session cookie bootstrap
- CommentPager: Sequential, rate-limited crawl of all comment pages
- split_fragments / parse_fragment: Regex extraction of comments
- CommentPipeline: Glues the above together in chronological order

Usage:
    from indexhu_saver import CommentPipeline
    import asyncio

    async def main():
        async with CommentPipeline() as pipeline:
            return await pipeline.run(9020254)

    comments = asyncio.run(main())
"""

from .exceptions import (
    CommentCountNotFoundError,
    ForumSaverError,
    MalformedFragmentError,
    RedirectLoopError,
    TooManyRedirectsError,
    TransportError,
)
from .extractor import parse_fragment, split_fragments
from .models import Comment, PageWindow, ThreadArchive
from .pager import CommentPager
from .pipeline import CommentPipeline
from .session import SessionManager
from .transport import Transport

__all__ = [
    'CommentPipeline',
    'CommentPager',
    'SessionManager',
    'Transport',
    'Comment',
    'PageWindow',
    'ThreadArchive',
    'split_fragments',
    'parse_fragment',
    'ForumSaverError',
    'TransportError',
    'RedirectLoopError',
    'TooManyRedirectsError',
    'CommentCountNotFoundError',
    'MalformedFragmentError',
]

__version__ = '1.0.0'
