"""Error taxonomy for the thread saver.

Every failure during a run is unrecoverable: nothing is retried and no
comment is ever skipped. Library errors (httpx, zlib, codec errors) are
translated into these types at the transport boundary, so callers only
need to catch ``ForumSaverError``.

Hierarchy:
    ForumSaverError                 — root for all application errors
    ├── TransportError              — bad status code, network error, timeout
    │   └── RedirectLoopError       — redirect chain longer than the hop limit
    ├── CommentCountNotFoundError   — topic page carries no comment count
    └── MalformedFragmentError      — comment markup does not match the pattern
"""

from typing import Optional


class ForumSaverError(Exception):
    """Root exception for all application-level errors."""


class TransportError(ForumSaverError):
    """Raised when a page cannot be retrieved.

    Covers non-200/non-redirect status codes, connection failures, request
    timeouts and bodies that cannot be decompressed or decoded.
    """

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RedirectLoopError(TransportError):
    """Raised when a fetch is redirected more times than allowed."""

    def __init__(self, url: str, hops: int):
        super().__init__(f"Too many redirects ({hops}) starting from {url}", url)
        self.hops = hops


TooManyRedirectsError = RedirectLoopError


class CommentCountNotFoundError(ForumSaverError):
    """Raised when the comment-count marker is missing from a topic page.

    Usually the topic does not exist, or the page layout has changed.
    """

    def __init__(self, thread_id: int, url: str):
        super().__init__(f"Comment count not found for topic {thread_id} ({url})")
        self.thread_id = thread_id
        self.url = url


class MalformedFragmentError(ForumSaverError):
    """Raised when a comment fragment does not match the expected markup.

    The offending fragment is kept on the exception so the markup drift can
    be inspected after the run aborts.
    """

    def __init__(self, fragment: str, reason: str = "structure not recognised"):
        super().__init__(f"Malformed comment fragment ({reason}): {fragment[:200]!r}")
        self.fragment = fragment
        self.reason = reason
