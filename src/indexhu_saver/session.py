"""Session cookie bootstrap.

Topic pages are only served in full to a client that carries the cookies
handed out on a first visit. The jar is filled once at the start of a crawl
and replayed unchanged on every later request.
"""

import logging
import re
from typing import Dict, Iterable, Mapping, MutableMapping, Optional

from .config import BOOTSTRAP_THREAD_ID, MIN_PAGE_SIZE
from .models import PageWindow

logger = logging.getLogger(__name__)

_COOKIE_PAIR = re.compile(r'(?P<name>[^=;\s][^=;]*)=(?P<value>[^;]+)')


def parse_set_cookie(values: Iterable[str]) -> Dict[str, str]:
    """Extract ``name=value`` from each Set-Cookie header, ignoring attributes."""
    cookies: Dict[str, str] = {}
    for value in values:
        match = _COOKIE_PAIR.match(value.strip())
        if match:
            cookies[match.group('name').strip()] = match.group('value').strip()
    return cookies


def cookie_header(cookies: Mapping[str, str]) -> str:
    """Format a jar as a Cookie request header value: ``a=1; b=2``."""
    return '; '.join(f"{name}={value}" for name, value in cookies.items())


class SessionManager:
    """Populates a cookie jar once per crawl."""

    def __init__(self, transport, bootstrap_url: Optional[str] = None):
        self.transport = transport
        self.bootstrap_url = bootstrap_url or PageWindow(BOOTSTRAP_THREAD_ID, MIN_PAGE_SIZE, 0).url

    async def ensure_session(self, jar: MutableMapping[str, str]) -> MutableMapping[str, str]:
        """
        Return ``jar`` with session cookies in it.

        A non-empty jar is returned as-is without any request. An empty jar
        triggers one bootstrap request; if the server sets no cookies the
        jar simply stays empty.
        """
        if jar:
            return jar

        values = await self.transport.fetch_set_cookies(self.bootstrap_url)
        jar.update(parse_set_cookie(values))
        if jar:
            logger.debug("Session established with cookies: %s", ", ".join(jar))
        else:
            logger.info("Server set no session cookies; continuing without them")
        return jar
