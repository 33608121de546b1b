"""
Static configuration for the Index.hu forum thread saver.

All tunables live here as module-level constants. Classes take them as
constructor defaults so callers (and the CLI) can override any of them
without touching this file.
"""

from pathlib import Path

# -------------------------------------------------------
# Forum endpoint
# -------------------------------------------------------
BASE_URL = "https://forum.index.hu"

# Query parameters: na_start = offset, na_step = page size, t = topic id
PAGE_URL_TEMPLATE = (
    BASE_URL + "/Article/showArticle?na_start={start_offset}&na_step={page_size}&t={thread_id}"
)

# Any existing topic works for obtaining session cookies
BOOTSTRAP_THREAD_ID = 1

# -------------------------------------------------------
# Request headers
# -------------------------------------------------------
# The server varies its behaviour for non-browser clients, so every request
# looks like a plain Chrome navigation.
DEFAULT_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.9',
    'Accept-Encoding': 'gzip',
    'Accept-Language': 'en-US,en;q=0.9,hu;q=0.8',
    'Accept-Charset': 'utf-8',
    'Cache-Control': 'no-cache',
    'Connection': 'keep-alive',
    'DNT': '1',
    'Pragma': 'no-cache',
    'Sec-Fetch-Dest': 'document',
    'Sec-Fetch-Mode': 'navigate',
    'Sec-Fetch-Site': 'none',
    'Sec-Fetch-User': '?1',
    'Upgrade-Insecure-Requests': '1',
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/83.0.4103.116 Safari/537.36',
}

# Pages are served in Windows-1250 whatever the Content-Type says
SOURCE_ENCODING = "cp1250"

# -------------------------------------------------------
# Transport limits
# -------------------------------------------------------
REQUEST_TIMEOUT = 30.0  # Seconds before a single request is abandoned
MAX_REDIRECTS = 10  # Redirect hops followed per fetch
VERIFY_TLS = True

# -------------------------------------------------------
# Pagination
# -------------------------------------------------------
MIN_PAGE_SIZE = 10  # Server floor, also used for the comment-count probe
MAX_PAGE_SIZE = 500  # Server ceiling
DEFAULT_PAGE_SIZE = MAX_PAGE_SIZE
REQUEST_DELAY = 3.0  # Seconds to wait before each page fetch (be respectful!)

# Marker preceding the declared comment count on every topic page
COMMENT_COUNT_LABEL = "Hozzászólások:"

# -------------------------------------------------------
# Output
# -------------------------------------------------------
OUTPUT_DIR = Path("data")
OUTPUT_FORMATS = ("html", "json")


def default_output_path(thread_id: int, output_format: str = "html") -> Path:
    """Return ``data/result-{thread_id}.{ext}`` for a topic."""
    return OUTPUT_DIR / f"result-{thread_id}.{output_format}"
