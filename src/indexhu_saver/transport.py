"""
HTTP transport for forum.index.hu pages.

The forum is an old server that does not play well with a generic client:
- it redirects through session-setting pages before serving a topic
- it may or may not gzip the body, signalled only by Content-Encoding
- it always serves Windows-1250, regardless of the declared charset

So redirects are followed by hand (with a hop limit), and the raw body is
pushed through two independent stream transforms: gunzip (only when the
response says so) and transcoding from the legacy encoding to ``str``.
The gunzip step insists on a complete gzip member; httpx's own decoder
accepts a body cut short and would hand back a page with comments missing.
"""

import codecs
import logging
import zlib
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Mapping, Optional

import httpx

from .config import DEFAULT_HEADERS, MAX_REDIRECTS, REQUEST_TIMEOUT, SOURCE_ENCODING, VERIFY_TLS
from .exceptions import RedirectLoopError, TransportError
from .session import cookie_header

logger = logging.getLogger(__name__)


async def gunzip_stream(chunks: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    """
    Decompress a gzip byte stream chunk by chunk.

    Raises:
        zlib.error: On corrupt data, or when the stream ends before the
                    gzip trailer (a truncated body)
    """
    decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
    async for chunk in chunks:
        data = decompressor.decompress(chunk)
        if data:
            yield data
    tail = decompressor.flush()
    if tail:
        yield tail
    if not decompressor.eof:
        raise zlib.error("gzip stream ended before its trailer")


async def transcode_stream(
    chunks: AsyncIterator[bytes],
    encoding: str = SOURCE_ENCODING,
    errors: str = "replace",
) -> AsyncIterator[str]:
    """
    Decode a byte stream in ``encoding`` into text pieces.

    An incremental decoder is used so multi-byte sequences split across
    chunk boundaries decode correctly (irrelevant for cp1250, but the
    transform stays correct if the source encoding ever changes).
    """
    decoder = codecs.getincrementaldecoder(encoding)(errors=errors)
    async for chunk in chunks:
        text = decoder.decode(chunk)
        if text:
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single request: either page text or a redirect target."""
    text: Optional[str] = None
    location: Optional[str] = None


class Transport:
    """
    Fetches single pages from the forum.

    Usage:
        async with Transport() as transport:
            html = await transport.fetch(url, cookies)

    An ``httpx.AsyncClient`` may be injected (tests use a mock transport);
    otherwise one is created on first use and closed by ``aclose()``.

    ``decode_errors`` is the codec error handler for the legacy encoding:
    ``"replace"`` keeps going with U+FFFD, ``"strict"`` fails the fetch.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        headers: Optional[Mapping[str, str]] = None,
        encoding: str = SOURCE_ENCODING,
        timeout: float = REQUEST_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        verify_tls: bool = VERIFY_TLS,
        decode_errors: str = "replace",
    ):
        self.client = client
        self._own_client = client is None
        self.headers: Dict[str, str] = dict(DEFAULT_HEADERS if headers is None else headers)
        self.encoding = encoding
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.verify_tls = verify_tls
        self.decode_errors = decode_errors

    async def __aenter__(self):
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        if self._own_client and self.client is not None:
            await self.client.aclose()
            self.client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=self.timeout,
                verify=self.verify_tls,
                follow_redirects=False,
            )
        return self.client

    def _request_headers(self, cookies: Optional[Mapping[str, str]]) -> Dict[str, str]:
        headers = dict(self.headers)
        if cookies:
            headers['Cookie'] = cookie_header(cookies)
        return headers

    @asynccontextmanager
    async def _stream(self, url: str, cookies: Optional[Mapping[str, str]] = None):
        """Open a GET response stream, mapping httpx failures to TransportError.

        The response (socket included) is released when the block exits,
        whether it exits normally or by exception.
        """
        try:
            async with self._get_client().stream(
                "GET",
                url,
                headers=self._request_headers(cookies),
                timeout=self.timeout,
                follow_redirects=False,
            ) as response:
                yield response
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {url}", url) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed for {url}: {e}", url) from e

    async def _read_text(self, response: httpx.Response) -> str:
        chunks = response.aiter_raw()
        if response.headers.get('content-encoding', '').strip().lower() == 'gzip':
            chunks = gunzip_stream(chunks)
        pieces = [piece async for piece in transcode_stream(chunks, self.encoding, self.decode_errors)]
        return "".join(pieces)

    async def fetch_once(self, url: str, cookies: Optional[Mapping[str, str]] = None) -> FetchResult:
        """Issue exactly one GET without following redirects."""
        logger.debug("Getting URL: %s", url)
        async with self._stream(url, cookies) as response:
            status = response.status_code
            if 300 <= status < 400 and 'location' in response.headers:
                target = response.url.join(response.headers['location'])
                return FetchResult(location=str(target))
            if status != 200:
                raise TransportError(f"Invalid status code {status} for {url}", url, status)
            try:
                text = await self._read_text(response)
            except (zlib.error, UnicodeDecodeError) as e:
                raise TransportError(f"Could not decode body of {url}: {e}", url, status) from e
            return FetchResult(text=text)

    async def fetch(self, url: str, cookies: Optional[Mapping[str, str]] = None) -> str:
        """
        Fetch a page and return its text, following redirects.

        Args:
            url: Absolute URL of the page
            cookies: Cookie jar replayed on every hop

        Returns:
            The complete, decompressed and transcoded page text of the
            final (200) response

        Raises:
            TransportError: On a status that is neither 200 nor a redirect,
                            a network error or a timeout
            RedirectLoopError: When more than ``max_redirects`` hops are needed
        """
        current = url
        for _ in range(self.max_redirects + 1):
            result = await self.fetch_once(current, cookies)
            if result.location is None:
                return result.text
            logger.debug("Redirected %s -> %s", current, result.location)
            current = result.location
        raise RedirectLoopError(url, self.max_redirects)

    async def fetch_set_cookies(self, url: str) -> List[str]:
        """Issue one GET and return every Set-Cookie header; the body is not read."""
        logger.debug("Getting session cookies from: %s", url)
        async with self._stream(url) as response:
            return response.headers.get_list('set-cookie')
