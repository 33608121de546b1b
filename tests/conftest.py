"""Configure test paths and shared forum fixtures."""
import gzip
import sys
from datetime import datetime, timedelta
from pathlib import Path

import httpx
import pytest

# Add src/ to path so tests can import the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from indexhu_saver.transport import Transport  # noqa: E402


FRAGMENT_TEMPLATE = """
<table class="art">
  <tr class="art_h">
    <td class="art_h_l hasBadge specAge14">
      <a name="{comment_id}"></a>
      <a href="/User/UserDescription?u={sender_id}" class="art_owner" title="Veterán"><strong>{sender_name}</strong></a>
      <span> <a rel="license" href="https://forum.index.hu/felhasznalasiFeltetelek" target="license"><img alt="Creative Commons License" title="&copy; Index.hu Zrt." src="/img/licence_index.png" /></a> <a href="/Article/viewArticle?a={comment_id}&amp;t=9020254" target="_blank" rel="bookmark" title="{posted_at}">{posted_date}</a></span>
    </td>
    <td class="art_h_m"></td>
    <td class="art_h_r">
      <a href="/EditArticle/ReplayEditArticle?a={comment_id}&amp;t=9020254" rel="nofollow" class="art_cnt art_rpl" title="válasz"></a>
      <span class="art_nr">{comment_id}</span>
    </td>
  </tr>
  <tr class="art_b"><td colspan="3"><div class="art_t">{body_html}</div></td></tr>
</table>
"""

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>{title}</title></head>
<body>
<div class="topic_head">Hozzászólások: {count}</div>
{comments}
</body>
</html>
"""

BASE_TIME = datetime(2000, 7, 13, 21, 1, 59)


def build_fragment(comment_id, sender_id=75950, sender_name="Asszem",
                   posted_at="2000.07.13 21:01:59", body_html="Tisztelt autósok!"):
    return FRAGMENT_TEMPLATE.format(
        comment_id=comment_id,
        sender_id=sender_id,
        sender_name=sender_name,
        posted_at=posted_at,
        posted_date=posted_at.split()[0],
        body_html=body_html,
    )


def build_page(fragments, count, title="Toyota Prius - Index Fórum"):
    comments = "\n".join(
        f"<!-- hozzaszolas start -->{fragment}<!-- hozzaszolas end -->"
        for fragment in fragments
    )
    return PAGE_TEMPLATE.format(title=title, count=count, comments=comments)


class ChunkedBody(httpx.AsyncByteStream):
    """Response body delivered in small chunks, as a socket would deliver it."""

    def __init__(self, data=b"", chunk_size=64):
        self.data = data
        self.chunk_size = chunk_size
        self.closed = False

    async def __aiter__(self):
        for start in range(0, len(self.data), self.chunk_size):
            yield self.data[start:start + self.chunk_size]

    async def aclose(self):
        self.closed = True


def wire_response(status_code, body=b"", headers=None, chunk_size=64):
    """
    Build a not-yet-read response carrying ``body`` exactly as sent.

    ``httpx.Response(content=...)`` is read (and Content-Encoding decoded)
    on construction, which a streamed fetch cannot consume again.
    """
    return httpx.Response(status_code, headers=headers, stream=ChunkedBody(body, chunk_size))


class FakeForum:
    """
    Scripted forum.index.hu for MockTransport.

    Serves a topic newest-first by na_start/na_step, hands out session
    cookies for the bootstrap topic and records every request it sees.
    """

    def __init__(self, thread_id=123, comment_ids=(1, 2, 3), declared_count=None,
                 cookies=("SID=abc123; Path=/; HttpOnly", "lang=hu"), use_gzip=False,
                 title="Toyota Prius - Index Fórum", bootstrap_thread_id=1):
        self.thread_id = thread_id
        self.comment_ids = sorted(comment_ids)
        self.declared_count = len(self.comment_ids) if declared_count is None else declared_count
        self.cookies = list(cookies)
        self.use_gzip = use_gzip
        self.title = title
        self.bootstrap_thread_id = bootstrap_thread_id
        self.requests = []
        # (na_start, na_step) -> responses served, in order, before the real page
        self.overrides = {}

    def fragment_for(self, comment_id):
        posted = (BASE_TIME + timedelta(minutes=comment_id)).strftime("%Y.%m.%d %H:%M:%S")
        return build_fragment(
            comment_id,
            sender_id=1000 + comment_id,
            sender_name=f"user{comment_id}",
            posted_at=posted,
            body_html=f"Hozzászólás #{comment_id}",
        )

    def page_text(self, start, step):
        newest_first = list(reversed(self.comment_ids))
        window = newest_first[start:start + step]
        return build_page([self.fragment_for(cid) for cid in window], self.declared_count, self.title)

    @property
    def topic_requests(self):
        return [r for r in self.requests if r.url.params.get("t") == str(self.thread_id)]

    def handler(self, request):
        self.requests.append(request)
        params = request.url.params
        thread_id = int(params["t"])

        if thread_id == self.bootstrap_thread_id:
            headers = [("Set-Cookie", c) for c in self.cookies]
            return wire_response(200, headers=headers)

        if thread_id != self.thread_id:
            return wire_response(404)

        start = int(params["na_start"])
        step = int(params["na_step"])
        if self.overrides.get((start, step)):
            return self.overrides[(start, step)].pop(0)

        body = self.page_text(start, step).encode("cp1250")
        headers = {"Content-Type": "text/html; charset=utf-8"}
        if self.use_gzip:
            body = gzip.compress(body)
            headers["Content-Encoding"] = "gzip"
        return wire_response(200, body, headers)


@pytest.fixture
def forum_factory():
    return FakeForum


@pytest.fixture
def transport_for():
    """Build a Transport whose client is backed by a FakeForum."""
    def _make(forum, **kwargs):
        client = httpx.AsyncClient(transport=httpx.MockTransport(forum.handler))
        return Transport(client=client, **kwargs)
    return _make


@pytest.fixture
def response_factory():
    return wire_response


@pytest.fixture
def fragment_builder():
    return build_fragment


@pytest.fixture
def page_builder():
    return build_page
