"""
Comment extraction from forum.index.hu topic pages.

The topic page markup is fixed and old, and every comment is wrapped in a
pair of HTML comments::

    <!-- hozzaszolas start -->
    <table class="art">
      <tr class="art_h">
        <td class="art_h_l hasBadge specAge14">
          <a name="16970866"></a>
          <a href="/User/UserDescription?u=75950" class="art_owner" title="Veterán"><strong>Asszem</strong></a>
          <span> ... <a href="/Article/viewArticle?a=16970866&amp;t=9020254" target="_blank"
                        rel="bookmark" title="2000.07.13 21:01:59">2000.07.13</a></span>
        </td>
        ...
      </tr>
      <tr class="art_b"><td colspan="3"><div class="art_t">Tisztelt autósok!
      <br><p>...</div></td></tr>
    </table>
    <!-- hozzaszolas end -->

so comments are cut out by those markers and parsed with one regex each.
Nothing outside this module knows about the markup, so a structural parser
can replace the regexes without touching the pager or the pipeline.
"""

import re
from datetime import datetime
from typing import List, Optional

from bs4 import BeautifulSoup

from .config import COMMENT_COUNT_LABEL
from .exceptions import MalformedFragmentError
from .models import Comment

FRAGMENT_PATTERN = re.compile(r'<!-- hozzaszolas start -->(.*?)<!-- hozzaszolas +end -->', re.DOTALL)

COMMENT_PATTERN = re.compile(
    r'<a name="(?P<comment_id>\d+)"'
    r'.*?\?u=(?P<sender_id>\d+)'
    r'.*?<strong>(?P<sender_name>.*?)</strong>'
    r'.*?bookmark" title="(?P<posted_at>[^"]+)"'
    r'.*?<div class="art_t">(?P<body_html>.*)</div></td></tr>',
    re.DOTALL,
)

COMMENT_COUNT_PATTERN = re.compile(re.escape(COMMENT_COUNT_LABEL) + r'\s*(\d+)')

POSTED_AT_FORMAT = "%Y.%m.%d %H:%M:%S"


def split_fragments(page_text: str) -> List[str]:
    """
    Cut a page into one raw markup fragment per comment.

    Args:
        page_text: Full page text

    Returns:
        The text between each start/end marker pair, markers excluded, in
        document order (newest comment first on this forum). A page without
        markers gives an empty list.
    """
    return FRAGMENT_PATTERN.findall(page_text)


def parse_fragment(fragment: str) -> Comment:
    """
    Parse one comment fragment into a Comment.

    Raises:
        MalformedFragmentError: If the fragment does not have the expected
            structure or its timestamp cannot be parsed. A bad fragment stops
            the run: dropping it would leave a silent hole in the topic.
    """
    match = COMMENT_PATTERN.search(fragment)
    if not match:
        raise MalformedFragmentError(fragment)

    try:
        posted_at = datetime.strptime(match.group('posted_at').strip(), POSTED_AT_FORMAT)
    except ValueError as e:
        raise MalformedFragmentError(fragment, f"bad timestamp {match.group('posted_at')!r}") from e

    return Comment(
        comment_id=int(match.group('comment_id')),
        sender_name=match.group('sender_name'),
        sender_id=int(match.group('sender_id')),
        posted_at=posted_at,
        body_html=match.group('body_html'),
    )


def parse_comment_count(page_text: str) -> Optional[int]:
    """Return the comment count the page declares, or None when the label is missing."""
    match = COMMENT_COUNT_PATTERN.search(page_text)
    return int(match.group(1)) if match else None


def extract_topic_title(page_text: str) -> Optional[str]:
    """Return the page's <title> text with whitespace collapsed, if it has one."""
    soup = BeautifulSoup(page_text, "lxml")
    if soup.title is None:
        return None
    title = " ".join(soup.title.get_text().split())
    return title or None
