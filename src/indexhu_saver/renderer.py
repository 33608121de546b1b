"""Rendering of a saved topic into a standalone document."""

import html

import orjson

from .models import Comment, ThreadArchive


def render_comment(comment: Comment) -> str:
    # Sender name and body are already markup; inserting them verbatim
    return f"""<div class="comment" id="c{comment.comment_id}">
      <div class="header">#{comment.comment_id} – Sender: {comment.sender_name} (#{comment.sender_id}) @ {comment.posted_at.isoformat()}</div>
      <div class="body">
        {comment.body_html}
      </div>
    </div>"""


def render_html(archive: ThreadArchive) -> str:
    """
    Render a topic as a single HTML page.

    The page links ``style.css`` from its own directory, so a stylesheet
    dropped next to the output file styles every saved topic.
    """
    heading = f"Topic #{archive.thread_id}"
    page_title = f"Index.hu forum topic {archive.thread_id}"
    if archive.title:
        heading = f"{heading}: {html.escape(archive.title)}"
        page_title = f"{page_title}: {html.escape(archive.title)}"

    comments = "\n".join(render_comment(comment) for comment in archive.comments)

    return f"""<!DOCTYPE html>
<html lang="hu">
  <head>
    <meta charset="utf-8">
    <title>{page_title}</title>
    <link rel="stylesheet" href="style.css">
  </head>
  <body>
    <h1>{heading}</h1>
    <h2>Comments ({len(archive.comments)}):</h2>
    <div class="comments">
    {comments}
    </div>
  </body>
</html>
"""


def render_json(archive: ThreadArchive) -> bytes:
    """Serialize a topic to indented JSON with sorted keys."""
    return orjson.dumps(archive.to_dict(), option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)
