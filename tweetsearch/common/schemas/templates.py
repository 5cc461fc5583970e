"""
Post Text Templates

Renders a Post into the single line used both for display and as LLM context.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .post import Post


POST_LINE_TEMPLATE = "@{username} ({date}): {text}"
CONTEXT_SEPARATOR = "\n\n"


def format_short_date(value: Optional[datetime]) -> str:
    """M/D/YYYY without zero padding; today when no timestamp is known."""
    value = value or datetime.now()
    return f"{value.month}/{value.day}/{value.year}"


def render_post_line(post: "Post") -> str:
    """Render a Post as '@author (M/D/YYYY): text' on one line"""
    return POST_LINE_TEMPLATE.format(
        username=post.username or "Unknown",
        date=format_short_date(post.created_at),
        text=post.text.replace("\n", " "),
    )


def render_context_block(posts: Iterable["Post"]) -> str:
    """Join rendered posts with a blank line between them"""
    return CONTEXT_SEPARATOR.join(render_post_line(p) for p in posts)
