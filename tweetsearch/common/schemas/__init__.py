"""
tweetsearch Post Schemas

Transient post records and the single-line rendering shared by display and LLM context.
"""

from .post import Post, TWITTER_DATE_FORMAT
from .templates import (
    render_post_line,
    render_context_block,
    format_short_date,
    POST_LINE_TEMPLATE,
    CONTEXT_SEPARATOR,
)

__all__ = [
    "Post",
    "TWITTER_DATE_FORMAT",
    "render_post_line",
    "render_context_block",
    "format_short_date",
    "POST_LINE_TEMPLATE",
    "CONTEXT_SEPARATOR",
]
