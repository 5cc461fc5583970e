"""
Post Schema

A single social-media item returned by the search session.
Posts are transient: they flow from the Searcher into deduplication
and answer synthesis and are never persisted.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, field_validator

logger = logging.getLogger("tweetsearch.common.schemas.post")


# twikit's raw created_at format, e.g. "Tue Jan 02 10:15:00 +0000 2024"
TWITTER_DATE_FORMAT = "%a %b %d %H:%M:%S %z %Y"


class Post(BaseModel):
    """A retrieved post (tweet)"""
    id: str
    username: str = "Unknown"
    created_at: Optional[datetime] = None
    text: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("username", mode="before")
    @classmethod
    def _default_username(cls, v: Any) -> str:
        return v or "Unknown"

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, v: Any) -> Optional[datetime]:
        if v is None or v == "":
            return None
        if isinstance(v, datetime):
            return v if v.tzinfo else v.replace(tzinfo=timezone.utc)
        if isinstance(v, str):
            try:
                return datetime.strptime(v, TWITTER_DATE_FORMAT)
            except ValueError:
                pass
            # ISO timestamps from cached or hand-built records
            try:
                parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
            except ValueError:
                logger.debug("Unparseable created_at %r, leaving it unset", v)
                return None
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        return v

    @field_validator("text", mode="before")
    @classmethod
    def _default_text(cls, v: Any) -> str:
        return v or ""

    @classmethod
    def from_tweet(cls, tweet: Any) -> "Post":
        """Build a Post from a twikit Tweet (or any object with a similar shape)."""
        user = getattr(tweet, "user", None)
        username = (
            getattr(tweet, "username", None)
            or getattr(user, "screen_name", None)
            or getattr(user, "username", None)
        )
        created_at = getattr(tweet, "created_at_datetime", None) or getattr(tweet, "created_at", None)
        text = getattr(tweet, "full_text", None) or getattr(tweet, "text", None)
        return cls(id=tweet.id, username=username, created_at=created_at, text=text)
