"""
Twitter Session

Login-gated search over Twitter/X using twikit.

A TwitterSession is only handed out by a successful TwitterSession.login(),
so holding one means the account is authenticated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, AsyncIterator, Optional

from .schemas import Post

logger = logging.getLogger("tweetsearch.common.twitter_session")


class SearchMode(str, Enum):
    """Result ordering for a search (twikit "product" names)"""
    LATEST = "Latest"
    TOP = "Top"
    MEDIA = "Media"


@dataclass
class LoginResult:
    """Outcome of TwitterSession.login()"""
    ok: bool
    session: Optional["TwitterSession"] = None
    error: str = ""


class TwitterSession:
    """Authenticated Twitter/X search session."""

    def __init__(self, client: Any):
        """Wrap an already logged-in twikit Client. Use login() instead."""
        self._client = client

    @classmethod
    async def login(
        cls,
        username: str,
        password: str,
        email: str,
        *,
        cookies_path: Optional[str] = None,
        language: str = "en-US",
        client: Any = None,
    ) -> LoginResult:
        """
        Log in and return a LoginResult carrying the session.

        Args:
            username: Account handle (auth_info_1)
            password: Account password
            email: Recovery email (auth_info_2)
            cookies_path: Optional cookie file; reused when present, written after login
            language: Client language sent to Twitter
            client: Pre-built twikit Client (tests)

        Returns:
            LoginResult with ok=False and an error message on any failure
        """
        missing = [
            name for name, value in (
                ("username", username), ("password", password), ("email", email)
            ) if not value
        ]
        if missing:
            return LoginResult(ok=False, error=f"Missing Twitter credentials: {', '.join(missing)}")

        try:
            if client is None:
                from twikit import Client

                client = Client(language)

            cookie_file = Path(cookies_path).expanduser() if cookies_path else None
            if cookie_file and cookie_file.exists():
                client.load_cookies(str(cookie_file))
                logger.info("Loaded Twitter cookies from %s", cookie_file)
            else:
                await client.login(
                    auth_info_1=username,
                    auth_info_2=email,
                    password=password,
                )
                if cookie_file:
                    cookie_file.parent.mkdir(parents=True, exist_ok=True)
                    client.save_cookies(str(cookie_file))
                    logger.info("Saved Twitter cookies to %s", cookie_file)
        except Exception as e:
            logger.error("Twitter login failed: %s", e, exc_info=True)
            return LoginResult(ok=False, error=str(e) or e.__class__.__name__)

        return LoginResult(ok=True, session=cls(client))

    async def search_posts(
        self,
        query: str,
        count: int = 20,
        mode: SearchMode = SearchMode.LATEST,
    ) -> AsyncIterator[Post]:
        """
        Lazily yield up to `count` posts matching `query`.

        Pages are fetched on demand, so a consumer that stops early
        never triggers the next page request.
        """
        page = await self._client.search_tweet(query, SearchMode(mode).value, count=count)
        yielded = 0

        while page is not None:
            fetched = 0
            for tweet in page:
                fetched += 1
                yield Post.from_tweet(tweet)
                yielded += 1
                if yielded >= count:
                    return
            if fetched == 0:
                return
            page = await page.next()
