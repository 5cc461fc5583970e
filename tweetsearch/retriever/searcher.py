"""
Searcher

Searches recent Twitter/X posts for one query at a time and
deduplicates posts gathered across several queries.
"""

import logging
from contextlib import aclosing
from typing import Iterable, List

from ..common.schemas import Post
from ..common.twitter_session import SearchMode

logger = logging.getLogger("tweetsearch.retriever.searcher")

REPOST_MARKER = "RT @"


class Searcher:
    """
    Retrieves a few relevant posts per search query.

    Candidates are pulled lazily from the session and filtered:
    - empty or short text is skipped
    - reposts ("RT @...") are skipped
    Iteration stops as soon as enough posts are accepted.
    """

    def __init__(
        self,
        session,
        candidate_count: int = 20,
        max_results: int = 3,
        min_text_length: int = 20,
        mode: SearchMode = SearchMode.LATEST,
    ):
        """
        Initialize searcher.

        Args:
            session: Logged-in TwitterSession (anything with search_posts())
            candidate_count: Candidates requested from the search endpoint
            max_results: Accepted posts returned per query
            min_text_length: Post text must be strictly longer than this
            mode: Result ordering
        """
        self._session = session
        self._candidate_count = candidate_count
        self._max_results = max_results
        self._min_text_length = min_text_length
        self._mode = mode

    def is_relevant(self, post: Post) -> bool:
        """Check whether a candidate passes the relevance filter"""
        text = post.text
        if not text or len(text) <= self._min_text_length:
            return False
        return not text.startswith(REPOST_MARKER)

    async def search(self, query: str) -> List[Post]:
        """
        Search for posts matching one query.

        Args:
            query: Search query text

        Returns:
            Up to max_results posts in the order the service returned them,
            or an empty list if the search failed
        """
        posts: List[Post] = []
        try:
            candidates = self._session.search_posts(
                query, count=self._candidate_count, mode=self._mode
            )
            async with aclosing(candidates):
                async for post in candidates:
                    if len(posts) >= self._max_results:
                        break
                    if self.is_relevant(post):
                        posts.append(post)
                        if len(posts) >= self._max_results:
                            break
        except Exception as e:
            logger.error("Search error for %r: %s", query, e, exc_info=True)
            return []

        logger.info("Found %d relevant posts for %r", len(posts), query)
        return posts


def dedupe_posts(posts: Iterable[Post]) -> List[Post]:
    """
    Keep the first post seen for each id, preserving first-seen order.

    Idempotent: an already-unique list comes back unchanged.
    """
    unique = {}
    for post in posts:
        if post.id not in unique:
            unique[post.id] = post
    return list(unique.values())
