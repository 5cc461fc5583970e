"""
Query Processor

Turns a user question into a short list of Twitter search queries
using the LLM. Falls back to the question itself whenever the model
is unavailable, fails, or returns nothing parseable.
"""

import logging
from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum

from ..common.llm_client import LLMClient
from ..common.llm_utils import parse_llm_list

logger = logging.getLogger("tweetsearch.retriever.query_processor")


class QueryFallback(str, Enum):
    """Why the question itself was used as the only search query"""
    NONE = "none"
    LLM_UNAVAILABLE = "llm_unavailable"  # no client configured
    LLM_ERROR = "llm_error"  # completion call raised
    UNPARSEABLE = "unparseable"  # no numbered/bulleted lines in response


@dataclass
class ParsedQuery:
    """A question and the search queries generated for it"""
    original: str
    search_queries: List[str] = field(default_factory=list)
    fallback: QueryFallback = QueryFallback.NONE
    error: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.fallback != QueryFallback.NONE


QUERY_SYSTEM_PROMPT = (
    "You are an expert at creating Twitter search queries. Your task is to take a user "
    "question and convert it into 2 search queries for Twitter/X.com that will find relevant "
    "tweets to help answer their question. Format your response as a numbered list with ONLY "
    "the 2 search queries (no explanation or other text)."
)

QUERY_USER_PROMPT = "Create 2 search queries for Twitter to find information about: {question}"


class QueryProcessor:
    """
    Generates search queries for a question.

    The result always holds between 1 and max_queries queries.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        max_queries: int = 3,
        temperature: float = 0.7,
        max_tokens: int = 300,
    ):
        """Initialize query processor.

        Args:
            llm_client: LLM used for query generation (None = always fall back)
            max_queries: Upper bound on generated queries
            temperature: Sampling temperature for generation
            max_tokens: Output token budget for generation
        """
        self._llm = llm_client
        self._max_queries = max(1, max_queries)
        self._temperature = temperature
        self._max_tokens = max_tokens

    def parse(self, question: str) -> ParsedQuery:
        """
        Generate search queries for a question.

        Args:
            question: Raw user question

        Returns:
            ParsedQuery whose search_queries is never empty
        """
        if self._llm is None or not self._llm.is_available:
            logger.warning("LLM unavailable, searching with the question as-is")
            return self._fallback(question, QueryFallback.LLM_UNAVAILABLE)

        try:
            raw = self._llm.generate(
                QUERY_USER_PROMPT.format(question=question),
                system=QUERY_SYSTEM_PROMPT,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception as e:
            logger.warning("Query generation failed: %s", e)
            return self._fallback(question, QueryFallback.LLM_ERROR, error=str(e))

        queries = parse_llm_list(raw, limit=self._max_queries)
        if not queries:
            logger.info("No queries parsed from LLM response: %r", (raw or "")[:200])
            return self._fallback(question, QueryFallback.UNPARSEABLE)

        logger.debug("Generated %d search queries: %s", len(queries), queries)
        return ParsedQuery(original=question, search_queries=queries)

    def _fallback(
        self,
        question: str,
        reason: QueryFallback,
        error: Optional[str] = None,
    ) -> ParsedQuery:
        return ParsedQuery(
            original=question,
            search_queries=[question],
            fallback=reason,
            error=error,
        )
