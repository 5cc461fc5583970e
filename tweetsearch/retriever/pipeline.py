"""
Search Pipeline

Runs one question through query generation, retrieval, deduplication
and answer synthesis, timing each stage.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..common.schemas import Post
from .query_processor import QueryProcessor, ParsedQuery
from .searcher import Searcher, dedupe_posts
from .synthesizer import Synthesizer, SynthesizedAnswer

logger = logging.getLogger("tweetsearch.retriever.pipeline")


@dataclass
class StageTimings:
    """Wall-clock seconds per stage"""
    query_generation: float = 0.0
    retrieval: float = 0.0
    synthesis: float = 0.0
    total: float = 0.0


@dataclass
class QueryHits:
    """Posts retrieved for a single search query"""
    query: str
    posts: List[Post] = field(default_factory=list)


@dataclass
class PipelineResult:
    """Everything produced while answering one question"""
    question: str
    parsed: ParsedQuery
    hits: List[QueryHits]
    posts: List[Post]  # deduplicated, first-seen order
    answer: SynthesizedAnswer
    timings: StageTimings

    @property
    def search_queries(self) -> List[str]:
        return self.parsed.search_queries


# (stage, payload) -> None. Stages: "queries", "search", "posts", "answer"
StageCallback = Callable[[str, object], None]


class SearchPipeline:
    """
    Question answering over recent posts.

    Pipeline:
    1. Generate 1-3 search queries from the question
    2. Search each query (sequentially unless concurrent_search is set)
    3. Deduplicate posts by id in query order
    4. Synthesize an answer citing the posts
    """

    def __init__(
        self,
        query_processor: QueryProcessor,
        searcher: Searcher,
        synthesizer: Synthesizer,
        concurrent_search: bool = False,
        on_stage: Optional[StageCallback] = None,
    ):
        self._query_processor = query_processor
        self._searcher = searcher
        self._synthesizer = synthesizer
        self._concurrent_search = concurrent_search
        self._on_stage = on_stage

    def _notify(self, stage: str, payload: object) -> None:
        if self._on_stage is not None:
            self._on_stage(stage, payload)

    async def _retrieve(self, queries: List[str]) -> List[QueryHits]:
        if self._concurrent_search:
            # gather() keeps argument order, so dedup tie-breaking is unchanged
            results = await asyncio.gather(*(self._searcher.search(q) for q in queries))
            hits = [QueryHits(query=q, posts=r) for q, r in zip(queries, results)]
            for h in hits:
                self._notify("search", h)
            return hits

        hits = []
        for query in queries:
            h = QueryHits(query=query, posts=await self._searcher.search(query))
            self._notify("search", h)
            hits.append(h)
        return hits

    async def run(self, question: str) -> PipelineResult:
        """
        Answer one question.

        Args:
            question: Non-empty user question

        Returns:
            PipelineResult with queries, posts, answer and stage timings
        """
        timings = StageTimings()
        start = time.perf_counter()

        stage_start = time.perf_counter()
        parsed = self._query_processor.parse(question)
        timings.query_generation = time.perf_counter() - stage_start
        if parsed.used_fallback:
            logger.info("Using question as sole query (%s)", parsed.fallback.value)
        self._notify("queries", parsed)

        stage_start = time.perf_counter()
        hits = await self._retrieve(parsed.search_queries)
        posts = dedupe_posts(p for h in hits for p in h.posts)
        timings.retrieval = time.perf_counter() - stage_start
        self._notify("posts", posts)

        stage_start = time.perf_counter()
        answer = self._synthesizer.synthesize(question, posts)
        timings.synthesis = time.perf_counter() - stage_start

        timings.total = time.perf_counter() - start
        self._notify("answer", answer)

        logger.info(
            "Answered with %d unique posts from %d queries in %.2fs",
            len(posts), len(parsed.search_queries), timings.total,
        )
        return PipelineResult(
            question=question,
            parsed=parsed,
            hits=hits,
            posts=posts,
            answer=answer,
            timings=timings,
        )
