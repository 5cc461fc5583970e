"""
Pipeline Scenario Tests

Runs a question through the full pipeline with test doubles for the
LLM and the search session:

  Question -> QueryProcessor -> Searcher (per query) -> dedupe -> Synthesizer

Scenario: "What are people saying about AI regulation?"
- Query generation yields 2 queries
- Query 1 finds 2 posts, query 2 finds 1 post that overlaps with query 1
- The answer is synthesized from exactly 2 unique posts
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from tweetsearch.common.schemas import Post, render_post_line
from tweetsearch.retriever import (
    QueryProcessor,
    ParsedQuery,
    QueryFallback,
    Searcher,
    Synthesizer,
    SearchPipeline,
    SynthesizedAnswer,
    NO_POSTS_ANSWER,
)


QUESTION = "What are people saying about AI regulation?"

POST_A = Post(
    id="1001",
    username="policywonk",
    created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    text="The EU AI Act sets risk tiers for\nfoundation models and high-risk uses",
)
POST_B = Post(
    id="1002",
    username="devrel_dan",
    created_at=datetime(2024, 5, 2, tzinfo=timezone.utc),
    text="Startups worry AI regulation compliance costs will favor big labs",
)

RESULTS_BY_QUERY = {
    "AI regulation news": [POST_A, POST_B],
    "AI regulation opinion": [POST_B],
}


def _query_processor(queries):
    processor = Mock(spec=QueryProcessor)
    processor.parse.return_value = ParsedQuery(original=QUESTION, search_queries=queries)
    return processor


def _searcher(results_by_query, delays=None):
    searcher = Mock(spec=Searcher)
    delays = delays or {}
    order = []

    async def search(query):
        order.append(("start", query))
        await asyncio.sleep(delays.get(query, 0))
        order.append(("end", query))
        return list(results_by_query.get(query, []))

    searcher.search.side_effect = search
    searcher.order = order
    return searcher


def _synthesizer():
    synthesizer = Mock(spec=Synthesizer)
    synthesizer.synthesize.side_effect = lambda question, posts: SynthesizedAnswer(
        answer=f"{len(posts)} posts considered", used_llm=True
    )
    return synthesizer


class TestAIRegulationScenario:
    @pytest.mark.asyncio
    async def test_end_to_end_dedupes_overlap(self):
        synthesizer = _synthesizer()
        pipeline = SearchPipeline(
            query_processor=_query_processor(["AI regulation news", "AI regulation opinion"]),
            searcher=_searcher(RESULTS_BY_QUERY),
            synthesizer=synthesizer,
        )

        result = await pipeline.run(QUESTION)

        assert result.search_queries == ["AI regulation news", "AI regulation opinion"]
        assert [p.id for p in result.posts] == ["1001", "1002"]
        assert [len(h.posts) for h in result.hits] == [2, 1]
        synthesizer.synthesize.assert_called_once()
        question, posts = synthesizer.synthesize.call_args.args
        assert question == QUESTION
        assert posts == [POST_A, POST_B]
        assert result.answer.answer == "2 posts considered"

    @pytest.mark.asyncio
    async def test_context_block_holds_exactly_the_unique_posts(self):
        llm = Mock()
        llm.is_available = True
        llm.generate.side_effect = [
            "1. AI regulation news\n2. AI regulation opinion",
            "Opinions differ (@policywonk, @devrel_dan).",
        ]

        class Session:
            async def search_posts(self, query, count=20, mode=None):
                for post in RESULTS_BY_QUERY.get(query, []):
                    yield post

        pipeline = SearchPipeline(
            query_processor=QueryProcessor(llm),
            searcher=Searcher(Session()),
            synthesizer=Synthesizer(llm),
        )

        result = await pipeline.run(QUESTION)

        assert llm.generate.call_count == 2
        synthesis_prompt = llm.generate.call_args_list[1].args[0]
        context = synthesis_prompt.split("help answer this question:\n\n", 1)[1]
        assert context.split("\n\n") == [render_post_line(POST_A), render_post_line(POST_B)]
        assert "@policywonk (5/1/2024): The EU AI Act sets risk tiers for foundation models" in context
        assert result.answer.answer == "Opinions differ (@policywonk, @devrel_dan)."
        assert result.answer.sources == ["policywonk", "devrel_dan"]

    @pytest.mark.asyncio
    async def test_sequential_search_runs_one_query_at_a_time(self):
        searcher = _searcher(RESULTS_BY_QUERY, delays={"AI regulation news": 0.01})
        pipeline = SearchPipeline(
            query_processor=_query_processor(["AI regulation news", "AI regulation opinion"]),
            searcher=searcher,
            synthesizer=_synthesizer(),
        )

        await pipeline.run(QUESTION)

        assert searcher.order == [
            ("start", "AI regulation news"),
            ("end", "AI regulation news"),
            ("start", "AI regulation opinion"),
            ("end", "AI regulation opinion"),
        ]

    @pytest.mark.asyncio
    async def test_concurrent_search_keeps_query_order_for_dedupe(self):
        # First query finishes last; dedupe must still follow query order
        results = {
            "AI regulation news": [POST_A, POST_B],
            "AI regulation opinion": [POST_B.model_copy(update={"text": "later copy of the same post"})],
        }
        searcher = _searcher(results, delays={"AI regulation news": 0.02})
        pipeline = SearchPipeline(
            query_processor=_query_processor(["AI regulation news", "AI regulation opinion"]),
            searcher=searcher,
            synthesizer=_synthesizer(),
            concurrent_search=True,
        )

        result = await pipeline.run(QUESTION)

        assert searcher.order[1] == ("start", "AI regulation opinion")
        assert [p.id for p in result.posts] == ["1001", "1002"]
        assert result.posts[1] is POST_B
        assert [h.query for h in result.hits] == ["AI regulation news", "AI regulation opinion"]


class TestDegradedScenarios:
    @pytest.mark.asyncio
    async def test_query_generation_outage_searches_question(self):
        llm = Mock()
        llm.is_available = True
        llm.generate.side_effect = ConnectionError("LLM down")
        searcher = _searcher({})

        pipeline = SearchPipeline(
            query_processor=QueryProcessor(llm),
            searcher=searcher,
            synthesizer=Synthesizer(llm),
        )
        result = await pipeline.run(QUESTION)

        assert result.search_queries == [QUESTION]
        assert result.parsed.fallback == QueryFallback.LLM_ERROR
        searcher.search.assert_called_once_with(QUESTION)
        assert result.posts == []
        assert result.answer.answer == NO_POSTS_ANSWER
        assert llm.generate.call_count == 1

    @pytest.mark.asyncio
    async def test_failed_search_for_one_query_keeps_others(self):
        class Session:
            async def search_posts(self, query, count=20, mode=None):
                if query == "AI regulation news":
                    raise RuntimeError("transport error")
                for post in RESULTS_BY_QUERY[query]:
                    yield post

        pipeline = SearchPipeline(
            query_processor=_query_processor(["AI regulation news", "AI regulation opinion"]),
            searcher=Searcher(Session()),
            synthesizer=_synthesizer(),
        )
        result = await pipeline.run(QUESTION)

        assert [len(h.posts) for h in result.hits] == [0, 1]
        assert [p.id for p in result.posts] == ["1002"]


class TestTimingsAndCallbacks:
    @pytest.mark.asyncio
    async def test_timings_recorded(self):
        pipeline = SearchPipeline(
            query_processor=_query_processor(["AI regulation news"]),
            searcher=_searcher(RESULTS_BY_QUERY, delays={"AI regulation news": 0.01}),
            synthesizer=_synthesizer(),
        )
        result = await pipeline.run(QUESTION)
        t = result.timings

        assert t.retrieval >= 0.005
        assert t.query_generation >= 0
        assert t.synthesis >= 0
        assert t.total >= t.query_generation + t.retrieval + t.synthesis - 1e-6

    @pytest.mark.asyncio
    async def test_stage_callbacks_in_order(self):
        events = []
        pipeline = SearchPipeline(
            query_processor=_query_processor(["AI regulation news", "AI regulation opinion"]),
            searcher=_searcher(RESULTS_BY_QUERY),
            synthesizer=_synthesizer(),
            on_stage=lambda stage, payload: events.append(stage),
        )
        await pipeline.run(QUESTION)

        assert events == ["queries", "search", "search", "posts", "answer"]
