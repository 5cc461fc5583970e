"""
Retriever - Question Answering over Recent Posts

Key Components:
- QueryProcessor: Generates Twitter search queries from a question
- Searcher: Retrieves and filters posts per query, dedupes across queries
- Synthesizer: LLM-based answer synthesis citing post authors
- SearchPipeline: Runs the stages in order and times them

Pipeline:
1. Generate up to 3 search queries (fallback: the question itself)
2. Search each query for up to 3 relevant posts
3. Deduplicate posts by id
4. Synthesize answer with LLM
"""

from .query_processor import QueryProcessor, ParsedQuery, QueryFallback
from .searcher import Searcher, dedupe_posts
from .synthesizer import Synthesizer, SynthesizedAnswer, NO_POSTS_ANSWER, TRUNCATED_ANSWER
from .pipeline import SearchPipeline, PipelineResult, StageTimings, QueryHits

__all__ = [
    "QueryProcessor",
    "ParsedQuery",
    "QueryFallback",
    "Searcher",
    "dedupe_posts",
    "Synthesizer",
    "SynthesizedAnswer",
    "NO_POSTS_ANSWER",
    "TRUNCATED_ANSWER",
    "SearchPipeline",
    "PipelineResult",
    "StageTimings",
    "QueryHits",
]
