"""
tweetsearch

Answer questions from recent Twitter/X posts with an LLM.

Philosophy:
- Answers come only from retrieved posts, with author citations
- Each stage degrades on failure instead of aborting the question
- Nothing is persisted

Usage:
    from tweetsearch.common import load_config, LLMClient, TwitterSession
    from tweetsearch.retriever import QueryProcessor, Searcher, Synthesizer, SearchPipeline
"""

__version__ = "0.1.0"
