"""
Synthesizer

LLM-based answer synthesis from retrieved posts.

Key principle: answer only from the supplied posts.
- Every claim cites the author handle
- Thin evidence is acknowledged rather than papered over
"""

import logging
from typing import List, Optional
from dataclasses import dataclass, field

from ..common.llm_client import LLMClient
from ..common.llm_utils import strip_reasoning
from ..common.schemas import Post, render_context_block

logger = logging.getLogger("tweetsearch.retriever.synthesizer")

NO_POSTS_ANSWER = "I couldn't find any relevant tweets to answer your question."
TRUNCATED_ANSWER = "The response was cut off before an answer was written. Please try again."


@dataclass
class SynthesizedAnswer:
    """Synthesized answer from LLM"""
    answer: str
    sources: List[str] = field(default_factory=list)  # usernames supplied as context
    used_llm: bool = False
    error: Optional[str] = None


SYNTHESIS_SYSTEM_PROMPT = """First think deeply to find the best approach.

Document all of your raw thinking, evolving ideas, discarded options, doubts, and reasoning process inside <think> tags. This must be pure continuous text with no formatting, line breaks, or symbols, just unstructured internal dialogue.

Write as if talking to yourself, using "I" to explain your thoughts, decisions, changes of mind, and obstacles. Use "but" often to show trade-offs and why you rejected certain paths. Show how your understanding evolved and what assumptions you tested.

After the <think> section, give your final, fully considered, and detailed answer, directly addressing the question. You are a helpful AI assistant that answers questions based on recent Twitter data.
The tweets provided were collected using multiple search queries to ensure diverse perspectives.
Use only the provided tweets as your source of information. If the tweets don't contain sufficient information to answer the question fully, acknowledge the limitations.
Always cite your sources using the Twitter username in your answer.
Synthesize information across all tweets to provide a comprehensive answer."""

SYNTHESIS_USER_PROMPT = """Question: {question}

Here are some recent tweets that might help answer this question:

{context}"""


class Synthesizer:
    """
    Synthesizes answers from retrieved posts using an LLM.

    Never raises: a failed or unavailable LLM turns into an error answer.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        hide_reasoning: bool = True,
    ):
        """
        Initialize synthesizer.

        Args:
            llm_client: LLM used for synthesis
            temperature: Sampling temperature
            max_tokens: Output token budget
            hide_reasoning: Strip <think> blocks from the returned answer
        """
        self._llm = llm_client
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._hide_reasoning = hide_reasoning

    @property
    def has_llm(self) -> bool:
        """Check if LLM is available"""
        return self._llm is not None and self._llm.is_available

    def build_prompt(self, question: str, posts: List[Post]) -> str:
        """User prompt holding the question and the formatted posts"""
        return SYNTHESIS_USER_PROMPT.format(
            question=question,
            context=render_context_block(posts),
        )

    def synthesize(self, question: str, posts: List[Post]) -> SynthesizedAnswer:
        """
        Synthesize an answer from retrieved posts.

        Args:
            question: The user's question
            posts: Deduplicated posts (PostSet)

        Returns:
            SynthesizedAnswer with answer text and metadata
        """
        if not posts:
            logger.info("No posts to answer from, skipping LLM call")
            return SynthesizedAnswer(answer=NO_POSTS_ANSWER)

        sources = list(dict.fromkeys(p.username for p in posts))

        if not self.has_llm:
            logger.warning("LLM synthesis skipped: client not available")
            return self._error_answer("LLM client is not available", sources)

        try:
            answer_text = self._llm.generate(
                self.build_prompt(question, posts),
                system=SYNTHESIS_SYSTEM_PROMPT,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception as e:
            logger.warning("LLM synthesis failed: %s", e)
            return self._error_answer(str(e), sources)

        if self._hide_reasoning:
            answer_text = strip_reasoning(answer_text)
            if not answer_text:
                logger.warning("LLM response ended inside its reasoning block")
                answer_text = TRUNCATED_ANSWER

        return SynthesizedAnswer(answer=answer_text, sources=sources, used_llm=True)

    def _error_answer(self, message: str, sources: List[str]) -> SynthesizedAnswer:
        return SynthesizedAnswer(
            answer=f"Error generating answer: {message}",
            sources=sources,
            error=message,
        )
