"""
tweetsearch Common Module

Shared infrastructure for the retrieval pipeline and the CLI.
"""

from .config import TweetSearchConfig, load_config, missing_credentials
from .llm_client import LLMClient, resolve_provider
from .twitter_session import TwitterSession, LoginResult, SearchMode

__all__ = [
    "TweetSearchConfig",
    "load_config",
    "missing_credentials",
    "LLMClient",
    "resolve_provider",
    "TwitterSession",
    "LoginResult",
    "SearchMode",
]
