"""
Configuration Management for tweetsearch

Loads configuration from ~/.tweetsearch/config.json, a local .env file,
and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from typing import List
from dataclasses import dataclass, field

from dotenv import load_dotenv

logger = logging.getLogger("tweetsearch.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".tweetsearch"
CONFIG_PATH = CONFIG_DIR / "config.json"
COOKIES_PATH = CONFIG_DIR / "cookies.json"

DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"


@dataclass
class TwitterConfig:
    """Twitter/X login credentials"""
    username: str = ""
    password: str = ""
    email: str = ""
    cookies_path: str = ""  # empty = log in fresh every run


@dataclass
class LLMConfig:
    """LLM provider configuration"""
    provider: str = "groq"
    groq_api_key: str = ""
    groq_model: str = DEFAULT_GROQ_MODEL
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    google_api_key: str = ""
    google_model: str = "gemini-2.0-flash-exp"

    def api_key_for(self, provider: str) -> str:
        return getattr(self, f"{provider}_api_key", "") or ""

    def model_for(self, provider: str) -> str:
        return getattr(self, f"{provider}_model", "") or ""


@dataclass
class RetrieverConfig:
    """Retrieval pipeline configuration"""
    candidate_count: int = 20
    max_posts_per_query: int = 3
    min_text_length: int = 20
    max_queries: int = 3
    concurrent_search: bool = False
    strip_reasoning: bool = True


@dataclass
class TweetSearchConfig:
    """Main tweetsearch configuration"""
    twitter: TwitterConfig = field(default_factory=TwitterConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    retriever: RetrieverConfig = field(default_factory=RetrieverConfig)


def _section(data: dict, name: str) -> dict:
    """Return a config section, treating anything but an object as empty"""
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        logger.warning("Ignoring config section %r: expected an object, got %s",
                       name, type(section).__name__)
        return {}
    return section


def _parse_twitter_config(data: dict) -> TwitterConfig:
    """Parse twitter section from config dict"""
    twitter_data = _section(data, "twitter")
    return TwitterConfig(
        username=twitter_data.get("username", ""),
        password=twitter_data.get("password", ""),
        email=twitter_data.get("email", ""),
        cookies_path=twitter_data.get("cookies_path", ""),
    )


def _parse_llm_config(data: dict) -> LLMConfig:
    """Parse llm section from config dict"""
    llm_data = _section(data, "llm")
    return LLMConfig(
        provider=llm_data.get("provider", "groq"),
        groq_api_key=llm_data.get("groq_api_key", ""),
        groq_model=llm_data.get("groq_model", DEFAULT_GROQ_MODEL),
        openai_api_key=llm_data.get("openai_api_key", ""),
        openai_model=llm_data.get("openai_model", "gpt-4o-mini"),
        anthropic_api_key=llm_data.get("anthropic_api_key", ""),
        anthropic_model=llm_data.get("anthropic_model", "claude-sonnet-4-20250514"),
        google_api_key=llm_data.get("google_api_key", ""),
        google_model=llm_data.get("google_model", "gemini-2.0-flash-exp"),
    )


def _parse_retriever_config(data: dict) -> RetrieverConfig:
    """Parse retriever section from config dict"""
    retriever_data = _section(data, "retriever")
    return RetrieverConfig(
        candidate_count=retriever_data.get("candidate_count", 20),
        max_posts_per_query=retriever_data.get("max_posts_per_query", 3),
        min_text_length=retriever_data.get("min_text_length", 20),
        max_queries=retriever_data.get("max_queries", 3),
        concurrent_search=retriever_data.get("concurrent_search", False),
        strip_reasoning=retriever_data.get("strip_reasoning", True),
    )


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def load_config(dotenv: bool = True) -> TweetSearchConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (including those loaded from .env)
    2. Config file (~/.tweetsearch/config.json)
    3. Default values
    """
    if dotenv:
        load_dotenv()

    config = TweetSearchConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")

            config.twitter = _parse_twitter_config(data)
            config.llm = _parse_llm_config(data)
            config.retriever = _parse_retriever_config(data)
        except (ValueError, OSError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    _env_twitter_map = {
        "TWITTER_USERNAME": "username",
        "TWITTER_PASSWORD": "password",
        "TWITTER_EMAIL": "email",
        "TWITTER_COOKIES_PATH": "cookies_path",
    }
    for env_var, attr in _env_twitter_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.twitter, attr, val)

    _env_llm_map = {
        "GROQ_API_KEY": "groq_api_key",
        "GROQ_MODEL": "groq_model",
        "OPENAI_API_KEY": "openai_api_key",
        "OPENAI_MODEL": "openai_model",
        "ANTHROPIC_API_KEY": "anthropic_api_key",
        "ANTHROPIC_MODEL": "anthropic_model",
        "GOOGLE_API_KEY": "google_api_key",
        "GEMINI_API_KEY": "google_api_key",
        "GOOGLE_MODEL": "google_model",
        "TWEETSEARCH_LLM_PROVIDER": "provider",
    }
    for env_var, attr in _env_llm_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.llm, attr, val)

    if os.getenv("TWEETSEARCH_CONCURRENT_SEARCH"):
        config.retriever.concurrent_search = _env_flag(os.getenv("TWEETSEARCH_CONCURRENT_SEARCH"))

    return config


def missing_credentials(config: TweetSearchConfig) -> List[str]:
    """Return the names of required settings that are empty."""
    missing = []
    provider = (config.llm.provider or "").lower()
    if provider == "auto":
        if not any(config.llm.api_key_for(p) for p in ("groq", "openai", "anthropic", "google")):
            missing.append("GROQ_API_KEY")
    elif not config.llm.api_key_for(provider):
        missing.append(f"{provider.upper()}_API_KEY")

    for env_var, value in (
        ("TWITTER_USERNAME", config.twitter.username),
        ("TWITTER_PASSWORD", config.twitter.password),
        ("TWITTER_EMAIL", config.twitter.email),
    ):
        if not value:
            missing.append(env_var)
    return missing
