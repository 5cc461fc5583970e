"""Tests for config loading -- file, environment, and credential checks."""

import json
import os
import pytest
from unittest.mock import patch


class TestConfigDefaults:
    def test_llm_config_defaults(self):
        from tweetsearch.common.config import LLMConfig
        cfg = LLMConfig()
        assert cfg.provider == "groq"
        assert cfg.groq_model == "llama-3.3-70b-versatile"
        assert cfg.groq_api_key == ""

    def test_retriever_config_defaults(self):
        from tweetsearch.common.config import RetrieverConfig
        cfg = RetrieverConfig()
        assert cfg.candidate_count == 20
        assert cfg.max_posts_per_query == 3
        assert cfg.min_text_length == 20
        assert cfg.max_queries == 3
        assert cfg.concurrent_search is False
        assert cfg.strip_reasoning is True

    def test_api_key_and_model_lookup(self):
        from tweetsearch.common.config import LLMConfig
        cfg = LLMConfig(openai_api_key="sk-test", openai_model="gpt-4o")
        assert cfg.api_key_for("openai") == "sk-test"
        assert cfg.model_for("openai") == "gpt-4o"
        assert cfg.api_key_for("nonexistent") == ""


class TestLoadConfig:
    def test_load_from_file(self, tmp_path):
        from tweetsearch.common.config import load_config
        config_data = {
            "twitter": {"username": "bot", "password": "pw", "email": "bot@example.com"},
            "llm": {"provider": "openai", "openai_api_key": "sk-file"},
            "retriever": {"concurrent_search": True, "max_posts_per_query": 5},
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        with patch("tweetsearch.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, {}, clear=True):
            cfg = load_config(dotenv=False)

        assert cfg.twitter.username == "bot"
        assert cfg.twitter.email == "bot@example.com"
        assert cfg.llm.provider == "openai"
        assert cfg.llm.openai_api_key == "sk-file"
        assert cfg.retriever.concurrent_search is True
        assert cfg.retriever.max_posts_per_query == 5
        assert cfg.retriever.candidate_count == 20

    def test_env_overrides_file(self, tmp_path):
        from tweetsearch.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"twitter": {"username": "from-file"}}))

        env = {
            "TWITTER_USERNAME": "from-env",
            "GROQ_API_KEY": "gsk-env",
            "TWEETSEARCH_CONCURRENT_SEARCH": "yes",
        }
        with patch("tweetsearch.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, env, clear=True):
            cfg = load_config(dotenv=False)

        assert cfg.twitter.username == "from-env"
        assert cfg.llm.groq_api_key == "gsk-env"
        assert cfg.retriever.concurrent_search is True

    def test_gemini_key_alias(self, tmp_path):
        from tweetsearch.common.config import load_config
        with patch("tweetsearch.common.config.CONFIG_PATH", tmp_path / "missing.json"), \
             patch.dict(os.environ, {"GEMINI_API_KEY": "g-key"}, clear=True):
            cfg = load_config(dotenv=False)
        assert cfg.llm.google_api_key == "g-key"

    def test_malformed_file_logs_warning(self, tmp_path, caplog):
        import logging
        from tweetsearch.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with patch("tweetsearch.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, {}, clear=True), \
             caplog.at_level(logging.WARNING, logger="tweetsearch.common.config"):
            cfg = load_config(dotenv=False)

        assert cfg.llm.provider == "groq"
        assert "Failed to load config file" in caplog.text

    @pytest.mark.parametrize("content, message", [
        ("[]", "Failed to load config file"),
        ('"just a string"', "Failed to load config file"),
        ('{"llm": "groq"}', "Ignoring config section 'llm'"),
        ('{"retriever": [1, 2]}', "Ignoring config section 'retriever'"),
    ])
    def test_wrong_shape_file_logs_warning(self, tmp_path, caplog, content, message):
        import logging
        from tweetsearch.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text(content)

        with patch("tweetsearch.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, {}, clear=True), \
             caplog.at_level(logging.WARNING, logger="tweetsearch.common.config"):
            cfg = load_config(dotenv=False)

        assert cfg.llm.provider == "groq"
        assert cfg.retriever.candidate_count == 20
        assert message in caplog.text

    def test_null_section_uses_defaults(self, tmp_path):
        from tweetsearch.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"twitter": None, "llm": {"provider": "openai"}}))

        with patch("tweetsearch.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, {}, clear=True):
            cfg = load_config(dotenv=False)

        assert cfg.twitter.username == ""
        assert cfg.llm.provider == "openai"


class TestMissingCredentials:
    def test_all_missing(self):
        from tweetsearch.common.config import TweetSearchConfig, missing_credentials
        missing = missing_credentials(TweetSearchConfig())
        assert missing == ["GROQ_API_KEY", "TWITTER_USERNAME", "TWITTER_PASSWORD", "TWITTER_EMAIL"]

    def test_complete_config(self):
        from tweetsearch.common.config import (
            TweetSearchConfig, TwitterConfig, LLMConfig, missing_credentials,
        )
        cfg = TweetSearchConfig(
            twitter=TwitterConfig(username="u", password="p", email="e@x.com"),
            llm=LLMConfig(groq_api_key="gsk"),
        )
        assert missing_credentials(cfg) == []

    def test_missing_key_follows_provider(self):
        from tweetsearch.common.config import (
            TweetSearchConfig, TwitterConfig, LLMConfig, missing_credentials,
        )
        cfg = TweetSearchConfig(
            twitter=TwitterConfig(username="u", password="p", email="e@x.com"),
            llm=LLMConfig(provider="anthropic", groq_api_key="gsk"),
        )
        assert missing_credentials(cfg) == ["ANTHROPIC_API_KEY"]

    def test_auto_provider_accepts_any_key(self):
        from tweetsearch.common.config import (
            TweetSearchConfig, TwitterConfig, LLMConfig, missing_credentials,
        )
        cfg = TweetSearchConfig(
            twitter=TwitterConfig(username="u", password="p", email="e@x.com"),
            llm=LLMConfig(provider="auto", openai_api_key="sk"),
        )
        assert missing_credentials(cfg) == []
