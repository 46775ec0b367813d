"""
Unit tests for Settings: environment overrides and rejection of malformed values.
Run: pytest tests/test_config.py
"""

import pytest
from pydantic import ValidationError

from src.config import Settings


def test_defaults(monkeypatch):
	for name in ("ELASTICSEARCH_URL", "ELASTICSEARCH_TIMEOUT", "MOVIE_INDEX", "LOG_LEVEL"):
		monkeypatch.delenv(name, raising=False)
	config = Settings(_env_file=None)
	assert config.elasticsearch_url == "http://localhost:9200"
	assert config.elasticsearch_timeout == 10.0
	assert config.index_name == "movie_index"
	assert config.log_level == "INFO"


def test_environment_overrides(monkeypatch):
	monkeypatch.setenv("ELASTICSEARCH_URL", "http://search:9200")
	monkeypatch.setenv("ELASTICSEARCH_TIMEOUT", "2.5")
	monkeypatch.setenv("MOVIE_INDEX", "movies_v2")
	monkeypatch.setenv("LOG_LEVEL", "debug")
	config = Settings(_env_file=None)
	assert config.elasticsearch_url == "http://search:9200"
	assert config.elasticsearch_timeout == 2.5
	assert config.index_name == "movies_v2"
	assert config.log_level == "DEBUG"


def test_non_numeric_timeout_is_rejected(monkeypatch):
	monkeypatch.setenv("ELASTICSEARCH_TIMEOUT", "ten")
	with pytest.raises(ValidationError):
		Settings(_env_file=None)
