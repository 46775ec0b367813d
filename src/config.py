"""
Runtime configuration for the movie search service.
Every value can be overridden with an environment variable (or a local .env file).
"""

from typing import Optional  # optional secrets

from pydantic import Field, field_validator  # aliases and normalization
from pydantic_settings import BaseSettings, SettingsConfigDict  # env-driven settings


class Settings(BaseSettings):
	"""Environment-driven settings; a malformed value fails at startup instead of being ignored."""

	# Elasticsearch connection
	elasticsearch_url: str = "http://localhost:9200"  # ELASTICSEARCH_URL
	elasticsearch_api_key: Optional[str] = None  # ELASTICSEARCH_API_KEY, unset for local clusters
	elasticsearch_timeout: float = 10.0  # ELASTICSEARCH_TIMEOUT, seconds per request
	index_name: str = Field(default="movie_index", validation_alias="MOVIE_INDEX")  # index holding the catalog

	# Logging
	log_level: str = "INFO"  # LOG_LEVEL, any loguru level name

	# Where the Streamlit UI expects the API
	api_url: str = "http://localhost:8000"  # API_URL

	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@field_validator("log_level")
	@classmethod
	def _upper_level(cls, value: str) -> str:
		# loguru level names are upper-case
		return value.upper()


settings = Settings()
