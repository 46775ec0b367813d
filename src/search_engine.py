"""
Search engine module.
Sends compiled queries to Elasticsearch and translates responses into MovieSearchResult.
"""

import json  # debug dump of request bodies
from typing import Any, Dict, Mapping, Optional  # type annotations

from elasticsearch import ApiError, Elasticsearch, TransportError  # engine client and its failures
from loguru import logger  # simple structured logger

# Import project modules for compilation, aggregation and mapping
from .aggregations import build_aggregations, facets_from_aggregations  # fixed aggs + translator
from .config import Settings, settings as default_settings  # connection settings
from .models import Facets, MovieSearchResult, SearchRequest  # core data classes
from .movie_mapper import MovieMapper  # hit -> Movie
from .query_builder import CompiledQuery, QueryCompiler  # request -> bool query


class SearchBackendError(Exception):
	"""
	Raised when the search engine call fails (network, missing index, mapping error).
	Carries a message and the engine's error details for the failure envelope.
	"""

	def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
		super().__init__(message)
		self.message = message
		self.details = details or {}

	@classmethod
	def from_engine_error(cls, err: Exception) -> "SearchBackendError":
		details: Dict[str, Any] = {"type": type(err).__name__}
		if isinstance(err, ApiError):
			details["status"] = err.meta.status if err.meta is not None else None
			details["info"] = err.body
		message = getattr(err, "message", None) or str(err)
		return cls(str(message), details)


class MovieSearchService:
	"""
	High-level search API over the movie index.
	Compiles requests, calls the engine once per search and maps the response.
	"""

	def __init__(self, client: Any, index_name: str = "movie_index", compiler: Optional[QueryCompiler] = None):
		self.client = client  # Elasticsearch client (or a compatible stand-in)
		self.index_name = index_name
		self.compiler = compiler or QueryCompiler()
		self.mapper = MovieMapper()

	@classmethod
	def from_settings(cls, config: Settings = default_settings) -> "MovieSearchService":
		"""Build a service with a real client; no connection is made until the first call."""
		logger.info(f"[Engine] Using Elasticsearch at {config.elasticsearch_url} (index '{config.index_name}')")
		client = Elasticsearch(
			config.elasticsearch_url,
			api_key=config.elasticsearch_api_key or None,  # blank env value means no key
			request_timeout=config.elasticsearch_timeout,
		)
		return cls(client, index_name=config.index_name)

	def compile(self, request: SearchRequest) -> CompiledQuery:
		return self.compiler.compile(request)

	def search(self, request: SearchRequest) -> MovieSearchResult:
		"""Run one search and return movies, total, timing and facets."""
		compiled = self.compile(request)
		body = compiled.to_body(aggs=build_aggregations())
		logger.opt(lazy=True).debug(
			"[Engine] Search body for '{}': {}", lambda: self.index_name, lambda: json.dumps(body)
		)  # serialized only at DEBUG

		kwargs: Dict[str, Any] = {"from_": compiled.from_, "size": compiled.size, "aggs": body["aggs"]}
		if "query" in body:
			kwargs["query"] = body["query"]
		response = self._call_search(**kwargs)

		result = self.to_response(response)
		logger.info(
			f"[Engine] Search returned {len(result.movies)} of {result.total} movies in {result.search_duration} ms"
		)
		return result

	def get_facets(self) -> Facets:
		"""Facets over the whole catalog (no query, no hits)."""
		response = self._call_search(size=0, aggs=build_aggregations())
		return facets_from_aggregations(self._body(response).get("aggregations"))

	def ping(self) -> bool:
		"""True when the engine answers."""
		try:
			return bool(self.client.ping())
		except (ApiError, TransportError) as e:
			logger.warning(f"[Engine] Ping failed: {e}")
			return False

	def _call_search(self, **kwargs: Any) -> Any:
		try:
			return self.client.search(index=self.index_name, **kwargs)
		except Exception as e:  # any failure of the engine call becomes a failure envelope
			logger.error(f"[Engine] Search on '{self.index_name}' failed: {e}")
			raise SearchBackendError.from_engine_error(e) from e

	@staticmethod
	def _body(response: Any) -> Mapping[str, Any]:
		# elasticsearch-py returns ObjectApiResponse; plain dicts are accepted too
		return getattr(response, "body", response)

	@classmethod
	def to_response(cls, response: Any) -> MovieSearchResult:
		"""Translate a raw engine response into a MovieSearchResult."""
		body = cls._body(response)
		hits = body.get("hits") or {}
		total = hits.get("total") or 0
		if isinstance(total, Mapping):  # {"value": n, "relation": "eq"} since ES 7
			total = total.get("value") or 0

		mapper = MovieMapper()
		movies = tuple(mapper.from_hit(h) for h in hits.get("hits") or [])
		facets = facets_from_aggregations(body.get("aggregations"))
		return MovieSearchResult(
			search_duration=body.get("took") or 0,
			total=total,
			movies=movies,
			facets=facets,
		)
