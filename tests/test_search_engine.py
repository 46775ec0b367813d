"""
Unit tests for MovieSearchService with a fake Elasticsearch client (no network).
Run: pytest tests/test_search_engine.py
"""

from unittest.mock import MagicMock

import pytest
from elasticsearch import ConnectionError as EsConnectionError, NotFoundError

from src.aggregations import build_aggregations
from src.models import SearchRequest
from src.search_engine import MovieSearchService, SearchBackendError


class FakeClient:
	"""Records search calls and returns a canned response (or raises)."""

	def __init__(self, response=None, error=None):
		self.response = response
		self.error = error
		self.calls = []

	def search(self, **kwargs):
		self.calls.append(kwargs)
		if self.error is not None:
			raise self.error
		return self.response

	def ping(self):
		return self.error is None


def engine_response():
	return {
		"took": 7,
		"hits": {
			"total": {"value": 42, "relation": "eq"},
			"hits": [
				{"_id": "1", "_source": {"title": "Interstellar", "year": 2014, "users_rating": 8.6, "runtime": 2.8}},
				{"_id": "2", "_source": {"title": "Inception", "year": 2010, "users_rating": 8.8, "runtime": 2.5}},
			],
		},
		"aggregations": {
			"by_genre": {"buckets": [{"key": "Sci-Fi", "doc_count": 2}]},
			"by_year": {"buckets": [{"key": 2010.0, "doc_count": 1}, {"key": 2014.0, "doc_count": 1}]},
		},
	}


def test_search_sends_query_pagination_and_aggs():
	client = FakeClient(engine_response())
	service = MovieSearchService(client, index_name="movie_index")
	service.search(SearchRequest(search_text="space", page=2, limit=5))

	call = client.calls[0]
	assert call["index"] == "movie_index"
	assert call["from_"] == 10
	assert call["size"] == 5
	assert call["aggs"] == build_aggregations()
	assert call["query"]["bool"]["must"][0]["multi_match"]["query"] == "space"


def test_match_all_search_omits_query():
	client = FakeClient(engine_response())
	MovieSearchService(client).search(SearchRequest())
	call = client.calls[0]
	assert "query" not in call
	assert (call["from_"], call["size"]) == (0, 10)


def test_search_translates_response():
	result = MovieSearchService(FakeClient(engine_response())).search(SearchRequest(genre=["Sci-Fi"]))
	assert result.search_duration == 7
	assert result.total == 42
	assert [m.title for m in result.movies] == ["Interstellar", "Inception"]
	assert result.movies[0].rating == 8.6
	assert [b.key for b in result.facets.year] == [2010.0, 2014.0]
	assert result.facets.country == ()

	data = result.to_dict()
	assert set(data) == {"searchDuration", "total", "movies", "facets"}


def test_plain_integer_total_is_accepted():
	raw = engine_response()
	raw["hits"]["total"] = 3
	assert MovieSearchService.to_response(raw).total == 3


def test_response_objects_with_body_are_unwrapped():
	wrapped = MagicMock()
	wrapped.body = engine_response()
	assert MovieSearchService.to_response(wrapped).total == 42


def test_connection_error_is_wrapped():
	client = FakeClient(error=EsConnectionError("Connection refused"))
	with pytest.raises(SearchBackendError) as info:
		MovieSearchService(client).search(SearchRequest())
	assert "Connection refused" in info.value.message
	assert info.value.details["type"] == "ConnectionError"


def test_client_side_error_is_wrapped():
	client = FakeClient(error=ValueError("bad param from client"))
	with pytest.raises(SearchBackendError) as info:
		MovieSearchService(client).search(SearchRequest(year=2014))
	assert info.value.message == "bad param from client"
	assert info.value.details == {"type": "ValueError"}


def test_api_error_details_are_forwarded():
	body = {"error": {"type": "index_not_found_exception"}, "status": 404}
	error = NotFoundError("index_not_found_exception", meta=MagicMock(status=404), body=body)
	with pytest.raises(SearchBackendError) as info:
		MovieSearchService(FakeClient(error=error)).search(SearchRequest(year=2014))
	assert info.value.details["status"] == 404
	assert info.value.details["info"] == body


def test_get_facets_uses_size_zero():
	client = FakeClient(engine_response())
	facets = MovieSearchService(client).get_facets()
	call = client.calls[0]
	assert call["size"] == 0
	assert "query" not in call
	assert [b.key for b in facets.genre] == ["Sci-Fi"]


def test_ping():
	assert MovieSearchService(FakeClient(engine_response())).ping() is True
	assert MovieSearchService(FakeClient(error=EsConnectionError("down"))).ping() is False
