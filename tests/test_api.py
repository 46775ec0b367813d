"""
Tests for the FastAPI endpoints, with the search service mocked out.
Run: pytest tests/test_api.py
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

import api
from src.models import FacetBucket, Facets, Movie, MovieSearchResult, SearchRequest
from src.search_engine import SearchBackendError


def sample_result():
	movie = Movie(
		id="1",
		title="Interstellar",
		year=2014,
		rating=8.6,
		votes=1500000,
		image="",
		countries=["USA"],
		languages=["English"],
		actors=["Matthew McConaughey"],
		genre=["Adventure", "Sci-Fi"],
		directors=["Christopher Nolan"],
		description="Explorers travel through a wormhole.",
		duration=2.8,
		imdb_url="https://www.imdb.com/title/tt0816692/",
	)
	facets = Facets(genre=(FacetBucket("Sci-Fi", 1),), year=(FacetBucket(2014.0, 1),))
	return MovieSearchResult(search_duration=5, total=1, movies=(movie,), facets=facets)


@pytest.fixture
def client():
	"""Test client without the startup hook (no real Elasticsearch)."""
	return TestClient(api.app)


@pytest.fixture
def mock_engine():
	engine = MagicMock()
	engine.search.return_value = sample_result()
	engine.get_facets.return_value = sample_result().facets
	engine.ping.return_value = True
	return engine


def test_health(client, mock_engine):
	with patch.object(api, "ENGINE", mock_engine):
		response = client.get("/health")
	assert response.status_code == 200
	assert response.json() == {"status": "ok", "engine_ready": True, "elasticsearch": True}


def test_movies_success_envelope(client, mock_engine):
	with patch.object(api, "ENGINE", mock_engine):
		response = client.get("/movies", params={"searchText": "space", "genre": ["Adventure", "Drama"], "ratingMin": "6", "page": "2", "limit": "5"})

	assert response.status_code == 200
	payload = response.json()
	assert payload["status"] == "success"
	data = payload["data"]
	assert data["searchDuration"] == 5
	assert data["total"] == 1
	assert data["movies"][0]["imdbUrl"] == "https://www.imdb.com/title/tt0816692/"
	assert data["facets"]["genre"] == [{"key": "Sci-Fi", "count": 1}]
	assert data["facets"]["country"] == []

	request = mock_engine.search.call_args.args[0]
	assert request == SearchRequest(search_text="space", genre=("Adventure", "Drama"), rating_min=6.0, page=2, limit=5)


def test_movies_bad_numbers_are_ignored(client, mock_engine):
	with patch.object(api, "ENGINE", mock_engine):
		response = client.get("/movies", params={"year": "abc", "durationMax": ""})
	assert response.status_code == 200
	assert mock_engine.search.call_args.args[0] == SearchRequest()


def test_movies_failure_envelope(client, mock_engine):
	mock_engine.search.side_effect = SearchBackendError("no such index [movie_index]", {"type": "NotFoundError", "status": 404})
	with patch.object(api, "ENGINE", mock_engine):
		response = client.get("/movies", params={"year": "2014"})

	assert response.status_code == 502
	assert response.json() == {
		"status": "failure",
		"data": {"message": "no such index [movie_index]", "error": {"type": "NotFoundError", "status": 404}},
	}


def test_movies_without_engine(client):
	with patch.object(api, "ENGINE", None):
		response = client.get("/movies")
	assert response.status_code == 503
	assert response.json()["status"] == "failure"


def test_facets(client, mock_engine):
	with patch.object(api, "ENGINE", mock_engine):
		response = client.get("/facets")
	assert response.status_code == 200
	facets = response.json()["data"]["facets"]
	assert facets["year"] == [{"key": 2014.0, "count": 1}]
	assert set(facets) == set(Facets.NAMES)


def test_facets_failure(client, mock_engine):
	mock_engine.get_facets.side_effect = SearchBackendError("Connection refused", {"type": "ConnectionError"})
	with patch.object(api, "ENGINE", mock_engine):
		response = client.get("/facets")
	assert response.status_code == 502
	assert response.json()["data"]["message"] == "Connection refused"
