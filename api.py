"""
FastAPI server exposing the movie search API.
Endpoints:
- GET /health: basic health check, including Elasticsearch reachability
- GET /movies?searchText=...&genre=...&page=...: filtered search with facets
- GET /facets: facet counts over the whole catalog

Every search response is an envelope: {"status": "success"|"failure", "data": ...}.
"""

# Standard libraries for logging sinks and typing
import sys  # stderr sink for loguru
from typing import Any, Dict, List, Optional, Union  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for response models
from fastapi import FastAPI, Request  # FastAPI primitives
from fastapi.responses import JSONResponse  # envelopes with non-200 status
from pydantic import BaseModel  # response schema definitions

# Import our internal modules for parsing and search
from src.config import settings  # environment-driven settings
from src.models import Facets, MovieSearchResult  # translated results
from src.request_parser import parse_request  # loose params -> SearchRequest
from src.search_engine import MovieSearchService, SearchBackendError  # engine wrapper

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="Movie Search API", version="1.0.0")  # web app

# Global that holds the search service instance
ENGINE: Optional[MovieSearchService] = None  # set on startup


# Pydantic model that describes the shape of a single movie in responses
class MovieOut(BaseModel):
	id: str  # engine document id
	title: str  # display title
	year: int  # release year
	rating: float  # average user rating (users_rating)
	votes: int  # number of user votes
	image: str  # poster URL (img_url)
	countries: List[str]  # production countries
	languages: List[str]  # spoken languages
	actors: List[str]  # cast
	genre: List[str]  # genres
	directors: List[str]  # directors
	description: str  # short synopsis
	duration: float  # runtime in hours
	imdbUrl: str  # IMDb page


# One facet value with its document count
class FacetBucketOut(BaseModel):
	key: Union[int, float, str]  # term value or histogram bucket start
	count: int  # matching documents


# Facet lists in the order the engine returned them
class FacetsOut(BaseModel):
	rating: List[FacetBucketOut]  # histogram, interval 1
	country: List[FacetBucketOut]  # terms, by count
	language: List[FacetBucketOut]  # terms, by count
	year: List[FacetBucketOut]  # histogram, interval 1
	genre: List[FacetBucketOut]  # terms, by count
	duration: List[FacetBucketOut]  # histogram of hours, interval 1


class SearchData(BaseModel):
	searchDuration: int  # engine time in ms
	total: int  # all matches, not just this page
	movies: List[MovieOut]  # current page only
	facets: FacetsOut  # facets of the whole result set


class FacetsData(BaseModel):
	facets: FacetsOut  # catalog-wide facets


class FailureData(BaseModel):
	message: str  # human-readable reason
	error: Optional[Dict[str, Any]] = None  # engine error details, when there are any


# Envelopes: {"status": ..., "data": ...}
class SearchEnvelope(BaseModel):
	status: str  # "success"
	data: SearchData  # search payload


class FacetsEnvelope(BaseModel):
	status: str  # "success"
	data: FacetsData  # facets payload


class FailureEnvelope(BaseModel):
	status: str = "failure"  # constant for every error
	data: FailureData  # reason and engine details


def _failure(status_code: int, message: str, error: Optional[Dict[str, Any]] = None) -> JSONResponse:
	envelope = FailureEnvelope(data=FailureData(message=message, error=error))
	return JSONResponse(status_code=status_code, content=envelope.model_dump())


def _search_envelope(result: MovieSearchResult) -> SearchEnvelope:
	return SearchEnvelope(status="success", data=SearchData(**result.to_dict()))


def _facets_envelope(facets: Facets) -> FacetsEnvelope:
	return FacetsEnvelope(status="success", data=FacetsData(facets=FacetsOut(**facets.to_dict())))


# FastAPI startup hook to configure logging and create the search service once
@app.on_event("startup")
async def startup_event():
	"""Configure the log level and connect the search service."""
	global ENGINE  # refer to module-level global
	logger.remove()  # replace default sink so LOG_LEVEL applies
	logger.add(sys.stderr, level=settings.log_level)
	logger.info("[API] Startup: creating search service...")
	ENGINE = MovieSearchService.from_settings(settings)
	logger.info("[API] Startup complete.")


# Simple health endpoint for readiness checks
@app.get("/health")
def health():
	"""Return minimal health info for liveness and readiness checks."""
	return {
		"status": "ok",  # constant indicator
		"engine_ready": ENGINE is not None,  # True if service initialized
		"elasticsearch": ENGINE.ping() if ENGINE is not None else False,  # engine answers
	}


# Main search endpoint; every parameter is optional and loosely typed
@app.get("/movies", response_model=SearchEnvelope, responses={502: {"model": FailureEnvelope}, 503: {"model": FailureEnvelope}})
def movies(request: Request):
	"""Parse query parameters, run the search and return movies with facets."""
	if ENGINE is None:  # service must be ready to serve
		logger.warning("[API] Search requested but engine not initialized")
		return _failure(503, "Search engine not initialized")

	params: Dict[str, Any] = dict(request.query_params)
	params["genre"] = request.query_params.getlist("genre")  # repeated ?genre=a&genre=b
	logger.debug(f"[API] /movies params={params}")

	search_request = parse_request(params)
	try:
		result = ENGINE.search(search_request)
	except SearchBackendError as e:
		logger.error(f"[API] /movies failed: {e.message}")
		return _failure(502, e.message, e.details)

	logger.info(f"[API] /movies served {len(result.movies)} of {result.total} results")
	return _search_envelope(result)


# Facets over the whole catalog, used to populate filter widgets
@app.get("/facets", response_model=FacetsEnvelope, responses={502: {"model": FailureEnvelope}, 503: {"model": FailureEnvelope}})
def facets():
	"""Return facet counts for every filterable dimension, unfiltered."""
	if ENGINE is None:
		logger.warning("[API] Facets requested but engine not initialized")
		return _failure(503, "Search engine not initialized")

	try:
		result = ENGINE.get_facets()
	except SearchBackendError as e:
		logger.error(f"[API] /facets failed: {e.message}")
		return _failure(502, e.message, e.details)

	return _facets_envelope(result)
