"""
Data models for the movie search service.
Defines the request, result and facet structures shared across the system.
"""

# Import dataclass helpers to define immutable "record-like" classes without boilerplate
from dataclasses import dataclass, field, fields  # auto-generates __init__, __eq__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional, Tuple, Union  # containers and optional values


class IndexFields:
	"""Field names of the movie index as mapped in Elasticsearch."""
	TITLE = "title"
	DESCRIPTION = "description"
	ACTORS = "actors"
	DIRECTORS = "directors"
	GENRE = "genre"
	GENRE_KEYWORD = "genre.keyword"  # exact-match sub-field of genre
	COUNTRIES = "countries"  # keyword field, no sub-field needed
	LANGUAGES_KEYWORD = "languages.keyword"
	YEAR = "year"
	USERS_RATING = "users_rating"
	RUNTIME = "runtime"  # stored in hours, one decimal


def is_present(value: Any) -> bool:
	"""
	True when a request value was actually supplied.
	None, blank strings and empty sequences are absent; any number (0 included) is present.
	"""
	if value is None:
		return False
	if isinstance(value, str):
		return bool(value.strip())
	if isinstance(value, (list, tuple)):
		return len(value) > 0
	return True


@dataclass(frozen=True)
class SearchRequest:
	"""
	One incoming search, already coerced from text.
	Every field is optional; None means "not requested" and 0 is a real value.
	"""
	search_text: Optional[str] = None  # free text matched against title/description/people/genre
	country: Optional[str] = None  # exact country
	language: Optional[str] = None  # exact language
	year: Optional[int] = None  # exact release year
	rating_min: Optional[float] = None  # lower users_rating bound (inclusive)
	rating_max: Optional[float] = None  # upper users_rating bound (inclusive)
	genre: Optional[Tuple[str, ...]] = None  # any of these genres
	duration_min: Optional[float] = None  # lower runtime bound in hours (inclusive)
	duration_max: Optional[float] = None  # upper runtime bound in hours (inclusive)
	page: Optional[int] = field(default=None, metadata={"pagination": True})  # zero-based page index
	limit: Optional[int] = field(default=None, metadata={"pagination": True})  # page size

	def __post_init__(self):
		# A bare string is one genre, not a sequence of characters
		genre = self.genre
		if isinstance(genre, str):
			genre = (genre,)
		# Freeze list input so the request stays hashable; blank entries are not genres
		if genre is not None:
			genre = tuple(g for g in genre if is_present(g))
		object.__setattr__(self, "genre", genre)

	def filter_values(self) -> Dict[str, Any]:
		"""Every filter-relevant field by name, pagination excluded."""
		return {
			f.name: getattr(self, f.name)
			for f in fields(self)
			if not f.metadata.get("pagination")
		}

	def has_filters(self) -> bool:
		"""True when at least one filter-relevant field is present."""
		return any(is_present(v) for v in self.filter_values().values())


@dataclass(frozen=True)
class Movie:
	"""
	A single movie as returned to API clients.
	Field names follow the public response, not the index mapping.
	"""
	id: str  # engine-assigned document id
	title: str
	year: int
	rating: float  # users_rating in the index
	votes: int
	image: str  # img_url in the index
	countries: List[str]
	languages: List[str]
	actors: List[str]
	genre: List[str]
	directors: List[str]
	description: str
	duration: float  # runtime in hours
	imdb_url: str

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"title": self.title,
			"year": self.year,
			"rating": self.rating,
			"votes": self.votes,
			"image": self.image,
			"countries": list(self.countries),
			"languages": list(self.languages),
			"actors": list(self.actors),
			"genre": list(self.genre),
			"directors": list(self.directors),
			"description": self.description,
			"duration": self.duration,
			"imdbUrl": self.imdb_url,
		}


FacetKey = Union[str, int, float]  # terms give strings, histograms give numbers


@dataclass(frozen=True)
class FacetBucket:
	"""One (value, document count) pair of a facet."""
	key: FacetKey
	count: int

	def to_dict(self) -> Dict[str, Any]:
		return {"key": self.key, "count": self.count}


@dataclass(frozen=True)
class Facets:
	"""
	Facet lists for every filterable dimension.
	Bucket order is exactly the order delivered by the engine.
	"""
	rating: Tuple[FacetBucket, ...] = ()
	country: Tuple[FacetBucket, ...] = ()
	language: Tuple[FacetBucket, ...] = ()
	year: Tuple[FacetBucket, ...] = ()
	genre: Tuple[FacetBucket, ...] = ()
	duration: Tuple[FacetBucket, ...] = ()

	NAMES = ("rating", "country", "language", "year", "genre", "duration")

	def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
		return {name: [b.to_dict() for b in getattr(self, name)] for name in self.NAMES}


@dataclass(frozen=True)
class MovieSearchResult:
	"""Translated engine response for one search."""
	search_duration: int  # engine "took", in ms
	total: int  # total matching documents, not just this page
	movies: Tuple[Movie, ...]
	facets: Facets

	def to_dict(self) -> Dict[str, Any]:
		return {
			"searchDuration": self.search_duration,
			"total": self.total,
			"movies": [m.to_dict() for m in self.movies],
			"facets": self.facets.to_dict(),
		}
