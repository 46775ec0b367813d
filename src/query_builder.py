"""
Query compilation module.
Turns a SearchRequest into an Elasticsearch bool query plus pagination.
The expression is an immutable tree of MultiMatch/Term/Range clauses grouped into must/filter/should.
"""

import json  # debug dump of compiled bodies
from dataclasses import dataclass  # immutable clause types
from typing import Any, Dict, Optional, Tuple, Union  # type annotations

from loguru import logger  # console logging

from .models import IndexFields, SearchRequest, is_present  # request and field names


DEFAULT_PAGE_SIZE = 10  # used when the request carries no limit


@dataclass(frozen=True)
class MultiMatch:
	"""Scored full-text match of one string against several fields."""
	query: str  # user text, passed through untouched
	fields: Tuple[str, ...]  # may carry boosts like "title^2"

	def to_dict(self) -> Dict[str, Any]:
		return {"multi_match": {"query": self.query, "fields": list(self.fields)}}


@dataclass(frozen=True)
class Term:
	"""Exact match of one value on a keyword or numeric field."""
	field: str  # keyword or numeric field
	value: Union[str, int, float]  # exact value to match

	def to_dict(self) -> Dict[str, Any]:
		return {"term": {self.field: self.value}}


@dataclass(frozen=True)
class Range:
	"""Inclusive numeric range; at least one bound is always set."""
	field: str  # numeric field
	gte: Optional[float] = None  # lower bound, inclusive
	lte: Optional[float] = None  # upper bound, inclusive

	def __post_init__(self):
		if self.gte is None and self.lte is None:
			raise ValueError(f"Range on '{self.field}' needs at least one bound")

	def to_dict(self) -> Dict[str, Any]:
		bounds: Dict[str, float] = {}
		if self.gte is not None:
			bounds["gte"] = self.gte
		if self.lte is not None:
			bounds["lte"] = self.lte
		return {"range": {self.field: bounds}}


Clause = Union[MultiMatch, Term, Range]


def _single_entry(body: Any, kind: str) -> Tuple[str, Any]:
	# term/range bodies are {field: value} with exactly one field
	if not isinstance(body, dict) or len(body) != 1:
		raise ValueError(f"'{kind}' clause must name exactly one field, got {body!r}")
	return next(iter(body.items()))


def clause_from_dict(data: Dict[str, Any]) -> Clause:
	"""Parse one serialized clause back into its typed form."""
	if not isinstance(data, dict) or len(data) != 1:
		raise ValueError(f"Clause must have exactly one kind, got {data!r}")
	kind, body = next(iter(data.items()))
	if kind == "multi_match":
		return MultiMatch(query=body["query"], fields=tuple(body.get("fields", ())))
	if kind == "term":
		name, value = _single_entry(body, kind)
		return Term(field=name, value=value)
	if kind == "range":
		name, bounds = _single_entry(body, kind)
		return Range(field=name, gte=bounds.get("gte"), lte=bounds.get("lte"))
	raise ValueError(f"Unsupported clause kind: {kind}")


@dataclass(frozen=True)
class BoolQuery:
	"""
	Boolean query with three clause groups.
	- must: scored, required (free text)
	- filter: unscored, required, AND-combined
	- should: OR-combined (genre list)
	"""
	must: Tuple[Clause, ...] = ()
	filter: Tuple[Clause, ...] = ()
	should: Tuple[Clause, ...] = ()

	def is_empty(self) -> bool:
		return not (self.must or self.filter or self.should)

	def to_dict(self) -> Dict[str, Any]:
		# Empty groups are kept: [] means "no constraint of this kind"
		return {
			"bool": {
				"must": [c.to_dict() for c in self.must],
				"filter": [c.to_dict() for c in self.filter],
				"should": [c.to_dict() for c in self.should],
			}
		}

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "BoolQuery":
		"""Rebuild a query from its serialized form (inverse of to_dict)."""
		body = data.get("bool")
		if not isinstance(body, dict):
			raise ValueError("Expected a top-level 'bool' query")
		return cls(
			must=tuple(clause_from_dict(c) for c in body.get("must", [])),
			filter=tuple(clause_from_dict(c) for c in body.get("filter", [])),
			should=tuple(clause_from_dict(c) for c in body.get("should", [])),
		)


@dataclass(frozen=True)
class CompiledQuery:
	"""Compiler output: the query (None = match everything) and the page window."""
	query: Optional[BoolQuery]  # None sends no "query" at all
	from_: int  # offset of the first hit
	size: int  # hits per page

	def to_body(self, aggs: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
		"""Search request body; 'query' is left out entirely when there is none."""
		body: Dict[str, Any] = {"from": self.from_, "size": self.size}
		if self.query is not None:
			body["query"] = self.query.to_dict()
		if aggs is not None:
			body["aggs"] = aggs
		return body


class QueryCompiler:
	"""
	Compiles SearchRequest values into CompiledQuery values.
	Stateless; one instance can serve every request concurrently.
	"""

	# Free-text fields, title weighted double
	TEXT_FIELDS: Tuple[str, ...] = (
		f"{IndexFields.TITLE}^2",
		IndexFields.DESCRIPTION,
		IndexFields.ACTORS,
		IndexFields.DIRECTORS,
		IndexFields.GENRE,
	)

	def __init__(self, default_page_size: int = DEFAULT_PAGE_SIZE):
		self.default_page_size = default_page_size  # size when the request has no limit

	def compile(self, request: SearchRequest) -> CompiledQuery:
		"""Main entry: pagination first, then the query unless nothing is being filtered."""
		size, from_ = self._pagination(request)  # never part of the bool query

		# Short-circuit: nothing to filter on means match everything
		if not request.has_filters():
			logger.debug("[Compiler] No filter fields present -> match all | from={} size={}", from_, size)
			return CompiledQuery(query=None, from_=from_, size=size)

		query = BoolQuery(
			must=self._must_clauses(request),  # scored free text
			filter=self._filter_clauses(request),  # exact terms and ranges, AND
			should=self._should_clauses(request),  # genres, OR
		)
		compiled = CompiledQuery(query=query, from_=from_, size=size)
		logger.opt(lazy=True).debug("[Compiler] Compiled request -> {}", lambda: json.dumps(compiled.to_body()))  # serialized only at DEBUG
		return compiled

	def _pagination(self, request: SearchRequest) -> Tuple[int, int]:
		# limit/page of 0 behave as absent
		size = request.limit if request.limit else self.default_page_size  # page size
		from_ = request.page * size if request.page else 0  # offset of the first hit
		return size, from_

	def _must_clauses(self, request: SearchRequest) -> Tuple[Clause, ...]:
		if not is_present(request.search_text):  # filters only, no relevance clause
			return ()
		return (MultiMatch(query=request.search_text, fields=self.TEXT_FIELDS),)

	def _filter_clauses(self, request: SearchRequest) -> Tuple[Clause, ...]:
		# Order matters for readability of the emitted body, not for matching
		clauses = []  # accumulator
		if is_present(request.country):
			clauses.append(Term(IndexFields.COUNTRIES, request.country))  # requested country, exact
		rating = self._range(IndexFields.USERS_RATING, request.rating_min, request.rating_max)
		if rating is not None:
			clauses.append(rating)
		if is_present(request.language):
			clauses.append(Term(IndexFields.LANGUAGES_KEYWORD, request.language))
		if request.year is not None:  # 0 is a value, not "absent"
			clauses.append(Term(IndexFields.YEAR, request.year))
		duration = self._range(IndexFields.RUNTIME, request.duration_min, request.duration_max)
		if duration is not None:
			clauses.append(duration)
		return tuple(clauses)

	def _should_clauses(self, request: SearchRequest) -> Tuple[Clause, ...]:
		# Any requested genre qualifies a document
		if not is_present(request.genre):
			return ()
		return tuple(Term(IndexFields.GENRE_KEYWORD, g) for g in request.genre)

	def _range(self, field_name: str, minimum: Optional[float], maximum: Optional[float]) -> Optional[Range]:
		if minimum is None and maximum is None:  # no bound requested, no clause
			return None
		return Range(field_name, gte=minimum, lte=maximum)


_default_compiler = QueryCompiler()


def compile_query(request: SearchRequest) -> CompiledQuery:
	"""Compile with the default page size."""
	return _default_compiler.compile(request)
