"""
Aggregation module.
Defines the fixed aggregations sent with every search and translates
the engine's raw buckets back into Facets for the UI.
"""

import copy  # hand out copies of the shared definitions
from dataclasses import dataclass  # immutable aggregation definitions
from typing import Any, Dict, Mapping, Optional, Tuple, Union  # type annotations

from loguru import logger  # console logging

from .models import FacetBucket, Facets, IndexFields  # facet structures and field names


DEFAULT_TERMS_SIZE = 100  # cap on distinct values returned per terms facet


@dataclass(frozen=True)
class HistogramAggregation:
	"""Fixed-interval numeric buckets, returned by ascending key."""
	field: str  # numeric field
	interval: float = 1  # bucket width
	min_doc_count: int = 1  # hide empty buckets

	def to_dict(self) -> Dict[str, Any]:
		return {
			"histogram": {
				"field": self.field,
				"interval": self.interval,
				"min_doc_count": self.min_doc_count,
			}
		}


@dataclass(frozen=True)
class TermsAggregation:
	"""Distinct keyword values, returned by descending document count."""
	field: str  # keyword field
	size: int = DEFAULT_TERMS_SIZE  # max distinct values

	def to_dict(self) -> Dict[str, Any]:
		return {"terms": {"field": self.field, "size": self.size}}


Aggregation = Union[HistogramAggregation, TermsAggregation]


# Facet name -> aggregation; the engine receives each under "by_<facet name>"
AGGREGATION_SPEC: Tuple[Tuple[str, Aggregation], ...] = (
	("rating", HistogramAggregation(IndexFields.USERS_RATING)),
	("country", TermsAggregation(IndexFields.COUNTRIES)),
	("language", TermsAggregation(IndexFields.LANGUAGES_KEYWORD)),
	("year", HistogramAggregation(IndexFields.YEAR)),
	("genre", TermsAggregation(IndexFields.GENRE_KEYWORD)),
	("duration", HistogramAggregation(IndexFields.RUNTIME)),
)


def aggregation_name(facet: str) -> str:
	"""Engine-side aggregation name for a facet, e.g. 'genre' -> 'by_genre'."""
	return f"by_{facet}"


_AGGREGATIONS_BODY: Dict[str, Any] = {
	aggregation_name(facet): agg.to_dict() for facet, agg in AGGREGATION_SPEC
}


def build_aggregations() -> Dict[str, Any]:
	"""
	Return the 'aggs' section of a search body.
	The definitions are built once per process; callers get a copy they may freely mutate.
	"""
	return copy.deepcopy(_AGGREGATIONS_BODY)


class FacetTranslator:
	"""
	Converts the engine's 'aggregations' payload into Facets.
	Missing aggregations become empty facets; bucket order is never changed.
	"""

	def translate(self, aggregations: Optional[Mapping[str, Any]]) -> Facets:
		aggregations = aggregations or {}  # a response without aggregations yields empty facets
		lists = {}  # facet name -> buckets
		for facet, _ in AGGREGATION_SPEC:
			raw = aggregations.get(aggregation_name(facet))
			if raw is None:
				logger.debug("[Facets] Aggregation '{}' missing from response; facet left empty", aggregation_name(facet))
			lists[facet] = self._buckets(raw)
		facets = Facets(**lists)  # one fresh value per response
		logger.debug(
			"[Facets] Translated bucket counts | {}",
			{name: len(getattr(facets, name)) for name in Facets.NAMES},
		)
		return facets

	def _buckets(self, raw: Optional[Mapping[str, Any]]) -> Tuple[FacetBucket, ...]:
		if not raw:  # aggregation absent
			return ()
		# Engine order kept as-is: terms by count, histograms by key
		return tuple(self._bucket(b) for b in (raw.get("buckets") or []))

	def _bucket(self, bucket: Mapping[str, Any]) -> FacetBucket:
		# 0 is a legitimate histogram key, so only a missing key falls back to ""
		key = bucket.get("key")  # term value or histogram bucket start
		count = bucket.get("doc_count")  # matching documents
		return FacetBucket(
			key="" if key is None else key,
			count=0 if count is None else count,
		)


_default_translator = FacetTranslator()


def facets_from_aggregations(aggregations: Optional[Mapping[str, Any]]) -> Facets:
	"""Translate a raw 'aggregations' payload with the default translator."""
	return _default_translator.translate(aggregations)
