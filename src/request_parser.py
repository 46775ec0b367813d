"""
Request parsing module.
Coerces loosely-typed query parameters (all text) into a SearchRequest.
Bad numbers never raise: they resolve to "absent" so the compiler simply ignores them.
"""

import math  # NaN/inf checks
from typing import Any, List, Mapping, Optional, Tuple  # type annotations

from loguru import logger  # console logging

from .models import SearchRequest  # structured request


class RequestParser:
	"""
	Parses a mapping of raw query parameters into a SearchRequest.
	Parameter names follow the public API (camelCase).
	"""

	TEXT_PARAMS = {"searchText": "search_text", "country": "country", "language": "language"}
	INT_PARAMS = {"year": "year"}
	FLOAT_PARAMS = {
		"ratingMin": "rating_min",
		"ratingMax": "rating_max",
		"durationMin": "duration_min",
		"durationMax": "duration_max",
	}
	PAGINATION_PARAMS = {"page": "page", "limit": "limit"}

	def parse(self, params: Mapping[str, Any]) -> SearchRequest:
		"""Main entry: produce a SearchRequest from raw parameters."""
		values = {}  # SearchRequest keyword arguments

		# Free text and exact-match strings
		for param, attr in self.TEXT_PARAMS.items():
			values[attr] = self._to_text(params.get(param))

		# Whole numbers (year)
		for param, attr in self.INT_PARAMS.items():
			values[attr] = self._to_int(param, params.get(param))

		# Range bounds; "0" stays 0
		for param, attr in self.FLOAT_PARAMS.items():
			values[attr] = self._to_float(param, params.get(param))

		# Negative pagination is meaningless to the engine; treat it as not given
		for param, attr in self.PAGINATION_PARAMS.items():
			number = self._to_int(param, params.get(param))
			if number is not None and number < 0:
				logger.warning("[Parser] Ignoring negative {}={}", param, number)
				number = None
			values[attr] = number

		genres = self._to_genres(params.get("genre"))  # list, single value or CSV
		values["genre"] = genres or None  # no genres means not requested

		request = SearchRequest(**values)
		logger.debug("[Parser] Parsed request: {}", request)
		return request

	def _to_text(self, value: Any) -> Optional[str]:
		if value is None:  # parameter not sent
			return None
		text = str(value).strip()  # trim surrounding spaces
		return text or None  # blank counts as absent

	def _to_float(self, name: str, value: Any) -> Optional[float]:
		text = self._to_text(value)
		if text is None:
			return None
		try:
			number = float(text)
		except ValueError:
			logger.debug("[Parser] Non-numeric {}='{}' treated as absent", name, text)
			return None
		if math.isnan(number) or math.isinf(number):
			logger.debug("[Parser] Non-finite {}='{}' treated as absent", name, text)
			return None
		return number

	def _to_int(self, name: str, value: Any) -> Optional[int]:
		number = self._to_float(name, value)
		if number is None:
			return None
		if not number.is_integer():
			logger.debug("[Parser] Non-integer {}='{}' treated as absent", name, value)
			return None
		return int(number)

	def _to_genres(self, value: Any) -> Tuple[str, ...]:
		"""
		Accept a single string, a repeated parameter (list) or a comma-separated string.
		Blank entries are dropped, first occurrence wins on duplicates.
		"""
		items: List[str] = []
		raw_items = value if isinstance(value, (list, tuple)) else [value]
		for raw in raw_items:
			if raw is None:
				continue
			items.extend(part.strip() for part in str(raw).split(","))
		seen = set()
		genres = []
		for g in items:
			if g and g not in seen:
				seen.add(g)
				genres.append(g)
		return tuple(genres)


_default_parser = RequestParser()


def parse_request(params: Mapping[str, Any]) -> SearchRequest:
	"""Parse raw parameters with the default parser."""
	return _default_parser.parse(params)
