"""
Hit mapping module.
Renames Elasticsearch hit fields into the public Movie record with safe defaults.
"""

from typing import Any, Dict, List, Mapping  # type hints

from .models import Movie  # public movie record


class MovieMapper:
	"""
	Maps one engine hit ({_id, _source}) to a Movie.
	The index stores users_rating/img_url/runtime/imdb_url; clients see rating/image/duration/imdbUrl.
	"""

	def from_hit(self, hit: Mapping[str, Any]) -> Movie:
		source: Dict[str, Any] = dict(hit.get("_source") or {})
		return Movie(
			id=str(hit.get("_id") or ""),
			title=source.get("title") or "",
			year=source.get("year") or 0,
			rating=source.get("users_rating") or 0,
			votes=source.get("votes") or 0,
			image=source.get("img_url") or "",
			countries=self._to_list(source.get("countries")),
			languages=self._to_list(source.get("languages")),
			actors=self._to_list(source.get("actors")),
			genre=self._to_list(source.get("genre")),
			directors=self._to_list(source.get("directors")),
			description=source.get("description") or "",
			duration=source.get("runtime") or 0,
			imdb_url=source.get("imdb_url") or "",
		)

	def _to_list(self, value: Any) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a single string
		into a list of strings.
		"""
		if value is None:  # missing field
			return []
		if isinstance(value, list):  # already a list
			return [str(item) for item in value if item is not None]
		if isinstance(value, str):  # single value stored as plain keyword
			return [value] if value else []
		return [str(value)]
