"""
Streamlit UI for the movie catalog.
Calls the FastAPI server (API_URL, default http://localhost:8000) for facets and search results,
or talks to Elasticsearch directly through MovieSearchService when the API is unreachable.

Run API (optional):   uvicorn api:app --reload
Run UI:                streamlit run streamlit_app.py
"""

# HTTP client to call the API when running in API mode
import requests  # make web requests to the FastAPI server
# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import Any, Dict, Optional  # indicates values can be None

# Local service imports for fallback mode (when the API isn't used)
from src.config import settings  # default API URL and engine settings
from src.request_parser import parse_request  # same parameter handling as the API
from src.search_engine import MovieSearchService, SearchBackendError  # direct engine access

PAGE_SIZE = 10  # movies per page in the UI

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="Movie Search", layout="wide")  # wide layout

# Main page title
st.title("🎬 Movie Catalog Search")  # friendly header


# Cache the local service so we only create the client once per session
@st.cache_resource(show_spinner=False)
def init_local_engine() -> Optional[MovieSearchService]:
	"""Create a MovieSearchService talking to Elasticsearch directly."""
	engine = MovieSearchService.from_settings(settings)
	if not engine.ping():
		st.error(f"Elasticsearch not reachable at {settings.elasticsearch_url}")
		return None
	return engine


def fetch_facets(api_url: str, engine: Optional[MovieSearchService]) -> Dict[str, Any]:
	"""Catalog-wide facets, used to fill the filter widgets."""
	if engine is not None:
		return engine.get_facets().to_dict()
	resp = requests.get(f"{api_url}/facets", timeout=30)
	resp.raise_for_status()
	return resp.json()["data"]["facets"]


def fetch_movies(api_url: str, engine: Optional[MovieSearchService], params: Dict[str, Any]) -> Dict[str, Any]:
	"""Run one search and return the 'data' part of the envelope."""
	if engine is not None:
		return engine.search(parse_request(params)).to_dict()
	resp = requests.get(f"{api_url}/movies", params=params, timeout=60)
	payload = resp.json()
	if payload.get("status") != "success":
		raise RuntimeError(payload.get("data", {}).get("message", "search failed"))
	return payload["data"]


def bounds(buckets, default_low: float, default_high: float):
	"""Slider range from histogram facet keys."""
	keys = [float(b["key"]) for b in buckets if isinstance(b.get("key"), (int, float))]
	if not keys:
		return default_low, default_high
	return min(keys), max(keys) + 1


# Sidebar contains configuration controls
with st.sidebar:
	st.header("Settings")  # section label
	api_url = st.text_input("API URL", settings.api_url)  # where the API lives
	use_local = st.toggle("Query Elasticsearch directly", value=False, help="If enabled or API is unreachable, the app skips the API.")

# If not forcing local, check quickly whether the API is reachable
api_available = False  # default assumption
if not use_local:
	try:
		h = requests.get(f"{api_url}/health", timeout=3)  # ping API health endpoint
		api_available = h.ok  # True if server responded 200 OK
	except requests.RequestException:
		st.sidebar.info("API not reachable; will query Elasticsearch directly.")  # inform user

local_engine: Optional[MovieSearchService] = None  # placeholder
if use_local or not api_available:
	local_engine = init_local_engine()

try:
	catalog_facets = fetch_facets(api_url, local_engine)
except (requests.RequestException, SearchBackendError) as e:
	st.error(f"Could not load facets: {e}")
	st.stop()

# Filter widgets built from the catalog facets
with st.sidebar:
	st.header("Filters")
	country = st.selectbox("Country", [""] + [b["key"] for b in catalog_facets["country"]])
	language = st.selectbox("Language", [""] + [b["key"] for b in catalog_facets["language"]])
	genres = st.multiselect("Genres (any)", [b["key"] for b in catalog_facets["genre"]])
	year_keys = sorted({int(b["key"]) for b in catalog_facets["year"]}, reverse=True)
	year = st.selectbox("Year", [""] + [str(y) for y in year_keys])
	r_low, r_high = bounds(catalog_facets["rating"], 0.0, 10.0)
	rating = st.slider("Rating", min_value=r_low, max_value=r_high, value=(r_low, r_high), step=0.5)
	d_low, d_high = bounds(catalog_facets["duration"], 0.0, 5.0)
	duration = st.slider("Duration (hours)", min_value=d_low, max_value=d_high, value=(d_low, d_high), step=0.1)

# Main text input for free-text search
query = st.text_input("Search movies", placeholder="e.g., interstellar")
page = st.number_input("Page", min_value=1, value=1, step=1)

params: Dict[str, Any] = {"searchText": query, "country": country, "language": language, "year": year, "genre": genres, "page": int(page) - 1, "limit": PAGE_SIZE}
# Only send range bounds the user actually moved
if rating != (r_low, r_high):
	params["ratingMin"], params["ratingMax"] = rating
if duration != (d_low, d_high):
	params["durationMin"], params["durationMax"] = duration

with st.spinner("Searching..."):
	try:
		data = fetch_movies(api_url, local_engine, params)
	except (requests.RequestException, SearchBackendError, RuntimeError) as e:
		st.error(f"Search failed: {e}")
		st.stop()

st.success(f"Found {data['total']} movies in {data['searchDuration']} ms")
st.divider()

# Render each result as an image + details row
for i, movie in enumerate(data["movies"], start=int(page - 1) * PAGE_SIZE + 1):
	c1, c2 = st.columns([1, 4])  # small image column + large text column
	with c1:
		if movie.get("image"):
			st.image(movie["image"], width="stretch")  # poster
	with c2:
		st.subheader(f"{i}. {movie['title']} ({movie['year']})")  # title + year
		st.caption(f"Rating: {movie['rating']} | Votes: {movie['votes']} | Duration: {movie['duration']} h")
		st.write(f"Genres: {', '.join(movie['genre'])}")
		if movie.get("directors"):
			st.write(f"Directors: {', '.join(movie['directors'])}")
		st.write(f"Actors: {', '.join(movie['actors'][:5])}")
		if movie.get("description"):
			st.write(movie["description"])
		if movie.get("imdbUrl"):
			st.markdown(f"[IMDb]({movie['imdbUrl']})")
	st.divider()

# Facet counts for the current result set
with st.expander("Facets for this search"):
	for name, buckets in data["facets"].items():
		st.write(f"**{name}**: " + ", ".join(f"{b['key']} ({b['count']})" for b in buckets[:15]))

# Show a footer indicator of current mode
st.sidebar.markdown("---")  # separator
if local_engine is not None:
	st.sidebar.caption("Mode: direct Elasticsearch")  # mode label
else:
	st.sidebar.caption("Mode: API client (ensure uvicorn api:app --reload is running)")  # mode label
