# services.py
from typing import Callable, List, Optional, Tuple

import httpx

from errors import HttpError, NetworkError, TransportError
from log import logger
from models import SearchResponse, SearchResultItem, SearchState, SearchStatus

UNKNOWN_KIND = "Unknown"
UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_TRACK = "Unknown Track"
UNKNOWN_GENRE = "Unknown Genre"
PLACEHOLDER_ARTWORK = "https://via.placeholder.com/60"
NO_PREVIEW = ""

StateListener = Callable[[SearchState], None]


class SearchClient:
    """A service to handle interactions with the iTunes Search API."""
    def __init__(self, http_client: httpx.AsyncClient, endpoint: str, limit: int):
        self._client = http_client
        self.endpoint = endpoint
        self.limit = limit

    async def search(self, term: str) -> Tuple[Optional[SearchResponse], Optional[NetworkError]]:
        """Performs one GET for `term`, returning the response or the failure."""
        params = {"term": term, "limit": self.limit}
        try:
            response = await self._client.get(self.endpoint, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("search.failed", term=term, error=repr(exc))
            return None, TransportError(str(exc) or type(exc).__name__)

        logger.info("search.request", term=term, status=response.status_code)
        if not response.is_success:
            return None, HttpError(response.status_code, response.reason_phrase)

        try:
            body = response.json()
        except ValueError as exc:
            logger.warning("search.malformed_body", term=term, error=str(exc))
            return None, TransportError("Malformed response body")

        if not isinstance(body, dict):
            return None, TransportError("Malformed response body")
        results = body.get("results")
        if results is None:
            results = []
        if not isinstance(results, list):
            return None, TransportError("Malformed response body")
        return SearchResponse(results=results), None

    async def aclose(self) -> None:
        await self._client.aclose()


def map_results(response: SearchResponse) -> List[SearchResultItem]:
    """Maps every raw record to a SearchResultItem, skipping non-object records."""
    return [_parse_item(item) for item in response.results if isinstance(item, dict)]


def _text(item: dict, key: str, fallback: str) -> str:
    value = item.get(key)
    return value if isinstance(value, str) else fallback


def _parse_item(item: dict) -> SearchResultItem:
    """Parses a single raw API item into our SearchResultItem data model."""
    return SearchResultItem(
        kind=_text(item, "kind", UNKNOWN_KIND),
        artist_name=_text(item, "artistName", UNKNOWN_ARTIST),
        track_name=_text(item, "trackName", UNKNOWN_TRACK),
        artwork_url=_text(item, "artworkUrl60", PLACEHOLDER_ARTWORK),
        genre_name=_text(item, "primaryGenreName", UNKNOWN_GENRE),
        preview_url=_text(item, "previewUrl", NO_PREVIEW),
    )


class SearchController:
    """Owns the search state and publishes a new snapshot on every transition.

    Only the most recently submitted search may change the state: each submit
    takes a sequence number, and a response whose number is no longer the
    latest is dropped without a transition.
    """
    def __init__(self, client: SearchClient):
        self._client = client
        self._state = SearchState()
        self._listeners: List[StateListener] = []
        self._sequence = 0

    @property
    def state(self) -> SearchState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def submit(self, query: str) -> None:
        query = query.strip()
        if not query:
            return

        self._sequence += 1
        token = self._sequence
        self._publish(SearchState(query=query, status=SearchStatus.LOADING))

        try:
            response, error = await self._client.search(query)
        except Exception as exc:
            logger.exception("search.unexpected_error", query=query)
            response, error = None, TransportError(str(exc) or type(exc).__name__)

        if token != self._sequence:
            logger.debug("search.stale_response_discarded", query=query, token=token, latest=self._sequence)
            return

        if error is not None:
            self._publish(SearchState(
                query=query,
                status=SearchStatus.ERROR,
                error_message=f"Error: {error.describe()}",
            ))
            return

        items = tuple(map_results(response))
        logger.info("search.completed", query=query, count=len(items))
        self._publish(SearchState(query=query, status=SearchStatus.SUCCESS, items=items))

    async def aclose(self) -> None:
        await self._client.aclose()

    def _publish(self, state: SearchState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
