# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

@dataclass(frozen=True)
class SearchResultItem:
    """A single display-ready search result. Built only by the result mapper."""
    kind: str
    artist_name: str
    track_name: str
    artwork_url: str
    genre_name: str
    preview_url: str

    @property
    def has_preview(self) -> bool:
        return bool(self.preview_url)

@dataclass(frozen=True)
class SearchResponse:
    """The raw result records of one response body."""
    results: List[Dict[str, Any]] = field(default_factory=list)

class SearchStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"

@dataclass(frozen=True)
class SearchState:
    """A snapshot of the search screen. Replaced wholesale on every transition."""
    query: str = ""
    status: SearchStatus = SearchStatus.IDLE
    items: Tuple[SearchResultItem, ...] = ()
    error_message: Optional[str] = None

@dataclass(frozen=True)
class PlaybackState:
    """What the preview player holds: either both fields or neither."""
    active_url: Optional[str] = None
    handle: Optional[Any] = None
