# ui.py
from typing import Callable, Optional, Sequence

from textual.app import ComposeResult
from textual.message import Message
from textual.widgets import (Button, DataTable, Input, Label, Markdown, RichLog,
                             Static)

from models import SearchResultItem, SearchState, SearchStatus

PLAYING_MARK = "■"
STOPPED_MARK = "▶"
NO_PREVIEW_MARK = "·"

class SearchControls(Static):
    """Widget for the search input and button."""
    class SearchRequested(Message):
        def __init__(self, query: str) -> None:
            self.query = query
            super().__init__()

    def compose(self) -> ComposeResult:
        yield Label("Search the iTunes catalog:")
        yield Input(placeholder="e.g., Beatles", id="search-input")
        yield Button("Search", id="search-button", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.post_search_message()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.post_search_message()

    def post_search_message(self) -> None:
        query = self.query_one(Input).value.strip()
        if query:
            self.post_message(self.SearchRequested(query))


class StatusLine(Static):
    """One line describing where the current search stands."""
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.status_text = ""

    def show_state(self, state: SearchState) -> None:
        self.set_class(state.status == SearchStatus.ERROR, "error")
        if state.status == SearchStatus.IDLE:
            text = "Enter a search term to begin."
        elif state.status == SearchStatus.LOADING:
            text = "Loading..."
        elif state.status == SearchStatus.ERROR:
            text = state.error_message or "Error"
        elif not state.items:
            text = "No results found"
        else:
            text = f"Found {len(state.items)} results for '{state.query}'."
        self.status_text = text
        self.update(text)


class DetailsPane(Static):
    """Widget to display details of the highlighted result."""
    def on_mount(self) -> None:
        self.update_details(None)

    def update_details(self, item: Optional[SearchResultItem]) -> None:
        if item:
            preview = f"`{item.preview_url}`" if item.has_preview else "*No preview available*"
            content = (
                f"## {item.track_name}\n\n"
                f"- **Artist**: {item.artist_name}\n"
                f"- **Kind**: {item.kind}\n"
                f"- **Genre**: {item.genre_name}\n"
                f"- **Artwork**: `{item.artwork_url}`\n"
                f"- **Preview**: {preview}"
            )
        else:
            content = "## Details\n\n*Highlight a result to see its details.*"
        self.query_one(Markdown).update(content)

    def compose(self) -> ComposeResult:
        yield Markdown()


class ResultsDisplay(DataTable):
    """Widget for the results table. Rows are keyed by their position."""
    class RowSelected(Message):
        def __init__(self, row_index: int) -> None:
            self.row_index = row_index
            super().__init__()

    class RowHighlighted(Message):
        def __init__(self, row_index: Optional[int]) -> None:
            self.row_index = row_index
            super().__init__()

    def on_mount(self) -> None:
        self.add_columns("", "Artist", "Kind", "Track", "Genre")
        self.cursor_type = "row"

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value is not None:
            self.post_message(self.RowSelected(int(event.row_key.value)))

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        key = event.row_key.value
        self.post_message(self.RowHighlighted(int(key) if key is not None else None))

    def update_results(self, items: Sequence[SearchResultItem], is_playing: Callable[[str], bool]) -> None:
        self.clear()
        for index, item in enumerate(items):
            self.add_row(
                _play_mark(item, is_playing),
                item.artist_name,
                item.kind,
                item.track_name,
                item.genre_name,
                key=str(index),
            )

    def refresh_play_marks(self, items: Sequence[SearchResultItem], is_playing: Callable[[str], bool]) -> None:
        column_key = self.ordered_columns[0].key
        for index, item in enumerate(items):
            self.update_cell(str(index), column_key, _play_mark(item, is_playing))


def _play_mark(item: SearchResultItem, is_playing: Callable[[str], bool]) -> str:
    if not item.has_preview:
        return NO_PREVIEW_MARK
    return PLAYING_MARK if is_playing(item.preview_url) else STOPPED_MARK


class LogPane(RichLog):
    """A dedicated widget for logging application events."""
    def add_message(self, message: str) -> None:
        self.write(message)
