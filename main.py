# main.py
import logging
import sys

try:
    import pyperclip
except ImportError:
    pyperclip = None

import httpx
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Footer, Header, Input

from config import Config
from log import configure_logging, logger
from models import SearchResultItem, SearchState, SearchStatus
from player import CommandPlaybackBackend, PreviewPlayer
from services import SearchClient, SearchController
from ui import DetailsPane, LogPane, ResultsDisplay, SearchControls, StatusLine

class ITunesPreviewApp(App):
    BINDINGS = [
        ("d", "toggle_dark", "Toggle dark mode"),
        ("q", "quit", "Quit"),
        ("s", "stop_preview", "Stop Preview"),
        ("c", "copy_preview", "Copy Preview Link"),
    ]
    CSS_PATH = "itunes_preview.tcss"

    search_state = reactive(SearchState(), always_update=True, init=False)

    def __init__(self, controller: SearchController, player: PreviewPlayer, config: Config):
        super().__init__()
        self.controller = controller
        self.player = player
        self.config = config
        self.highlighted: SearchResultItem | None = None
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="main-container"):
            with Horizontal(id="app-grid"):
                with Vertical(id="left-pane"):
                    yield SearchControls()
                    yield StatusLine(id="status")
                    yield ResultsDisplay(id="results-table")
                with Vertical(id="right-pane"):
                    yield DetailsPane(id="details-pane")
            yield LogPane(id="log", wrap=True, highlight=True, markup=True)
        yield Footer()

    def on_mount(self) -> None:
        self._unsubscribe = self.controller.subscribe(self._on_search_state)
        self.search_state = self.controller.state
        self.query_one(Input).focus()
        log = self.query_one(LogPane)
        backend = self.player.backend
        if getattr(backend, "is_available", True):
            log.add_message("[green]✅ Preview player ready.[/green]")
        else:
            log.add_message(f"[yellow]⚠️ '{self.config.PLAYER_COMMAND}' not found, previews will not play.[/yellow]")
        if not pyperclip:
            log.add_message("[yellow]⚠️ 'pyperclip' not installed.[/yellow]")
        self.set_interval(self.config.PLAYBACK_POLL_SECONDS, self._check_preview_end)

    async def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
        self.player.dispose()
        await self.controller.aclose()

    def _on_search_state(self, state: SearchState) -> None:
        self.search_state = state

    def watch_search_state(self, old_state: SearchState, new_state: SearchState) -> None:
        """Pushes every new snapshot to the widgets that render it."""
        self.query_one(StatusLine).show_state(new_state)
        if old_state.items != new_state.items or old_state.status != new_state.status:
            self.query_one(ResultsDisplay).update_results(new_state.items, self.player.is_playing)
            self.highlighted = None
            self.query_one(DetailsPane).update_details(None)

    def _refresh_play_marks(self) -> None:
        self.query_one(ResultsDisplay).refresh_play_marks(self.search_state.items, self.player.is_playing)

    def _check_preview_end(self) -> None:
        if self.player.poll():
            if self.player.last_error:
                self.query_one(LogPane).add_message(f"[red]❌ Preview failed: {self.player.last_error.reason}[/red]")
            self._refresh_play_marks()

    def action_stop_preview(self) -> None:
        if self.player.active_url:
            self.player.stop()
            self.query_one(LogPane).add_message("⏹ Preview stopped.")
            self._refresh_play_marks()

    def action_copy_preview(self) -> None:
        log = self.query_one(LogPane)
        if not pyperclip:
            log.add_message("[red]❌ 'pyperclip' not installed.[/red]")
            return
        if self.highlighted and self.highlighted.has_preview:
            pyperclip.copy(self.highlighted.preview_url)
            log.add_message(f"📋 Copied preview link for '[b]{self.highlighted.track_name}[/b]'.")
        else:
            log.add_message("[yellow]⚠️ No preview selected.[/yellow]")

    def on_search_controls_search_requested(self, message: SearchControls.SearchRequested) -> None:
        self.query_one(LogPane).add_message(f"🔎 Searching for '{message.query}'...")
        # Superseded searches finish in the background; the controller ignores their results.
        self.run_worker(self.perform_search(message.query), group="search_worker")

    def on_results_display_row_selected(self, message: ResultsDisplay.RowSelected) -> None:
        item = self._item_at(message.row_index)
        if item is None:
            return
        log = self.query_one(LogPane)
        if not item.has_preview:
            log.add_message(f"[yellow]⚠️ No preview available for '{item.track_name}'.[/yellow]")
            return
        self.player.play(item.preview_url)
        if self.player.last_error:
            log.add_message(f"[red]❌ Could not play '{item.track_name}': {self.player.last_error.reason}[/red]")
        elif self.player.is_playing(item.preview_url):
            log.add_message(f"🎧 Playing preview of '[b]{item.track_name}[/b]'.")
        elif self.player.active_url is None:
            log.add_message(f"⏹ Stopped '[b]{item.track_name}[/b]'.")
        self._refresh_play_marks()

    def on_results_display_row_highlighted(self, message: ResultsDisplay.RowHighlighted) -> None:
        self.highlighted = self._item_at(message.row_index)
        self.query_one(DetailsPane).update_details(self.highlighted)

    def _item_at(self, index: int | None) -> SearchResultItem | None:
        items = self.search_state.items
        if index is None or not 0 <= index < len(items):
            return None
        return items[index]

    async def perform_search(self, query: str) -> None:
        await self.controller.submit(query)
        state = self.controller.state
        if state.query != query or state.status == SearchStatus.LOADING:
            return
        log = self.query_one(LogPane)
        if state.error_message:
            log.add_message(f"[red]❌ {state.error_message}[/red]")
        elif not state.items:
            log.add_message(f"🤷 No music found for '{query}'.")
        else:
            log.add_message(f"🎶 Found {len(state.items)} results for '{query}'.")


def main() -> None:
    app_config = Config()
    configure_logging(logging.getLevelName(app_config.LOG_LEVEL), app_config.LOG_FILE)
    logger.info("app.starting")

    http_client = httpx.AsyncClient(timeout=app_config.REQUEST_TIMEOUT_SECONDS)
    search_client = SearchClient(http_client, app_config.SEARCH_ENDPOINT, app_config.SEARCH_RESULT_LIMIT)
    controller = SearchController(search_client)
    backend = CommandPlaybackBackend(app_config.PLAYER_COMMAND, app_config.PLAYER_ARGS)

    try:
        with PreviewPlayer(backend) as player:
            app = ITunesPreviewApp(controller, player, app_config)
            app.run()
    except Exception as e:
        logger.critical("app.fatal_error", error=repr(e), exc_info=True)
        print(f"\n❌ Unexpected error: {type(e).__name__}: {e}\n")
        print(f"Check {app_config.LOG_FILE} for more details.\n")
        sys.exit(1)
    logger.info("app.stopped")


if __name__ == "__main__":
    main()
