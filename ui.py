# ui.py
from typing import List

from rich.markup import escape
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.message import Message
from textual.widgets import (Button, DataTable, Input, Label, RichLog, Static,
                             Switch)

from models import Player, SearchResult, View

class NavBar(Static):
    """Buttons that switch between the main views."""
    class ViewRequested(Message):
        def __init__(self, view: str) -> None:
            self.view = view
            super().__init__()

    def compose(self) -> ComposeResult:
        for view in View:
            yield Button(view.value.title(), id=f"nav-{view.value}", classes="nav-btn")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_message(self.ViewRequested(event.button.id.removeprefix("nav-")))

    def highlight(self, view: View) -> None:
        for button in self.query(Button):
            button.set_class(button.id == f"nav-{view.value}", "active")


class StatusBar(Static):
    """Shows which backend is in use."""
    def update_status(self, text: str, fallback: bool) -> None:
        color = "yellow" if fallback else "green"
        self.update(f"[{color}]{text}[/{color}]" if text else "")


class LaunchControls(Static):
    """Widget for the video link input and launch button."""
    class LaunchRequested(Message):
        def __init__(self, raw: str) -> None:
            self.raw = raw
            super().__init__()

    def compose(self) -> ComposeResult:
        yield Label("Paste a video link or id:")
        yield Input(id="video-link")
        yield Button("Launch", variant="primary", id="launch-btn")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_launch_message()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.post_launch_message()

    def post_launch_message(self) -> None:
        field = self.query_one(Input)
        self.post_message(self.LaunchRequested(field.value))
        field.value = ""


class PlayerCard(Static):
    """One launched video: its title, embed source and controls."""
    class RemoveRequested(Message):
        def __init__(self, player_id: int) -> None:
            self.player_id = player_id
            super().__init__()

    class OpenRequested(Message):
        def __init__(self, url: str) -> None:
            self.url = url
            super().__init__()

    def __init__(self, player: Player) -> None:
        super().__init__(classes="video-wrapper")
        self.player = player

    def compose(self) -> ComposeResult:
        with Horizontal(classes="player-controls"):
            yield Label(self._title_text(), classes="player-title")
            yield Button("Open", classes="open-btn")
            yield Button("X", variant="error", classes="remove-btn")
        yield Label(self.player.src, markup=False, classes="player-src")

    def _title_text(self) -> str:
        tag = " [dim](x-frame)[/dim]" if self.player.xframe else ""
        return f"[b]{escape(self.player.title)}[/b]{tag}"

    def update_player(self, player: Player) -> None:
        self.player = player
        self.query_one(".player-title", Label).update(self._title_text())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.has_class("remove-btn"):
            self.post_message(self.RemoveRequested(self.player.player_id))
        else:
            self.post_message(self.OpenRequested(self.player.src))


class PlayerGrid(VerticalScroll):
    """Holds the player cards, most recent first."""
    def sync_players(self, players: List[Player]) -> None:
        cards = {card.player.player_id: card for card in self.query(PlayerCard)}
        wanted = {p.player_id for p in players}
        for player_id, card in cards.items():
            if player_id not in wanted:
                card.remove()
        for player in reversed(players):
            card = cards.get(player.player_id)
            if card:
                card.update_player(player)
            elif self.children:
                self.mount(PlayerCard(player), before=0)
            else:
                self.mount(PlayerCard(player))


class SearchControls(Static):
    """Widget for the search input and button."""
    class SearchRequested(Message):
        def __init__(self, query: str) -> None:
            self.query = query
            super().__init__()

    def compose(self) -> ComposeResult:
        yield Label("Enter search terms:")
        yield Input(id="search-input")
        yield Button("Search", variant="primary", id="search-btn")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_search_message()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.post_search_message()

    def post_search_message(self) -> None:
        query = self.query_one(Input).value.strip()
        if query:
            self.post_message(self.SearchRequested(query))


class ResultsDisplay(DataTable):
    """Widget for the search results table."""
    class RowSelected(Message):
        def __init__(self, key: str) -> None:
            self.key = key
            super().__init__()

    def on_mount(self) -> None:
        self.add_columns("Title", "Author", "Thumbnail")
        self.cursor_type = "row"

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        event.stop()
        if event.row_key.value is not None:
            self.post_message(self.RowSelected(event.row_key.value))

    def update_results(self, results: List[SearchResult], failed: bool) -> None:
        self.clear()
        if failed:
            self.add_row("Search Failed.", "", "")
            return
        for r in results:
            self.add_row(Text(r.title), Text(r.author), Text(r.thumbnail), key=r.video_id)
        self.focus()


class SettingsPane(Static):
    """Switches for the persisted preference flags."""
    class Toggled(Message):
        def __init__(self, key: str, value: bool) -> None:
            self.key = key
            self.value = value
            super().__init__()

    def __init__(self, xframe: bool, optimized: bool, **kwargs) -> None:
        super().__init__(**kwargs)
        self.xframe = xframe
        self.optimized = optimized

    def compose(self) -> ComposeResult:
        with Horizontal(classes="setting"):
            yield Switch(value=self.xframe, id="xframe-toggle")
            yield Label("X-Frame proxy for new players")
        with Horizontal(classes="setting"):
            yield Switch(value=self.optimized, id="opt-toggle")
            yield Label("Optimized mode (reduced visual effects)")

    def on_switch_changed(self, event: Switch.Changed) -> None:
        event.stop()
        key = "xframe" if event.switch.id == "xframe-toggle" else "optimized"
        self.post_message(self.Toggled(key, event.value))


class LogPane(RichLog):
    """A dedicated widget for logging application events."""
    def add_message(self, message: str) -> None:
        self.write(message)
