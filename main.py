# main.py
try:
    import pyperclip
except ImportError:
    pyperclip = None

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import (Button, ContentSwitcher, Footer, Header, Input,
                             Select)

from config import Config
from controller import AUTO, SessionController
from services import DiscoveryService, InvidiousClient, Notifier, SettingsStore
from ui import (LaunchControls, LogPane, NavBar, PlayerCard, PlayerGrid,
                ResultsDisplay, SearchControls, SettingsPane, StatusBar)

class TubeMirrorApp(App):
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("c", "copy_link", "Copy Link"),
        ("r", "rediscover", "Find Server"),
        ("1", "switch_view('home')", "Home"),
        ("2", "switch_view('search')", "Search"),
        ("3", "switch_view('settings')", "Settings"),
    ]
    CSS_PATH = "tube_mirror.css"

    def __init__(self, controller: SessionController, config: Config):
        super().__init__()
        self.controller = controller
        self.config = config
        self._shown_results = None

    def compose(self) -> ComposeResult:
        state = self.controller.state
        yield Header()
        with Horizontal(id="top-bar"):
            yield NavBar(id="nav")
            yield StatusBar(id="backend-status")
            yield Button("Find Server", id="find-btn")
            yield Select(self.controller.backend_choices(), value=AUTO,
                         allow_blank=False, id="backend-select")
        with ContentSwitcher(initial="view-home", id="views"):
            with Vertical(id="view-home", classes="spa-section"):
                yield LaunchControls()
                yield PlayerGrid(id="video-grid")
            with Vertical(id="view-search", classes="spa-section"):
                yield SearchControls()
                yield ResultsDisplay(id="search-results")
            with Vertical(id="view-settings", classes="spa-section"):
                yield SettingsPane(state.xframe, state.optimized, id="settings-pane")
        yield LogPane(id="log", wrap=True, highlight=True, markup=True)
        yield Footer()

    def on_mount(self) -> None:
        log = self.query_one(LogPane)
        self.controller.log = log.add_message
        self.controller.notifier.sink = lambda message, timeout: self.notify(message, timeout=timeout)
        self.controller.on_change = self.sync_state
        self.query_one("#video-link", Input).focus()

        if pyperclip:
            log.add_message("[green]✅ Clipboard found.[/green]")
        else:
            log.add_message("[yellow]⚠️ 'pyperclip' not installed.[/yellow]")

        self.sync_state()
        self.run_worker(self.controller.discover(), group="discovery_worker", exclusive=True)

    def sync_state(self) -> None:
        """Pushes the controller's session state to the widgets."""
        state = self.controller.state
        self.query_one(StatusBar).update_status(state.status, state.active_backend is None)
        select = self.query_one("#backend-select", Select)
        if select.value != self.controller.selected_choice:
            select.value = self.controller.selected_choice
        self.query_one(PlayerGrid).sync_players(state.players)
        if self._shown_results != (id(state.results), state.search_failed):
            self._shown_results = (id(state.results), state.search_failed)
            self.query_one(ResultsDisplay).update_results(state.results, state.search_failed)
        self.query_one(ContentSwitcher).current = f"view-{state.current_view.value}"
        self.query_one(NavBar).highlight(state.current_view)
        self.screen.set_class(state.optimized, "optimized")
        self.animation_level = "none" if state.optimized else "full"

    # --- Actions ---
    def action_copy_link(self) -> None:
        log = self.query_one(LogPane)
        if not pyperclip:
            log.add_message("[red]❌ 'pyperclip' not installed.[/red]")
            return
        players = self.controller.state.players
        if players:
            pyperclip.copy(players[0].src)
            log.add_message(f"📋 Copied link for '[b]{players[0].title}[/b]'.")
        else:
            log.add_message("[yellow]⚠️ No video launched.[/yellow]")

    def action_rediscover(self) -> None:
        self.run_worker(self.controller.discover(), group="discovery_worker", exclusive=True)

    def action_switch_view(self, view: str) -> None:
        self.controller.switch_view(view)

    # --- Message Handlers ---
    def on_nav_bar_view_requested(self, message: NavBar.ViewRequested) -> None:
        self.controller.switch_view(message.view)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "find-btn":
            self.action_rediscover()

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id != "backend-select" or event.value == self.controller.selected_choice:
            return
        self.run_worker(self.controller.select_backend(str(event.value)),
                        group="discovery_worker", exclusive=True)

    def on_launch_controls_launch_requested(self, message: LaunchControls.LaunchRequested) -> None:
        self.run_worker(self.controller.launch_video(message.raw), group="player_worker")

    def on_player_card_remove_requested(self, message: PlayerCard.RemoveRequested) -> None:
        self.controller.remove_player(message.player_id)

    def on_player_card_open_requested(self, message: PlayerCard.OpenRequested) -> None:
        self.open_url(message.url)

    def on_search_controls_search_requested(self, message: SearchControls.SearchRequested) -> None:
        self.workers.cancel_group(self, "search_worker")
        self.run_worker(self.controller.search(message.query),
                        group="search_worker", exclusive=True)

    def on_results_display_row_selected(self, message: ResultsDisplay.RowSelected) -> None:
        self.run_worker(self.controller.open_result(message.key), group="player_worker")

    def on_settings_pane_toggled(self, message: SettingsPane.Toggled) -> None:
        state = self.controller.state
        if message.key == "xframe" and message.value != state.xframe:
            self.controller.toggle_xframe()
        elif message.key == "optimized" and message.value != state.optimized:
            self.controller.toggle_optimized()


def run() -> None:
    # --- Application Entry Point ---
    # Services are built here and injected into the controller and app.
    app_config = Config()
    settings = SettingsStore(app_config.SETTINGS_FILENAME)
    client = InvidiousClient()
    discovery = DiscoveryService(app_config.INSTANCES, client, app_config.PROBE_TIMEOUT)
    notifier = Notifier(lambda message, timeout: None, app_config.NOTIFY_TIMEOUT)

    controller = SessionController(app_config, discovery, client, settings, notifier)
    controller.load_preferences()
    app = TubeMirrorApp(controller, app_config)

    try:
        app.run()
    finally:
        settings.close()


if __name__ == "__main__":
    run()
