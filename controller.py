# controller.py
from typing import Callable, List, Optional, Tuple, Union

from config import Config
from models import DiscoveryResult, Player, PlayerStatus, SessionState, View
from services import (DiscoveryService, InvidiousClient, Notifier,
                      SettingsStore, extract_video_id, hostname)

AUTO = "auto"


class SessionController:
    """Owns the session state and runs every user-facing operation against it.

    Each operation snapshots the active backend when it starts, so a
    backend swap while a request is in flight does not affect it.
    """
    def __init__(self, config: Config, discovery: DiscoveryService, client: InvidiousClient,
                 settings: SettingsStore, notifier: Notifier,
                 log: Optional[Callable[[str], None]] = None):
        self.config = config
        self.discovery = discovery
        self.client = client
        self.settings = settings
        self.notifier = notifier
        self.log = log or (lambda message: None)
        self.on_change: Callable[[], None] = lambda: None
        self.state = SessionState()
        self._next_player_id = 1

    def load_preferences(self) -> None:
        self.state.xframe = self.settings.get_flag(self.config.XFRAME_KEY)
        self.state.optimized = self.settings.get_flag(self.config.OPTIMIZED_KEY)

    # --- Discovery ---
    async def discover(self) -> DiscoveryResult:
        self.state.status = "Finding best server..."
        self.on_change()
        result = await self.discovery.discover()
        self.state.active_backend = result.selected
        self.state.status = result.status
        if result.fallback:
            self.log("[yellow]⚠️ No mirror answered, using the direct no-cookie embed.[/yellow]")
        else:
            self.log(f"[green]✅ {result.status}[/green]")
        self.on_change()
        return result

    def backend_choices(self) -> List[Tuple[str, str]]:
        return [("Auto", AUTO)] + [(hostname(url), url) for url in self.discovery.candidates]

    @property
    def selected_choice(self) -> str:
        return self.state.active_backend or AUTO

    async def select_backend(self, choice: str) -> None:
        """Re-runs discovery for "auto", otherwise trusts the chosen mirror without probing."""
        if choice == AUTO:
            await self.discover()
            return
        if choice not in self.discovery.candidates:
            self.notifier.notify(f"Unknown backend: {choice}")
            return
        self.state.active_backend = choice
        self.state.status = f"Manual: {hostname(choice)}"
        self.log(f"🔧 Backend set to {choice}.")
        self.on_change()

    # --- Playback ---
    def embed_url(self, video_id: str, backend: Optional[str]) -> str:
        if backend:
            return f"{backend}/embed/{video_id}?autoplay=1"
        return self.config.FALLBACK_EMBED.format(video_id=video_id)

    async def launch_video(self, raw: str) -> Optional[Player]:
        video_id = extract_video_id(raw)
        if not video_id:
            self.notifier.notify("Invalid URL")
            return None

        backend = self.state.active_backend
        player = Player(
            player_id=self._next_player_id,
            video_id=video_id,
            title=self.config.DEFAULT_TITLE,
            src=self.embed_url(video_id, backend),
            xframe=self.state.xframe,
        )
        self._next_player_id += 1
        self.state.players.insert(0, player)

        if not backend:
            player.status = PlayerStatus.READY
            self.on_change()
            return player

        player.status = PlayerStatus.METADATA_PENDING
        self.on_change()
        title, error_details = await self.client.fetch_title(backend, video_id)
        if player.status is PlayerStatus.REMOVED:
            return player
        if error_details:
            self.log(f"[yellow]⚠️ Metadata fetch failed for {video_id}.[/yellow]")
            self.log(f"[dim]{error_details}[/dim]")
        else:
            player.title = title
        player.status = PlayerStatus.READY
        self.on_change()
        return player

    def remove_player(self, player_id: int) -> bool:
        player = next((p for p in self.state.players if p.player_id == player_id), None)
        if player is None:
            return False
        player.status = PlayerStatus.REMOVED
        self.state.players.remove(player)
        self.on_change()
        return True

    # --- Search ---
    async def search(self, query: str) -> None:
        backend = self.state.active_backend
        if not backend:
            self.notifier.notify("No Invidious Instance Connected")
            return

        self.state.search_generation += 1
        generation = self.state.search_generation
        self.log(f"🔎 Searching for '{query}'...")
        results, error_details = await self.client.search(backend, query)
        if generation != self.state.search_generation:
            self.log(f"[dim]Discarded stale results for '{query}'.[/dim]")
            return

        if error_details:
            self.state.results = []
            self.state.search_failed = True
            self.log("[red]❌ An error occurred during search.[/red]")
            self.log(f"[dim]{error_details}[/dim]")
        else:
            self.state.results = results
            self.state.search_failed = False
            if not results:
                self.log(f"🤷 No videos found for '{query}'.")
            else:
                self.log(f"🎬 Found {len(results)} results for '{query}'.")
        self.on_change()

    async def open_result(self, video_id: str) -> Optional[Player]:
        self.switch_view(View.HOME)
        return await self.launch_video(video_id)

    # --- Views ---
    def switch_view(self, view_id: Union[View, str]) -> bool:
        """Activates a view; an unknown id is logged and ignored."""
        try:
            view = View(view_id)
        except ValueError:
            self.log(f"[yellow]⚠️ Unknown view '{view_id}'.[/yellow]")
            return False
        self.state.current_view = view
        self.on_change()
        return True

    # --- Preferences ---
    def toggle_xframe(self) -> bool:
        self.state.xframe = self.settings.toggle_flag(self.config.XFRAME_KEY)
        self.notifier.notify(f"X-Frame Proxy {'Enabled' if self.state.xframe else 'Disabled'}")
        self.on_change()
        return self.state.xframe

    def toggle_optimized(self) -> bool:
        self.state.optimized = self.settings.toggle_flag(self.config.OPTIMIZED_KEY)
        self.on_change()
        return self.state.optimized
