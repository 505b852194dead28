# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

class View(str, Enum):
    HOME = "home"
    SEARCH = "search"
    SETTINGS = "settings"


class PlayerStatus(str, Enum):
    CREATED = "created"
    METADATA_PENDING = "metadata-pending"
    READY = "ready"
    REMOVED = "removed"


@dataclass
class SearchResult:
    """A data class to hold the details of a single video search result."""
    video_id: str
    title: str
    author: str
    thumbnail: str


@dataclass
class Player:
    """One embedded playback unit, independently removable."""
    player_id: int
    video_id: str
    title: str
    src: str
    xframe: bool = False
    status: PlayerStatus = PlayerStatus.CREATED


@dataclass
class DiscoveryResult:
    selected: Optional[str]
    status: str

    @property
    def fallback(self) -> bool:
        return self.selected is None


@dataclass
class Notification:
    message: str
    created: float


@dataclass
class SessionState:
    """A single object to hold the entire session state."""
    active_backend: Optional[str] = None
    xframe: bool = False
    optimized: bool = False
    current_view: View = View.HOME
    status: str = ""
    players: List[Player] = field(default_factory=list)
    results: List[SearchResult] = field(default_factory=list)
    search_failed: bool = False
    search_generation: int = 0
