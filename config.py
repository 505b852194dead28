# config.py
from dataclasses import dataclass
from typing import Tuple

@dataclass
class Config:
    """Holds all application configuration."""
    INSTANCES: Tuple[str, ...] = (
        "https://invidious.lunivers.trade",
        "https://invidious.ritoge.com",
        "https://yewtu.be",
        "https://vid.puffyan.us",
        "https://invidious.drgns.space",
    )
    PROBE_TIMEOUT: float = 3.0
    NOTIFY_TIMEOUT: float = 3.0
    FALLBACK_EMBED: str = "https://www.youtube-nocookie.com/embed/{video_id}?autoplay=1"
    DEFAULT_TITLE: str = "YouTube Video"
    SETTINGS_FILENAME: str = "tubemirror_settings.db"
    XFRAME_KEY: str = "xframe"
    OPTIMIZED_KEY: str = "optimized"
    CANDIDATES_FILENAME: str = "data/candidates.txt"
    VALID_FILENAME: str = "data/valid.json"
    VALIDATE_TIMEOUT: float = 5.0
