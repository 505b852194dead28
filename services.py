# services.py
import asyncio
import re
import sqlite3
import time
from collections import deque
from typing import (Awaitable, Callable, Deque, Iterable, List, Optional,
                    Tuple)
from urllib.parse import urlparse

import httpx

from models import DiscoveryResult, Notification, SearchResult

VIDEO_ID_PATTERN = re.compile(r"(?:youtu\.be/|youtube\.com/.*v=)([\w-]{11})")
BARE_ID_PATTERN = re.compile(r"^[\w-]{11}$")

FALLBACK_STATUS = "Using Fallback (YouTube-NoCookie)"


def extract_video_id(raw: str) -> Optional[str]:
    """Pulls the 11-character video id out of a short link, long link or bare id."""
    if not raw:
        return None
    text = raw.strip()
    if BARE_ID_PATTERN.match(text):
        return text
    match = VIDEO_ID_PATTERN.search(text)
    return match.group(1) if match else None


def hostname(url: str) -> str:
    return urlparse(url).hostname or url


class SettingsStore:
    """A service to persist the boolean preference flags in SQLite."""
    def __init__(self, db_name: str):
        self.db_name = db_name
        self.conn = sqlite3.connect(db_name)
        self.create_table()

    def create_table(self):
        """Creates the settings table if it doesn't exist."""
        with self.conn:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

    def get_flag(self, key: str) -> bool:
        row = self.conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return row is not None and row[0] == "true"

    def set_flag(self, key: str, value: bool) -> None:
        with self.conn:
            self.conn.execute(
                "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                (key, "true" if value else "false"),
            )

    def toggle_flag(self, key: str) -> bool:
        """Flips a flag, stores it and returns the new value."""
        value = not self.get_flag(key)
        self.set_flag(key, value)
        return value

    def close(self):
        self.conn.close()


class InvidiousClient:
    """A service to handle the HTTP API of a single mirror."""
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    def _client(self, timeout: Optional[float]) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self.transport)

    async def probe(self, endpoint: str, timeout: float) -> bool:
        """True only when the mirror answers its stats endpoint with a 2xx in time."""
        try:
            async with self._client(timeout) as client:
                resp = await asyncio.wait_for(client.get(f"{endpoint}/api/v1/stats"), timeout)
        except (httpx.HTTPError, asyncio.TimeoutError):
            return False
        return resp.is_success

    async def fetch_title(self, endpoint: str, video_id: str) -> Tuple[Optional[str], Optional[str]]:
        """Looks up a video's title, returning (title, error_details)."""
        try:
            async with self._client(None) as client:
                resp = await client.get(f"{endpoint}/api/v1/videos/{video_id}")
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            return None, f"{type(e).__name__}: {e}"
        title = data.get("title") if isinstance(data, dict) else None
        if not isinstance(title, str) or not title:
            return None, "Metadata response has no title"
        return title, None

    async def search(self, endpoint: str, query: str) -> Tuple[Optional[List[SearchResult]], Optional[str]]:
        """Performs a video search, returning (results, error_details)."""
        try:
            async with self._client(None) as client:
                resp = await client.get(
                    f"{endpoint}/api/v1/search", params={"q": query, "type": "video"})
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            return None, f"{type(e).__name__}: {e}"
        if not isinstance(data, list):
            return None, "Search response is not a list"

        unique_results: dict[str, SearchResult] = {}
        for item in data:
            parsed = self._parse_item(item)
            if parsed and parsed.video_id not in unique_results:
                unique_results[parsed.video_id] = parsed
        return list(unique_results.values()), None

    def _parse_item(self, item) -> Optional[SearchResult]:
        """Parses a single raw API item into our SearchResult data model."""
        if not isinstance(item, dict) or not item.get("videoId"):
            return None
        return SearchResult(
            video_id=str(item["videoId"]),
            title=str(item.get("title") or "N/A"),
            author=str(item.get("author") or "N/A"),
            thumbnail=pick_thumbnail(item.get("videoThumbnails")),
        )


def pick_thumbnail(thumbnails) -> str:
    """Prefers the "medium" variant, then the first one, then nothing."""
    if not thumbnails or not isinstance(thumbnails, list):
        return ""
    for thumb in thumbnails:
        if isinstance(thumb, dict) and thumb.get("quality") == "medium" and thumb.get("url"):
            return str(thumb["url"])
    first = thumbnails[0]
    return str(first.get("url") or "") if isinstance(first, dict) else ""


async def first_success(endpoints: Iterable[str], probe: Callable[[str], Awaitable[bool]]) -> Optional[str]:
    """Races probes and returns the first endpoint whose probe succeeds.

    None is the all-failed outcome. Probes still outstanding once a
    winner is known are cancelled and their results ignored.
    """
    order = list(endpoints)
    pending = {asyncio.ensure_future(probe(url)): url for url in order}
    try:
        while pending:
            done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in sorted(done, key=lambda t: order.index(pending[t])):
                url = pending.pop(task)
                if not task.cancelled() and task.exception() is None and task.result():
                    return url
        return None
    finally:
        for task in pending:
            task.cancel()


class DiscoveryService:
    """A service to pick a reachable mirror out of the candidate pool."""
    def __init__(self, candidates: Iterable[str], client: InvidiousClient, timeout: float):
        self.candidates = [c.rstrip("/") for c in candidates]
        self.client = client
        self.timeout = timeout

    async def discover(self) -> DiscoveryResult:
        winner = await first_success(
            self.candidates, lambda url: self.client.probe(url, self.timeout))
        if winner is None:
            return DiscoveryResult(selected=None, status=FALLBACK_STATUS)
        return DiscoveryResult(selected=winner, status=f"Connected: {hostname(winner)}")


class Notifier:
    """Keeps a FIFO stack of transient messages that expire after a fixed time."""
    def __init__(self, sink: Callable[[str, float], None], timeout: float,
                 clock: Callable[[], float] = time.monotonic):
        self.sink = sink
        self.timeout = timeout
        self.clock = clock
        self._active: Deque[Notification] = deque()

    def notify(self, message: str) -> None:
        self._prune()
        self._active.append(Notification(message=message, created=self.clock()))
        self.sink(message, self.timeout)

    @property
    def active(self) -> List[str]:
        self._prune()
        return [n.message for n in self._active]

    def _prune(self) -> None:
        now = self.clock()
        while self._active and now - self._active[0].created >= self.timeout:
            self._active.popleft()
