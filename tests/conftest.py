import httpx
import pytest

from config import Config
from controller import SessionController
from services import DiscoveryService, InvidiousClient, Notifier, SettingsStore

MIRRORS = ("https://a.example", "https://b.example", "https://c.example")


class Harness:
    """A controller wired to a fake network, with everything it reports captured."""
    def __init__(self, handler, db_path, candidates=MIRRORS, timeout=0.3):
        self.requests = []

        async def recording(request):
            self.requests.append(request)
            result = handler(request)
            if not isinstance(result, httpx.Response):
                result = await result
            return result

        self.config = Config(INSTANCES=tuple(candidates), PROBE_TIMEOUT=timeout)
        self.client = InvidiousClient(transport=httpx.MockTransport(recording))
        self.settings = SettingsStore(str(db_path))
        self.toasts = []
        self.notifier = Notifier(lambda message, t: self.toasts.append(message), 3.0)
        self.logs = []
        self.discovery = DiscoveryService(candidates, self.client, timeout)
        self.controller = SessionController(
            self.config, self.discovery, self.client, self.settings, self.notifier,
            log=self.logs.append)

    def paths(self):
        return [r.url.path for r in self.requests]


@pytest.fixture
def harness(tmp_path):
    created = []

    def build(handler, **kwargs):
        h = Harness(handler, tmp_path / f"settings{len(created)}.db", **kwargs)
        created.append(h)
        return h

    yield build
    for h in created:
        h.settings.close()


def search_item(video_id, title="A video", author="Someone", thumbnails=None):
    return {
        "videoId": video_id,
        "title": title,
        "author": author,
        "videoThumbnails": thumbnails if thumbnails is not None else [],
    }
