import asyncio

import httpx
from textual.widgets import ContentSwitcher, Input

from conftest import search_item
from main import TubeMirrorApp
from ui import PlayerCard, ResultsDisplay


def _offline(request):
    return httpx.Response(503)


def test_launching_from_the_ui_adds_a_player_card(harness):
    h = harness(_offline)
    app = TubeMirrorApp(h.controller, h.config)

    async def scenario():
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.query_one("#video-link", Input).value = "https://youtu.be/dQw4w9WgXcQ"
            await pilot.press("enter")
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()
            cards = list(app.query(PlayerCard))
            return [card.player.src for card in cards]

    sources = asyncio.run(scenario())

    assert sources == ["https://www.youtube-nocookie.com/embed/dQw4w9WgXcQ?autoplay=1"]
    assert h.controller.state.active_backend is None


def test_nav_buttons_switch_the_visible_section(harness):
    h = harness(_offline)
    app = TubeMirrorApp(h.controller, h.config)

    async def scenario():
        async with app.run_test() as pilot:
            await pilot.click("#nav-search")
            await pilot.pause()
            current = app.query_one(ContentSwitcher).current
            await pilot.click("#nav-settings")
            await pilot.pause()
            return current, app.query_one(ContentSwitcher).current

    first, second = asyncio.run(scenario())

    assert first == "view-search"
    assert second == "view-settings"
    assert h.controller.state.current_view.value == "settings"


def test_repeated_ids_in_search_results_render_once(harness):
    def handler(request):
        if request.url.path == "/api/v1/search":
            return httpx.Response(200, json=[
                search_item("aaaaaaaaaaa"), search_item("aaaaaaaaaaa", title="dup")])
        return httpx.Response(503)

    h = harness(handler)
    app = TubeMirrorApp(h.controller, h.config)

    async def scenario():
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            h.controller.state.active_backend = "https://a.example"
            await h.controller.search("cats")
            await pilot.pause()
            return app.query_one(ResultsDisplay).row_count

    assert asyncio.run(scenario()) == 1


def test_find_server_button_reruns_discovery_in_fallback(harness):
    h = harness(_offline)
    app = TubeMirrorApp(h.controller, h.config)

    async def scenario():
        async with app.run_test(size=(160, 40)) as pilot:
            await app.workers.wait_for_complete()
            probes_before = len(h.requests)
            await pilot.click("#find-btn")
            await pilot.pause()
            await app.workers.wait_for_complete()
            return probes_before, len(h.requests)

    before, after = asyncio.run(scenario())

    assert before == 3
    assert after == 6
    assert h.controller.state.active_backend is None
