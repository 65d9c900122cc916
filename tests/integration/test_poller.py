"""Integration tests for the polling client against the real app and a faked network."""

import asyncio

import httpx
import pytest

from progression.client import ProgressApiClient, ProgressPoller, StaticHostContext
from progression.errors import TransientIOError, ValidationError
from progression.main import app

CHAIN = ["Megan", "David", "Linda"]
LAUNCH_URLS = {name: f"https://launcher.example.com/{name.lower()}" for name in CHAIN}


@pytest.fixture
async def api(client):
    """API client talking to the app in-process (client fixture wires the test db)."""
    api = ProgressApiClient("http://test", timeout=5.0, transport=httpx.ASGITransport(app=app))
    yield api
    await api.aclose()


@pytest.fixture
def unlocked():
    return []


@pytest.fixture
def make_poller(unlocked):
    def _make(api, learner_id="learner-1", **kwargs):
        kwargs.setdefault("interval", 0.01)
        return ProgressPoller(
            api,
            StaticHostContext(learner_id),
            chain=CHAIN,
            launch_urls=LAUNCH_URLS,
            on_unlock=unlocked.append,
            **kwargs,
        )

    return _make


def _metrics(overall, total_calls):
    return {
        "overall_performance": overall,
        "engagement": overall,
        "objection_handling": overall,
        "information_gathering": overall,
        "program_explanation": overall,
        "closing_skills": overall,
        "overall_effectiveness": overall,
        "total_calls": total_calls,
    }


class TestTick:
    async def test_new_learner(self, api, make_poller, unlocked):
        snapshot = await make_poller(api).tick()
        assert [c.unlocked for c in snapshot.characters] == [True, False, False]
        assert not any(c.completed for c in snapshot.characters)
        assert not any(c.loading for c in snapshot.characters)
        assert unlocked == []

    async def test_unlock_completes_and_celebrates_once(self, api, make_poller, unlocked, add_sessions):
        await add_sessions("learner-1", "Megan", [90] * 10)
        poller = make_poller(api)

        first = await poller.tick()
        assert [c.unlocked for c in first.characters] == [True, True, False]
        assert first.characters[0].completed is True
        assert unlocked == ["David"]

        await poller.tick()
        assert unlocked == ["David"]
        status = await api.get_animation_status("learner-1", "David")
        assert status.shown is True

    async def test_second_poller_does_not_replay(self, api, make_poller, unlocked, add_sessions):
        """Once one poller has marked the animation, a fresh one is told not to show it."""
        await add_sessions("learner-1", "Megan", [90] * 10)
        await make_poller(api).tick()
        await make_poller(api).tick()
        assert unlocked == ["David"]

    async def test_reset_relocks_next_character(self, api, make_poller, unlocked, add_sessions):
        await add_sessions("learner-1", "Megan", [90] * 10)
        poller = make_poller(api)
        await poller.tick()

        snapshot = await poller.reset("Megan")
        assert [c.unlocked for c in snapshot.characters] == [True, False, False]
        assert snapshot.characters[0].completed is False
        assert snapshot.characters[0].metrics.total_calls == 0

    async def test_reset_unknown_character(self, api, make_poller):
        with pytest.raises(ValidationError):
            await make_poller(api).reset("Zed")


class TestLoop:
    async def test_start_and_stop(self, api, make_poller):
        updates = []
        poller = make_poller(api, interval=1.0, on_update=updates.append)

        poller.start()
        assert poller.running
        for _ in range(200):
            if updates:
                break
            await asyncio.sleep(0.01)
        await poller.stop()

        assert not poller.running
        assert len(updates) == 1
        await asyncio.sleep(0.1)
        assert len(updates) == 1

    async def test_start_twice_keeps_one_task(self, api, make_poller):
        poller = make_poller(api, interval=10)
        task = poller.start()
        assert poller.start() is task
        await poller.stop()

    async def test_stop_without_start(self, api, make_poller):
        await make_poller(api).stop()

    async def test_gateway_page_keeps_loop_running(self, make_poller):
        """A 200 HTML page from a proxy is a transient failure, not the end of polling."""
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, text="<html>gateway</html>")

        api = ProgressApiClient("http://test", transport=httpx.MockTransport(handler))
        updates = []
        poller = make_poller(api, on_update=updates.append)

        poller.start()
        await asyncio.sleep(0.2)
        assert poller.running
        await poller.stop()
        await api.aclose()

        assert len(updates) >= 2
        assert all(c.loading for c in updates[-1].characters)
        assert [c.unlocked for c in updates[-1].characters] == [True, False, False]
        # goals + three metrics + three completion lookups per tick
        assert len(seen) > 7

    async def test_raising_callback_keeps_loop_running(self, api, make_poller):
        calls = []

        def on_update(snapshot):
            calls.append(snapshot)
            raise RuntimeError("widget render failed")

        poller = make_poller(api, on_update=on_update)

        poller.start()
        for _ in range(200):
            if len(calls) >= 2:
                break
            await asyncio.sleep(0.01)
        assert poller.running
        await poller.stop()

        assert len(calls) >= 2


class TestStartSession:
    async def test_locked_character_refused(self, api, make_poller):
        poller = make_poller(api)
        with pytest.raises(ValidationError):
            await poller.start_session("David")
        assert poller.host.navigations == []

    async def test_hands_off_to_launcher(self, api, make_poller):
        poller = make_poller(api, team_id="team-a")
        url = await poller.start_session("Megan")
        assert url == (
            "https://launcher.example.com/megan?member_ID=learner-1&teamId=team-a&character=Megan"
        )
        assert poller.host.navigations == [url]


class TestNetworkFailures:
    async def test_outage_shows_loading_and_stays_locked(self, make_poller, unlocked):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(503, json={"error": "unavailable"})

        api = ProgressApiClient("http://test", transport=httpx.MockTransport(handler))
        snapshot = await make_poller(api).tick()
        await api.aclose()

        assert [c.unlocked for c in snapshot.characters] == [True, False, False]
        assert all(c.loading for c in snapshot.characters)
        assert "/api/reset-challenge" not in seen
        assert unlocked == []

    async def test_failed_mark_is_retried_without_replay(self, make_poller, unlocked):
        marks = []

        def handler(request):
            path = request.url.path
            if path == "/api/performance-goals":
                return httpx.Response(200, json={"number_of_calls_average": 10, "overall_performance_goal": 85})
            if path == "/api/character-performance":
                if request.url.params["characterName"] == "Megan":
                    return httpx.Response(200, json=_metrics(90, 10))
                return httpx.Response(200, json=_metrics(0, 0))
            if path in ("/api/challenge-completion", "/api/mark-challenge-complete"):
                return httpx.Response(200, json={"completed": False, "snapshot": None})
            if path == "/api/unlock-animations" and request.method == "GET":
                return httpx.Response(200, json={"shown": False, "unlocked": True, "shouldShow": True})
            if path == "/api/unlock-animations":
                marks.append(request.url.path)
                if len(marks) == 1:
                    return httpx.Response(503, json={"error": "unavailable"})
                return httpx.Response(200, json={"success": True, "shown": True})
            return httpx.Response(404)

        api = ProgressApiClient("http://test", transport=httpx.MockTransport(handler))
        poller = make_poller(api)
        await poller.tick()
        await poller.tick()
        await api.aclose()

        assert unlocked == ["David"]
        assert len(marks) == 2

    async def test_timeout_maps_to_transient(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        api = ProgressApiClient("http://test", transport=httpx.MockTransport(handler))
        with pytest.raises(TransientIOError):
            await api.get_goals()
        await api.aclose()

    async def test_non_json_body_maps_to_transient(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        api = ProgressApiClient("http://test", transport=httpx.MockTransport(handler))
        with pytest.raises(TransientIOError, match="non-JSON"):
            await api.get_goals()
        await api.aclose()

    async def test_malformed_payload_maps_to_transient(self):
        def handler(request):
            return httpx.Response(200, json={"number_of_calls_average": "many"})

        api = ProgressApiClient("http://test", transport=httpx.MockTransport(handler))
        with pytest.raises(TransientIOError, match="GoalConfig"):
            await api.get_goals()
        await api.aclose()

    async def test_client_error_maps_to_validation(self):
        def handler(request):
            return httpx.Response(400, json={"error": "memberId is required"})

        api = ProgressApiClient("http://test", transport=httpx.MockTransport(handler))
        with pytest.raises(ValidationError, match="memberId is required"):
            await api.get_metrics("", "Megan")
        await api.aclose()
