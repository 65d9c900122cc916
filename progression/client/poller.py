"""
Client-side polling loop.

Each tick is a plain read-evaluate-act cycle against the server, which owns
all progression state. The only thing kept locally is which unlock
celebrations this poller has already played, so a repeated "should show"
answer does not replay the animation before the mark lands.
"""
import asyncio
import contextlib
import inspect
import logging
from typing import Callable, Dict, List, Optional

from progression.client.api_client import ProgressApiClient
from progression.client.host import HostContext
from progression.client.launcher import build_launch_url
from progression.config import get_settings
from progression.errors import ProgressionError, TransientIOError, ValidationError
from progression.schemas.goals import GoalConfig
from progression.schemas.metrics import AggregateMetrics
from progression.schemas.progress import CharacterState, ChainState
from progression.services.unlock_service import compute_unlock_state, meets_goal

settings = get_settings()
logger = logging.getLogger(__name__)


async def _call(callback: Optional[Callable], *args) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class ProgressPoller:
    def __init__(
        self,
        api: ProgressApiClient,
        host: HostContext,
        chain: Optional[List[str]] = None,
        team_id: Optional[str] = None,
        interval: Optional[float] = None,
        launch_urls: Optional[Dict[str, str]] = None,
        on_unlock: Optional[Callable] = None,
        on_update: Optional[Callable] = None,
    ):
        self.api = api
        self.host = host
        self.chain = list(chain or settings.CHARACTER_CHAIN)
        self.team_id = team_id
        self.interval = interval if interval is not None else settings.POLL_INTERVAL_SECONDS
        self.launch_urls = launch_urls if launch_urls is not None else settings.SESSION_LAUNCH_URLS
        self.on_unlock = on_unlock
        self.on_update = on_update

        self.snapshot: Optional[ChainState] = None
        self._celebrated = set()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> ChainState:
        member_id = self.host.get_learner_id()

        goals: Optional[GoalConfig] = None
        try:
            goals = await self.api.get_goals(self.team_id)
        except TransientIOError as e:
            logger.warning("Goals unavailable, chain stays locked this tick: %s", e)

        metrics: Dict[str, Optional[AggregateMetrics]] = {}
        for character in self.chain:
            try:
                metrics[character] = await self.api.get_metrics(member_id, character, self.team_id)
            except TransientIOError as e:
                logger.warning("Metrics unavailable for %s: %s", character, e)
                metrics[character] = None

        unlocked = compute_unlock_state(self.chain, metrics, goals)

        completed: Dict[str, Optional[bool]] = {}
        for character in self.chain:
            try:
                if meets_goal(metrics[character], goals):
                    status = await self.api.mark_complete(member_id, character, self.team_id)
                else:
                    status = await self.api.get_completion(member_id, character)
                completed[character] = status.completed
            except TransientIOError as e:
                logger.warning("Completion status unavailable for %s: %s", character, e)
                completed[character] = None

        for position, character in enumerate(self.chain):
            # The first character never goes from locked to unlocked
            if position == 0 or not unlocked[character]:
                continue
            await self._celebrate(member_id, character)

        self.snapshot = ChainState(
            member_id=member_id,
            team_id=self.team_id,
            goals=goals,
            characters=[
                CharacterState(
                    name=character,
                    position=position,
                    unlocked=unlocked[character],
                    completed=bool(completed[character]),
                    metrics=metrics[character],
                    loading=metrics[character] is None or completed[character] is None
                )
                for position, character in enumerate(self.chain)
            ]
        )
        await _call(self.on_update, self.snapshot)
        return self.snapshot

    async def _celebrate(self, member_id: str, character: str) -> None:
        try:
            status = await self.api.get_animation_status(member_id, character, self.team_id)
            if not status.should_show:
                return
            if character not in self._celebrated:
                self._celebrated.add(character)
                logger.info("Playing unlock animation for %s", character)
                await _call(self.on_unlock, character)
            # A failed mark is retried on the next tick without replaying
            await self.api.mark_animation_shown(member_id, character)
        except TransientIOError as e:
            logger.warning("Unlock animation check failed for %s: %s", character, e)

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except ProgressionError as e:
                logger.error("Poll tick failed: %s", e)
            except Exception:
                # A bad tick must not end the loop; the next one tries again
                logger.exception("Poll tick crashed")
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        """Tick now, then every interval until stop()"""
        if not self.running:
            self._task = asyncio.create_task(self._run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def reset(self, character: str) -> ChainState:
        """Explicit user reset of one character, followed by a fresh tick"""
        if character not in self.chain:
            raise ValidationError(f"Unknown character: {character}")

        member_id = self.host.get_learner_id()
        await self.api.reset(member_id, character)
        self._celebrated.discard(character)
        return await self.tick()

    async def start_session(self, character: str) -> str:
        """Hand the learner off to the external call launcher"""
        snapshot = self.snapshot or await self.tick()
        state = next((c for c in snapshot.characters if c.name == character), None)
        if state is None:
            raise ValidationError(f"Unknown character: {character}")
        if not state.unlocked:
            raise ValidationError(f"{character} is locked")

        url = build_launch_url(self.launch_urls, character, snapshot.member_id, self.team_id)
        self.host.navigate_to(url)
        return url
