from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from progression.errors import TransientIOError, ValidationError
from progression.schemas.animation import AnimationStatus
from progression.schemas.completion import CompletionStatus
from progression.schemas.goals import GoalConfig
from progression.schemas.metrics import AggregateMetrics

M = TypeVar("M", bound=BaseModel)


class ProgressApiClient:
    """
    Thin async client for the progression endpoints.

    One attempt per call with a bounded timeout; there is no retry here, the
    poller's next tick is the retry.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            r = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TransientIOError(f"{method} {path} failed: {e}") from e

        if r.status_code >= 500:
            raise TransientIOError(f"{method} {path} returned {r.status_code}")
        if r.status_code >= 400:
            try:
                detail = r.json().get("error") or r.text
            except ValueError:
                detail = r.text
            raise ValidationError(f"{method} {path} rejected: {detail}")
        try:
            return r.json()
        except ValueError as e:
            # Proxies and gateways answer 200 with an HTML page
            raise TransientIOError(f"{method} {path} returned a non-JSON body") from e

    @staticmethod
    def _parse(model: Type[M], data: Any) -> M:
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise TransientIOError(f"Unexpected {model.__name__} payload: {e}") from e

    @staticmethod
    def _params(**values) -> Dict[str, str]:
        return {k: v for k, v in values.items() if v is not None}

    # endpoint path
    async def get_metrics(self, member_id: str, character_name: str, team_id: Optional[str] = None) -> AggregateMetrics:
        data = await self._request(
            "GET", "/api/character-performance",
            params=self._params(memberId=member_id, characterName=character_name, teamId=team_id),
        )
        return self._parse(AggregateMetrics, data)

    async def get_goals(self, team_id: Optional[str] = None) -> GoalConfig:
        data = await self._request("GET", "/api/performance-goals", params=self._params(teamId=team_id))
        return self._parse(GoalConfig, data)

    async def get_completion(self, member_id: str, character_name: str) -> CompletionStatus:
        data = await self._request(
            "GET", "/api/challenge-completion",
            params=self._params(memberId=member_id, characterName=character_name),
        )
        return self._parse(CompletionStatus, data)

    async def mark_complete(self, member_id: str, character_name: str, team_id: Optional[str] = None) -> CompletionStatus:
        data = await self._request(
            "POST", "/api/mark-challenge-complete",
            json={"memberId": member_id, "characterName": character_name, "teamId": team_id},
        )
        return self._parse(CompletionStatus, data)

    async def get_animation_status(self, member_id: str, character_name: str, team_id: Optional[str] = None) -> AnimationStatus:
        data = await self._request(
            "GET", "/api/unlock-animations",
            params=self._params(memberId=member_id, characterName=character_name, teamId=team_id),
        )
        return self._parse(AnimationStatus, data)

    async def mark_animation_shown(self, member_id: str, character_name: str) -> None:
        await self._request(
            "POST", "/api/unlock-animations",
            json={"memberId": member_id, "characterName": character_name},
        )

    async def reset(self, member_id: str, character_name: str) -> Dict[str, Any]:
        return await self._request(
            "POST", "/api/reset-challenge",
            json={"memberId": member_id, "characterName": character_name},
        )
